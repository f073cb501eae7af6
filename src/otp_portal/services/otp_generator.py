"""OTP code generation."""

import secrets

OTP_MIN = 1000
OTP_MAX = 9999


def generate_otp() -> str:
    """Return a 4-digit numeric code, uniform over ``[1000, 9999]``."""
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))
