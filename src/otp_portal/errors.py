"""Error taxonomy for the OTP lifecycle and the idea form.

Every error carries the HTTP status and the message the API layer
returns, so routers never need to know which failure they are looking at.
"""


class PortalError(Exception):
    """Base class for failures rendered as ``{"message": ...}``."""

    status_code = 500
    message = "Server error"

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class OTPError(PortalError):
    """Base class for all OTP lifecycle failures."""


class IdentityNotFound(OTPError):
    """The corporate ID is in neither the user nor the admin collection."""

    status_code = 404
    message = "Corporate ID not found"


class InvalidCode(OTPError):
    """No identity matches the corporate ID + code pair."""

    status_code = 400
    message = "Invalid OTP"


class Expired(OTPError):
    """The code matched but its expiry has passed."""

    status_code = 400
    message = "OTP expired"


class DeliveryError(OTPError):
    """The mail transport failed after the OTP was persisted."""


class StorageError(OTPError):
    """The identity store failed on read or write."""


class SubmissionError(PortalError):
    """An idea submission or listing could not be completed."""
