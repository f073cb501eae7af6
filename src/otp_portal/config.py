"""OTP Portal — configuration loaded from environment."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, loaded from .env or environment variables."""

    # ── Databases ─────────────────────────────────────────
    otp_database_url: str = "sqlite+aiosqlite:///./otp_portal.db"
    form_database_url: str = "sqlite+aiosqlite:///./forms.db"

    # ── SMTP ──────────────────────────────────────────────
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_start_tls: bool = True
    smtp_timeout_seconds: float = 10.0
    email_from: str = "no-reply@example.com"

    # ── OTP ───────────────────────────────────────────────
    otp_ttl_seconds: int = 300
    return_role_on_verify: bool = True

    # ── Idea submissions ──────────────────────────────────
    upload_dir: str = "./uploads"

    # ── App ───────────────────────────────────────────────
    app_name: str = "OTP Portal"
    cors_allowed_origins: list[str] = ["*"]
    debug: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton settings instance
settings = Settings()
