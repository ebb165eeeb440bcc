import os
import logging
from pydantic import BaseModel, Field
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

class PayrollSettings(BaseModel):
    # Upper bound for one settlement unit of work; 0 disables the deadline
    settlement_timeout_seconds: float = Field(default=float(os.getenv("SETTLEMENT_TIMEOUT_SECONDS", "30")))
    # Per-employee pg_advisory_xact_lock before the snapshot is taken (PostgreSQL only)
    advisory_lock: bool = Field(default=os.getenv("PAYROLL_ADVISORY_LOCK", "false").lower() == "true")
    default_advance_note: str = "Cash advance"
    default_salary_note: str = "Salary payment for {month}"

class Config(BaseModel):
    app_name: str = "Back Office Payroll"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./backoffice.db")

    # Auth
    secret_key: str = os.getenv("SECRET_KEY", "dev-only-insecure-key-DO-NOT-USE-IN-PROD")
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    access_token_expire_minutes: int = 60 * 24  # 24 hours

    payroll: PayrollSettings = PayrollSettings()

    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"

settings = Config()

# --- Startup Validation for Production ---
_logger = logging.getLogger(__name__)
if settings.environment not in ("development", "testing"):
    if "dev-only" in settings.secret_key or "change-it" in settings.secret_key:
        raise RuntimeError(
            "FATAL: SECRET_KEY must be set for non-development environments. "
            "Set it as an environment variable."
        )
else:
    if "dev-only" in settings.secret_key:
        _logger.warning("Using insecure default SECRET_KEY, only acceptable in development.")
