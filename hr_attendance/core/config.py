import os
import logging
from pydantic import BaseModel, Field
from typing import List
from dotenv import load_dotenv

load_dotenv()

class LeaveDefaults(BaseModel):
    paid_leaves_per_year: int = Field(default=int(os.getenv("DEFAULT_PAID_LEAVES_PER_YEAR", "24")))
    half_day_deduction: float = Field(default=float(os.getenv("DEFAULT_HALF_DAY_DEDUCTION", "0.5")))
    highlight_duration_hours: int = Field(default=int(os.getenv("DEFAULT_HIGHLIGHT_DURATION_HOURS", "24")))

class Config(BaseModel):
    app_name: str = "HR Attendance Engine"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./attendance.db")

    # Leave policy seeded into an empty settings table
    leave_defaults: LeaveDefaults = LeaveDefaults()

    version: str = "1.0.0"
    build_id: str = os.getenv("BUILD_ID", "local")
    request_id_header: str = "X-Request-ID"

    # CORS: comma-separated origins loaded from env
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:3000,http://localhost:5173,"
                "http://127.0.0.1:3000,http://127.0.0.1:5173",
            ).split(",")
            if o.strip()
        ]
    )

settings = Config()

# --- Startup Validation for Production ---
_logger = logging.getLogger(__name__)
_problems = []
if not 0 <= settings.leave_defaults.half_day_deduction <= 1:
    _problems.append("DEFAULT_HALF_DAY_DEDUCTION must be between 0 and 1")
if settings.leave_defaults.paid_leaves_per_year < 0:
    _problems.append("DEFAULT_PAID_LEAVES_PER_YEAR must not be negative")

if _problems:
    if settings.environment != "development":
        raise RuntimeError(
            f"FATAL: invalid leave policy defaults: {'; '.join(_problems)}. "
            "Fix the environment variables before starting."
        )
    _logger.warning(f"⚠ Invalid leave policy defaults ({'; '.join(_problems)}); only tolerated in development.")
