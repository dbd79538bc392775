import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./gigplanner.db")

# Security - no default secret key in production
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    import warnings

    warnings.warn(
        "SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2
    )
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only

JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "720"))

# Frontend base URL for signing and availability links
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "Gig Planner <bookings@gigplanner.local>")
ADMIN_NOTIFICATION_EMAIL = os.getenv("ADMIN_NOTIFICATION_EMAIL")
COMPANY_NAME = os.getenv("COMPANY_NAME", "VAMP Management")

# Redis cache for reference data (musicians, venues, rates)
CACHE_ENABLED = os.getenv("CACHE_ENABLED", "true").lower() == "true"
CACHE_TTL_SECONDS = int(os.getenv("CACHE_TTL_SECONDS", "300"))

# Public token lifetimes
CONTRACT_TOKEN_TTL_DAYS = int(os.getenv("CONTRACT_TOKEN_TTL_DAYS", "14"))
AVAILABILITY_LINK_TTL_DAYS = int(os.getenv("AVAILABILITY_LINK_TTL_DAYS", "30"))

# Fee resolution
# Event category used for pay-rate lookup when a slot carries none ("Club Performance")
DEFAULT_EVENT_CATEGORY_ID = int(os.getenv("DEFAULT_EVENT_CATEGORY_ID", "7"))
# Hours assumed when a slot has no usable duration or start/end times
DEFAULT_SLOT_HOURS = float(os.getenv("DEFAULT_SLOT_HOURS", "3"))
FLAT_MINIMUM_FEE = float(os.getenv("FLAT_MINIMUM_FEE", "150"))
