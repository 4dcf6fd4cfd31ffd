"""
Application configuration loaded from the environment.

Values come from process environment variables, optionally seeded from a
local .env file. Everything is read once at import time.
"""
import os
from decimal import Decimal
from urllib.parse import quote_plus

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _as_bool(value: str) -> bool:
     return value.strip().lower() in ("1", "true", "yes", "on")


def _build_database_url() -> str:
     """
     Resolve the primary database URL.

     DATABASE_URL wins when set. Otherwise an MS SQL Server URL is built
     from the DB_* variables, and local development falls back to SQLite.
     """
     explicit = os.getenv("DATABASE_URL")
     if explicit:
          return explicit

     server = os.getenv("DB_SERVER")
     if not server:
          return "sqlite:///./rental.db"

     safe_user = quote_plus(os.getenv("DB_USER") or "")
     safe_pass = quote_plus(os.getenv("DB_PASS") or "")
     port = os.getenv("DB_PORT", "1433")
     name = os.getenv("DB_NAME")
     return f"mssql+pymssql://{safe_user}:{safe_pass}@{server}:{port}/{name}"


# Database
DATABASE_URL = _build_database_url()
READ_REPLICA_URL = os.getenv("READ_REPLICA_URL") or None
DB_POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "30"))
DB_STATEMENT_TIMEOUT_MS = int(os.getenv("DB_STATEMENT_TIMEOUT_MS", "15000"))
SQL_ECHO = _as_bool(os.getenv("SQL_ECHO", "false"))

# Auth
JWT_SECRET = os.getenv("JWT_SECRET", "CHANGE_ME")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
CORS_ORIGINS = [o for o in os.getenv("CORS_ORIGINS", "").split(",") if o]

# Rent ledger
DEFAULT_RENT_DUE_DAY = int(os.getenv("DEFAULT_RENT_DUE_DAY", "1"))
RENT_GRACE_PERIOD_DAYS = int(os.getenv("RENT_GRACE_PERIOD_DAYS", "4"))

# Bookings: platform service fee, percent of the booking subtotal
PLATFORM_COMMISSION_RATE = Decimal(os.getenv("PLATFORM_COMMISSION_RATE", "10"))

# Notifications
NOTIFY_WEBHOOK_URL = os.getenv("NOTIFY_WEBHOOK_URL") or None
NOTIFY_TIMEOUT_SECONDS = float(os.getenv("NOTIFY_TIMEOUT_SECONDS", "5"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
