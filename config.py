import logging
import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

# Database
DB_URL = os.getenv("DATABASE_URL", "sqlite:///finance_tracker.db")


def parse_week_start(value: str) -> int:
    """Weekday name to date.weekday() number."""
    name = value.strip().lower()
    if name not in WEEKDAYS:
        raise ValueError(f"WEEK_START must be one of {', '.join(WEEKDAYS)} (got {value!r})")
    return WEEKDAYS.index(name)


# Reporting knobs
WEEK_START = parse_week_start(os.getenv("WEEK_START", "sunday"))
DAILY_BUCKET_LIMIT = int(os.getenv("DAILY_BUCKET_LIMIT", "15"))
CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "$")

# Access
AUTH_ENABLED = os.getenv("AUTH_ENABLED", "false").lower() == "true"

# Exports (local folder, or S3 when a bucket is configured)
S3_BUCKET = os.environ.get("S3_BUCKET")
AWS_REGION = os.environ.get("AWS_REGION", "us-east-1")
EXPORT_FOLDER = os.getenv("EXPORT_FOLDER", "exports")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def setup_logging(level: str = LOG_LEVEL):
    """Configure root logging once for the app, API and scripts."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
