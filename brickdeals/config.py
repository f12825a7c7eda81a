# brickdeals/config.py
"""Environment-driven settings shared by the sync pipeline and its triggers."""
import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in ("1", "true", "t", "yes", "y", "on")


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


DATABASE_URL = os.getenv("DATABASE_URL") or os.getenv("POSTGRES_URL") or "sqlite:///./brickdeals.db"
DB_POOL_SIZE = _env_int("DB_POOL_SIZE", 5)
DB_MAX_OVERFLOW = _env_int("DB_MAX_OVERFLOW", 10)

REBRICKABLE_API_KEY = os.getenv("REBRICKABLE_API_KEY", "")
REBRICKABLE_BASE_URL = os.getenv("REBRICKABLE_BASE_URL", "https://rebrickable.com/api/v3").rstrip("/")
REQUEST_TIMEOUT = _env_float("REQUEST_TIMEOUT", 30.0)

CATALOG_MAX_PAGES = _env_int("CATALOG_MAX_PAGES", 10)
CATALOG_PAGE_SIZE = _env_int("CATALOG_PAGE_SIZE", 100)
CATALOG_PAGE_DELAY = _env_float("CATALOG_PAGE_DELAY", 0.3)

# backend hard ceiling is 500 writes per batch
WRITE_CHUNK_SIZE = 450
AVAILABLE_QUERY_LIMIT = 500

PRICE_SYNC_ITEM_LIMIT = _env_int("PRICE_SYNC_ITEM_LIMIT", 100)
MANUAL_PRICE_SYNC_ITEM_LIMIT = _env_int("MANUAL_PRICE_SYNC_ITEM_LIMIT", 50)
PRICE_SYNC_THROTTLE = _env_float("PRICE_SYNC_THROTTLE", 0.05)

DEAL_MIN_PERCENT_OFF = 10
DEAL_RETENTION_HOURS = _env_int("DEAL_RETENTION_HOURS", 24)

SCHEDULER_ENABLED = _env_bool("SCHEDULER_ENABLED", True)
CATALOG_SYNC_HOURS = _env_int("CATALOG_SYNC_HOURS", 24)
PRICE_SYNC_MINUTES = _env_int("PRICE_SYNC_MINUTES", 60)

SERVICE_VERSION = "5.0.0"
