import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}

APP_ENV = os.getenv("APP_ENV", "development")

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    "postgresql+psycopg2://postgres:postgres@db:5432/future",
)

SERVICE_TOKEN = os.getenv("SERVICE_TOKEN", "")

SCHEDULING_TIMEZONE = os.getenv("SCHEDULING_TIMEZONE", "America/Los_Angeles")

SEED_ON_STARTUP = _get_bool(os.getenv("SEED_ON_STARTUP"), default=True)
SEED_PATH = os.getenv(
    "SEED_PATH",
    os.path.join(os.path.dirname(os.path.dirname(__file__)), "data", "seed.json"),
)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3001"))


def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and not SERVICE_TOKEN:
        raise RuntimeError("SERVICE_TOKEN must be set in production.")

    try:
        ZoneInfo(SCHEDULING_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise RuntimeError(f"Unknown SCHEDULING_TIMEZONE: {SCHEDULING_TIMEZONE!r}") from exc
