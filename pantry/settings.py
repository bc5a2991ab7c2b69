import os

DEFAULT_DATABASE_URL = "sqlite+pysqlite:///./pantry.db"
DEFAULT_SECRET_KEY = "pantry-dev-secret"

CONSUMPTION_POLICIES = {"strict", "legacy"}
LEDGER_RETENTION_MODES = {"batch", "permanent"}


def database_url() -> str:
    return os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)


def secret_key() -> str:
    return os.getenv("SECRET_KEY", DEFAULT_SECRET_KEY)


def access_token_expire_minutes() -> int:
    return int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 12)))


def log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def consumption_policy() -> str:
    value = os.getenv("PANTRY_CONSUMPTION_POLICY", "strict").lower()
    if value not in CONSUMPTION_POLICIES:
        raise ValueError(f"Unknown PANTRY_CONSUMPTION_POLICY: {value}")
    return value


def ledger_retention() -> str:
    value = os.getenv("PANTRY_LEDGER_RETENTION", "batch").lower()
    if value not in LEDGER_RETENTION_MODES:
        raise ValueError(f"Unknown PANTRY_LEDGER_RETENTION: {value}")
    return value


def expiry_horizon_days() -> int:
    return int(os.getenv("PANTRY_EXPIRY_HORIZON_DAYS", "3"))
