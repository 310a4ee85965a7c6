import os
from pathlib import Path


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str = "") -> list:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class Settings:
    # Database
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/uploads.db")
    DATABASE_PATH = Path("./data/uploads.db")

    # API Settings
    API_V1_STR = "/api"
    PROJECT_NAME = "CSV Upload Portal"

    # Authentication (signed cookie token)
    AUTH_ENABLED = _env_bool("AUTH_ENABLED", True)
    JWT_SECRET = os.getenv("JWT_SECRET", "change-this-secret-in-production")
    JWT_ALGORITHM = "HS256"
    AUTH_COOKIE_NAME = "auth-token"
    SESSION_TTL_HOURS = int(os.getenv("SESSION_TTL_HOURS", "24"))
    COOKIE_SECURE = _env_bool("COOKIE_SECURE", os.getenv("ENVIRONMENT") == "production")
    ALLOWED_EMAILS = _env_list("ALLOWED_EMAILS")
    MASTER_PASSWORD = os.getenv("MASTER_PASSWORD", "")

    # Upload pipeline
    MAX_FILE_SIZE = 50 * 1024 * 1024  # 50MB in bytes
    BATCH_SIZE = int(os.getenv("BATCH_SIZE", "100"))
    INFERENCE_SAMPLE_SIZE = 100
    VALIDATION_SAMPLE_SIZE = 100
    HALT_ON_CONTENT_REJECTION = _env_bool("HALT_ON_CONTENT_REJECTION", True)

    # What to do when the target table is missing: "allow_list" or "auto_create"
    TABLE_POLICY = os.getenv("TABLE_POLICY", "allow_list")
    # Extra tables accepted by the allow-list besides the per-source tables
    EXTRA_ALLOWED_TABLES = _env_list("EXTRA_ALLOWED_TABLES")

    # Content-hash duplicate scope: "source" (same data source) or "global"
    DUPLICATE_HASH_SCOPE = os.getenv("DUPLICATE_HASH_SCOPE", "source")

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_FILE = os.getenv("LOG_FILE")

    def __init__(self):
        # Ensure the SQLite data directory exists
        if self.DATABASE_URL.startswith("sqlite:///./"):
            self.DATABASE_PATH.parent.mkdir(exist_ok=True)


settings = Settings()
