import os
import logging
import logging.config
from pathlib import Path

# Base Paths
PACKAGE_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = PACKAGE_DIR.parent

# Logging Setup
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
LOG_FILE_PATH = os.getenv(
    "LOG_FILE_PATH",
    str((PROJECT_ROOT / "logs" / "gym_portal.log").resolve()),
)

LOG_DIR = Path(LOG_FILE_PATH).parent
LOG_DIR.mkdir(parents=True, exist_ok=True)

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": LOG_FORMAT,
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": LOG_LEVEL,
            "formatter": "standard",
            "stream": "ext://sys.stdout",
        },
        "file": {
            "class": "logging.handlers.RotatingFileHandler",
            "level": LOG_LEVEL,
            "formatter": "standard",
            "filename": LOG_FILE_PATH,
            "maxBytes": 10 * 1024 * 1024,  # 10 MB
            "backupCount": 5,
            "encoding": "utf8",
        },
    },
    "loggers": {
        "gym_portal": {
            "handlers": ["console", "file"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
        # Let uvicorn log to console using its own handlers
        "uvicorn.error": {"level": "INFO"},
        "uvicorn.access": {"level": "INFO"},
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
}

logging.config.dictConfig(LOGGING_CONFIG)
logger = logging.getLogger("gym_portal")


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _as_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


# Firebase / Firestore (external store + member token verification)
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID", "")
FIREBASE_CREDENTIALS_PATH = os.getenv("FIREBASE_CREDENTIALS_PATH", "")

# -----------------------------------------------------------------------------
# Admin Access
# -----------------------------------------------------------------------------

ADMIN_API_KEY = os.getenv("ADMIN_API_KEY", "")
ADMIN_API_KEY_HEADER = "X-API-Key"
# Legacy clients send the admin key as ?api_key=...; switch off once migrated
ALLOW_QUERY_API_KEY = _as_bool(os.getenv("ALLOW_QUERY_API_KEY", "true"))

# -----------------------------------------------------------------------------
# OAuth Login
# -----------------------------------------------------------------------------

OAUTH_TOKEN_URL = os.getenv("OAUTH_TOKEN_URL", "")
OAUTH_CLIENT_ID = os.getenv("OAUTH_CLIENT_ID", "")
OAUTH_CLIENT_SECRET = os.getenv("OAUTH_CLIENT_SECRET", "")
OAUTH_REDIRECT_URI = os.getenv("OAUTH_REDIRECT_URI", "")
OAUTH_TIMEOUT_SECONDS = float(os.getenv("OAUTH_TIMEOUT_SECONDS", "15"))

LOGIN_PATH = "/login"
DEFAULT_REDIRECT_PATH = os.getenv("DEFAULT_REDIRECT_PATH", "/dashboard")
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "gym_session")

# -----------------------------------------------------------------------------
# Listing Defaults
# -----------------------------------------------------------------------------

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "100"))

# Security / domains
ALLOWED_HOSTS = _split_csv(os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1"))

CORS_ORIGINS = _split_csv(os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:8000"))

# Environment
ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()
IS_PRODUCTION = ENVIRONMENT == "production"
DEBUG = not IS_PRODUCTION
