"""Application configuration helpers."""

import os

from dotenv import load_dotenv

_BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
_DOTENV_PATH = os.path.join(_BASE_DIR, ".env")

if os.path.exists(_DOTENV_PATH):
    load_dotenv(_DOTENV_PATH)

DEFAULT_MONGO_URI = "mongodb://localhost:27017/student-management"
DEFAULT_PORT = 8080
DEFAULT_ENVIRONMENT = "development"
DEFAULT_LOG_DIR = os.path.join(_BASE_DIR, "logs")


class ConfigError(RuntimeError):
    """Raised when configuration values are missing or invalid."""


def get_mongo_uri():
    """Return the MongoDB connection string from the environment."""

    uri = os.getenv("MONGODB_URI", "").strip()
    return uri or DEFAULT_MONGO_URI


def get_db_name():
    """Return the database name derived from the MongoDB URI or env var."""

    db_name = os.getenv("MONGODB_DB", "").strip()
    if db_name:
        return db_name

    uri = get_mongo_uri()
    main = uri.split("?", 1)[0].rstrip("/")
    if "://" in main:
        after_scheme = main.split("://", 1)[1]
    else:
        after_scheme = main

    if "/" not in after_scheme:
        raise ConfigError(
            "Database name not found. Provide it via MONGODB_URI or MONGODB_DB."
        )

    candidate = after_scheme.split("/", 1)[1]
    if not candidate:
        raise ConfigError(
            "Database name not found. Provide it via MONGODB_URI or MONGODB_DB."
        )
    return candidate


def get_port():
    """Return the port the HTTP server listens on."""

    raw = os.getenv("PORT", "").strip()
    if not raw:
        return DEFAULT_PORT
    try:
        port = int(raw)
    except ValueError:
        raise ConfigError(f"PORT must be an integer, got {raw!r}.") from None
    if port <= 0:
        raise ConfigError("PORT must be a positive integer.")
    return port


def get_environment():
    return os.getenv("APP_ENV", "").strip() or DEFAULT_ENVIRONMENT


def get_log_level():
    return os.getenv("LOG_LEVEL", "").strip().upper() or "INFO"


def get_log_dir():
    return os.getenv("LOG_DIR", "").strip() or DEFAULT_LOG_DIR


__all__ = [
    "ConfigError",
    "get_mongo_uri",
    "get_db_name",
    "get_port",
    "get_environment",
    "get_log_level",
    "get_log_dir",
]
