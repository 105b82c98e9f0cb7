"""Runtime configuration, read from the environment (and a local .env file)."""

import os

from dotenv import load_dotenv

# .env is loaded before the class body reads os.environ
load_dotenv()

_BOOL_TRUE = {"1", "true", "yes", "on"}


def _env_bool(key: str, default: bool) -> bool:
    raw = os.environ.get(key)
    if raw is None:
        return default
    return raw.strip().lower() in _BOOL_TRUE


def _env_int(key: str, default: int) -> int:
    raw = os.environ.get(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


class Config:
    # JSON file holding every credential
    STORAGE_PATH = os.environ.get("TOTPHOG_STORAGE_PATH", os.path.join("var", "tokens.json"))

    HOST = os.environ.get("TOTPHOG_HOST", "127.0.0.1")
    PORT = _env_int("TOTPHOG_PORT", 5000)
    DEBUG = _env_bool("TOTPHOG_DEBUG", False)
    LOG_LEVEL = os.environ.get("TOTPHOG_LOG_LEVEL", "INFO").upper()

    # comma separated, "*" allows any origin
    CORS_ORIGINS = [
        origin.strip()
        for origin in os.environ.get("TOTPHOG_CORS_ORIGINS", "*").split(",")
        if origin.strip()
    ]

    SERVICE_NAME = "TOTPHog"
    VERSION = "1.0.0"
