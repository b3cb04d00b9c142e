"""
Environment configuration (transport layer only)
"""
import os
from typing import List

DEFAULT_PORT = 3001
DEFAULT_HOST = "0.0.0.0"
DEFAULT_CLIENT_URL = "http://localhost:3000"


def get_port() -> int:
    return int(os.environ.get("PORT") or DEFAULT_PORT)


def get_host() -> str:
    return os.environ.get("SERVER_HOST", DEFAULT_HOST)


def get_allowed_origins() -> List[str]:
    """Allowed CORS origins from the comma-separated CLIENT_URL"""
    raw = os.environ.get("CLIENT_URL") or DEFAULT_CLIENT_URL
    return [url.strip() for url in raw.split(",") if url.strip()]


def get_log_level() -> str:
    return os.environ.get("LOG_LEVEL", "INFO").upper()
