# taskapi/config.py
"""Service settings read from the environment (and a local .env if present)."""

import os
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKAPI"

load_dotenv(override=False)


def _env(suffix: str, default: str) -> str:
    value = os.getenv(f"{ENV_PREFIX}_{suffix}")
    return default if value is None or value.strip() == "" else value


def _env_bool(suffix: str, default: bool) -> bool:
    raw = os.getenv(f"{ENV_PREFIX}_{suffix}")
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


DB_PATH = Path(__file__).parent / "data.db"
DATABASE_URL = _env("DATABASE_URL", f"sqlite:///{DB_PATH}")
SQL_ECHO = _env_bool("SQL_ECHO", False)

CORS_ORIGINS = [
    origin.strip()
    for origin in _env(
        "CORS_ORIGINS",
        "http://localhost:3000,http://localhost:5173",
    ).split(",")
    if origin.strip()
]

LOG_LEVEL = _env("LOG_LEVEL", "INFO").upper()

HOST = _env("HOST", "127.0.0.1")
PORT = int(_env("PORT", "5000"))
