from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return default
    return value if value > 0 else default


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for the quest board."""

    storage: str
    mongodb_uri: str
    db_name: str
    mongo_appname: str
    mongo_server_selection_timeout_ms: int
    log_dir: str | None
    log_format: str
    log_level: str


def load_settings() -> Settings:
    """Construct Settings from environment variables."""
    storage = os.getenv("QUESTBOARD_STORAGE", "memory").strip().lower()
    if storage not in {"memory", "mongo"}:
        raise ValueError(f"QUESTBOARD_STORAGE must be 'memory' or 'mongo', got {storage!r}")
    return Settings(
        storage=storage,
        mongodb_uri=os.getenv("MONGODB_URI", "mongodb://localhost:27017"),
        db_name=os.getenv("DB_NAME", "questboard"),
        mongo_appname=os.getenv("MONGO_APPNAME", "questboard"),
        mongo_server_selection_timeout_ms=_env_int(
            "MONGO_SERVER_SELECTION_TIMEOUT_MS", 5000
        ),
        log_dir=os.getenv("LOG_DIR") or None,
        log_format=os.getenv("LOG_FORMAT", "").strip().lower(),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
    )


__all__ = ["Settings", "load_settings"]
