"""
Process settings, read once from environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

LISTEN_HOST = "0.0.0.0"
LISTEN_PORT = 8000


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return url


@dataclass(frozen=True)
class Settings:
    database_url: str
    api_resource: str = "py"
    db_pool_min_size: int = 1
    db_pool_max_size: int = 5
    db_command_timeout: int = 30
    log_level: str = "INFO"
    log_json: bool = False

    @property
    def api_prefix(self) -> str:
        return f"/api/{self.api_resource}"

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            database_url=database_url(),
            api_resource=_env_str("API_RESOURCE", "py").strip("/"),
            db_pool_min_size=_env_int("DB_POOL_MIN_SIZE", 1),
            db_pool_max_size=_env_int("DB_POOL_MAX_SIZE", 5),
            db_command_timeout=_env_int("DB_COMMAND_TIMEOUT", 30),
            log_level=_env_str("LOG_LEVEL", "INFO").upper(),
            log_json=_env_bool("LOG_JSON", False),
        )
