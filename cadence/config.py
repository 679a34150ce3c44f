from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


def _resolve_project_root() -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[1]


PROJECT_ROOT = _resolve_project_root()


def load_env() -> None:
    env_name = os.getenv("APP_ENV", "development")
    candidates = [Path.cwd(), PROJECT_ROOT]
    for base in candidates:
        env_path = base / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            break

    for base in candidates:
        env_specific = base / f".env.{env_name}"
        if env_specific.exists():
            load_dotenv(env_specific, override=True)
            break


@dataclass(frozen=True)
class Settings:
    database_url: str
    log_level: str = "INFO"
    log_dir: str = "logs"
    ics_export_path: str | None = None
    lookahead_days: int = 90
    lookback_days: int = 30
    override_retention_days: int = 365
    max_interval: int = 365
    max_occurrences: int = 1000


def load_settings() -> Settings:
    load_env()

    database_url = os.getenv("DATABASE_URL", "").strip()
    if not database_url:
        raise RuntimeError("DATABASE_URL is not set. Create a .env file with your connection string.")

    return Settings(
        database_url=database_url,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_dir=os.getenv("LOG_DIR", "logs"),
        ics_export_path=os.getenv("ICS_EXPORT_PATH", "").strip() or None,
        lookahead_days=int(os.getenv("LOOKAHEAD_DAYS", "90")),
        lookback_days=int(os.getenv("LOOKBACK_DAYS", "30")),
        override_retention_days=int(os.getenv("OVERRIDE_RETENTION_DAYS", "365")),
        max_interval=int(os.getenv("MAX_INTERVAL", "365")),
        max_occurrences=int(os.getenv("MAX_OCCURRENCES", "1000")),
    )
