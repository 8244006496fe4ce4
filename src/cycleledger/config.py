"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "cycleledger"
    DB_FILENAME = "cycleledger.db"
    DEFAULT_COMPANY_NAME = "Company"
    DEFAULT_CURRENCY_SYMBOL = "₱"

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("CYCLELEDGER_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("CYCLELEDGER_DATABASE_URL", self._build_sqlite_url())
        self.CURRENCY_SYMBOL = os.getenv(
            "CYCLELEDGER_CURRENCY_SYMBOL", self.DEFAULT_CURRENCY_SYMBOL
        )
        self.COMPANY_NAME = (
            os.getenv("CYCLELEDGER_COMPANY_NAME", "").strip() or self.DEFAULT_COMPANY_NAME
        )

    def _resolve_data_dir(self) -> Path:
        """Return the directory holding the database file and logs."""

        data_root = os.getenv("CYCLELEDGER_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        if self.DATABASE_URL.startswith("sqlite"):
            return {"connect_args": {"check_same_thread": False}}
        return {}


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True
    TESTING = False
