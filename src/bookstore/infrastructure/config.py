"""Runtime settings, read from the environment (and a ``.env`` file)."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


class Settings:

    def __init__(self) -> None:
        # Storage
        self.STORAGE: str = os.getenv("BOOKSTORE_STORAGE", "json").lower()
        self.DATA_DIR: Path = Path(
            os.getenv("BOOKSTORE_DATA_DIR", str(_DEFAULT_DATA_DIR))
        )
        self._database_url: str = os.getenv("BOOKSTORE_DATABASE_URL", "")

        # Logging
        self.ENV: str = os.getenv("BOOKSTORE_ENV", "development").lower()
        self.LOG_LEVEL: str = os.getenv("BOOKSTORE_LOG_LEVEL", "INFO").upper()

    @property
    def DATABASE_URL(self) -> str:
        """SQLAlchemy URL; defaults to a SQLite file inside the data directory."""
        return self._database_url or f"sqlite:///{self.DATA_DIR / 'bookstore.db'}"
