"""Application settings loaded from the environment (and `.env`)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_PORT = 3000


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


@dataclass
class Settings:
    port: int = DEFAULT_PORT
    database_dir: Path = BASE_DIR / "database"
    upload_dir: Path = BASE_DIR / "public" / "images"
    templates_dir: Path = BASE_DIR / "templates"
    reset_database: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, loading `.env` first.

        Raises:
            RuntimeError: If PORT is set but is not a valid TCP port number.
        """
        load_dotenv()

        raw_port = os.getenv("PORT", "").strip()
        port = DEFAULT_PORT
        if raw_port:
            try:
                port = int(raw_port)
            except ValueError as exc:
                raise RuntimeError(f"PORT={raw_port!r} is not an integer") from exc
            if not 0 < port < 65536:
                raise RuntimeError(f"PORT={port} is outside the valid range 1-65535")

        database_dir = os.getenv("DATABASE_DIR", "").strip()
        upload_dir = os.getenv("UPLOAD_DIR", "").strip()

        return cls(
            port=port,
            database_dir=Path(database_dir).expanduser() if database_dir else BASE_DIR / "database",
            upload_dir=Path(upload_dir).expanduser() if upload_dir else BASE_DIR / "public" / "images",
            reset_database=_env_flag("RESET_DATABASE"),
            log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
        )
