"""Runtime settings, read from the environment (and backend/.env when present)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

BACKEND_DIR = Path(__file__).resolve().parent.parent


def _flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 3000
    storage_path: Path = Path("storage.json")
    # Wipe the snapshot on startup; rooms and games never outlive the process by default.
    reset_storage: bool = True
    # Ignore attacks from the player whose turn it is not. Off: clients are trusted.
    enforce_turns: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Settings:
        load_dotenv(BACKEND_DIR / ".env")
        return cls(
            host=os.environ.get("SEABATTLE_HOST", "0.0.0.0").strip() or "0.0.0.0",
            port=int(os.environ.get("SEABATTLE_PORT", "3000")),
            storage_path=Path(os.environ.get("SEABATTLE_STORAGE_PATH", "storage.json")),
            reset_storage=_flag("SEABATTLE_RESET_STORAGE", "1"),
            enforce_turns=_flag("SEABATTLE_ENFORCE_TURNS", "0"),
            log_level=os.environ.get("SEABATTLE_LOG_LEVEL", "INFO").strip().upper() or "INFO",
        )
