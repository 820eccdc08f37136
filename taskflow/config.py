"""Configuration helpers for TaskFlow."""
from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Optional


DEFAULT_COLLECTION = "userInputs"
DEFAULT_STORE_DIR = Path(__file__).resolve().parent.parent / "task_data"
DEFAULT_SESSION_PATH = Path.home() / ".taskflow" / "session.json"


class ConfigError(RuntimeError):
    """Raised when required configuration is missing."""


@dataclass(slots=True)
class Settings:
    """Runtime configuration shared by the CLI and the API."""

    environment: str = "local"
    collection: str = DEFAULT_COLLECTION
    force_file_store: bool = False
    store_dir: Path = DEFAULT_STORE_DIR
    firebase_api_key: Optional[str] = None
    session_path: Path = DEFAULT_SESSION_PATH
    dev_user_email: Optional[str] = None

    def require_api_key(self) -> str:
        """Return the Firebase Web API key or raise ConfigError."""
        if not self.firebase_api_key:
            raise ConfigError(
                "Missing Firebase Web API key. Export FIREBASE_WEB_API_KEY "
                "to sign in with email and password."
            )
        return self.firebase_api_key


def _env(name: str) -> Optional[str]:
    value = os.getenv(name, "").strip()
    return value or None


def load_settings() -> Settings:
    """Load settings from environment variables.

    Returns:
        Settings populated from TASKFLOW_* / FIREBASE_* variables, with
        defaults for anything unset.
    """

    store_dir = _env("TASKFLOW_STORE_DIR")
    session_file = _env("TASKFLOW_SESSION_FILE")

    return Settings(
        environment=_env("TASKFLOW_ENV") or "local",
        collection=_env("TASKFLOW_COLLECTION") or DEFAULT_COLLECTION,
        force_file_store=os.getenv("TASKFLOW_STORE_FORCE_FILE", "").strip() == "1",
        store_dir=Path(store_dir) if store_dir else DEFAULT_STORE_DIR,
        firebase_api_key=_env("FIREBASE_WEB_API_KEY"),
        session_path=Path(session_file).expanduser() if session_file else DEFAULT_SESSION_PATH,
        dev_user_email=_env("TASKFLOW_USER_EMAIL"),
    )
