"""Settings Manager - Handles API key, storage location and remote store configuration."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from spanish_reader.io.local_store import SESSION_API_KEY, LocalKeyValueStore


class SettingsManager:
    """
    Manages settings and API key configuration.

    Reads configuration from the .env file in the project root. An API key
    entered during the session takes precedence over the .env value and is
    never written to disk.
    """

    DEFAULT_DB_PATH = Path.home() / ".spanish_reader" / "store.db"

    def __init__(
        self,
        project_root: Optional[Path] = None,
        session_store: Optional[LocalKeyValueStore] = None,
    ):
        """
        Initialize settings manager.

        Args:
            project_root: Path to project root where .env is located.
                         If None, searches upward from current file.
            session_store: Store holding the session credential cache.
        """
        if project_root is None:
            current = Path(__file__).resolve()
            project_root = current.parent.parent.parent.parent

        env_path = project_root / ".env"
        load_dotenv(dotenv_path=env_path)

        self._project_root = project_root
        self._session_store = session_store

    def attach_session_store(self, store: LocalKeyValueStore) -> None:
        self._session_store = store

    def get_gemini_api_key(self) -> Optional[str]:
        """Get the Gemini API key, preferring the one set for this session."""
        if self._session_store is not None:
            session_key = self._session_store.get_session_value(SESSION_API_KEY)
            if session_key:
                return session_key
        key = os.getenv("GEMINI_API_KEY")
        return key.strip() if key and key.strip() else None

    def set_session_api_key(self, key: str) -> None:
        if self._session_store is None:
            raise RuntimeError("No session store attached")
        if not key or not key.strip():
            raise ValueError("API key cannot be empty")
        self._session_store.set_session_value(SESSION_API_KEY, key.strip())

    def clear_session_api_key(self) -> None:
        if self._session_store is not None:
            self._session_store.clear_session_value(SESSION_API_KEY)

    def get_local_db_path(self) -> Path:
        """Location of the per-device store (SPANISH_READER_DB)."""
        value = os.getenv("SPANISH_READER_DB")
        return Path(value).expanduser() if value and value.strip() else self.DEFAULT_DB_PATH

    def get_firebase_project_id(self) -> Optional[str]:
        """Firestore project for signed-in learners; None disables the remote store."""
        value = os.getenv("FIREBASE_PROJECT_ID")
        return value.strip() if value and value.strip() else None

    def reload_env(self) -> None:
        """Reload environment variables from .env file."""
        env_path = self._project_root / ".env"
        load_dotenv(dotenv_path=env_path, override=True)
