"""SQLite-backed key/value store for per-device persistence."""

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)


VOCAB_KEY = "spanish_assistant_vocab"
ANALYSIS_KEY = "spanish_assistant_last_analysis"
HISTORY_KEY = "spanish_assistant_history"
THEME_KEY = "spanish_assistant_theme"
SESSION_API_KEY = "spanish_assistant_session_key"
BOOKS_KEY = "spanish_assistant_books"


def pages_key(book_id: str) -> str:
    """Key of the page list belonging to one book."""
    return f"{BOOKS_KEY}_pages_{book_id}"


class LocalKeyValueStore:
    """Owns the SQLite connection holding JSON-serialized collections.

    Every logical collection lives under one key. Values written with
    ``set_session_value`` are kept in memory only and disappear with the
    process, like a browser's session storage.
    """

    def __init__(self, db_path: Union[Path, str]) -> None:
        self.db_path = db_path if db_path == ":memory:" else Path(db_path)
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.connection = sqlite3.connect(str(self.db_path))
        self.connection.row_factory = sqlite3.Row
        self._session: Dict[str, str] = {}

    def ensure_schema(self) -> None:
        """Create the key/value table if it does not exist."""
        cur = self.connection.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS key_value (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
            );
            """
        )
        self.connection.commit()

    def get_raw(self, key: str) -> Optional[str]:
        cur = self.connection.cursor()
        cur.execute("SELECT value FROM key_value WHERE key = ?", (key,))
        row = cur.fetchone()
        return row["value"] if row else None

    def set_raw(self, key: str, value: str) -> None:
        cur = self.connection.cursor()
        cur.execute(
            """
            INSERT INTO key_value (key, value)
            VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = CURRENT_TIMESTAMP
            """,
            (key, value),
        )
        self.connection.commit()

    def get_json(self, key: str, default: Any = None) -> Any:
        """Return the decoded value under ``key``.

        Corrupt entries are logged and reported as ``default``.
        """
        raw = self.get_raw(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.error("Corrupt JSON stored under %s, ignoring it", key)
            return default

    def set_json(self, key: str, value: Any) -> None:
        self.set_raw(key, json.dumps(value, ensure_ascii=False))

    def remove(self, key: str) -> None:
        cur = self.connection.cursor()
        cur.execute("DELETE FROM key_value WHERE key = ?", (key,))
        self.connection.commit()

    def get_session_value(self, key: str) -> Optional[str]:
        return self._session.get(key)

    def set_session_value(self, key: str, value: str) -> None:
        self._session[key] = value

    def clear_session_value(self, key: str) -> None:
        self._session.pop(key, None)

    def close(self) -> None:
        self.connection.close()
