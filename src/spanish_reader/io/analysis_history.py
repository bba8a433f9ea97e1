"""Device-local cache of recent page analyses and display preferences."""

import time
from typing import List, Optional

from spanish_reader.core import PageAnalysisResult, PersistedAnalysis
from spanish_reader.io.local_store import (
    ANALYSIS_KEY,
    HISTORY_KEY,
    THEME_KEY,
    LocalKeyValueStore,
)


class AnalysisHistory:
    """Keeps the last analysis (the resume pointer) and a short history.

    These entries always live on the device, whoever is signed in.
    """

    MAX_ENTRIES = 10
    THEMES = ("light", "dark")

    def __init__(self, store: LocalKeyValueStore) -> None:
        self._store = store

    def save_current_analysis(self, analysis: PageAnalysisResult, image: str) -> PersistedAnalysis:
        """Record an analysis as the resume pointer and prepend it to the history."""
        entry = PersistedAnalysis(analysis=analysis, image=image, timestamp=int(time.time() * 1000))
        self._store.set_json(ANALYSIS_KEY, entry.to_dict())
        history = self._store.get_json(HISTORY_KEY, [])
        self._store.set_json(HISTORY_KEY, ([entry.to_dict()] + history)[: self.MAX_ENTRIES])
        return entry

    def get_last_analysis(self) -> Optional[PersistedAnalysis]:
        data = self._store.get_json(ANALYSIS_KEY)
        return PersistedAnalysis.from_dict(data) if data else None

    def clear_last_analysis(self) -> None:
        self._store.remove(ANALYSIS_KEY)

    def get_history(self) -> List[PersistedAnalysis]:
        """Most recent first."""
        return [PersistedAnalysis.from_dict(raw) for raw in self._store.get_json(HISTORY_KEY, [])]

    def get_theme(self) -> str:
        theme = self._store.get_raw(THEME_KEY)
        return theme if theme in self.THEMES else "light"

    def set_theme(self, theme: str) -> None:
        if theme not in self.THEMES:
            raise ValueError(f"Unknown theme: {theme}")
        self._store.set_raw(THEME_KEY, theme)
