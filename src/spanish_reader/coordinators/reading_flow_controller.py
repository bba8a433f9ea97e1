"""Reading Flow Controller - guided walkthrough of one analysed page.

Each sentence is read in three phases:

1. ``sentence``: the original sentence on its own.
2. ``words``: one step per entry of the sentence's lexical queue (each
   phrase followed by the words composing it). Skipped when the queue is
   empty.
3. ``translation``: the translated sentence.

After the translation of the last sentence the page is finished.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Coroutine, List, Optional, Set

from spanish_reader.core import BookPage, PageAnalysisResult, Sentence
from spanish_reader.io import AnalysisHistory, PersistenceGateway
from spanish_reader.services import (
    LexicalQueueEntry,
    SettingsManager,
    SpeechResult,
    SpeechService,
    build_lexical_queue,
)

logger = logging.getLogger(__name__)

Scheduler = Callable[[Coroutine[Any, Any, None]], Any]


class ReadingPhase(str, Enum):
    SENTENCE = "sentence"
    WORDS = "words"
    TRANSLATION = "translation"


@dataclass(frozen=True)
class ReadingState:
    sentence_index: int
    phase: ReadingPhase
    word_index: int
    finished: bool


class ReadingFlowController:
    """
    Owns the traversal state for one page and saves reading progress.

    Progress saves are best-effort and not sequenced: every change of
    ``sentence_index`` schedules a write without waiting for it, so with
    rapid navigation the last write to complete wins.
    """

    NEXT_KEYS = {"space", " ", "arrowright", "right", "enter"}
    PREVIOUS_KEYS = {"arrowleft", "left", "backspace"}
    SKIP_KEYS = {"s"}

    def __init__(
        self,
        analysis: PageAnalysisResult,
        gateway: Optional[PersistenceGateway] = None,
        book_id: Optional[str] = None,
        page_id: Optional[str] = None,
        start_sentence_index: int = 0,
        history: Optional[AnalysisHistory] = None,
        speech_service: Optional[SpeechService] = None,
        settings: Optional[SettingsManager] = None,
        scheduler: Optional[Scheduler] = None,
    ):
        self.analysis = analysis
        self.gateway = gateway
        self.book_id = book_id
        self.page_id = page_id
        self.history = history
        self.speech_service = speech_service
        self.settings = settings
        self._scheduler = scheduler
        self._pending_saves: Set[asyncio.Task] = set()

        self.sentence_index = 0
        self.phase = ReadingPhase.SENTENCE
        self.word_index = 0
        self.finished = self.sentence_count == 0
        self._lexical_queue: List[LexicalQueueEntry] = []

        if not self.finished:
            self.sentence_index = min(max(start_sentence_index, 0), self.sentence_count - 1)
            self._lexical_queue = build_lexical_queue(self.current_sentence)

    @classmethod
    def from_page(
        cls, page: BookPage, gateway: PersistenceGateway, **kwargs: Any
    ) -> "ReadingFlowController":
        """Open a stored page, resuming at its saved sentence."""
        return cls(
            analysis=page.analysis,
            gateway=gateway,
            book_id=page.book_id,
            page_id=page.id,
            start_sentence_index=page.last_sentence_index,
            **kwargs,
        )

    # State

    @property
    def sentence_count(self) -> int:
        return len(self.analysis.sentences)

    @property
    def current_sentence(self) -> Optional[Sentence]:
        if self.sentence_count == 0:
            return None
        return self.analysis.sentences[self.sentence_index]

    @property
    def lexical_queue(self) -> List[LexicalQueueEntry]:
        return list(self._lexical_queue)

    @property
    def current_entry(self) -> Optional[LexicalQueueEntry]:
        """The queue entry on display during the ``words`` phase."""
        if self.phase is not ReadingPhase.WORDS or not self._lexical_queue:
            return None
        return self._lexical_queue[self.word_index]

    @property
    def state(self) -> ReadingState:
        return ReadingState(
            sentence_index=self.sentence_index,
            phase=self.phase,
            word_index=self.word_index,
            finished=self.finished,
        )

    @property
    def progress(self) -> float:
        """Fraction of sentences reached, for a progress bar."""
        if self.sentence_count == 0:
            return 1.0
        return (self.sentence_index + 1) / self.sentence_count

    # Transitions

    def advance(self) -> ReadingState:
        if self.finished:
            return self.state

        if self.phase is ReadingPhase.SENTENCE:
            if self._lexical_queue:
                self.phase = ReadingPhase.WORDS
                self.word_index = 0
            else:
                self.phase = ReadingPhase.TRANSLATION
        elif self.phase is ReadingPhase.WORDS:
            if self.word_index < len(self._lexical_queue) - 1:
                self.word_index += 1
            else:
                self.phase = ReadingPhase.TRANSLATION
        elif self.sentence_index < self.sentence_count - 1:
            self._enter_sentence(self.sentence_index + 1, ReadingPhase.SENTENCE)
        else:
            self._finish()
        return self.state

    def back(self) -> ReadingState:
        if self.finished:
            return self.state

        if self.phase is ReadingPhase.TRANSLATION:
            if self._lexical_queue:
                self.phase = ReadingPhase.WORDS
                self.word_index = len(self._lexical_queue) - 1
            else:
                self.phase = ReadingPhase.SENTENCE
        elif self.phase is ReadingPhase.WORDS:
            if self.word_index > 0:
                self.word_index -= 1
            else:
                self.phase = ReadingPhase.SENTENCE
        elif self.sentence_index > 0:
            self._enter_sentence(self.sentence_index - 1, ReadingPhase.TRANSLATION)
        return self.state

    def skip_sentence(self) -> ReadingState:
        """Jump to the next sentence without its word and translation phases."""
        if self.finished:
            return self.state

        if self.sentence_index < self.sentence_count - 1:
            self._enter_sentence(self.sentence_index + 1, ReadingPhase.SENTENCE)
        else:
            self._finish()
        return self.state

    def handle_key(self, key: str) -> bool:
        """Dispatch a keyboard shortcut. Returns True if the key was handled."""
        if self.finished:
            return False
        key = key.lower()
        if key in self.NEXT_KEYS:
            self.advance()
        elif key in self.PREVIOUS_KEYS:
            self.back()
        elif key in self.SKIP_KEYS:
            self.skip_sentence()
        else:
            return False
        return True

    def _enter_sentence(self, index: int, phase: ReadingPhase) -> None:
        self.sentence_index = index
        self.phase = phase
        self.word_index = 0
        self._lexical_queue = build_lexical_queue(self.current_sentence)
        self._save_progress(index)

    def _finish(self) -> None:
        self.finished = True
        if self.history is not None:
            # The resume pointer may belong to a newer scan; only clear our own.
            last = self.history.get_last_analysis()
            if last is not None and last.analysis == self.analysis:
                self.history.clear_last_analysis()
        logger.info("Finished reading page %s", self.page_id or "<unsaved>")

    # Progress

    def _save_progress(self, sentence_index: int) -> None:
        if self.gateway is None or not self.book_id or not self.page_id:
            return
        self._schedule(self._persist_progress(sentence_index))

    async def _persist_progress(self, sentence_index: int) -> None:
        try:
            await self.gateway.update_page_progress(self.book_id, self.page_id, sentence_index)
        except Exception:
            logger.exception("Failed to save reading progress for page %s", self.page_id)

    def _schedule(self, coro: Coroutine[Any, Any, None]) -> None:
        if self._scheduler is not None:
            self._scheduler(coro)
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Outside an event loop the save simply runs to completion here.
            asyncio.run(coro)
            return
        task = loop.create_task(coro)
        self._pending_saves.add(task)
        task.add_done_callback(self._pending_saves.discard)

    async def wait_for_pending_saves(self) -> None:
        """Let in-flight progress saves finish, e.g. before shutting down."""
        if self._pending_saves:
            await asyncio.gather(*list(self._pending_saves), return_exceptions=True)

    # Speech

    def speech_text(self) -> Optional[str]:
        """Text to read aloud for the current step."""
        if self.finished or self.current_sentence is None:
            return None
        entry = self.current_entry
        if entry is not None:
            return entry.word.text
        return self.current_sentence.original

    async def speak_current(self) -> Optional[SpeechResult]:
        """Synthesize speech for the current step; failures are logged, never raised."""
        text = self.speech_text()
        if not text or self.speech_service is None:
            return None
        api_key = self.settings.get_gemini_api_key() if self.settings else None
        if not api_key:
            logger.warning("No API key available for speech synthesis")
            return None
        result = await self.speech_service.synthesize(text, api_key)
        if result.is_error:
            logger.error("Speech synthesis failed: %s", result.error)
        return result
