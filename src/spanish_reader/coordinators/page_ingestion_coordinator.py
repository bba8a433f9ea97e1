"""Page Ingestion Coordinator - turns a fresh page analysis into a stored page and vocabulary."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from spanish_reader.core import Book, PageAnalysisResult
from spanish_reader.io import AnalysisHistory, PersistenceGateway
from spanish_reader.services import PageAnalysisService, SettingsManager, flatten

logger = logging.getLogger(__name__)


@dataclass
class IngestionResult:
    """Outcome of ingesting one page.

    ``awaiting_book`` is set when the page was analysed but no book was
    chosen yet; ``books`` then lists the existing books to pick from.
    """

    book_id: Optional[str] = None
    page_id: Optional[str] = None
    added_count: int = 0
    awaiting_book: bool = False
    books: List[Book] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class PendingPage:
    """An analysed page waiting for the learner to choose its book."""

    image: str
    analysis: PageAnalysisResult


class PageIngestionCoordinator:
    """Orchestrates: analysis arrives → page appended → vocabulary stored.

    Vocabulary is stored exactly once per page, right after the page itself
    is durable, so it is available for training even if the learner never
    reads the page.
    """

    DEFAULT_BOOK_TITLE = "Untitled book"

    def __init__(
        self,
        gateway: PersistenceGateway,
        analysis_service: Optional[PageAnalysisService] = None,
        history: Optional[AnalysisHistory] = None,
        settings: Optional[SettingsManager] = None,
    ):
        if gateway is None:
            raise ValueError("PersistenceGateway must not be None")

        self.gateway = gateway
        self.analysis_service = analysis_service
        self.history = history
        self.settings = settings
        self.pending_page: Optional[PendingPage] = None

    async def ingest_page(
        self, book_id: str, image: str, analysis: PageAnalysisResult
    ) -> IngestionResult:
        """Append the page to ``book_id`` and store its vocabulary.

        Raises:
            RuntimeError: If the page could not be appended. Nothing is stored then.
        """
        try:
            page_id = await self.gateway.append_page(book_id, image, analysis)
        except Exception as e:
            raise RuntimeError(f"Failed to add page to book {book_id}: {e}") from e

        added = await self.gateway.add_vocabulary_batch(flatten(analysis.sentences))
        logger.info("Page %s stored, %d new vocabulary items", page_id, added)
        return IngestionResult(book_id=book_id, page_id=page_id, added_count=added)

    async def stage_page(self, image: str, analysis: PageAnalysisResult) -> IngestionResult:
        """Hold an analysed page until a book is chosen and offer the existing books."""
        self.pending_page = PendingPage(image=image, analysis=analysis)
        books = await self.gateway.list_books()
        return IngestionResult(awaiting_book=True, books=books)

    async def assign_pending_page(self, book_id: str) -> IngestionResult:
        """Store the staged page in an existing book."""
        if self.pending_page is None:
            raise RuntimeError("No page is waiting for a book")
        pending = self.pending_page
        result = await self.ingest_page(book_id, pending.image, pending.analysis)
        self.pending_page = None
        return result

    async def assign_pending_page_to_new_book(
        self, title: Optional[str] = None, author: Optional[str] = None
    ) -> IngestionResult:
        """Create a book (untitled if no title is given) and store the staged page in it."""
        if self.pending_page is None:
            raise RuntimeError("No page is waiting for a book")
        book_id = await self.gateway.create_book(title or self.DEFAULT_BOOK_TITLE, author)
        return await self.assign_pending_page(book_id)

    def discard_pending_page(self) -> None:
        self.pending_page = None

    async def analyze_and_ingest(
        self,
        image: str,
        book_id: Optional[str] = None,
        api_key: Optional[str] = None,
    ) -> IngestionResult:
        """Analyse a page image, then ingest it into ``book_id`` or stage it.

        A failed analysis leaves storage untouched and is reported through
        ``IngestionResult.error``.
        """
        if self.analysis_service is None:
            raise RuntimeError("No analysis service configured")

        key = api_key or (self.settings.get_gemini_api_key() if self.settings else None)
        if not key:
            return IngestionResult(error="API key is missing. Please provide a Gemini API key.")

        result = await self.analysis_service.analyze_image(image, key)
        if result.is_error:
            logger.error("Page analysis failed: %s", result.error)
            return IngestionResult(error=result.error or "Analysis returned no data")

        if self.history is not None:
            self.history.save_current_analysis(result.analysis, image)

        if book_id:
            return await self.ingest_page(book_id, image, result.analysis)
        return await self.stage_page(image, result.analysis)
