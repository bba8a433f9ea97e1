"""Domain entities for books and their scanned pages."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .page_analysis import PageAnalysisResult


COVER_STYLES = ("bg-emerald-800", "bg-amber-900", "bg-slate-800", "bg-indigo-900")


@dataclass(frozen=True)
class Book:
    """A logical reading unit.

    Attributes:
        id: Opaque identifier assigned by the storage backend.
        title: Display title.
        author: Optional author name.
        cover_style: Cosmetic tag picked from ``COVER_STYLES``.
        created_at: Epoch milliseconds.
        page_count: Number of pages ever appended. Never decreases.
    """

    id: str
    title: str
    created_at: int
    page_count: int = 0
    author: Optional[str] = None
    cover_style: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "coverStyle": self.cover_style,
            "createdAt": self.created_at,
            "pageCount": self.page_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], book_id: Optional[str] = None) -> "Book":
        return cls(
            id=book_id or data.get("id") or "",
            title=data.get("title") or "",
            author=data.get("author") or None,
            cover_style=data.get("coverStyle"),
            created_at=int(data.get("createdAt") or 0),
            page_count=int(data.get("pageCount") or 0),
        )


@dataclass(frozen=True)
class BookPage:
    """One scanned page of a book.

    Attributes:
        id: Opaque identifier assigned by the storage backend.
        book_id: Owning book.
        page_number: 1-based, assigned once at append time.
        image: Base64 image payload.
        analysis: AI analysis of the page. Never mutated.
        created_at: Epoch milliseconds.
        last_sentence_index: Reading progress checkpoint (0-based).
    """

    id: str
    book_id: str
    page_number: int
    image: str
    analysis: PageAnalysisResult
    created_at: int
    last_sentence_index: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "bookId": self.book_id,
            "pageNumber": self.page_number,
            "image": self.image,
            "analysis": self.analysis.to_dict(),
            "createdAt": self.created_at,
            "lastSentenceIndex": self.last_sentence_index,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], page_id: Optional[str] = None) -> "BookPage":
        return cls(
            id=page_id or data.get("id") or "",
            book_id=data.get("bookId") or "",
            page_number=int(data.get("pageNumber") or 0),
            image=data.get("image") or "",
            analysis=PageAnalysisResult.from_dict(data.get("analysis") or {}),
            created_at=int(data.get("createdAt") or 0),
            last_sentence_index=int(data.get("lastSentenceIndex") or 0),
        )
