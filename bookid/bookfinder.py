"""Search results and the interface of book finders."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SearchType(str, Enum):
    """How a search was performed."""

    ISBN = "isbn"
    TITLE_AUTHOR = "title_author"
    TITLE = "title"
    GENERAL_QUERY = "general"


@dataclass
class BookResult:
    """Everything needed to create a work, its authors and a publication."""

    title: str = ""
    authors: list[str] = field(default_factory=list)
    isbn10: str = ""
    isbn13: str = ""
    publisher: str = ""
    published_year: int = 0
    language: str = ""
    google_books_volume_id: str = ""
    thumbnail_url: str = ""
    google_books_data: Any = None
    confidence: float = 0.0
    search_type: SearchType = SearchType.GENERAL_QUERY

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping; empty optional fields are left out."""
        data: dict[str, Any] = {"title": self.title, "authors": list(self.authors)}
        optional = {
            "isbn10": self.isbn10,
            "isbn13": self.isbn13,
            "publisher": self.publisher,
            "published_year": self.published_year,
            "language": self.language,
            "google_books_volume_id": self.google_books_volume_id,
            "thumbnail_url": self.thumbnail_url,
        }
        data.update((key, value) for key, value in optional.items() if value)
        if self.google_books_data is not None:
            data["google_books_data"] = self.google_books_data
        data["confidence"] = self.confidence
        data["search_type"] = SearchType(self.search_type).value
        return data


class BookFinder(ABC):
    """Something that searches for books."""

    @abstractmethod
    def search(self, query: str) -> list[BookResult]:
        """Search for books matching the query, returning scored results."""