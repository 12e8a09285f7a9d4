"""Domain records for works, authors and their publications."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Work:
    """The abstract creative work, independent of any edition."""

    id: int = 0
    title: str = ""
    author: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class Author:
    """A person who created works."""

    id: int = 0
    name: str = ""


@dataclass(frozen=True)
class WorkAuthor:
    """Link between a work and one of its authors."""

    work_id: int = 0
    author_id: int = 0


@dataclass
class Publication:
    """A specific published edition of a work."""

    id: int = 0
    work_id: int = 0
    isbn10: str = ""
    isbn13: str = ""
    publisher: str = ""
    published_year: int = 0
    language: str = ""
    google_books_volume_id: str = ""
    thumbnail_url: str = ""
    google_books_data: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None