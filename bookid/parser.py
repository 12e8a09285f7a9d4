"""Turn free-form input into a book search query."""

from __future__ import annotations

import re

from bookid.bookfinder import SearchType

_SEP = r"[-\t\n\f\r ]?"

_ISBN10_PATTERN = re.compile(
    rf"\b(\d{{1,5}}{_SEP}\d{{1,7}}{_SEP}\d{{1,7}}{_SEP}\d)\b", re.ASCII
)
_ISBN13_PATTERN = re.compile(
    rf"\b(97[89]{_SEP}\d{{1,5}}{_SEP}\d{{1,7}}{_SEP}\d{{1,7}}{_SEP}\d)\b", re.ASCII
)


def parse_query(text: str) -> tuple[str, SearchType, str]:
    """Return the API query, the search type and any ISBN found in text."""
    clean = text.strip()

    match = _ISBN13_PATTERN.search(clean)
    if match:
        isbn = clean_isbn(match.group(1))
        if validate_isbn13(isbn):
            return "isbn:" + isbn, SearchType.ISBN, isbn

    match = _ISBN10_PATTERN.search(clean)
    if match:
        isbn = clean_isbn(match.group(1))
        if validate_isbn10(isbn):
            return "isbn:" + isbn, SearchType.ISBN, isbn

    return clean, SearchType.GENERAL_QUERY, ""


def clean_isbn(isbn: str) -> str:
    """Remove dashes and spaces from an ISBN."""
    return isbn.replace("-", "").replace(" ", "")


def _all_ascii_digits(text: str) -> bool:
    return all("0" <= ch <= "9" for ch in text)


def validate_isbn10(isbn: str) -> bool:
    """Check that an ISBN-10 is ten digits."""
    return len(isbn) == 10 and _all_ascii_digits(isbn)


def validate_isbn13(isbn: str) -> bool:
    """Check that an ISBN-13 is thirteen digits starting with 978 or 979."""
    if len(isbn) != 13 or not _all_ascii_digits(isbn):
        return False
    return isbn.startswith(("978", "979"))