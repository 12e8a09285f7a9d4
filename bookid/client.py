"""Book search backed by the Google Books volumes API."""

from __future__ import annotations

import json
import re
import urllib.parse
import urllib.request
from collections.abc import Callable, Mapping
from typing import Any

from bookid.bookfinder import BookFinder, BookResult, SearchType
from bookid.parser import parse_query

DEFAULT_BASE_URL = "https://www.googleapis.com/books/v1/volumes"
MAX_RESULTS = 10

Fetch = Callable[[str, "float | None"], bytes]

_BASE_CONFIDENCE = {
    SearchType.ISBN: 0.95,
    SearchType.GENERAL_QUERY: 0.70,
}

_INTEGER = re.compile(r"[+-]?[0-9]+")


def _default_fetch(url: str, timeout: float | None) -> bytes:
    request = urllib.request.Request(url, headers={"Accept": "application/json"})
    if timeout is None:
        response = urllib.request.urlopen(request)
    else:
        response = urllib.request.urlopen(request, timeout=timeout)
    with response:
        return response.read()


class Client(BookFinder):
    """Searches the Google Books API for volumes matching a query."""

    def __init__(
        self,
        api_key: str = "",
        fetch: Fetch | None = None,
        base_url: str = DEFAULT_BASE_URL,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self._fetch = fetch or _default_fetch

    def _build_url(self, search_query: str) -> str:
        params: dict[str, Any] = {"q": search_query, "maxResults": MAX_RESULTS}
        if self.api_key:
            params["key"] = self.api_key
        return f"{self.base_url}?{urllib.parse.urlencode(params)}"

    def search(self, query: str, timeout: float | None = None) -> list[BookResult]:
        """Search for books; raises ValueError on an empty query."""
        if query == "":
            raise ValueError("query cannot be empty")

        search_query, search_type, detected_isbn = parse_query(query)
        payload = self._fetch(self._build_url(search_query), timeout)
        data = json.loads(payload) if payload else {}

        results = []
        for volume in data.get("items") or []:
            result = volume_to_book_result(volume, search_type, detected_isbn)
            result.google_books_data = volume
            results.append(result)
        return results


def volume_to_book_result(
    volume: Mapping[str, Any], search_type: SearchType, detected_isbn: str
) -> BookResult:
    """Convert one API volume into a BookResult."""
    info = volume.get("volumeInfo") or {}
    result = BookResult(
        title=info.get("title") or "",
        authors=list(info.get("authors") or []),
        google_books_volume_id=volume.get("id") or "",
        search_type=search_type,
    )

    for identifier in info.get("industryIdentifiers") or []:
        kind = identifier.get("type")
        if kind == "ISBN_10":
            result.isbn10 = identifier.get("identifier") or ""
        elif kind == "ISBN_13":
            result.isbn13 = identifier.get("identifier") or ""

    # An ISBN from the query still describes the book when the volume lacks one.
    if detected_isbn and not result.isbn10 and not result.isbn13:
        if len(detected_isbn) == 10:
            result.isbn10 = detected_isbn
        elif len(detected_isbn) == 13:
            result.isbn13 = detected_isbn

    result.publisher = info.get("publisher") or ""
    result.language = info.get("language") or ""

    published = info.get("publishedDate") or ""
    if published:
        result.published_year = extract_year(published)

    links = info.get("imageLinks")
    if links is not None:
        if links.get("thumbnail"):
            result.thumbnail_url = ensure_https(links["thumbnail"])
        elif links.get("smallThumbnail"):
            result.thumbnail_url = ensure_https(links["smallThumbnail"])

    result.confidence = calculate_confidence(search_type, volume)
    return result


def calculate_confidence(search_type: SearchType, volume: Mapping[str, Any]) -> float:
    """Score a result from its search type and how complete its data is."""
    confidence = _BASE_CONFIDENCE.get(SearchType(search_type), 0.0)

    info = volume.get("volumeInfo")
    if info is not None:
        checks = [
            bool(info.get("title")),
            bool(info.get("authors")),
            bool(info.get("industryIdentifiers")),
            bool(info.get("publisher")),
        ]
        completeness = sum(checks) / len(checks)
        confidence = confidence * (0.7 + 0.3 * completeness)

    return confidence


def _to_year(text: str) -> int | None:
    if not _INTEGER.fullmatch(text):
        return None
    year = int(text)
    return year if 1000 < year < 3000 else None


def extract_year(date_str: str) -> int:
    """Return the year of a date such as '2015' or '2015-03-01', or 0."""
    year = _to_year(date_str)
    if year is not None:
        return year
    year = _to_year(date_str.split("-")[0])
    return year if year is not None else 0


def ensure_https(url: str) -> str:
    """Replace a leading http:// scheme with https://, leaving the rest alone."""
    prefix = "http://"
    if url.startswith(prefix):
        return "https://" + url[len(prefix):]
    return url