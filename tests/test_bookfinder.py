import json

import pytest

from bookid.bookfinder import BookFinder, BookResult, SearchType


def test_search_type_values():
    assert SearchType("isbn") is SearchType.ISBN
    assert SearchType("title_author") is SearchType.TITLE_AUTHOR
    assert SearchType("title") is SearchType.TITLE
    assert SearchType.GENERAL_QUERY.value == "general"


def test_to_dict_minimal_omits_empty_fields():
    result = BookResult(
        title="Dune",
        authors=["Frank Herbert"],
        confidence=0.7,
        search_type=SearchType.GENERAL_QUERY,
    )
    assert result.to_dict() == {
        "title": "Dune",
        "authors": ["Frank Herbert"],
        "confidence": 0.7,
        "search_type": "general",
    }


def test_to_dict_full_key_order():
    result = BookResult(
        title="Dune",
        authors=["Frank Herbert"],
        isbn10="0743273567",
        isbn13="9780743273565",
        publisher="Ace",
        published_year=1990,
        language="en",
        google_books_volume_id="vol1",
        thumbnail_url="https://img.example.com/t.png",
        google_books_data={"id": "vol1"},
        confidence=0.95,
        search_type=SearchType.ISBN,
    )
    assert list(result.to_dict()) == [
        "title",
        "authors",
        "isbn10",
        "isbn13",
        "publisher",
        "published_year",
        "language",
        "google_books_volume_id",
        "thumbnail_url",
        "google_books_data",
        "confidence",
        "search_type",
    ]
    assert result.to_dict()["search_type"] == "isbn"
    assert result.to_dict()["google_books_data"] == {"id": "vol1"}


def test_zero_year_is_omitted():
    result = BookResult(title="Dune", published_year=0)
    assert "published_year" not in result.to_dict()
    assert "google_books_data" not in result.to_dict()


def test_json_round_trip():
    result = BookResult(title="Dune", authors=["Frank Herbert"], publisher="Ace", confidence=0.5)
    data = result.to_dict()
    assert json.loads(json.dumps(data)) == data


def test_to_dict_copies_authors():
    result = BookResult(title="Dune", authors=["Frank Herbert"])
    data = result.to_dict()
    data["authors"].append("Someone Else")
    assert result.authors == ["Frank Herbert"]


def test_book_finder_is_abstract():
    with pytest.raises(TypeError):
        BookFinder()  # type: ignore[abstract]


class _FixedFinder(BookFinder):
    def search(self, query):
        return [BookResult(title=query, search_type=SearchType.TITLE)]


def test_book_finder_subclass_search():
    finder = _FixedFinder()
    assert isinstance(finder, BookFinder)
    results = finder.search("Dune")
    assert len(results) == 1
    top = results[0]
    assert top.title == "Dune"
    assert top.search_type is SearchType.TITLE
    assert BookResult.to_dict(top) == {
        "title": "Dune",
        "authors": [],
        "confidence": 0.0,
        "search_type": "title",
    }