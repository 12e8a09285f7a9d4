# bookid

`bookid` identifies a book from whatever you know about it: an ISBN-10,
an ISBN-13 (with or without dashes or spaces), a title, a title and author,
or any free-form description. It queries the Google Books volumes API and
prints the best match as JSON.

## Installation

```
pip install .
```

The package has no third-party runtime dependencies; HTTP requests are made
with the standard library.

## Command line

```
bookid 9780743273565
bookid 0-7432-7356-7
bookid The Great Gatsby by F. Scott Fitzgerald
```

All arguments are joined with spaces into one query. If an ISBN-13 (starting
with 978 or 979) or an ISBN-10 appears anywhere in the query, an ISBN lookup
(`isbn:<digits>`) is made; otherwise the trimmed text is sent as a
natural-language search. Up to ten volumes are requested and the first one is
printed.

The output is JSON indented by two spaces, holding the query and the top
result:

```json
{
  "query": "9780743273565",
  "result": {
    "title": "The Great Gatsby",
    "authors": [
      "F. Scott Fitzgerald"
    ],
    "isbn10": "0743273567",
    "isbn13": "9780743273565",
    "publisher": "Simon and Schuster",
    "published_year": 2004,
    "language": "en",
    "google_books_volume_id": "...",
    "thumbnail_url": "https://...",
    "confidence": 0.95,
    "search_type": "isbn"
  }
}
```

When nothing is found, `result` is `null`. Empty optional fields (and a
published year of 0) are left out, and the raw volume data is not printed.
Thumbnail links starting with `http://` are rewritten to `https://`. The
published year is taken from dates such as `2004` or `2004-03-01` when it
lies between 1000 and 3000.

If the volume carries no ISBNs but the query held one, that ISBN is reported.

The `confidence` score starts at 0.95 for ISBN lookups and 0.70 for general
searches, and is multiplied by `0.7 + 0.3 * completeness`, where completeness
is the share of title, authors, identifiers and publisher that the volume has.

On failure the command prints `error: ...` to standard error and exits with
status 1. Running it without a query prints
`error: usage: bookid <search query>`.

### Environment

| Variable               | Meaning                                                        |
|------------------------|----------------------------------------------------------------|
| `GOOGLE_BOOKS_API_KEY` | API key sent with requests; no key is sent if unset            |
| `BOOKID_TIMEOUT`       | Request timeout as a duration such as `10s`, `1m30s`, `500ms`; default `30s` |

```
GOOGLE_BOOKS_API_KEY=placeholder BOOKID_TIMEOUT=10s bookid Pride and Prejudice
```

Durations accept the units `ns`, `us` (or `µs`), `ms`, `s`, `m` and `h`,
combined and with fractions. An unparsable `BOOKID_TIMEOUT` is ignored and
the default is used.

## Library use

Query analysis is available on its own:

```python
from bookid.parser import parse_query
from bookid.bookfinder import SearchType

query, search_type, isbn = parse_query("The Great Gatsby ISBN: 9780743273565")
assert query == "isbn:9780743273565"
assert search_type is SearchType.ISBN
assert isbn == "9780743273565"
```

`bookid.parser` also provides `clean_isbn`, `validate_isbn10` and
`validate_isbn13`.

`bookid.client.Client(api_key="", fetch=None, base_url=...)` is a
`bookid.bookfinder.BookFinder`. Its `search(query, timeout=None)` returns a
list of `bookid.bookfinder.BookResult` objects, each holding the raw volume
in `google_books_data`; an empty query raises `ValueError`. `fetch` may be
any callable taking a URL and a timeout and returning the response body, which
makes the client easy to drive without a network. `BookResult.to_dict()`
gives a JSON-ready mapping. The helpers `volume_to_book_result`,
`calculate_confidence`, `extract_year` and `ensure_https` are public too.

`bookid.cli` exposes `Config`, `parse_duration`, `load_config`,
`build_response`, `run` and `main` for embedding the command.

`bookid.book` defines the plain records `Work`, `Author`, `WorkAuthor` and
`Publication`.

`bookid.storage.DB(dsn, now=None, migrations=None)` opens an SQLite database
(a file path, whose parent directories are created, or `:memory:`), enables
WAL and foreign keys, and applies each migration once, in name order,
recording it in a `migrations` table. It works as a context manager, and
`begin_tx()` returns a `Tx` whose `now` is the start time in UTC truncated to
the second; in a `with` block it commits on success and rolls back on error.
`to_db_time` / `from_db_time` convert times to and from RFC 3339 text,
`format_limit_offset` builds `LIMIT`/`OFFSET` clauses, and `format_error`
maps unique-constraint failures to `conflict` and `LookupError` to
`not_found`.

Application errors are `bookid.errors.Error`, carrying a machine-readable
code such as `not_found` or `conflict`; `error_code()` and `error_message()`
extract these from any exception (following its `__cause__` chain), reporting
other exceptions as `internal` / `Internal error.`. `errorf(code, format,
*args)` builds one with `%`-style formatting.

## What it does not do

No database schema ships with the package: `DB` applies only the migrations
it is given (or `.sql` files placed in a `migration` directory beside the
module), and nothing stores works, authors or publications. The command
looks books up; it does not save them.

## Running the tests

```
pip install .[test]
pytest
```