"""Command line: look a book up and print the best match as JSON."""

from __future__ import annotations

import dataclasses
import json
import os
import re
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, TextIO

from bookid.bookfinder import BookResult
from bookid.client import Client

DEFAULT_TIMEOUT = 30.0
USAGE = "usage: bookid <search query>"

_UNIT_NANOS = {
    "ns": 1,
    "us": 1_000,
    "\u00b5s": 1_000,
    "\u03bcs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}
_PART = re.compile(r"([0-9]*(?:\.[0-9]*)?)([^0-9.]*)")


@dataclass
class Config:
    """Settings taken from the environment."""

    google_books_api_key: str = ""
    timeout: float = DEFAULT_TIMEOUT


def parse_duration(text: str) -> float:
    """Parse a duration such as '1h30m' or '250ms' into seconds."""
    rest = text
    sign = 1
    if rest[:1] in ("+", "-"):
        sign = -1 if rest[0] == "-" else 1
        rest = rest[1:]
    if rest == "0":
        return 0.0
    if not rest:
        raise ValueError(f"invalid duration {text!r}")

    total = Decimal(0)
    pos = 0
    while pos < len(rest):
        match = _PART.match(rest, pos)
        number, unit = match.groups()
        if number in ("", "."):
            raise ValueError(f"invalid duration {text!r}")
        if not unit:
            raise ValueError(f"missing unit in duration {text!r}")
        if unit not in _UNIT_NANOS:
            raise ValueError(f"unknown unit {unit!r} in duration {text!r}")
        total += Decimal(number) * _UNIT_NANOS[unit]
        pos = match.end()

    return sign * int(total) / 1_000_000_000


def load_config(environ: Mapping[str, str] | None = None) -> Config:
    """Read the API key and an optional timeout override."""
    env = os.environ if environ is None else environ
    config = Config(google_books_api_key=env.get("GOOGLE_BOOKS_API_KEY", ""))
    timeout_text = env.get("BOOKID_TIMEOUT", "")
    if timeout_text:
        try:
            config.timeout = parse_duration(timeout_text)
        except ValueError:
            pass
    return config


def build_response(query: str, results: Sequence[BookResult]) -> dict[str, Any]:
    """Return the output document: the query and the top result, if any."""
    if not results:
        return {"query": query, "result": None}
    top = dataclasses.replace(results[0], google_books_data=None)
    return {"query": query, "result": top.to_dict()}


def run(
    argv: Sequence[str] | None = None,
    stdout: TextIO | None = None,
    environ: Mapping[str, str] | None = None,
    client: Any = None,
) -> None:
    """Search for the words of argv and write the JSON response."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        raise ValueError(USAGE)
    out = sys.stdout if stdout is None else stdout

    query = " ".join(args)
    config = load_config(environ)
    finder = client if client is not None else Client(config.google_books_api_key)

    try:
        results = finder.search(query, timeout=config.timeout)
    except Exception as exc:
        raise RuntimeError(f"searching for books: {exc}") from exc

    out.write(json.dumps(build_response(query, results), indent=2, ensure_ascii=False))
    out.write("\n")


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point: returns the process exit status."""
    try:
        run(argv)
    except Exception as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0