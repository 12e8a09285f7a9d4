"""Application errors carrying a machine-readable code."""

from __future__ import annotations

ECONFLICT = "conflict"
EINTERNAL = "internal"
EINVALID = "invalid"
ENOTFOUND = "not_found"
ENOTIMPLEMENTED = "not_implemented"
EUNAUTHORIZED = "unauthorized"


class Error(Exception):
    """An application error with a code and a human-readable message."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(code, message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"bookid error: code={self.code} message={self.message}"


def _find_app_error(err: BaseException) -> Error | None:
    seen: set[int] = set()
    current: BaseException | None = err
    while current is not None and id(current) not in seen:
        if isinstance(current, Error):
            return current
        seen.add(id(current))
        current = current.__cause__
    return None


def error_code(err: BaseException | None) -> str:
    """Return the code of an application error; other errors are internal."""
    if err is None:
        return ""
    found = _find_app_error(err)
    return found.code if found is not None else EINTERNAL


def error_message(err: BaseException | None) -> str:
    """Return the message of an application error; others read 'Internal error.'."""
    if err is None:
        return ""
    found = _find_app_error(err)
    return found.message if found is not None else "Internal error."


def errorf(code: str, format: str, *args: object) -> Error:
    """Build an Error whose message is format filled in with args."""
    message = format % args if args else format
    return Error(code, message)