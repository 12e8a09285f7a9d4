"""SQLite storage with migrations and timestamped transactions."""

from __future__ import annotations

import sqlite3
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from bookid.errors import ECONFLICT, ENOTFOUND, errorf

_MIGRATION_DIR = Path(__file__).with_name("migration")
_UNIQUE_FAILED = "UNIQUE constraint failed"


def _bundled_migrations() -> dict[str, str]:
    if not _MIGRATION_DIR.is_dir():
        return {}
    return {
        f"migration/{path.name}": path.read_text(encoding="utf-8")
        for path in _MIGRATION_DIR.glob("*.sql")
    }


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DB:
    """A SQLite database that applies pending migrations when opened."""

    def __init__(
        self,
        dsn: str,
        now: Callable[[], datetime] | None = None,
        migrations: Mapping[str, str] | None = None,
    ) -> None:
        self.dsn = dsn
        self.now = now or _utc_now
        self.migrations = (
            dict(migrations) if migrations is not None else _bundled_migrations()
        )
        self._conn: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise sqlite3.ProgrammingError("database is not open")
        return self._conn

    def open(self) -> None:
        """Connect, enable WAL and foreign keys, then run migrations."""
        if not self.dsn:
            raise ValueError("dsn required")

        if self.dsn != ":memory:":
            Path(self.dsn).parent.mkdir(mode=0o700, parents=True, exist_ok=True)

        self._conn = sqlite3.connect(self.dsn, isolation_level=None)

        try:
            self._conn.execute("PRAGMA journal_mode = wal;")
        except sqlite3.Error as exc:
            raise RuntimeError(f"enable wal: {exc}") from exc
        try:
            self._conn.execute("PRAGMA foreign_keys = ON;")
        except sqlite3.Error as exc:
            raise RuntimeError(f"foreign keys pragma: {exc}") from exc
        try:
            self._migrate()
        except Exception as exc:
            raise RuntimeError(f"migrate: {exc}") from exc

    def _migrate(self) -> None:
        conn = self.connection
        try:
            conn.execute("CREATE TABLE IF NOT EXISTS migrations (name TEXT PRIMARY KEY);")
        except sqlite3.Error as exc:
            raise RuntimeError(f"cannot create migrations table: {exc}") from exc

        for name in sorted(self.migrations):
            try:
                self._migrate_file(name, self.migrations[name])
            except sqlite3.Error as exc:
                raise RuntimeError(f"migration error: name={name!r} err={exc}") from exc

    def _migrate_file(self, name: str, sql: str) -> None:
        conn = self.connection
        (count,) = conn.execute(
            "SELECT COUNT(*) FROM migrations WHERE name = ?", (name,)
        ).fetchone()
        if count:
            return

        quoted = name.replace("'", "''")
        script = (
            f"BEGIN;\n{sql}\n;\n"
            f"INSERT INTO migrations (name) VALUES ('{quoted}');\nCOMMIT;"
        )
        try:
            conn.executescript(script)
        except sqlite3.Error:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise

    def close(self) -> None:
        """Close the connection if it is open."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def begin_tx(self) -> Tx:
        """Start a transaction stamped with the current time to the second."""
        now = self.now().astimezone(timezone.utc).replace(microsecond=0)
        return Tx(self.connection, self, now)

    def __enter__(self) -> DB:
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class Tx:
    """A transaction carrying the timestamp at which it started."""

    def __init__(self, conn: sqlite3.Connection, db: DB, now: datetime) -> None:
        self._conn = conn
        self.db = db
        self.now = now
        self._done = False
        conn.execute("BEGIN")

    def _check_open(self) -> None:
        if self._done:
            raise sqlite3.ProgrammingError(
                "transaction has already been committed or rolled back"
            )

    def execute(self, sql: str, params: Any = ()) -> sqlite3.Cursor:
        """Run one statement inside the transaction."""
        self._check_open()
        return self._conn.execute(sql, params)

    def commit(self) -> None:
        self._check_open()
        self._conn.execute("COMMIT")
        self._done = True

    def rollback(self) -> None:
        """Roll back; does nothing once the transaction has finished."""
        if self._done:
            return
        self._done = True
        self._conn.execute("ROLLBACK")

    def __enter__(self) -> Tx:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None and not self._done:
            self.commit()
        else:
            self.rollback()


def _is_zero_time(value: datetime) -> bool:
    return (value.year, value.month, value.day) == (1, 1, 1) and value.time() == datetime.min.time()


def to_db_time(value: datetime | None) -> str | None:
    """Format a time as RFC 3339 in UTC; a missing or zero time is NULL."""
    if value is None or _is_zero_time(value):
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def from_db_time(value: Any) -> datetime | None:
    """Read an RFC 3339 time from the database; NULL or unparsable text is None."""
    if value is None:
        return None
    if isinstance(value, str):
        text = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        if parsed.tzinfo is None:
            return None
        return parsed
    raise TypeError(f"NullTime: cannot scan to time.Time: {type(value).__name__}")


def format_limit_offset(limit: int, offset: int) -> str:
    """Return a LIMIT/OFFSET clause, with only the parts greater than zero."""
    if limit > 0 and offset > 0:
        return f"LIMIT {limit} OFFSET {offset}"
    if limit > 0:
        return f"LIMIT {limit}"
    if offset > 0:
        return f"OFFSET {offset}"
    return ""


def format_error(err: BaseException | None) -> BaseException | None:
    """Map storage errors onto application errors where one fits.

    Unique-constraint failures become conflicts and a missing row
    (LookupError) becomes not-found; anything else is returned unchanged.
    """
    if err is None:
        return None
    message = str(err)
    if message == _UNIQUE_FAILED or (
        isinstance(err, sqlite3.IntegrityError) and message.startswith(_UNIQUE_FAILED)
    ):
        return errorf(ECONFLICT, "Resource already exists.")
    if isinstance(err, LookupError):
        return errorf(ENOTFOUND, "Resource not found.")
    return err