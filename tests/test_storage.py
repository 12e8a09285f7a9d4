import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from bookid.errors import ECONFLICT, ENOTFOUND, Error, error_code
from bookid.storage import (
    DB,
    format_error,
    format_limit_offset,
    format_limit_offset as _flo,  # noqa: F401
    from_db_time,
    to_db_time,
)

MIGRATIONS = {
    "migration/00000000000001.sql": "CREATE TABLE books (id INTEGER PRIMARY KEY, isbn TEXT UNIQUE);",
    "migration/00000000000002.sql": "CREATE TABLE notes (book_id INTEGER REFERENCES books(id));",
}


def must_open_db(dsn=":memory:", **kwargs):
    db = DB(dsn, **kwargs)
    db.open()
    return db


def test_db_open_close():
    db = must_open_db()
    tables = {
        row[0]
        for row in db.connection.execute("SELECT name FROM sqlite_master WHERE type='table'")
    }
    assert "migrations" in tables
    db.close()
    with pytest.raises(sqlite3.ProgrammingError):
        db.begin_tx()


def test_open_requires_dsn():
    with pytest.raises(ValueError, match="dsn required"):
        DB("").open()


def test_migrations_run_in_order_once(tmp_path):
    dsn = str(tmp_path / "nested" / "db")
    with DB(dsn, migrations=MIGRATIONS) as db:
        names = [r[0] for r in db.connection.execute("SELECT name FROM migrations ORDER BY name")]
        assert names == sorted(MIGRATIONS)
        mode = db.connection.execute("PRAGMA journal_mode").fetchone()[0]
        assert mode == "wal"

    with DB(dsn, migrations=MIGRATIONS) as db:
        (count,) = db.connection.execute("SELECT COUNT(*) FROM migrations").fetchone()
        assert count == 2


def test_failed_migration_is_rolled_back():
    migrations = {"migration/1.sql": "CREATE TABLE a (x INTEGER); THIS IS NOT SQL;"}
    db = DB(":memory:", migrations=migrations)
    with pytest.raises(RuntimeError, match="migration error"):
        db.open()
    tables = {r[0] for r in db.connection.execute("SELECT name FROM sqlite_master")}
    assert "a" not in tables
    (count,) = db.connection.execute("SELECT COUNT(*) FROM migrations").fetchone()
    assert count == 0
    db.close()


def test_foreign_keys_enforced():
    db = must_open_db(migrations=MIGRATIONS)
    with pytest.raises(sqlite3.IntegrityError):
        with db.begin_tx() as tx:
            tx.execute("INSERT INTO notes (book_id) VALUES (?)", (42,))
    db.close()


def test_begin_tx_timestamp_truncated_to_utc_second():
    fixed = datetime(2024, 5, 6, 9, 30, 15, 987654, tzinfo=timezone(timedelta(hours=2)))
    db = must_open_db(now=lambda: fixed)
    tx = db.begin_tx()
    assert tx.now == datetime(2024, 5, 6, 7, 30, 15, tzinfo=timezone.utc)
    tx.rollback()
    db.close()


def test_tx_commit_and_rollback():
    db = must_open_db(migrations=MIGRATIONS)
    with db.begin_tx() as tx:
        tx.execute("INSERT INTO books (isbn) VALUES (?)", ("0743273567",))

    tx = db.begin_tx()
    tx.execute("INSERT INTO books (isbn) VALUES (?)", ("9780743273565",))
    tx.rollback()
    tx.rollback()

    rows = db.connection.execute("SELECT isbn FROM books").fetchall()
    assert rows == [("0743273567",)]

    with pytest.raises(sqlite3.ProgrammingError):
        tx.commit()
    db.close()


def test_unique_violation_maps_to_conflict():
    db = must_open_db(migrations=MIGRATIONS)
    with db.begin_tx() as tx:
        tx.execute("INSERT INTO books (isbn) VALUES (?)", ("0743273567",))
    with pytest.raises(sqlite3.IntegrityError) as info:
        with db.begin_tx() as tx:
            tx.execute("INSERT INTO books (isbn) VALUES (?)", ("0743273567",))
    mapped = format_error(info.value)
    assert isinstance(mapped, Error)
    assert mapped.code == ECONFLICT
    assert mapped.message == "Resource already exists."
    db.close()


def test_format_error_cases():
    assert format_error(None) is None
    assert error_code(format_error(Exception("UNIQUE constraint failed"))) == ECONFLICT
    not_found = format_error(LookupError("no rows"))
    assert not_found.code == ENOTFOUND
    assert not_found.message == "Resource not found."
    other = OSError("disk error")
    assert format_error(other) is other


@pytest.mark.parametrize(
    "limit, offset, expected",
    [
        (10, 20, "LIMIT 10 OFFSET 20"),
        (10, 0, "LIMIT 10"),
        (0, 20, "OFFSET 20"),
        (0, 0, ""),
        (-1, -1, ""),
    ],
)
def test_format_limit_offset(limit, offset, expected):
    assert format_limit_offset(limit, offset) == expected


def test_time_round_trip():
    moment = datetime(2015, 10, 26, 12, 0, 5, tzinfo=timezone.utc)
    text = to_db_time(moment)
    assert text == "2015-10-26T12:00:05Z"
    assert from_db_time(text) == moment


def test_time_null_and_zero():
    assert to_db_time(None) is None
    assert to_db_time(datetime(1, 1, 1, tzinfo=timezone.utc)) is None
    assert from_db_time(None) is None
    assert from_db_time("not a time") is None
    with pytest.raises(TypeError, match="NullTime"):
        from_db_time(12345)