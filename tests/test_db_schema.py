import sqlite3

import pytest

from lexin_sqlite.db import SCHEMA_VERSION, check_schema_version, open_database
from lexin_sqlite.exceptions import DatabaseError


def test_incompatible_schema_version():
    """Test that check_schema_version raises DatabaseError for incompatible version."""
    conn = sqlite3.connect(":memory:")
    conn.execute("CREATE TABLE meta (key TEXT, value TEXT)")
    conn.execute("INSERT INTO meta (key, value) VALUES ('schema_version', '99.9')")

    with pytest.raises(DatabaseError, match=rf"Incompatible schema version: 99.9 \(expected {SCHEMA_VERSION}\)"):
        check_schema_version(conn)
    conn.close()


def test_uninitialized_database():
    """Test that check_schema_version returns for uninitialized database (no meta table)."""
    conn = sqlite3.connect(":memory:")
    try:
        check_schema_version(conn)
    except Exception as e:
        pytest.fail(f"check_schema_version raised unexpected exception: {e}")
    conn.close()


def test_compatible_schema_version():
    """Test that check_schema_version passes for compatible version."""
    conn = sqlite3.connect(":memory:")
    conn.execute("CREATE TABLE meta (key TEXT, value TEXT)")
    conn.execute("INSERT INTO meta (key, value) VALUES ('schema_version', ?)", (SCHEMA_VERSION,))

    try:
        check_schema_version(conn)
    except Exception as e:
        pytest.fail(f"check_schema_version raised unexpected exception: {e}")
    conn.close()


def test_open_database_rejects_incompatible_store(tmp_path):
    """open_database refuses a store written by another schema version."""
    path = tmp_path / "old.db"
    conn = sqlite3.connect(path)
    conn.execute("CREATE TABLE meta (key TEXT NOT NULL, value TEXT, UNIQUE (key))")
    conn.execute("INSERT INTO meta (key, value) VALUES ('schema_version', '0.1')")
    conn.commit()
    conn.close()

    with pytest.raises(DatabaseError):
        open_database(path)


def test_open_database_wraps_sqlite_errors(tmp_path):
    """A path that cannot be opened surfaces as DatabaseError."""
    with pytest.raises(DatabaseError):
        open_database(tmp_path / "missing-dir" / "nested" / "lexin.db")
