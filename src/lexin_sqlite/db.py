"""Database connection, DDL, and low-level queries for lexin-sqlite."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from lexin_sqlite.exceptions import DatabaseError
from lexin_sqlite.models import IndexType, ReferenceType

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1.0"
DEFAULT_DB_PATH = "lexin.db"


def _sql_in_list(values: type) -> str:
    return ", ".join(f"'{v.value}'" for v in values)


# ---------------------------------------------------------------------------
# DDL statements
# ---------------------------------------------------------------------------

# Shared child tables (antonyms, examples, idioms, compounds, derivations)
# belong to exactly one base_langs or target_langs row.
_OWNER_COLUMNS = """
    base_lang_id INTEGER REFERENCES base_langs (id) ON DELETE CASCADE,
    target_lang_id INTEGER REFERENCES target_langs (id) ON DELETE CASCADE,
    CHECK ((base_lang_id IS NULL) <> (target_lang_id IS NULL))"""

_DDL = """
-- Meta table
CREATE TABLE IF NOT EXISTS meta (
    key TEXT NOT NULL,
    value TEXT,
    UNIQUE (key)
);

-- Dictionaries and words
CREATE TABLE IF NOT EXISTS dictionaries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    base_lang TEXT NOT NULL,
    target_lang TEXT NOT NULL,
    version TEXT NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    UNIQUE (base_lang, target_lang)
);
CREATE INDEX IF NOT EXISTS idx_dictionary_langs ON dictionaries (base_lang, target_lang);

CREATE TABLE IF NOT EXISTS words (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    dictionary_id INTEGER NOT NULL REFERENCES dictionaries (id) ON DELETE CASCADE,
    value TEXT NOT NULL,
    variant TEXT,
    type TEXT NOT NULL,
    original_id TEXT NOT NULL,
    variant_id TEXT NOT NULL,
    matching_id TEXT
);
CREATE INDEX IF NOT EXISTS idx_word_value ON words (value);

-- Senses
CREATE TABLE IF NOT EXISTS base_langs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    word_id INTEGER NOT NULL REFERENCES words (id) ON DELETE CASCADE,
    meaning TEXT,
    matching_id TEXT
);

CREATE TABLE IF NOT EXISTS target_langs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    word_id INTEGER NOT NULL REFERENCES words (id) ON DELETE CASCADE,
    comment TEXT
);

-- Base language children
CREATE TABLE IF NOT EXISTS "references" (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    base_lang_id INTEGER NOT NULL REFERENCES base_langs (id) ON DELETE CASCADE,
    type TEXT NOT NULL CHECK (type IN ({reference_types})),
    value TEXT NOT NULL,
    matching_id TEXT
);

CREATE TABLE IF NOT EXISTS comments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    base_lang_id INTEGER NOT NULL REFERENCES base_langs (id) ON DELETE CASCADE,
    content TEXT NOT NULL,
    matching_id TEXT
);

CREATE TABLE IF NOT EXISTS explanations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    base_lang_id INTEGER NOT NULL REFERENCES base_langs (id) ON DELETE CASCADE,
    content TEXT NOT NULL,
    matching_id TEXT
);

CREATE TABLE IF NOT EXISTS alternates (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    base_lang_id INTEGER NOT NULL REFERENCES base_langs (id) ON DELETE CASCADE,
    content TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS usages (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    base_lang_id INTEGER NOT NULL REFERENCES base_langs (id) ON DELETE CASCADE,
    content TEXT NOT NULL,
    matching_id TEXT
);

CREATE TABLE IF NOT EXISTS phonetics (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    base_lang_id INTEGER NOT NULL REFERENCES base_langs (id) ON DELETE CASCADE,
    content TEXT,
    file TEXT
);

CREATE TABLE IF NOT EXISTS illustrations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    base_lang_id INTEGER NOT NULL REFERENCES base_langs (id) ON DELETE CASCADE,
    type TEXT NOT NULL,
    value TEXT NOT NULL,
    norlexin TEXT
);

CREATE TABLE IF NOT EXISTS inflections (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    base_lang_id INTEGER NOT NULL REFERENCES base_langs (id) ON DELETE CASCADE,
    content TEXT
);

CREATE TABLE IF NOT EXISTS inflection_variants (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    inflection_id INTEGER NOT NULL REFERENCES inflections (id) ON DELETE CASCADE,
    content TEXT NOT NULL,
    description TEXT
);

CREATE TABLE IF NOT EXISTS graminfos (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    base_lang_id INTEGER NOT NULL REFERENCES base_langs (id) ON DELETE CASCADE,
    content TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS indexes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    base_lang_id INTEGER NOT NULL REFERENCES base_langs (id) ON DELETE CASCADE,
    value TEXT NOT NULL,
    type TEXT CHECK (type IN ({index_types}))
);

-- Children shared by both sense kinds
CREATE TABLE IF NOT EXISTS antonyms (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    value TEXT NOT NULL,{owner_columns}
);

CREATE TABLE IF NOT EXISTS examples (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    content TEXT NOT NULL,
    original_id TEXT NOT NULL,
    matching_id TEXT,{owner_columns}
);

CREATE TABLE IF NOT EXISTS idioms (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    content TEXT NOT NULL,
    original_id TEXT NOT NULL,
    matching_id TEXT,{owner_columns}
);

CREATE TABLE IF NOT EXISTS compounds (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    content TEXT,
    original_id TEXT NOT NULL,
    description TEXT,
    matching_id TEXT,{owner_columns}
);

CREATE TABLE IF NOT EXISTS compound_inflections (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    compound_id INTEGER NOT NULL REFERENCES compounds (id) ON DELETE CASCADE,
    content TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS derivations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    content TEXT,
    original_id TEXT NOT NULL,
    description TEXT,{owner_columns}
);

CREATE TABLE IF NOT EXISTS derivation_inflections (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    derivation_id INTEGER NOT NULL REFERENCES derivations (id) ON DELETE CASCADE,
    content TEXT NOT NULL
);

-- Target language children
CREATE TABLE IF NOT EXISTS translations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    target_lang_id INTEGER NOT NULL REFERENCES target_langs (id) ON DELETE CASCADE,
    content TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_translation_content ON translations (content);

CREATE TABLE IF NOT EXISTS synonyms (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    target_lang_id INTEGER NOT NULL REFERENCES target_langs (id) ON DELETE CASCADE,
    content TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS target_comments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    target_lang_id INTEGER NOT NULL REFERENCES target_langs (id) ON DELETE CASCADE,
    content TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS target_explanations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    target_lang_id INTEGER NOT NULL REFERENCES target_langs (id) ON DELETE CASCADE,
    content TEXT NOT NULL
);
""".format(
    reference_types=_sql_in_list(ReferenceType),
    index_types=_sql_in_list(IndexType),
    owner_columns=_OWNER_COLUMNS,
)

# Every table the loader writes, parents before children.
TABLES = (
    "dictionaries",
    "words",
    "base_langs",
    "target_langs",
    "references",
    "comments",
    "explanations",
    "alternates",
    "usages",
    "phonetics",
    "illustrations",
    "inflections",
    "inflection_variants",
    "graminfos",
    "indexes",
    "antonyms",
    "examples",
    "idioms",
    "compounds",
    "compound_inflections",
    "derivations",
    "derivation_inflections",
    "translations",
    "synonyms",
    "target_comments",
    "target_explanations",
)

SHARED_CHILD_TABLES = ("antonyms", "examples", "idioms", "compounds", "derivations")


def connect(db_path: str | Path = ":memory:") -> sqlite3.Connection:
    """Open a database connection with importer PRAGMA settings."""
    db_path_str = str(db_path)
    conn = sqlite3.connect(db_path_str)
    conn.execute("PRAGMA foreign_keys = ON")
    if db_path_str != ":memory:":
        conn.execute("PRAGMA journal_mode = WAL")
        conn.execute("PRAGMA synchronous = NORMAL")
    conn.row_factory = sqlite3.Row
    return conn


def init_db(conn: sqlite3.Connection) -> None:
    """Initialize all tables if they don't exist. Set schema version."""
    conn.executescript(_DDL)
    conn.execute(
        "INSERT OR IGNORE INTO meta (key, value) VALUES ('schema_version', ?)",
        (SCHEMA_VERSION,),
    )
    conn.execute(
        "INSERT OR IGNORE INTO meta (key, value) "
        "VALUES ('created_at', strftime('%Y-%m-%dT%H:%M:%f', 'now'))",
    )
    conn.commit()


def check_schema_version(conn: sqlite3.Connection) -> None:
    """Verify the database schema version is compatible."""
    try:
        row = conn.execute(
            "SELECT value FROM meta WHERE key = 'schema_version'"
        ).fetchone()
    except sqlite3.OperationalError:
        # meta table doesn't exist - uninitialized DB
        return
    if row is None:
        return
    version = row[0]
    if version != SCHEMA_VERSION:
        raise DatabaseError(
            f"Incompatible schema version: {version} "
            f"(expected {SCHEMA_VERSION})"
        )


def open_database(db_path: str | Path = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Connect, verify the schema version and create any missing tables."""
    try:
        conn = connect(db_path)
    except sqlite3.Error as e:
        raise DatabaseError(f"Failed to open database {str(db_path)!r}: {e}") from e
    try:
        check_schema_version(conn)
        init_db(conn)
    except DatabaseError:
        conn.close()
        raise
    except sqlite3.Error as e:
        conn.close()
        raise DatabaseError(f"Failed to initialize schema: {e}") from e
    logger.debug(f"Opened database {str(db_path)!r}")
    return conn


@contextmanager
def transaction(conn: sqlite3.Connection) -> Generator[sqlite3.Connection, None, None]:
    """Run the block inside one exclusive write transaction.

    Commits when the block finishes, rolls back on any exception.
    """
    conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn
        conn.commit()
    except BaseException:
        conn.rollback()
        raise


# ---------------------------------------------------------------------------
# Dictionary helpers
# ---------------------------------------------------------------------------

def get_dictionary_by_languages(
    conn: sqlite3.Connection, base_lang: str, target_lang: str
) -> sqlite3.Row | None:
    """Get a dictionary row by its language pair, or None."""
    return conn.execute(
        "SELECT id, base_lang, target_lang, version FROM dictionaries "
        "WHERE base_lang = ? AND target_lang = ?",
        (base_lang, target_lang),
    ).fetchone()


def create_dictionary(
    conn: sqlite3.Connection, base_lang: str, target_lang: str, version: str
) -> int:
    """Insert a dictionary row and return its id."""
    cur = conn.execute(
        "INSERT INTO dictionaries (base_lang, target_lang, version) "
        "VALUES (?, ?, ?)",
        (base_lang, target_lang, version),
    )
    return cur.lastrowid


def count_dictionary_entries(conn: sqlite3.Connection, dictionary_id: int) -> int:
    """Count the words stored under a dictionary."""
    row = conn.execute(
        "SELECT COUNT(*) FROM words WHERE dictionary_id = ?",
        (dictionary_id,),
    ).fetchone()
    return row[0]
