"""Database connection, DDL, and low-level CRUD for user-dictionary.

The functions here are transition-agnostic: they store whatever state
they are given. Only :class:`user_dictionary.dictionary.UserDictionary`
decides which state changes are legal, and nothing else should write
word states directly.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from user_dictionary.exceptions import DatabaseError
from user_dictionary.models import LEARNED_STATES, WordContext, WordRecord, WordState

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1.0"

MATCH_MODES = ("prefix", "substring")

# ---------------------------------------------------------------------------
# DDL statements
# ---------------------------------------------------------------------------

_DDL = """
-- Meta table
CREATE TABLE IF NOT EXISTS meta (
    key TEXT NOT NULL,
    value TEXT,
    UNIQUE (key)
);

-- Learned and candidate words
CREATE TABLE IF NOT EXISTS words (
    id INTEGER PRIMARY KEY,
    text TEXT NOT NULL COLLATE NOCASE,
    locale TEXT NOT NULL,
    state TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS word_text_locale_index ON words (text, locale);

-- Context windows, one row per recorded usage
CREATE TABLE IF NOT EXISTS word_contexts (
    id INTEGER PRIMARY KEY,
    word_id INTEGER NOT NULL REFERENCES words (id) ON DELETE CASCADE,
    second_before TEXT,
    first_before TEXT,
    word TEXT NOT NULL,
    first_after TEXT,
    second_after TEXT,
    CHECK( second_before IS NULL OR first_before IS NOT NULL ),
    CHECK( second_after IS NULL OR first_after IS NOT NULL )
);
CREATE INDEX IF NOT EXISTS word_context_word_index ON word_contexts (word_id);
"""


@contextmanager
def _storage_errors(action: str) -> Generator[None, None, None]:
    """Re-raise any sqlite error as a :class:`DatabaseError`."""
    try:
        yield
    except sqlite3.Error as e:
        raise DatabaseError(f"Error {action}: {e}") from e


def connect(db_path: str | Path = ":memory:") -> sqlite3.Connection:
    """Open a database connection with user-dictionary PRAGMA settings.

    The connection may be used from the suggestion worker thread; callers
    are responsible for serializing access to it.
    """
    db_path_str = str(db_path)
    with _storage_errors(f"opening user dictionary at {db_path_str!r}"):
        conn = sqlite3.connect(db_path_str, check_same_thread=False)
        if db_path_str != ":memory:":
            conn.execute("PRAGMA journal_mode = WAL")
    configure(conn)
    return conn


def configure(conn: sqlite3.Connection) -> None:
    """Apply the settings every user-dictionary connection relies on.

    Needed for connections not opened through :func:`connect`: foreign keys
    drive the context cascade and rows are read by column name.
    """
    with _storage_errors("configuring user dictionary connection"):
        conn.execute("PRAGMA foreign_keys = ON")
    conn.row_factory = sqlite3.Row


def init_db(conn: sqlite3.Connection) -> None:
    """Initialize all tables if they don't exist. Set schema version."""
    with _storage_errors("creating user dictionary tables"):
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


def drop_tables(conn: sqlite3.Connection) -> None:
    """Drop every table. Test-support only."""
    with _storage_errors("dropping user dictionary tables"):
        conn.execute("DROP TABLE IF EXISTS word_contexts")
        conn.execute("DROP TABLE IF EXISTS words")
        conn.execute("DROP TABLE IF EXISTS meta")
        conn.commit()


# ---------------------------------------------------------------------------
# Word CRUD helpers
# ---------------------------------------------------------------------------

def _row_to_word(row: sqlite3.Row) -> WordRecord:
    return WordRecord(
        id=row["id"],
        text=row["text"],
        locale=row["locale"],
        state=WordState(row["state"]),
    )


def find_word(
    conn: sqlite3.Connection, text: str, locale: str
) -> WordRecord | None:
    """Get the word row matching ``text`` within ``locale``, or None."""
    with _storage_errors(f"finding word {text!r}"):
        row = conn.execute(
            "SELECT id, text, locale, state FROM words "
            "WHERE text = ? AND locale = ? ORDER BY id LIMIT 1",
            (text.lower(), locale),
        ).fetchone()
    return _row_to_word(row) if row else None


def insert_word(
    conn: sqlite3.Connection, text: str, locale: str, state: WordState
) -> int:
    """Insert a word (lower-cased) and return its id."""
    with _storage_errors(f"inserting word {text!r}"):
        cur = conn.execute(
            "INSERT INTO words (text, locale, state) VALUES (?, ?, ?)",
            (text.lower(), locale, WordState(state).value),
        )
    logger.debug(f"Inserted word {text.lower()!r} ({locale}) as {WordState(state).value}")
    return cur.lastrowid


def update_state(conn: sqlite3.Connection, word_id: int, state: WordState) -> None:
    """Overwrite a word's state without checking the transition."""
    with _storage_errors(f"updating state of word {word_id}"):
        conn.execute(
            "UPDATE words SET state = ? WHERE id = ?",
            (WordState(state).value, word_id),
        )
    logger.debug(f"Word {word_id} state set to {WordState(state).value}")


def delete_word(conn: sqlite3.Connection, text: str, locale: str) -> int:
    """Delete matching words and, by cascade, their contexts.

    Returns the number of word rows removed; zero is not an error.
    """
    with _storage_errors(f"deleting word {text!r}"):
        cur = conn.execute(
            "DELETE FROM words WHERE text = ? AND locale = ?",
            (text.lower(), locale),
        )
    return cur.rowcount


def list_learned_words(conn: sqlite3.Connection, locale: str) -> list[str]:
    """All learned words for a locale, case-insensitively sorted."""
    states = sorted(s.value for s in LEARNED_STATES)
    with _storage_errors("listing learned words"):
        rows = conn.execute(
            "SELECT text FROM words WHERE locale = ? AND state IN (?, ?) "
            "ORDER BY text COLLATE NOCASE",
            (locale, *states),
        ).fetchall()
    return [row["text"] for row in rows]


def _escape_like(value: str) -> str:
    return (
        value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    )


def find_learned_words(
    conn: sqlite3.Connection,
    query: str,
    locale: str,
    *,
    match: str = "prefix",
    first_before: str | None = None,
    limit: int | None = None,
) -> list[sqlite3.Row]:
    """Learned words matching ``query``, best first.

    Each row carries ``text``, ``usages`` (recorded contexts) and
    ``shared`` (contexts whose first_before equals ``first_before``).
    Rows are ordered by ``shared``, then ``usages``, then text.
    """
    if match not in MATCH_MODES:
        raise ValueError(f"Invalid match mode: {match!r}")
    pattern = _escape_like(query.lower())
    pattern = f"{pattern}%" if match == "prefix" else f"%{pattern}%"
    states = sorted(s.value for s in LEARNED_STATES)

    sql = (
        "SELECT w.text AS text, "
        "COUNT(c.id) AS usages, "
        "SUM(CASE WHEN c.first_before = ? COLLATE NOCASE THEN 1 ELSE 0 END) "
        "AS shared "
        "FROM words w LEFT JOIN word_contexts c ON c.word_id = w.id "
        "WHERE w.locale = ? AND w.state IN (?, ?) "
        "AND w.text LIKE ? ESCAPE '\\' "
        "GROUP BY w.text "
        "ORDER BY shared DESC, usages DESC, w.text COLLATE NOCASE"
    )
    params: list[Any] = [first_before, locale, *states, pattern]
    if limit is not None:
        sql += " LIMIT ?"
        params.append(limit)

    with _storage_errors(f"searching learned words for {query!r}"):
        return conn.execute(sql, params).fetchall()


# ---------------------------------------------------------------------------
# Context CRUD helpers
# ---------------------------------------------------------------------------

def insert_context(
    conn: sqlite3.Connection, context: WordContext, word_id: int
) -> int:
    """Store one context row owned by ``word_id`` and return its id."""
    with _storage_errors(f"inserting context for word {word_id}"):
        cur = conn.execute(
            "INSERT INTO word_contexts "
            "(word_id, second_before, first_before, word, first_after, second_after) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (
                word_id,
                context.second_before,
                context.first_before,
                context.word,
                context.first_after,
                context.second_after,
            ),
        )
    return cur.lastrowid


def list_contexts(
    conn: sqlite3.Connection, text: str, locale: str
) -> list[WordContext]:
    """All contexts of a word in insertion order; empty if it is unknown."""
    record = find_word(conn, text, locale)
    if record is None:
        return []
    with _storage_errors(f"listing contexts for {text!r}"):
        rows = conn.execute(
            "SELECT second_before, first_before, word, first_after, second_after "
            "FROM word_contexts WHERE word_id = ? ORDER BY id",
            (record.id,),
        ).fetchall()
    return [
        WordContext(
            word=row["word"],
            second_before=row["second_before"],
            first_before=row["first_before"],
            first_after=row["first_after"],
            second_after=row["second_after"],
        )
        for row in rows
    ]


def dump_rows(conn: sqlite3.Connection) -> dict[str, list[dict[str, Any]]]:
    """Raw rows of both tables, for fixtures and debugging."""
    with _storage_errors("dumping user dictionary rows"):
        words = conn.execute("SELECT * FROM words ORDER BY id").fetchall()
        contexts = conn.execute(
            "SELECT * FROM word_contexts ORDER BY id"
        ).fetchall()
    return {
        "words": [dict(row) for row in words],
        "word_contexts": [dict(row) for row in contexts],
    }
