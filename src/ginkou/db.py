"""Database connection, DDL, and low-level CRUD for ginkou."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from ginkou.exceptions import StorageError

SCHEMA_VERSION = "1.0"

# Number of sentences returned by a lookup unless the caller asks otherwise
DEFAULT_LIMIT = 200

# ---------------------------------------------------------------------------
# DDL statements
# ---------------------------------------------------------------------------

_DDL = """
CREATE TABLE IF NOT EXISTS meta (
    key TEXT NOT NULL,
    value TEXT,
    UNIQUE (key)
);

CREATE TABLE IF NOT EXISTS words (
    id INTEGER PRIMARY KEY,
    word TEXT NOT NULL,
    UNIQUE (word)
);

CREATE TABLE IF NOT EXISTS sentences (
    id INTEGER PRIMARY KEY,
    sentence TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS word_sentence (
    word_id INTEGER NOT NULL REFERENCES words (id),
    sentence_id INTEGER NOT NULL REFERENCES sentences (id),
    PRIMARY KEY (word_id, sentence_id)
);
CREATE INDEX IF NOT EXISTS word_sentence_sentence_index
    ON word_sentence (sentence_id);
"""

_LOOKUP_SQL = """
SELECT sentences.sentence FROM sentences
JOIN word_sentence ON word_sentence.sentence_id = sentences.id
JOIN words ON words.id = word_sentence.word_id
WHERE words.word = ?
ORDER BY length(sentences.sentence)
"""


def connect(db_path: str | Path = ":memory:") -> sqlite3.Connection:
    """Open a database connection with sentence bank PRAGMA settings."""
    db_path_str = str(db_path)
    try:
        if db_path_str != ":memory:":
            Path(db_path_str).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(db_path_str)
        conn.execute("PRAGMA foreign_keys = ON")
        if db_path_str != ":memory:":
            conn.execute("PRAGMA journal_mode = WAL")
    except (sqlite3.Error, OSError) as e:
        raise StorageError(f"Cannot open database {db_path_str!r}: {e}") from e
    conn.row_factory = sqlite3.Row
    return conn


def init_db(conn: sqlite3.Connection) -> None:
    """Initialize all tables if they don't exist. Set schema version."""
    try:
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
    except sqlite3.Error as e:
        raise StorageError(f"Cannot initialize database: {e}") from e


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
        raise StorageError(
            f"Incompatible schema version: {version} "
            f"(expected {SCHEMA_VERSION})"
        )


# ---------------------------------------------------------------------------
# Sentence helpers
# ---------------------------------------------------------------------------

def add_sentence(conn: sqlite3.Connection, sentence: str) -> int:
    """Insert a sentence row and return its id. Never deduplicates."""
    cur = conn.execute(
        "INSERT INTO sentences (sentence) VALUES (?)",
        (sentence,),
    )
    return cur.lastrowid


def get_sentence_row(conn: sqlite3.Connection, sentence_id: int) -> sqlite3.Row | None:
    """Get a sentence row by id."""
    return conn.execute(
        "SELECT id, sentence FROM sentences WHERE id = ?",
        (sentence_id,),
    ).fetchone()


# ---------------------------------------------------------------------------
# Word helpers
# ---------------------------------------------------------------------------

def get_or_create_word(conn: sqlite3.Connection, word: str) -> int:
    """Get the id for a word, inserting if needed."""
    conn.execute(
        "INSERT OR IGNORE INTO words (word) VALUES (?)",
        (word,),
    )
    row = conn.execute(
        "SELECT id FROM words WHERE word = ?",
        (word,),
    ).fetchone()
    return row[0]


def get_word_row(conn: sqlite3.Connection, word: str) -> sqlite3.Row | None:
    """Get a word row by its exact text, or None."""
    return conn.execute(
        "SELECT id, word FROM words WHERE word = ?",
        (word,),
    ).fetchone()


def link_word(conn: sqlite3.Connection, word_id: int, sentence_id: int) -> None:
    """Associate a word with a sentence. Existing links are left alone."""
    conn.execute(
        "INSERT OR IGNORE INTO word_sentence (word_id, sentence_id) VALUES (?, ?)",
        (word_id, sentence_id),
    )


def words_for_sentence(conn: sqlite3.Connection, sentence_id: int) -> list[str]:
    """Return the word forms linked to a sentence, oldest word first."""
    rows = conn.execute(
        "SELECT words.word FROM words "
        "JOIN word_sentence ON word_sentence.word_id = words.id "
        "WHERE word_sentence.sentence_id = ? "
        "ORDER BY words.id",
        (sentence_id,),
    ).fetchall()
    return [row[0] for row in rows]


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

def matching_sentences(
    conn: sqlite3.Connection,
    word: str,
    limit: int | None = DEFAULT_LIMIT,
) -> list[str]:
    """Sentences linked to ``word``, shortest first.

    ``length()`` counts characters, not bytes, for TEXT values.
    ``limit=None`` returns every match.
    """
    if limit is None:
        rows = conn.execute(_LOOKUP_SQL, (word,)).fetchall()
    else:
        rows = conn.execute(_LOOKUP_SQL + "LIMIT ?", (word, limit)).fetchall()
    return [row[0] for row in rows]


def count_rows(conn: sqlite3.Connection) -> tuple[int, int, int]:
    """Return (words, sentences, links) row counts."""
    words = conn.execute("SELECT COUNT(*) FROM words").fetchone()[0]
    sentences = conn.execute("SELECT COUNT(*) FROM sentences").fetchone()[0]
    links = conn.execute("SELECT COUNT(*) FROM word_sentence").fetchone()[0]
    return words, sentences, links
