"""
SQLite database integration.

This module provides functions for opening a connection
(``get_connection``), a cursor context manager that commits on success
(``get_cursor``) and the schema bootstrap run on server start
(``init_db``).  Nothing here holds a process-wide handle: callers pass
the database path explicitly, which lets tests run several isolated
stores side by side.

Any ``sqlite3.Error`` raised while a cursor is open is re-raised as
``StoreError`` so the layers above can tell backend failures apart from
domain-rule failures.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from typing import Iterator

from .errors import StoreError

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS schools (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS persons (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    role TEXT NOT NULL DEFAULT 'unassigned',
    school_id INTEGER DEFAULT NULL,
    FOREIGN KEY(school_id) REFERENCES schools(id)
);

CREATE TABLE IF NOT EXISTS classes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    school_id INTEGER NOT NULL,
    teacher_id INTEGER NOT NULL,
    FOREIGN KEY(school_id) REFERENCES schools(id),
    FOREIGN KEY(teacher_id) REFERENCES persons(id)
);

CREATE TABLE IF NOT EXISTS class_students (
    class_id INTEGER NOT NULL,
    person_id INTEGER NOT NULL,
    PRIMARY KEY (class_id, person_id),
    FOREIGN KEY(class_id) REFERENCES classes(id),
    FOREIGN KEY(person_id) REFERENCES persons(id)
);

CREATE INDEX IF NOT EXISTS idx_classes_teacher_id ON classes(teacher_id);
CREATE INDEX IF NOT EXISTS idx_class_students_person_id ON class_students(person_id);
"""


def get_database_path(database_url: str) -> str:
    """Compute the path to the SQLite database file.

    Absolute paths are returned unchanged; relative ones are resolved
    against the current working directory.
    """
    if os.path.isabs(database_url):
        return database_url
    return os.path.abspath(database_url)


def get_connection(db_path: str, timeout: float = 5.0) -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` so columns can be read by
    name, and foreign key enforcement is switched on (SQLite leaves it
    off per connection by default).
    """
    try:
        conn = sqlite3.connect(db_path, timeout=timeout)
    except sqlite3.Error as exc:
        raise StoreError(f"cannot open database: {exc}") from exc
    try:
        conn.execute("PRAGMA foreign_keys = ON")
    except sqlite3.Error as exc:
        conn.close()
        raise StoreError(f"cannot open database: {exc}") from exc
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_cursor(db_path: str, timeout: float = 5.0) -> Iterator[sqlite3.Cursor]:
    """Yield a cursor, commit on success and always close the connection."""
    conn = get_connection(db_path, timeout)
    try:
        yield conn.cursor()
        conn.commit()
    except (sqlite3.Error, OverflowError) as exc:
        # OverflowError: an int parameter beyond the 64-bit INTEGER range.
        conn.rollback()
        raise StoreError(f"storage error: {exc}") from exc
    finally:
        conn.close()


def init_db(db_path: str, timeout: float = 5.0) -> None:
    """Create the four registry relations if they do not exist yet."""
    with get_cursor(db_path, timeout) as cursor:
        cursor.executescript(SCHEMA)
    logger.info("Database ready at %s", db_path)
