"""
SQLite foundation for the local key-value slot table.
"""

import sqlite3
from contextlib import contextmanager
from typing import Generator, Optional
from .config import get_db_path, ensure_db_directory


@contextmanager
def get_db(db_path: Optional[str] = None) -> Generator[sqlite3.Connection, None, None]:
    """Get a SQLite database connection."""
    path = db_path or get_db_path()
    ensure_db_directory(path)
    conn = sqlite3.connect(path)
    try:
        yield conn
    finally:
        conn.close()


def init_db(db_path: Optional[str] = None):
    """Initialize the database with the slot table."""
    with get_db(db_path) as conn:
        cursor = conn.cursor()

        # One row per slot; the value is an opaque serialized blob
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS slots (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')

        conn.commit()


def health_check(db_path: Optional[str] = None) -> bool:
    """Check database health."""
    try:
        with get_db(db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT name FROM sqlite_master WHERE type='table';")
            table_names = [table[0] for table in cursor.fetchall()]
            return 'slots' in table_names
    except sqlite3.Error:
        return False
