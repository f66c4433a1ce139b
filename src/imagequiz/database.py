import sqlite3
import os
from contextlib import contextmanager

from .config import settings
from .errors import StorageError


def get_db_connection():
    """Establishes a connection to the SQLite database."""
    db_path = os.path.join(settings.DB_DIR, settings.DB_FILE)
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def transaction():
    """
    Yields a connection inside a transaction and closes it afterwards.
    Any sqlite3 failure is re-raised as StorageError.
    """
    try:
        conn = get_db_connection()
    except sqlite3.Error as e:
        raise StorageError(f"Could not open database: {e}") from e
    try:
        with conn:
            yield conn
    except sqlite3.Error as e:
        raise StorageError(f"Database error: {e}") from e
    finally:
        conn.close()


def create_log_table(conn):
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS logs (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            timestamp DATETIME DEFAULT CURRENT_TIMESTAMP,
            level TEXT,
            logger TEXT,
            message TEXT
        );
    """
    )


def create_image_table(conn):
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS images (
            id TEXT PRIMARY KEY,
            image_path TEXT NOT NULL,
            is_correct INTEGER NOT NULL,
            created_at TEXT NOT NULL
        );
    """
    )


def create_progress_table(conn):
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS quiz_progress (
            session_id TEXT PRIMARY KEY,
            shown_image_ids TEXT NOT NULL DEFAULT '[]',
            updated_at TEXT NOT NULL
        );
    """
    )


def create_user_table(conn):
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            username TEXT NOT NULL UNIQUE,
            password_hash TEXT NOT NULL,
            created_at DATETIME DEFAULT CURRENT_TIMESTAMP
        );
    """
    )


def init_db():
    """Initializes the database and creates necessary tables."""
    if not os.path.exists(settings.DB_DIR):
        os.makedirs(settings.DB_DIR)
    with transaction() as conn:
        create_log_table(conn)
        create_image_table(conn)
        create_progress_table(conn)
        create_user_table(conn)
