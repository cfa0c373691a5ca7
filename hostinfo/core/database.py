"""
Database Management Module

Binds the application to its relational store:
- SQLite connection management from the configured connection setting
- Identity schema (users, roles, user_roles)
- Integrity checks
"""

import sqlite3
import threading
import logging
from contextlib import nullcontext
from pathlib import Path

logger = logging.getLogger("hostinfo")

IDENTITY_SCHEMA = (
    '''CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_name TEXT NOT NULL,
        normalized_user_name TEXT NOT NULL UNIQUE,
        email TEXT,
        password_hash TEXT NOT NULL,
        created_at TEXT NOT NULL
    )''',
    '''CREATE TABLE IF NOT EXISTS roles (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        normalized_name TEXT NOT NULL UNIQUE
    )''',
    '''CREATE TABLE IF NOT EXISTS user_roles (
        user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        role_id INTEGER NOT NULL REFERENCES roles(id) ON DELETE CASCADE,
        PRIMARY KEY (user_id, role_id)
    )''',
)


class ApplicationDatabase:
    """
    Application storage bound to a caller-supplied connection setting.

    The connection is a sqlite file path or ':memory:'. File databases get a
    new connection per unit of work; an in-memory database keeps one shared
    connection so its tables survive between calls.
    """

    def __init__(self, connection):
        self.connection = str(connection)
        self._memory_conn = None
        self._lock = threading.Lock()

    @property
    def is_memory(self):
        return self.connection == ':memory:'

    def connect(self):
        """Open a connection with dict-like rows and foreign keys enabled."""
        if self.is_memory:
            if self._memory_conn is None:
                self._memory_conn = sqlite3.connect(':memory:', check_same_thread=False)
                self._memory_conn.row_factory = sqlite3.Row
                self._memory_conn.execute('PRAGMA foreign_keys = ON')
            return self._memory_conn

        Path(self.connection).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.connection)
        conn.row_factory = sqlite3.Row
        conn.execute('PRAGMA foreign_keys = ON')
        return conn

    def release(self, conn):
        if conn is not self._memory_conn:
            conn.close()

    def execute(self, work):
        """
        Run work(conn) inside a transaction and return its result.

        Commits on success, rolls back and re-raises on failure.
        """
        with self._lock if self.is_memory else nullcontext():
            conn = self.connect()
            try:
                result = work(conn)
                conn.commit()
                return result
            except Exception:
                conn.rollback()
                raise
            finally:
                self.release(conn)

    def ensure_schema(self):
        """Create identity tables if they do not exist yet."""
        def _create(conn):
            for statement in IDENTITY_SCHEMA:
                conn.execute(statement)
        self.execute(_create)
        logger.info(f"Database schema ready ({self.connection})")

    def integrity_check(self):
        """
        Run PRAGMA integrity_check.

        Returns:
            str: 'ok' when the database is healthy, otherwise the reported problem
        """
        row = self.execute(lambda conn: conn.execute('PRAGMA integrity_check').fetchone())
        return (row and row[0]) or 'unknown'

    def close(self):
        if self._memory_conn is not None:
            self._memory_conn.close()
            self._memory_conn = None

