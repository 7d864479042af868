"""
SQLite database integration and simple migration system.

``get_connection`` opens a new connection per unit of work,
``get_cursor`` wraps one in a commit-and-close context manager and
``init_db`` applies the versioned migrations at application start.
Applied versions are recorded in the ``migrations`` table; append new
migrations to ``MIGRATIONS`` with an incremented version number.
"""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .config import settings

MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: accounts and audit trail
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS professional_accounts (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            username TEXT NOT NULL UNIQUE,
            email TEXT,
            business_name TEXT,
            is_professional INTEGER NOT NULL DEFAULT 1,
            primary_service_category TEXT NOT NULL DEFAULT '',
            -- JSON array of strings, sorted, never containing the primary
            additional_service_categories TEXT NOT NULL DEFAULT '[]',
            -- Decimal amounts are stored as text to keep exact cents
            monthly_fee TEXT,
            fee_override TEXT,
            subscription_status TEXT NOT NULL DEFAULT 'trial',
            stripe_customer_id TEXT,
            version INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS audit_logs (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            actor TEXT,
            action TEXT NOT NULL,
            object_type TEXT,
            object_id INTEGER,
            timestamp TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            details TEXT
        );
        """,
    ),
    # Migration 2: lookups used by the audit endpoint
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_audit_logs_object ON audit_logs(object_type, object_id);
        CREATE INDEX IF NOT EXISTS idx_audit_logs_action ON audit_logs(action);
        """,
    ),
]


def get_database_path() -> str:
    """Compute the path to the SQLite database file.

    Absolute paths in ``settings.database_url`` are used as is; relative
    ones are resolved against the project root.
    """
    db_url = settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent  # pro_directory_api/
    return str((base_dir / db_url).resolve())


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` so columns can be read by name.
    ``settings.database_timeout`` bounds how long a writer waits for a
    concurrent ``BEGIN IMMEDIATE`` transaction to finish.
    """
    conn = sqlite3.connect(get_database_path(), timeout=settings.database_timeout)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Yield a cursor, commit on success and always close the connection."""
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    finally:
        conn.close()


def init_db() -> None:
    """Create the database if needed and apply pending migrations."""
    with get_cursor() as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version
