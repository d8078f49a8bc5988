"""
Database Schema Management Module

This module handles database initialization and version tracking.
For CRUD operations, see core/database.py
"""

import sqlite3

# Go through the module so that tests can monkeypatch DB_FILE
import quicklingo.core.database as db

DB_VERSION = 1


def get_connection():
    """Get a database connection using the database module's DB_FILE."""
    return db.get_connection()


def get_db_version() -> int:
    """Get current database version."""
    try:
        with get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT version FROM db_version LIMIT 1")
            row = cursor.fetchone()
            return row[0] if row else 0
    except sqlite3.OperationalError:
        return 0


def set_db_version(version: int):
    """Set database version."""
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("CREATE TABLE IF NOT EXISTS db_version (version INTEGER)")
        cursor.execute("DELETE FROM db_version")
        cursor.execute("INSERT INTO db_version (version) VALUES (?)", (version,))
        conn.commit()


def ensure_app_config_schema():
    """Create the app_config table if it is missing."""
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS app_config (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        conn.commit()


def initialize_database():
    """Initializes the database and creates the tables."""
    from quicklingo.logger import get_logger
    logger = get_logger(__name__)

    current_version = get_db_version()
    ensure_app_config_schema()

    if current_version != DB_VERSION:
        set_db_version(DB_VERSION)
        logger.info(f"Database schema set to version {DB_VERSION} (was {current_version})")
    else:
        logger.debug(f"Database schema is up to date (version {DB_VERSION})")
