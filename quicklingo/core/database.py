"""
Database CRUD Operations Module

QuickLingo only persists application configuration: a handful of
key/value rows in the app_config table.

For schema management, see core/schema.py
"""

import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict

DB_FILE = Path(__file__).parent.parent / "quicklingo.db"


def get_connection():
    """Get a database connection."""
    return sqlite3.connect(DB_FILE)


# ============================================================
# App Config CRUD Operations
# ============================================================

def get_app_config(key: str) -> Optional[str]:
    """Get a configuration value by key."""
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT value FROM app_config WHERE key = ?", (key,))
        row = cursor.fetchone()
        return row[0] if row else None


def set_app_config(key: str, value: str):
    """Set a configuration value."""
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS app_config (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        cursor.execute("""
            INSERT OR REPLACE INTO app_config (key, value, updated_at)
            VALUES (?, ?, ?)
        """, (key, value, datetime.now().isoformat(sep=" ")))
        conn.commit()


def get_all_app_config() -> Dict[str, str]:
    """Get all configuration values."""
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT key, value FROM app_config")
        return {row[0]: row[1] for row in cursor.fetchall()}


def delete_app_config(key: str) -> bool:
    """Delete a configuration value. Returns True if a row was removed."""
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("DELETE FROM app_config WHERE key = ?", (key,))
        conn.commit()
        return cursor.rowcount > 0
