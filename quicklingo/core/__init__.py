"""
Core module - Persistence utilities

This module provides:
- database: app configuration storage
- schema: database initialization and version tracking
"""

from quicklingo.core.database import (
    DB_FILE,
    get_connection,
    get_app_config,
    set_app_config,
    get_all_app_config,
    delete_app_config,
)

from quicklingo.core.schema import (
    DB_VERSION,
    get_db_version,
    set_db_version,
    initialize_database,
)
