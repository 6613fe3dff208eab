"""
Configuration module.

Exports:
    settings: Application settings instance
    get_settings: Function to get settings (for dependency injection)
    db: Function to get the in-memory database
    get_database: Same as db
    check_connection: Health check function
"""

from config.settings import settings, get_settings, Settings
from config.database import (
    db,
    get_database,
    check_connection,
    reset_database,
    Database,
    Table,
    DatabaseError,
)

__all__ = [
    # Settings
    "settings",
    "get_settings",
    "Settings",

    # Database
    "db",
    "get_database",
    "check_connection",
    "reset_database",
    "Database",
    "Table",
    "DatabaseError",
]
