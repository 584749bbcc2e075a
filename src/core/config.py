"""
Configuration for the inspection use-case store.
All values come from environment variables with local-first defaults.
"""

import os
from pathlib import Path

# Database path configuration (holds the local key-value slot table)
DB_PATH = os.getenv("DB_PATH", "./data/inspection.db")

# Fixed slot key under which the whole use-case collection is stored
STORAGE_KEY = os.getenv("STORAGE_KEY", "inspectionUseCases")

# Storage backend for the default store
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "sqlite")  # sqlite|memory

# Debug flag is also available as a function to be dynamic
DEBUG = os.getenv("DEBUG", "false").lower() == "true"

# Version string
VERSION = "1.0.0"

VALID_BACKENDS = ["sqlite", "memory"]


def get_db_path() -> str:
    """Get the configured SQLite path (re-read so tests can override it)."""
    return os.getenv("DB_PATH", DB_PATH)


def get_storage_key() -> str:
    """Get the slot key for the use-case collection."""
    return os.getenv("STORAGE_KEY", STORAGE_KEY)


def get_storage_backend() -> str:
    """Get storage backend (sqlite|memory)."""
    return os.getenv("STORAGE_BACKEND", STORAGE_BACKEND).lower()


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def ensure_db_directory(db_path: str = None):
    """Ensure the database directory exists."""
    Path(db_path or get_db_path()).expanduser().parent.mkdir(parents=True, exist_ok=True)


def validate_config():
    """Validate storage configuration and return any issues."""
    issues = []

    if get_storage_backend() not in VALID_BACKENDS:
        issues.append(f"Invalid STORAGE_BACKEND: {get_storage_backend()}")

    if not get_storage_key().strip():
        issues.append("STORAGE_KEY must not be empty")

    if get_storage_backend() == "sqlite" and not get_db_path().strip():
        issues.append("DB_PATH must not be empty when STORAGE_BACKEND=sqlite")

    return issues
