"""
Database connection management.

Provides SQLite connection for favourite persistence.
"""

import sqlite3
from pathlib import Path


def get_connection(db_path: str = "favourites.db") -> sqlite3.Connection:
    """Open a SQLite connection to the favourites database.
    
    Args:
        db_path: Path to SQLite database file
    """
    return sqlite3.connect(str(Path(db_path)))
