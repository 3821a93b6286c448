"""
Repository pattern for favourite data access.

Handles keyed lookup, upsert and delete of favourite records.
"""

from datetime import datetime
from typing import Dict, List, Optional, Protocol

from favourite_service.core.keys import FavouriteId
from .db import get_connection
from .models import Favourite


class RecordStore(Protocol):
    """Keyed CRUD contract consumed by the aggregator.
    
    Storage failures propagate to the caller unmodified.
    """

    def get(self, key: FavouriteId) -> Optional[Favourite]:
        ...

    def get_all(self) -> List[Favourite]:
        ...

    def put(self, record: Favourite) -> Favourite:
        ...

    def delete(self, key: FavouriteId) -> None:
        ...


class SQLiteFavouriteRepository:
    """Favourite repository backed by the ``favourites`` SQLite table.
    
    Each operation opens its own connection, so an instance is safe to share
    between concurrent requests.
    """
    
    def __init__(self, db_path: str = "favourites.db"):
        """Initialize the repository with a database path.
        
        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
    
    def get(self, key: FavouriteId) -> Optional[Favourite]:
        """Fetch the favourite stored under ``key``.
        
        Returns:
            The stored favourite, or None if there is none
        """
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute("""
                SELECT user_id, product_id, like_date
                FROM favourites
                WHERE user_id = ? AND product_id = ? AND like_date = ?
            """, (key.user_id, key.product_id, key.like_date.isoformat()))
            row = cursor.fetchone()
            return _row_to_favourite(row) if row else None
        finally:
            conn.close()
    
    def get_all(self) -> List[Favourite]:
        """Fetch every favourite ordered by user, product and like date."""
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute("""
                SELECT user_id, product_id, like_date
                FROM favourites
                ORDER BY user_id, product_id, like_date
            """)
            return [_row_to_favourite(row) for row in cursor.fetchall()]
        finally:
            conn.close()
    
    def put(self, record: Favourite) -> Favourite:
        """Insert or overwrite a favourite.
        
        Returns:
            The favourite as persisted
        """
        conn = get_connection(self.db_path)
        try:
            conn.execute("""
                INSERT OR REPLACE INTO favourites (user_id, product_id, like_date)
                VALUES (?, ?, ?)
            """, (record.user_id, record.product_id, record.like_date.isoformat()))
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
        return record
    
    def delete(self, key: FavouriteId) -> None:
        """Delete the favourite under ``key``; a missing key is a no-op."""
        conn = get_connection(self.db_path)
        try:
            conn.execute("""
                DELETE FROM favourites
                WHERE user_id = ? AND product_id = ? AND like_date = ?
            """, (key.user_id, key.product_id, key.like_date.isoformat()))
            conn.commit()
        finally:
            conn.close()


class InMemoryFavouriteRepository:
    """Dictionary-backed repository, mainly for tests and demos."""

    def __init__(self, records: Optional[List[Favourite]] = None):
        self._records: Dict[FavouriteId, Favourite] = {}
        for record in records or []:
            self.put(record)

    def get(self, key: FavouriteId) -> Optional[Favourite]:
        return self._records.get(key)

    def get_all(self) -> List[Favourite]:
        return sorted(
            self._records.values(),
            key=lambda r: (r.user_id, r.product_id, r.like_date)
        )

    def put(self, record: Favourite) -> Favourite:
        self._records[record.key] = record
        return record

    def delete(self, key: FavouriteId) -> None:
        self._records.pop(key, None)


def _row_to_favourite(row) -> Favourite:
    return Favourite(
        user_id=row[0],
        product_id=row[1],
        like_date=datetime.fromisoformat(row[2])
    )


def initialize_schema(db_path: str = "favourites.db") -> None:
    """Create the favourites table if it doesn't exist.
    
    The composite primary key guarantees at most one favourite per
    (user, product, like date).
    
    Args:
        db_path: Path to SQLite database file
    """
    conn = get_connection(db_path)
    try:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS favourites (
                user_id INTEGER NOT NULL,
                product_id INTEGER NOT NULL,
                like_date TEXT NOT NULL,
                PRIMARY KEY (user_id, product_id, like_date)
            )
        """)
        conn.commit()
    finally:
        conn.close()
