"""
Composite key for favourites.

A favourite is addressed by (user id, product id, like date). When the like
date crosses a textual boundary it always uses the fixed
``DD-MM-YYYY__HH:mm:ss:SSSSSS`` pattern.
"""

from dataclasses import dataclass
from datetime import datetime

from .errors import InvalidKeyError

LIKE_DATE_FORMAT = "%d-%m-%Y__%H:%M:%S:%f"


def format_like_date(value: datetime) -> str:
    """Render a like date in the fixed textual format."""
    return value.strftime(LIKE_DATE_FORMAT)


def parse_like_date(text: str) -> datetime:
    """Parse a like date from the fixed textual format.

    Args:
        text: Date string such as ``15-01-2023__10:30:00:000000``

    Returns:
        Parsed naive datetime

    Raises:
        InvalidKeyError: If the text does not match the format exactly
    """
    if not isinstance(text, str):
        raise InvalidKeyError(f"like date must be a string, got {type(text).__name__}")
    try:
        return datetime.strptime(text, LIKE_DATE_FORMAT)
    except ValueError:
        raise InvalidKeyError(
            f"like date '{text}' does not match format DD-MM-YYYY__HH:mm:ss:SSSSSS"
        )


def _require_id(name: str, value) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidKeyError(f"{name} must be an integer, got {value!r}")
    return value


@dataclass(frozen=True)
class FavouriteId:
    """Immutable composite key of a favourite."""
    user_id: int
    product_id: int
    like_date: datetime

    def __post_init__(self):
        """Validate key components."""
        _require_id("user_id", self.user_id)
        _require_id("product_id", self.product_id)
        if not isinstance(self.like_date, datetime):
            raise InvalidKeyError(f"like_date must be a datetime, got {self.like_date!r}")

    def __str__(self) -> str:
        return (
            f"(userId={self.user_id}, productId={self.product_id}, "
            f"likeDate={format_like_date(self.like_date)})"
        )

    def to_path(self) -> str:
        """Render the key as ``user_id/product_id/like_date`` path segments."""
        return f"{self.user_id}/{self.product_id}/{format_like_date(self.like_date)}"

    @classmethod
    def from_parts(cls, user_id: str, product_id: str, like_date: str) -> "FavouriteId":
        """Build a key from its three textual components.

        Raises:
            InvalidKeyError: If any component is malformed
        """
        try:
            uid = int(user_id)
            pid = int(product_id)
        except (TypeError, ValueError):
            raise InvalidKeyError(
                f"user id and product id must be integers, got {user_id!r}, {product_id!r}"
            )
        return cls(user_id=uid, product_id=pid, like_date=parse_like_date(like_date))

    @classmethod
    def from_path(cls, path: str) -> "FavouriteId":
        """Parse a key previously rendered by :meth:`to_path`."""
        parts = path.strip("/").split("/")
        if len(parts) != 3:
            raise InvalidKeyError(f"expected 'userId/productId/likeDate', got '{path}'")
        return cls.from_parts(*parts)
