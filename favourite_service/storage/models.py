"""
Data models for storage layer.

Defines the persisted favourite record, the remote detail records and the
aggregate assembled on read.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from favourite_service.core.keys import FavouriteId


@dataclass(frozen=True)
class Favourite:
    """Persisted fact that a user liked a product at a point in time.
    
    Re-persisting the same key overwrites the stored record.
    """
    user_id: int
    product_id: int
    like_date: datetime

    def __post_init__(self):
        """Validate fields with the same rules as the composite key."""
        FavouriteId(self.user_id, self.product_id, self.like_date)

    @property
    def key(self) -> FavouriteId:
        return FavouriteId(self.user_id, self.product_id, self.like_date)


@dataclass(frozen=True)
class UserDetail:
    """User detail owned by the user service."""
    user_id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    image_url: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "UserDetail":
        """Build from the user service JSON body."""
        return cls(
            user_id=int(payload["userId"]),
            first_name=payload.get("firstName"),
            last_name=payload.get("lastName"),
            email=payload.get("email"),
            phone=payload.get("phone"),
            image_url=payload.get("imageUrl"),
        )


@dataclass(frozen=True)
class ProductDetail:
    """Product detail owned by the product service."""
    product_id: int
    product_title: Optional[str] = None
    image_url: Optional[str] = None
    sku: Optional[str] = None
    price_unit: Optional[float] = None
    quantity: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ProductDetail":
        """Build from the product service JSON body."""
        price = payload.get("priceUnit")
        quantity = payload.get("quantity")
        return cls(
            product_id=int(payload["productId"]),
            product_title=payload.get("productTitle"),
            image_url=payload.get("imageUrl"),
            sku=payload.get("sku"),
            price_unit=float(price) if price is not None else None,
            quantity=int(quantity) if quantity is not None else None,
        )


@dataclass(frozen=True)
class FavouriteAggregate:
    """A favourite plus whatever remote detail could be obtained.
    
    ``details`` maps a source name to its detail, or to None when that
    source had nothing for us. Details are attached on read only and are
    never persisted.
    """
    user_id: int
    product_id: int
    like_date: datetime
    details: Dict[str, Optional[Any]] = field(default_factory=dict, hash=False)

    @property
    def key(self) -> FavouriteId:
        return FavouriteId(self.user_id, self.product_id, self.like_date)

    @property
    def user(self) -> Optional[UserDetail]:
        return self.details.get("user")

    @property
    def product(self) -> Optional[ProductDetail]:
        return self.details.get("product")

    def missing_sources(self) -> List[str]:
        """Names of sources whose detail is absent."""
        return [name for name, detail in self.details.items() if detail is None]
