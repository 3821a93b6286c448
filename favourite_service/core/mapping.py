"""
Mapping between persisted favourites and aggregates.
"""

from typing import Any, Mapping, Optional

from favourite_service.storage.models import Favourite, FavouriteAggregate


def to_record(aggregate: FavouriteAggregate) -> Favourite:
    """Reduce an aggregate to its persisted form; details are discarded."""
    return Favourite(
        user_id=aggregate.user_id,
        product_id=aggregate.product_id,
        like_date=aggregate.like_date
    )


def to_aggregate(
    record: Favourite,
    details: Optional[Mapping[str, Optional[Any]]] = None
) -> FavouriteAggregate:
    """Wrap a persisted favourite with the given per-source details."""
    return FavouriteAggregate(
        user_id=record.user_id,
        product_id=record.product_id,
        like_date=record.like_date,
        details=dict(details or {})
    )
