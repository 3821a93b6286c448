"""
Wiring of the aggregator from configuration.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

import httpx

from favourite_service.config.loader import ServiceConfig
from favourite_service.sources.http_client import HttpRemoteSource
from favourite_service.storage.models import ProductDetail, UserDetail
from favourite_service.storage.repository import RecordStore, SQLiteFavouriteRepository
from .aggregation import FavouriteAggregator, SourceBinding


def build_aggregator(
    config: ServiceConfig,
    client: httpx.Client,
    store: Optional[RecordStore] = None
) -> FavouriteAggregator:
    """Create an aggregator bound to the user and product services.
    
    Args:
        config: Validated service configuration
        client: HTTP client shared by both sources
        store: Record store; defaults to the configured SQLite database
    """
    user_source = HttpRemoteSource(
        config.get_source("user"), UserDetail.from_payload, client=client
    )
    product_source = HttpRemoteSource(
        config.get_source("product"), ProductDetail.from_payload, client=client
    )
    return FavouriteAggregator(
        store=store or SQLiteFavouriteRepository(config.database.path),
        bindings=[
            SourceBinding("user", user_source, lambda record: record.user_id),
            SourceBinding("product", product_source, lambda record: record.product_id),
        ],
        max_workers=config.aggregation.max_workers
    )


@contextmanager
def open_aggregator(
    config: ServiceConfig,
    store: Optional[RecordStore] = None
) -> Iterator[FavouriteAggregator]:
    """Yield a configured aggregator and close its HTTP client afterwards."""
    with httpx.Client() as client:
        yield build_aggregator(config, client, store=store)
