"""
Favourite aggregation.

Loads a favourite from the record store and hydrates it with detail from
every configured remote source. Lookups run concurrently on a per-call
thread pool.

Failure policy:
1. Missing favourite - fatal, raises FavouriteNotFoundError before any
   remote call is made
2. Storage error - fatal, propagated unmodified
3. Absent or failing remote lookup - non-fatal, that one detail is None
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

import structlog

from favourite_service.config.loader import DEFAULT_MAX_WORKERS
from favourite_service.sources.base import Lookup, RemoteSource
from favourite_service.storage.models import Favourite, FavouriteAggregate
from favourite_service.storage.repository import RecordStore
from .errors import FavouriteNotFoundError
from .keys import FavouriteId
from .mapping import to_aggregate, to_record

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SourceBinding:
    """A remote source plus how to derive its lookup id from a favourite."""
    name: str
    source: RemoteSource
    select_id: Callable[[Favourite], int]


class FavouriteAggregator:
    """Best-effort assembly of favourites with user and product detail.
    
    An aggregate is always returned when the favourite exists, however many
    remote lookups came back absent.
    """
    
    def __init__(
        self,
        store: RecordStore,
        bindings: Sequence[SourceBinding],
        max_workers: int = DEFAULT_MAX_WORKERS
    ):
        """Initialize the aggregator.
        
        Args:
            store: Record store holding the favourites
            bindings: Remote sources, one per detail field
            max_workers: Upper bound on concurrent remote lookups per call
            
        Raises:
            ValueError: If binding names repeat or max_workers < 1
        """
        names = [binding.name for binding in bindings]
        if len(set(names)) != len(names):
            raise ValueError(f"source names must be unique, got {names}")
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        
        self.store = store
        self.bindings = list(bindings)
        self.max_workers = max_workers
    
    @property
    def source_names(self) -> List[str]:
        return [binding.name for binding in self.bindings]
    
    def find_all(self) -> List[FavouriteAggregate]:
        """Hydrate every stored favourite, in store order."""
        records = self.store.get_all()
        return self._hydrate(records)
    
    def find_by_id(self, key: FavouriteId) -> FavouriteAggregate:
        """Hydrate the favourite stored under ``key``.
        
        Raises:
            FavouriteNotFoundError: If no favourite exists for the key
        """
        record = self.store.get(key)
        if record is None:
            logger.info("favourite_not_found", key=str(key))
            raise FavouriteNotFoundError(key)
        return self._hydrate([record])[0]
    
    def save(self, aggregate: FavouriteAggregate) -> FavouriteAggregate:
        """Persist the base favourite of ``aggregate``.
        
        Details on the input are ignored. The result carries no details;
        call find_by_id to hydrate it.
        """
        persisted = self.store.put(to_record(aggregate))
        logger.info("favourite_saved", key=str(persisted.key))
        return self._bare(persisted)
    
    def update(self, aggregate: FavouriteAggregate) -> FavouriteAggregate:
        """Overwrite the favourite under the aggregate's key."""
        persisted = self.store.put(to_record(aggregate))
        logger.info("favourite_updated", key=str(persisted.key))
        return self._bare(persisted)
    
    def delete_by_id(self, key: FavouriteId) -> bool:
        """Delete the favourite under ``key``. Missing keys are not an error."""
        self.store.delete(key)
        logger.info("favourite_deleted", key=str(key))
        return True
    
    def _bare(self, record: Favourite) -> FavouriteAggregate:
        return to_aggregate(record, {name: None for name in self.source_names})
    
    def _hydrate(self, records: Sequence[Favourite]) -> List[FavouriteAggregate]:
        if not records or not self.bindings:
            return [self._bare(record) for record in records]
        
        workers = min(self.max_workers, len(records) * len(self.bindings))
        executor = ThreadPoolExecutor(
            max_workers=workers,
            thread_name_prefix="favourite-lookup"
        )
        try:
            pending = [
                [(binding, executor.submit(self._fetch, binding, record))
                 for binding in self.bindings]
                for record in records
            ]
            aggregates = []
            for record, futures in zip(records, pending):
                details: Dict[str, Optional[Any]] = {
                    binding.name: future.result() for binding, future in futures
                }
                aggregates.append(to_aggregate(record, details))
        except BaseException:
            # Interrupted while waiting: drop queued lookups, ignore late results
            executor.shutdown(wait=False, cancel_futures=True)
            raise
        executor.shutdown(wait=True)
        return aggregates
    
    def _fetch(self, binding: SourceBinding, record: Favourite) -> Optional[Any]:
        lookup_id = None
        try:
            lookup_id = binding.select_id(record)
            lookup = binding.source.fetch_by_id(lookup_id)
        except Exception:
            logger.exception(
                "auxiliary_lookup_failed",
                source=binding.name,
                lookup_id=lookup_id,
                key=str(record.key)
            )
            return None
        
        if not isinstance(lookup, Lookup):
            reason = "no result" if lookup is None else f"unexpected result {type(lookup).__name__}"
            lookup = Lookup.absent(reason)
        if lookup.is_absent:
            logger.warning(
                "auxiliary_lookup_absent",
                source=binding.name,
                lookup_id=lookup_id,
                key=str(record.key),
                reason=lookup.reason
            )
            return None
        return lookup.detail
