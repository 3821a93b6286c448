"""
Lookup result type and the remote source contract.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Protocol


@dataclass(frozen=True)
class Lookup:
    """Outcome of a remote fetch: either a detail or absent.
    
    Not-found and service failure are deliberately the same outcome. The
    reason is informational and only used for logging.
    """
    detail: Optional[Any] = None
    reason: Optional[str] = None

    @classmethod
    def found(cls, detail: Any) -> "Lookup":
        if detail is None:
            raise ValueError("found lookup requires a detail")
        return cls(detail=detail)

    @classmethod
    def absent(cls, reason: str = "not found") -> "Lookup":
        return cls(detail=None, reason=reason)

    @property
    def is_absent(self) -> bool:
        return self.detail is None


class RemoteSource(Protocol):
    """Fetch-by-id contract of one auxiliary domain.
    
    Implementations translate every transport or lookup failure into
    ``Lookup.absent`` instead of raising.
    """

    def fetch_by_id(self, id: int) -> Lookup:
        ...


class StaticRemoteSource:
    """Remote source answering from a fixed mapping.
    
    Ids missing from the mapping are absent. Records every requested id in
    ``calls``.
    """

    def __init__(self, details: Optional[Mapping[int, Any]] = None):
        self._details: Dict[int, Any] = dict(details or {})
        self.calls = []

    def fetch_by_id(self, id: int) -> Lookup:
        self.calls.append(id)
        detail = self._details.get(id)
        if detail is None:
            return Lookup.absent(f"no detail for id {id}")
        return Lookup.found(detail)
