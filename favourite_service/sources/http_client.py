"""
HTTP remote source.

Fetches a detail record with ``GET {base_url}/{id}`` and folds every kind of
failure into an absent lookup.
"""

from typing import Any, Callable, Mapping, Optional

import httpx
import structlog

from ..config.loader import SourceConfig
from .base import Lookup

logger = structlog.get_logger(__name__)


class HttpRemoteSource:
    """Remote source backed by a sibling service's REST API.
    
    The endpoint comes from an explicit SourceConfig. Timeouts, connection
    errors, non-2xx responses, empty bodies and payloads that cannot be
    parsed all produce ``Lookup.absent``; nothing is raised to the caller.
    """
    
    def __init__(
        self,
        config: SourceConfig,
        parse: Callable[[Mapping[str, Any]], Any],
        client: Optional[httpx.Client] = None
    ):
        """Initialize the source.
        
        Args:
            config: Endpoint configuration
            parse: Maps the decoded JSON body to a detail record
            client: Optional preconfigured httpx client (owned by the caller)
        """
        self.config = config
        self.parse = parse
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=config.timeout)
    
    @property
    def name(self) -> str:
        return self.config.name
    
    def url_for(self, id: int) -> str:
        return f"{self.config.base_url}/{id}"
    
    def fetch_by_id(self, id: int) -> Lookup:
        """Fetch one detail record.
        
        Args:
            id: Id of the record in the remote service
            
        Returns:
            Lookup.found with the parsed detail, otherwise Lookup.absent
        """
        url = self.url_for(id)
        logger.debug("remote_fetch", source=self.name, url=url)
        try:
            response = self.client.get(url, timeout=self.config.timeout)
        except httpx.HTTPError as e:
            return Lookup.absent(f"transport error: {e.__class__.__name__}: {e}")
        
        if response.status_code == 404:
            return Lookup.absent("not found")
        if not response.is_success:
            return Lookup.absent(f"unexpected status {response.status_code}")
        if not response.content.strip():
            return Lookup.absent("empty body")
        
        try:
            payload = response.json()
        except ValueError:
            return Lookup.absent("body is not valid JSON")
        if payload is None:
            return Lookup.absent("null body")
        if not isinstance(payload, dict):
            return Lookup.absent(f"expected a JSON object, got {type(payload).__name__}")
        
        try:
            detail = self.parse(payload)
        except (KeyError, TypeError, ValueError) as e:
            return Lookup.absent(f"unparseable payload: {e!r}")
        return Lookup.found(detail)
    
    def close(self) -> None:
        """Close the underlying client if this source created it."""
        if self._owns_client:
            self.client.close()
    
    def __enter__(self) -> "HttpRemoteSource":
        return self
    
    def __exit__(self, *exc_info) -> None:
        self.close()
