"""
Remote detail sources.

Provides fetch-by-id access to the user and product services.
"""

from .base import Lookup, RemoteSource, StaticRemoteSource
from .http_client import HttpRemoteSource

__all__ = ["Lookup", "RemoteSource", "StaticRemoteSource", "HttpRemoteSource"]
