"""
Configuration management and loading.

Handles the database location, the remote source endpoints and the
aggregation worker pool size.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional
from urllib.parse import urlparse

import yaml

REQUIRED_SOURCES = ("user", "product")
DEFAULT_TIMEOUT = 5.0
DEFAULT_MAX_WORKERS = 4
DEFAULT_DB_PATH = "favourites.db"


@dataclass(frozen=True)
class SourceConfig:
    """Endpoint of one remote detail source."""
    name: str
    base_url: str
    timeout: float = DEFAULT_TIMEOUT
    
    def __post_init__(self):
        """Validate endpoint values."""
        parsed = urlparse(self.base_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"base_url for source '{self.name}' must be an http(s) URL")
        if self.timeout <= 0:
            raise ValueError(f"timeout for source '{self.name}' must be > 0")


@dataclass(frozen=True)
class DatabaseConfig:
    """Location of the favourites database."""
    path: str = DEFAULT_DB_PATH


@dataclass(frozen=True)
class AggregationConfig:
    """Worker pool settings for remote lookups."""
    max_workers: int = DEFAULT_MAX_WORKERS
    
    def __post_init__(self):
        if self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")


@dataclass(frozen=True)
class ServiceConfig:
    """Complete service configuration."""
    database: DatabaseConfig
    sources: Dict[str, SourceConfig]
    aggregation: AggregationConfig
    
    def get_source(self, name: str) -> SourceConfig:
        """Get configuration for a named source."""
        if name not in self.sources:
            raise KeyError(f"No source configured with name '{name}'")
        return self.sources[name]


def default_service_config() -> ServiceConfig:
    """Configuration pointing at the discovered sibling services."""
    return ServiceConfig(
        database=DatabaseConfig(),
        sources={
            "user": SourceConfig(
                name="user",
                base_url="http://USER-SERVICE/user-service/api/users"
            ),
            "product": SourceConfig(
                name="product",
                base_url="http://PRODUCT-SERVICE/product-service/api/products"
            ),
        },
        aggregation=AggregationConfig()
    )


def load_service_config(path: Optional[str] = None) -> ServiceConfig:
    """Load and validate service configuration from YAML file.
    
    Strict validation ensures a typo in a key never silently falls back to
    a default endpoint.
    
    Args:
        path: Path to YAML configuration file; None gives the defaults
        
    Returns:
        Validated ServiceConfig object
        
    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    if path is None:
        return default_service_config()
    
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Service config file not found: {path}")
    
    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")
    
    if not raw_config:
        raise ValueError("Configuration file is empty")
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a dictionary")
    
    allowed_top_keys = {'database', 'sources', 'aggregation'}
    unknown_keys = set(raw_config.keys()) - allowed_top_keys
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")
    
    # Parse database
    database_data = _section(raw_config, 'database')
    _reject_unknown(database_data, {'path'}, 'database')
    db_path = database_data.get('path', DEFAULT_DB_PATH)
    if not isinstance(db_path, str) or not db_path.strip():
        raise ValueError("'database.path' must be a non-empty string")
    database = DatabaseConfig(path=db_path)
    
    # Parse sources
    if 'sources' not in raw_config:
        raise ValueError("Missing required 'sources' section")
    sources_data = raw_config['sources']
    if not isinstance(sources_data, dict):
        raise ValueError("'sources' must be a dictionary")
    
    missing = [name for name in REQUIRED_SOURCES if name not in sources_data]
    if missing:
        raise ValueError(f"Missing required sources: {missing}")
    unknown_sources = set(sources_data.keys()) - set(REQUIRED_SOURCES)
    if unknown_sources:
        raise ValueError(f"Unknown sources: {unknown_sources}")
    
    sources = {}
    for source_name, source_data in sources_data.items():
        if not isinstance(source_data, dict):
            raise ValueError(f"Source '{source_name}' must be a dictionary")
        sources[source_name] = _parse_source_config(source_name, source_data)
    
    # Parse aggregation
    aggregation_data = _section(raw_config, 'aggregation')
    _reject_unknown(aggregation_data, {'max_workers'}, 'aggregation')
    max_workers = aggregation_data.get('max_workers', DEFAULT_MAX_WORKERS)
    if isinstance(max_workers, bool) or not isinstance(max_workers, int):
        raise ValueError("'aggregation.max_workers' must be an integer")
    aggregation = AggregationConfig(max_workers=max_workers)
    
    return ServiceConfig(
        database=database,
        sources=sources,
        aggregation=aggregation
    )


def _section(raw_config: Dict, name: str) -> Dict:
    data = raw_config.get(name) or {}
    if not isinstance(data, dict):
        raise ValueError(f"'{name}' must be a dictionary")
    return data


def _reject_unknown(data: Dict, allowed: set, path: str) -> None:
    unknown_keys = set(data.keys()) - allowed
    if unknown_keys:
        raise ValueError(f"Unknown keys in {path}: {unknown_keys}")


def _parse_source_config(name: str, data: Dict) -> SourceConfig:
    """Parse and validate one source section.
    
    Args:
        name: Source name, used as the key in the aggregate
        data: Source configuration data
        
    Returns:
        Validated SourceConfig
        
    Raises:
        ValueError: If configuration is invalid
    """
    path = f"sources.{name}"
    _reject_unknown(data, {'base_url', 'timeout'}, path)
    
    if 'base_url' not in data:
        raise ValueError(f"Missing required 'base_url' in {path}")
    base_url = data['base_url']
    if not isinstance(base_url, str):
        raise ValueError(f"'base_url' in {path} must be a string")
    
    timeout = data.get('timeout', DEFAULT_TIMEOUT)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ValueError(f"'timeout' in {path} must be > 0")
    
    return SourceConfig(
        name=name,
        base_url=base_url.rstrip('/'),
        timeout=float(timeout)
    )
