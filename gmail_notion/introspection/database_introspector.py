"""
Database Introspector - Fetches and caches the live schema of Notion databases.

Features:
- In-memory cache with a 2-minute TTL per database
- Optional JSON file cache for offline inspection (`sync-schema`)
- Errors from the API propagate; callers decide whether drift checks are fatal
"""

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from gmail_notion.schema.models import DatabaseSchema
from .schema_analyzer import SchemaAnalyzer

logger = logging.getLogger(__name__)


class DatabaseIntrospector:
    """
    Introspects Notion databases through a NotionClient

    Usage:
    ```python
    introspector = DatabaseIntrospector(client)
    schema = introspector.get_schema(database_id)
    print(f"Found {len(schema.properties)} properties")
    ```
    """

    # Cache TTL in seconds (2 minutes)
    CACHE_TTL = 120

    def __init__(
        self,
        client,
        cache_ttl: int = CACHE_TTL,
        cache_dir: Optional[Path] = None,
    ):
        """
        Initialize DatabaseIntrospector

        Args:
            client: NotionClient (anything with get_database(database_id))
            cache_ttl: Seconds a fetched schema stays fresh in memory
            cache_dir: Directory for the JSON snapshot cache (disabled when None)
        """
        self.client = client
        self.cache_ttl = cache_ttl
        self.cache_dir = cache_dir
        self.analyzer = SchemaAnalyzer()

        self._schemas: Dict[str, Tuple[float, DatabaseSchema]] = {}

    def get_schema(self, database_id: str, force_refresh: bool = False) -> DatabaseSchema:
        """
        Get a database schema, using the cache when fresh

        Args:
            database_id: Notion database id
            force_refresh: Bypass the in-memory cache

        Returns:
            DatabaseSchema

        Raises:
            NotionAPIError: If the database cannot be fetched
        """
        if not force_refresh:
            cached = self._schemas.get(database_id)
            if cached is not None and time.time() - cached[0] < self.cache_ttl:
                logger.debug(f"Using cached schema for {database_id}")
                return cached[1]

        raw = self.client.get_database(database_id)
        schema = self.analyzer.analyze_database(raw)
        self._schemas[database_id] = (time.time(), schema)

        if self.cache_dir is not None:
            self._save_file_cache(database_id, raw)

        return schema

    def invalidate(self, database_id: Optional[str] = None) -> None:
        """Forget one cached schema, or all of them."""
        if database_id is None:
            self._schemas.clear()
        else:
            self._schemas.pop(database_id, None)

    def load_snapshot(self, database_id: str) -> Optional[DatabaseSchema]:
        """Schema from the file cache, regardless of age."""
        raw = self._try_load_file_cache(database_id)
        if raw is None:
            return None
        return self.analyzer.analyze_database(raw)

    def _try_load_file_cache(self, database_id: str) -> Optional[Dict[str, Any]]:
        """Try to load a cached database object from file"""
        if self.cache_dir is None:
            return None
        cache_file = self._get_cache_file_path(database_id)
        if not cache_file.exists():
            return None
        try:
            with open(cache_file, "r") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Error loading cache file {cache_file}: {e}")
            return None

    def _save_file_cache(self, database_id: str, raw: Dict[str, Any]) -> None:
        """Save database object to file cache"""
        cache_file = self._get_cache_file_path(database_id)
        try:
            cache_file.parent.mkdir(parents=True, exist_ok=True)
            with open(cache_file, "w") as f:
                json.dump(raw, f, indent=2)
            logger.debug(f"Saved schema to cache file: {cache_file}")
        except OSError as e:
            logger.warning(f"Error saving cache file: {e}")

    def _get_cache_file_path(self, database_id: str) -> Path:
        return Path(self.cache_dir) / f"schema_{database_id.replace('-', '')}.json"
