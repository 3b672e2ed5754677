"""
Page Writer - creates a Notion page for an email

Steps:
1. Check credentials (fatal before any mapping work)
2. Apply the stored mappings
3. Drop properties that no longer exist in the live schema (drift)
4. Inject the Gmail back-link into a url property
5. Make sure the page has a title
6. Create the page (API errors propagate unchanged)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from config import AppConfig
from gmail_notion.builder.payload_builder import MappingOrchestrator, RecordLike, as_record
from gmail_notion.errors import ConfigError
from gmail_notion.handlers.text import text_runs
from gmail_notion.schema.models import DatabaseSchema, SourceRecord

logger = logging.getLogger(__name__)

DEFAULT_LINK_PROPERTY = "Gmail Link"


@dataclass
class WriteResult:
    page: Dict[str, Any]
    properties: Dict[str, Any]
    removed: List[str] = field(default_factory=list)
    errors: List[Dict[str, str]] = field(default_factory=list)


def filter_to_schema(
    properties: Dict[str, Any],
    allowed: Iterable[str],
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Keep only properties whose key exists in the live schema

    Args:
        properties: Page properties keyed by property name (or id)
        allowed: Property names and ids present in the live schema

    Returns:
        Tuple of (kept properties, removed keys)
    """
    allowed = set(allowed)
    kept = {}
    removed = []
    for key, value in properties.items():
        if key in allowed:
            kept[key] = value
        else:
            removed.append(key)
    return kept, removed


class PageWriter:
    """
    Writes one email to the configured Notion database

    Usage:
    ```python
    writer = PageWriter(client, orchestrator, introspector, app_config)
    result = writer.create_page_from_record(record, mappings)
    print(result.page["url"])
    ```
    """

    def __init__(
        self,
        client,
        orchestrator: MappingOrchestrator,
        introspector=None,
        config: Optional[AppConfig] = None,
        link_property_name: str = DEFAULT_LINK_PROPERTY,
    ):
        """
        Initialize PageWriter

        Args:
            client: NotionClient
            orchestrator: MappingOrchestrator producing the properties
            introspector: DatabaseIntrospector for the live schema (drift checks skipped without one)
            config: Credentials source (get_all() -> {apiKey, targetCollectionId})
            link_property_name: url property that receives the Gmail link
        """
        self.client = client
        self.orchestrator = orchestrator
        self.introspector = introspector
        self.config = config or AppConfig()
        self.link_property_name = link_property_name

    def create_page_from_record(
        self,
        record: RecordLike,
        mapping_set: Dict[str, Any],
        children: Optional[List[Dict[str, Any]]] = None,
    ) -> WriteResult:
        """
        Create a Notion page from an email

        Args:
            record: SourceRecord or decoded message dict
            mapping_set: Stored mappings (property id -> entry)
            children: Optional page content blocks

        Returns:
            WriteResult with the created page and the properties sent

        Raises:
            ConfigError: If the API key or database id is missing
            NotionAPIError: If Notion rejects the page
        """
        settings = self.config.get_all()
        api_key = settings.get("apiKey")
        database_id = settings.get("targetCollectionId")
        if not api_key:
            raise ConfigError("Notion API key is not configured", "apiKey")
        if not database_id:
            raise ConfigError("Target database is not configured", "targetCollectionId")

        record = as_record(record)
        properties, removed, errors = self.build_properties(record, mapping_set, api_key, database_id)

        page = self.client.create_page(database_id, properties, children, api_key=api_key)
        logger.info(f"Created page {page.get('id')} with {len(properties)} properties")
        return WriteResult(page=page, properties=properties, removed=removed, errors=errors)

    def build_properties(
        self,
        record: SourceRecord,
        mapping_set: Dict[str, Any],
        api_key: Optional[str],
        database_id: str,
        create_link_property: bool = True,
    ) -> Tuple[Dict[str, Any], List[str], List[Dict[str, str]]]:
        """Properties exactly as they would be sent (dry runs pass create_link_property=False)."""
        result = self.orchestrator.apply(mapping_set, record, api_key)
        properties = result.properties
        removed: List[str] = []

        schema = self._live_schema(database_id)
        if schema is not None:
            allowed = schema.property_names() + [p.id for p in schema.properties]
            properties, removed = filter_to_schema(properties, allowed)
            if removed:
                logger.warning(f"Dropped properties missing from the database schema: {removed}")

            link_property = self._ensure_link_property(schema, database_id, api_key, create_link_property)
            if link_property and record.gmail_link_url and link_property not in properties:
                properties[link_property] = {"url": record.gmail_link_url}

        self._ensure_title(properties, schema, record)
        return properties, removed, result.errors

    def _live_schema(self, database_id: str) -> Optional[DatabaseSchema]:
        if self.introspector is None:
            return None
        try:
            return self.introspector.get_schema(database_id)
        except Exception as e:
            logger.warning(f"Could not load database schema, skipping drift check: {e}")
            return None

    def _ensure_link_property(
        self,
        schema: DatabaseSchema,
        database_id: str,
        api_key: Optional[str],
        create: bool = True,
    ) -> Optional[str]:
        """Name of the url property for the Gmail link, creating it if needed."""
        existing = schema.get_property(self.link_property_name)
        if existing is not None and existing.type == "url":
            return existing.name

        url_properties = schema.url_properties()
        if url_properties:
            return url_properties[0].name

        if existing is not None or not create:
            # Name taken by a non-url property, or a dry run
            return None

        try:
            self.client.ensure_url_property(database_id, self.link_property_name, api_key=api_key)
        except Exception as e:
            logger.warning(f"Could not add '{self.link_property_name}' property: {e}")
            return None

        if self.introspector is not None:
            self.introspector.invalidate(database_id)
        return self.link_property_name

    def _ensure_title(
        self,
        properties: Dict[str, Any],
        schema: Optional[DatabaseSchema],
        record: SourceRecord,
    ) -> None:
        if any("title" in value for value in properties.values() if isinstance(value, dict)):
            return

        # Notion always gives the title property the id "title"
        key = "title"
        if schema is not None:
            title_property = schema.title_property()
            if title_property is not None:
                key = title_property.name

        properties[key] = {"title": text_runs(self.orchestrator.default_title(record))}
        logger.debug(f"Added default title to '{key}'")
