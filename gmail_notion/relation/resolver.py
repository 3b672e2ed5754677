"""
Relation Resolver - matches an email value against pages of a linked database.

Configuration time:
- Identify the linked database from the relation property config
- Serve its field list from a short-lived cache, or fetch it within a time budget
- Fall back to a fixed placeholder field list when anything goes wrong

Apply time:
- Read and optionally transform the chosen email field
- Build a filter for the chosen linked property and query (first 10 results)
- Return matched page ids, or None; failures are logged, never raised
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from gmail_notion.mapper.mapping import MappingEntry
from gmail_notion.relation.cache import FieldCache
from gmail_notion.relation.filters import build_filter
from gmail_notion.relation.identify import identify_database_id
from gmail_notion.schema.models import AUTO_MANAGED_TYPES, SourceRecord, display_name

logger = logging.getLogger(__name__)

# Linked properties that cannot be matched against a single email value
EXCLUDED_TYPES = frozenset(["files", "relation", "rollup", "formula", "people"]) | AUTO_MANAGED_TYPES

TEXT_MATCH_TYPES = ("title", "rich_text", "email", "url", "phone_number")


@dataclass(frozen=True)
class RelatedField:
    """A property of the linked database that a relation can match against."""

    id: str
    name: str
    type: str
    placeholder: bool = False

    @property
    def display_name(self) -> str:
        return f"{self.name} ({display_name(self.type)})"

    @property
    def filter_key(self) -> str:
        # Placeholder ids are invented, so filter by name instead
        return self.name if self.placeholder else self.id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "displayName": self.display_name,
            "placeholder": self.placeholder,
        }


PLACEHOLDER_FIELDS = (
    RelatedField("title", "Title", "title", placeholder=True),
    RelatedField("description", "Description", "rich_text", placeholder=True),
    RelatedField("email", "Email", "email", placeholder=True),
    RelatedField("status", "Status", "select", placeholder=True),
    RelatedField("date", "Date", "date", placeholder=True),
    RelatedField("url", "URL", "url", placeholder=True),
)


class RelationResolver:
    """
    Resolves relation mappings against a linked Notion database

    Usage:
    ```python
    resolver = RelationResolver(client, FieldCache(ttl_seconds=300))
    fields = resolver.related_fields(target.config)
    page_ids = resolver.resolve(mapping, record)
    ```
    """

    DEFAULT_TIMEOUT_MS = 3000
    DEFAULT_PAGE_SIZE = 10

    def __init__(
        self,
        client,
        cache: Optional[FieldCache] = None,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        page_size: int = DEFAULT_PAGE_SIZE,
        transformers=None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize RelationResolver

        Args:
            client: Object with fetch_schema(database_id, ...) and search(database_id, filter, ...)
            cache: Field list cache; a private one is created when omitted
            timeout_ms: Budget for field discovery, measured from the start of the call
            page_size: Maximum number of linked pages returned by a match
            transformers: TransformerRegistry used for the mapping's transformation
            clock: Monotonic clock in seconds
        """
        self.client = client
        self.cache = cache if cache is not None else FieldCache(clock=clock)
        self.timeout_ms = timeout_ms
        self.page_size = page_size
        self.transformers = transformers
        self._clock = clock

    @staticmethod
    def placeholders() -> List[RelatedField]:
        return list(PLACEHOLDER_FIELDS)

    def related_fields(
        self,
        relation_config: Optional[Dict[str, Any]],
        api_key: Optional[str] = None,
    ) -> List[RelatedField]:
        """
        Properties of the linked database usable as a match target

        Args:
            relation_config: TargetField.config of the relation property
            api_key: Overrides the client's default token

        Returns:
            Live field list (filtered), or the placeholder list on any failure
        """
        started = self._clock()

        database_id = identify_database_id(relation_config)
        if database_id is None:
            logger.warning("Could not identify linked database, using placeholder fields")
            return self.placeholders()

        cached = self.cache.get(database_id)
        if cached is not None:
            logger.debug(f"Using cached fields for linked database {database_id}")
            return list(cached)

        try:
            schema = self.client.fetch_schema(
                database_id,
                api_key=api_key,
                timeout=self.timeout_ms / 1000.0,
            )
        except Exception as e:
            logger.warning(f"Failed to fetch linked database {database_id}: {e}")
            return self.placeholders()

        elapsed_ms = (self._clock() - started) * 1000
        if elapsed_ms > self.timeout_ms:
            logger.warning(
                f"Linked database {database_id} took {elapsed_ms:.0f}ms "
                f"(budget {self.timeout_ms}ms), using placeholder fields"
            )
            return self.placeholders()

        fields = self._mappable_fields(schema)
        self.cache.set(database_id, fields)
        logger.info(f"Loaded {len(fields)} matchable fields from linked database {database_id}")
        return list(fields)

    def refresh(self, relation_config: Optional[Dict[str, Any]]) -> bool:
        """Forget the cached field list for a relation's linked database."""
        database_id = identify_database_id(relation_config)
        if database_id is None:
            return False
        return self.cache.invalidate(database_id)

    def find_field(self, fields: List[RelatedField], key: str) -> Optional[RelatedField]:
        """Look a field up by id first, then by name."""
        for f in fields:
            if f.id == key:
                return f
        for f in fields:
            if f.name == key:
                return f
        return None

    def resolve(
        self,
        mapping: MappingEntry,
        record: SourceRecord,
        api_key: Optional[str] = None,
    ) -> Optional[List[str]]:
        """
        Find linked pages whose match field matches the email value

        Args:
            mapping: Relation mapping with match_field and match_source_field
            record: Source email
            api_key: Overrides the client's default token

        Returns:
            Up to page_size page ids, or None when nothing can be matched
        """
        if not mapping.match_field or not mapping.match_source_field:
            return None

        database_id = identify_database_id(mapping.relation_config)
        if database_id is None:
            logger.warning(f"Relation '{mapping.property_name}' has no identifiable linked database")
            return None

        value = record.get_value(mapping.match_source_field)
        if value is None or value == "" or value == []:
            return None
        if mapping.transformation and self.transformers is not None:
            value = self.transformers.apply(value, mapping.transformation)

        fields = self.related_fields(mapping.relation_config, api_key)
        match_field = self.find_field(fields, mapping.match_field)
        if match_field is None:
            logger.warning(
                f"Match field '{mapping.match_field}' not found in linked database {database_id}"
            )
            return None

        query_filter = build_filter(match_field.filter_key, match_field.type, value)
        if query_filter is None:
            logger.debug(f"No filter for {match_field.type} value {value!r}")
            return None

        try:
            results = self.client.search(
                database_id,
                query_filter,
                page_size=self.page_size,
                api_key=api_key,
            )
        except Exception as e:
            logger.warning(f"Relation search failed for '{mapping.property_name}': {e}")
            return None

        page_ids = [r["id"] for r in results if r.get("id")][: self.page_size]
        if not page_ids:
            logger.debug(f"No linked pages matched for '{mapping.property_name}'")
            return None
        return page_ids

    @staticmethod
    def _mappable_fields(schema: Dict[str, Any]) -> List[RelatedField]:
        fields = []
        for raw in schema.get("fields", []):
            if raw.get("type") in EXCLUDED_TYPES or not raw.get("type"):
                continue
            fields.append(RelatedField(raw.get("id") or raw["name"], raw["name"], raw["type"]))
        return fields
