"""
Payload Builder - applies a mapping set to one email

Integrates:
- PropertyHandlerFactory: type-specific serialization
- MappingEntry: the stored configuration per Notion property
- MappingValidator: checks a mapping set before it is used

Dispatch, aggregation and per-property fault isolation only; the handlers
own every serialization rule.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from gmail_notion.handlers.factory import PropertyHandlerFactory
from gmail_notion.mapper.mapping import MappingEntry
from gmail_notion.schema.models import DatabaseSchema, SourceRecord
from gmail_notion.validator.mapping_validator import MappingValidator

logger = logging.getLogger(__name__)

# Notion caps a title run at 2000 characters
MAX_TITLE_LENGTH = 2000

MappingSet = Mapping[str, Union[MappingEntry, Dict[str, Any]]]
RecordLike = Union[SourceRecord, Dict[str, Any]]


@dataclass
class MappingResult:
    """Outcome of applying a mapping set to one email."""

    properties: Dict[str, Any] = field(default_factory=dict)
    errors: List[Dict[str, str]] = field(default_factory=list)
    mapped_count: int = 0

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


def as_entry(value: Union[MappingEntry, Dict[str, Any]]) -> MappingEntry:
    if isinstance(value, MappingEntry):
        return value
    return MappingEntry.from_dict(value)


def as_record(record: RecordLike) -> SourceRecord:
    if isinstance(record, SourceRecord):
        return record
    return SourceRecord.from_dict(record)


class MappingOrchestrator:
    """
    Builds Notion page properties from an email and a mapping set

    Usage:
    ```python
    orchestrator = MappingOrchestrator(factory)
    properties = orchestrator.apply_all(
        {"title": {"type": "title", "enabled": True, "sourceField": "subject"}},
        {"subject": "Hi", "from": "a@b.com"},
    )
    # Returns: {"title": {"title": [{"type": "text", "text": {"content": "Hi"}}]}}
    ```
    """

    def __init__(self, factory: Optional[PropertyHandlerFactory] = None, validator=None):
        """
        Initialize MappingOrchestrator

        Args:
            factory: Handler factory (a default one without relation support is built if omitted)
            validator: MappingValidator used by validate()
        """
        self.factory = factory or PropertyHandlerFactory()
        self.validator = validator or MappingValidator(self.factory)

    def apply(
        self,
        mapping_set: MappingSet,
        record: RecordLike,
        api_key: Optional[str] = None,
    ) -> MappingResult:
        """
        Apply every mapping to the record

        Args:
            mapping_set: Property id -> MappingEntry (or its dict form), in order
            record: SourceRecord or decoded message dict
            api_key: Passed through to handlers that call Notion (relation)

        Returns:
            MappingResult; one failing property never aborts the others
        """
        record = as_record(record)
        result = MappingResult()

        for key, raw_entry in mapping_set.items():
            try:
                entry = as_entry(raw_entry)
            except Exception as e:
                logger.error(f"Invalid mapping entry '{key}': {e}")
                result.errors.append({"property": key, "error": str(e)})
                continue

            handler = self.factory.get_handler(entry.type)
            if handler is None:
                logger.debug(f"Skipping '{key}': no handler for type '{entry.type}'")
                continue

            property_name = entry.property_name or key
            try:
                fragment = handler.to_payload(entry, record, api_key)
            except Exception as e:
                logger.error(f"Error mapping property '{property_name}': {e}")
                result.errors.append({"property": property_name, "error": str(e)})
                continue

            if fragment is not None:
                result.properties[property_name] = fragment
                result.mapped_count += 1

        logger.info(
            f"Mapped {result.mapped_count}/{len(mapping_set)} properties"
            + (f" ({len(result.errors)} errors)" if result.errors else "")
        )
        return result

    def apply_all(
        self,
        mapping_set: MappingSet,
        record: RecordLike,
        api_key: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Properties payload for one email."""
        return self.apply(mapping_set, record, api_key).properties

    def apply_batch(
        self,
        mapping_set: MappingSet,
        records: List[RecordLike],
        api_key: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Build payloads for multiple emails

        Args:
            mapping_set: Mapping set shared by all records
            records: Emails to convert
            api_key: Notion token for relation lookups

        Returns:
            List of properties payloads (records that fail entirely are skipped)
        """
        payloads = []

        for record in records:
            try:
                payloads.append(self.apply_all(mapping_set, record, api_key))
            except Exception as e:
                logger.error(f"Error building payload for email: {e}")
                continue

        logger.info(f"Built {len(payloads)} payloads from {len(records)} emails")
        return payloads

    def validate(self, mapping_set: MappingSet, schema: Optional[DatabaseSchema] = None):
        """Validate a mapping set (see MappingValidator.validate)."""
        return self.validator.validate(mapping_set, schema)

    @staticmethod
    def default_title(record: RecordLike) -> str:
        """Title used when no title mapping produced one."""
        record = as_record(record)
        title = record.subject or f"Email from {record.sender or 'unknown sender'}"
        return title[:MAX_TITLE_LENGTH]


# ============================================================================
# Builder convenience functions
# ============================================================================


def build_page_properties(
    mapping_set: MappingSet,
    record: RecordLike,
    api_key: Optional[str] = None,
    factory: Optional[PropertyHandlerFactory] = None,
) -> Dict[str, Any]:
    """One-shot apply_all with a default handler factory."""
    return MappingOrchestrator(factory).apply_all(mapping_set, record, api_key)
