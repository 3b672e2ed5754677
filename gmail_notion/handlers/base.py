"""Property handler record shared by every Notion property type."""
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from gmail_notion.mapper.mapping import MappingEntry
from gmail_notion.schema.models import SourceRecord, TargetField
from gmail_notion.ui.widgets import Widget

BuildUI = Callable[[TargetField, Optional[MappingEntry]], List[Widget]]
ParseConfiguration = Callable[[TargetField, Dict[str, Any]], MappingEntry]
ToPayload = Callable[..., Optional[Dict[str, Any]]]


@dataclass(frozen=True)
class PropertyHandler:
    """
    Three functions describing how one property type is configured and written

    - build_ui(target, current_mapping) -> widgets, never mutates the mapping
    - parse_configuration(target, form_input) -> MappingEntry, never raises
    - to_payload(mapping, record, api_key=None) -> Notion property value or None
    """

    type: str
    build_ui: BuildUI
    parse_configuration: ParseConfiguration
    to_payload: ToPayload


def new_entry(target: TargetField, **values: Any) -> MappingEntry:
    """MappingEntry pre-filled with the target's identity."""
    return MappingEntry(
        type=target.type,
        property_name=target.name,
        required=target.required,
        **values,
    )


def current_or_default(current: Optional[MappingEntry], target: TargetField) -> MappingEntry:
    """The stored mapping, or an empty one for a property never configured."""
    if current is not None:
        return current
    return new_entry(target, enabled=target.required)


def record_value(record: SourceRecord, source_field: Optional[str]) -> Any:
    if not source_field:
        return None
    return record.get_value(source_field)


def is_blank(value: Any) -> bool:
    """Empty values other than False and 0."""
    if value is False or (isinstance(value, (int, float)) and value == 0):
        return False
    return not value
