"""Date properties: the email date, or the time the page is created."""
import logging
from typing import Any, Dict, List, Optional

from gmail_notion.handlers.base import PropertyHandler, current_or_default, new_entry
from gmail_notion.mapper.mapping import MappingEntry
from gmail_notion.schema.models import SourceRecord, TargetField, parse_datetime
from gmail_notion.transformer.registry import now_iso, to_iso
from gmail_notion.ui import widgets as ui

logger = logging.getLogger(__name__)

DATE_SOURCES = [
    {"label": "Email date", "value": "date"},
    {"label": "Current date/time", "value": "now"},
]


def build_ui(target: TargetField, current: Optional[MappingEntry] = None) -> List[ui.Widget]:
    mapping = current_or_default(current, target)
    widgets: List[ui.Widget] = [ui.header(target)]
    if target.required:
        widgets.append(ui.required_indicator())
    widgets.append(ui.enable_checkbox(f"enabled_{target.id}", mapping.enabled))
    widgets.append(
        ui.dropdown(f"emailField_{target.id}", "Date source", DATE_SOURCES, mapping.source_field or "date")
    )
    return widgets


def parse_configuration(target: TargetField, form_input: Dict[str, Any]) -> MappingEntry:
    checked = ui.is_checked(form_input, f"enabled_{target.id}")
    source = ui.form_value(form_input, f"emailField_{target.id}")
    if source not in ("date", "now"):
        source = "date"
    return new_entry(target, enabled=target.required or checked, source_field=source)


def to_payload(
    mapping: MappingEntry,
    record: SourceRecord,
    api_key: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """Never None once enabled: a missing or bad date becomes the current time."""
    if not mapping.enabled:
        return None

    if mapping.source_field == "now":
        return {"date": {"start": now_iso()}}

    parsed = parse_datetime(record.get_value(mapping.source_field or "date"))
    if parsed is None:
        logger.debug(f"Unparseable date for '{mapping.property_name}', using current time")
        return {"date": {"start": now_iso()}}
    return {"date": {"start": to_iso(parsed)}}


def make_date_handler() -> PropertyHandler:
    return PropertyHandler(
        type="date",
        build_ui=build_ui,
        parse_configuration=parse_configuration,
        to_payload=to_payload,
    )
