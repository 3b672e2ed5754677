"""Checkbox properties."""
from typing import Any, Dict, List, Optional

from gmail_notion.handlers.base import PropertyHandler, current_or_default, new_entry
from gmail_notion.mapper.mapping import MappingEntry
from gmail_notion.schema.models import SourceRecord, TargetField
from gmail_notion.ui import widgets as ui


def build_ui(target: TargetField, current: Optional[MappingEntry] = None) -> List[ui.Widget]:
    mapping = current_or_default(current, target)
    widgets: List[ui.Widget] = [ui.header(target)]
    if target.required:
        widgets.append(ui.required_indicator())
    widgets.append(
        ui.enable_checkbox(
            f"checkbox_{target.id}",
            mapping.enabled and mapping.static_value is not False,
            label="Check this box on new pages",
        )
    )
    return widgets


def parse_configuration(target: TargetField, form_input: Dict[str, Any]) -> MappingEntry:
    checked = ui.is_checked(form_input, f"checkbox_{target.id}")
    return new_entry(target, enabled=checked, static_value=checked)


def to_payload(
    mapping: MappingEntry,
    record: SourceRecord,
    api_key: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    if not mapping.enabled:
        return None
    return {"checkbox": mapping.static_value is not False}


def make_checkbox_handler() -> PropertyHandler:
    return PropertyHandler(
        type="checkbox",
        build_ui=build_ui,
        parse_configuration=parse_configuration,
        to_payload=to_payload,
    )
