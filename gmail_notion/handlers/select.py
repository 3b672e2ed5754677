"""Select and status properties: the user picks one of the database options."""
from functools import partial
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
    widgets.append(ui.enable_checkbox(f"enabled_{target.id}", mapping.enabled))

    options = [o for o in target.options if o.get("name")]
    if not options:
        widgets.append(ui.warning("No options found for this property"))
        return widgets

    choices = [{"label": "-- Select an option --", "value": ""}]
    choices.extend({"label": o["name"], "value": o["name"]} for o in options)
    widgets.append(ui.dropdown(f"option_{target.id}", "Value", choices, mapping.static_value or ""))
    return widgets


def parse_configuration(target: TargetField, form_input: Dict[str, Any]) -> MappingEntry:
    option = ui.form_value(form_input, f"option_{target.id}")
    checked = ui.is_checked(form_input, f"enabled_{target.id}")
    return new_entry(target, enabled=checked and option is not None, static_value=option)


def to_payload(
    property_type: str,
    mapping: MappingEntry,
    record: SourceRecord,
    api_key: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    if not mapping.enabled or not mapping.static_value:
        return None
    return {property_type: {"name": str(mapping.static_value)}}


def make_select_handler(property_type: str = "select") -> PropertyHandler:
    """Handler for "select" or "status"."""
    return PropertyHandler(
        type=property_type,
        build_ui=build_ui,
        parse_configuration=parse_configuration,
        to_payload=partial(to_payload, property_type),
    )
