"""Multi-select properties: any number of the database options."""
from typing import Any, Dict, List, Optional

from gmail_notion.handlers.base import PropertyHandler, current_or_default, new_entry
from gmail_notion.mapper.mapping import MappingEntry
from gmail_notion.schema.models import SourceRecord, TargetField
from gmail_notion.ui import widgets as ui


def _selected(mapping: MappingEntry) -> List[str]:
    value = mapping.static_value
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value if v]


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

    selected = set(_selected(mapping))
    widgets.append(
        ui.SelectionInput(
            field_name=f"options_{target.id}",
            title="Values",
            input_type="multi_select",
            items=[ui.SelectionItem(o["name"], o["name"], o["name"] in selected) for o in options],
        )
    )
    return widgets


def parse_configuration(target: TargetField, form_input: Dict[str, Any]) -> MappingEntry:
    options = ui.form_values(form_input, f"options_{target.id}")
    checked = ui.is_checked(form_input, f"enabled_{target.id}")
    return new_entry(target, enabled=checked and bool(options), static_value=options)


def to_payload(
    mapping: MappingEntry,
    record: SourceRecord,
    api_key: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    if not mapping.enabled:
        return None
    names = _selected(mapping)
    if not names:
        return None
    return {"multi_select": [{"name": name} for name in names]}


def make_multi_select_handler() -> PropertyHandler:
    return PropertyHandler(
        type="multi_select",
        build_ui=build_ui,
        parse_configuration=parse_configuration,
        to_payload=to_payload,
    )
