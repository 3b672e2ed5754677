"""People properties: a workspace member picked from the Notion user directory."""
import logging
from functools import partial
from typing import Any, Dict, List, Optional

from gmail_notion.handlers.base import PropertyHandler, current_or_default, new_entry
from gmail_notion.mapper.mapping import MappingEntry
from gmail_notion.schema.models import SourceRecord, TargetField
from gmail_notion.ui import widgets as ui

logger = logging.getLogger(__name__)


def build_ui(directory, target: TargetField, current: Optional[MappingEntry] = None) -> List[ui.Widget]:
    """
    Configuration widgets for a people property

    Args:
        directory: Object with list_members() -> [{id, name, email}], or None
        target: The people property
        current: Stored mapping, if any

    Returns:
        Widgets; directory failures are rendered as a warning, never raised
    """
    mapping = current_or_default(current, target)
    widgets: List[ui.Widget] = [ui.header(target)]
    if target.required:
        widgets.append(ui.required_indicator())
    widgets.append(ui.enable_checkbox(f"enabled_{target.id}", mapping.enabled))

    if directory is None:
        widgets.append(ui.warning("User directory is not available"))
        return widgets

    try:
        members = directory.list_members()
    except Exception as e:
        logger.warning(f"Could not load workspace members: {e}")
        widgets.append(ui.warning(f"Could not load workspace members: {e}"))
        return widgets

    if not members:
        widgets.append(ui.warning("No workspace members with an email address were found"))
        return widgets

    choices = [{"label": "-- Select a user --", "value": ""}]
    for member in members:
        label = member.get("name") or member.get("email") or member["id"]
        if member.get("email"):
            label = f"{label} ({member['email']})"
        choices.append({"label": label, "value": member["id"]})

    widgets.append(ui.dropdown(f"selectedUser_{target.id}", "Assign to", choices, mapping.static_value or ""))
    return widgets


def parse_configuration(target: TargetField, form_input: Dict[str, Any]) -> MappingEntry:
    user_id = ui.form_value(form_input, f"selectedUser_{target.id}")
    checked = ui.is_checked(form_input, f"enabled_{target.id}")
    return new_entry(
        target,
        enabled=(target.required or checked) and user_id is not None,
        static_value=user_id,
    )


def to_payload(
    mapping: MappingEntry,
    record: SourceRecord,
    api_key: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    if not mapping.enabled or not mapping.static_value:
        return None
    value = mapping.static_value
    user_ids = [str(v) for v in (value if isinstance(value, list) else [value]) if v]
    if not user_ids:
        return None
    return {"people": [{"id": user_id} for user_id in user_ids]}


def make_people_handler(directory=None) -> PropertyHandler:
    return PropertyHandler(
        type="people",
        build_ui=partial(build_ui, directory),
        parse_configuration=parse_configuration,
        to_payload=to_payload,
    )
