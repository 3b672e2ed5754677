"""Files properties: attachments written as external file links."""
import logging
from functools import partial
from typing import Any, Dict, List, Optional

from gmail_notion.attachments.service import LINK_ONLY, MODES
from gmail_notion.handlers.base import PropertyHandler, current_or_default, new_entry
from gmail_notion.mapper.mapping import MappingEntry
from gmail_notion.schema.models import SourceRecord, TargetField
from gmail_notion.ui import widgets as ui

logger = logging.getLogger(__name__)

FILE_HANDLING_OPTIONS = [
    {"label": "Upload and link", "value": "upload"},
    {"label": "Link only", "value": "link_only"},
    {"label": "Skip attachments", "value": "skip"},
]

# Notion rejects file names longer than 100 characters
MAX_NAME_LENGTH = 100


def build_ui(default_mode: str, target: TargetField, current: Optional[MappingEntry] = None) -> List[ui.Widget]:
    mapping = current_or_default(current, target)
    widgets: List[ui.Widget] = [ui.header(target)]
    if target.required:
        widgets.append(ui.required_indicator())
    widgets.append(ui.enable_checkbox(f"enabled_{target.id}", mapping.enabled))
    widgets.append(
        ui.dropdown(
            f"fileHandling_{target.id}",
            "Attachments",
            FILE_HANDLING_OPTIONS,
            mapping.file_handling or default_mode,
        )
    )
    widgets.append(ui.info("Attachments are added as external links, never uploaded inline."))
    return widgets


def parse_configuration(default_mode: str, target: TargetField, form_input: Dict[str, Any]) -> MappingEntry:
    mode = ui.form_value(form_input, f"fileHandling_{target.id}")
    if mode == "upload_to_drive":
        mode = "upload"
    if mode not in MODES:
        mode = default_mode
    checked = ui.is_checked(form_input, f"enabled_{target.id}")
    return new_entry(
        target,
        enabled=target.required or checked,
        source_field="attachments",
        file_handling=mode,
    )


def to_payload(
    attachments,
    default_mode: str,
    mapping: MappingEntry,
    record: SourceRecord,
    api_key: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    if not mapping.enabled:
        return None

    mode = mapping.file_handling or default_mode
    if mode == "skip" or not record.has_attachments or not record.attachments:
        return None

    try:
        processed = attachments.process(record.get_value("attachments"), record.subject, mode)
    except Exception as e:
        logger.error(f"Attachment processing failed for '{mapping.property_name}': {e}")
        return None

    files = [
        {
            "name": (item.get("name") or "attachment")[:MAX_NAME_LENGTH],
            "type": "external",
            "external": {"url": item["url"]},
        }
        for item in processed
        if item.get("url")
    ]
    return {"files": files} if files else None


def make_files_handler(attachments, default_mode: str = LINK_ONLY) -> PropertyHandler:
    """
    Args:
        attachments: Object with process(attachments, context, mode) -> [{name, url}]
        default_mode: Handling mode used when a mapping does not store one
    """
    return PropertyHandler(
        type="files",
        build_ui=partial(build_ui, default_mode),
        parse_configuration=partial(parse_configuration, default_mode),
        to_payload=partial(to_payload, attachments, default_mode),
    )
