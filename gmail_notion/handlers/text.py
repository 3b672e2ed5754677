"""
Text-like properties: title, rich_text, email, url, number, phone_number

The mapping picks an email field plus an optional transformation; the
formatter for the property type decides whether the transformed value
can be written at all (malformed emails and URLs are omitted).
"""

import logging
import math
import re
from functools import partial
from typing import Any, Dict, List, Optional

from gmail_notion.handlers.base import (
    PropertyHandler,
    current_or_default,
    is_blank,
    new_entry,
    record_value,
)
from gmail_notion.mapper.field_catalog import FieldCatalog
from gmail_notion.mapper.mapping import MappingEntry
from gmail_notion.schema.models import SourceRecord, TargetField
from gmail_notion.transformer.registry import TransformerRegistry, to_text
from gmail_notion.ui import widgets as ui

logger = logging.getLogger(__name__)

TEXT_TYPES = ("title", "rich_text", "email", "url", "number", "phone_number")

# Notion caps a single rich text run at 2000 characters
CHUNK_SIZE = 2000

_EMAIL = re.compile(r"[^\s@<>]+@[^\s@<>]+\.[^\s@<>]+")
_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*://")
_WHITESPACE = re.compile(r"\s")


def text_runs(text: str) -> List[Dict[str, Any]]:
    """Split text into Notion rich text runs of at most CHUNK_SIZE characters."""
    return [
        {"type": "text", "text": {"content": text[i:i + CHUNK_SIZE]}}
        for i in range(0, len(text), CHUNK_SIZE)
    ]


def format_title(value: Any) -> Optional[Dict[str, Any]]:
    text = to_text(value)
    return {"title": text_runs(text)} if text else None


def format_rich_text(value: Any) -> Optional[Dict[str, Any]]:
    text = to_text(value)
    return {"rich_text": text_runs(text)} if text else None


def format_email(value: Any) -> Optional[Dict[str, Any]]:
    match = _EMAIL.search(to_text(value))
    return {"email": match.group(0)} if match else None


def format_url(value: Any) -> Optional[Dict[str, Any]]:
    text = to_text(value).strip()
    if not text or _WHITESPACE.search(text):
        return None
    if _SCHEME.match(text):
        return {"url": text}
    if "." in text:
        return {"url": f"https://{text}"}
    return None


def format_number(value: Any) -> Optional[Dict[str, Any]]:
    if isinstance(value, int) and not isinstance(value, bool):
        return {"number": value}
    try:
        number = float(to_text(value).strip())
    except ValueError:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return {"number": number}


def format_phone_number(value: Any) -> Optional[Dict[str, Any]]:
    text = to_text(value).strip()
    return {"phone_number": text} if text else None


FORMATTERS = {
    "title": format_title,
    "rich_text": format_rich_text,
    "email": format_email,
    "url": format_url,
    "number": format_number,
    "phone_number": format_phone_number,
}


def build_ui(
    catalog: FieldCatalog,
    transformers: TransformerRegistry,
    target: TargetField,
    current: Optional[MappingEntry] = None,
) -> List[ui.Widget]:
    mapping = current_or_default(current, target)
    widgets: List[ui.Widget] = [ui.header(target)]

    if target.required:
        widgets.append(ui.required_indicator())

    # Title is always written, so it has no enable toggle
    if not target.is_title:
        widgets.append(ui.enable_checkbox(f"enabled_{target.id}", mapping.enabled))

    fields = catalog.fields_for(target.type)
    if fields:
        selected = mapping.source_field or catalog.recommend(target.type).value
        widgets.append(
            ui.dropdown(
                f"emailField_{target.id}",
                "Email field",
                [{"label": f.label, "value": f.value} for f in fields],
                selected,
            )
        )
    else:
        widgets.append(ui.warning("No email fields are compatible with this property type"))

    options = transformers.options_for(target.type)
    if len(options) > 1:
        widgets.append(
            ui.dropdown(
                f"transformation_{target.id}",
                "Processing",
                options,
                mapping.transformation,
            )
        )

    return widgets


def parse_configuration(
    catalog: FieldCatalog,
    transformers: TransformerRegistry,
    target: TargetField,
    form_input: Dict[str, Any],
) -> MappingEntry:
    checked = ui.is_checked(form_input, f"enabled_{target.id}")
    source_field = (
        ui.form_value(form_input, f"emailField_{target.id}")
        or catalog.recommend(target.type).value
    )
    transformation = (
        ui.form_value(form_input, f"transformation_{target.id}")
        or transformers.options_for(target.type)[0]["value"]
    )

    return new_entry(
        target,
        enabled=target.is_title or target.required or checked,
        source_field=source_field,
        transformation=transformation,
    )


def to_payload(
    property_type: str,
    transformers: TransformerRegistry,
    mapping: MappingEntry,
    record: SourceRecord,
    api_key: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    if not mapping.enabled:
        return None

    value = record_value(record, mapping.source_field)
    if value is None:
        return None

    if mapping.transformation:
        value = transformers.apply(value, mapping.transformation)
    if value is None or is_blank(value):
        return None

    return FORMATTERS[property_type](value)


def make_text_handler(
    property_type: str,
    catalog: FieldCatalog,
    transformers: TransformerRegistry,
) -> PropertyHandler:
    """Handler for one of TEXT_TYPES."""
    if property_type not in FORMATTERS:
        raise ValueError(f"Not a text property type: {property_type}")
    return PropertyHandler(
        type=property_type,
        build_ui=partial(build_ui, catalog, transformers),
        parse_configuration=partial(parse_configuration, catalog, transformers),
        to_payload=partial(to_payload, property_type, transformers),
    )
