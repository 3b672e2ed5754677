"""Notion database query filters for matching a source value against one property."""
from typing import Any, Dict, Optional

from gmail_notion.schema.models import parse_datetime
from gmail_notion.transformer.registry import to_text

# Substring match
_CONTAINS_TYPES = ("title", "rich_text", "url", "phone_number", "multi_select")
# Exact match on the text value
_EQUALS_TYPES = ("email", "select", "status")

_TRUTHY = ("true", "1", "yes")


def build_filter(property_key: str, property_type: str, value: Any) -> Optional[Dict[str, Any]]:
    """
    Build a filter for one property

    Args:
        property_key: Property id or name in the linked database
        property_type: Notion type of that property
        value: Source value to match

    Returns:
        Filter dict, or None when the value cannot be expressed for this type
    """
    if property_type == "checkbox":
        if isinstance(value, bool):
            checked = value
        else:
            checked = to_text(value).strip().lower() in _TRUTHY
        return {"property": property_key, "checkbox": {"equals": checked}}

    if property_type == "number":
        if isinstance(value, bool):
            return None
        try:
            number = float(to_text(value).strip())
        except ValueError:
            return None
        if number != number:
            return None
        return {"property": property_key, "number": {"equals": number}}

    if property_type == "date":
        parsed = parse_datetime(value)
        if parsed is None:
            return None
        return {"property": property_key, "date": {"equals": parsed.date().isoformat()}}

    text = to_text(value).strip()
    if not text:
        return None

    if property_type in _CONTAINS_TYPES:
        return {"property": property_key, property_type: {"contains": text}}
    if property_type in _EQUALS_TYPES:
        return {"property": property_key, property_type: {"equals": text}}

    return None
