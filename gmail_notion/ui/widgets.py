"""
Widget descriptors produced by property handlers

Handlers describe their configuration form with these plain dataclasses;
a front end (the interactive CLI here) decides how to render them and
collects a flat form dict keyed by each widget's field name.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from gmail_notion.schema.models import TargetField, display_name

REQUIRED_TEXT = "⚠️ Required field"


@dataclass
class TextParagraph:
    """Read-only text."""

    text: str
    kind: str = "paragraph"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "text": self.text}


@dataclass
class SelectionItem:
    label: str
    value: str
    selected: bool = False


@dataclass
class SelectionInput:
    """Checkbox, dropdown or multi-select list."""

    field_name: str
    title: str
    input_type: str = "dropdown"  # "dropdown", "checkbox", "multi_select"
    items: List[SelectionItem] = field(default_factory=list)

    @property
    def selected_values(self) -> List[str]:
        return [item.value for item in self.items if item.selected]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": "selection",
            "fieldName": self.field_name,
            "title": self.title,
            "type": self.input_type,
            "items": [
                {"label": i.label, "value": i.value, "selected": i.selected}
                for i in self.items
            ],
        }


@dataclass
class TextInput:
    field_name: str
    title: str
    value: str = ""
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": "text_input",
            "fieldName": self.field_name,
            "title": self.title,
            "value": self.value,
            "hint": self.hint,
        }


Widget = Union[TextParagraph, SelectionInput, TextInput]


# ============================================================================
# HELPERS
# ============================================================================


def header(target: TargetField) -> TextParagraph:
    return TextParagraph(f"{target.name} ({display_name(target.type)})", kind="header")


def required_indicator() -> TextParagraph:
    return TextParagraph(REQUIRED_TEXT, kind="warning")


def warning(text: str) -> TextParagraph:
    return TextParagraph(f"⚠️ {text}", kind="warning")


def info(text: str) -> TextParagraph:
    return TextParagraph(text, kind="info")


def enable_checkbox(field_name: str, enabled: bool, label: str = "Enable this mapping") -> SelectionInput:
    return SelectionInput(
        field_name=field_name,
        title="",
        input_type="checkbox",
        items=[SelectionItem(label, "true", bool(enabled))],
    )


def dropdown(field_name: str, title: str, options: List[Dict[str, str]], selected: Optional[str]) -> SelectionInput:
    """Dropdown from [{"label", "value"}] options; first item preselected when nothing matches."""
    items = [SelectionItem(o["label"], o["value"], o["value"] == selected) for o in options]
    if items and not any(i.selected for i in items):
        items[0].selected = True
    return SelectionInput(field_name=field_name, title=title, items=items)


def is_checked(form_input: Dict[str, Any], key: str) -> bool:
    """True for "true", True, or a list containing "true"."""
    value = form_input.get(key)
    if isinstance(value, (list, tuple)):
        return "true" in value or True in value
    return value is True or value == "true"


def form_value(form_input: Dict[str, Any], key: str) -> Optional[str]:
    """Single string value from a form, or None when absent/blank."""
    value = form_input.get(key)
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def form_values(form_input: Dict[str, Any], key: str) -> List[str]:
    """List of non-blank values from a form (single values are wrapped)."""
    value = form_input.get(key)
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        value = [value]
    return [str(v).strip() for v in value if v is not None and str(v).strip()]
