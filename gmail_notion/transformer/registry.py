"""Transformer registry."""
import logging
import re
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List

from bs4 import BeautifulSoup

from gmail_notion.schema.models import parse_datetime

logger = logging.getLogger(__name__)

_PREFIXES = re.compile(r"^(?:(?:re|fwd?)\s*:\s*)+", re.IGNORECASE)
_LINKS = re.compile(r"https?://[^\s\]()<>\"]+")
_EMAIL = re.compile(r"[^\s@<>]+@[^\s@<>]+\.[^\s@<>]+")
_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")
_WHITESPACE = re.compile(r"[ \t\r\f\v]+")
_BLANK_LINES = re.compile(r"\n\s*\n+")


def to_text(value: Any) -> str:
    """Render a source value as text the way every handler expects it."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return ", ".join(to_text(v) for v in value)
    return str(value)


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def to_iso(value: datetime) -> str:
    """ISO-8601 in UTC; naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


class TransformerRegistry:
    """Named, pure value transforms keyed by Notion property type."""

    OPTIONS = {
        "title": [
            {"label": "Use as-is", "value": "none"},
            {"label": "Remove Re:/Fwd: prefixes", "value": "remove_prefixes"},
            {"label": "Truncate to 100 characters", "value": "truncate_100"},
        ],
        "rich_text": [
            {"label": "Use as-is", "value": "none"},
            {"label": "Convert HTML to text", "value": "html_to_text"},
            {"label": "Truncate to 500 characters", "value": "truncate_500"},
            {"label": "Extract links only", "value": "extract_links"},
        ],
        "email": [
            {"label": "Extract email address", "value": "extract_email"},
            {"label": "Keep full text", "value": "keep_full"},
        ],
        "date": [{"label": "Parse date", "value": "parse_date"}],
        "url": [{"label": "Use as-is", "value": "none"}],
        "number": [
            {"label": "Extract number", "value": "extract_number"},
            {"label": "Count items", "value": "count_items"},
        ],
        "phone_number": [{"label": "Use as-is", "value": "none"}],
    }

    DEFAULT_OPTIONS = [{"label": "No processing", "value": "none"}]

    def __init__(self):
        """Initialize registry."""
        self.transformers: Dict[str, Callable[[Any], Any]] = {
            "none": lambda x: x,
            "keep_full": lambda x: x,
            "remove_prefixes": self._remove_prefixes,
            "truncate_100": lambda x: self._truncate(x, 100),
            "truncate_500": lambda x: self._truncate(x, 500),
            "html_to_text": self._html_to_text,
            "extract_links": self._extract_links,
            "extract_email": self._extract_email,
            "parse_date": self._parse_date,
            "count_items": self._count_items,
            "extract_number": self._extract_number,
        }

    def get(self, name: str) -> Callable[[Any], Any]:
        """Get transformer by name (identity for unknown names)."""
        return self.transformers.get(name, self.transformers["none"])

    def options_for(self, property_type: str) -> List[Dict[str, str]]:
        """Transform choices offered for a property type."""
        return [dict(o) for o in self.OPTIONS.get(property_type, self.DEFAULT_OPTIONS)]

    def is_valid(self, name: str, property_type: str) -> bool:
        return any(o["value"] == name for o in self.options_for(property_type))

    def apply(self, value: Any, name: str) -> Any:
        """
        Apply a named transformation

        Never raises: a failing transform logs and returns the input unchanged.

        Args:
            value: Source value (lists are joined with ", " first)
            name: Transform name, e.g. "remove_prefixes"

        Returns:
            Transformed value
        """
        if not value and value is not False and value != 0:
            return value
        if not name or name not in self.transformers:
            return value

        if isinstance(value, (list, tuple)):
            value = to_text(value)

        try:
            return self.transformers[name](value)
        except Exception as e:
            logger.error(f"Transformation '{name}' failed: {e}")
            return value

    @staticmethod
    def _remove_prefixes(value: Any) -> str:
        return _PREFIXES.sub("", to_text(value)).strip()

    @staticmethod
    def _truncate(value: Any, limit: int) -> str:
        text = to_text(value)
        if len(text) <= limit:
            return text
        return text[: limit - 3] + "..."

    @staticmethod
    def _html_to_text(value: Any) -> str:
        soup = BeautifulSoup(to_text(value), "html.parser")
        for tag in soup(["script", "style"]):
            tag.decompose()
        for br in soup.find_all("br"):
            br.replace_with("\n")
        text = soup.get_text()
        text = _WHITESPACE.sub(" ", text)
        text = _BLANK_LINES.sub("\n\n", text)
        return text.strip()

    @staticmethod
    def _extract_links(value: Any) -> str:
        text = to_text(value)
        links = _LINKS.findall(text)
        return ", ".join(links) if links else text

    @staticmethod
    def _extract_email(value: Any) -> str:
        text = to_text(value)
        match = _EMAIL.search(text)
        return match.group(0) if match else text

    @staticmethod
    def _parse_date(value: Any) -> str:
        parsed = parse_datetime(value)
        if parsed is None:
            return now_iso()
        return to_iso(parsed)

    @staticmethod
    def _count_items(value: Any) -> int:
        return len([item for item in to_text(value).split(",") if item.strip()])

    @staticmethod
    def _extract_number(value: Any):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return value
        match = _NUMBER.search(to_text(value))
        if not match:
            return None
        text = match.group(0)
        return float(text) if "." in text else int(text)
