"""Models for source emails and the target Notion database schema."""
import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from dateutil import parser as date_parser


class PropertyType(str, Enum):
    """Notion property types."""

    TITLE = "title"
    RICH_TEXT = "rich_text"
    SELECT = "select"
    STATUS = "status"
    MULTI_SELECT = "multi_select"
    CHECKBOX = "checkbox"
    DATE = "date"
    URL = "url"
    EMAIL = "email"
    NUMBER = "number"
    PHONE_NUMBER = "phone_number"
    PEOPLE = "people"
    FILES = "files"
    RELATION = "relation"
    # Computed by Notion, never written
    FORMULA = "formula"
    ROLLUP = "rollup"
    CREATED_TIME = "created_time"
    CREATED_BY = "created_by"
    LAST_EDITED_TIME = "last_edited_time"
    LAST_EDITED_BY = "last_edited_by"


AUTO_MANAGED_TYPES = frozenset(
    t.value
    for t in (
        PropertyType.FORMULA,
        PropertyType.ROLLUP,
        PropertyType.CREATED_TIME,
        PropertyType.CREATED_BY,
        PropertyType.LAST_EDITED_TIME,
        PropertyType.LAST_EDITED_BY,
    )
)

WRITABLE_TYPES = tuple(t.value for t in PropertyType if t.value not in AUTO_MANAGED_TYPES)

# Types configured by picking options rather than a source field
STATIC_OPTION_TYPES = frozenset(["select", "status", "checkbox", "multi_select"])

DISPLAY_NAMES = {
    "title": "Title",
    "rich_text": "Text",
    "select": "Select",
    "status": "Status",
    "multi_select": "Multi-select",
    "checkbox": "Checkbox",
    "date": "Date",
    "url": "URL",
    "email": "Email",
    "number": "Number",
    "phone_number": "Phone",
    "people": "People",
    "files": "Files",
    "relation": "Relation",
}

GMAIL_LINK_TEMPLATE = "https://mail.google.com/mail/u/0/#inbox/{message_id}"

_EMAIL_IN_TEXT = re.compile(r"[^\s@<>]+@[^\s@<>]+\.[^\s@<>]+")
_DISPLAY_NAME = re.compile(r'^"?(.*?)"?\s*<.*?>')


def display_name(property_type: str) -> str:
    """Human readable name for a property type."""
    return DISPLAY_NAMES.get(property_type, property_type)


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse a date-ish value, returning None when it cannot be understood."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return date_parser.parse(str(value))
    except (ValueError, OverflowError):
        return None


def parse_flag(value: Any) -> bool:
    """Boolean from a JSON flag that may arrive as a string ("false", "1", "yes")."""
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return value is True or value == 1


# ============================================================================
# SOURCE RECORD
# ============================================================================


# Catalog key -> attribute name
_RECORD_FIELDS = {
    "messageId": "message_id",
    "threadId": "thread_id",
    "subject": "subject",
    "from": "sender",
    "fromEmail": "from_email",
    "fromName": "from_name",
    "to": "to",
    "cc": "cc",
    "bcc": "bcc",
    "replyTo": "reply_to",
    "date": "date",
    "body": "body",
    "plainBody": "plain_body",
    "snippet": "snippet",
    "labels": "labels",
    "starred": "starred",
    "unread": "unread",
    "inInbox": "in_inbox",
    "hasAttachments": "has_attachments",
    "attachmentCount": "attachment_count",
    "attachments": "attachments",
    "gmailLinkUrl": "gmail_link_url",
}


@dataclass(frozen=True)
class SourceRecord:
    """Flat, immutable view of one email message."""

    message_id: str = ""
    thread_id: str = ""
    subject: str = ""
    sender: str = ""
    to: str = ""
    cc: str = ""
    bcc: str = ""
    reply_to: str = ""
    date: Optional[datetime] = None
    body: str = ""
    plain_body: str = ""
    snippet: str = ""
    labels: Tuple[str, ...] = ()
    starred: bool = False
    unread: bool = False
    in_inbox: bool = False
    has_attachments: bool = False
    attachment_count: int = 0
    attachments: Tuple[Dict[str, Any], ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SourceRecord":
        """
        Build a record from decoded message data

        Args:
            data: Dict keyed by catalog field names (subject, from, plainBody, ...)

        Returns:
            SourceRecord with defaults applied
        """
        labels = data.get("labels") or []
        if isinstance(labels, str):
            labels = [label.strip() for label in labels.split(",") if label.strip()]

        attachments = data.get("attachments") or []
        if isinstance(attachments, dict):
            attachments = [attachments]

        count = data.get("attachmentCount")
        if count is None:
            count = len(attachments)
        try:
            count = int(count)
        except (TypeError, ValueError):
            count = len(attachments)

        has_attachments = data.get("hasAttachments")
        if has_attachments is None:
            has_attachments = count > 0

        return cls(
            message_id=str(data.get("messageId") or data.get("id") or ""),
            thread_id=str(data.get("threadId") or ""),
            subject=str(data.get("subject") or ""),
            sender=str(data.get("from") or ""),
            to=str(data.get("to") or ""),
            cc=str(data.get("cc") or ""),
            bcc=str(data.get("bcc") or ""),
            reply_to=str(data.get("replyTo") or ""),
            date=parse_datetime(data.get("date")),
            body=str(data.get("body") or ""),
            plain_body=str(data.get("plainBody") or ""),
            snippet=str(data.get("snippet") or ""),
            labels=tuple(str(label) for label in labels),
            starred=parse_flag(data.get("starred")),
            unread=parse_flag(data.get("unread")),
            in_inbox=parse_flag(data.get("inInbox")),
            has_attachments=parse_flag(has_attachments),
            attachment_count=count,
            attachments=tuple(dict(a) for a in attachments),
        )

    @property
    def from_email(self) -> str:
        match = _EMAIL_IN_TEXT.search(self.sender)
        return match.group(0) if match else ""

    @property
    def from_name(self) -> str:
        if not self.sender:
            return ""
        match = _DISPLAY_NAME.match(self.sender)
        if match and match.group(1).strip():
            return match.group(1).strip()
        if "@" in self.sender:
            return self.sender.split("@")[0].strip()
        return self.sender

    @property
    def gmail_link_url(self) -> str:
        if not self.message_id:
            return ""
        return GMAIL_LINK_TEMPLATE.format(message_id=self.message_id)

    def get_value(self, name: str) -> Any:
        """Return the value of a catalog field, or None for unknown fields."""
        attr = _RECORD_FIELDS.get(name)
        if attr is None:
            return None
        value = getattr(self, attr)
        if isinstance(value, tuple):
            return list(value)
        return value

    def has_content(self) -> bool:
        return bool(self.subject or self.plain_body or self.body or self.snippet)

    def preview(self, max_length: int = 200) -> str:
        """Short excerpt of the message text."""
        text = self.snippet or self.plain_body or ""
        if len(text) <= max_length:
            return text
        return text[: max_length - 3] + "..."

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary keyed by catalog field names."""
        result = {}
        for key in _RECORD_FIELDS:
            value = self.get_value(key)
            if isinstance(value, datetime):
                value = value.isoformat()
            result[key] = value
        return result


# ============================================================================
# TARGET SCHEMA
# ============================================================================


@dataclass
class TargetField:
    """One property of the target Notion database."""

    id: str
    name: str
    type: str
    required: bool = False
    config: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_title(self) -> bool:
        return self.type == PropertyType.TITLE.value

    @property
    def is_auto_managed(self) -> bool:
        return self.type in AUTO_MANAGED_TYPES

    @property
    def options(self) -> List[Dict[str, Any]]:
        return self.config.get("options", [])

    @classmethod
    def from_api(cls, name: str, raw: Dict[str, Any]) -> "TargetField":
        """
        Parse one property object from a Notion database response

        Args:
            name: Property name (the key in the "properties" object)
            raw: Property object, e.g. {"id": "abc", "type": "select", "select": {...}}

        Returns:
            TargetField with type-specific config extracted
        """
        prop_type = raw.get("type", "")
        type_data = raw.get(prop_type) or {}
        config: Dict[str, Any] = {}

        if prop_type in ("select", "status", "multi_select"):
            config["options"] = [
                {"id": opt.get("id"), "name": opt.get("name"), "color": opt.get("color")}
                for opt in type_data.get("options", [])
            ]
        elif prop_type == "relation":
            config = {
                "database_id": type_data.get("database_id"),
                "data_source_id": type_data.get("data_source_id"),
                "type": type_data.get("type"),
                "dual_property": type_data.get("dual_property"),
            }
        elif prop_type == "number":
            config["format"] = type_data.get("format")

        return cls(
            id=raw.get("id") or name,
            name=name,
            type=prop_type,
            required=prop_type == PropertyType.TITLE.value or name == "Name",
            config=config,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "required": self.required,
            "config": self.config,
        }


@dataclass
class DatabaseSchema:
    """A Notion database and its properties."""

    id: str
    title: str = ""
    url: str = ""
    properties: List[TargetField] = field(default_factory=list)
    fetched_at: datetime = field(default_factory=datetime.now)

    def get_property(self, key: str) -> Optional[TargetField]:
        """Return property by id or name."""
        for prop in self.properties:
            if prop.id == key or prop.name == key:
                return prop
        return None

    def title_property(self) -> Optional[TargetField]:
        for prop in self.properties:
            if prop.is_title:
                return prop
        return None

    def url_properties(self) -> List[TargetField]:
        return [p for p in self.properties if p.type == PropertyType.URL.value]

    def property_names(self) -> List[str]:
        return [p.name for p in self.properties]

    def mappable_properties(self) -> List[TargetField]:
        """Properties that accept written values."""
        return [p for p in self.properties if not p.is_auto_managed]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "fetched_at": self.fetched_at.isoformat(),
            "properties": [p.to_dict() for p in self.properties],
        }
