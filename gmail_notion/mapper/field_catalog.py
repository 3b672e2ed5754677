"""Catalog of email fields and which Notion property types they can feed."""
from dataclasses import dataclass
from typing import Dict, List, Optional

# System managed: injected by the page writer, never offered for selection
BACK_LINK_FIELD = "gmailLinkUrl"


@dataclass(frozen=True)
class SourceFieldDescriptor:
    """An email field offered as a mapping source."""

    label: str
    value: str
    category: str

    def to_dict(self) -> Dict[str, str]:
        return {"label": self.label, "value": self.value, "category": self.category}


class FieldCatalog:
    """Static tables of source fields, type compatibility and recommendations."""

    FIELDS = [
        SourceFieldDescriptor("Subject", "subject", "basic"),
        SourceFieldDescriptor("From (full)", "from", "basic"),
        SourceFieldDescriptor("From (email only)", "fromEmail", "basic"),
        SourceFieldDescriptor("From (name only)", "fromName", "basic"),
        SourceFieldDescriptor("To", "to", "basic"),
        SourceFieldDescriptor("CC", "cc", "basic"),
        SourceFieldDescriptor("BCC", "bcc", "basic"),
        SourceFieldDescriptor("Reply-To", "replyTo", "basic"),
        SourceFieldDescriptor("Date", "date", "basic"),
        SourceFieldDescriptor("Body (plain text)", "plainBody", "content"),
        SourceFieldDescriptor("Body (HTML)", "body", "content"),
        SourceFieldDescriptor("Snippet", "snippet", "content"),
        SourceFieldDescriptor("Gmail Link", BACK_LINK_FIELD, "links"),
        SourceFieldDescriptor("Message ID", "messageId", "links"),
        SourceFieldDescriptor("Thread ID", "threadId", "links"),
        SourceFieldDescriptor("Labels", "labels", "status"),
        SourceFieldDescriptor("Starred", "starred", "status"),
        SourceFieldDescriptor("In Inbox", "inInbox", "status"),
        SourceFieldDescriptor("Unread", "unread", "status"),
        SourceFieldDescriptor("Has Attachments", "hasAttachments", "attachments"),
        SourceFieldDescriptor("Attachment Count", "attachmentCount", "attachments"),
        SourceFieldDescriptor("Attachments", "attachments", "attachments"),
    ]

    COMPATIBILITY = {
        "title": ["subject", "from", "fromName", "snippet"],
        "rich_text": [
            "subject", "from", "fromName", "to", "cc",
            "plainBody", "body", "snippet", "labels",
        ],
        "email": ["from", "fromEmail", "to", "cc", "replyTo"],
        "url": [BACK_LINK_FIELD, "messageId", "threadId"],
        "phone_number": ["subject", "snippet", "plainBody"],
        "date": ["date"],
        "number": ["attachmentCount"],
        "checkbox": ["starred", "inInbox", "unread", "hasAttachments"],
        "select": ["labels"],
        "multi_select": ["labels"],
        "files": ["attachments"],
    }

    RECOMMENDATIONS = {
        "title": "subject",
        "rich_text": "plainBody",
        "email": "fromEmail",
        "url": BACK_LINK_FIELD,
        "phone_number": "snippet",
        "date": "date",
        "number": "attachmentCount",
        "checkbox": "hasAttachments",
        "select": "labels",
        "multi_select": "labels",
        "files": "attachments",
    }

    DEFAULT_FIELD = "subject"

    def __init__(self):
        self._by_value = {f.value: f for f in self.FIELDS}

    def all_fields(self) -> List[SourceFieldDescriptor]:
        return list(self.FIELDS)

    def categories(self) -> Dict[str, List[SourceFieldDescriptor]]:
        """Fields grouped by category, in catalog order."""
        grouped: Dict[str, List[SourceFieldDescriptor]] = {}
        for f in self.FIELDS:
            grouped.setdefault(f.category, []).append(f)
        return grouped

    def get_field(self, value: str) -> Optional[SourceFieldDescriptor]:
        return self._by_value.get(value)

    def fields_for(self, property_type: str) -> List[SourceFieldDescriptor]:
        """Fields a user may pick for a property type (back-link excluded)."""
        values = self.COMPATIBILITY.get(property_type, [])
        return [
            self._by_value[v]
            for v in values
            if v != BACK_LINK_FIELD and v in self._by_value
        ]

    def recommend(self, property_type: str) -> SourceFieldDescriptor:
        """Default source field for a newly configured property."""
        value = self.RECOMMENDATIONS.get(property_type, self.DEFAULT_FIELD)
        if value == BACK_LINK_FIELD:
            # Not selectable; fall back to the first selectable option
            options = self.fields_for(property_type)
            if options:
                return options[0]
            value = self.DEFAULT_FIELD
        return self._by_value[value]

    def is_compatible(self, field_value: str, property_type: str) -> bool:
        return field_value in self.COMPATIBILITY.get(property_type, [])
