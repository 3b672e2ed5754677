"""Mapping entry model."""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

# Wire key -> attribute name
_WIRE_KEYS = {
    "type": "type",
    "enabled": "enabled",
    "sourceField": "source_field",
    "transformation": "transformation",
    "staticValue": "static_value",
    "matchField": "match_field",
    "matchSourceField": "match_source_field",
    "required": "required",
    "propertyName": "property_name",
    "fileHandling": "file_handling",
    "relationConfig": "relation_config",
}

# Keys written by earlier versions of the add-on
_LEGACY_KEYS = {
    "emailField": "source_field",
    "notionPropertyName": "property_name",
    "notionPropertyType": "type",
    "selectedOption": "static_value",
    "selectedOptions": "static_value",
    "selectedUserId": "static_value",
    "checkboxValue": "static_value",
    "matchProperty": "match_field",
    "matchValue": "match_source_field",
    "isRequired": "required",
    "isEnabled": "enabled",
}

_FILE_HANDLING_ALIASES = {"upload_to_drive": "upload"}


@dataclass
class MappingEntry:
    """Persisted configuration binding one Notion property to email data."""

    type: str
    enabled: bool = False
    source_field: Optional[str] = None
    transformation: Optional[str] = None
    static_value: Any = None
    match_field: Optional[str] = None
    match_source_field: Optional[str] = None
    required: bool = False
    property_name: Optional[str] = None
    file_handling: Optional[str] = None
    relation_config: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (camelCase wire format, empty keys omitted)."""
        result: Dict[str, Any] = {}
        for wire_key, attr in _WIRE_KEYS.items():
            value = getattr(self, attr)
            if value is None:
                continue
            if attr == "relation_config" and not value:
                continue
            result[wire_key] = value
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MappingEntry":
        """
        Load an entry from its wire format

        Accepts both the current camelCase keys and the legacy key names.

        Args:
            data: Stored mapping dictionary

        Returns:
            MappingEntry
        """
        values: Dict[str, Any] = {}
        for key, attr in _LEGACY_KEYS.items():
            if key in data and data[key] is not None:
                values[attr] = data[key]
        for key, attr in _WIRE_KEYS.items():
            if key in data and data[key] is not None:
                values[attr] = data[key]

        values.setdefault("type", "")
        values["enabled"] = values.get("enabled") in (True, "true")
        values["required"] = values.get("required") in (True, "true")
        if values.get("file_handling"):
            mode = values["file_handling"]
            values["file_handling"] = _FILE_HANDLING_ALIASES.get(mode, mode)
        if not isinstance(values.get("relation_config", {}), dict):
            values["relation_config"] = {}

        return cls(**values)
