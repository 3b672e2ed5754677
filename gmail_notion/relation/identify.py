"""Recover the linked database id from a relation property's configuration."""
import json
import re
from typing import Any, Callable, Dict, List, Optional

_UUID = re.compile(r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}")
_HEX32 = re.compile(r"(?<![0-9a-fA-F])[0-9a-fA-F]{32}(?![0-9a-fA-F])")

Extractor = Callable[[Dict[str, Any]], Optional[str]]


def normalize_id(value: Any) -> Optional[str]:
    """Notion ids without hyphens, lowercased; None unless 32 hex digits remain."""
    if not isinstance(value, str):
        return None
    clean = value.replace("-", "").strip().lower()
    if len(clean) == 32 and all(c in "0123456789abcdef" for c in clean):
        return clean
    return None


def from_database_id(config: Dict[str, Any]) -> Optional[str]:
    value = config.get("database_id")
    if isinstance(value, dict):
        value = value.get("id")
    return normalize_id(value)


def from_data_source_id(config: Dict[str, Any]) -> Optional[str]:
    return normalize_id(config.get("data_source_id"))


def from_dual_property(config: Dict[str, Any]) -> Optional[str]:
    dual = config.get("dual_property")
    if not isinstance(dual, dict):
        return None
    for key in ("database_id", "data_source_id"):
        found = normalize_id(dual.get(key))
        if found:
            return found
    return None


def _serialized(config: Dict[str, Any]) -> str:
    return json.dumps(config, default=str)


def from_uuid_substring(config: Dict[str, Any]) -> Optional[str]:
    match = _UUID.search(_serialized(config))
    return normalize_id(match.group(0)) if match else None


def from_hex_substring(config: Dict[str, Any]) -> Optional[str]:
    match = _HEX32.search(_serialized(config))
    return normalize_id(match.group(0)) if match else None


# Tried in order; the first extractor returning an id wins
EXTRACTORS: List[Extractor] = [
    from_database_id,
    from_data_source_id,
    from_dual_property,
    from_uuid_substring,
    from_hex_substring,
]


def identify_database_id(
    config: Optional[Dict[str, Any]],
    extractors: Optional[List[Extractor]] = None,
) -> Optional[str]:
    """
    Find the linked database id in a relation configuration

    Args:
        config: Relation config, e.g. {"database_id": "...", "dual_property": {...}}
        extractors: Override the default extractor chain

    Returns:
        Normalized 32-hex id, or None when no representation yields one
    """
    if not config or not isinstance(config, dict):
        return None
    for extractor in extractors or EXTRACTORS:
        found = extractor(config)
        if found:
            return found
    return None
