"""JSON file store for the mapping set."""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from gmail_notion.mapper.field_catalog import FieldCatalog
from gmail_notion.mapper.mapping import MappingEntry
from gmail_notion.schema.models import STATIC_OPTION_TYPES, DatabaseSchema

logger = logging.getLogger(__name__)


class MappingRepository:
    """
    Persists {property_id: MappingEntry} as JSON

    The mapping set is only ever changed here; the orchestrator receives
    a snapshot from get_all() and never writes back.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def get_all(self) -> Dict[str, MappingEntry]:
        """Stored mappings in file order ({} when missing or unreadable)."""
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Could not read mappings from {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.error(f"Mappings file {self.path} does not contain an object")
            return {}

        mappings = {}
        for key, raw in data.items():
            if not isinstance(raw, dict):
                logger.warning(f"Ignoring malformed mapping '{key}'")
                continue
            mappings[key] = MappingEntry.from_dict(raw)
        return mappings

    def get(self, property_id: str) -> Optional[MappingEntry]:
        return self.get_all().get(property_id)

    def get_enabled(self) -> Dict[str, MappingEntry]:
        return {k: m for k, m in self.get_all().items() if m.enabled or m.required}

    def save_all(self, mappings: Dict[str, MappingEntry]) -> None:
        """Replace the stored mapping set."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {key: entry.to_dict() for key, entry in mappings.items()}
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        logger.info(f"Saved {len(data)} mappings to {self.path}")

    def update(self, property_id: str, changes: Dict[str, Any]) -> MappingEntry:
        """Merge wire-format changes into one stored mapping."""
        mappings = self.get_all()
        current = mappings.get(property_id)
        base = current.to_dict() if current else {}
        mappings[property_id] = MappingEntry.from_dict({**base, **changes})
        self.save_all(mappings)
        return mappings[property_id]

    def delete(self, property_id: str) -> bool:
        mappings = self.get_all()
        if property_id not in mappings:
            return False
        del mappings[property_id]
        self.save_all(mappings)
        return True

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()

    def initialize_from_schema(
        self,
        schema: DatabaseSchema,
        catalog: Optional[FieldCatalog] = None,
    ) -> Dict[str, MappingEntry]:
        """
        Make sure every writable property has a mapping

        Existing entries keep their configuration but pick up the current
        name, type and required flag; new properties get catalog defaults
        (only the title is enabled). Entries for removed properties stay
        and are dropped at write time.

        Args:
            schema: Live database schema
            catalog: Source of default field recommendations

        Returns:
            The saved mapping set
        """
        catalog = catalog or FieldCatalog()
        mappings = self.get_all()

        for prop in schema.mappable_properties():
            existing = mappings.get(prop.id)
            if existing is not None:
                existing.property_name = prop.name
                existing.type = prop.type
                existing.required = prop.required
                if prop.type == "relation":
                    existing.relation_config = dict(prop.config)
                continue

            entry = MappingEntry(
                type=prop.type,
                enabled=prop.is_title,
                required=prop.required,
                property_name=prop.name,
            )
            if prop.type not in STATIC_OPTION_TYPES and prop.type not in ("people", "relation"):
                entry.source_field = catalog.recommend(prop.type).value
            if prop.type == "relation":
                entry.relation_config = dict(prop.config)
            mappings[prop.id] = entry

        self.save_all(mappings)
        return mappings

    def save_from_form(
        self,
        schema: DatabaseSchema,
        form_input: Dict[str, Any],
        factory,
    ) -> Dict[str, MappingEntry]:
        """
        Save one configuration page without losing the others

        A property with at least one form key is replaced by what its
        handler parses, so cleared choices stay cleared. Every other stored
        mapping is kept exactly as it was.

        Args:
            schema: Schema the form was built from
            form_input: Submitted form values keyed by widget field name
            factory: PropertyHandlerFactory used to parse each property

        Returns:
            The saved mapping set
        """
        mappings = self.get_all()
        updated = 0

        for prop in schema.properties:
            suffix = f"_{prop.id}"
            if not any(key.endswith(suffix) for key in form_input):
                continue
            handler = factory.get_handler(prop.type)
            if handler is None:
                continue

            mappings[prop.id] = handler.parse_configuration(prop, form_input)
            updated += 1

        self.save_all(mappings)
        logger.info(f"Updated {updated} mappings from form ({len(mappings)} total)")
        return mappings
