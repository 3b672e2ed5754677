"""Validation of stored mapping sets."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from gmail_notion.mapper.mapping import MappingEntry
from gmail_notion.schema.models import DatabaseSchema

# Types whose source_field is checked against the catalog
_SOURCE_FIELD_TYPES = ("title", "rich_text", "email", "url", "number", "phone_number")


@dataclass
class ValidationReport:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    total_mappings: int = 0
    enabled_mappings: int = 0

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "errors": self.errors,
            "warnings": self.warnings,
            "totalMappings": self.total_mappings,
            "enabledMappings": self.enabled_mappings,
        }


class MappingValidator:
    """Validates mappings against the catalog, the handlers and the live schema."""

    def __init__(self, factory):
        self.factory = factory

    def validate(
        self,
        mapping_set: Mapping[str, Any],
        schema: Optional[DatabaseSchema] = None,
    ) -> ValidationReport:
        """Validate mappings."""
        report = ValidationReport(total_mappings=len(mapping_set))
        catalog = self.factory.catalog
        transformers = self.factory.transformers

        for key, raw in mapping_set.items():
            entry = raw if isinstance(raw, MappingEntry) else MappingEntry.from_dict(raw)
            name = entry.property_name or key

            if entry.enabled:
                report.enabled_mappings += 1

            if not entry.type:
                report.errors.append(f"{name}: missing property type")
                continue

            if self.factory.is_auto_managed(entry.type):
                report.warnings.append(f"{name}: {entry.type} properties are computed by Notion and ignored")
                continue

            if not self.factory.has_handler(entry.type):
                report.errors.append(f"{name}: unsupported property type '{entry.type}'")
                continue

            if schema is not None and schema.get_property(key) is None and schema.get_property(name) is None:
                report.warnings.append(f"{name}: property no longer exists in the database")

            if not entry.enabled:
                continue

            if entry.type in _SOURCE_FIELD_TYPES and entry.source_field:
                if not catalog.is_compatible(entry.source_field, entry.type):
                    report.errors.append(
                        f"{name}: email field '{entry.source_field}' cannot be used for {entry.type}"
                    )
            if entry.type == "date" and entry.source_field not in (None, "date", "now"):
                report.errors.append(f"{name}: unknown date source '{entry.source_field}'")

            if (
                entry.type in _SOURCE_FIELD_TYPES
                and entry.transformation
                and not transformers.is_valid(entry.transformation, entry.type)
            ):
                report.errors.append(
                    f"{name}: transformation '{entry.transformation}' is not available for {entry.type}"
                )

            if entry.type == "relation" and not (entry.match_field and entry.match_source_field):
                report.errors.append(f"{name}: relation needs a match property and an email field")

        return report
