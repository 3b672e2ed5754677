"""
Schema Analyzer - Parses Notion database objects into DatabaseSchema.

Supports:
- Property type and id extraction
- Select/status/multi-select option lists
- Relation targets (database_id, data_source_id, dual_property)
- Required flag for the title / "Name" property
"""

import logging
from typing import Any, Dict, List

from gmail_notion.schema.models import DatabaseSchema, TargetField

logger = logging.getLogger(__name__)


class SchemaAnalyzer:
    """Turns raw Notion API responses into schema models."""

    def analyze_database(self, database: Dict[str, Any]) -> DatabaseSchema:
        """
        Parse a database object

        Args:
            database: Response of GET /databases/{id}

        Returns:
            DatabaseSchema with properties ordered title first, then by name
        """
        properties = self.analyze_properties(database.get("properties") or {})

        schema = DatabaseSchema(
            id=database.get("id", ""),
            title=self._plain_title(database.get("title") or []),
            url=database.get("url", ""),
            properties=properties,
        )
        logger.info(f"Analyzed database '{schema.title}' ({len(properties)} properties)")
        return schema

    def analyze_properties(self, raw_properties: Dict[str, Any]) -> List[TargetField]:
        properties = []
        for name, raw in raw_properties.items():
            if not isinstance(raw, dict) or "type" not in raw:
                logger.warning(f"Skipping malformed property '{name}'")
                continue
            properties.append(TargetField.from_api(name, raw))

        properties.sort(key=lambda p: (not p.is_title, p.name.lower()))
        return properties

    @staticmethod
    def _plain_title(title: List[Dict[str, Any]]) -> str:
        return "".join(part.get("plain_text", "") for part in title) or "Untitled"
