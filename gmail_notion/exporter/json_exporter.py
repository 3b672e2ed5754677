"""JSON exporter for dry runs."""
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from gmail_notion.mapper.mapping import MappingEntry
from gmail_notion.schema.models import SourceRecord


class JsonExporter:
    """Export the page payload an email would produce, without writing to Notion."""

    def export(
        self,
        output_file: Path,
        record: SourceRecord,
        mappings: Dict[str, MappingEntry],
        properties: Dict[str, Any],
        removed: Optional[List[str]] = None,
        errors: Optional[List[Dict[str, str]]] = None,
    ) -> None:
        """Export to JSON file."""
        output_file = Path(output_file)
        output_file.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "metadata": {
                "created_at": datetime.now().isoformat(),
                "message_id": record.message_id,
                "subject": record.subject,
                "total_mappings": len(mappings),
                "mapped_properties": len(properties),
                "removed_properties": removed or [],
            },
            "mappings": {key: m.to_dict() for key, m in mappings.items()},
            "properties": properties,
            "errors": errors or [],
        }

        with open(output_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, default=str, ensure_ascii=False)
