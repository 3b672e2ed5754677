"""
Relation properties: link the new page to pages of another database

The user chooses which property of the linked database to match and which
email field supplies the value. A relation mapping only counts as enabled
when both are chosen, whatever the enable checkbox says.
"""

import logging
from functools import partial
from typing import Any, Dict, List, Optional

from gmail_notion.handlers.base import PropertyHandler, current_or_default, new_entry
from gmail_notion.mapper.field_catalog import BACK_LINK_FIELD, FieldCatalog
from gmail_notion.mapper.mapping import MappingEntry
from gmail_notion.relation.identify import identify_database_id
from gmail_notion.relation.resolver import TEXT_MATCH_TYPES
from gmail_notion.schema.models import SourceRecord, TargetField
from gmail_notion.transformer.registry import TransformerRegistry
from gmail_notion.ui import widgets as ui

logger = logging.getLogger(__name__)


def build_ui(
    resolver,
    catalog: FieldCatalog,
    transformers: TransformerRegistry,
    target: TargetField,
    current: Optional[MappingEntry] = None,
) -> List[ui.Widget]:
    mapping = current_or_default(current, target)
    widgets: List[ui.Widget] = [ui.header(target)]
    if target.required:
        widgets.append(ui.required_indicator())

    if resolver is None:
        widgets.append(ui.warning("Relation matching is not available"))
        return widgets

    if identify_database_id(target.config) is None:
        widgets.append(ui.warning("The linked database could not be identified"))

    widgets.append(
        ui.enable_checkbox(
            f"relation_enabled_{target.id}",
            mapping.enabled,
            label="Link to matching pages",
        )
    )

    fields = resolver.related_fields(target.config)
    if fields and all(f.placeholder for f in fields):
        widgets.append(ui.warning("Could not load the linked database, showing common property names"))
    elif not fields:
        widgets.append(ui.warning("The linked database has no properties that can be matched"))
        return widgets

    property_choices = [{"label": "-- Select a property --", "value": ""}]
    property_choices.extend({"label": f.display_name, "value": f.id} for f in fields)
    widgets.append(
        ui.dropdown(
            f"relation_match_property_{target.id}",
            "Match against",
            property_choices,
            mapping.match_field or "",
        )
    )

    source_choices = [{"label": "-- Select an email field --", "value": ""}]
    source_choices.extend(
        {"label": f.label, "value": f.value}
        for f in catalog.all_fields()
        if f.value != BACK_LINK_FIELD
    )
    widgets.append(
        ui.dropdown(
            f"relation_match_value_{target.id}",
            "Using email field",
            source_choices,
            mapping.match_source_field or "",
        )
    )

    match_field = resolver.find_field(fields, mapping.match_field) if mapping.match_field else None
    if match_field is not None and match_field.type in TEXT_MATCH_TYPES:
        widgets.append(
            ui.dropdown(
                f"relation_transformation_{target.id}",
                "Processing",
                transformers.options_for(match_field.type),
                mapping.transformation,
            )
        )

    widgets.append(ui.info(f"Links up to {resolver.page_size} matching pages."))
    return widgets


def parse_configuration(target: TargetField, form_input: Dict[str, Any]) -> MappingEntry:
    checked = ui.is_checked(form_input, f"relation_enabled_{target.id}")
    match_field = ui.form_value(form_input, f"relation_match_property_{target.id}")
    match_source_field = ui.form_value(form_input, f"relation_match_value_{target.id}")
    transformation = ui.form_value(form_input, f"relation_transformation_{target.id}")

    return new_entry(
        target,
        # Checkbox alone is intent; both match choices make it usable
        enabled=checked and match_field is not None and match_source_field is not None,
        match_field=match_field,
        match_source_field=match_source_field,
        transformation=transformation,
        relation_config=dict(target.config),
    )


def to_payload(
    resolver,
    mapping: MappingEntry,
    record: SourceRecord,
    api_key: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    if not mapping.enabled or resolver is None:
        return None
    if not mapping.match_field or not mapping.match_source_field:
        return None

    try:
        page_ids = resolver.resolve(mapping, record, api_key)
    except Exception as e:
        logger.warning(f"Relation resolution failed for '{mapping.property_name}': {e}")
        return None

    if not page_ids:
        return None
    return {"relation": [{"id": page_id} for page_id in page_ids]}


def make_relation_handler(
    resolver,
    catalog: FieldCatalog,
    transformers: TransformerRegistry,
) -> PropertyHandler:
    return PropertyHandler(
        type="relation",
        build_ui=partial(build_ui, resolver, catalog, transformers),
        parse_configuration=parse_configuration,
        to_payload=partial(to_payload, resolver),
    )
