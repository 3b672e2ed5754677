"""Interactive CLI for the Gmail → Notion mapper."""
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import click
from colorama import Fore, Style

from config import AppConfig, app_config
from gmail_notion.api.notion_client import NotionClient
from gmail_notion.attachments.service import AttachmentService
from gmail_notion.builder.payload_builder import MappingOrchestrator
from gmail_notion.errors import AppError
from gmail_notion.exporter.json_exporter import JsonExporter
from gmail_notion.handlers.factory import PropertyHandlerFactory
from gmail_notion.introspection.database_introspector import DatabaseIntrospector
from gmail_notion.mapper.field_catalog import FieldCatalog
from gmail_notion.relation.cache import FieldCache
from gmail_notion.relation.resolver import RelationResolver
from gmail_notion.schema.models import DatabaseSchema, SourceRecord, display_name
from gmail_notion.store.mapping_repository import MappingRepository
from gmail_notion.transformer.registry import TransformerRegistry
from gmail_notion.ui.widgets import SelectionInput, TextInput, TextParagraph, Widget
from gmail_notion.writer.page_writer import PageWriter

_PARAGRAPH_COLORS = {
    "header": Fore.CYAN + Style.BRIGHT,
    "warning": Fore.YELLOW,
    "info": Style.DIM,
}


class InteractiveCLI:
    """Interactive CLI interface."""

    def __init__(self, config: Optional[AppConfig] = None):
        """Wire up the client, the mapping engine and the stores."""
        self.config = config or app_config
        settings = self.config.mapping

        self.client = NotionClient(self.config.notion_api)
        self.introspector = DatabaseIntrospector(
            self.client,
            cache_ttl=settings.schema_cache_ttl,
            cache_dir=Path(self.config.config_dir) / "schemas",
        )
        self.transformers = TransformerRegistry()
        self.catalog = FieldCatalog()
        self.resolver = RelationResolver(
            self.client,
            FieldCache(ttl_seconds=settings.relation_cache_ttl),
            timeout_ms=settings.relation_timeout_ms,
            page_size=settings.relation_page_size,
            transformers=self.transformers,
        )
        self.factory = PropertyHandlerFactory(
            catalog=self.catalog,
            transformers=self.transformers,
            resolver=self.resolver,
            directory=self.client,
            attachments=AttachmentService(),
            default_file_handling=settings.default_file_handling,
        )
        self.orchestrator = MappingOrchestrator(self.factory)
        self.repository = MappingRepository(self.config.mappings_path)
        self.writer = PageWriter(
            self.client,
            self.orchestrator,
            self.introspector,
            self.config,
            link_property_name=settings.link_property_name,
        )
        self.exporter = JsonExporter()

    def print_header(self, title: str):
        """Print a section header."""
        print(f"\n{Fore.CYAN}{'━' * 45}")
        print(f"{Fore.CYAN}{title}")
        print(f"{Fore.CYAN}{'━' * 45}{Style.RESET_ALL}\n")

    def run(self):
        """Run interactive CLI."""
        while True:
            self.print_header("Main Menu")
            click.echo("1. Sync database schema")
            click.echo("2. Configure mappings")
            click.echo("3. Show mappings")
            click.echo("4. Validate mappings")
            click.echo("5. Exit\n")

            choice = click.prompt("Choose", type=int, default=1)

            if choice == 1:
                self.sync_schema()
            elif choice == 2:
                self.configure()
            elif choice == 3:
                self.show_mappings()
            elif choice == 4:
                self.validate()
            elif choice == 5:
                click.echo(f"{Fore.YELLOW}Goodbye!")
                break
            else:
                click.echo(f"{Fore.RED}Invalid choice")

    # ========================================================================
    # Schema
    # ========================================================================

    def _load_schema(self, force_refresh: bool = False) -> Optional[DatabaseSchema]:
        problems = self.config.validate()
        if problems:
            for problem in problems:
                click.echo(f"{Fore.RED}✗ {problem}")
            click.echo(f"{Fore.YELLOW}Run 'config-api' or set the environment variables first.")
            return None
        try:
            return self.introspector.get_schema(self.config.notion_api.database_id, force_refresh)
        except AppError as e:
            click.echo(f"{Fore.RED}{e.user_message()}")
            return None

    def sync_schema(self):
        """Fetch the database schema and create default mappings."""
        self.print_header("Sync Database Schema")
        click.echo(f"{Fore.CYAN}Connecting to {self.config.notion_api.base_url}...")

        schema = self._load_schema(force_refresh=True)
        if schema is None:
            return

        mappings = self.repository.initialize_from_schema(schema, self.catalog)

        click.echo(f"{Fore.GREEN}✅ Schema synced successfully!")
        click.echo(f"{Fore.GREEN}   Database: {schema.title}")
        click.echo(f"{Fore.GREEN}   Properties: {len(schema.properties)}")
        click.echo(f"{Fore.GREEN}   Mappings: {len(mappings)} ({self.repository.path})")

        for prop in schema.properties:
            marker = "✗" if prop.is_auto_managed else "✓"
            required = " *" if prop.required else ""
            click.echo(f"   {marker} {prop.name} ({display_name(prop.type)}){required}")

    # ========================================================================
    # Configuration
    # ========================================================================

    def configure(self, property_filter: Optional[str] = None):
        """Walk through each property's configuration widgets and save."""
        self.print_header("Configure Mappings")

        schema = self._load_schema()
        if schema is None:
            return

        current = self.repository.get_all()
        form: Dict[str, Any] = {}

        for prop in schema.mappable_properties():
            if property_filter and property_filter not in (prop.id, prop.name):
                continue
            handler = self.factory.get_handler(prop.type)
            if handler is None:
                continue

            click.echo("")
            form.update(self._configure_property(handler, prop, current.get(prop.id)))

            if not property_filter and not click.confirm("Continue to the next property?", default=True):
                break

        if not form:
            click.echo(f"{Fore.YELLOW}Nothing to save.")
            return

        mappings = self.repository.save_from_form(schema, form, self.factory)
        enabled = sum(1 for m in mappings.values() if m.enabled)
        click.echo(f"\n{Fore.GREEN}✅ Configuration saved! ({enabled} enabled mappings)")

    def _configure_property(self, handler, prop, current) -> Dict[str, Any]:
        form = self.render_widgets(handler.build_ui(prop, current))

        # Some widgets only appear once earlier choices are made
        parsed = handler.parse_configuration(prop, form)
        follow_up = [
            w for w in handler.build_ui(prop, parsed)
            if isinstance(w, (SelectionInput, TextInput)) and w.field_name not in form
        ]
        if follow_up:
            form.update(self.render_widgets(follow_up))
        return form

    def render_widgets(self, widgets: List[Widget]) -> Dict[str, Any]:
        """Prompt for each widget and return the collected form values."""
        form: Dict[str, Any] = {}

        for widget in widgets:
            if isinstance(widget, TextParagraph):
                color = _PARAGRAPH_COLORS.get(widget.kind, "")
                click.echo(f"{color}{widget.text}{Style.RESET_ALL}")

            elif isinstance(widget, TextInput):
                form[widget.field_name] = click.prompt(widget.title, default=widget.value, show_default=True)

            elif widget.input_type == "checkbox":
                item = widget.items[0]
                checked = click.confirm(item.label, default=item.selected)
                form[widget.field_name] = "true" if checked else "false"

            elif widget.input_type == "multi_select":
                form[widget.field_name] = self._prompt_many(widget)

            else:
                form[widget.field_name] = self._prompt_one(widget)

        return form

    def _prompt_one(self, widget: SelectionInput) -> str:
        click.echo(f"{widget.title}:")
        default = 1
        for i, item in enumerate(widget.items, 1):
            click.echo(f"  {i}. {item.label}")
            if item.selected:
                default = i
        choice = click.prompt("Choose", type=click.IntRange(1, len(widget.items)), default=default)
        return widget.items[choice - 1].value

    def _prompt_many(self, widget: SelectionInput) -> List[str]:
        click.echo(f"{widget.title} (comma-separated numbers, blank for none):")
        for i, item in enumerate(widget.items, 1):
            click.echo(f"  {i}. {item.label}")
        default = ",".join(str(i) for i, item in enumerate(widget.items, 1) if item.selected)
        answer = click.prompt("Choose", default=default, show_default=bool(default))

        values = []
        for part in str(answer).split(","):
            part = part.strip()
            if part.isdigit() and 1 <= int(part) <= len(widget.items):
                values.append(widget.items[int(part) - 1].value)
        return values

    # ========================================================================
    # Mappings
    # ========================================================================

    def show_mappings(self):
        """List stored mappings."""
        self.print_header("Stored Mappings")

        mappings = self.repository.get_all()
        if not mappings:
            click.echo(f"{Fore.YELLOW}No mappings saved. Run 'sync-schema' first.")
            return

        for key, m in mappings.items():
            icon = f"{Fore.GREEN}✓" if m.enabled else f"{Fore.RED}✗"
            source = m.source_field or m.static_value or m.match_source_field or "-"
            extra = f" [{m.transformation}]" if m.transformation and m.transformation != "none" else ""
            click.echo(f"{icon} {m.property_name or key} ({display_name(m.type)}) ← {source}{extra}")

    def validate(self):
        """Validate stored mappings against the live schema."""
        self.print_header("Validate Mappings")

        schema = self._load_schema()
        report = self.orchestrator.validate(self.repository.get_all(), schema)

        click.echo(f"{Fore.GREEN}✅ Validation complete")
        click.echo(f"   Mappings: {report.total_mappings} ({report.enabled_mappings} enabled)")
        click.echo(f"   Errors: {len(report.errors)}")
        click.echo(f"   Warnings: {len(report.warnings)}")

        for error in report.errors:
            click.echo(f"{Fore.RED}   • {error}")
        for warning in report.warnings:
            click.echo(f"{Fore.YELLOW}   • {warning}")
        return report

    # ========================================================================
    # Apply
    # ========================================================================

    def apply_file(self, record_file: Path, dry_run: bool = False, output: Optional[Path] = None):
        """Create pages (or preview payloads) for the emails in a JSON file."""
        self.print_header("Dry Run" if dry_run else "Create Notion Pages")

        with open(record_file, "r", encoding="utf-8") as f:
            data = json.load(f)
        records = [SourceRecord.from_dict(r) for r in (data if isinstance(data, list) else [data])]
        mappings = self.repository.get_all()

        if not mappings:
            click.echo(f"{Fore.YELLOW}No mappings saved. Run 'sync-schema' and 'configure' first.")
            return

        for index, record in enumerate(records, 1):
            click.echo(f"{Fore.CYAN}[{index}/{len(records)}] {record.subject or '(no subject)'}")
            try:
                if dry_run:
                    self._preview(record, mappings, output, index if len(records) > 1 else None)
                else:
                    result = self.writer.create_page_from_record(record, mappings)
                    click.echo(f"{Fore.GREEN}   ✅ Created {result.page.get('url') or result.page.get('id')}")
                    for removed in result.removed:
                        click.echo(f"{Fore.YELLOW}   • '{removed}' is no longer in the database, skipped")
                    for error in result.errors:
                        click.echo(f"{Fore.YELLOW}   • {error['property']}: {error['error']}")
            except AppError as e:
                click.echo(f"{Fore.RED}   {e.user_message()}")

    def _preview(self, record: SourceRecord, mappings, output: Optional[Path], index: Optional[int]):
        settings = self.config.get_all()
        if settings["apiKey"] and settings["targetCollectionId"]:
            properties, removed, errors = self.writer.build_properties(
                record,
                mappings,
                settings["apiKey"],
                settings["targetCollectionId"],
                create_link_property=False,
            )
        else:
            result = self.orchestrator.apply(mappings, record)
            properties, removed, errors = result.properties, [], result.errors

        if output is None:
            click.echo(json.dumps(properties, indent=2, ensure_ascii=False))
            return

        target = Path(output)
        if index is not None:
            target = target.with_name(f"{target.stem}_{index}{target.suffix}")
        self.exporter.export(target, record, mappings, properties, removed, errors)
        click.echo(f"{Fore.GREEN}   Payload written to {target}")
