#!/usr/bin/env python3
"""Gmail → Notion Mapper - Entry point."""
import logging
import os
import sys

# Allow running from a source checkout without installing
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import click
from colorama import Fore, Style, init

from config import app_config
from gmail_notion import __version__
from gmail_notion.cli.interactive import InteractiveCLI

# Initialize colorama
init(autoreset=True)


def print_banner():
    """Print application banner."""
    print(f"{Fore.CYAN}{'=' * 44}")
    print(f"{Fore.CYAN}║   {Fore.WHITE}Gmail → Notion Mapper{Fore.CYAN}                ║")
    print(f"{Fore.CYAN}║   {Fore.WHITE}Email to database property mapping{Fore.CYAN}   ║")
    print(f"{Fore.CYAN}{'=' * 44}{Style.RESET_ALL}")
    print()


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Logging verbosity",
)
def cli(log_level):
    """Gmail → Notion Mapper - copy emails into a Notion database."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
def menu():
    """Open the interactive menu."""
    print_banner()
    InteractiveCLI().run()


@cli.command()
def sync_schema():
    """Fetch the database schema and create default mappings."""
    print_banner()
    InteractiveCLI().sync_schema()


@cli.command()
@click.option("--property", "property_filter", help="Configure a single property (id or name)")
def configure(property_filter):
    """Configure property mappings interactively."""
    print_banner()
    InteractiveCLI().configure(property_filter)


@cli.command()
@click.argument("record_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--dry-run", is_flag=True, help="Build the payload without creating a page")
@click.option("--output", type=click.Path(dir_okay=False), help="Write the dry-run payload to a JSON file")
def apply(record_file, dry_run, output):
    """Create Notion pages from emails stored as JSON."""
    print_banner()
    InteractiveCLI().apply_file(record_file, dry_run=dry_run, output=output)


@cli.command()
def validate():
    """Validate saved mappings against the database."""
    print_banner()
    report = InteractiveCLI().validate()
    if not report.is_valid:
        sys.exit(1)


@cli.command()
def show_mappings():
    """List saved mappings."""
    print_banner()
    InteractiveCLI().show_mappings()


@cli.command()
def config_api():
    """Configure Notion API credentials for this session."""
    print_banner()

    click.echo(f"{Fore.YELLOW}Notion API Configuration")
    click.echo(f"{Fore.YELLOW}{'=' * 30}")

    api_key = click.prompt("Integration token", hide_input=True, default="", show_default=False)
    database_id = click.prompt("Database ID", default=app_config.notion_api.database_id)

    if api_key:
        app_config.notion_api.api_key = api_key
    app_config.notion_api.database_id = database_id

    problems = app_config.validate()
    if problems:
        for problem in problems:
            click.echo(f"{Fore.YELLOW}⚠️  {problem}")
        return

    click.echo(f"{Fore.GREEN}✅ Configuration saved for this session!")
    click.echo("   Export NOTION_API_KEY and NOTION_DATABASE_ID to keep it.")


if __name__ == "__main__":
    cli()
