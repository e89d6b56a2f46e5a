#!/usr/bin/env python3
"""
Search Schema Sync CLI

Deploys a declared search schema into the metadata store, or undeploys it.

Usage:
    search-schema-sync schema.xml
    search-schema-sync schema.xml --undeploy
    search-schema-sync --generate-example > schema.xml
"""

import logging
import sys
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.style import Style

from search_schema import __version__
from search_schema.config_manager import create_config_from_env, setup_logging
from search_schema.document_loader import load_document
from search_schema.example_schema import EXAMPLE_DOCUMENT
from search_schema.exceptions import SchemaSyncError
from search_schema.orchestrator import SchemaDeployer
from search_schema.reporting import render_report
from search_schema.store import create_store

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class GreenInfoRichHandler(RichHandler):
    def get_level_style(self, level_name: str) -> Style:
        """Override log level colors for better readability."""
        if level_name == "INFO":
            return Style(color="green", bold=True)
        if level_name == "DEBUG":
            return Style(color="white", dim=True)
        if level_name == "WARNING":
            return Style(color="yellow", bold=True)
        if level_name in ("ERROR", "CRITICAL"):
            return Style(color="red", bold=True)
        return Style(color="cyan")


def _use_rich_console_logging(console: Console) -> None:
    """Swap the plain console handler for a rich one when attached to a terminal."""
    if not console.is_terminal:
        return
    root_logger = logging.getLogger()
    level = root_logger.level
    for handler in list(root_logger.handlers):
        if not isinstance(handler, logging.FileHandler):
            root_logger.removeHandler(handler)
    rich_handler = GreenInfoRichHandler(console=console, show_path=False)
    rich_handler.setLevel(level)
    root_logger.addHandler(rich_handler)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument(
    "document",
    required=False,
    type=click.Path(exists=True, dir_okay=False),
)
@click.option(
    "--undeploy",
    is_flag=True,
    help="Remove the managed properties and full-text indexes the document declares.",
)
@click.option(
    "--generate-example",
    is_flag=True,
    help="Print an example schema document and exit.",
)
@click.option(
    "--store-url",
    default=None,
    help="Metadata store URL (overrides SCHEMA_STORE_URL).",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Logging level (overrides LOG_LEVEL, default INFO).",
)
@click.option("--debug", is_flag=True, help="Enable debug output.")
@click.version_option(__version__, prog_name="search-schema-sync")
def cli(
    document: Optional[str],
    undeploy: bool,
    generate_example: bool,
    store_url: Optional[str],
    log_level: Optional[str],
    debug: bool,
) -> None:
    """Synchronize a declared search schema with the metadata store.

    DOCUMENT is an XML or YAML schema document. Deploy creates and updates
    full-text indexes, managed properties, crawled properties and their
    mappings. Undeploy removes managed properties and non-default indexes.
    """
    if generate_example:
        click.echo(EXAMPLE_DOCUMENT, nl=False)
        sys.exit(0)

    if not document:
        raise click.UsageError("DOCUMENT is required unless --generate-example is given")

    console = Console()
    store = None
    try:
        config = create_config_from_env(
            store_url=store_url, log_level="DEBUG" if debug else log_level
        )
        setup_logging(config.logging)
        _use_rich_console_logging(console)
        if debug:
            config.log_configuration_summary()

        schema = load_document(document)

        if undeploy:
            console.print(
                f"[bold red]Undeploy removes every managed property and non-default "
                f"full-text index declared in {escape(document)}[/bold red]"
            )
            if not click.confirm("Continue with undeploy?", default=False):
                click.echo("Undeploy cancelled")
                sys.exit(0)

        store = create_store(config.store)
        deployer = SchemaDeployer(store)
        report = deployer.undeploy(schema) if undeploy else deployer.deploy(schema)
        render_report(report, console)
    except SchemaSyncError as e:
        logger.debug("Schema synchronization failed", exc_info=True)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        if store is not None:
            store.close()


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
