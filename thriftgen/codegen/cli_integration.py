"""
Command-line interface for Scala code generation.

Reads a JSON document description, generates code and prints it with
syntax highlighting or writes it to a file.
"""

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from ..logging_config import get_logger, setup_logging
from . import (
    ConfigError,
    DocumentLoadError,
    GeneratorConfig,
    RegistryError,
    generate_code,
    get_generator,
    get_language_info,
    list_supported_languages,
    load_config,
    load_document_file,
)

logger = get_logger(__name__)


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


# Initialize rich console
console = Console()


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="thriftgen",
        description="Generate Scala code from a JSON description of a Thrift document",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  thriftgen service.json
  thriftgen service.json -o Service.scala --finagle-client --finagle-service
  thriftgen service.json --namespace com.example.thrift
  thriftgen --list-languages
        """.strip(),
    )

    parser.add_argument("file", nargs="?", help="JSON document description")
    parser.add_argument(
        "--language", "-l", default="scala", help="Target language (default: scala)"
    )
    parser.add_argument("--output", "-o", metavar="FILE", help="Output file (default: stdout)")
    parser.add_argument("--config", metavar="FILE", help="JSON configuration file")
    parser.add_argument(
        "--namespace",
        metavar="NS",
        help="Package used when the document declares no scala or java namespace",
    )
    parser.add_argument(
        "--field-case",
        choices=["camel", "pascal", "snake"],
        help="Case style for field and function names",
    )
    parser.add_argument(
        "--no-comments",
        action="store_true",
        help="Don't add comments to generated code",
    )

    service_group = parser.add_argument_group("service options")
    service_group.add_argument(
        "--finagle-client", action="store_true", help="Generate a Finagle client class"
    )
    service_group.add_argument(
        "--finagle-service", action="store_true", help="Generate a Finagle service class"
    )
    service_group.add_argument(
        "--ostrich-server",
        action="store_true",
        help="Generate an Ostrich server trait (implies --finagle-service)",
    )

    info_group = parser.add_argument_group("information")
    info_group.add_argument(
        "--verbose", action="store_true", help="Show generation metadata and debug logs"
    )
    info_group.add_argument(
        "--list-languages",
        action="store_true",
        help="List supported target languages and exit",
    )
    return parser


def _list_languages() -> int:
    """List supported languages with details."""
    table = Table(title="Supported Languages", box=box.ROUNDED, title_style="bold cyan")
    table.add_column("Language", style="bold green", no_wrap=True)
    table.add_column("Extension", style="cyan")
    table.add_column("Generator Class", style="dim")
    table.add_column("Aliases", style="blue")

    for language in list_supported_languages():
        info = get_language_info(language)
        aliases = ", ".join(info["aliases"]) if info["aliases"] else "[dim]none[/dim]"
        table.add_row(language, info["file_extension"], info["class"], aliases)

    console.print(table)
    console.print(
        Panel(
            "[bold]Usage:[/bold] thriftgen [dim]document.json[/dim] -o [cyan]Output.scala[/cyan]",
            title="Quick Start",
            border_style="blue",
        )
    )
    return 0


def _service_options(args: argparse.Namespace) -> List[str]:
    options = []
    if args.finagle_client:
        options.append("finagle_client")
    if args.finagle_service:
        options.append("finagle_service")
    if args.ostrich_server:
        options.append("ostrich_server")
    return options


def _build_config(args: argparse.Namespace) -> GeneratorConfig:
    """Build configuration from the config file and CLI overrides."""
    overrides = {}
    if args.namespace:
        overrides["package_name"] = args.namespace
    if args.field_case:
        overrides["field_case"] = args.field_case
    if args.no_comments:
        overrides["add_comments"] = False
    if args.output:
        overrides["output_file"] = args.output

    options = _service_options(args)
    if options:
        overrides["service_options"] = options

    try:
        return load_config(args.language.lower(), overrides or None, args.config)
    except ConfigError as e:
        raise CLIError(f"Configuration error: {e}") from e


def _show_metadata(metadata) -> None:
    table = Table(
        title="Generation Metadata",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Property", style="bold")
    table.add_column("Value", style="green")
    for key, value in metadata.items():
        table.add_row(key.replace("_", " ").title(), str(value))
    console.print(table)


def run(args: argparse.Namespace) -> int:
    """
    Generate code for parsed arguments.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    if args.list_languages:
        return _list_languages()

    if not args.file:
        raise CLIError("Input file required (use --help for usage)")

    config = _build_config(args)
    try:
        generator = get_generator(args.language, config)
        document = load_document_file(args.file, config.package_name)
    except (RegistryError, DocumentLoadError) as e:
        raise CLIError(str(e)) from e

    result = generate_code(generator, document)
    if not result.success:
        console.print(f"[red]✗ Code generation failed:[/red] {result.error_message}")
        return 1

    output_file = config.output_file
    if output_file:
        output_path = Path(output_file)
        try:
            output_path.write_text(result.code, encoding="utf-8")
        except OSError as e:
            raise CLIError(f"Failed to write to {output_path}: {e}") from e
        console.print(
            f"[green]✓[/green] Generated {generator.language_name} code saved to [cyan]{output_path}[/cyan]"
        )
    else:
        console.print(Syntax(result.code, generator.language_name, theme="monokai"))

    if args.verbose and result.metadata:
        _show_metadata(result.metadata)

    if result.warnings:
        console.print("[yellow]Warnings:[/yellow]")
        for warning in result.warnings:
            console.print(f"  [yellow]•[/yellow] {warning}")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the ``thriftgen`` command."""
    parser = create_parser()
    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        return run(args)
    except CLIError as e:
        logger.debug("CLI error", exc_info=True)
        console.print(f"[red]✗ Error:[/red] {e}")
        return 1
