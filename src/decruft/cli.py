"""Command-line interface for decruft."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click
import structlog
from rich.console import Console
from rich.table import Table

from decruft import __version__
from decruft.config import load_settings
from decruft.dom.markup import parse_html
from decruft.errors import InputTooLargeError
from decruft.extractor.engine import ArticleExtractor, validate_base_uri
from decruft.extractor.readerable import is_probably_readerable
from decruft.observability import configure_logging

console = Console()
err_console = Console(stderr=True)
logger = structlog.get_logger(__name__)


def _read_document(path: str) -> bytes:
    with click.open_file(path, "rb") as f:
        data: bytes = f.read()
    return data


def _check_base_uri(ctx: click.Context, param: click.Parameter, value: str) -> str:
    try:
        validate_base_uri(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e
    return value


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", type=click.Path(exists=True, dir_okay=False), help="Configuration file path")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level (overrides the configuration file)",
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], log_level: Optional[str]) -> None:
    """decruft - Extract the main article from HTML pages."""
    ctx.ensure_object(dict)
    settings = load_settings(Path(config) if config else None)
    if log_level:
        settings.monitoring.log_level = log_level
    configure_logging(settings.monitoring)
    ctx.obj["settings"] = settings


@cli.command("extract")
@click.argument("files", nargs=-1, required=True, type=click.Path(allow_dash=True, dir_okay=False))
@click.option("--base-uri", required=True, callback=_check_base_uri, help="Absolute URI the pages were loaded from")
@click.option(
    "--format",
    "output_format",
    default="html",
    type=click.Choice(["html", "text", "json"]),
    help="Output format",
)
@click.option("--max-elements", type=click.IntRange(min=0), default=None, help="Skip documents with more elements")
@click.option("--no-strip-unlikelys", is_flag=True, help="Keep nodes whose class/id look like boilerplate")
@click.option("--no-weight-classes", is_flag=True, help="Ignore class and id weights")
@click.option("--no-clean-conditionally", is_flag=True, help="Keep tables, lists and divs that look like junk")
@click.pass_context
def extract_command(
    ctx: click.Context,
    files: Tuple[str, ...],
    base_uri: str,
    output_format: str,
    max_elements: Optional[int],
    no_strip_unlikelys: bool,
    no_weight_classes: bool,
    no_clean_conditionally: bool,
) -> None:
    """Extract the main article from each FILE ("-" reads stdin)."""
    settings = ctx.obj["settings"]
    updates: Dict[str, Any] = {}
    if max_elements is not None:
        updates["max_elements_to_parse"] = max_elements
    if no_strip_unlikelys:
        updates["strip_unlikelys"] = False
    if no_weight_classes:
        updates["weight_classes"] = False
    if no_clean_conditionally:
        updates["clean_conditionally"] = False

    extractor = ArticleExtractor(settings.extraction.model_copy(update=updates))
    records: List[Dict[str, Any]] = []
    failures = 0

    for path in files:
        try:
            result = extractor.extract_html(_read_document(path), base_uri)
        except InputTooLargeError as e:
            logger.warning("Skipping oversized document", path=path, elements=e.element_count, limit=e.max_elements)
            err_console.print(f"[yellow]Skipped {path}: {e}[/yellow]")
            failures += 1
            continue
        except OSError as e:
            err_console.print(f"[red]Could not read {path}: {e}[/red]")
            failures += 1
            continue

        if not result.success:
            err_console.print(f"[red]No article found in {path}[/red]")
            failures += 1

        if output_format == "json":
            records.append({"path": path, **result.as_dict()})
        elif result.success:
            click.echo(result.html if output_format == "html" else result.text_content.strip())

    if output_format == "json":
        click.echo(json.dumps(records, indent=2, ensure_ascii=False))

    if failures:
        sys.exit(1)


@cli.command("check")
@click.argument("files", nargs=-1, required=True, type=click.Path(allow_dash=True, dir_okay=False))
@click.pass_context
def check_command(ctx: click.Context, files: Tuple[str, ...]) -> None:
    """Report whether each FILE probably holds a readable article."""
    settings = ctx.obj["settings"]

    table = Table(title="Readerable Check")
    table.add_column("Document", style="cyan")
    table.add_column("Readerable", style="magenta")

    all_readerable = True
    for path in files:
        document = parse_html(_read_document(path), settings.extraction.parser)
        readerable = is_probably_readerable(document)
        all_readerable = all_readerable and readerable
        table.add_row(path, "✅ yes" if readerable else "❌ no")

    console.print(table)
    if not all_readerable:
        sys.exit(1)


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
