"""Tessera CLI Application.

Commands:
    preview: Render registry fixtures to stdout (or to files with --outdir)

Usage:
    tessera preview --registry myproject.prompts:registry
    tessera preview -r prompts.py -c medical-diagnosis -f basic --no-metadata
    tessera --debug preview -r prompts.py -o .tessera/previews

Example:
    $ tessera preview -r examples/prompts.py:registry
    ======================================================================
    ---
    Composition ID: medical-diagnosis
    Fixture: basic (complete - 2/2)
    ...
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from tessera.config import get_settings
from tessera.core.exceptions import TesseraError
from tessera.interfaces.cli.preview import Preview, generate_previews, load_registry


# =============================================================================
# Module Logger
# =============================================================================

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "cyan": "\033[36m",
}


def colorize(text: str, color: str) -> str:
    """Apply ANSI color to text."""
    if not sys.stdout.isatty():
        return text
    return f"{COLORS.get(color, '')}{text}{COLORS['reset']}"


# =============================================================================
# CLI Application
# =============================================================================


@click.group()
@click.version_option(package_name="tessera", prog_name="tessera")
@click.option("--debug/--no-debug", default=False, help="Enable debug output")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """Tessera - Composable, validated prompt engineering.

    Preview compositions registered in a project registry.
    """
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug

    log_level = logging.DEBUG if debug else get_settings().log_level
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@cli.command()
@click.option(
    "--registry", "-r", "registry_ref",
    required=True,
    help="Registry location as module:attribute or path/to/file.py:attribute"
)
@click.option(
    "--composition", "-c", "composition_id",
    default=None,
    help="Only preview this composition"
)
@click.option(
    "--fixture", "-f",
    default=None,
    help="Only preview fixtures with this name"
)
@click.option(
    "--outdir", "-o",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Write one <composition>_<fixture>.txt file per preview instead of printing"
)
@click.option(
    "--metadata/--no-metadata",
    default=None,
    help="Include the metadata header (default from TESSERA_PREVIEW_METADATA)"
)
@click.pass_context
def preview(
    ctx: click.Context,
    registry_ref: str,
    composition_id: Optional[str],
    fixture: Optional[str],
    outdir: Optional[Path],
    metadata: Optional[bool],
) -> None:
    """Render registry fixtures as preview prompts."""
    if metadata is None:
        metadata = get_settings().preview_metadata

    try:
        registry = load_registry(registry_ref)
    except TesseraError as e:
        logger.debug("Registry load failed", exc_info=True)
        click.echo(colorize(f"ERROR: {e}", "red"), err=True)
        raise SystemExit(1)

    previews = generate_previews(
        registry,
        composition_id=composition_id,
        fixture=fixture,
        metadata=metadata,
    )

    if not previews:
        click.echo(
            colorize("No previews generated. Check your composition and fixture filters.", "yellow"),
            err=True,
        )
        return

    if outdir is not None:
        _write_previews(previews, outdir)
    else:
        for item in previews:
            click.echo(colorize("=" * 70, "cyan"))
            click.echo(item.content)

    _display_summary(previews, outdir)


def _write_previews(previews: list[Preview], outdir: Path) -> None:
    outdir.mkdir(parents=True, exist_ok=True)
    for item in previews:
        (outdir / item.filename).write_text(item.content, encoding="utf-8")
        click.echo(f"{colorize('Generated:', 'green')} {item.filename}", err=True)


def _display_summary(previews: list[Preview], outdir: Optional[Path]) -> None:
    warnings = [item for item in previews if item.warning]
    for item in warnings:
        logger.warning(f"{item.composition_id}/{item.fixture}: {item.warning}")

    click.echo(err=True)
    noun = "preview" if len(previews) == 1 else "previews"
    location = f" in {outdir}" if outdir is not None else ""
    click.echo(colorize(f"Generated {len(previews)} {noun}{location}", "bold"), err=True)
    if warnings:
        click.echo(
            colorize(f"{len(warnings)} with incomplete fixtures - review before using", "yellow"),
            err=True,
        )


def main() -> None:
    """Main entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
