"""Click CLI for vision-insights — inspect note context and manage the result cache."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from vision_insights.config.hierarchy import load_settings
from vision_insights.errors.exceptions import VisionInsightsError
from vision_insights.types import VisionAction

console = Console()
error_console = Console(stderr=True)

_ACTIONS = [a.value for a in VisionAction]


def _setup_logging(verbosity: int, base_level: str = "WARNING") -> None:
    """Configure logging from the configured level, lowered by verbosity."""
    level = logging.getLevelName(base_level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    if verbosity == 1:
        level = min(level, logging.INFO)
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
    )
    logging.getLogger("vision_insights").setLevel(level)


@click.group()
@click.version_option(package_name="vision-insights")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def cli(verbose: int) -> None:
    """vision-insights — note context and result cache for image analysis."""
    try:
        settings = load_settings()
    except VisionInsightsError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    _setup_logging(verbose, settings.log_level)


def _open_note(note_path: str, vault_dir: str | None):
    from vision_insights.vault import Vault

    path = Path(note_path).resolve()
    vault = Vault(vault_dir or path.parent)
    try:
        note = vault.file_for(path)
    except ValueError:
        error_console.print(f"[red]Error:[/red] {note_path} is outside the vault {vault.root}")
        sys.exit(1)
    return vault, note, path.read_text(encoding="utf-8")


def _resolve_context(note_path: str, image: str, vault_dir: str | None):
    from vision_insights.context.extractor import build_context
    from vision_insights.context.locator import locate_image_reference
    from vision_insights.image import image_identity_from_reference

    vault, note, text = _open_note(note_path, vault_dir)
    try:
        identity = image_identity_from_reference(image, vault, note.path)
    except VisionInsightsError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    if identity is None:
        error_console.print(f"[red]Error:[/red] Could not resolve image '{image}'")
        sys.exit(1)

    match = locate_image_reference(text, identity.path, identity.url)
    if match is None:
        error_console.print(
            f"[yellow]Image '{image}' not found in note text; using document-start context.[/yellow]"
        )
    context = build_context(text, match, note=note, resolver=vault, metadata=vault)
    return identity, context


@cli.command()
@click.argument("note_path", type=click.Path(exists=True, dir_okay=False))
@click.argument("image")
@click.option("--vault", "vault_dir", type=click.Path(exists=True, file_okay=False), help="Vault root.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the context as JSON.")
@click.option("--prompt", is_flag=True, default=False, help="Print the rendered prompt section.")
def context(note_path: str, image: str, vault_dir: str | None, as_json: bool, prompt: bool) -> None:
    """Show the note context around IMAGE embedded in NOTE_PATH."""
    _, ctx = _resolve_context(note_path, image, vault_dir)

    if as_json:
        click.echo(ctx.model_dump_json(indent=2))
        return
    if prompt:
        from vision_insights.prompts import render_note_context

        click.echo(render_note_context(ctx))
        return

    table = Table(title="Note Context", show_header=True)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Note", ctx.note_path)
    table.add_row("Match", "-" if ctx.match_index is None else f"{ctx.match_index}+{ctx.match_length}")
    table.add_row("Section", " > ".join(ctx.section_path) or "-")
    table.add_row("Section text", ctx.section_text[:200] or "-")
    table.add_row("Tags", " ".join(f"#{t}" for t in ctx.tags) or "-")
    table.add_row("Frontmatter", json.dumps(ctx.frontmatter, default=str) if ctx.frontmatter else "-")
    for link in ctx.related_links:
        table.add_row("Link", f"{link.link_text} → {link.path} ({link.excerpt})")
    console.print(table)


@cli.command("fingerprint")
@click.argument("note_path", type=click.Path(exists=True, dir_okay=False))
@click.argument("image")
@click.option("--action", type=click.Choice(_ACTIONS), required=True, help="Analysis action.")
@click.option("--instruction", type=str, default=None, help="Free-text instruction (custom-vision).")
@click.option("--vault", "vault_dir", type=click.Path(exists=True, file_okay=False), help="Vault root.")
def fingerprint_cmd(
    note_path: str,
    image: str,
    action: str,
    instruction: str | None,
    vault_dir: str | None,
) -> None:
    """Print the cache key for analyzing IMAGE in NOTE_PATH."""
    from vision_insights.cache.keys import fingerprint

    identity, ctx = _resolve_context(note_path, image, vault_dir)
    click.echo(fingerprint(identity, action, ctx, instruction))


@cli.command()
@click.argument("note_path", type=click.Path(exists=True, dir_okay=False))
def refs(note_path: str) -> None:
    """List image embeds in NOTE_PATH."""
    from vision_insights.image import find_image_references

    text = Path(note_path).read_text(encoding="utf-8")
    found = find_image_references(text)
    if not found:
        error_console.print("[yellow]No images found in this note.[/yellow]")
        return

    table = Table(title="Image References", show_header=True)
    table.add_column("Offset", justify="right")
    table.add_column("Kind", style="cyan")
    table.add_column("Target")
    for ref in found:
        table.add_row(str(ref.index), ref.kind.value, ref.target)
    console.print(table)


@cli.group()
def cache() -> None:
    """Cache management commands."""


def _open_cache(data_path: str | None):
    from vision_insights.cache.store import ResultCache

    try:
        settings = load_settings(data_path=data_path)
    except VisionInsightsError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    return ResultCache.from_settings(settings)


_data_option = click.option(
    "--data", "data_path", type=click.Path(dir_okay=False), default=None, help="Cache data file."
)


@cache.command("stats")
@_data_option
def cache_stats(data_path: str | None) -> None:
    """Show cache statistics."""
    result_cache = _open_cache(data_path)

    table = Table(title="Cache Statistics", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value")

    stats = result_cache.stats()
    table.add_row("Enabled", "yes" if result_cache.enabled else "no")
    table.add_row("Valid", str(stats.valid))
    table.add_row("Expired", str(stats.expired))
    table.add_row("Total", str(stats.total))

    console.print(table)


@cache.command("clear")
@_data_option
@click.confirmation_option(prompt="Are you sure you want to clear the cache?")
def cache_clear(data_path: str | None) -> None:
    """Clear all cached results."""
    _open_cache(data_path).clear()
    console.print("[green]Cache cleared.[/green]")


@cache.command("invalidate")
@click.argument("key")
@_data_option
def cache_invalidate(key: str, data_path: str | None) -> None:
    """Remove one cached result by KEY."""
    result_cache = _open_cache(data_path)
    if key not in result_cache:
        error_console.print(f"[yellow]No cache entry for {key}.[/yellow]")
        return
    result_cache.invalidate(key)
    console.print(f"[green]Removed {key}.[/green]")


def main() -> None:
    """Entry point for the CLI."""
    cli()
