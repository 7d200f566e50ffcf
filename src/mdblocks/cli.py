# src/mdblocks/cli.py
"""
mdblocks Command Line Interface (CLI).

This module implements the user-facing terminal interface using `typer` and `rich`.

Features
--------
- **Extraction preview**: List the blocks a Markdown file yields, as a table or JSON.
- **Manifest export**: Write `manifest.json` with suggested output file names.
- **Manifest inspection**: Decode a saved manifest without the source document.
- **Config view**: Show the effective render options (flag > config file > env).

Usage
-----
    # Preview blocks
    $ mdblocks extract notes/harmony.md --type prog --type deg

    # Write a manifest for later regeneration
    $ mdblocks manifest notes/harmony.md -o out/harmony/manifest.json

    # Inspect a saved manifest
    $ mdblocks inspect out/harmony/manifest.json
"""

from __future__ import annotations

import json
import traceback
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from mdblocks.core.contracts.block import (
    Block,
    BlockType,
    ChordProgressionBlock,
    DegreeProgressionBlock,
    ScoreBlock,
    TableBlock,
)
from mdblocks.core.contracts.render import RenderOptions
from mdblocks.core.settings import get_logger, load_settings
from mdblocks.extraction.pipeline import extract_blocks
from mdblocks.manifest import (
    ManifestError,
    block_filename,
    build_manifest,
    decode_manifest,
    load_manifest,
    manifest_to_json,
)
from mdblocks.pipelines.render_blocks import MANIFEST_NAME, output_folder_name
from mdblocks.pipelines.storage import FileImageWriter

# Ensure env vars (like MDBLOCKS_AUTO_DETECT) are loaded before any logic runs
load_dotenv()

app = typer.Typer(
    help="mdblocks: Extract tables, chord progressions and scores from Markdown.",
    rich_markup_mode="markdown",
)
console = Console()
log = get_logger(__name__)


# --------------------------------------------------------------------------- #
# Helpers: Configuration
# --------------------------------------------------------------------------- #


def _load_config_file(config_path: Path | None) -> dict[str, Any]:
    """
    Helper: Read an optional JSON config file (`width`, `scale`, `color`, `outDir`).

    An unreadable or malformed file is reported and ignored.
    """
    if config_path is None:
        return {}
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        log.warning("Could not load config file %s: %s", config_path, e)
        console.print(f"[yellow]Warning: Could not load config file: {config_path}[/yellow]")
        return {}
    if not isinstance(data, dict):
        console.print(f"[yellow]Warning: Config file is not a JSON object: {config_path}[/yellow]")
        return {}
    return data


def _merge_config(
    file_config: dict[str, Any],
    *,
    width: int | None = None,
    scale: float | None = None,
    color: str | None = None,
    out_dir: Path | None = None,
) -> tuple[RenderOptions, Path]:
    """Helper: Resolve render options and output dir (flag > config file > settings)."""
    s = load_settings()
    options = RenderOptions(
        width=width if width is not None else file_config.get("width", s.render_width),
        scale=scale if scale is not None else file_config.get("scale", s.render_scale),
        color=color if color is not None else file_config.get("color", s.render_color),
    )
    resolved_out = out_dir if out_dir is not None else Path(file_config.get("outDir", s.out_dir))
    return options, resolved_out


# --------------------------------------------------------------------------- #
# Helpers: Rendering
# --------------------------------------------------------------------------- #


def _summarize(block: Block) -> str:
    """Helper: One-line content summary used in the block table."""
    match block:
        case TableBlock():
            return f"{len(block.headers)} cols x {len(block.rows)} rows"
        case ScoreBlock():
            parts: list[str] = []
            if block.chords is not None:
                parts.append("chords: " + " ".join(block.chords))
            if block.bass is not None:
                parts.append("bass: " + " ".join(block.bass))
            return " / ".join(parts) or "(empty)"
        case ChordProgressionBlock():
            return " → ".join(block.chords)
        case DegreeProgressionBlock():
            return " - ".join(block.degrees)
    return ""


def _render_blocks(blocks: list[Block], heading: str) -> None:
    """Helper: Print blocks as a Rich table."""
    table = Table(title=escape(heading), show_lines=False)
    table.add_column("#", justify="right")
    table.add_column("Type", style="cyan")
    table.add_column("Title")
    table.add_column("Content")
    table.add_column("Lines", style="dim")

    for block in blocks:
        lines = f"{block.source.start_line}-{block.source.end_line}" if block.source else ""
        table.add_row(
            str(block.index),
            block.type.value,
            escape(block.title or ""),
            escape(_summarize(block)),
            lines,
        )
    console.print(table)


def _extract_file(
    file: Path, types: list[BlockType] | None, no_auto_detect: bool
) -> list[Block]:
    """Helper: Read `file` and run the extraction engine on it."""
    markdown = file.read_text(encoding="utf-8")
    return extract_blocks(
        markdown,
        str(file),
        types=types,
        auto_detect=False if no_auto_detect else None,
    )


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #

FileArgument = Annotated[
    Path,
    typer.Argument(
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        help="Path to the input Markdown document.",
    ),
]
TypesOption = Annotated[
    list[BlockType] | None,
    typer.Option("--type", "-t", help="Restrict extraction to these block types."),
]
NoAutoDetectOption = Annotated[
    bool,
    typer.Option("--no-auto-detect", help="Skip heuristic detection in untagged prose."),
]


@app.command()  # type: ignore[misc]
def extract(
    file: FileArgument,
    types: TypesOption = None,
    no_auto_detect: NoAutoDetectOption = False,
    as_json: Annotated[
        bool, typer.Option("--json", help="Print blocks as JSON instead of a table.")
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show full error tracebacks.")
    ] = False,
) -> None:
    """
    List the blocks extracted from a Markdown document.
    """
    try:
        blocks = _extract_file(file, types, no_auto_detect)
    except Exception as e:
        console.print(f"[bold red]❌ Extraction Error:[/bold red] {e}")
        if verbose:
            traceback.print_exc()
        raise typer.Exit(code=1) from e

    if as_json:
        payload = [b.model_dump(mode="json", by_alias=True, exclude_none=True) for b in blocks]
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
        return

    if not blocks:
        console.print("[yellow]No blocks found in the input file.[/yellow]")
        return
    _render_blocks(blocks, f"{file.name}: {len(blocks)} block(s)")


@app.command()  # type: ignore[misc]
def manifest(
    file: FileArgument,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Where to write the manifest (default: <outDir>/<name>/manifest.json).",
        ),
    ] = None,
    types: TypesOption = None,
    no_auto_detect: NoAutoDetectOption = False,
    config: Annotated[
        Path | None, typer.Option("--config", help="JSON config file (outDir, width, ...).")
    ] = None,
) -> None:
    """
    Write a manifest for a document, naming each block's future output file.

    No images are rendered; the manifest records the suggested file names so a
    renderer can regenerate outputs later without the source document.
    """
    try:
        blocks = _extract_file(file, types, no_auto_detect)
        _, out_dir = _merge_config(_load_config_file(config))
        target = output or out_dir / output_folder_name(file) / MANIFEST_NAME

        built = build_manifest(file, blocks, [block_filename(b) for b in blocks])
        FileImageWriter().write(manifest_to_json(built).encode("utf-8"), target)
    except Exception as e:
        console.print(f"[bold red]❌ Manifest Error:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    console.print(
        Panel(
            f"{len(blocks)} item(s) saved to: [link=file://{target}]{target}[/link]",
            title="Manifest",
            border_style="green",
        )
    )


@app.command()  # type: ignore[misc]
def inspect(
    manifest_file: Annotated[
        Path,
        typer.Argument(
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            help="Path to a manifest.json written by `manifest` or a renderer run.",
        ),
    ],
) -> None:
    """
    Decode a saved manifest and list its blocks without the source document.
    """
    try:
        loaded = load_manifest(manifest_file)
        blocks = decode_manifest(loaded)
    except (ManifestError, OSError) as e:
        console.print(f"[bold red]❌ Manifest Error:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    console.print(
        Panel.fit(
            f"[bold magenta]Source:[/bold magenta] {escape(loaded.input)}\n"
            f"[dim]Generated at {loaded.generated_at.isoformat()}[/dim]",
            border_style="magenta",
        )
    )
    _render_blocks(blocks, f"{manifest_file.name}: {len(blocks)} block(s)")
    for item in loaded.items:
        console.print(f" [dim]{item.index:02d}. {item.output}[/dim]")


@app.command()  # type: ignore[misc]
def config(
    config_file: Annotated[
        Path | None, typer.Option("--config", help="JSON config file to merge.")
    ] = None,
    width: Annotated[int | None, typer.Option("--width", "-w", help="Image width (px).")] = None,
    scale: Annotated[
        float | None, typer.Option("--scale", "-s", help="Device scale factor.")
    ] = None,
    color: Annotated[
        str | None, typer.Option("--color", "-c", help="Theme color (hex).")
    ] = None,
) -> None:
    """
    Show the effective render configuration.
    """
    try:
        options, out_dir = _merge_config(
            _load_config_file(config_file), width=width, scale=scale, color=color
        )
    except ValidationError as e:
        console.print(f"[bold red]❌ Config Error:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    s = load_settings()
    table = Table(title="Effective configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("outDir", str(out_dir))
    table.add_row("width", str(options.width))
    table.add_row("scale", str(options.scale))
    table.add_row("color", options.color)
    table.add_row("autoDetect", str(s.auto_detect))
    console.print(table)


if __name__ == "__main__":
    app()
