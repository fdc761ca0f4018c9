"""Click CLI for extracting cell data from Skyrim plugin files."""
from __future__ import annotations

import fnmatch
import time
import warnings
from pathlib import Path
from typing import Optional

import click

from skyrim_cell_dump.config import (
    FORMAT_CSV,
    FORMAT_JSON,
    FORMAT_TEXT,
    Settings,
    load_settings,
    resolve_format,
    save_settings,
    validate_max_depth,
)
from skyrim_cell_dump.esm.errors import DecodeError, DecompressedSizeWarning
from skyrim_cell_dump.esm.records import DecodedPlugin


class FormatType(click.ParamType):
    """Output format name; accepts aliases such as ``plain`` or ``plaintext``."""

    name = "format"

    def convert(self, value, param, ctx):
        try:
            return resolve_format(value)
        except click.UsageError as e:
            self.fail(e.message, param, ctx)


class Context:
    """Holds settings loaded lazily from the config file."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose
        self._settings: Settings | None = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = load_settings()
        return self._settings

    def log(self, message: str, nl: bool = True):
        if self.verbose:
            click.echo(message, err=True, nl=nl)

    def load(self, plugin: Path, max_depth: Optional[int] = None,
             partial: Optional[bool] = None) -> DecodedPlugin:
        """Read and decode ``plugin``, turning failures into click errors."""
        from skyrim_cell_dump.esm.reader import decode

        if max_depth is None:
            max_depth = self.settings.max_depth
        if partial is None:
            partial = self.settings.partial

        try:
            data = plugin.read_bytes()
        except OSError as e:
            raise click.ClickException(f"Failed to read from plugin file {plugin}: {e}")

        self.log(f"Plugin: {plugin} ({len(data) / 1024:.0f} KB)")
        self.log("Decoding plugin...", nl=False)
        t0 = time.perf_counter()
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", DecompressedSizeWarning)
            try:
                result = decode(data, max_depth=max_depth, partial=partial)
            except DecodeError as e:
                self.log(" failed")
                raise click.ClickException(
                    f"Failed to parse plugin file {plugin} ({e.phase}): {e}"
                )
        self.log(
            f" {len(result.worlds):,} worlds, {len(result.cells):,} cells "
            f"in {time.perf_counter() - t0:.2f}s"
        )

        for w in caught:
            click.echo(f"Warning: {w.message}", err=True)
        if result.cell_errors:
            click.echo(f"Warning: {len(result.cell_errors)} cell(s) could not be decoded.", err=True)
        return result


pass_ctx = click.make_pass_decorator(Context)

plugin_argument = click.argument(
    "plugin", type=click.Path(exists=False, dir_okay=False, path_type=Path),
)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Print progress and timings to stderr")
@click.version_option(package_name="skyrim-cell-dump")
@click.pass_context
def cli(ctx, verbose: bool):
    """skyrim-cell-dump - Extract cell edits from a TES5 Skyrim plugin file.

    Reads the TES4 header, worldspaces and cells of an .esp/.esm/.esl
    and prints them as text, JSON or CSV.
    """
    ctx.obj = Context(verbose=verbose)


@cli.command()
@plugin_argument
@click.option("--format", "-f", "fmt", type=FormatType(), default=None,
              help="Output format: json, text or csv (default from config, else text)")
@click.option("--pretty/--no-pretty", "-p", default=None, help="Pretty print JSON output")
@click.option("--output", "-o", "output_path", type=click.Path(dir_okay=False), default=None,
              help="Write output to a file instead of stdout")
@click.option("--partial/--strict", default=None,
              help="Keep going when a cell cannot be decoded (default: strict)")
@click.option("--max-depth", type=int, default=None, help="Maximum group nesting depth")
@pass_ctx
def dump(ctx: Context, plugin: Path, fmt: Optional[str], pretty: Optional[bool],
         output_path: Optional[str], partial: Optional[bool], max_depth: Optional[int]):
    """Decode PLUGIN and print its header, worlds and cells."""
    settings = ctx.settings
    fmt = fmt or settings.format
    pretty = settings.pretty if pretty is None else pretty
    if max_depth is not None:
        max_depth = validate_max_depth(max_depth)

    result = ctx.load(plugin, max_depth=max_depth, partial=partial)

    if fmt == FORMAT_JSON:
        from skyrim_cell_dump.export.json_export import export_json
        data = export_json(result, pretty=pretty)
    elif fmt == FORMAT_CSV:
        from skyrim_cell_dump.export.csv_export import export_csv
        data = export_csv(result)
    else:
        from skyrim_cell_dump.export.text_export import export_text
        data = export_text(result)

    if output_path:
        Path(output_path).write_text(data, encoding="utf-8")
        click.echo(f"Output written to {output_path}")
    else:
        click.echo(data)


@cli.command()
@plugin_argument
@pass_ctx
def info(ctx: Context, plugin: Path):
    """Show the TES4 header of PLUGIN."""
    from skyrim_cell_dump.export.text_export import format_header

    result = ctx.load(plugin)
    click.echo("\n".join(format_header(result)))
    click.echo(f"  Worlds:         {len(result.worlds):,}")
    click.echo(f"  Cells:          {len(result.cells):,}")


@cli.command()
@plugin_argument
@pass_ctx
def worlds(ctx: Context, plugin: Path):
    """List the worldspaces defined or edited by PLUGIN."""
    from skyrim_cell_dump.export.text_export import format_worlds

    result = ctx.load(plugin)
    if not result.worlds:
        click.echo("No worldspaces found.")
        return
    click.echo("\n".join(format_worlds(result)))


def parse_form_id(value: str) -> Optional[int]:
    """Parse a FormID given as hex (0x...) or decimal; None if it is neither."""
    try:
        return int(value, 16) if value.lower().startswith("0x") else int(value, 10)
    except ValueError:
        return None


@cli.command()
@plugin_argument
@click.option("--world", "world_ref", help="Only cells in this world (editor ID or FormID)")
@click.option("--edid", help="Filter by editor ID pattern (supports * wildcards)")
@click.option("--exterior/--interior", "exterior", default=None,
              help="Only exterior (gridded) or interior cells")
@click.option("--persistent", is_flag=True, help="Only persistent worldspace cells")
@pass_ctx
def cells(ctx: Context, plugin: Path, world_ref: Optional[str], edid: Optional[str],
          exterior: Optional[bool], persistent: bool):
    """List cells in PLUGIN, optionally filtered."""
    from skyrim_cell_dump.export.text_export import format_cells

    result = ctx.load(plugin)
    selected = list(result.cells)

    if world_ref is not None:
        world_fid = parse_form_id(world_ref)
        if world_fid is None or result.world(world_fid) is None:
            matches = [w for w in result.worlds if w.editor_id.lower() == world_ref.lower()]
            if not matches:
                raise click.UsageError(f"World '{world_ref}' not found in {plugin}")
            world_fid = matches[0].form_id
        selected = [c for c in selected if c.world_form_id == world_fid]

    if edid:
        pattern = edid.lower()
        selected = [c for c in selected
                    if c.editor_id and fnmatch.fnmatchcase(c.editor_id.lower(), pattern)]

    if exterior is not None:
        selected = [c for c in selected if c.is_exterior == exterior]

    if persistent:
        selected = [c for c in selected if c.is_persistent]

    if not selected:
        click.echo("No cells found.")
        return
    click.echo("\n".join(format_cells(result, selected)))


@cli.command()
def init():
    """Set default output settings (interactive)."""
    settings = load_settings()

    click.echo("Set up skyrim-cell-dump defaults. Command-line options still override them.\n")

    fmt = click.prompt(
        "Default output format",
        type=click.Choice([FORMAT_TEXT, FORMAT_JSON, FORMAT_CSV]),
        default=settings.format,
    )
    pretty = settings.pretty
    if fmt == FORMAT_JSON:
        pretty = click.confirm("Pretty print JSON?", default=settings.pretty)
    partial = click.confirm(
        "Keep going when a cell cannot be decoded?", default=settings.partial,
    )
    max_depth = click.prompt(
        "Maximum group nesting depth", type=click.IntRange(min=1), default=settings.max_depth,
    )

    saved_path = save_settings(Settings(
        format=fmt, pretty=pretty, max_depth=max_depth, partial=partial,
    ))
    click.echo(f"\nConfig saved to {saved_path}")
