"""Human-readable plain text report of a decoded plugin."""
from __future__ import annotations

from skyrim_cell_dump.esm.records import Cell, DecodedPlugin


def format_header(plugin: DecodedPlugin) -> list[str]:
    header = plugin.header
    lines = [
        "Plugin header",
        f"  Version:        {header.version}",
        f"  Records/groups: {header.num_records_and_groups:,}",
        f"  Next object ID: 0x{header.next_object_id:08X}",
        f"  Author:         {header.author or '(none)'}",
        f"  Description:    {header.description or '(none)'}",
    ]
    if header.masters:
        lines.append(f"  Masters ({len(header.masters)}):")
        for i, master in enumerate(header.masters):
            lines.append(f"    [{i:02X}] {master}")
    else:
        lines.append("  Masters:        (none)")
    return lines


def format_worlds(plugin: DecodedPlugin) -> list[str]:
    lines = [f"Worlds ({len(plugin.worlds)})"]
    if not plugin.worlds:
        return lines
    lines.append(f"  {'FormID':<12}  {'Editor ID':<40}  {'Owner'}")
    lines.append("  " + "-" * 76)
    for world in plugin.worlds:
        owner = plugin.owning_master(world.form_id) or "(this plugin)"
        lines.append(f"  {world.form_id_hex:<12}  {world.editor_id:<40}  {owner}")
    return lines


def format_cells(plugin: DecodedPlugin, cells: tuple[Cell, ...] | list[Cell] | None = None) -> list[str]:
    if cells is None:
        cells = plugin.cells
    lines = [f"Cells ({len(cells)})"]
    if not cells:
        return lines
    world_names = {w.form_id: w.editor_id for w in plugin.worlds}
    lines.append(f"  {'FormID':<12}  {'World':<20}  {'X':>6}  {'Y':>6}  {'P':<1}  {'Editor ID'}")
    lines.append("  " + "-" * 76)
    for cell in cells:
        if cell.world_form_id is None:
            world = ""
        else:
            world = world_names.get(cell.world_form_id, f"0x{cell.world_form_id:08X}")
        x = "" if cell.x is None else str(cell.x)
        y = "" if cell.y is None else str(cell.y)
        persistent = "*" if cell.is_persistent else ""
        lines.append(
            f"  {cell.form_id_hex:<12}  {world:<20}  {x:>6}  {y:>6}  {persistent:<1}  {cell.editor_id or ''}"
        )
    return lines


def format_cell_errors(plugin: DecodedPlugin) -> list[str]:
    lines = [f"Undecodable cells ({len(plugin.cell_errors)})"]
    for err in plugin.cell_errors:
        lines.append(f"  0x{err.form_id:08X}  {err.error}")
    return lines


def export_text(plugin: DecodedPlugin) -> str:
    """Render the full plugin as a plain text report."""
    sections = [format_header(plugin), format_worlds(plugin), format_cells(plugin)]
    if plugin.cell_errors:
        sections.append(format_cell_errors(plugin))
    return "\n\n".join("\n".join(lines) for lines in sections)
