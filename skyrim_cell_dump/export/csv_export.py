"""Export decoded cells as CSV."""
from __future__ import annotations

import csv
import io

from skyrim_cell_dump.esm.records import DecodedPlugin


def export_csv(plugin: DecodedPlugin) -> str:
    """Export one row per cell, with the enclosing world's editor ID resolved."""
    output = io.StringIO()
    writer = csv.writer(output)

    # Header
    writer.writerow([
        "form_id", "editor_id", "x", "y", "world_form_id", "world", "is_persistent",
    ])

    world_names = {w.form_id: w.editor_id for w in plugin.worlds}
    for cell in plugin.cells:
        world_fid = cell.world_form_id
        writer.writerow([
            cell.form_id_hex,
            cell.editor_id or "",
            "" if cell.x is None else cell.x,
            "" if cell.y is None else cell.y,
            "" if world_fid is None else f"0x{world_fid:08X}",
            world_names.get(world_fid, "") if world_fid is not None else "",
            int(cell.is_persistent),
        ])

    return output.getvalue()
