"""Export a decoded plugin as JSON."""
from __future__ import annotations

import json

from skyrim_cell_dump.esm.records import DecodedPlugin


def export_json(plugin: DecodedPlugin, pretty: bool = False) -> str:
    """Export the plugin tree as a JSON string."""
    if pretty:
        return json.dumps(plugin.to_dict(), indent=2, ensure_ascii=False)
    return json.dumps(plugin.to_dict(), ensure_ascii=False)
