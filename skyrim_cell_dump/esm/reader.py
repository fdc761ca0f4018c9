"""Plugin reader: walks the GRUP tree of a Skyrim plugin and extracts WRLD/CELL data."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from skyrim_cell_dump.esm.compression import decompress_cell
from skyrim_cell_dump.esm.constants import (
    DEFAULT_MAX_DEPTH,
    GROUP_TOP,
    GROUP_TOPIC_CHILDREN,
    RECORD_HEADER_SIZE,
    REC_CELL,
    REC_WORLD,
    TRAVERSED_TOP_LABELS,
)
from skyrim_cell_dump.esm.errors import (
    PHASE_CELLS,
    PHASE_STRUCTURE,
    DecodeError,
    DepthLimitExceeded,
    MalformedGroup,
    TruncatedInput,
)
from skyrim_cell_dump.esm.fields import decode_cell, decode_plugin_header, decode_world
from skyrim_cell_dump.esm.headers import GroupHeader, decode_header_or_record
from skyrim_cell_dump.esm.records import (
    Cell,
    CellError,
    DecodedPlugin,
    PluginHeader,
    UnparsedCell,
    World,
)


class PluginReader:
    """Group/record walker over a complete plugin buffer.

    Collects the TES4 header, every WRLD record and the raw payload of every
    CELL record reachable through WRLD and CELL top groups. CELL payloads
    are left compressed; see :func:`decode` for the full pipeline.
    """

    def __init__(self, data: bytes, max_depth: int = DEFAULT_MAX_DEPTH):
        self.data = data
        # CELL payloads are slices of this view, not copies
        self.view = memoryview(data)
        self.max_depth = max_depth
        self.worlds: list[World] = []
        self.unparsed_cells: list[UnparsedCell] = []

    def read(self) -> tuple[PluginHeader, list[World], list[UnparsedCell]]:
        header, pos = decode_plugin_header(self.data)
        self.walk(pos, len(self.data))
        return header, self.worlds, self.unparsed_cells

    def _advance(self, pos: int, n: int, end: int) -> int:
        """Move ``pos`` forward by a size taken from a header, within ``end``."""
        new_pos = pos + n
        if new_pos > len(self.data):
            raise TruncatedInput(
                f"Declared size {n} runs past end of file ({len(self.data)} bytes)", offset=pos,
            )
        if new_pos > end:
            raise MalformedGroup(
                f"Declared size {n} overruns enclosing group ending at 0x{end:X}", offset=pos,
            )
        return new_pos

    def walk(self, pos: int, end: int, world_form_id: Optional[int] = None, depth: int = 0) -> int:
        """Consume headers from ``pos`` up to ``end``; return the end offset.

        ``world_form_id`` is the WRLD whose children are being walked. It is
        cleared when a WRLD or CELL top group starts.
        """
        if depth > self.max_depth:
            raise DepthLimitExceeded(
                f"Groups nested deeper than {self.max_depth} levels", offset=pos,
            )
        data = self.data
        while pos < len(data) and pos < end:
            header_pos = pos
            header, pos = decode_header_or_record(data, pos)

            if isinstance(header, GroupHeader):
                group_end = self._advance(header_pos, header.size, end)
                if self._descend(header):
                    if header.group_type == GROUP_TOP:
                        # New worldspace/cell namespace
                        world_form_id = None
                    self.walk(pos, group_end, world_form_id, depth + 1)
                pos = group_end
                continue

            record_end = self._advance(header_pos, RECORD_HEADER_SIZE + header.size, end)
            if header.record_type == REC_CELL:
                self.unparsed_cells.append(UnparsedCell(
                    form_id=header.id,
                    world_form_id=world_form_id,
                    is_compressed=header.is_compressed,
                    is_persistent=header.is_persistent,
                    data=self.view[pos:record_end],
                ))
            elif header.record_type == REC_WORLD:
                world_form_id = header.id
                self.worlds.append(decode_world(header, bytes(self.view[pos:record_end])))
            pos = record_end
        return pos

    @staticmethod
    def _descend(group: GroupHeader) -> bool:
        if group.group_type == GROUP_TOP:
            return group.label in TRAVERSED_TOP_LABELS
        return group.group_type != GROUP_TOPIC_CHILDREN


def decode_cells(unparsed_cells: list[UnparsedCell], partial: bool = False) -> tuple[list[Cell], list[CellError]]:
    """Inflate every CELL payload, then decode the fields of each.

    With ``partial`` a failing cell is reported in the error list and the
    rest are still decoded; otherwise the first failure is raised.
    """
    errors = []
    decompressed = []
    for unparsed in unparsed_cells:
        try:
            decompressed.append(decompress_cell(unparsed))
        except DecodeError as e:
            if not partial:
                raise
            errors.append(_cell_error(unparsed.form_id, e))

    cells = []
    for cell in decompressed:
        try:
            cells.append(decode_cell(cell))
        except DecodeError as e:
            if not partial:
                raise
            errors.append(_cell_error(cell.form_id, e))
    return cells, errors


def _cell_error(form_id: int, err: DecodeError) -> CellError:
    return CellError(form_id=form_id, error=f"{type(err).__name__}: {err}")


def decode(data: bytes, *, max_depth: int = DEFAULT_MAX_DEPTH, partial: bool = False) -> DecodedPlugin:
    """Decode a plugin file's bytes into its header, worlds, and cells.

    Raises a :class:`DecodeError` subclass whose ``phase`` attribute says
    whether the group walk (``"structure"``) or cell decoding (``"cells"``)
    failed. Nothing is returned on failure.
    """
    try:
        header, worlds, unparsed_cells = PluginReader(data, max_depth=max_depth).read()
    except DecodeError as e:
        e.phase = PHASE_STRUCTURE
        raise

    try:
        cells, errors = decode_cells(unparsed_cells, partial=partial)
    except DecodeError as e:
        e.phase = PHASE_CELLS
        raise

    return DecodedPlugin(
        header=header,
        worlds=tuple(worlds),
        cells=tuple(cells),
        cell_errors=tuple(errors),
    )


def read_plugin(path: Path, **kwargs) -> DecodedPlugin:
    """Read and decode a plugin file from disk."""
    with open(path, "rb") as f:
        data = f.read()
    return decode(data, **kwargs)
