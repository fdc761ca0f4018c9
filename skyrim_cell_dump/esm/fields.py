"""Field-level decoders for TES4, WRLD, and CELL record payloads.

A record payload is a flat run of fields: type(4) + size(2) + data. A field
larger than 65535 bytes is preceded by an XXXX field whose u32 payload is
the real size of the next field only.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

from skyrim_cell_dump.esm.compression import decompress_record_data
from skyrim_cell_dump.esm.constants import (
    HEDR_SIZE,
    SUB_CNAM,
    SUB_EDID,
    SUB_HEDR,
    SUB_INTV,
    SUB_MAST,
    SUB_SNAM,
    SUB_XCLC,
    SUB_XXXX,
    TAG_PLUGIN_HEADER,
    XCLC_COORDS_SIZE,
    XCLC_LEGACY_SIZE,
)
from skyrim_cell_dump.esm.errors import MalformedHeader, MissingEditorId, MissingPluginHeader
from skyrim_cell_dump.esm.headers import FieldHeader, RecordHeader, decode_field_header, decode_record_header
from skyrim_cell_dump.esm.primitives import read_f32, read_i32, read_u32, read_zstring, take
from skyrim_cell_dump.esm.records import Cell, DecompressedCell, PluginHeader, World


def iter_fields(data: bytes) -> Iterator[tuple[FieldHeader, bytes]]:
    """Yield ``(header, body)`` for each field in a record payload.

    ``header.size`` is the declared 16-bit size; ``body`` is sized by the
    pending XXXX override when there is one. XXXX fields themselves are
    consumed here and never yielded.
    """
    pos = 0
    size_override: Optional[int] = None
    while pos < len(data):
        field, pos = decode_field_header(data, pos)
        if field.field_type == SUB_XXXX:
            body, pos = take(data, pos, field.size)
            size_override, _ = read_u32(body, 0)
            continue
        size = field.size if size_override is None else size_override
        size_override = None
        body, pos = take(data, pos, size)
        yield field, body


def _leading_field_type(payload: bytes) -> Optional[str]:
    """Raw type of the first field, before any XXXX override is applied."""
    if not payload:
        return None
    field, _ = decode_field_header(payload, 0)
    return field.field_type


def _field_string(body: bytes) -> str:
    value, _ = read_zstring(body, 0)
    return value


def decode_plugin_header(data: bytes, pos: int = 0) -> tuple[PluginHeader, int]:
    """Decode the TES4 record at ``pos``. Returns the header and the offset after it."""
    tag, _ = take(data, pos, 4)
    if tag != TAG_PLUGIN_HEADER:
        raise MissingPluginHeader(f"Expected TES4 record, got {tag!r}", offset=pos)
    record, pos = decode_record_header(data, pos)
    payload, pos = take(data, pos, record.size)

    leading = _leading_field_type(payload)
    if leading != SUB_HEDR:
        raise MalformedHeader(f"TES4 record must start with HEDR, found {leading or 'end of record'}")
    fields = iter_fields(payload)
    _, hedr = next(fields)
    if len(hedr) < HEDR_SIZE:
        raise MalformedHeader(f"HEDR is {len(hedr)} bytes, expected {HEDR_SIZE}")
    version, off = read_f32(hedr, 0)
    num_records_and_groups, off = read_i32(hedr, off)
    next_object_id, off = read_u32(hedr, off)

    author = None
    description = None
    masters: list[str] = []
    for field, body in fields:
        if field.field_type == SUB_CNAM:
            author = _field_string(body)
        elif field.field_type == SUB_SNAM:
            description = _field_string(body)
        elif field.field_type == SUB_MAST:
            masters.append(_field_string(body))
        elif field.field_type == SUB_INTV:
            pass
        # DATA (master file sizes), ONAM, INCC and the rest are skipped

    header = PluginHeader(
        version=version,
        num_records_and_groups=num_records_and_groups,
        next_object_id=next_object_id,
        author=author,
        description=description,
        masters=tuple(masters),
    )
    return header, pos


def decode_world(record: RecordHeader, payload: bytes) -> World:
    """Decode a WRLD payload. Only the leading EDID is interpreted."""
    if record.is_compressed:
        payload = decompress_record_data(payload, record.id)
    if _leading_field_type(payload) != SUB_EDID:
        raise MissingEditorId(f"WRLD {record.form_id_hex} does not start with EDID")
    _, body = next(iter_fields(payload))
    return World(form_id=record.id, editor_id=_field_string(body))


@dataclass(slots=True)
class CellFields:
    editor_id: Optional[str] = None
    x: Optional[int] = None
    y: Optional[int] = None


def decode_cell_fields(data: bytes) -> CellFields:
    """Decode the fields of an inflated CELL payload. Later fields win."""
    cell = CellFields()
    for field, body in iter_fields(data):
        if field.field_type == SUB_EDID:
            cell.editor_id = _field_string(body)
        elif field.field_type == SUB_XCLC:
            x, off = read_i32(body, 0)
            y, off = read_i32(body, off)
            # Older (v0.94) files write 12 bytes with no land-hide flags,
            # current ones 16. Either way only x and y are kept.
            if field.size == XCLC_LEGACY_SIZE:
                _, off = take(body, off, XCLC_LEGACY_SIZE - XCLC_COORDS_SIZE)
            cell.x, cell.y = x, y
    return cell


def decode_cell(cell: DecompressedCell) -> Cell:
    fields = decode_cell_fields(cell.data)
    return Cell(
        form_id=cell.form_id,
        editor_id=fields.editor_id,
        x=fields.x,
        y=fields.y,
        world_form_id=cell.world_form_id,
        is_persistent=cell.is_persistent,
    )
