"""Group, record, and field header decoding."""
from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Union

from skyrim_cell_dump.esm.constants import (
    FIELD_HEADER_SIZE,
    FLAG_COMPRESSED,
    FLAG_PERSISTENT,
    GROUP_HEADER_SIZE,
    KNOWN_RECORD_FLAGS,
    RECORD_HEADER_SIZE,
    TAG_GROUP,
)
from skyrim_cell_dump.esm.errors import (
    InvalidEncoding,
    MalformedGroup,
    UnexpectedTag,
    UnrecognizedHeader,
)
from skyrim_cell_dump.esm.primitives import read_tag, take

# Struct formats (little-endian)
_GRUP_FMT = struct.Struct("<4sI4siHH4x")    # 'GRUP'(4) + size(4) + label(4) + grouptype(4) + ts(2) + vc(2) + pad(4)
_RECORD_FMT = struct.Struct("<4sIIIHHH2x")  # type(4) + size(4) + flags(4) + formid(4) + ts(2) + vc(2) + ver(2) + pad(2)
_FIELD_FMT = struct.Struct("<4sH")          # type(4) + size(2)


@dataclass(slots=True)
class GroupHeader:
    size: int           # Includes the 24-byte header
    label: bytes        # Raw 4 bytes; meaning depends on group_type
    group_type: int
    timestamp: int
    version_control_info: int

    @property
    def payload_size(self) -> int:
        return self.size - GROUP_HEADER_SIZE


@dataclass(slots=True)
class RecordHeader:
    record_type: str
    size: int           # Payload only, header excluded
    flags: int          # Unknown bits already masked off
    id: int
    timestamp: int
    version_control_info: int
    version: int

    @property
    def is_compressed(self) -> bool:
        return bool(self.flags & FLAG_COMPRESSED)

    @property
    def is_persistent(self) -> bool:
        return bool(self.flags & FLAG_PERSISTENT)

    @property
    def form_id_hex(self) -> str:
        return f"0x{self.id:08X}"


@dataclass(slots=True)
class FieldHeader:
    field_type: str
    size: int


Header = Union[GroupHeader, RecordHeader]


def decode_group_header(data: bytes, pos: int) -> tuple[GroupHeader, int]:
    tag, _ = take(data, pos, 4)
    if tag != TAG_GROUP:
        raise UnexpectedTag(f"Expected GRUP, got {tag!r}", offset=pos)
    raw, new_pos = take(data, pos, GROUP_HEADER_SIZE)
    _, size, label, group_type, timestamp, vc_info = _GRUP_FMT.unpack(raw)
    if size < GROUP_HEADER_SIZE:
        raise MalformedGroup(f"Group size {size} is smaller than its header", offset=pos)
    return GroupHeader(size, label, group_type, timestamp, vc_info), new_pos


def decode_record_header(data: bytes, pos: int) -> tuple[RecordHeader, int]:
    record_type, _ = read_tag(data, pos)
    if record_type == TAG_GROUP.decode():
        raise UnexpectedTag("Expected a record, got GRUP", offset=pos)
    raw, new_pos = take(data, pos, RECORD_HEADER_SIZE)
    _, size, flag_bits, form_id, timestamp, vc_info, version = _RECORD_FMT.unpack(raw)
    # Only the bits we know about are kept; newer tools set others.
    flags = flag_bits & KNOWN_RECORD_FLAGS
    return RecordHeader(record_type, size, flags, form_id, timestamp, vc_info, version), new_pos


def decode_field_header(data: bytes, pos: int) -> tuple[FieldHeader, int]:
    field_type, _ = read_tag(data, pos)
    raw, new_pos = take(data, pos, FIELD_HEADER_SIZE)
    _, size = _FIELD_FMT.unpack(raw)
    return FieldHeader(field_type, size), new_pos


def decode_header_or_record(data: bytes, pos: int) -> tuple[Header, int]:
    """Decode whichever header starts at ``pos``: a GRUP or a record."""
    try:
        return decode_group_header(data, pos)
    except UnexpectedTag:
        pass
    try:
        return decode_record_header(data, pos)
    except InvalidEncoding as e:
        raise UnrecognizedHeader(f"Not a group or record header: {e}", offset=pos) from e
