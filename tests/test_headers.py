"""Tests for group, record, and field header decoding."""

from __future__ import annotations

import struct

import pytest

from plugin_builder import FLAG_COMPRESSED, FLAG_PERSISTENT, field, group, record
from skyrim_cell_dump.esm.errors import (
    MalformedGroup,
    TruncatedInput,
    UnexpectedTag,
    UnrecognizedHeader,
)
from skyrim_cell_dump.esm.headers import (
    GroupHeader,
    RecordHeader,
    decode_field_header,
    decode_group_header,
    decode_header_or_record,
    decode_record_header,
)


def test_group_header() -> None:
    data = group(b"WRLD", 0, b"\x00" * 10)
    header, pos = decode_group_header(data, 0)
    assert pos == 24
    assert header.size == 34
    assert header.label == b"WRLD"
    assert header.group_type == 0
    assert header.payload_size == 10


def test_group_header_rejects_records() -> None:
    with pytest.raises(UnexpectedTag):
        decode_group_header(record("CELL", b""), 0)


def test_group_smaller_than_header_is_malformed() -> None:
    with pytest.raises(MalformedGroup):
        decode_group_header(group(b"CELL", 0, size=10), 0)


def test_record_header() -> None:
    data = record("CELL", b"\x00" * 5, form_id=0x0100ABCD, flags=FLAG_PERSISTENT | FLAG_COMPRESSED)
    header, pos = decode_record_header(data, 0)
    assert pos == 24
    assert header.record_type == "CELL"
    assert header.size == 5
    assert header.id == 0x0100ABCD
    assert header.version == 44
    assert header.is_persistent
    assert header.is_compressed
    assert header.form_id_hex == "0x0100ABCD"


def test_record_header_masks_unknown_flag_bits() -> None:
    # 0x2 and 0x4 are not defined record flags
    header, _ = decode_record_header(record("CELL", b"", flags=0x00000406), 0)
    assert header.flags == FLAG_PERSISTENT


def test_record_header_rejects_groups() -> None:
    with pytest.raises(UnexpectedTag):
        decode_record_header(group(b"CELL", 0), 0)


def test_truncated_record_header() -> None:
    with pytest.raises(TruncatedInput):
        decode_record_header(record("CELL", b"")[:20], 0)


def test_field_header() -> None:
    header, pos = decode_field_header(field("EDID", b"abc\x00"), 0)
    assert (header.field_type, header.size, pos) == ("EDID", 4, 6)


def test_header_or_record_dispatch() -> None:
    grp, _ = decode_header_or_record(group(b"CELL", 0), 0)
    rec, _ = decode_header_or_record(record("REFR", b""), 0)
    assert isinstance(grp, GroupHeader)
    assert isinstance(rec, RecordHeader)
    assert rec.record_type == "REFR"


def test_header_or_record_unrecognized() -> None:
    data = b"\xff\xff\xff\xff" + struct.pack("<I", 0) + b"\x00" * 16
    with pytest.raises(UnrecognizedHeader):
        decode_header_or_record(data, 0)
