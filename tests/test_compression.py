"""Tests for compressed record payloads."""

from __future__ import annotations

import struct
import zlib

import pytest

from skyrim_cell_dump.esm.compression import decompress_cell, decompress_record_data
from skyrim_cell_dump.esm.errors import DecompressedSizeWarning, DecompressionFailed
from skyrim_cell_dump.esm.reader import decode_cells
from skyrim_cell_dump.esm.records import UnparsedCell

PAYLOAD = b"EDID\x05\x00Test\x00"


def _compressed(payload: bytes, prefix: int) -> bytes:
    return struct.pack("<I", prefix) + zlib.compress(payload)


def test_inflates_after_size_prefix() -> None:
    assert decompress_record_data(_compressed(PAYLOAD, len(PAYLOAD))) == PAYLOAD


def test_wrong_size_prefix_warns_but_succeeds() -> None:
    with pytest.warns(DecompressedSizeWarning):
        assert decompress_record_data(_compressed(PAYLOAD, 9999), form_id=0x10) == PAYLOAD


def test_corrupt_stream_fails() -> None:
    with pytest.raises(DecompressionFailed):
        decompress_record_data(struct.pack("<I", 10) + b"not zlib at all")


def test_payload_shorter_than_prefix_fails() -> None:
    with pytest.raises(DecompressionFailed):
        decompress_record_data(b"\x01\x02")


def test_uncompressed_cell_is_copied_verbatim() -> None:
    unparsed = UnparsedCell(form_id=1, world_form_id=None, is_compressed=False,
                            is_persistent=True, data=PAYLOAD)
    result = decompress_cell(unparsed)
    assert result.data == PAYLOAD
    assert result.is_persistent
    assert result.form_id == 1


def test_decode_cells_keeps_order() -> None:
    cells = [
        UnparsedCell(form_id=i, world_form_id=0x3C, is_compressed=bool(i % 2),
                     is_persistent=False,
                     data=memoryview(_compressed(PAYLOAD, len(PAYLOAD)) if i % 2 else PAYLOAD))
        for i in range(4)
    ]
    result, errors = decode_cells(cells)
    assert errors == []
    assert [c.form_id for c in result] == [0, 1, 2, 3]
    assert all(c.editor_id == "Test" for c in result)
    assert all(c.world_form_id == 0x3C for c in result)


def test_memoryview_payload_is_inflated() -> None:
    view = memoryview(b"junk" + _compressed(PAYLOAD, len(PAYLOAD)))[4:]
    unparsed = UnparsedCell(form_id=2, world_form_id=None, is_compressed=True,
                            is_persistent=False, data=view)
    assert decompress_cell(unparsed).data == PAYLOAD
