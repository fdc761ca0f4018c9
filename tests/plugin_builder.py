"""Byte-level builders for synthetic plugin files used by the tests."""
from __future__ import annotations

import struct
import zlib
from typing import Optional

FLAG_PERSISTENT = 0x00000400
FLAG_COMPRESSED = 0x00040000


def zstr(text: str) -> bytes:
    return text.encode("cp1252") + b"\x00"


def field(tag: str, data: bytes, size: Optional[int] = None) -> bytes:
    """A field: tag + u16 size + data. ``size`` overrides the declared size."""
    declared = len(data) if size is None else size
    return tag.encode("ascii") + struct.pack("<H", declared) + data


def large_field(tag: str, data: bytes) -> bytes:
    """An XXXX field carrying the real size, then the field declared as 0."""
    return field("XXXX", struct.pack("<I", len(data))) + field(tag, data, size=0)


def record(tag: str, payload: bytes, form_id: int = 0, flags: int = 0,
           size: Optional[int] = None) -> bytes:
    declared = len(payload) if size is None else size
    header = struct.pack("<4sIIIHHH2x", tag.encode("ascii"), declared, flags, form_id, 0, 0, 44)
    return header + payload


def compressed_record(tag: str, payload: bytes, form_id: int = 0, flags: int = 0,
                      size_prefix: Optional[int] = None) -> bytes:
    prefix = len(payload) if size_prefix is None else size_prefix
    body = struct.pack("<I", prefix) + zlib.compress(payload)
    return record(tag, body, form_id=form_id, flags=flags | FLAG_COMPRESSED)


def group(label: bytes | int, group_type: int, *children: bytes, size: Optional[int] = None) -> bytes:
    contents = b"".join(children)
    if isinstance(label, int):
        label = struct.pack("<I", label)
    declared = len(contents) + 24 if size is None else size
    return struct.pack("<4sI4siHH4x", b"GRUP", declared, label, group_type, 0, 0) + contents


def hedr(version: float = 1.7, num_records: int = 1, next_object_id: int = 0x800) -> bytes:
    return field("HEDR", struct.pack("<fiI", version, num_records, next_object_id))


def tes4(*masters: str, version: float = 1.7, author: Optional[str] = None,
         description: Optional[str] = None, extra: bytes = b"", num_records: int = 1,
         next_object_id: int = 0x800) -> bytes:
    payload = hedr(version, num_records, next_object_id)
    if author is not None:
        payload += field("CNAM", zstr(author))
    if description is not None:
        payload += field("SNAM", zstr(description))
    for master in masters:
        payload += field("MAST", zstr(master)) + field("DATA", struct.pack("<Q", 0))
    payload += extra
    return record("TES4", payload, flags=0x1)


def xclc(x: int, y: int, size: int = 16) -> bytes:
    return field("XCLC", struct.pack("<ii", x, y) + b"\x00" * (size - 8))


def cell(form_id: int, editor_id: Optional[str] = None, coords: Optional[tuple[int, int]] = None,
         flags: int = 0, compressed: bool = False, extra: bytes = b"") -> bytes:
    payload = b""
    if editor_id is not None:
        payload += field("EDID", zstr(editor_id))
    payload += field("DATA", b"\x02\x00")
    if coords is not None:
        payload += xclc(*coords)
    payload += extra
    if compressed:
        return compressed_record("CELL", payload, form_id=form_id, flags=flags)
    return record("CELL", payload, form_id=form_id, flags=flags)


def world(form_id: int, editor_id: str, flags: int = 0) -> bytes:
    payload = field("EDID", zstr(editor_id)) + field("FULL", struct.pack("<I", 7)) + field("DATA", b"\x01")
    if flags & FLAG_COMPRESSED:
        return compressed_record("WRLD", payload, form_id=form_id, flags=flags & ~FLAG_COMPRESSED)
    return record("WRLD", payload, form_id=form_id, flags=flags)
