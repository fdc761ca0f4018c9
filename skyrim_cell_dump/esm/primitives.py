"""Fixed-width little-endian decoders over an in-memory plugin buffer.

Every decoder takes ``(data, pos)`` and returns ``(value, new_pos)``.
Reading past the end of ``data`` raises :class:`TruncatedInput`.
"""
from __future__ import annotations

import codecs
import math
import struct

from skyrim_cell_dump.esm.constants import STRING_ENCODING
from skyrim_cell_dump.esm.errors import InvalidEncoding, TruncatedInput

_U8 = struct.Struct("<B")
_I8 = struct.Struct("<b")
_U16 = struct.Struct("<H")
_I16 = struct.Struct("<h")
_U32 = struct.Struct("<I")
_I32 = struct.Struct("<i")
_F32 = struct.Struct("<f")

_PASSTHROUGH_ERRORS = "cp1252-passthrough"


def _passthrough(err: UnicodeDecodeError) -> tuple[str, int]:
    # 0x81, 0x8D, 0x8F, 0x90 and 0x9D are undefined in cp1252; map them to
    # the same code point like browsers do.
    return err.object[err.start:err.end].decode("latin-1"), err.end


codecs.register_error(_PASSTHROUGH_ERRORS, _passthrough)


def _require(data: bytes, pos: int, n: int) -> None:
    if n < 0 or pos + n > len(data):
        raise TruncatedInput(
            f"Need {n} bytes, only {max(len(data) - pos, 0)} remain", offset=pos,
        )


def _unpack(fmt: struct.Struct, data: bytes, pos: int):
    _require(data, pos, fmt.size)
    return fmt.unpack_from(data, pos)[0], pos + fmt.size


def read_u8(data: bytes, pos: int) -> tuple[int, int]:
    return _unpack(_U8, data, pos)


def read_i8(data: bytes, pos: int) -> tuple[int, int]:
    return _unpack(_I8, data, pos)


def read_u16(data: bytes, pos: int) -> tuple[int, int]:
    return _unpack(_U16, data, pos)


def read_i16(data: bytes, pos: int) -> tuple[int, int]:
    return _unpack(_I16, data, pos)


def read_u32(data: bytes, pos: int) -> tuple[int, int]:
    return _unpack(_U32, data, pos)


def read_i32(data: bytes, pos: int) -> tuple[int, int]:
    return _unpack(_I32, data, pos)


def read_f32(data: bytes, pos: int) -> tuple[float, int]:
    """Decode a 32-bit float as the shortest decimal that maps back to it.

    A stored ``1.7f`` comes back as ``1.7`` rather than ``1.7000000476837158``.
    """
    raw, new_pos = _unpack(_F32, data, pos)
    return shortest_f32(raw), new_pos


def shortest_f32(value: float) -> float:
    if not math.isfinite(value):
        return value
    packed = _F32.pack(value)
    for digits in range(1, 10):
        candidate = float(f"{value:.{digits}g}")
        if _F32.pack(candidate) == packed:
            return candidate
    return value


def take(data: bytes, pos: int, n: int) -> tuple[bytes, int]:
    """Return the next ``n`` bytes."""
    _require(data, pos, n)
    return data[pos:pos + n], pos + n


def skip(data: bytes, pos: int, n: int) -> int:
    """Advance past ``n`` bytes without copying them."""
    _require(data, pos, n)
    return pos + n


def read_tag(data: bytes, pos: int) -> tuple[str, int]:
    """Decode a 4-character type code."""
    raw, new_pos = take(data, pos, 4)
    try:
        return raw.decode("utf-8"), new_pos
    except UnicodeDecodeError as e:
        raise InvalidEncoding(f"Type code {raw!r} is not valid text", offset=pos) from e


def decode_legacy_string(raw: bytes) -> str:
    return raw.decode(STRING_ENCODING, errors=_PASSTHROUGH_ERRORS)


def read_zstring(data: bytes, pos: int) -> tuple[str, int]:
    """Decode a null-terminated cp1252 string and step past the terminator."""
    end = data.find(b"\x00", pos)
    if end == -1:
        raise TruncatedInput("Unterminated string", offset=pos)
    return decode_legacy_string(data[pos:end]), end + 1
