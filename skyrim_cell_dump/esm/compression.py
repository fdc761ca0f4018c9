"""zlib inflation of compressed record payloads."""
from __future__ import annotations

import warnings
import zlib
from typing import Optional

from skyrim_cell_dump.esm.constants import COMPRESSED_SIZE_PREFIX
from skyrim_cell_dump.esm.errors import DecompressedSizeWarning, DecompressionFailed
from skyrim_cell_dump.esm.primitives import read_u32
from skyrim_cell_dump.esm.records import DecompressedCell, UnparsedCell


def decompress_record_data(data: bytes, form_id: Optional[int] = None) -> bytes:
    """Inflate a compressed payload: u32 uncompressed size + zlib stream.

    The size prefix is not trusted. A mismatch with the inflated length is
    reported as a :class:`DecompressedSizeWarning` and the output is kept.
    """
    label = f"record 0x{form_id:08X}" if form_id is not None else "record"
    if len(data) < COMPRESSED_SIZE_PREFIX:
        raise DecompressionFailed(f"Compressed {label} is only {len(data)} bytes")
    declared_size, _ = read_u32(data, 0)
    try:
        inflated = zlib.decompress(data[COMPRESSED_SIZE_PREFIX:])
    except zlib.error as e:
        raise DecompressionFailed(f"Failed to inflate {label}: {e}") from e
    if len(inflated) != declared_size:
        warnings.warn(
            f"{label} declares {declared_size} uncompressed bytes, inflated to {len(inflated)}",
            DecompressedSizeWarning,
            stacklevel=2,
        )
    return inflated


def decompress_cell(cell: UnparsedCell) -> DecompressedCell:
    if cell.is_compressed:
        data = decompress_record_data(cell.data, cell.form_id)
    else:
        data = bytes(cell.data)
    return DecompressedCell(
        form_id=cell.form_id,
        world_form_id=cell.world_form_id,
        is_persistent=cell.is_persistent,
        data=data,
    )
