"""Decode errors raised while reading a plugin file."""
from __future__ import annotations

from typing import Optional

PHASE_STRUCTURE = "structure"
PHASE_CELLS = "cells"


class DecodeError(ValueError):
    """Base class for every failure to decode a plugin.

    ``phase`` is filled in by :func:`skyrim_cell_dump.esm.reader.decode` and
    tells whether the header/group walk or the per-cell stage failed.
    """

    phase: Optional[str] = None

    def __init__(self, message: str, offset: Optional[int] = None):
        super().__init__(message)
        self.offset = offset

    def __str__(self) -> str:
        message = super().__str__()
        if self.offset is not None:
            return f"{message} (at offset 0x{self.offset:X})"
        return message


class TruncatedInput(DecodeError):
    """Fewer bytes are available than a header or field declares."""


class UnexpectedTag(DecodeError):
    """A 4-byte tag did not match what the format requires here."""


class UnrecognizedHeader(UnexpectedTag):
    """Bytes decode as neither a group header nor a record header."""


class InvalidEncoding(DecodeError):
    """A record or field tag is not valid text."""


class MissingPluginHeader(DecodeError):
    """The file does not start with a TES4 record."""


class MalformedHeader(DecodeError):
    """The TES4 record is missing or has a short HEDR field."""


class MissingEditorId(DecodeError):
    """A WRLD record does not start with an EDID field."""


class DecompressionFailed(DecodeError):
    """zlib rejected a compressed record payload."""


class MalformedGroup(DecodeError):
    """A group declares an impossible size or overruns its parent."""


class DepthLimitExceeded(DecodeError):
    """Groups are nested deeper than the reader allows."""


class DecompressedSizeWarning(UserWarning):
    """Inflated payload length differs from its declared size prefix."""
