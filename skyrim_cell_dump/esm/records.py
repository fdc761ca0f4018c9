"""Decoded plugin dataclasses: header, worlds, cells."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Optional


@dataclass(frozen=True, slots=True)
class PluginHeader:
    """Parsed TES4 record."""
    version: float
    num_records_and_groups: int
    next_object_id: int
    author: Optional[str] = None
    description: Optional[str] = None
    masters: tuple[str, ...] = ()   # Order matters: index = form id load-order byte

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "num_records_and_groups": self.num_records_and_groups,
            "next_object_id": self.next_object_id,
            "author": self.author,
            "description": self.description,
            "masters": list(self.masters),
        }


@dataclass(frozen=True, slots=True)
class World:
    """Parsed WRLD record.

    ``form_id`` is relative to the plugin, not the load order. Its top byte
    indexes ``PluginHeader.masters``; an index equal to ``len(masters)``
    means this plugin owns the world rather than editing a master's.
    """
    form_id: int
    editor_id: str

    @property
    def form_id_hex(self) -> str:
        return f"0x{self.form_id:08X}"

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class Cell:
    """Parsed CELL record."""
    form_id: int
    editor_id: Optional[str] = None
    x: Optional[int] = None
    y: Optional[int] = None
    world_form_id: Optional[int] = None     # Enclosing WRLD, None for interiors
    is_persistent: bool = False             # Holds the world's persistent refs

    @property
    def form_id_hex(self) -> str:
        return f"0x{self.form_id:08X}"

    @property
    def is_exterior(self) -> bool:
        return self.x is not None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class CellError:
    """A cell that could not be decoded when partial results were requested."""
    form_id: int
    error: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class DecodedPlugin:
    header: PluginHeader
    worlds: tuple[World, ...] = ()
    cells: tuple[Cell, ...] = ()
    cell_errors: tuple[CellError, ...] = ()

    def owning_master(self, form_id: int) -> Optional[str]:
        """Return the master that owns ``form_id``, or None if this plugin does."""
        index = form_id >> 24
        if index < len(self.header.masters):
            return self.header.masters[index]
        return None

    def world(self, form_id: int) -> Optional[World]:
        for world in self.worlds:
            if world.form_id == form_id:
                return world
        return None

    def to_dict(self) -> dict:
        data = {
            "header": self.header.to_dict(),
            "worlds": [w.to_dict() for w in self.worlds],
            "cells": [c.to_dict() for c in self.cells],
        }
        if self.cell_errors:
            data["cell_errors"] = [e.to_dict() for e in self.cell_errors]
        return data


@dataclass(slots=True)
class UnparsedCell:
    """CELL record located by the group walk; payload possibly compressed."""
    form_id: int
    world_form_id: Optional[int]
    is_compressed: bool
    is_persistent: bool
    data: memoryview = field(repr=False)


@dataclass(slots=True)
class DecompressedCell:
    """CELL record with its payload inflated but fields not yet parsed."""
    form_id: int
    world_form_id: Optional[int]
    is_persistent: bool
    data: bytes = field(repr=False)
