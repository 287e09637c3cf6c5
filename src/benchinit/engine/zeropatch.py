# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Byte-range resets for process-wide symbols, computed from type layouts.

The in-process harness re-runs package initializers within a single process. For
that to work, the bit of state recording "this package is already initialized" must
be reset between runs. Which bytes to zero depends on the type layout of the symbol
holding that state, so we describe layouts generically and search them for a field.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from benchinit.config.base import ConfigBase
from benchinit.config.constants import MAX_SHAPE_DEPTH


class ShapeKind(str, Enum):
    STRUCT = "struct"
    POINTER = "pointer"
    ARRAY = "array"
    SCALAR = "scalar"


@dataclass(eq=False)
class FieldShape:
    name: str
    offset: int
    shape: TypeShape


@dataclass(eq=False)
class TypeShape:
    """Layout of a type: its kind and size, its fields if a struct, its pointee if a pointer.

    Shapes may be self-referential, e.g. a linked list node pointing to its own type.
    """

    kind: ShapeKind
    size: int
    fields: list[FieldShape] = field(default_factory=list)
    elem: TypeShape | None = None


class ZeroPatchKind(str, Enum):
    FULL = "full"
    OFFSET = "offset"
    DEREF = "deref"


class ZeroPatch(ConfigBase):
    """How to reset part of a symbol.

    Attributes:
        kind: FULL zeroes the entire symbol; OFFSET zeroes size bytes at offset;
            DEREF loads the pointer stored at pointer_offset, then zeroes size bytes
            at offset beyond the address it holds.
        offset: Start of the zeroed range, relative to the symbol or the pointee.
        size: Number of bytes to zero.
        pointer_offset: Where the pointer lives within the symbol, for DEREF.
    """

    kind: ZeroPatchKind
    offset: int = 0
    size: int
    pointer_offset: int = 0

    def go_statement(self, symbol: str) -> str:
        """Render the Go statement applying this patch to the named variable."""
        base = f"unsafe.Pointer(&{symbol})"
        if self.kind == ZeroPatchKind.FULL:
            return f"zeroBytes({base}, {self.size})"
        if self.kind == ZeroPatchKind.OFFSET:
            return f"zeroBytes(unsafe.Add({base}, {self.offset}), {self.size})"
        pointee = f"*(*unsafe.Pointer)(unsafe.Add({base}, {self.pointer_offset}))"
        return f"zeroBytes(unsafe.Add({pointee}, {self.offset}), {self.size})"


def compute_zero_patch(shape: TypeShape, field_name: str = "", max_depth: int = MAX_SHAPE_DEPTH) -> ZeroPatch | None:
    """Find the bytes to zero to reset a named field within a symbol of the given shape.

    Struct fields are searched depth-first, in declaration order. The search follows
    at most one pointer indirection, and gives up beyond max_depth levels so that
    self-referential shapes always terminate.

    Args:
        shape: Layout of the symbol.
        field_name: Name of the field to reset. Empty means the whole symbol.
        max_depth: Maximum number of levels to descend.

    Returns:
        The patch, or None if no reachable field has that name.
    """
    if not field_name:
        return ZeroPatch(kind=ZeroPatchKind.FULL, size=shape.size)
    return _search(shape, field_name, offset=0, pointer_offset=None, depth=0, max_depth=max_depth)


def _search(
    shape: TypeShape,
    field_name: str,
    offset: int,
    pointer_offset: int | None,
    depth: int,
    max_depth: int,
) -> ZeroPatch | None:
    if depth >= max_depth:
        return None
    if shape.kind == ShapeKind.POINTER:
        if pointer_offset is not None or shape.elem is None:
            return None
        return _search(shape.elem, field_name, 0, offset, depth + 1, max_depth)
    if shape.kind != ShapeKind.STRUCT:
        return None

    for fld in shape.fields:
        if fld.name == field_name:
            return _patch_for(fld, offset, pointer_offset)
    for fld in shape.fields:
        patch = _search(fld.shape, field_name, offset + fld.offset, pointer_offset, depth + 1, max_depth)
        if patch is not None:
            return patch
    return None


def _patch_for(fld: FieldShape, offset: int, pointer_offset: int | None) -> ZeroPatch:
    if pointer_offset is None:
        return ZeroPatch(kind=ZeroPatchKind.OFFSET, offset=offset + fld.offset, size=fld.shape.size)
    return ZeroPatch(
        kind=ZeroPatchKind.DEREF,
        offset=offset + fld.offset,
        size=fld.shape.size,
        pointer_offset=pointer_offset,
    )


# runtime.initTask as of Go 1.21: a state word followed by the count of init funcs.
INIT_TASK_SHAPE = TypeShape(
    kind=ShapeKind.STRUCT,
    size=8,
    fields=[
        FieldShape(name="state", offset=0, shape=TypeShape(kind=ShapeKind.SCALAR, size=4)),
        FieldShape(name="nfns", offset=4, shape=TypeShape(kind=ShapeKind.SCALAR, size=4)),
    ],
)
INIT_TASK_STATE_FIELD = "state"
