# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from . import ops
from ._errors import CapabilityError
from .base import Sequence
from .capability import Capability

__all__ = ("FilterSequence", "MappingSequence", "UnzipMappingSequence")

C = Capability


class MappingSequence(Sequence):
    """Applies `f` to each element when it is read.

    `f` runs once per `read_value`, never at construction or on advance.
    """

    __capabilities__ = C.EMPTY | C.ADVANCE | C.READ_VALUE

    def __init__(self, inner: Any, f: Callable[[Any], Any]):
        ops.require(inner, C.READ_VALUE, context="map")
        if not callable(f):
            raise TypeError(f"map needs a callable, got {type(f).__name__}")
        self._inner = inner
        self._f = f

    def _inputs(self) -> tuple[Any, ...]:
        return (self._inner,)

    @property
    def infinite(self) -> bool:
        return ops.is_infinite(self._inner)

    def _empty(self) -> bool:
        return ops.empty(self._inner)

    def _advance(self) -> None:
        ops.advance(self._inner)

    def _read_value(self) -> Any:
        return self._f(ops.read_value(self._inner))


class FilterSequence(Sequence):
    """Keeps the elements satisfying `predicate`.

    Invariant: when not empty, the current element satisfies the
    predicate. Non-matching elements are skipped on construction and
    after every advance, so construction costs O(skipped elements).
    """

    __capabilities__ = C.EMPTY | C.ADVANCE | C.READ_VALUE

    def __init__(self, inner: Any, predicate: Callable[[Any], bool]):
        ops.require(inner, C.READ_VALUE, context="filter")
        if not callable(predicate):
            raise TypeError(
                f"filter needs a callable, got {type(predicate).__name__}"
            )
        self._inner = inner
        self._predicate = predicate
        self._skip()

    def _skip(self) -> None:
        inner = self._inner
        while not ops.empty(inner) and not self._predicate(
            ops.read_value(inner)
        ):
            ops.advance(inner)

    def _inputs(self) -> tuple[Any, ...]:
        return (self._inner,)

    def _empty(self) -> bool:
        return ops.empty(self._inner)

    def _advance(self) -> None:
        ops.advance(self._inner)
        self._skip()

    def _read_value(self) -> Any:
        return ops.read_value(self._inner)


class UnzipMappingSequence(Sequence):
    """Maps a zip by unpacking: `f(front(s0), front(s1), ...)`."""

    __capabilities__ = C.EMPTY | C.ADVANCE | C.READ_VALUE

    def __init__(self, zipped: Any, f: Callable[..., Any]):
        from .zipping import ZipSequence

        if not isinstance(zipped, ZipSequence):
            raise CapabilityError(
                f"unzip_map needs a zipped sequence, got "
                f"{type(zipped).__name__}",
                details={"type": type(zipped).__name__, "context": "unzip_map"},
            )
        if not callable(f):
            raise TypeError(
                f"unzip_map needs a callable, got {type(f).__name__}"
            )
        self._zipped = zipped
        self._f = f

    def _inputs(self) -> tuple[Any, ...]:
        return (self._zipped,)

    @property
    def infinite(self) -> bool:
        return ops.is_infinite(self._zipped)

    def _empty(self) -> bool:
        return ops.empty(self._zipped)

    def _advance(self) -> None:
        ops.advance(self._zipped)

    def _read_value(self) -> Any:
        return self._f(*(ops.front(s) for s in self._zipped.sequences))
