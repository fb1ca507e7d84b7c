# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import copy
import operator
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, ClassVar

from . import config, ops
from ._sentinel import Unset, is_unset
from .base import Sequence
from .capability import Capability
from .ref import IntPosition, Position, Ref

__all__ = (
    "IntInterval",
    "IterableSequence",
    "IteratorPair",
    "Owned",
    "OwningArraySequence",
    "OwningSequence",
    "Replicate",
    "ints",
    "owned",
    "replicate",
)

C = Capability


class IntInterval(Sequence):
    """Half-open integer interval [lower, upper)."""

    __capabilities__ = (
        C.EMPTY | C.ADVANCE | C.READ_VALUE | C.RANGE_BEGIN | C.RANGE_END
    )

    def __init__(self, lower: int, upper: int, *, infinite: bool = False):
        self._begin = operator.index(lower)
        self._end = operator.index(upper)
        self.infinite = infinite

    def _empty(self) -> bool:
        return self._begin >= self._end

    def _advance(self) -> None:
        self._begin += 1

    def _read_value(self) -> int:
        return self._begin

    def _range_begin(self) -> IntPosition:
        return IntPosition(self._begin)

    def _range_end(self) -> IntPosition:
        return IntPosition(self._end)

    def __repr__(self) -> str:
        if not self.is_live:
            return super().__repr__()
        return f"IntInterval({self._begin}, {self._end})"


def ints(*bounds: int) -> IntInterval:
    """Integer interval. Bounds are positional only.

    - `ints()`: from zero to `settings.ints_max`, flagged infinite
    - `ints(upper)`: [0, upper)
    - `ints(lower, upper)`: [lower, upper)
    """
    if not bounds:
        return IntInterval(0, config.settings.ints_max, infinite=True)
    if len(bounds) == 1:
        return IntInterval(0, bounds[0])
    if len(bounds) == 2:
        return IntInterval(*bounds)
    raise TypeError(f"ints takes at most 2 bounds, got {len(bounds)}")


class Replicate(Sequence):
    """`count` copies of one value."""

    __capabilities__ = C.EMPTY | C.ADVANCE | C.READ_VALUE | C.PULL

    def __init__(self, count: int, value: Any):
        self._remaining = operator.index(count)
        self._value = value

    def _empty(self) -> bool:
        return self._remaining <= 0

    def _advance(self) -> None:
        self._remaining -= 1

    def _read_value(self) -> Any:
        return copy.copy(self._value)

    def _pull(self) -> Any:
        self._remaining -= 1
        return copy.copy(self._value)


def replicate(count: int, value: Any) -> Replicate:
    return Replicate(count, value)


class IteratorPair(Sequence):
    """Non-owning sequence between two positions of the same container."""

    __capabilities__ = (
        C.EMPTY | C.ADVANCE | C.READ_REF | C.RANGE_BEGIN | C.RANGE_END
    )

    def __init__(self, begin: Position, end: Position):
        if not isinstance(begin, Position) or not isinstance(end, Position):
            raise TypeError("IteratorPair needs two Position values")
        if begin.container is not end.container:
            raise ValueError("Positions refer to different containers")
        self._begin = begin
        self._end = end

    @classmethod
    def over(cls, container: Any) -> IteratorPair:
        return cls(Position(container, 0), Position(container, len(container)))

    def _empty(self) -> bool:
        return not self._begin < self._end

    def _advance(self) -> None:
        self._begin = self._begin + 1

    def _read_ref(self) -> Ref:
        return self._begin.deref()

    def _range_begin(self) -> Position:
        return self._begin

    def _range_end(self) -> Position:
        return self._end

    def __repr__(self) -> str:
        if not self.is_live:
            return super().__repr__()
        return f"IteratorPair({self._begin!r}, {self._end!r})"


class OwningArraySequence(Sequence):
    """Owns a private copy of a fixed-size array and walks it by offset."""

    __capabilities__ = C.EMPTY | C.ADVANCE | C.READ_REF
    owning = True

    def __init__(self, elements: Iterable[Any]):
        self._storage = list(elements)
        self._offset = 0

    def _empty(self) -> bool:
        return self._offset >= len(self._storage)

    def _advance(self) -> None:
        self._offset += 1

    def _read_ref(self) -> Ref:
        return Ref(self._storage, self._offset)


class OwningSequence(Sequence):
    """Takes ownership of a non-sequence value and iterates it internally.

    The value is adapted with `as_sequence` and every operation the
    adapted form implements natively is forwarded to it. One concrete
    subclass is created per adapted type, so each has a fixed capability
    descriptor.
    """

    owning = True
    _FORWARDED: ClassVar[Capability] = (
        C.EMPTY | C.ADVANCE | C.READ_VALUE | C.READ_REF | C.PULL
    )
    _specializations: ClassVar[dict[type, type]] = {}

    def __init__(self, value: Any, inner: Any):
        self._value = value
        self._inner = inner

    @classmethod
    def wrap(cls, value: Any) -> OwningSequence:
        from .adapt import as_sequence

        inner = as_sequence(value)
        return cls._specialize(type(inner))(value, inner)

    @classmethod
    def _specialize(cls, inner_type: type) -> type:
        if (klass := cls._specializations.get(inner_type)) is None:
            klass = type(
                f"Owning{inner_type.__name__}",
                (cls,),
                {
                    "__capabilities__": ops.ops_for(inner_type).native
                    & cls._FORWARDED,
                    "__module__": cls.__module__,
                },
            )
            cls._specializations[inner_type] = klass
        return klass

    @property
    def value(self) -> Any:
        return self._value

    def _inputs(self) -> tuple[Sequence, ...]:
        return (self._inner,)

    @property
    def infinite(self) -> bool:
        return ops.is_infinite(self._inner)

    def _empty(self) -> bool:
        return ops.empty(self._inner)

    def _advance(self) -> None:
        ops.advance(self._inner)

    def _read_value(self) -> Any:
        return ops.read_value(self._inner)

    def _read_ref(self) -> Ref:
        return ops.read_ref(self._inner)

    def _pull(self) -> Any:
        return ops.pull(self._inner)


class IterableSequence(Sequence):
    """Owns a one-shot iterator, buffering one element of lookahead."""

    __capabilities__ = C.EMPTY | C.ADVANCE | C.READ_VALUE
    owning = True

    def __init__(self, iterable: Iterable[Any]):
        self._iterator = iter(iterable)
        self._head = Unset
        self._done = False

    def _fill(self) -> None:
        if is_unset(self._head) and not self._done:
            try:
                self._head = next(self._iterator)
            except StopIteration:
                self._done = True

    def _empty(self) -> bool:
        self._fill()
        return self._done

    def _advance(self) -> None:
        self._fill()
        self._head = Unset

    def _read_value(self) -> Any:
        self._fill()
        return self._head


@dataclass(slots=True, frozen=True)
class Owned:
    """Marks a value whose ownership is handed to `as_sequence`."""

    value: Any


def owned(value: Any) -> Owned:
    """Hand `value` to the adapter; the resulting sequence owns it."""
    return Owned(value)
