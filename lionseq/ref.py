# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import operator
from collections.abc import Callable
from typing import Any

__all__ = ("IntPosition", "Position", "Ref")


def _inplace(op: Callable[[Any, Any], Any]) -> Callable[[Ref, Any], Ref]:
    def method(self: Ref, other: Any) -> Ref:
        self.value = op(self.value, other)
        return self

    method.__name__ = f"__{op.__name__}__"
    return method


class Ref:
    """Stable alias to one slot of a container.

    Reading or writing `value` goes through to the container. In-place
    operators write through and return the same handle, so a callback
    doing `x += 1` on a `Ref` updates the underlying storage.

    Two refs are equal iff they alias the same slot.
    """

    __slots__ = ("_container", "_key")

    def __init__(self, container: Any, key: Any):
        self._container = container
        self._key = key

    @property
    def container(self) -> Any:
        return self._container

    @property
    def key(self) -> Any:
        return self._key

    @property
    def value(self) -> Any:
        return self._container[self._key]

    @value.setter
    def value(self, new: Any) -> None:
        self._container[self._key] = new

    def get(self) -> Any:
        return self.value

    def set(self, new: Any) -> None:
        self.value = new

    def same_location(self, other: Any) -> bool:
        return (
            isinstance(other, Ref)
            and self._container is other._container
            and self._key == other._key
        )

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Ref):
            return NotImplemented
        return self.same_location(other)

    def __hash__(self) -> int:
        return hash((id(self._container), self._key))

    def __repr__(self) -> str:
        owner = type(self._container).__name__
        try:
            value = self.value
        except LookupError:
            return f"Ref({owner}[{self._key!r}])"
        return f"Ref({owner}[{self._key!r}] -> {value!r})"

    __iadd__ = _inplace(operator.iadd)
    __isub__ = _inplace(operator.isub)
    __imul__ = _inplace(operator.imul)
    __itruediv__ = _inplace(operator.itruediv)
    __ifloordiv__ = _inplace(operator.ifloordiv)
    __imod__ = _inplace(operator.imod)
    __ipow__ = _inplace(operator.ipow)
    __iand__ = _inplace(operator.iand)
    __ior__ = _inplace(operator.ior)
    __ixor__ = _inplace(operator.ixor)


class Position:
    """Immutable iterator-like value: an index into indexable storage."""

    __slots__ = ("_container", "_index")

    def __init__(self, container: Any, index: int = 0):
        self._container = container
        self._index = index

    @property
    def container(self) -> Any:
        return self._container

    @property
    def index(self) -> int:
        return self._index

    @property
    def value(self) -> Any:
        return self._container[self._index]

    def deref(self) -> Ref:
        return Ref(self._container, self._index)

    def _check_same(self, other: Position) -> None:
        if self._container is not other._container:
            raise ValueError("Positions refer to different containers")

    def __add__(self, n: int) -> Position:
        return Position(self._container, self._index + n)

    def __sub__(self, other: Position | int) -> Position | int:
        if isinstance(other, Position):
            self._check_same(other)
            return self._index - other._index
        return Position(self._container, self._index - other)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Position):
            return NotImplemented
        return (
            self._container is other._container
            and self._index == other._index
        )

    def __lt__(self, other: Position) -> bool:
        self._check_same(other)
        return self._index < other._index

    def __hash__(self) -> int:
        return hash((id(self._container), self._index))

    def __repr__(self) -> str:
        return f"Position({type(self._container).__name__}, {self._index})"


class IntPosition:
    """A position that is its own value; bounds of an integer interval."""

    __slots__ = ("_value",)

    def __init__(self, value: int):
        self._value = value

    @property
    def value(self) -> int:
        return self._value

    def __add__(self, n: int) -> IntPosition:
        return IntPosition(self._value + n)

    def __sub__(self, other: IntPosition | int) -> IntPosition | int:
        if isinstance(other, IntPosition):
            return self._value - other._value
        return IntPosition(self._value - other)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, IntPosition):
            return NotImplemented
        return self._value == other._value

    def __lt__(self, other: IntPosition) -> bool:
        return self._value < other._value

    def __hash__(self) -> int:
        return hash(self._value)

    def __repr__(self) -> str:
        return f"IntPosition({self._value})"
