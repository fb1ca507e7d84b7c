# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Any, Final, Literal, TypeVar, Union

__all__ = (
    "MaybeUnset",
    "Moved",
    "MovedType",
    "SingletonType",
    "Unset",
    "UnsetType",
    "is_moved",
    "is_unset",
)

T = TypeVar("T")


class _SingletonMeta(type):
    """Metaclass that guarantees exactly one instance per subclass."""

    _cache: dict[type, SingletonType] = {}

    def __call__(cls, *a, **kw):
        if cls not in cls._cache:
            cls._cache[cls] = super().__call__(*a, **kw)
        return cls._cache[cls]


class SingletonType(metaclass=_SingletonMeta):
    """Base class for singleton sentinel types.

    Sentinels keep their identity across copy and deepcopy and are
    always falsy.
    """

    __slots__: tuple[str, ...] = ()

    def __deepcopy__(self, memo):
        return self

    def __copy__(self):
        return self

    def __bool__(self) -> Literal[False]:
        return False

    # concrete classes *must* override this
    def __repr__(self) -> str: ...


class UnsetType(SingletonType):
    """Sentinel for an optional argument that was not provided.

    Example:
        >>> def accumulate(seq, start=Unset):
        ...     if start is not Unset:
        ...         total = start
    """

    __slots__ = ()

    def __repr__(self) -> Literal["Unset"]:
        return "Unset"

    def __reduce__(self):
        return "Unset"


class MovedType(SingletonType):
    """Sentinel left in an owning sequence after its storage was moved out."""

    __slots__ = ()

    def __repr__(self) -> Literal["Moved"]:
        return "Moved"

    def __reduce__(self):
        return "Moved"


Unset: Final = UnsetType()
"""An optional argument that was not provided."""
Moved: Final = MovedType()
"""Storage that now belongs to another owner."""

MaybeUnset = Union[T, UnsetType]


def is_unset(value: Any) -> bool:
    """Check if value is the Unset sentinel."""
    return isinstance(value, UnsetType)


def is_moved(value: Any) -> bool:
    """Check if value is the Moved sentinel."""
    return isinstance(value, MovedType)
