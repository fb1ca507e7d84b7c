# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from collections import abc
from typing import Any

from ._errors import CapabilityError
from ._sentinel import Unset, is_unset
from .base import Sequence, capture
from .capability import is_sequence
from .ref import IntPosition, Position
from .sources import (
    IntInterval,
    IterableSequence,
    IteratorPair,
    Owned,
    OwningArraySequence,
    OwningSequence,
)

__all__ = ("as_sequence", "capture_sequence")


def as_sequence(source: Any, end: Any = Unset) -> Any:
    """Convert `source` into a sequence.

    - a sequence is returned unchanged
    - `owned(x)`: a sequence is moved, a tuple is copied into an owning
      array, anything else is kept by an owning wrapper that adapts it
      internally
    - a tuple (no stable storage of its own) becomes an owning array
    - an indexable container becomes a non-owning IteratorPair
    - two positions become a non-owning IteratorPair (or an IntInterval
      for integer positions)
    - any other iterable becomes an owning IterableSequence

    Raises:
        CapabilityError: If `source` cannot be adapted.
    """
    if not is_unset(end):
        return _from_positions(source, end)

    if is_sequence(source):
        return source

    if isinstance(source, Owned):
        value = source.value
        if is_sequence(value):
            return value.move() if isinstance(value, Sequence) else value
        if isinstance(value, tuple):
            return OwningArraySequence(value)
        return OwningSequence.wrap(value)

    if isinstance(source, tuple):
        return OwningArraySequence(source)

    if isinstance(source, abc.Sequence):
        return IteratorPair.over(source)

    if isinstance(source, abc.Iterable):
        return IterableSequence(source)

    raise CapabilityError(
        f"Cannot adapt {type(source).__name__} to a sequence",
        details={"type": type(source).__name__},
    )


def _from_positions(begin: Any, end: Any) -> Any:
    if isinstance(begin, Position) and isinstance(end, Position):
        return IteratorPair(begin, end)
    if isinstance(begin, IntPosition) and isinstance(end, IntPosition):
        return IntInterval(begin.value, end.value)
    raise CapabilityError(
        f"Cannot build a sequence from {type(begin).__name__} and "
        f"{type(end).__name__}",
        details={"begin": type(begin).__name__, "end": type(end).__name__},
    )


def capture_sequence(source: Any) -> Any:
    """Adapt `source` and take the result by value.

    A freshly adapted sequence is already private; an existing sequence is
    captured (copied, or moved if owning).
    """
    seq = as_sequence(source)
    return capture(seq) if seq is source else seq
