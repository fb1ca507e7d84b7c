# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Terminal operations: drive a sequence to completion.

These work on the sequence they are given, in place. The pipe and
fluent forms capture their input first, so the caller's handle is left
untouched (or moved, for owning sequences).
"""

from __future__ import annotations

import operator
from collections.abc import Callable
from typing import Any

from . import ops
from ._errors import CapabilityError
from ._sentinel import Unset, is_unset
from .capability import Capability
from .ref import Ref

__all__ = (
    "accumulate",
    "collect",
    "discard_collect",
    "foreach",
    "map_collect",
    "take_collect",
)


def foreach(seq: Any, f: Callable[[Any], Any]) -> None:
    """Call `f` on every element.

    With native `read_ref`, `f` receives a `Ref` and may write through it;
    otherwise it receives pulled values.
    """
    if ops.has_native(seq, Capability.READ_REF):
        while not ops.empty(seq):
            f(ops.read_ref(seq))
            ops.advance(seq)
        return

    ops.require(seq, Capability.PULL, context="foreach")
    while not ops.empty(seq):
        f(ops.pull(seq))


def _checked(seq: Any, value: Any, context: str) -> Any:
    if isinstance(value, Ref):
        raise CapabilityError(
            f"{context} cannot store references; elements must be values",
            details={"type": type(seq).__name__, "context": context},
        )
    return value


def collect(seq: Any) -> list[Any]:
    """Drain `seq` with `pull` into a list, in encounter order."""
    ops.require(seq, Capability.PULL, context="collect")
    res = []
    while not ops.empty(seq):
        res.append(_checked(seq, ops.pull(seq), "collect"))
    return res


def map_collect(seq: Any, f: Callable[[Any], Any]) -> list[Any]:
    """Drain `seq` with `pull`, collecting `f(value)`."""
    ops.require(seq, Capability.PULL, context="map_collect")
    res = []
    while not ops.empty(seq):
        res.append(_checked(seq, f(ops.pull(seq)), "map_collect"))
    return res


def discard_collect(seq: Any) -> None:
    """Drain `seq` with `pull`, keeping only the side effects."""
    ops.require(seq, Capability.PULL, context="discard_collect")
    while not ops.empty(seq):
        ops.pull(seq)


def accumulate(seq: Any, start: Any = Unset) -> Any:
    """Sum the elements with `+`.

    The total starts at `start` if given, else at the zero value of the
    first element's type (`type(first)()`). An empty sequence with no
    `start` sums to 0.

    Raises:
        CapabilityError: If the element type has no zero value or no `+`.
    """
    ops.require(seq, Capability.PULL, context="accumulate")
    total = start
    while not ops.empty(seq):
        value = ops.pull(seq)
        if is_unset(total):
            try:
                total = type(value)()
            except TypeError as e:
                raise CapabilityError.from_missing(
                    value, "zero value", context="accumulate", cause=e
                ) from e
        try:
            total = operator.add(total, value)
        except TypeError as e:
            raise CapabilityError.from_missing(
                value, "addition", context="accumulate", cause=e
            ) from e
    return 0 if is_unset(total) else total


def take_collect(seq: Any, n: int) -> list[Any]:
    """Collect at most `n` elements via `read_value` + `advance`.

    Elements after the n-th stay in `seq`.
    """
    n = operator.index(n)
    if n < 0:
        raise ValueError(f"take_collect needs a non-negative count, got {n}")
    ops.require(
        seq, Capability.READ_VALUE | Capability.ADVANCE, context="take_collect"
    )
    res = []
    while n > 0 and not ops.empty(seq):
        res.append(ops.read_value(seq))
        ops.advance(seq)
        n -= 1
    return res
