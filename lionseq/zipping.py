# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import builtins
import logging
from collections.abc import Callable
from enum import Enum
from typing import Any

from . import config, ops
from ._errors import CapabilityError, LengthMismatchError
from .base import Sequence
from .capability import Capability

__all__ = (
    "ZipPolicy",
    "ZipPosition",
    "ZipSequence",
    "ZipTuple",
    "make_zip",
)

logger = logging.getLogger(__name__)

C = Capability


class ZipPolicy(str, Enum):
    """How each slot of a zipped tuple is read."""

    VALUES_ONLY = "values_only"
    ALWAYS_REFERENCES = "always_references"
    MIXTURE = "mixture"


class ZipTuple(tuple):
    """One step of a zip.

    Slots are fixed, but storing a slot back into itself is allowed, so
    `t[0] += 1` on a reference slot writes through the `Ref` and then
    completes.
    """

    __slots__ = ()

    def __setitem__(self, index: int, value: Any) -> None:
        if self[index] is not value:
            raise TypeError(
                "zip slots are fixed; write through a reference slot instead"
            )


def _reader_for(policy: ZipPolicy, seq: Any) -> Callable[[Any], Any]:
    if policy is ZipPolicy.ALWAYS_REFERENCES:
        return ops.read_ref
    if policy is ZipPolicy.MIXTURE and ops.has_native(seq, C.READ_REF):
        return ops.read_ref
    return ops.read_value


class ZipSequence(Sequence):
    """Walks several sequences in lockstep, yielding one tuple per step.

    Empty as soon as any sub-sequence is empty. In strict mode an empty
    zip additionally requires every sub-sequence to be empty or definitely
    infinite, otherwise `LengthMismatchError` is raised.

    `range_begin` and `range_end` are always declared, because the
    capability descriptor is fixed per type. They only succeed when every
    sub-sequence has native bounds; otherwise they raise
    `CapabilityError`. A true `has_capability(zip, RANGE_END)` therefore
    does not guarantee bounds for a particular zip.

    Each element is a `ZipTuple`. Reference slots support `t[0] += 1`;
    any other slot assignment raises `TypeError`.
    """

    __capabilities__ = (
        C.EMPTY | C.ADVANCE | C.READ_VALUE | C.RANGE_BEGIN | C.RANGE_END
    )

    def __init__(
        self,
        policy: ZipPolicy | str,
        *sequences: Any,
        strict: bool | None = None,
    ):
        policy = ZipPolicy(policy)
        if not sequences:
            raise ValueError("zip needs at least one sequence")
        needed = (
            C.READ_REF if policy is ZipPolicy.ALWAYS_REFERENCES else C.READ_VALUE
        )
        for seq in sequences:
            ops.require(seq, needed, context=f"zip ({policy.value})")
        self._policy = policy
        self._sequences = tuple(sequences)
        self._readers = tuple(_reader_for(policy, s) for s in sequences)
        self._strict = config.settings.strict_zip if strict is None else strict

    @property
    def policy(self) -> ZipPolicy:
        return self._policy

    @property
    def sequences(self) -> tuple[Any, ...]:
        return self._sequences

    @property
    def width(self) -> int:
        return len(self._sequences)

    @property
    def strict(self) -> bool:
        return self._strict

    @property
    def infinite(self) -> bool:
        return all(ops.is_infinite(s) for s in self._sequences)

    def _inputs(self) -> tuple[Any, ...]:
        return self._sequences

    def _empty(self) -> bool:
        flags = [ops.empty(s) for s in self._sequences]
        if not any(flags):
            return False
        if self._strict and not all(
            flag or ops.is_infinite(s)
            for flag, s in builtins.zip(flags, self._sequences)
        ):
            logger.debug("strict zip length mismatch: %s", flags)
            raise LengthMismatchError(
                "Strict zip: some sequences ended before others",
                details={
                    "empty": flags,
                    "types": [type(s).__name__ for s in self._sequences],
                },
            )
        return True

    def _advance(self) -> None:
        for seq in self._sequences:
            ops.advance(seq)

    def _read_value(self) -> ZipTuple:
        return ZipTuple(
            read(seq)
            for read, seq in builtins.zip(self._readers, self._sequences)
        )

    def _bounds(self) -> list[tuple[Any, Any]]:
        bounded = [
            s
            for s in self._sequences
            if ops.has_native(s, C.RANGE_BEGIN | C.RANGE_END)
        ]
        if len(bounded) != len(self._sequences):
            raise CapabilityError.from_missing(
                self,
                "range_begin",
                "range_end",
                context="zip bounds need bounds on every sub-sequence",
            )
        return [(ops.range_begin(s), ops.range_end(s)) for s in bounded]

    def _range_begin(self) -> ZipPosition:
        begins = tuple(b for b, _ in self._bounds())
        return ZipPosition(begins, 0, self._policy)

    def _range_end(self) -> ZipPosition:
        bounds = self._bounds()
        length = max(0, min(e - b for b, e in bounds))
        return ZipPosition(tuple(b for b, _ in bounds), length, self._policy)


class ZipPosition:
    """Offset into a zip, bounded by its shortest sub-sequence."""

    __slots__ = ("_begins", "_offset", "_policy")

    def __init__(self, begins: tuple[Any, ...], offset: int, policy: ZipPolicy):
        self._begins = begins
        self._offset = offset
        self._policy = policy

    @property
    def offset(self) -> int:
        return self._offset

    def _slot(self, begin: Any) -> Any:
        pos = begin + self._offset
        if self._policy is ZipPolicy.VALUES_ONLY or not hasattr(pos, "deref"):
            return pos.value
        return pos.deref()

    @property
    def value(self) -> ZipTuple:
        return ZipTuple(self._slot(b) for b in self._begins)

    def deref(self) -> ZipTuple:
        """Refs to every slot; needs storage positions throughout."""
        return ZipTuple((b + self._offset).deref() for b in self._begins)

    def __add__(self, n: int) -> ZipPosition:
        return ZipPosition(self._begins, self._offset + n, self._policy)

    def __sub__(self, other: ZipPosition | int) -> ZipPosition | int:
        if isinstance(other, ZipPosition):
            return self._offset - other._offset
        return ZipPosition(self._begins, self._offset - other, self._policy)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ZipPosition):
            return NotImplemented
        return self._begins == other._begins and self._offset == other._offset

    def __lt__(self, other: ZipPosition) -> bool:
        return self._offset < other._offset

    def __hash__(self) -> int:
        return hash((self._begins, self._offset))

    def __repr__(self) -> str:
        return f"ZipPosition({self._offset})"


def make_zip(
    policy: ZipPolicy | str, *sources: Any, strict: bool | None = None
) -> ZipSequence:
    """Adapt and capture each source, then zip them under `policy`."""
    from .adapt import capture_sequence

    return ZipSequence(
        policy, *(capture_sequence(s) for s in sources), strict=strict
    )
