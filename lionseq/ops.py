# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Synthesis layer: the uniform operation set over any sequence type.

For each type the native operations from its traits are combined with
synthesized ones, following fixed priorities:

- read_value: native, else a copy of the element behind read_ref
- pull: native, else read_value + advance, else read_ref copy + advance
- empty, advance, read_ref, range_begin, range_end: native only

The result is cached per type in a `SequenceOps` record.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from . import config
from ._errors import CapabilityError, ExhaustedError
from .capability import (
    OP_NAMES,
    Capability,
    registry_generation,
    traits_for,
)
from .ref import Ref

__all__ = (
    "SequenceOps",
    "advance",
    "empty",
    "front",
    "has_capability",
    "has_native",
    "is_infinite",
    "ops_for",
    "pull",
    "range_begin",
    "range_end",
    "read_ref",
    "read_value",
    "require",
)

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class SequenceOps:
    """The full operation set for one sequence type.

    Attributes:
        native: Operations implemented by the type itself.
        available: Native plus synthesized operations.
        owning: Copied from the type's traits.
    """

    native: Capability
    available: Capability
    empty: Callable[[Any], bool]
    advance: Callable[[Any], None] | None
    read_value: Callable[[Any], Any] | None
    read_ref: Callable[[Any], Any] | None
    pull: Callable[[Any], Any] | None
    range_begin: Callable[[Any], Any] | None
    range_end: Callable[[Any], Any] | None
    owning: bool = False


def _copy_element(value: Any) -> Any:
    return copy.copy(value) if config.settings.copy_on_read else value


def _referent(r: Any, ref: Any) -> Any:
    if not isinstance(ref, Ref) and not hasattr(ref, "value"):
        raise CapabilityError(
            f"{type(r).__name__}.read_ref returned {type(ref).__name__}, "
            f"not a Ref; cannot synthesize reads from it",
            details={
                "type": type(r).__name__,
                "operation": "read_ref",
                "returned": type(ref).__name__,
            },
        )
    return ref.value


def _value_via_ref(read_ref: Callable) -> Callable:
    def read_value(r):
        return _copy_element(_referent(r, read_ref(r)))

    return read_value


def _pull_via_value(read_value: Callable, advance: Callable) -> Callable:
    def pull(r):
        value = read_value(r)
        advance(r)
        return value

    return pull


def _pull_via_ref(read_ref: Callable, advance: Callable) -> Callable:
    def pull(r):
        value = _copy_element(_referent(r, read_ref(r)))
        advance(r)
        return value

    return pull


def _resolve(tp: type) -> SequenceOps:
    traits = traits_for(tp)
    if traits is None:
        raise CapabilityError(
            f"{tp.__name__} is not a sequence type",
            details={"type": tp.__name__},
        )

    native = traits.capabilities
    available = native
    read_value = traits.read_value
    pull = traits.pull

    if read_value is None and traits.read_ref is not None:
        read_value = _value_via_ref(traits.read_ref)
        available |= Capability.READ_VALUE
        logger.debug("%s: read_value synthesized from read_ref", tp.__name__)

    if pull is None and traits.advance is not None:
        if traits.read_value is not None:
            pull = _pull_via_value(traits.read_value, traits.advance)
            logger.debug("%s: pull synthesized from read_value", tp.__name__)
        elif traits.read_ref is not None:
            pull = _pull_via_ref(traits.read_ref, traits.advance)
            logger.debug("%s: pull synthesized from read_ref", tp.__name__)
        if pull is not None:
            available |= Capability.PULL

    return SequenceOps(
        native=native,
        available=available,
        empty=traits.empty,
        advance=traits.advance,
        read_value=read_value,
        read_ref=traits.read_ref,
        pull=pull,
        range_begin=traits.range_begin,
        range_end=traits.range_end,
        owning=traits.owning,
    )


_CACHE: dict[type, SequenceOps] = {}
_cache_generation = -1


def ops_for(tp: type) -> SequenceOps:
    """Resolved operations for a sequence type.

    Raises:
        CapabilityError: If `tp` is not a sequence type.
    """
    global _cache_generation
    if _cache_generation != registry_generation():
        _CACHE.clear()
        _cache_generation = registry_generation()
    if (found := _CACHE.get(tp)) is None:
        found = _CACHE[tp] = _resolve(tp)
    return found


def _of(obj: Any) -> type:
    return obj if isinstance(obj, type) else type(obj)


def has_capability(obj: Any, capability: Capability) -> bool:
    """True if `obj` (a sequence or sequence type) provides `capability`,
    natively or by synthesis."""
    try:
        return capability in ops_for(_of(obj)).available
    except CapabilityError:
        return False


def has_native(obj: Any, capability: Capability) -> bool:
    try:
        return capability in ops_for(_of(obj)).native
    except CapabilityError:
        return False


def require(obj: Any, *capabilities: Capability, context: str | None = None):
    """Check that `obj` provides every capability, before any element is read.

    Raises:
        CapabilityError: Naming the missing operations.
    """
    available = ops_for(_of(obj)).available
    missing = [
        OP_NAMES[cap]
        for capability in capabilities
        for cap in OP_NAMES
        if cap in capability and cap not in available
    ]
    if missing:
        raise CapabilityError.from_missing(obj, *missing, context=context)


def _get(r: Any, name: str) -> tuple[SequenceOps, Callable]:
    ops = ops_for(type(r))
    fn = getattr(ops, name)
    if fn is None:
        raise CapabilityError.from_missing(r, name)
    return ops, fn


def _check_bounds(r: Any, ops: SequenceOps, name: str) -> None:
    if config.settings.check_bounds and ops.empty(r):
        raise ExhaustedError(
            f"{name} on an empty {type(r).__name__}",
            details={"type": type(r).__name__, "operation": name},
        )


def empty(r: Any) -> bool:
    return ops_for(type(r)).empty(r)


def advance(r: Any) -> None:
    ops, fn = _get(r, "advance")
    _check_bounds(r, ops, "advance")
    fn(r)


def read_value(r: Any) -> Any:
    ops, fn = _get(r, "read_value")
    _check_bounds(r, ops, "read_value")
    return fn(r)


def read_ref(r: Any) -> Any:
    ops, fn = _get(r, "read_ref")
    _check_bounds(r, ops, "read_ref")
    return fn(r)


def pull(r: Any) -> Any:
    ops, fn = _get(r, "pull")
    _check_bounds(r, ops, "pull")
    return fn(r)


def front(r: Any) -> Any:
    """`read_ref` where the type has it, else `read_value`."""
    if ops_for(type(r)).read_ref is not None:
        return read_ref(r)
    return read_value(r)


def range_begin(r: Any) -> Any:
    return _get(r, "range_begin")[1](r)


def range_end(r: Any) -> Any:
    return _get(r, "range_end")[1](r)


def is_infinite(r: Any) -> bool:
    """The opt-in 'definitely infinite' flag; False unless declared."""
    return bool(getattr(r, "infinite", False))
