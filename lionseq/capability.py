# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Capability descriptors and the traits registry.

A type is a sequence iff a `SequenceTraits` record is registered for it.
The record names the primitive operations the type implements natively;
everything else is synthesized by `lionseq.ops`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Flag
from operator import methodcaller
from typing import Any

from ._errors import CapabilityError

__all__ = (
    "Capability",
    "SequenceTraits",
    "is_sequence",
    "is_sequence_type",
    "register_traits",
    "registry_generation",
    "traits_for",
    "unregister_traits",
)

logger = logging.getLogger(__name__)


class Capability(Flag):
    """Primitive operations a sequence type may implement natively."""

    NONE = 0
    EMPTY = 1
    ADVANCE = 2
    READ_VALUE = 4
    READ_REF = 8
    PULL = 16
    RANGE_BEGIN = 32
    RANGE_END = 64

    @property
    def op_names(self) -> tuple[str, ...]:
        """Operation names for each set flag, in declaration order."""
        return tuple(
            OP_NAMES[cap] for cap in OP_NAMES if cap in self
        )


OP_NAMES: dict[Capability, str] = {
    Capability.EMPTY: "empty",
    Capability.ADVANCE: "advance",
    Capability.READ_VALUE: "read_value",
    Capability.READ_REF: "read_ref",
    Capability.PULL: "pull",
    Capability.RANGE_BEGIN: "range_begin",
    Capability.RANGE_END: "range_end",
}


@dataclass(slots=True, frozen=True)
class SequenceTraits:
    """Stateless record of the native operations of one sequence type.

    Each operation slot holds a callable taking the sequence as its only
    argument, or None when the type does not implement it natively.

    `read_ref` must return a `Ref` (or any object with a readable and
    writable `value`) aliasing the current element; synthesized reads go
    through that `value`. Other operations return the element directly.

    Attributes:
        capabilities: Flags naming the populated operation slots.
        owning: Whether values of the type own their source storage.
    """

    capabilities: Capability
    empty: Callable[[Any], bool] | None = None
    advance: Callable[[Any], None] | None = None
    read_value: Callable[[Any], Any] | None = None
    read_ref: Callable[[Any], Any] | None = None
    pull: Callable[[Any], Any] | None = None
    range_begin: Callable[[Any], Any] | None = None
    range_end: Callable[[Any], Any] | None = None
    owning: bool = False

    def __post_init__(self) -> None:
        if Capability.EMPTY not in self.capabilities:
            raise CapabilityError(
                "A sequence must declare 'empty'; it cannot be synthesized",
                details={"declared": list(self.capabilities.op_names)},
            )
        missing = [
            name
            for cap, name in OP_NAMES.items()
            if cap in self.capabilities and not callable(getattr(self, name))
        ]
        if missing:
            raise CapabilityError(
                f"Declared operations without an implementation: "
                f"{', '.join(missing)}",
                details={"missing": missing},
            )

    def has(self, capability: Capability) -> bool:
        return capability in self.capabilities

    @classmethod
    def from_namespace(
        cls,
        namespace: Any,
        capabilities: Capability | None = None,
        *,
        owning: bool | None = None,
    ) -> SequenceTraits:
        """Build traits from an object or class with static operation functions.

        Args:
            namespace: Object exposing `empty`, `advance`, ... as callables
                taking the sequence. A `capabilities` attribute is used when
                the argument is omitted.
            capabilities: Operations to take from the namespace.
            owning: Overrides a `owning` attribute on the namespace.
        """
        if capabilities is None:
            capabilities = getattr(namespace, "capabilities", None)
        if not isinstance(capabilities, Capability):
            raise CapabilityError(
                f"{namespace!r} does not declare its capabilities",
                details={"namespace": repr(namespace)},
            )
        if owning is None:
            owning = bool(getattr(namespace, "owning", False))
        ops = {
            name: getattr(namespace, name, None)
            for cap, name in OP_NAMES.items()
            if cap in capabilities
        }
        return cls(capabilities=capabilities, owning=owning, **ops)

    @classmethod
    def from_hooks(
        cls, capabilities: Capability, *, owning: bool = False
    ) -> SequenceTraits:
        """Traits that call the protected `_<op>` method on the sequence."""
        ops = {
            name: methodcaller(f"_{name}")
            for cap, name in OP_NAMES.items()
            if cap in capabilities
        }
        return cls(capabilities=capabilities, owning=owning, **ops)


_REGISTRY: dict[type, SequenceTraits] = {}
_generation = 0


def registry_generation() -> int:
    """Counter bumped on every registry change, used to invalidate caches."""
    return _generation


def register_traits(
    tp: type,
    traits: SequenceTraits | Any,
    capabilities: Capability | None = None,
) -> SequenceTraits:
    """Declare `tp` a sequence type.

    Args:
        tp: The type gaining sequence capabilities. Subclasses inherit the
            registration unless they register their own.
        traits: A `SequenceTraits` record, or a namespace accepted by
            `SequenceTraits.from_namespace`.
            A `read_ref` operation must return a `Ref` to the current
            element, not the element itself.
        capabilities: Only used with a namespace.

    Returns:
        The registered traits record.

    Raises:
        CapabilityError: If the declaration is inconsistent.
    """
    global _generation
    if not isinstance(traits, SequenceTraits):
        traits = SequenceTraits.from_namespace(traits, capabilities)
    _REGISTRY[tp] = traits
    _generation += 1
    logger.debug(
        "registered %s with %s", tp.__qualname__, traits.capabilities
    )
    return traits


def unregister_traits(tp: type) -> None:
    global _generation
    if _REGISTRY.pop(tp, None) is not None:
        _generation += 1


def traits_for(tp: type) -> SequenceTraits | None:
    """Find the traits for `tp`, walking its MRO."""
    for klass in getattr(tp, "__mro__", (tp,)):
        if (found := _REGISTRY.get(klass)) is not None:
            return found
    return None


def is_sequence_type(tp: type) -> bool:
    """True if `tp` has a capability descriptor."""
    return traits_for(tp) is not None


def is_sequence(obj: Any) -> bool:
    """True if the type of `obj` has a capability descriptor."""
    return is_sequence_type(type(obj))


# File: lionseq/capability.py
