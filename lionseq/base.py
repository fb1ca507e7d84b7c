# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Iterator
from typing import Any, ClassVar

from typing_extensions import Self

from . import ops
from ._errors import CapabilityError, OwnershipError
from ._sentinel import Moved, Unset, is_moved
from .capability import (
    Capability,
    SequenceTraits,
    is_sequence,
    register_traits,
)

__all__ = ("Sequence", "capture")

logger = logging.getLogger(__name__)


class Sequence:
    """Base class for sequence types that implement their own operations.

    A subclass declares `__capabilities__` and implements the matching
    protected hooks (`_empty`, `_advance`, `_read_value`, `_read_ref`,
    `_pull`, `_range_begin`, `_range_end`). The declaration is checked and
    registered when the class is created; a declared hook that is missing
    raises `CapabilityError` at that point. Classes leaving
    `__capabilities__` as None are abstract and not registered.

    The public methods of the same names go through `lionseq.ops`, so
    operations the class does not implement are synthesized.

    Ownership: a class with `owning = True`, or a derived sequence over an
    owning input, cannot be copied. `move()` transfers its state to a new
    handle and leaves this one unusable.
    """

    __capabilities__: ClassVar[Capability | None] = None
    owning: ClassVar[bool] = False
    infinite: bool = False

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        capabilities = cls.__capabilities__
        if capabilities is None:
            return
        missing = [
            name
            for name in capabilities.op_names
            if not callable(getattr(cls, f"_{name}", None))
        ]
        if missing:
            raise CapabilityError.from_missing(
                cls,
                *missing,
                message=f"{cls.__name__} declares {', '.join(missing)} "
                f"without implementing the hooks",
            )
        register_traits(
            cls, SequenceTraits.from_hooks(capabilities, owning=cls.owning)
        )

    def _inputs(self) -> tuple[Sequence, ...]:
        """Sub-sequences this sequence holds by value."""
        return ()

    @property
    def is_owning(self) -> bool:
        return type(self).owning or any(map(_is_owning, self._inputs()))

    @property
    def is_live(self) -> bool:
        """False once the state has been moved to another handle."""
        return not is_moved(self.__dict__.get("_owner", Unset))

    def __getattr__(self, name: str) -> Any:
        if not name.startswith("__") and is_moved(
            self.__dict__.get("_owner", Unset)
        ):
            raise OwnershipError(
                f"{type(self).__name__} was moved; "
                "this handle is no longer valid",
                details={"type": type(self).__name__, "attribute": name},
            )
        raise AttributeError(
            f"'{type(self).__name__}' object has no attribute '{name}'"
        )

    def move(self) -> Self:
        """Transfer this sequence's state to a new handle.

        Raises:
            OwnershipError: If this handle was already moved from.
        """
        if not self.is_live:
            raise OwnershipError(
                f"{type(self).__name__} was already moved",
                details={"type": type(self).__name__},
            )
        new = object.__new__(type(self))
        new.__dict__.update(self.__dict__)
        self.__dict__.clear()
        self.__dict__["_owner"] = Moved
        logger.debug("moved %s", type(self).__name__)
        return new

    def __copy__(self) -> Self:
        if not self.is_live:
            raise OwnershipError(
                f"Cannot copy a moved {type(self).__name__}",
                details={"type": type(self).__name__},
            )
        if self.is_owning:
            raise OwnershipError(
                f"{type(self).__name__} owns its storage and cannot be "
                f"copied; use move()",
                details={"type": type(self).__name__},
            )
        new = object.__new__(type(self))
        new.__dict__.update(
            {k: _copy_member(v) for k, v in self.__dict__.items()}
        )
        return new

    def __deepcopy__(self, memo: dict) -> Self:
        # borrowed storage stays aliased
        return self.__copy__()

    def __iter__(self) -> Iterator[Any]:
        """Iterate a captured copy (or the moved state, if owning) via pull."""
        seq = capture(self)
        ops.require(seq, Capability.PULL, context="iteration")
        return _drain(seq)

    def __repr__(self) -> str:
        if not self.is_live:
            return f"<moved {type(self).__name__}>"
        return f"<{type(self).__name__} owning={self.is_owning}>"

    # uniform operations

    def empty(self) -> bool:
        return ops.empty(self)

    def advance(self) -> None:
        ops.advance(self)

    def read_value(self) -> Any:
        return ops.read_value(self)

    def read_ref(self) -> Any:
        return ops.read_ref(self)

    def pull(self) -> Any:
        return ops.pull(self)

    def front(self) -> Any:
        return ops.front(self)

    def range_begin(self) -> Any:
        return ops.range_begin(self)

    def range_end(self) -> Any:
        return ops.range_end(self)

    # combinators; each captures self

    def map(self, f: Callable[[Any], Any]) -> Sequence:
        from .derived import MappingSequence

        return MappingSequence(capture(self), f)

    mapr = map

    def filter(self, predicate: Callable[[Any], bool]) -> Sequence:
        from .derived import FilterSequence

        return FilterSequence(capture(self), predicate)

    def unzip_map(self, f: Callable[..., Any]) -> Sequence:
        from .derived import UnzipMappingSequence

        return UnzipMappingSequence(capture(self), f)

    def zip(self, *others: Any, strict: bool | None = None) -> Sequence:
        from .zipping import ZipPolicy, make_zip

        return make_zip(ZipPolicy.MIXTURE, self, *others, strict=strict)

    def zip_val(self, *others: Any, strict: bool | None = None) -> Sequence:
        from .zipping import ZipPolicy, make_zip

        return make_zip(ZipPolicy.VALUES_ONLY, self, *others, strict=strict)

    def zip_ref(self, *others: Any, strict: bool | None = None) -> Sequence:
        from .zipping import ZipPolicy, make_zip

        return make_zip(
            ZipPolicy.ALWAYS_REFERENCES, self, *others, strict=strict
        )

    # terminal operations; each captures self

    def foreach(self, f: Callable[[Any], Any]) -> None:
        from . import terminal

        terminal.foreach(capture(self), f)

    def collect(self) -> list[Any]:
        from . import terminal

        return terminal.collect(capture(self))

    def map_collect(self, f: Callable[[Any], Any]) -> list[Any]:
        from . import terminal

        return terminal.map_collect(capture(self), f)

    def discard_collect(self) -> None:
        from . import terminal

        terminal.discard_collect(capture(self))

    def accumulate(self, start: Any = Unset) -> Any:
        from . import terminal

        return terminal.accumulate(capture(self), start)

    def take_collect(self, n: int) -> list[Any]:
        from . import terminal

        return terminal.take_collect(capture(self), n)


def _drain(seq: Any) -> Iterator[Any]:
    while not ops.empty(seq):
        yield ops.pull(seq)


def _is_owning(seq: Any) -> bool:
    if isinstance(seq, Sequence):
        return seq.is_owning
    return ops.ops_for(type(seq)).owning


def _copy_member(value: Any) -> Any:
    if is_sequence(value):
        return capture(value)
    if isinstance(value, tuple) and any(map(is_sequence, value)):
        return tuple(_copy_member(v) for v in value)
    return value


def capture(seq: Any) -> Any:
    """Take a sequence by value: copy it if non-owning, move it if owning.

    Foreign registered types are copied unless their traits declare them
    owning, in which case the handle itself is taken.
    """
    if isinstance(seq, Sequence):
        return seq.move() if seq.is_owning else copy.copy(seq)
    if ops.ops_for(type(seq)).owning:
        return seq
    return copy.copy(seq)
