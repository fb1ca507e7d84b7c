# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Pipe syntax over sequences.

A stage is written in two steps, `source | tag | argument`:

1. `source | tag` adapts `source` with `as_sequence`, captures it and
   returns a `Staged` holder carrying the tag.
2. `staged | argument` lets the tag build a derived sequence or run a
   terminal operation.

Calling a tag binds the argument up front, so `source | map(f)` is the
same stage as `source | map | f`. Immediate tags (`collect`,
`discard_collect`, `accumulate`) need no argument and run directly on
`source | tag`.

Example:
    >>> ints(0, 10) | filter(lambda x: x % 2 == 0) | collect
    [0, 2, 4, 6, 8]
    >>> [1, 2, 3] | map | (lambda x: x * x) | collect
    [1, 4, 9]
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar

from . import terminal
from ._errors import OwnershipError
from ._sentinel import Moved, Unset, _SingletonMeta, is_moved
from .adapt import capture_sequence
from .derived import FilterSequence, MappingSequence, UnzipMappingSequence
from .zipping import ZipPolicy, ZipSequence, make_zip

__all__ = (
    "Bound",
    "ImmediateTag",
    "Staged",
    "Tag",
    "ZipTag",
    "accumulate",
    "collect",
    "discard_collect",
    "filter",
    "foreach",
    "map",
    "map_collect",
    "map_range",
    "mapr",
    "take_collect",
    "unzip_map",
    "zip",
    "zip_ref",
    "zip_val",
)

logger = logging.getLogger(__name__)


class Tag(metaclass=_SingletonMeta):
    """Selects what a pipe stage does. Stateless; one instance per class."""

    __slots__ = ()

    name: ClassVar[str] = ""

    def apply(self, seq: Any, arg: Any) -> Any:
        """Build the stage from a captured sequence and its argument."""
        raise NotImplementedError

    def __ror__(self, source: Any) -> Staged:
        return Staged(capture_sequence(source), self)

    def __call__(self, arg: Any) -> Bound:
        return Bound(self, arg)

    def __repr__(self) -> str:
        return self.name


class ImmediateTag(Tag):
    """A terminal tag that runs as soon as it meets a source."""

    __slots__ = ()

    def run(self, seq: Any) -> Any:
        raise NotImplementedError

    def __ror__(self, source: Any) -> Any:
        return self.run(capture_sequence(source))

    def __call__(self, source: Any) -> Any:
        return self.run(capture_sequence(source))


class Staged:
    """A captured sequence waiting for its stage argument.

    Usable once; the sequence is handed to the stage on first use.
    """

    __slots__ = ("_seq", "_tag")

    def __init__(self, seq: Any, tag: Tag):
        self._seq = seq
        self._tag = tag

    @property
    def tag(self) -> Tag:
        return self._tag

    def __or__(self, arg: Any) -> Any:
        if isinstance(arg, (Tag, Bound, Staged)):
            raise TypeError(
                f"{self._tag!r} stage expects an argument, got {arg!r}"
            )
        if is_moved(self._seq):
            raise OwnershipError(
                f"{self._tag!r} stage was already applied",
                details={"tag": self._tag.name},
            )
        seq, self._seq = self._seq, Moved
        logger.debug("applying %s to %s", self._tag.name, type(seq).__name__)
        return self._tag.apply(seq, arg)

    def __repr__(self) -> str:
        if is_moved(self._seq):
            return f"Staged({self._tag!r}, applied)"
        return f"Staged({self._tag!r}, {type(self._seq).__name__})"


class Bound:
    """A tag with its argument already supplied: `source | tag(arg)`."""

    __slots__ = ("arg", "tag")

    def __init__(self, tag: Tag, arg: Any):
        self.tag = tag
        self.arg = arg

    def __ror__(self, source: Any) -> Any:
        return self.tag.apply(capture_sequence(source), self.arg)

    def __repr__(self) -> str:
        return f"{self.tag!r}({self.arg!r})"


# derived-sequence tags


class MapTag(Tag):
    __slots__ = ()
    name = "map"

    def apply(self, seq: Any, arg: Any) -> MappingSequence:
        return MappingSequence(seq, arg)


class FilterTag(Tag):
    __slots__ = ()
    name = "filter"

    def apply(self, seq: Any, arg: Any) -> FilterSequence:
        return FilterSequence(seq, arg)


class UnzipMapTag(Tag):
    __slots__ = ()
    name = "unzip_map"

    def apply(self, seq: Any, arg: Any) -> UnzipMappingSequence:
        return UnzipMappingSequence(seq, arg)


class ZipTag(Tag):
    """Zip under a fixed policy.

    Staged as `a | zip | b`, or called directly with any number of
    sources: `zip(a, b, c, strict=True)`.
    """

    __slots__ = ()
    name = "zip"
    policy: ClassVar[ZipPolicy] = ZipPolicy.MIXTURE

    def apply(self, seq: Any, arg: Any) -> ZipSequence:
        return ZipSequence(self.policy, seq, capture_sequence(arg))

    def __call__(self, *sources: Any, strict: bool | None = None):
        return make_zip(self.policy, *sources, strict=strict)


class ZipValTag(ZipTag):
    __slots__ = ()
    name = "zip_val"
    policy = ZipPolicy.VALUES_ONLY


class ZipRefTag(ZipTag):
    __slots__ = ()
    name = "zip_ref"
    policy = ZipPolicy.ALWAYS_REFERENCES


# terminal tags


class ForeachTag(Tag):
    __slots__ = ()
    name = "foreach"

    def apply(self, seq: Any, arg: Any) -> None:
        terminal.foreach(seq, arg)


class MapCollectTag(Tag):
    __slots__ = ()
    name = "map_collect"

    def apply(self, seq: Any, arg: Any) -> list[Any]:
        return terminal.map_collect(seq, arg)


class TakeCollectTag(Tag):
    __slots__ = ()
    name = "take_collect"

    def apply(self, seq: Any, arg: Any) -> list[Any]:
        return terminal.take_collect(seq, arg)


class CollectTag(ImmediateTag):
    __slots__ = ()
    name = "collect"

    def run(self, seq: Any) -> list[Any]:
        return terminal.collect(seq)


class DiscardCollectTag(ImmediateTag):
    __slots__ = ()
    name = "discard_collect"

    def run(self, seq: Any) -> None:
        terminal.discard_collect(seq)


class AccumulateTag(ImmediateTag):
    __slots__ = ()
    name = "accumulate"

    def run(self, seq: Any, start: Any = Unset) -> Any:
        return terminal.accumulate(seq, start)

    def __call__(self, source: Any, start: Any = Unset) -> Any:
        return self.run(capture_sequence(source), start)


map = MapTag()
mapr = map
map_range = map
filter = FilterTag()
unzip_map = UnzipMapTag()
zip = ZipTag()
zip_val = ZipValTag()
zip_ref = ZipRefTag()
foreach = ForeachTag()
map_collect = MapCollectTag()
take_collect = TakeCollectTag()
collect = CollectTag()
discard_collect = DiscardCollectTag()
accumulate = AccumulateTag()
