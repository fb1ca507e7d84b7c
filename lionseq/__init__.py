# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import logging

from . import ops as ops
from . import terminal as terminal
from ._errors import (
    CapabilityError,
    ExhaustedError,
    LengthMismatchError,
    OwnershipError,
    SequenceError,
)
from ._sentinel import Moved, Unset
from .adapt import as_sequence
from .base import Sequence, capture
from .capability import (
    Capability,
    SequenceTraits,
    is_sequence,
    is_sequence_type,
    register_traits,
    unregister_traits,
)
from .config import settings
from .ops import (
    advance,
    empty,
    front,
    has_capability,
    is_infinite,
    pull,
    range_begin,
    range_end,
    read_ref,
    read_value,
)
from .pipeline import (
    accumulate,
    collect,
    discard_collect,
    filter,
    foreach,
    map,
    map_collect,
    map_range,
    mapr,
    take_collect,
    unzip_map,
    zip,
    zip_ref,
    zip_val,
)
from .ref import IntPosition, Position, Ref
from .sources import ints, owned, replicate
from .version import __version__
from .zipping import ZipPolicy

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

__all__ = (
    "__version__",
    "Capability",
    "CapabilityError",
    "ExhaustedError",
    "IntPosition",
    "LengthMismatchError",
    "Moved",
    "OwnershipError",
    "Position",
    "Ref",
    "Sequence",
    "SequenceError",
    "SequenceTraits",
    "Unset",
    "ZipPolicy",
    "accumulate",
    "advance",
    "as_sequence",
    "capture",
    "collect",
    "discard_collect",
    "empty",
    "filter",
    "foreach",
    "front",
    "has_capability",
    "ints",
    "is_infinite",
    "is_sequence",
    "is_sequence_type",
    "logger",
    "map",
    "map_collect",
    "map_range",
    "mapr",
    "ops",
    "owned",
    "pull",
    "range_begin",
    "range_end",
    "read_ref",
    "read_value",
    "register_traits",
    "replicate",
    "settings",
    "take_collect",
    "terminal",
    "unregister_traits",
    "unzip_map",
    "zip",
    "zip_ref",
    "zip_val",
)
