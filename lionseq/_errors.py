# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from typing import Any, ClassVar

__all__ = (
    "SequenceError",
    "CapabilityError",
    "ExhaustedError",
    "OwnershipError",
    "LengthMismatchError",
)


class SequenceError(Exception):
    default_message: ClassVar[str] = "Sequence error"
    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message or self.default_message)
        if cause:
            self.__cause__ = cause  # preserves traceback
        self.message = message or self.default_message
        self.details = details or {}

    def to_dict(self, *, include_cause: bool = False) -> dict[str, Any]:
        data = {
            "error": self.__class__.__name__,
            "message": self.message,
            **({"details": self.details} if self.details else {}),
        }
        if include_cause and (cause := self.get_cause()):
            data["cause"] = repr(cause)
        return data

    def get_cause(self) -> Exception | None:
        """Get the cause of this error, if any."""
        return self.__cause__ if hasattr(self, "__cause__") else None


class CapabilityError(SequenceError):
    """A stage needs an operation its input can neither provide nor synthesize."""

    default_message = "Capability not available"
    __slots__ = ()

    @classmethod
    def from_missing(
        cls,
        obj: Any,
        *capabilities: str,
        context: str | None = None,
        message: str | None = None,
        cause: Exception | None = None,
    ):
        """Create a CapabilityError naming the missing capabilities."""
        type_name = (
            obj.__name__ if isinstance(obj, type) else type(obj).__name__
        )
        details = {
            "type": type_name,
            "missing": list(capabilities),
            **({"context": context} if context else {}),
        }
        if message is None:
            where = f" for {context}" if context else ""
            message = (
                f"{type_name} does not support "
                f"{', '.join(capabilities)}{where}"
            )
        return cls(message=message, details=details, cause=cause)


class ExhaustedError(SequenceError):
    """Read or advance past the end of a sequence."""

    default_message = "Read or advance past end of sequence"
    __slots__ = ()


class OwnershipError(SequenceError):
    """An owning sequence was copied, or used after its storage was moved."""

    default_message = "Invalid use of an owning sequence"
    __slots__ = ()


class LengthMismatchError(SequenceError):
    """Strict zip found sub-sequences of different finite lengths."""

    default_message = "Zipped sequences have different lengths"
    __slots__ = ()
