# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from typing import Any, ClassVar

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ("SequenceSettings", "settings")


class SequenceSettings(BaseSettings, frozen=True):
    """Library settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="LIONSEQ_",
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    check_bounds: bool = Field(
        default=True,
        description="Test `empty` before every read or advance and raise "
        "ExhaustedError instead of reading past the end",
    )
    strict_zip: bool = Field(
        default=False,
        description="Default for zip(): fail on unequal finite lengths "
        "instead of stopping at the shortest",
    )
    ints_max: int = Field(
        default=2**31 - 1,
        ge=0,
        description="Upper bound used by the unbounded ints()",
    )
    copy_on_read: bool = Field(
        default=True,
        description="Synthesized read_value copies the referenced element",
    )

    _instance: ClassVar[Any] = None


# Create a singleton instance
settings = SequenceSettings()
SequenceSettings._instance = settings
