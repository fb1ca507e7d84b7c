# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import pytest

from lionseq import config


@pytest.fixture
def patch_settings(monkeypatch):
    """Swap the settings singleton for a copy with the given overrides."""

    def _patch(**overrides):
        patched = config.settings.model_copy(update=overrides)
        monkeypatch.setattr(config, "settings", patched)
        return patched

    return _patch
