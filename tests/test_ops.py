# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for operation synthesis."""

import pytest

from lionseq import (
    Capability,
    CapabilityError,
    ExhaustedError,
    Ref,
    Sequence,
    collect,
    ints,
    ops,
    replicate,
)
from lionseq.derived import MappingSequence

C = Capability


class RefOnly(Sequence):
    """Exposes elements only by reference."""

    __capabilities__ = C.EMPTY | C.ADVANCE | C.READ_REF

    def __init__(self, items):
        self._items = items
        self._index = 0

    def _empty(self):
        return self._index >= len(self._items)

    def _advance(self):
        self._index += 1

    def _read_ref(self):
        return Ref(self._items, self._index)


class PullOnly(Sequence):
    """Counts down; each pull consumes an element."""

    __capabilities__ = C.EMPTY | C.PULL

    def __init__(self, n):
        self._n = n

    def _empty(self):
        return self._n == 0

    def _pull(self):
        self._n -= 1
        return self._n


class ValueAndRef(Sequence):
    """Has native read_value; its read_ref must never be used for pull."""

    __capabilities__ = C.EMPTY | C.ADVANCE | C.READ_VALUE | C.READ_REF

    def __init__(self, items):
        self._items = items
        self._index = 0

    def _empty(self):
        return self._index >= len(self._items)

    def _advance(self):
        self._index += 1

    def _read_value(self):
        return self._items[self._index]

    def _read_ref(self):
        raise AssertionError("read_ref used for synthesis")


class TestSynthesis:
    """Tests for the synthesis priorities."""

    def test_pull_from_ref(self):
        """Test pull copies the referenced element, then advances."""
        seq = RefOnly([1, 2, 3])
        assert [ops.pull(seq), ops.pull(seq), ops.pull(seq)] == [1, 2, 3]
        assert ops.empty(seq)

    def test_read_value_from_ref(self):
        """Test read_value is synthesized from read_ref and does not advance."""
        seq = RefOnly([7, 8])
        assert ops.read_value(seq) == 7
        assert ops.read_value(seq) == 7
        assert ops.has_capability(RefOnly, C.READ_VALUE)
        assert not ops.has_native(RefOnly, C.READ_VALUE)

    def test_synthesized_read_copies(self):
        """Test values read through a reference are independent copies."""
        items = [[1], [2]]
        value = ops.read_value(RefOnly(items))
        assert value == [1]
        assert value is not items[0]

    def test_copy_on_read_disabled(self, patch_settings):
        """Test the copy can be turned off."""
        patch_settings(copy_on_read=False)
        items = [[1], [2]]
        assert ops.read_value(RefOnly(items)) is items[0]

    def test_pull_prefers_native_read_value(self):
        """Test pull is built from read_value when both reads exist."""
        assert ValueAndRef([1, 2]) | collect == [1, 2]

    def test_none_values_pass_through(self):
        """Test a None element is pulled like any other."""
        seq = ValueAndRef([None, 1])
        assert ops.pull(seq) is None
        assert ops.pull(seq) == 1

    def test_pull_only(self):
        """Test a pull-only sequence drains without read_value."""
        assert PullOnly(3) | collect == [2, 1, 0]
        assert not ops.has_capability(PullOnly, C.READ_VALUE)

    def test_native_pull_is_used(self):
        """Test replicate drains through its own pull."""
        assert ops.has_native(replicate(2, "x"), C.PULL)
        assert replicate(3, "x") | collect == ["x", "x", "x"]

    def test_replicate_copies_value(self):
        """Test each replicated element is a separate copy."""
        first, second = replicate(2, []) | collect
        assert first == second == []
        assert first is not second


class TestFront:
    """Tests for front."""

    def test_front_prefers_reference(self):
        """Test front returns a Ref where read_ref exists."""
        items = [5, 6]
        assert ops.front(RefOnly(items)) == Ref(items, 0)

    def test_front_falls_back_to_value(self):
        """Test front reads a value otherwise."""
        assert ops.front(ints(4, 6)) == 4


class TestMissingCapabilities:
    """Tests for operations that cannot be provided."""

    def test_read_ref_never_synthesized(self):
        """Test read_ref on a value-only sequence raises."""
        with pytest.raises(CapabilityError) as exc:
            ops.read_ref(ints(3))
        assert exc.value.details["missing"] == ["read_ref"]

    def test_read_value_missing_on_pull_only(self):
        """Test read_value is not derived from pull."""
        with pytest.raises(CapabilityError):
            ops.read_value(PullOnly(2))

    def test_require_names_all_missing(self):
        """Test require reports every missing operation."""
        with pytest.raises(CapabilityError) as exc:
            ops.require(
                PullOnly(1), C.READ_VALUE | C.READ_REF, context="test"
            )
        assert exc.value.details["missing"] == ["read_value", "read_ref"]
        assert exc.value.details["context"] == "test"

    def test_mismatch_reported_at_construction(self):
        """Test map over a pull-only sequence fails before any read."""
        with pytest.raises(CapabilityError):
            MappingSequence(PullOnly(3), lambda x: x)

    def test_non_sequence(self):
        """Test operations on non-sequences raise."""
        with pytest.raises(CapabilityError):
            ops.empty(object())
        assert not ops.has_capability(object(), C.EMPTY)


class TestBoundsChecks:
    """Tests for reads and advances past the end."""

    @pytest.mark.parametrize(
        "operation", [ops.advance, ops.read_value, ops.pull]
    )
    def test_exhausted_raises(self, operation):
        """Test each consuming operation raises on an empty sequence."""
        with pytest.raises(ExhaustedError) as exc:
            operation(ints(2, 2))
        assert exc.value.details["type"] == "IntInterval"

    def test_exhausted_read_ref(self):
        """Test read_ref past the end raises."""
        with pytest.raises(ExhaustedError):
            ops.read_ref(RefOnly([]))


class TestIntervalBounds:
    """Tests for range_begin and range_end."""

    def test_int_interval_bounds(self):
        """Test interval bounds are integer positions."""
        seq = ints(3, 7)
        begin, end = ops.range_begin(seq), ops.range_end(seq)
        assert end - begin == 4
        assert begin.value == 3

    def test_bounds_not_synthesized(self):
        """Test bounds must be native."""
        with pytest.raises(CapabilityError):
            ops.range_begin(replicate(2, 0))


class TestInts:
    """Tests for the ints() bounds."""

    def test_one_bound_is_upper(self):
        """Test a single bound is the exclusive upper end."""
        assert ints(4) | collect == [0, 1, 2, 3]

    def test_two_bounds(self):
        assert ints(2, 5) | collect == [2, 3, 4]

    def test_keyword_bounds_rejected(self):
        """Test bounds cannot be passed by keyword and silently dropped."""
        with pytest.raises(TypeError):
            ints(upper=5)
        with pytest.raises(TypeError):
            ints(lower=1, upper=5)

    def test_too_many_bounds(self):
        with pytest.raises(TypeError):
            ints(1, 2, 3)
