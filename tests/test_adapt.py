# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for sequence adaptation and ownership."""

import copy

import pytest

from lionseq import (
    Capability,
    CapabilityError,
    IntPosition,
    OwnershipError,
    Position,
    as_sequence,
    collect,
    ints,
    map,
    ops,
    owned,
)
from lionseq.sources import (
    IntInterval,
    IterableSequence,
    IteratorPair,
    OwningArraySequence,
    OwningSequence,
)

C = Capability


class TestAsSequence:
    """Tests for as_sequence dispatch."""

    def test_sequence_is_identity(self):
        """Test a sequence is never re-wrapped."""
        seq = ints(3)
        assert as_sequence(seq) is seq

    def test_tuple_becomes_owning_array(self):
        """Test a tuple is copied into owned storage."""
        seq = as_sequence((1, 2, 3))
        assert isinstance(seq, OwningArraySequence)
        assert seq.is_owning
        assert seq | collect == [1, 2, 3]

    @pytest.mark.parametrize(
        "source", [[1, 2], range(1, 3), bytearray(b"\x01\x02")]
    )
    def test_indexable_becomes_iterator_pair(self, source):
        """Test indexable containers are walked by position."""
        seq = as_sequence(source)
        assert isinstance(seq, IteratorPair)
        assert not seq.is_owning
        assert seq | collect == [1, 2]

    def test_string(self):
        """Test strings adapt character by character."""
        assert as_sequence("ab") | collect == ["a", "b"]

    @pytest.mark.parametrize(
        "source",
        [
            (x for x in (1, 2)),
            iter([1, 2]),
            {1: "a", 2: "b"},
        ],
    )
    def test_iterable_becomes_owning_lookahead(self, source):
        """Test one-shot iterables are owned with one element buffered."""
        seq = as_sequence(source)
        assert isinstance(seq, IterableSequence)
        assert seq.is_owning
        assert seq | collect == [1, 2]

    def test_iterable_lookahead_is_lazy(self):
        """Test nothing is pulled from the iterator before it is needed."""
        pulled = []

        def gen():
            for i in range(3):
                pulled.append(i)
                yield i

        seq = as_sequence(gen())
        assert pulled == []
        assert ops.read_value(seq) == 0
        assert pulled == [0]
        ops.advance(seq)
        assert pulled == [0]

    def test_positions(self):
        """Test two positions of one container form a sequence."""
        items = [10, 20, 30, 40]
        seq = as_sequence(Position(items, 1), Position(items, 3))
        assert isinstance(seq, IteratorPair)
        assert seq | collect == [20, 30]

    def test_int_positions(self):
        """Test two integer positions form an interval."""
        seq = as_sequence(IntPosition(2), IntPosition(5))
        assert isinstance(seq, IntInterval)
        assert seq | collect == [2, 3, 4]

    def test_mixed_positions_rejected(self):
        """Test mismatched position kinds raise."""
        with pytest.raises(CapabilityError):
            as_sequence(Position([1]), IntPosition(1))

    def test_not_adaptable(self):
        """Test a non-iterable value raises."""
        with pytest.raises(CapabilityError) as exc:
            as_sequence(5)
        assert exc.value.details["type"] == "int"


class TestOwned:
    """Tests for the owned() marker."""

    def test_owned_tuple(self):
        """Test an owned tuple becomes an owning array."""
        assert isinstance(as_sequence(owned((1, 2))), OwningArraySequence)

    def test_owned_container(self):
        """Test an owned list keeps the value and forwards its operations."""
        items = [1, 2, 3]
        seq = as_sequence(owned(items))
        assert isinstance(seq, OwningSequence)
        assert type(seq).__name__ == "OwningIteratorPair"
        assert seq.value is items
        assert seq.is_owning
        assert ops.has_native(seq, C.READ_REF)
        assert not ops.has_native(seq, C.RANGE_BEGIN)
        assert seq | collect == [1, 2, 3]

    def test_owned_specialization_is_cached(self):
        """Test one wrapper class is made per adapted type."""
        first = as_sequence(owned([1]))
        second = as_sequence(owned([2]))
        assert type(first) is type(second)

    def test_owned_generator(self):
        """Test an owned generator forwards read_value."""
        seq = as_sequence(owned(x * 2 for x in range(3)))
        assert ops.has_native(seq, C.READ_VALUE)
        assert seq | collect == [0, 2, 4]

    def test_owned_sequence_is_moved(self):
        """Test owning an existing sequence moves it."""
        source = ints(3)
        seq = as_sequence(owned(source))
        assert not source.is_live
        assert seq | collect == [0, 1, 2]
        with pytest.raises(OwnershipError):
            ops.empty(source)

    def test_owned_non_adaptable(self):
        """Test an owned value that cannot be adapted raises."""
        with pytest.raises(CapabilityError):
            as_sequence(owned(5))


class TestOwnership:
    """Tests for copy and move semantics."""

    def test_owning_sequence_refuses_copy(self):
        """Test copying an owning sequence raises."""
        seq = as_sequence((1, 2))
        with pytest.raises(OwnershipError):
            copy.copy(seq)
        with pytest.raises(OwnershipError):
            copy.deepcopy(seq)

    def test_derived_over_owning_is_owning(self):
        """Test ownership propagates to derived sequences."""
        mapped = as_sequence((1, 2)) | map(lambda x: x)
        assert mapped.is_owning
        with pytest.raises(OwnershipError):
            copy.copy(mapped)

    def test_non_owning_copy_is_independent(self):
        """Test a copy of a borrowed sequence has its own cursor."""
        seq = ints(3)
        dup = copy.copy(seq)
        ops.advance(dup)
        assert ops.read_value(seq) == 0
        assert ops.read_value(dup) == 1

    def test_move(self):
        """Test move transfers state and invalidates the source handle."""
        seq = as_sequence((1, 2))
        ops.advance(seq)
        moved = seq.move()
        assert moved.is_live
        assert not seq.is_live
        assert repr(seq) == "<moved OwningArraySequence>"
        assert moved | collect == [2]
        with pytest.raises(OwnershipError):
            seq.move()
        with pytest.raises(OwnershipError):
            copy.copy(seq)

    def test_pipeline_moves_owning_source(self):
        """Test a pipe stage takes an owning source by move."""
        seq = as_sequence((1, 2, 3))
        assert seq | collect == [1, 2, 3]
        assert not seq.is_live
        with pytest.raises(OwnershipError):
            seq | collect

    def test_pipeline_copies_borrowed_source(self):
        """Test a pipe stage leaves a non-owning source untouched."""
        seq = ints(3)
        assert seq | collect == [0, 1, 2]
        assert seq | collect == [0, 1, 2]

    def test_owning_array_has_private_storage(self):
        """Test writes through an owning array never reach the source."""
        source = [1, 2]
        seq = OwningArraySequence(source)
        ops.read_ref(seq).value = 5
        assert source == [1, 2]
        assert seq | collect == [5, 2]

    def test_borrowed_mutation_before_collect_is_visible(self):
        """Test writes before collecting show up, writes after do not."""
        items = [1, 2, 3]
        seq = as_sequence(items)
        ops.read_ref(seq).value = 10
        result = seq | collect
        items[1] = 99
        assert result == [10, 2, 3]

    def test_iteration(self):
        """Test Python iteration drains a captured sequence."""
        seq = ints(3)
        assert list(seq) == [0, 1, 2]
        assert [x for x in seq] == [0, 1, 2]

    def test_iteration_moves_owning(self):
        """Test iterating an owning sequence consumes the handle."""
        seq = as_sequence((4, 5))
        assert list(seq) == [4, 5]
        assert not seq.is_live
