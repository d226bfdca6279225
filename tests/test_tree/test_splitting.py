"""Tests for count tables, entropy, majority vote, and split selection."""

from __future__ import annotations

import math

import numpy as np
import pytest
from pytest_check import check

from id3kit.dataset import EncodedDataset
from id3kit.discretization import NominalMapping
from id3kit.exceptions import EmptyDatasetError
from id3kit.tree.splitting import CountTable, entropy, majority_vote, select_split_attribute, split_entropy


class TestEntropy:
    """Tests for `entropy`."""

    def test_single_category_is_zero(self) -> None:
        """A pure distribution carries no information."""
        assert entropy([7]) == 0.0

    def test_even_split_is_one_bit(self) -> None:
        """Two equally frequent categories give exactly one bit."""
        assert entropy([2, 2]) == 1.0

    def test_three_equal_thirds(self) -> None:
        """Three equally frequent categories give log2(3) bits."""
        assert entropy([1, 1, 1]) == pytest.approx(math.log2(3))

    def test_zero_counts_are_skipped(self) -> None:
        """Zero counts should not contribute a 0 * log2(0) term."""
        assert entropy([3, 0, 3]) == 1.0


class TestCountTable:
    """Tests for `CountTable`."""

    def test_counts_observed_pairs_only(self) -> None:
        """Only observed (attribute, target) pairs should appear."""
        table = CountTable.from_codes(np.array([0, 0, 1, 1, 1]), np.array([1, 1, 0, 1, 0]))

        with check:
            assert table.counts == {0: {1: 2}, 1: {0: 2, 1: 1}}
        with check:
            assert table.total == 5

    def test_perfectly_determining_attribute_has_zero_entropy(self) -> None:
        """An attribute equal to the target leaves no uncertainty."""
        table = CountTable.from_codes(np.array([0, 0, 1, 1]), np.array([0, 0, 1, 1]))

        assert table.weighted_entropy() == 0.0

    def test_independent_attribute_keeps_one_bit(self) -> None:
        """An attribute independent of a balanced binary target leaves one bit."""
        table = CountTable.from_codes(np.array([0, 0, 1, 1]), np.array([0, 1, 0, 1]))

        assert table.weighted_entropy() == 1.0

    def test_weights_by_group_size(self) -> None:
        """Each group's entropy should be weighted by its share of instances."""
        # Arrange - group 0 is pure (2 rows), group 1 is an even split (2 rows)
        table = CountTable.from_codes(np.array([0, 0, 1, 1]), np.array([1, 1, 0, 1]))

        # Act & Assert
        assert table.weighted_entropy() == pytest.approx(0.5)

    def test_empty_table(self) -> None:
        """No codes should give an empty table with zero entropy."""
        table = CountTable.from_codes(np.array([], dtype=np.int64), np.array([], dtype=np.int64))

        with check:
            assert table.total == 0
        with check:
            assert table.weighted_entropy() == 0.0

    def test_length_mismatch(self) -> None:
        """Parallel arrays of different lengths should raise ValueError."""
        with pytest.raises(ValueError, match="length"):
            CountTable.from_codes(np.array([0, 1]), np.array([0]))


class TestMajorityVote:
    """Tests for `majority_vote`."""

    def test_most_frequent_wins(self) -> None:
        """The most frequent code should win."""
        assert majority_vote([2, 0, 2, 1]) == 2

    def test_tie_goes_to_greatest_value(self) -> None:
        """Among equally frequent codes the greatest wins."""
        with check:
            assert majority_vote([1, 1, 2, 2, 3]) == 2
        with check:
            assert majority_vote(np.array([3, 0, 0, 3])) == 3

    def test_empty_raises(self) -> None:
        """Voting over nothing is undefined."""
        with pytest.raises(EmptyDatasetError):
            majority_vote([])


class TestSelectSplitAttribute:
    """Tests for `split_entropy` and `select_split_attribute`."""

    def test_picks_minimum_entropy(self) -> None:
        """The attribute that determines the target should be chosen."""
        # Arrange - attribute 0 is noise, attribute 1 copies the target (attribute 2)
        dataset = _make_dataset([0, 1, 0, 1], [0, 0, 1, 1], [0, 0, 1, 1])
        partition = np.arange(4)

        # Act
        attribute, best_entropy = select_split_attribute(dataset, partition, (0, 1), target_index=2)

        # Assert
        with check:
            assert attribute == 1
        with check:
            assert best_entropy == 0.0

    def test_tie_goes_to_first_candidate(self) -> None:
        """Candidates with equal entropy should resolve to the earliest in order."""
        dataset = _make_dataset([0, 0, 1, 1], [0, 1, 0, 1], [0, 1, 1, 0])
        partition = np.arange(4)

        with check:
            assert select_split_attribute(dataset, partition, (1, 0), target_index=2)[0] == 1
        with check:
            assert select_split_attribute(dataset, partition, (0, 1), target_index=2)[0] == 0

    def test_relabelled_attribute_ties_exactly(self) -> None:
        """The same groups under permuted codes should tie, so the first candidate still wins."""
        # Arrange - target groups (zeros, ones) of (1, 1), (1, 2) and (4, 5); attribute 1 relabels 0->2, 1->0, 2->1
        attribute_a = [0, 0, 1, 1, 1] + [2] * 9
        attribute_b = [2, 2, 0, 0, 0] + [1] * 9
        target = [0, 1, 0, 1, 1] + [0] * 4 + [1] * 5
        dataset = _make_dataset(attribute_a, attribute_b, target)
        partition = np.arange(len(target))

        # Act
        attribute, _ = select_split_attribute(dataset, partition, (0, 1), target_index=2)

        # Assert
        with check:
            assert split_entropy(dataset, partition, 0, 2) == split_entropy(dataset, partition, 1, 2)
        with check:
            assert attribute == 0

    def test_entropy_restricted_to_partition(self) -> None:
        """Only instances in the partition should be counted."""
        # Arrange - over rows 0 and 1 attribute 0 separates the target perfectly
        dataset = _make_dataset([0, 1, 0, 1], [0, 1, 1, 0])

        # Act & Assert
        with check:
            assert split_entropy(dataset, np.array([0, 1]), 0, 1) == 0.0
        with check:
            assert split_entropy(dataset, np.arange(4), 0, 1) == 1.0

    def test_no_candidates(self) -> None:
        """Selecting from an empty candidate set should raise ValueError."""
        dataset = _make_dataset([0, 1], [0, 1])

        with pytest.raises(ValueError, match="candidate"):
            select_split_attribute(dataset, np.arange(2), (), target_index=1)


def _make_dataset(*columns: list[int]) -> EncodedDataset:
    """Build a dataset of small nominal code columns.

    Args:
        *columns (list[int]): One code column per attribute.

    Returns:
        EncodedDataset: Dataset with a placeholder mapping per column.
    """
    layouts = [NominalMapping(values=tuple(str(code) for code in range(max(column) + 1))) for column in columns]
    return EncodedDataset(list(columns), layouts=layouts)
