"""Tests for recursive ID3 induction."""

from __future__ import annotations

import numpy as np
import pytest
from pytest_check import check

from id3kit.dataset import EncodedDataset
from id3kit.discretization import NominalMapping
from id3kit.exceptions import EmptyDatasetError, OutOfBoundsError
from id3kit.tree.induction import train
from id3kit.tree.models import InternalNode, LeafNode


class TestTrainShape:
    """Tests for the structure of trained trees."""

    def test_perfectly_determining_attribute(self) -> None:
        """A single attribute equal to the target should give depth 1 with two pure leaves."""
        # Arrange
        dataset = _make_dataset([0, 0, 1, 1], [0, 0, 1, 1])

        # Act
        tree = train(dataset, target_index=1)

        # Assert
        with check:
            assert tree.depth == 1
        with check:
            assert tree.leaf_count == 2
        with check:
            assert isinstance(tree.root, InternalNode) and tree.root.split_attribute == 0
        with check:
            assert [tree.query(dataset.instance(i)) for i in range(4)] == [0, 0, 1, 1]

    def test_chooses_informative_attribute(self) -> None:
        """The root should split on the attribute that determines the target."""
        # Arrange - attribute 0 is noise, attribute 1 copies the target
        dataset = _make_dataset([0, 1, 0, 1], [1, 1, 0, 0], [1, 1, 0, 0])

        # Act
        tree = train(dataset, target_index=2)

        # Assert
        assert isinstance(tree.root, InternalNode) and tree.root.split_attribute == 1

    def test_xor_needs_both_attributes(self) -> None:
        """XOR of two attributes should split on both and classify every instance."""
        # Arrange
        dataset = _make_dataset([0, 0, 1, 1], [0, 1, 0, 1], [0, 1, 1, 0])

        # Act
        tree = train(dataset, target_index=2)

        # Assert
        with check:
            assert tree.depth == 2
        with check:
            assert tree.leaf_count == 4
        with check:
            assert tree.node_count == 7
        with check:
            assert tree.predict(dataset).tolist() == [0, 1, 1, 0]

    def test_pure_root_still_splits(self) -> None:
        """A constant target should still produce an internal root with leaf children."""
        dataset = _make_dataset([0, 1, 2], [1, 1, 1])

        tree = train(dataset, target_index=1)

        with check:
            assert isinstance(tree.root, InternalNode)
        with check:
            assert tree.leaf_count == 3
        with check:
            assert tree.target_values == (1,)

    def test_exhausted_candidates_produce_majority_leaf(self) -> None:
        """Contradictory instances should end in a majority leaf once no attribute remains."""
        # Arrange - identical attribute codes with conflicting targets
        dataset = _make_dataset([0, 0, 0], [0, 1, 1])

        # Act
        tree = train(dataset, target_index=1)

        # Assert
        assert isinstance(tree.root, InternalNode)
        leaf = tree.root.children[0]
        with check:
            assert leaf == LeafNode(edge_value=0, value=1, samples=3, support=2)

    def test_target_only_dataset_gives_root_leaf(self) -> None:
        """Without any non-target attribute the whole tree is one majority leaf."""
        dataset = _make_dataset([2, 0, 2])

        tree = train(dataset, target_index=0)

        with check:
            assert tree.root == LeafNode(edge_value=None, value=2, samples=3, support=2)
        with check:
            assert tree.depth == 0
        with check:
            assert tree.query([0]) == 2

    def test_target_in_middle_is_never_split_on(self) -> None:
        """The target attribute should be excluded from the candidates wherever it sits."""
        dataset = _make_dataset([0, 1, 0, 1], [0, 1, 0, 1], [1, 0, 1, 0])

        tree = train(dataset, target_index=1)

        assert 1 not in tree.split_attributes


class TestTrainQueries:
    """Tests for querying trained trees."""

    def test_unseen_code_returns_fallback(self) -> None:
        """A code with no child should answer with the node's fallback value."""
        # Arrange - majority of [0, 0, 1, 1] is 1 by the greatest-value tie-break
        dataset = _make_dataset([0, 0, 1, 1], [0, 0, 1, 1])
        tree = train(dataset, target_index=1)

        # Act
        prediction = tree.query([5, 0])

        # Assert
        with check:
            assert isinstance(tree.root, InternalNode) and tree.root.fallback_value == 1
        with check:
            assert prediction == 1

    def test_nested_fallback_uses_partition_majority(self) -> None:
        """Fallbacks below the root should reflect the majority of their own partition."""
        # Arrange - under attribute 0 == 0 the targets are [0, 0, 1]
        dataset = _make_dataset([0, 0, 0, 1, 1], [0, 1, 2, 0, 1], [0, 0, 1, 2, 2])
        tree = train(dataset, target_index=2)

        # Act - attribute 1 code 7 was never seen under attribute 0 == 0
        prediction = tree.query([0, 7, 0])

        # Assert
        assert prediction == 0

    def test_query_only_returns_training_targets(self) -> None:
        """Every query, including unseen codes, should return a target seen in training."""
        # Arrange
        rng = np.random.default_rng(7)
        columns = [rng.integers(0, 3, size=40).tolist() for _ in range(3)]
        dataset = _make_dataset(*columns)
        tree = train(dataset, target_index=2)

        # Act
        predictions = {tree.query([a, b, 0]) for a in range(5) for b in range(5)}

        # Assert
        assert predictions <= set(tree.target_values)

    def test_training_is_deterministic(self) -> None:
        """Training twice on the same data should serialize identically."""
        dataset = _make_dataset([0, 1, 2, 0, 1, 2], [1, 1, 0, 0, 1, 0], [0, 1, 1, 0, 0, 1])

        first = train(dataset, target_index=2)
        second = train(dataset, target_index=2)

        assert first.model_dump_json() == second.model_dump_json()

    def test_dataset_is_not_mutated(self) -> None:
        """Training should leave every code unchanged."""
        dataset = _make_dataset([0, 1, 1, 0], [1, 0, 1, 0], [0, 1, 1, 0])
        before = [dataset.column(i).tolist() for i in range(3)]

        train(dataset, target_index=2)

        assert [dataset.column(i).tolist() for i in range(3)] == before


class TestTrainErrors:
    """Tests for invalid training input."""

    def test_empty_dataset(self) -> None:
        """Zero instances should raise EmptyDatasetError."""
        dataset = EncodedDataset([[], []], layouts=[_BINARY, _BINARY])

        with pytest.raises(EmptyDatasetError):
            train(dataset, target_index=1)

    @pytest.mark.parametrize("target_index", [2, -1])
    def test_target_out_of_bounds(self, target_index: int) -> None:
        """A target index outside the attributes should raise OutOfBoundsError."""
        dataset = _make_dataset([0, 1], [1, 0])

        with pytest.raises(OutOfBoundsError) as exc_info:
            train(dataset, target_index=target_index)

        assert exc_info.value.axis == "attribute"


_BINARY = NominalMapping(values=("0", "1"))


def _make_dataset(*columns: list[int]) -> EncodedDataset:
    """Build a dataset of small nominal code columns.

    Args:
        *columns (list[int]): One code column per attribute.

    Returns:
        EncodedDataset: Dataset with a placeholder mapping per column.
    """
    layouts = [NominalMapping(values=tuple(str(code) for code in range(max(column) + 1))) for column in columns]
    return EncodedDataset(list(columns), layouts=layouts)
