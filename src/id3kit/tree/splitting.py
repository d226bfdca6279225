"""Split evaluation: count tables, weighted entropy, majority vote and attribute selection."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

import numpy as np

from id3kit.dataset import EncodedDataset
from id3kit.exceptions import EmptyDatasetError

# ---------------------------------------------------------------------------
# Public interface -- Count table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CountTable:
    """Two-level occurrence counts of `attribute code -> target code -> count`.

    Only observed pairs are stored, so a target code absent under an attribute
    code never contributes a `0 * log2(0)` term.

    Attributes:
        counts (dict[int, dict[int, int]]): Occurrences per attribute code and
            target code.
        total (int): Number of instances counted.

    Examples:
        >>> table = CountTable.from_codes(np.array([0, 0, 1, 1]), np.array([0, 1, 0, 1]))
        >>> table.counts
        {0: {0: 1, 1: 1}, 1: {0: 1, 1: 1}}
        >>> table.weighted_entropy()
        1.0
    """

    counts: dict[int, dict[int, int]] = field(default_factory=dict)
    total: int = 0

    @classmethod
    def from_codes(cls, attribute_codes: np.ndarray, target_codes: np.ndarray) -> CountTable:
        """Count co-occurrences of two parallel code arrays.

        Args:
            attribute_codes (np.ndarray): Candidate attribute codes, one per instance.
            target_codes (np.ndarray): Target codes, parallel to `attribute_codes`.

        Returns:
            CountTable: Counts keyed in ascending code order.

        Raises:
            ValueError: If the arrays differ in length.
        """
        if len(attribute_codes) != len(target_codes):
            raise ValueError(f"Code arrays differ in length: {len(attribute_codes)} != {len(target_codes)}")
        if len(attribute_codes) == 0:
            return cls()
        pairs, occurrences = np.unique(np.stack([attribute_codes, target_codes]), axis=1, return_counts=True)
        counts: dict[int, dict[int, int]] = {}
        for (attribute_code, target_code), occurrence in zip(pairs.T.tolist(), occurrences.tolist(), strict=True):
            counts.setdefault(attribute_code, {})[target_code] = occurrence
        return cls(counts=counts, total=len(attribute_codes))

    def weighted_entropy(self) -> float:
        """Return the size-weighted mean entropy of the target within each attribute code.

        Returns:
            float: `sum(size(c) / total * entropy(c))` in bits; 0.0 for an empty table.
        """
        if self.total == 0:
            return 0.0
        # fsum rounds once, so the total does not depend on code order.
        return math.fsum(
            (sum(target_counts.values()) / self.total) * entropy(target_counts.values())
            for target_counts in self.counts.values()
        )


def entropy(counts: Iterable[int]) -> float:
    """Return the Shannon entropy, in bits, of a distribution given by occurrence counts.

    Args:
        counts (Iterable[int]): Occurrence counts; zero counts are skipped.

    Returns:
        float: `-sum(p * log2(p))`; 0.0 for a single category.
    """
    values = [count for count in counts if count > 0]
    size = sum(values)
    if size == 0:
        return 0.0
    return math.fsum(-(count / size) * math.log2(count / size) for count in values)


# ---------------------------------------------------------------------------
# Public interface -- Voting and selection
# ---------------------------------------------------------------------------


def majority_vote(values: Sequence[int] | np.ndarray) -> int:
    """Return the most frequent value, preferring the greatest value among ties.

    Args:
        values (Sequence[int] | np.ndarray): Target codes.

    Returns:
        int: The winning code.

    Raises:
        EmptyDatasetError: If `values` is empty.

    Examples:
        >>> majority_vote([1, 1, 2, 2, 3])
        2
    """
    array = np.asarray(values, dtype=np.int64)
    if array.size == 0:
        raise EmptyDatasetError("Majority vote is undefined for zero instances")
    # np.unique sorts ascending, so the last tied maximum is the greatest value.
    distinct, occurrences = np.unique(array, return_counts=True)
    winners = np.flatnonzero(occurrences == occurrences.max())
    return int(distinct[winners[-1]])


def split_entropy(
    dataset: EncodedDataset,
    partition: np.ndarray,
    attribute_index: int,
    target_index: int,
) -> float:
    """Return the weighted entropy of splitting `partition` on one attribute.

    Args:
        dataset (EncodedDataset): The training data.
        partition (np.ndarray): Instance indices under consideration.
        attribute_index (int): Candidate attribute.
        target_index (int): Target attribute.

    Returns:
        float: Weighted target entropy after the split, in bits.
    """
    attribute_codes = dataset.column(attribute_index)[partition]
    target_codes = dataset.column(target_index)[partition]
    return CountTable.from_codes(attribute_codes, target_codes).weighted_entropy()


def select_split_attribute(
    dataset: EncodedDataset,
    partition: np.ndarray,
    candidates: Sequence[int],
    target_index: int,
) -> tuple[int, float]:
    """Pick the candidate attribute with minimum weighted entropy.

    Ties go to the candidate that comes first in `candidates`.

    Args:
        dataset (EncodedDataset): The training data.
        partition (np.ndarray): Instance indices under consideration.
        candidates (Sequence[int]): Eligible attribute indices, in priority order.
        target_index (int): Target attribute.

    Returns:
        tuple[int, float]: The chosen attribute index and its weighted entropy.

    Raises:
        ValueError: If `candidates` is empty.
    """
    if not candidates:
        raise ValueError("At least one candidate attribute is required to select a split")
    best_attribute = candidates[0]
    best_entropy = split_entropy(dataset, partition, best_attribute, target_index)
    for attribute_index in candidates[1:]:
        candidate_entropy = split_entropy(dataset, partition, attribute_index, target_index)
        if candidate_entropy < best_entropy:
            best_attribute, best_entropy = attribute_index, candidate_entropy
    return best_attribute, best_entropy
