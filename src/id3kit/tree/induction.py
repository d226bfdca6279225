"""Recursive ID3 induction over an encoded dataset."""

from __future__ import annotations

import numpy as np
from loguru import logger

from id3kit.dataset import EncodedDataset
from id3kit.exceptions import EmptyDatasetError, OutOfBoundsError
from id3kit.logging import FIT_LEVEL
from id3kit.tree.models import DecisionTree, InternalNode, LeafNode, TreeNode
from id3kit.tree.splitting import majority_vote, select_split_attribute

# ---------------------------------------------------------------------------
# Public interface
# ---------------------------------------------------------------------------


def train(dataset: EncodedDataset, target_index: int) -> DecisionTree:
    """Induce an ID3 decision tree predicting one attribute from all the others.

    The root's fallback value is the majority target over the whole dataset.
    Each recursion level splits on the remaining attribute of minimum weighted
    entropy (earliest attribute wins ties) and removes it from the candidates
    handed to every child, so the recursion depth is bounded by the number of
    non-target attributes.

    Args:
        dataset (EncodedDataset): Discretized training data. It is only read.
        target_index (int): Attribute index of the target.

    Returns:
        DecisionTree: The trained tree.

    Raises:
        OutOfBoundsError: If `target_index` does not address an attribute.
        EmptyDatasetError: If the dataset has zero instances.
    """
    logger.log(
        FIT_LEVEL,
        "Training ID3 tree",
        target_index=target_index,
        attributes=dataset.column_count,
        instances=dataset.instance_count,
    )
    if not 0 <= target_index < dataset.column_count:
        raise OutOfBoundsError(axis="attribute", index=target_index, size=dataset.column_count)
    if dataset.instance_count == 0:
        logger.warning("Training aborted: dataset has zero instances")
        raise EmptyDatasetError()

    partition = np.arange(dataset.instance_count, dtype=np.int64)
    candidates = tuple(index for index in range(dataset.column_count) if index != target_index)
    target_codes = dataset.column(target_index)
    fallback_value = majority_vote(target_codes)

    root: TreeNode
    if candidates:
        root = _grow_internal(
            dataset,
            partition,
            candidates,
            target_index,
            edge_value=None,
            fallback_value=fallback_value,
        )
    else:
        root = _make_leaf(target_codes, edge_value=None, value=fallback_value)

    tree = DecisionTree(
        root=root,
        target_index=target_index,
        attribute_count=dataset.column_count,
        target_values=tuple(np.unique(target_codes).tolist()),
    )
    logger.info("ID3 tree trained", depth=tree.depth, leaf_count=tree.leaf_count, node_count=tree.node_count)
    return tree


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _grow_internal(
    dataset: EncodedDataset,
    partition: np.ndarray,
    candidates: tuple[int, ...],
    target_index: int,
    *,
    edge_value: int | None,
    fallback_value: int,
) -> InternalNode:
    """Split a partition on its best attribute and grow one child per observed code.

    Args:
        dataset (EncodedDataset): The training data.
        partition (np.ndarray): Instance indices reaching this node; never empty.
        candidates (tuple[int, ...]): Attributes still eligible here; never empty.
        target_index (int): Target attribute.
        edge_value (int | None): Parent split code leading here.
        fallback_value (int): Majority target code of `partition`.

    Returns:
        InternalNode: The fully grown subtree.
    """
    split_attribute, split_entropy = select_split_attribute(dataset, partition, candidates, target_index)
    logger.debug(
        "Split selected",
        attribute=dataset.attribute_names[split_attribute],
        entropy=split_entropy,
        samples=len(partition),
        remaining_candidates=len(candidates) - 1,
    )
    # Immutable: every child sees the same reduced set.
    reduced = tuple(index for index in candidates if index != split_attribute)

    split_codes = dataset.column(split_attribute)[partition]
    children: dict[int, TreeNode] = {}
    for code in np.unique(split_codes).tolist():
        sub_partition = partition[split_codes == code]
        children[code] = _grow_child(dataset, sub_partition, reduced, target_index, edge_value=code)

    return InternalNode(
        split_attribute=split_attribute,
        edge_value=edge_value,
        fallback_value=fallback_value,
        samples=len(partition),
        children=children,
    )


def _grow_child(
    dataset: EncodedDataset,
    sub_partition: np.ndarray,
    candidates: tuple[int, ...],
    target_index: int,
    *,
    edge_value: int,
) -> TreeNode:
    """Decide between a leaf and a further split for one sub-partition.

    Args:
        dataset (EncodedDataset): The training data.
        sub_partition (np.ndarray): Instance indices sharing `edge_value`.
        candidates (tuple[int, ...]): Attributes still eligible below the parent.
        target_index (int): Target attribute.
        edge_value (int): Parent split code leading to this child.

    Returns:
        TreeNode: A leaf when no candidates remain or the targets are pure,
            otherwise an internal node.
    """
    target_codes = dataset.column(target_index)[sub_partition]
    if not candidates:
        return _make_leaf(target_codes, edge_value=edge_value, value=majority_vote(target_codes))
    if np.all(target_codes == target_codes[0]):
        return _make_leaf(target_codes, edge_value=edge_value, value=int(target_codes[0]))
    return _grow_internal(
        dataset,
        sub_partition,
        candidates,
        target_index,
        edge_value=edge_value,
        fallback_value=majority_vote(target_codes),
    )


def _make_leaf(target_codes: np.ndarray, *, edge_value: int | None, value: int) -> LeafNode:
    return LeafNode(
        edge_value=edge_value,
        value=value,
        samples=len(target_codes),
        support=int(np.count_nonzero(target_codes == value)),
    )
