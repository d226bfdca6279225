"""Tree sub-package: split evaluation, induction, models, and rule extraction."""

from __future__ import annotations

from id3kit.tree.fitting import build_id3_result, compute_metrics, describe_code, extract_rules
from id3kit.tree.induction import train
from id3kit.tree.models import (
    DecisionTree,
    Id3Result,
    InternalNode,
    LeafNode,
    PathStep,
    Predicate,
    PredicateOp,
    TreeNode,
    TreeRule,
)
from id3kit.tree.splitting import CountTable, entropy, majority_vote, select_split_attribute, split_entropy

__all__ = [
    "CountTable",
    "DecisionTree",
    "Id3Result",
    "InternalNode",
    "LeafNode",
    "PathStep",
    "Predicate",
    "PredicateOp",
    "TreeNode",
    "TreeRule",
    "build_id3_result",
    "compute_metrics",
    "describe_code",
    "entropy",
    "extract_rules",
    "majority_vote",
    "select_split_attribute",
    "split_entropy",
    "train",
]
