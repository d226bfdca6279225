"""Pydantic tree, node, rule and result models for the ID3 classifier."""

from __future__ import annotations

import operator
from collections.abc import Callable, Iterator, Sequence
from typing import TYPE_CHECKING, Annotated, Any, Literal

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, model_validator

if TYPE_CHECKING:
    from id3kit.dataset import EncodedDataset

# ---------------------------------------------------------------------------
# Public type aliases
# ---------------------------------------------------------------------------

type PredicateOp = Literal["==", ">=", "<"]

# One step of a root-to-node path: (split attribute index, edge code).
type PathStep = tuple[int, int]

# ---------------------------------------------------------------------------
# Tree nodes
# ---------------------------------------------------------------------------


class LeafNode(BaseModel):
    """A terminal node holding a predicted target code.

    Attributes:
        kind (Literal["leaf"]): Discriminator field; always `"leaf"`.
        edge_value (int | None): Code of the parent's split attribute that
            leads here; `None` only for a root leaf.
        value (int): Predicted target code.
        samples (int): Training instances that reached this leaf.
        support (int): How many of those instances carry `value`.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["leaf"] = Field(default="leaf", description='Discriminator field. Always "leaf".')
    edge_value: int | None = Field(description="Parent split code leading to this node; None at the root.")
    value: int = Field(ge=0, description="Predicted target code.")
    samples: int = Field(ge=1, description="Training instances that reached this leaf.")
    support: int = Field(ge=1, description="Training instances at this leaf whose target equals value.")

    @model_validator(mode="after")
    def _validate_support_within_samples(self) -> LeafNode:
        """Validate that `support` does not exceed `samples`.

        Returns:
            LeafNode: The validated model instance.

        Raises:
            ValueError: If `support > samples`.
        """
        if self.support > self.samples:
            raise ValueError(f"support ({self.support}) must not exceed samples ({self.samples})")
        return self


class InternalNode(BaseModel):
    """A split on one attribute, with one child per code observed in training.

    Attributes:
        kind (Literal["internal"]): Discriminator field; always `"internal"`.
        split_attribute (int): Attribute index whose code selects the child.
        edge_value (int | None): Code of the parent's split attribute that
            leads here; `None` at the root.
        fallback_value (int): Majority target code among the training
            instances that reached this node. Returned by queries whose code
            has no child.
        samples (int): Training instances that reached this node.
        children (dict[int, InternalNode | LeafNode]): Children keyed by edge
            code, in ascending code order.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["internal"] = Field(default="internal", description='Discriminator field. Always "internal".')
    split_attribute: int = Field(ge=0, description="Attribute index this node splits on.")
    edge_value: int | None = Field(description="Parent split code leading to this node; None at the root.")
    fallback_value: int = Field(ge=0, description="Majority target code, returned for codes without a child.")
    samples: int = Field(ge=1, description="Training instances that reached this node.")
    children: dict[int, Annotated[InternalNode | LeafNode, Field(discriminator="kind")]] = Field(
        description="Children keyed by the split attribute's code, in ascending code order.",
    )

    @model_validator(mode="after")
    def _validate_children(self) -> InternalNode:
        """Validate that children exist and each key matches its child's edge value.

        Returns:
            InternalNode: The validated model instance.

        Raises:
            ValueError: If there are no children or a key disagrees with the
                child's `edge_value`.
        """
        if not self.children:
            raise ValueError("an internal node needs at least one child")
        mismatched = [code for code, child in self.children.items() if child.edge_value != code]
        if mismatched:
            raise ValueError(f"children keys do not match child edge values: {mismatched}")
        return self


type TreeNode = InternalNode | LeafNode


class DecisionTree(BaseModel):
    """A trained, immutable ID3 decision tree.

    Built once by `train`; every query is answered from the stored nodes.
    `model_dump_json()` is deterministic because children are stored in
    ascending code order.

    Attributes:
        root (InternalNode | LeafNode): The root node. A leaf only when the
            training data had no attribute besides the target.
        target_index (int): Attribute index of the predicted target.
        attribute_count (int): Number of attributes an encoded instance carries.
        target_values (tuple[int, ...]): Distinct target codes seen in training,
            ascending.

    Examples:
        >>> tree = DecisionTree(
        ...     root=InternalNode(
        ...         split_attribute=0,
        ...         edge_value=None,
        ...         fallback_value=1,
        ...         samples=4,
        ...         children={
        ...             0: LeafNode(edge_value=0, value=0, samples=2, support=2),
        ...             1: LeafNode(edge_value=1, value=1, samples=2, support=2),
        ...         },
        ...     ),
        ...     target_index=1,
        ...     attribute_count=2,
        ...     target_values=(0, 1),
        ... )
        >>> tree.query([0, 0])
        0
        >>> tree.query([7, 0])
        1
    """

    model_config = ConfigDict(frozen=True)

    root: Annotated[InternalNode | LeafNode, Field(discriminator="kind")] = Field(description="The root node.")
    target_index: int = Field(ge=0, description="Attribute index of the predicted target.")
    attribute_count: int = Field(ge=1, description="Number of attributes in an encoded instance.")
    target_values: tuple[int, ...] = Field(
        min_length=1,
        description="Distinct target codes seen in training, ascending.",
    )

    @model_validator(mode="after")
    def _validate_target_index(self) -> DecisionTree:
        """Validate that the target index addresses an attribute.

        Returns:
            DecisionTree: The validated model instance.

        Raises:
            ValueError: If `target_index >= attribute_count`.
        """
        if self.target_index >= self.attribute_count:
            raise ValueError(
                f"target_index ({self.target_index}) must be below attribute_count ({self.attribute_count})"
            )
        return self

    def query(self, instance: Sequence[int] | np.ndarray) -> int:
        """Predict the target code of one encoded instance.

        Descends while a child matches the instance's code at the node's split
        attribute; otherwise answers with that node's fallback value.

        Args:
            instance (Sequence[int] | np.ndarray): Codes of every attribute, in
                attribute order (the target position is ignored).

        Returns:
            int: The predicted target code.
        """
        node: TreeNode = self.root
        while True:
            match node:
                case LeafNode(value=value):
                    return value
                case InternalNode(split_attribute=split_attribute, children=children):
                    child = children.get(int(instance[split_attribute]))
                    if child is None:
                        return node.fallback_value
                    node = child

    def predict(self, dataset: EncodedDataset) -> np.ndarray:
        """Predict every instance of an encoded dataset.

        Args:
            dataset (EncodedDataset): Data encoded with the training layouts.

        Returns:
            np.ndarray: 1-D int64 array of predicted target codes.

        Raises:
            ValueError: If the dataset's column count differs from `attribute_count`.
        """
        if dataset.column_count != self.attribute_count:
            raise ValueError(f"Expected {self.attribute_count} attributes, got {dataset.column_count}")
        return np.fromiter(
            (self.query(dataset.instance(index)) for index in range(dataset.instance_count)),
            dtype=np.int64,
            count=dataset.instance_count,
        )

    @property
    def depth(self) -> int:
        """Length of the longest root-to-leaf path (0 for a root leaf)."""
        return max(len(path) for path, _ in self.iter_leaves())

    @property
    def leaf_count(self) -> int:
        """Number of leaves."""
        return sum(1 for _ in self.iter_leaves())

    @property
    def node_count(self) -> int:
        """Number of nodes, internal and leaf."""
        return _count_nodes(self.root)

    @property
    def split_attributes(self) -> set[int]:
        """Attribute indices used by at least one split."""
        return {attribute for path, _ in self.iter_leaves() for attribute, _code in path}

    def iter_leaves(self) -> Iterator[tuple[list[PathStep], LeafNode]]:
        """Yield every leaf with its root-to-leaf path, in ascending code order.

        Yields:
            tuple[list[PathStep], LeafNode]: The path as `(attribute, code)`
                steps and the leaf it ends at.
        """
        yield from _walk_leaves(self.root, [])


def _walk_leaves(node: TreeNode, path: list[PathStep]) -> Iterator[tuple[list[PathStep], LeafNode]]:
    match node:
        case LeafNode():
            yield path, node
        case InternalNode():
            for code, child in node.children.items():
                yield from _walk_leaves(child, [*path, (node.split_attribute, code)])


def _count_nodes(node: TreeNode) -> int:
    match node:
        case LeafNode():
            return 1
        case InternalNode():
            return 1 + sum(_count_nodes(child) for child in node.children.values())


# ---------------------------------------------------------------------------
# Rules and results
# ---------------------------------------------------------------------------


class Predicate(BaseModel):
    """A single boolean condition on one attribute's raw value.

    Nominal edges become `==` conditions on a label; numeric edges become a
    `>=` lower bound and/or a `<` upper bound of the bucket.

    Attributes:
        variable (str): Attribute name, e.g. `"humidity"`.
        operator (PredicateOp): Comparison operator.
        value (float | str): Label or bucket bound.

    Examples:
        >>> p = Predicate(variable="humidity", operator="<", value=77.5)
        >>> str(p)
        'humidity < 77.5'
        >>> p.eval(70.0)
        True
    """

    variable: str = Field(description="Attribute name the condition applies to.")
    operator: PredicateOp = Field(description="Comparison operator: '==' for labels, '>=' / '<' for bucket bounds.")
    value: float | str = Field(description="Category label or numeric bucket bound.")

    def __str__(self) -> str:
        """Return the predicate as `"<variable> <operator> <value>"`.

        Returns:
            str: Human-readable condition.
        """
        return f"{self.variable} {self.operator} {self.value}"

    def eval(self, x: float | str) -> bool:
        """Evaluate this predicate against a raw value.

        Args:
            x (float | str): The raw attribute value.

        Returns:
            bool: `True` if the condition holds.
        """
        return _OPERATORS[self.operator](x, self.value)


_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    ">=": operator.ge,
    "<": operator.lt,
}


class TreeRule(BaseModel):
    """A root-to-leaf path of a trained tree, decoded to raw values.

    Attributes:
        predicates (list[Predicate]): Conditions along the path. Empty for a
            root leaf.
        prediction (str): Decoded target label (or bucket range for a numeric
            target).
        samples (int): Training instances that reached the leaf.
        confidence (float): Fraction of those instances carrying the prediction.
    """

    predicates: list[Predicate] = Field(description="Conditions along the root-to-leaf path.")
    prediction: str = Field(description="Decoded target label predicted at this leaf.")
    samples: int = Field(ge=1, description="Training instances that reached this leaf.")
    confidence: float = Field(ge=0.0, le=1.0, description="Fraction of leaf instances carrying the prediction.")

    def __str__(self) -> str:
        """Return the rule as `IF ... THEN ...`.

        Returns:
            str: Human-readable rule.
        """
        condition = " AND ".join(str(predicate) for predicate in self.predicates) or "TRUE"
        return f"IF {condition} THEN {self.prediction}"


class Id3Result(BaseModel):
    """Structured output of `build_id3_result`.

    Attributes:
        target (str): Target column name.
        features_considered (list[str]): Feature columns offered to the tree.
        features_used (list[str]): Feature columns that appear in at least one split.
        rules (list[TreeRule]): One rule per leaf.
        metrics (dict[str, float]): `train_accuracy`, plus `test_accuracy`
            when held-out data was given.
        sample_count (int): Training instances.
        depth (int): Depth of the trained tree.
        leaf_count (int): Number of leaves.
        tree (DecisionTree): The trained tree, for further queries.
    """

    target: str = Field(description="Target column name.")
    features_considered: list[str] = Field(description="Feature columns offered to the tree.")
    features_used: list[str] = Field(description="Feature columns that appear in at least one split.")
    rules: list[TreeRule] = Field(description="One rule per leaf node.")
    metrics: dict[str, float] = Field(description='Accuracy metrics, e.g. {"train_accuracy": 0.93}.')
    sample_count: int = Field(ge=1, description="Number of training instances.")
    depth: int = Field(ge=0, description="Depth of the trained tree.")
    leaf_count: int = Field(ge=1, description="Number of leaf nodes.")
    tree: DecisionTree = Field(description="The trained tree.")

    @model_validator(mode="after")
    def _validate_rules_count_matches_leaf_count(self) -> Id3Result:
        """Validate that the number of rules equals the number of leaves.

        Returns:
            Id3Result: The validated model instance.

        Raises:
            ValueError: If `len(rules)` differs from `leaf_count`.
        """
        if len(self.rules) != self.leaf_count:
            raise ValueError(f"rules length ({len(self.rules)}) must equal leaf_count ({self.leaf_count})")
        return self

    @model_validator(mode="after")
    def _validate_features_used_subset(self) -> Id3Result:
        """Validate that every used feature was considered.

        Returns:
            Id3Result: The validated model instance.

        Raises:
            ValueError: If `features_used` names a column outside `features_considered`.
        """
        unknown = sorted(set(self.features_used) - set(self.features_considered))
        if unknown:
            raise ValueError(f"features_used contains columns not in features_considered: {unknown}")
        return self
