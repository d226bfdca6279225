"""Rule extraction, metrics computation, and DataFrame pipeline orchestration for ID3 trees."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final

import polars as pl
from loguru import logger
from sklearn.metrics import accuracy_score

from id3kit.column_source import PolarsColumnSource
from id3kit.dataset import EncodedDataset
from id3kit.discretization import Layout, NominalMapping, NumericBinning, discretize, discretize_with_layouts
from id3kit.exceptions import EmptyDatasetError
from id3kit.logging import FIT_LEVEL
from id3kit.tree.induction import train
from id3kit.tree.models import DecisionTree, Id3Result, PathStep, Predicate, TreeRule

# ---------------------------------------------------------------------------
# Module-level constants
# ---------------------------------------------------------------------------

THRESHOLD_DECIMAL_PLACES: Final[int] = 4  # Decimal places for rounding numeric bucket bounds in predicates.


# ---------------------------------------------------------------------------
# Public interface -- Rule extraction
# ---------------------------------------------------------------------------


def extract_rules(
    tree: DecisionTree,
    *,
    layouts: Sequence[Layout],
    attribute_names: Sequence[str],
) -> list[TreeRule]:
    """Extract one human-readable rule per leaf of a trained tree.

    Each edge on the root-to-leaf path is decoded through the layout of its
    split attribute: nominal codes become `==` label predicates, numeric
    bucket codes become `>=` / `<` bound predicates (open ends are omitted).
    Rules come out in ascending code order, so the list is deterministic.

    Args:
        tree (DecisionTree): A trained tree.
        layouts (Sequence[Layout]): Layouts the training data was encoded with.
        attribute_names (Sequence[str]): Display name of every attribute.

    Returns:
        list[TreeRule]: One rule per leaf.

    Raises:
        ValueError: If the number of layouts or names differs from the tree's
            attribute count.
    """
    if len(layouts) != tree.attribute_count or len(attribute_names) != tree.attribute_count:
        raise ValueError(
            f"Expected {tree.attribute_count} layouts and names, got {len(layouts)} and {len(attribute_names)}"
        )
    target_layout = layouts[tree.target_index]
    return [
        TreeRule(
            predicates=_decode_path(path, layouts=layouts, attribute_names=attribute_names),
            prediction=describe_code(target_layout, leaf.value),
            samples=leaf.samples,
            confidence=round(leaf.support / leaf.samples, THRESHOLD_DECIMAL_PLACES),
        )
        for path, leaf in tree.iter_leaves()
    ]


def describe_code(layout: Layout, code: int) -> str:
    """Render a category code as the raw values it stands for.

    Args:
        layout (Layout): The attribute's layout.
        code (int): A code produced by that layout.

    Returns:
        str: The label for nominal layouts; an interval such as
            `"[2.5, 4.0)"` or `"< 2.5"` for numeric layouts.
    """
    match layout:
        case NominalMapping():
            return layout.label(code)
        case NumericBinning():
            lower, upper = layout.bounds(code)
            if lower is None and upper is None:
                return "any"
            if lower is None:
                return f"< {round(upper, THRESHOLD_DECIMAL_PLACES)}"  # type: ignore[arg-type]
            if upper is None:
                return f">= {round(lower, THRESHOLD_DECIMAL_PLACES)}"
            return f"[{round(lower, THRESHOLD_DECIMAL_PLACES)}, {round(upper, THRESHOLD_DECIMAL_PLACES)})"


# ---------------------------------------------------------------------------
# Public interface -- Metrics
# ---------------------------------------------------------------------------


def compute_metrics(tree: DecisionTree, dataset: EncodedDataset) -> dict[str, float]:
    """Compute the accuracy of a tree on an encoded dataset.

    Args:
        tree (DecisionTree): A trained tree.
        dataset (EncodedDataset): Data encoded with the training layouts.

    Returns:
        dict[str, float]: `{"accuracy": <float>}`.

    Raises:
        EmptyDatasetError: If the dataset has zero instances.
    """
    if dataset.instance_count == 0:
        raise EmptyDatasetError("Cannot compute metrics on a dataset with zero instances")
    predictions = tree.predict(dataset)
    return {"accuracy": float(accuracy_score(dataset.column(tree.target_index), predictions))}


# ---------------------------------------------------------------------------
# Public interface -- Pipeline orchestration
# ---------------------------------------------------------------------------


def build_id3_result(
    train_df: pl.DataFrame,
    target: str,
    *,
    test_df: pl.DataFrame | None = None,
    features: list[str] | None = None,
) -> Id3Result:
    """Discretize, train, and summarize an ID3 tree from Polars DataFrames.

    Layouts are fitted on `train_df` only and replayed on `test_df`, so both
    frames share bucket boundaries and category codes.

    Args:
        train_df (pl.DataFrame): Training data containing features and target.
        target (str): Name of the target column.
        test_df (pl.DataFrame | None): Optional held-out data with the same
            feature and target columns. Adds `test_accuracy` to the metrics.
        features (list[str] | None): Feature columns to offer the tree. When
            `None`, all columns except `target` are used.

    Returns:
        Id3Result: Rules, metrics, and the trained tree.

    Raises:
        ValueError: If the target or a feature column is missing, no feature
            remains, or the training frame is empty.
        UnknownCategoryError: If `test_df` holds a category absent from `train_df`.
    """
    feature_columns = features if features is not None else [col for col in train_df.columns if col != target]
    _validate_columns(train_df, target, feature_columns, frame_name="train_df")
    if test_df is not None:
        _validate_columns(test_df, target, feature_columns, frame_name="test_df")
    if train_df.height == 0:
        raise ValueError("train_df has no rows; at least one training instance is required.")

    logger.log(FIT_LEVEL, "Building ID3 result", target=target, features=feature_columns, rows=train_df.height)
    selected_columns = [*feature_columns, target]
    target_index = len(feature_columns)

    train_source = PolarsColumnSource(train_df.select(selected_columns))
    train_dataset, layouts = discretize(train_source)
    tree = train(train_dataset, target_index)

    metrics = {"train_accuracy": compute_metrics(tree, train_dataset)["accuracy"]}
    if test_df is not None and test_df.height > 0:
        test_dataset = discretize_with_layouts(PolarsColumnSource(test_df.select(selected_columns)), layouts)
        metrics["test_accuracy"] = compute_metrics(tree, test_dataset)["accuracy"]

    used_indices = tree.split_attributes
    return Id3Result(
        target=target,
        features_considered=feature_columns,
        features_used=[name for index, name in enumerate(feature_columns) if index in used_indices],
        rules=extract_rules(tree, layouts=layouts, attribute_names=selected_columns),
        metrics=metrics,
        sample_count=train_dataset.instance_count,
        depth=tree.depth,
        leaf_count=tree.leaf_count,
        tree=tree,
    )


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _decode_path(
    path: list[PathStep],
    *,
    layouts: Sequence[Layout],
    attribute_names: Sequence[str],
) -> list[Predicate]:
    """Translate `(attribute, code)` path steps into raw-value predicates.

    Args:
        path (list[PathStep]): Root-to-leaf steps.
        layouts (Sequence[Layout]): Layout of every attribute.
        attribute_names (Sequence[str]): Name of every attribute.

    Returns:
        list[Predicate]: Predicates in path order. A numeric bucket covering
            every value contributes none.
    """
    predicates: list[Predicate] = []
    for attribute_index, code in path:
        name = attribute_names[attribute_index]
        match layouts[attribute_index]:
            case NominalMapping() as nominal:
                predicates.append(Predicate(variable=name, operator="==", value=nominal.label(code)))
            case NumericBinning() as numeric:
                lower, upper = numeric.bounds(code)
                if lower is not None:
                    predicates.append(
                        Predicate(variable=name, operator=">=", value=round(lower, THRESHOLD_DECIMAL_PLACES))
                    )
                if upper is not None:
                    predicates.append(
                        Predicate(variable=name, operator="<", value=round(upper, THRESHOLD_DECIMAL_PLACES))
                    )
    return predicates


def _validate_columns(df: pl.DataFrame, target: str, feature_columns: list[str], *, frame_name: str) -> None:
    """Raise `ValueError` if the target or any feature column is missing, or no feature is given.

    Args:
        df (pl.DataFrame): The frame to check.
        target (str): The target column name.
        feature_columns (list[str]): Feature column names.
        frame_name (str): Name of the frame, used in error messages.

    Raises:
        ValueError: If `target` or a feature is absent, the target is listed as
            a feature, or `feature_columns` is empty.
    """
    if target not in df.columns:
        raise ValueError(f"Target column '{target}' not found in {frame_name}.")
    if target in feature_columns:
        raise ValueError(f"Target column '{target}' cannot also be a feature.")
    if not feature_columns:
        raise ValueError("At least one feature column is required.")
    missing_columns = [col for col in feature_columns if col not in df.columns]
    if missing_columns:
        raise ValueError(f"Requested feature columns not found in {frame_name}: {missing_columns}")
