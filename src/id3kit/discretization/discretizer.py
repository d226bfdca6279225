"""Discretize column sources into encoded datasets, fitting or replaying layouts."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from loguru import logger

from id3kit.column_source import AttributeKind, ColumnSource, NominalValue, NumericValue
from id3kit.dataset import EncodedDataset
from id3kit.discretization.layouts import Layout, NominalMapping, NumericBinning, fit_nominal, fit_numeric
from id3kit.exceptions import LayoutMismatchError, UnknownCategoryError
from id3kit.logging import FIT_LEVEL

# ---------------------------------------------------------------------------
# Public interface -- Column level
# ---------------------------------------------------------------------------


def fit_column(
    source: ColumnSource,
    attribute_index: int,
) -> tuple[Layout, np.ndarray]:
    """Fit a layout to one attribute of a column source and encode it.

    Args:
        source (ColumnSource): The training data.
        attribute_index (int): Attribute to fit.

    Returns:
        tuple[Layout, np.ndarray]: A 2-tuple of `(layout, codes)` where
            *codes* is the 1-D int64 encoding of the column under *layout*.
    """
    kind = source.attribute_kind(attribute_index)
    raw_column = _read_column(source, attribute_index, kind)
    layout: Layout
    if kind == "numeric":
        layout = fit_numeric(raw_column)  # type: ignore[arg-type]
    else:
        layout = fit_nominal(raw_column)  # type: ignore[arg-type]
    logger.debug(
        "Layout fitted",
        attribute=source.attribute_name(attribute_index),
        kind=kind,
        cardinality=layout.cardinality,
    )
    return layout, encode_column(raw_column, layout, attribute_index=attribute_index)


def encode_column(
    raw_column: Sequence[float] | Sequence[str],
    layout: Layout,
    *,
    attribute_index: int,
) -> np.ndarray:
    """Encode raw values with a previously fitted layout.

    Numeric values outside the fitted range clamp into the edge buckets.
    Nominal values absent from the mapping are surfaced, never defaulted.

    Args:
        raw_column (Sequence[float] | Sequence[str]): Raw values of one attribute.
        layout (Layout): The layout fitted for that attribute.
        attribute_index (int): Attribute position, reported in errors.

    Returns:
        np.ndarray: 1-D int64 array of codes.

    Raises:
        UnknownCategoryError: If a nominal value was never seen while fitting.
    """
    match layout:
        case NumericBinning():
            return layout.encode(raw_column)  # type: ignore[arg-type]
        case NominalMapping():
            return layout.encode(raw_column, attribute_index=attribute_index)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Public interface -- Dataset level
# ---------------------------------------------------------------------------


def discretize(source: ColumnSource) -> tuple[EncodedDataset, list[Layout]]:
    """Fit one layout per attribute and encode the training data.

    Args:
        source (ColumnSource): The training data.

    Returns:
        tuple[EncodedDataset, list[Layout]]: The encoded dataset and the
            fitted layouts in attribute order (also carried by the dataset).
    """
    logger.log(
        FIT_LEVEL,
        "Discretizing training data",
        attributes=source.attribute_count,
        instances=source.instance_count,
    )
    layouts: list[Layout] = []
    columns: list[np.ndarray] = []
    for attribute_index in range(source.attribute_count):
        layout, codes = fit_column(source, attribute_index)
        layouts.append(layout)
        columns.append(codes)
    dataset = EncodedDataset(columns, layouts=layouts, attribute_names=_attribute_names(source))
    return dataset, layouts


def discretize_with_layouts(source: ColumnSource, layouts: Sequence[Layout]) -> EncodedDataset:
    """Encode a held-out column source with layouts fitted on training data.

    Args:
        source (ColumnSource): The data to encode, with the same attributes
            (in the same order) as the training data.
        layouts (Sequence[Layout]): Layouts returned by `discretize`.

    Returns:
        EncodedDataset: The encoded data, carrying the same layouts.

    Raises:
        LayoutMismatchError: If the number of layouts differs from the number
            of attributes, or a layout's kind differs from its column's kind.
        UnknownCategoryError: If a nominal value was never seen while fitting.
    """
    logger.log(
        FIT_LEVEL,
        "Discretizing with saved layouts",
        attributes=source.attribute_count,
        instances=source.instance_count,
    )
    if len(layouts) != source.attribute_count:
        raise LayoutMismatchError(
            attribute_index=None,
            expected=str(len(layouts)),
            actual=str(source.attribute_count),
        )

    columns: list[np.ndarray] = []
    for attribute_index, layout in enumerate(layouts):
        kind = source.attribute_kind(attribute_index)
        if kind != layout.kind:
            raise LayoutMismatchError(attribute_index=attribute_index, expected=layout.kind, actual=kind)
        raw_column = _read_column(source, attribute_index, kind)
        try:
            columns.append(encode_column(raw_column, layout, attribute_index=attribute_index))
        except UnknownCategoryError as exc:
            logger.warning(
                "Unknown category in held-out data",
                attribute=source.attribute_name(attribute_index),
                attribute_index=exc.attribute_index,
                value=exc.value,
            )
            raise
    return EncodedDataset(columns, layouts=layouts, attribute_names=_attribute_names(source))


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _read_column(source: ColumnSource, attribute_index: int, kind: AttributeKind) -> list[float] | list[str]:
    """Collect one attribute's raw values, checking each cell's tag against the attribute kind.

    Args:
        source (ColumnSource): The data to read.
        attribute_index (int): Attribute to read.
        kind (AttributeKind): The kind reported by the source for this attribute.

    Returns:
        list[float] | list[str]: Untagged values in instance order.

    Raises:
        TypeError: If a cell's tag disagrees with the attribute kind.
    """
    values: list[float] | list[str] = []
    for instance_index in range(source.instance_count):
        match source.raw_value(attribute_index, instance_index):
            case NumericValue(value=value) if kind == "numeric":
                values.append(value)  # type: ignore[arg-type]
            case NominalValue(label=label) if kind == "nominal":
                values.append(label)  # type: ignore[arg-type]
            case other:
                raise TypeError(
                    f"Attribute {attribute_index} is {kind} but instance {instance_index} holds {other!r}"
                )
    return values


def _attribute_names(source: ColumnSource) -> list[str]:
    return [source.attribute_name(index) for index in range(source.attribute_count)]
