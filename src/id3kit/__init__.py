"""id3kit: ID3 decision tree induction over discretized tabular data."""

from loguru import logger

from id3kit.column_source import ColumnSource, NominalValue, NumericValue, PolarsColumnSource
from id3kit.dataset import EncodedDataset
from id3kit.discretization import discretize, discretize_with_layouts
from id3kit.exceptions import EmptyDatasetError, LayoutMismatchError, OutOfBoundsError, UnknownCategoryError
from id3kit.logging import PACKAGE_NAME, enable_logging
from id3kit.tree import DecisionTree, Id3Result, build_id3_result, train

logger.disable(PACKAGE_NAME)  # noqa: RUF067 - Disable logging for the id3kit module by default

__all__ = [
    "ColumnSource",
    "DecisionTree",
    "EmptyDatasetError",
    "EncodedDataset",
    "Id3Result",
    "LayoutMismatchError",
    "NominalValue",
    "NumericValue",
    "OutOfBoundsError",
    "PolarsColumnSource",
    "UnknownCategoryError",
    "build_id3_result",
    "discretize",
    "discretize_with_layouts",
    "enable_logging",
    "train",
]
