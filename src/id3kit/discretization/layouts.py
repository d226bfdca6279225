"""Pydantic layout models: the fitted, replayable rules that turn raw columns into category codes."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Annotated, Literal

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from id3kit.exceptions import UnknownCategoryError

# ---------------------------------------------------------------------------
# Public models
# ---------------------------------------------------------------------------


class NumericBinning(BaseModel):
    """Equal-width binning of a numeric attribute.

    A value `x` maps to `floor(((x - min) / (max - min)) * bucket_count)`,
    clamped to `[0, bucket_count - 1]`. Values at or above `max` land in the
    top bucket and values below `min` land in bucket 0, so out-of-range test
    values never fail.

    Attributes:
        kind (Literal["numeric"]): Discriminator field; always `"numeric"`.
        min (float): Smallest value seen while fitting (0.0 for an empty column).
        max (float): Largest value seen while fitting (0.0 for an empty column).
        bucket_count (int): `floor(sqrt(n))` for a fitted column of `n` values.

    Examples:
        >>> layout = NumericBinning(kind="numeric", min=1.0, max=4.0, bucket_count=2)
        >>> layout.encode([1.0, 2.0, 3.0, 4.0, 9.0]).tolist()
        [0, 0, 1, 1, 1]
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["numeric"] = Field(
        default="numeric",
        description='Discriminator field. Always "numeric".',
    )
    min: float = Field(allow_inf_nan=False, description="Smallest value seen while fitting.")
    max: float = Field(allow_inf_nan=False, description="Largest value seen while fitting.")
    bucket_count: int = Field(ge=0, description="Number of equal-width buckets; floor(sqrt(n)) at fit time.")

    @model_validator(mode="after")
    def _validate_range(self) -> NumericBinning:
        """Validate that `min` does not exceed `max`.

        Returns:
            NumericBinning: The validated model instance.

        Raises:
            ValueError: If `min > max`.
        """
        if self.min > self.max:
            raise ValueError(f"min ({self.min}) must not exceed max ({self.max})")
        return self

    @property
    def cardinality(self) -> int:
        """Number of distinct codes this layout can produce."""
        return max(self.bucket_count, 1)

    def encode(self, values: Sequence[float] | np.ndarray) -> np.ndarray:
        """Map numeric values to clamped bucket codes.

        A constant fitted column (`max == min`) has no width; values equal to
        the constant encode to 0, values above clamp to the top bucket and
        values below clamp to 0.

        Args:
            values (Sequence[float] | np.ndarray): Raw numeric values.

        Returns:
            np.ndarray: 1-D int64 array of codes in `[0, cardinality)`.
        """
        array = np.asarray(values, dtype=np.float64)
        top_code = self.cardinality - 1
        with np.errstate(divide="ignore", invalid="ignore"):
            scaled = ((array - self.min) / (self.max - self.min)) * self.bucket_count
        scaled = np.nan_to_num(scaled, nan=0.0, posinf=float(top_code), neginf=0.0)
        return np.clip(np.floor(scaled), 0, top_code).astype(np.int64)

    def bounds(self, code: int) -> tuple[float | None, float | None]:
        """Return the half-open value interval `[lower, upper)` covered by a code.

        The bottom bucket has no lower bound and the top bucket no upper bound
        because out-of-range values clamp into them.

        Args:
            code (int): A bucket code in `[0, cardinality)`.

        Returns:
            tuple[float | None, float | None]: `(lower, upper)`; `None` marks an
                open end.

        Raises:
            ValueError: If `code` is outside `[0, cardinality)`.
        """
        if not 0 <= code < self.cardinality:
            raise ValueError(f"code {code} is outside [0, {self.cardinality})")
        width = (self.max - self.min) / self.bucket_count if self.bucket_count > 0 else 0.0
        lower = None if code == 0 else self.min + code * width
        upper = None if code == self.cardinality - 1 else self.min + (code + 1) * width
        return lower, upper


class NominalMapping(BaseModel):
    """Value-to-code mapping of a nominal attribute.

    Codes follow the order in which distinct values were first observed while
    fitting: `values[code]` is the label for `code`.

    Attributes:
        kind (Literal["nominal"]): Discriminator field; always `"nominal"`.
        values (tuple[str, ...]): Distinct labels in first-seen order.

    Examples:
        >>> layout = NominalMapping(kind="nominal", values=("sunny", "rain"))
        >>> layout.encode(["rain", "sunny", "rain"], attribute_index=0).tolist()
        [1, 0, 1]
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["nominal"] = Field(
        default="nominal",
        description='Discriminator field. Always "nominal".',
    )
    values: tuple[str, ...] = Field(description="Distinct labels in first-seen order; the position is the code.")

    @model_validator(mode="after")
    def _validate_unique_values(self) -> NominalMapping:
        """Validate that no label appears twice.

        Returns:
            NominalMapping: The validated model instance.

        Raises:
            ValueError: If `values` contains duplicates.
        """
        if len(set(self.values)) != len(self.values):
            raise ValueError("values must not contain duplicate labels")
        return self

    @property
    def cardinality(self) -> int:
        """Number of distinct codes this layout can produce."""
        return len(self.values)

    @property
    def codes(self) -> dict[str, int]:
        """Label-to-code lookup table."""
        return {label: code for code, label in enumerate(self.values)}

    def encode(self, labels: Sequence[str], *, attribute_index: int) -> np.ndarray:
        """Look up the code of every label.

        Args:
            labels (Sequence[str]): Raw nominal labels.
            attribute_index (int): Attribute the labels belong to, reported in errors.

        Returns:
            np.ndarray: 1-D int64 array of codes.

        Raises:
            UnknownCategoryError: If a label was never seen while fitting.
        """
        lookup = self.codes
        encoded = np.empty(len(labels), dtype=np.int64)
        for position, label in enumerate(labels):
            code = lookup.get(label)
            if code is None:
                raise UnknownCategoryError(attribute_index=attribute_index, value=label)
            encoded[position] = code
        return encoded

    def label(self, code: int) -> str:
        """Return the label of a code.

        Args:
            code (int): A code in `[0, cardinality)`.

        Returns:
            str: The label first seen at that position.
        """
        return self.values[code]


# Use this alias when accepting a layout of either kind; Pydantic selects the model from `kind`.
type Layout = Annotated[NumericBinning | NominalMapping, Field(discriminator="kind")]

LayoutAdapter: TypeAdapter[list[Layout]] = TypeAdapter(list[Layout])


# ---------------------------------------------------------------------------
# Fitting
# ---------------------------------------------------------------------------


def fit_numeric(values: Sequence[float] | np.ndarray) -> NumericBinning:
    """Fit an equal-width binning to a numeric column.

    Args:
        values (Sequence[float] | np.ndarray): The training column.

    Returns:
        NumericBinning: Layout with `bucket_count = floor(sqrt(len(values)))`;
            an empty column yields `min = max = 0.0` and zero buckets.

    Raises:
        pydantic.ValidationError: If the column holds NaN or infinite values.
    """
    array = np.asarray(values, dtype=np.float64)
    if array.size == 0:
        return NumericBinning(min=0.0, max=0.0, bucket_count=0)
    bucket_count = math.isqrt(array.size)
    return NumericBinning(min=float(array.min()), max=float(array.max()), bucket_count=bucket_count)


def fit_nominal(labels: Sequence[str]) -> NominalMapping:
    """Fit a first-seen-order mapping to a nominal column.

    Args:
        labels (Sequence[str]): The training column.

    Returns:
        NominalMapping: Layout whose codes follow first appearance in `labels`.
    """
    return NominalMapping(values=tuple(dict.fromkeys(labels)))
