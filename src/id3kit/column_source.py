"""Column sources: the per-attribute, per-instance raw values fed to the discretizer.

A column source exposes a rectangular table whose attributes are either
numeric or nominal. The discretizer only talks to the `ColumnSource`
protocol; `PolarsColumnSource` is the bundled adapter for Polars DataFrames.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Literal, Protocol, runtime_checkable

import polars as pl

type AttributeKind = Literal["numeric", "nominal"]


@dataclass(frozen=True, slots=True)
class NumericValue:
    """A raw numeric cell.

    Attributes:
        value (float): The cell value.
    """

    value: float


@dataclass(frozen=True, slots=True)
class NominalValue:
    """A raw categorical cell.

    Attributes:
        label (str): The category label.
    """

    label: str


type RawValue = NumericValue | NominalValue


@runtime_checkable
class ColumnSource(Protocol):
    """Protocol for tabular data consumed by the discretizer.

    Implementations must report their shape, the kind of every attribute, and
    return a tagged raw value for any in-range cell. Every cell of a numeric
    attribute must be a `NumericValue`, every cell of a nominal attribute a
    `NominalValue`.
    """

    @property
    def attribute_count(self) -> int:
        """Number of attributes (columns)."""
        ...

    @property
    def instance_count(self) -> int:
        """Number of instances (rows)."""
        ...

    def attribute_name(self, attribute_index: int) -> str:
        """Return the display name of an attribute."""
        ...

    def attribute_kind(self, attribute_index: int) -> AttributeKind:
        """Return whether an attribute is numeric or nominal."""
        ...

    def raw_value(self, attribute_index: int, instance_index: int) -> RawValue:
        """Return the tagged raw value of one cell."""
        ...


# ---------------------------------------------------------------------------
# Polars adapter
# ---------------------------------------------------------------------------

_NUMERIC_DTYPES: Final[frozenset[type[pl.DataType]]] = frozenset({
    pl.Int8,
    pl.Int16,
    pl.Int32,
    pl.Int64,
    pl.UInt8,
    pl.UInt16,
    pl.UInt32,
    pl.UInt64,
    pl.Float32,
    pl.Float64,
})
_NOMINAL_DTYPES: Final[frozenset[type[pl.DataType]]] = frozenset({
    pl.Boolean,
    pl.String,
    pl.Categorical,
})


def classify_dtype(dtype: pl.DataType) -> AttributeKind | None:
    """Map a Polars dtype onto an attribute kind.

    Parameterized dtypes such as `Enum(["a", "b"])` do not hash like their
    bare class, so `Enum` is matched with `isinstance`.

    Args:
        dtype (pl.DataType): The dtype of a column.

    Returns:
        AttributeKind | None: `"numeric"` or `"nominal"`, or `None` for
            dtypes that cannot be discretized (dates, lists, structs, ...).
    """
    if dtype in _NUMERIC_DTYPES:
        return "numeric"
    if dtype in _NOMINAL_DTYPES or isinstance(dtype, (pl.Enum, pl.Categorical)):
        return "nominal"
    return None


class PolarsColumnSource:
    """Adapt a Polars DataFrame to the `ColumnSource` protocol.

    Numeric columns are materialized as float lists and nominal columns as
    string lists once, at construction.

    Examples:
        >>> df = pl.DataFrame({"outlook": ["sunny", "rain"], "humidity": [85, 70]})
        >>> source = PolarsColumnSource(df)
        >>> source.attribute_kind(1)
        'numeric'
        >>> source.raw_value(0, 1)
        NominalValue(label='rain')
    """

    def __init__(self, df: pl.DataFrame) -> None:
        """Initialize the adapter.

        Args:
            df (pl.DataFrame): The table to expose. Every column must have a
                numeric, string, categorical, enum, or boolean dtype and no
                null or NaN values.

        Raises:
            TypeError: If a column has a dtype that cannot be discretized.
            ValueError: If a column contains null or NaN values.
        """
        self._names: list[str] = list(df.columns)
        self._kinds: list[AttributeKind] = []
        self._columns: list[list[float] | list[str]] = []
        self._height = df.height

        for series in df.iter_columns():
            kind = classify_dtype(series.dtype)
            if kind is None:
                raise TypeError(f"Column '{series.name}' has unsupported dtype {series.dtype}")
            if series.null_count() > 0:
                raise ValueError(f"Column '{series.name}' contains null values. Remove or impute nulls first.")
            if series.dtype.is_float() and series.is_nan().any():
                raise ValueError(f"Column '{series.name}' contains NaN values. Remove or impute them first.")
            self._kinds.append(kind)
            if kind == "numeric":
                self._columns.append(series.cast(pl.Float64).to_list())
            else:
                self._columns.append(series.cast(pl.String).to_list())

    @property
    def attribute_count(self) -> int:
        """Number of attributes (columns)."""
        return len(self._names)

    @property
    def instance_count(self) -> int:
        """Number of instances (rows)."""
        return self._height

    @property
    def attribute_names(self) -> list[str]:
        """Column names in attribute order."""
        return list(self._names)

    def attribute_name(self, attribute_index: int) -> str:
        """Return the column name of an attribute.

        Args:
            attribute_index (int): Attribute position.

        Returns:
            str: The column name.
        """
        return self._names[attribute_index]

    def attribute_kind(self, attribute_index: int) -> AttributeKind:
        """Return whether an attribute is numeric or nominal.

        Args:
            attribute_index (int): Attribute position.

        Returns:
            AttributeKind: The attribute's kind.
        """
        return self._kinds[attribute_index]

    def raw_value(self, attribute_index: int, instance_index: int) -> RawValue:
        """Return the tagged raw value of one cell.

        Args:
            attribute_index (int): Attribute position.
            instance_index (int): Row position.

        Returns:
            RawValue: `NumericValue` or `NominalValue` depending on the column kind.
        """
        cell = self._columns[attribute_index][instance_index]
        if self._kinds[attribute_index] == "numeric":
            return NumericValue(float(cell))
        return NominalValue(str(cell))
