"""Tests for the ColumnSource protocol and the Polars adapter."""

from __future__ import annotations

from datetime import date

import polars as pl
import pytest
from pytest_check import check

from id3kit.column_source import ColumnSource, NominalValue, NumericValue, PolarsColumnSource, classify_dtype


class TestClassifyDtype:
    """Tests for `classify_dtype`."""

    @pytest.mark.parametrize("dtype", [pl.Int8(), pl.Int64(), pl.UInt32(), pl.Float32(), pl.Float64()])
    def test_numeric_dtypes(self, dtype: pl.DataType) -> None:
        """Integer and float dtypes should be numeric."""
        assert classify_dtype(dtype) == "numeric"

    @pytest.mark.parametrize("dtype", [pl.String(), pl.Boolean(), pl.Categorical(), pl.Enum(["low", "high"])])
    def test_nominal_dtypes(self, dtype: pl.DataType) -> None:
        """String-like, boolean and enum dtypes should be nominal."""
        assert classify_dtype(dtype) == "nominal"

    def test_unsupported_dtype(self) -> None:
        """Temporal dtypes cannot be discretized."""
        assert classify_dtype(pl.Date()) is None


class TestPolarsColumnSource:
    """Tests for `PolarsColumnSource`."""

    def test_satisfies_protocol(self) -> None:
        """The adapter should be recognized as a ColumnSource."""
        source = PolarsColumnSource(pl.DataFrame({"a": [1, 2]}))

        assert isinstance(source, ColumnSource)

    def test_shape_and_names(self) -> None:
        """Shape and names should follow the DataFrame's columns and rows."""
        # Arrange
        df = pl.DataFrame({
            "outlook": ["sunny", "rain", "overcast"],
            "humidity": [85, 70, 90],
        })

        # Act
        source = PolarsColumnSource(df)

        # Assert
        with check:
            assert source.attribute_count == 2
        with check:
            assert source.instance_count == 3
        with check:
            assert source.attribute_names == ["outlook", "humidity"]
        with check:
            assert source.attribute_name(1) == "humidity"

    def test_raw_values_are_tagged_by_kind(self) -> None:
        """Numeric cells become NumericValue floats; nominal cells become NominalValue labels."""
        # Arrange
        df = pl.DataFrame({"outlook": ["sunny", "rain"], "humidity": [85, 70]})

        # Act
        source = PolarsColumnSource(df)

        # Assert
        with check:
            assert source.attribute_kind(0) == "nominal"
        with check:
            assert source.attribute_kind(1) == "numeric"
        with check:
            assert source.raw_value(0, 1) == NominalValue("rain")
        with check:
            assert source.raw_value(1, 0) == NumericValue(85.0)

    def test_boolean_column_is_nominal(self) -> None:
        """Boolean columns should surface as the labels 'true' and 'false'."""
        source = PolarsColumnSource(pl.DataFrame({"windy": [True, False]}))

        with check:
            assert source.attribute_kind(0) == "nominal"
        with check:
            assert source.raw_value(0, 0) == NominalValue("true")
        with check:
            assert source.raw_value(0, 1) == NominalValue("false")

    def test_rejects_unsupported_dtype(self) -> None:
        """A temporal column should raise TypeError naming the column."""
        df = pl.DataFrame({"day": [date(2024, 1, 1), date(2024, 1, 2)]})

        with pytest.raises(TypeError, match="day"):
            PolarsColumnSource(df)

    def test_rejects_nulls(self) -> None:
        """Columns with null values should raise ValueError naming the column."""
        df = pl.DataFrame({"humidity": [85.0, None, 70.0]})

        with pytest.raises(ValueError, match="humidity"):
            PolarsColumnSource(df)

    def test_rejects_nan(self) -> None:
        """Float columns holding NaN should raise ValueError naming the column."""
        df = pl.DataFrame({"humidity": [85.0, float("nan"), 70.0]})

        with pytest.raises(ValueError, match="humidity.*NaN"):
            PolarsColumnSource(df)
