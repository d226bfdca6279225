"""Discretization sub-package: layouts and the fit/replay encoders."""

from __future__ import annotations

from id3kit.discretization.discretizer import (
    discretize,
    discretize_with_layouts,
    encode_column,
    fit_column,
)
from id3kit.discretization.layouts import (
    Layout,
    LayoutAdapter,
    NominalMapping,
    NumericBinning,
    fit_nominal,
    fit_numeric,
)

__all__ = [
    "Layout",
    "LayoutAdapter",
    "NominalMapping",
    "NumericBinning",
    "discretize",
    "discretize_with_layouts",
    "encode_column",
    "fit_column",
    "fit_nominal",
    "fit_numeric",
]
