"""Columnar store of category codes produced by the discretizer."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np

from id3kit.exceptions import OutOfBoundsError

if TYPE_CHECKING:
    from id3kit.discretization.layouts import Layout


class EncodedDataset:
    """Read-only columnar table of category codes.

    Codes are held in an int64 matrix of shape `(column_count, instance_count)`
    with the numpy write flag cleared, so neither training nor querying can
    mutate them. The fitted layouts travel with the data so a disjoint dataset
    can be encoded with identical buckets and mappings.

    Attributes:
        layouts (tuple[Layout, ...]): One fitted layout per attribute, in
            attribute order.
        attribute_names (tuple[str, ...]): Display name of every attribute.

    Examples:
        >>> from id3kit.discretization.layouts import NominalMapping
        >>> dataset = EncodedDataset(
        ...     [[0, 1, 1], [1, 0, 0]],
        ...     layouts=[NominalMapping(values=("a", "b")), NominalMapping(values=("x", "y"))],
        ... )
        >>> dataset.value(1, 0)
        1
        >>> dataset.instance(2)
        (1, 0)
    """

    def __init__(
        self,
        columns: Sequence[Sequence[int]] | Sequence[np.ndarray],
        *,
        layouts: Sequence[Layout],
        attribute_names: Sequence[str] | None = None,
    ) -> None:
        """Initialize the dataset from per-attribute code columns.

        Args:
            columns (Sequence[Sequence[int]] | Sequence[np.ndarray]): One code
                column per attribute; every column must have the same length.
            layouts (Sequence[Layout]): One layout per column.
            attribute_names (Sequence[str] | None): Display names; defaults to
                `"attr_<index>"`.

        Raises:
            ValueError: If columns differ in length, or the number of layouts
                or names differs from the number of columns.
        """
        lengths = {len(column) for column in columns}
        if len(lengths) > 1:
            raise ValueError(f"All columns must share the same length, got lengths {sorted(lengths)}")
        if len(layouts) != len(columns):
            raise ValueError(f"Expected {len(columns)} layouts, got {len(layouts)}")
        names = (
            tuple(attribute_names)
            if attribute_names is not None
            else tuple(f"attr_{index}" for index in range(len(columns)))
        )
        if len(names) != len(columns):
            raise ValueError(f"Expected {len(columns)} attribute names, got {len(names)}")

        instance_count = lengths.pop() if lengths else 0
        codes = np.empty((len(columns), instance_count), dtype=np.int64)
        for attribute_index, column in enumerate(columns):
            codes[attribute_index] = np.asarray(column, dtype=np.int64)
        codes.setflags(write=False)

        self._codes = codes
        self.layouts: tuple[Layout, ...] = tuple(layouts)
        self.attribute_names: tuple[str, ...] = names

    def __repr__(self) -> str:
        """Return a compact representation with the dataset shape.

        Returns:
            str: `EncodedDataset(columns=..., instances=...)`.
        """
        return f"{self.__class__.__name__}(columns={self.column_count}, instances={self.instance_count})"

    @property
    def column_count(self) -> int:
        """Number of attributes."""
        return int(self._codes.shape[0])

    @property
    def instance_count(self) -> int:
        """Number of instances."""
        return int(self._codes.shape[1])

    def value(self, attribute_index: int, instance_index: int) -> int:
        """Return the code of one cell.

        Args:
            attribute_index (int): Attribute position.
            instance_index (int): Instance position.

        Returns:
            int: The category code.

        Raises:
            OutOfBoundsError: If either index is outside the dataset's shape.
        """
        self._check_attribute(attribute_index)
        if not 0 <= instance_index < self.instance_count:
            raise OutOfBoundsError(axis="instance", index=instance_index, size=self.instance_count)
        return int(self._codes[attribute_index, instance_index])

    def column(self, attribute_index: int) -> np.ndarray:
        """Return a read-only view of one attribute's codes.

        Args:
            attribute_index (int): Attribute position.

        Returns:
            np.ndarray: 1-D int64 view; writing to it raises `ValueError`.

        Raises:
            OutOfBoundsError: If `attribute_index` is outside the dataset's shape.
        """
        self._check_attribute(attribute_index)
        return self._codes[attribute_index]

    def instance(self, instance_index: int) -> tuple[int, ...]:
        """Return every attribute's code for one instance, in attribute order.

        Args:
            instance_index (int): Instance position.

        Returns:
            tuple[int, ...]: The encoded instance, suitable for `DecisionTree.query`.

        Raises:
            OutOfBoundsError: If `instance_index` is outside the dataset's shape.
        """
        if not 0 <= instance_index < self.instance_count:
            raise OutOfBoundsError(axis="instance", index=instance_index, size=self.instance_count)
        return tuple(int(code) for code in self._codes[:, instance_index])

    def _check_attribute(self, attribute_index: int) -> None:
        if not 0 <= attribute_index < self.column_count:
            raise OutOfBoundsError(axis="attribute", index=attribute_index, size=self.column_count)
