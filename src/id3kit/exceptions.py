"""Custom exceptions for id3kit.

This module defines the exceptions raised while discretizing columns and
inducing decision trees:

Discretization exceptions:
- UnknownCategoryError: Raised when a nominal value was never seen while the
  layout was fitted. This is the only error expected to reach end users under
  normal operation (a held-out set carrying a category absent from training).
- LayoutMismatchError: Raised when saved layouts do not line up with the
  columns they are replayed on.

Contract exceptions:
- OutOfBoundsError: Raised when an attribute or instance index exceeds the
  shape of an encoded dataset.
- EmptyDatasetError: Raised when tree induction is attempted on zero instances.
"""

from __future__ import annotations

from typing import Literal

type IndexAxis = Literal["attribute", "instance"]


class UnknownCategoryError(ValueError):
    """Raised when a nominal value is absent from the fitted layout.

    Attributes:
        attribute_index (int): Index of the attribute whose layout was consulted.
        value (str): The offending raw value.

    Examples:
        >>> err = UnknownCategoryError(attribute_index=3, value="purple")
        >>> err.attribute_index
        3
        >>> str(err)
        "Attribute 3 has no category 'purple' in its fitted layout"
    """

    attribute_index: int
    value: str

    def __init__(self, attribute_index: int, value: str) -> None:
        """Initialize UnknownCategoryError.

        Args:
            attribute_index (int): Index of the attribute being encoded.
            value (str): The raw value that was never seen during fitting.
        """
        super().__init__(f"Attribute {attribute_index} has no category {value!r} in its fitted layout")
        self.attribute_index = attribute_index
        self.value = value

    def __repr__(self) -> str:
        """Return detailed representation for debugging.

        Returns:
            str: Representation including the attribute index and value.
        """
        return f"{self.__class__.__name__}(attribute_index={self.attribute_index!r}, value={self.value!r})"


class LayoutMismatchError(ValueError):
    """Raised when saved layouts cannot be replayed on a column source.

    A mismatch is either a different number of layouts than attributes
    (`attribute_index` is `None`), or a layout whose kind differs from the
    kind of the column it is applied to.

    Attributes:
        attribute_index (int | None): Attribute at fault, or `None` for a
            count mismatch.
        expected (str): What the layouts describe (a count or a kind).
        actual (str): What the column source provides.

    Examples:
        >>> err = LayoutMismatchError(attribute_index=None, expected="4", actual="5")
        >>> str(err)
        'Expected 4 layouts but the column source has 5 attributes'
    """

    attribute_index: int | None
    expected: str
    actual: str

    def __init__(self, *, attribute_index: int | None, expected: str, actual: str) -> None:
        """Initialize LayoutMismatchError.

        Args:
            attribute_index (int | None): Attribute at fault, or `None` when
                the number of layouts differs from the number of attributes.
            expected (str): The count or kind described by the layouts.
            actual (str): The count or kind provided by the column source.
        """
        if attribute_index is None:
            message = f"Expected {expected} layouts but the column source has {actual} attributes"
        else:
            message = f"Attribute {attribute_index} has a {expected} layout but a {actual} column"
        super().__init__(message)
        self.attribute_index = attribute_index
        self.expected = expected
        self.actual = actual

    def __repr__(self) -> str:
        """Return detailed representation for debugging.

        Returns:
            str: Representation including the attribute index, expected and actual values.
        """
        return (
            f"{self.__class__.__name__}("
            f"attribute_index={self.attribute_index!r}, expected={self.expected!r}, actual={self.actual!r})"
        )


class OutOfBoundsError(IndexError):
    """Raised when an index exceeds the declared shape of an encoded dataset.

    Attributes:
        axis (IndexAxis): Which index was out of range, `"attribute"` or `"instance"`.
        index (int): The offending index.
        size (int): Number of valid positions along `axis`.

    Examples:
        >>> err = OutOfBoundsError(axis="instance", index=10, size=4)
        >>> str(err)
        'instance index 10 out of bounds for size 4'
    """

    axis: IndexAxis
    index: int
    size: int

    def __init__(self, *, axis: IndexAxis, index: int, size: int) -> None:
        """Initialize OutOfBoundsError.

        Args:
            axis (IndexAxis): Which index was out of range.
            index (int): The offending index.
            size (int): Number of valid positions along `axis`.
        """
        super().__init__(f"{axis} index {index} out of bounds for size {size}")
        self.axis = axis
        self.index = index
        self.size = size

    def __repr__(self) -> str:
        """Return detailed representation for debugging.

        Returns:
            str: Representation including axis, index and size.
        """
        return f"{self.__class__.__name__}(axis={self.axis!r}, index={self.index!r}, size={self.size!r})"


class EmptyDatasetError(ValueError):
    """Raised when tree induction is attempted on zero instances.

    Majority vote and entropy are undefined on an empty partition, so there is
    no tree to return.
    """

    def __init__(self, message: str = "Cannot train a decision tree on a dataset with zero instances") -> None:
        """Initialize EmptyDatasetError.

        Args:
            message (str): Description of the failure.
        """
        super().__init__(message)
