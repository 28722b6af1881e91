"""Exceptions raised by charon.

- CharonError: base class, catch this to handle any charon failure.
- InvalidEncodingError: encoded input breaks the categorical/numeric contract.
- RegressionNotSupportedError: the target is continuous.
"""

from __future__ import annotations

from typing import Any


class CharonError(Exception):
    """Base exception for charon."""


class InvalidEncodingError(CharonError, TypeError):
    """Raised when a value does not match the encoding declared for its feature.

    Categorical features must hold integral codes and numeric features must
    hold values convertible to float.  This is a contract violation between
    the caller's featurization and the tree builder, so it is never recovered
    from.

    Attributes
    ----------
    feature : int or None
        Column index of the offending feature, when known.
    value : Any
        The value that could not be interpreted.
    """

    feature: int | None
    value: Any

    def __init__(self, message: str, *, feature: int | None = None, value: Any = None) -> None:
        super().__init__(message)
        self.feature = feature
        self.value = value

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={str(self)!r}, feature={self.feature!r}, value={self.value!r})"


class RegressionNotSupportedError(CharonError, ValueError):
    """Raised when a continuous target is passed to a classification tree."""

    def __init__(self, target_type: str) -> None:
        super().__init__(f"Regression not implemented: target type is {target_type!r}, expected class labels")
        self.target_type = target_type
