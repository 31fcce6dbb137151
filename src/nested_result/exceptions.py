"""Exceptions for programming errors.

Domain failures are carried as Failure values and never raised. The classes
here signal misuse of the API by calling code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nested_result.error import Error

__all__ = ["ContractViolationError", "UnwrapError"]


class ContractViolationError(ValueError):
    """Raised when calling code breaks a contract of the API.

    Examples are constructing a Success around ``None``, a Failure without an
    Error, or aggregating zero slots.
    """


class UnwrapError(ContractViolationError):
    """Raised by ``Result.unwrap()`` when the result is a Failure."""

    def __init__(self, error: Error) -> None:
        self.error = error
        super().__init__(f"Called unwrap() on a Failure:\n{error.render()}")
