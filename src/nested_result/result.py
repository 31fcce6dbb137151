"""Result sum type and short-circuit sequencing.

A Result is either a Success carrying a value or a Failure carrying an Error.
Failures are ordinary values: nothing here raises for a domain failure.
"""

from __future__ import annotations

import functools
import inspect
from abc import ABC, abstractmethod
from collections.abc import Callable, Generator, Iterator
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, overload

from nested_result.error import Error
from nested_result.exceptions import ContractViolationError, UnwrapError

__all__ = [
    "Failure",
    "Result",
    "Success",
    "chain",
    "deconstruct",
    "failure",
    "from_callable",
    "sequence",
    "success",
    "tag",
]

T = TypeVar("T")
U = TypeVar("U")


class Result(ABC, Generic[T]):
    """Outcome of an operation producing a T or failing with an Error.

    Supports unpacking into ``(value, error)``, exactly one of which is None:

        value, error = parse(line)
        if error is not None:
            ...
    """

    __slots__ = ()

    @property
    @abstractmethod
    def is_success(self) -> bool: ...

    @property
    def is_failure(self) -> bool:
        return not self.is_success

    @abstractmethod
    def deconstruct(self) -> tuple[T | None, Error | None]:
        """Return ``(value, None)`` for a Success and ``(None, error)`` for a Failure."""

    def __iter__(self) -> Iterator[Any]:
        return iter(self.deconstruct())

    def map(self, fn: Callable[[T], U]) -> Result[U]:
        """Apply ``fn`` to a success value; a Failure passes through untouched."""
        value, error = self.deconstruct()
        if error is not None:
            return Failure(error)
        return success(fn(value))  # type: ignore[arg-type]

    def bind(self, fn: Callable[[T], Result[U]]) -> Result[U]:
        """Feed a success value to a step returning a Result."""
        value, error = self.deconstruct()
        if error is not None:
            return Failure(error)
        return _checked(fn(value))  # type: ignore[arg-type]

    def map_error(self, fn: Callable[[Error], Error]) -> Result[T]:
        """Transform the error of a Failure; a Success passes through."""
        _, error = self.deconstruct()
        if error is None:
            return self
        return failure(fn(error))

    def unwrap(self) -> T:
        """Return the success value.

        Raises:
            UnwrapError: If this is a Failure.
        """
        value, error = self.deconstruct()
        if error is not None:
            raise UnwrapError(error)
        return value  # type: ignore[return-value]

    def unwrap_or(self, default: T) -> T:
        """Return the success value, or ``default`` for a Failure."""
        value, error = self.deconstruct()
        return default if error is not None else value  # type: ignore[return-value]


@dataclass(frozen=True)
class Success(Result[T]):
    """Successful result holding a value that is never None."""

    value: T

    def __post_init__(self) -> None:
        if self.value is None:
            raise ContractViolationError("Success requires a value, got None")

    @property
    def is_success(self) -> bool:
        return True

    def deconstruct(self) -> tuple[T | None, Error | None]:
        return self.value, None

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Failure(Result[T]):
    """Failed result holding exactly one top-level Error."""

    error: Error

    def __post_init__(self) -> None:
        if not isinstance(self.error, Error):
            raise ContractViolationError(
                f"Failure requires an Error, got {type(self.error).__name__}"
            )

    @property
    def is_success(self) -> bool:
        return False

    def deconstruct(self) -> tuple[T | None, Error | None]:
        return None, self.error

    def __str__(self) -> str:
        return self.error.render()


def success(value: T) -> Result[T]:
    """Construct a Success. Raises ContractViolationError for None."""
    return Success(value)


def failure(error: Error) -> Result[Any]:
    """Construct a Failure. Raises ContractViolationError for a missing error."""
    return Failure(error)


def deconstruct(result: Result[T]) -> tuple[T | None, Error | None]:
    """Split a result into ``(value, error)``."""
    return _checked(result).deconstruct()


def tag(id: str, result: Result[T]) -> Result[T]:
    """Label a Failure with the step that produced it.

    A Success is returned unchanged. A Failure becomes a new Failure whose
    error has ``id`` and the original error as its only nested child.
    """
    _, error = _checked(result).deconstruct()
    if error is None:
        return result
    return Failure(Error(id=id, nested=(error,)))


def from_callable(id: str, fn: Callable[[], Result[T]]) -> Result[T]:
    """Run ``fn`` and tag its result with ``id``."""
    return tag(id, fn())


def chain(result: Result[Any], *steps: Callable[[Any], Result[Any]]) -> Result[Any]:
    """Thread a success value through ``steps``, stopping at the first Failure.

    Steps after a failing one are never called.
    """
    current = _checked(result)
    for step in steps:
        if current.is_failure:
            break
        current = current.bind(step)
    return current


Steps = Generator[Any, Any, Any]


@overload
def sequence(fn: Callable[..., Steps]) -> Callable[..., Result[Any]]: ...


@overload
def sequence(
    fn: str | None = None,
) -> Callable[[Callable[..., Steps]], Callable[..., Result[Any]]]: ...


def sequence(fn: Any = None) -> Any:
    """Turn a generator function into a short-circuiting sequence of steps.

    Each ``yield`` hands a step to the sequencer and receives its success
    value back. The first Failure closes the generator, so no code after the
    failing step runs, and becomes the result of the call. A step may be:

    - a Result;
    - an ``(id, Result)`` pair, whose Failure is tagged with ``id``;
    - a list of Results, sent back as a list of values via ``flatten``.

    The generator's return value is wrapped in a Success unless it is
    already a Result. Used as ``@sequence("id")`` every Failure is also
    tagged with ``id``.

    Example:
        @sequence("Day 4")
        def run(path):
            lines = yield ("ReadAllLines", read_lines(path))
            passports = yield [parse_passport(chunk) for chunk in split(lines)]
            return count_valid(passports)

    Raises:
        ContractViolationError: If the generator yields anything else.
    """
    if callable(fn):
        return _sequenced(fn, None)

    def decorator(func: Callable[..., Steps]) -> Callable[..., Result[Any]]:
        return _sequenced(func, fn)

    return decorator


def _sequenced(func: Callable[..., Steps], id: str | None) -> Callable[..., Result[Any]]:
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Result[Any]:
        produced = func(*args, **kwargs)
        if inspect.isgenerator(produced):
            outcome = _drive(produced)
        else:
            outcome = produced if isinstance(produced, Result) else success(produced)
        return tag(id, outcome) if id is not None else outcome

    return wrapper


def _drive(gen: Steps) -> Result[Any]:
    sent: Any = None
    while True:
        try:
            step = gen.send(sent)
        except StopIteration as stop:
            returned = stop.value
            if isinstance(returned, Result):
                return returned
            return success(returned)

        value, error = _resolve(step).deconstruct()
        if error is not None:
            gen.close()
            return Failure(error)
        sent = value


def _resolve(step: Any) -> Result[Any]:
    if isinstance(step, Result):
        return step
    if (
        isinstance(step, tuple)
        and len(step) == 2
        and isinstance(step[0], str)
        and isinstance(step[1], Result)
    ):
        return tag(step[0], step[1])
    if isinstance(step, list):
        from nested_result.validate import flatten

        return flatten(step)
    raise ContractViolationError(
        f"A sequence step must yield a Result, got {type(step).__name__}"
    )


def _checked(result: Any) -> Result[Any]:
    if not isinstance(result, Result):
        raise ContractViolationError(f"Expected a Result, got {type(result).__name__}")
    return result
