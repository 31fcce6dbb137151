"""Validation helpers and the result aggregator.

Where sequencing stops at the first Failure, the helpers here evaluate every
input and bundle all failures, so independent checks report together.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any, NamedTuple, TypeVar, Union

from nested_result.error import Error
from nested_result.events import (
    ObservableMixin,
    ResultEventType,
    ResultObserver,
)
from nested_result.exceptions import ContractViolationError
from nested_result.result import Failure, Result, success, tag

__all__ = [
    "Aggregator",
    "AggregatorBuilder",
    "Rule",
    "Slot",
    "check",
    "flatten",
    "validate_all",
]

T = TypeVar("T")

SlotInput = Union[Result[Any], Callable[[], Result[Any]]]
Slot = tuple[str, SlotInput]


class Rule(NamedTuple):
    """A predicate the value must satisfy, and the message used when it does not."""

    predicate: Callable[[Any], bool]
    message: str


def check(value: T, id: str, *rules: Rule | tuple[Callable[[T], bool], str]) -> Result[T]:
    """Check ``value`` against every rule.

    All rules run. The messages of the rules that do not hold are collected,
    in rule order, into a single Error carrying ``id`` and ``value``.

    Example:
        check(
            1919,
            "byr",
            Rule(lambda y: y >= 1920, "Birth year must be at least 1920"),
            Rule(lambda y: y <= 2002, "Birth year must be at most 2002"),
        )
    """
    messages = [message for predicate, message in rules if not predicate(value)]
    if messages:
        return Failure(Error(id=id, messages=tuple(messages), value=value))
    return success(value)


def flatten(
    results: Iterable[Result[T]],
    id: str | None = None,
    message: str | None = None,
) -> Result[list[T]]:
    """Collect many results into one.

    Returns a Success with every value in order, or a Failure whose error
    nests every failing error in order under a node labelled ``id`` and
    ``message``.
    """
    collected = list(results)
    values: list[T] = []
    errors: list[Error] = []
    for result in collected:
        value, error = result.deconstruct()
        if error is not None:
            errors.append(error)
        else:
            values.append(value)  # type: ignore[arg-type]
    if errors:
        return Failure(Error.create(id, message, value=collected, nested=errors))
    return success(values)


class Aggregator(ObservableMixin):
    """Combine independent results, reporting every failure.

    Each slot pairs an id with a Result, or with a callable producing one.
    Every slot is evaluated. When all succeed the combined Result holds the
    tuple of values in slot order; otherwise it holds one Error with a
    nested entry per failing slot, in slot order, tagged with the slot id.

    Callable slots run on a thread pool when ``max_workers`` is above one.
    Completion order never affects the output.

    Emits AGGREGATION_STARTED, SLOT_EVALUATED, SLOT_FAILED and
    AGGREGATION_COMPLETED events to registered observers.

    Example:
        aggregator = Aggregator(name="passport")
        result = aggregator.run([
            ("byr", check_birth_year(fields)),
            ("hgt", lambda: check_height(fields)),
        ])
    """

    def __init__(
        self,
        *,
        name: str = "aggregate",
        id: str | None = None,
        message: str | None = None,
        max_workers: int | None = None,
    ) -> None:
        """Initialize the aggregator.

        Args:
            name: Name reported in events.
            id: Optional id for the aggregate error node.
            message: Optional message for the aggregate error node.
            max_workers: Thread count for callable slots. None or 1
                evaluates them sequentially in slot order.
        """
        if max_workers is not None and max_workers < 1:
            raise ContractViolationError("max_workers must be at least 1")
        self._name = name
        self._id = id
        self._message = message
        self._max_workers = max_workers

    @property
    def name(self) -> str:
        return self._name

    @property
    def max_workers(self) -> int | None:
        return self._max_workers

    def run(self, slots: Sequence[Slot]) -> Result[tuple[Any, ...]]:
        """Evaluate every slot and assemble the combined result.

        Raises:
            ContractViolationError: If ``slots`` is empty or a slot does not
                produce a Result.
        """
        slots = list(slots)
        if not slots:
            raise ContractViolationError("Aggregation requires at least one slot")

        start_time = time.perf_counter()
        self.emit(ResultEventType.AGGREGATION_STARTED, name=self._name, slot_count=len(slots))

        results = self._evaluate(slots)

        values: list[Any] = []
        nested: list[Error] = []
        for index, ((slot_id, _), result) in enumerate(zip(slots, results)):
            value, error = tag(slot_id, result).deconstruct()
            self.emit(
                ResultEventType.SLOT_EVALUATED,
                name=self._name,
                slot=slot_id,
                index=index,
                result=result,
            )
            if error is not None:
                nested.append(error)
                self.emit(
                    ResultEventType.SLOT_FAILED,
                    name=self._name,
                    slot=slot_id,
                    index=index,
                    error=error,
                )
            else:
                values.append(value)

        combined: Result[tuple[Any, ...]]
        if nested:
            combined = Failure(Error.create(self._id, self._message, nested=nested))
        else:
            combined = success(tuple(values))

        self.emit(
            ResultEventType.AGGREGATION_COMPLETED,
            name=self._name,
            result=combined,
            slot_count=len(slots),
            failed_count=len(nested),
            duration_ms=(time.perf_counter() - start_time) * 1000,
        )
        return combined

    def _evaluate(self, slots: list[Slot]) -> list[Result[Any]]:
        inputs = [slot_input for _, slot_input in slots]
        if self._max_workers is None or self._max_workers == 1:
            return [_produce(item) for item in inputs]

        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            futures = [executor.submit(_produce, item) for item in inputs]
            return [future.result() for future in futures]

    def __repr__(self) -> str:
        return f"Aggregator(name={self._name!r}, max_workers={self._max_workers})"


def _produce(item: SlotInput) -> Result[Any]:
    result = item() if callable(item) else item
    if not isinstance(result, Result):
        raise ContractViolationError(
            f"An aggregation slot must produce a Result, got {type(result).__name__}"
        )
    return result


def validate_all(
    slots: Sequence[Slot],
    *,
    id: str | None = None,
    message: str | None = None,
    max_workers: int | None = None,
) -> Result[tuple[Any, ...]]:
    """Combine independent results into one without short-circuiting.

    Example:
        validate_all([("a", success(1)), ("b", success(2))])
        # Success(value=(1, 2))
    """
    return Aggregator(id=id, message=message, max_workers=max_workers).run(slots)


class AggregatorBuilder:
    """Fluent builder for Aggregator instances.

    Example:
        aggregator = (
            AggregatorBuilder("passport")
            .with_id("Passport")
            .with_message("Passport is invalid")
            .workers(4)
            .observe(LoggingObserver())
            .build()
        )
    """

    def __init__(self, name: str = "aggregate") -> None:
        self._name = name
        self._id: str | None = None
        self._message: str | None = None
        self._max_workers: int | None = None
        self._observers: list[ResultObserver] = []

    def with_name(self, name: str) -> AggregatorBuilder:
        self._name = name
        return self

    def with_id(self, id: str) -> AggregatorBuilder:
        """Set the id of the aggregate error node."""
        self._id = id
        return self

    def with_message(self, message: str) -> AggregatorBuilder:
        """Set the message of the aggregate error node."""
        self._message = message
        return self

    def workers(self, max_workers: int) -> AggregatorBuilder:
        """Evaluate callable slots on a pool of ``max_workers`` threads."""
        self._max_workers = max_workers
        return self

    def observe(self, observer: ResultObserver) -> AggregatorBuilder:
        self._observers.append(observer)
        return self

    def build(self) -> Aggregator:
        aggregator = Aggregator(
            name=self._name,
            id=self._id,
            message=self._message,
            max_workers=self._max_workers,
        )
        for observer in self._observers:
            aggregator.add_observer(observer)
        return aggregator

    def __repr__(self) -> str:
        return (
            f"AggregatorBuilder(name={self._name!r}, id={self._id!r}, "
            f"max_workers={self._max_workers}, observers={len(self._observers)})"
        )
