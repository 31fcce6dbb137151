"""Tests for check, flatten and the aggregator."""

from __future__ import annotations

import time
from typing import Any

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from nested_result import (
    Aggregator,
    AggregatorBuilder,
    ContractViolationError,
    Error,
    Rule,
    check,
    failure,
    flatten,
    success,
    tag,
    validate_all,
)
from nested_result.result import Result

from .conftest import RecordingObserver, results

# =============================================================================
# check
# =============================================================================


class TestCheck:
    """Tests for rule checking."""

    def test_all_rules_hold(self) -> None:
        result = check(
            1980,
            "byr",
            Rule(lambda y: y >= 1920, "Birth year must be at least 1920"),
            Rule(lambda y: y <= 2002, "Birth year must be at most 2002"),
        )

        assert result == success(1980)

    def test_failed_rules_collected_in_order(self) -> None:
        result = check(
            "abc",
            "pid",
            Rule(lambda s: len(s) == 9, "Must be nine characters"),
            Rule(lambda s: s.startswith("a"), "Must start with 'a'"),
            Rule(str.isdigit, "Must be numeric"),
        )

        _, error = result
        assert error is not None
        assert error.id == "pid"
        assert error.messages == ("Must be nine characters", "Must be numeric")
        assert error.value == "abc"

    def test_plain_tuples_accepted(self) -> None:
        result = check(5, "n", (lambda n: n > 10, "Too small"))

        assert result == failure(Error.create("n", "Too small"))


# =============================================================================
# flatten
# =============================================================================


class TestFlatten:
    """Tests for collecting many results."""

    def test_all_success(self) -> None:
        assert flatten([success(1), success(2)]) == success([1, 2])

    def test_empty(self) -> None:
        assert flatten([]) == success([])

    def test_failures_nested_in_order(self) -> None:
        e1 = Error.create("line1", "bad")
        e3 = Error.create("line3", "worse")

        result = flatten([failure(e1), success(2), failure(e3)], "ParseInput", "Invalid lines")

        _, error = result
        assert error is not None
        assert error.id == "ParseInput"
        assert error.messages == ("Invalid lines",)
        assert error.nested == (e1, e3)

    def test_accepts_generators(self) -> None:
        assert flatten(success(n) for n in range(3)) == success([0, 1, 2])


# =============================================================================
# validate_all
# =============================================================================


class TestValidateAll:
    """Tests for the aggregator contract."""

    def test_identity(self) -> None:
        assert validate_all([("a", success(1)), ("b", success(2))]) == success((1, 2))

    def test_failure_ordering(self) -> None:
        e1 = Error.create("x", "first")
        e3 = Error.create("y", "third")

        result = validate_all([("a", failure(e1)), ("b", success(2)), ("c", failure(e3))])

        _, error = result
        assert error is not None
        assert error.id is None
        assert error.messages == ()
        assert list(error.nested) == [
            tag("a", failure(e1)).error,  # type: ignore[attr-defined]
            tag("c", failure(e3)).error,  # type: ignore[attr-defined]
        ]

    def test_no_short_circuit(self) -> None:
        calls: list[str] = []

        def slot(name: str, ok: bool) -> Any:
            def produce() -> Result[str]:
                calls.append(name)
                return success(name) if ok else failure(Error.create(name, "failed"))

            return produce

        validate_all([("a", slot("a", False)), ("b", slot("b", True)), ("c", slot("c", False))])

        assert calls == ["a", "b", "c"]

    def test_aggregate_node_labels(self) -> None:
        result = validate_all(
            [("a", failure(Error.create(None, "boom")))],
            id="Validate",
            message="Input is invalid",
        )

        _, error = result
        assert error is not None
        assert error.render() == "[Validate]: Input is invalid\n  [a]:\n    boom"

    def test_zero_slots_rejected(self) -> None:
        with pytest.raises(ContractViolationError):
            validate_all([])

    def test_slot_must_produce_result(self) -> None:
        with pytest.raises(ContractViolationError):
            validate_all([("a", lambda: 1)])  # type: ignore[list-item]

    def test_concurrent_evaluation_keeps_slot_order(self) -> None:
        def slow(name: str, delay: float) -> Any:
            def produce() -> Result[str]:
                time.sleep(delay)
                return failure(Error.create(name, "failed"))

            return produce

        result = validate_all(
            [("a", slow("a", 0.05)), ("b", slow("b", 0.02)), ("c", slow("c", 0.0))],
            max_workers=3,
        )

        _, error = result
        assert error is not None
        assert [child.id for child in error.nested] == ["a", "b", "c"]

    def test_concurrent_success_tuple(self) -> None:
        result = validate_all(
            [(str(n), (lambda n=n: success(n))) for n in range(8)],
            max_workers=4,
        )

        assert result == success(tuple(range(8)))

    def test_invalid_worker_count(self) -> None:
        with pytest.raises(ContractViolationError):
            Aggregator(max_workers=0)

    @given(slots=st.lists(results, min_size=1, max_size=8))
    @settings(max_examples=100)
    def test_nested_matches_failing_slots(self, slots: list[Result[Any]]) -> None:
        named = [(f"slot{i}", r) for i, r in enumerate(slots)]

        result = validate_all(named)

        failing = [tag(name, r).error for name, r in named if r.is_failure]  # type: ignore[attr-defined]
        if failing:
            _, error = result
            assert error is not None
            assert list(error.nested) == failing
        else:
            assert result == success(tuple(r.unwrap() for r in slots))


# =============================================================================
# Aggregator and builder
# =============================================================================


class TestAggregator:
    """Tests for the observable aggregator."""

    def test_events_in_slot_order(self, recording_observer: RecordingObserver) -> None:
        from nested_result import ResultEventType

        aggregator = Aggregator(name="passport")
        aggregator.add_observer(recording_observer)

        aggregator.run([("byr", failure(Error.create("byr", "bad"))), ("iyr", success(2015))])

        assert recording_observer.event_types == [
            ResultEventType.AGGREGATION_STARTED,
            ResultEventType.SLOT_EVALUATED,
            ResultEventType.SLOT_FAILED,
            ResultEventType.SLOT_EVALUATED,
            ResultEventType.AGGREGATION_COMPLETED,
        ]
        failed = recording_observer.events[2]
        assert failed.data["slot"] == "byr"
        assert failed.data["index"] == 0
        completed = recording_observer.events[-1]
        assert completed.data["failed_count"] == 1
        assert completed.data["slot_count"] == 2
        assert completed.data["duration_ms"] >= 0

    def test_builder(self, recording_observer: RecordingObserver) -> None:
        aggregator = (
            AggregatorBuilder("fields")
            .with_id("Passport")
            .with_message("Passport is invalid")
            .workers(2)
            .observe(recording_observer)
            .build()
        )

        result = aggregator.run([("hgt", failure(Error.create(None, "malformed")))])

        assert aggregator.name == "fields"
        assert aggregator.max_workers == 2
        assert recording_observer in aggregator.observers
        assert str(result) == "[Passport]: Passport is invalid\n  [hgt]:\n    malformed"

    def test_builder_with_name(self) -> None:
        aggregator = AggregatorBuilder().with_name("renamed").build()

        assert aggregator.name == "renamed"
        assert "renamed" in repr(aggregator)

    def test_builder_repr(self) -> None:
        assert "AggregatorBuilder" in repr(AggregatorBuilder("x"))
