"""Shared fixtures and Hypothesis strategies for tests."""

from __future__ import annotations

import pytest
from hypothesis import strategies as st

from nested_result import Error, ResultEvent, ResultEventType, failure, success
from nested_result.result import Result

# -----------------------------------------------------------------------------
# Hypothesis Strategies
# -----------------------------------------------------------------------------

# Strategy for ids (letters and numbers only)
ids = st.text(
    min_size=1,
    max_size=20,
    alphabet=st.characters(whitelist_categories=("L", "N")),
)

optional_ids = st.one_of(st.none(), ids)

# Single-line messages; rendering splits on newlines
messages = st.text(
    min_size=1,
    max_size=50,
    alphabet=st.characters(whitelist_categories=("L", "N", "P")),
)

leaf_errors = st.builds(
    lambda id, msgs: Error.create(id, msgs),
    optional_ids,
    st.lists(messages, min_size=1, max_size=3),
)

# Strategy for arbitrary error trees
errors = st.recursive(
    leaf_errors,
    lambda children: st.builds(
        lambda id, msgs, nested: Error.create(id, msgs, nested=nested),
        optional_ids,
        st.lists(messages, max_size=2),
        st.lists(children, min_size=1, max_size=3),
    ),
    max_leaves=10,
)

# Success values (never None)
values = st.one_of(st.integers(), st.text(max_size=20), st.booleans())

results = st.one_of(values.map(success), errors.map(failure))


# -----------------------------------------------------------------------------
# Test Observers
# -----------------------------------------------------------------------------


class RecordingObserver:
    """Observer that records all events for testing."""

    def __init__(self) -> None:
        self.events: list[ResultEvent] = []

    def on_event(self, event: ResultEvent) -> None:
        self.events.append(event)

    @property
    def event_types(self) -> list[ResultEventType]:
        return [e.event_type for e in self.events]


# -----------------------------------------------------------------------------
# Pytest Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def birth_year_error() -> Error:
    """Range violation for a birth year field."""
    return Error.create("byr", "Birth year must be at most 2002", value=2003)


@pytest.fixture
def height_error() -> Error:
    """Parse error for a height field."""
    return Error.create("hgt", "Height must end in 'cm' or 'in'", value="190")


@pytest.fixture
def failing_result(birth_year_error: Error) -> Result[int]:
    return failure(birth_year_error)


@pytest.fixture
def recording_observer() -> RecordingObserver:
    return RecordingObserver()
