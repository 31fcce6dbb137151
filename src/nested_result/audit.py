"""Flattened audit records for error trees.

Provides a Pydantic model describing one message of an error tree, and a
function exporting a whole tree as records suitable for pd.DataFrame().
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from nested_result.error import NO_DETAILS, Error

__all__ = ["ErrorEntry", "audit_entries", "audit_log"]


class ErrorEntry(BaseModel):
    """One message of an error tree.

    Attributes:
        path: Dotted ids from the root down to the node ("Passport.byr").
        id: Id of the node carrying the message, if any.
        message: The message text.
        value: String form of the offending value, if the node has one.
        depth: Nesting depth of the node, zero for the root.
        source: Optional caller-supplied source identifier.
        timestamp: ISO format timestamp of when the entry was exported.
    """

    path: str
    id: str | None = None
    message: str
    value: str | None = None
    depth: int = 0
    source: str | None = None
    timestamp: str = Field(default_factory=lambda: datetime.now().isoformat())


def audit_entries(error: Error, source: str | None = None) -> list[ErrorEntry]:
    """Flatten ``error`` into one entry per message, depth first.

    Leaves without messages still produce one entry so that every leaf is
    accounted for: an empty message when the leaf has an id, the placeholder
    text otherwise.
    """
    entries: list[ErrorEntry] = []
    _collect(error, (), 0, source, entries)
    return entries


def audit_log(error: Error, source: str | None = None) -> list[dict[str, Any]]:
    """Export ``error`` as a list of plain dicts."""
    return [entry.model_dump() for entry in audit_entries(error, source=source)]


def _collect(
    error: Error,
    path: tuple[str, ...],
    depth: int,
    source: str | None,
    entries: list[ErrorEntry],
) -> None:
    own_path = path + (error.id,) if error.id else path
    value = str(error.value) if error.value is not None else None
    if error.messages or error.nested:
        messages = error.messages
    else:
        messages = ("",) if error.id else (NO_DETAILS,)
    for message in messages:
        entries.append(
            ErrorEntry(
                path=".".join(own_path),
                id=error.id,
                message=message,
                value=value,
                depth=depth,
                source=source,
            )
        )
    for child in error.nested:
        _collect(child, own_path, depth + 1, source, entries)
