"""Immutable, nestable error records.

An Error describes one diagnosable failure: an optional id naming the step or
field that produced it, the messages for every rule it violated, an optional
snapshot of the offending value and any number of nested child errors.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field, replace
from typing import Any

__all__ = ["Error", "is_present", "merge"]

INDENT = 2
NO_DETAILS = "Error (without details) occurred."


def _as_messages(messages: str | Iterable[str | None] | None) -> tuple[str, ...]:
    if messages is None:
        return ()
    if isinstance(messages, str):
        return (messages,)
    return tuple(m for m in messages if m is not None)


@dataclass(frozen=True, eq=False)
class Error:
    """A single failure, possibly bundling nested failures.

    Errors never fail to construct. An error carrying neither id, messages nor
    nested errors renders as a placeholder instead.

    Equality and hashing are structural: two errors are equal when their
    rendered text is equal. ``value`` is not part of the rendering and so does
    not take part in equality.

    Example:
        err = Error.create("hgt", "Height must end in 'cm' or 'in'", value="190")
        parent = Error.create("Passport").with_nested(err)
        print(parent.render())
        # [Passport]:
        #   [hgt]: Height must end in 'cm' or 'in'
    """

    id: str | None = None
    messages: tuple[str, ...] = ()
    value: Any = None
    nested: tuple[Error, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "messages", _as_messages(self.messages))
        object.__setattr__(
            self, "nested", tuple(e for e in (self.nested or ()) if e is not None)
        )

    @classmethod
    def create(
        cls,
        id: str | None = None,
        messages: str | Iterable[str | None] | None = (),
        value: Any = None,
        nested: Iterable[Error | None] | None = (),
    ) -> Error:
        """Create an error.

        Args:
            id: Label of the operation or field that failed.
            messages: One message or an iterable of messages. ``None``
                entries are dropped.
            value: The offending input, kept for diagnostics only.
            nested: Child errors. ``None`` entries are dropped.

        Returns:
            A new Error.
        """
        return cls(
            id=id,
            messages=_as_messages(messages),
            value=value,
            nested=tuple(e for e in (nested or ()) if e is not None),
        )

    def with_nested(self, *errors: Error | None) -> Error:
        """Return a copy with ``errors`` appended to the nested errors."""
        return replace(self, nested=self.nested + tuple(e for e in errors if e is not None))

    def with_messages(self, *messages: str | None) -> Error:
        """Return a copy with ``messages`` appended to the messages."""
        return replace(self, messages=self.messages + _as_messages(messages))

    @property
    def is_aggregate(self) -> bool:
        """True for purely structural nodes that only bundle nested errors."""
        return not self.id and not self.messages and bool(self.nested)

    @property
    def depth(self) -> int:
        """Number of levels in this error tree, counting this node."""
        return 1 + max((child.depth for child in self.nested), default=0)

    def walk(self, path: tuple[str, ...] = ()) -> Iterator[tuple[tuple[str, ...], Error]]:
        """Yield ``(id_path, error)`` for this node and every descendant, depth first.

        The id path holds the ids of the node and its ancestors; nodes
        without an id do not contribute to it.
        """
        own_path = path + (self.id,) if self.id else path
        yield own_path, self
        for child in self.nested:
            yield from child.walk(own_path)

    def render(self) -> str:
        """Render the error tree as indented, multi-line text.

        Each nesting level is indented by two more spaces. Additional messages
        of the same node continue on their own lines two spaces deeper.
        """
        return "\n".join(self._lines(0))

    def _lines(self, indent: int) -> list[str]:
        pad = " " * indent
        lines: list[str] = []
        if self.id or self.messages:
            prefix = f"[{self.id}]: " if self.id else ""
            if self.messages:
                lines.append(f"{pad}{prefix}{self.messages[0]}")
                cont = " " * (indent + INDENT)
                lines.extend(f"{cont}{message}" for message in self.messages[1:])
            else:
                lines.append(f"{pad}{prefix.rstrip()}")
        elif not self.nested:
            lines.append(f"{pad}{NO_DETAILS}")
        for child in self.nested:
            lines.extend(child._lines(indent + INDENT))
        return lines

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return (
            f"Error(id={self.id!r}, messages={list(self.messages)!r}, "
            f"nested={len(self.nested)})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Error):
            return NotImplemented
        return self.render() == other.render()

    def __hash__(self) -> int:
        return hash(self.render())


def is_present(error: Error | None) -> bool:
    """Check whether an error is present."""
    return error is not None


def merge(a: Error | None, b: Error | None) -> Error | None:
    """Combine two errors under a new aggregate node.

    Returns the other operand when one is absent, and None when both are.
    """
    if a is None:
        return b
    if b is None:
        return a
    return Error(nested=(a, b))
