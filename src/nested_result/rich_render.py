"""Rich-based display of results and error trees.

Provides a tree view of nested errors, a printer for top-level results, and
an observer printing failed aggregation slots as they are found.

Requires the 'rich' package: pip install rich
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from nested_result.error import NO_DETAILS, Error
from nested_result.events import ResultEvent, ResultEventType, ResultObserver

if TYPE_CHECKING:
    from rich.console import Console
    from rich.tree import Tree

    from nested_result.result import Result

__all__ = ["RichErrorObserver", "error_tree", "print_result"]


def _label(error: Error, show_values: bool) -> str:
    from rich.markup import escape

    if not error.id and not error.messages:
        label = "[dim]<aggregate>[/]" if error.nested else escape(NO_DETAILS)
    else:
        prefix = f"[bold red]\\[{escape(error.id)}][/]" if error.id else ""
        lines = [escape(message) for message in error.messages] or [""]
        first = " ".join(part for part in (prefix, lines[0]) if part)
        label = "\n".join([first, *lines[1:]])
    if show_values and error.value is not None:
        label += f" [dim]({escape(repr(error.value))})[/]"
    return label


def error_tree(error: Error, *, show_values: bool = False) -> Tree:
    """Build a Rich Tree mirroring the nesting of ``error``.

    Args:
        error: The error to display.
        show_values: If True, append the offending value to each node.

    Returns:
        A rich.tree.Tree ready to be printed.
    """
    from rich.tree import Tree

    root = Tree(_label(error, show_values))
    _grow(root, error, show_values)
    return root


def _grow(branch: Tree, error: Error, show_values: bool) -> None:
    for child in error.nested:
        _grow(branch.add(_label(child, show_values)), child, show_values)


def print_result(
    result: Result[Any],
    console: Console | None = None,
    *,
    as_tree: bool = False,
) -> None:
    """Print a top-level result.

    A Success prints its value. A Failure prints its rendered error, or a
    tree view of it when ``as_tree`` is True.
    """
    from rich.console import Console

    console = console or Console()
    value, error = result.deconstruct()
    if error is None:
        console.print(value, markup=False, highlight=False)
    elif as_tree:
        console.print(error_tree(error))
    else:
        console.print(error.render(), markup=False, highlight=False, style="red")


class RichErrorObserver(ResultObserver):
    """Print each failed slot of an aggregation as it is reported.

    Example:
        observer = RichErrorObserver()
        aggregator.add_observer(observer)
        aggregator.run(slots)
        print(observer.failed_slots)

    Requires:
        pip install rich
    """

    def __init__(self, console: Console | None = None, *, show_values: bool = True) -> None:
        from rich.console import Console

        self._console = console or Console(stderr=True)
        self._show_values = show_values
        self._failed: list[str] = []

    @property
    def failed_slots(self) -> list[str]:
        """Ids of failed slots reported so far."""
        return self._failed.copy()

    def on_event(self, event: ResultEvent) -> None:
        if event.event_type == ResultEventType.AGGREGATION_STARTED:
            self._failed.clear()
        elif event.event_type == ResultEventType.SLOT_FAILED:
            self._failed.append(event.data["slot"])
            self._console.print(error_tree(event.data["error"], show_values=self._show_values))
        elif event.event_type == ResultEventType.AGGREGATION_COMPLETED:
            failed = event.data.get("failed_count", 0)
            total = event.data.get("slot_count", 0)
            style = "red" if failed else "green"
            self._console.print(
                f"[{style}]{event.data.get('name')}: {total - failed}/{total} slots passed[/]"
            )
