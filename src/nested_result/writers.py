"""Output writers for failed results.

Provides writers exporting the errors of Failures, flattened into audit
entries, to CSV and JSON Lines files.
"""

from __future__ import annotations

import csv
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, TextIO, runtime_checkable

from nested_result.audit import audit_entries

if TYPE_CHECKING:
    from collections.abc import Iterable

    from nested_result.error import Error
    from nested_result.result import Result

__all__ = ["CSVErrorWriter", "ErrorWriter", "JSONLinesErrorWriter"]

CSV_COLUMNS = ["source", "path", "id", "message", "value", "depth"]


@runtime_checkable
class ErrorWriter(Protocol):
    """Protocol for writers exporting the errors of failed results."""

    def write_all(self, results: Iterable[tuple[str, Result[Any]]]) -> int:
        """Write the errors of every Failure among ``(source, result)`` pairs.

        Returns:
            Number of failed results written. Successes are skipped.
        """
        ...


class _FileWriter(ABC):
    """Shared open/close handling for the file based writers."""

    _newline: str | None = None

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._file: TextIO | None = None
        self._results_written = 0

    def __enter__(self) -> Any:
        self._file = open(self._path, "w", newline=self._newline, encoding="utf-8")
        self._on_open()
        return self

    def __exit__(self, *args: object) -> None:
        if self._file:
            self._file.close()
            self._file = None

    def _on_open(self) -> None:
        pass

    def _require_file(self) -> TextIO:
        if self._file is None:
            raise RuntimeError("Writer not opened. Use 'with' statement or call __enter__")
        return self._file

    def write_one(self, source: str, result: Result[Any]) -> bool:
        """Write a single result. Returns False, writing nothing, for a Success."""
        self._require_file()
        _, error = result.deconstruct()
        if error is None:
            return False
        self._write_error(source, error)
        self._results_written += 1
        return True

    @abstractmethod
    def _write_error(self, source: str, error: Error) -> None:
        """Write the audit entries of one failed result."""
        ...

    def write_all(self, results: Iterable[tuple[str, Result[Any]]]) -> int:
        with self:
            for source, result in results:
                self.write_one(source, result)
        return self._results_written


class CSVErrorWriter(_FileWriter):
    """Write one CSV row per error message.

    Example:
        with CSVErrorWriter("errors.csv") as writer:
            for name, result in outcomes:
                writer.write_one(name, result)
    """

    _newline = ""

    def __init__(self, path: str | Path) -> None:
        super().__init__(path)
        self._writer: csv.DictWriter[str] | None = None

    def _on_open(self) -> None:
        self._writer = csv.DictWriter(self._require_file(), fieldnames=CSV_COLUMNS)
        self._writer.writeheader()

    def __exit__(self, *args: object) -> None:
        super().__exit__(*args)
        self._writer = None

    def _write_error(self, source: str, error: Error) -> None:
        if self._writer is None:
            raise RuntimeError("Writer not opened. Use 'with' statement or call __enter__")
        for entry in audit_entries(error, source=source):
            self._writer.writerow(entry.model_dump(include=set(CSV_COLUMNS)))


class JSONLinesErrorWriter(_FileWriter):
    """Write one JSON object per failed result.

    Each line holds the source, the rendered error and its audit entries.
    """

    def __init__(self, path: str | Path, *, indent: int | None = None) -> None:
        super().__init__(path)
        self._indent = indent

    def _write_error(self, source: str, error: Error) -> None:
        entries = audit_entries(error, source=source)
        record: dict[str, Any] = {
            "source": source,
            "rendered": error.render(),
            "errors": [entry.model_dump(exclude={"timestamp", "source"}) for entry in entries],
        }
        line = json.dumps(record, indent=self._indent, default=str)
        self._require_file().write(line + "\n")
