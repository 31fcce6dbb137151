"""File reading at the boundary of the core."""

from __future__ import annotations

from pathlib import Path

from nested_result.error import Error
from nested_result.result import Failure, Result, success

__all__ = ["read_lines"]

READ_ALL_LINES = "ReadAllLines"


def _read_failure(message: str, resolved: Path) -> Result[list[str]]:
    return Failure(Error(id=READ_ALL_LINES, messages=(message,), value=str(resolved)))


def read_lines(path: str | Path, encoding: str = "utf-8") -> Result[list[str]]:
    """Read a text file into a list of lines without line endings.

    Relative paths are resolved against the current working directory. A
    missing, unreadable or undecodable file is a Failure carrying the
    resolved path as its value.
    """
    resolved = Path.cwd() / Path(path)
    if not resolved.is_file():
        return _read_failure(f"Unable to find file '{resolved}'", resolved)
    try:
        text = resolved.read_text(encoding=encoding)
    except UnicodeDecodeError as e:
        return _read_failure(
            f"Unable to decode file '{resolved}' as {encoding}: {e.reason}", resolved
        )
    except OSError as e:
        return _read_failure(f"Unable to read file '{resolved}': {e.strerror or e}", resolved)
    return success(text.splitlines())
