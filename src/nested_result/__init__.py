"""Result values with nested, aggregated errors."""

from nested_result.audit import ErrorEntry, audit_entries, audit_log
from nested_result.error import Error, is_present, merge
from nested_result.events import (
    LoggingObserver,
    ObservableMixin,
    ResultEvent,
    ResultEventType,
    ResultObserver,
)
from nested_result.exceptions import ContractViolationError, UnwrapError
from nested_result.lines import read_lines
from nested_result.result import (
    Failure,
    Result,
    Success,
    chain,
    deconstruct,
    failure,
    from_callable,
    sequence,
    success,
    tag,
)
from nested_result.rich_render import RichErrorObserver, error_tree, print_result
from nested_result.validate import (
    Aggregator,
    AggregatorBuilder,
    Rule,
    check,
    flatten,
    validate_all,
)
from nested_result.writers import CSVErrorWriter, ErrorWriter, JSONLinesErrorWriter

__all__ = [
    # Errors
    "Error",
    "is_present",
    "merge",
    "ContractViolationError",
    "UnwrapError",
    # Results
    "Result",
    "Success",
    "Failure",
    "success",
    "failure",
    "deconstruct",
    "tag",
    "from_callable",
    "chain",
    "sequence",
    # Validation
    "Aggregator",
    "AggregatorBuilder",
    "Rule",
    "check",
    "flatten",
    "validate_all",
    # Observer pattern
    "LoggingObserver",
    "ObservableMixin",
    "ResultEvent",
    "ResultEventType",
    "ResultObserver",
    # Rich display (requires rich)
    "RichErrorObserver",
    "error_tree",
    "print_result",
    # Audit export
    "ErrorEntry",
    "audit_entries",
    "audit_log",
    "CSVErrorWriter",
    "ErrorWriter",
    "JSONLinesErrorWriter",
    # Boundary
    "read_lines",
]

__version__ = "0.1.0"
