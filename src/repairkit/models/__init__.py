from .repair_result import (
    ErrorContext,
    ErrorKind,
    ErrorRecord,
    FixOptions,
    RepairResult,
    ValidationIssue,
    ValidationReport,
)

__all__ = [
    "ErrorContext",
    "ErrorKind",
    "ErrorRecord",
    "FixOptions",
    "RepairResult",
    "ValidationIssue",
    "ValidationReport",
]
