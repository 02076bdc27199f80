"""
repairkit: rule-based repair of malformed JSON and XML documents.

Usage:
    from repairkit import JSONRepairEngine, XMLRepairEngine

    JSONRepairEngine().fix('{"a": 1,}').fixed_text   # '{"a": 1}'
    XMLRepairEngine().fix('<root><item>v</root>').success   # True

Log output is disabled by default; call
``repairkit.utils.logging.setup_logging("DEBUG")`` to see it.
"""

from loguru import logger

from .models.repair_result import (
    ErrorContext,
    ErrorKind,
    ErrorRecord,
    FixOptions,
    RepairResult,
    ValidationIssue,
    ValidationReport,
)
from .services import FormatResult, JSONRepairEngine, RepairService, XMLRepairEngine
from .utils.repair_exceptions import FallbackUnavailableException, UnsupportedFormatException

__version__ = "0.1.0"

logger.disable("repairkit")

__all__ = [
    "ErrorContext",
    "ErrorKind",
    "ErrorRecord",
    "FallbackUnavailableException",
    "FixOptions",
    "FormatResult",
    "JSONRepairEngine",
    "RepairResult",
    "RepairService",
    "UnsupportedFormatException",
    "ValidationIssue",
    "ValidationReport",
    "XMLRepairEngine",
]
