"""Result and issue data models shared by the JSON and XML repair engines."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional


class ErrorKind(str, Enum):
    """Categories of errors reported by parse and fix operations."""

    PARSE_ERROR = "parse_error"
    UNMATCHED_CLOSING_TAG = "unmatched_closing_tag"
    MISMATCHED_TAGS = "mismatched_tags"
    UNCLOSED_TAG = "unclosed_tag"
    INVALID_TAG_NAME = "invalid_tag_name"
    TEXT_BEFORE_ROOT = "text_before_root"
    MULTIPLE_ROOTS = "multiple_roots"
    MISSING_OPENING_TAG = "missing_opening_tag"


@dataclass
class ErrorRecord:
    """A single error found while parsing or pre-checking a document."""

    kind: ErrorKind
    message: str
    position: Optional[int] = None
    line: Optional[int] = None
    tag: Optional[str] = None


@dataclass
class RepairResult:
    """Outcome of a parse or fix call.

    ``success`` is true only when ``fixed_text`` parses under the strict
    grammar. ``fixed_text`` always holds the best-effort output, even on
    failure, so callers can diff or log it.
    """

    success: bool
    fixed_text: str
    original_text: str
    applied_fixes: List[str] = field(default_factory=list)
    parsed_value: Optional[Any] = None
    errors: List[ErrorRecord] = field(default_factory=list)
    can_retry_with_fallback: bool = False
    method: str = "rules"

    @property
    def can_try_ai(self) -> bool:
        return self.can_retry_with_fallback


@dataclass
class ValidationIssue:
    """Data class for validation issues."""

    issue_type: str
    description: str
    line: Optional[int] = None
    severity: str = "error"
    position: Optional[int] = None


@dataclass
class ValidationReport:
    valid: bool
    issues: List[ValidationIssue] = field(default_factory=list)
    parsed_value: Optional[Any] = None


@dataclass
class ErrorContext:
    """Text surrounding an error offset."""

    before: str
    error: str
    after: str
    position: int


@dataclass
class FixOptions:
    """Options for ``fix`` calls.

    ``model`` and ``tokenizer`` drive a local generative model; ``llm_client``
    is any client exposing ``call_llm(system_prompt, prompt, return_raw=True)``.
    The fallback only runs when ``use_ai`` is set and one of them is present.
    """

    use_ai: bool = False
    model: Optional[Any] = None
    tokenizer: Optional[Any] = None
    llm_client: Optional[Any] = None


def error_to_issue(error: ErrorRecord) -> ValidationIssue:
    """Convert a parse/structure error into a validation issue."""
    return ValidationIssue(
        issue_type=error.kind.value,
        description=error.message,
        line=error.line,
        severity="error",
        position=error.position,
    )
