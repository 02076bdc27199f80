import json
from typing import Any, Optional

from ...models.repair_result import ErrorContext, ErrorKind, ErrorRecord, RepairResult


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON literal: {name}")


class JSONParser:
    """Strict JSON decoding that reports failures as RepairResult errors."""

    def loads(self, text: str) -> Any:
        """Decode strictly; NaN and Infinity are rejected as in standard JSON."""
        return json.loads(text, parse_constant=_reject_constant)

    def parse(self, text: str) -> RepairResult:
        try:
            parsed = self.loads(text)
        except json.JSONDecodeError as e:
            error = ErrorRecord(
                kind=ErrorKind.PARSE_ERROR,
                message=str(e),
                position=e.pos,
                line=e.lineno,
            )
            return RepairResult(success=False, fixed_text=text, original_text=text, errors=[error])
        except ValueError as e:
            error = ErrorRecord(kind=ErrorKind.PARSE_ERROR, message=str(e))
            return RepairResult(success=False, fixed_text=text, original_text=text, errors=[error])

        return RepairResult(success=True, fixed_text=text, original_text=text, parsed_value=parsed)

    def get_error_context(
        self, text: str, position: Optional[int], context_size: int = 50
    ) -> Optional[ErrorContext]:
        """Get the text around an error offset."""
        if position is None or position < 0 or position > len(text):
            return None

        start = max(0, position - context_size)
        end = min(len(text), position + context_size)
        return ErrorContext(
            before=text[start:position],
            error=text[position:position + 1],
            after=text[position + 1:end],
            position=position,
        )
