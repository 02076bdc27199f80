from typing import Any, Optional
from xml.parsers.expat import ExpatError

import xmltodict
from loguru import logger

from ...models.repair_result import ErrorKind, ErrorRecord, RepairResult


class XMLParser:
    """Strict well-formedness check backed by xmltodict (expat)."""

    def loads(self, text: str) -> Any:
        return xmltodict.parse(text)

    def parse(self, text: str) -> RepairResult:
        """Parse XML; on failure report the expat diagnostic with its offset."""
        try:
            parsed = self.loads(text)
        except ExpatError as e:
            error = ErrorRecord(
                kind=ErrorKind.PARSE_ERROR,
                message=str(e),
                position=self._offset_from_line_column(text, e.lineno, e.offset),
                line=e.lineno,
            )
            logger.debug(f"XML parsing failed: {e}")
            return RepairResult(success=False, fixed_text=text, original_text=text, errors=[error])
        except ValueError as e:
            error = ErrorRecord(kind=ErrorKind.PARSE_ERROR, message=str(e))
            logger.debug(f"XML parsing failed: {e}")
            return RepairResult(success=False, fixed_text=text, original_text=text, errors=[error])

        return RepairResult(success=True, fixed_text=text, original_text=text, parsed_value=parsed)

    def _offset_from_line_column(
        self, text: str, line: Optional[int], column: Optional[int]
    ) -> Optional[int]:
        """Convert expat's 1-based line and 0-based column to a character offset."""
        if not line:
            return None
        lines = text.split("\n")
        if line > len(lines):
            return len(text)
        offset = sum(len(previous) + 1 for previous in lines[:line - 1])
        return min(offset + (column or 0), len(text))
