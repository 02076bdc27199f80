import re
from typing import List

from ...models.repair_result import ValidationIssue
from .json_scanner import JSONScanner


class JSONValidator:
    """Line-scanning heuristics for common JSON mistakes.

    String contents are masked first, so a ``//`` inside a URL or an
    apostrophe inside a value is never reported.
    """

    TRAILING_COMMA_PATTERN = re.compile(r",\s*[}\]]")
    UNQUOTED_KEY_PATTERN = re.compile(r"(?:^|[{,])\s*[A-Za-z_$][\w$]*\s*:")
    SINGLE_QUOTES_PATTERN = re.compile(r"'[^']*'")
    COMMENT_PATTERN = re.compile(r"//|/\*")

    def __init__(self):
        self.scanner = JSONScanner()

    def detect_issues(self, text: str) -> List[ValidationIssue]:
        """Detect common JSON formatting issues, one entry per line and issue type."""
        issues = []
        masked = self.scanner.mask_strings(text)

        for index, line in enumerate(masked.split("\n")):
            line_number = index + 1

            if self.TRAILING_COMMA_PATTERN.search(line):
                issues.append(
                    ValidationIssue(
                        issue_type="trailing_comma",
                        description="Trailing comma detected",
                        line=line_number,
                    )
                )

            if self.UNQUOTED_KEY_PATTERN.search(line):
                issues.append(
                    ValidationIssue(
                        issue_type="unquoted_key",
                        description="Unquoted key detected",
                        line=line_number,
                    )
                )

            if self.SINGLE_QUOTES_PATTERN.search(line):
                issues.append(
                    ValidationIssue(
                        issue_type="single_quotes",
                        description="Single quotes detected (use double quotes)",
                        line=line_number,
                        severity="warning",
                    )
                )

            if self.COMMENT_PATTERN.search(line):
                issues.append(
                    ValidationIssue(
                        issue_type="comment",
                        description="Comment detected (not allowed in JSON)",
                        line=line_number,
                    )
                )

        return issues
