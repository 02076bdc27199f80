from loguru import logger
import re
from typing import List, Optional
from .xml_tag_scanner import Tag, XMLTagScanner
from ...models.repair_result import ErrorKind, ErrorRecord, ValidationIssue


class XMLValidator:
    """Handles XML validation, structural analysis and critical-error detection."""

    # Bare words after the tag name with no "=" and no quotes: <my tag>
    SPACED_NAME_PATTERN = re.compile(r"^(?:\s+[A-Za-z_][\w.\-]*)+\s*/?$")
    UNESCAPED_AMPERSAND_PATTERN = re.compile(r"&(?!(?:amp|lt|gt|quot|apos|#[0-9]+|#x[0-9a-fA-F]+);)")
    UNQUOTED_ATTRIBUTE_PATTERN = re.compile(r"=\s*[^\"'\s>]")
    QUOTED_VALUE_PATTERN = re.compile(r"\"[^\"]*\"|'[^']*'")
    DECLARATION_PATTERN = re.compile(r"<\?xml\s")

    def __init__(self, scanner: Optional[XMLTagScanner] = None):
        self.scanner = scanner or XMLTagScanner()

    def detect_critical_errors(self, text: str) -> List[ErrorRecord]:
        """Detect structural defects that must not be guessed at."""
        errors = []
        tags = self.scanner.scan_tags(text)
        masked = self.scanner.mask_special(text)

        # 1. Tag names with spaces, with no attributes to explain the space
        for tag in tags:
            if self.SPACED_NAME_PATTERN.match(tag.attributes):
                errors.append(
                    ErrorRecord(
                        kind=ErrorKind.INVALID_TAG_NAME,
                        message=f"Tag names cannot contain spaces: {tag.raw}",
                        position=tag.start,
                        line=self._line_of(text, tag.start),
                        tag=tag.name,
                    )
                )
                break

        # 2. Text before the root element
        if tags and masked[:tags[0].start].strip():
            errors.append(
                ErrorRecord(
                    kind=ErrorKind.TEXT_BEFORE_ROOT,
                    message="Text content before root element",
                    position=len(masked) - len(masked.lstrip()),
                )
            )

        # 3. Multiple root elements
        roots = self._find_roots(tags)
        if len(roots) > 1:
            errors.append(
                ErrorRecord(
                    kind=ErrorKind.MULTIPLE_ROOTS,
                    message=f"Multiple root elements detected: {', '.join(tag.name for tag in roots)}",
                    position=roots[1].start,
                    line=self._line_of(text, roots[1].start),
                )
            )

        # 4. Missing opening tag: starts with a closing tag or only has closing tags
        has_opening = any(not tag.is_closing for tag in tags)
        if (tags and tags[0].is_closing and not masked[:tags[0].start].strip()) or (
            tags and not has_opening
        ):
            errors.append(
                ErrorRecord(
                    kind=ErrorKind.MISSING_OPENING_TAG,
                    message="Missing opening tag",
                    position=tags[0].start,
                    tag=tags[0].name,
                )
            )

        if errors:
            logger.debug(f"Critical XML errors: {[error.kind.value for error in errors]}")
        return errors

    def analyze_structure(self, text: str) -> List[ErrorRecord]:
        """Walk tags with a stack and report unmatched, mismatched and unclosed tags."""
        errors = []
        stack: List[Tag] = []

        for tag in self.scanner.scan_tags(text):
            if tag.is_closing:
                if not stack:
                    errors.append(
                        ErrorRecord(
                            kind=ErrorKind.UNMATCHED_CLOSING_TAG,
                            message=f"Closing tag </{tag.name}> has no matching opening tag",
                            position=tag.start,
                            line=self._line_of(text, tag.start),
                            tag=tag.name,
                        )
                    )
                    continue
                last_opened = stack.pop()
                if last_opened.name != tag.name:
                    errors.append(
                        ErrorRecord(
                            kind=ErrorKind.MISMATCHED_TAGS,
                            message=f"Expected closing tag </{last_opened.name}> but found </{tag.name}>",
                            position=tag.start,
                            line=self._line_of(text, tag.start),
                            tag=tag.name,
                        )
                    )
            elif not tag.is_self_closing:
                stack.append(tag)

        for tag in stack:
            errors.append(
                ErrorRecord(
                    kind=ErrorKind.UNCLOSED_TAG,
                    message=f"Unclosed tag <{tag.name}>",
                    position=tag.start,
                    line=self._line_of(text, tag.start),
                    tag=tag.name,
                )
            )

        return errors

    def detect_xml_issues(self, text: str) -> List[ValidationIssue]:
        """Detect common XML formatting issues."""
        issues = []

        if not self.DECLARATION_PATTERN.match(text.lstrip()):
            issues.append(
                ValidationIssue(
                    issue_type="missing_declaration",
                    description="Missing XML declaration",
                    line=1,
                    severity="warning",
                )
            )

        masked = self.scanner.mask_special(text)
        for index, line in enumerate(masked.split("\n")):
            if self.UNESCAPED_AMPERSAND_PATTERN.search(line):
                issues.append(
                    ValidationIssue(
                        issue_type="unescaped_ampersand",
                        description="Unescaped ampersand (&) detected",
                        line=index + 1,
                    )
                )

        for tag in self.scanner.scan_tags(text):
            if tag.is_closing:
                continue
            unquoted = self.QUOTED_VALUE_PATTERN.sub('""', tag.attributes)
            if self.UNQUOTED_ATTRIBUTE_PATTERN.search(unquoted):
                issues.append(
                    ValidationIssue(
                        issue_type="unquoted_attribute",
                        description=f"Unquoted attribute value detected in <{tag.name}>",
                        line=self._line_of(text, tag.start),
                        position=tag.start,
                    )
                )

        return issues

    def _find_roots(self, tags: List[Tag]) -> List[Tag]:
        roots = []
        depth = 0
        for tag in tags:
            if tag.is_closing:
                depth = max(depth - 1, 0)
                continue
            if depth == 0:
                roots.append(tag)
            if not tag.is_self_closing:
                depth += 1
        return roots

    def _line_of(self, text: str, position: int) -> int:
        return text.count("\n", 0, position) + 1
