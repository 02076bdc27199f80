"""
XML Repair Engine

Turns near-valid XML into well-formed XML through an ordered rule pipeline.
Structural defects that cannot be repaired safely are rejected up front and
left to the generative fallback.

Main responsibilities:
- Strict well-formedness checks through xmltodict
- Pre-flight rejection of unsafe documents (multiple roots, spaced names, ...)
- Tag balancing with typo-tolerant closing-tag matching
- Attribute, entity and tag-name repairs
- Validation and tag-aware pretty printing
"""

from loguru import logger
from typing import Callable, List, Optional, Tuple
from xml.parsers.expat import ExpatError

from ...config.settings import FallbackConfig, XMLRulesConfig, get_config
from ...models.repair_result import (
    FixOptions,
    RepairResult,
    ValidationReport,
    error_to_issue,
)
from ..fallback import FallbackRepair, extract_xml_candidate
from .xml_cleaner import XMLCleaner
from .xml_formatter import XMLFormatter
from .xml_parser import XMLParser
from .xml_repair import XMLTagRepair
from .xml_tag_scanner import XMLTagScanner
from .xml_validator import XMLValidator


class XMLRepairEngine:
    """Parse, fix, validate and prettify XML documents."""

    def __init__(
        self,
        rules_config: Optional[XMLRulesConfig] = None,
        fallback_config: Optional[FallbackConfig] = None,
    ):
        self.rules_config = rules_config or get_config().xml_rules
        fallback_config = fallback_config or get_config().fallback

        self.scanner = XMLTagScanner()
        self.parser = XMLParser()
        self.validator = XMLValidator(self.scanner)
        self.cleaner = XMLCleaner(self.scanner, self.rules_config.invalid_tag_prefix)
        self.tag_repair = XMLTagRepair(self.scanner, self.rules_config.max_tag_edit_distance)
        self.formatter = XMLFormatter(self.scanner)
        self.fallback = FallbackRepair(
            "XML",
            self.parse,
            extract_xml_candidate,
            fallback_config.xml_max_new_tokens,
            fallback_config,
        )

    def parse(self, text: str) -> RepairResult:
        """Strict well-formedness check."""
        return self.parser.parse(text)

    def fix(self, text: str, options: Optional[FixOptions] = None) -> RepairResult:
        """Repair XML with the rule pipeline, falling back to a model when allowed."""
        critical_errors = self.validator.detect_critical_errors(text)
        if critical_errors:
            rejected = RepairResult(
                success=False,
                fixed_text=text,
                original_text=text,
                errors=critical_errors,
                can_retry_with_fallback=True,
            )
            if self.fallback.is_available(options):
                logger.info("Critical XML errors found, delegating to generative fallback")
                return self.fallback.repair(text, rejected, options)
            logger.info(f"Rejected XML with critical errors: {critical_errors[0].message}")
            return rejected

        fixed, fixes = self._apply_rules(text)
        parse_result = self.parser.parse(fixed)
        result = RepairResult(
            success=parse_result.success,
            fixed_text=fixed,
            original_text=text,
            applied_fixes=fixes,
            parsed_value=parse_result.parsed_value,
            errors=parse_result.errors,
            can_retry_with_fallback=not parse_result.success,
        )

        if result.success:
            logger.debug(f"XML repaired with {len(fixes)} fix(es)")
            return result

        logger.debug(f"XML still invalid after rules: {parse_result.errors[0].message}")
        if options is not None and options.use_ai:
            return self.fallback.repair(text, result, options)
        return result

    def validate(self, text: str) -> ValidationReport:
        """Report formatting issues, structural errors and the strict parse error."""
        issues = self.validator.detect_xml_issues(text)
        issues.extend(error_to_issue(error) for error in self.validator.analyze_structure(text))

        parse_result = self.parser.parse(text)
        issues.extend(error_to_issue(error) for error in parse_result.errors)

        return ValidationReport(
            valid=parse_result.success,
            issues=issues,
            parsed_value=parse_result.parsed_value,
        )

    def prettify(self, text: str, indent: int = 2) -> str:
        """Pretty print XML, repairing it first if it is not well-formed.

        Raises:
            ExpatError: when the text neither parses nor can be fixed
        """
        try:
            self.parser.loads(text)
        except ExpatError:
            fixed = self.fix(text)
            if fixed.success:
                return self.formatter.format(fixed.fixed_text, indent)
            raise
        return self.formatter.format(text, indent)

    def _apply_rules(self, text: str) -> Tuple[str, List[str]]:
        fixes: List[str] = []

        fixed = self._apply_step(
            text,
            self.cleaner.strip_before_declaration,
            "Removed whitespace before XML declaration",
            fixes,
        )
        fixed = self._apply_step(
            fixed,
            lambda value: self.cleaner.add_declaration(value, self.rules_config.declaration),
            "Added XML declaration",
            fixes,
        )

        fixed, tag_fixes = self.tag_repair.fix_mismatched_tags(fixed)
        fixes.extend(tag_fixes)
        fixed, tag_fixes = self.tag_repair.fix_unclosed_tags(fixed)
        fixes.extend(tag_fixes)

        steps = [
            (self.cleaner.fix_unclosed_attribute_quotes, "Fixed unclosed attribute quotes"),
            (self.cleaner.fix_missing_equals, "Fixed missing equals in attributes"),
            (self.cleaner.escape_special_chars, "Escaped special characters in text content"),
            (self.cleaner.fix_unquoted_attributes, "Added quotes to unquoted attributes"),
            (self.cleaner.fix_invalid_tag_names, "Fixed invalid tag names"),
        ]
        for step, label in steps:
            fixed = self._apply_step(fixed, step, label, fixes)

        fixed, tag_fixes = self.tag_repair.balance_tags(fixed)
        fixes.extend(tag_fixes)
        return fixed, fixes

    def _apply_step(
        self, text: str, step: Callable[[str], str], label: str, fixes: List[str]
    ) -> str:
        fixed = step(text)
        if fixed != text:
            fixes.append(label)
            logger.debug(f"Applied XML rule: {label}")
        return fixed
