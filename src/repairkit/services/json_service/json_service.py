"""
JSON Repair Engine

Turns near-JSON text into strict JSON through an ordered rule pipeline and
reports every rule that changed the text.

Main responsibilities:
- Strict parsing with decoder diagnostics
- Rule-based repair (quotes, strings, comments, commas, brackets, literals)
- Heuristic validation that never mutates input
- Pretty printing, repairing first when needed
"""

import json
from typing import Optional

from loguru import logger

from ...config.settings import FallbackConfig, JSONRulesConfig, get_config
from ...models.repair_result import (
    ErrorContext,
    FixOptions,
    RepairResult,
    ValidationReport,
    error_to_issue,
)
from ..fallback import FallbackRepair, extract_json_candidate
from .json_parser import JSONParser
from .json_rules import JSONRules
from .json_validator import JSONValidator


class JSONRepairEngine:
    """Parse, fix, validate and prettify JSON documents."""

    def __init__(
        self,
        rules_config: Optional[JSONRulesConfig] = None,
        fallback_config: Optional[FallbackConfig] = None,
    ):
        self.parser = JSONParser()
        self.rules = JSONRules(rules_config or get_config().json_rules)
        self.validator = JSONValidator()
        fallback_config = fallback_config or get_config().fallback
        self.fallback = FallbackRepair(
            "JSON",
            self.parse,
            extract_json_candidate,
            fallback_config.json_max_new_tokens,
            fallback_config,
        )

    def parse(self, text: str) -> RepairResult:
        """Strictly decode JSON."""
        return self.parser.parse(text)

    def fix(self, text: str, options: Optional[FixOptions] = None) -> RepairResult:
        """Run the rule pipeline, then re-parse the result."""
        fixed, fixes = self.rules.apply(text)
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
            logger.debug(f"JSON repaired with {len(fixes)} fix(es)")
            return result

        logger.debug(f"JSON still invalid after rules: {parse_result.errors[0].message}")
        if options is not None and options.use_ai:
            return self.fallback.repair(text, result, options)
        return result

    def validate(self, text: str) -> ValidationReport:
        """Report heuristic issues plus strict parse errors without changing the text."""
        issues = self.validator.detect_issues(text)
        parse_result = self.parser.parse(text)
        issues.extend(error_to_issue(error) for error in parse_result.errors)

        return ValidationReport(
            valid=parse_result.success,
            issues=issues,
            parsed_value=parse_result.parsed_value,
        )

    def prettify(self, text: str, indent: int = 2) -> str:
        """Pretty print JSON, repairing it first if it does not parse.

        Raises:
            json.JSONDecodeError: when the text neither parses nor can be fixed
        """
        try:
            parsed = self.parser.loads(text)
        except ValueError:
            fixed = self.fix(text)
            if fixed.success:
                return json.dumps(fixed.parsed_value, indent=indent, ensure_ascii=False)
            raise
        return json.dumps(parsed, indent=indent, ensure_ascii=False)

    def get_error_context(
        self, text: str, position: Optional[int], context_size: int = 50
    ) -> Optional[ErrorContext]:
        return self.parser.get_error_context(text, position, context_size)
