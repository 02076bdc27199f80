"""
Repair Service

Single entry point over the JSON and XML engines: format detection, fixing
with optional generative fallback, validation, pretty printing and batches.
"""

from dataclasses import dataclass
from loguru import logger
from typing import Any, Dict, List, Optional

from ..config.settings import RepairConfig, get_config
from ..models.repair_result import FixOptions, RepairResult, ValidationReport
from ..utils.repair_exceptions import FallbackUnavailableException, UnsupportedFormatException
from .json_service import JSONRepairEngine
from .xml_service import XMLRepairEngine

SUPPORTED_FORMATS = ("json", "xml")


@dataclass
class FormatResult:
    """Outcome of an auto-detected repair."""

    format: Optional[str]
    result: Optional[RepairResult]
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.result is not None and self.result.success


class RepairService:
    """Facade over the JSON and XML repair engines."""

    def __init__(
        self,
        model: Optional[Any] = None,
        tokenizer: Optional[Any] = None,
        llm_client: Optional[Any] = None,
        use_ai: Optional[bool] = None,
        repair_config: Optional[RepairConfig] = None,
    ):
        self.repair_config = repair_config or get_config().as_repair_config()
        self.model = model
        self.tokenizer = tokenizer
        self.llm_client = llm_client
        self.use_ai = self.repair_config.fallback.use_ai if use_ai is None else use_ai

        self.json_engine = JSONRepairEngine(self.repair_config.json_rules, self.repair_config.fallback)
        self.xml_engine = XMLRepairEngine(self.repair_config.xml_rules, self.repair_config.fallback)

    def set_model(self, model: Any, tokenizer: Any) -> None:
        """Attach a local model and tokenizer for the generative fallback."""
        self.model = model
        self.tokenizer = tokenizer

    def set_llm_client(self, llm_client: Any) -> None:
        """Attach an LLM client for the generative fallback."""
        self.llm_client = llm_client

    def has_fallback(self) -> bool:
        return (self.model is not None and self.tokenizer is not None) or self.llm_client is not None

    def detect_format(self, text: str) -> Optional[str]:
        """Guess the document format from its first non-blank character."""
        stripped = text.lstrip()
        if stripped.startswith(("{", "[")):
            return "json"
        if stripped.startswith("<"):
            return "xml"
        return None

    def fix_json(self, text: str, use_ai: Optional[bool] = None) -> RepairResult:
        return self.json_engine.fix(text, self._options(use_ai))

    def fix_xml(self, text: str, use_ai: Optional[bool] = None) -> RepairResult:
        return self.xml_engine.fix(text, self._options(use_ai))

    def fix(self, text: str, format: str, use_ai: Optional[bool] = None) -> RepairResult:
        """Fix a document of an explicit format.

        Raises:
            UnsupportedFormatException: when the format has no engine
        """
        format = (format or "").lower()
        if format == "json":
            return self.fix_json(text, use_ai)
        if format == "xml":
            return self.fix_xml(text, use_ai)
        raise UnsupportedFormatException(
            f"Unsupported format '{format}', expected one of: {', '.join(SUPPORTED_FORMATS)}",
            requested_format=format,
        )

    def auto_fix(self, text: str, use_ai: Optional[bool] = None) -> FormatResult:
        """Detect the format and fix the document."""
        detected = self.detect_format(text)
        if detected is None:
            logger.warning("Could not detect document format")
            return FormatResult(
                format=None,
                result=None,
                error="Could not detect format: expected JSON ('{' or '[') or XML ('<')",
            )
        return FormatResult(format=detected, result=self.fix(text, detected, use_ai))

    def batch_fix(self, inputs: List[str], format: str = "auto", use_ai: Optional[bool] = None) -> List[FormatResult]:
        """Fix several documents, all of one format or each auto-detected.

        Raises:
            UnsupportedFormatException: when ``format`` is neither ``auto`` nor supported
        """
        format = (format or "").lower()
        if format != "auto" and format not in SUPPORTED_FORMATS:
            raise UnsupportedFormatException(
                f"Unsupported batch format '{format}'", requested_format=format
            )

        results = []
        for text in inputs:
            if format == "auto":
                results.append(self.auto_fix(text, use_ai))
            else:
                results.append(FormatResult(format=format, result=self.fix(text, format, use_ai)))

        succeeded = sum(1 for result in results if result.success)
        logger.info(f"Batch repair finished: {succeeded}/{len(results)} succeeded")
        return results

    def validate_json(self, text: str) -> ValidationReport:
        return self.json_engine.validate(text)

    def validate_xml(self, text: str) -> ValidationReport:
        return self.xml_engine.validate(text)

    def prettify_json(self, text: str, indent: int = 2) -> str:
        return self.json_engine.prettify(text, indent)

    def prettify_xml(self, text: str, indent: int = 2) -> str:
        return self.xml_engine.prettify(text, indent)

    def get_status(self) -> Dict[str, Any]:
        """Get current service configuration."""
        return {
            "formats": list(SUPPORTED_FORMATS),
            "use_ai": self.use_ai,
            "model_loaded": self.model is not None and self.tokenizer is not None,
            "llm_client_configured": self.llm_client is not None,
            "fallback_available": self.has_fallback(),
        }

    def _options(self, use_ai: Optional[bool]) -> FixOptions:
        explicit = use_ai is not None
        use_ai = self.use_ai if use_ai is None else use_ai

        if use_ai and not self.has_fallback():
            if explicit:
                raise FallbackUnavailableException(
                    "AI repair requested but no model/tokenizer or LLM client is configured"
                )
            logger.warning("AI repair enabled but no fallback configured, using rules only")
            use_ai = False

        return FixOptions(
            use_ai=use_ai,
            model=self.model,
            tokenizer=self.tokenizer,
            llm_client=self.llm_client,
        )
