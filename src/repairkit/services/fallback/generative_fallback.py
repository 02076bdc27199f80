"""
Generative fallback boundary.

Rule-based repair is deterministic; the fallback is not. It is only consulted
after the rules have failed, at most once per ``fix`` call, and whatever it
produces is accepted only if the engine's own strict parser accepts it.
"""

from typing import Any, Callable, Optional

from loguru import logger

from ...config.settings import FallbackConfig
from ...models.repair_result import FixOptions, RepairResult

AI_FIX_LABEL = "AI-powered fix applied"


class RepairGenerator:
    """Base class for text generators used by the fallback."""

    def generate(self, prompt: str, max_new_tokens: int) -> str:
        raise NotImplementedError("Subclasses must implement generate method")


class ModelGenerator(RepairGenerator):
    """Local sequence model driven through a tokenizer.

    The tokenizer needs ``encode(text)`` and ``decode(ids)``; the model needs
    ``generate(input_ids, max_new_tokens, temperature)``.
    """

    def __init__(self, model: Any, tokenizer: Any, temperature: float = 0.7):
        self.model = model
        self.tokenizer = tokenizer
        self.temperature = temperature

    def generate(self, prompt: str, max_new_tokens: int) -> str:
        input_ids = self.tokenizer.encode(prompt)
        output_ids = self.model.generate(input_ids, max_new_tokens, self.temperature)
        return self.tokenizer.decode(output_ids)


class LLMClientGenerator(RepairGenerator):
    """Remote LLM client exposing ``call_llm(system_prompt, prompt, return_raw=True)``."""

    def __init__(self, llm_client: Any):
        self.llm_client = llm_client

    def generate(self, prompt: str, max_new_tokens: int) -> str:
        return self.llm_client.call_llm(self._get_repair_system_prompt(), prompt, return_raw=True)

    def _get_repair_system_prompt(self) -> str:
        """Get system prompt for document repair."""
        return (
            "You are a JSON and XML repair expert. Fix the broken document so that it "
            "parses, changing as little as possible. Return only the fixed document "
            "without explanations."
        )


def build_generator(options: Optional[FixOptions], temperature: float = 0.7) -> Optional[RepairGenerator]:
    """Pick a generator from fix options, preferring a local model."""
    if options is None or not options.use_ai:
        return None
    if options.model is not None and options.tokenizer is not None:
        return ModelGenerator(options.model, options.tokenizer, temperature)
    if options.llm_client is not None:
        return LLMClientGenerator(options.llm_client)
    return None


def build_prompt(document_type: str, text: str) -> str:
    return f"Fix this broken {document_type}:\n{text}\n\nFixed {document_type}:"


class FallbackRepair:
    """Runs the generative fallback for one document type."""

    def __init__(
        self,
        document_type: str,
        parse: Callable[[str], RepairResult],
        extract: Callable[[str], Optional[str]],
        max_new_tokens: int,
        fallback_config: Optional[FallbackConfig] = None,
    ):
        self.document_type = document_type
        self.parse = parse
        self.extract = extract
        self.max_new_tokens = max_new_tokens
        self.fallback_config = fallback_config or FallbackConfig()

    def is_available(self, options: Optional[FixOptions]) -> bool:
        return build_generator(options, self.fallback_config.temperature) is not None

    def repair(self, text: str, rule_result: RepairResult, options: Optional[FixOptions]) -> RepairResult:
        """Ask the generator for a fix; return ``rule_result`` unless the candidate parses."""
        generator = build_generator(options, self.fallback_config.temperature)
        if generator is None:
            logger.debug(f"No generative fallback configured for {self.document_type}")
            return rule_result

        prompt = build_prompt(self.document_type, text)
        try:
            generated = generator.generate(prompt, self.max_new_tokens)
        except Exception as e:
            logger.error(f"AI {self.document_type} fixing failed: {e}")
            return rule_result

        if not generated:
            logger.warning("Generative fallback returned empty response")
            return rule_result

        candidate = self.extract(generated)
        if candidate is None:
            logger.warning(f"No {self.document_type} found in generated text")
            return rule_result

        parse_result = self.parse(candidate)
        if not parse_result.success:
            logger.warning(f"Generated {self.document_type} did not parse, keeping rule-based result")
            return rule_result

        logger.info(f"Generative fallback produced valid {self.document_type}")
        return RepairResult(
            success=True,
            fixed_text=candidate,
            original_text=text,
            applied_fixes=[AI_FIX_LABEL] + list(rule_result.applied_fixes),
            parsed_value=parse_result.parsed_value,
            errors=[],
            can_retry_with_fallback=False,
            method="ai",
        )
