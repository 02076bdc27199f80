from .extraction import extract_json_candidate, extract_xml_candidate
from .generative_fallback import (
    AI_FIX_LABEL,
    FallbackRepair,
    LLMClientGenerator,
    ModelGenerator,
    RepairGenerator,
    build_generator,
    build_prompt,
)

__all__ = [
    "AI_FIX_LABEL",
    "FallbackRepair",
    "LLMClientGenerator",
    "ModelGenerator",
    "RepairGenerator",
    "build_generator",
    "build_prompt",
    "extract_json_candidate",
    "extract_xml_candidate",
]
