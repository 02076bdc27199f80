"""
JSON Service Module

Rule-based repair of near-valid JSON.

Usage:
    from repairkit.services.json_service import JSONRepairEngine

    engine = JSONRepairEngine()
    result = engine.fix('{"a": 1,}')
    result.fixed_text      # '{"a": 1}'
    result.applied_fixes   # ['Removed trailing commas']
"""

from .json_service import JSONRepairEngine

__all__ = [
    'JSONRepairEngine'
]
