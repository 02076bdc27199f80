"""
XML Service Module

Rule-based repair of near-valid XML.

Main Components:
- XMLRepairEngine: parse, fix, validate and prettify XML documents

Usage:
    from repairkit.services.xml_service import XMLRepairEngine

    engine = XMLRepairEngine()
    result = engine.fix('<root><item>v</root>')
    result.fixed_text      # '<?xml ...?>\\n<root><item>v</item></root>'
    result.applied_fixes   # ['Added XML declaration', 'Fixed 1 unclosed tag(s): item']
"""

from .xml_service import XMLRepairEngine

__all__ = [
    'XMLRepairEngine'
]
