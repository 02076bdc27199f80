from .json_service import JSONRepairEngine
from .repair_service import FormatResult, RepairService
from .xml_service import XMLRepairEngine

__all__ = [
    "FormatResult",
    "JSONRepairEngine",
    "RepairService",
    "XMLRepairEngine",
]
