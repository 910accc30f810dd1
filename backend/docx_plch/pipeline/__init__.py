"""
流水线模块 - 阶段定义、执行器与序列化
"""

from .executor import (
    PipelineExecutor,
    detect_orientation,
    extract_placeholders,
    list_placeholders,
    substitute,
)
from .serializer import (
    placeholders_from_json,
    placeholders_to_json,
    positions_to_json,
    values_from_json,
)
from .stages import STAGES_BY_JOB_TYPE, PipelineStage, StageEnum

__all__ = [
    "PipelineExecutor",
    "extract_placeholders",
    "list_placeholders",
    "substitute",
    "detect_orientation",
    "placeholders_to_json",
    "positions_to_json",
    "placeholders_from_json",
    "values_from_json",
    "PipelineStage",
    "StageEnum",
    "STAGES_BY_JOB_TYPE",
]
