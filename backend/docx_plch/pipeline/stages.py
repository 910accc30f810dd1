"""
流水线阶段定义

职责：
1. 定义各阶段的名称与进度区间
2. 按任务类型给出阶段序列（严格顺序执行，后一阶段消费前一阶段产物）

取消检查只发生在阶段之间，阶段内部（逐字符扫描）不响应取消
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..models import JobType


class StageEnum(str, Enum):
    """流水线阶段枚举"""
    UNPACK = "UNPACK"
    ANALYZE_LAYOUT = "ANALYZE_LAYOUT"
    SCAN_PLACEHOLDERS = "SCAN_PLACEHOLDERS"
    MAP_COORDINATES = "MAP_COORDINATES"
    REPLACE_TOKENS = "REPLACE_TOKENS"
    REPACK = "REPACK"


@dataclass
class PipelineStage:
    """流水线阶段"""
    name: str
    progress_start: int  # 进度起点（0-100）
    progress_end: int    # 进度终点


# 占位符提取：解包 → 扫描 → 版面 → 坐标
EXTRACT_STAGES: list[PipelineStage] = [
    PipelineStage(StageEnum.UNPACK.value, 0, 30),
    PipelineStage(StageEnum.SCAN_PLACEHOLDERS.value, 30, 60),
    PipelineStage(StageEnum.ANALYZE_LAYOUT.value, 60, 75),
    PipelineStage(StageEnum.MAP_COORDINATES.value, 75, 100),
]

# 占位符替换：解包 → 扫描 → 替换 → 打包
SUBSTITUTE_STAGES: list[PipelineStage] = [
    PipelineStage(StageEnum.UNPACK.value, 0, 25),
    PipelineStage(StageEnum.SCAN_PLACEHOLDERS.value, 25, 45),
    PipelineStage(StageEnum.REPLACE_TOKENS.value, 45, 75),
    PipelineStage(StageEnum.REPACK.value, 75, 100),
]

# 方向检测：解包 → 版面
ORIENTATION_STAGES: list[PipelineStage] = [
    PipelineStage(StageEnum.UNPACK.value, 0, 60),
    PipelineStage(StageEnum.ANALYZE_LAYOUT.value, 60, 100),
]

STAGES_BY_JOB_TYPE: dict[JobType, list[PipelineStage]] = {
    JobType.EXTRACT: EXTRACT_STAGES,
    JobType.SUBSTITUTE: SUBSTITUTE_STAGES,
    JobType.ORIENTATION: ORIENTATION_STAGES,
}
