"""
数据模型层 - 定义系统核心数据结构

所有组件通过这些模型交互，实现解耦：
- ArchiveEntry: 容器条目
- DocumentLayout / ParagraphContext / TokenPosition: 版面与位置
- PlaceholderToken: 占位符扫描结果
- Job: 单次调用的任务状态
"""

from .archive import ArchiveEntry
from .job import Job, JobProgress, JobStatus, JobType
from .layout import DocumentLayout, ParagraphContext, TokenPosition
from .placeholder import PlaceholderToken, resolve_values

__all__ = [
    "ArchiveEntry",
    "DocumentLayout",
    "ParagraphContext",
    "TokenPosition",
    "PlaceholderToken",
    "resolve_values",
    "Job",
    "JobProgress",
    "JobStatus",
    "JobType",
]
