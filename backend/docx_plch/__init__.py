"""
docx 占位符引擎 - 后端核心模块

模块结构：
- config/     运行期配置加载
- models/     数据模型定义
- ooxml/      容器解包/版面分析/占位符扫描/坐标估算/替换/打包
- pipeline/   流水线编排与序列化
"""

from .interfaces import (
    ArchiveError,
    DocxPlchError,
    JobCancelledError,
    MissingPartError,
    NotAContainerError,
    PathEscapeError,
    WorkspaceIOError,
)
from .pipeline import (
    PipelineExecutor,
    detect_orientation,
    extract_placeholders,
    list_placeholders,
    substitute,
)

__version__ = "0.1.0"

__all__ = [
    "PipelineExecutor",
    "extract_placeholders",
    "list_placeholders",
    "substitute",
    "detect_orientation",
    "DocxPlchError",
    "ArchiveError",
    "NotAContainerError",
    "PathEscapeError",
    "MissingPartError",
    "WorkspaceIOError",
    "JobCancelledError",
]
