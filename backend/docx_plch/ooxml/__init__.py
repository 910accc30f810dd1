"""
OOXML 处理模块 - docx 解包/分析/替换/打包

子模块：
- workspace: 单次调用独占的解包目录
- unpacker: 容器解包（zip-slip 防护）
- layout_analyzer: 节属性 → 页面几何
- scanner: 去标签纯文本视图 + 占位符定位
- coordinate_mapper: 原始偏移 → 段落/表格上下文与坐标
- replacer: 标签感知替换
- repacker: 工作区重打包
"""

from .coordinate_mapper import CoordinateMapper
from .layout_analyzer import LayoutAnalyzer
from .repacker import ArchiveRepacker
from .replacer import ReplacementReport, TokenReplacer
from .scanner import CleanText, PlaceholderScanner, strip_markup, unique_literals, unique_tokens
from .unpacker import ArchiveUnpacker
from .workspace import Workspace

__all__ = [
    "Workspace",
    "ArchiveUnpacker",
    "ArchiveRepacker",
    "LayoutAnalyzer",
    "PlaceholderScanner",
    "CleanText",
    "strip_markup",
    "unique_literals",
    "unique_tokens",
    "CoordinateMapper",
    "TokenReplacer",
    "ReplacementReport",
]
