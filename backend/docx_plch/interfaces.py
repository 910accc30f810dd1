"""
模块接口契约 - 定义各组件的抽象接口与异常

设计原则：
1. 组件间通过接口通信，不直接依赖具体实现
2. 每个接口定义清晰的输入输出类型
3. 便于单元测试和mock替换

使用方式：
    from docx_plch.interfaces import ILayoutAnalyzer

    class MyLayoutAnalyzer(ILayoutAnalyzer):
        def analyze(self, document_xml: str) -> DocumentLayout:
            ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import (
        ArchiveEntry,
        DocumentLayout,
        ParagraphContext,
        PlaceholderToken,
    )
    from .ooxml.replacer import ReplacementReport
    from .ooxml.workspace import Workspace


# ============================================================================
# 容器读写接口
# ============================================================================

class IArchiveUnpacker(ABC):
    """解包器接口 - 容器字节流展开到工作区"""

    @abstractmethod
    def unpack(self, container: bytes, workspace: Workspace) -> list[ArchiveEntry]:
        """
        解包容器

        Args:
            container: docx容器字节流
            workspace: 已创建的工作区

        Returns:
            按归档顺序排列的条目列表

        Raises:
            NotAContainerError: 输入不是合法的zip结构
            PathEscapeError: 条目路径越出工作区根目录
            WorkspaceIOError: 写盘失败
        """
        ...


class IArchiveRepacker(ABC):
    """重打包器接口 - 工作区序列化回容器"""

    @abstractmethod
    def repack(self, workspace: Workspace, order: list[str] | None = None) -> bytes:
        """
        重打包工作区

        Args:
            workspace: 工作区
            order: 原始条目顺序（可选）

        Returns:
            完整的docx容器字节流

        Raises:
            WorkspaceIOError: 读文件失败
        """
        ...


# ============================================================================
# 文档分析接口
# ============================================================================

class ILayoutAnalyzer(ABC):
    """版面分析器接口 - 节属性推导页面几何"""

    @abstractmethod
    def analyze(self, document_xml: str) -> DocumentLayout:
        """
        解析最后一个节属性块

        缺失或非法属性逐字段回落默认值，从不失败
        """
        ...


class IPlaceholderScanner(ABC):
    """占位符扫描器接口"""

    @abstractmethod
    def scan(self, document_xml: str) -> list[PlaceholderToken]:
        """
        扫描全部占位符（含重复）

        Returns:
            按出现顺序排列的占位符（坐标字段未填充）
        """
        ...


class ICoordinateMapper(ABC):
    """坐标映射器接口 - 原始偏移 → 段落/表格上下文与页面坐标"""

    @abstractmethod
    def paragraph_context(self, raw_offset: int) -> ParagraphContext:
        """计算原始偏移所在的段落与表格上下文"""
        ...

    @abstractmethod
    def locate(self, token: PlaceholderToken) -> PlaceholderToken:
        """返回填充了坐标字段的新占位符"""
        ...


class ITokenReplacer(ABC):
    """占位符替换器接口"""

    @abstractmethod
    def replace_all(self, document_xml: str, values: Mapping[str, str]) -> ReplacementReport:
        """
        替换所有占位符

        Args:
            document_xml: 主文本部件原文
            values: 占位符字面量 → 替换值

        Returns:
            替换报告（新文本+计数）
        """
        ...


# ============================================================================
# 异常定义
# ============================================================================

class DocxPlchError(Exception):
    """基础异常"""
    pass


class ArchiveError(DocxPlchError):
    """容器错误"""
    pass


class NotAContainerError(ArchiveError):
    """输入不是合法容器"""
    pass


class PathEscapeError(ArchiveError):
    """条目路径越出工作区（zip-slip）"""

    def __init__(self, entry_path: str):
        super().__init__(f"条目路径越出工作区: {entry_path}")
        self.entry_path = entry_path


class MissingPartError(ArchiveError):
    """主文本部件缺失"""

    def __init__(self, part: str):
        super().__init__(f"主文本部件不存在: {part}")
        self.part = part


class WorkspaceIOError(DocxPlchError, OSError):
    """工作区读写错误（附带出错路径）"""

    def __init__(self, message: str, path: Path | str | None = None):
        super().__init__(f"{message}: {path}" if path is not None else message)
        self.path = Path(path) if path is not None else None


class JobCancelledError(DocxPlchError):
    """任务在阶段之间被取消"""
    pass
