"""
坐标映射器 - 原始偏移 → 段落/表格上下文与页面坐标

职责：
1. 一次遍历收集段落/表格/行/单元格标记的原文偏移（之后二分查询）
2. 段落序号 = 偏移之前的段落起始标记数（最小为1）
3. 表格判定：最近的表格起始比最近的表格结束更靠近偏移
4. 按版面估算坐标与页码

注意：
- 这是粗略估算：每个段落按一行计，不考虑字体度量、换行与分页符
- 嵌套表格按最近标记近似，不做结构解析
- 相同版面+相同偏移结果确定

坐标公式：
    y_raw  = margin_top + (line - 1) * line_height
    page   = floor(y_raw / page_height) + 1（最小1）
    y      = y_raw - (page - 1) * page_height
    x      = margin_left
    width  = len(text) * font_size * char_width_ratio
    height = font_size * line_height_ratio
"""

from __future__ import annotations

import bisect
import math
import re

from ..config import get_config
from ..interfaces import ICoordinateMapper
from ..models import DocumentLayout, ParagraphContext, PlaceholderToken, TokenPosition

_MARKER_RE = re.compile(r"<(/?)w:(p|tbl|tr|tc)(?=[\s>/])")


class CoordinateMapper(ICoordinateMapper):
    """坐标映射实现（绑定单个文档）"""

    def __init__(
        self,
        document_xml: str,
        layout: DocumentLayout,
        font_size: float | None = None,
        char_width_ratio: float | None = None,
        line_height_ratio: float | None = None,
    ):
        mapping = get_config().mapping
        self.layout = layout
        self.font_size = mapping.font_size if font_size is None else font_size
        self.char_width_ratio = (
            mapping.char_width_ratio if char_width_ratio is None else char_width_ratio
        )
        self.line_height_ratio = (
            mapping.line_height_ratio if line_height_ratio is None else line_height_ratio
        )

        self._paragraphs: list[int] = []
        self._table_starts: list[int] = []
        self._table_ends: list[int] = []
        self._rows: list[int] = []
        self._cells: list[int] = []
        self._collect_markers(document_xml)

    def _collect_markers(self, document_xml: str) -> None:
        for m in _MARKER_RE.finditer(document_xml):
            closing, name = m.group(1), m.group(2)
            offset = m.start()
            if name == "tbl":
                (self._table_ends if closing else self._table_starts).append(offset)
            elif closing:
                continue
            elif name == "p":
                self._paragraphs.append(offset)
            elif name == "tr":
                self._rows.append(offset)
            else:
                self._cells.append(offset)

    @staticmethod
    def _count_between(markers: list[int], low: int, high: int) -> int:
        """low <= 标记偏移 < high 的个数"""
        return bisect.bisect_left(markers, high) - bisect.bisect_left(markers, low)

    @staticmethod
    def _nearest_before(markers: list[int], offset: int) -> int | None:
        idx = bisect.bisect_left(markers, offset)
        return markers[idx - 1] if idx else None

    def paragraph_index(self, raw_offset: int) -> int:
        """偏移之前的段落起始数（1起始）"""
        return max(bisect.bisect_left(self._paragraphs, raw_offset), 1)

    def paragraph_context(self, raw_offset: int) -> ParagraphContext:
        """段落与表格上下文"""
        ctx = ParagraphContext(paragraph_index=self.paragraph_index(raw_offset))

        table_start = self._nearest_before(self._table_starts, raw_offset)
        table_end = self._nearest_before(self._table_ends, raw_offset)
        if table_start is None or (table_end is not None and table_end > table_start):
            return ctx

        ctx.in_table = True
        ctx.table_row = max(self._count_between(self._rows, table_start, raw_offset), 1)
        row_start = self._nearest_before(self._rows, raw_offset)
        if row_start is None or row_start < table_start:
            row_start = table_start
        ctx.table_col = max(self._count_between(self._cells, row_start, raw_offset), 1)
        return ctx

    def line_to_y(self, line: int) -> float:
        """段落序号 → 未分页的纵向偏移 y_raw"""
        return self.layout.margin_top + (line - 1) * self.layout.line_height

    def compute_position(self, raw_offset: int, text_length: int) -> TokenPosition:
        """估算页面坐标"""
        line = self.paragraph_index(raw_offset)
        y_raw = self.line_to_y(line)
        page_height = self.layout.page_height
        page = max(math.floor(y_raw / page_height) + 1, 1) if page_height > 0 else 1
        return TokenPosition(
            x=self.layout.margin_left,
            y=y_raw - (page - 1) * page_height,
            width=text_length * self.font_size * self.char_width_ratio,
            height=self.font_size * self.line_height_ratio,
            page=page,
            line=line,
        )

    def locate(self, token: PlaceholderToken) -> PlaceholderToken:
        """返回填充了坐标字段的新占位符"""
        position = self.compute_position(token.raw_start, len(token.text))
        ctx = self.paragraph_context(token.raw_start)
        return token.model_copy(
            update={
                "x": position.x,
                "y": position.y,
                "width": position.width,
                "height": position.height,
                "page": position.page,
                "paragraph_id": ctx.paragraph_index,
                "in_table": ctx.in_table,
            }
        )
