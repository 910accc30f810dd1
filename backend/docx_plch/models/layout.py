"""
版面模型 - 页面几何与段落上下文

单位统一为磅（1/72 英寸），节属性中的 twip 已在分析阶段换算
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class DocumentLayout(BaseModel):
    """页面几何（默认 Letter 纵向）"""
    page_width: float = 612.0
    page_height: float = 792.0
    margin_top: float = 72.0
    margin_bottom: float = 72.0
    margin_left: float = 72.0
    margin_right: float = 72.0
    line_height: float = 14.4
    landscape: bool = False

    @property
    def content_width(self) -> float:
        return self.page_width - self.margin_left - self.margin_right

    @property
    def content_height(self) -> float:
        return self.page_height - self.margin_top - self.margin_bottom


class ParagraphContext(BaseModel):
    """段落/表格上下文（启发式估算，非结构化解析）"""
    paragraph_index: int = Field(1, ge=1, description="1起始段落序号")
    in_table: bool = False
    table_row: int | None = Field(None, description="表格行估计（1起始）")
    table_col: int | None = Field(None, description="表格列估计（1起始）")


class TokenPosition(BaseModel):
    """页面坐标（粗略估算）"""
    x: float
    y: float
    width: float
    height: float
    page: int = Field(1, ge=1)
    line: int = Field(1, ge=1)
