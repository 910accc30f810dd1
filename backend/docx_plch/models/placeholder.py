"""
占位符模型 - 扫描结果与页面位置
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from pydantic import BaseModel, Field, model_validator


class PlaceholderToken(BaseModel):
    """占位符（偏移均为左闭右开）"""
    text: str = Field(..., description="字面量，含 {{ }}")

    # 纯文本视图中的位置
    start: int = Field(..., ge=0)
    end: int
    line: int = Field(1, ge=1)
    column: int = Field(1, ge=1)

    # 原始XML中的位置
    raw_start: int = Field(..., ge=0)
    raw_end: int

    # 坐标（由坐标映射器填充）
    x: float | None = None
    y: float | None = None
    width: float | None = None
    height: float | None = None
    page: int | None = None
    paragraph_id: int | None = None
    in_table: bool = False

    @model_validator(mode="after")
    def _check_span(self) -> PlaceholderToken:
        if self.start >= self.end:
            raise ValueError(f"占位符区间非法: start={self.start} end={self.end}")
        if self.raw_start >= self.raw_end:
            raise ValueError(f"占位符原文区间非法: raw_start={self.raw_start} raw_end={self.raw_end}")
        return self

    @property
    def is_split(self) -> bool:
        """是否被内部标签拆分"""
        return (self.raw_end - self.raw_start) != (self.end - self.start)

    @property
    def is_located(self) -> bool:
        return self.page is not None


def resolve_values(literals: Iterable[str], values: Mapping[str, str]) -> dict[str, str]:
    """补全替换表：文档中存在但未提供值的占位符替换为空串"""
    return {literal: values.get(literal, "") for literal in literals}
