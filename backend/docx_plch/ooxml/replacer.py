"""
占位符替换器 - 标签感知的字面量替换

职责：
1. 直接路径：所有出现均为原样（未被标签拆分）时，整体字符串替换
2. 标签感知路径：跳过标签内字符逐字匹配，命中后整段原文（含被跨越的内部标签）替换为值
3. 跨度保护：单次匹配消耗的原文超过 max_span_factor × 字面量长度即放弃，
   该处保持原样、记录诊断，继续向后扫描
4. 替换值默认做XML转义
5. 批量替换：纯文本视图只生成一次，全部字面量在原文上匹配后一次拼接，
   替换值不再参与匹配（与字面量顺序无关）

说明：
- 标签感知匹配等价于在纯文本视图上查找字面量，再经映射表还原原文区间；
  这样每个字面量只需一次线性扫描
- 直接路径仅在结果与标签感知路径完全一致时采用（单字面量 replace）
- 命中区间内的格式边界（内部标签）随匹配一并丢弃

测试要点：
- test_replace_verbatim: 原样替换
- test_replace_split_token: 跨 run 替换并去掉内部标签
- test_abandon_long_span: 跨度超限放弃
- test_direct_equals_tag_aware: 两条路径结果一致
- test_order_independent: 替换值中的占位符不被再次替换
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from xml.sax.saxutils import escape

from ..config import get_config
from ..interfaces import ITokenReplacer
from .scanner import CleanText, strip_markup

logger = logging.getLogger(__name__)


@dataclass
class LiteralMatches:
    """单个字面量的匹配结果"""
    length: int
    spans: list[tuple[int, int]] = field(default_factory=list)  # 原文区间
    abandoned: int = 0

    @property
    def all_verbatim(self) -> bool:
        return all(end - start == self.length for start, end in self.spans)


@dataclass
class ReplacementReport:
    """替换报告"""
    text: str
    replaced: dict[str, int] = field(default_factory=dict)
    abandoned: dict[str, int] = field(default_factory=dict)

    @property
    def total_replaced(self) -> int:
        return sum(self.replaced.values())

    @property
    def total_abandoned(self) -> int:
        return sum(self.abandoned.values())


class TokenReplacer(ITokenReplacer):
    """占位符替换实现"""

    def __init__(self, max_span_factor: int | None = None, escape_values: bool | None = None):
        matching = get_config().matching
        self.max_span_factor = (
            matching.max_span_factor if max_span_factor is None else max_span_factor
        )
        self.escape_values = matching.escape_values if escape_values is None else escape_values

    def find_matches(self, clean: CleanText, literal: str) -> LiteralMatches:
        """在纯文本视图上查找字面量，返回原文区间（不重叠、自左向右）"""
        length = len(literal)
        result = LiteralMatches(length=length)
        limit = self.max_span_factor * length

        pos = clean.text.find(literal)
        while pos != -1:
            raw_start, raw_end = clean.raw_span(pos, pos + length)
            if raw_end - raw_start > limit:
                result.abandoned += 1
                logger.warning(
                    f"占位符匹配跨度超限，保持原样: {literal} "
                    f"(原文 {raw_start}-{raw_end}, 上限 {limit})"
                )
                pos = clean.text.find(literal, pos + 1)
                continue
            result.spans.append((raw_start, raw_end))
            pos = clean.text.find(literal, pos + length)
        return result

    def replace_direct(self, document_xml: str, literal: str, value: str) -> str:
        """直接路径：原样出现全部替换"""
        return document_xml.replace(literal, value)

    def replace_tag_aware(
        self,
        document_xml: str,
        literal: str,
        value: str,
        clean: CleanText | None = None,
    ) -> tuple[str, LiteralMatches]:
        """标签感知路径：按原文区间拼接替换"""
        if clean is None:
            clean = strip_markup(document_xml)
        matches = self.find_matches(clean, literal)
        return self._splice(document_xml, matches.spans, value), matches

    @staticmethod
    def _splice(document_xml: str, spans: list[tuple[int, int]], value: str) -> str:
        if not spans:
            return document_xml
        pieces: list[str] = []
        cursor = 0
        for start, end in spans:
            pieces.append(document_xml[cursor:start])
            pieces.append(value)
            cursor = end
        pieces.append(document_xml[cursor:])
        return "".join(pieces)

    def replace(
        self,
        document_xml: str,
        literal: str,
        value: str,
        clean: CleanText | None = None,
    ) -> tuple[str, LiteralMatches]:
        """替换单个字面量（值已转义）"""
        if clean is None:
            clean = strip_markup(document_xml)
        matches = self.find_matches(clean, literal)
        if not matches.spans:
            return document_xml, matches

        if matches.all_verbatim and document_xml.count(literal) == len(matches.spans):
            return self.replace_direct(document_xml, literal, value), matches

        return self._splice(document_xml, matches.spans, value), matches

    def replace_all(self, document_xml: str, values: Mapping[str, str]) -> ReplacementReport:
        """
        替换全部占位符

        所有字面量都在同一个原文纯文本视图上匹配，最后一次性拼接：
        替换值不会被再次当作模板扫描，结果与字面量顺序无关。
        不同字面量的区间重叠时，起点靠前者优先（起点相同取较长者）。
        """
        report = ReplacementReport(text=document_xml)
        clean = strip_markup(document_xml)

        candidates: list[tuple[int, int, str, str]] = []
        for literal, value in values.items():
            if not literal:
                logger.warning("忽略空占位符")
                continue
            matches = self.find_matches(clean, literal)
            rendered = escape(value) if self.escape_values else value
            candidates.extend((start, end, literal, rendered) for start, end in matches.spans)
            report.replaced[literal] = 0
            if matches.abandoned:
                report.abandoned[literal] = matches.abandoned

        pieces: list[str] = []
        cursor = 0
        for start, end, literal, rendered in sorted(candidates, key=lambda c: (c[0], -c[1])):
            if start < cursor:
                logger.debug(f"占位符区间重叠，跳过: {literal} (原文 {start}-{end})")
                continue
            pieces.append(document_xml[cursor:start])
            pieces.append(rendered)
            cursor = end
            report.replaced[literal] += 1

        if pieces:
            pieces.append(document_xml[cursor:])
            report.text = "".join(pieces)
        return report
