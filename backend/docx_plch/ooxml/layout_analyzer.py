"""
版面分析器 - 由节属性推导页面几何

职责：
1. 定位最后一个 w:sectPr（文档末节决定默认页面）
2. w:pgSz 宽高（twip → 磅，/20）与 w:orient
3. w:pgMar 四边距
4. 未声明方向时按宽>高推断横向

容错：缺失或非法属性逐字段回落默认值，整体从不失败

测试要点：
- test_analyze_defaults: 无节属性 → Letter纵向
- test_infer_landscape: 15840x12240 无orient → 横向
- test_explicit_orient_wins: orient 优先于宽高推断
- test_partial_margins: 缺失边距保留默认
"""

from __future__ import annotations

import logging
import re

from ..config import get_config
from ..interfaces import ILayoutAnalyzer
from ..models import DocumentLayout

logger = logging.getLogger(__name__)

TWIPS_PER_POINT = 20.0

_SECT_PR_RE = re.compile(r"<w:sectPr\b[^>]*?(?:/>|>.*?</w:sectPr\s*>)", re.DOTALL)
_PG_SZ_RE = re.compile(r"<w:pgSz\b([^>]*)>")
_PG_MAR_RE = re.compile(r"<w:pgMar\b([^>]*)>")
_ATTR_RE = re.compile(r"([\w:.-]+)\s*=\s*(?:\"([^\"]*)\"|'([^']*)')")

# pgMar 属性 → DocumentLayout 字段（start/end 为 strict 写法，left/right 同时存在时以后者为准）
_MARGIN_ATTRS = {
    "top": "margin_top",
    "bottom": "margin_bottom",
    "start": "margin_left",
    "end": "margin_right",
    "left": "margin_left",
    "right": "margin_right",
}


def parse_attributes(tag_body: str) -> dict[str, str]:
    """解析标签属性，键为去掉命名空间前缀的本地名"""
    attrs: dict[str, str] = {}
    for m in _ATTR_RE.finditer(tag_body):
        name = m.group(1).rsplit(":", 1)[-1]
        value = m.group(2) if m.group(2) is not None else m.group(3)
        attrs.setdefault(name, value)
    return attrs


def twips_to_points(value: str | None) -> float | None:
    """twip 字符串 → 磅；非法值返回 None"""
    if value is None:
        return None
    try:
        points = float(value.strip()) / TWIPS_PER_POINT
    except ValueError:
        return None
    if points != points or points < 0:  # NaN / 负数
        return None
    return points


class LayoutAnalyzer(ILayoutAnalyzer):
    """版面分析实现"""

    def __init__(self, defaults: DocumentLayout | None = None):
        if defaults is None:
            defaults = DocumentLayout(**get_config().layout_defaults.model_dump())
        self.defaults = defaults

    def analyze(self, document_xml: str) -> DocumentLayout:
        """解析主文本部件，得到页面几何"""
        layout = self.defaults.model_copy()
        layout.landscape = False

        section = self._last_section(document_xml)
        if section is None:
            logger.debug("未找到节属性，使用默认版面")
            return layout

        orientation = None
        size_match = _PG_SZ_RE.search(section)
        if size_match:
            attrs = parse_attributes(size_match.group(1))
            width = twips_to_points(attrs.get("w"))
            height = twips_to_points(attrs.get("h"))
            if width:
                layout.page_width = width
            elif "w" in attrs:
                logger.warning(f"页面宽度非法，使用默认值: w={attrs['w']!r}")
            if height:
                layout.page_height = height
            elif "h" in attrs:
                logger.warning(f"页面高度非法，使用默认值: h={attrs['h']!r}")
            orientation = attrs.get("orient")

        margin_match = _PG_MAR_RE.search(section)
        if margin_match:
            self._apply_margins(layout, parse_attributes(margin_match.group(1)))

        layout.landscape = self._resolve_orientation(orientation, layout)
        return layout

    def is_landscape(self, document_xml: str) -> bool:
        return self.analyze(document_xml).landscape

    @staticmethod
    def _last_section(document_xml: str) -> str | None:
        last = None
        for last in _SECT_PR_RE.finditer(document_xml):
            pass
        return last.group(0) if last else None

    @staticmethod
    def _apply_margins(layout: DocumentLayout, attrs: dict[str, str]) -> None:
        for attr, field in _MARGIN_ATTRS.items():
            if attr not in attrs:
                continue
            value = twips_to_points(attrs[attr])
            if value is None:
                logger.warning(f"页边距非法，使用默认值: {attr}={attrs[attr]!r}")
                continue
            setattr(layout, field, value)

    @staticmethod
    def _resolve_orientation(orientation: str | None, layout: DocumentLayout) -> bool:
        """显式 orient 优先；否则宽>高视为横向"""
        if orientation is not None:
            value = orientation.strip().lower()
            if value == "landscape":
                return True
            if value == "portrait":
                return False
            logger.warning(f"未知页面方向，按宽高推断: orient={orientation!r}")
        return layout.page_width > layout.page_height
