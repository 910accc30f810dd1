"""
占位符扫描器 - 去标签纯文本视图 + 占位符定位

职责：
1. 一次遍历生成纯文本视图，同时建立 纯文本下标 → 原文下标 映射表
2. 在纯文本上自左向右查找 {{ ... }}，不重叠、不嵌套
3. 计算行列号（纯文本中以换行分行）与原文区间
4. 去重并保持首次出现顺序

说明：
- 从 '<' 到随后第一个 '>'（含）视为标签；未闭合的 '<' 吞掉其后全部文本
- 标签外的 '>' 按普通字符保留
- 不解码XML实体（&amp; 等按原样保留在纯文本中）

测试要点：
- test_strip_markup_offsets: 映射表指回原文
- test_scan_split_token: 被 run 拆分的占位符
- test_unique_literals_order: 去重保序
"""

from __future__ import annotations

import bisect
import re
from collections.abc import Iterable
from dataclasses import dataclass

from ..interfaces import IPlaceholderScanner
from ..models import PlaceholderToken

OPEN_DELIMITER = "{{"
CLOSE_DELIMITER = "}}"

_TAG_RE = re.compile(r"<[^>]*(?:>|\Z)")


@dataclass(frozen=True)
class CleanText:
    """纯文本视图：text[i] 对应原文 raw[offsets[i]]"""
    text: str
    offsets: list[int]

    def raw_span(self, start: int, end: int) -> tuple[int, int]:
        """纯文本区间 [start, end) → 原文区间 [raw_start, raw_end)"""
        return self.offsets[start], self.offsets[end - 1] + 1


def strip_markup(raw: str) -> CleanText:
    """去除标签，一次遍历同时生成映射表"""
    pieces: list[str] = []
    offsets: list[int] = []
    cursor = 0
    for m in _TAG_RE.finditer(raw):
        if m.start() > cursor:
            pieces.append(raw[cursor:m.start()])
            offsets.extend(range(cursor, m.start()))
        cursor = m.end()
    if cursor < len(raw):
        pieces.append(raw[cursor:])
        offsets.extend(range(cursor, len(raw)))
    return CleanText("".join(pieces), offsets)


def find_token_spans(
    text: str,
    open_delimiter: str = OPEN_DELIMITER,
    close_delimiter: str = CLOSE_DELIMITER,
) -> list[tuple[int, int]]:
    """查找占位符区间（左闭右开）"""
    spans: list[tuple[int, int]] = []
    pos = 0
    while True:
        start = text.find(open_delimiter, pos)
        if start == -1:
            break
        close = text.find(close_delimiter, start + len(open_delimiter))
        if close == -1:
            break
        # 不嵌套：取 }} 之前最后一个 {{
        start = text.rfind(open_delimiter, start, close)
        end = close + len(close_delimiter)
        spans.append((start, end))
        pos = end
    return spans


def unique_literals(tokens: Iterable[PlaceholderToken]) -> list[str]:
    """去重，保持首次出现顺序"""
    return list(dict.fromkeys(token.text for token in tokens))


def unique_tokens(tokens: Iterable[PlaceholderToken]) -> list[PlaceholderToken]:
    """按字面量去重，保留首次出现的占位符"""
    seen: dict[str, PlaceholderToken] = {}
    for token in tokens:
        seen.setdefault(token.text, token)
    return list(seen.values())


class PlaceholderScanner(IPlaceholderScanner):
    """占位符扫描实现"""

    def __init__(
        self,
        open_delimiter: str = OPEN_DELIMITER,
        close_delimiter: str = CLOSE_DELIMITER,
    ):
        self.open_delimiter = open_delimiter
        self.close_delimiter = close_delimiter

    def scan(self, document_xml: str) -> list[PlaceholderToken]:
        """扫描全部占位符（含重复，按出现顺序）"""
        return self.scan_clean(strip_markup(document_xml))

    def scan_clean(self, clean: CleanText) -> list[PlaceholderToken]:
        """在已生成的纯文本视图上扫描"""
        text = clean.text
        line_starts = [0] + [i + 1 for i, ch in enumerate(text) if ch == "\n"]

        tokens: list[PlaceholderToken] = []
        for start, end in find_token_spans(text, self.open_delimiter, self.close_delimiter):
            line = bisect.bisect_right(line_starts, start)
            raw_start, raw_end = clean.raw_span(start, end)
            tokens.append(
                PlaceholderToken(
                    text=text[start:end],
                    start=start,
                    end=end,
                    line=line,
                    column=start - line_starts[line - 1] + 1,
                    raw_start=raw_start,
                    raw_end=raw_end,
                )
            )
        return tokens

    def extract_literals(self, document_xml: str) -> list[str]:
        """提取去重后的占位符字面量"""
        return unique_literals(self.scan(document_xml))
