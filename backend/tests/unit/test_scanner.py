"""
占位符扫描单元测试

每个模块完成后必须运行：pytest tests/unit/test_scanner.py -v
"""

from docx_plch.ooxml import PlaceholderScanner, strip_markup, unique_literals, unique_tokens
from docx_plch.ooxml.scanner import find_token_spans


class TestStripMarkup:
    """纯文本视图测试"""

    def test_strip_markup_offsets(self):
        """测试映射表指回原文"""
        raw = "<a>b</a>c"
        clean = strip_markup(raw)
        assert clean.text == "bc"
        assert clean.offsets == [3, 8]
        assert all(raw[o] == ch for o, ch in zip(clean.offsets, clean.text))

    def test_stray_close_bracket_kept(self):
        """测试标签外的 '>' 按普通字符保留"""
        clean = strip_markup("a>b<x/>c")
        assert clean.text == "a>bc"

    def test_unterminated_tag(self):
        """测试未闭合的 '<' 吞掉其后全部文本"""
        clean = strip_markup("ab<cd {{x}}")
        assert clean.text == "ab"

    def test_entities_not_decoded(self):
        clean = strip_markup("<w:t>A &amp; B</w:t>")
        assert clean.text == "A &amp; B"

    def test_raw_span(self):
        """测试纯文本区间还原为原文区间（含内部标签）"""
        raw = "<t>{{na</t><t>me}}</t>"
        clean = strip_markup(raw)
        start, end = clean.raw_span(0, len(clean.text))
        assert raw[start:end] == "{{na</t><t>me}}"


class TestFindTokenSpans:
    """占位符定位测试"""

    def test_basic(self):
        assert find_token_spans("x {{a}} y {{b}}") == [(2, 7), (10, 15)]

    def test_no_nesting(self):
        """测试不嵌套：取 }} 之前最后一个 {{"""
        text = "{{a {{b}} c}}"
        spans = find_token_spans(text)
        assert [text[s:e] for s, e in spans] == ["{{b}}"]

    def test_unclosed(self):
        assert find_token_spans("{{a } {{b") == []

    def test_non_overlapping(self):
        text = "{{a}}}}{{b}}"
        assert [text[s:e] for s, e in find_token_spans(text)] == ["{{a}}", "{{b}}"]


class TestPlaceholderScanner:
    """扫描器测试"""

    def test_scan_verbatim(self):
        """测试原样占位符"""
        raw = "<w:p><w:r><w:t>Hello {{name}}</w:t></w:r></w:p>"
        tokens = PlaceholderScanner().scan(raw)

        assert len(tokens) == 1
        token = tokens[0]
        assert token.text == "{{name}}"
        assert raw[token.raw_start:token.raw_end] == "{{name}}"
        assert (token.start, token.end) == (6, 14)
        assert not token.is_split

    def test_scan_split_token(self):
        """测试被 run 拆分的占位符"""
        raw = "<w:r><w:t>{{na</w:t></w:r><w:r><w:t>me}}</w:t></w:r>"
        token = PlaceholderScanner().scan(raw)[0]

        assert token.text == "{{name}}"
        assert token.is_split
        assert raw[token.raw_start:token.raw_end] == "{{na</w:t></w:r><w:r><w:t>me}}"

    def test_line_and_column(self):
        """测试行列号（1起始，纯文本中以换行分行）"""
        tokens = PlaceholderScanner().scan("<a>x</a>\n  {{t}}")
        assert (tokens[0].line, tokens[0].column) == (2, 3)

    def test_first_line_column(self):
        tokens = PlaceholderScanner().scan("{{t}}")
        assert (tokens[0].line, tokens[0].column) == (1, 1)

    def test_duplicates_kept_in_scan(self):
        """测试扫描结果包含重复出现"""
        tokens = PlaceholderScanner().scan("{{a}} {{b}} {{a}}")
        assert [t.text for t in tokens] == ["{{a}}", "{{b}}", "{{a}}"]

    def test_unique_literals_order(self):
        """测试去重保序"""
        tokens = PlaceholderScanner().scan("{{a}} {{b}} {{a}}")
        assert unique_literals(tokens) == ["{{a}}", "{{b}}"]
        kept = unique_tokens(tokens)
        assert [t.start for t in kept] == [0, 6]

    def test_extract_literals(self):
        raw = "<p>{{甲}}</p><p>{{乙}}</p><p>{{甲}}</p>"
        assert PlaceholderScanner().extract_literals(raw) == ["{{甲}}", "{{乙}}"]

    def test_attribute_text_ignored(self):
        """测试属性值中的花括号不算占位符"""
        tokens = PlaceholderScanner().scan('<w:t a="{{x}}">plain</w:t>')
        assert tokens == []

    def test_custom_delimiters(self):
        scanner = PlaceholderScanner("[[", "]]")
        assert scanner.extract_literals("<t>[[a]] {{b}}</t>") == ["[[a]]"]
