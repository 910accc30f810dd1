"""
序列化单元测试

每个模块完成后必须运行：pytest tests/unit/test_serializer.py -v
"""

import json

import pytest
from pydantic import ValidationError

from docx_plch.models import DocumentLayout
from docx_plch.ooxml import CoordinateMapper, PlaceholderScanner
from docx_plch.pipeline import (
    placeholders_from_json,
    placeholders_to_json,
    positions_to_json,
    values_from_json,
)

XML = "<w:p><w:r><w:t>{{姓名}} {{date}}</w:t></w:r></w:p><w:p><w:r><w:t>{{姓名}}</w:t></w:r></w:p>"


@pytest.fixture
def located_tokens():
    mapper = CoordinateMapper(XML, DocumentLayout())
    return [mapper.locate(t) for t in PlaceholderScanner().scan(XML)]


class TestSerializer:
    """JSON 序列化测试"""

    def test_placeholders_to_json(self, located_tokens):
        """测试字面量数组（去重保序，不转义中文）"""
        text = placeholders_to_json(located_tokens)
        assert json.loads(text) == ["{{姓名}}", "{{date}}"]
        assert "姓名" in text

    def test_positions_to_json(self, located_tokens):
        """测试位置记录数组"""
        records = json.loads(positions_to_json(located_tokens))
        assert len(records) == 3
        assert records[2]["paragraph_id"] == 2
        assert {"text", "raw_start", "x", "y", "page", "in_table"} <= set(records[0])

    def test_positions_parse_back(self, located_tokens):
        tokens = placeholders_from_json(positions_to_json(located_tokens))
        assert tokens == located_tokens

    def test_values_from_json(self):
        assert values_from_json('{"{{a}}": "甲"}') == {"{{a}}": "甲"}

    def test_values_reject_non_string(self):
        """测试值不是字符串时报错"""
        with pytest.raises(ValidationError):
            values_from_json('{"{{a}}": 1}')
        with pytest.raises(ValidationError):
            values_from_json('["{{a}}"]')
