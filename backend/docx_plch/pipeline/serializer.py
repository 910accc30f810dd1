"""
序列化 - 占位符列表/位置记录/替换表的JSON形式

- placeholders_to_json: 字面量数组（简单列表场景）
- positions_to_json: 完整位置记录数组（版面叠加场景）
- values_from_json: JSON对象 → 替换表（值必须为字符串）
"""

from __future__ import annotations

import json
from collections.abc import Iterable

from pydantic import TypeAdapter

from ..models import PlaceholderToken
from ..ooxml import unique_literals

_VALUES_ADAPTER = TypeAdapter(dict[str, str])
_TOKENS_ADAPTER = TypeAdapter(list[PlaceholderToken])


def placeholders_to_json(tokens: Iterable[PlaceholderToken], indent: int | None = None) -> str:
    return json.dumps(unique_literals(tokens), ensure_ascii=False, indent=indent)


def positions_to_json(tokens: Iterable[PlaceholderToken], indent: int | None = None) -> str:
    records = [token.model_dump(mode="json") for token in tokens]
    return json.dumps(records, ensure_ascii=False, indent=indent)


def placeholders_from_json(data: str | bytes) -> list[PlaceholderToken]:
    """位置记录数组 → 占位符列表（逐条校验）"""
    return _TOKENS_ADAPTER.validate_json(data)


def values_from_json(data: str | bytes) -> dict[str, str]:
    """
    解析替换表

    Raises:
        pydantic.ValidationError: 不是对象，或值不是字符串
    """
    return _VALUES_ADAPTER.validate_json(data)
