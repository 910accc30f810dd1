"""
归档条目模型 - 容器内单个条目
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ArchiveEntry(BaseModel):
    """容器条目（路径统一为正斜杠相对路径）"""
    path: str = Field(..., description="工作区内相对路径")
    content: bytes = Field(b"", description="条目字节内容（目录为空）")
    mode: int = Field(0o644, description="权限位")
    is_dir: bool = False

    @property
    def size(self) -> int:
        return len(self.content)
