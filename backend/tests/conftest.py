"""
pytest 配置与公共 fixtures

使用方式：
    def test_something(make_docx, executor):
        tokens = executor.extract_placeholders(make_docx(paragraphs=["{{name}}"]))
"""

from __future__ import annotations

import io
import tempfile
import uuid
import zipfile
from collections.abc import Callable
from pathlib import Path
from typing import Generator

import pytest

from docx_plch.config import RuntimeConfig
from docx_plch.config.runtime_config import WorkspaceConfig
from docx_plch.models import Job, JobType
from docx_plch.ooxml import Workspace
from docx_plch.pipeline import PipelineExecutor

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"

CONTENT_TYPES_XML = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
    '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
    '<Default Extension="xml" ContentType="application/xml"/>'
    "</Types>"
)

RELS_XML = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
    '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">'
    '<Relationship Id="rId1" Target="word/document.xml"/>'
    "</Relationships>"
)


# ============================================================================
# 文档构造
# ============================================================================

def paragraph(text: str) -> str:
    """单 run 段落"""
    return f"<w:p><w:r><w:t>{text}</w:t></w:r></w:p>"


def document_xml(body: str, sect_pr: str = "") -> str:
    """拼装主文本部件"""
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<w:document xmlns:w="{W_NS}"><w:body>{body}{sect_pr}</w:body></w:document>'
    )


def build_container(parts: dict[str, str | bytes]) -> bytes:
    """按给定顺序写出zip容器"""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, data in parts.items():
            zf.writestr(name, data)
    return buffer.getvalue()


def read_part(container: bytes, name: str = "word/document.xml") -> str:
    with zipfile.ZipFile(io.BytesIO(container)) as zf:
        return zf.read(name).decode("utf-8")


@pytest.fixture
def make_docx() -> Callable[..., bytes]:
    """docx 构造器：paragraphs 逐段生成，或直接给出 body 原文"""

    def _make(
        paragraphs: list[str] | None = None,
        body: str | None = None,
        sect_pr: str = "",
        extra_parts: dict[str, str | bytes] | None = None,
    ) -> bytes:
        if body is None:
            body = "".join(paragraph(text) for text in paragraphs or [])
        parts: dict[str, str | bytes] = {
            "[Content_Types].xml": CONTENT_TYPES_XML,
            "_rels/.rels": RELS_XML,
            "word/document.xml": document_xml(body, sect_pr),
        }
        parts.update(extra_parts or {})
        return build_container(parts)

    return _make


@pytest.fixture
def read_docx_part() -> Callable[..., str]:
    """读取容器内部件文本"""
    return read_part


@pytest.fixture
def wrap_document() -> Callable[..., str]:
    """body 原文 → 完整主文本部件"""
    return document_xml


# ============================================================================
# 配置 Fixtures
# ============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """临时目录"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def workspace_base(temp_dir: Path) -> Path:
    """工作区父目录（用于断言清理）"""
    base = temp_dir / "workspaces"
    base.mkdir()
    return base


@pytest.fixture
def runtime_config(workspace_base: Path) -> RuntimeConfig:
    """运行期配置（工作区落在临时目录）"""
    return RuntimeConfig(workspace=WorkspaceConfig(base_dir=workspace_base))


@pytest.fixture
def executor(runtime_config: RuntimeConfig) -> PipelineExecutor:
    return PipelineExecutor(runtime_config)


@pytest.fixture
def workspace(workspace_base: Path) -> Generator[Workspace, None, None]:
    """已创建的工作区（自动清理）"""
    with Workspace(workspace_base) as ws:
        yield ws


# ============================================================================
# Job Fixtures
# ============================================================================

@pytest.fixture
def temp_job() -> Job:
    """替换任务"""
    return Job(job_id=str(uuid.uuid4()), job_type=JobType.SUBSTITUTE)
