"""
工作区单元测试

每个模块完成后必须运行：pytest tests/unit/test_workspace.py -v
"""

from pathlib import Path

import pytest

from docx_plch.interfaces import PathEscapeError, WorkspaceIOError
from docx_plch.ooxml import Workspace


class TestWorkspace:
    """工作区测试"""

    def test_unique_names(self, workspace_base: Path):
        """测试每个工作区名称唯一"""
        a = Workspace(workspace_base)
        b = Workspace(workspace_base)
        assert a.workspace_id != b.workspace_id
        assert a.workspace_id.startswith("docx_plch_")

    def test_custom_prefix(self, workspace_base: Path):
        ws = Workspace(workspace_base, prefix="job_")
        assert ws.workspace_id.startswith("job_")

    def test_created_and_removed(self, workspace_base: Path):
        """测试进入创建、退出删除"""
        with Workspace(workspace_base) as ws:
            assert ws.exists
            ws.write_bytes("word/document.xml", b"<w:document/>")
            assert ws.has("word/document.xml")
        assert not ws.exists
        assert list(workspace_base.iterdir()) == []

    def test_cleanup_on_error(self, workspace_base: Path):
        """测试异常路径同样清理"""
        with pytest.raises(RuntimeError):
            with Workspace(workspace_base) as ws:
                ws.write_bytes("a/b/c.xml", b"x")
                raise RuntimeError("boom")
        assert not ws.exists

    def test_cleanup_idempotent(self, workspace_base: Path):
        ws = Workspace(workspace_base)
        ws.create()
        ws.cleanup()
        ws.cleanup()
        assert not ws.exists

    def test_create_twice_fails(self, workspace_base: Path):
        """测试名称冲突直接报错，不复用"""
        ws = Workspace(workspace_base)
        ws.create()
        try:
            with pytest.raises(WorkspaceIOError):
                ws.create()
        finally:
            ws.cleanup()

    def test_resolve_rejects_escape(self, workspace: Workspace):
        """测试越界路径拒绝"""
        with pytest.raises(PathEscapeError):
            workspace.resolve("../../evil")
        with pytest.raises(PathEscapeError):
            workspace.resolve("..\\..\\evil")

    def test_resolve_inside(self, workspace: Workspace):
        """测试工作区内路径解析"""
        path = workspace.resolve("word\\document.xml")
        assert path == workspace.root.resolve() / "word" / "document.xml"

    def test_iter_files_posix_sorted(self, workspace: Workspace):
        """测试遍历结果为正斜杠相对路径且有序"""
        workspace.write_bytes("word/document.xml", b"1")
        workspace.write_bytes("[Content_Types].xml", b"2")
        names = [name for name, _ in workspace.iter_files()]
        assert names == sorted(names)
        assert "word/document.xml" in names

    def test_read_missing(self, workspace: Workspace):
        """测试读取不存在的文件"""
        with pytest.raises(WorkspaceIOError) as exc_info:
            workspace.read_bytes("missing.xml")
        assert exc_info.value.path is not None
