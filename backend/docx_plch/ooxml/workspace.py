"""
工作区 - 单次处理调用独占的解包目录

职责：
1. 以唯一名称创建解包目录（<prefix><uuid>）
2. 相对路径解析与越界检查（zip-slip）
3. 退出时无条件递归删除

测试要点：
- test_unique_names: 并发调用互不冲突
- test_resolve_rejects_escape: 越界路径拒绝
- test_cleanup_on_error: 异常路径同样清理
"""

from __future__ import annotations

import logging
import shutil
import tempfile
import uuid
from collections.abc import Iterator
from pathlib import Path

from ..config import get_config
from ..interfaces import PathEscapeError, WorkspaceIOError

logger = logging.getLogger(__name__)


class Workspace:
    """解包工作区（上下文管理器）"""

    def __init__(self, base_dir: Path | str | None = None, prefix: str | None = None):
        config = get_config()
        base = base_dir or config.workspace.base_dir or tempfile.gettempdir()
        self.base_dir = Path(base)
        self.workspace_id = f"{prefix or config.workspace.prefix}{uuid.uuid4().hex}"
        self.root = self.base_dir / self.workspace_id
        self._root_resolved: Path | None = None

    def __enter__(self) -> Workspace:
        self.create()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    @property
    def exists(self) -> bool:
        return self.root.exists()

    def create(self) -> None:
        """创建工作区目录（名称冲突时直接报错，不复用）"""
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            self.root.mkdir()
        except OSError as e:
            raise WorkspaceIOError("工作区创建失败", self.root) from e
        self._root_resolved = self.root.resolve()
        logger.debug(f"工作区已创建: {self.root}")

    def resolve(self, relative: str) -> Path:
        """相对路径 → 工作区内绝对路径；越界则拒绝"""
        normalized = relative.replace("\\", "/")
        root = self._root_resolved or self.root.resolve()
        target = (root / normalized).resolve()
        if target != root and root not in target.parents:
            raise PathEscapeError(relative)
        return target

    def read_bytes(self, relative: str) -> bytes:
        path = self.resolve(relative)
        try:
            return path.read_bytes()
        except OSError as e:
            raise WorkspaceIOError("读取失败", path) from e

    def write_bytes(self, relative: str, data: bytes) -> Path:
        path = self.resolve(relative)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise WorkspaceIOError("写入失败", path) from e
        return path

    def has(self, relative: str) -> bool:
        return self.resolve(relative).is_file()

    def iter_files(self) -> Iterator[tuple[str, Path]]:
        """遍历所有普通文件，返回（正斜杠相对路径, 绝对路径），按路径排序"""
        for path in sorted(self.root.rglob("*")):
            if path.is_file():
                yield path.relative_to(self.root).as_posix(), path

    def cleanup(self) -> None:
        """递归删除工作区（幂等）"""
        if not self.root.exists():
            return
        shutil.rmtree(self.root, ignore_errors=True)
        if self.root.exists():
            logger.warning(f"工作区未能完全删除: {self.root}")
        else:
            logger.debug(f"工作区已删除: {self.root}")
