"""
解包器 - docx容器展开到工作区

职责：
1. 校验输入是合法zip结构
2. 每个条目做越界检查（zip-slip），任何越界条目中止整个解包
3. 同一路径出现多个条目（含 \\ 与 / 写法差异）时拒绝整个容器
4. 写入字节并保留权限位与时间戳
5. 空目录条目创建为空目录

测试要点：
- test_unpack_entries: 条目完整写出
- test_zip_slip_rejected: ../../evil 被拒绝且不写出
- test_not_a_container: 非zip输入
- test_mode_preserved: 权限位保留
- test_duplicate_entries_rejected: 重复条目拒绝
"""

from __future__ import annotations

import io
import logging
import os
import time
import zipfile
import zlib
from pathlib import Path

from ..interfaces import IArchiveUnpacker, NotAContainerError, WorkspaceIOError
from ..models import ArchiveEntry
from .workspace import Workspace

logger = logging.getLogger(__name__)

DEFAULT_FILE_MODE = 0o644
DEFAULT_DIR_MODE = 0o755


def _entry_mode(info: zipfile.ZipInfo) -> int:
    """从 external_attr 高16位取权限位（Windows 生成的包为0）"""
    return (info.external_attr >> 16) & 0o777


class ArchiveUnpacker(IArchiveUnpacker):
    """docx容器解包实现"""

    def unpack(self, container: bytes, workspace: Workspace) -> list[ArchiveEntry]:
        """解包容器到工作区"""
        try:
            zf = zipfile.ZipFile(io.BytesIO(container))
        except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError) as e:
            raise NotAContainerError(f"输入不是合法的docx容器: {e}") from e

        entries: list[ArchiveEntry] = []
        with zf:
            infos = zf.infolist()
            # 先整体校验路径，任何越界条目都不落盘
            targets = [workspace.resolve(info.filename) for info in infos]
            self._check_duplicates(infos, targets)

            for info, target in zip(infos, targets):
                entries.append(self._extract(zf, info, target))

        logger.debug(f"解包完成: {len(entries)} 个条目 -> {workspace.root}")
        return entries

    @staticmethod
    def _check_duplicates(infos: list[zipfile.ZipInfo], targets: list[Path]) -> None:
        """多个条目落到同一路径时拒绝"""
        seen: dict[Path, str] = {}
        for info, target in zip(infos, targets):
            if target in seen:
                raise NotAContainerError(
                    f"容器包含重复条目: {seen[target]!r} 与 {info.filename!r}"
                )
            seen[target] = info.filename

    def _extract(self, zf: zipfile.ZipFile, info: zipfile.ZipInfo, target: Path) -> ArchiveEntry:
        """写出单个条目"""
        path = info.filename.replace("\\", "/")
        mode = _entry_mode(info)

        if info.is_dir():
            mode = mode or DEFAULT_DIR_MODE
            try:
                target.mkdir(parents=True, exist_ok=True)
                # 属主读写执行位始终保留，保证工作区可清理
                os.chmod(target, mode | 0o700)
            except OSError as e:
                raise WorkspaceIOError("目录创建失败", target) from e
            return ArchiveEntry(path=path, mode=mode, is_dir=True)

        mode = mode or DEFAULT_FILE_MODE
        try:
            content = zf.read(info)
        except (zipfile.BadZipFile, zlib.error, EOFError) as e:
            raise NotAContainerError(f"条目损坏: {info.filename}: {e}") from e

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
            os.chmod(target, mode | 0o600)
            self._restore_mtime(target, info)
        except OSError as e:
            raise WorkspaceIOError("条目写出失败", target) from e

        return ArchiveEntry(path=path, content=content, mode=mode)

    @staticmethod
    def _restore_mtime(target: Path, info: zipfile.ZipInfo) -> None:
        try:
            stamp = time.mktime(info.date_time + (0, 0, -1))
        except (OverflowError, ValueError):
            return
        os.utime(target, (stamp, stamp))
