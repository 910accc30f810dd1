"""
重打包器 - 工作区序列化回docx容器

职责：
1. 遍历工作区，每个普通文件生成一个条目
2. 条目名为相对工作区根的路径，分隔符统一为 '/'
3. 原容器中已有的条目保持原顺序（[Content_Types].xml 通常在首位），新增文件按路径排序追加
4. 保留权限位与时间戳

测试要点：
- test_round_trip_identity: 解包再打包，条目路径与字节一致
- test_repack_order: 原顺序保持
- test_repack_unreadable: 读失败抛 WorkspaceIOError
"""

from __future__ import annotations

import io
import logging
import zipfile
from pathlib import Path

from ..interfaces import IArchiveRepacker, WorkspaceIOError
from .workspace import Workspace

logger = logging.getLogger(__name__)


class ArchiveRepacker(IArchiveRepacker):
    """docx容器重打包实现"""

    def __init__(self, compression: int = zipfile.ZIP_DEFLATED):
        self.compression = compression

    def repack(self, workspace: Workspace, order: list[str] | None = None) -> bytes:
        """重打包工作区，返回容器字节流"""
        files = dict(workspace.iter_files())
        arcnames = self._ordered_names(files, order or [])

        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", self.compression) as zf:
            for arcname in arcnames:
                self._write_entry(zf, arcname, files[arcname])

        logger.debug(f"重打包完成: {len(arcnames)} 个条目")
        return buffer.getvalue()

    @staticmethod
    def _ordered_names(files: dict[str, Path], order: list[str]) -> list[str]:
        """原顺序在前（仅保留仍存在的文件），其余按路径排序"""
        ordered = [name for name in dict.fromkeys(order) if name in files]
        known = set(ordered)
        ordered.extend(name for name in sorted(files) if name not in known)
        return ordered

    def _write_entry(self, zf: zipfile.ZipFile, arcname: str, path: Path) -> None:
        try:
            info = zipfile.ZipInfo.from_file(path, arcname, strict_timestamps=False)
            data = path.read_bytes()
        except OSError as e:
            raise WorkspaceIOError("文件读取失败", path) from e
        info.compress_type = self.compression
        zf.writestr(info, data)
