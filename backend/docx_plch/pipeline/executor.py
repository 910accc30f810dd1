"""
流水线执行器 - 编排单次文档处理

职责：
1. 为每次调用创建独占工作区，任何退出路径都删除
2. 按任务类型顺序执行各阶段
3. 阶段之间检查取消请求
4. 更新任务进度与诊断标记

对外入口：
- extract_placeholders: 解包 → 扫描 → 版面 → 坐标
- substitute: 解包 → 扫描 → 替换 → 打包
- detect_orientation: 解包 → 版面

测试要点：
- test_extract_unique_order: 去重保序
- test_substitute_default_fill: 未提供值的占位符替换为空串
- test_workspace_removed_on_error: 出错也删除工作区
- test_cancel_between_stages: 阶段间取消
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from ..config import RuntimeConfig, get_config
from ..interfaces import ArchiveError, JobCancelledError, MissingPartError
from ..models import (
    DocumentLayout,
    Job,
    JobType,
    PlaceholderToken,
    resolve_values,
)
from ..ooxml import (
    ArchiveRepacker,
    ArchiveUnpacker,
    CoordinateMapper,
    LayoutAnalyzer,
    PlaceholderScanner,
    TokenReplacer,
    Workspace,
    strip_markup,
    unique_literals,
    unique_tokens,
)
from .stages import STAGES_BY_JOB_TYPE, PipelineStage, StageEnum

logger = logging.getLogger(__name__)


class PipelineExecutor:
    """流水线执行器（无共享可变状态，可被多个并发调用各自使用）"""

    def __init__(
        self,
        config: RuntimeConfig | None = None,
        cancel_check: Callable[[], bool] | None = None,
    ):
        self.config = config or get_config()
        self.cancel_check = cancel_check

        self.unpacker = ArchiveUnpacker()
        self.repacker = ArchiveRepacker()
        self.scanner = PlaceholderScanner()
        self.layout_analyzer = LayoutAnalyzer(
            DocumentLayout(**self.config.layout_defaults.model_dump())
        )
        self.replacer = TokenReplacer(
            max_span_factor=self.config.matching.max_span_factor,
            escape_values=self.config.matching.escape_values,
        )

    # ------------------------------------------------------------------
    # 对外入口
    # ------------------------------------------------------------------

    def extract_placeholders(
        self, container: bytes, unique: bool = True, job: Job | None = None
    ) -> list[PlaceholderToken]:
        """提取占位符及其坐标"""
        job = job or Job(job_type=JobType.EXTRACT)
        context = self.execute(job, container)
        tokens = context["tokens"]
        return unique_tokens(tokens) if unique else tokens

    def list_placeholders(self, container: bytes, job: Job | None = None) -> list[str]:
        """提取去重后的占位符字面量"""
        return [token.text for token in self.extract_placeholders(container, job=job)]

    def substitute(
        self, container: bytes, values: Mapping[str, str], job: Job | None = None
    ) -> bytes:
        """替换占位符并重打包"""
        job = job or Job(job_type=JobType.SUBSTITUTE)
        context = self.execute(job, container, values)
        return context["output"]

    def detect_orientation(self, container: bytes, job: Job | None = None) -> bool:
        """检测页面方向（True=横向）"""
        job = job or Job(job_type=JobType.ORIENTATION)
        context = self.execute(job, container)
        return context["layout"].landscape

    # ------------------------------------------------------------------
    # 编排
    # ------------------------------------------------------------------

    def execute(
        self,
        job: Job,
        container: bytes,
        values: Mapping[str, str] | None = None,
    ) -> dict[str, Any]:
        """执行流水线，返回阶段产物"""
        job.mark_running()
        context: dict[str, Any] = {
            "container": container,
            "values": dict(values or {}),
        }

        try:
            with Workspace(
                self.config.workspace.base_dir, self.config.workspace.prefix
            ) as workspace:
                job.workspace_id = workspace.workspace_id
                context["workspace"] = workspace
                for stage in STAGES_BY_JOB_TYPE[job.job_type]:
                    self._check_cancelled(job, stage)
                    self._execute_stage(job, stage, context)
        except JobCancelledError:
            job.mark_cancelled()
            logger.info(f"[{job.job_id}] 任务已取消")
            raise
        except Exception as e:
            logger.exception(f"流水线执行失败: {job.job_id}")
            job.mark_failed(str(e))
            raise

        context.pop("workspace", None)
        job.mark_succeeded()
        return context

    def _check_cancelled(self, job: Job, stage: PipelineStage) -> None:
        if job.cancel_requested or (self.cancel_check is not None and self.cancel_check()):
            raise JobCancelledError(f"任务在阶段 {stage.name} 开始前被取消: {job.job_id}")

    def _execute_stage(self, job: Job, stage: PipelineStage, context: dict) -> None:
        """执行单个阶段"""
        job.progress.stage = stage.name
        job.progress.percent = stage.progress_start
        job.progress.message = f"开始阶段: {stage.name}"
        logger.info(f"[{job.job_id}] 开始阶段: {stage.name}")

        try:
            if stage.name == StageEnum.UNPACK.value:
                self._stage_unpack(job, context)

            elif stage.name == StageEnum.SCAN_PLACEHOLDERS.value:
                self._stage_scan(job, context)

            elif stage.name == StageEnum.ANALYZE_LAYOUT.value:
                self._stage_layout(job, context)

            elif stage.name == StageEnum.MAP_COORDINATES.value:
                self._stage_map(job, context)

            elif stage.name == StageEnum.REPLACE_TOKENS.value:
                self._stage_replace(job, context)

            elif stage.name == StageEnum.REPACK.value:
                self._stage_repack(job, context)

        except Exception as e:
            logger.error(f"[{job.job_id}] 阶段失败 {stage.name}: {e}")
            job.add_flag(f"阶段失败:{stage.name}")
            raise

        job.progress.percent = stage.progress_end
        job.progress.message = f"完成阶段: {stage.name}"

    # ------------------------------------------------------------------
    # 各阶段
    # ------------------------------------------------------------------

    def _stage_unpack(self, job: Job, context: dict) -> None:
        """解包并读取主文本部件"""
        workspace: Workspace = context["workspace"]
        entries = self.unpacker.unpack(context["container"], workspace)
        context["order"] = [entry.path for entry in entries if not entry.is_dir]

        part = self.config.document.primary_part
        if not workspace.has(part):
            raise MissingPartError(part)
        raw = workspace.read_bytes(part)
        try:
            context["document_xml"] = raw.decode(self.config.document.encoding)
        except UnicodeDecodeError as e:
            raise ArchiveError(f"主文本部件解码失败: {part}: {e}") from e
        logger.debug(f"[{job.job_id}] 解包 {len(entries)} 个条目, 主文本 {len(raw)} 字节")

    def _stage_scan(self, job: Job, context: dict) -> None:
        """扫描占位符"""
        clean = strip_markup(context["document_xml"])
        context["tokens"] = self.scanner.scan_clean(clean)
        logger.info(
            f"[{job.job_id}] 找到 {len(context['tokens'])} 处占位符"
            f"（{len(unique_literals(context['tokens']))} 个不重复）"
        )

    def _stage_layout(self, job: Job, context: dict) -> None:
        """版面分析"""
        layout = self.layout_analyzer.analyze(context["document_xml"])
        context["layout"] = layout
        logger.debug(
            f"[{job.job_id}] 版面 {layout.page_width}x{layout.page_height}pt, "
            f"landscape={layout.landscape}"
        )

    def _stage_map(self, job: Job, context: dict) -> None:
        """坐标映射"""
        mapping = self.config.mapping
        mapper = CoordinateMapper(
            context["document_xml"],
            context["layout"],
            font_size=mapping.font_size,
            char_width_ratio=mapping.char_width_ratio,
            line_height_ratio=mapping.line_height_ratio,
        )
        context["tokens"] = [mapper.locate(token) for token in context["tokens"]]

    def _stage_replace(self, job: Job, context: dict) -> None:
        """替换占位符并写回主文本部件"""
        literals = unique_literals(context["tokens"])
        values: dict[str, str] = context["values"]
        missing = [literal for literal in literals if literal not in values]
        if missing:
            logger.info(f"[{job.job_id}] {len(missing)} 个占位符未提供值，按空串替换: {missing}")

        report = self.replacer.replace_all(
            context["document_xml"], resolve_values(literals, values)
        )
        for literal, count in report.abandoned.items():
            job.add_flag(f"匹配放弃:{literal}x{count}")

        workspace: Workspace = context["workspace"]
        workspace.write_bytes(
            self.config.document.primary_part,
            report.text.encode(self.config.document.encoding),
        )
        context["document_xml"] = report.text
        context["report"] = report
        # 主文本已变，旧扫描结果失效
        context["tokens"] = None
        logger.info(
            f"[{job.job_id}] 替换 {report.total_replaced} 处, 放弃 {report.total_abandoned} 处"
        )

    def _stage_repack(self, job: Job, context: dict) -> None:
        """重打包"""
        context["output"] = self.repacker.repack(context["workspace"], context.get("order"))


# ============================================================================
# 便捷函数
# ============================================================================

def extract_placeholders(container: bytes, unique: bool = True) -> list[PlaceholderToken]:
    """提取占位符及坐标（默认去重保序）"""
    return PipelineExecutor().extract_placeholders(container, unique=unique)


def list_placeholders(container: bytes) -> list[str]:
    """提取去重后的占位符字面量"""
    return PipelineExecutor().list_placeholders(container)


def substitute(container: bytes, values: Mapping[str, str]) -> bytes:
    """替换占位符，返回新容器"""
    return PipelineExecutor().substitute(container, values)


def detect_orientation(container: bytes) -> bool:
    """检测页面方向（True=横向）"""
    return PipelineExecutor().detect_orientation(container)
