"""
任务模型 - 单次处理调用的状态与诊断信息

任务只存在于一次调用内，不持久化、不跨调用缓存
"""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class JobStatus(str, Enum):
    """任务状态枚举"""
    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


class JobType(str, Enum):
    """任务类型"""
    EXTRACT = "extract"              # 占位符提取+坐标
    SUBSTITUTE = "substitute"        # 占位符替换+重打包
    ORIENTATION = "orientation"      # 仅版面方向


class JobProgress(BaseModel):
    """任务进度"""
    stage: str = "INIT"
    percent: int = 0
    message: str = ""


class Job(BaseModel):
    """任务实体"""
    job_id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="UUID")
    job_type: JobType

    # 状态
    status: JobStatus = JobStatus.QUEUED
    progress: JobProgress = Field(default_factory=JobProgress)
    cancel_requested: bool = False

    # 结果
    flags: list[str] = Field(default_factory=list, description="诊断标记")
    errors: list[str] = Field(default_factory=list, description="错误信息")

    # 时间戳
    created_at: datetime = Field(default_factory=datetime.now)
    started_at: datetime | None = None
    finished_at: datetime | None = None

    # 工作区（运行时设置）
    workspace_id: str | None = None

    def mark_running(self, stage: str = "UNPACK") -> None:
        """标记为运行中"""
        self.status = JobStatus.RUNNING
        self.started_at = datetime.now()
        self.progress.stage = stage

    def mark_succeeded(self) -> None:
        """标记为成功"""
        self.status = JobStatus.SUCCEEDED
        self.finished_at = datetime.now()
        self.progress.percent = 100

    def mark_failed(self, error: str) -> None:
        """标记为失败"""
        self.status = JobStatus.FAILED
        self.finished_at = datetime.now()
        self.errors.append(error)

    def mark_cancelled(self) -> None:
        """标记为已取消"""
        self.status = JobStatus.CANCELLED
        self.finished_at = datetime.now()

    def request_cancel(self) -> None:
        """请求取消（下一个阶段开始前生效）"""
        self.cancel_requested = True

    def add_flag(self, flag: str) -> None:
        """添加诊断标记（不中断）"""
        if flag not in self.flags:
            self.flags.append(flag)
