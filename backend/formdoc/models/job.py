"""
渲染任务模型 - 定义任务状态与生命周期

一次请求对应一个渲染任务；任务只记录过程，不持久化任何渲染结果。
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class JobStatus(str, Enum):
    """任务状态枚举"""
    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class RenderProgress(BaseModel):
    """任务进度"""
    stage: str = "INIT"
    percent: int = 0
    message: str = ""


class RenderResult(BaseModel):
    """渲染结果统计"""
    cover_pages: int = 0
    body_pages: int = 0
    total_pages: int = 0
    page_groups: int = 0
    heading_numbers: list[int] = Field(default_factory=list)


class RenderJob(BaseModel):
    """渲染任务实体"""
    instance_id: int
    filename: str | None = None

    status: JobStatus = JobStatus.QUEUED
    progress: RenderProgress = Field(default_factory=RenderProgress)
    result: RenderResult = Field(default_factory=RenderResult)

    flags: list[str] = Field(default_factory=list, description="告警标记")
    errors: list[str] = Field(default_factory=list, description="错误信息")

    created_at: datetime = Field(default_factory=datetime.now)
    started_at: datetime | None = None
    finished_at: datetime | None = None

    def mark_running(self, stage: str = "LOAD_SCHEMA") -> None:
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

    def add_flag(self, flag: str) -> None:
        """添加告警标记（不中断）"""
        if flag not in self.flags:
            self.flags.append(flag)
