"""
流水线阶段定义

职责：
1. 定义渲染流水线各阶段的名称与进度区间
2. 提供可选的阶段处理函数钩子

测试要点：
- test_stage_order: 阶段顺序
- test_progress_ranges_contiguous: 进度区间首尾相接
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from ..models import RenderJob


class StageEnum(str, Enum):
    """渲染流水线阶段枚举"""
    LOAD_SCHEMA = "LOAD_SCHEMA"
    RESOLVE_ANSWERS = "RESOLVE_ANSWERS"
    PLAN_PAGES = "PLAN_PAGES"
    RENDER_SECTIONS = "RENDER_SECTIONS"
    COMPOSE_COVER = "COMPOSE_COVER"
    RENDER_COVER_PASS = "RENDER_COVER_PASS"
    RENDER_BODY_PASS = "RENDER_BODY_PASS"
    MERGE = "MERGE"


@dataclass
class PipelineStage:
    """流水线阶段"""
    name: str
    progress_start: int  # 进度起点（0-100）
    progress_end: int    # 进度终点
    handler: Callable[[RenderJob], None] | None = None

    def execute(self, job: RenderJob) -> None:
        if self.handler:
            self.handler(job)


RENDER_STAGES: list[PipelineStage] = [
    PipelineStage(StageEnum.LOAD_SCHEMA.value, 0, 10),
    PipelineStage(StageEnum.RESOLVE_ANSWERS.value, 10, 15),
    PipelineStage(StageEnum.PLAN_PAGES.value, 15, 20),
    PipelineStage(StageEnum.RENDER_SECTIONS.value, 20, 40),
    PipelineStage(StageEnum.COMPOSE_COVER.value, 40, 45),
    PipelineStage(StageEnum.RENDER_COVER_PASS.value, 45, 60),
    PipelineStage(StageEnum.RENDER_BODY_PASS.value, 60, 90),
    PipelineStage(StageEnum.MERGE.value, 90, 100),
]
