"""
流水线模块 - 渲染任务编排与执行

子模块：
- stages: 流水线各阶段定义
- executor: 渲染执行器
"""

from .stages import RENDER_STAGES, PipelineStage, StageEnum
from .executor import RenderExecutor

__all__ = [
    "StageEnum",
    "PipelineStage",
    "RENDER_STAGES",
    "RenderExecutor",
]
