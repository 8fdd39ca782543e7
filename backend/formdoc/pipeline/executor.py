"""
渲染执行器 - 编排一次渲染请求的全部阶段

职责：
1. 按顺序执行各阶段并更新任务进度
2. 边界处理：后端异常统一包装为 BackendRenderError，记录日志后重新抛出
3. 成功时填充任务结果（页数、分页组数、标题编号）与建议文件名

测试要点：
- test_execute_full_pipeline: 完整流水线执行，返回PDF字节
- test_missing_instance_fails_job: 实例不存在时任务失败
- test_backend_failure_wrapped: 后端异常包装
- test_progress_tracking: 进度与阶段记录
"""

from __future__ import annotations

import logging
from typing import Any

from ..doc_gen import (
    AnswerResolver,
    DocumentAssembler,
    DocumentBuilder,
    merge_page_ranges,
    plan_page_groups,
)
from ..interfaces import BackendRenderError, FormDocError, IRenderBackend, ISchemaLoader
from ..models import RenderJob
from .stages import RENDER_STAGES, PipelineStage, StageEnum

logger = logging.getLogger(__name__)


class RenderExecutor:
    """渲染执行器"""

    def __init__(
        self,
        loader: ISchemaLoader,
        backend: IRenderBackend,
        builder: DocumentBuilder | None = None,
    ):
        self.loader = loader
        self.backend = backend
        self.builder = builder or DocumentBuilder()
        self.assembler = DocumentAssembler(backend)

    def render(self, instance_id: int) -> bytes:
        """便捷入口：渲染单个实例"""
        return self.execute(RenderJob(instance_id=instance_id))

    def execute(self, job: RenderJob) -> bytes:
        """执行流水线，返回最终PDF字节"""
        job.mark_running(RENDER_STAGES[0].name)
        context: dict[str, Any] = {}

        try:
            for stage in RENDER_STAGES:
                self._execute_stage(job, stage, context)
            job.mark_succeeded()
        except Exception as e:
            logger.exception(f"渲染失败: instance={job.instance_id}")
            job.mark_failed(str(e))
            raise

        logger.info(
            f"[{job.instance_id}] 渲染完成: {job.result.total_pages} 页, "
            f"文件名 {job.filename}"
        )
        return context["pdf"]

    def _execute_stage(self, job: RenderJob, stage: PipelineStage, context: dict) -> None:
        """执行单个阶段"""
        job.progress.stage = stage.name
        job.progress.percent = stage.progress_start
        job.progress.message = f"开始阶段: {stage.name}"
        logger.info(f"[{job.instance_id}] 开始阶段: {stage.name}")

        try:
            if stage.name == StageEnum.LOAD_SCHEMA.value:
                self._stage_load(job, context)

            elif stage.name == StageEnum.RESOLVE_ANSWERS.value:
                context["resolver"] = AnswerResolver.from_snapshot(context["snapshot"])

            elif stage.name == StageEnum.PLAN_PAGES.value:
                context["groups"] = plan_page_groups(context["snapshot"].steps)
                job.result.page_groups = len(context["groups"])

            elif stage.name == StageEnum.RENDER_SECTIONS.value:
                context["pages"], _ = self.builder.render_pages(
                    context["groups"], context["resolver"]
                )

            elif stage.name == StageEnum.COMPOSE_COVER.value:
                self._stage_compose(job, context)

            elif stage.name == StageEnum.RENDER_COVER_PASS.value:
                context["cover_range"] = self._run_backend(
                    self.assembler.render_cover, context["plan"]
                )
                job.result.cover_pages = context["cover_range"].page_count

            elif stage.name == StageEnum.RENDER_BODY_PASS.value:
                context["body_range"] = self._run_backend(
                    self.assembler.render_body, context["plan"]
                )
                job.result.body_pages = context["body_range"].page_count

            elif stage.name == StageEnum.MERGE.value:
                context["pdf"] = merge_page_ranges(
                    [context["cover_range"], context["body_range"]]
                )
                job.result.total_pages = job.result.cover_pages + job.result.body_pages

            stage.execute(job)

        except Exception as e:
            logger.error(f"[{job.instance_id}] 阶段失败 {stage.name}: {e}")
            job.add_flag(f"阶段失败:{stage.name}")
            raise

        job.progress.percent = stage.progress_end
        job.progress.message = f"完成阶段: {stage.name}"

    def _stage_load(self, job: RenderJob, context: dict) -> None:
        snapshot = self.loader.load(job.instance_id)
        context["snapshot"] = snapshot
        job.filename = snapshot.suggested_filename

    def _stage_compose(self, job: RenderJob, context: dict) -> None:
        snapshot = context["snapshot"]
        resolver = context["resolver"]
        cover = self.builder.compose_cover(snapshot, resolver)
        plan = self.builder.build_plan(snapshot, resolver, context["pages"], cover)
        context["plan"] = plan
        job.result.heading_numbers = plan.heading_numbers
        if cover.crest_image is None:
            job.add_flag("缺少徽标")

    @staticmethod
    def _run_backend(fn, plan):
        """后端调用边界：非本模块异常统一包装为 BackendRenderError"""
        try:
            return fn(plan)
        except FormDocError:
            raise
        except Exception as e:
            raise BackendRenderError(f"渲染后端失败: {e}") from e
