"""
文档构建器 - 快照 → 两次渲染的页面描述（DocumentPlan）

职责：
1. 分页组规划 + 按文档顺序逐分区渲染（标题计数器作为累加值传递）
2. 计算每个步骤内的分区上下文（学员评价附录、附录A）
3. 组装封面HTML（封面 pass，无页眉页脚）
4. 组装简介页 + 正文页HTML（正文 pass，带页眉页脚与页码）

依赖：
- jinja2: 页面模板（document/cover/header/footer）
- planner/sections/cover: 规划、分区渲染、封面组装

测试要点：
- test_plan_is_idempotent: 同一快照两次构建得到相同HTML
- test_heading_numbers_threaded_across_pages: 编号跨页连续
- test_learner_evaluation_unnumbered: 学员评价分区不编号
- test_body_options_have_header_footer: 正文 pass 带页眉页脚
"""

from __future__ import annotations

import logging

from ..config import DocumentProfile, RuntimeConfig, get_config, load_profile
from ..interfaces import ICoverComposer
from ..models import (
    CoverPage,
    DocumentPlan,
    FormSnapshot,
    PageGroup,
    PassOptions,
    RenderedPage,
    RenderMode,
    RunningFooter,
    RunningHeader,
    StepNode,
)
from .assets import load_default_crest, load_text_logo
from .cover import CoverComposer
from .planner import assign_heading_numbers, plan_page_groups
from .resolver import AnswerResolver
from .sections import SectionContext, SectionRenderer
from .templating import render_template

logger = logging.getLogger(__name__)

COVER_PASS = "cover"
BODY_PASS = "body"


class DocumentBuilder:
    """文档构建器"""

    def __init__(
        self,
        profile: DocumentProfile | None = None,
        config: RuntimeConfig | None = None,
        cover_composer: ICoverComposer | None = None,
    ):
        self.config = config or get_config()
        self.profile = profile or load_profile(self.config.profile_path)
        self.cover_composer = cover_composer or CoverComposer(self.profile, self.config)

    # === 正文 ===

    def is_learner_evaluation(self, step: StepNode) -> bool:
        expected = self.profile.learner_evaluation.step_title.strip().lower()
        return step.step.title.strip().lower() == expected

    def section_contexts(self, step: StepNode) -> list[SectionContext]:
        """计算步骤内每个分区的上下文"""
        learner_eval = self.is_learner_evaluation(step)
        likert_positions = [
            i
            for i, node in enumerate(step.sections)
            if node.section.render_mode is RenderMode.LIKERT_TABLE
        ]
        contexts = []
        for i, _ in enumerate(step.sections):
            likert_index = likert_positions.index(i) if i in likert_positions else 0
            contexts.append(
                SectionContext(
                    step_title=step.step.title,
                    learner_evaluation=learner_eval,
                    show_learner_intro=learner_eval and i == 0,
                    likert_index=likert_index,
                    last_likert=bool(likert_positions) and i == likert_positions[-1],
                )
            )
        return contexts

    def render_pages(
        self,
        groups: list[PageGroup],
        resolver: AnswerResolver,
        start: int = 1,
    ) -> tuple[list[RenderedPage], int]:
        """
        按文档顺序渲染全部分页组

        Returns:
            (正文页列表, 最终计数)
        """
        numbers, counter = assign_heading_numbers(
            (
                (node.section, not self.is_learner_evaluation(step))
                for group in groups
                for step in group.steps
                for node in step.sections
            ),
            start,
        )
        numbers_iter = iter(numbers)

        renderer = SectionRenderer(resolver, self.profile)
        pages: list[RenderedPage] = []
        for group in groups:
            page = RenderedPage(titles=group.titles)
            for step in group.steps:
                for node, ctx in zip(step.sections, self.section_contexts(step)):
                    page.fragments.append(renderer.render(node, next(numbers_iter), ctx))
            pages.append(page)
        return pages, counter

    # === 封面 ===

    def compose_cover(self, snapshot: FormSnapshot, resolver: AnswerResolver) -> CoverPage:
        return self.cover_composer.compose(snapshot, resolver)

    def cover_html(self, cover: CoverPage) -> str:
        return render_template(
            "cover.html.j2",
            cover=cover,
            organisation=self.profile.organisation,
        )

    # === 页眉页脚 ===

    def running_header(self, snapshot: FormSnapshot) -> RunningHeader:
        return RunningHeader(
            crest_image=snapshot.form.header_asset_url or load_default_crest(self.config),
            text_logo_image=load_text_logo(self.config),
        )

    def running_footer(self, snapshot: FormSnapshot, resolver: AnswerResolver) -> RunningFooter:
        form = snapshot.form
        return RunningFooter(
            version=form.version or "1",
            unit_code=resolver.code_text("unit.code") or form.unit_code or "",
        )

    # === 组装 ===

    def build_plan(
        self,
        snapshot: FormSnapshot,
        resolver: AnswerResolver,
        pages: list[RenderedPage],
        cover: CoverPage,
    ) -> DocumentPlan:
        layout = self.config.page_layout
        cover_options = PassOptions(
            label=COVER_PASS,
            paper_format=layout.paper_format,
            margin=layout.cover_margins(),
            display_header_footer=False,
        )
        body_options = PassOptions(
            label=BODY_PASS,
            paper_format=layout.paper_format,
            margin=layout.body_margins(),
            display_header_footer=True,
            header_template=render_template(
                "header.html.j2",
                header=self.running_header(snapshot),
                organisation=self.profile.organisation,
            ),
            footer_template=render_template(
                "footer.html.j2",
                footer=self.running_footer(snapshot, resolver),
            ),
        )
        body_html = render_template(
            "document.html.j2",
            intro=self.profile.intro,
            pages=pages,
        )
        return DocumentPlan(
            cover=cover,
            cover_html=self.cover_html(cover),
            cover_options=cover_options,
            body_html=body_html,
            body_options=body_options,
            pages=pages,
            intro_page_count=1,
        )

    def build(self, snapshot: FormSnapshot) -> DocumentPlan:
        """快照 → DocumentPlan（纯函数，可重复执行）"""
        resolver = AnswerResolver.from_snapshot(snapshot)
        groups = plan_page_groups(snapshot.steps)
        pages, _ = self.render_pages(groups, resolver)
        cover = self.compose_cover(snapshot, resolver)
        logger.debug(
            f"文档规划完成: instance={snapshot.instance_id}, groups={len(groups)}, "
            f"sections={sum(len(p.fragments) for p in pages)}"
        )
        return self.build_plan(snapshot, resolver, pages, cover)
