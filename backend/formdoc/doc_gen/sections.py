"""
分区渲染分发器 - (分区, 题目/选项/行, 答案解析器) → HTML片段

职责：
1. 按 RenderMode 分发到对应布局（分发表覆盖全部枚举成员）
2. 布局函数只构建视图模型，HTML由 templates/sections/*.html.j2 生成
3. 声明类分区按 DeclarationsVariant 二次分发
4. 全函数：任何模式、空题目/行/选项列表都返回确定片段，不抛异常

依赖：
- jinja2/markupsafe: 片段模板
- pydantic: 视图模型

测试要点：
- test_dispatch_covers_every_mode: 分发表完整
- test_empty_sections_render: 空分区全函数
- test_normal_groups_in_first_seen_order: 分组顺序
- test_likert_selection: 量表选中位置
- test_grid_cells_keyed_by_row_and_column: 表格单元格键
- test_submission_other_inline: 其他选项的内联文本
- test_reasonable_adjustment_yes_no: 是/否判定
- test_declaration_variants: 声明子布局
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, ClassVar

from pydantic import BaseModel, Field

from ..config import DocumentProfile, load_profile
from ..config.profile_loader import AppendixMatrix, ReasonableAdjustmentProfile
from ..models import (
    DeclarationsVariant,
    QuestionNode,
    QuestionType,
    RenderMode,
    SectionFragment,
    SectionNode,
    scalar_text,
)
from .resolver import AnswerResolver
from .signature import SignatureView, build_signature_view, read_signature
from .templating import render_template

logger = logging.getLogger(__name__)

APPENDIX_A_PATTERN = re.compile(r"appendix\s*a\b", re.IGNORECASE)

SKIPPED_IN_TABLES = (QuestionType.INSTRUCTION_BLOCK.value, QuestionType.PAGE_BREAK.value)
CHOICE_TYPES = (QuestionType.YES_NO.value, QuestionType.SINGLE_CHOICE.value)
DEFAULT_GRID_COLUMNS = ["Column 1", "Column 2"]
EMPTY_CELL = "—"


@dataclass
class SectionContext:
    """分区所在步骤的上下文（由文档构建器按步骤计算）"""
    step_title: str = ""
    learner_evaluation: bool = False
    show_learner_intro: bool = False
    likert_index: int = 0
    last_likert: bool = False

    @property
    def appendix_a(self) -> bool:
        return bool(APPENDIX_A_PATTERN.search(self.step_title))


def row_class(index: int) -> str:
    return "row-normal" if index % 2 == 0 else "row-alt"


def is_affirmative(text: str) -> bool:
    return text.strip().lower() in ("yes", "true")


# ============================================================================
# 视图模型
# ============================================================================

class HeadingView(BaseModel):
    """编号标题"""
    number: int
    title: str
    description: str | None = None
    style: str = "h3"

    @property
    def text(self) -> str:
        return f"{self.number}. {self.title}"


class DetailRow(BaseModel):
    label: str
    value: str = ""
    row_class: str = "row-normal"


class DetailGroup(BaseModel):
    title: str
    rows: list[DetailRow] = Field(default_factory=list)


class NormalView(BaseModel):
    """明细表"""
    template: ClassVar[str] = "sections/normal.html.j2"
    instructions: list[str] = Field(default_factory=list)
    groups: list[DetailGroup] = Field(default_factory=list)


class ParticipantCell(BaseModel):
    label: str = ""
    value: str = ""


class ParticipantView(BaseModel):
    """学员评价 - 参与者信息（3行 × 2组 标签/值）"""
    template: ClassVar[str] = "sections/participant_table.html.j2"
    rows: list[list[ParticipantCell]] = Field(default_factory=list)


class LikertRow(BaseModel):
    number: int
    label: str
    help: str | None = None
    selected: int | None = None
    cells: list[bool] = Field(default_factory=list)
    row_class: str = "row-normal"


class CommentsBox(BaseModel):
    label: str
    value: str = ""


class LikertView(BaseModel):
    """李克特量表"""
    template: ClassVar[str] = "sections/likert_table.html.j2"
    letter: str = ""
    title: str = ""
    number_header: str = "No."
    criteria_header: str = "Criteria/Question"
    scale_labels: list[str] = Field(default_factory=list)
    rows: list[LikertRow] = Field(default_factory=list)
    comments: CommentsBox | None = None
    page_break_before: bool = False
    closing_bar: bool = False

    @property
    def spanner(self) -> str:
        return f"{self.letter}. {self.title}" if self.letter else self.title


class GridRow(BaseModel):
    label: str
    image_url: str | None = None
    help: str = EMPTY_CELL
    cells: list[str] = Field(default_factory=list)


class GridView(BaseModel):
    """矩阵表格"""
    template: ClassVar[str] = "sections/grid_table.html.j2"
    layout: str = "default"
    header: list[str] = Field(default_factory=list)
    rows: list[GridRow] = Field(default_factory=list)

    @property
    def split(self) -> bool:
        return self.layout in ("split", "polygon")

    @property
    def no_image(self) -> bool:
        return self.layout == "no_image"


class TaskRow(BaseModel):
    evidence: str
    method: str = ""
    row_class: str = "row-normal"


class AssessmentTasksView(BaseModel):
    """评估任务参考表（静态，不读答案）"""
    template: ClassVar[str] = "sections/assessment_tasks.html.j2"
    evidence_header: str
    method_header: str
    rows: list[TaskRow] = Field(default_factory=list)
    present: bool = False


class SubmissionItem(BaseModel):
    label: str
    checked: bool = False
    is_other: bool = False
    span_full: bool = False
    other_text: str = ""


class SubmissionView(BaseModel):
    """提交方式勾选"""
    template: ClassVar[str] = "sections/assessment_submission.html.j2"
    items: list[SubmissionItem] = Field(default_factory=list)
    hint: str = ""


class ReasonableAdjustmentView(BaseModel):
    """合理调整（标准块 / 附录A）"""
    template: ClassVar[str] = "sections/reasonable_adjustment.html.j2"
    appendix: bool = False
    texts: ReasonableAdjustmentProfile
    description_intro: str = ""
    description_note: str = ""
    applied_label: str = ""
    applied_yes: bool = False
    applied_no: bool = False
    task_label: str = ""
    task_text: str = ""
    description_label: str = ""
    description_text: str = ""
    signature_image: str | None = None
    signature_date: str = ""
    trainer_name: str = ""

    @property
    def first_matrix(self) -> AppendixMatrix | None:
        return self.texts.appendix_matrices[0] if self.texts.appendix_matrices else None

    @property
    def strategy_matrices(self) -> list[AppendixMatrix]:
        return self.texts.appendix_matrices[1:]


class ChecklistItem(BaseModel):
    label: str
    checked: bool = False


class DeclarationChecklistView(BaseModel):
    """最终声明：勾选列表"""
    template: ClassVar[str] = "sections/declarations_final.html.j2"
    items: list[ChecklistItem] = Field(default_factory=list)


class SignatureBlocksView(BaseModel):
    """签名声明：每个签名题一个子块"""
    template: ClassVar[str] = "sections/declarations_signature.html.j2"
    blocks: list[SignatureView] = Field(default_factory=list)


class OfficeRow(BaseModel):
    label: str
    value: str = ""


class OfficeTableView(BaseModel):
    """办公室专用：标签/值表"""
    template: ClassVar[str] = "sections/declarations_office.html.j2"
    spanner: str = "Other"
    rows: list[OfficeRow] = Field(default_factory=list)


class GenericItem(BaseModel):
    kind: str
    label: str = ""
    value: str = ""
    checked: bool = False
    signature: SignatureView | None = None


class GenericDeclarationView(BaseModel):
    """通用声明：按题型逐题渲染"""
    template: ClassVar[str] = "sections/declarations_generic.html.j2"
    description: str | None = None
    items: list[GenericItem] = Field(default_factory=list)


# ============================================================================
# 布局函数
# ============================================================================

LayoutFn = Callable[[SectionNode, AnswerResolver, DocumentProfile, SectionContext], Any]


def layout_normal(
    node: SectionNode,
    resolver: AnswerResolver,
    profile: DocumentProfile,
    ctx: SectionContext,
) -> NormalView:
    instructions = [
        q.question.help_text
        for q in node.questions
        if q.question.type == QuestionType.INSTRUCTION_BLOCK.value and q.question.help_text
    ]

    # 分组顺序按首次出现（插入顺序）
    groups: dict[str, DetailGroup] = {}
    index = 0
    for q in node.questions:
        if q.question.type in SKIPPED_IN_TABLES:
            continue
        title = profile.get_group_title(q.question.code_prefix)
        group = groups.setdefault(title, DetailGroup(title=title))
        group.rows.append(
            DetailRow(
                label=q.question.label,
                value=resolver.node_value(q).as_text(),
                row_class=row_class(index),
            )
        )
        index += 1

    return NormalView(instructions=instructions, groups=list(groups.values()))


def layout_participant(
    node: SectionNode,
    resolver: AnswerResolver,
    profile: DocumentProfile,
    ctx: SectionContext,
) -> ParticipantView:
    short_texts = [q for q in node.questions if q.question.type == QuestionType.SHORT_TEXT.value]

    def cell(position: int) -> ParticipantCell:
        if position >= len(short_texts):
            return ParticipantCell()
        q = short_texts[position]
        return ParticipantCell(label=q.question.label, value=resolver.text(q.question.id))

    return ParticipantView(rows=[[cell(i), cell(i + 3)] for i in range(3)])


def layout_likert(
    node: SectionNode,
    resolver: AnswerResolver,
    profile: DocumentProfile,
    ctx: SectionContext,
) -> LikertView:
    section = node.section
    scale = profile.likert.scale_labels
    letter = chr(64 + section.sort_order) if 1 <= section.sort_order <= 26 else ""

    rows: list[LikertRow] = []
    number = 1
    for q in node.questions:
        if q.question.type != QuestionType.LIKERT_5.value:
            continue
        for row in q.rows:
            answer = resolver.text(q.question.id, row.id)
            cells = [answer == str(position) for position in range(1, len(scale) + 1)]
            rows.append(
                LikertRow(
                    number=number,
                    label=row.row_label,
                    help=row.row_help,
                    selected=cells.index(True) + 1 if any(cells) else None,
                    cells=cells,
                    row_class="row-alt" if number % 2 == 0 else "row-normal",
                )
            )
            number += 1

    comments = None
    for q in node.questions:
        if q.question.type == QuestionType.LONG_TEXT.value and "Comments" in (q.question.code or ""):
            comments = CommentsBox(label=q.question.label, value=resolver.text(q.question.id))
            break

    return LikertView(
        letter=letter,
        title=section.title,
        number_header=profile.likert.number_header,
        criteria_header=profile.likert.criteria_header,
        scale_labels=scale,
        rows=rows,
        comments=comments,
        page_break_before=ctx.learner_evaluation and ctx.likert_index > 0,
        closing_bar=ctx.learner_evaluation and ctx.last_likert,
    )


def _grid_headers(meta: dict[str, Any], layout: str) -> tuple[str, str]:
    if layout == "no_image":
        defaults = ("Item", "Description")
    elif layout == "polygon":
        defaults = ("Polygon Name", "Polygon Shape")
    else:
        defaults = ("Name", "Image")
    return (
        str(meta.get("firstColumnLabel") or defaults[0]),
        str(meta.get("secondColumnLabel") or defaults[1]),
    )


def layout_grid(
    node: SectionNode,
    resolver: AnswerResolver,
    profile: DocumentProfile,
    ctx: SectionContext,
) -> GridView:
    meta = node.questions[0].question.pdf_meta if node.questions else {}
    columns = meta.get("columns")
    columns = [str(c) for c in columns] if isinstance(columns, list) else list(DEFAULT_GRID_COLUMNS)
    column_types = meta.get("columnTypes")
    if not isinstance(column_types, list):
        column_types = ["answer"] * len(columns)
    layout = str(meta.get("layout") or "default")

    first_label, second_label = _grid_headers(meta, layout)
    if layout in ("split", "polygon"):
        lead = [second_label]
    elif layout == "no_image":
        lead = [first_label, second_label]
    else:
        lead = ["Shape"]

    rows: list[GridRow] = []
    for q in node.questions:
        for row in q.rows:
            stored = resolver.value(q.question.id, row.id).as_dict()
            cells = []
            for index in range(len(columns)):
                kind = column_types[index] if index < len(column_types) else "answer"
                if kind == "question":
                    cells.append(row.row_help or EMPTY_CELL)
                else:
                    cells.append(scalar_text(stored.get(f"r{row.id}_c{index}")))
            rows.append(
                GridRow(
                    label=row.row_label,
                    image_url=row.row_image_url,
                    help=row.row_help or EMPTY_CELL,
                    cells=cells,
                )
            )

    return GridView(layout=layout, header=lead + columns, rows=rows)


def layout_assessment_tasks(
    node: SectionNode,
    resolver: AnswerResolver,
    profile: DocumentProfile,
    ctx: SectionContext,
) -> AssessmentTasksView:
    view = AssessmentTasksView(
        evidence_header=profile.assessment.evidence_header,
        method_header=profile.assessment.method_header,
    )
    for q in node.questions:
        if q.question.type == QuestionType.GRID_TABLE.value and q.rows:
            view.present = True
            view.rows = [
                TaskRow(evidence=row.row_label, method=row.row_help or "", row_class=row_class(i))
                for i, row in enumerate(q.rows)
            ]
            break
    return view


def _other_description(node: SectionNode, choice: QuestionNode | None) -> QuestionNode | None:
    """优先取紧跟多选题的短文本题，否则取分区内第一个短文本题"""
    if choice is not None:
        position = node.questions.index(choice)
        if position + 1 < len(node.questions):
            following = node.questions[position + 1]
            if following.question.type == QuestionType.SHORT_TEXT.value:
                return following
    return node.first_of_type(QuestionType.SHORT_TEXT.value)


def layout_assessment_submission(
    node: SectionNode,
    resolver: AnswerResolver,
    profile: DocumentProfile,
    ctx: SectionContext,
) -> SubmissionView:
    choice = node.first_of_type(QuestionType.MULTI_CHOICE.value)
    other = _other_description(node, choice)
    other_text = resolver.text(other.question.id) if other else ""
    selected = set(resolver.value(choice.question.id).as_list()) if choice else set()

    items = []
    for option in choice.options if choice else []:
        is_other = option.value == "other"
        is_lms = bool(re.search(r"lms|learning management", option.label, re.IGNORECASE))
        items.append(
            SubmissionItem(
                label=option.label,
                checked=option.value in selected,
                is_other=is_other,
                span_full=is_other or is_lms,
                other_text=other_text if is_other else "",
            )
        )
    return SubmissionView(items=items, hint=profile.assessment.describe_hint)


def _split_description(description: str | None, marker: str) -> tuple[str, str]:
    if not description:
        return "", ""
    match = re.search(re.escape(marker), description, re.IGNORECASE)
    if match is None:
        return description.strip(), ""
    return description[: match.start()].strip(), description[match.start():].strip()


def layout_reasonable_adjustment(
    node: SectionNode,
    resolver: AnswerResolver,
    profile: DocumentProfile,
    ctx: SectionContext,
) -> ReasonableAdjustmentView:
    texts = profile.reasonable_adjustment
    task_q = node.find_by_code("reasonable_adjustment.task")
    desc_q = node.find_by_code("reasonable_adjustment.description")
    sig_q = node.first_of_type(QuestionType.SIGNATURE.value)
    yes_no_q = node.first_of_type(QuestionType.YES_NO.value)

    applied = resolver.text(yes_no_q.question.id) if yes_no_q else ""
    applied_yes = is_affirmative(applied)

    trainer_name = resolver.code_text("trainer.fullName")
    image, date = None, ""
    if sig_q is not None:
        image, trainer_name, date = read_signature(resolver.value(sig_q.question.id), trainer_name)

    intro, note = _split_description(node.section.description, texts.split_marker)
    return ReasonableAdjustmentView(
        appendix=ctx.appendix_a,
        texts=texts,
        description_intro=intro,
        description_note=note,
        applied_label=(yes_no_q.question.label if yes_no_q else "") or texts.applied_label,
        applied_yes=applied_yes,
        applied_no=not applied_yes and applied.strip() != "",
        task_label=(task_q.question.label if task_q else "") or texts.task_label,
        task_text=resolver.text(task_q.question.id) if task_q else "",
        description_label=(desc_q.question.label if desc_q else "") or texts.description_label,
        description_text=resolver.text(desc_q.question.id) if desc_q else "",
        signature_image=image,
        signature_date=date,
        trainer_name=trainer_name,
    )


def declarations_final(
    node: SectionNode,
    resolver: AnswerResolver,
    profile: DocumentProfile,
    ctx: SectionContext,
) -> DeclarationChecklistView:
    return DeclarationChecklistView(
        items=[
            ChecklistItem(
                label=q.question.label,
                checked=is_affirmative(resolver.text(q.question.id)),
            )
            for q in node.questions
            if q.question.type in CHOICE_TYPES
        ]
    )


def declarations_signature(
    node: SectionNode,
    resolver: AnswerResolver,
    profile: DocumentProfile,
    ctx: SectionContext,
) -> SignatureBlocksView:
    return SignatureBlocksView(
        blocks=[
            build_signature_view(q, resolver, profile.declarations)
            for q in node.questions
            if q.question.type == QuestionType.SIGNATURE.value
        ]
    )


def declarations_office(
    node: SectionNode,
    resolver: AnswerResolver,
    profile: DocumentProfile,
    ctx: SectionContext,
) -> OfficeTableView:
    return OfficeTableView(
        spanner=profile.declarations.office_spanner,
        rows=[
            OfficeRow(label=q.question.label, value=resolver.text(q.question.id))
            for q in node.questions
        ],
    )


def declarations_generic(
    node: SectionNode,
    resolver: AnswerResolver,
    profile: DocumentProfile,
    ctx: SectionContext,
) -> GenericDeclarationView:
    items = []
    for q in node.questions:
        question = q.question
        if question.type == QuestionType.PAGE_BREAK.value:
            continue
        if question.type == QuestionType.SIGNATURE.value:
            items.append(
                GenericItem(
                    kind="signature",
                    label=question.label,
                    signature=build_signature_view(q, resolver, profile.declarations),
                )
            )
        elif question.type in CHOICE_TYPES:
            items.append(
                GenericItem(
                    kind="checkbox",
                    label=question.label,
                    checked=is_affirmative(resolver.text(question.id)),
                )
            )
        else:
            # date 与其余题型都以 标签 + 答案框 展示
            items.append(
                GenericItem(kind="text", label=question.label, value=resolver.text(question.id))
            )
    return GenericDeclarationView(description=node.section.description, items=items)


DECLARATION_LAYOUTS: dict[DeclarationsVariant, LayoutFn] = {
    DeclarationsVariant.FINAL_DECLARATION: declarations_final,
    DeclarationsVariant.SIGNATURE: declarations_signature,
    DeclarationsVariant.OFFICE_USE: declarations_office,
    DeclarationsVariant.GENERIC: declarations_generic,
}


def layout_declarations(
    node: SectionNode,
    resolver: AnswerResolver,
    profile: DocumentProfile,
    ctx: SectionContext,
) -> Any:
    variant = node.section.effective_declarations_variant
    return DECLARATION_LAYOUTS[variant](node, resolver, profile, ctx)


LAYOUTS: dict[RenderMode, LayoutFn] = {
    RenderMode.NORMAL: layout_normal,
    RenderMode.LIKERT_TABLE: layout_likert,
    RenderMode.GRID_TABLE: layout_grid,
    RenderMode.ASSESSMENT_TASKS: layout_assessment_tasks,
    RenderMode.ASSESSMENT_SUBMISSION: layout_assessment_submission,
    RenderMode.REASONABLE_ADJUSTMENT: layout_reasonable_adjustment,
    RenderMode.DECLARATIONS: layout_declarations,
}


# ============================================================================
# 分发器
# ============================================================================

class SectionRenderer:
    """分区渲染器（无状态；同一输入总是得到同一片段）"""

    def __init__(self, resolver: AnswerResolver, profile: DocumentProfile | None = None):
        self.resolver = resolver
        self.profile = profile or load_profile()

    def build_view(self, node: SectionNode, ctx: SectionContext) -> Any:
        section = node.section
        if (
            ctx.learner_evaluation
            and section.title.strip() == self.profile.learner_evaluation.participant_section_title
        ):
            return layout_participant(node, self.resolver, self.profile, ctx)
        return LAYOUTS[section.render_mode](node, self.resolver, self.profile, ctx)

    def heading(self, node: SectionNode, number: int | None) -> HeadingView | None:
        if number is None:
            return None
        section = node.section
        return HeadingView(
            number=number,
            title=section.title,
            description=section.description,
            style="bar" if section.render_mode is RenderMode.DECLARATIONS else "h3",
        )

    def render(
        self,
        node: SectionNode,
        heading_number: int | None = None,
        context: SectionContext | None = None,
    ) -> SectionFragment:
        """渲染单个分区"""
        ctx = context or SectionContext()
        section = node.section
        if section.pdf_render_mode and section.render_mode.value != section.pdf_render_mode.strip().lower():
            logger.debug(f"未知渲染模式按 normal 处理: section={section.id}, mode={section.pdf_render_mode}")

        view = self.build_view(node, ctx)
        html = render_template(
            view.template,
            mode=section.render_mode.value,
            section_id=section.id,
            heading=self.heading(node, heading_number),
            learner_intro=self.profile.learner_evaluation if ctx.show_learner_intro else None,
            view=view,
        )
        return SectionFragment(
            section_id=section.id,
            mode=section.render_mode,
            heading_number=heading_number,
            html=html,
            view=view,
        )


def render_section(
    node: SectionNode,
    resolver: AnswerResolver,
    heading_number: int | None = None,
    context: SectionContext | None = None,
    profile: DocumentProfile | None = None,
) -> SectionFragment:
    """便捷函数"""
    return SectionRenderer(resolver, profile).render(node, heading_number, context)
