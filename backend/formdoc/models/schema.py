"""
表单结构模型 - Form → Step → Section → Question → (Option | Row)

渲染引擎只读这些实体（由表单搭建子系统维护），一次渲染内视为不可变快照。
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterator

from pydantic import BaseModel, Field, field_validator


class RenderMode(str, Enum):
    """分区渲染模式（分发布局算法的唯一依据）"""
    NORMAL = "normal"
    LIKERT_TABLE = "likert_table"
    GRID_TABLE = "grid_table"
    ASSESSMENT_TASKS = "assessment_tasks"
    ASSESSMENT_SUBMISSION = "assessment_submission"
    REASONABLE_ADJUSTMENT = "reasonable_adjustment"
    DECLARATIONS = "declarations"

    @classmethod
    def parse(cls, value: str | None) -> RenderMode:
        """未知/未来模式回退到 normal"""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.NORMAL


class DeclarationsVariant(str, Enum):
    """声明类分区的子布局"""
    FINAL_DECLARATION = "final_declaration"
    SIGNATURE = "signature"
    OFFICE_USE = "office_use"
    GENERIC = "generic"

    @classmethod
    def infer(cls, title: str | None) -> DeclarationsVariant:
        """旧数据没有显式子布局时，按标题推断（匹配顺序固定）"""
        lowered = (title or "").lower()
        if "final declaration" in lowered:
            return cls.FINAL_DECLARATION
        if "signature" in lowered:
            return cls.SIGNATURE
        if "office" in lowered:
            return cls.OFFICE_USE
        return cls.GENERIC


class QuestionType(str, Enum):
    """题目类型"""
    SHORT_TEXT = "short_text"
    LONG_TEXT = "long_text"
    DATE = "date"
    YES_NO = "yes_no"
    SINGLE_CHOICE = "single_choice"
    MULTI_CHOICE = "multi_choice"
    LIKERT_5 = "likert_5"
    GRID_TABLE = "grid_table"
    SIGNATURE = "signature"
    INSTRUCTION_BLOCK = "instruction_block"
    PAGE_BREAK = "page_break"


class Form(BaseModel):
    """表单模板"""
    id: int
    name: str = ""
    version: str | None = None
    unit_code: str | None = None
    header_asset_url: str | None = None
    cover_asset_url: str | None = None

    # 可选的表单级代码兜底值
    qualification_code: str | None = None
    qualification_name: str | None = None
    unit_name: str | None = None

    @field_validator("version", mode="before")
    @classmethod
    def _version_as_text(cls, v: Any) -> Any:
        if v is None or isinstance(v, str):
            return v
        return str(v)


class Step(BaseModel):
    """步骤（物理分页单元）"""
    id: int
    title: str = ""
    subtitle: str | None = None
    sort_order: int = 0


class Section(BaseModel):
    """分区"""
    id: int
    step_id: int | None = None
    title: str = ""
    description: str | None = None
    pdf_render_mode: str | None = RenderMode.NORMAL.value
    declarations_variant: DeclarationsVariant | None = None
    sort_order: int = 0

    @property
    def render_mode(self) -> RenderMode:
        return RenderMode.parse(self.pdf_render_mode)

    @property
    def effective_declarations_variant(self) -> DeclarationsVariant:
        """显式子布局优先，其次按标题推断"""
        if self.declarations_variant is not None:
            return self.declarations_variant
        return DeclarationsVariant.infer(self.title)


class Question(BaseModel):
    """题目"""
    id: int
    section_id: int | None = None
    type: str = QuestionType.SHORT_TEXT.value
    code: str | None = None
    label: str = ""
    help_text: str | None = None
    required: bool = False
    sort_order: int = 0

    # 渲染不使用（PDF始终展示全部数据），保留以便原样透传
    role_visibility: Any = None
    role_editability: Any = None

    pdf_meta: dict[str, Any] = Field(default_factory=dict)

    @field_validator("pdf_meta", mode="before")
    @classmethod
    def _meta_or_empty(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else {}

    @property
    def code_prefix(self) -> str:
        """code 第一个 '.' 之前的部分"""
        return (self.code or "").split(".")[0]


class QuestionOption(BaseModel):
    """选项"""
    id: int
    question_id: int | None = None
    value: str = ""
    label: str = ""
    sort_order: int = 0


class QuestionRow(BaseModel):
    """矩阵题的行"""
    id: int
    question_id: int | None = None
    row_label: str = ""
    row_help: str | None = None
    row_image_url: str | None = None
    row_meta: dict[str, Any] | None = None
    sort_order: int = 0


# ============================================================================
# 有序树节点
# ============================================================================

class QuestionNode(BaseModel):
    """题目节点（含有序选项与行）"""
    question: Question
    options: list[QuestionOption] = Field(default_factory=list)
    rows: list[QuestionRow] = Field(default_factory=list)


class SectionNode(BaseModel):
    """分区节点"""
    section: Section
    questions: list[QuestionNode] = Field(default_factory=list)

    def first_of_type(self, *types: str) -> QuestionNode | None:
        for node in self.questions:
            if node.question.type in types:
                return node
        return None

    def find_by_code(self, code: str) -> QuestionNode | None:
        for node in self.questions:
            if node.question.code == code:
                return node
        return None


class StepNode(BaseModel):
    """步骤节点"""
    step: Step
    sections: list[SectionNode] = Field(default_factory=list)

    def iter_questions(self) -> Iterator[QuestionNode]:
        for section in self.sections:
            yield from section.questions
