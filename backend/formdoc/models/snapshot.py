"""
表单快照 - 一次渲染的唯一输入

由加载器从存储层组装，文档生成模块只消费这个结构化数据
"""

from __future__ import annotations

from typing import Iterator

from pydantic import BaseModel, Field

from .answer import Answer
from .schema import Form, QuestionNode, SectionNode, StepNode


class FormSnapshot(BaseModel):
    """表单实例快照（结构+答案）"""

    instance_id: int
    form: Form
    steps: list[StepNode] = Field(default_factory=list)
    answers: list[Answer] = Field(default_factory=list)

    def iter_sections(self) -> Iterator[SectionNode]:
        for step in self.steps:
            yield from step.sections

    def iter_questions(self) -> Iterator[QuestionNode]:
        for step in self.steps:
            yield from step.iter_questions()

    @property
    def suggested_filename(self) -> str:
        return f"form-{self.instance_id}.pdf"
