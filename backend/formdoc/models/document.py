"""
文档结构模型 - 分页组、分区片段、封面、渲染参数与页段

Cover pass / body pass 的输入输出都在这里定义，装配器只依赖这些值对象，
与具体渲染后端解耦。
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from .schema import RenderMode, StepNode


class PageGroup(BaseModel):
    """分页组（1~2个步骤渲染到同一物理页）"""
    steps: list[StepNode] = Field(default_factory=list)

    @property
    def titles(self) -> list[str]:
        return [node.step.title for node in self.steps]


class SectionFragment(BaseModel):
    """单个分区的渲染结果"""
    section_id: int
    mode: RenderMode
    heading_number: int | None = None
    html: str = ""
    view: Any = None


class RenderedPage(BaseModel):
    """一个分页组渲染后的正文页"""
    titles: list[str] = Field(default_factory=list)
    fragments: list[SectionFragment] = Field(default_factory=list)


class CoverPage(BaseModel):
    """封面视图"""
    unit_code: str
    unit_title: str
    student_name: str = ""
    student_id: str = ""
    crest_image: str | None = None
    cover_image: str | None = None
    band_title: str = "STUDENT WORKBOOK"

    @property
    def unit_text(self) -> str:
        return " ".join(part for part in (self.unit_code, self.unit_title) if part)


class RunningHeader(BaseModel):
    """正文页眉"""
    crest_image: str | None = None
    text_logo_image: str | None = None


class RunningFooter(BaseModel):
    """正文页脚"""
    version: str = "1"
    unit_code: str = ""


class PassOptions(BaseModel):
    """单次渲染参数"""
    label: str
    paper_format: str = "A4"
    margin: dict[str, str] = Field(default_factory=dict)
    print_background: bool = True
    display_header_footer: bool = False
    header_template: str = ""
    footer_template: str = ""


class PageRange(BaseModel):
    """渲染后端产出的页段"""
    label: str
    pdf: bytes
    page_count: int


class DocumentPlan(BaseModel):
    """装配输入：两次渲染各自的页面描述与参数"""
    cover: CoverPage
    cover_html: str
    cover_options: PassOptions
    body_html: str
    body_options: PassOptions
    pages: list[RenderedPage] = Field(default_factory=list)
    intro_page_count: int = 1

    @property
    def heading_numbers(self) -> list[int]:
        """按文档顺序列出已渲染的标题编号"""
        return [
            fragment.heading_number
            for page in self.pages
            for fragment in page.fragments
            if fragment.heading_number is not None
        ]
