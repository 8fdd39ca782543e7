"""
文档生成模块 - 答案解析/分页规划/分区渲染/封面/装配

子模块：
- resolver: 答案解析器（复合键 + 语义code）
- planner: 分页组规划与标题编号
- sections: 分区渲染分发器
- cover: 封面组装
- document: 页面描述构建（封面 pass / 正文 pass）
- pdf_engine: 渲染后端与页段合并
- assembler: 最终文档装配
"""

from .resolver import AnswerResolver
from .planner import assign_heading_numbers, heading_for, plan_page_groups
from .sections import LAYOUTS, SectionContext, SectionRenderer, render_section
from .cover import CoverComposer
from .document import DocumentBuilder
from .pdf_engine import PlaywrightBackend, count_pdf_pages, merge_page_ranges, take_pages
from .assembler import DocumentAssembler

__all__ = [
    "AnswerResolver",
    "plan_page_groups",
    "heading_for",
    "assign_heading_numbers",
    "LAYOUTS",
    "SectionContext",
    "SectionRenderer",
    "render_section",
    "CoverComposer",
    "DocumentBuilder",
    "PlaywrightBackend",
    "count_pdf_pages",
    "merge_page_ranges",
    "take_pages",
    "DocumentAssembler",
]
