"""
文档装配器 - 封面 pass + 正文 pass → 最终PDF

流程：
1. 封面单独渲染（无页眉页脚），只保留第1页
2. 简介页+正文页一次渲染（页眉页脚统一，页码从正文第1页开始）
3. 按 [封面, 正文] 顺序逐页合并

测试要点：
- test_assemble_page_count: 1 + 1 + N 页
- test_cover_rendered_first_without_footer: 封面 pass 不带页眉页脚
- test_footer_numbers_restart_in_body: "Page 1 of N" 起于简介页
- test_cover_overflow_trimmed: 封面溢出时截取第1页
"""

from __future__ import annotations

import logging

from ..interfaces import IDocumentAssembler, IRenderBackend
from ..models import DocumentPlan, PageRange
from .pdf_engine import merge_page_ranges, take_pages

logger = logging.getLogger(__name__)


class DocumentAssembler(IDocumentAssembler):
    """文档装配器实现（与具体渲染后端解耦）"""

    def __init__(self, backend: IRenderBackend):
        self.backend = backend

    def render_cover(self, plan: DocumentPlan) -> PageRange:
        cover = self.backend.render(plan.cover_html, plan.cover_options)
        if cover.page_count > 1:
            logger.warning(f"封面溢出为 {cover.page_count} 页，只保留第1页")
            cover = take_pages(cover, 1)
        return cover

    def render_body(self, plan: DocumentPlan) -> PageRange:
        body = self.backend.render(plan.body_html, plan.body_options)
        expected = plan.intro_page_count + len(plan.pages)
        if body.page_count < expected:
            logger.warning(f"正文页数少于分页组数: {body.page_count} < {expected}")
        return body

    def assemble(self, plan: DocumentPlan) -> bytes:
        cover = self.render_cover(plan)
        body = self.render_body(plan)
        return merge_page_ranges([cover, body])
