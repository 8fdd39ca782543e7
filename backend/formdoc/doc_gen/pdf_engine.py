"""
PDF引擎 - HTML渲染为PDF页段，页段合并

职责：
1. PlaywrightBackend: Chromium 渲染一次 pass（纸张/边距/页眉页脚模板）
2. count_pdf_pages: PDF页数计算
3. take_pages: 截取页段前N页（封面只保留第1页）
4. merge_page_ranges: 按调用方给定顺序逐页拼接页段

依赖：
- playwright: 无头浏览器渲染（sync API）
- pypdf: 页数计算与页段合并

测试要点：
- test_merge_preserves_order_and_count: 合并保序保页数
- test_take_pages_trims_extra: 截取页段
- test_invalid_pdf_raises_merge_error: 非法字节
- test_take_pages_noop: 无需截取时返回原页段
- test_render_error_survives_failed_page_close: 页面关闭失败不覆盖渲染异常
"""

from __future__ import annotations

import logging
from io import BytesIO
from typing import Iterable

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError

from ..config import get_config
from ..config.runtime_config import PDFBackendConfig
from ..interfaces import BackendRenderError, IRenderBackend, MergeError
from ..models import PageRange, PassOptions

logger = logging.getLogger(__name__)


def count_pdf_pages(pdf: bytes) -> int:
    """计算PDF页数"""
    try:
        return len(PdfReader(BytesIO(pdf)).pages)
    except PyPdfError as e:
        raise MergeError(f"PDF解析失败: {e}") from e


def take_pages(page_range: PageRange, count: int) -> PageRange:
    """保留页段的前 count 页"""
    if page_range.page_count <= count:
        return page_range
    try:
        reader = PdfReader(BytesIO(page_range.pdf))
        writer = PdfWriter()
        for page in reader.pages[:count]:
            writer.add_page(page)
        buffer = BytesIO()
        writer.write(buffer)
    except PyPdfError as e:
        raise MergeError(f"页段截取失败 [{page_range.label}]: {e}") from e
    return PageRange(label=page_range.label, pdf=buffer.getvalue(), page_count=count)


def merge_page_ranges(ranges: Iterable[PageRange]) -> bytes:
    """
    按给定顺序逐页拼接页段

    Raises:
        MergeError: 任一页段无法解析或写出失败
    """
    writer = PdfWriter()
    for page_range in ranges:
        try:
            reader = PdfReader(BytesIO(page_range.pdf))
            for page in reader.pages:
                writer.add_page(page)
        except PyPdfError as e:
            raise MergeError(f"页段读取失败 [{page_range.label}]: {e}") from e

    buffer = BytesIO()
    try:
        writer.write(buffer)
    except PyPdfError as e:
        raise MergeError(f"合并写出失败: {e}") from e
    return buffer.getvalue()


class PlaywrightBackend(IRenderBackend):
    """Chromium 渲染后端（浏览器在 open 时启动，close 时释放）"""

    def __init__(self, config: PDFBackendConfig | None = None):
        self.config = config or get_config().pdf_backend
        self._playwright = None
        self._browser = None

    def open(self) -> None:
        if self._browser is not None:
            return
        from playwright.sync_api import sync_playwright

        try:
            self._playwright = sync_playwright().start()
            browser_type = getattr(self._playwright, self.config.browser)
            self._browser = browser_type.launch()
        except Exception as e:
            self.close()
            raise BackendRenderError(f"浏览器启动失败: {e}") from e
        logger.info(f"渲染后端已启动: {self.config.browser}")

    def close(self) -> None:
        if self._browser is not None:
            self._browser.close()
            self._browser = None
        if self._playwright is not None:
            self._playwright.stop()
            self._playwright = None

    @staticmethod
    def _close_page(page, label: str) -> None:
        """关闭页面；失败只记录，不覆盖渲染异常"""
        try:
            page.close()
        except Exception as e:
            logger.warning(f"页面关闭失败 [{label}]: {e}")

    def render(self, html: str, options: PassOptions) -> PageRange:
        self.open()
        page = self._browser.new_page()
        try:
            page.set_content(
                html,
                wait_until=self.config.wait_until,
                timeout=self.config.timeout_ms,
            )
            pdf_kwargs = {
                "format": options.paper_format,
                "print_background": options.print_background,
                "margin": options.margin,
                "display_header_footer": options.display_header_footer,
            }
            if options.display_header_footer:
                pdf_kwargs["header_template"] = options.header_template
                pdf_kwargs["footer_template"] = options.footer_template
            pdf = page.pdf(**pdf_kwargs)
        except Exception as e:
            raise BackendRenderError(f"渲染失败 [{options.label}]: {e}") from e
        finally:
            self._close_page(page, options.label)

        page_count = count_pdf_pages(pdf)
        logger.info(f"渲染完成 [{options.label}]: {page_count} 页")
        return PageRange(label=options.label, pdf=pdf, page_count=page_count)
