"""
文档构建与装配单元测试

使用空白页后端（不启动浏览器），页数由页面标记决定。
"""

from io import BytesIO

import pytest
from pypdf import PdfReader, PdfWriter

from formdoc.config.runtime_config import PDFBackendConfig
from formdoc.doc_gen import (
    AnswerResolver,
    DocumentAssembler,
    DocumentBuilder,
    PlaywrightBackend,
    count_pdf_pages,
    merge_page_ranges,
    plan_page_groups,
    take_pages,
)
from formdoc.interfaces import BackendRenderError, MergeError
from formdoc.models import PageRange, PassOptions


def _pdf(pages: int, width: int = 595) -> bytes:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=width, height=842)
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


@pytest.fixture
def doc_builder(profile, runtime_config) -> DocumentBuilder:
    return DocumentBuilder(profile, runtime_config)


class TestDocumentBuilder:
    """页面描述构建测试"""

    def test_plan_is_idempotent(self, doc_builder, sample_snapshot):
        first = doc_builder.build(sample_snapshot)
        second = doc_builder.build(sample_snapshot)
        assert first.cover_html == second.cover_html
        assert first.body_html == second.body_html
        assert first.body_options == second.body_options

    def test_page_groups(self, doc_builder, sample_snapshot):
        plan = doc_builder.build(sample_snapshot)
        assert [page.titles for page in plan.pages] == [
            ["Student & Trainer Details", "Qualification and Unit"],
            ["Assessment"],
            ["Reasonable Adjustment"],
            ["Declarations"],
        ]

    def test_heading_numbers_threaded_across_pages(self, doc_builder, sample_snapshot):
        """RA 计数不显示；签名声明不计数"""
        plan = doc_builder.build(sample_snapshot)
        numbers = [
            [fragment.heading_number for fragment in page.fragments] for page in plan.pages
        ]
        assert numbers == [[1, 2], [3, 4], [None], [6, None, 7]]
        assert plan.heading_numbers == [1, 2, 3, 4, 6, 7]

    def test_render_pages_continues_from_start(self, doc_builder, sample_snapshot):
        resolver = AnswerResolver.from_snapshot(sample_snapshot)
        groups = plan_page_groups(sample_snapshot.steps)
        pages, counter = doc_builder.render_pages(groups, resolver, start=10)
        numbers = [f.heading_number for page in pages for f in page.fragments]
        assert numbers == [10, 11, 12, 13, None, 15, None, 16]
        assert counter == 17

    def test_learner_evaluation_unnumbered(self, builder, doc_builder):
        q = builder.question("short_text", "Name", code="student.fullName")
        builder.step("Student", builder.section("Student", q))
        builder.step(
            "Learner Evaluation",
            builder.section("Participant Information", builder.question("short_text", "Course")),
            builder.section("Training", mode="likert_table"),
            builder.section("Trainer", mode="likert_table"),
        )
        builder.step("After", builder.section("Closing"))
        plan = doc_builder.build(builder.snapshot())

        assert plan.heading_numbers == [1, 2]
        evaluation = plan.pages[1].fragments
        assert "participant-table" in evaluation[0].html
        assert "Appendix B - Learner Evaluation Form" in evaluation[0].html
        assert "likert-page-break" not in evaluation[1].html
        assert "likert-page-break" in evaluation[2].html
        assert "learner-eval-grey-bar" in evaluation[2].html

    def test_cover_options_have_no_header_footer(self, doc_builder, sample_snapshot):
        plan = doc_builder.build(sample_snapshot)
        assert not plan.cover_options.display_header_footer
        assert set(plan.cover_options.margin.values()) == {"0"}
        assert 'data-page="cover"' in plan.cover_html
        assert "BSBCRT411 Apply critical thinking to work practices" in plan.cover_html
        assert "Alex Citizen" in plan.cover_html

    def test_body_options_have_header_footer(self, doc_builder, sample_snapshot, profile):
        plan = doc_builder.build(sample_snapshot)
        options = plan.body_options
        assert options.display_header_footer
        assert options.margin["top"] == "190px"
        assert "Version Number: 2" in options.footer_template
        assert "Unit Code: BSBCRT411" in options.footer_template
        assert 'class="pageNumber"' in options.footer_template
        assert 'class="totalPages"' in options.footer_template
        assert profile.organisation.email in options.header_template
        # 无文字logo时以品牌文字兜底
        assert profile.organisation.brand_title in options.header_template

    def test_footer_version_defaults_to_one(self, builder, doc_builder):
        builder.step("Only", builder.section("Only"))
        plan = doc_builder.build(builder.snapshot())
        assert "Version Number: 1" in plan.body_options.footer_template

    def test_body_has_intro_then_pages(self, doc_builder, sample_snapshot, profile):
        plan = doc_builder.build(sample_snapshot)
        assert plan.body_html.count('data-page="intro"') == 1
        assert plan.body_html.count('data-page="body"') == 4
        assert plan.body_html.index(profile.intro.title) < plan.body_html.index('data-page="body"')


class TestDocumentAssembler:
    """两次渲染 + 合并测试"""

    def test_assemble_page_count(self, doc_builder, sample_snapshot, blank_backend):
        plan = doc_builder.build(sample_snapshot)
        pdf = DocumentAssembler(blank_backend).assemble(plan)
        assert count_pdf_pages(pdf) == 6

    def test_footer_numbers_restart_in_body(self, doc_builder, sample_snapshot, blank_backend):
        plan = doc_builder.build(sample_snapshot)
        DocumentAssembler(blank_backend).assemble(plan)
        assert blank_backend.footer_labels == [f"Page {i} of 5" for i in range(1, 6)]

    def test_cover_rendered_first_without_footer(self, doc_builder, sample_snapshot, blank_backend):
        plan = doc_builder.build(sample_snapshot)
        DocumentAssembler(blank_backend).assemble(plan)
        (cover_html, cover_opts), (body_html, body_opts) = blank_backend.calls
        assert cover_opts.label == "cover" and not cover_opts.display_header_footer
        assert body_opts.label == "body" and body_opts.display_header_footer

    def test_cover_overflow_trimmed(self, doc_builder, sample_snapshot, blank_backend):
        plan = doc_builder.build(sample_snapshot)
        plan.cover_html += '<div data-page="cover"></div>'
        pdf = DocumentAssembler(blank_backend).assemble(plan)
        assert count_pdf_pages(pdf) == 6


class TestPageRanges:
    """页段合并测试"""

    def test_merge_preserves_order_and_count(self):
        first = PageRange(label="a", pdf=_pdf(1, width=300), page_count=1)
        second = PageRange(label="b", pdf=_pdf(2, width=500), page_count=2)
        reader = PdfReader(BytesIO(merge_page_ranges([first, second])))
        widths = [round(float(page.mediabox.width)) for page in reader.pages]
        assert widths == [300, 500, 500]

    def test_take_pages_trims_extra(self):
        page_range = PageRange(label="cover", pdf=_pdf(3), page_count=3)
        trimmed = take_pages(page_range, 1)
        assert trimmed.page_count == 1
        assert count_pdf_pages(trimmed.pdf) == 1

    def test_take_pages_noop(self):
        page_range = PageRange(label="cover", pdf=_pdf(1), page_count=1)
        assert take_pages(page_range, 1) is page_range

    def test_invalid_pdf_raises_merge_error(self):
        with pytest.raises(MergeError):
            merge_page_ranges([PageRange(label="bad", pdf=b"not a pdf", page_count=1)])


class _FailingPage:
    def __init__(self):
        self.closed = False

    def set_content(self, html, **kwargs):
        raise RuntimeError("navigation timeout")

    def pdf(self, **kwargs):
        raise AssertionError("不应执行")

    def close(self):
        self.closed = True
        raise RuntimeError("target closed")


class _FakeBrowser:
    def __init__(self, page):
        self.page = page

    def new_page(self):
        return self.page


class TestPlaywrightBackend:
    """渲染后端异常边界测试（不启动浏览器）"""

    def test_render_error_survives_failed_page_close(self, caplog):
        page = _FailingPage()
        backend = PlaywrightBackend(PDFBackendConfig())
        backend._browser = _FakeBrowser(page)

        with caplog.at_level("WARNING", logger="formdoc.doc_gen.pdf_engine"):
            with pytest.raises(BackendRenderError, match="navigation timeout"):
                backend.render("<html></html>", PassOptions(label="body"))

        assert page.closed
        assert "页面关闭失败 [body]" in caplog.text
        backend._browser = None
