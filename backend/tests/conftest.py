"""
pytest 配置与公共 fixtures

使用方式：
    def test_something(builder, profile):
        q = builder.question("short_text", "Name", code="student.fullName")
        builder.step("Student Details", builder.section("Student", q))
        snapshot = builder.snapshot()
"""

from __future__ import annotations

from io import BytesIO
from typing import Any

import pytest
from pypdf import PdfWriter

from formdoc.config import DocumentProfile, RuntimeConfig, load_profile
from formdoc.interfaces import IRenderBackend
from formdoc.models import (
    Answer,
    DeclarationsVariant,
    Form,
    FormSnapshot,
    PageRange,
    PassOptions,
    Question,
    QuestionNode,
    QuestionOption,
    QuestionRow,
    Section,
    SectionNode,
    Step,
    StepNode,
)

# 测试后端按页面标记计页
PAGE_MARKER = 'data-page="'

A4_WIDTH_PT = 595
A4_HEIGHT_PT = 842


# ============================================================================
# 表单树构建器
# ============================================================================

class SnapshotBuilder:
    """按调用顺序构建表单树（id 与 sort_order 自增）"""

    def __init__(self):
        self._next_id = 1
        self.steps: list[StepNode] = []
        self.answers: list[Answer] = []

    def _id(self) -> int:
        value = self._next_id
        self._next_id += 1
        return value

    def row(self, label: str, help: str | None = None, image: str | None = None) -> QuestionRow:
        rid = self._id()
        return QuestionRow(id=rid, row_label=label, row_help=help, row_image_url=image, sort_order=rid)

    def option(self, value: str, label: str | None = None) -> QuestionOption:
        oid = self._id()
        return QuestionOption(id=oid, value=value, label=label or value, sort_order=oid)

    def question(
        self,
        type: str = "short_text",
        label: str = "",
        code: str | None = None,
        help_text: str | None = None,
        rows: list[QuestionRow] | None = None,
        options: list[QuestionOption] | None = None,
        pdf_meta: dict[str, Any] | None = None,
    ) -> QuestionNode:
        qid = self._id()
        return QuestionNode(
            question=Question(
                id=qid,
                type=type,
                label=label,
                code=code,
                help_text=help_text,
                pdf_meta=pdf_meta or {},
                sort_order=qid,
            ),
            rows=rows or [],
            options=options or [],
        )

    def section(
        self,
        title: str,
        *questions: QuestionNode,
        mode: str = "normal",
        description: str | None = None,
        variant: DeclarationsVariant | None = None,
        sort_order: int | None = None,
    ) -> SectionNode:
        sid = self._id()
        return SectionNode(
            section=Section(
                id=sid,
                title=title,
                description=description,
                pdf_render_mode=mode,
                declarations_variant=variant,
                sort_order=sid if sort_order is None else sort_order,
            ),
            questions=list(questions),
        )

    def step(self, title: str, *sections: SectionNode) -> StepNode:
        sid = self._id()
        node = StepNode(step=Step(id=sid, title=title, sort_order=sid), sections=list(sections))
        self.steps.append(node)
        return node

    def answer(
        self,
        node: QuestionNode,
        text: str | None = None,
        number: int | float | None = None,
        json: Any = None,
        row: QuestionRow | None = None,
    ) -> Answer:
        answer = Answer(
            question_id=node.question.id,
            row_id=row.id if row else None,
            value_text=text,
            value_number=number,
            value_json=json,
        )
        self.answers.append(answer)
        return answer

    def snapshot(self, instance_id: int = 1, **form_fields: Any) -> FormSnapshot:
        form = Form(id=1, name=form_fields.pop("name", "Sample Form"), **form_fields)
        return FormSnapshot(
            instance_id=instance_id,
            form=form,
            steps=list(self.steps),
            answers=list(self.answers),
        )


# ============================================================================
# 测试渲染后端
# ============================================================================

class BlankPageBackend(IRenderBackend):
    """
    空白页后端：每个页面标记产出一页A4空白PDF

    同时记录每次调用与正文页脚文字（"Page i of n"），不启动浏览器。
    """

    def __init__(self):
        self.calls: list[tuple[str, PassOptions]] = []
        self.footer_labels: list[str] = []

    def render(self, html: str, options: PassOptions) -> PageRange:
        self.calls.append((html, options))
        page_count = max(html.count(PAGE_MARKER), 1)

        writer = PdfWriter()
        for _ in range(page_count):
            writer.add_blank_page(width=A4_WIDTH_PT, height=A4_HEIGHT_PT)
        buffer = BytesIO()
        writer.write(buffer)

        if options.display_header_footer:
            self.footer_labels.extend(
                f"Page {i} of {page_count}" for i in range(1, page_count + 1)
            )
        return PageRange(label=options.label, pdf=buffer.getvalue(), page_count=page_count)


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture(scope="session")
def profile() -> DocumentProfile:
    """内置文档内容配置（会话级别缓存）"""
    return load_profile()


@pytest.fixture
def runtime_config(tmp_path) -> RuntimeConfig:
    """运行期配置（资源目录指向空临时目录）"""
    config = RuntimeConfig()
    config.assets.assets_dir = tmp_path / "public"
    return config


@pytest.fixture
def builder() -> SnapshotBuilder:
    return SnapshotBuilder()


@pytest.fixture
def blank_backend() -> BlankPageBackend:
    return BlankPageBackend()


@pytest.fixture
def sample_snapshot(builder: SnapshotBuilder) -> FormSnapshot:
    """
    典型表单：4 个分页组

    1. Student & Trainer Details + Qualification and Unit（合并）
    2. Assessment
    3. Reasonable Adjustment
    4. Declarations
    """
    name = builder.question("short_text", "Student Name", code="student.fullName")
    sid = builder.question("short_text", "Student ID", code="student.id")
    trainer = builder.question("short_text", "Trainer Name", code="trainer.fullName")
    builder.step(
        "Student & Trainer Details",
        builder.section("Student and Trainer", name, sid, trainer),
    )

    unit_code = builder.question("short_text", "Unit Code", code="unit.code")
    unit_name = builder.question("short_text", "Unit Name", code="unit.name")
    builder.step(
        "Qualification and Unit",
        builder.section("Unit Details", unit_code, unit_name),
    )

    tasks = builder.question(
        "grid_table",
        "Tasks",
        rows=[builder.row("Task 1", "Written questions"), builder.row("Task 2", "Project\nReport")],
    )
    methods = builder.question(
        "multi_choice",
        "Submission",
        options=[builder.option("lms", "Learning management system (LMS)"), builder.option("other", "Other")],
    )
    other = builder.question("short_text", "Other description")
    builder.step(
        "Assessment",
        builder.section("Assessment Tasks", tasks, mode="assessment_tasks"),
        builder.section("Submission", methods, other, mode="assessment_submission"),
    )

    applied = builder.question("yes_no", "Applied?")
    builder.step(
        "Reasonable Adjustment",
        builder.section("Reasonable Adjustment", applied, mode="reasonable_adjustment"),
    )

    agree = builder.question("yes_no", "I declare this is my own work")
    student_sig = builder.question("signature", "Student Signature", code="student.signature")
    office = builder.question("short_text", "Received by")
    builder.step(
        "Declarations",
        builder.section("Final Declaration", agree, mode="declarations"),
        builder.section("Signatures", student_sig, mode="declarations"),
        builder.section("Office Use Only", office, mode="declarations"),
    )

    builder.answer(name, text="Alex Citizen")
    builder.answer(sid, text="S1001")
    builder.answer(trainer, text="Jordan Lee")
    builder.answer(unit_code, text="BSBCRT411")
    builder.answer(unit_name, text="Apply critical thinking to work practices")
    builder.answer(methods, json=["other"])
    builder.answer(other, text="Email")
    builder.answer(applied, text="No")
    builder.answer(agree, text="yes")
    builder.answer(student_sig, json={"signature": "data:image/png;base64,AAAA", "date": "2024-03-01"})
    builder.answer(office, text="Admin")

    return builder.snapshot(version=2, unit_code="BSB40120")
