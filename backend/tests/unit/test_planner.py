"""
分页规划与标题编号单元测试
"""

import pytest

from formdoc.doc_gen import assign_heading_numbers, heading_for, plan_page_groups
from formdoc.models import DeclarationsVariant, Section


def _grouped_positions(builder, titles):
    steps = [builder.step(title) for title in titles]
    ids = {node.step.id: i + 1 for i, node in enumerate(steps)}
    return [[ids[s.step.id] for s in group.steps] for group in plan_page_groups(steps)]


def _section(title, mode="normal", variant=None):
    return Section(id=1, title=title, pdf_render_mode=mode, declarations_variant=variant)


class TestPageGrouping:
    """步骤合并规则测试"""

    def test_merge_student_trainer_with_qualification(self, builder):
        titles = ["Student & Trainer Details", "Qualification and Unit", "Other Step"]
        assert _grouped_positions(builder, titles) == [[1, 2], [3]]

    def test_merge_later_pair(self, builder):
        titles = ["Other", "Student and Trainer", "Qualification"]
        assert _grouped_positions(builder, titles) == [[1], [2, 3]]

    def test_merge_only_forward(self, builder):
        """顺序颠倒不合并"""
        titles = ["Qualification", "Student and Trainer"]
        assert _grouped_positions(builder, titles) == [[1], [2]]

    def test_requires_both_words(self, builder):
        titles = ["Student Details", "Qualification"]
        assert _grouped_positions(builder, titles) == [[1], [2]]

    def test_greedy_earliest_merge(self, builder):
        titles = ["Student Trainer", "Student Trainer Qualification", "Qualification"]
        assert _grouped_positions(builder, titles) == [[1, 2], [3]]

    def test_case_insensitive(self, builder):
        titles = ["STUDENT / TRAINER", "qualification details"]
        assert _grouped_positions(builder, titles) == [[1, 2]]

    def test_empty(self):
        assert plan_page_groups([]) == []


class TestHeadingNumbers:
    """标题编号测试"""

    def test_heading_sequence(self):
        sections = [(_section(t), True) for t in "ABC"]
        numbers, counter = assign_heading_numbers(sections)
        assert numbers == [1, 2, 3]
        assert counter == 4

    def test_signature_declarations_do_not_consume(self):
        sections = [
            (_section("A"), True),
            (_section("B"), True),
            (_section("Signatures", "declarations"), True),
            (_section("C"), True),
        ]
        numbers, _ = assign_heading_numbers(sections)
        assert numbers == [1, 2, None, 3]

    @pytest.mark.parametrize(
        "title, variant, expected",
        [
            ("Final Declaration", None, (5, 6)),
            ("Office Use Only", None, (5, 6)),
            ("Signatures", None, (None, 5)),
            ("Acknowledgement", None, (None, 5)),
            ("Anything", DeclarationsVariant.OFFICE_USE, (5, 6)),
        ],
    )
    def test_declaration_variants(self, title, variant, expected):
        assert heading_for(_section(title, "declarations", variant), 5) == expected

    def test_reasonable_adjustment_consumes_without_number(self):
        sections = [
            (_section("A"), True),
            (_section("RA", "reasonable_adjustment"), True),
            (_section("B"), True),
        ]
        numbers, _ = assign_heading_numbers(sections)
        assert numbers == [1, None, 3]

    def test_unnumbered_step(self):
        """学员评价步骤不显示、不计数"""
        assert heading_for(_section("Participant Information"), 7, numbered_step=False) == (None, 7)

    @pytest.mark.parametrize(
        "mode",
        ["normal", "likert_table", "grid_table", "assessment_tasks", "assessment_submission", "bogus"],
    )
    def test_numbered_modes(self, mode):
        assert heading_for(_section("X", mode), 1) == (1, 2)
