"""
分页规划器 - 步骤分组与分区标题编号

职责：
1. 按标题启发式把相邻步骤合并到同一物理页（单步前瞻、贪心）
2. 计算全局分区标题编号（编号计数器作为累加值显式传递）

编号规则：
- normal / likert_table / grid_table / assessment_tasks / assessment_submission：
  显示 "N. 标题"，计数 +1
- reasonable_adjustment：不显示编号，计数 +1
- declarations：final declaration / office 显示编号并 +1；signature / 其他不显示、不计数
- 学员评价步骤内的分区：不显示、不计数

测试要点：
- test_merge_student_trainer_with_qualification: 合并规则
- test_merge_only_forward: 顺序颠倒不合并
- test_heading_sequence: 编号序列
- test_signature_declarations_do_not_consume: 签名声明不计数
"""

from __future__ import annotations

from typing import Iterable

from ..models import DeclarationsVariant, PageGroup, RenderMode, Section, StepNode

# 显示编号并计数的模式
NUMBERED_MODES = frozenset(
    {
        RenderMode.NORMAL,
        RenderMode.LIKERT_TABLE,
        RenderMode.GRID_TABLE,
        RenderMode.ASSESSMENT_TASKS,
        RenderMode.ASSESSMENT_SUBMISSION,
    }
)

NUMBERED_DECLARATIONS = frozenset(
    {DeclarationsVariant.FINAL_DECLARATION, DeclarationsVariant.OFFICE_USE}
)


def is_student_trainer_title(title: str | None) -> bool:
    lowered = (title or "").lower()
    return "student" in lowered and "trainer" in lowered


def is_qualification_title(title: str | None) -> bool:
    return "qualification" in (title or "").lower()


def plan_page_groups(steps: list[StepNode]) -> list[PageGroup]:
    """相邻的 "学员&培训师" + "资质" 步骤合并为一页，其余各占一页"""
    groups: list[PageGroup] = []
    i = 0
    while i < len(steps):
        current = steps[i]
        following = steps[i + 1] if i + 1 < len(steps) else None
        if (
            following is not None
            and is_student_trainer_title(current.step.title)
            and is_qualification_title(following.step.title)
        ):
            groups.append(PageGroup(steps=[current, following]))
            i += 2
        else:
            groups.append(PageGroup(steps=[current]))
            i += 1
    return groups


def heading_for(
    section: Section,
    counter: int,
    numbered_step: bool = True,
) -> tuple[int | None, int]:
    """
    计算单个分区的标题编号

    Args:
        section: 分区
        counter: 当前计数（下一个可用编号）
        numbered_step: 所在步骤是否参与编号（学员评价步骤为 False）

    Returns:
        (显示编号或None, 新计数)
    """
    if not numbered_step:
        return None, counter

    mode = section.render_mode
    if mode in NUMBERED_MODES:
        return counter, counter + 1
    if mode is RenderMode.REASONABLE_ADJUSTMENT:
        return None, counter + 1
    if mode is RenderMode.DECLARATIONS:
        if section.effective_declarations_variant in NUMBERED_DECLARATIONS:
            return counter, counter + 1
        return None, counter
    return counter, counter + 1


def assign_heading_numbers(
    sections: Iterable[tuple[Section, bool]],
    start: int = 1,
) -> tuple[list[int | None], int]:
    """按文档顺序折叠计算全部编号，返回 (编号列表, 最终计数)"""
    numbers: list[int | None] = []
    counter = start
    for section, numbered_step in sections:
        number, counter = heading_for(section, counter, numbered_step)
        numbers.append(number)
    return numbers, counter
