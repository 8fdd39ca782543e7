"""
快照加载器 - 从持久层导出的平铺表组装表单树与答案集

职责：
1. 读取 instances/forms/steps/sections/questions/options/rows/answers 八张表
2. 按 sort_order（相同时按 id）组装有序树
3. 过滤当前实例的答案
4. 实例或表单不存在时抛出 MissingSchemaError

依赖：
- PyYAML: YAML快照文件
- pydantic: 行数据校验

测试要点：
- test_load_orders_by_sort_order: 各层按 sort_order 排序
- test_missing_instance: 实例不存在
- test_missing_form: 表单不存在
- test_answers_filtered_by_instance: 只保留当前实例答案
- test_unbound_answers_ignored_with_many_instances: 多实例时忽略未标注实例的答案
- test_from_file_yaml_and_json: 文件格式
"""

from __future__ import annotations

import json
import logging
from collections import defaultdict
from pathlib import Path
from typing import Any, Iterable

import yaml

from ..interfaces import ISchemaLoader, MissingSchemaError
from ..models import (
    Answer,
    Form,
    FormSnapshot,
    Question,
    QuestionNode,
    QuestionOption,
    QuestionRow,
    Section,
    SectionNode,
    Step,
    StepNode,
)

logger = logging.getLogger(__name__)

TABLE_NAMES = (
    "instances",
    "forms",
    "steps",
    "sections",
    "questions",
    "options",
    "rows",
    "answers",
)


def _ordered(records: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """sort_order 升序，相同时按 id"""
    return sorted(records, key=lambda r: (r.get("sort_order") or 0, r.get("id") or 0))


def _group_by(records: Iterable[dict[str, Any]], field: str) -> dict[Any, list[dict[str, Any]]]:
    grouped: dict[Any, list[dict[str, Any]]] = defaultdict(list)
    for record in records:
        grouped[record.get(field)].append(record)
    return grouped


class SnapshotLoader(ISchemaLoader):
    """平铺表快照加载器"""

    def __init__(self, tables: dict[str, list[dict[str, Any]]]):
        self.tables = {name: list(tables.get(name) or []) for name in TABLE_NAMES}

    @classmethod
    def from_file(cls, path: str | Path) -> SnapshotLoader:
        """从JSON/YAML文件加载（按扩展名区分）"""
        path = Path(path)
        if not path.exists():
            raise MissingSchemaError(f"快照文件不存在: {path}")

        with open(path, encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f) or {}

        return cls(data)

    def instance_ids(self) -> list[int]:
        return [record["id"] for record in self.tables["instances"]]

    def load(self, instance_id: int) -> FormSnapshot:
        """加载单个实例的结构快照与答案快照"""
        instance = self._find("instances", instance_id)
        if instance is None:
            raise MissingSchemaError(f"表单实例不存在: {instance_id}")

        form_id = instance.get("form_id")
        form_record = self._find("forms", form_id)
        if form_record is None:
            raise MissingSchemaError(f"表单不存在: instance={instance_id}, form={form_id}")

        form = Form(**form_record)
        steps = self._build_steps(form.id)
        # 未标注 instance_id 的答案只在单实例快照中归属该实例
        accept_unbound = len(self.tables["instances"]) == 1
        answers = [
            Answer(**record)
            for record in self.tables["answers"]
            if record.get("instance_id") == instance_id
            or (accept_unbound and record.get("instance_id") is None)
        ]

        logger.info(
            f"加载快照: instance={instance_id}, form={form.id}, "
            f"steps={len(steps)}, answers={len(answers)}"
        )
        return FormSnapshot(instance_id=instance_id, form=form, steps=steps, answers=answers)

    # =========================================================================
    # 组装
    # =========================================================================

    def _find(self, table: str, record_id: Any) -> dict[str, Any] | None:
        if record_id is None:
            return None
        for record in self.tables[table]:
            if record.get("id") == record_id:
                return record
        return None

    def _build_steps(self, form_id: int) -> list[StepNode]:
        sections_by_step = _group_by(self.tables["sections"], "step_id")
        questions_by_section = _group_by(self.tables["questions"], "section_id")
        options_by_question = _group_by(self.tables["options"], "question_id")
        rows_by_question = _group_by(self.tables["rows"], "question_id")

        steps = [r for r in self.tables["steps"] if r.get("form_id") == form_id]
        nodes = []
        for step_record in _ordered(steps):
            step = Step(**step_record)
            sections = []
            for section_record in _ordered(sections_by_step.get(step.id, [])):
                section = Section(**section_record)
                questions = [
                    QuestionNode(
                        question=Question(**q),
                        options=[
                            QuestionOption(**o)
                            for o in _ordered(options_by_question.get(q["id"], []))
                        ],
                        rows=[
                            QuestionRow(**r)
                            for r in _ordered(rows_by_question.get(q["id"], []))
                        ],
                    )
                    for q in _ordered(questions_by_section.get(section.id, []))
                ]
                sections.append(SectionNode(section=section, questions=questions))
            nodes.append(StepNode(step=step, sections=sections))
        return nodes
