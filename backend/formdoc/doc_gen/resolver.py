"""
答案解析器 - (题目, 行) 复合键与语义 code 两级查找

职责：
1. by_key: (question_id, row_id|None) → AnswerValue（text > number > json）
2. by_code: code → 题目级答案（行级答案不参与）
3. 表单级兜底：qualification.code/name、unit.code/name
4. 任何查找缺失都返回 EMPTY，不抛异常

测试要点：
- test_by_key_priority: 优先级
- test_row_answers_keyed_separately: 行级答案不参与code解析
- test_form_fallbacks: 表单字段兜底
- test_missing_answer_is_empty: 缺失答案为空白
"""

from __future__ import annotations

from typing import Iterable

from ..models import EMPTY, Answer, AnswerValue, Form, FormSnapshot, QuestionNode, TextValue

# code → 表单字段（只在没有答案时补充）
FORM_CODE_FALLBACKS: dict[str, str] = {
    "qualification.code": "qualification_code",
    "qualification.name": "qualification_name",
    "unit.code": "unit_code",
    "unit.name": "unit_name",
}


class AnswerResolver:
    """答案解析器（构建后只读）"""

    def __init__(
        self,
        answers: Iterable[Answer],
        questions: Iterable[QuestionNode] = (),
        form: Form | None = None,
    ):
        self.by_key: dict[tuple[int, int | None], AnswerValue] = {}
        for answer in answers:
            value = answer.to_value()
            if not value.is_empty:
                self.by_key[answer.key] = value

        self.by_code: dict[str, AnswerValue] = {}
        for node in questions:
            code = node.question.code
            if not code:
                continue
            value = self.value(node.question.id)
            if not value.is_empty:
                self.by_code[code] = value

        if form is not None:
            self._apply_form_fallbacks(form)

    @classmethod
    def from_snapshot(cls, snapshot: FormSnapshot) -> AnswerResolver:
        return cls(snapshot.answers, snapshot.iter_questions(), snapshot.form)

    def _apply_form_fallbacks(self, form: Form) -> None:
        for code, field in FORM_CODE_FALLBACKS.items():
            fallback = getattr(form, field, None)
            if code not in self.by_code and fallback:
                self.by_code[code] = TextValue(fallback)

    # === 查找 ===

    def value(self, question_id: int, row_id: int | None = None) -> AnswerValue:
        return self.by_key.get((question_id, row_id), EMPTY)

    def text(self, question_id: int, row_id: int | None = None) -> str:
        return self.value(question_id, row_id).as_text()

    def code_value(self, code: str) -> AnswerValue:
        return self.by_code.get(code, EMPTY)

    def code_text(self, *codes: str) -> str:
        """按顺序返回第一个非空的code文本"""
        for code in codes:
            text = self.code_value(code).as_text()
            if text:
                return text
        return ""

    def node_value(self, node: QuestionNode) -> AnswerValue:
        """普通布局的取值：有行时取第一行，否则取题目级"""
        row_id = node.rows[0].id if node.rows else None
        return self.value(node.question.id, row_id)
