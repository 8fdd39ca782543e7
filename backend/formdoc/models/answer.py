"""
答案模型 - 存储记录与标记联合值

存储层每条答案只有 value_text / value_number / value_json 之一有值；
引擎内部统一转换为 TextValue | NumberValue | StructuredValue | EmptyValue，
调用方不再逐处判断优先级。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from pydantic import BaseModel


def format_number(number: int | float) -> str:
    """整数值的浮点数不带小数部分（3.0 → "3"）"""
    if isinstance(number, bool):
        return "true" if number else "false"
    if isinstance(number, float) and number.is_integer():
        return str(int(number))
    return str(number)


def scalar_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    if isinstance(value, str):
        return value
    return ""


@dataclass(frozen=True)
class TextValue:
    """文本答案"""
    text: str

    @property
    def is_empty(self) -> bool:
        return False

    def as_text(self) -> str:
        return self.text

    def as_list(self) -> list[str]:
        return []

    def as_dict(self) -> dict[str, Any]:
        return {}


@dataclass(frozen=True)
class NumberValue:
    """数值答案"""
    number: int | float

    @property
    def is_empty(self) -> bool:
        return False

    def as_text(self) -> str:
        return format_number(self.number)

    def as_list(self) -> list[str]:
        return []

    def as_dict(self) -> dict[str, Any]:
        return {}


@dataclass(frozen=True)
class StructuredValue:
    """JSON答案（数组/对象/标量）"""
    data: Any

    @property
    def is_empty(self) -> bool:
        return False

    def as_text(self) -> str:
        if isinstance(self.data, list):
            return ", ".join(scalar_text(item) for item in self.data if item is not None)
        if isinstance(self.data, dict):
            # 对象只在专用布局中展开（签名/表格单元）
            return ""
        return scalar_text(self.data)

    def as_list(self) -> list[str]:
        if isinstance(self.data, list):
            return [scalar_text(item) for item in self.data if item is not None]
        return []

    def as_dict(self) -> dict[str, Any]:
        return self.data if isinstance(self.data, dict) else {}


@dataclass(frozen=True)
class EmptyValue:
    """未作答（任何布局中都渲染为空白）"""

    @property
    def is_empty(self) -> bool:
        return True

    def as_text(self) -> str:
        return ""

    def as_list(self) -> list[str]:
        return []

    def as_dict(self) -> dict[str, Any]:
        return {}


AnswerValue = Union[TextValue, NumberValue, StructuredValue, EmptyValue]

EMPTY = EmptyValue()


class Answer(BaseModel):
    """答案记录（存储层形态）"""
    question_id: int
    row_id: int | None = None
    value_text: str | None = None
    value_number: int | float | None = None
    value_json: Any = None

    @property
    def key(self) -> tuple[int, int | None]:
        return (self.question_id, self.row_id)

    def to_value(self) -> AnswerValue:
        """优先级：text > number > json"""
        if self.value_text is not None:
            return TextValue(self.value_text)
        if self.value_number is not None:
            return NumberValue(self.value_number)
        if self.value_json is not None:
            return StructuredValue(self.value_json)
        return EMPTY
