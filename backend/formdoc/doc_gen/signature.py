"""
签名子块 - 声明类分区与合理调整分区共用

取值规则：
- 对象答案：图片取 signature → imageDataUrl，日期取 date → signedAtDate，
  姓名取 name → fullName，缺失时按 code 前缀取 student.fullName / trainer.fullName
- 以 data: 开头的字符串：直接作为图片，姓名按 code 前缀解析
- 无图片时以姓名作为文字签名（斜体下划线），姓名也为空时显示 "-"
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from ..config.profile_loader import DeclarationsProfile
from ..models import AnswerValue, QuestionNode, StructuredValue, TextValue, scalar_text
from .resolver import AnswerResolver


class SignatureView(BaseModel):
    """签名子块视图"""
    label: str = ""
    name_label: str = ""
    name: str = ""
    image: str | None = None
    date: str = ""
    show_name: bool = True
    show_date: bool = True
    date_label: str = "Date"

    @property
    def text_substitute(self) -> str:
        return self.name or "-"


def signer_name_code(code: str | None) -> str:
    """code 以 student 开头取学员姓名，否则取培训师姓名"""
    return "student.fullName" if (code or "").startswith("student") else "trainer.fullName"


def _first_str(data: dict[str, Any], *keys: str) -> str | None:
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def _first_text(data: dict[str, Any], *keys: str) -> str:
    for key in keys:
        if data.get(key) is not None:
            return scalar_text(data[key])
    return ""


def read_signature(
    value: AnswerValue,
    fallback_name: str = "",
) -> tuple[str | None, str, str]:
    """
    解析签名答案

    Returns:
        (图片 data URI 或 None, 姓名, 日期)
    """
    if isinstance(value, StructuredValue) and isinstance(value.data, dict):
        data = value.data
        image = _first_str(data, "signature", "imageDataUrl")
        name = _first_text(data, "name", "fullName") or fallback_name
        return image, name, _first_text(data, "date", "signedAtDate")
    if isinstance(value, TextValue) and value.text.startswith("data:"):
        return value.text, fallback_name, ""
    return None, fallback_name, ""


def build_signature_view(
    node: QuestionNode,
    resolver: AnswerResolver,
    labels: DeclarationsProfile,
) -> SignatureView:
    question = node.question
    fallback_name = resolver.code_text(signer_name_code(question.code))
    image, name, date = read_signature(resolver.value(question.id), fallback_name)
    is_student = (question.code or "").startswith("student")
    return SignatureView(
        label=question.label,
        name_label=labels.student_name_label if is_student else labels.trainer_name_label,
        name=name,
        image=image,
        date=date,
        show_name=question.pdf_meta.get("showNameField") is not False,
        show_date=question.pdf_meta.get("showDateField") is not False,
        date_label=labels.date_label,
    )
