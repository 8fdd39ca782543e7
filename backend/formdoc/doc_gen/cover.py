"""
封面组装器 - 表单字段 + code解析值 → 封面视图

职责：
1. 单元代码：unit.code 答案 → 表单 unit_code → 占位文字
2. 单元标题：unit.name / qualification.name 答案 → 表单字段 → 表单名称 → 占位文字
3. 学员姓名/学号：student.fullName / student.id
4. 徽标：表单 header_asset_url，缺失时使用默认徽标；封面图：表单 cover_asset_url

依赖：
- assets: 默认徽标加载（失败不致命）

测试要点：
- test_unit_code_from_answer: 答案优先
- test_unit_code_placeholder: 全部缺失时使用 "Unit Code"
- test_title_falls_back_to_form_name: 标题兜底顺序
- test_default_crest_when_missing: 默认徽标
"""

from __future__ import annotations

from ..config import DocumentProfile, RuntimeConfig, load_profile
from ..interfaces import ICoverComposer
from ..models import CoverPage, FormSnapshot
from .assets import load_default_crest
from .resolver import AnswerResolver


class CoverComposer(ICoverComposer):
    """封面组装器实现"""

    def __init__(
        self,
        profile: DocumentProfile | None = None,
        config: RuntimeConfig | None = None,
    ):
        self.profile = profile or load_profile()
        self.config = config

    def compose(self, snapshot: FormSnapshot, resolver: AnswerResolver) -> CoverPage:
        form = snapshot.form
        placeholders = self.profile.cover

        unit_code = (
            resolver.code_text("unit.code")
            or (form.unit_code or "").strip()
            or placeholders.unit_code_placeholder
        )
        unit_title = (
            resolver.code_text("unit.name", "qualification.name")
            or form.unit_name
            or form.qualification_name
            or form.name
            or placeholders.unit_title_placeholder
        )

        return CoverPage(
            unit_code=unit_code,
            unit_title=unit_title,
            student_name=resolver.code_text("student.fullName"),
            student_id=resolver.code_text("student.id"),
            crest_image=form.header_asset_url or load_default_crest(self.config),
            cover_image=form.cover_asset_url,
            band_title=placeholders.band_title,
        )
