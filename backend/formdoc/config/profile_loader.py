"""
文档内容配置加载器 - 读取 document profile YAML

职责：
- 解析YAML并提供类型安全访问
- 提供机构信息、封面文字、简介页内容、各布局的固定文案
- 缓存加载结果（避免重复解析）

使用方式：
    profile = ProfileLoader.load()
    title = profile.get_group_title("student")
    scale = profile.likert.scale_labels
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

DEFAULT_PROFILE_PATH = Path(__file__).with_name("default_profile.yaml")


class OrganisationProfile(BaseModel):
    """机构信息（页眉地址块）"""
    name: str = ""
    brand_title: str = ""
    brand_subtitle: str = ""
    address_lines: list[str] = Field(default_factory=list)
    email: str = ""
    phone: str = ""


class CoverProfile(BaseModel):
    """封面固定文字"""
    band_title: str = "STUDENT WORKBOOK"
    unit_code_placeholder: str = "Unit Code"
    unit_title_placeholder: str = "Unit Title"


class IntroBlock(BaseModel):
    """简介页内容块"""
    heading: str = ""
    level: int = 3
    paragraphs: list[str] = Field(default_factory=list)
    bullets: list[str] = Field(default_factory=list)


class IntroProfile(BaseModel):
    """简介页"""
    title: str = "Student Pack"
    blocks: list[IntroBlock] = Field(default_factory=list)


class LikertProfile(BaseModel):
    """李克特量表"""
    scale_labels: list[str] = Field(
        default_factory=lambda: [
            "Strongly Disagree",
            "Disagree",
            "Neutral",
            "Agree",
            "Strongly Agree",
        ]
    )
    number_header: str = "No."
    criteria_header: str = "Criteria/Question"


class AppendixMatrix(BaseModel):
    """附录A策略矩阵：rows[i][j] 为第i行第j列的勾选项列表"""
    columns: list[str] = Field(default_factory=list)
    rows: list[list[list[str]]] = Field(default_factory=list)


class ReasonableAdjustmentProfile(BaseModel):
    """合理调整分区文案"""
    heading: str = "Reasonable Adjustment"
    split_marker: str = "In the case that"
    applied_label: str = "Was reasonable adjustment applied to any of these assessment tasks?"
    task_label: str = "If yes, which assessment task was this applied to?"
    description_label: str = "Provide a description of the adjustment applied and explain reasons."
    signature_label: str = "Trainer Signature:"
    date_label: str = "Date:"
    appendix_title: str = "Appendix A – Reasonable Adjustments"
    appendix_task_bar: str = ""
    appendix_guidance_bar: str = "Reasonable Adjustments"
    appendix_guidance: list[str] = Field(default_factory=list)
    appendix_matrices: list[AppendixMatrix] = Field(default_factory=list)
    appendix_strategies_bar: str = ""
    appendix_explanation_bar: str = ""
    appendix_declaration: str = ""


class LearnerEvaluationProfile(BaseModel):
    """学员评价附录"""
    step_title: str = "Learner Evaluation"
    participant_section_title: str = "Participant Information"
    title: str = "Appendix B - Learner Evaluation Form"
    intro: str = ""
    bullets: list[str] = Field(default_factory=list)
    closing: str = ""


class DeclarationsProfile(BaseModel):
    """声明分区文案"""
    office_spanner: str = "Other"
    student_name_label: str = "Student Name"
    trainer_name_label: str = "Trainer/Assessor Name"
    date_label: str = "Date"


class AssessmentProfile(BaseModel):
    """评估任务/提交方式文案"""
    evidence_header: str = "Evidence number"
    method_header: str = "Assessment method/ Type of evidence"
    describe_hint: str = "(Please describe here)"


class DocumentProfile(BaseModel):
    """文档内容配置（profile YAML 的结构化表示）"""
    schema_version: str = "1.0"

    organisation: OrganisationProfile = Field(default_factory=OrganisationProfile)
    cover: CoverProfile = Field(default_factory=CoverProfile)
    intro: IntroProfile = Field(default_factory=IntroProfile)
    group_titles: dict[str, str] = Field(default_factory=dict)
    fallback_group_title: str = "Other"
    likert: LikertProfile = Field(default_factory=LikertProfile)
    assessment: AssessmentProfile = Field(default_factory=AssessmentProfile)
    reasonable_adjustment: ReasonableAdjustmentProfile = Field(
        default_factory=ReasonableAdjustmentProfile
    )
    learner_evaluation: LearnerEvaluationProfile = Field(
        default_factory=LearnerEvaluationProfile
    )
    declarations: DeclarationsProfile = Field(default_factory=DeclarationsProfile)

    # === 便捷访问方法 ===

    def get_group_title(self, code_prefix: str) -> str:
        """code前缀 → 明细表分组标题"""
        return self.group_titles.get(code_prefix, self.fallback_group_title)


class ProfileLoader:
    """profile 加载器（缓存）"""

    @classmethod
    @lru_cache(maxsize=4)
    def load(cls, profile_path: str | Path = DEFAULT_PROFILE_PATH) -> DocumentProfile:
        """加载并缓存 profile"""
        path = Path(profile_path)
        if not path.exists():
            raise FileNotFoundError(f"profile文件不存在: {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        return DocumentProfile(**data)

    @classmethod
    def reload(cls, profile_path: str | Path = DEFAULT_PROFILE_PATH) -> DocumentProfile:
        """强制重新加载（清除缓存）"""
        cls.load.cache_clear()
        return cls.load(profile_path)


# 便捷函数
def load_profile(profile_path: str | Path | None = None) -> DocumentProfile:
    """加载文档内容配置"""
    return ProfileLoader.load(profile_path or DEFAULT_PROFILE_PATH)
