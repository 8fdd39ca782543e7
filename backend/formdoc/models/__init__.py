"""
数据模型层 - 定义系统核心数据结构

所有模块通过这些模型交互，实现解耦：
- Form/Step/Section/Question: 表单结构（只读快照）
- Answer/AnswerValue: 答案记录与标记联合值
- FormSnapshot: 一次渲染的输入
- PageGroup/SectionFragment/CoverPage/PageRange: 文档生成中间结构
- RenderJob: 渲染任务状态
"""

from .answer import (
    EMPTY,
    Answer,
    AnswerValue,
    EmptyValue,
    NumberValue,
    StructuredValue,
    TextValue,
    format_number,
    scalar_text,
)
from .document import (
    CoverPage,
    DocumentPlan,
    PageGroup,
    PageRange,
    PassOptions,
    RenderedPage,
    RunningFooter,
    RunningHeader,
    SectionFragment,
)
from .job import JobStatus, RenderJob, RenderProgress, RenderResult
from .schema import (
    DeclarationsVariant,
    Form,
    Question,
    QuestionNode,
    QuestionOption,
    QuestionRow,
    QuestionType,
    RenderMode,
    Section,
    SectionNode,
    Step,
    StepNode,
)
from .snapshot import FormSnapshot

__all__ = [
    "Answer",
    "AnswerValue",
    "TextValue",
    "NumberValue",
    "StructuredValue",
    "EmptyValue",
    "EMPTY",
    "format_number",
    "scalar_text",
    "Form",
    "Step",
    "Section",
    "Question",
    "QuestionOption",
    "QuestionRow",
    "QuestionType",
    "RenderMode",
    "DeclarationsVariant",
    "QuestionNode",
    "SectionNode",
    "StepNode",
    "FormSnapshot",
    "PageGroup",
    "SectionFragment",
    "RenderedPage",
    "CoverPage",
    "RunningHeader",
    "RunningFooter",
    "PassOptions",
    "PageRange",
    "DocumentPlan",
    "RenderJob",
    "RenderProgress",
    "RenderResult",
    "JobStatus",
]
