"""
模块接口契约 - 定义各模块的抽象接口

设计原则：
1. 模块间通过接口通信，不直接依赖具体实现
2. 每个接口定义清晰的输入输出类型
3. 便于单元测试和mock替换（渲染后端在测试中替换为空白页后端）

使用方式：
    from formdoc.interfaces import IRenderBackend

    class MyBackend(IRenderBackend):
        def render(self, html: str, options: PassOptions) -> PageRange:
            ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import (
        CoverPage,
        DocumentPlan,
        FormSnapshot,
        PageRange,
        PassOptions,
    )
    from .doc_gen.resolver import AnswerResolver


# ============================================================================
# 数据加载接口
# ============================================================================

class ISchemaLoader(ABC):
    """表单结构加载器接口 - 组装 Form→Step→Section→Question 树与答案集"""

    @abstractmethod
    def load(self, instance_id: int) -> FormSnapshot:
        """
        加载单个表单实例的结构快照与答案快照

        Args:
            instance_id: 表单实例ID

        Returns:
            表单快照（树已按sort_order排序）

        Raises:
            MissingSchemaError: 实例或其所属表单不存在
        """
        ...


# ============================================================================
# 文档生成接口
# ============================================================================

class IRenderBackend(ABC):
    """渲染后端接口 - 把完整的页面描述（HTML）物化为PDF页段"""

    def open(self) -> None:
        """准备后端资源（可选）"""

    def close(self) -> None:
        """释放后端资源（可选）"""

    def __enter__(self) -> IRenderBackend:
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @abstractmethod
    def render(self, html: str, options: PassOptions) -> PageRange:
        """
        执行一次渲染（一次渲染只能使用统一的页眉页脚模板）

        Args:
            html: 完整HTML文档
            options: 本次渲染的纸张/边距/页眉页脚参数

        Returns:
            渲染得到的页段

        Raises:
            BackendRenderError: 渲染失败
        """
        ...


class ICoverComposer(ABC):
    """封面组装器接口"""

    @abstractmethod
    def compose(self, snapshot: FormSnapshot, resolver: AnswerResolver) -> CoverPage:
        """根据表单字段与代码解析值生成封面视图"""
        ...


class IDocumentAssembler(ABC):
    """文档装配器接口"""

    @abstractmethod
    def assemble(self, plan: DocumentPlan) -> bytes:
        """
        装配最终文档

        流程：
        1. 封面单独渲染（无页眉页脚、无页码）
        2. 简介页+正文页渲染（带页眉页脚，页码从1开始）
        3. 两个页段按顺序逐页合并

        Returns:
            最终PDF字节
        """
        ...


# ============================================================================
# 异常定义
# ============================================================================

class FormDocError(Exception):
    """基础异常"""
    pass


class MissingSchemaError(FormDocError):
    """表单实例或表单不存在（对外表现为 not found）"""
    pass


class BackendRenderError(FormDocError):
    """渲染后端失败（请求级致命错误）"""
    pass


class AssetLoadError(FormDocError):
    """资源加载失败（非致命，调用方记录后忽略）"""
    pass


class MergeError(FormDocError):
    """页段合并失败"""
    pass
