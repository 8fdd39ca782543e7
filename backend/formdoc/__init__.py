"""
表单文档渲染引擎 - 后端核心模块

模块结构：
- config/     运行期配置与文档内容配置（document profile）
- models/     数据模型定义（表单结构/答案/渲染任务/页段）
- loader/     表单快照加载（扁平表 → 有序树）
- doc_gen/    文档生成（答案解析/分页规划/分区布局/封面/装配/PDF后端）
- pipeline/   渲染流水线编排
"""

__version__ = "0.1.0"
