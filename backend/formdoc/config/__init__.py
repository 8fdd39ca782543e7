"""
配置层 - 加载运行期配置与文档内容配置

职责：
- 加载 config/formdoc_runtime.yaml（运行期参数，支持 FORMDOC_ 环境变量覆盖）
- 加载 document profile（机构信息、简介页、各布局固定文案）
- 提供类型安全的配置访问接口
"""

from .profile_loader import DocumentProfile, ProfileLoader, load_profile
from .runtime_config import RuntimeConfig, get_config, reload_config, setup_logging

__all__ = [
    "ProfileLoader",
    "DocumentProfile",
    "load_profile",
    "RuntimeConfig",
    "get_config",
    "reload_config",
    "setup_logging",
]
