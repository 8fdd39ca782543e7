"""
运行期配置 - 读取 config/formdoc_runtime.yaml

职责：
- 加载渲染后端/纸张边距/资源路径/日志等运行参数
- 提供环境变量覆盖机制（前缀 FORMDOC_，嵌套分隔符 __）
- 类型安全的配置访问
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class PDFBackendConfig(BaseModel):
    """PDF渲染后端配置"""

    engine: str = "playwright"
    browser: str = "chromium"
    wait_until: str = "networkidle"
    timeout_ms: int = 60000


class PageLayoutConfig(BaseModel):
    """纸张与边距（正文边距为页眉页脚预留空间）"""

    paper_format: str = "A4"
    body_margin_top: str = "190px"
    body_margin_right: str = "15mm"
    body_margin_bottom: str = "70px"
    body_margin_left: str = "15mm"
    cover_margin: str = "0"

    def body_margins(self) -> dict[str, str]:
        return {
            "top": self.body_margin_top,
            "right": self.body_margin_right,
            "bottom": self.body_margin_bottom,
            "left": self.body_margin_left,
        }

    def cover_margins(self) -> dict[str, str]:
        return {side: self.cover_margin for side in ("top", "right", "bottom", "left")}


class AssetConfig(BaseModel):
    """默认资源（页眉logo）"""

    assets_dir: Path = Path("public")
    crest_candidates: list[str] = Field(
        default_factory=lambda: ["logo-crest.png", "logo.jpeg", "logo.jpg", "logo.png"]
    )
    text_logo: str = "logo-text.png"


class LoggingConfig(BaseModel):
    """日志配置"""

    log_level: str = "INFO"
    log_format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class RuntimeConfig(BaseSettings):
    """运行期配置（支持环境变量覆盖）"""

    # 文档内容配置（为空时使用内置默认配置）
    profile_path: Path | None = None

    # 各子配置
    pdf_backend: PDFBackendConfig = Field(default_factory=PDFBackendConfig)
    page_layout: PageLayoutConfig = Field(default_factory=PageLayoutConfig)
    assets: AssetConfig = Field(default_factory=AssetConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "env_prefix": "FORMDOC_",
        "env_nested_delimiter": "__",
        "arbitrary_types_allowed": True,
    }

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> RuntimeConfig:
        """从YAML文件加载配置"""
        path = Path(yaml_path)
        if not path.exists():
            return cls()

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        runtime_opts = data.get("runtime_options", {})

        config = cls(
            pdf_backend=PDFBackendConfig(**cls._extract(runtime_opts, "pdf_backend")),
            page_layout=PageLayoutConfig(**cls._extract(runtime_opts, "page_layout")),
            assets=AssetConfig(**cls._extract(runtime_opts, "assets")),
            logging=LoggingConfig(**cls._extract(runtime_opts, "logging")),
        )
        if data.get("profile_path"):
            config.profile_path = Path(data["profile_path"])

        config._resolve_paths(base_dir=path.parent)
        return config

    @staticmethod
    def _extract(data: dict[str, Any], key: str) -> dict[str, Any]:
        """提取并展平配置"""
        section = data.get(key, {}) or {}
        result = {}
        for k, v in section.items():
            if isinstance(v, dict) and "default" in v:
                result[k] = v["default"]
            elif not isinstance(v, dict):
                result[k] = v
        return result

    def _resolve_paths(self, base_dir: Path) -> None:
        """解析相对路径配置为绝对路径（基于配置文件所在目录）"""
        if not self.assets.assets_dir.is_absolute():
            self.assets.assets_dir = (base_dir / self.assets.assets_dir).resolve()
        if self.profile_path and not self.profile_path.is_absolute():
            self.profile_path = (base_dir / self.profile_path).resolve()


def setup_logging(config: RuntimeConfig | None = None) -> None:
    """按配置初始化根日志"""
    cfg = config or get_config()
    logging.basicConfig(
        level=getattr(logging, cfg.logging.log_level.upper(), logging.INFO),
        format=cfg.logging.log_format,
    )


# 全局配置实例
_config: RuntimeConfig | None = None

DEFAULT_RUNTIME_PATH = Path("config/formdoc_runtime.yaml")


def get_config() -> RuntimeConfig:
    """获取全局配置（惰性加载）"""
    global _config
    if _config is None:
        _config = RuntimeConfig.from_yaml(DEFAULT_RUNTIME_PATH)
    return _config


def reload_config(yaml_path: str | Path | None = None) -> RuntimeConfig:
    """重新加载配置"""
    global _config
    _config = RuntimeConfig.from_yaml(yaml_path or DEFAULT_RUNTIME_PATH)
    return _config
