"""
默认资源加载 - 页眉徽标/文字logo，base64内联为 data URI

职责：
1. 按候选顺序查找徽标（logo-crest.png → logo.jpeg → logo.jpg → logo.png）
2. 读取并编码为 data URI
3. 进程级缓存（只缓存成功结果，首次成功后只读）
4. 读取失败不致命：记录警告并返回 None

测试要点：
- test_crest_candidate_order: 候选顺序
- test_missing_assets_return_none: 无资源时返回 None
- test_successful_load_is_cached: 成功结果缓存
- test_unreadable_asset_logged: 读取失败不抛异常，记录警告
"""

from __future__ import annotations

import base64
import logging
import threading
from pathlib import Path

from ..config import RuntimeConfig, get_config
from ..interfaces import AssetLoadError

logger = logging.getLogger(__name__)

MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
}

_cache: dict[Path, str] = {}
_cache_lock = threading.Lock()


def encode_data_uri(path: Path) -> str:
    """读取文件并编码为 data URI"""
    mime = MIME_TYPES.get(path.suffix.lower(), "application/octet-stream")
    try:
        payload = path.read_bytes()
    except OSError as e:
        raise AssetLoadError(f"资源读取失败: {path}: {e}") from e
    return f"data:{mime};base64,{base64.b64encode(payload).decode('ascii')}"


def _load_first(candidates: list[Path]) -> str | None:
    for path in candidates:
        with _cache_lock:
            cached = _cache.get(path)
        if cached is not None:
            return cached
        if not path.is_file():
            continue
        try:
            uri = encode_data_uri(path)
        except AssetLoadError as e:
            logger.warning(f"默认资源加载失败，忽略: {e}")
            continue
        with _cache_lock:
            _cache[path] = uri
        return uri
    return None


def load_default_crest(config: RuntimeConfig | None = None) -> str | None:
    """加载默认徽标（页眉/封面）"""
    cfg = config or get_config()
    assets_dir = cfg.assets.assets_dir
    return _load_first([assets_dir / name for name in cfg.assets.crest_candidates])


def load_text_logo(config: RuntimeConfig | None = None) -> str | None:
    """加载文字logo（页眉中部）"""
    cfg = config or get_config()
    return _load_first([cfg.assets.assets_dir / cfg.assets.text_logo])


def clear_asset_cache() -> None:
    with _cache_lock:
        _cache.clear()
