"""
默认资源加载单元测试
"""

import base64

import pytest

from formdoc.doc_gen.assets import (
    clear_asset_cache,
    encode_data_uri,
    load_default_crest,
    load_text_logo,
)
from formdoc.interfaces import AssetLoadError


@pytest.fixture
def assets_dir(runtime_config):
    path = runtime_config.assets.assets_dir
    path.mkdir(parents=True)
    clear_asset_cache()
    yield path
    clear_asset_cache()


class TestAssets:
    """徽标加载测试"""

    def test_encode_data_uri(self, tmp_path):
        path = tmp_path / "crest.jpg"
        path.write_bytes(b"jpeg-bytes")
        uri = encode_data_uri(path)
        assert uri == "data:image/jpeg;base64," + base64.b64encode(b"jpeg-bytes").decode()

    def test_encode_missing_file_raises(self, tmp_path):
        with pytest.raises(AssetLoadError):
            encode_data_uri(tmp_path / "none.png")

    def test_crest_candidate_order(self, assets_dir, runtime_config):
        (assets_dir / "logo.png").write_bytes(b"png")
        (assets_dir / "logo-crest.png").write_bytes(b"crest")
        uri = load_default_crest(runtime_config)
        assert uri.endswith(base64.b64encode(b"crest").decode())

    def test_missing_assets_return_none(self, assets_dir, runtime_config):
        assert load_default_crest(runtime_config) is None
        assert load_text_logo(runtime_config) is None

    def test_successful_load_is_cached(self, assets_dir, runtime_config):
        path = assets_dir / "logo-text.png"
        path.write_bytes(b"first")
        first = load_text_logo(runtime_config)
        path.write_bytes(b"second")
        assert load_text_logo(runtime_config) == first

    def test_non_file_candidate_skipped(self, assets_dir, runtime_config):
        # 与候选文件同名的目录直接跳过
        (assets_dir / "logo-crest.png").mkdir()
        (assets_dir / "logo.jpeg").write_bytes(b"jpeg")
        uri = load_default_crest(runtime_config)
        assert uri.startswith("data:image/jpeg;base64,")

    def test_unreadable_asset_logged(self, assets_dir, runtime_config, monkeypatch, caplog):
        (assets_dir / "logo-crest.png").write_bytes(b"crest")

        def broken(path):
            raise AssetLoadError(f"资源读取失败: {path}")

        monkeypatch.setattr("formdoc.doc_gen.assets.encode_data_uri", broken)
        with caplog.at_level("WARNING", logger="formdoc.doc_gen.assets"):
            assert load_default_crest(runtime_config) is None
        assert "默认资源加载失败" in caplog.text
