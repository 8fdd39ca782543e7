"""
配置加载单元测试

每个模块完成后必须运行：pytest tests/unit/test_config.py -v
"""

from pathlib import Path

import pytest

from formdoc.config import DocumentProfile, ProfileLoader, RuntimeConfig


class TestProfileLoader:
    """文档内容配置测试"""

    def test_load_default_profile(self, profile: DocumentProfile):
        assert profile.schema_version == "1.0"
        assert profile.cover.unit_code_placeholder == "Unit Code"
        assert profile.cover.unit_title_placeholder == "Unit Title"

    def test_group_titles(self, profile: DocumentProfile):
        assert profile.get_group_title("student") == "Student details"
        assert profile.get_group_title("office") == "Office Use Only"
        assert profile.get_group_title("") == "Other"
        assert profile.get_group_title("misc") == "Other"

    def test_likert_scale(self, profile: DocumentProfile):
        assert profile.likert.scale_labels == [
            "Strongly Disagree",
            "Disagree",
            "Neutral",
            "Agree",
            "Strongly Agree",
        ]

    def test_appendix_matrices(self, profile: DocumentProfile):
        matrices = profile.reasonable_adjustment.appendix_matrices
        assert len(matrices) == 2
        for matrix in matrices:
            assert all(len(row) == len(matrix.columns) for row in matrix.rows)

    def test_intro_has_content(self, profile: DocumentProfile):
        assert profile.intro.title == "Student Pack"
        assert profile.intro.blocks

    def test_missing_profile(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            ProfileLoader.load(tmp_path / "missing.yaml")

    def test_custom_profile(self, tmp_path: Path):
        path = tmp_path / "profile.yaml"
        path.write_text(
            "organisation:\n  name: Test College\ncover:\n  band_title: LEARNER GUIDE\n",
            encoding="utf-8",
        )
        profile = ProfileLoader.reload(path)
        assert profile.organisation.name == "Test College"
        assert profile.cover.band_title == "LEARNER GUIDE"
        # 未配置的部分使用默认值
        assert profile.likert.number_header == "No."


class TestRuntimeConfig:
    """运行期配置测试"""

    def test_default_config(self):
        config = RuntimeConfig()
        assert config.pdf_backend.engine == "playwright"
        assert config.page_layout.paper_format == "A4"
        assert config.profile_path is None

    def test_margins(self):
        layout = RuntimeConfig().page_layout
        assert layout.body_margins() == {
            "top": "190px",
            "right": "15mm",
            "bottom": "70px",
            "left": "15mm",
        }
        assert set(layout.cover_margins().values()) == {"0"}

    def test_from_yaml_flattens_defaults(self, tmp_path: Path):
        path = tmp_path / "formdoc_runtime.yaml"
        path.write_text(
            "runtime_options:\n"
            "  pdf_backend:\n"
            "    timeout_ms:\n"
            "      default: 5000\n"
            "      desc: 渲染超时\n"
            "  assets:\n"
            "    assets_dir: static\n"
            "profile_path: profile.yaml\n",
            encoding="utf-8",
        )
        config = RuntimeConfig.from_yaml(path)
        assert config.pdf_backend.timeout_ms == 5000
        assert config.assets.assets_dir == (tmp_path / "static").resolve()
        assert config.profile_path == (tmp_path / "profile.yaml").resolve()

    def test_from_missing_yaml_uses_defaults(self, tmp_path: Path):
        config = RuntimeConfig.from_yaml(tmp_path / "none.yaml")
        assert config.pdf_backend.timeout_ms == 60000

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("FORMDOC_PDF_BACKEND__BROWSER", "firefox")
        assert RuntimeConfig().pdf_backend.browser == "firefox"
