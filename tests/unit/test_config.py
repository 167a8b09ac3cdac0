"""core.config 单元测试：YAML 加载、缓存、环境变量路径与输入路径规范化。"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from core import config as cfg
from core.config import loader, paths
from models.schemas import AppConfigSchema


@pytest.fixture(autouse=True)
def _clear_cache():
    cfg.reset_app_config()
    yield
    cfg.reset_app_config()


class TestLoader:
    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        assert loader.load_app_config_yaml(tmp_path / "none.yaml") == AppConfigSchema()

    def test_sections_loaded(self, tmp_path: Path) -> None:
        p = tmp_path / "app_config.yaml"
        p.write_text(
            "extraction:\n  usage_fallback_column: 7\n  store_labels: [店舗, 店名]\n"
            "ingest:\n  usage_file_pattern: ZAIKO\n",
            encoding="utf-8",
        )
        loaded = loader.load_app_config_yaml(p)
        assert loaded.extraction.usage_fallback_column == 7
        assert loaded.extraction.store_labels == ("店舗", "店名")
        assert loaded.ingest.usage_file_pattern == "zaiko"
        assert loaded.report.filename_prefix == "deadstock_analysis"

    def test_broken_yaml_uses_defaults(self, tmp_path: Path) -> None:
        p = tmp_path / "app_config.yaml"
        p.write_text("extraction: [unclosed\n", encoding="utf-8")
        assert loader.load_app_config_yaml(p) == AppConfigSchema()

    def test_invalid_values_use_defaults(self, tmp_path: Path) -> None:
        p = tmp_path / "app_config.yaml"
        p.write_text("ingest:\n  max_concurrency: 0\n", encoding="utf-8")
        assert loader.load_app_config_yaml(p).ingest.max_concurrency == 8

    def test_non_mapping_root_uses_defaults(self, tmp_path: Path) -> None:
        p = tmp_path / "app_config.yaml"
        p.write_text("- a\n- b\n", encoding="utf-8")
        assert loader.load_app_config_yaml(p) == AppConfigSchema()

    def test_shipped_config_is_valid(self) -> None:
        shipped = Path(__file__).resolve().parents[2] / "config" / loader.APP_CONFIG_FILENAME
        assert shipped.exists()
        assert loader.load_app_config_yaml(shipped) == AppConfigSchema()


class TestCache:
    def test_load_is_cached(self, tmp_path: Path) -> None:
        p = tmp_path / "app_config.yaml"
        p.write_text("report:\n  filename_prefix: first\n", encoding="utf-8")
        assert cfg.load_app_config(p).report.filename_prefix == "first"
        p.write_text("report:\n  filename_prefix: second\n", encoding="utf-8")
        assert cfg.load_app_config(p).report.filename_prefix == "first"
        assert cfg.get_report_config().filename_prefix == "first"
        assert cfg.load_app_config(p, reload=True).report.filename_prefix == "second"

    def test_get_loads_on_demand(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("DEADSTOCK_MATCHING_CONFIG_DIR", str(tmp_path))
        (tmp_path / "app_config.yaml").write_text("extraction:\n  store_scan_rows: 2\n", encoding="utf-8")
        assert cfg.get_extraction_config().store_scan_rows == 2
        assert cfg.get_ingest_config().fallback_encoding == "cp932"


class TestPaths:
    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("DEADSTOCK_MATCHING_BASE_DIR", str(tmp_path))
        monkeypatch.delenv("DEADSTOCK_MATCHING_OUTPUT_DIR", raising=False)
        monkeypatch.setenv("DEADSTOCK_MATCHING_LOG_DIR", str(tmp_path / "logs2"))
        assert paths.get_base_dir() == tmp_path.resolve()
        assert paths.get_output_dir() == tmp_path.resolve() / "output"
        assert paths.get_log_dir() == (tmp_path / "logs2").resolve()

    def test_default_base_dir_is_project_root(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DEADSTOCK_MATCHING_BASE_DIR", raising=False)
        assert (paths.get_base_dir() / "main.py").exists()

    def test_normalize_strips_quotes(self) -> None:
        assert paths.normalize_input_path(' "/data/佐野" ') == Path("/data/佐野")
        assert paths.normalize_input_path("  ") == Path("")

    @pytest.mark.skipif(os.name != "posix", reason="盘符转换仅在 posix 下进行")
    def test_windows_drive_mapped(self) -> None:
        assert paths.normalize_input_path("C:\\Users\\yakkyoku\\佐野") == Path("/mnt/c/Users/yakkyoku/佐野")
        assert paths.normalize_input_path("d:") == Path("/mnt/d")
