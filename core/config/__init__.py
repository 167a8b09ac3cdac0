"""
core.config：路径解析与统一 YAML 配置 app_config.yaml 的加载与缓存。

- 配置：config/app_config.yaml（含 extraction、ingest、report）。
- 统一加载：load_app_config() 启动时调用一次；之后通过 get_app_config() 获取。
"""

from __future__ import annotations

import logging
from pathlib import Path

from models.schemas import AppConfigSchema, ExtractionSection, IngestSection, ReportSection

from . import loader as _loader
from . import paths as _paths

logger = logging.getLogger(__name__)

get_app_config_path = _loader.get_app_config_path
get_base_dir = _paths.get_base_dir
get_config_dir = _paths.get_config_dir
get_output_dir = _paths.get_output_dir
get_log_dir = _paths.get_log_dir
normalize_input_path = _paths.normalize_input_path

_app_config: AppConfigSchema | None = None


def load_app_config(path: Path | None = None, *, reload: bool = False) -> AppConfigSchema:
    """加载全部配置并缓存；已加载时直接返回缓存（reload=True 强制重新读取）。"""
    global _app_config

    if _app_config is not None and not reload:
        return _app_config
    _app_config = _loader.load_app_config_yaml(path)
    logger.debug("配置已加载: config_file=%s", path or get_app_config_path())
    return _app_config


def get_app_config() -> AppConfigSchema:
    """获取已加载的配置；未加载时先执行一次 load_app_config()。"""
    if _app_config is None:
        return load_app_config()
    return _app_config


def reset_app_config() -> None:
    """清除缓存（主要用于单测）。"""
    global _app_config
    _app_config = None


def get_extraction_config() -> ExtractionSection:
    return get_app_config().extraction


def get_ingest_config() -> IngestSection:
    return get_app_config().ingest


def get_report_config() -> ReportSection:
    return get_app_config().report


__all__ = [
    "load_app_config",
    "get_app_config",
    "reset_app_config",
    "get_extraction_config",
    "get_ingest_config",
    "get_report_config",
    "get_app_config_path",
    "get_base_dir",
    "get_config_dir",
    "get_output_dir",
    "get_log_dir",
    "normalize_input_path",
]
