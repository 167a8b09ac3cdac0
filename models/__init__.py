"""Pydantic 模型与 Schema：统一配置、运行时路径。"""

from .schemas import (
    AppConfigSchema,
    ExtractionSection,
    IngestSection,
    ReportSection,
    RunConfigSchema,
)

__all__ = [
    "AppConfigSchema",
    "ExtractionSection",
    "IngestSection",
    "ReportSection",
    "RunConfigSchema",
]
