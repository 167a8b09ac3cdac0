"""
Pydantic V2 Schema：统一配置各节与运行时路径配置。

- ExtractionSection: 表头识别用的标签变体、店舗名扫描行数、使用量回退列。
- IngestSection: 文件名识别、编码检测候选与回退、并发数。
- ReportSection: 输出 Excel 的工作表名与文件名前缀。
- AppConfigSchema: app_config.yaml 根结构。
- RunConfigSchema: 运行时目录配置。
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator


def _strip_tuple(v: Any) -> tuple[str, ...]:
    if v is None:
        return ()
    if isinstance(v, str):
        v = [v]
    return tuple(str(x).strip() for x in v if str(x).strip())


# ----- 表头与列识别 -----


class ExtractionSection(BaseModel):
    """
    表头/列识别规则。包含匹配（contains）与完全一致（exact）分开配置，
    控制流中不出现任何标签字面量，便于单测与扩展。
    """

    store_labels: tuple[str, ...] = Field(default=("店舗",), description="店舗名标签（包含即可）")
    store_scan_rows: int = Field(default=5, ge=0, description="在前几行中查找店舗名")

    usage_name_labels: tuple[str, ...] = Field(default=("薬品名", "商品名"), description="使用实绩：品名列标签（包含）")
    usage_header_markers: tuple[str, ...] = Field(
        default=("処方数量", "使用量", "レセ電コード"),
        description="使用实绩：表头判定用的其他列标签（包含）",
    )
    usage_header_exact_markers: tuple[str, ...] = Field(default=("No.",), description="使用实绩：表头判定用的其他列标签（完全一致）")
    usage_quantity_labels: tuple[str, ...] = Field(
        default=("処方数量", "使用量", "総使用量"),
        description="使用实绩：使用量列标签（包含）",
    )
    usage_fallback_column: int = Field(default=20, ge=0, description="未找到使用量列或主列为 0 时回退的列索引（0-based）")

    deadstock_header_first_cells: tuple[str, ...] = Field(default=("No.", "No"), description="不动品：首列等于此值的行为表头")
    deadstock_name_labels: tuple[str, ...] = Field(default=("薬品名",), description="不动品：品名列（完全一致）")
    deadstock_stock_labels: tuple[str, ...] = Field(default=("在庫数量", "在庫数"), description="不动品：在庫数列（完全一致）")
    deadstock_expiry_labels: tuple[str, ...] = Field(default=("使用期限",), description="不动品：使用期限列（完全一致）")
    deadstock_price_labels: tuple[str, ...] = Field(default=("薬価",), description="不动品：薬価列（完全一致）")

    @field_validator(
        "store_labels",
        "usage_name_labels",
        "usage_header_markers",
        "usage_header_exact_markers",
        "usage_quantity_labels",
        "deadstock_header_first_cells",
        "deadstock_name_labels",
        "deadstock_stock_labels",
        "deadstock_expiry_labels",
        "deadstock_price_labels",
        mode="before",
    )
    @classmethod
    def normalize_labels(cls, v: Any) -> tuple[str, ...]:
        return _strip_tuple(v)

    model_config = {"frozen": True, "extra": "forbid"}


# ----- 导入 -----


class IngestSection(BaseModel):
    """导入配置：文件角色识别（文件名包含，忽略大小写）、编码、并发。"""

    deadstock_file_pattern: str = Field(default="hudoaddlist", description="不动品文件名包含的字符串")
    usage_file_pattern: str = Field(default="zaikokin", description="使用实绩文件名包含的字符串")
    fallback_encoding: str = Field(default="cp932", description="编码检测无结果时使用的编码（Shift_JIS 相当）")
    candidate_encodings: tuple[str, ...] = Field(
        default=("utf_8", "cp932", "euc_jp", "iso2022_jp"),
        description="编码检测候选，限定为日文常用编码",
    )
    max_concurrency: int = Field(default=8, ge=1, description="同时处理的文件夹数")

    @field_validator("deadstock_file_pattern", "usage_file_pattern", mode="after")
    @classmethod
    def lower_pattern(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("candidate_encodings", mode="before")
    @classmethod
    def normalize_encodings(cls, v: Any) -> tuple[str, ...]:
        return _strip_tuple(v)

    model_config = {"frozen": True, "extra": "forbid"}


# ----- 输出 -----


class ReportSection(BaseModel):
    """输出 Excel 配置。"""

    sheet_title: str = Field(default="デッドストック分析", description="明细工作表名")
    summary_sheet_title: str = Field(default="店舗別集計", description="店舗汇总工作表名")
    filename_prefix: str = Field(default="deadstock_analysis", description="输出文件名前缀")

    model_config = {"frozen": True, "extra": "forbid"}


class AppConfigSchema(BaseModel):
    """app_config.yaml 根结构；各节均有默认值。"""

    extraction: ExtractionSection = Field(default_factory=ExtractionSection)
    ingest: IngestSection = Field(default_factory=IngestSection)
    report: ReportSection = Field(default_factory=ReportSection)

    @field_validator("extraction", "ingest", "report", mode="before")
    @classmethod
    def none_as_default(cls, v: Any) -> Any:
        return {} if v is None else v

    model_config = {"extra": "ignore"}


# ----- 运行时路径 -----


class RunConfigSchema(BaseModel):
    """运行时路径配置：输出目录、日志目录。"""

    output_dir: Path = Field(description="分析结果输出目录")
    log_dir: Path = Field(description="日志文件目录")
    filename_prefix: str = Field(default="deadstock_analysis", description="输出文件名前缀")

    model_config = {"frozen": False}
