"""不动品与使用实绩相关数据模型（Pydantic V2）。"""

from __future__ import annotations

from typing import Any, Union

from pydantic import BaseModel, Field, field_validator

# 使用量矩阵中的占位符：提供店舗自身、未导入使用实绩的店舗
SELF_MARK = "-"
UNKNOWN_MARK = "?"

UsageCell = Union[float, str]


def _strip_str(v: Any) -> str:
    if v is None:
        return ""
    return str(v).strip()


def _as_str(v: Any) -> str:
    return "" if v is None else str(v)


class UsageRecord(BaseModel):
    """单店舗单品目的使用量（ZaikoKin 一行）。"""

    name: str = Field(default="", description="薬品名（原文）")
    normalized_name: str = Field(default="", description="比较用规范化名称")
    usage: float = Field(default=0.0, description="报告期间内的使用量，无法解析时为 0")

    @field_validator("name", mode="before")
    @classmethod
    def name_as_str(cls, v: Any) -> str:
        return _as_str(v)

    model_config = {"frozen": False}


class DeadstockRecord(BaseModel):
    """单店舗的一条不动品（HudoAddList 一行）。"""

    name: str = Field(default="", description="薬品名（原文）")
    normalized_name: str = Field(default="", description="比较用规范化名称")
    stock: float = Field(default=0.0, description="在庫数")
    expiry: str = Field(default="", description="使用期限，原样保留，不做日期解析")
    price: float = Field(default=0.0, description="薬価")

    @field_validator("name", mode="before")
    @classmethod
    def name_as_str(cls, v: Any) -> str:
        return _as_str(v)

    @field_validator("expiry", mode="before")
    @classmethod
    def expiry_as_str(cls, v: Any) -> str:
        return _as_str(v)

    @property
    def stock_value(self) -> float:
        return self.stock * self.price

    model_config = {"frozen": False}


class FilePresence(BaseModel):
    """文件夹中是否找到对应角色的文件（与解析是否成功无关）。"""

    deadstock: bool = Field(default=False, description="是否找到不动品文件")
    usage: bool = Field(default=False, description="是否找到使用实绩文件")


class StoreEntry(BaseModel):
    """
    店舗登记项：以店舗名为键。
    deadstock / usage 为 None 表示该角色数据缺失（文件不存在、无表头或解析失败），不是错误。
    """

    name: str = Field(description="店舗名：优先取使用实绩文件内的「店舗」字段，否则为文件夹名")
    deadstock: list[DeadstockRecord] | None = Field(default=None, description="不动品列表")
    usage: list[UsageRecord] | None = Field(default=None, description="使用实绩列表")
    presence: FilePresence = Field(default_factory=FilePresence, description="文件是否存在")
    source_folder: str = Field(default="", description="生成该登记项的文件夹名")

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: Any) -> str:
        return _strip_str(v)

    model_config = {"frozen": False}


class MatchResult(BaseModel):
    """一条不动品的跨店舗使用量矩阵。"""

    provider_store: str = Field(description="提供店舗（持有不动品的店舗）")
    item_name: str = Field(description="薬品名")
    stock: float = Field(default=0.0, description="在庫数")
    expiry: str = Field(default="", description="使用期限")
    price: float = Field(default=0.0, description="薬価")
    usage_by_store: dict[str, UsageCell] = Field(
        default_factory=dict,
        description="店舗名 -> 使用量；自身为 '-'，无使用实绩的店舗为 '?'",
    )

    @property
    def stock_value(self) -> float:
        return self.stock * self.price

    @property
    def is_relocatable(self) -> bool:
        """是否至少有一个其他店舗的使用量为正数。"""
        for store, usage in self.usage_by_store.items():
            if store == self.provider_store or isinstance(usage, str):
                continue
            if usage > 0:
                return True
        return False

    model_config = {"frozen": False}


class StoreSummary(BaseModel):
    """单店舗汇总：不动品总额与可移动金额。"""

    store_name: str = Field(description="店舗名")
    item_count: int = Field(default=0, ge=0, description="不动品品目数")
    total_value: float = Field(default=0.0, description="不动品总额 sum(stock * price)")
    relocatable_value: float = Field(default=0.0, description="可移动金额：其他店舗有正使用量的品目合计")
