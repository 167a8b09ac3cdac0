"""跨店舗匹配：每条不动品在其他各店舗的使用量，以及按店舗的金额汇总。"""

from __future__ import annotations

from typing import Iterable

from domain.inventory import (
    SELF_MARK,
    UNKNOWN_MARK,
    MatchResult,
    StoreEntry,
    StoreSummary,
    UsageCell,
    UsageRecord,
)


def _first_usage_index(records: list[UsageRecord]) -> dict[str, float]:
    """规范化名称 -> 第一条同名记录的使用量。"""
    index: dict[str, float] = {}
    for r in records:
        index.setdefault(r.normalized_name, r.usage)
    return index


def match_stores(entries: Iterable[StoreEntry]) -> list[MatchResult]:
    """
    对每个有不动品列表的店舗 S、其中每条品名非空的记录 D，遍历所有店舗 T（含 S）：
    T 为 S 时记 '-'；T 没有使用实绩时记 '?'；否则取 T 中第一条同名记录的使用量，无则为 0。
    结果顺序：店舗登记顺序，其次为源文件行顺序。纯函数，不修改输入。
    """
    stores = list(entries)
    usage_indexes: dict[str, dict[str, float] | None] = {
        s.name: _first_usage_index(s.usage) if s.usage is not None else None for s in stores
    }
    results: list[MatchResult] = []
    for source in stores:
        if source.deadstock is None:
            continue
        for item in source.deadstock:
            if not item.name.strip():
                continue
            usage_by_store: dict[str, UsageCell] = {}
            for target in stores:
                if target.name == source.name:
                    usage_by_store[target.name] = SELF_MARK
                    continue
                index = usage_indexes[target.name]
                if index is None:
                    usage_by_store[target.name] = UNKNOWN_MARK
                    continue
                usage_by_store[target.name] = index.get(item.normalized_name, 0.0)
            results.append(
                MatchResult(
                    provider_store=source.name,
                    item_name=item.name,
                    stock=item.stock,
                    expiry=item.expiry,
                    price=item.price,
                    usage_by_store=usage_by_store,
                )
            )
    return results


def summarize_stores(results: list[MatchResult], store_names: Iterable[str]) -> list[StoreSummary]:
    """
    按店舗汇总：不动品总额 sum(stock * price)，
    可移动金额为其中至少一个其他店舗使用量为正数（不含 '?' 与 '-'）的品目合计。
    """
    summaries: list[StoreSummary] = []
    for name in store_names:
        own = [m for m in results if m.provider_store == name]
        summaries.append(
            StoreSummary(
                store_name=name,
                item_count=len(own),
                total_value=sum(m.stock_value for m in own),
                relocatable_value=sum(m.stock_value for m in own if m.is_relocatable),
            )
        )
    return summaries
