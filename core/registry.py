"""
店舗登记：店舗名 -> StoreEntry。

支持多次上传批次增量导入；同名店舗整项覆盖（后者为准）。
各文件夹的读取与解析并发进行，写入登记由锁串行化，并按文件夹顺序整项写入。
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Iterator

from tqdm import tqdm  # type: ignore[import-untyped]

from domain.files import SourceFile
from domain.inventory import DeadstockRecord, FilePresence, StoreEntry, UsageRecord
from models.schemas import ExtractionSection, IngestSection

from .decoding import decode_source
from .errors import DecodeError, ExtractionError
from .extractors import UsageExtraction, extract_deadstock_records, extract_usage_records
from .tabular import parse_csv

logger = logging.getLogger(__name__)


def group_by_folder(files: Iterable[SourceFile]) -> dict[str, list[SourceFile]]:
    """按所在文件夹（相对路径倒数第二段）分组，顺序为首次出现顺序。"""
    groups: dict[str, list[SourceFile]] = {}
    for f in files:
        groups.setdefault(f.folder_key, []).append(f)
    return groups


def classify_folder(
    files: list[SourceFile],
    settings: IngestSection,
) -> tuple[SourceFile | None, SourceFile | None]:
    """返回 (不动品文件, 使用实绩文件)；文件名包含判定，忽略大小写，各取第一个。"""
    deadstock = next((f for f in files if settings.deadstock_file_pattern in f.name.lower()), None)
    usage = next((f for f in files if settings.usage_file_pattern in f.name.lower()), None)
    return deadstock, usage


async def _load_text(file: SourceFile, settings: IngestSection) -> str:
    return await decode_source(
        file,
        candidates=settings.candidate_encodings,
        fallback_encoding=settings.fallback_encoding,
    )


async def _extract_usage(
    file: SourceFile,
    labels: ExtractionSection,
    settings: IngestSection,
) -> UsageExtraction | None:
    text = await _load_text(file, settings)
    try:
        return extract_usage_records(parse_csv(text), labels)
    except Exception as e:
        raise ExtractionError(f"解析使用实绩失败: {e}", source=file.relative_path) from e


async def _extract_deadstock(
    file: SourceFile,
    labels: ExtractionSection,
    settings: IngestSection,
) -> list[DeadstockRecord] | None:
    text = await _load_text(file, settings)
    try:
        return extract_deadstock_records(parse_csv(text), labels)
    except Exception as e:
        raise ExtractionError(f"解析不动品失败: {e}", source=file.relative_path) from e


def _unwrap(result: object, folder_name: str, role: str) -> object | None:
    """gather 结果中的导入异常记日志并视为无数据；其他异常继续抛出。"""
    if isinstance(result, DecodeError):
        logger.error("读取%s文件失败 [%s]: %s", role, folder_name, result)
        return None
    if isinstance(result, ExtractionError):
        logger.error("解析%s文件失败 [%s]: %s", role, folder_name, result, exc_info=result.__cause__)
        return None
    if isinstance(result, BaseException):
        raise result
    return result


async def extract_store(
    folder_name: str,
    files: list[SourceFile],
    labels: ExtractionSection,
    settings: IngestSection,
) -> StoreEntry | None:
    """
    处理一个文件夹：识别两类文件，并发读取并解析，组装 StoreEntry。
    两类文件都不存在时返回 None（该文件夹跳过）。
    """
    deadstock_file, usage_file = classify_folder(files, settings)
    if deadstock_file is None and usage_file is None:
        logger.info("文件夹中没有不动品/使用实绩文件，跳过: %s", folder_name)
        return None

    async def _none() -> None:
        return None

    deadstock_result, usage_result = await asyncio.gather(
        _extract_deadstock(deadstock_file, labels, settings) if deadstock_file else _none(),
        _extract_usage(usage_file, labels, settings) if usage_file else _none(),
        return_exceptions=True,
    )
    deadstock = _unwrap(deadstock_result, folder_name, "不动品")
    usage = _unwrap(usage_result, folder_name, "使用实绩")

    store_name = folder_name
    usage_records: list[UsageRecord] | None = None
    if isinstance(usage, UsageExtraction):
        usage_records = usage.records
        if usage.store_name:
            store_name = usage.store_name
        if usage.records is None:
            logger.warning("使用实绩文件中未找到表头 [%s]: %s", folder_name, usage_file.relative_path if usage_file else "")
    if deadstock_file is not None and deadstock is None and not isinstance(deadstock_result, BaseException):
        logger.warning("不动品文件中未找到表头 [%s]: %s", folder_name, deadstock_file.relative_path)

    return StoreEntry(
        name=store_name,
        deadstock=deadstock if isinstance(deadstock, list) else None,
        usage=usage_records,
        presence=FilePresence(deadstock=deadstock_file is not None, usage=usage_file is not None),
        source_folder=folder_name,
    )


class StoreRegistry:
    """
    店舗登记表。插入顺序即匹配与输出时的店舗顺序；
    覆盖已有店舗时保留其原位置。
    """

    def __init__(
        self,
        labels: ExtractionSection | None = None,
        settings: IngestSection | None = None,
    ) -> None:
        self.labels = labels or ExtractionSection()
        self.settings = settings or IngestSection()
        self._entries: dict[str, StoreEntry] = {}
        self._lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[StoreEntry]:
        return iter(list(self._entries.values()))

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def get(self, name: str) -> StoreEntry | None:
        return self._entries.get(name)

    def store_names(self) -> list[str]:
        return list(self._entries)

    def snapshot(self) -> list[StoreEntry]:
        """当前登记项的有序副本，供匹配使用。"""
        return [entry.model_copy(deep=True) for entry in self._entries.values()]

    def reset(self) -> None:
        """清空全部登记项。"""
        self._entries.clear()
        logger.info("店舗登记已清空")

    def _get_lock(self) -> asyncio.Lock:
        # 同步入口每次 asyncio.run 都是新的事件循环，锁按循环重建
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    def _upsert(self, entry: StoreEntry) -> None:
        existing = self._entries.get(entry.name)
        if existing is not None and existing.source_folder != entry.source_folder:
            logger.warning(
                "店舗名重复，文件夹 %s 的数据覆盖了文件夹 %s: %s",
                entry.source_folder,
                existing.source_folder,
                entry.name,
            )
        self._entries[entry.name] = entry

    async def upsert(self, entry: StoreEntry) -> None:
        """整项写入；同名店舗由后写入者覆盖。"""
        async with self._get_lock():
            self._upsert(entry)

    async def ingest_folder(self, folder_name: str, files: list[SourceFile]) -> StoreEntry | None:
        """导入一个已分好组的文件夹；跳过时返回 None。"""
        entry = await extract_store(folder_name, files, self.labels, self.settings)
        if entry is not None:
            await self.upsert(entry)
        return entry

    async def ingest(self, files: Iterable[SourceFile]) -> list[str]:
        """
        导入一个上传批次：按文件夹分组，各文件夹并发解析（受 max_concurrency 限制），
        全部完成后按文件夹顺序写入登记。返回写入的店舗名列表（按写入顺序）。
        """
        groups = group_by_folder(files)
        if not groups:
            return []
        sem = asyncio.Semaphore(self.settings.max_concurrency)

        async def _one(index: int, folder: str, folder_files: list[SourceFile]) -> tuple[int, StoreEntry | None]:
            async with sem:
                try:
                    return index, await extract_store(folder, folder_files, self.labels, self.settings)
                except Exception:
                    # 单个文件夹失败不影响同批次其他文件夹
                    logger.exception("处理文件夹失败，跳过: %s", folder)
                    return index, None

        tasks = [_one(i, folder, folder_files) for i, (folder, folder_files) in enumerate(groups.items())]
        completed: dict[int, StoreEntry | None] = {}
        for coro in tqdm(asyncio.as_completed(tasks), total=len(tasks), desc="读取店舗", unit="件"):
            index, entry = await coro
            completed[index] = entry

        entries = [completed[i] for i in range(len(tasks)) if completed[i] is not None]
        async with self._get_lock():
            for entry in entries:
                self._upsert(entry)
        names = [entry.name for entry in entries]
        logger.info("本批次导入店舗 %d 件: %s", len(names), ", ".join(names))
        return names
