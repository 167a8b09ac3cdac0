"""批次导入：把目录展开为 SourceFile 列表，并以同步方式驱动店舗登记的异步导入。"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Iterable

from core.registry import StoreRegistry
from domain.files import SourceFile

logger = logging.getLogger(__name__)

SOURCE_SUFFIXES = (".csv", ".txt")


def collect_source_files(root: Path, suffixes: tuple[str, ...] = SOURCE_SUFFIXES) -> list[SourceFile]:
    """
    递归收集 root 下的 CSV 文件，相对路径以 root 自身的目录名开头：
    拖入店舗文件夹「佐野」得到 '佐野/ZaikoKin.csv'；
    拖入上级文件夹「全店舗」得到 '全店舗/佐野/ZaikoKin.csv'。两种情况下文件夹键都是「佐野」。
    单个文件时相对路径为 '所在目录名/文件名'。
    """
    root = Path(root).resolve()
    if root.is_file():
        return [SourceFile(relative_path=f"{root.parent.name}/{root.name}", path=root)]
    if not root.is_dir():
        raise FileNotFoundError(f"路径不存在: {root}")
    files: list[SourceFile] = []
    for p in sorted(root.rglob("*")):
        if not p.is_file() or p.suffix.lower() not in suffixes:
            continue
        rel = p.relative_to(root.parent).as_posix()
        files.append(SourceFile(relative_path=rel, path=p))
    logger.info("收集源文件 %d 个: %s", len(files), root)
    return files


def run_ingest(registry: StoreRegistry, files: Iterable[SourceFile]) -> list[str]:
    """同步入口：导入一个批次，返回写入的店舗名。"""
    files = list(files)
    if not files:
        return []
    return asyncio.run(registry.ingest(files))


def ingest_paths(registry: StoreRegistry, paths: Iterable[Path]) -> list[str]:
    """每个路径作为一个上传批次依次导入；返回全部写入的店舗名。"""
    names: list[str] = []
    for path in paths:
        names.extend(run_ingest(registry, collect_source_files(path)))
    return names
