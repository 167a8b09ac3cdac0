"""
不动品匹配入口：导入各店舗文件夹（不动品 HudoAddList / 使用实绩 ZaikoKin），
执行跨店舗匹配，打印店舗汇总并输出 Excel。

流程拆分为：init_config -> ingest_batch (可多次) -> run_matching -> save_output，
便于单测与维护；支持可选命令行参数（店舗文件夹、--output、--no-loop）。
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from app import collect_source_files, run_ingest, write_report_excel
from core.config import (
    get_app_config,
    get_log_dir,
    get_output_dir,
    load_app_config,
    normalize_input_path,
)
from core.matching import match_stores, summarize_stores
from core.registry import StoreRegistry
from domain.inventory import MatchResult, StoreSummary
from models.schemas import RunConfigSchema

logger = logging.getLogger(__name__)

QUIT_COMMANDS = ("q", "quit", "exit")
RUN_COMMANDS = ("run", "r")
RESET_COMMANDS = ("reset",)


def init_config(
    *,
    output_dir: Path | None = None,
    log_dir: Path | None = None,
) -> RunConfigSchema:
    """
    初始化配置与日志：加载应用配置、创建日志目录、配置 logging，返回 RunConfig。

    Args:
        output_dir: 结果输出目录，默认从 get_output_dir() 获取。
        log_dir: 日志目录，默认从 get_log_dir() 获取。
    """
    load_app_config()
    config = RunConfigSchema(
        output_dir=output_dir or get_output_dir(),
        log_dir=log_dir or get_log_dir(),
        filename_prefix=get_app_config().report.filename_prefix,
    )
    _setup_logging(config.log_dir)
    print(f"配置已加载: output_dir={config.output_dir}")
    return config


def _setup_logging(log_dir: Path) -> None:
    """
    将日志按日期写入 log_dir，文件名 deadstock_matching_YYYYMMDD.log。
    若已存在指向当日日志文件的 FileHandler 则不再添加。
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    today = datetime.now().strftime("%Y%m%d")
    log_file = log_dir / f"deadstock_matching_{today}.log"
    log_path = str(log_file.resolve())
    root = logging.getLogger()
    root.setLevel(logging.INFO)
    for h in root.handlers:
        if isinstance(h, logging.FileHandler) and getattr(h, "baseFilename", "") == log_path:
            return
    fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    handler.setFormatter(logging.Formatter(fmt))
    root.addHandler(handler)


def create_registry() -> StoreRegistry:
    app_cfg = get_app_config()
    return StoreRegistry(labels=app_cfg.extraction, settings=app_cfg.ingest)


def ingest_batch(registry: StoreRegistry, path: Path) -> list[str]:
    """
    导入一个上传批次（店舗文件夹或包含多个店舗文件夹的上级文件夹）。

    Raises:
        FileNotFoundError: 路径不存在。
    """
    files = collect_source_files(path)
    if not files:
        print(f"没有找到 CSV 文件: {path}")
        return []
    names = run_ingest(registry, files)
    if not names:
        print(f"没有找到 HudoAddList / ZaikoKin 文件: {path}")
    return names


def print_registry(registry: StoreRegistry) -> None:
    print(f"已登记店舗: {len(registry)} 件")
    for entry in registry:
        deadstock = "○" if entry.presence.deadstock else "×"
        usage = "○" if entry.presence.usage else "×"
        print(f"  {entry.name}  不動品 {deadstock}  使用量 {usage}")


def run_matching(registry: StoreRegistry) -> tuple[list[MatchResult], list[StoreSummary]]:
    """对当前登记执行匹配，返回 (匹配结果, 店舗汇总)。"""
    entries = registry.snapshot()
    results = match_stores(entries)
    summaries = summarize_stores(results, [e.name for e in entries])
    logger.info("匹配完成: 店舗 %d 件，不动品 %d 条", len(entries), len(results))
    return results, summaries


def print_summaries(summaries: list[StoreSummary]) -> None:
    for s in summaries:
        print(f"【{s.store_name}】")
        print(f"  不動品総額:   ¥{round(s.total_value):,}")
        print(f"  移動可能金額: ¥{round(s.relocatable_value):,}")
        print(f"  不動品数: {s.item_count} 品目")


def save_output(
    results: list[MatchResult],
    store_names: list[str],
    summaries: list[StoreSummary],
    config: RunConfigSchema,
) -> Path:
    """
    将匹配结果写入 Excel 并保存到 output_dir。

    Returns:
        写入的 Excel 文件路径。

    Raises:
        RuntimeError: 写入 Excel 失败。
    """
    config.output_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    output_path = config.output_dir / f"{config.filename_prefix}_{stamp}.xlsx"
    try:
        write_report_excel(results, store_names, summaries, output_path, get_app_config().report)
    except Exception as e:
        raise RuntimeError(f"写入结果文件失败: {output_path}") from e
    return output_path


def _run_and_save(registry: StoreRegistry, config: RunConfigSchema) -> Path | None:
    if len(registry) == 0:
        print("尚未登记任何店舗。")
        return None
    results, summaries = run_matching(registry)
    print_summaries(summaries)
    try:
        out_path = save_output(results, registry.store_names(), summaries, config)
    except RuntimeError as e:
        print(e)
        return None
    print(f"已写入: {out_path}")
    return out_path


def _ingest_input(registry: StoreRegistry, raw: str) -> None:
    path = normalize_input_path(raw)
    if path == Path("") or not path.exists():
        print(f"路径不存在: {path}\n")
        return
    ingest_batch(registry, path)
    print_registry(registry)


def _parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """解析命令行参数；args 为 None 时使用 sys.argv，便于单测注入。"""
    parser = argparse.ArgumentParser(
        description="不动品匹配：导入各店舗的不动品与使用实绩 CSV，找出可在店舗间移动的库存。",
    )
    parser.add_argument(
        "folders",
        nargs="*",
        default=[],
        help="店舗文件夹（或包含多个店舗文件夹的上级文件夹），每个作为一个批次导入。",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="结果输出目录，默认使用配置中的 output 目录。",
    )
    parser.add_argument(
        "--no-loop",
        action="store_true",
        help="导入指定文件夹后立即匹配并输出，不进入交互循环。",
    )
    return parser.parse_args(args)


def main(args: list[str] | None = None) -> None:
    """
    入口：初始化配置 -> 导入命令行指定的文件夹 -> 交互循环或直接匹配后退出。

    交互命令：
      <路径>  导入一个店舗文件夹（可多次）
      run     执行匹配并输出 Excel
      reset   清空已登记店舗
      q       退出
    """
    parsed = _parse_args(args)
    config = init_config(output_dir=Path(parsed.output) if parsed.output else None)
    registry = create_registry()

    for folder in parsed.folders:
        _ingest_input(registry, folder)

    if parsed.no_loop:
        if not parsed.folders:
            print("--no-loop 需要指定至少一个店舗文件夹。")
            sys.exit(1)
        _run_and_save(registry, config)
        return

    print("请拖入店舗文件夹路径；输入 run 执行匹配，reset 清空，q 退出。\n")
    while True:
        command = input("> ").strip()
        if not command:
            continue
        lowered = command.lower()
        if lowered in QUIT_COMMANDS:
            print("退出。")
            break
        if lowered in RUN_COMMANDS:
            _run_and_save(registry, config)
            continue
        if lowered in RESET_COMMANDS:
            registry.reset()
            print("已清空。")
            continue
        _ingest_input(registry, command)


if __name__ == "__main__":
    main()
