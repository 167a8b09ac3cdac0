"""应用层：批次导入、分析结果输出。"""

from .batch_ingest import collect_source_files, ingest_paths, run_ingest
from .report import build_report_rows, report_headers, write_report_excel

__all__ = [
    "build_report_rows",
    "collect_source_files",
    "ingest_paths",
    "report_headers",
    "run_ingest",
    "write_report_excel",
]
