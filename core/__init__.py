"""
匹配核心：解码、CSV 解析、品名规范化、店舗记录抽取、店舗登记、跨店舗匹配。
"""

from domain.files import SourceFile
from domain.inventory import DeadstockRecord, MatchResult, StoreEntry, StoreSummary, UsageRecord
from .decoding import decode_bytes, decode_source, read_source
from .errors import DecodeError, ExtractionError, IngestError
from .extractors import extract_deadstock_records, extract_usage_records
from .matching import match_stores, summarize_stores
from .normalizer import normalize_name
from .registry import StoreRegistry, classify_folder, group_by_folder
from .tabular import cell_at, parse_csv, parse_number

__all__ = [
    "DeadstockRecord",
    "DecodeError",
    "ExtractionError",
    "IngestError",
    "MatchResult",
    "SourceFile",
    "StoreEntry",
    "StoreRegistry",
    "StoreSummary",
    "UsageRecord",
    "cell_at",
    "classify_folder",
    "decode_bytes",
    "decode_source",
    "extract_deadstock_records",
    "extract_usage_records",
    "group_by_folder",
    "match_stores",
    "normalize_name",
    "parse_csv",
    "parse_number",
    "read_source",
    "summarize_stores",
]
