"""领域模型：源文件、店舗记录、匹配结果。"""

from .files import SourceFile
from .inventory import (
    SELF_MARK,
    UNKNOWN_MARK,
    DeadstockRecord,
    FilePresence,
    MatchResult,
    StoreEntry,
    StoreSummary,
    UsageRecord,
)

__all__ = [
    "SELF_MARK",
    "UNKNOWN_MARK",
    "DeadstockRecord",
    "FilePresence",
    "MatchResult",
    "SourceFile",
    "StoreEntry",
    "StoreSummary",
    "UsageRecord",
]
