"""品名规范化：跨店舗比较用的键，不用于显示。"""

from __future__ import annotations

import re

# 全角 ASCII 区间（！～～）与半角（!～~）的码位差
FULLWIDTH_START = 0xFF01
FULLWIDTH_END = 0xFF5E
FULLWIDTH_OFFSET = 0xFEE0

_FULLWIDTH_TABLE = {cp: cp - FULLWIDTH_OFFSET for cp in range(FULLWIDTH_START, FULLWIDTH_END + 1)}
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_name(value: str | None) -> str:
    """
    全角英数记号 -> 半角，去除所有空白（含全角空格），转小写。
    同一输入恒得同一输出，且 normalize_name(normalize_name(x)) == normalize_name(x)。
    """
    if not value:
        return ""
    result = str(value).translate(_FULLWIDTH_TABLE)
    result = _WHITESPACE_RE.sub("", result)
    return result.lower()
