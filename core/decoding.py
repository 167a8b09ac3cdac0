"""源文件解码：字节 -> 字符串，自动检测编码，检测不到时按 cp932（Shift_JIS 相当）解码。"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable

from charset_normalizer import from_bytes

from domain.files import SourceFile

from .errors import DecodeError

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_ENCODING = "cp932"
DEFAULT_CANDIDATE_ENCODINGS = ("utf_8", "cp932", "euc_jp", "iso2022_jp")

_BOM = "\ufeff"


def detect_encoding(raw: bytes, candidates: Iterable[str] = DEFAULT_CANDIDATE_ENCODINGS) -> str | None:
    """在候选编码中检测最可能的编码；无结论时返回 None。"""
    if not raw:
        return None
    best = from_bytes(raw, cp_isolation=list(candidates) or None).best()
    return best.encoding if best is not None else None


def decode_bytes(
    raw: bytes,
    *,
    candidates: Iterable[str] = DEFAULT_CANDIDATE_ENCODINGS,
    fallback_encoding: str = DEFAULT_FALLBACK_ENCODING,
) -> str:
    """
    字节 -> 字符串。检测失败或检测结果无法解码时，按 fallback_encoding 解码并替换非法字节；
    最坏情况是乱码，不会抛出异常。
    """
    if not raw:
        return ""
    encoding = detect_encoding(raw, candidates)
    text: str | None = None
    if encoding:
        try:
            text = raw.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            logger.debug("检测到的编码 %s 无法解码，改用 %s", encoding, fallback_encoding)
    if text is None:
        text = raw.decode(fallback_encoding, errors="replace")
    return text[1:] if text.startswith(_BOM) else text


async def read_source(file: SourceFile) -> bytes:
    """读取源文件字节；内存内容直接返回，路径在工作线程中读取。I/O 失败抛出 DecodeError。"""
    if file.content is not None:
        return file.content
    if file.path is None:
        raise DecodeError(f"源文件没有内容也没有路径: {file.relative_path}", source=file.relative_path)
    try:
        return await asyncio.to_thread(file.path.read_bytes)
    except OSError as e:
        raise DecodeError(f"无法读取文件 {file.path}: {e}", source=file.relative_path) from e


async def decode_source(
    file: SourceFile,
    *,
    candidates: Iterable[str] = DEFAULT_CANDIDATE_ENCODINGS,
    fallback_encoding: str = DEFAULT_FALLBACK_ENCODING,
) -> str:
    """读取并解码一个源文件。"""
    raw = await read_source(file)
    return decode_bytes(raw, candidates=candidates, fallback_encoding=fallback_encoding)
