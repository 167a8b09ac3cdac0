"""导入过程中的异常：只影响单个文件，不会传到匹配阶段。"""

from __future__ import annotations


class IngestError(Exception):
    """单个源文件导入失败的基类。"""

    def __init__(self, message: str, *, source: str = "") -> None:
        super().__init__(message)
        self.source = source


class DecodeError(IngestError):
    """源文件无法读取（I/O 失败）。编码检测本身不会抛出此异常。"""


class ExtractionError(IngestError):
    """表头/列识别或逐行解析时发生意外异常。"""
