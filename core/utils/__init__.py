"""公共工具：Excel 写入。"""

from .excel_io import SheetSpec, write_sheets

__all__ = [
    "SheetSpec",
    "write_sheets",
]
