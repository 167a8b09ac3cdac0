"""上传批次中的源文件：相对路径 + 内存字节或磁盘路径。"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

ROOT_FOLDER = "Root"

_SEP_RE = re.compile(r"[\\/]+")


class SourceFile(BaseModel):
    """单个源文件。content 为 None 时从 path 读取。"""

    relative_path: str = Field(description="相对路径，如 'AllStores/佐野/ZaikoKin.csv'")
    content: bytes | None = Field(default=None, description="文件字节")
    path: Path | None = Field(default=None, description="磁盘路径，content 为空时读取")

    @field_validator("relative_path", mode="before")
    @classmethod
    def strip_path(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v).strip().strip("/\\")

    @property
    def parts(self) -> list[str]:
        return [p for p in _SEP_RE.split(self.relative_path) if p]

    @property
    def name(self) -> str:
        """文件名（路径最后一段）。"""
        parts = self.parts
        return parts[-1] if parts else ""

    @property
    def folder_key(self) -> str:
        """所在文件夹名（倒数第二段）；没有文件夹时为 'Root'。"""
        parts = self.parts
        return parts[-2] if len(parts) > 1 else ROOT_FOLDER

    model_config = {"frozen": False}
