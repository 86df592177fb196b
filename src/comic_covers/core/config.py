"""封面生成任务的配置模型。"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence, Tuple

from comic_covers.core.exceptions import InvalidConfigurationError

ORIGINAL_SIZE_TOKENS = {"original", "orig", "none"}
_BOX_RE = re.compile(r"^(\d+)[xX](\d+)$")


@dataclass(frozen=True, slots=True)
class OutputSpec:
    """单个输出尺寸配置：文件名后缀 + 可选的限定框。

    ``box`` 为 ``None`` 时按原始分辨率重新编码。
    """

    name_suffix: str
    box: Optional[Tuple[int, int]] = None

    def filename_for(self, base_name: str) -> str:
        return f"{base_name}{self.name_suffix}.jpg"

    @classmethod
    def parse(cls, value: str) -> "OutputSpec":
        """解析 ``SUFFIX:WxH`` 或 ``SUFFIX:original`` 形式的字符串。"""

        suffix, sep, size = value.rpartition(":")
        if not sep:
            raise InvalidConfigurationError(f"输出尺寸必须形如 SUFFIX:WxH，实际为: {value!r}")

        size = size.strip()
        if size.lower() in ORIGINAL_SIZE_TOKENS:
            return cls(name_suffix=suffix, box=None)

        match = _BOX_RE.match(size)
        if not match:
            raise InvalidConfigurationError(f"无法解析输出尺寸: {value!r}")
        width, height = int(match.group(1)), int(match.group(2))
        if width <= 0 or height <= 0:
            raise InvalidConfigurationError(f"输出尺寸必须大于 0: {value!r}")
        return cls(name_suffix=suffix, box=(width, height))


DEFAULT_OUTPUT_SPECS: Tuple[OutputSpec, ...] = (
    OutputSpec("", (200, 300)),
    OutputSpec("_xl", (800, 1200)),
)


@dataclass(slots=True)
class JobConfig:
    """单次批处理任务的配置集合。"""

    source_dir: Path
    output_dir: Optional[Path] = None
    outputs: Sequence[OutputSpec] = field(default_factory=lambda: DEFAULT_OUTPUT_SPECS)
    force_overwrite: bool = False
    error_file: Optional[Path] = Path("error.txt")
    concurrency: int = 4
    error_flush_interval: int = 10
    error_display_limit: int = 10
    archive_timeout: float = 30.0
    seven_zip_path: Optional[str] = None

    def validate(self) -> None:
        """检查配置取值是否合法。"""

        if not self.outputs:
            raise InvalidConfigurationError("至少需要一个输出尺寸配置")
        if self.concurrency < 1:
            raise InvalidConfigurationError(f"并发数必须大于 0: {self.concurrency}")
        if self.archive_timeout <= 0:
            raise InvalidConfigurationError(f"超时时间必须大于 0: {self.archive_timeout}")
        if self.error_flush_interval < 1:
            raise InvalidConfigurationError(f"错误日志刷新间隔必须大于 0: {self.error_flush_interval}")

        suffixes = [spec.name_suffix for spec in self.outputs]
        if len(set(suffixes)) != len(suffixes):
            raise InvalidConfigurationError(f"输出后缀重复: {suffixes}")
