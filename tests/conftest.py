"""测试公共夹具：构造图片、漫画压缩包与模拟的 7-Zip 可执行文件。"""

from __future__ import annotations

import io
import stat
import sys
import textwrap
import zipfile
from pathlib import Path
from typing import Callable, Mapping

import pytest
from PIL import Image

FAKE_SEVEN_ZIP = textwrap.dedent(
    """\
    #!{python}
    # 用 zipfile 模拟 7z 的 l -slt / e -so 行为
    import sys
    import zipfile

    args = sys.argv[1:]
    command = args[0] if args else ""
    # 与真实 7z 一致：-- 之后才是压缩包路径与条目名
    operands = args[args.index("--") + 1 :] if "--" in args else []
    if command == "l" and len(operands) == 1:
        path = operands[0]
        try:
            archive = zipfile.ZipFile(path)
        except Exception:
            sys.stderr.write("ERROR: " + path + "\\r\\nCan not open the file as archive\\r\\n")
            sys.exit(2)
        lines = ["Path = " + path, "Type = zip", ""]
        for info in archive.infolist():
            lines.append("Path = " + info.filename)
            lines.append("Folder = " + ("+" if info.is_dir() else "-"))
            lines.append("Size = " + str(info.file_size))
            lines.append("")
        sys.stdout.write("\\r\\n".join(lines) + "\\r\\n")
    elif command == "e" and "-so" in args and len(operands) == 2:
        path, name = operands
        try:
            archive = zipfile.ZipFile(path)
        except Exception:
            sys.stderr.write("ERROR: " + path + "\\nCan not open the file as archive\\n")
            sys.exit(2)
        if name in archive.namelist():
            sys.stdout.buffer.write(archive.read(name))
    else:
        sys.exit(7)
    """
)

SLEEPING_SEVEN_ZIP = textwrap.dedent(
    """\
    #!{python}
    import time

    time.sleep(60)
    """
)


def _write_executable(path: Path, template: str) -> Path:
    path.write_text(template.replace("{python}", sys.executable), encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IEXEC | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def fake_seven_zip(tmp_path: Path) -> str:
    """基于 zipfile 的 7z 替身，只支持 zip 内容。"""

    if sys.platform == "win32":
        pytest.skip("模拟可执行文件依赖 shebang")
    return str(_write_executable(tmp_path / "fake-7z", FAKE_SEVEN_ZIP))


@pytest.fixture
def sleeping_seven_zip(tmp_path: Path) -> str:
    """永远不会按时结束的 7z 替身。"""

    if sys.platform == "win32":
        pytest.skip("模拟可执行文件依赖 shebang")
    return str(_write_executable(tmp_path / "sleepy-7z", SLEEPING_SEVEN_ZIP))


def image_bytes(size: tuple[int, int] = (300, 450), color: str = "blue", fmt: str = "JPEG") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


def write_comic(path: Path, members: Mapping[str, bytes]) -> Path:
    """写出一个 zip 容器的漫画压缩包（扩展名由调用方决定）。"""

    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as archive:
        for name, data in members.items():
            archive.writestr(name, data)
    return path


@pytest.fixture
def make_comic() -> Callable[..., Path]:
    return write_comic


@pytest.fixture
def make_image_bytes() -> Callable[..., bytes]:
    return image_bytes
