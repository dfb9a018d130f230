"""Pytest 配置和 fixtures。"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

# 项目根目录
PROJECT_ROOT = Path(__file__).parent.parent

# 添加 src 目录到 Python 路径
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

# 测试用子进程脚本目录
FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def project_root() -> Path:
    """项目根目录。"""
    return PROJECT_ROOT


@pytest.fixture
def fake_child() -> list[str]:
    """运行 fake_child.py 的命令前缀。"""
    return [sys.executable, str(FIXTURES_DIR / "fake_child.py")]


@pytest.fixture
def subprocess_env() -> dict[str, str]:
    """让 `python -m hlerr` 能找到 src 下的包。"""
    env = os.environ.copy()
    existing = env.get("PYTHONPATH")
    env["PYTHONPATH"] = str(SRC_DIR) + (os.pathsep + existing if existing else "")
    env.pop("HLERR_LOG_DEBUG", None)
    env.pop("HLERR_LOG_LEVEL", None)
    return env


class RecordingSink:
    """记录每一次 write 调用的 sink。"""

    def __init__(self) -> None:
        self.writes: list[bytes] = []

    def write(self, data: bytes) -> int:
        self.writes.append(bytes(data))
        return len(data)

    @property
    def data(self) -> bytes:
        return b"".join(self.writes)


@pytest.fixture
def sink() -> RecordingSink:
    """记录写入的 sink。"""
    return RecordingSink()
