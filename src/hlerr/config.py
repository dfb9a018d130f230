"""hlerr 配置管理。

核心逻辑不读取任何环境变量；以下变量只影响日志输出（日志永远不会写入
复用后的输出流）。

环境变量:
    HLERR_LOG_DEBUG: 日志调试模式
        - true/1/yes/on = 开启 (DEBUG 级别日志输出到临时文件)
        - false/0/no = 关闭 (默认，日志输出到 stderr)

    HLERR_LOG_LEVEL: 非调试模式下 hlerr 命名空间的日志级别
        - DEBUG / INFO / WARNING / ERROR / CRITICAL
        - 默认 WARNING，无效值回退到 WARNING
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

__all__ = [
    "Config",
    "load_config",
    "get_config",
    "reload_config",
    "LINE_CAPACITY",
    "EXIT_FAILURE",
    "EXIT_USAGE",
    "STDERR_BEGIN_MARKER",
    "STDERR_END_MARKER",
    "SUMMARY_BEGIN_MARKER",
    "SUMMARY_END_MARKER",
]

# stdout 行缓冲容量（字节）
LINE_CAPACITY = 1024

# 进程退出码
EXIT_FAILURE = 1
EXIT_USAGE = 2

# 颜色标记（无条件输出，不做终端能力检测）
STDERR_BEGIN_MARKER = b"\x1b[31m"
STDERR_END_MARKER = b"\x1b[m"
SUMMARY_BEGIN_MARKER = b"\x1b[34m"
SUMMARY_END_MARKER = b"\x1b[m"

_LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """解析布尔值环境变量。"""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _parse_log_level(value: str | None) -> int:
    """解析日志级别环境变量，无效值返回 WARNING。"""
    if not value:
        return logging.WARNING
    return _LOG_LEVELS.get(value.strip().upper(), logging.WARNING)


@dataclass
class Config:
    """hlerr 配置。

    Attributes:
        line_capacity: stdout 行缓冲容量
        log_debug: 日志调试模式（输出到临时文件）
        log_file: 日志文件路径（当 log_debug=True 时自动设置）
        log_level: 非调试模式下的日志级别
    """

    line_capacity: int = LINE_CAPACITY
    log_debug: bool = False
    log_file: str | None = None
    log_level: int = logging.WARNING

    def __repr__(self) -> str:
        return (
            f"Config(line_capacity={self.line_capacity}, "
            f"log_debug={self.log_debug}, "
            f"log_file={self.log_file}, "
            f"log_level={logging.getLevelName(self.log_level)})"
        )


def _generate_log_file_path() -> str:
    """生成日志文件路径。

    Returns:
        临时目录下的日志文件绝对路径
    """
    log_dir = Path(tempfile.gettempdir()) / "hlerr"
    log_dir.mkdir(parents=True, exist_ok=True)

    # 带时间戳和 pid，避免并行运行时互相覆盖
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"hlerr_debug_{timestamp}_{os.getpid()}.log"

    return str(log_file.resolve())


def load_config() -> Config:
    """从环境变量加载配置。"""
    log_debug = _parse_bool(os.environ.get("HLERR_LOG_DEBUG"), default=False)
    log_file = _generate_log_file_path() if log_debug else None

    return Config(
        log_debug=log_debug,
        log_file=log_file,
        log_level=_parse_log_level(os.environ.get("HLERR_LOG_LEVEL")),
    )


# 全局配置实例（延迟加载）
_config: Config | None = None


def get_config() -> Config:
    """获取全局配置实例。"""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> Config:
    """重新加载配置（用于测试）。"""
    global _config
    _config = load_config()
    return _config
