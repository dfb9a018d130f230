"""hlerr - 运行命令，把它的 stdout 和 stderr 合并到一个输出流并高亮 stderr。

环境变量:
    HLERR_LOG_DEBUG: 日志调试模式 (默认 false)
    HLERR_LOG_LEVEL: 日志级别 (默认 WARNING)

用法:
    hlerr <command> [arguments...]
"""

__version__ = "0.1.0"

from .app import main

__all__ = ["__version__", "main"]
