"""hlerr 应用入口。

包含日志配置、用法检查和一次完整运行的生命周期：
启动子进程 -> 复用两个输出流 -> flush -> 回收子进程 -> 输出摘要 -> 退出码。

所有致命错误写到控制进程自己的 stderr，不会混入复用后的输出流（stdout）。
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Sequence

from .config import EXIT_FAILURE, EXIT_USAGE, Config, get_config
from .errors import ReapError, SetupError, StreamError
from .runtime import FdSink, OutputRenderer, StreamMultiplexer, launch, reap, report
from .runtime.renderer import Sink

__all__ = ["run", "main", "setup_logging", "usage"]

logger = logging.getLogger(__name__)

STDOUT_FILENO = 1
STDERR_FILENO = 2

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(config: Config) -> None:
    """配置日志输出。

    - LOG_DEBUG 模式：DEBUG 级别输出到临时文件
    - 默认模式：输出到 stderr，级别由 HLERR_LOG_LEVEL 决定
    """
    log_handlers: list[logging.Handler] = []

    if config.log_debug and config.log_file:
        file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log_handlers.append(file_handler)
        log_level = logging.DEBUG
    else:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log_handlers.append(stderr_handler)
        log_level = config.log_level

    # root logger 保持 WARNING，只对 hlerr 命名空间使用配置的级别
    logging.basicConfig(
        level=logging.WARNING,
        handlers=log_handlers,
    )
    logging.getLogger("hlerr").setLevel(log_level)


def usage(prog: str) -> None:
    """输出用法到 stderr。"""
    sys.stderr.write(f"usage: {prog} <command>...\n")
    sys.stderr.flush()


def _print_error(err: Sink, message: str) -> None:
    """致命错误写到控制进程的 stderr。"""
    logger.debug(f"Fatal: {message}")
    try:
        err.write(f"{message}\n".encode("utf-8", errors="replace"))
    except StreamError as e:
        logger.debug(f"Could not report error: {e}")


def _reap_and_report(pid: int, out: Sink, err: Sink, failed: bool) -> int:
    """回收子进程并输出摘要，返回控制进程的退出码。"""
    try:
        outcome = reap(pid)
    except ReapError as e:
        _print_error(err, str(e))
        return EXIT_FAILURE

    try:
        report(outcome, out, err)
    except StreamError as e:
        _print_error(err, str(e))
        return EXIT_FAILURE

    if failed:
        return EXIT_FAILURE
    return outcome.exit_code


def run(
    command: Sequence[str],
    *,
    out: Sink | None = None,
    err: Sink | None = None,
    config: Config | None = None,
) -> int:
    """运行一次：启动 command，复用输出，回收并报告。

    Args:
        command: 子进程命令行（不能为空）
        out: 复用后的输出流（默认 fd 1）
        err: 控制进程自己的错误流（默认 fd 2）
        config: 配置（默认全局配置）

    Returns:
        控制进程的退出码：子进程正常退出时等于其退出码，
        被信号终止、状态无法识别或内部出错时为 EXIT_FAILURE
    """
    config = config or get_config()
    out = out if out is not None else FdSink(STDOUT_FILENO)
    err = err if err is not None else FdSink(STDERR_FILENO)

    try:
        child = launch(command)
    except SetupError as e:
        _print_error(err, str(e))
        if e.pid is None:
            return EXIT_FAILURE
        # 子进程已经存在，仍然要回收，避免留下僵尸进程
        return _reap_and_report(e.pid, out, err, failed=True)

    renderer = OutputRenderer(out, capacity=config.line_capacity)
    failed = False

    try:
        StreamMultiplexer(renderer).run(child.stdout, child.stderr)
    except StreamError as e:
        _print_error(err, str(e))
        failed = True
    finally:
        # 关闭读端，让阻塞在写满管道上的子进程得以退出
        child.close()

    try:
        renderer.flush()
    except StreamError as e:
        if failed:
            logger.debug(f"Flush after stream error failed: {e}")
        else:
            _print_error(err, str(e))
            failed = True

    return _reap_and_report(child.pid, out, err, failed)


def main(argv: Sequence[str] | None = None) -> None:
    """主入口点。"""
    args = list(sys.argv[1:] if argv is None else argv)
    prog = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "hlerr"
    if prog in ("__main__.py", "-c", ""):
        prog = "hlerr"

    if not args:
        usage(prog)
        sys.exit(EXIT_USAGE)

    config = get_config()
    setup_logging(config)
    logger.debug(f"Starting hlerr: {config} command={args}")

    sys.exit(run(args, config=config))


if __name__ == "__main__":
    main()
