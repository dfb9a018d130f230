"""信号编号到名称的静态映射。

编号由当前平台的 signal 模块提供，不手工维护各平台的数值；
名称列表固定为常见的 POSIX 信号，平台上不存在的信号直接跳过。
"""

from __future__ import annotations

import signal

__all__ = ["COMMON_SIGNALS", "SIGNAL_NAMES", "signal_name"]

COMMON_SIGNALS: tuple[str, ...] = (
    "SIGABRT",
    "SIGALRM",
    "SIGBUS",
    "SIGCHLD",
    "SIGCONT",
    "SIGFPE",
    "SIGHUP",
    "SIGILL",
    "SIGINT",
    "SIGKILL",
    "SIGPIPE",
    "SIGQUIT",
    "SIGSEGV",
    "SIGSTOP",
    "SIGTERM",
    "SIGTSTP",
    "SIGTTIN",
    "SIGTTOU",
    "SIGUSR1",
    "SIGUSR2",
    "SIGPOLL",
    "SIGPROF",
    "SIGSYS",
    "SIGTRAP",
    "SIGURG",
    "SIGVTALRM",
    "SIGXCPU",
    "SIGXFSZ",
)


def _build_table() -> dict[int, str]:
    """构建映射表。

    别名（如 Linux 上 SIGPOLL == SIGIO）解析为列表中的名字；
    同一编号出现多次时保留先出现的名字。
    """
    table: dict[int, str] = {}
    for name in COMMON_SIGNALS:
        number = getattr(signal, name, None)
        if number is None:
            continue
        table.setdefault(int(number), name)
    return table


SIGNAL_NAMES: dict[int, str] = _build_table()


def signal_name(number: int) -> str | None:
    """返回信号名称，未知编号返回 None。"""
    return SIGNAL_NAMES.get(number)
