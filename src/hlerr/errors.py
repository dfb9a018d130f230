"""hlerr 异常类。

所有致命错误都通过这些异常上报到 app 层，由 app 层写到控制进程自己的
stderr，而不是复用后的输出流。
"""

from __future__ import annotations

__all__ = [
    "HlerrError",
    "SetupError",
    "StreamError",
    "ReapError",
]


class HlerrError(Exception):
    """hlerr 基础异常。"""
    pass


class SetupError(HlerrError):
    """启动阶段错误（pipe / fork / close / dup2）。

    Attributes:
        operation: 失败的操作名，例如 "pipe(stdout_pipe)"
        cause: 底层 OSError（可选）
        pid: 失败时子进程已经创建则为其 pid，调用方仍需回收它
    """

    def __init__(
        self,
        operation: str,
        cause: OSError | None = None,
        pid: int | None = None,
    ) -> None:
        self.operation = operation
        self.cause = cause
        self.pid = pid
        if cause is not None and cause.strerror:
            super().__init__(f"{operation}: {cause.strerror}")
        else:
            super().__init__(operation)


class StreamError(HlerrError):
    """复用阶段 I/O 错误（poll 报告错误条件、read/write 失败）。"""
    pass


class ReapError(HlerrError):
    """等待子进程失败。

    Attributes:
        pid: 被等待的子进程 pid
        cause: 底层 OSError
    """

    def __init__(self, pid: int, cause: OSError) -> None:
        self.pid = pid
        self.cause = cause
        super().__init__(f"wait() for pid {pid}: {cause.strerror or cause}")
