"""子进程终止结果模型。

由 Reaper 根据 waitpid() 的原始状态生成一次，之后不可变。
三种结果：
1. Exited - 正常退出，控制进程的退出码等于子进程退出码
2. Signaled - 被信号终止，控制进程以通用失败码退出
3. Unrecognized - 无法识别的原始状态，同样以通用失败码退出
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .config import EXIT_FAILURE

__all__ = [
    "OutcomeKind",
    "TerminationOutcomeBase",
    "Exited",
    "Signaled",
    "Unrecognized",
    "TerminationOutcome",
]


class OutcomeKind(str, Enum):
    """终止结果分类。"""

    EXITED = "exited"
    SIGNALED = "signaled"
    UNRECOGNIZED = "unrecognized"


class TerminationOutcomeBase(BaseModel):
    """所有终止结果的基类。"""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
    )

    kind: OutcomeKind

    @property
    def exit_code(self) -> int:
        """控制进程应使用的退出码。"""
        return EXIT_FAILURE

    @property
    def is_error_report(self) -> bool:
        """摘要是否写到控制进程自己的 stderr。"""
        return False

    def summary(self) -> str:
        """一行摘要文本（不含颜色标记和换行）。"""
        raise NotImplementedError


class Exited(TerminationOutcomeBase):
    """正常退出。"""

    kind: Literal[OutcomeKind.EXITED] = OutcomeKind.EXITED
    code: int = Field(ge=0, le=255)

    @property
    def exit_code(self) -> int:
        return self.code

    def summary(self) -> str:
        return f"Exited with status {self.code}"


class Signaled(TerminationOutcomeBase):
    """被信号终止。signal_name 为 None 表示映射表里没有这个编号。"""

    kind: Literal[OutcomeKind.SIGNALED] = OutcomeKind.SIGNALED
    signal_number: int = Field(gt=0)
    signal_name: str | None = None

    def summary(self) -> str:
        if self.signal_name:
            return f"Killed by signal {self.signal_number} ({self.signal_name})"
        return f"Killed by signal {self.signal_number}"


class Unrecognized(TerminationOutcomeBase):
    """waitpid() 返回了既不是退出也不是信号终止的状态。"""

    kind: Literal[OutcomeKind.UNRECOGNIZED] = OutcomeKind.UNRECOGNIZED
    raw_status: int
    pid: int

    @property
    def is_error_report(self) -> bool:
        return True

    def summary(self) -> str:
        return f"Unknown status {self.raw_status} returned from wait() for pid {self.pid}"


# 统一联合类型
TerminationOutcome = Exited | Signaled | Unrecognized
