"""
核心类型定义

包含 Promise 状态机的基础数据结构、枚举类型与异常体系。
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Dict, Any, TYPE_CHECKING
from enum import Enum

if TYPE_CHECKING:
    from .core import PromiseCore


class PromiseState(Enum):
    """Promise 状态枚举"""
    PENDING = "pending"           # 等待中
    FULFILLED = "fulfilled"       # 已兑现
    REJECTED = "rejected"         # 已拒绝


@dataclass(frozen=True)
class Settlement:
    """一次状态迁移：目标状态 + 结果载荷（value 或 reason）"""
    state: PromiseState
    payload: Any = None

    def __post_init__(self):
        if self.state is PromiseState.PENDING:
            raise ValueError("Settlement 的目标状态不能是 pending")

    @classmethod
    def fulfilled(cls, value: Any) -> "Settlement":
        return cls(PromiseState.FULFILLED, value)

    @classmethod
    def rejected(cls, reason: Any) -> "Settlement":
        return cls(PromiseState.REJECTED, reason)


@dataclass(frozen=True)
class PromiseSnapshot:
    """Promise 的只读快照"""
    state: PromiseState
    payload: Any = None
    queued_callbacks: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        data: Dict[str, Any] = {
            "state": self.state.value,
            "queued_callbacks": self.queued_callbacks,
        }
        if self.state is PromiseState.FULFILLED:
            data["value"] = self.payload
        elif self.state is PromiseState.REJECTED:
            data["reason"] = self.payload
        return data


class PromiseError(RuntimeError):
    """Promise 异常基类"""

    def __init__(self, message: str, *, promise: Optional["PromiseCore"] = None):
        super().__init__(message)
        self.promise = promise


class CyclicResolutionError(PromiseError, TypeError):
    """用 Promise 自身解析自身"""


class InvalidStateError(PromiseError):
    """在不匹配的状态下读取 value/reason"""


class RejectionError(PromiseError):
    """包装非异常类型的拒绝原因，便于以异常形式抛出"""

    def __init__(self, reason: Any, *, promise: Optional["PromiseCore"] = None):
        super().__init__(f"Promise rejected with non-exception reason: {reason!r}", promise=promise)
        self.reason = reason


class PromiseTimeoutError(PromiseError, TimeoutError):
    """同步等待超时"""


def reason_to_exception(reason: Any, promise: Optional["PromiseCore"] = None) -> BaseException:
    """将拒绝原因转换为可抛出的异常"""
    if isinstance(reason, BaseException):
        return reason
    return RejectionError(reason, promise=promise)
