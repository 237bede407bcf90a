"""
Promise 状态机核心 - 状态单元 + 回调队列

每个 PromiseCore 只允许一次 pending -> fulfilled/rejected 迁移。
回调登记按 then() 调用顺序入队，状态确定后统一排空：
- 可调用的处理函数交给调度器异步执行，返回值再走解析过程
- 不可调用的处理函数直接把状态透传给派生 Promise

透传会触发派生 Promise 的排空，排空统一经由工作表迭代执行，
链再长也不会加深调用栈。
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from collections import deque
from typing import Any, Deque, List, Optional

from .common import LogChannel, get_logger, get_settings
from .interfaces import Scheduler
from .types import (
    PromiseState,
    Settlement,
    PromiseSnapshot,
    InvalidStateError,
)


@dataclass
class _Registration:
    """一次 then() 调用对应的回调登记"""
    on_fulfilled: Any
    on_rejected: Any
    derived: "PromiseCore"
    finally_style: bool = False


class PromiseCore:
    """
    Promise/A+ 状态机

    只通过 then()、settle() 与查询接口操作；内部字段不对外暴露。
    """

    def __init__(self, *, scheduler: Optional[Scheduler] = None):
        self._state = PromiseState.PENDING
        self._settlement: Optional[Settlement] = None
        self._queue: List[_Registration] = []
        self._scheduler = scheduler if scheduler is not None else get_settings().scheduler

    # ------------------------------------------------------------------
    # 回调登记
    # ------------------------------------------------------------------

    def then(self, on_fulfilled: Any = None, on_rejected: Any = None) -> "PromiseCore":
        """登记一对回调，同步返回派生 Promise

        不可调用的参数视为未提供，value/reason 原样透传。
        """
        return self._attach(on_fulfilled, on_rejected)

    def _attach(
        self,
        on_fulfilled: Any,
        on_rejected: Any,
        finally_style: bool = False,
        derived: Optional["PromiseCore"] = None,
    ) -> "PromiseCore":
        if derived is None:
            derived = self._derive()
        self._queue.append(_Registration(on_fulfilled, on_rejected, derived, finally_style))
        # 已确定状态时立即排空，服务于晚到的登记
        self._drain()
        return derived

    def _derive(self) -> "PromiseCore":
        """创建派生 Promise，继承当前调度器"""
        return type(self)(scheduler=self._scheduler)

    def _drain(self) -> None:
        _worklist.submit(self)

    def _drain_once(self) -> None:
        settlement = self._settlement
        if settlement is None:
            return

        # 先换出队列，任何回调副作用都不会重复处理同一条登记
        queue, self._queue = self._queue, []
        fulfilled = settlement.state is PromiseState.FULFILLED
        for registration in queue:
            handler = registration.on_fulfilled if fulfilled else registration.on_rejected
            if callable(handler):
                self._scheduler.defer(partial(_invoke_handler, handler, settlement, registration))
            else:
                settle(registration.derived, settlement)

    # ------------------------------------------------------------------
    # 查询接口
    # ------------------------------------------------------------------

    @property
    def state(self) -> PromiseState:
        return self._state

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    def is_pending(self) -> bool:
        return self._state is PromiseState.PENDING

    def is_fulfilled(self) -> bool:
        return self._state is PromiseState.FULFILLED

    def is_rejected(self) -> bool:
        return self._state is PromiseState.REJECTED

    def is_settled(self) -> bool:
        return self._state is not PromiseState.PENDING

    @property
    def value(self) -> Any:
        """兑现值，仅在 fulfilled 状态可读"""
        if self._state is not PromiseState.FULFILLED:
            raise InvalidStateError(f"Promise 处于 {self._state.value} 状态，没有 value", promise=self)
        return self._settlement.payload

    @property
    def reason(self) -> Any:
        """拒绝原因，仅在 rejected 状态可读"""
        if self._state is not PromiseState.REJECTED:
            raise InvalidStateError(f"Promise 处于 {self._state.value} 状态，没有 reason", promise=self)
        return self._settlement.payload

    def inspect(self) -> PromiseSnapshot:
        """非破坏性地读取当前状态"""
        payload = self._settlement.payload if self._settlement is not None else None
        return PromiseSnapshot(state=self._state, payload=payload, queued_callbacks=len(self._queue))

    def __await__(self):
        from .sync_adapter import to_future
        return to_future(self).__await__()

    def __repr__(self) -> str:
        name = type(self).__name__
        if self._settlement is None:
            return f"<{name} pending>"
        return f"<{name} {self._state.value}: {self._settlement.payload!r}>"


# ----------------------------------------------------------------------
# 排空工作表
# ----------------------------------------------------------------------

class _DrainWorklist:
    """待排空 Promise 的 FIFO 工作表

    最外层的 submit() 负责循环处理；循环期间的嵌套 submit() 只入队，
    因此透传链的排空是迭代而非递归。
    """

    def __init__(self):
        self._pending: Deque[PromiseCore] = deque()
        self._running = False

    def submit(self, promise: PromiseCore) -> None:
        self._pending.append(promise)
        if self._running:
            return
        self._running = True
        try:
            while self._pending:
                self._pending.popleft()._drain_once()
        finally:
            self._running = False


_worklist = _DrainWorklist()


# ----------------------------------------------------------------------
# 状态迁移
# ----------------------------------------------------------------------

def settle(promise: PromiseCore, settlement: Settlement) -> None:
    """pending 状态下写入结果并排空队列，其余状态静默忽略"""
    if promise._state is not PromiseState.PENDING:
        return
    promise._state = settlement.state
    promise._settlement = settlement
    if get_settings().trace:
        get_logger(LogChannel.CORE).debug(f"{promise!r} 状态确定")
    promise._drain()


def fulfill(promise: PromiseCore, value: Any) -> None:
    settle(promise, Settlement.fulfilled(value))


def reject(promise: PromiseCore, reason: Any) -> None:
    settle(promise, Settlement.rejected(reason))


def _invoke_handler(handler: Any, settlement: Settlement, registration: _Registration) -> None:
    """在延迟任务中执行处理函数，并把结果交给派生 Promise"""
    from .resolution import resolve

    derived = registration.derived
    try:
        x = handler(settlement.payload)
    except Exception as exc:
        get_logger(LogChannel.CORE).debug(f"回调异常，拒绝派生 Promise: {exc!r}")
        reject(derived, exc)
        return

    if registration.finally_style:
        # finally 语义：忽略返回值，透传原始结果
        settle(derived, settlement)
    else:
        resolve(derived, x)
