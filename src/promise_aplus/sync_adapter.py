"""
asyncio 桥接与同步适配器

- to_future(): Promise -> asyncio.Future
- from_future(): asyncio.Future / 协程 -> Promise
- run_sync(): 在同步代码中阻塞等待 Promise 结果
"""

import asyncio
import time
from typing import Any, Awaitable, Optional

from .common import get_settings
from .core import PromiseCore, reject
from .interfaces import Scheduler
from .promise import Promise
from .resolution import resolve
from .scheduler import AsyncioScheduler, ManualScheduler
from .types import PromiseError, PromiseTimeoutError, RejectionError, reason_to_exception


def _flush_backlogs(promise: PromiseCore, loop: asyncio.AbstractEventLoop) -> None:
    """把循环外积压的任务提交到 loop，链上较早的回调才能按序执行"""
    seen = set()
    for scheduler in (promise.scheduler, get_settings().scheduler):
        if not isinstance(scheduler, AsyncioScheduler) or id(scheduler) in seen:
            continue
        seen.add(id(scheduler))
        if scheduler.backlog:
            scheduler.flush_backlog(loop)


def to_future(promise: PromiseCore, loop: Optional[asyncio.AbstractEventLoop] = None) -> asyncio.Future:
    """把 Promise 的结果转交给一个 asyncio.Future"""
    loop = loop or asyncio.get_running_loop()
    _flush_backlogs(promise, loop)
    future = loop.create_future()

    def on_fulfilled(value: Any) -> None:
        if not future.done():
            future.set_result(value)

    def on_rejected(reason: Any) -> None:
        if future.done():
            return
        if isinstance(reason, asyncio.CancelledError):
            future.cancel()
            return
        exc = reason_to_exception(reason, promise)
        # Future 不接受 StopIteration
        if isinstance(exc, StopIteration):
            exc = RejectionError(reason, promise=promise)
        future.set_exception(exc)

    promise.then(on_fulfilled, on_rejected)
    return future


def from_future(awaitable: Awaitable[Any], scheduler: Optional[Scheduler] = None) -> Promise:
    """用 asyncio.Future（或协程）的结果确定一个新 Promise

    协程会被包装为 Task，因此需要在运行中的事件循环内调用。
    取消视为以 CancelledError 拒绝。
    """
    future = asyncio.ensure_future(awaitable)
    promise = Promise(scheduler=scheduler)

    def on_done(fut: asyncio.Future) -> None:
        if fut.cancelled():
            reject(promise, asyncio.CancelledError())
            return
        exc = fut.exception()
        if exc is not None:
            reject(promise, exc)
        else:
            resolve(promise, fut.result())

    future.add_done_callback(on_done)
    return promise


class SyncPromiseAdapter:
    """同步等待适配器 - 根据调度器类型选择驱动方式"""

    def run(self, promise: PromiseCore, timeout: Optional[float] = None) -> Any:
        """阻塞直到 promise 确定，返回 value 或抛出 reason"""
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            raise PromiseError("run_sync() 不能在运行中的事件循环内调用，请直接 await", promise=promise)

        scheduler = promise.scheduler
        if isinstance(scheduler, ManualScheduler):
            # 手动调度器：在当前线程直接驱动
            return self._drive_manual(promise, scheduler, timeout)
        return asyncio.run(self._wait(promise, timeout))

    def _drive_manual(self, promise: PromiseCore, scheduler: ManualScheduler, timeout: Optional[float]) -> Any:
        deadline = None if timeout is None else time.monotonic() + timeout
        while promise.is_pending() and scheduler.run_once():
            if deadline is not None and time.monotonic() >= deadline:
                raise PromiseTimeoutError(f"等待 Promise 超时（{timeout}s）", promise=promise)
        if promise.is_pending():
            raise PromiseError("调度器已空闲，但 Promise 仍未确定", promise=promise)
        if promise.is_fulfilled():
            return promise.value
        raise reason_to_exception(promise.reason, promise)

    async def _wait(self, promise: PromiseCore, timeout: Optional[float]) -> Any:
        if timeout is None:
            return await promise
        try:
            return await asyncio.wait_for(to_future(promise), timeout)
        except asyncio.TimeoutError:
            raise PromiseTimeoutError(f"等待 Promise 超时（{timeout}s）", promise=promise) from None


# 全局适配器实例
_sync_adapter = SyncPromiseAdapter()

run_sync = _sync_adapter.run
