"""
Promise 便捷层

在状态机核心之上提供：
- 执行器构造 Promise(executor)
- catch() / finally_()
- Promise.resolved() / Promise.rejected()
- 聚合组合子 Promise.all() / Promise.race()
- deferred() 适配器
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional

from .core import PromiseCore, reject
from .interfaces import Scheduler
from .resolution import resolve

Executor = Callable[[Callable[[Any], None], Callable[[Any], None]], Any]


class Promise(PromiseCore):
    """带执行器的 Promise

    executor 会被同步调用一次，参数为 (resolve_fn, reject_fn)；
    executor 抛出的异常转为拒绝（已确定状态时忽略）。
    """

    def __init__(self, executor: Optional[Executor] = None, *, scheduler: Optional[Scheduler] = None):
        super().__init__(scheduler=scheduler)
        if executor is None:
            return

        def resolve_fn(value: Any = None) -> None:
            resolve(self, value)

        def reject_fn(reason: Any = None) -> None:
            reject(self, reason)

        try:
            executor(resolve_fn, reject_fn)
        except Exception as exc:
            reject(self, exc)

    def catch(self, on_rejected: Any = None) -> "Promise":
        """只处理拒绝"""
        return self.then(None, on_rejected)

    def finally_(self, on_finally: Any = None) -> "Promise":
        """无论结果如何都执行 on_finally()，原始结果原样透传"""
        if not callable(on_finally):
            return self.then(None, None)

        def handler(_payload: Any) -> None:
            on_finally()

        return self._attach(handler, handler, finally_style=True)

    # ------------------------------------------------------------------
    # 工厂方法
    # ------------------------------------------------------------------

    @classmethod
    def resolved(cls, value: Any = None, *, scheduler: Optional[Scheduler] = None) -> "Promise":
        """以 value 解析一个新 Promise（Thenable 会被展开）"""
        promise = cls(scheduler=scheduler)
        resolve(promise, value)
        return promise

    @classmethod
    def rejected(cls, reason: Any = None, *, scheduler: Optional[Scheduler] = None) -> "Promise":
        """创建一个已拒绝的 Promise"""
        promise = cls(scheduler=scheduler)
        reject(promise, reason)
        return promise

    @classmethod
    def all(cls, items: Iterable[Any], *, scheduler: Optional[Scheduler] = None) -> "Promise":
        """全部兑现时按输入顺序兑现结果列表，任一拒绝即拒绝"""
        aggregate = cls(scheduler=scheduler)
        entries = list(items)

        # 空输入单独处理，立即兑现
        if not entries:
            resolve(aggregate, [])
            return aggregate

        results: List[Any] = [None] * len(entries)
        remaining = [len(entries)]

        def on_item_fulfilled(index: int) -> Callable[[Any], None]:
            def handler(value: Any) -> None:
                results[index] = value
                remaining[0] -= 1
                if remaining[0] == 0:
                    resolve(aggregate, list(results))
            return handler

        def on_item_rejected(reason: Any) -> None:
            reject(aggregate, reason)

        for index, item in enumerate(entries):
            cls.resolved(item, scheduler=aggregate.scheduler).then(
                on_item_fulfilled(index), on_item_rejected
            )
        return aggregate

    @classmethod
    def race(cls, items: Iterable[Any], *, scheduler: Optional[Scheduler] = None) -> "Promise":
        """以最先确定的输入结果确定，之后的结果被忽略；空输入永远 pending"""
        aggregate = cls(scheduler=scheduler)

        def on_item_fulfilled(value: Any) -> None:
            resolve(aggregate, value)

        def on_item_rejected(reason: Any) -> None:
            reject(aggregate, reason)

        for item in items:
            cls.resolved(item, scheduler=aggregate.scheduler).then(on_item_fulfilled, on_item_rejected)
        return aggregate


@dataclass(frozen=True)
class Deferred:
    """Promise 与其 resolve/reject 函数的组合"""
    promise: Promise
    resolve: Callable[[Any], None]
    reject: Callable[[Any], None]


def deferred(scheduler: Optional[Scheduler] = None) -> Deferred:
    """创建一个由外部驱动的 Promise"""
    promise = Promise(scheduler=scheduler)

    def resolve_fn(value: Any = None) -> None:
        resolve(promise, value)

    def reject_fn(reason: Any = None) -> None:
        reject(promise, reason)

    return Deferred(promise=promise, resolve=resolve_fn, reject=reject_fn)
