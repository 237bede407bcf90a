"""
Promise 解析过程

把任意产出值 x 归一为 Promise 的最终结果，逐层展开嵌套的 Promise
以及只满足 ``then`` 鸭子类型约定的外部 Thenable。
"""

from __future__ import annotations

from typing import Any, Callable, Tuple

from .common import LogChannel, get_logger
from .core import PromiseCore, fulfill, reject
from .types import CyclicResolutionError

# 这些类型的值不会读取 then 属性，直接作为普通值兑现；
# 类对象不在其中，带可调用 then（如 classmethod）的类同样按 Thenable 采纳
PLAIN_VALUE_TYPES: Tuple[type, ...] = (type(None), bool, int, float, complex, str, bytes, bytearray)

_MISSING = object()


class ResolutionLatch:
    """一次性闩锁，由 resolve_promise / reject_promise 两个回调共享"""

    __slots__ = ("_claimed",)

    def __init__(self):
        self._claimed = False

    @property
    def claimed(self) -> bool:
        return self._claimed

    def claim(self) -> bool:
        """首次调用返回 True，之后一律返回 False"""
        if self._claimed:
            return False
        self._claimed = True
        return True


def resolve(promise: PromiseCore, x: Any) -> None:
    """Promise 解析过程 [[Resolve]](promise, x)"""

    if x is promise:
        get_logger(LogChannel.RESOLVE).debug(f"{promise!r} 以自身解析，拒绝")
        reject(promise, CyclicResolutionError("Promise 不能以自身解析", promise=promise))
        return

    if isinstance(x, PromiseCore):
        # 挂到 x 的队列上，x 的结果原样透传过来
        x._attach(None, None, derived=promise)
        return

    if isinstance(x, PLAIN_VALUE_TYPES):
        fulfill(promise, x)
        return

    # then 属性只读取一次，getter 可能有副作用或抛异常
    try:
        then = x.then
    except AttributeError as exc:
        # 类型上声明了 then 却读取失败，说明是 getter 抛出的异常
        if not hasattr(type(x), "then"):
            then = _MISSING
        else:
            reject(promise, exc)
            return
    except Exception as exc:
        reject(promise, exc)
        return

    if then is _MISSING or not callable(then):
        fulfill(promise, x)
        return

    _adopt_thenable(promise, x, then)


def _adopt_thenable(promise: PromiseCore, x: Any, then: Callable[..., Any]) -> None:
    logger = get_logger(LogChannel.RESOLVE)
    latch = ResolutionLatch()

    def resolve_promise(y: Any = None) -> None:
        if latch.claim():
            resolve(promise, y)

    def reject_promise(r: Any = None) -> None:
        if latch.claim():
            reject(promise, r)

    logger.debug(f"采纳外部 Thenable: {type(x).__name__}")
    try:
        then(resolve_promise, reject_promise)
    except Exception as exc:
        if latch.claim():
            reject(promise, exc)
        else:
            logger.debug(f"回调已触发，忽略 then() 的迟到异常: {exc!r}")
