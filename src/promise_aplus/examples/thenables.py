"""
示例 Thenable - 模拟独立实现的外部 Promise，用于演示和测试
"""

from typing import Any, Callable, List, Optional

from ..interfaces import Scheduler


class SyncThenable:
    """行为良好的 Thenable：在 then() 内同步兑现或拒绝"""

    def __init__(self, value: Any = None, *, reject: bool = False):
        self.value = value
        self.reject = reject
        self.call_count = 0

    def then(self, on_fulfilled: Optional[Callable] = None, on_rejected: Optional[Callable] = None) -> None:
        self.call_count += 1
        if self.reject:
            on_rejected(self.value)
        else:
            on_fulfilled(self.value)


class DoubleCallThenable:
    """违反约定的 Thenable：依次调用 calls 中列出的回调"""

    def __init__(self, calls: List[tuple]):
        # calls 形如 [("resolve", 1), ("reject", "x"), ("resolve", 2)]
        self.calls = calls

    def then(self, on_fulfilled: Optional[Callable] = None, on_rejected: Optional[Callable] = None) -> None:
        for kind, payload in self.calls:
            if kind == "resolve":
                on_fulfilled(payload)
            else:
                on_rejected(payload)


class ThrowAfterResolveThenable:
    """先兑现再抛异常的 Thenable"""

    def __init__(self, value: Any, error: Exception):
        self.value = value
        self.error = error

    def then(self, on_fulfilled: Optional[Callable] = None, on_rejected: Optional[Callable] = None) -> None:
        if on_fulfilled is not None:
            on_fulfilled(self.value)
        raise self.error


class ThrowingThenable:
    """then() 直接抛异常的 Thenable"""

    def __init__(self, error: Exception):
        self.error = error

    def then(self, on_fulfilled: Optional[Callable] = None, on_rejected: Optional[Callable] = None) -> None:
        raise self.error


class ThrowingGetterThenable:
    """读取 then 属性即抛异常"""

    def __init__(self, error: Exception):
        self.error = error
        self.reads = 0

    @property
    def then(self):
        self.reads += 1
        raise self.error


class CountingGetterThenable:
    """then 属性的 getter 带副作用：记录读取次数，第二次起返回不可调用值"""

    def __init__(self, value: Any):
        self.value = value
        self.reads = 0

    @property
    def then(self):
        self.reads += 1
        if self.reads > 1:
            return None
        return self._then

    def _then(self, on_fulfilled: Optional[Callable] = None, on_rejected: Optional[Callable] = None) -> None:
        on_fulfilled(self.value)


class NonCallableThen:
    """then 属性不可调用，应当作普通值"""

    def __init__(self, then: Any = 5):
        self.then = then


class ScheduledThenable:
    """通过调度器延后兑现的 Thenable"""

    def __init__(self, scheduler: Scheduler, value: Any = None, *, reject: bool = False):
        self.scheduler = scheduler
        self.value = value
        self.reject = reject

    def then(self, on_fulfilled: Optional[Callable] = None, on_rejected: Optional[Callable] = None) -> None:
        if self.reject:
            self.scheduler.defer(lambda: on_rejected(self.value))
        else:
            self.scheduler.defer(lambda: on_fulfilled(self.value))
