"""
调度器与 Thenable 接口定义
"""

from typing import Protocol, runtime_checkable, Any, Callable, Optional


@runtime_checkable
class Scheduler(Protocol):
    """延迟执行协议

    defer() 必须满足：
    - FIFO：先提交的任务先执行
    - 异步：任务绝不在 defer() 调用内部同步执行
    """

    def defer(self, task: Callable[[], None]) -> None:
        ...


@runtime_checkable
class Thenable(Protocol):
    """外部 Thenable 协议

    任何暴露可调用 ``then`` 属性的对象都视为 Thenable。
    这里只用于类型标注和文档，解析过程本身不做协议检查，
    而是只读取一次 ``then`` 属性。
    """

    def then(
        self,
        on_fulfilled: Optional[Callable[[Any], Any]] = None,
        on_rejected: Optional[Callable[[Any], Any]] = None,
    ) -> Any:
        ...
