"""
示例模块 - 外部 Thenable 的参考实现
"""

from .thenables import (
    SyncThenable,
    DoubleCallThenable,
    ThrowAfterResolveThenable,
    ThrowingThenable,
    ThrowingGetterThenable,
    CountingGetterThenable,
    NonCallableThen,
    ScheduledThenable,
)

__all__ = [
    "SyncThenable",
    "DoubleCallThenable",
    "ThrowAfterResolveThenable",
    "ThrowingThenable",
    "ThrowingGetterThenable",
    "CountingGetterThenable",
    "NonCallableThen",
    "ScheduledThenable",
]
