"""
Promise A+ - 可互操作的异步结果容器

符合 Promises/A+ 规范的 then() 语义，能与任何暴露可调用 ``then`` 的外部实现互操作。

主要功能:
- Promise 状态机与有序回调队列
- 解析过程：展开嵌套 Promise 与外部 Thenable
- 可注入的延迟调度器（asyncio / 手动驱动）
- 便捷层：执行器、catch、finally、all、race
- asyncio 桥接与同步等待
"""

# 主要API导出
from .core import PromiseCore, settle, fulfill, reject
from .resolution import resolve, ResolutionLatch
from .promise import Promise, Deferred, deferred
from .types import (
    PromiseState,
    Settlement,
    PromiseSnapshot,
    PromiseError,
    CyclicResolutionError,
    InvalidStateError,
    RejectionError,
    PromiseTimeoutError,
)
from .common import (
    PromiseSettings,
    PromiseLogger,
    LogChannel,
    configure,
    get_settings,
    reset_settings,
    convert_settings,
)
from .interfaces import Scheduler, Thenable
from .scheduler import AsyncioScheduler, ManualScheduler
from .sync_adapter import to_future, from_future, run_sync
from . import examples

__version__ = "1.0.0"
__author__ = "Promise A+ Python Team"

# 主要接口
__all__ = [
    # 核心
    "PromiseCore",
    "Promise",
    "Deferred",
    "deferred",
    "settle",
    "fulfill",
    "reject",
    "resolve",
    "ResolutionLatch",

    # 数据类型
    "PromiseState",
    "Settlement",
    "PromiseSnapshot",

    # 配置与日志
    "PromiseSettings",
    "PromiseLogger",
    "LogChannel",
    "configure",
    "get_settings",
    "reset_settings",
    "convert_settings",

    # 调度
    "Scheduler",
    "Thenable",
    "AsyncioScheduler",
    "ManualScheduler",

    # asyncio 桥接
    "to_future",
    "from_future",
    "run_sync",

    # 示例模块
    "examples",

    # 异常
    "PromiseError",
    "CyclicResolutionError",
    "InvalidStateError",
    "RejectionError",
    "PromiseTimeoutError",
]


def get_version() -> str:
    """获取版本信息"""
    return __version__
