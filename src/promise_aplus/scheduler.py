"""
延迟执行调度器

- AsyncioScheduler: 基于事件循环 call_soon 的默认调度器
- ManualScheduler: 手动驱动的 FIFO 队列，用于测试与嵌入式事件循环
"""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Callable, Deque, Optional

from .common import LogChannel, get_logger
from .types import PromiseError

Task = Callable[[], None]


class AsyncioScheduler:
    """基于 asyncio 事件循环的调度器

    未绑定事件循环时使用 defer() 调用时正在运行的循环。
    没有运行中的循环时，任务进入积压队列，
    在下一次从运行中的循环内 defer() 时先于新任务提交。
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop
        self._backlog: Deque[Task] = deque()

    @property
    def backlog(self) -> int:
        """积压任务数量"""
        return len(self._backlog)

    def defer(self, task: Task) -> None:
        loop = self._current_loop()
        if loop is None:
            self._backlog.append(task)
            return
        if self._backlog:
            self.flush_backlog(loop)
        loop.call_soon(task)

    def flush_backlog(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> int:
        """将积压任务按顺序提交到事件循环，返回提交数量"""
        target = loop or self._current_loop()
        if target is None:
            raise PromiseError("没有可用的事件循环来提交积压任务")

        count = 0
        while self._backlog:
            target.call_soon(self._backlog.popleft())
            count += 1
        if count:
            get_logger(LogChannel.SCHEDULER).debug(f"提交积压任务 {count} 个")
        return count

    def _current_loop(self) -> Optional[asyncio.AbstractEventLoop]:
        if self._loop is not None and not self._loop.is_closed():
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError:
            return None

    def __repr__(self) -> str:
        return f"AsyncioScheduler(loop={self._loop!r}, backlog={len(self._backlog)})"


class ManualScheduler:
    """手动驱动的 FIFO 调度器

    defer() 只入队，任务由 run_once()/run_until_idle() 显式执行。
    单个任务抛出的异常会被记录，不影响后续任务。
    """

    def __init__(self, max_tasks: int = 100000):
        if max_tasks <= 0:
            raise ValueError("max_tasks 必须大于0")
        self.max_tasks = max_tasks
        self._tasks: Deque[Task] = deque()
        self.executed = 0

    @property
    def pending(self) -> int:
        """待执行任务数量"""
        return len(self._tasks)

    def defer(self, task: Task) -> None:
        self._tasks.append(task)

    def run_once(self) -> bool:
        """执行队首任务，队列为空时返回 False"""
        if not self._tasks:
            return False
        task = self._tasks.popleft()
        self.executed += 1
        try:
            task()
        except Exception as exc:
            get_logger(LogChannel.SCHEDULER).error(f"延迟任务异常: {exc!r}", exc_info=True)
        return True

    def run_until_idle(self) -> int:
        """执行任务直到队列为空（包括执行过程中新入队的任务），返回执行数量"""
        count = 0
        while self.run_once():
            count += 1
            if count >= self.max_tasks and self._tasks:
                raise PromiseError(f"调度器在 {self.max_tasks} 个任务后仍未空闲")
        return count

    def __repr__(self) -> str:
        return f"ManualScheduler(pending={len(self._tasks)}, executed={self.executed})"
