"""
调度器测试 - 手动调度器与 asyncio 调度器
"""

import asyncio

import pytest

from promise_aplus import (
    AsyncioScheduler,
    ManualScheduler,
    Promise,
    PromiseError,
    Scheduler,
    run_sync,
)


def test_schedulers_implement_protocol():
    assert isinstance(ManualScheduler(), Scheduler)
    assert isinstance(AsyncioScheduler(), Scheduler)


def test_manual_scheduler_fifo_including_nested_tasks():
    scheduler = ManualScheduler()
    order = []

    def outer():
        order.append("outer")
        scheduler.defer(lambda: order.append("nested"))

    scheduler.defer(outer)
    scheduler.defer(lambda: order.append("second"))
    assert scheduler.pending == 2

    executed = scheduler.run_until_idle()
    assert executed == 3
    assert order == ["outer", "second", "nested"]
    assert scheduler.pending == 0


def test_manual_scheduler_isolates_task_failures():
    """单个任务失败不影响后续任务"""
    scheduler = ManualScheduler()
    order = []

    def failing():
        raise RuntimeError("task failed")

    scheduler.defer(lambda: order.append(1))
    scheduler.defer(failing)
    scheduler.defer(lambda: order.append(3))
    scheduler.run_until_idle()

    assert order == [1, 3]
    assert scheduler.executed == 3


def test_manual_scheduler_task_limit():
    scheduler = ManualScheduler(max_tasks=5)

    def forever():
        scheduler.defer(forever)

    scheduler.defer(forever)
    with pytest.raises(PromiseError):
        scheduler.run_until_idle()


def test_manual_scheduler_validation():
    with pytest.raises(ValueError):
        ManualScheduler(max_tasks=0)


def test_asyncio_scheduler_runs_handlers_on_loop():
    async def runner():
        scheduler = AsyncioScheduler()
        calls = []
        p = Promise.resolved(1, scheduler=scheduler)
        derived = p.then(lambda v: calls.append(v) or v + 1)

        assert calls == []
        value = await derived
        assert calls == [1]
        assert value == 2

    asyncio.run(runner())


def test_asyncio_scheduler_with_bound_loop():
    loop = asyncio.new_event_loop()
    try:
        scheduler = AsyncioScheduler(loop)
        p = Promise.resolved("bound", scheduler=scheduler)
        calls = []
        p.then(calls.append)

        assert scheduler.backlog == 0
        loop.run_until_complete(asyncio.sleep(0))
        assert calls == ["bound"]
    finally:
        loop.close()


def test_asyncio_scheduler_backlog_without_running_loop():
    """没有运行中的事件循环时任务进入积压队列，之后按顺序执行"""
    scheduler = AsyncioScheduler()
    p = Promise.resolved(2, scheduler=scheduler)
    derived = p.then(lambda v: v * 2)
    assert scheduler.backlog == 1
    assert derived.is_pending()

    assert run_sync(derived) == 4
    assert scheduler.backlog == 0


def test_asyncio_scheduler_flush_requires_loop():
    scheduler = AsyncioScheduler()
    scheduler.defer(lambda: None)
    with pytest.raises(PromiseError):
        scheduler.flush_backlog()


def test_backlog_runs_before_new_tasks():
    scheduler = AsyncioScheduler()
    order = []
    scheduler.defer(lambda: order.append("backlog"))

    async def runner():
        scheduler.defer(lambda: order.append("new"))
        await asyncio.sleep(0)

    asyncio.run(runner())
    assert order == ["backlog", "new"]
