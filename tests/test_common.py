"""Settings and logging tests."""

import logging
from types import SimpleNamespace

import pytest

from promise_aplus import (
    AsyncioScheduler,
    LogChannel,
    ManualScheduler,
    PromiseCore,
    PromiseLogger,
    PromiseSettings,
    configure,
    convert_settings,
    fulfill,
    get_settings,
    get_version,
    resolve,
)
from promise_aplus.examples import SyncThenable


def test_default_settings():
    settings = get_settings()
    assert isinstance(settings.scheduler, AsyncioScheduler)
    assert settings.trace is False
    assert settings.logger_name == "promise_aplus"
    assert get_settings() is settings


def test_configure_changes_default_scheduler():
    scheduler = ManualScheduler()
    configure(scheduler=scheduler)

    p = PromiseCore()
    assert p.scheduler is scheduler
    assert p.then(lambda v: v).scheduler is scheduler


def test_configure_rejects_unknown_options():
    with pytest.raises(TypeError):
        configure(max_depth=3)


def test_settings_validation():
    with pytest.raises(TypeError):
        PromiseSettings(scheduler=object())
    with pytest.raises(TypeError):
        PromiseSettings(trace="yes")
    with pytest.raises(ValueError):
        PromiseSettings(logger_name="")


def test_convert_settings_from_dict_and_object():
    scheduler = ManualScheduler()
    from_dict = convert_settings({"scheduler": scheduler, "trace": True})
    assert from_dict.scheduler is scheduler
    assert from_dict.trace is True
    assert from_dict.logger_name == "promise_aplus"

    from_object = convert_settings(SimpleNamespace(trace=True))
    assert from_object.trace is True
    assert isinstance(from_object.scheduler, AsyncioScheduler)

    existing = PromiseSettings(scheduler=scheduler)
    assert convert_settings(existing) is existing


def test_logger_uses_child_per_channel(caplog):
    """每个通道写入各自的子日志器"""
    logger = PromiseLogger(logging.getLogger("promise_aplus.test"), LogChannel.RESOLVE)
    assert logger.logger.name == "promise_aplus.test.resolve"
    with caplog.at_level(logging.INFO, logger="promise_aplus.test"):
        logger.info("hello")
    assert [(r.name, r.getMessage()) for r in caplog.records] == [("promise_aplus.test.resolve", "hello")]


def test_channel_level_configured_independently(caplog, scheduler):
    """调高 resolve 通道的级别只屏蔽该通道"""
    configure(trace=True)
    logging.getLogger("promise_aplus.resolve").setLevel(logging.WARNING)
    try:
        with caplog.at_level(logging.DEBUG, logger="promise_aplus"):
            p = PromiseCore(scheduler=scheduler)
            resolve(p, SyncThenable(1))
    finally:
        logging.getLogger("promise_aplus.resolve").setLevel(logging.NOTSET)
    names = {r.name for r in caplog.records}
    assert "promise_aplus.core" in names
    assert "promise_aplus.resolve" not in names


def test_trace_logs_transitions(caplog, scheduler):
    configure(trace=True)
    p = PromiseCore(scheduler=scheduler)
    with caplog.at_level(logging.DEBUG, logger="promise_aplus"):
        fulfill(p, 1)
    assert any(r.name == "promise_aplus.core" for r in caplog.records)


def test_thenable_adoption_is_logged(caplog, scheduler):
    p = PromiseCore(scheduler=scheduler)
    with caplog.at_level(logging.DEBUG, logger="promise_aplus"):
        resolve(p, SyncThenable(1))
    records = [r for r in caplog.records if r.name == "promise_aplus.resolve"]
    assert any("SyncThenable" in r.getMessage() for r in records)


def test_version():
    assert get_version() == "1.0.0"
