"""共享测试夹具"""

import pytest

from promise_aplus import ManualScheduler, reset_settings


@pytest.fixture(autouse=True)
def clean_settings():
    """每个测试前后恢复默认全局配置"""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def scheduler():
    """手动驱动的调度器，测试中显式 run_until_idle()"""
    return ManualScheduler()
