"""
公用工具组件 - 全局配置与日志工具
"""

import logging
from typing import Optional, Any
from dataclasses import dataclass, field, fields, replace
from enum import Enum

from .interfaces import Scheduler


DEFAULT_LOGGER_NAME = "promise_aplus"


class LogChannel(Enum):
    """日志通道"""
    CORE = "core"               # 状态机与回调队列
    RESOLVE = "resolve"         # 解析过程
    SCHEDULER = "scheduler"     # 延迟执行
    BRIDGE = "bridge"           # asyncio 桥接


def _default_scheduler() -> Scheduler:
    from .scheduler import AsyncioScheduler
    return AsyncioScheduler()


@dataclass
class PromiseSettings:
    """全局配置"""
    scheduler: Scheduler = field(default_factory=_default_scheduler)
    trace: bool = False                        # 是否记录每次状态迁移
    logger_name: str = DEFAULT_LOGGER_NAME

    def __post_init__(self):
        """验证配置参数"""
        if not isinstance(self.scheduler, Scheduler):
            raise TypeError("scheduler 必须实现 defer(task) 方法")
        if not isinstance(self.trace, bool):
            raise TypeError("trace 必须是布尔值")
        if not self.logger_name:
            raise ValueError("logger_name 不能为空")


_settings: Optional[PromiseSettings] = None


def get_settings() -> PromiseSettings:
    """获取当前全局配置（首次调用时惰性创建）"""
    global _settings
    if _settings is None:
        _settings = PromiseSettings()
    return _settings


def configure(**overrides: Any) -> PromiseSettings:
    """更新全局配置，返回新的配置对象

    只影响之后新建的 Promise；已创建的 Promise 保留各自的调度器。
    """
    global _settings
    known = {f.name for f in fields(PromiseSettings)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise TypeError(f"未知配置项: {', '.join(unknown)}")
    _settings = replace(get_settings(), **overrides)
    return _settings


def reset_settings() -> None:
    """恢复默认配置"""
    global _settings
    _settings = None


def convert_settings(settings: Any) -> PromiseSettings:
    """
    转换任意配置对象为 PromiseSettings

    支持 PromiseSettings、字典以及带有同名属性的对象
    """
    if isinstance(settings, PromiseSettings):
        return settings

    defaults = get_settings()

    # 处理字典格式
    if isinstance(settings, dict):
        return PromiseSettings(
            scheduler=settings.get("scheduler", defaults.scheduler),
            trace=settings.get("trace", defaults.trace),
            logger_name=settings.get("logger_name", defaults.logger_name),
        )

    # 处理对象格式（假设有相应属性）
    return PromiseSettings(
        scheduler=getattr(settings, "scheduler", defaults.scheduler),
        trace=getattr(settings, "trace", defaults.trace),
        logger_name=getattr(settings, "logger_name", defaults.logger_name),
    )


class PromiseLogger:
    """按通道划分的日志器

    每个通道对应根日志器下的一个子日志器（如 ``promise_aplus.resolve``），
    可以用标准 logging 配置单独调整某个通道的级别。
    """

    def __init__(self, logger: Optional[logging.Logger] = None, channel: LogChannel = LogChannel.CORE):
        base = logger or self._create_default_logger()
        self.channel = channel
        self.logger = base.getChild(channel.value)

    def _create_default_logger(self) -> logging.Logger:
        logger = logging.getLogger(get_settings().logger_name)
        if not logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
            logger.addHandler(handler)
            if logger.level == logging.NOTSET:
                logger.setLevel(logging.INFO)
        return logger

    def debug(self, message: str, **kwargs):
        self.logger.debug(message, **kwargs)

    def info(self, message: str, **kwargs):
        self.logger.info(message, **kwargs)

    def warning(self, message: str, **kwargs):
        self.logger.warning(message, **kwargs)

    def error(self, message: str, **kwargs):
        self.logger.error(message, **kwargs)


def get_logger(channel: LogChannel) -> PromiseLogger:
    """按通道获取日志器"""
    return PromiseLogger(channel=channel)
