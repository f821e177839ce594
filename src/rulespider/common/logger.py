"""统一日志系统

提供项目统一的日志配置，支持 Rich 格式化输出。
"""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler


# 全局控制台实例
console = Console(stderr=True)

# get_logger 创建过的日志器，以及全局文件输出
_loggers: list[logging.Logger] = []
_file_handlers: list[logging.Handler] = []

# 日志级别映射
LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_log_level() -> int:
    """从环境变量获取日志级别

    Returns:
        日志级别常量
    """
    level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    return LOG_LEVEL_MAP.get(level_str, logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """获取统一配置的日志器

    所有模块应使用此函数获取日志器，以确保统一的格式和输出。

    Args:
        name: 日志器名称，通常使用 __name__

    Returns:
        配置好的日志器实例

    Example:
        >>> from rulespider.common.logger import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("这是一条日志")
    """
    logger = logging.getLogger(name)

    # 避免重复配置
    if logger.handlers:
        return logger

    log_level = get_log_level()
    logger.setLevel(log_level)

    # XPath 中常见的 [..] 片段会被 Rich markup 吞掉，因此关闭 markup
    rich_handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
        tracebacks_show_locals=os.getenv("LOG_SHOW_LOCALS", "false").lower() == "true",
        markup=False,
    )
    rich_handler.setLevel(log_level)

    formatter = logging.Formatter(
        "%(message)s",
        datefmt="[%X]",
    )
    rich_handler.setFormatter(formatter)

    logger.addHandler(rich_handler)
    for handler in _file_handlers:
        logger.addHandler(handler)

    # 阻止日志传播到父级
    logger.propagate = False

    _loggers.append(logger)
    return logger


def _build_file_handler(log_file: str, level: int) -> logging.Handler:
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(formatter)
    return file_handler


def setup_file_logging(
    logger: logging.Logger,
    log_file: str,
    level: int = logging.DEBUG,
) -> None:
    """为日志器添加文件输出

    Args:
        logger: 日志器实例
        log_file: 日志文件路径
        level: 文件日志级别
    """
    logger.addHandler(_build_file_handler(log_file, level))


def enable_file_logging(log_file: str, level: int = logging.DEBUG) -> logging.Handler:
    """为所有日志器（包括之后创建的）添加同一个文件输出

    模块日志器不向父级传播，所以文件输出需要逐个挂载。

    Args:
        log_file: 日志文件路径
        level: 文件日志级别

    Returns:
        新建的文件 handler，可交给 disable_file_logging 移除
    """
    file_handler = _build_file_handler(log_file, level)
    _file_handlers.append(file_handler)
    for logger in _loggers:
        logger.addHandler(file_handler)
    return file_handler


def disable_file_logging(handler: logging.Handler) -> None:
    """从所有日志器上移除并关闭文件输出"""
    if handler in _file_handlers:
        _file_handlers.remove(handler)
    for logger in _loggers:
        logger.removeHandler(handler)
    handler.close()
