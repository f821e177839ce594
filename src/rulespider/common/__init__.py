"""Common模块 - 公共工具和基础设施

该模块提供：
- 全局配置管理
- 常量定义
- 日志系统
- 异常类
- 输入验证
"""

from .config import config, Config
from .logger import get_logger, console
from .exceptions import (
    RuleSpiderError,
    ExtractionError,
    MalformedRuleSetError,
    DocumentError,
    DocumentLoadError,
    PageLoadError,
    ValidationError,
    URLValidationError,
    StorageError,
    ConfigError,
)
from .constants import (
    DEFAULT_ATTRIBUTE,
    DEFAULT_OUTPUT_FORMAT,
    DEFAULT_SELECTOR_MAX_DEPTH,
    OUTPUT_FORMATS,
)

__all__ = [
    # 配置
    "config",
    "Config",
    # 日志
    "get_logger",
    "console",
    # 异常
    "RuleSpiderError",
    "ExtractionError",
    "MalformedRuleSetError",
    "DocumentError",
    "DocumentLoadError",
    "PageLoadError",
    "ValidationError",
    "URLValidationError",
    "StorageError",
    "ConfigError",
    # 常量
    "DEFAULT_ATTRIBUTE",
    "DEFAULT_OUTPUT_FORMAT",
    "DEFAULT_SELECTOR_MAX_DEPTH",
    "OUTPUT_FORMATS",
]
