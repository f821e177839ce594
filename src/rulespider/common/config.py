"""配置管理"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .constants import (
    DEFAULT_FILENAME_PREFIX,
    DEFAULT_OUTPUT_FORMAT,
    DEFAULT_SELECTOR_MAX_DEPTH,
    DEFAULT_TEXT_PREVIEW_CHARS,
)

# 加载 .env 文件
load_dotenv()


class LocatorConfig(BaseModel):
    """定位器配置"""

    # CSS selector 最大追溯层数
    selector_max_depth: int = Field(
        default_factory=lambda: int(
            os.getenv("SELECTOR_MAX_DEPTH", str(DEFAULT_SELECTOR_MAX_DEPTH))
        )
    )
    # 选中元素文本预览长度
    text_preview_chars: int = Field(
        default_factory=lambda: int(
            os.getenv("TEXT_PREVIEW_CHARS", str(DEFAULT_TEXT_PREVIEW_CHARS))
        )
    )


class OutputConfig(BaseModel):
    """输出配置"""

    default_format: str = Field(
        default_factory=lambda: os.getenv("DEFAULT_FORMAT", DEFAULT_OUTPUT_FORMAT)
    )
    output_dir: str = Field(default_factory=lambda: os.getenv("OUTPUT_DIR", "output"))
    filename_prefix: str = Field(
        default_factory=lambda: os.getenv("FILENAME_PREFIX", DEFAULT_FILENAME_PREFIX)
    )


class BrowserConfig(BaseModel):
    """浏览器配置（仅用于渲染页面获取 HTML）"""

    headless: bool = Field(default_factory=lambda: os.getenv("HEADLESS", "true").lower() == "true")
    timeout_ms: int = Field(default_factory=lambda: int(os.getenv("PAGE_TIMEOUT_MS", "30000")))
    # goto 的 wait_until 参数: load / domcontentloaded / networkidle
    wait_until: str = Field(default_factory=lambda: os.getenv("PAGE_WAIT_UNTIL", "load"))


class StorageConfig(BaseModel):
    """规则模板存储配置"""

    rules_dir: str = Field(default_factory=lambda: os.getenv("RULES_DIR", "output/rules"))


class Config(BaseModel):
    """全局配置"""

    locator: LocatorConfig = Field(default_factory=LocatorConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)

    @classmethod
    def load(cls) -> "Config":
        """加载配置"""
        return cls()

    def ensure_dirs(self) -> None:
        """确保输出目录存在"""
        Path(self.output.output_dir).mkdir(parents=True, exist_ok=True)
        Path(self.storage.rules_dir).mkdir(parents=True, exist_ok=True)


# 全局配置实例
config = Config.load()
