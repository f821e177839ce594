"""RuleSpider - 基于 XPath 规则的页面提取与定位器生成"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

__version__ = "0.1.0"

if TYPE_CHECKING:
    from .extractor.engine import ExtractionEngine as ExtractionEngine
    from .extractor.engine import extract as extract
    from .locator.selector import generate_css_selector as generate_css_selector
    from .locator.xpath import generate_xpath as generate_xpath

__all__ = [
    "__version__",
    "ExtractionEngine",
    "extract",
    "generate_xpath",
    "generate_css_selector",
]


def __getattr__(name: str) -> Any:
    """Lazy exports to avoid importing heavy runtime dependencies at package import time."""
    if name in {"ExtractionEngine", "extract"}:
        from .extractor.engine import ExtractionEngine, extract

        return ExtractionEngine if name == "ExtractionEngine" else extract
    if name == "generate_xpath":
        from .locator.xpath import generate_xpath

        return generate_xpath
    if name == "generate_css_selector":
        from .locator.selector import generate_css_selector

        return generate_css_selector
    raise AttributeError(f"module 'rulespider' has no attribute '{name}'")
