"""定位器模块

从任意元素生成可重新定位它的 XPath 与 CSS selector，
以及调用方持有的选择 / 高亮状态。
"""

from .xpath import generate_xpath, to_xpath_literal
from .selector import generate_css_selector, css_escape
from .selection import (
    SelectedElement,
    SelectionState,
    describe_element,
    activate,
    deactivate,
    hover,
    select,
    highlight,
    clear,
)

__all__ = [
    "generate_xpath",
    "to_xpath_literal",
    "generate_css_selector",
    "css_escape",
    "SelectedElement",
    "SelectionState",
    "describe_element",
    "activate",
    "deactivate",
    "hover",
    "select",
    "highlight",
    "clear",
]
