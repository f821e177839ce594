"""常量定义"""

from __future__ import annotations

# ============================================================================
# 值读取
# ============================================================================

ATTR_TEXT = "text"
ATTR_HTML = "html"
ATTR_OUTER_HTML = "outerHtml"

# 浏览器风格的属性名 -> 规范名
ATTRIBUTE_ALIASES = {
    "innerText": ATTR_TEXT,
    "textContent": ATTR_TEXT,
    "innerHTML": ATTR_HTML,
    "outerHTML": ATTR_OUTER_HTML,
}

DEFAULT_ATTRIBUTE = ATTR_TEXT

# ============================================================================
# 定位器
# ============================================================================

# CSS selector 最多向上追溯的层数
DEFAULT_SELECTOR_MAX_DEPTH = 5

# 选中元素时保留的文本预览长度
DEFAULT_TEXT_PREVIEW_CHARS = 100

# ============================================================================
# 输出
# ============================================================================

OUTPUT_FORMATS = ("json", "json-array", "csv", "markdown", "raw")
DEFAULT_OUTPUT_FORMAT = "json"
DEFAULT_FILENAME_PREFIX = "jce"

# ============================================================================
# 输入验证
# ============================================================================

MAX_URL_LENGTH = 2048
VALID_URL_SCHEMES = ("http", "https", "file")
