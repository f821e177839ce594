"""CSS Selector 生成器

与 XPath 生成器相互独立：

1. 元素 id 在整个文档中唯一 → ``#id``
2. 否则最多向上追溯 N 层（默认 5），每层为 ``tag.class1.class2``；
   同一父节点下有多个相同签名的兄弟时追加 ``:nth-child(n)``，
   n 是在所有元素兄弟中的位置（CSS 语义，与 XPath 的同标签序号不同）
3. 追溯途中遇到 id 唯一的祖先则以 ``#id`` 锚定并停止

层数耗尽时直接返回已累积的片段，不保证唯一性。
"""

from __future__ import annotations

from lxml import etree

from ..common.config import config
from ..common.logger import get_logger
from .xpath import element_siblings, is_element, position_in, tag_name

logger = get_logger(__name__)


def css_escape(value: str) -> str:
    """按 CSSOM 的 CSS.escape 规则转义标识符"""
    result: list[str] = []
    first = value[:1]

    for index, ch in enumerate(value):
        code = ord(ch)
        if code == 0:
            result.append("\ufffd")
        elif (
            1 <= code <= 0x1F
            or code == 0x7F
            or (index == 0 and "0" <= ch <= "9")
            or (index == 1 and "0" <= ch <= "9" and first == "-")
        ):
            result.append(f"\\{code:x} ")
        elif index == 0 and ch == "-" and len(value) == 1:
            result.append("\\-")
        elif code >= 0x80 or ch in "-_" or (ch.isascii() and ch.isalnum()):
            result.append(ch)
        else:
            result.append("\\" + ch)

    return "".join(result)


def has_unique_id(element: etree._Element, element_id: str) -> bool:
    """id 是否在整个文档中只对应一个元素"""
    matches = element.getroottree().xpath("//*[@id=$value]", value=element_id)
    return len(matches) == 1


def _usable_id(element: etree._Element) -> str | None:
    element_id = element.get("id")
    if not element_id:
        return None
    if not has_unique_id(element, element_id):
        logger.debug(f"[SelectorGenerator] id 不唯一，不作为锚点: {element_id}")
        return None
    return element_id


def _signature(element: etree._Element) -> str:
    classes = (element.get("class") or "").split()
    return tag_name(element) + "".join("." + css_escape(cls) for cls in classes)


def build_selector_segment(element: etree._Element) -> str:
    """单层 selector 片段：tag + 全部 class，签名冲突时追加 :nth-child"""
    signature = _signature(element)
    if element.getparent() is None:
        return signature

    siblings = element_siblings(element)
    same_signature = [sibling for sibling in siblings if _signature(sibling) == signature]
    if len(same_signature) > 1:
        return f"{signature}:nth-child({position_in(element, siblings)})"
    return signature


def generate_css_selector(element: etree._Element, max_depth: int | None = None) -> str:
    """
    为元素生成 CSS selector

    Args:
        element: 目标元素
        max_depth: 最大追溯层数，默认读取配置

    Returns:
        以 ' > ' 连接的 selector 字符串
    """
    if not is_element(element):
        raise TypeError(f"只能为元素节点生成 selector，实际为 {type(element).__name__}")

    depth_limit = max_depth if max_depth is not None else config.locator.selector_max_depth

    own_id = _usable_id(element)
    if own_id:
        return "#" + css_escape(own_id)

    segments: list[str] = []
    current: etree._Element | None = element
    depth = 0

    while current is not None and depth < depth_limit:
        if current is not element:
            anchor_id = _usable_id(current)
            if anchor_id:
                segments.insert(0, "#" + css_escape(anchor_id))
                break

        segments.insert(0, build_selector_segment(current))
        current = current.getparent()
        depth += 1

    return " > ".join(segments)
