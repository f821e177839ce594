"""元素选择状态

选择 / 悬停 / 高亮状态由调用方持有并在调用之间传递，
每个操作返回新的 SelectionState，不修改旧状态，也不修改文档。
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from lxml import etree

from ..common.config import config
from ..common.logger import get_logger
from ..extractor.resolver import Found, PathResolver, ResolveResult, read_value
from .selector import generate_css_selector
from .xpath import generate_xpath, is_element, tag_name

logger = get_logger(__name__)


@dataclass(frozen=True)
class SelectedElement:
    """一次选择事件的结果，可直接预填新字段规则"""

    xpath: str
    selector: str
    element_text: str
    tag: str


@dataclass(frozen=True)
class SelectionState:
    """调用方持有的选择状态"""

    mode_active: bool = False
    hovered: etree._Element | None = None
    highlighted: etree._Element | None = None
    selected: SelectedElement | None = None


def describe_element(element: etree._Element, preview_chars: int | None = None) -> SelectedElement:
    """为元素生成 XPath、CSS selector 与文本预览"""
    limit = preview_chars if preview_chars is not None else config.locator.text_preview_chars
    text = read_value(element, "text") or ""
    return SelectedElement(
        xpath=generate_xpath(element),
        selector=generate_css_selector(element),
        element_text=text[:limit],
        tag=tag_name(element),
    )


def activate(state: SelectionState) -> SelectionState:
    """进入选择模式"""
    if state.mode_active:
        return state
    return replace(state, mode_active=True)


def deactivate(state: SelectionState) -> SelectionState:
    """退出选择模式并清除悬停与高亮"""
    if not state.mode_active:
        return state
    return replace(state, mode_active=False, hovered=None, highlighted=None)


def hover(state: SelectionState, element: etree._Element | None) -> SelectionState:
    """更新悬停元素；已高亮（选中）的元素不会被悬停覆盖"""
    if not state.mode_active:
        return state
    if element is not None and element is state.highlighted:
        return state
    return replace(state, hovered=element)


def select(state: SelectionState, element: etree._Element) -> SelectionState:
    """选中元素：生成定位器并高亮，选择模式保持开启

    未处于选择模式时不做任何事，返回原状态。
    """
    if not state.mode_active:
        return state
    if not is_element(element):
        raise TypeError(f"只能选择元素节点，实际为 {type(element).__name__}")
    selected = describe_element(element)
    logger.info(f"[Selection] 已选中: {selected.xpath}")
    return replace(state, hovered=None, highlighted=element, selected=selected)


def highlight(
    state: SelectionState,
    xpath: str,
    root: etree._Element | etree._ElementTree,
    resolver: PathResolver | None = None,
) -> tuple[SelectionState, ResolveResult]:
    """
    按 XPath 重新定位并高亮元素

    Returns:
        (新状态, 解析结果)；未命中或非法时新状态不含高亮
    """
    result = (resolver or PathResolver()).resolve(xpath, root)
    if isinstance(result, Found) and is_element(result.first):
        return replace(state, highlighted=result.first), result

    logger.warning(f"[Selection] 无法高亮，未找到元素: {xpath}")
    return replace(state, highlighted=None), result


def clear(state: SelectionState) -> SelectionState:
    """清除高亮与悬停（保留最近一次选择结果）"""
    return replace(state, hovered=None, highlighted=None)
