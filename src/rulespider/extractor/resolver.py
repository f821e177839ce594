"""XPath 解析器

在 lxml 文档树（或以某节点为根的子树）上求值 XPath 表达式，
返回带标签的解析结果：``Found`` / ``NotFound`` / ``Invalid``。

未命中与表达式非法都是可恢复的：``resolve_one`` / ``resolve_all``
会降级为 ``None`` / 空列表并记录 warning，不会抛出异常。
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from html import escape
from typing import Union

from lxml import etree
from lxml import html as lxml_html

from ..common.constants import (
    ATTR_HTML,
    ATTR_OUTER_HTML,
    ATTR_TEXT,
    ATTRIBUTE_ALIASES,
    DEFAULT_ATTRIBUTE,
)
from ..common.logger import get_logger

logger = get_logger(__name__)

# XPath 结果中的节点：元素，或 @attr / text() 选出的字符串
Node = Union[etree._Element, str]

# innerText 不包含这些子树的文本
_NON_RENDERED_TAGS = frozenset({"script", "style", "noscript", "template"})
_RAW_TEXT_TAGS = frozenset({"script", "style"})
# 前后各断一行的块级标签
_BLOCK_TAGS = frozenset(
    {
        "address", "article", "aside", "blockquote", "dd", "div", "dl", "dt",
        "fieldset", "figcaption", "figure", "footer", "form", "h1", "h2", "h3",
        "h4", "h5", "h6", "header", "hr", "li", "main", "nav", "ol", "p", "pre",
        "section", "table", "tbody", "tfoot", "thead", "tr", "ul",
    }
)
# 同一行内的单元格以制表符分隔
_CELL_TAGS = frozenset({"td", "th"})
_SPACES = re.compile(r"[ \t\r\n\f]+")
_CELL_GAP = re.compile(r" *\t *")
_SPACE_RUN = re.compile(r" {2,}")


@dataclass(frozen=True)
class Found:
    """命中一个或多个节点（文档顺序）"""

    expr: str
    nodes: tuple[Node, ...]

    @property
    def first(self) -> Node:
        return self.nodes[0]


@dataclass(frozen=True)
class NotFound:
    """表达式合法但没有命中任何节点"""

    expr: str


@dataclass(frozen=True)
class Invalid:
    """表达式语法错误、求值错误或结果不是节点集"""

    expr: str
    reason: str


ResolveResult = Union[Found, NotFound, Invalid]


def _is_node(item: object) -> bool:
    return isinstance(item, (etree._Element, str))


class PathResolver:
    """XPath 解析器

    纯查询，不修改文档，也不在调用之间缓存任何状态。
    """

    def resolve(self, expr: str, root: etree._Element | etree._ElementTree | None) -> ResolveResult:
        """
        求值 XPath 并返回带标签的结果

        Args:
            expr: XPath 表达式
            root: 求值上下文节点（文档根或容器节点）

        Returns:
            Found / NotFound / Invalid
        """
        if root is None:
            return Invalid(expr=expr, reason="上下文节点为空")
        if not expr or not expr.strip():
            return Invalid(expr=expr, reason="表达式为空")

        try:
            compiled = etree.XPath(expr)
        except etree.XPathError as exc:
            return Invalid(expr=expr, reason=f"语法错误: {exc}")

        try:
            result = compiled(root)
        except etree.XPathError as exc:
            return Invalid(expr=expr, reason=f"求值错误: {exc}")

        if not isinstance(result, list):
            # count(...) / boolean(...) 等非节点集结果
            return Invalid(expr=expr, reason=f"结果不是节点集: {result!r}")

        nodes = tuple(item for item in result if _is_node(item))
        if not nodes:
            return NotFound(expr=expr)
        return Found(expr=expr, nodes=nodes)

    def resolve_one(self, expr: str, root: etree._Element | etree._ElementTree | None) -> Node | None:
        """返回文档顺序中的第一个命中节点，未命中或非法返回 None"""
        result = self.resolve(expr, root)
        if isinstance(result, Found):
            return result.first
        self._report(result, "单个")
        return None

    def resolve_all(self, expr: str, root: etree._Element | etree._ElementTree | None) -> list[Node]:
        """返回全部命中节点（文档顺序），未命中或非法返回空列表"""
        result = self.resolve(expr, root)
        if isinstance(result, Found):
            return list(result.nodes)
        self._report(result, "多个")
        return []

    def _report(self, result: ResolveResult, mode: str) -> None:
        if isinstance(result, Invalid):
            logger.warning(f"[PathResolver] XPath 求值失败 ({mode}): {result.expr} -> {result.reason}")
        elif isinstance(result, NotFound):
            logger.warning(f"[PathResolver] XPath 未命中 ({mode}): {result.expr}")


def _rendered_text(element: etree._Element) -> str:
    """
    近似浏览器 innerText

    - 跳过脚本 / 样式子树
    - 块级元素与 <br> 断行，单元格之间用制表符分隔
    - 连续空白折叠为一个空格（<pre> 内保留换行），去掉空行
    """
    parts: list[str] = []

    def add_text(text: str | None, preformatted: bool) -> None:
        if text:
            parts.append(text if preformatted else _SPACES.sub(" ", text))

    def walk(node: etree._Element, is_target: bool, preformatted: bool) -> None:
        if not isinstance(node.tag, str):
            return
        tag = node.tag.lower()
        if not is_target and tag in _NON_RENDERED_TAGS:
            return
        if tag == "br":
            parts.append("\n")

        block = tag in _BLOCK_TAGS
        preformatted = preformatted or tag == "pre"
        if block:
            parts.append("\n")
        add_text(node.text, preformatted)
        for child in node:
            walk(child, False, preformatted)
            add_text(child.tail, preformatted)
        if tag in _CELL_TAGS:
            parts.append("\t")
        if block:
            parts.append("\n")

    walk(element, True, False)

    lines = []
    for line in "".join(parts).split("\n"):
        line = _CELL_GAP.sub("\t", _SPACE_RUN.sub(" ", line)).strip(" \t")
        if line:
            lines.append(line)
    return "\n".join(lines)


def _inner_html(element: etree._Element) -> str:
    tag = element.tag.lower() if isinstance(element.tag, str) else ""
    text = element.text or ""
    head = text if tag in _RAW_TEXT_TAGS else escape(text, quote=False)
    children = "".join(
        lxml_html.tostring(child, encoding="unicode", with_tail=True) for child in element
    )
    return head + children


def read_value(node: Node | None, attribute: str = DEFAULT_ATTRIBUTE) -> str | None:
    """
    按 attribute 读取节点的值

    Args:
        node: 目标节点
        attribute: text / html / outerHtml / 任意属性名

    Returns:
        读取到的字符串，节点为空、无文本或属性不存在时返回 None
    """
    if node is None:
        return None

    attribute = ATTRIBUTE_ALIASES.get(attribute, attribute) if attribute else DEFAULT_ATTRIBUTE

    if isinstance(node, str):
        # @href / text() 选出的已经是值本身
        if attribute in (ATTR_TEXT, ATTR_HTML, ATTR_OUTER_HTML):
            value = str(node).strip()
            if attribute == ATTR_TEXT and not value:
                return None
            return value
        return None

    if attribute == ATTR_TEXT:
        value = _rendered_text(node).strip()
        return value or None
    if attribute == ATTR_HTML:
        return _inner_html(node).strip()
    if attribute == ATTR_OUTER_HTML:
        return lxml_html.tostring(node, encoding="unicode", with_tail=False).strip()

    value = node.get(attribute)
    if value is None and attribute.lower() != attribute:
        # HTML 解析器会把属性名转成小写
        value = node.get(attribute.lower())
    return value


# 默认解析器实例
_default_resolver = PathResolver()


def resolve(expr: str, root: etree._Element | etree._ElementTree | None) -> ResolveResult:
    """便捷函数：使用默认解析器求值"""
    return _default_resolver.resolve(expr, root)


def resolve_one(expr: str, root: etree._Element | etree._ElementTree | None) -> Node | None:
    """便捷函数：返回第一个命中节点"""
    return _default_resolver.resolve_one(expr, root)


def resolve_all(expr: str, root: etree._Element | etree._ElementTree | None) -> list[Node]:
    """便捷函数：返回全部命中节点"""
    return _default_resolver.resolve_all(expr, root)
