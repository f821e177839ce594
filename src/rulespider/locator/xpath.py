"""XPath 生成器

生成策略优先级：
1. 元素自身有 id → ``//*[@id="..."]``
2. 最近的带 id 祖先作为锚点 → ``//*[@id="anchor"]/tag[n]/.../tag``
3. 都没有 → 从根元素开始的绝对路径 ``/html/body/.../tag[n]``

同标签兄弟多于一个时，片段带 1-based 的同标签序号。
只读遍历，不修改文档。
"""

from __future__ import annotations

from lxml import etree


def is_element(node: object) -> bool:
    """是否为真正的元素节点（排除注释 / 处理指令）"""
    return isinstance(node, etree._Element) and isinstance(node.tag, str)


def tag_name(element: etree._Element) -> str:
    """小写的本地标签名"""
    tag = str(element.tag)
    if "}" in tag:
        tag = tag.split("}", 1)[1]
    return tag.lower()


def element_siblings(element: etree._Element) -> list[etree._Element]:
    """包括自身在内的所有元素兄弟，文档顺序"""
    parent = element.getparent()
    if parent is None:
        return [element]
    return [child for child in parent if is_element(child)]


def position_in(element: etree._Element, group: list[etree._Element]) -> int:
    """元素在 group 中的 1-based 位置"""
    for index, candidate in enumerate(group, start=1):
        if candidate is element:
            return index
    raise ValueError("element 不在给定的兄弟列表中")


def to_xpath_literal(value: str) -> str:
    """将任意字符串安全地转换为 XPath 字面量"""
    if '"' not in value:
        return f'"{value}"'
    if "'" not in value:
        return f"'{value}'"

    parts = value.split('"')
    quoted_parts = [f'"{part}"' for part in parts]
    return "concat(" + ", '\"', ".join(quoted_parts) + ")"


def id_shortcut(element_id: str) -> str:
    return f"//*[@id={to_xpath_literal(element_id)}]"


def build_segment(element: etree._Element) -> str:
    """
    单层 XPath 片段

    例如: 'div[2]', 'span', 'p[1]'
    """
    tag = tag_name(element)
    same_tag = [sibling for sibling in element_siblings(element) if tag_name(sibling) == tag]
    if len(same_tag) > 1:
        return f"{tag}[{position_in(element, same_tag)}]"
    return tag


def generate_xpath(element: etree._Element) -> str:
    """
    为元素生成可重新定位它的 XPath

    Args:
        element: 目标元素

    Returns:
        XPath 字符串
    """
    if not is_element(element):
        raise TypeError(f"只能为元素节点生成 XPath，实际为 {type(element).__name__}")

    own_id = element.get("id")
    if own_id:
        return id_shortcut(own_id)

    segments: list[str] = []
    current: etree._Element | None = element

    while current is not None:
        parent = current.getparent()
        if parent is None:
            # 到达根元素
            segments.insert(0, tag_name(current))
            return "/" + "/".join(segments)

        current_id = current.get("id")
        if current_id and current is not element:
            return id_shortcut(current_id) + "/" + "/".join(segments)

        segments.insert(0, build_segment(current))
        current = parent

    return "/" + "/".join(segments)
