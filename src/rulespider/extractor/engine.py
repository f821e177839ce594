"""规则提取引擎

按规则集在文档上逐条求值，组装为一个不可变的 ExtractOutput。

单条规则解析失败只会得到 None / 空列表，不会中断整次提取；
只有规则集本身结构错误时才抛出 MalformedRuleSetError。
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from lxml import etree

from ..common.exceptions import MalformedRuleSetError
from ..common.logger import get_logger
from .models import (
    ArrayExtractionResult,
    ArrayRule,
    ExtractionResult,
    ExtractionValue,
    ExtractOutput,
    FieldRule,
    ObjectRule,
    RuleSet,
    parse_rule_set,
)
from .resolver import Found, Invalid, PathResolver, read_value

logger = get_logger(__name__)


def _document_root(document: etree._Element | etree._ElementTree) -> etree._Element:
    if isinstance(document, etree._ElementTree):
        return document.getroot()
    if isinstance(document, etree._Element):
        return document
    raise TypeError(f"document 必须是 lxml 元素或元素树，实际为 {type(document).__name__}")


def _document_url(root: etree._Element) -> str:
    url = root.getroottree().docinfo.URL
    return url or ""


def _capture_timestamp(now: datetime | None = None) -> str:
    """UTC ISO-8601 时间戳；不带时区的 now 视为 UTC"""
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ExtractionEngine:
    """规则提取引擎

    不持有跨调用状态；每次 extract 都生成新的输出记录。
    """

    def __init__(self, resolver: PathResolver | None = None):
        self.resolver = resolver or PathResolver()

    def extract(
        self,
        rule_set: RuleSet | dict[str, Any],
        document: etree._Element | etree._ElementTree,
        source_url: str | None = None,
        now: datetime | None = None,
    ) -> ExtractOutput:
        """
        执行规则集

        Args:
            rule_set: 规则集（RuleSet 或原始字典）
            document: lxml 文档（根元素或元素树）
            source_url: 文档地址，缺省时取文档 base_url
            now: 采集时间，缺省为当前 UTC 时间

        Returns:
            ExtractOutput

        Raises:
            MalformedRuleSetError: 规则集结构错误
        """
        rules = parse_rule_set(rule_set)
        root = _document_root(document)

        single_results: ExtractionResult = {}
        object_results: dict[str, ExtractionResult] = {}
        array_results: dict[str, ArrayExtractionResult] = {}

        for rule in rules.iter_rules():
            if isinstance(rule, FieldRule):
                single_results[rule.name] = self.extract_field(rule, root)
            elif isinstance(rule, ObjectRule):
                object_results[rule.name] = self.extract_object(rule, root)
            elif isinstance(rule, ArrayRule):
                array_results[rule.name] = self.extract_array(rule, root)
            else:
                raise MalformedRuleSetError(
                    getattr(rule, "id", None), f"未知规则类型: {type(rule).__name__}"
                )

        output = ExtractOutput(
            single_results=single_results,
            object_results=object_results,
            array_results=array_results,
            format=rules.format,
            source_url=source_url if source_url is not None else _document_url(root),
            timestamp=_capture_timestamp(now),
        )
        logger.info(
            f"[ExtractionEngine] 提取完成: {len(single_results)} 个字段, "
            f"{len(object_results)} 个对象, {len(array_results)} 个数组"
        )
        return output

    def extract_field(self, rule: FieldRule, context: etree._Element) -> ExtractionValue:
        """在 context 上解析单个字段；未命中返回 None"""
        if rule.callback:
            logger.warning(
                f"[ExtractionEngine] 规则 '{rule.name}' 带有 callback，不会执行，返回原始值"
            )
        node = self.resolver.resolve_one(rule.path, context)
        if node is None:
            return None
        return read_value(node, rule.attribute)

    def extract_object(self, rule: ObjectRule, root: etree._Element) -> ExtractionResult:
        """children 全部相对文档根解析"""
        result: ExtractionResult = {}
        for child in rule.children:
            result[child.name] = self.extract_field(child, root)
        return result

    def extract_array(self, rule: ArrayRule, root: etree._Element) -> ArrayExtractionResult:
        """每个容器生成一行，children 相对容器解析，行顺序与容器文档顺序一致"""
        resolved = self.resolver.resolve(rule.container_path, root)

        if isinstance(resolved, Invalid):
            logger.warning(
                f"[ExtractionEngine] containerPath 求值失败: {rule.container_path} -> {resolved.reason}"
            )
            return []
        if not isinstance(resolved, Found):
            logger.warning(f"[ExtractionEngine] containerPath 未找到元素: {rule.container_path}")
            return []

        rows: ArrayExtractionResult = []
        for container in resolved.nodes:
            row: ExtractionResult = {}
            if not isinstance(container, etree._Element):
                # @attr / text() 结果不能作为容器，保留一行空值以维持行数
                logger.warning(
                    f"[ExtractionEngine] containerPath 命中非元素节点: {rule.container_path}"
                )
                for child in rule.children:
                    row[child.name] = None
            else:
                for child in rule.children:
                    row[child.name] = self.extract_field(child, container)
            rows.append(row)

        logger.debug(f"[ExtractionEngine] 数组 '{rule.name}' 提取 {len(rows)} 行")
        return rows


def extract(
    rule_set: RuleSet | dict[str, Any],
    document: etree._Element | etree._ElementTree,
    source_url: str | None = None,
) -> ExtractOutput:
    """便捷函数：使用默认引擎执行规则集"""
    return ExtractionEngine().extract(rule_set, document, source_url=source_url)
