"""规则提取模块

- XPath 解析（单个 / 多个节点，带标签结果）
- 节点取值（text / html / outerHtml / 属性）
- field / object / array 三类规则的执行
"""

from .models import (
    FieldRule,
    ObjectRule,
    ArrayRule,
    Rule,
    RuleSet,
    ExtractOutput,
    parse_rule_set,
)
from .resolver import (
    PathResolver,
    Found,
    NotFound,
    Invalid,
    read_value,
    resolve,
    resolve_one,
    resolve_all,
)
from .engine import ExtractionEngine, extract

__all__ = [
    # 数据模型
    "FieldRule",
    "ObjectRule",
    "ArrayRule",
    "Rule",
    "RuleSet",
    "ExtractOutput",
    "parse_rule_set",
    # 解析器
    "PathResolver",
    "Found",
    "NotFound",
    "Invalid",
    "read_value",
    "resolve",
    "resolve_one",
    "resolve_all",
    # 引擎
    "ExtractionEngine",
    "extract",
]
