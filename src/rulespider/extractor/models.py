"""提取规则与提取结果数据模型

规则是一个封闭的标签联合（``kind`` 字段区分）：

- ``FieldRule``  单字段规则，path 相对文档根解析
- ``ObjectRule`` 嵌套对象规则，children 同样相对文档根解析
- ``ArrayRule``  重复容器规则，children 相对每个容器节点解析
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Annotated, Any, Iterator, Literal, Mapping, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from ..common.constants import ATTRIBUTE_ALIASES, DEFAULT_ATTRIBUTE, DEFAULT_OUTPUT_FORMAT, OUTPUT_FORMATS
from ..common.exceptions import MalformedRuleSetError

ExtractionValue = Union[str, None]
ExtractionResult = dict[str, ExtractionValue]
ArrayExtractionResult = list[ExtractionResult]


# ============================================================================
# 规则定义
# ============================================================================


class FieldRule(BaseModel):
    """单元素提取规则"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: Literal["field"] = "field"
    id: str = Field(default="", description="规则 ID")
    name: str = Field(..., min_length=1, description="输出键名")
    path: str = Field(
        ...,
        validation_alias=AliasChoices("path", "xpath"),
        description="XPath 表达式",
    )
    attribute: str = Field(
        default=DEFAULT_ATTRIBUTE,
        validation_alias=AliasChoices("attribute", "attr"),
        description="text / html / outerHtml / 任意属性名",
    )
    # 仅保留原值，不执行
    callback: str | None = Field(default=None, description="值转换回调（不执行）")

    @field_validator("path")
    @classmethod
    def _check_path(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("path 不能为空")
        return value

    @field_validator("attribute", mode="before")
    @classmethod
    def _normalize_attribute(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_ATTRIBUTE
        if isinstance(value, str):
            value = value.strip()
            return ATTRIBUTE_ALIASES.get(value, value)
        return value


class ObjectRule(BaseModel):
    """嵌套对象规则"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: Literal["object"] = "object"
    id: str = Field(default="", description="规则 ID")
    name: str = Field(..., min_length=1, description="输出键名")
    children: list[FieldRule] = Field(..., description="子字段规则")


class ArrayRule(BaseModel):
    """重复容器规则，每个容器生成一行"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: Literal["array"] = "array"
    id: str = Field(default="", description="规则 ID")
    name: str = Field(..., min_length=1, description="输出键名")
    container_path: str = Field(
        ...,
        validation_alias=AliasChoices("container_path", "containerPath", "containerXPath"),
        description="容器 XPath",
    )
    children: list[FieldRule] = Field(..., description="相对容器解析的子字段规则")

    @field_validator("container_path")
    @classmethod
    def _check_container_path(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("container_path 不能为空")
        return value


Rule = Annotated[Union[FieldRule, ObjectRule, ArrayRule], Field(discriminator="kind")]


class RuleSet(BaseModel):
    """一次提取使用的完整规则集"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    rules: list[FieldRule] = Field(default_factory=list)
    object_rules: list[ObjectRule] = Field(
        default_factory=list,
        validation_alias=AliasChoices("object_rules", "objectRules"),
    )
    array_rules: list[ArrayRule] = Field(
        default_factory=list,
        validation_alias=AliasChoices("array_rules", "arrayRules"),
    )
    format: str = Field(default=DEFAULT_OUTPUT_FORMAT)

    @field_validator("format")
    @classmethod
    def _check_format(cls, value: str) -> str:
        if value not in OUTPUT_FORMATS:
            raise ValueError(f"不支持的输出格式: {value}")
        return value

    def iter_rules(self) -> Iterator[Rule]:
        """按 field -> object -> array 的顺序遍历所有规则"""
        yield from self.rules
        yield from self.object_rules
        yield from self.array_rules

    def to_dict(self) -> dict[str, Any]:
        """转换为可持久化的字典（camelCase 键，与浏览器端一致）"""
        return {
            "rules": [_field_rule_to_dict(r) for r in self.rules],
            "objectRules": [
                {
                    "id": r.id,
                    "name": r.name,
                    "children": [_field_rule_to_dict(c) for c in r.children],
                }
                for r in self.object_rules
            ],
            "arrayRules": [
                {
                    "id": r.id,
                    "name": r.name,
                    "containerPath": r.container_path,
                    "children": [_field_rule_to_dict(c) for c in r.children],
                }
                for r in self.array_rules
            ],
            "format": self.format,
        }


def _field_rule_to_dict(rule: FieldRule) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": rule.id,
        "name": rule.name,
        "path": rule.path,
        "attribute": rule.attribute,
    }
    if rule.callback:
        data["callback"] = rule.callback
    return data


# ============================================================================
# 规则集解析
# ============================================================================

_RULE_LISTS: tuple[tuple[tuple[str, ...], type[BaseModel]], ...] = (
    (("rules",), FieldRule),
    (("object_rules", "objectRules"), ObjectRule),
    (("array_rules", "arrayRules"), ArrayRule),
)


def _describe_error(exc: PydanticValidationError) -> str:
    first = exc.errors()[0]
    loc = ".".join(str(part) for part in first.get("loc", ())) or "<root>"
    return f"{loc}: {first.get('msg', 'invalid')}"


def _pick_list(data: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def parse_rule_set(data: RuleSet | dict[str, Any]) -> RuleSet:
    """将原始字典校验为 RuleSet

    逐条校验规则，便于在错误中带上出错规则的 ID。

    Raises:
        MalformedRuleSetError: 规则缺少必需属性或结构错误
    """
    if isinstance(data, RuleSet):
        return data
    if not isinstance(data, dict):
        raise MalformedRuleSetError(None, f"规则集必须是对象，实际为 {type(data).__name__}")

    parsed: dict[str, Any] = {}
    for keys, model in _RULE_LISTS:
        items = _pick_list(data, keys)
        if items is None:
            continue
        if not isinstance(items, list):
            raise MalformedRuleSetError(None, f"{keys[0]} 必须是数组")

        validated = []
        for index, item in enumerate(items):
            if not isinstance(item, dict):
                raise MalformedRuleSetError(None, f"{keys[0]}[{index}] 必须是对象")
            rule_id = item.get("id") or item.get("name")
            try:
                validated.append(model.model_validate(item))
            except PydanticValidationError as exc:
                raise MalformedRuleSetError(
                    str(rule_id) if rule_id else f"{keys[0]}[{index}]",
                    _describe_error(exc),
                ) from exc
        parsed[keys[0]] = validated

    fmt = data.get("format")
    if fmt is not None:
        parsed["format"] = fmt

    try:
        return RuleSet.model_validate(parsed)
    except PydanticValidationError as exc:
        raise MalformedRuleSetError(None, _describe_error(exc)) from exc


# ============================================================================
# 提取结果
# ============================================================================


def _freeze_result(result: Mapping[str, ExtractionValue]) -> Mapping[str, ExtractionValue]:
    return MappingProxyType(dict(result))


def _freeze_rows(rows: Any) -> tuple[Mapping[str, ExtractionValue], ...]:
    return tuple(_freeze_result(row) for row in rows)


class ExtractOutput(BaseModel):
    """一次提取的完整输出

    每次调用新建，生成后不可修改：结果字典校验后转为只读映射，
    数组行转为元组。需要普通 dict / list 时使用 ``to_dict()``。
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    single_results: ExtractionResult = Field(default_factory=dict)
    object_results: dict[str, ExtractionResult] = Field(default_factory=dict)
    array_results: dict[str, ArrayExtractionResult] = Field(default_factory=dict)
    format: str = DEFAULT_OUTPUT_FORMAT
    source_url: str = ""
    timestamp: str = ""

    @model_validator(mode="after")
    def _freeze(self) -> "ExtractOutput":
        # frozen 模型只禁止属性赋值，嵌套容器需要单独冻结
        object.__setattr__(self, "single_results", _freeze_result(self.single_results))
        object.__setattr__(
            self,
            "object_results",
            MappingProxyType({name: _freeze_result(r) for name, r in self.object_results.items()}),
        )
        object.__setattr__(
            self,
            "array_results",
            MappingProxyType({name: _freeze_rows(rows) for name, rows in self.array_results.items()}),
        )
        return self

    def to_dict(self) -> dict[str, Any]:
        """转换为普通字典（camelCase 键）"""
        return {
            "singleResults": dict(self.single_results),
            "objectResults": {name: dict(r) for name, r in self.object_results.items()},
            "arrayResults": {
                name: [dict(row) for row in rows] for name, rows in self.array_results.items()
            },
            "format": self.format,
            "url": self.source_url,
            "timestamp": self.timestamp,
        }
