"""自定义异常类

定义项目中使用的所有自定义异常，用于更精细的错误处理。

注意：路径未命中（NotFound）与表达式非法（Invalid）不是异常，
它们以解析结果值的形式返回，见 ``extractor.resolver``。
"""

from __future__ import annotations


class RuleSpiderError(Exception):
    """RuleSpider 基础异常类

    所有自定义异常的基类。
    """
    pass


class ExtractionError(RuleSpiderError):
    """提取相关错误的基类"""
    pass


class MalformedRuleSetError(ExtractionError):
    """规则集结构错误

    规则缺少必需属性（如 array 规则没有 container_path）时抛出。
    这是唯一会让整次提取失败的错误。
    """
    def __init__(self, rule_id: str | None, reason: str):
        label = rule_id if rule_id else "<unknown>"
        super().__init__(f"规则集格式错误: rule={label}, 原因: {reason}")
        self.rule_id = rule_id
        self.reason = reason


class DocumentError(RuleSpiderError):
    """文档相关错误的基类"""
    pass


class DocumentLoadError(DocumentError):
    """文档解析失败"""
    def __init__(self, source: str, message: str = "文档解析失败"):
        super().__init__(f"{message}: {source}")
        self.source = source


class PageLoadError(DocumentError):
    """页面加载失败

    当页面无法在超时时间内渲染完成时抛出。
    """
    def __init__(self, url: str, message: str = "页面加载失败"):
        super().__init__(f"{message}: {url}")
        self.url = url


class ValidationError(RuleSpiderError):
    """验证失败错误"""
    pass


class URLValidationError(ValidationError):
    """URL 验证失败"""
    def __init__(self, url: str, reason: str = "格式无效"):
        super().__init__(f"URL 验证失败: {url}, 原因: {reason}")
        self.url = url
        self.reason = reason


class StorageError(RuleSpiderError):
    """存储相关错误的基类"""
    pass


class ConfigError(RuleSpiderError):
    """配置相关错误"""
    pass


class ConfigFileNotFoundError(ConfigError):
    """配置文件未找到"""
    def __init__(self, path: str):
        super().__init__(f"配置文件未找到: {path}")
        self.path = path
