"""规则集模板持久化

按 hostname 保存 / 读取规则集模板，以及从 JSON / YAML 文件加载规则集。
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml

from ..common.config import config
from ..common.exceptions import ConfigFileNotFoundError, MalformedRuleSetError, StorageError
from ..common.logger import get_logger
from ..common.validators import sanitize_filename
from ..extractor.models import RuleSet, parse_rule_set

logger = get_logger(__name__)


def host_from_url(url: str) -> str:
    """取 URL 的 hostname，用作模板键"""
    hostname = urlparse(url).hostname if url else None
    if not hostname:
        raise StorageError(f"无法从 URL 解析 hostname: {url}")
    return hostname.lower()


@dataclass
class RuleTemplate:
    """某个站点的规则集模板"""

    hostname: str
    rule_set: RuleSet = field(default_factory=RuleSet)

    # 元信息
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        return {
            "hostname": self.hostname,
            "ruleSet": self.rule_set.to_dict(),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuleTemplate":
        """从字典创建"""
        return cls(
            hostname=data.get("hostname", ""),
            rule_set=parse_rule_set(data.get("ruleSet") or {}),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
        )


class RuleSetStore:
    """规则集模板管理器"""

    def __init__(self, rules_dir: str | Path | None = None):
        """初始化

        Args:
            rules_dir: 模板文件存放目录
        """
        self.rules_dir = Path(rules_dir or config.storage.rules_dir)
        self.rules_dir.mkdir(parents=True, exist_ok=True)

    def _path_for(self, hostname: str) -> Path:
        return self.rules_dir / f"template-{sanitize_filename(hostname.lower())}.json"

    def save(self, hostname: str, rule_set: RuleSet) -> RuleTemplate:
        """保存模板（已存在时保留创建时间）"""
        path = self._path_for(hostname)
        now = datetime.now().isoformat()

        existing = self.load_template(hostname)
        template = RuleTemplate(
            hostname=hostname.lower(),
            rule_set=rule_set,
            created_at=existing.created_at if existing and existing.created_at else now,
            updated_at=now,
        )

        path.write_text(
            json.dumps(template.to_dict(), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        logger.info(f"[RuleSetStore] 模板已保存到: {path}")
        return template

    def load_template(self, hostname: str) -> RuleTemplate | None:
        """加载模板，不存在或损坏时返回 None"""
        path = self._path_for(hostname)
        if not path.exists():
            logger.debug(f"[RuleSetStore] 模板不存在: {path}")
            return None

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return RuleTemplate.from_dict(data)
        except (json.JSONDecodeError, MalformedRuleSetError, AttributeError) as exc:
            logger.warning(f"[RuleSetStore] 加载模板失败: {path} -> {exc}")
            return None

    def load(self, hostname: str) -> RuleSet | None:
        """加载某站点的规则集"""
        template = self.load_template(hostname)
        return template.rule_set if template else None

    def exists(self, hostname: str) -> bool:
        return self._path_for(hostname).exists()

    def delete(self, hostname: str) -> bool:
        """删除模板，返回是否删除了文件"""
        path = self._path_for(hostname)
        if not path.exists():
            return False
        path.unlink()
        logger.info(f"[RuleSetStore] 模板已删除: {path}")
        return True

    def list_hosts(self) -> list[str]:
        """已保存模板的 hostname 列表（按名称排序）"""
        hosts = []
        for path in sorted(self.rules_dir.glob("template-*.json")):
            template = self.load_template(path.stem[len("template-"):])
            if template and template.hostname:
                hosts.append(template.hostname)
        return sorted(hosts)


def load_rule_set_file(path: str | Path) -> RuleSet:
    """
    从 JSON / YAML 文件加载规则集

    Raises:
        ConfigFileNotFoundError: 文件不存在
        MalformedRuleSetError: 内容不是合法规则集
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise ConfigFileNotFoundError(str(file_path))

    text = file_path.read_text(encoding="utf-8")
    try:
        if file_path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise MalformedRuleSetError(None, f"规则文件解析失败: {file_path} ({exc})") from exc

    return parse_rule_set(data or {})
