"""存储模块"""

from .rule_store import RuleSetStore, RuleTemplate, host_from_url, load_rule_set_file

__all__ = [
    "RuleSetStore",
    "RuleTemplate",
    "host_from_url",
    "load_rule_set_file",
]
