"""规则集模板存储单元测试"""

from __future__ import annotations

import json

import pytest

from rulespider.common.exceptions import ConfigFileNotFoundError, MalformedRuleSetError, StorageError
from rulespider.extractor.models import parse_rule_set
from rulespider.storage.rule_store import RuleSetStore, RuleTemplate, host_from_url, load_rule_set_file


@pytest.fixture
def rule_set():
    return parse_rule_set(
        {
            "rules": [{"id": "r1", "name": "title", "path": "//h1"}],
            "arrayRules": [
                {
                    "id": "a1",
                    "name": "rows",
                    "containerPath": "//tr",
                    "children": [{"name": "cell", "path": "./td", "attr": "innerHTML"}],
                }
            ],
            "format": "csv",
        }
    )


@pytest.fixture
def store(tmp_path):
    return RuleSetStore(tmp_path / "rules")


class TestHostFromUrl:
    """模板键"""

    def test_hostname_is_lowercased(self):
        assert host_from_url("https://Shop.Example.com/a?b=1") == "shop.example.com"

    def test_missing_hostname(self):
        with pytest.raises(StorageError):
            host_from_url("file:///tmp/page.html")


class TestRuleSetStore:
    """模板读写"""

    def test_save_and_load(self, store, rule_set):
        store.save("shop.example.com", rule_set)
        assert store.exists("shop.example.com")
        assert store.load("shop.example.com") == rule_set

    def test_saved_file_uses_camel_case(self, store, rule_set):
        store.save("shop.example.com", rule_set)
        data = json.loads((store.rules_dir / "template-shop.example.com.json").read_text(encoding="utf-8"))
        assert data["hostname"] == "shop.example.com"
        assert data["ruleSet"]["arrayRules"][0]["containerPath"] == "//tr"

    def test_resave_keeps_created_at(self, store, rule_set):
        first = store.save("a.example", rule_set)
        second = store.save("a.example", parse_rule_set({}))
        assert second.created_at == first.created_at
        assert store.load("a.example") == parse_rule_set({})

    def test_missing_template(self, store):
        assert store.load("none.example") is None
        assert store.load_template("none.example") is None

    def test_corrupt_template_is_ignored(self, store):
        (store.rules_dir / "template-bad.example.json").write_text("{not json", encoding="utf-8")
        assert store.load("bad.example") is None

    def test_malformed_rule_set_in_template_is_ignored(self, store):
        payload = {"hostname": "bad.example", "ruleSet": {"arrayRules": [{"name": "x"}]}}
        (store.rules_dir / "template-bad.example.json").write_text(json.dumps(payload), encoding="utf-8")
        assert store.load("bad.example") is None

    def test_delete(self, store, rule_set):
        store.save("a.example", rule_set)
        assert store.delete("a.example") is True
        assert store.delete("a.example") is False
        assert not store.exists("a.example")

    def test_list_hosts(self, store, rule_set):
        store.save("b.example", rule_set)
        store.save("a.example", rule_set)
        assert store.list_hosts() == ["a.example", "b.example"]

    def test_template_from_dict_defaults(self):
        template = RuleTemplate.from_dict({"hostname": "x.example"})
        assert template.rule_set == parse_rule_set({})
        assert template.created_at == ""


class TestLoadRuleSetFile:
    """规则集文件"""

    def test_json_file(self, tmp_path, rule_set):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps(rule_set.to_dict()), encoding="utf-8")
        assert load_rule_set_file(path) == rule_set

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text(
            "rules:\n"
            "  - name: title\n"
            "    xpath: //h1\n"
            "arrayRules:\n"
            "  - name: rows\n"
            "    containerPath: //tr\n"
            "    children:\n"
            "      - name: cell\n"
            "        path: ./td\n"
            "format: markdown\n",
            encoding="utf-8",
        )
        loaded = load_rule_set_file(path)
        assert loaded.rules[0].path == "//h1"
        assert loaded.array_rules[0].container_path == "//tr"
        assert loaded.format == "markdown"

    def test_empty_file_is_empty_rule_set(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("", encoding="utf-8")
        assert list(load_rule_set_file(path).iter_rules()) == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigFileNotFoundError):
            load_rule_set_file(tmp_path / "nope.json")

    def test_unparsable_file(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text("{broken", encoding="utf-8")
        with pytest.raises(MalformedRuleSetError):
            load_rule_set_file(path)

    def test_structurally_invalid_file(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({"rules": [{"id": "r9", "name": "t"}]}), encoding="utf-8")
        with pytest.raises(MalformedRuleSetError) as exc_info:
            load_rule_set_file(path)
        assert exc_info.value.rule_id == "r9"
