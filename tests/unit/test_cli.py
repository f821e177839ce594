"""CLI 单元测试"""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from rulespider.cli import app
from rulespider.common import logger as logger_module
from rulespider.common.config import config

runner = CliRunner()

PAGE = """
<html>
  <body>
    <h1 id="main">Hello</h1>
    <table>
      <tbody>
        <tr><td>A</td></tr>
        <tr><td>B</td></tr>
      </tbody>
    </table>
  </body>
</html>
"""

RULES = {
    "rules": [{"id": "r1", "name": "title", "path": '//h1[@id="main"]'}],
    "arrayRules": [
        {
            "id": "a1",
            "name": "rows",
            "containerPath": "//table/tbody/tr",
            "children": [{"name": "cell", "path": ".//td[1]"}],
        }
    ],
}


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config.storage, "rules_dir", str(tmp_path / "rules"))
    monkeypatch.setattr(config.output, "output_dir", str(tmp_path / "output"))
    page = tmp_path / "page.html"
    page.write_text(PAGE, encoding="utf-8")
    rules = tmp_path / "rules.json"
    rules.write_text(json.dumps(RULES), encoding="utf-8")
    yield tmp_path
    for handler in list(logger_module._file_handlers):
        logger_module.disable_file_logging(handler)


class TestExtractCommand:
    """extract 命令"""

    def test_raw_output(self, workspace):
        result = runner.invoke(
            app, ["extract", "--html", "page.html", "--rules", "rules.json", "--format", "raw"]
        )
        assert result.exit_code == 0, result.output
        assert "--- [1] ---\ncell: A" in result.output
        assert "--- [2] ---\ncell: B" in result.output

    def test_csv_output_and_save(self, workspace):
        result = runner.invoke(
            app,
            ["extract", "-f", "page.html", "-r", "rules.json", "--format", "csv", "--save"],
        )
        assert result.exit_code == 0, result.output
        assert "cell\nA\nB" in result.output
        saved = list((workspace / "output").glob("*.csv"))
        assert len(saved) == 1
        assert saved[0].read_text(encoding="utf-8") == "cell\nA\nB"

    def test_template_round_trip(self, workspace):
        url = "https://shop.example.com/list"
        first = runner.invoke(
            app,
            ["extract", "-f", "page.html", "-u", url, "-r", "rules.json", "--format", "raw", "--save-template"],
        )
        assert first.exit_code == 0, first.output
        assert (workspace / "rules" / "template-shop.example.com.json").exists()

        second = runner.invoke(app, ["extract", "-f", "page.html", "-u", url, "--format", "raw"])
        assert second.exit_code == 0, second.output
        assert "cell: B" in second.output

        listed = runner.invoke(app, ["templates"])
        assert "shop.example.com" in listed.output

    def test_malformed_rules_exit_code(self, workspace):
        (workspace / "bad.json").write_text(
            json.dumps({"arrayRules": [{"id": "broken", "name": "rows", "children": []}]}),
            encoding="utf-8",
        )
        result = runner.invoke(app, ["extract", "-f", "page.html", "-r", "bad.json"])
        assert result.exit_code == 1
        assert "broken" in result.output

    def test_missing_document_source(self, workspace):
        result = runner.invoke(app, ["extract", "-r", "rules.json"])
        assert result.exit_code != 0

    def test_missing_html_file(self, workspace):
        result = runner.invoke(app, ["extract", "-f", "nope.html", "-r", "rules.json"])
        assert result.exit_code == 1


class TestLocateCommand:
    """locate 命令"""

    def test_locate_cell(self, workspace):
        result = runner.invoke(app, ["locate", "-f", "page.html", "-t", "(//td)[2]"])
        assert result.exit_code == 0, result.output
        assert "tr[2]" in result.output

    def test_locate_missing_target(self, workspace):
        result = runner.invoke(app, ["locate", "-f", "page.html", "-t", "//nav"])
        assert result.exit_code == 1


class TestHighlightCommand:
    """highlight 命令"""

    def test_highlight_match(self, workspace):
        result = runner.invoke(app, ["highlight", "-f", "page.html", "-x", '//*[@id="main"]'])
        assert result.exit_code == 0, result.output
        assert "Hello" in result.output

    def test_highlight_invalid(self, workspace):
        result = runner.invoke(app, ["highlight", "-f", "page.html", "-x", "//h1["])
        assert result.exit_code == 1


class TestLogFileOption:
    """--log-file 全局选项"""

    def test_module_warnings_reach_log_file(self, workspace):
        (workspace / "empty.json").write_text(
            json.dumps(
                {
                    "arrayRules": [
                        {
                            "name": "items",
                            "containerPath": "//ul/li",
                            "children": [{"name": "a", "path": "./a"}],
                        }
                    ]
                }
            ),
            encoding="utf-8",
        )
        result = runner.invoke(
            app,
            ["--log-file", "run.log", "extract", "-f", "page.html", "-r", "empty.json", "--format", "raw"],
        )
        assert result.exit_code == 0, result.output

        content = (workspace / "run.log").read_text(encoding="utf-8")
        assert "containerPath 未找到元素" in content
        assert "rulespider.extractor.engine" in content
