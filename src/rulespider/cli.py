"""CLI 入口"""

from __future__ import annotations

import asyncio

import typer
from lxml import etree
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .browser import load_document_file, load_page_document
from .common.config import config
from .common.exceptions import RuleSpiderError
from .common.logger import enable_file_logging, get_logger
from .common.validators import validate_file_path, validate_output_format
from .extractor import ExtractionEngine, Found, RuleSet, resolve
from .locator import SelectionState, activate, describe_element, highlight
from .output import format_output, save_output
from .storage import RuleSetStore, host_from_url, load_rule_set_file

# 日志器
logger = get_logger(__name__)

app = typer.Typer(
    name="rulespider",
    help="RuleSpider CLI - 规则提取与定位器生成工具",
    add_completion=False,
)
console = Console()


def _load_document(html_file: str | None, url: str | None) -> etree._Element:
    """本地文件优先，否则渲染在线页面"""
    if html_file:
        return load_document_file(validate_file_path(html_file), base_url=url)
    if url:
        return asyncio.run(load_page_document(url))
    raise typer.BadParameter("请提供 --html 或 --url")


def _load_rules(rules_file: str | None, url: str | None, document: etree._Element) -> RuleSet:
    """规则文件优先，否则按 hostname 读取已保存模板"""
    if rules_file:
        return load_rule_set_file(rules_file)

    source = url or document.getroottree().docinfo.URL or ""
    rule_set = RuleSetStore().load(host_from_url(source))
    if rule_set is None:
        raise typer.BadParameter(f"未找到站点模板，请提供 --rules: {source}")
    return rule_set


def _print_error(exc: Exception) -> None:
    console.print(Panel(f"[red]{exc}[/red]", title="执行错误", style="red"))


@app.callback()
def main_callback(
    log_file: str = typer.Option(
        "",
        "--log-file",
        help="额外写入日志文件",
    ),
):
    """全局选项"""
    if log_file:
        enable_file_logging(log_file)


@app.command("extract")
def extract_command(
    html_file: str = typer.Option(
        "",
        "--html",
        "-f",
        help="本地 HTML 文件",
    ),
    url: str = typer.Option(
        "",
        "--url",
        "-u",
        help="页面 URL（未提供 --html 时用浏览器渲染）",
    ),
    rules_file: str = typer.Option(
        "",
        "--rules",
        "-r",
        help="规则集文件（JSON / YAML）；缺省按 hostname 读取模板",
    ),
    fmt: str = typer.Option(
        "",
        "--format",
        help="输出格式: json / json-array / csv / markdown / raw",
    ),
    save: bool = typer.Option(
        False,
        "--save/--no-save",
        help="是否保存到输出目录",
    ),
    output_dir: str = typer.Option(
        "",
        "--output",
        "-o",
        help="输出目录",
    ),
    save_template: bool = typer.Option(
        False,
        "--save-template",
        help="把本次规则集保存为该站点模板",
    ),
):
    """
    按规则集提取页面数据

    示例:
        rulespider extract --html page.html --rules rules.yaml --format csv
    """
    try:
        document = _load_document(html_file or None, url or None)
        rule_set = _load_rules(rules_file or None, url or None, document)
        output = ExtractionEngine().extract(rule_set, document, source_url=url or None)
        chosen = validate_output_format(fmt or rule_set.format or config.output.default_format)

        typer.echo(format_output(output, chosen, rule_set))

        if save:
            config.ensure_dirs()
            path = save_output(output, chosen, output_dir or None, rule_set=rule_set)
            console.print(f"[green]已保存:[/green] {path}")

        if save_template:
            template = RuleSetStore().save(host_from_url(output.source_url), rule_set)
            console.print(f"[green]模板已保存:[/green] {template.hostname}")

    except RuleSpiderError as e:
        _print_error(e)
        raise typer.Exit(1)


@app.command("locate")
def locate_command(
    html_file: str = typer.Option(
        "",
        "--html",
        "-f",
        help="本地 HTML 文件",
    ),
    url: str = typer.Option(
        "",
        "--url",
        "-u",
        help="页面 URL",
    ),
    target: str = typer.Option(
        ...,
        "--target",
        "-t",
        help="用于选中目标元素的 XPath（模拟点击选择）",
    ),
):
    """
    为目标元素生成 XPath 与 CSS selector

    示例:
        rulespider locate --html page.html --target "(//table//td)[3]"
    """
    try:
        document = _load_document(html_file or None, url or None)
    except RuleSpiderError as e:
        _print_error(e)
        raise typer.Exit(1)

    resolved = resolve(target, document)
    if not isinstance(resolved, Found) or not isinstance(resolved.first, etree._Element):
        _print_error(ValueError(f"目标元素未找到: {target}"))
        raise typer.Exit(1)

    selected = describe_element(resolved.first)
    table = Table(title="定位结果")
    table.add_column("类型", style="cyan")
    table.add_column("值", style="green")
    table.add_row("tag", selected.tag)
    table.add_row("xpath", selected.xpath)
    table.add_row("selector", selected.selector)
    table.add_row("text", selected.element_text)
    console.print(table)


@app.command("highlight")
def highlight_command(
    html_file: str = typer.Option(
        "",
        "--html",
        "-f",
        help="本地 HTML 文件",
    ),
    url: str = typer.Option(
        "",
        "--url",
        "-u",
        help="页面 URL",
    ),
    xpath: str = typer.Option(
        ...,
        "--xpath",
        "-x",
        help="要重新定位的 XPath",
    ),
):
    """
    校验 XPath 能否重新定位到元素

    示例:
        rulespider highlight --html page.html --xpath '//*[@id="main"]'
    """
    try:
        document = _load_document(html_file or None, url or None)
    except RuleSpiderError as e:
        _print_error(e)
        raise typer.Exit(1)

    state, result = highlight(activate(SelectionState()), xpath, document)
    if state.highlighted is None:
        reason = getattr(result, "reason", "未命中")
        _print_error(ValueError(f"无法定位: {xpath} ({reason})"))
        raise typer.Exit(1)

    matched = len(result.nodes) if isinstance(result, Found) else 0
    selected = describe_element(state.highlighted)
    console.print(
        Panel(
            f"[bold]匹配数量:[/bold] {matched}\n"
            f"[bold]标签:[/bold] {selected.tag}\n"
            f"[bold]文本:[/bold] {selected.element_text}",
            title="定位成功",
            style="green",
        )
    )


@app.command("templates")
def templates_command():
    """列出已保存的站点模板"""
    hosts = RuleSetStore().list_hosts()
    if not hosts:
        console.print("[yellow]暂无模板[/yellow]")
        return
    table = Table(title="站点模板")
    table.add_column("hostname", style="cyan")
    for host in hosts:
        table.add_row(host)
    console.print(table)


def main():
    """CLI 入口点

    供 pyproject.toml 中 [project.scripts] 调用。
    """
    app()


if __name__ == "__main__":
    main()
