"""提取结果格式转换

支持格式: json | json-array | csv | markdown | raw

数组结果存在时，json-array / csv / markdown / raw 使用第一个数组规则的结果，
否则把单字段结果当作一行。
"""

from __future__ import annotations

import csv
import io
import json
from datetime import datetime
from pathlib import Path
from typing import Mapping, Sequence
from urllib.parse import urlparse

from ..common.config import config
from ..common.logger import get_logger
from ..common.validators import sanitize_filename, validate_output_format
from ..extractor.models import ExtractionValue, ExtractOutput, RuleSet

logger = get_logger(__name__)

# 一行结果；ExtractOutput 中是只读映射
Row = Mapping[str, ExtractionValue]

_EXTENSIONS = {
    "json": "json",
    "json-array": "json",
    "csv": "csv",
    "markdown": "md",
    "raw": "txt",
}

_MIME_TYPES = {
    "json": "application/json",
    "json-array": "application/json",
    "csv": "text/csv",
    "markdown": "text/markdown",
}


# ============================================================================
# 单元格转义
# ============================================================================


def _csv_line(values: Sequence[str]) -> str:
    # 以 \r\n 作行尾写出，保证含 \r 或 \n 的单元格被引号包裹，再去掉行尾
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="\r\n").writerow(values)
    return buffer.getvalue()[:-2]


def escape_csv_cell(value: str | None) -> str:
    """逗号、双引号、换行时加双引号包裹，双引号写两次"""
    if value is None:
        return ""
    text = str(value)
    return _csv_line([text]) if text else ""


def escape_markdown_cell(value: str | None) -> str:
    """转义竖线，换行替换为空格"""
    if value is None:
        return ""
    return str(value).replace("|", "\\|").replace("\r\n", " ").replace("\r", " ").replace("\n", " ")


# ============================================================================
# 基础转换
# ============================================================================


def _collect_headers(data: Sequence[Row]) -> list[str]:
    headers: list[str] = []
    for row in data:
        for key in row:
            if key not in headers:
                headers.append(key)
    return headers


def to_json(data: object) -> str:
    return json.dumps(data, ensure_ascii=False, indent=2)


def single_to_raw(result: Row) -> str:
    """key: value 形式，None 显示为 (null)"""
    return "\n".join(
        f"{key}: {value if value is not None else '(null)'}" for key, value in result.items()
    )


def to_csv(data: Sequence[Row], headers: list[str] | None = None) -> str:
    """转换为 CSV（无 BOM，\\n 换行）；空数据返回空字符串"""
    if not data:
        return ""
    columns = headers or _collect_headers(data)
    lines = [_csv_line(columns)]
    for row in data:
        lines.append(_csv_line(["" if row.get(h) is None else str(row.get(h)) for h in columns]))
    return "\n".join(lines)


def to_markdown(data: Sequence[Row], headers: list[str] | None = None) -> str:
    """转换为 Markdown 表格；空数据返回空字符串"""
    if not data:
        return ""
    columns = headers or _collect_headers(data)
    lines = [
        "| " + " | ".join(escape_markdown_cell(h) for h in columns) + " |",
        "| " + " | ".join("---" for _ in columns) + " |",
    ]
    for row in data:
        lines.append("| " + " | ".join(escape_markdown_cell(row.get(h)) for h in columns) + " |")
    return "\n".join(lines)


# ============================================================================
# 统一入口
# ============================================================================


def _first_array(output: ExtractOutput) -> tuple[str | None, Sequence[Row]]:
    for name, rows in output.array_results.items():
        return name, rows
    return None, ()


def _headers_for(output: ExtractOutput, rule_set: RuleSet | None) -> list[str] | None:
    if rule_set is None:
        return None
    array_name, _ = _first_array(output)
    if array_name is not None:
        for rule in rule_set.array_rules:
            if rule.name == array_name:
                return [child.name for child in rule.children]
        return None
    return [rule.name for rule in rule_set.rules] or None


def format_output(
    output: ExtractOutput,
    fmt: str | None = None,
    rule_set: RuleSet | None = None,
) -> str:
    """
    按格式渲染 ExtractOutput

    Args:
        output: 提取结果
        fmt: 输出格式，缺省使用 output.format
        rule_set: 用于确定 CSV / Markdown 的列顺序（可选）

    Returns:
        渲染后的字符串
    """
    fmt = validate_output_format(fmt or output.format)
    array_name, array_rows = _first_array(output)
    has_array = array_name is not None
    headers = _headers_for(output, rule_set)

    if fmt == "json":
        data = output.to_dict()
        return to_json(
            {
                "url": data["url"],
                "timestamp": data["timestamp"],
                "single": data["singleResults"],
                "object": data["objectResults"],
                "array": data["arrayResults"],
            }
        )

    if fmt == "json-array":
        rows = array_rows if has_array else [output.single_results]
        return to_json([dict(row) for row in rows])

    if fmt == "csv":
        return to_csv(array_rows if has_array else [output.single_results], headers)

    if fmt == "markdown":
        return to_markdown(array_rows if has_array else [output.single_results], headers)

    # raw
    if has_array:
        return "\n\n".join(
            f"--- [{index}] ---\n{single_to_raw(row)}"
            for index, row in enumerate(array_rows, start=1)
        )
    return single_to_raw(output.single_results)


def get_file_extension(fmt: str) -> str:
    return _EXTENSIONS.get(fmt, "txt")


def get_mime_type(fmt: str) -> str:
    return _MIME_TYPES.get(fmt, "text/plain")


def build_filename(url: str, fmt: str, now: datetime | None = None) -> str:
    """
    生成下载文件名

    格式: {prefix}-{hostname}-{YYYYMMDD-HHMMSS}.{ext}，无法解析主机名时为 {prefix}-export.{ext}
    """
    ext = get_file_extension(fmt)
    prefix = config.output.filename_prefix
    hostname = urlparse(url).hostname if url else None
    if not hostname:
        return f"{prefix}-export.{ext}"
    moment = now or datetime.now()
    stamp = moment.strftime("%Y%m%d-%H%M%S")
    return f"{prefix}-{hostname.replace('.', '-')}-{stamp}.{ext}"


def save_output(
    output: ExtractOutput,
    fmt: str | None = None,
    output_dir: str | Path | None = None,
    filename: str | None = None,
    rule_set: RuleSet | None = None,
) -> Path:
    """渲染并写入文件，返回文件路径"""
    fmt = validate_output_format(fmt or output.format)
    directory = Path(output_dir or config.output.output_dir)
    directory.mkdir(parents=True, exist_ok=True)

    name = sanitize_filename(filename) if filename else build_filename(output.source_url, fmt)
    path = directory / name
    path.write_text(format_output(output, fmt, rule_set), encoding="utf-8")
    logger.info(f"[Output] 结果已保存到: {path}")
    return path
