"""输入验证工具

提供 URL、文件路径等用户输入的验证功能。
"""

from __future__ import annotations

import re
from pathlib import Path
from urllib.parse import urlparse

from .constants import MAX_URL_LENGTH, OUTPUT_FORMATS, VALID_URL_SCHEMES
from .exceptions import URLValidationError, ValidationError


def validate_url(url: str, allow_empty: bool = False) -> str:
    """验证并清理 URL

    Args:
        url: 待验证的 URL 字符串
        allow_empty: 是否允许空 URL

    Returns:
        清理后的 URL

    Raises:
        URLValidationError: 当 URL 格式无效时
    """
    url = url.strip() if url else ""

    if not url:
        if allow_empty:
            return ""
        raise URLValidationError("", "URL 不能为空")

    if len(url) > MAX_URL_LENGTH:
        raise URLValidationError(url, f"URL 长度超过 {MAX_URL_LENGTH} 字符")

    try:
        result = urlparse(url)
    except ValueError as e:
        raise URLValidationError(url, f"URL 解析失败: {e}")

    if not result.scheme:
        raise URLValidationError(url, "缺少协议 (http/https)")

    if result.scheme.lower() not in VALID_URL_SCHEMES:
        raise URLValidationError(url, f"不支持的协议: {result.scheme}")

    # file:// 没有域名
    if result.scheme.lower() != "file" and not result.netloc:
        raise URLValidationError(url, "缺少域名")

    return url


def validate_output_format(fmt: str) -> str:
    """验证输出格式名称"""
    value = (fmt or "").strip().lower()
    if value not in OUTPUT_FORMATS:
        raise ValidationError(
            f"不支持的输出格式: {fmt}，可选: {', '.join(OUTPUT_FORMATS)}"
        )
    return value


def validate_file_path(path: str, must_exist: bool = True) -> str:
    """验证文件路径

    Args:
        path: 文件路径
        must_exist: 是否必须存在

    Returns:
        验证后的路径

    Raises:
        ValidationError: 当路径无效时
    """
    if not path or not path.strip():
        raise ValidationError("文件路径不能为空")

    path = path.strip()
    p = Path(path)

    if must_exist and not p.exists():
        raise ValidationError(f"文件不存在: {path}")

    if must_exist and not p.is_file():
        raise ValidationError(f"路径不是文件: {path}")

    return str(p.resolve())


def sanitize_filename(filename: str) -> str:
    """清理文件名，移除不安全字符

    Args:
        filename: 原始文件名

    Returns:
        安全的文件名
    """
    unsafe_chars = r'[<>:"/\\|?*\x00-\x1f]'
    safe_name = re.sub(unsafe_chars, "_", filename)

    safe_name = safe_name.strip(". ")

    if not safe_name:
        safe_name = "unnamed"

    if len(safe_name) > 200:
        safe_name = safe_name[:200]

    return safe_name
