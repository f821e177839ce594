"""文档来源

提取核心只接收已经构建好的 lxml 文档树；本模块负责：
- 把 HTML 文本解析为文档树
- 从本地文件读取文档
- 用 Playwright 渲染在线页面并取回最终 HTML
"""

from __future__ import annotations

from pathlib import Path

from lxml import etree
from lxml import html as lxml_html
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from ..common.config import config
from ..common.exceptions import DocumentLoadError, PageLoadError
from ..common.logger import get_logger
from ..common.validators import validate_url

logger = get_logger(__name__)


def parse_document(html_content: str | bytes, base_url: str | None = None) -> etree._Element:
    """
    解析 HTML 为文档根元素

    Args:
        html_content: HTML 文本
        base_url: 文档地址，写入 docinfo.URL 供提取结果使用

    Raises:
        DocumentLoadError: 内容为空或无法解析
    """
    source = base_url or "<string>"
    if html_content is None or not html_content.strip():
        raise DocumentLoadError(source, "文档内容为空")

    try:
        return lxml_html.document_fromstring(html_content, base_url=base_url)
    except (etree.ParserError, ValueError) as exc:
        raise DocumentLoadError(source, f"文档解析失败 ({exc})") from exc


def load_document_file(path: str | Path, base_url: str | None = None) -> etree._Element:
    """从本地 HTML 文件加载文档；base_url 缺省为文件 URI"""
    file_path = Path(path)
    if not file_path.is_file():
        raise DocumentLoadError(str(file_path), "文件不存在")

    content = file_path.read_bytes()
    logger.debug(f"[PageSource] 读取文件: {file_path} ({len(content)} bytes)")
    return parse_document(content, base_url=base_url or file_path.resolve().as_uri())


async def render_page(
    url: str,
    headless: bool | None = None,
    timeout_ms: int | None = None,
    wait_until: str | None = None,
) -> str:
    """
    用 Chromium 渲染页面并返回最终 HTML

    Raises:
        PageLoadError: 页面在超时内无法加载
    """
    url = validate_url(url)
    headless = config.browser.headless if headless is None else headless
    timeout_ms = timeout_ms or config.browser.timeout_ms
    wait_until = wait_until or config.browser.wait_until

    logger.info(f"[PageSource] 渲染页面: {url}")
    async with async_playwright() as playwright:
        browser = await playwright.chromium.launch(headless=headless)
        try:
            page = await browser.new_page()
            await page.goto(url, wait_until=wait_until, timeout=timeout_ms)
            return await page.content()
        except PlaywrightError as exc:
            raise PageLoadError(url, f"页面加载失败 ({exc})") from exc
        finally:
            await browser.close()


async def load_page_document(url: str, **kwargs) -> etree._Element:
    """渲染在线页面并解析为文档"""
    content = await render_page(url, **kwargs)
    return parse_document(content, base_url=url)
