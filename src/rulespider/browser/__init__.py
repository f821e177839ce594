"""文档加载模块"""

from .page_source import (
    parse_document,
    load_document_file,
    render_page,
    load_page_document,
)

__all__ = [
    "parse_document",
    "load_document_file",
    "render_page",
    "load_page_document",
]
