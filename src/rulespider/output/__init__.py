"""结果输出模块"""

from .formatter import (
    format_output,
    to_csv,
    to_markdown,
    single_to_raw,
    build_filename,
    get_file_extension,
    get_mime_type,
    save_output,
)

__all__ = [
    "format_output",
    "to_csv",
    "to_markdown",
    "single_to_raw",
    "build_filename",
    "get_file_extension",
    "get_mime_type",
    "save_output",
]
