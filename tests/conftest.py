"""pytest 全局配置和 fixtures

提供测试所需的合成文档。
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from lxml import html as lxml_html

# 添加项目路径
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def make_document(markup: str, base_url: str | None = "https://example.com/page"):
    """把 HTML 片段解析为文档根元素"""
    return lxml_html.document_fromstring(markup, base_url=base_url)


# ============================================================================
# 文档 Fixtures
# ============================================================================


@pytest.fixture
def document_factory():
    """返回解析 HTML 的工厂函数"""
    return make_document


@pytest.fixture
def title_document():
    """带 id 标题的简单页面"""
    return make_document(
        "<html><head><title>测试页面</title></head>"
        "<body><h1 id=\"main\">Hello</h1><p class=\"lead\">  intro text  </p></body></html>"
    )


@pytest.fixture
def table_document():
    """两行单元格的表格"""
    return make_document(
        "<html><body>"
        "<table><tbody>"
        "<tr><td>A</td></tr>"
        "<tr><td>B</td></tr>"
        "</tbody></table>"
        "</body></html>"
    )


@pytest.fixture
def product_document():
    """商品列表页：单字段、对象、数组规则都能用到"""
    return make_document(
        """
        <html>
          <body>
            <header><h1 class="site">Shop</h1></header>
            <div id="summary">
              <span class="count">3</span>
              <span class="currency">EUR</span>
            </div>
            <ul class="products">
              <li class="item"><a href="/p/1">Apple</a><span class="price">1.00</span></li>
              <li class="item"><a href="/p/2">Banana</a><span class="price">2.50</span></li>
              <li class="item"><a href="/p/3">Cherry</a></li>
            </ul>
            <footer><p>Contact <b>us</b></p></footer>
          </body>
        </html>
        """
    )


@pytest.fixture
def nested_document():
    """无 id 祖先的深层嵌套文档"""
    return make_document(
        "<html><body>"
        "<div><section><article><div><p><span><em>deep</em></span></p></div></article></section></div>"
        "</body></html>"
    )
