"""CSS selector 生成器单元测试"""

from __future__ import annotations

import pytest

from rulespider.extractor.resolver import resolve_all, resolve_one
from rulespider.locator.selector import (
    build_selector_segment,
    css_escape,
    generate_css_selector,
    has_unique_id,
)


class TestIdSelector:
    """唯一 id"""

    def test_unique_id(self, title_document):
        h1 = resolve_one("//h1", title_document)
        assert generate_css_selector(h1) == "#main"

    def test_duplicate_id_falls_back_to_path(self, document_factory):
        doc = document_factory(
            '<html><body><div id="dup"><p>a</p></div><div id="dup"><p>b</p></div></body></html>'
        )
        second_div, second_p = resolve_all("//div", doc)[1], resolve_all("//p", doc)[1]
        assert not has_unique_id(second_div, "dup")
        assert generate_css_selector(second_div) == "html > body > div:nth-child(2)"
        assert generate_css_selector(second_p) == "html > body > div:nth-child(2) > p"

    def test_id_is_escaped(self, document_factory):
        doc = document_factory('<html><body><p id="1st">x</p></body></html>')
        assert generate_css_selector(resolve_one("//p", doc)) == "#\\31 st"

    def test_unique_ancestor_anchors(self, product_document):
        count = resolve_one("//span[@class='count']", product_document)
        assert generate_css_selector(count) == "#summary > span.count"


class TestPathSelector:
    """tag.class 层级路径"""

    def test_nth_child_for_repeated_signature(self, product_document):
        second = resolve_all("//li", product_document)[1]
        assert generate_css_selector(second) == "html > body > ul.products > li.item:nth-child(2)"

    def test_unique_signature_has_no_nth_child(self, product_document):
        link = resolve_all("//li/a", product_document)[0]
        assert build_selector_segment(link) == "a"

    def test_nth_child_counts_all_element_siblings(self, document_factory):
        doc = document_factory("<html><body><div><p>1</p><span>2</span><p>3</p></div></body></html>")
        last = resolve_all("//p", doc)[1]
        assert build_selector_segment(last) == "p:nth-child(3)"

    def test_different_classes_are_distinct(self, document_factory):
        doc = document_factory(
            '<html><body><ul><li class="a">1</li><li class="b">2</li></ul></body></html>'
        )
        second = resolve_all("//li", doc)[1]
        assert build_selector_segment(second) == "li.b"

    def test_all_classes_included(self, document_factory):
        doc = document_factory('<html><body><p class="lead  big">x</p></body></html>')
        assert build_selector_segment(resolve_one("//p", doc)) == "p.lead.big"

    def test_class_names_are_escaped(self, document_factory):
        doc = document_factory('<html><body><p class="w-1/2 2col">x</p></body></html>')
        assert build_selector_segment(resolve_one("//p", doc)) == "p.w-1\\/2.\\32 col"

    def test_depth_is_capped(self, nested_document):
        em = resolve_one("//em", nested_document)
        selector = generate_css_selector(em)
        assert selector == "article > div > p > span > em"
        assert len(selector.split(" > ")) == 5

    def test_custom_depth(self, nested_document):
        em = resolve_one("//em", nested_document)
        assert generate_css_selector(em, max_depth=2) == "span > em"

    def test_non_element_rejected(self):
        with pytest.raises(TypeError):
            generate_css_selector(None)


class TestCssEscape:
    """CSS 标识符转义"""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("plain", "plain"),
            ("with-dash_under", "with-dash_under"),
            ("1abc", "\\31 abc"),
            ("-1a", "-\\31 a"),
            ("-", "\\-"),
            ("a.b", "a\\.b"),
            ("a:b", "a\\:b"),
            ("a b", "a\\ b"),
            ("中文", "中文"),
            ("a\x00b", "a\ufffdb"),
            ("a\nb", "a\\a b"),
        ],
    )
    def test_escape(self, raw, expected):
        assert css_escape(raw) == expected
