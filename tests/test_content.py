"""Tests for tripleparser.extractors.content: headings, JSON-LD and text."""

from __future__ import annotations

import logging

import pytest

from tripleparser.extractors.content import (
    collect_jsonld,
    declared_language,
    extract_content,
    extract_headings,
    heading_context,
    score_importance,
)
from tripleparser.extractors.dom import Element, build_tree, parse_html
from tripleparser.items import (
    BreadcrumbListData,
    OrganizationData,
    OtherData,
    ProductData,
    WebPageData,
)

# ---------------------------------------------------------------------------
# Importance scoring
# ---------------------------------------------------------------------------

class TestScoreImportance:
    @pytest.mark.parametrize(("level", "expected"), [(1, 6), (2, 5), (3, 4), (6, 1)])
    def test_base_score(self, level, expected):
        assert score_importance(level, "features", "") == expected

    def test_main_bonus(self):
        assert score_importance(2, "main", "") == 7

    def test_long_sibling_bonus(self):
        assert score_importance(2, "features", "x" * 101) == 6

    def test_exactly_100_chars_no_bonus(self):
        assert score_importance(2, "features", "x" * 100) == 5

    def test_clamped(self):
        for level in range(1, 7):
            for ctx in ("main", "other"):
                for sib in ("", "y" * 500):
                    assert 1 <= score_importance(level, ctx, sib) <= 10


# ---------------------------------------------------------------------------
# Section context
# ---------------------------------------------------------------------------

class TestHeadingContext:
    def test_no_container(self):
        assert heading_context((Element(tag="body"), Element(tag="div"))) == "main"

    def test_id_wins(self):
        anc = (Element(tag="body"), Element(tag="section", attrs={"id": "pricing"}))
        assert heading_context(anc) == "pricing"

    def test_main_tag(self):
        assert heading_context((Element(tag="body"), Element(tag="main"))) == "main"

    def test_role_main(self):
        anc = (Element(tag="body"), Element(tag="div", attrs={"role": "main"}))
        assert heading_context(anc) == "main"

    def test_class_names_article(self):
        anc = (Element(tag="body"), Element(tag="article", attrs={"class": "post featured"}))
        assert heading_context(anc) == "post"

    def test_id_beats_class(self):
        anc = (Element(tag="body"),
               Element(tag="section", attrs={"id": "faq", "class": "panel"}))
        assert heading_context(anc) == "faq"

    def test_main_ignores_class(self):
        anc = (Element(tag="body"), Element(tag="main", attrs={"class": "content"}))
        assert heading_context(anc) == "main"

    def test_nearest_container(self):
        anc = (
            Element(tag="body"),
            Element(tag="main"),
            Element(tag="article"),
            Element(tag="div"),
        )
        assert heading_context(anc) == "article"


# ---------------------------------------------------------------------------
# Headings
# ---------------------------------------------------------------------------

class TestExtractHeadings:
    def test_product_fixture(self, product_html):
        headings = extract_headings(build_tree(product_html))
        assert [(h.level, h.text, h.section_context, h.importance) for h in headings] == [
            (1, "Acme Anvil", "main", 9),
            (2, "Features", "features", 6),
            (3, "Materials", "features", 4),
            (4, "Contact", "main", 5),
        ]

    def test_article_fixture(self, article_html):
        headings = extract_headings(build_tree(article_html))
        assert [(h.text, h.section_context, h.importance) for h in headings] == [
            ("Carnet", "main", 8),
            ("Première entrée", "article", 5),
            ("Deuxième entrée", "section", 5),
            ("À lire aussi", "main", 4),
        ]

    def test_empty_heading_skipped(self):
        body = build_tree("<html><body><h1>  </h1><h2><img src='x.png'></h2><h3>ok</h3></body></html>")
        assert [h.text for h in extract_headings(body)] == ["ok"]

    def test_hidden_heading_still_listed(self):
        body = build_tree('<html><body><h2 style="display:none">Ghost</h2></body></html>')
        assert [h.text for h in extract_headings(body)] == ["Ghost"]

    def test_document_order(self):
        body = build_tree(
            "<html><body><div><h3>a</h3></div><h1>b</h1><section><h2>c</h2></section></body></html>",
        )
        assert [h.text for h in extract_headings(body)] == ["a", "b", "c"]


# ---------------------------------------------------------------------------
# JSON-LD
# ---------------------------------------------------------------------------

class TestCollectJsonld:
    def test_graph_flattened_and_bad_block_skipped(self, product_html, caplog):
        with caplog.at_level(logging.WARNING, logger="tripleparser.extractors.content"):
            objects = collect_jsonld(parse_html(product_html))
        assert [o.get("@type") for o in objects] == [
            "Product", "Organization", "BreadcrumbList", "Event", None,
        ]
        assert "Invalid JSON-LD block" in caplog.text

    def test_top_level_array(self, article_html):
        objects = collect_jsonld(parse_html(article_html))
        assert len(objects) == 2

    def test_ignores_other_scripts(self):
        soup = parse_html(
            '<html><head><script type="text/javascript">{"@type":"X"}</script>'
            '<script type="application/ld+json">   </script></head><body></body></html>',
        )
        assert collect_jsonld(soup) == []

    def test_custom_logger_receives_warning(self):
        seen: list[str] = []

        class _Capture(logging.Handler):
            def emit(self, record):
                seen.append(record.getMessage())

        log = logging.getLogger("test.collect_jsonld")
        log.addHandler(_Capture())
        log.propagate = False
        try:
            collect_jsonld(
                parse_html('<script type="application/ld+json">{oops</script>'),
                log=log,
            )
        finally:
            log.handlers.clear()
            log.propagate = True
        assert len(seen) == 1


# ---------------------------------------------------------------------------
# Language
# ---------------------------------------------------------------------------

class TestDeclaredLanguage:
    def test_html_lang(self, product_html):
        assert declared_language(parse_html(product_html)) == "en"

    def test_og_locale(self, article_html):
        assert declared_language(parse_html(article_html)) == "fr"

    def test_content_language_meta(self):
        soup = parse_html(
            '<html><head><meta http-equiv="Content-Language" content="nl-NL, en">'
            "</head><body></body></html>",
        )
        assert declared_language(soup) == "nl"

    def test_none(self):
        assert declared_language(parse_html("<html><body>x</body></html>")) is None


# ---------------------------------------------------------------------------
# Whole-page extraction
# ---------------------------------------------------------------------------

class TestExtractContent:
    def test_product_page(self, product_html):
        content = extract_content(product_html)
        assert content.main_content.startswith("Home\nAcme Anvil\nThe only anvil")
        for hidden in ("Secret promo code", "Hidden note", "tracking", "color: red"):
            assert hidden not in content.main_content
        assert len(content.headings) == 4
        assert [type(i) for i in content.structured_data] == [
            ProductData, OrganizationData, BreadcrumbListData, OtherData,
        ]
        assert content.language == "en"
        assert not content.is_empty

    def test_article_page(self, article_html):
        content = extract_content(article_html)
        assert all(isinstance(i, WebPageData) for i in content.structured_data)
        assert [i.type for i in content.structured_data] == ["WebPage", "ItemPage"]

    def test_scripts_only_is_empty(self, scripts_only_html):
        content = extract_content(scripts_only_html)
        assert content.main_content == ""
        assert content.headings == []
        assert content.is_empty

    def test_no_body(self):
        content = extract_content("")
        assert content.is_empty
        assert content.structured_data == []

    def test_deeply_nested_page(self):
        html = (
            "<html><body>" + "<div>" * 2000 + "<h1>Deep</h1><p>bottom text</p>"
            + "</div>" * 2000 + "</body></html>"
        )
        content = extract_content(html)
        assert [h.text for h in content.headings] == ["Deep"]
        assert content.main_content == "Deep\nbottom text"

    def test_malformed_jsonld_does_not_fail_page(self):
        html = (
            '<html><head><script type="application/ld+json">{"@type": "Product",</script>'
            "</head><body><h1>Still here</h1></body></html>"
        )
        content = extract_content(html)
        assert [h.text for h in content.headings] == ["Still here"]
        assert content.structured_data == []
