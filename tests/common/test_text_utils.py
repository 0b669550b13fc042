"""Tests for catalog_scraper/common/text_utils.py"""

from catalog_scraper.common.text_utils import resolve_url, strip_html, title_case_slug, unique


class TestStripHtml:
    def test_removes_tags(self):
        assert strip_html("<p>Fire <b>rated</b> seal</p>") == "Fire rated seal"

    def test_breaks_become_newlines(self):
        assert strip_html("Line one<br/>Line two") == "Line one\nLine two"

    def test_decodes_entities(self):
        assert strip_html("Steel &amp; Graphite&nbsp;Core") == "Steel & Graphite Core"

    def test_collapses_blank_lines(self):
        assert "\n\n" not in strip_html("<p>A</p>\n\n\n<p>B</p>")

    def test_empty_input(self):
        assert strip_html("") == ""

    def test_none_input(self):
        assert strip_html(None) == ""


class TestResolveUrl:
    def test_absolute_unchanged(self):
        assert resolve_url("https://cdn.example/a.pdf", "https://maker.example") == "https://cdn.example/a.pdf"

    def test_root_relative(self):
        assert resolve_url("/products/fc110", "https://maker.example/range/") == "https://maker.example/products/fc110"

    def test_page_relative(self):
        assert resolve_url("fc110", "https://maker.example/range/") == "https://maker.example/range/fc110"

    def test_strips_whitespace(self):
        assert resolve_url("  /a  ", "https://maker.example") == "https://maker.example/a"


class TestTitleCaseSlug:
    def test_hyphenated_slug(self):
        assert title_case_slug("fire-door-seal") == "Fire Door Seal"

    def test_keeps_existing_case(self):
        assert title_case_slug("GTEC-board") == "GTEC Board"


class TestUnique:
    def test_preserves_first_seen_order(self):
        assert unique(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]

    def test_accepts_generator(self):
        assert unique(x for x in [1, 1, 2]) == [1, 2]
