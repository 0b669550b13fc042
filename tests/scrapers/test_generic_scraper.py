"""Tests for catalog_scraper/scrapers/generic_scraper.py"""

import json
import threading
from unittest.mock import patch

import pytest

from catalog_scraper.common.deadline import Deadline
from catalog_scraper.common.progress import ProgressReporter
from catalog_scraper.models import parse_scraper_config
from catalog_scraper.scrapers.generic_scraper import (
    GenericScraper,
    extract_from_listing_html,
    map_api_item,
    name_from_link,
    navigate_path,
)
from conftest import make_response, routed_get

SITE = "https://maker.example"

DETAIL_PAGE = """<html><body>
<h1>Fire Collar <b>FC110</b></h1>
<div class="desc">Intumescent pipe collar.</div>
<table>
<tr><th>Fire Rating</th><td>EI 120</td></tr>
<tr><th>Pipe Size</th><td>110mm</td></tr>
</table>
<a href="/docs/fc110-datasheet.pdf">Datasheet</a>
</body></html>"""


def scrape(config, routes, **kwargs):
    with GenericScraper(**kwargs) as scraper:
        with patch.object(scraper.session, "get", side_effect=routed_get(routes)):
            return scraper.scrape(config)


class TestDetailPages:
    def test_end_to_end(self, html_config):
        routes = {
            f"{SITE}/products": '<a href="/products/fc110">A</a><a href="/products/broken">B</a>',
            f"{SITE}/products/fc110": DETAIL_PAGE,
            f"{SITE}/products/broken": "<html><body><p>No heading here</p></body></html>",
        }
        products = scrape(html_config, routes)

        assert len(products) == 1
        product = products[0]
        assert product.product_name == "Fire Collar FC110"
        assert product.description == "Intumescent pipe collar."
        assert product.specifications == {"Fire Rating": "EI 120", "Pipe Size": "110mm"}
        assert product.pdf_urls == [f"{SITE}/docs/fc110-datasheet.pdf"]
        assert product.source_url == f"{SITE}/products/fc110"

    def test_failed_detail_fetch_skipped(self, html_config):
        routes = {
            f"{SITE}/products": '<a href="/products/fc110"></a><a href="/products/gone"></a>',
            f"{SITE}/products/fc110": DETAIL_PAGE,
        }
        assert [p.source_url for p in scrape(html_config, routes)] == [f"{SITE}/products/fc110"]

    def test_duplicate_links_fetched_once(self, html_config):
        routes = {
            f"{SITE}/products": '<a href="/products/fc110"></a>' * 3,
            f"{SITE}/products/fc110": DETAIL_PAGE,
        }
        assert len(scrape(html_config, routes)) == 1

    def test_listing_failure_gives_empty(self, html_config):
        assert scrape(html_config, {}) == []

    def test_progress_events(self, html_config):
        events = []
        routes = {
            f"{SITE}/products": '<a href="/products/fc110"></a>',
            f"{SITE}/products/fc110": DETAIL_PAGE,
        }
        scrape(html_config, routes, reporter=ProgressReporter(callback=events.append))
        detail_events = [e for e in events if e.stage == "Scraping detail pages"]
        assert detail_events[-1].current == 1
        assert detail_events[-1].found == 1

    def test_batches_bounded(self):
        config = parse_scraper_config({
            "base_url": SITE,
            "listing": {"urls": [f"{SITE}/products"], "product_link_pattern": r'href="(/p/\d+)"'},
            "detail": {"name_pattern": "<h1>(.*?)</h1>"},
            "request": {"delay_ms": 0, "batch_size": 3},
        })
        lock = threading.Lock()
        state = {"active": 0, "peak": 0}
        listing = "".join(f'<a href="/p/{i}"></a>' for i in range(10))

        def get(url, *args, **kwargs):
            if url == f"{SITE}/products":
                return make_response(listing)
            with lock:
                state["active"] += 1
                state["peak"] = max(state["peak"], state["active"])
            with lock:
                state["active"] -= 1
            return make_response(f"<h1>Item {url[-1]}</h1>")

        with GenericScraper() as scraper:
            with patch.object(scraper.session, "get", side_effect=get):
                products = scraper.scrape(config)

        assert len(products) == 10
        assert state["peak"] <= 3


class TestRunBudget:
    def test_returns_partial_results_when_budget_exhausted(self, fake_clock):
        config = parse_scraper_config({
            "base_url": SITE,
            "listing": {"urls": [f"{SITE}/products"], "product_link_pattern": r'href="(/p/\d+)"'},
            "detail": {"name_pattern": "<h1>(.*?)</h1>"},
            "request": {"delay_ms": 0, "batch_size": 5},
        })
        listing = "".join(f'<a href="/p/{i}"></a>' for i in range(50))
        lock = threading.Lock()

        def slow_get(url, *args, **kwargs):
            if url == f"{SITE}/products":
                return make_response(listing)
            with lock:
                fake_clock.advance(1)
            return make_response("<h1>Item</h1>")

        with GenericScraper(deadline=Deadline(5, clock=fake_clock)) as scraper:
            with patch.object(scraper.session, "get", side_effect=slow_get):
                products = scraper.scrape(config)

        assert 0 < len(products) < 50

    def test_expired_before_start(self, html_config, fake_clock):
        deadline = Deadline(1, clock=fake_clock)
        fake_clock.advance(2)
        assert scrape(html_config, {f"{SITE}/products": DETAIL_PAGE}, deadline=deadline) == []


class TestPagination:
    def test_stops_at_first_missing_page(self):
        config = parse_scraper_config({
            "base_url": SITE,
            "listing": {
                "urls": [f"{SITE}/range"],
                "pagination": f"{SITE}/range?page={{page}}",
                "max_pages": 5,
                "product_link_pattern": r'href="([^"]+\.pdf)"',
            },
            "detail": {"method": "listing-only"},
            "request": {"delay_ms": 0},
        })
        routes = {
            f"{SITE}/range": '<a href="/d/a.pdf"></a>',
            f"{SITE}/range?page=2": '<a href="/d/b.pdf"></a>',
            f"{SITE}/range?page=4": '<a href="/d/never.pdf"></a>',
        }
        products = scrape(config, routes)
        assert [p.source_url for p in products] == [f"{SITE}/d/a.pdf", f"{SITE}/d/b.pdf"]

    def test_delay_between_listing_fetches(self, html_config):
        config = parse_scraper_config({
            "base_url": SITE,
            "listing": {"urls": [f"{SITE}/a", f"{SITE}/b"], "product_link_pattern": r'href="(/x)"'},
            "detail": {"method": "listing-only"},
            "request": {"delay_ms": 250},
        })
        with patch("catalog_scraper.scrapers.generic_scraper.time.sleep") as mock_sleep:
            scrape(config, {})
        mock_sleep.assert_called_with(0.25)


class TestListingOnly:
    def test_pairs_names_with_links(self):
        config = parse_scraper_config({
            "base_url": SITE,
            "listing": {"urls": [f"{SITE}/downloads"], "product_link_pattern": r'href="([^"]+\.pdf)"'},
            "detail": {"method": "listing-only", "name_pattern": r'<span class="name">(.*?)</span>'},
            "request": {"delay_ms": 0},
        })
        html = (
            '<span class="name">Collar Datasheet</span><span class="name">Batt Guide</span>'
            '<span class="name">Sealant DoP</span>'
            + "".join(f'<a href="/files/doc{i}.pdf"></a>' for i in range(5))
        )
        products = extract_from_listing_html(html, config)

        assert len(products) == 3
        assert products[0].product_name == "Collar Datasheet"
        assert products[0].pdf_urls == [f"{SITE}/files/doc0.pdf"]
        assert products[2].source_url == f"{SITE}/files/doc2.pdf"

    def test_links_named_from_slug_without_names(self):
        config = parse_scraper_config({
            "base_url": SITE,
            "listing": {"urls": [f"{SITE}/downloads"], "product_link_pattern": r'href="([^"]+\.pdf)"'},
            "detail": {"method": "listing-only"},
        })
        products = extract_from_listing_html('<a href="/files/fire_stop-guide.pdf"></a>', config)
        assert products[0].product_name == "fire stop guide"
        assert products[0].pdf_urls == [f"{SITE}/files/fire_stop-guide.pdf"]

    def test_name_from_link(self):
        assert name_from_link("/docs/fire_stop-guide.pdf") == "fire stop guide"
        assert name_from_link("/") == "Unknown"


class TestJsonLd:
    CONFIG = {
        "base_url": SITE,
        "listing": {"urls": [f"{SITE}/range"], "product_link_pattern": r'href="(/range/[a-z]+)"'},
        "detail": {"method": "json-ld", "name_pattern": "<h1>(.*?)</h1>", "pdf_pattern": r'href="([^"]+\.pdf)"'},
        "request": {"delay_ms": 0},
    }

    def test_structured_data_with_document_links(self):
        data = {"@type": "Product", "name": "Acoustic Sealant", "sku": "AS-310"}
        routes = {
            f"{SITE}/range": '<a href="/range/sealant"></a>',
            f"{SITE}/range/sealant": (
                f'<script type="application/ld+json">{json.dumps(data)}</script>'
                '<h1>Ignored Heading</h1><a href="/docs/as310.pdf">DoP</a>'
            ),
        }
        products = scrape(parse_scraper_config(self.CONFIG), routes)
        assert products[0].product_name == "Acoustic Sealant"
        assert products[0].product_code == "AS-310"
        assert products[0].pdf_urls == [f"{SITE}/docs/as310.pdf"]

    def test_falls_back_to_patterns(self):
        routes = {
            f"{SITE}/range": '<a href="/range/batt"></a>',
            f"{SITE}/range/batt": "<h1>Fire Batt</h1>",
        }
        products = scrape(parse_scraper_config(self.CONFIG), routes)
        assert products[0].product_name == "Fire Batt"


class TestSitemapMethod:
    def test_products_from_sitemap_paths(self):
        config = parse_scraper_config({
            "base_url": SITE,
            "listing": {"urls": [f"{SITE}/sitemap.xml"], "product_link_pattern": r"<loc>(.*?)</loc>"},
            "detail": {"method": "sitemap"},
            "request": {"delay_ms": 0},
        })
        routes = {
            f"{SITE}/sitemap.xml": (
                f"<urlset><url><loc>{SITE}/products/collars/fc-110</loc></url>"
                f"<url><loc>{SITE}/about</loc></url></urlset>"
            ),
        }
        products = scrape(config, routes)
        assert [p.product_name for p in products] == ["Fc 110"]

    def test_blank_slug_does_not_abort_run(self):
        config = parse_scraper_config({
            "base_url": SITE,
            "listing": {"urls": [f"{SITE}/sitemap.xml"], "product_link_pattern": r"<loc>(.*?)</loc>"},
            "detail": {"method": "sitemap"},
            "request": {"delay_ms": 0},
        })
        routes = {
            f"{SITE}/sitemap.xml": (
                f"<urlset><url><loc>{SITE}/range/fire-collar</loc></url>"
                f"<url><loc>{SITE}/range/-</loc></url></urlset>"
            ),
        }
        products = scrape(config, routes)
        assert [p.product_name for p in products] == ["Fire Collar"]


class TestApiMode:
    def make_config(self, **api):
        return parse_scraper_config({
            "base_url": SITE,
            "api": {"url": "https://api.maker.example/products", "results_path": "data.items", **api},
            "request": {"delay_ms": 0},
        })

    def test_maps_fields(self):
        config = self.make_config(name_field="title", url_field="link", code_field="sku",
                                  description_field="summary")
        payload = {"data": {"items": [
            {"title": "Collar", "link": "/p/collar", "sku": "C1", "summary": "<p>Pipe collar</p>"},
            {"title": "Collar again", "link": "/p/collar", "sku": "C1"},
            {"title": "", "link": "/p/blank"},
        ]}}
        products = scrape(config, {"https://api.maker.example/products": payload})

        assert len(products) == 1
        assert products[0].product_name == "Collar"
        assert products[0].product_code == "C1"
        assert products[0].description == "Pipe collar"
        assert products[0].source_url == f"{SITE}/p/collar"

    def test_no_url_field_keeps_every_item(self):
        config = self.make_config()
        payload = {"data": {"items": [{"name": "A"}, {"title": "B"}]}}
        products = scrape(config, {"https://api.maker.example/products": payload})
        assert [p.product_name for p in products] == ["A", "B"]
        assert all(p.source_url == SITE for p in products)

    def test_post_sends_body_template(self):
        config = self.make_config(method="POST", body_template='{"q": "fire"}', name_field="title")
        with GenericScraper() as scraper:
            with patch.object(scraper.session, "post",
                              return_value=make_response(json_data={"data": {"items": [{"title": "X"}]}})) as mock_post:
                products = scraper.scrape(config)

        assert [p.product_name for p in products] == ["X"]
        kwargs = mock_post.call_args.kwargs
        assert kwargs["data"] == '{"q": "fire"}'
        assert kwargs["headers"]["Content-Type"] == "application/json"

    def test_non_list_results(self):
        config = self.make_config()
        assert scrape(config, {"https://api.maker.example/products": {"data": {"items": {}}}}) == []

    def test_api_failure(self):
        assert scrape(self.make_config(), {}) == []


class TestHelpers:
    def test_navigate_path(self):
        assert navigate_path({"a": {"b": [10, 20]}}, "a.b.1") == 20
        assert navigate_path({"a": 1}, "a.b") is None
        assert navigate_path([1], None) == [1]

    def test_map_api_item_ignores_non_dict(self):
        config = parse_scraper_config({"base_url": SITE, "api": {"url": "https://api"}})
        assert map_api_item("nope", config) is None
