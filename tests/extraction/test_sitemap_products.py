"""Tests for catalog_scraper/extraction/sitemap_products.py"""

import pytest

from catalog_scraper.extraction.sitemap_products import (
    PATH_HANDLERS,
    SKIP,
    product_from_sitemap_url,
    products_from_sitemap_urls,
)
from catalog_scraper.models import ScrapedProduct

WHITE_BOOK = "https://www.whitebook.example/Specification/White-Book-Specification-Selector"


class TestWhiteBookUrls:
    def test_system_product(self):
        product = product_from_sitemap_url(f"{WHITE_BOOK}/partitions/gypwall-classic/a206a221-en")
        assert product.product_name == "Gypwall Classic A206A221"
        assert product.product_code == "A206A221"
        assert product.specifications["Category"] == "Partitions"
        assert product.specifications["White Book Section"] == "Partitions"

    def test_overview_pages_skipped(self):
        assert product_from_sitemap_url(f"{WHITE_BOOK}/white-book-overview/intro/page") is None

    def test_too_shallow_skipped(self):
        assert product_from_sitemap_url(f"{WHITE_BOOK}/partitions") is None


class TestProductsPathUrls:
    def test_category_and_slug(self):
        product = product_from_sitemap_url("https://m.example/products/fire-collars/pipe-collar-110")
        assert product.product_name == "Pipe Collar 110"
        assert product.product_code == "pipe-collar-110"
        assert product.specifications == {"Category": "Fire Collars"}

    def test_category_only(self):
        product = product_from_sitemap_url("https://m.example/en/products/sealants")
        assert product.product_name == "Sealants"


class TestFallback:
    def test_last_segment(self):
        product = product_from_sitemap_url("https://m.example/range/fire-batt")
        assert product.product_name == "Fire Batt"
        assert product.specifications == {}

    def test_single_segment_skipped(self):
        assert product_from_sitemap_url("https://m.example/about") is None

    @pytest.mark.parametrize("url", [
        "https://m.example/range/-",
        "https://m.example/products/collars/---",
    ])
    def test_punctuation_only_slug_skipped(self, url):
        assert product_from_sitemap_url(url) is None


class TestHandlerRegistry:
    def test_custom_handler_takes_precedence(self):
        def handler(url, path, segments):
            if segments[0] == "kit":
                return ScrapedProduct(product_name="Kit " + segments[1], source_url=url)
            return None

        product = product_from_sitemap_url("https://m.example/kit/x1", [handler, *PATH_HANDLERS])
        assert product.product_name == "Kit x1"

    def test_skip_sentinel_rejects(self):
        assert product_from_sitemap_url("https://m.example/a/b", [lambda u, p, s: SKIP]) is None


class TestProductsFromSitemapUrls:
    def test_keeps_order_and_drops_unusable(self):
        products = products_from_sitemap_urls([
            "https://m.example/range/b",
            "https://m.example/about",
            "https://m.example/range/a",
        ])
        assert [p.product_name for p in products] == ["B", "A"]
