"""Shared test fixtures."""

from unittest.mock import MagicMock

import pytest

from catalog_scraper.models import ScrapedProduct, parse_scraper_config


class FakeClock:
    """Manually advanced monotonic clock for deadline tests."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_response(text: str = "", status: int = 200, json_data=None):
    """Build a requests.Response stand-in."""
    response = MagicMock()
    response.status_code = status
    response.ok = 200 <= status < 300
    response.reason = "OK" if response.ok else "Error"
    response.text = text
    if json_data is None:
        response.json.side_effect = ValueError("No JSON")
    else:
        response.json.return_value = json_data
    return response


def routed_get(routes, default_status: int = 404):
    """
    side_effect for session.get serving canned bodies by URL.

    Values are HTML/XML strings, dicts/lists (JSON) or exceptions to raise.
    """
    def _get(url, *args, **kwargs):
        if url not in routes:
            return make_response(status=default_status)
        body = routes[url]
        if isinstance(body, Exception):
            raise body
        if isinstance(body, (dict, list)):
            return make_response(json_data=body)
        return make_response(text=body)
    return _get


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def minimal_product():
    """Create a minimal product with only required fields."""
    return ScrapedProduct(
        product_name="Intumescent Pillow 300",
        source_url="https://maker.example/products/pillows/intumescent-pillow-300",
    )


@pytest.fixture
def full_product():
    """Create a fully populated product."""
    return ScrapedProduct(
        product_name="Fire Collar FC110",
        source_url="https://maker.example/products/collars/fc110",
        product_code="FC110",
        description="Intumescent pipe collar for plastic pipes up to 110mm.",
        specifications={"Fire Rating": "EI 120", "Material": "Steel"},
        price_text="£24.50",
        pdf_urls=["https://maker.example/docs/FC110-Datasheet.pdf"],
        image_urls=["https://maker.example/img/fc110.jpg"],
    )


@pytest.fixture
def html_config():
    """Generic config using regex extraction from detail pages."""
    return parse_scraper_config({
        "base_url": "https://maker.example",
        "listing": {
            "urls": ["https://maker.example/products"],
            "product_link_pattern": r'href="(/products/[a-z0-9\-]+)"',
        },
        "detail": {
            "method": "html",
            "name_pattern": r"<h1[^>]*>(.*?)</h1>",
            "description_pattern": r'<div class="desc">(.*?)</div>',
            "spec_table_pattern": r"<tr><th>(.*?)</th><td>(.*?)</td></tr>",
            "pdf_pattern": r'href="([^"]+\.pdf)"',
        },
        "request": {"delay_ms": 0, "batch_size": 5},
    })
