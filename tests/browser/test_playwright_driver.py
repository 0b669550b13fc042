"""Tests for catalog_scraper/browser/playwright_driver.py"""

from unittest.mock import MagicMock

import pytest
from playwright.sync_api import Error as PlaywrightError

from catalog_scraper.browser.playwright_driver import BrowserScraper
from catalog_scraper.common.deadline import Deadline
from catalog_scraper.common.progress import ProgressReporter
from catalog_scraper.models import (
    BrowserPagination,
    BrowserScraperConfig,
    DetailSelectors,
    PaginationType,
    RegulationScraperConfig,
)

LIST_URL = "https://maker.example/products/"


def element(text=None, href=None, children=None):
    el = MagicMock()
    el.text_content.return_value = text
    el.get_attribute.side_effect = lambda name: href if name == "href" else None
    children = children or {}
    el.query_selector.side_effect = lambda sel: children.get(sel)
    return el


def card(name, href):
    return element(children={"h3": element(text=name), "a": element(href=href)})


def listing_page(pages_of_cards, next_buttons=None):
    """Listing page serving one list of cards per visited listing page."""
    page = MagicMock()
    page.url = LIST_URL
    page.query_selector_all.side_effect = list(pages_of_cards)
    buttons = list(next_buttons or [])
    page.query_selector.side_effect = lambda sel: buttons.pop(0) if buttons else None
    return page


def detail_page(details):
    """Detail page whose selectors answer from details[current url]."""
    page = MagicMock()
    state = {}

    def goto(url, **kwargs):
        body = details[url]
        if isinstance(body, Exception):
            raise body
        state["url"] = url

    page.goto.side_effect = goto
    page.query_selector.side_effect = lambda sel: details[state["url"]].get(sel)
    page.query_selector_all.side_effect = lambda sel: details[state["url"]].get(sel, [])
    return page


def spec_row(*cells):
    row = MagicMock()
    row.query_selector_all.return_value = [element(text=c) for c in cells]
    return row


def fake_browser(*pages):
    factory = MagicMock()
    pw = factory.return_value.__enter__.return_value
    browser = pw.chromium.launch.return_value
    browser.new_page.side_effect = list(pages)
    return factory, browser


@pytest.fixture
def config():
    return BrowserScraperConfig(
        product_list_url=LIST_URL,
        product_list_selector=".card",
        product_name_selector="h3",
        product_link_selector="a",
        detail=DetailSelectors(description=".desc", specs="table tr", price=".price", pdf_link="a.pdf"),
        pagination=BrowserPagination(type=PaginationType.NEXT_BUTTON, selector="a.next", max_pages=3),
    )


class TestScrapeProducts:
    def test_listing_and_detail(self, config):
        listing = listing_page([[card("Fire Collar", "fc110"), card("No Link", None)]])
        detail = detail_page({
            LIST_URL + "fc110": {
                ".desc": element(text="  Pipe collar for plastic pipes.  "),
                ".price": element(text="£24.50"),
                "table tr": [spec_row("Fire Rating", "EI 120"), spec_row("Header only"), spec_row("Empty", "")],
                "a.pdf": [element(href="/docs/fc110.pdf"), element(href=None)],
            },
        })
        factory, browser = fake_browser(listing, detail)

        products = BrowserScraper(playwright_factory=factory).scrape_products(config)

        assert len(products) == 1
        product = products[0]
        assert product.product_name == "Fire Collar"
        assert product.source_url == LIST_URL + "fc110"
        assert product.description == "Pipe collar for plastic pipes."
        assert product.price_text == "£24.50"
        assert product.specifications == {"Fire Rating": "EI 120"}
        assert product.pdf_urls == ["https://maker.example/docs/fc110.pdf"]
        browser.close.assert_called_once()

    def test_missing_detail_selectors_give_none(self, config):
        listing = listing_page([[card("Batt", "batt")]])
        detail = detail_page({LIST_URL + "batt": {}})
        factory, _ = fake_browser(listing, detail)

        product = BrowserScraper(playwright_factory=factory).scrape_products(config)[0]

        assert product.description is None
        assert product.price_text is None
        assert product.specifications == {}
        assert product.pdf_urls == []

    def test_failed_detail_page_skipped(self, config):
        listing = listing_page([[
            card("Broken", "broken"),
            card("  ", "nameless"),
            card("Good", "good"),
        ]])
        detail = detail_page({
            LIST_URL + "broken": PlaywrightError("net::ERR_CONNECTION_RESET"),
            LIST_URL + "good": {},
            LIST_URL + "nameless": {},
        })
        factory, _ = fake_browser(listing, detail)

        products = BrowserScraper(playwright_factory=factory).scrape_products(config)

        assert [p.product_name for p in products] == ["Good"]

    def test_follows_next_button(self, config):
        next_button = MagicMock()
        listing = listing_page(
            [[card("A", "a")], [card("B", "b")]],
            next_buttons=[next_button],
        )
        detail = detail_page({LIST_URL + "a": {}, LIST_URL + "b": {}})
        factory, _ = fake_browser(listing, detail)
        events = []

        products = BrowserScraper(
            reporter=ProgressReporter(callback=events.append), playwright_factory=factory
        ).scrape_products(config)

        assert [p.product_name for p in products] == ["A", "B"]
        next_button.click.assert_called_once()
        listing.wait_for_load_state.assert_called_once_with("networkidle", timeout=30_000)
        assert [(e.stage, e.current, e.found) for e in events] == [
            ("Browser: scraping listing", 1, 1),
            ("Browser: scraping listing", 2, 2),
        ]

    def test_no_pagination_reads_first_page_only(self, config):
        config = BrowserScraperConfig(
            product_list_url=LIST_URL,
            product_list_selector=".card",
            product_name_selector="h3",
            product_link_selector="a",
        )
        listing = listing_page([[card("A", "a")]], next_buttons=[MagicMock()])
        detail = detail_page({LIST_URL + "a": {}})
        factory, _ = fake_browser(listing, detail)

        products = BrowserScraper(playwright_factory=factory).scrape_products(config)

        assert len(products) == 1
        listing.query_selector.assert_not_called()

    def test_max_pages_limits_listing(self, config):
        buttons = [MagicMock() for _ in range(5)]
        listing = listing_page([[card(f"P{i}", f"p{i}")] for i in range(5)], next_buttons=buttons)
        detail = detail_page({LIST_URL + f"p{i}": {} for i in range(5)})
        factory, _ = fake_browser(listing, detail)

        products = BrowserScraper(playwright_factory=factory).scrape_products(config)

        assert len(products) == 3
        assert listing.query_selector.call_count == 2

    def test_deadline_returns_partial_results(self, config, fake_clock):
        listing = listing_page([[card("A", "a"), card("B", "b")]])
        detail = detail_page({LIST_URL + "a": {}, LIST_URL + "b": {}})
        navigate = detail.goto.side_effect

        def slow_goto(url, **kwargs):
            fake_clock.advance(60)
            navigate(url, **kwargs)

        detail.goto.side_effect = slow_goto
        factory, browser = fake_browser(listing, detail)

        scraper = BrowserScraper(deadline=Deadline(30, clock=fake_clock), playwright_factory=factory)
        products = scraper.scrape_products(config)

        assert [p.product_name for p in products] == ["A"]
        browser.close.assert_called_once()

    def test_unreachable_listing_returns_empty(self, config):
        listing = MagicMock()
        listing.goto.side_effect = PlaywrightError("net::ERR_NAME_NOT_RESOLVED")
        factory, browser = fake_browser(listing, MagicMock())

        assert BrowserScraper(playwright_factory=factory).scrape_products(config) == []
        browser.close.assert_called_once()

    def test_next_page_timeout_keeps_scraped_products(self, config):
        listing = listing_page([[card("Fire Collar", "fc110")]], next_buttons=[MagicMock()])
        listing.wait_for_load_state.side_effect = PlaywrightError("Timeout 30000ms exceeded")
        detail = detail_page({LIST_URL + "fc110": {}})
        factory, browser = fake_browser(listing, detail)

        products = BrowserScraper(playwright_factory=factory).scrape_products(config)

        assert [p.product_name for p in products] == ["Fire Collar"]
        browser.close.assert_called_once()

    def test_next_button_click_failure_ends_pagination(self, config):
        next_button = MagicMock()
        next_button.click.side_effect = PlaywrightError("Element is not attached to the DOM")
        listing = listing_page([[card("A", "a")], [card("B", "b")]], next_buttons=[next_button])
        detail = detail_page({LIST_URL + "a": {}, LIST_URL + "b": {}})
        factory, _ = fake_browser(listing, detail)

        products = BrowserScraper(playwright_factory=factory).scrape_products(config)

        assert [p.product_name for p in products] == ["A"]


class TestScrapeRegulationSections:
    def heading(self, title, content, ref=None):
        el = element(text=title, children={".ref": element(text=ref)} if ref else {})
        el.evaluate.return_value = content
        return el

    def test_sections_from_headings(self):
        page = MagicMock()
        page.query_selector_all.return_value = [
            self.heading("Fire resistance", "Walls shall resist fire.", ref="B3.1"),
            self.heading("Compartmentation", ""),
            self.heading("", ""),
        ]
        factory, browser = fake_browser(page)
        config = RegulationScraperConfig(
            source_url="https://gov.example/approved-document-b",
            section_selector="h2",
            section_ref_selector=".ref",
        )

        sections = BrowserScraper(playwright_factory=factory).scrape_regulation_sections(config)

        assert len(sections) == 2
        assert sections[0].section_ref == "B3.1"
        assert sections[0].section_title == "Fire resistance"
        assert sections[0].section_text == "Walls shall resist fire."
        assert sections[1].section_text == "Compartmentation"
        assert sections[1].section_ref is None
        page.query_selector_all.assert_called_once_with("h2")
        browser.close.assert_called_once()

    def test_heading_selector_passed_to_script(self):
        heading = self.heading("Means of escape", "Text")
        page = MagicMock()
        page.query_selector_all.return_value = [heading]
        factory, _ = fake_browser(page)
        config = RegulationScraperConfig(source_url="https://gov.example/doc", section_selector="h3.clause")

        BrowserScraper(playwright_factory=factory).scrape_regulation_sections(config)

        assert heading.evaluate.call_args.args[1] == "h3.clause"

    def test_progress_every_25_headings(self):
        page = MagicMock()
        page.query_selector_all.return_value = [self.heading(f"S{i}", "Body") for i in range(60)]
        factory, _ = fake_browser(page)
        events = []
        config = RegulationScraperConfig(source_url="https://gov.example/doc", section_selector="h2")

        BrowserScraper(
            reporter=ProgressReporter(callback=events.append), playwright_factory=factory
        ).scrape_regulation_sections(config)

        assert [(e.current, e.total) for e in events] == [(25, 60), (50, 60)]

    def test_unreachable_document_returns_empty(self):
        page = MagicMock()
        page.goto.side_effect = PlaywrightError("Timeout 30000ms exceeded")
        factory, browser = fake_browser(page)
        config = RegulationScraperConfig(source_url="https://gov.example/doc", section_selector="h2")

        assert BrowserScraper(playwright_factory=factory).scrape_regulation_sections(config) == []
        browser.close.assert_called_once()

    def test_section_script_failure_falls_back_to_title(self):
        broken = self.heading("Fire resistance", "")
        broken.evaluate.side_effect = PlaywrightError("Execution context was destroyed")
        page = MagicMock()
        page.query_selector_all.return_value = [broken, self.heading("Means of escape", "Text")]
        factory, _ = fake_browser(page)
        config = RegulationScraperConfig(source_url="https://gov.example/doc", section_selector="h2")

        sections = BrowserScraper(playwright_factory=factory).scrape_regulation_sections(config)

        assert [s.section_text for s in sections] == ["Fire resistance", "Text"]
