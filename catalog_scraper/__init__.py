"""
Manufacturer Product Catalogue Scraper

Modules:
    models      - Data models (ScrapedProduct, ScrapedSection, DiscoveryResult, scraper configs)
    common      - Shared utilities (logging, config loader, HTTP fetch, deadline, batching, progress)
    extraction  - HTML sanitizer, regex/JSON-LD extraction primitives, deduplication
    discovery   - Product URL discovery from sitemaps and AI navigation
    ai          - AI page classification and product extraction
    scrapers    - Generic configurable scraper (HTML, JSON-LD, listing, sitemap, API)
    shopify     - Shopify catalogue adapter
    browser     - Headless browser (Playwright) scraping
"""
