"""
Shared constants for the scraper.

Single source of truth for request identity, limits and runtime budget.
"""

# Descriptive user agent for sitemap, catalogue API and enrichment requests
BOT_USER_AGENT = "Mozilla/5.0 (compatible; HFBluebook/1.0; +https://hf-bluebook.vercel.app)"

# Browser-like user agent for HTML listing/detail pages and the headless browser
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

DEFAULT_HTML_HEADERS = {
    "User-Agent": BROWSER_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}

# Hosting platform kills the invocation at 60s; stop issuing work 10s before
MAX_RUNTIME_SECONDS = 50.0

# Discovery caps
MAX_DISCOVERED_URLS = 500
MAX_CHILD_SITEMAPS = 10
MAX_AI_PAGINATION_PAGES = 20
SITEMAP_TRUST_THRESHOLD = 5

# Generic scraper request defaults
DEFAULT_DELAY_MS = 500
DEFAULT_TIMEOUT_MS = 10_000
DEFAULT_BATCH_SIZE = 5
DEFAULT_MAX_LISTING_PAGES = 10

# Sanitizer budget (~4000 model tokens)
DEFAULT_SANITIZE_CHARS = 15_000
