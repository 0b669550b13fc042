"""
Content-understanding (AI) support.

Modules:
    client - ContentUnderstandingClient, JSON-mode chat completions
    page_analyzer - page classification and product extraction
"""

from .client import ContentUnderstandingClient
from .page_analyzer import PAGE_TYPES, PageAnalysis, PageAnalyzer, ProductExtraction

__all__ = [
    'ContentUnderstandingClient',
    'PageAnalyzer',
    'PageAnalysis',
    'ProductExtraction',
    'PAGE_TYPES',
]
