"""
Deduplication

Final normalization pass shared by every scraping strategy.
"""

from typing import Iterable, List

from ..models import ScrapedProduct


def dedup_products(products: Iterable[ScrapedProduct]) -> List[ScrapedProduct]:
    """
    Drop repeated products, keeping the first occurrence.

    Products are keyed by source_url, falling back to product_name.
    """
    seen = set()
    unique_products = []
    for product in products:
        key = product.dedup_key
        if key in seen:
            continue
        seen.add(key)
        unique_products.append(product)
    return unique_products
