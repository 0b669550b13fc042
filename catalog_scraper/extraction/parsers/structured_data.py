"""
Structured Data Parser

Extracts product information from JSON-LD structured data (schema.org).
Blocks may hold the entity at the top level, inside an array, or inside
an @graph list; all three forms are searched.
"""

import json
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup

from ...common.text_utils import strip_html
from ...models import ScrapedProduct


class StructuredDataParser:
    """
    Parses JSON-LD structured data from HTML pages.

    JSON-LD is embedded in <script type="application/ld+json"> tags and
    contains schema.org structured data for products.

    Usage:
        parser = StructuredDataParser("Product")
        data = parser.parse(html)
        product = parser.to_product(data, url)
    """

    def __init__(self, target_type: str = "Product"):
        self.target_type = target_type

    def parse(self, html: str) -> Dict[str, Any]:
        """
        Find the first JSON-LD entity of the target type.

        Args:
            html: Raw page HTML

        Returns:
            The entity as a dictionary, or empty dict if not found
        """
        if not html:
            return {}

        soup = BeautifulSoup(html, "lxml")
        for script in soup.find_all("script", type="application/ld+json"):
            if not script.string:
                continue
            try:
                data = json.loads(script.string)
            except json.JSONDecodeError:
                # skip malformed JSON-LD
                continue

            found = self._find_entity(data)
            if found:
                return found

        return {}

    def _find_entity(self, data: Any) -> Optional[Dict[str, Any]]:
        if isinstance(data, list):
            candidates = data
        elif isinstance(data, dict):
            if self._is_target(data):
                return data
            graph = data.get("@graph")
            candidates = graph if isinstance(graph, list) else []
        else:
            return None

        for item in candidates:
            if isinstance(item, dict) and self._is_target(item):
                return item
        return None

    def _is_target(self, item: Dict[str, Any]) -> bool:
        item_type = item.get("@type")
        if isinstance(item_type, list):
            return self.target_type in item_type
        return item_type == self.target_type

    def to_product(self, data: Dict[str, Any], source_url: str) -> Optional[ScrapedProduct]:
        """
        Map a JSON-LD entity onto a ScrapedProduct.

        Returns:
            Product, or None if the entity carries no name
        """
        name = self._clean_text(self._as_text(data.get("name")))
        if not name:
            return None

        code = data.get("sku") or data.get("productID")
        description = data.get("description")

        return ScrapedProduct(
            product_name=name,
            product_code=str(code) if code else None,
            description=strip_html(str(description)) if description else None,
            specifications=self.extract_specifications(data),
            price_text=self.extract_price(data) or None,
            pdf_urls=[],
            image_urls=self.extract_images(data),
            source_url=source_url,
        )

    def extract_specifications(self, data: Dict[str, Any]) -> Dict[str, str]:
        """Collect brand, category, material, weight and additionalProperty pairs."""
        specs: Dict[str, str] = {}

        brand = self.extract_brand(data)
        if brand:
            specs["Brand"] = brand
        if data.get("category"):
            specs["Category"] = self._as_text(data["category"])
        if data.get("material"):
            specs["Material"] = self._as_text(data["material"])

        weight = data.get("weight")
        if isinstance(weight, dict):
            weight = weight.get("value", "")
        if weight:
            specs["Weight"] = str(weight)

        properties = data.get("additionalProperty")
        if isinstance(properties, dict):
            properties = [properties]
        if isinstance(properties, list):
            for prop in properties:
                if isinstance(prop, dict) and prop.get("name") and prop.get("value") not in (None, ""):
                    specs[str(prop["name"])] = str(prop["value"])

        return specs

    def extract_brand(self, data: Dict[str, Any]) -> str:
        """
        Extract brand name from structured data.

        Returns:
            Brand name or empty string
        """
        return self._clean_text(self._as_text(data.get("brand")))

    def extract_price(self, data: Dict[str, Any]) -> str:
        """
        Extract current price from the first offer.

        Returns:
            Price such as "£7.71", or empty string
        """
        offers = data.get("offers", [])
        if isinstance(offers, dict):
            offers = [offers]

        if offers and isinstance(offers[0], dict):
            price = offers[0].get("price")
            if price not in (None, ""):
                return f"£{price}"

        return ""

    def extract_images(self, data: Dict[str, Any]) -> List[str]:
        """Extract image URLs; images may be strings or ImageObject dicts."""
        images = data.get("image")
        if not images:
            return []
        if not isinstance(images, list):
            images = [images]

        urls = []
        for image in images:
            if isinstance(image, dict):
                image = image.get("url") or image.get("contentUrl") or ""
            if image:
                urls.append(str(image))
        return urls

    @staticmethod
    def _as_text(value: Any) -> str:
        if isinstance(value, dict):
            value = value.get("name")
        if isinstance(value, list):
            return ", ".join(str(v) for v in value)
        return str(value) if value is not None else ""

    def _clean_text(self, text: str) -> str:
        """Clean and normalize text."""
        if not text:
            return ""
        return ' '.join(text.split()).strip()
