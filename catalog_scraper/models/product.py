"""
Product data models.

Pure data classes for representing scraped product and regulation data.
No business logic - only data structure definitions.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


@dataclass
class ScrapedProduct:
    """
    Normalized product record produced by every scraping strategy.

    source_url is the identity key; product_name stands in when it is empty.
    """

    product_name: str
    source_url: str = ""
    product_code: Optional[str] = None
    description: Optional[str] = None
    specifications: Dict[str, str] = field(default_factory=dict)
    price_text: Optional[str] = None
    pdf_urls: List[str] = field(default_factory=list)
    image_urls: Optional[List[str]] = None

    def __post_init__(self):
        """Validate required fields after initialization."""
        if not self.product_name or not self.product_name.strip():
            raise ValueError("Product name is required")

    @property
    def dedup_key(self) -> str:
        return self.source_url or self.product_name

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScrapedProduct":
        return cls(
            product_name=data["product_name"],
            source_url=data.get("source_url", ""),
            product_code=data.get("product_code"),
            description=data.get("description"),
            specifications=dict(data.get("specifications") or {}),
            price_text=data.get("price_text"),
            pdf_urls=list(data.get("pdf_urls") or []),
            image_urls=data.get("image_urls"),
        )


@dataclass
class ScrapedSection:
    """One heading-delimited section of a regulation document."""
    section_text: str
    section_ref: Optional[str] = None
    section_title: Optional[str] = None
    page_number: Optional[int] = None

    def __post_init__(self):
        if not self.section_text:
            raise ValueError("Section text is required")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class DiscoveryMethod(str, Enum):
    """Which strategy produced a set of discovered URLs."""
    SITEMAP = "sitemap"
    AI_NAVIGATION = "ai-navigation"
    BOTH = "both"


@dataclass
class DiscoveryResult:
    """Discovered product URLs plus their provenance."""
    product_urls: List[str]
    method: DiscoveryMethod
