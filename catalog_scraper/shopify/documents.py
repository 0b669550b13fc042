"""
Product Document Helpers

Finds document (PDF) links on product pages and classifies them by kind
from the file name.
"""

import re
from dataclasses import dataclass
from typing import List
from urllib.parse import unquote, urlparse

from ..common.text_utils import unique

ABSOLUTE_PDF_PATTERN = re.compile(r"""https?://[^\s"'<>()]+?\.pdf(?:\?[^\s"'<>()]*)?""", re.IGNORECASE)

# Checked in order; the first keyword found in the file name wins
DOCUMENT_KEYWORDS = [
    ("installation", ("install", "fitting", "fixing")),
    ("datasheet", ("datasheet", "data-sheet", "data_sheet", "tds", "technical")),
    ("certificate", ("certificate", "cert", "approval", "assessment")),
    ("declaration", ("dop", "declaration", "performance")),
    ("safety", ("sds", "msds", "safety")),
    ("brochure", ("brochure", "catalogue", "catalog", "guide")),
]


@dataclass(frozen=True)
class DocumentInfo:
    type: str
    name: str


def find_document_links(html: str) -> List[str]:
    """Return every distinct absolute PDF URL in the page source."""
    if not html:
        return []
    return unique(m.group(0) for m in ABSOLUTE_PDF_PATTERN.finditer(html))


def categorize_pdf(url: str) -> DocumentInfo:
    """
    Classify a document URL and derive a readable name.

    Example:
        categorize_pdf("https://x.test/files/QWR-Installation-Guide.pdf")
        -> DocumentInfo(type="installation", name="QWR Installation Guide")
    """
    filename = unquote(urlparse(url).path.rsplit("/", 1)[-1])
    stem = re.sub(r"\.pdf$", "", filename, flags=re.IGNORECASE)
    lowered = stem.lower()

    doc_type = "other"
    for candidate, keywords in DOCUMENT_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            doc_type = candidate
            break

    name = re.sub(r"[-_+]+", " ", stem).strip() or "Document"
    return DocumentInfo(type=doc_type, name=name)
