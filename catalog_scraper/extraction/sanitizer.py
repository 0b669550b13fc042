"""
HTML Sanitizer

Strips a raw page down to the structural content a language model needs
(headings, paragraphs, tables, links, images) within a character budget.
The default budget of ~15KB is roughly 4000 model tokens.
"""

import re

from bs4 import BeautifulSoup, CData, Comment, Declaration, Doctype, ProcessingInstruction

from ..common.constants import DEFAULT_SANITIZE_CHARS

TRUNCATION_MARKER = "\n[TRUNCATED]"

# Dropped together with everything inside them
REMOVED_TAGS = [
    "script", "style", "noscript", "svg", "iframe",
    "header", "footer", "nav",
    "aside", "form", "button", "input", "select", "textarea",
]

KEPT_ATTRIBUTES = ("href", "src")

VOID_TAGS = {
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "source", "track", "wbr",
}

_NON_CONTENT_STRINGS = (Comment, CData, Declaration, Doctype, ProcessingInstruction)


def sanitize_html(raw_html: str, max_chars: int = DEFAULT_SANITIZE_CHARS) -> str:
    """
    Reduce a page to its content-bearing markup.

    Args:
        raw_html: Page HTML
        max_chars: Character budget; longer output is cut and marked [TRUNCATED]

    Returns:
        Sanitized HTML of at most max_chars + len(TRUNCATION_MARKER) characters
    """
    if not raw_html:
        return ""

    soup = BeautifulSoup(raw_html, "html.parser")

    for node in soup.find_all(string=lambda s: isinstance(s, _NON_CONTENT_STRINGS)):
        node.extract()

    tag = soup.find(REMOVED_TAGS)
    while tag is not None:
        tag.decompose()
        tag = soup.find(REMOVED_TAGS)

    # Children come after their parents in document order, so walking
    # backwards empties nested wrappers in a single pass
    for tag in reversed(soup.find_all(True)):
        tag.attrs = {name: tag.attrs[name] for name in KEPT_ATTRIBUTES if name in tag.attrs}
        if _is_empty(tag):
            tag.decompose()

    html = re.sub(r"\s+", " ", str(soup)).strip()

    if len(html) > max_chars:
        html = html[:max_chars] + TRUNCATION_MARKER

    return html


def _is_empty(tag) -> bool:
    if tag.name in VOID_TAGS or tag.attrs:
        return False
    if tag.find(True) is not None:
        return False
    return not tag.get_text(strip=True)
