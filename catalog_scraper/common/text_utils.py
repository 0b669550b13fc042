"""
Text Utilities

Helper functions for text processing, URL resolution and slug handling.
"""

import html as html_lib
import re
from urllib.parse import urljoin


def strip_html(html: str) -> str:
    """
    Convert an HTML fragment to plain text.

    Line breaks and paragraph ends become newlines, all other tags become
    spaces, entities are decoded and blank lines collapsed.
    """
    if not html:
        return ""

    text = re.sub(r'<br\s*/?>', '\n', html, flags=re.IGNORECASE)
    text = re.sub(r'</p>', '\n', text, flags=re.IGNORECASE)
    text = re.sub(r'<[^>]*>', ' ', text)
    text = html_lib.unescape(text).replace('\xa0', ' ')
    text = re.sub(r'[ \t]+', ' ', text)
    text = re.sub(r'\n\s*\n', '\n', text)
    return text.strip()


def resolve_url(href: str, base_url: str) -> str:
    """Resolve a possibly-relative href against a base URL."""
    href = href.strip()
    if href.startswith('http'):
        return href
    try:
        return urljoin(base_url, href)
    except ValueError:
        return base_url.rstrip('/') + (href if href.startswith('/') else '/' + href)


def title_case_slug(slug: str) -> str:
    """Turn a URL slug into a title: 'fire-door-seal' -> 'Fire Door Seal'."""
    return re.sub(r'\b\w', lambda m: m.group(0).upper(), slug.replace('-', ' '))


def unique(items):
    """Deduplicate preserving first-seen order."""
    return list(dict.fromkeys(items))
