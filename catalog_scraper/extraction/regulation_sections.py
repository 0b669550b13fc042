"""
Regulation Section Extraction

Splits a regulation document's HTML into ScrapedSections without a browser.

- parse_legislation_html: legislation.gov.uk whole-Act pages, one section per
  numbered provision ("88 Keeping information about higher-risk buildings")
- extract_sections_from_html: any other page, split at headings, then
  <section>/<article> blocks, then plain body text chunks
- split_at_subsections: breaks oversized provisions at "(1)", "(2)" markers
"""

import logging
import re
from typing import Iterator, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup

from ..models import ScrapedSection

logger = logging.getLogger(__name__)

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
MAX_SECTION_CHARS = 4000

LEGISLATION_NOISE = ["script", "style", "nav"]
LEGISLATION_CONTENT_TAGS = ["p", "li", "td", "dd", "blockquote", "div"]
LEGISLATION_INLINE_TAGS = ["span"]
GENERIC_NOISE = ["script", "style", "nav", "header", "footer"]
GENERIC_CONTENT_TAGS = ["p", "li", "td", "dd", "blockquote"]

PROVISION_LABELS = {
    "section": "Section",
    "regulation": "Regulation",
    "article": "Article",
}

PART_HEADING = re.compile(r"^Part\s+(\d+[A-Z]?)\s*(.*)", re.IGNORECASE)
SCHEDULE_HEADING = re.compile(r"^Schedule\s+(\d+[A-Z]?)\s*(.*)", re.IGNORECASE)
# "88A Title" or "88Title"; the letter suffix must not start a word
PROVISION_HEADING = re.compile(r"^(\d+[A-Z]?)(?![a-z])\s*(.*)")
SECTION_REF = re.compile(
    r"^(Section\s+\d+[\w.]*|Regulation\s+\d+[\w.]*|Part\s+[A-Z\d]+|Article\s+\d+[\w.]*|Clause\s+\d+[\w.]*)",
    re.IGNORECASE,
)
SUBSECTION_BOUNDARY = re.compile(r"(?=\(\d+\)\s)")

MAX_BLOCK_SECTIONS = 50
MAX_BODY_CHUNKS = 30
BODY_CHUNK_CHARS = 2000


def detect_provision_type(url: str) -> str:
    """Acts (/ukpga/) number sections; statutory instruments (/uksi/) number regulations."""
    if "/ukpga/" in url:
        return "section"
    if "/uksi/" in url:
        return "regulation"
    return "section"


def whole_act_url(url: str) -> str:
    """Table-of-contents URL -> whole-Act URL (first /contents/ segment dropped)."""
    return url.replace("/contents/", "/", 1)


def parse_legislation_html(html: str, provision_type: str = "section") -> List[ScrapedSection]:
    """
    One ScrapedSection per numbered provision heading.

    Part, Schedule and unnumbered headings close the current provision but
    produce nothing. Provisions with under 10 chars of text are dropped;
    provisions over MAX_SECTION_CHARS are split at subsection markers and
    referenced as "Section 12 (1/3)", "Section 12 (2/3)", ...
    """
    soup = _clean_soup(html, LEGISLATION_NOISE)
    label = PROVISION_LABELS.get(provision_type, "Section")
    sections: List[ScrapedSection] = []

    number: Optional[str] = None
    title = ""
    texts: List[str] = []

    def flush():
        if number is None:
            return
        text = "\n".join(texts)
        if len(text) < 10:
            return
        ref = f"{label} {number}"
        chunks = split_at_subsections(text) if len(text) > MAX_SECTION_CHARS else [text]
        for i, chunk in enumerate(chunks, start=1):
            sections.append(ScrapedSection(
                section_text=chunk,
                section_ref=f"{ref} ({i}/{len(chunks)})" if len(chunks) > 1 else ref,
                section_title=title or None,
            ))

    for heading, text in _walk(soup, LEGISLATION_CONTENT_TAGS, LEGISLATION_INLINE_TAGS):
        if heading is None:
            if number is not None and len(text) > 3:
                texts.append(text)
            continue

        raw = _heading_text(heading)
        if len(raw) < 2:
            continue
        flush()
        number, title, texts = None, "", []

        if PART_HEADING.match(raw) or SCHEDULE_HEADING.match(raw):
            continue
        match = PROVISION_HEADING.match(raw)
        if match:
            number = match.group(1)
            title = match.group(2) or raw

    flush()
    logger.debug("Parsed %d legislation provisions", len(sections))
    return sections


def split_at_subsections(text: str, max_length: int = MAX_SECTION_CHARS) -> List[str]:
    """
    Split text into chunks of roughly max_length at "(n) " subsection markers.

    A single subsection longer than max_length stays whole.
    """
    chunks: List[str] = []
    current = ""
    for part in SUBSECTION_BOUNDARY.split(text):
        if len(current) + len(part) > max_length and len(current) > 100:
            chunks.append(current.strip())
            current = ""
        current += part
    if len(current.strip()) > 10:
        chunks.append(current.strip())
    return chunks or [text[:max_length]]


def extract_sections_from_html(html: str) -> List[ScrapedSection]:
    """
    Heading-delimited sections of a generic page.

    Falls back to <section>/<article> blocks, then to ~2000-char chunks of
    the body text, when the previous strategy finds nothing.
    """
    soup = _clean_soup(html, GENERIC_NOISE)

    sections = _sections_by_heading(soup)
    if not sections:
        sections = _sections_by_block(soup)
    if not sections:
        sections = _sections_by_body_chunks(soup)
    return sections


def _sections_by_heading(soup: BeautifulSoup) -> List[ScrapedSection]:
    sections: List[ScrapedSection] = []
    title: Optional[str] = None
    texts: List[str] = []

    def flush():
        text = "\n".join(texts)
        if title is None or len(text) <= 20:
            return
        ref = SECTION_REF.match(title)
        sections.append(ScrapedSection(
            section_text=text[:MAX_SECTION_CHARS],
            section_ref=ref.group(1) if ref else None,
            section_title=title,
        ))

    for heading, text in _walk(soup, GENERIC_CONTENT_TAGS):
        if heading is None:
            if title is not None and len(text) > 10:
                texts.append(text)
            continue
        heading_title = _heading_text(heading)
        # Too short or too long to be a heading; its text joins the current section
        if not 2 < len(heading_title) < 500:
            continue
        flush()
        title, texts = heading_title, []

    flush()
    return sections


def _sections_by_block(soup: BeautifulSoup) -> List[ScrapedSection]:
    sections: List[ScrapedSection] = []
    for block in soup.find_all(["section", "article"]):
        if block.find(["section", "article"]) is not None:
            continue
        text = _collapse(block.get_text(" "))
        if len(text) <= 50:
            continue
        first_line = next((line.strip() for line in block.get_text("\n").splitlines() if line.strip()), "")
        sections.append(ScrapedSection(
            section_text=text[:MAX_SECTION_CHARS],
            section_title=_collapse(first_line)[:200] or None,
        ))
        if len(sections) >= MAX_BLOCK_SECTIONS:
            break
    return sections


def _sections_by_body_chunks(soup: BeautifulSoup) -> List[ScrapedSection]:
    body = soup.body or soup
    if len(_collapse(body.get_text(" "))) <= 100:
        return []

    paragraphs = [_collapse(line) for line in body.get_text("\n").splitlines()]
    paragraphs = [p for p in paragraphs if len(p) > 20]

    chunks: List[str] = []
    current = ""
    for paragraph in paragraphs:
        if len(current) + len(paragraph) > BODY_CHUNK_CHARS and len(current) > 100:
            chunks.append(current.strip())
            current = ""
            if len(chunks) >= MAX_BODY_CHUNKS:
                break
        current += paragraph + "\n\n"
    if len(chunks) < MAX_BODY_CHUNKS and len(current.strip()) > 100:
        chunks.append(current.strip())

    return [
        ScrapedSection(section_text=chunk, section_title=f"Section {i}")
        for i, chunk in enumerate(chunks, start=1)
    ]


def _clean_soup(html: str, noise: Sequence[str]) -> BeautifulSoup:
    soup = BeautifulSoup(html or "", "lxml")
    for tag in soup.find_all(list(noise)):
        tag.decompose()
    return soup


def _walk(
    soup: BeautifulSoup,
    content_tags: Sequence[str],
    inline_tags: Sequence[str] = (),
) -> Iterator[Tuple[Optional[object], str]]:
    """
    Headings and innermost content blocks in document order.

    Yields (heading, "") for a heading and (None, text) for a content block
    that holds no other content block and sits outside any heading. Inline
    tags count only when no content block or inline tag encloses them.
    """
    content_tags = list(content_tags)
    inline_tags = list(inline_tags)
    for element in soup.find_all(HEADING_TAGS + content_tags + inline_tags):
        if element.name in HEADING_TAGS:
            yield element, ""
            continue
        if element.find_parent(HEADING_TAGS) is not None:
            continue
        if element.name in inline_tags:
            if element.find_parent(content_tags + inline_tags) is None:
                yield None, _collapse(element.get_text(" "))
        elif element.find(content_tags) is None:
            yield None, _collapse(element.get_text(" "))


def _heading_text(heading) -> str:
    return _collapse(heading.get_text(" "))


def _collapse(text: str) -> str:
    return " ".join(text.split())
