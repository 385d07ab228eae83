# === FILE: policy_scout/parser/content_extractor.py ===
"""Main-content extraction for policy pages.

:func:`extract_content` strips page chrome from an HTML document and applies a
chain of strategies, keeping the longest qualifying text:

1. known content containers (``main``, ``article``, ``.privacy-policy`` ...);
2. generic containers that look privacy-related by class, id or wording;
3. tables and definition lists that read like a policy;
4. every paragraph longer than 50 characters;
5. the filtered whole document, when nothing above reached 300 characters
   and the document text is longer.

Ties go to the earlier strategy. The returned text is cleaned with
:func:`clean_text` (ASCII only, whitespace collapsed, no blank lines).
"""
from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Union
from urllib.parse import urlparse

from bs4 import BeautifulSoup
from bs4.element import Tag

__all__: Sequence[str] = (
    "ExtractedContent",
    "extract_content",
    "resolve_title",
    "default_title",
    "clean_text",
    "PRIVACY_INDICATORS",
)

MIN_CONTAINER_LENGTH = 500
MIN_PARAGRAPH_LENGTH = 50
MIN_DOCUMENT_LENGTH = 300

STRIP_SELECTORS: Sequence[str] = (
    "script", "style", "noscript", "template", "iframe", "svg",
    "nav", "header", "footer",
    ".header", ".footer", ".navigation", ".menu", ".sidebar",
    ".ads", ".advertisement", ".social-share", ".comments", ".related-articles",
    "[role=navigation]", "[role=banner]", "[role=contentinfo]",
    "#cookie-banner", ".cookie-banner", "#cookie-consent", ".cookie-consent",
    "#onetrust-consent-sdk", ".cc-window",
)

CONTENT_SELECTORS: Sequence[str] = (
    "main", "[role=main]", ".main-content", ".content", ".page-content",
    ".policy-content", ".privacy-policy", ".privacy-content", ".legal-content",
    "article", ".article", ".post-content", ".entry-content",
    "#content", "#main-content", "#privacy-policy", "#privacy",
    ".section-content", ".text-content", ".document-content",
)

TITLE_SELECTORS: Sequence[str] = ("title", "h1", ".page-title", ".entry-title", ".title", "h2")

PRIVACY_INDICATORS: Sequence[str] = (
    "personal information",
    "personal data",
    "data collection",
    "we collect",
    "privacy policy",
    "information we collect",
)

_CLASS_HINTS = ("privacy", "policy", "legal")

CHROME_PHRASES: Sequence[str] = (
    "skip to content",
    "skip to main content",
    "accept all cookies",
    "accept cookies",
    "reject all",
    "cookie settings",
    "sign in",
    "log in",
    "subscribe",
    "back to top",
    "toggle navigation",
    "menu",
    "search",
)

_TITLE_SUFFIX_RE = re.compile(r"\s+[|-]\s+.*$")
_NON_ASCII_RE = re.compile(r"[^\x00-\x7F]+")
_HSPACE_RE = re.compile(r"[ \t\f\v\r]+")


@dataclass(slots=True)
class ExtractedContent:
    """Best text block of a page, its title and the strategy that produced it."""

    text: str
    title: str
    strategy: str = ""


def clean_text(text: str) -> str:
    """ASCII only, runs of spaces collapsed, blank lines dropped, trimmed."""
    text = _NON_ASCII_RE.sub(" ", text)
    lines = (_HSPACE_RE.sub(" ", line).strip() for line in text.split("\n"))
    return "\n".join(line for line in lines if line)


def _text_of(node: Tag) -> str:
    return clean_text(node.get_text(separator="\n"))


def _has_indicator(text: str) -> bool:
    lowered = text.lower()
    return any(ind in lowered for ind in PRIVACY_INDICATORS)


def _from_containers(soup: BeautifulSoup) -> str:
    for selector in CONTENT_SELECTORS:
        for node in soup.select(selector):
            text = _text_of(node)
            if len(text) > MIN_CONTAINER_LENGTH:
                return text
    return ""


def _from_privacy_blocks(soup: BeautifulSoup) -> str:
    best = ""
    for node in soup.find_all(["div", "section", "article"]):
        classes = " ".join(node.get("class") or []).lower()
        node_id = str(node.get("id") or "").lower()
        text = _text_of(node)
        if len(text) <= MIN_CONTAINER_LENGTH or len(text) <= len(best):
            continue
        if any(h in classes or h in node_id for h in _CLASS_HINTS) or _has_indicator(text):
            best = text
    return best


def _from_structures(soup: BeautifulSoup) -> str:
    blocks = [_text_of(node) for node in soup.find_all(["table", "dl"])]
    text = "\n".join(b for b in blocks if b)
    if len(text) > MIN_CONTAINER_LENGTH and _has_indicator(text):
        return text
    return ""


def _from_paragraphs(soup: BeautifulSoup) -> str:
    paragraphs = (_text_of(p) for p in soup.find_all("p"))
    return "\n".join(p for p in paragraphs if len(p) > MIN_PARAGRAPH_LENGTH)


def _from_document(soup: BeautifulSoup) -> str:
    root = soup.body or soup
    kept = []
    for line in _text_of(root).split("\n"):
        if line.lower().strip(" .:") in CHROME_PHRASES:
            continue
        kept.append(line)
    text = "\n".join(kept)
    return text if len(text) > MIN_DOCUMENT_LENGTH else ""


_STRATEGIES = (
    ("containers", _from_containers),
    ("privacy-blocks", _from_privacy_blocks),
    ("structures", _from_structures),
    ("paragraphs", _from_paragraphs),
)


def default_title(url: str) -> str:
    """Guess a title from the URL path."""
    path = urlparse(url).path.lower() if url else ""
    if "cookie" in path:
        return "Cookie Policy"
    if "terms" in path or "tos" in path:
        return "Terms of Service"
    return "Privacy Policy"


def resolve_title(soup: BeautifulSoup, url: str = "") -> str:
    """First usable title along :data:`TITLE_SELECTORS`, site-name suffix removed."""
    for selector in TITLE_SELECTORS:
        node = soup.select_one(selector)
        if node is None:
            continue
        raw = clean_text(node.get_text(separator=" ")).replace("\n", " ")
        title = _TITLE_SUFFIX_RE.sub("", raw).strip()
        if len(title) >= 3:
            return title
    return default_title(url)


def extract_content(document: Union[str, bytes, BeautifulSoup], url: str = "") -> ExtractedContent:
    """Extract the most plausible policy text and a title from *document*.

    A :class:`~bs4.BeautifulSoup` argument is modified in place (chrome
    elements are removed); pass markup to keep the caller's tree intact.
    """
    soup = document if isinstance(document, BeautifulSoup) else BeautifulSoup(document, "html.parser")

    title = resolve_title(soup, url)

    for selector in STRIP_SELECTORS:
        for node in soup.select(selector):
            if not node.decomposed:
                node.decompose()

    best_text, best_strategy = "", ""
    for name, strategy in _STRATEGIES:
        text = strategy(soup)
        if len(text) > len(best_text):
            best_text, best_strategy = text, name

    if len(best_text) <= MIN_DOCUMENT_LENGTH:
        document_text = _from_document(soup)
        if len(document_text) > len(best_text):
            best_text, best_strategy = document_text, "document"

    return ExtractedContent(text=best_text, title=title, strategy=best_strategy)
