# policy_scout/crawler/link_extractor.py
"""
Link extraction for PolicyScout: privacy candidates, crawl-worthy same-host
links and keyword buckets for the page inventory.
"""
from __future__ import annotations

import re
from typing import Iterator, List, Sequence, Tuple, Union
from urllib.parse import urlparse

from bs4 import BeautifulSoup
from bs4.element import Tag

from policy_scout.models import RelevantPages
from policy_scout.utils import is_privacy_related, is_valid_candidate, normalize, remove_duplicates, same_host

__all__ = (
    "iter_anchors",
    "extract_privacy_links",
    "extract_crawl_links",
    "categorize_links",
)

DENY_KEYWORDS: Sequence[str] = (
    "login", "logout", "signin", "sign-in", "signup", "sign-up", "register",
    "cart", "basket", "checkout", "account", "wishlist", "search",
    "api", "admin", "wp-admin", "cdn-cgi", "feed", "rss",
)

PRIORITY_KEYWORDS: Sequence[str] = (
    "privacy", "legal", "terms", "policy", "policies", "cookie",
    "about", "help", "support", "contact", "company", "info", "imprint", "impressum",
)

ASSET_EXTENSIONS: Sequence[str] = (
    ".jpg", ".jpeg", ".png", ".gif", ".svg", ".webp", ".ico", ".bmp",
    ".css", ".js", ".json", ".xml", ".txt", ".rss",
    ".zip", ".gz", ".tar", ".rar", ".exe", ".dmg", ".pkg",
    ".mp3", ".mp4", ".avi", ".mov", ".webm", ".woff", ".woff2", ".ttf", ".eot",
    ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
)

_BUCKETS: Sequence[Tuple[str, Sequence[str]]] = (
    ("privacy_pages", ("privacy", "cookie", "gdpr", "ccpa", "data-protection", "datenschutz")),
    ("legal_pages", ("legal", "terms", "tos", "conditions", "imprint", "impressum", "compliance", "policies")),
    ("about_pages", ("about", "company", "who-we-are", "team", "mission")),
    ("support_pages", ("help", "support", "faq", "contact", "customer-service")),
)

_WORD_RE = re.compile(r"[^a-z0-9]+")

_Document = Union[str, bytes, BeautifulSoup]


def _soup(document: _Document) -> BeautifulSoup:
    return document if isinstance(document, BeautifulSoup) else BeautifulSoup(document, "html.parser")


def iter_anchors(document: _Document, base_url: str) -> Iterator[Tuple[Tag, str]]:
    """Yield ``(anchor, absolute_url)`` for every ``<a href>`` that resolves to http(s)."""
    for tag in _soup(document).find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        absolute = normalize(href_val, base_url)
        if absolute:
            yield tag, absolute


def extract_privacy_links(document: _Document, base_url: str) -> List[str]:
    """Links whose text, href, title or aria-label look privacy-related.

    Anchor text is tested in code against the keyword list rather than with
    text-matching selectors.
    """
    links: List[str] = []
    for tag, absolute in iter_anchors(document, base_url):
        text = tag.get_text(" ", strip=True)
        title = str(tag.get("title") or "")
        aria = str(tag.get("aria-label") or "")
        if is_privacy_related(text, str(tag.get("href")), title, aria) and is_valid_candidate(absolute):
            links.append(absolute)
    return remove_duplicates(links)


def _is_crawlable(url: str) -> bool:
    path = urlparse(url).path.lower()
    if path.endswith(tuple(ASSET_EXTENSIONS)):
        return False
    for segment in path.replace("_", "-").split("/"):
        for kw in DENY_KEYWORDS:
            if segment == kw or segment.startswith(kw + "-") or segment.endswith("-" + kw):
                return False
    return True


def _matches(keyword: str, words: List[str], joined: str) -> bool:
    if "-" in keyword:
        return keyword in joined
    return any(w.startswith(keyword) for w in words)


def _priority(url: str) -> int:
    path = urlparse(url).path.lower()
    return 0 if any(kw in path for kw in PRIORITY_KEYWORDS) else 1


def extract_crawl_links(document: _Document, page_url: str, limit: int = 10) -> List[str]:
    """Same-host links worth following, priority paths first, at most *limit*."""
    links = [
        absolute
        for _, absolute in iter_anchors(document, page_url)
        if same_host(absolute, page_url) and _is_crawlable(absolute)
    ]
    ordered = sorted(remove_duplicates(links), key=_priority)
    return ordered[:limit]


def categorize_links(document: _Document, page_url: str) -> RelevantPages:
    """Bucket the page's same-host links by what their URL and anchor text suggest."""
    pages = RelevantPages()
    for tag, absolute in iter_anchors(document, page_url):
        if not same_host(absolute, page_url):
            continue
        if absolute not in pages.all_pages:
            pages.all_pages.append(absolute)
        signal = f"{urlparse(absolute).path} {tag.get_text(' ', strip=True)}".lower()
        words = [w for w in _WORD_RE.split(signal) if w]
        joined = "-".join(words)
        for bucket, keywords in _BUCKETS:
            if any(_matches(kw, words, joined) for kw in keywords):
                target = getattr(pages, bucket)
                if absolute not in target:
                    target.append(absolute)
    return pages
