# File: policy_scout/utils.py
"""policy_scout.utils: URL resolution, candidate filtering and wordlist helpers."""

from __future__ import annotations

import posixpath
from pathlib import Path
from typing import Collection, List, Optional, Sequence, Union
from urllib.parse import parse_qsl, quote, unquote, urldefrag, urlencode, urljoin, urlparse, urlunparse

from policy_scout.logger import logger

__all__: Sequence[str] = (
    "PRIVACY_KEYWORDS",
    "EXCLUDED_SEGMENTS",
    "normalize",
    "is_valid_candidate",
    "is_privacy_related",
    "canonical_url",
    "site_root",
    "same_host",
    "ensure_scheme",
    "read_wordlist",
    "remove_duplicates",
)

PRIVACY_KEYWORDS: Sequence[str] = (
    "privacy policy",
    "privacy notice",
    "privacy statement",
    "privacy practices",
    "privacy center",
    "data policy",
    "cookie policy",
    "cookie notice",
    "data protection",
    "data usage",
    "data rights",
    "data sharing",
    "information collection",
    "personal information",
    "your privacy choices",
    "do not sell",
    "gdpr",
    "ccpa",
    "datenschutz",
)

EXCLUDED_SEGMENTS: Sequence[str] = (
    "/login",
    "/register",
    "/signup",
    "/contact",
    "/about-us",
    "/careers",
    "/jobs",
    "/blog",
    "/news",
    "/press",
    "/investors",
)

_SKIPPED_SCHEMES = ("mailto:", "javascript:", "tel:", "data:", "ftp:", "file:")


def normalize(href: Optional[str], base_url: str) -> Optional[str]:
    """Resolve *href* against *base_url*; None for anything that is not an http(s) URL.

    Absolute http(s) URLs come back unchanged. Never raises.
    """
    if not href or not isinstance(href, str):
        return None
    raw = href.strip()
    if not raw or raw.startswith("#") or any(ch.isspace() for ch in raw):
        return None
    if raw.lower().startswith(_SKIPPED_SCHEMES):
        return None
    try:
        parsed = urlparse(raw)
        if parsed.scheme in ("http", "https") and parsed.netloc:
            parsed.port  # ValueError on a malformed port
            return raw
        if parsed.scheme and parsed.scheme not in ("http", "https"):
            return None
        base = urlparse(base_url)
        if base.scheme not in ("http", "https") or not base.netloc:
            return None
        resolved, _ = urldefrag(urljoin(base_url, raw))
        check = urlparse(resolved)
        check.port  # ValueError on a malformed port
    except (ValueError, TypeError) as exc:
        logger.debug("Cannot resolve %r against %r: %s", href, base_url, exc)
        return None
    if check.scheme not in ("http", "https") or not check.netloc:
        return None
    return resolved


def is_valid_candidate(url: str) -> bool:
    """Blacklist check: False for URLs whose path hits an excluded segment."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https"):
        return False
    path = parsed.path.lower()
    return not any(segment in path for segment in EXCLUDED_SEGMENTS)


def is_privacy_related(
    anchor_text: Optional[str],
    href: Optional[str],
    title: Optional[str] = "",
    aria_label: Optional[str] = "",
) -> bool:
    """High-recall test of a link's signals against :data:`PRIVACY_KEYWORDS`."""
    href_l = (href or "").lower()
    haystack = " ".join((anchor_text or "", href_l, title or "", aria_label or "")).lower()
    for keyword in PRIVACY_KEYWORDS:
        if keyword in haystack:
            return True
        if keyword.replace(" ", "-") in href_l or keyword.replace(" ", "_") in href_l:
            return True
    return False


def canonical_url(url: str) -> str:
    """Key used for visited sets: lower-case host, normalised path, sorted query, no fragment."""
    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    netloc = parsed.netloc.lower()
    path = unquote(parsed.path or "/")
    norm = posixpath.normpath(path)
    if parsed.path.endswith("/") and not norm.endswith("/"):
        norm += "/"
    if not norm.startswith("/"):
        norm = "/" + norm
    norm = quote(norm, safe="/")
    qs = parse_qsl(parsed.query, keep_blank_values=True)
    qs.sort()
    query = urlencode(qs, doseq=True)
    return urlunparse((scheme, netloc, norm, "", query, ""))


def ensure_scheme(base_domain: str) -> str:
    """Turn ``example.com`` into ``https://example.com``; leave URLs with a scheme alone."""
    value = base_domain.strip()
    if "://" not in value:
        value = f"https://{value}"
    return value


def site_root(url: str) -> str:
    """``https://host/any/path?q`` -> ``https://host``."""
    parsed = urlparse(ensure_scheme(url))
    return urlunparse((parsed.scheme, parsed.netloc, "", "", "", ""))


def same_host(url: str, other: str) -> bool:
    """Hostname equality; subdomains count as different hosts."""
    try:
        return (urlparse(url).hostname or "") == (urlparse(other).hostname or "")
    except ValueError:
        return False


def read_wordlist(path: Union[str, Path]) -> List[str]:
    """Read a wordlist and return its non-empty, non-comment lines."""
    p = Path(path)
    if not p.exists():
        logger.error("Wordlist not found: %s", p)
        raise FileNotFoundError(f"Wordlist file not found: {p}")
    words = [
        line.strip()
        for line in p.read_text(encoding="utf-8").splitlines()
        if line.strip() and not line.lstrip().startswith("#")
    ]
    logger.debug("Loaded %d entries from wordlist %s", len(words), p)
    return words


def remove_duplicates(urls: Collection[str]) -> List[str]:
    """Drop duplicate URLs, keeping first-seen order."""
    unique = list(dict.fromkeys(urls))
    removed = len(urls) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate URLs", removed)
    return unique
