# File: policy_scout/parser/sitemap_parser.py
"""policy_scout.parser.sitemap_parser: parsing sitemap.xml / sitemap indexes into <loc> URLs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Union

from lxml import etree

from policy_scout.logger import logger

__all__: Sequence[str] = ("Sitemap", "parse_sitemap", "looks_privacy_related")

SITEMAP_HINTS: Sequence[str] = (
    "privacy", "cookie", "data-protection", "dataprotection", "gdpr", "ccpa",
    "datenschutz", "legal", "policy", "policies",
)


@dataclass(slots=True)
class Sitemap:
    """<loc> values of one document; ``is_index`` for <sitemapindex> roots."""

    urls: List[str] = field(default_factory=list)
    is_index: bool = False


def parse_sitemap(xml_content: Union[str, bytes]) -> Sitemap:
    """Parse sitemap XML and return its <loc> values.

    Non-XML bodies (HTML error pages, empty responses) give an empty
    :class:`Sitemap` instead of raising.

    Example:
    ```python
    from policy_scout.parser.sitemap_parser import parse_sitemap

    with open('sitemap.xml', encoding='utf-8') as f:
        sitemap = parse_sitemap(f.read())
    print(sitemap.urls)
    ```
    """
    data = xml_content.encode("utf-8") if isinstance(xml_content, str) else xml_content
    if not data or not data.strip():
        return Sitemap()
    parser = etree.XMLParser(ns_clean=True, recover=True, resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(data.strip(), parser=parser)
    except (etree.XMLSyntaxError, ValueError) as exc:
        logger.debug("Unparseable sitemap: %s", exc)
        return Sitemap()
    if root is None or not isinstance(root.tag, str):
        return Sitemap()
    local = etree.QName(root).localname.lower()
    if local not in ("urlset", "sitemapindex"):
        return Sitemap()
    locs = root.findall(".//{*}loc")
    urls = [loc.text.strip() for loc in locs if loc.text and loc.text.strip()]
    return Sitemap(urls=urls, is_index=(local == "sitemapindex"))


def looks_privacy_related(url: str) -> bool:
    """Cheap naming heuristic applied before any candidate is fetched."""
    lowered = url.lower().replace("_", "-")
    return any(hint in lowered for hint in SITEMAP_HINTS)
