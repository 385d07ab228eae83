# File: policy_scout/parser/robots_parser.py
"""policy_scout.parser.robots_parser: robots.txt rules, declared sitemaps and privacy hints."""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence

from policy_scout.utils import normalize, remove_duplicates

__all__ = ("RobotsTxt", "ROBOTS_HINT_KEYWORDS")

ROBOTS_HINT_KEYWORDS: Sequence[str] = ("privacy", "legal", "terms", "policy", "cookie", "gdpr", "data-protection")

_URL_RE = re.compile(r"https?://[^\s#]+", re.IGNORECASE)
_PATH_RE = re.compile(r"(?<![\w:/])(/[^\s#]*)")


class RobotsTxt:
    """
    Parsed robots.txt (RFC 9309 groups).
    An empty Disallow allows every path.
    """
    _WILDCARD_RE = re.compile(r"(\*|\$)")

    def __init__(self, text: str) -> None:
        self.text = text
        self.sitemaps: List[str] = []
        self._groups: List[Dict[str, object]] = []
        self._regex_cache: Dict[str, re.Pattern[str]] = {}
        self._parse(text)

    def can_fetch(self, user_agent: str, path: str) -> bool:
        group = self._match_group(user_agent)
        if group is None:
            return True
        best_len = -1
        allow: Optional[bool] = None
        for directive, pattern in group["directives"]:  # type: ignore[index]
            if not self._match_path(path, pattern):
                continue
            length = self._rule_len(pattern)
            if length > best_len or (length == best_len and directive == "allow" and allow is False):
                best_len = length
                allow = (directive == "allow")
        return True if allow is None else allow

    def crawl_delay(self, user_agent: str) -> Optional[float]:
        group = self._match_group(user_agent)
        return None if group is None else group.get("crawl_delay")  # type: ignore[return-value]

    def privacy_hints(self, base_url: str) -> List[str]:
        """Absolute URLs and path tokens on lines that mention privacy/legal keywords.

        Wildcard patterns are not real pages and are ignored.
        """
        found: List[str] = []
        for raw in self.text.splitlines():
            line = raw.strip()
            lowered = line.lower()
            if not line or not any(kw in lowered for kw in ROBOTS_HINT_KEYWORDS):
                continue
            tokens: List[str] = _URL_RE.findall(line)
            if not tokens:
                _, _, value = line.partition(":")
                tokens = _PATH_RE.findall(value)
            for token in tokens:
                token = token.rstrip(",;")
                if "*" in token or token.endswith("$") or token.lower().endswith((".xml", ".xml.gz")):
                    continue
                absolute = normalize(token, base_url)
                if absolute and any(kw in absolute.lower() for kw in ROBOTS_HINT_KEYWORDS):
                    found.append(absolute)
        return remove_duplicates(found)

    def _parse(self, text: str) -> None:
        current: Optional[Dict[str, object]] = None
        for raw in text.splitlines():
            line = raw.split("#", 1)[0].strip()
            if not line:
                continue
            key, _, val = line.partition(":")
            key = key.lower().strip()
            val = val.strip()
            if key == "sitemap":
                if val:
                    self.sitemaps.append(val)
            elif key == "user-agent":
                if current is None or (current["agents"] and (current["directives"] or current["crawl_delay"] is not None)):
                    current = {"agents": [], "directives": [], "crawl_delay": None}
                    self._groups.append(current)
                current["agents"].append(val.lower())  # type: ignore[union-attr]
            elif key in ("allow", "disallow"):
                # empty Disallow allows everything
                if key == "disallow" and val == "":
                    continue
                if current is None:
                    current = {"agents": ["*"], "directives": [], "crawl_delay": None}
                    self._groups.append(current)
                current["directives"].append((key, val))  # type: ignore[union-attr]
            elif key == "crawl-delay":
                if current is None:
                    current = {"agents": ["*"], "directives": [], "crawl_delay": None}
                    self._groups.append(current)
                try:
                    current["crawl_delay"] = float(val)
                except ValueError:
                    pass

    def _match_group(self, user_agent: str) -> Optional[Dict[str, object]]:
        ua = user_agent.lower()
        for group in self._groups:
            if any(a != "*" and ua.startswith(a) for a in group["agents"]):  # type: ignore[attr-defined]
                return group
        for group in self._groups:
            if "*" in group["agents"]:  # type: ignore[operator]
                return group
        return None

    def _match_path(self, path: str, pattern: str) -> bool:
        if pattern not in self._regex_cache:
            esc = re.escape(pattern).replace(r"\*", ".*")
            if pattern.endswith("$"):
                esc = esc[:-2] + "$"
            else:
                esc += ".*"
            self._regex_cache[pattern] = re.compile(f"^{esc}")
        return bool(self._regex_cache[pattern].match(path))

    @classmethod
    def _rule_len(cls, pattern: str) -> int:
        return len(cls._WILDCARD_RE.sub("", pattern))