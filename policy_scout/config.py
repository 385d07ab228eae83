# === FILE: policy_scout/config.py ===
"""
Loading and validation of PolicyScout discovery settings.
Pydantic describes the schema; YAML and JSON files are accepted.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
MOBILE_USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)
BOT_USER_AGENT = "PolicyScoutBot/1.0 (+https://github.com/policy-scout/policy-scout)"
SEARCH_BOT_USER_AGENT = "Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)"


class RequestProfile(BaseModel):
    """One named set of request headers used by the scraper's retry chain."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(..., min_length=1)
    headers: Dict[str, str] = Field(default_factory=dict)
    timeout: float = Field(15.0, gt=0, description="Total request timeout (seconds).")


def default_profiles() -> List[RequestProfile]:
    """Desktop, mobile, minimal bot and search-engine bot profiles, in retry order."""
    return [
        RequestProfile(
            name="desktop",
            timeout=15.0,
            headers={
                "User-Agent": DESKTOP_USER_AGENT,
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
                "Accept-Language": "en-US,en;q=0.9",
                "Upgrade-Insecure-Requests": "1",
                "Sec-Fetch-Dest": "document",
                "Sec-Fetch-Mode": "navigate",
                "Sec-Fetch-Site": "none",
                "Cache-Control": "no-cache",
            },
        ),
        RequestProfile(
            name="mobile",
            timeout=20.0,
            headers={
                "User-Agent": MOBILE_USER_AGENT,
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                "Accept-Language": "en-US,en;q=0.5",
            },
        ),
        RequestProfile(
            name="minimal",
            timeout=25.0,
            headers={"User-Agent": BOT_USER_AGENT, "Accept": "text/html"},
        ),
        RequestProfile(
            name="search-bot",
            timeout=20.0,
            headers={"User-Agent": SEARCH_BOT_USER_AGENT, "Accept": "text/html,*/*;q=0.8"},
        ),
    ]


class DiscoveryConfig(BaseModel):
    """Settings shared by every discovery strategy, the scraper and the batch scheduler."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    user_agent: str = Field(DESKTOP_USER_AGENT, min_length=1, description="User-Agent for discovery.")
    fallback_user_agent: str = Field(BOT_USER_AGENT, min_length=1, description="User-Agent of the last-resort probe.")
    max_pages: int = Field(50, ge=1, description="Page budget of one crawl.")
    max_depth: int = Field(3, ge=0, description="Maximum link depth of one crawl.")
    max_links_per_page: int = Field(10, ge=1, description="Links enqueued per crawled page.")
    delay: float = Field(0.3, ge=0, description="Politeness delay between same-host requests (seconds).")
    probe_timeout: float = Field(5.0, gt=0, description="Timeout of existence checks (seconds).")
    page_timeout: float = Field(10.0, gt=0, description="Timeout of page fetches (seconds).")
    max_redirects: int = Field(5, ge=0, description="Redirects followed per request.")
    retry_times: int = Field(0, ge=0, description="Retries on 5xx/429 before a URL is skipped.")
    batch_size: int = Field(3, ge=1, description="Domains discovered concurrently.")
    batch_delay: float = Field(2.0, ge=0, description="Pause between batch groups (seconds).")
    respect_robots: bool = Field(True, description="Skip crawl pages disallowed by robots.txt.")
    stop_on_not_found: bool = Field(False, description="Stop scraping after the first HTTP 404.")
    wordlist: Optional[Path] = Field(None, description="Extra probe paths, one per line.")
    request_profiles: List[RequestProfile] = Field(
        default_factory=default_profiles, description="Scraper retry chain, tried in order."
    )

    @field_validator("request_profiles")
    def _check_profiles(cls, v: List[RequestProfile]) -> List[RequestProfile]:
        if not v:
            raise ValueError("request_profiles must contain at least one profile")
        names = [p.name for p in v]
        if len(names) != len(set(names)):
            raise ValueError("request profile names must be unique")
        return v

    @model_validator(mode="after")
    def _check_wordlist_exists(self) -> DiscoveryConfig:
        if self.wordlist is not None and not Path(self.wordlist).is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(self.wordlist))
        return self


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None] = None) -> DiscoveryConfig:
    """
    Read YAML or JSON and return a validated DiscoveryConfig.

    With *path* None, ``configs/default.yaml`` is used when present and the
    built-in defaults otherwise. An explicit path that does not exist raises
    FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            return DiscoveryConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")

    try:
        return DiscoveryConfig(**data)
    except ValidationError:
        raise


__all__ = [
    "DiscoveryConfig",
    "RequestProfile",
    "default_profiles",
    "load_config",
    "DESKTOP_USER_AGENT",
    "MOBILE_USER_AGENT",
    "BOT_USER_AGENT",
    "SEARCH_BOT_USER_AGENT",
]
