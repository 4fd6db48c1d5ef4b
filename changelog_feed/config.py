"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- FetchConfig: HTTP fetching settings
- CacheConfig: In-memory cache TTL and sweep settings
- ToolsConfig: Result-count defaults and caps for the tool surface
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import os
from typing import Any

import yaml

BASE_URL_ENV = "CHANGELOG_FEED_BASE_URL"


@dataclass
class FetchConfig:
    """Configuration for fetching changelog pages.

    Attributes:
        base_url: URL of the current changelog page; yearly pages live at {base_url}{year}/
        origin: Origin used to absolutize relative links found in the pages
        timeout_seconds: Per-request HTTP timeout
        retries: Number of retry attempts for failed requests
        total_timeout_seconds: Upper bound for fetching both periods; None disables it
        trust_env: Whether to respect system proxy settings
        user_agent: HTTP User-Agent header string
    """

    base_url: str = "https://github.blog/changelog/"
    origin: str = "https://github.blog"
    timeout_seconds: float = 20.0
    retries: int = 2
    total_timeout_seconds: float | None = 60.0
    trust_env: bool = True
    user_agent: str = "changelog-feed/0.1 (+https://github.blog/changelog/)"


@dataclass
class CacheConfig:
    """Configuration for the in-memory period cache.

    Attributes:
        ttl_seconds: Lifetime of a parsed period
        check_period_seconds: Interval between housekeeping sweeps of expired entries
    """

    ttl_seconds: float = 3600
    check_period_seconds: float = 600


@dataclass
class ToolsConfig:
    """Result-count limits applied by the tool surface.

    Attributes:
        entries_default_limit: Entries returned by get_changelog_entries without a limit
        recent_default_count: Entries returned by get_recent_entries without a count
        recent_max_count: Cap on get_recent_entries count
        search_default_limit: Entries returned by search_changelog without a limit
        max_limit: Cap on get_changelog_entries and search_changelog limits
    """

    entries_default_limit: int = 50
    recent_default_count: int = 10
    recent_max_count: int = 50
    search_default_limit: int = 20
    max_limit: int = 200


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to the console (stderr)
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the log file
        directory: Directory for the log file; defaults to the working directory
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "changelog_feed.jsonl"
    directory: str | None = None


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    fetch: FetchConfig = field(default_factory=FetchConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    tools: ToolsConfig = field(default_factory=ToolsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults.

    Environment overrides are applied last, so they win over the file.
    """
    cfg = AppConfig()
    if path:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        cfg = _merge_config(cfg, raw)
    return _apply_env(cfg)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig.

    Unknown sections and unknown keys inside a section are ignored.
    """
    data = asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update({k: v for k, v in value.items() if k in data[key]})
    return _fromdict(data)


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(
        fetch=FetchConfig(**data["fetch"]),
        cache=CacheConfig(**data["cache"]),
        tools=ToolsConfig(**data["tools"]),
        logging=LoggingConfig(**data["logging"]),
    )


def _apply_env(cfg: AppConfig) -> AppConfig:
    base_url = os.getenv(BASE_URL_ENV)
    if base_url:
        cfg.fetch.base_url = base_url if base_url.endswith("/") else base_url + "/"
    return cfg
