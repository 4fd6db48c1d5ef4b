"""Tests for configuration loading and logging setup."""

from __future__ import annotations

import json
import logging

from changelog_feed.config import AppConfig, LoggingConfig, load_config
from changelog_feed.logging_utils import JsonlFormatter, log_event, setup_logging


def test_load_config_without_path_returns_defaults(monkeypatch):
    monkeypatch.delenv("CHANGELOG_FEED_BASE_URL", raising=False)

    cfg = load_config(None)

    assert cfg == AppConfig()
    assert cfg.cache.ttl_seconds == 3600
    assert cfg.cache.check_period_seconds == 600
    assert cfg.fetch.base_url == "https://github.blog/changelog/"


def test_load_config_merges_yaml_over_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("CHANGELOG_FEED_BASE_URL", raising=False)
    path = tmp_path / "config.yaml"
    path.write_text(
        "cache:\n"
        "  ttl_seconds: 120\n"
        "  bogus_key: 1\n"
        "tools:\n"
        "  recent_max_count: 25\n"
        "unknown_section:\n"
        "  value: 1\n",
        encoding="utf-8",
    )

    cfg = load_config(str(path))

    assert cfg.cache.ttl_seconds == 120
    assert cfg.cache.check_period_seconds == 600
    assert cfg.tools.recent_max_count == 25
    assert cfg.tools.recent_default_count == 10


def test_load_config_empty_file(tmp_path, monkeypatch):
    monkeypatch.delenv("CHANGELOG_FEED_BASE_URL", raising=False)
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")

    assert load_config(str(path)) == AppConfig()


def test_env_overrides_base_url(monkeypatch):
    monkeypatch.setenv("CHANGELOG_FEED_BASE_URL", "http://localhost:8080/changelog")

    cfg = load_config(None)

    assert cfg.fetch.base_url == "http://localhost:8080/changelog/"


def test_load_config_does_not_leak_between_calls(monkeypatch):
    monkeypatch.setenv("CHANGELOG_FEED_BASE_URL", "http://localhost:8080/changelog/")
    load_config(None)
    monkeypatch.delenv("CHANGELOG_FEED_BASE_URL")

    assert load_config(None).fetch.base_url == "https://github.blog/changelog/"


def test_setup_logging_writes_jsonl_events(tmp_path):
    cfg = LoggingConfig(console=False, file=True, directory=str(tmp_path), filename="run.jsonl")
    logger = setup_logging(cfg)

    log_event(logger, "Cache hit", event="cache_hit", period="2025", count=3)
    for handler in logger.handlers:
        handler.flush()

    line = (tmp_path / "run.jsonl").read_text(encoding="utf-8").strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["message"] == "Cache hit"
    assert payload["event"] == "cache_hit"
    assert payload["period"] == "2025"
    assert payload["count"] == 3

    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_log_event_ignores_missing_logger():
    log_event(None, "nothing happens", event="noop")


def test_jsonl_formatter_includes_extras():
    record = logging.LogRecord("changelog_feed", logging.WARNING, __file__, 1, "Skipped", None, None)
    record.period = "2024"

    payload = json.loads(JsonlFormatter().format(record))

    assert payload["level"] == "WARNING"
    assert payload["period"] == "2024"
