"""
Tests for cartwatch_logging: processor chain output and settings-driven configuration.
"""

from __future__ import annotations

import json
import logging

import pytest
import structlog

from cartwatch.cartwatch_logging import configure_logging, configure_structlog, get_logger
from cartwatch.cartwatch_logging.logger import build_processors
from cartwatch.config.settings import Settings


@pytest.fixture
def restore_logging():
    saved = structlog.get_config()
    yield
    structlog.configure(**saved)


def _render(processors, method_name: str, event_dict: dict) -> str:
    for processor in processors:
        event_dict = processor(None, method_name, event_dict)
    return event_dict


def test_json_event_shape():
    with structlog.contextvars.bound_contextvars(tick=3, user_id="42"):
        line = _render(
            build_processors("json"),
            "info",
            {"event": "cart_enriched", "logger": "cartwatch.enrichment", "cart_value": "25.01"},
        )
    out = json.loads(line)
    assert out["event_type"] == "cart_enriched"
    assert "event" not in out
    assert out["level"] == "info"
    assert out["tick"] == 3
    assert out["user_id"] == "42"
    assert out["cart_value"] == "25.01"
    assert out["timestamp"].endswith("Z")


def test_unknown_format_rejected():
    with pytest.raises(ValueError):
        build_processors("xml")


def test_configure_logging_uses_settings_level(restore_logging):
    configure_logging(Settings(log_level="WARNING", log_format="console"))
    config = structlog.get_config()
    assert config["wrapper_class"] is structlog.make_filtering_bound_logger(logging.WARNING)
    assert isinstance(config["processors"][-1], structlog.dev.ConsoleRenderer)


def test_module_logger_logs(capsys, restore_logging):
    configure_structlog()  # print to the captured stdout
    logger = get_logger("cartwatch.test")
    logger.info("test_message", key="value")
    out = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert out["event_type"] == "test_message"
    assert out["logger"] == "cartwatch.test"
    assert out["key"] == "value"
