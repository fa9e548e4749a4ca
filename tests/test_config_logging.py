"""Configuration loading, log redaction and tool instrumentation tests."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from stylist_app.config import StylistConfig
from stylist_app.logging_config import (
    JsonFormatter,
    configure_logging,
    correlation_context,
    operation_context,
    redact_for_log,
)
from tools.observability import instrument_tool

CONFIG_ENV_VARS = (
    "APP_ENV",
    "APP_CONFIG_PATH",
    "STYLIST_CONFIG_DIR",
    "WARDROBE_DB_PATH",
    "OUTFITS_DB_PATH",
    "FETCH_LIMIT",
    "BAND_MARGIN",
    "MAX_ITEMS",
    "DECK_SIZE",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_environment() -> None:
    config = StylistConfig.from_env()
    assert config.wardrobe_db_path is None
    assert config.fetch_limit == 600
    assert config.band_margin == 10
    assert config.max_items == 5
    assert config.deck_size == 2
    assert config.log_level == "INFO"


def test_environment_file_and_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "staging.yaml").write_text(
        "# staging settings\n"
        'wardrobe_db_path: "data/staging_wardrobe.db"\n'
        "deck_size: 3\n"
        "max_items: 4\n"
        "log_level: debug\n"
    )
    monkeypatch.setenv("APP_ENV", "staging")
    monkeypatch.setenv("STYLIST_CONFIG_DIR", str(tmp_path))
    monkeypatch.setenv("MAX_ITEMS", "6")

    config = StylistConfig.from_env()
    assert config.environment == "staging"
    assert config.wardrobe_db_path == "data/staging_wardrobe.db"
    assert config.deck_size == 3
    assert config.max_items == 6
    assert config.log_level == "DEBUG"


def test_bad_integer_is_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FETCH_LIMIT", "lots")
    with pytest.raises(ValueError):
        StylistConfig.from_env()


def test_redact_for_log_scrubs_identifiers() -> None:
    payload = {
        "user_id": "user-123",
        "image_urls": ["https://example.com/a.jpg"],
        "note": "mail me at someone@example.com",
        "link": "https://example.com/private",
        "nested": [{"description": "secret", "count": 2}],
    }
    assert redact_for_log(payload) == {
        "user_id": "[redacted]",
        "image_urls": "[redacted]",
        "note": "mail me at [redacted-email]",
        "link": "[redacted-url]",
        "nested": [{"description": "[redacted]", "count": 2}],
    }


def test_json_formatter_includes_correlation_id() -> None:
    record = logging.LogRecord("stylist", logging.INFO, __file__, 1, "deck_started", None, None)
    record.event = "deck_started"
    record.link = "https://example.com/look.jpg"
    with correlation_context("corr-1"):
        payload = json.loads(JsonFormatter().format(record))
    assert payload["correlation_id"] == "corr-1"
    assert payload["event"] == "deck_started"
    assert payload["link"] == "[redacted-url]"


def _events(caplog: pytest.LogCaptureFixture) -> list:
    return [record.event for record in caplog.records if hasattr(record, "event")]


def test_instrument_tool_logs_sync_calls(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)

    @instrument_tool("test.add")
    def add(a: int, b: int) -> int:
        return a + b

    @instrument_tool("test.boom")
    def boom() -> None:
        raise RuntimeError("boom")

    assert add(1, b=2) == 3
    with pytest.raises(RuntimeError):
        boom()
    assert _events(caplog) == ["tool_call_started", "tool_call_completed", "tool_call_started", "tool_call_failed"]


@pytest.mark.asyncio
async def test_instrument_tool_wraps_coroutines(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)

    @instrument_tool("test.async")
    async def echo(value: str) -> str:
        return value

    assert await echo("hi") == "hi"
    assert _events(caplog) == ["tool_call_started", "tool_call_completed"]


def test_configure_logging_attaches_one_json_handler() -> None:
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    try:
        configure_logging("debug")
        configure_logging("info")
        json_handlers = [h for h in root.handlers if isinstance(h.formatter, JsonFormatter)]
        assert len(json_handlers) == 1
        assert root.level == logging.INFO
    finally:
        for handler in [h for h in root.handlers if h not in before]:
            root.removeHandler(handler)
        root.setLevel(level)


def test_operation_context_scopes_a_correlation_id(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG)
    logger = logging.getLogger("stylist.test")
    with correlation_context("outer"):
        with operation_context("deck", logger=logger) as correlation_id:
            assert correlation_id == "outer"
    with operation_context("deck", logger=logger) as fresh_id:
        assert fresh_id
    finished = [record for record in caplog.records if getattr(record, "event", None) == "operation_finished"]
    assert [record.correlation_id for record in finished] == ["outer", fresh_id]
    assert finished[0].operation == "deck"
