"""Tests for logging setup and LLM log redaction."""

from __future__ import annotations

import json

from osint_feed.config import LoggingConfig
from osint_feed.utils.logging import log_event, redact_text, setup_llm_logger, setup_logging, truncate_text


def test_redaction_modes():
    text = "see https://news.example/a?x=1 now"
    assert redact_text(text, "none") == text
    assert redact_text(text, "redact_content") == ""
    assert redact_text(text, "redact_urls_authors") == "see [REDACTED_URL] now"


def test_truncate_text():
    assert truncate_text("abc", 5) == "abc"
    assert truncate_text("abcdef", 3) == "abc...(truncated)"


def test_file_log_is_jsonl_with_event_fields(tmp_path):
    logger = setup_logging(LoggingConfig(console=False), tmp_path)

    log_event(logger, "Source failed", event="source_failed", source="gnews", ms=12)
    for handler in logger.handlers:
        handler.flush()

    lines = (tmp_path / "run.jsonl").read_text(encoding="utf-8").splitlines()
    record = json.loads(lines[-1])
    assert record["message"] == "Source failed"
    assert record["event"] == "source_failed"
    assert record["source"] == "gnews"
    assert record["ms"] == 12


def test_llm_logger_needs_run_folder_and_flag(tmp_path):
    assert setup_llm_logger(LoggingConfig(), None) is None
    assert setup_llm_logger(LoggingConfig(llm_log_enabled=False), tmp_path) is None
    assert setup_llm_logger(LoggingConfig(), tmp_path) is not None
