"""Tests for Langfuse tracing setup behavior."""

from __future__ import annotations

import sys
import types

from osint_feed.config import LangfuseConfig
from osint_feed.llm import tracing


class _DummySpan:
    def __init__(self):
        self.updates: list[dict] = []

    def update(self, **kwargs):
        self.updates.append(kwargs)


class _DummyContext:
    def __init__(self, span):
        self.span = span
        self.exited = False

    def __enter__(self):
        return self.span

    def __exit__(self, *exc):
        self.exited = True
        return False


def test_setup_langfuse_passes_resolved_keys(monkeypatch):
    captured: dict = {}

    class DummyLangfuse:
        def __init__(self, **kwargs):
            captured.update(kwargs)

    monkeypatch.setitem(sys.modules, "langfuse", types.SimpleNamespace(Langfuse=DummyLangfuse))

    tracing.setup_langfuse(
        LangfuseConfig(
            enabled=True,
            public_key="pk-test",
            secret_key="sk-test",
            host="https://us.cloud.langfuse.com",
            timeout_seconds=45,
        )
    )
    try:
        assert captured == {
            "public_key": "pk-test",
            "secret_key": "sk-test",
            "host": "https://us.cloud.langfuse.com",
            "timeout": 45,
        }
        assert tracing.get_tracer() is not None
    finally:
        tracing.setup_langfuse(LangfuseConfig())


def test_setup_langfuse_disables_tracer_when_keys_missing():
    tracing.setup_langfuse(LangfuseConfig(enabled=True, public_key="pk-only"))

    assert tracing.get_tracer() is None
    with tracing.start_span("noop", kind="chain") as span:
        assert span is None


def test_span_output_is_redacted(monkeypatch):
    span = _DummySpan()
    context = _DummyContext(span)

    class DummyLangfuse:
        def __init__(self, **kwargs):
            self.started: list[dict] = []

        def start_as_current_span(self, **kwargs):
            self.started.append(kwargs)
            return context

    monkeypatch.setitem(sys.modules, "langfuse", types.SimpleNamespace(Langfuse=DummyLangfuse))
    tracing.setup_langfuse(LangfuseConfig(enabled=True, public_key="pk", secret_key="sk"))
    try:
        with tracing.start_span("gemini.generate", kind="llm", attributes={"llm.model": "m", "skip": None}) as active:
            tracing.set_span_output(active, "see https://news.example/a for details")
            tracing.record_span_error(active, RuntimeError("boom"))

        started = tracing.get_tracer().started[0]
        assert started["name"] == "gemini.generate"
        assert started["metadata"] == {"llm.model": "m", "span.kind": "llm"}
        assert span.updates[0] == {"output": "see [REDACTED_URL] for details"}
        assert span.updates[1] == {"level": "ERROR", "status_message": "boom"}
        assert context.exited
    finally:
        tracing.setup_langfuse(LangfuseConfig())
