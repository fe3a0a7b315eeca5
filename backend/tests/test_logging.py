"""Tests for request correlation and log redaction."""
from __future__ import annotations

import logging

import pytest
from fastapi.testclient import TestClient
from pydantic import SecretStr

from indexintellect.core import config as core_config
from indexintellect.core import logging as core_logging
from indexintellect.core.context import MAX_REQUEST_ID_LENGTH, accept_request_id, bind_request_id, reset_request_id


def _record(msg: str, *args) -> logging.LogRecord:
    return logging.LogRecord("test", logging.INFO, __file__, 1, msg, args, None)


def test_redact_filter_masks_explicit_secret() -> None:
    record = _record("calling with key=%s", "sk-live-123")

    assert core_logging.RedactSecretsFilter("sk-live-123").filter(record) is True
    assert record.getMessage() == "calling with key=***"


def test_redact_filter_reads_configured_key(monkeypatch) -> None:
    monkeypatch.setattr(core_config.settings, "llm_api_key", SecretStr("configured-key"))
    record = _record("Authorization: Bearer configured-key")

    core_logging.RedactSecretsFilter().filter(record)

    assert "configured-key" not in record.getMessage()


def test_redact_filter_leaves_other_messages_alone(monkeypatch) -> None:
    monkeypatch.setattr(core_config.settings, "llm_api_key", None)
    record = _record("plan ready in %d ms", 12)

    core_logging.RedactSecretsFilter().filter(record)

    assert record.getMessage() == "plan ready in 12 ms"
    assert record.args == (12,)


def test_request_id_filter_uses_bound_id() -> None:
    record = _record("hello")
    token = bind_request_id("req-42")
    try:
        core_logging.RequestIdFilter().filter(record)
    finally:
        reset_request_id(token)

    assert record.request_id == "req-42"

    unbound = _record("hello")
    core_logging.RequestIdFilter().filter(unbound)
    assert unbound.request_id == "-"


def test_logging_config_quiets_sdk_loggers() -> None:
    config = core_logging.build_logging_config("DEBUG")

    assert config["root"]["level"] == "DEBUG"
    assert config["loggers"]["openai"] == {"level": "WARNING"}
    assert config["handlers"]["console"]["filters"] == ["request_id", "redact_secrets"]


@pytest.mark.parametrize("candidate", [None, "", "has space", "line\nbreak", "x" * (MAX_REQUEST_ID_LENGTH + 1)])
def test_unsafe_request_ids_are_replaced(candidate) -> None:
    accepted = accept_request_id(candidate)

    assert accepted != candidate
    assert len(accepted) == 32


def test_access_log_line_written_per_request(caplog) -> None:
    from indexintellect.main import app

    with caplog.at_level(logging.INFO, logger="indexintellect.access"):
        response = TestClient(app).get("/health", headers={"X-Request-Id": "bad id"})

    assert response.headers["X-Request-Id"] != "bad id"
    assert any("GET /health -> 200" in message for message in caplog.messages)
