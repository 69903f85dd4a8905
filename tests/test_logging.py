import json

import structlog

from identity_service.logging import get_logger, setup_logging


def test_json_lines_carry_bound_request_id(capsys, monkeypatch):
    monkeypatch.setenv("LOG_FORMAT", "json")
    setup_logging(level="INFO")

    structlog.contextvars.bind_contextvars(request_id="rid-1")
    try:
        get_logger("identity_service.tests").info("user_created", user_id=7)
    finally:
        structlog.contextvars.clear_contextvars()

    line = capsys.readouterr().err.strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["event"] == "user_created"
    assert payload["user_id"] == 7
    assert payload["request_id"] == "rid-1"
    assert payload["level"] == "info"
    assert payload["service"] == "identity-service"
