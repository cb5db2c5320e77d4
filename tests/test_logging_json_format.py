import importlib
import io
import json
import sys
from contextlib import redirect_stderr, redirect_stdout

import pytest
from fastapi.testclient import TestClient


def _fresh_modules(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """tierdict.* を破棄し、一時 DB と非 strict 設定で読み直せるようにする。"""

    monkeypatch.setenv("STRICT_MODE", "false")
    monkeypatch.setenv("LLM_PROVIDER", "local")
    monkeypatch.setenv("DB_PATH", str(tmp_path / "log.sqlite3"))
    for name in list(sys.modules.keys()):
        if name == "tierdict" or name.startswith("tierdict."):
            sys.modules.pop(name)


def _json_lines(buffer_text: str) -> list[dict]:
    out = []
    for ln in buffer_text.splitlines():
        ln = ln.strip()
        if ln.startswith("{"):
            out.append(json.loads(ln))
    return out


def _captured(buf_out: io.StringIO, buf_err: io.StringIO) -> str:
    # logging は既定で stderr に出すため stderr を優先
    return buf_err.getvalue().strip() or buf_out.getvalue().strip()


def test_structlog_outputs_pure_json_without_stdlib_prefix(monkeypatch, tmp_path):
    _fresh_modules(monkeypatch, tmp_path)
    buf_out, buf_err = io.StringIO(), io.StringIO()

    with redirect_stdout(buf_out), redirect_stderr(buf_err):
        log_module = importlib.import_module("tierdict.logging")
        log_module.configure_logging()
        log_module.logger.info("entry_parse_strategy", word="nexus", strategy="whole", repaired=False)

    raw = _captured(buf_out, buf_err)
    lines = [ln for ln in raw.splitlines() if ln.strip()]
    assert lines, "no log output captured"
    assert not lines[-1].startswith("INFO:")

    data = json.loads(lines[-1])
    assert data["event"] == "entry_parse_strategy"
    assert data["level"] == "info"
    assert data["strategy"] == "whole"
    assert "timestamp" in data


def test_request_complete_log_contains_request_id_and_status_code(monkeypatch, tmp_path):
    _fresh_modules(monkeypatch, tmp_path)
    buf_out, buf_err = io.StringIO(), io.StringIO()

    with redirect_stdout(buf_out), redirect_stderr(buf_err):
        main = importlib.import_module("tierdict.main")
        with TestClient(main.app) as client:
            response = client.get("/healthz", headers={"X-Request-ID": "trace-me"})
        assert response.status_code == 200

    events = [e for e in _json_lines(_captured(buf_out, buf_err)) if e.get("event") == "request_complete"]
    assert events, "request_complete log line not found"
    data = events[-1]
    assert data["request_id"] == "trace-me"
    assert data["status_code"] == 200
    assert data["path"] == "/healthz"
    assert data["method"] == "GET"
    assert data["is_error"] is False
    assert "latency_ms" in data


def test_request_id_is_not_leaked_outside_the_request(monkeypatch, tmp_path):
    _fresh_modules(monkeypatch, tmp_path)
    buf_out, buf_err = io.StringIO(), io.StringIO()

    with redirect_stdout(buf_out), redirect_stderr(buf_err):
        main = importlib.import_module("tierdict.main")
        with TestClient(main.app) as client:
            client.get("/healthz", headers={"X-Request-ID": "first"})
        main.logger.info("after_request")

    events = _json_lines(_captured(buf_out, buf_err))
    after = [e for e in events if e.get("event") == "after_request"]
    assert after and "request_id" not in after[-1]


def test_sensitive_values_are_masked_in_logs(monkeypatch, tmp_path):
    _fresh_modules(monkeypatch, tmp_path)
    buf_out, buf_err = io.StringIO(), io.StringIO()
    secret = "ollama-proxy-1234567890"

    with redirect_stdout(buf_out), redirect_stderr(buf_err):
        log_module = importlib.import_module("tierdict.logging")
        log_module.configure_logging()
        log_module.logger.info(
            "llm_endpoint",
            api_token=secret,
            headers={"Authorization": "abc123"},
            model="qwen3:8b",
        )

    data = _json_lines(_captured(buf_out, buf_err))[-1]
    assert secret not in json.dumps(data)
    assert data["api_token"] == "olla…7890"
    assert data["headers"]["Authorization"] == "***"
    assert data["model"] == "qwen3:8b"
