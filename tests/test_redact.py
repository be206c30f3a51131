from __future__ import annotations

from pysesame._redact import redact_for_log


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "cmd": 83,
        "history": "T3BlblNlc2FtZQ==",
        "sign": "c1f0d3",
        "headers": {"X-Api-Key": "key", "user-agent": "pysesame"},
        "locks": [{"uuid": "abc", "secretKey": "00ff"}],
    }

    redacted = redact_for_log(payload)
    assert redacted["cmd"] == 83
    assert redacted["history"] == "T3BlblNlc2FtZQ=="
    assert redacted["sign"] == "<redacted>"
    assert redacted["headers"]["X-Api-Key"] == "<redacted>"
    assert redacted["headers"]["user-agent"] == "pysesame"
    assert redacted["locks"][0] == {"uuid": "abc", "secretKey": "<redacted>"}


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_redact_for_log_summarizes_bytes() -> None:
    assert redact_for_log(b"\x00\x01") == "<bytes:2b>"
    assert redact_for_log(None) is None
