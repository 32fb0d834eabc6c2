"""
Tests for merge run logging.
"""

import json

import pytest

from responsive_merge.utils.merge_logger import LoggedPass, LogLevel, MergeLogger, get_logger


@pytest.fixture
def debug_logger(tmp_path, monkeypatch):
    """Fresh logger instance writing JSON Lines under tmp_path."""
    monkeypatch.setenv("MERGE_DEBUG_LEVEL", "DEBUG")
    monkeypatch.setenv("MERGE_LOG_TO_FILE", "true")
    monkeypatch.setenv("MERGE_LOG_DIR", str(tmp_path))
    monkeypatch.setattr(MergeLogger, "_instance", None)
    return get_logger()


def read_entries(tmp_path, sample_id):
    log_file = tmp_path / sample_id / "logs" / "merge_passes.jsonl"
    return [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]


def test_logger_is_singleton(debug_logger):
    assert get_logger() is debug_logger
    assert debug_logger.level == LogLevel.DEBUG


def test_logged_pass_writes_entries(debug_logger, tmp_path):
    run_id = debug_logger.log_run_start(sample_id="s1", passes=["count"])
    logged = LoggedPass(lambda context: {"count": len(context)}, "count", run_id=run_id, sample_id="s1")

    assert logged([1, 2, 3]) == {"count": 3}

    entries = read_entries(tmp_path, "s1")
    assert [entry["event"] for entry in entries] == ["run_start", "pass"]
    assert entries[1]["pass"] == "count"
    assert entries[1]["stats"] == {"count": 3}
    assert entries[1]["timing"]["latency_ms"] >= 0


def test_logged_pass_logs_and_reraises(debug_logger, tmp_path):
    run_id = debug_logger.log_run_start(sample_id="s2")

    def failing(context):
        raise ValueError("bad tree")

    with pytest.raises(ValueError, match="bad tree"):
        LoggedPass(failing, "explode", run_id=run_id, sample_id="s2")(None)

    entries = read_entries(tmp_path, "s2")
    assert entries[-1]["event"] == "error"
    assert entries[-1]["error"] == {"type": "ValueError", "message": "bad tree"}


def test_disabled_logger_returns_empty_run_id(monkeypatch):
    monkeypatch.setenv("MERGE_DEBUG_LEVEL", "NONE")
    monkeypatch.setattr(MergeLogger, "_instance", None)
    logger = get_logger()
    assert logger.log_run_start(sample_id="s3") == ""
    assert LoggedPass(lambda context: {"ok": True}, "noop")(None) == {"ok": True}
