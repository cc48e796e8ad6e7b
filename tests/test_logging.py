import json

import pytest
import structlog

from contextpatch import apply_patch
from contextpatch.logger import configure_logging, get_logger

DIFF = "--- t\n+++ t\n@@ -1 +1 @@\n-a\n+b\n"


@pytest.fixture
def log_to(tmp_path):
    """Configures JSONL logging into tmp_path; resets structlog and closes streams after."""
    streams = []

    def configure(name, verbose=False):
        path = tmp_path / name
        streams.append(configure_logging(log_file=path, verbose=verbose))
        return path

    yield configure

    structlog.reset_defaults()
    for stream in streams:
        stream.close()


def _events(path):
    return [json.loads(line) for line in path.read_text().splitlines()]


def test_library_is_silent_by_default(capsys):
    structlog.reset_defaults()

    apply_patch("a\n", DIFF)
    get_logger().info("should_not_print")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""


def test_configured_logging_writes_jsonl(log_to):
    log_file = log_to("events.jsonl")

    apply_patch("a\n", "--- t\n+++ t\n@@ -1 +1 @@\n-missing\n+b\n")

    failed = [r for r in _events(log_file) if r["event"] == "patch_failed"]
    assert failed
    assert failed[0]["stage"] == "plan"
    assert failed[0]["level"] == "info"
    assert "timestamp" in failed[0]


def test_debug_events_need_verbose(log_to):
    quiet = log_to("quiet.jsonl")
    apply_patch("a\n", DIFF)
    verbose = log_to("verbose.jsonl", verbose=True)
    apply_patch("a\n", DIFF)

    quiet_events = [r["event"] for r in _events(quiet)]
    verbose_events = [r["event"] for r in _events(verbose)]
    assert "hunk_matched" not in quiet_events
    assert "patch_applied" in quiet_events
    assert "hunk_matched" in verbose_events
    assert "diff_parsed" in verbose_events


def test_configure_logging_returns_open_stream(tmp_path):
    stream = configure_logging(log_file=tmp_path / "events.jsonl")
    try:
        assert not stream.closed
        get_logger().info("hello")
    finally:
        structlog.reset_defaults()
        stream.close()

    assert _events(tmp_path / "events.jsonl")[0]["event"] == "hello"
