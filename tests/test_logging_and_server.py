import json
import logging

from levelforge import app
from levelforge.logging_utils import get_logger
from levelforge.server import _configure_logging


def test_key_value_format(monkeypatch, capsys):
    monkeypatch.setenv("LEVELFORGE_LOG_JSON", "0")
    monkeypatch.setenv("LEVELFORGE_LOG_LEVEL", "info")
    get_logger("test").info(event="level_generated", key="Hell-1-2", note="two words", skip=None)
    out = capsys.readouterr().out.strip()
    assert out.startswith("level=info ts=")
    assert "event=level_generated" in out
    assert "note=two_words" in out
    assert "logger=test" in out
    assert "skip=" not in out


def test_json_format_and_threshold(monkeypatch, capsys):
    monkeypatch.setenv("LEVELFORGE_LOG_JSON", "1")
    monkeypatch.setenv("LEVELFORGE_LOG_LEVEL", "warn")
    log = get_logger("test")
    log.info(event="hidden")
    log.warn(event="provider_failed", error="timeout")
    log.error(event="listener_failed")
    captured = capsys.readouterr()
    lines = captured.out.strip().splitlines()
    assert len(lines) == 1
    rec = json.loads(lines[0])
    assert rec["event"] == "provider_failed" and rec["level"] == "warn"
    assert json.loads(captured.err.strip())["event"] == "listener_failed"


def test_get_logger_is_cached():
    assert get_logger("same") is get_logger("same")


def test_configure_logging_writes_rotating_file(tmp_path, monkeypatch):
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    monkeypatch.setattr(app, "instance_path", str(tmp_path))
    try:
        # Run twice to ensure handlers are replaced, not stacked
        _configure_logging()
        path = _configure_logging()
        assert len(root.handlers) == 2
        logging.getLogger("levelforge.test").info("hello file")
        for h in root.handlers:
            h.flush()
        assert (tmp_path / "app.log").exists()
        assert path == str(tmp_path / "app.log")
        assert "hello file" in (tmp_path / "app.log").read_text()
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)


