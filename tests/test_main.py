"""Tests for the demo entry point."""

import logging

from densetensor import __main__ as demo


def test_demo_reads_back_value(caplog, monkeypatch):
    monkeypatch.setattr(demo, "setup_logging", lambda: None)
    with caplog.at_level(logging.INFO, logger="densetensor"):
        demo.main()
    messages = [r.getMessage() for r in caplog.records]
    assert "Testing Tensor" in messages
    assert "t(0, 99, 0, 2, 0) = 21.000 (offset 712824)" in messages
