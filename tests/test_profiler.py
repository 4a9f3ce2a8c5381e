"""Test wall-clock timing helper.

Run:
    pytest tests/test_profiler.py -v
"""

import logging

import pytest

from src.utils import profiler


def test_timer_reports_to_sink():
    timings = {}
    with profiler.timer("render", sink=timings.__setitem__):
        sum(range(1000))

    assert list(timings) == ["render"]
    assert timings["render"] >= 0.0


def test_timer_runs_sink_on_error():
    timings = {}
    with pytest.raises(KeyError):
        with profiler.timer("failing", sink=timings.__setitem__):
            raise KeyError("x")
    assert "failing" in timings


def test_timer_logs_without_sink(caplog):
    with caplog.at_level(logging.DEBUG, logger="src.utils.profiler"):
        with profiler.timer("load"):
            pass
    assert any(r.getMessage().startswith("load took") for r in caplog.records)
