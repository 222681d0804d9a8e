"""Bounded log buffer and its logging handler."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from relay.logbuffer import LogBuffer, LogBufferHandler


def test_rejects_zero_capacity():
    with pytest.raises(ValueError):
        LogBuffer(capacity=0)


def test_fifo_eviction():
    buffer = LogBuffer(capacity=3)
    for i in range(5):
        buffer.append("INFO", f"entry {i}")

    assert len(buffer) == 3
    assert [e.message for e in buffer.snapshot()] == ["entry 2", "entry 3", "entry 4"]


def test_size_never_exceeds_capacity():
    buffer = LogBuffer(capacity=10)
    for i in range(100):
        buffer.append("INFO", str(i))
        assert len(buffer) <= 10


def test_snapshot_limit_returns_most_recent():
    buffer = LogBuffer(capacity=10)
    for i in range(6):
        buffer.append("INFO", str(i))

    assert [e.message for e in buffer.snapshot(limit=2)] == ["4", "5"]
    assert len(buffer.snapshot(limit=50)) == 6
    assert buffer.snapshot(limit=0) == []


def test_snapshot_is_a_copy():
    buffer = LogBuffer(capacity=5)
    buffer.append("INFO", "a")
    snap = buffer.snapshot()
    snap.clear()
    assert len(buffer) == 1


def test_last_activity():
    buffer = LogBuffer(capacity=2)
    assert buffer.last_activity is None
    entry = buffer.append("WARNING", "x")
    assert buffer.last_activity == entry.timestamp
    buffer.clear()
    assert buffer.last_activity is None


def test_concurrent_appends():
    buffer = LogBuffer(capacity=50)

    def worker(n: int):
        for i in range(200):
            buffer.append("INFO", f"{n}-{i}")

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(worker, range(8)))

    assert len(buffer) == 50
    assert len({e.message for e in buffer.snapshot()}) == 50


def test_handler_mirrors_log_records():
    buffer = LogBuffer(capacity=5)
    log = logging.getLogger("relay.tests.handler")
    log.setLevel(logging.DEBUG)
    handler = LogBufferHandler(buffer)
    log.addHandler(handler)
    try:
        log.debug("too quiet")
        log.error("Recorder failed for %s", "ch_1")
    finally:
        log.removeHandler(handler)

    entries = buffer.snapshot()
    assert len(entries) == 1
    assert entries[0].level == "ERROR"
    assert entries[0].message == "Recorder failed for ch_1"
    assert entries[0].logger == "relay.tests.handler"
