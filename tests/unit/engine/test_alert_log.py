"""Unit tests for cybersim.engine.alert_log."""

from dataclasses import FrozenInstanceError

import pytest

from cybersim.engine.alert_log import AlertLog
from cybersim.engine.models import AlertSeverity


def test_append_returns_entry():
    log = AlertLog()
    entry = log.append("hello", AlertSeverity.INFO, 800)

    assert entry.message == "hello"
    assert entry.created_at == 800
    assert log.entries() == (entry,)


def test_capacity_evicts_oldest_first():
    log = AlertLog(capacity=3, max_age_ms=10_000)
    for i in range(5):
        log.append(f"alert {i}", AlertSeverity.INFO, i)

    assert [e.message for e in log] == ["alert 2", "alert 3", "alert 4"]
    assert len(log) == 3


def test_age_eviction_is_strict():
    log = AlertLog(capacity=10, max_age_ms=1000)
    log.append("old", AlertSeverity.WARNING, 0)
    log.append("new", AlertSeverity.WARNING, 500)

    assert log.evict_expired(1000) == 0
    assert log.evict_expired(1001) == 1
    assert [e.message for e in log] == ["new"]


def test_zero_max_age_keeps_entries_until_time_moves():
    log = AlertLog(capacity=5, max_age_ms=0)
    log.append("now", AlertSeverity.BREACH, 800)

    log.evict_expired(800)
    assert len(log) == 1

    log.evict_expired(1600)
    assert len(log) == 0


def test_zero_capacity_holds_nothing():
    log = AlertLog(capacity=0)
    log.append("dropped", AlertSeverity.INFO, 0)
    assert len(log) == 0


def test_configure_shrinks_log():
    log = AlertLog(capacity=5)
    for i in range(5):
        log.append(str(i), AlertSeverity.INFO, 0)

    log.configure(capacity=2, max_age_ms=8000)
    assert [e.message for e in log] == ["3", "4"]


def test_entries_are_immutable():
    log = AlertLog()
    entry = log.append("fixed", AlertSeverity.INFO, 0)
    with pytest.raises(FrozenInstanceError):
        entry.message = "changed"


def test_clear():
    log = AlertLog()
    log.append("x", AlertSeverity.INFO, 0)
    log.clear()
    assert log.entries() == ()
