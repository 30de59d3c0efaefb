"""
Tests for bounded session histories.
"""
from prz.config import Config
from prz.guard import Action
from prz.history import TimeWindowedHistory, now_ms


def action(ts):
    return Action(id=f"a-{ts}", type="request", payload="x", timestamp=ts)


def test_defaults_from_config():
    history = TimeWindowedHistory()
    assert history.retention_ms == Config.history.RETENTION_MS
    assert history.max_entries == Config.history.MAX_ENTRIES


def test_evicts_entries_older_than_retention():
    history = TimeWindowedHistory(retention_ms=1000, max_entries=10)
    for ts in (0, 500, 1000, 1600):
        history.append(action(ts))
    assert [a.timestamp for a in history] == [1000, 1600]


def test_caps_size():
    history = TimeWindowedHistory(retention_ms=10 ** 9, max_entries=3)
    for ts in range(5):
        history.append(action(ts))
    assert len(history) == 3
    assert history.items()[0].timestamp == 2


def test_explicit_evict():
    history = TimeWindowedHistory(retention_ms=100, max_entries=10)
    history.append(action(0))
    history.append(action(50))
    assert history.evict(160) == 2
    assert not history


def test_clear():
    history = TimeWindowedHistory()
    history.append(action(now_ms()))
    assert history
    history.clear()
    assert len(history) == 0
