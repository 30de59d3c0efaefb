"""
Tests for Config and the persisted global config.
"""
import logging

from prz.config import Config, GuardConfig, configure_logging
from prz.global_config import (
    SyncStatus,
    apply_global_config,
    global_config_exists,
    init_global_config,
    load_global_config,
    save_global_config,
    sync_config,
)
from prz.guard import LoopGuard


class TestConfig:

    def test_defaults(self):
        assert Config.guard.WINDOW_MS == 300_000
        assert Config.guard.SIM_THRESHOLD == 0.85
        assert Config.feedback.CONTRADICTION_WINDOW_MS == 600_000
        assert Config.resonance.THRESHOLD == 0.95

    def test_to_dict_is_flat(self):
        data = Config.to_dict()
        assert data["guard.MAX_SIMILAR"] == 3
        assert data["resonance.BASELINE_DIRECTION"] == [1.0, 0.0]

    def test_from_dict_coerces_types(self):
        Config.from_dict({
            "guard.MAX_SIMILAR": "5",
            "core.DEBUG": "true",
            "resonance.BASELINE_PATTERNS": [0.5, 0.6],
            "unknown.KEY": 1,
            "guard.NOT_A_FIELD": 1,
        }, apply_env_overrides=False)
        assert Config.guard.MAX_SIMILAR == 5
        assert Config.core.DEBUG is True
        assert Config.resonance.BASELINE_PATTERNS == (0.5, 0.6)

    def test_env_overrides_win(self, monkeypatch):
        monkeypatch.setenv("PRZ_MAX_SIMILAR", "9")
        Config.from_dict({"guard.MAX_SIMILAR": 7})
        assert Config.guard.MAX_SIMILAR == 3

    def test_home_dir_env_override(self, monkeypatch):
        monkeypatch.setenv("PRZ_HOME", "/env/home")
        Config.storage.HOME_DIR = "/env/home"
        Config.from_dict({"storage.HOME_DIR": "/persisted/home"})
        assert Config.storage.HOME_DIR == "/env/home"

    def test_home_dir_applied_without_env(self, monkeypatch):
        monkeypatch.delenv("PRZ_HOME", raising=False)
        Config.from_dict({"storage.HOME_DIR": "/persisted/home"})
        assert Config.storage.HOME_DIR == "/persisted/home"

    def test_diff(self):
        data = Config.to_dict()
        data["guard.MAX_SIMILAR"] = 4
        assert Config.diff(data) == {"guard.MAX_SIMILAR": (3, 4)}

    def test_shared_section_reaches_components(self):
        Config.guard.MAX_SIMILAR = 1
        assert LoopGuard().config.MAX_SIMILAR == 1
        assert LoopGuard(GuardConfig()).config.MAX_SIMILAR == 3

    def test_configure_logging(self, monkeypatch):
        calls = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.update(kw))
        Config.core.DEBUG = True
        configure_logging()
        assert calls["level"] == logging.DEBUG


class TestGlobalConfig:
    """SQLite-backed persisted config."""

    def test_missing(self, temp_home_dir):
        assert not global_config_exists()
        assert load_global_config() is None
        assert sync_config() == (SyncStatus.GLOBAL_MISSING, {})

    def test_init_and_load(self, temp_home_dir):
        ok, _ = init_global_config()
        assert ok
        assert global_config_exists()
        assert load_global_config()["guard.WINDOW_MS"] == 300_000
        assert sync_config() == (SyncStatus.SYNCED, {})

    def test_init_twice_requires_force(self, temp_home_dir):
        init_global_config()
        ok, message = init_global_config()
        assert not ok
        assert "already exists" in message
        assert init_global_config(force=True)[0]

    def test_conflict_and_apply(self, temp_home_dir):
        init_global_config()
        save_global_config({"guard.MAX_SIMILAR": 6})
        status, diff = sync_config()
        assert status is SyncStatus.CONFLICT
        assert diff == {"guard.MAX_SIMILAR": (3, 6)}

        ok, _ = apply_global_config(apply_env_overrides=False)
        assert ok
        assert Config.guard.MAX_SIMILAR == 6
        assert sync_config()[0] is SyncStatus.SYNCED

    def test_save_creates_database(self, temp_home_dir):
        ok, _ = save_global_config()
        assert ok
        assert global_config_exists()
