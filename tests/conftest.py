"""
Pytest configuration and shared fixtures for test isolation.
"""
import pytest

from prz.config import Config
from prz.feedback import UserFeedback


# Reset global state between tests
@pytest.fixture(autouse=True)
def reset_global_state():
    """Snapshot Config and clear server sessions around each test."""
    from prz.server import agent_sessions
    agent_sessions.clear()

    snapshot = Config.to_dict()

    yield

    Config.from_dict(snapshot, apply_env_overrides=False)
    Config._loaded_from_global = False
    agent_sessions.clear()


@pytest.fixture
def temp_home_dir(tmp_path):
    """Point persisted config storage at a temporary directory."""
    home = tmp_path / "prz_home"
    Config.storage.HOME_DIR = str(home)
    yield home


@pytest.fixture
def test_client():
    """Provide a TestClient for API testing with clean state."""
    from fastapi.testclient import TestClient
    from prz.server import app

    yield TestClient(app)


@pytest.fixture
def make_feedback():
    """Factory for UserFeedback with sensible defaults."""
    counter = {"n": 0}

    def _make(sentiment="positive", timestamp=0, confidence=0.9, intensity=1.0,
              artifact_id="artifact:test", type="satisfaction", comment=None, id=None):
        counter["n"] += 1
        return UserFeedback(
            id=id or f"fb-{counter['n']}",
            artifact_id=artifact_id,
            sentiment=sentiment,
            type=type,
            confidence=confidence,
            intensity=intensity,
            timestamp=timestamp,
            comment=comment,
        )

    return _make
