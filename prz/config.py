import logging
import os
from dataclasses import dataclass, fields
from typing import Dict, Any, Tuple


@dataclass
class CoreConfig:
    DEBUG: bool = os.getenv("PRZ_DEBUG", "0") == "1"
    LOG_LEVEL: str = os.getenv("PRZ_LOG_LEVEL", "INFO")


@dataclass
class SimilarityConfig:
    # Tokens shorter than this are dropped by tokenize()
    MIN_TOKEN_LENGTH: int = 3


@dataclass
class GuardConfig:
    WINDOW_MS: int = 5 * 60 * 1000
    SIM_THRESHOLD: float = 0.85    # Payload Jaccard must exceed this
    MAX_SIMILAR: int = 3           # Similar actions tolerated before a loop is declared
    PIVOT_LOOKBACK: int = 5


@dataclass
class IntentConfig:
    KEYWORD_WEIGHT: float = 0.4
    HARMONIC_WEIGHT: float = 0.4
    LENGTH_WEIGHT: float = 0.2
    LENGTH_EXPONENT: float = 0.5
    ACCEPT_THRESHOLD: float = 0.85


@dataclass
class ResonanceConfig:
    DIRECTION_WEIGHT: float = 0.5
    MAGNITUDE_WEIGHT: float = 0.3
    FREQUENCY_WEIGHT: float = 0.2
    THRESHOLD: float = 0.95
    DEFAULT_PATTERN: float = 0.5   # Used when the context carries no patterns

    # Synthetic baseline used by the pipeline
    BASELINE_DIRECTION: Tuple[float, float] = (1.0, 0.0)
    BASELINE_MAGNITUDE: float = 0.9
    BASELINE_FREQUENCY: float = 0.5
    BASELINE_PATTERNS: Tuple[float, ...] = (0.9,)
    BASELINE_SYSTEM_FREQUENCY: float = 0.5


@dataclass
class FeedbackConfig:
    MIN_CONFIDENCE: float = 0.7
    BOOST: float = 0.05
    PENALTY: float = 0.10
    CONTRADICTION_WINDOW_MS: int = 10 * 60 * 1000
    MIN_CONTRADICTION_ENTRIES: int = 3
    MIN_ALTERNATIONS: int = 2
    PATTERN_MIN_CONFIDENCE: float = 0.3


@dataclass
class HistoryConfig:
    # Longest window any detector looks back over
    RETENTION_MS: int = 10 * 60 * 1000
    MAX_ENTRIES: int = 1000
    RESONANCE_MAXLEN: int = 100
    TREND_EPSILON: float = 0.01


@dataclass
class ServerConfig:
    HOST: str = os.getenv("PRZ_HOST", "127.0.0.1")
    PORT: int = int(os.getenv("PRZ_PORT", "8000"))
    RELOAD: bool = os.getenv("PRZ_RELOAD", "0") == "1"


@dataclass
class StorageConfig:
    HOME_DIR: str = os.getenv("PRZ_HOME", os.path.expanduser("~/.prz"))
    CONFIG_DB_NAME: str = "config.db"


class Config:
    """Centralized configuration with persistence support."""
    core = CoreConfig()
    similarity = SimilarityConfig()
    guard = GuardConfig()
    intent = IntentConfig()
    resonance = ResonanceConfig()
    feedback = FeedbackConfig()
    history = HistoryConfig()
    server = ServerConfig()
    storage = StorageConfig()

    SECTIONS = ("core", "similarity", "guard", "intent", "resonance",
                "feedback", "history", "server", "storage")

    # Fields whose env var is not PRZ_<FIELD>
    ENV_KEYS = {
        "storage.HOME_DIR": "PRZ_HOME",
    }

    # Track if loaded from global config
    _loaded_from_global: bool = False

    @classmethod
    def to_dict(cls) -> Dict[str, Any]:
        """Serialize all config sections to a flat dictionary."""
        result = {}
        for section_name in cls.SECTIONS:
            section = getattr(cls, section_name)
            for f in fields(section):
                value = getattr(section, f.name)
                if isinstance(value, tuple):
                    value = list(value)
                result[f"{section_name}.{f.name}"] = value
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any], apply_env_overrides: bool = True):
        """
        Update config from a flat dictionary.
        If apply_env_overrides is True, environment variables take precedence.
        """
        for key, value in data.items():
            if "." not in key:
                continue
            section_name, field_name = key.split(".", 1)
            if section_name not in cls.SECTIONS:
                continue
            section = getattr(cls, section_name)
            if not hasattr(section, field_name):
                continue

            env_key = cls.ENV_KEYS.get(key, f"PRZ_{field_name}")
            if apply_env_overrides and env_key in os.environ:
                continue  # Skip, env var takes precedence

            # Type conversion
            current_value = getattr(section, field_name)
            if isinstance(current_value, bool):
                value = str(value).lower() in ("1", "true", "yes")
            elif isinstance(current_value, int):
                value = int(value)
            elif isinstance(current_value, float):
                value = float(value)
            elif isinstance(current_value, tuple):
                value = tuple(float(v) for v in value)

            setattr(section, field_name, value)

        cls._loaded_from_global = True

    @classmethod
    def diff(cls, other_dict: Dict[str, Any]) -> Dict[str, tuple]:
        """
        Compare current config with another dict.
        Returns dict of {key: (current_value, other_value)} for differences.
        """
        current = cls.to_dict()
        differences = {}
        for key in set(current.keys()) | set(other_dict.keys()):
            curr_val = current.get(key)
            other_val = other_dict.get(key)
            if curr_val != other_val:
                differences[key] = (curr_val, other_val)
        return differences

    @classmethod
    def get_config_db_path(cls) -> str:
        """Get the path to the persisted config database."""
        return os.path.join(cls.storage.HOME_DIR, cls.storage.CONFIG_DB_NAME)


def configure_logging(level: str = None):
    """Install a basic root handler; DEBUG wins when PRZ_DEBUG is set."""
    if level is None:
        level = "DEBUG" if Config.core.DEBUG else Config.core.LOG_LEVEL
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
