"""
Persisted configuration for PRZ.

Stores a snapshot of `Config` in a small SQLite database under
`Config.storage.HOME_DIR` so a deployment can pin its thresholds and
windows independently of the code defaults.
"""

import json
import logging
import os
import sqlite3
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Any, Optional, Tuple

from .config import Config

logger = logging.getLogger(__name__)


class SyncStatus(Enum):
    """Status of config synchronization."""
    SYNCED = "synced"           # Local and persisted match
    CONFLICT = "conflict"       # Differences exist
    GLOBAL_MISSING = "missing"  # No persisted config exists


def get_config_db_path() -> str:
    return Config.get_config_db_path()


def global_config_exists() -> bool:
    return os.path.exists(get_config_db_path())


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _write_values(conn: sqlite3.Connection, config_dict: Dict[str, Any]):
    for key, value in config_dict.items():
        conn.execute(
            "INSERT OR REPLACE INTO meta (key, value) VALUES (?, ?)",
            (f"config:{key}", json.dumps(value))
        )


def init_global_config(force: bool = False) -> Tuple[bool, str]:
    """
    Initialize the persisted config with the current values.

    Args:
        force: If True, overwrite an existing database.

    Returns:
        (success, message)
    """
    db_path = get_config_db_path()
    os.makedirs(os.path.dirname(db_path), exist_ok=True)

    if os.path.exists(db_path) and not force:
        return False, f"Global config already exists at {db_path}"

    conn = sqlite3.connect(db_path)
    try:
        with conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS meta (
                    key TEXT PRIMARY KEY,
                    value TEXT
                )
            """)
            conn.execute(
                "INSERT OR REPLACE INTO meta (key, value) VALUES (?, ?)",
                ("_created_at", _timestamp())
            )
            _write_values(conn, Config.to_dict())
    finally:
        conn.close()

    logger.info(f"Global config initialized at {db_path}")
    return True, f"Global config initialized at {db_path}"


def load_global_config() -> Optional[Dict[str, Any]]:
    """
    Load configuration from the persisted database.

    Returns:
        Dict of config values, or None if nothing has been persisted.
    """
    db_path = get_config_db_path()
    if not os.path.exists(db_path):
        return None

    conn = sqlite3.connect(db_path)
    try:
        cursor = conn.execute(
            "SELECT key, value FROM meta WHERE key LIKE 'config:%'"
        )
        config = {}
        for key, value in cursor:
            config[key[len("config:"):]] = json.loads(value)
        return config if config else None
    finally:
        conn.close()


def save_global_config(config_dict: Optional[Dict[str, Any]] = None) -> Tuple[bool, str]:
    """
    Save configuration to the persisted database.

    Args:
        config_dict: Config to save. If None, uses current Config.to_dict().
    """
    if not global_config_exists():
        ok, message = init_global_config()
        if config_dict is None or not ok:
            return ok, message

    if config_dict is None:
        config_dict = Config.to_dict()

    conn = sqlite3.connect(get_config_db_path())
    try:
        with conn:
            _write_values(conn, config_dict)
            conn.execute(
                "INSERT OR REPLACE INTO meta (key, value) VALUES (?, ?)",
                ("_updated_at", _timestamp())
            )
    finally:
        conn.close()

    return True, "Global config updated"


def sync_config() -> Tuple[SyncStatus, Dict[str, tuple]]:
    """
    Compare the running config with the persisted one.

    Returns:
        (status, differences) where differences maps
        key -> (local_value, persisted_value).
    """
    persisted = load_global_config()
    if persisted is None:
        return SyncStatus.GLOBAL_MISSING, {}

    differences = Config.diff(persisted)
    if not differences:
        return SyncStatus.SYNCED, {}
    return SyncStatus.CONFLICT, differences


def apply_global_config(apply_env_overrides: bool = True) -> Tuple[bool, str]:
    """
    Load the persisted config into `Config`.
    Environment variables still take precedence if apply_env_overrides is True.
    """
    persisted = load_global_config()
    if persisted is None:
        return False, "No global config found"

    Config.from_dict(persisted, apply_env_overrides=apply_env_overrides)
    return True, f"Applied {len(persisted)} config values from global config"
