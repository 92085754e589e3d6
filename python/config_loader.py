"""
Python Configuration Loader

Loads object pool defaults from YAML so pool sizing and selection policy
can change per environment without code edits
"""

import logging
import os
import threading
import yaml
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

SELECTION_POLICIES = ("fifo", "lifo")


class Config:
    """Runtime configuration loaded from YAML"""

    def __init__(self, config_dict: Dict[str, Any]):
        # Object Pool
        pool = config_dict.get("object_pool", {}) or {}
        self.prewarm_count = pool.get("prewarm_count", 0)
        self.selection_policy = pool.get("selection_policy", "fifo")
        self.track_stats = pool.get("track_stats", True)
        self.log_operations = pool.get("log_operations", False)

        # Development
        dev = config_dict.get("development", {}) or {}
        self.verbose = dev.get("verbose", False)
        self.debug = dev.get("debug", False)

    def validate(self) -> None:
        """
        Validate configuration values

        Raises:
            ValueError: If any configuration value is invalid
        """
        if not isinstance(self.prewarm_count, int) or isinstance(self.prewarm_count, bool):
            raise ValueError(f"prewarm_count must be an integer, got {self.prewarm_count!r}")

        if self.prewarm_count < 0:
            raise ValueError(f"prewarm_count must be >= 0, got {self.prewarm_count}")

        if self.selection_policy not in SELECTION_POLICIES:
            raise ValueError(
                f"selection_policy must be one of {list(SELECTION_POLICIES)}, got {self.selection_policy}"
            )


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries"""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def _find_config_path() -> Optional[str]:
    """Walk up from this file looking for config/pool.yaml"""
    current = Path(__file__).parent
    for _ in range(5):  # Search up to 5 levels
        candidate = current / "config" / "pool.yaml"
        if candidate.exists():
            return str(candidate)
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def load_config(
    config_path: Optional[str] = None, environment: Optional[str] = None
) -> Config:
    """
    Load configuration from YAML file

    Args:
        config_path: Path to config file (defaults to project_root/config/pool.yaml)
        environment: Environment name (production/development/test)

    Returns:
        Config instance

    Raises:
        FileNotFoundError: If config file not found
        ValueError: If config file is invalid YAML or fails validation
    """
    if config_path is None:
        config_path = _find_config_path()
        if config_path is None:
            raise FileNotFoundError("Configuration file not found: config/pool.yaml")

    try:
        with open(config_path, "r") as f:
            base_config = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise FileNotFoundError(f"Configuration file not found: {config_path}")
    except yaml.YAMLError as exc:
        raise ValueError(f"Failed to parse YAML config file '{config_path}': {exc}") from exc

    if not isinstance(base_config, dict):
        raise ValueError(f"Config file '{config_path}' must contain a mapping at top level")

    # Determine environment
    env = environment or os.getenv("PYTHON_ENV") or "development"

    # Apply environment-specific overrides
    final_config = base_config
    environments = base_config.get("environments") or {}
    if env in environments:
        final_config = deep_merge(base_config, environments[env])

    final_config.pop("environments", None)

    config = Config(final_config)
    config.validate()
    return config


# Global config instance
_global_config: Optional[Config] = None
_config_lock = threading.Lock()


def initialize_config(
    config_path: Optional[str] = None, environment: Optional[str] = None
) -> Config:
    """Initialize global configuration (thread-safe)"""
    global _global_config
    with _config_lock:
        _global_config = load_config(config_path, environment)
        return _global_config


def get_config() -> Config:
    """
    Get global configuration (lazy initialization)

    Uses double-checked locking so concurrent first callers load the file once.
    Falls back to built-in defaults when no config file can be found.
    """
    global _global_config

    if _global_config is not None:
        return _global_config

    with _config_lock:
        if _global_config is None:
            try:
                _global_config = load_config()
            except FileNotFoundError as e:
                logger.warning(f"Failed to load configuration, using defaults: {e}")
                _global_config = Config({})
        return _global_config


def reset_config() -> None:
    """Drop the cached global configuration (next get_config() reloads)"""
    global _global_config
    with _config_lock:
        _global_config = None
