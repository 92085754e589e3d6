"""
Unit tests for the YAML config loader

Tests defaults, environment overrides, validation, and the global
config cache fallback.
"""

import pytest
import yaml
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent / 'python'))

import config_loader
from config_loader import Config, deep_merge, get_config, load_config, reset_config


@pytest.fixture
def write_config(tmp_path):
    def _write(data):
        path = tmp_path / "pool.yaml"
        path.write_text(yaml.safe_dump(data))
        return str(path)
    return _write


@pytest.fixture(autouse=True)
def clean_global_config(monkeypatch):
    monkeypatch.delenv("PYTHON_ENV", raising=False)
    reset_config()
    yield
    reset_config()


class TestConfigDefaults:
    def test_empty_config_uses_defaults(self):
        config = Config({})

        assert config.prewarm_count == 0
        assert config.selection_policy == "fifo"
        assert config.track_stats is True
        assert config.log_operations is False
        config.validate()

    def test_custom_values(self):
        config = Config({"object_pool": {"prewarm_count": 4, "selection_policy": "lifo"}})

        assert config.prewarm_count == 4
        assert config.selection_policy == "lifo"


class TestConfigValidation:
    def test_negative_prewarm(self):
        with pytest.raises(ValueError, match="prewarm_count must be >= 0"):
            Config({"object_pool": {"prewarm_count": -2}}).validate()

    def test_non_integer_prewarm(self):
        with pytest.raises(ValueError, match="prewarm_count must be an integer"):
            Config({"object_pool": {"prewarm_count": "8"}}).validate()

    def test_unknown_policy(self):
        with pytest.raises(ValueError, match="selection_policy"):
            Config({"object_pool": {"selection_policy": "random"}}).validate()


class TestDeepMerge:
    def test_nested_override(self):
        base = {"object_pool": {"prewarm_count": 0, "selection_policy": "fifo"}}
        merged = deep_merge(base, {"object_pool": {"prewarm_count": 8}})

        assert merged == {"object_pool": {"prewarm_count": 8, "selection_policy": "fifo"}}
        assert base["object_pool"]["prewarm_count"] == 0


class TestLoadConfig:
    def test_environment_override(self, write_config):
        path = write_config({
            "object_pool": {"prewarm_count": 1},
            "environments": {"production": {"object_pool": {"prewarm_count": 32}}},
        })

        assert load_config(path, "production").prewarm_count == 32
        assert load_config(path, "development").prewarm_count == 1

    def test_environment_from_env_var(self, write_config, monkeypatch):
        path = write_config({
            "object_pool": {"selection_policy": "fifo"},
            "environments": {"test": {"object_pool": {"selection_policy": "lifo"}}},
        })
        monkeypatch.setenv("PYTHON_ENV", "test")

        assert load_config(path).selection_policy == "lifo"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "pool.yaml"
        path.write_text("object_pool: [unclosed")

        with pytest.raises(ValueError, match="Failed to parse YAML"):
            load_config(str(path))

    def test_invalid_values_rejected(self, write_config):
        path = write_config({"object_pool": {"selection_policy": "random"}})

        with pytest.raises(ValueError):
            load_config(path)

    def test_repo_config_file_loads(self):
        repo_config = Path(__file__).parent.parent.parent.parent / "config" / "pool.yaml"

        config = load_config(str(repo_config), "production")

        assert config.prewarm_count == 16


class TestGlobalConfig:
    def test_get_config_is_cached(self):
        assert get_config() is get_config()

    def test_get_config_falls_back_to_defaults(self, monkeypatch, caplog):
        monkeypatch.setattr(config_loader, "_find_config_path", lambda: None)

        config = get_config()

        assert config.prewarm_count == 0
        assert "using defaults" in caplog.text

    def test_initialize_config(self, write_config):
        path = write_config({"object_pool": {"prewarm_count": 7}})

        config_loader.initialize_config(path)

        assert get_config().prewarm_count == 7
