"""Tests for layered configuration."""

import pytest

from logsource.utils.config import Config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "LOGSOURCE_STREAM",
        "LOGSOURCE_CHECKPOINT_DIR",
        "LOGSOURCE_MAX_EVENTS_PER_CYCLE",
        "LOGSOURCE_LOCALITY_STRATEGY",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


class TestConfig:
    """Test Config."""
    
    def test_defaults_loaded(self):
        """Test packaged defaults."""
        config = Config()
        
        assert config.get("source.stream_name") == "events"
        assert config.get("logging.level") == "INFO"
    
    def test_get_missing(self):
        """Test default for missing keys."""
        config = Config()
        
        assert config.get("source.nope") is None
        assert config.get("nope.deeper", 5) == 5
    
    def test_set(self):
        """Test dot-notation set creates nested keys."""
        config = Config()
        
        config.set("a.b.c", 1)
        
        assert config.get("a.b.c") == 1
        assert config.to_dict()["a"] == {"b": {"c": 1}}
    
    def test_file_deep_merges(self, tmp_path):
        """Test file values merge into defaults."""
        path = tmp_path / "override.yaml"
        path.write_text("source:\n  stream_name: orders\n")
        
        config = Config(str(path))
        
        assert config.get("source.stream_name") == "orders"
        assert config.get("source.locality_strategy") == "hash"
    
    def test_empty_file(self, tmp_path):
        """Test an empty YAML file changes nothing."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        
        assert Config(str(path)).get("source.stream_name") == "events"
    
    def test_env_overrides(self, monkeypatch):
        """Test environment variables win."""
        monkeypatch.setenv("LOGSOURCE_CHECKPOINT_DIR", "/tmp/cp")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        
        config = Config()
        
        assert config.get("source.checkpoint_dir") == "/tmp/cp"
        assert config.get("logging.level") == "DEBUG"
