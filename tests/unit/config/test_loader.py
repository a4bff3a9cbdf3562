"""Tests for config loading with JSON and YAML support."""

import json
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

import sophy.core.config.loader as config_loader
from sophy.core.config import LocalAdapterConfig, SophyConfig


@pytest.fixture
def sample_config_data(tmp_path: Path):
    """Sample configuration data for testing."""
    return {
        "adapter": {
            "root": str(tmp_path / "storage"),
            "chunk_size": 1024,
            "atomic_prepend": False,
        },
        "logging": {"level": "DEBUG", "format": "%(message)s"},
    }


def test_detect_format_json():
    """Test format detection for JSON files."""
    assert config_loader.detect_format("sophy.json") == "json"
    assert config_loader.detect_format(Path("sophy.JSON")) == "json"


def test_detect_format_yaml():
    """Test format detection for YAML files."""
    assert config_loader.detect_format("sophy.yaml") == "yaml"
    assert config_loader.detect_format(Path("sophy.yml")) == "yaml"


def test_detect_format_invalid():
    """Test format detection for invalid extensions."""
    with pytest.raises(ValueError) as exc_info:
        config_loader.detect_format("sophy.toml")

    assert "Unsupported config format" in str(exc_info.value)


def test_load_config_json(tmp_path, sample_config_data):
    """Test loading JSON config."""
    config_file = tmp_path / "sophy.json"
    config_file.write_text(json.dumps(sample_config_data))

    config = config_loader.load_config(config_file)

    assert config == sample_config_data


def test_load_config_yaml(tmp_path, sample_config_data):
    """Test loading YAML config."""
    config_file = tmp_path / "sophy.yaml"
    config_file.write_text(yaml.safe_dump(sample_config_data))

    config = config_loader.load_config(config_file)

    assert config["adapter"]["chunk_size"] == 1024
    assert config["logging"]["level"] == "DEBUG"


def test_load_config_empty_yaml(tmp_path):
    """Test an empty YAML file loads as an empty mapping."""
    config_file = tmp_path / "sophy.yml"
    config_file.write_text("")

    assert config_loader.load_config(config_file) == {}


def test_load_config_missing_file(tmp_path):
    """Test loading nonexistent file raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        config_loader.load_config(tmp_path / "missing.yaml")


def test_load_config_invalid_json(tmp_path):
    """Test invalid JSON raises ValueError."""
    config_file = tmp_path / "sophy.json"
    config_file.write_text("{not json")

    with pytest.raises(ValueError, match="Invalid JSON"):
        config_loader.load_config(config_file)


def test_load_config_invalid_yaml(tmp_path):
    """Test invalid YAML raises ValueError."""
    config_file = tmp_path / "sophy.yaml"
    config_file.write_text("adapter: [unclosed")

    with pytest.raises(ValueError, match="Invalid YAML"):
        config_loader.load_config(config_file)


def test_load_config_non_mapping(tmp_path):
    """Test a list at the document root is rejected."""
    config_file = tmp_path / "sophy.yaml"
    config_file.write_text("- a\n- b\n")

    with pytest.raises(ValueError, match="mapping"):
        config_loader.load_config(config_file)


def test_load_sophy_config(tmp_path, sample_config_data):
    """Test loading and validating a full config."""
    config_file = tmp_path / "sophy.yaml"
    config_file.write_text(yaml.safe_dump(sample_config_data))

    config = config_loader.load_sophy_config(config_file)

    assert isinstance(config, SophyConfig)
    assert config.adapter is not None
    assert config.adapter.root == tmp_path / "storage"
    assert config.adapter.chunk_size == 1024
    assert config.adapter.atomic_prepend is False
    assert config.adapter.encoding == "utf-8"
    assert config.logging.level == "DEBUG"


def test_load_sophy_config_missing_default(tmp_path, monkeypatch):
    """Test a missing default file yields all defaults."""
    monkeypatch.chdir(tmp_path)

    config = config_loader.load_sophy_config()

    assert config.adapter is None
    assert config.logging.level == "INFO"


def test_load_sophy_config_explicit_missing_raises(tmp_path):
    """Test an explicit path must exist."""
    with pytest.raises(FileNotFoundError):
        config_loader.load_sophy_config(tmp_path / "absent.yaml")


def test_unknown_top_level_keys_ignored():
    """Test forward compatibility of the application config."""
    config = SophyConfig.model_validate({"future_option": True})
    assert config.adapter is None


def test_adapter_config_rejects_unknown_keys(tmp_path):
    """Test typos in the adapter section are caught."""
    with pytest.raises(ValidationError):
        LocalAdapterConfig.model_validate({"root": str(tmp_path), "chunk_sise": 10})


def test_adapter_config_rejects_non_positive_chunk_size(tmp_path):
    """Test chunk_size must be positive."""
    with pytest.raises(ValidationError):
        LocalAdapterConfig(root=tmp_path, chunk_size=0)


def test_logging_level_validated():
    """Test unknown log levels are rejected."""
    with pytest.raises(ValidationError):
        SophyConfig.model_validate({"logging": {"level": "VERBOSE"}})
