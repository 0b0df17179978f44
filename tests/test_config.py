"""
Configuration Test Suite

Coverage:
  - TOML loading, defaults for missing files, invalid TOML
  - Environment overrides
  - Validation and engine option derivation
"""

import os
import sys

import pytest

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from govindex.config import IndexerConfig, load_config
from govindex.constants import ConfigBool, ConfigString, parse_bool
from govindex.exceptions import ConfigurationError


ENV_VARS = (
    "GOVINDEX_CONFIG",
    "GOVINDEX_CHAIN_ID",
    "GOVINDEX_LOG_LEVEL",
    "GOVINDEX_STRICT_LIFECYCLE",
    "GOVINDEX_HALT_ON_ERROR",
    "GOVINDEX_EVENTS_PATH",
)

SAMPLE_TOML = """
[indexer]
name = "uniswap-governance"
chain_id = 10
governance_name = "UNI"

[engine]
strict_lifecycle = true
legacy_vote_delegate_reset = true
max_faults_retained = 50

[source]
path = "events/uni.jsonl"

[source.shards]
1 = "events/mainnet.jsonl"
10 = "events/optimism.jsonl"

[metrics]
enabled = true
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(SAMPLE_TOML, encoding="utf-8")
    return path


class TestLoadConfig:
    """File loading."""

    def test_load_sections(self, config_file):
        cfg = load_config(config_file)
        assert cfg.indexer.name == "uniswap-governance"
        assert cfg.indexer.chain_id == 10
        assert cfg.indexer.governance_name == "UNI"
        assert cfg.engine.strict_lifecycle is True
        assert cfg.engine.legacy_vote_delegate_reset is True
        assert cfg.engine.halt_on_error is False
        assert cfg.engine.max_faults_retained == 50
        assert cfg.source.path == "events/uni.jsonl"
        assert cfg.source.shards == {"1": "events/mainnet.jsonl", "10": "events/optimism.jsonl"}
        assert cfg.metrics.enabled is True
        assert cfg.validate() is True

    def test_missing_file_uses_defaults(self, tmp_path):
        cfg = load_config(tmp_path / "absent.toml")
        assert cfg.indexer.governance_name == "ENS"
        assert cfg.engine.strict_lifecycle is False
        assert cfg.source.shards == {}

    def test_config_path_from_env(self, config_file, monkeypatch):
        monkeypatch.setenv("GOVINDEX_CONFIG", str(config_file))
        assert load_config().indexer.chain_id == 10

    def test_invalid_toml(self, tmp_path):
        path = tmp_path / "broken.toml"
        path.write_text("[indexer\nname = ", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Invalid TOML"):
            load_config(path)

    def test_to_dict_round_trips_values(self, config_file):
        data = load_config(config_file).to_dict()
        assert data["indexer"]["governance_name"] == "UNI"
        assert data["engine"]["strict_lifecycle"] is True
        assert data["source"]["shards"]["10"] == "events/optimism.jsonl"


class TestEnvOverrides:
    """Environment variables beat TOML."""

    def test_overrides(self, config_file, monkeypatch):
        monkeypatch.setenv("GOVINDEX_CHAIN_ID", "5")
        monkeypatch.setenv("GOVINDEX_STRICT_LIFECYCLE", "false")
        monkeypatch.setenv("GOVINDEX_HALT_ON_ERROR", "yes")
        monkeypatch.setenv("GOVINDEX_LOG_LEVEL", "debug")
        monkeypatch.setenv("GOVINDEX_EVENTS_PATH", "/data/events.jsonl")
        cfg = load_config(config_file)
        assert cfg.indexer.chain_id == 5
        assert cfg.engine.strict_lifecycle is False
        assert cfg.engine.halt_on_error is True
        assert cfg.indexer.log_level == "DEBUG"
        assert cfg.source.path == "/data/events.jsonl"

    def test_invalid_chain_id_env(self, config_file, monkeypatch):
        monkeypatch.setenv("GOVINDEX_CHAIN_ID", "mainnet")
        with pytest.raises(ConfigurationError):
            load_config(config_file)


class TestValidation:
    """validate() and derived engine options."""

    @pytest.mark.parametrize("section,key,value", [
        ("indexer", "chain_id", 0),
        ("indexer", "log_level", "LOUD"),
        ("indexer", "governance_name", ""),
        ("engine", "max_faults_retained", 0),
    ])
    def test_invalid_values(self, section, key, value):
        cfg = IndexerConfig()
        setattr(getattr(cfg, section), key, value)
        with pytest.raises(ConfigurationError):
            cfg.validate()

    def test_invalid_shard_key(self):
        cfg = IndexerConfig.from_dict({"source": {"shards": {"mainnet": "a.jsonl"}}})
        with pytest.raises(ConfigurationError, match="Shard key"):
            cfg.validate()

    def test_engine_options(self, config_file):
        options = load_config(config_file).engine_options()
        assert options.strict_lifecycle is True
        assert options.legacy_vote_delegate_reset is True
        assert options.governance_name == "UNI"
        assert options.max_faults_retained == 50


class TestConstants:
    """dotenv wrappers."""

    def test_parse_bool(self):
        assert parse_bool(" TRUE ") is True
        assert parse_bool("false") is False
        assert parse_bool("INFO") == "INFO"

    def test_config_wrappers_keep_defaults(self):
        flag = ConfigBool(False, True)
        assert flag == False  # noqa: E712
        assert flag.default() is True
        assert str(flag) == "False"
        text = ConfigString("DEBUG", "INFO")
        assert text == "DEBUG"
        assert text.default() == "INFO"
