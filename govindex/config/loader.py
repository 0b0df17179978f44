"""
govindex TOML Configuration Loader

Loads every section of config.toml with environment variable overrides.
Each [section] is a dataclass with ``from_dict``; the top-level
``IndexerConfig`` adds ``from_file``, ``apply_env``, ``validate`` and
``to_dict``.

Environment variable mapping:
    [indexer] chain_id         → GOVINDEX_CHAIN_ID
    [indexer] log_level        → GOVINDEX_LOG_LEVEL
    [engine] strict_lifecycle  → GOVINDEX_STRICT_LIFECYCLE
    [engine] halt_on_error     → GOVINDEX_HALT_ON_ERROR
    [source] path              → GOVINDEX_EVENTS_PATH
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .. import constants
from ..constants import GOVERNANCE_NAME, MAX_FAULTS_RETAINED
from ..engine.context import EngineOptions
from ..exceptions import ConfigurationError
from ..logger import get_logger

logger = get_logger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


# ---------------------------------------------------------------------------
# Section dataclasses
# ---------------------------------------------------------------------------


@dataclass
class IndexerSectionConfig:
    """[indexer] section."""
    name: str = str(constants.GOVINDEX_NAME)
    chain_id: int = int(constants.GOVINDEX_CHAIN_ID)
    governance_name: str = GOVERNANCE_NAME
    log_level: str = str(constants.LOG_LEVEL)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IndexerSectionConfig":
        defaults = cls()
        return cls(
            name=data.get("name", defaults.name),
            chain_id=data.get("chain_id", defaults.chain_id),
            governance_name=data.get("governance_name", defaults.governance_name),
            log_level=data.get("log_level", defaults.log_level),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("GOVINDEX_CHAIN_ID"):
            try:
                self.chain_id = int(v)
            except ValueError as e:
                raise ConfigurationError(f"GOVINDEX_CHAIN_ID must be an integer, got {v!r}") from e
        if v := os.environ.get("GOVINDEX_LOG_LEVEL"):
            self.log_level = v.upper()


@dataclass
class EngineSectionConfig:
    """[engine] section."""
    strict_lifecycle: bool = False
    legacy_vote_delegate_reset: bool = False
    halt_on_error: bool = False
    max_faults_retained: int = MAX_FAULTS_RETAINED

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineSectionConfig":
        return cls(
            strict_lifecycle=data.get("strict_lifecycle", False),
            legacy_vote_delegate_reset=data.get("legacy_vote_delegate_reset", False),
            halt_on_error=data.get("halt_on_error", False),
            max_faults_retained=data.get("max_faults_retained", MAX_FAULTS_RETAINED),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("GOVINDEX_STRICT_LIFECYCLE"):
            self.strict_lifecycle = _env_flag(v)
        if v := os.environ.get("GOVINDEX_HALT_ON_ERROR"):
            self.halt_on_error = _env_flag(v)


@dataclass
class SourceSectionConfig:
    """
    [source] section.

    ``shards`` maps a shard key (chain id) to the event log of that chain:

        [source.shards]
        1 = "data/mainnet.jsonl"
        10 = "data/optimism.jsonl"
    """
    path: str = str(constants.GOVINDEX_EVENTS_PATH)
    shards: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SourceSectionConfig":
        return cls(
            path=data.get("path", str(constants.GOVINDEX_EVENTS_PATH)),
            shards={str(k): str(v) for k, v in data.get("shards", {}).items()},
        )

    def apply_env(self) -> None:
        if v := os.environ.get("GOVINDEX_EVENTS_PATH"):
            self.path = v


@dataclass
class MetricsConfig:
    """[metrics] section."""
    enabled: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MetricsConfig":
        return cls(enabled=data.get("enabled", False))


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------

@dataclass
class IndexerConfig:
    """
    Unified indexer configuration.

    Loads every section of config.toml and applies environment variable
    overrides. This is the single source of truth at runtime.
    """
    indexer: IndexerSectionConfig = field(default_factory=IndexerSectionConfig)
    engine: EngineSectionConfig = field(default_factory=EngineSectionConfig)
    source: SourceSectionConfig = field(default_factory=SourceSectionConfig)
    metrics: MetricsConfig = field(default_factory=MetricsConfig)

    # --- factories --------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IndexerConfig":
        """Create IndexerConfig from a parsed TOML dict."""
        return cls(
            indexer=IndexerSectionConfig.from_dict(data.get("indexer", {})),
            engine=EngineSectionConfig.from_dict(data.get("engine", {})),
            source=SourceSectionConfig.from_dict(data.get("source", {})),
            metrics=MetricsConfig.from_dict(data.get("metrics", {})),
        )

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "IndexerConfig":
        """
        Load configuration from a TOML file.

        A missing file yields the defaults (with env overrides applied).

        Raises:
            ConfigurationError: the file is not valid TOML
        """
        path = Path(config_path)
        if not path.exists():
            logger.warning("Config file not found: %s, using defaults", config_path)
            cfg = cls()
            cfg.apply_env()
            return cfg

        try:
            with open(path, "rb") as f:
                raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML in {config_path}: {e}") from e

        cfg = cls.from_dict(raw)
        cfg.apply_env()
        logger.debug("Loaded configuration from %s", path)
        return cfg

    # --- env overrides ----------------------------------------------------

    def apply_env(self) -> None:
        """Apply environment variable overrides to all sections."""
        self.indexer.apply_env()
        self.engine.apply_env()
        self.source.apply_env()

    # --- validation -------------------------------------------------------

    def validate(self) -> bool:
        """
        Validate all configuration sections.

        Raises:
            ConfigurationError: on invalid config
        """
        if not isinstance(self.indexer.chain_id, int) or self.indexer.chain_id < 1:
            raise ConfigurationError("chain_id must be >= 1")
        if self.indexer.log_level not in _LOG_LEVELS:
            raise ConfigurationError(f"Invalid log_level: {self.indexer.log_level}")
        if not self.indexer.governance_name:
            raise ConfigurationError("governance_name must not be empty")
        if self.engine.max_faults_retained < 1:
            raise ConfigurationError("max_faults_retained must be >= 1")
        for key in self.source.shards:
            if not key.isdigit():
                raise ConfigurationError(f"Shard key must be a chain id, got {key!r}")
        return True

    def engine_options(self) -> EngineOptions:
        """Engine switches derived from [engine] and [indexer]."""
        return EngineOptions(
            strict_lifecycle=self.engine.strict_lifecycle,
            legacy_vote_delegate_reset=self.engine.legacy_vote_delegate_reset,
            halt_on_error=self.engine.halt_on_error,
            governance_name=self.indexer.governance_name,
            max_faults_retained=self.engine.max_faults_retained,
        )

    # --- serialisation ----------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict (for diagnostics, NOT for re-creating TOML)."""
        return {
            "indexer": {
                "name": self.indexer.name,
                "chain_id": self.indexer.chain_id,
                "governance_name": self.indexer.governance_name,
                "log_level": self.indexer.log_level,
            },
            "engine": {
                "strict_lifecycle": self.engine.strict_lifecycle,
                "legacy_vote_delegate_reset": self.engine.legacy_vote_delegate_reset,
                "halt_on_error": self.engine.halt_on_error,
                "max_faults_retained": self.engine.max_faults_retained,
            },
            "source": {
                "path": self.source.path,
                "shards": dict(self.source.shards),
            },
            "metrics": {
                "enabled": self.metrics.enabled,
            },
        }


# -----------------------------------------------------------------------
# Convenience function
# -----------------------------------------------------------------------

def load_config(path: Optional[Union[str, Path]] = None) -> IndexerConfig:
    """
    Load indexer configuration.

    Resolution order:
        1. Explicit *path* argument
        2. GOVINDEX_CONFIG env var
        3. ./config.toml in current directory
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get("GOVINDEX_CONFIG", "config.toml")

    return IndexerConfig.from_file(path)
