"""
govindex Configuration

Loads all sections of config.toml at startup.
Environment variables override TOML values.
"""

from .loader import (
    IndexerConfig,
    IndexerSectionConfig,
    EngineSectionConfig,
    SourceSectionConfig,
    MetricsConfig,
    load_config,
)

__all__ = [
    "IndexerConfig",
    "IndexerSectionConfig",
    "EngineSectionConfig",
    "SourceSectionConfig",
    "MetricsConfig",
    "load_config",
]
