"""
govindex - Governance Event Aggregation Package

Core imports are lazily loaded so importing a submodule does not configure
the whole engine. For direct module access, import from submodules:

    from govindex.engine import AggregationEngine
    from govindex.events import read_events
    from govindex.config import load_config
"""

# Lazy imports to avoid loading everything at package import
def __getattr__(name):
    """Lazy module loading."""
    if name == 'AggregationEngine':
        from .engine import AggregationEngine
        return AggregationEngine
    elif name == 'ShardedIndexer':
        from .engine import ShardedIndexer
        return ShardedIndexer
    elif name == 'load_config':
        from .config import load_config
        return load_config
    elif name == 'main':
        from .cli import main
        return main
    raise AttributeError(f"module 'govindex' has no attribute {name!r}")

__all__ = ['AggregationEngine', 'ShardedIndexer', 'load_config', 'main']
