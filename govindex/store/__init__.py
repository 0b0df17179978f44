"""
Entity persistence

Provides:
  - EntityStore / Lookup     : store contract and explicit found/absent result (base.py)
  - InMemoryEntityStore      : reference store with per-event transactions (memory.py)
"""

from .base import EntityStore, Lookup
from .memory import InMemoryEntityStore

__all__ = [
    "EntityStore",
    "InMemoryEntityStore",
    "Lookup",
]
