"""
In-Memory Entity Store

Reference implementation of the EntityStore contract.

Entities are copied on load and on save, so a transition only changes
persisted state through `save()`. Inside `transaction()` the first write to
each key journals the previous value; leaving the scope with an exception
restores every journaled key, so an event is applied completely or not at all.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple, Type, TypeVar

from ..entities import ENTITY_TYPES
from ..exceptions import EntityNotFoundError, StoreError, TransactionError
from ..logger import get_logger
from .base import Lookup

logger = get_logger(__name__)

E = TypeVar("E")

_MISSING = object()


class InMemoryEntityStore:
    """
    Dict-backed store keyed by (entity type, id).

    Usage:

        store = InMemoryEntityStore()
        with store.transaction():
            holder = store.get_or_create(TokenHolder, "0xabc").entity
            holder.token_balance_raw += 10
            store.save(holder)
    """

    def __init__(self) -> None:
        self._tables: Dict[str, Dict[str, Any]] = {name: {} for name in ENTITY_TYPES}
        # RLock so reads inside a transaction on the owning thread do not block
        self._lock = threading.RLock()
        self._journal: Optional[Dict[Tuple[str, str], Any]] = None
        self._writes: int = 0

    # =====================================================================
    #  Contract
    # =====================================================================

    def load(self, entity_cls: Type[E], entity_id: str) -> Optional[E]:
        with self._lock:
            entity = self._table(entity_cls).get(entity_id)
            return entity.copy() if entity is not None else None

    def create(self, entity_cls: Type[E], entity_id: str) -> E:
        return entity_cls(id=entity_id)

    def save(self, entity: Any) -> None:
        table_name = type(entity).entity_type
        with self._lock:
            table = self._tables.get(table_name)
            if table is None:
                raise StoreError(f"Unknown entity type: {table_name}")
            if self._journal is not None:
                key = (table_name, entity.id)
                if key not in self._journal:
                    self._journal[key] = table.get(entity.id, _MISSING)
            table[entity.id] = entity.copy()
            self._writes += 1

    def lookup(self, entity_cls: Type[E], entity_id: str) -> Lookup[E]:
        entity = self.load(entity_cls, entity_id)
        return Lookup(entity=entity, found=entity is not None)

    def get_or_create(self, entity_cls: Type[E], entity_id: str) -> Lookup[E]:
        entity = self.load(entity_cls, entity_id)
        if entity is not None:
            return Lookup(entity=entity, found=True)
        return Lookup(entity=self.create(entity_cls, entity_id), found=False)

    def require(self, entity_cls: Type[E], entity_id: str) -> E:
        """Load an entity that must exist (query helpers, tests)."""
        entity = self.load(entity_cls, entity_id)
        if entity is None:
            raise EntityNotFoundError(f"{entity_cls.entity_type} {entity_id!r} not found")
        return entity

    def exists(self, entity_cls: type, entity_id: str) -> bool:
        with self._lock:
            return entity_id in self._table(entity_cls)

    def all(self, entity_cls: Type[E]) -> Iterator[E]:
        with self._lock:
            entities = [e.copy() for e in self._table(entity_cls).values()]
        return iter(entities)

    def count(self, entity_cls: type) -> int:
        with self._lock:
            return len(self._table(entity_cls))

    # =====================================================================
    #  Transaction scope
    # =====================================================================

    @contextmanager
    def transaction(self):
        """
        Scope the writes of a single event.

        Holds the store lock for the whole scope so concurrent readers never
        observe a half-applied event. Nested transactions are rejected.
        """
        with self._lock:
            if self._journal is not None:
                raise TransactionError("Transaction already open")
            self._journal = {}
            try:
                yield
            except BaseException:
                self._rollback(self._journal)
                raise
            finally:
                self._journal = None

    @property
    def in_transaction(self) -> bool:
        return self._journal is not None

    def _rollback(self, journal: Dict[Tuple[str, str], Any]) -> None:
        for (table_name, entity_id), previous in journal.items():
            table = self._tables[table_name]
            if previous is _MISSING:
                table.pop(entity_id, None)
            else:
                table[entity_id] = previous
        if journal:
            logger.debug("Rolled back %d entity writes", len(journal))

    # =====================================================================
    #  Queries / export
    # =====================================================================

    @property
    def write_count(self) -> int:
        return self._writes

    def snapshot(self) -> Dict[str, List[Dict[str, Any]]]:
        """Serialize every entity, sorted by id, grouped by type."""
        with self._lock:
            return {
                name: [table[key].to_dict() for key in sorted(table)]
                for name, table in self._tables.items()
            }

    def _table(self, entity_cls: type) -> Dict[str, Any]:
        table = self._tables.get(getattr(entity_cls, "entity_type", ""))
        if table is None:
            raise StoreError(f"Unknown entity type: {entity_cls!r}")
        return table
