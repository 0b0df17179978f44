"""
Entity Store Contract

The engine talks to persistence through this small interface:

    load(type, id)   -> entity or None
    create(type, id) -> new entity with default field values (not saved)
    save(entity)
    lookup(type, id) -> Lookup(entity, found)
    get_or_create(type, id) -> Lookup(entity, found)
    transaction()    -> context manager scoping one event's writes

`lookup` and `get_or_create` surface absence explicitly so every transition
decides whether a missing entity is expected (lazy materialization) or an
integrity fault.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ContextManager, Generic, Iterator, Optional, Protocol, Type, TypeVar

E = TypeVar("E")


@dataclass(frozen=True)
class Lookup(Generic[E]):
    """Result of a store lookup: the entity (if any) and whether it pre-existed."""
    entity: Optional[E]
    found: bool

    @property
    def absent(self) -> bool:
        return not self.found


class EntityStore(Protocol):
    """Protocol that entity stores must implement."""

    def load(self, entity_cls: Type[E], entity_id: str) -> Optional[E]: ...
    def create(self, entity_cls: Type[E], entity_id: str) -> E: ...
    def save(self, entity: Any) -> None: ...
    def lookup(self, entity_cls: Type[E], entity_id: str) -> Lookup[E]: ...
    def get_or_create(self, entity_cls: Type[E], entity_id: str) -> Lookup[E]: ...
    def exists(self, entity_cls: type, entity_id: str) -> bool: ...
    def all(self, entity_cls: Type[E]) -> Iterator[E]: ...
    def transaction(self) -> ContextManager[None]: ...
