"""In-memory entity/record store.

Entities are opaque identities. Each entity carries at most one record per
concrete type. A parent/child relation between entities defines what a
cascading removal takes with it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, order=True)
class Entity:
    """Stable identity of an entity within one World."""

    index: int

    def __repr__(self) -> str:
        return f"{self.index}v0"


class EntityRef:
    """Read-only view of one live entity."""

    def __init__(self, world: World, entity: Entity) -> None:
        self._world = world
        self._entity = entity

    def id(self) -> Entity:
        return self._entity

    def contains(self, record_type: type) -> bool:
        return record_type in self._world._records[self._entity]

    def get(self, record_type: type[T]) -> T | None:
        return self._world._records[self._entity].get(record_type)

    def __getitem__(self, record_type: type[T]) -> T:
        try:
            return self._world._records[self._entity][record_type]
        except KeyError:
            raise KeyError(
                f"{self._entity!r} has no {record_type.__name__} record"
            ) from None

    def record_types(self) -> frozenset[type]:
        return frozenset(self._world._records[self._entity])

    def __repr__(self) -> str:
        return f"EntityRef({self._entity!r})"


class EntityWorldMut(EntityRef):
    """Direct, immediately-visible mutable access to one live entity."""

    def insert(self, *records: Any) -> EntityWorldMut:
        self._world._insert(self._entity, records)
        return self

    def remove(self, *record_types: type) -> EntityWorldMut:
        self._world._remove(self._entity, record_types)
        return self

    def add_child(self, child: Entity) -> EntityWorldMut:
        self._world.set_parent(child, self._entity)
        return self

    def check_again(self) -> EntityWorldMut:
        """Clear Checked and Invalid so every check re-evaluates this entity."""
        from .markers import Checked, Invalid

        return self.remove(Checked, Invalid)

    def despawn(self) -> None:
        self._world.despawn(self._entity)

    def despawn_recursive(self) -> None:
        self._world.despawn_recursive(self._entity)


class World:
    """Owns every entity, its records and the hierarchy between entities."""

    def __init__(self) -> None:
        self._next_index = 0
        self._records: dict[Entity, dict[type, Any]] = {}
        self._parents: dict[Entity, Entity] = {}
        self._children: dict[Entity, list[Entity]] = {}

    def spawn(self, *records: Any) -> EntityWorldMut:
        entity = Entity(self._next_index)
        self._next_index += 1
        self._records[entity] = {}
        self._insert(entity, records)
        return EntityWorldMut(self, entity)

    def contains(self, entity: Entity) -> bool:
        return entity in self._records

    def entity(self, entity: Entity) -> EntityRef:
        if entity not in self._records:
            raise LookupError(f"Entity {entity!r} does not exist")
        return EntityRef(self, entity)

    def get_entity(self, entity: Entity) -> EntityRef | None:
        if entity not in self._records:
            return None
        return EntityRef(self, entity)

    def entity_mut(self, entity: Entity) -> EntityWorldMut:
        if entity not in self._records:
            raise LookupError(f"Entity {entity!r} does not exist")
        return EntityWorldMut(self, entity)

    def entities(self) -> list[Entity]:
        return sorted(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[EntityRef]:
        for entity in self.entities():
            yield EntityRef(self, entity)

    def query(self, *filters: Any, without: tuple[type, ...] = ()) -> list[Entity]:
        """Return live entities matching every filter and lacking `without`.

        Filters may be record types (entity must have that record) or
        `ecs_check.filters.Filter` objects. The result is a materialized list,
        so mutating the world while iterating it is safe.
        """
        from .filters import as_filter

        resolved = [as_filter(f) for f in filters]
        matches: list[Entity] = []
        for entity in self.entities():
            records = self._records[entity]
            if any(t in records for t in without):
                continue
            ref = EntityRef(self, entity)
            if all(f.matches(ref) for f in resolved):
                matches.append(entity)
        return matches

    def records(self, entity: Entity, *, persistent_only: bool = False) -> list[Any]:
        """Return the records attached to `entity`.

        With `persistent_only`, engine markers are left out: they are
        recomputed every run and never saved.
        """
        from .markers import EPHEMERAL_MARKERS

        if entity not in self._records:
            raise LookupError(f"Entity {entity!r} does not exist")
        values = list(self._records[entity].values())
        if persistent_only:
            values = [v for v in values if type(v) not in EPHEMERAL_MARKERS]
        return values

    # --- hierarchy ---

    def set_parent(self, child: Entity, parent: Entity) -> None:
        if child not in self._records or parent not in self._records:
            raise LookupError(f"Cannot parent {child!r} to {parent!r}: entity missing")
        if child == parent:
            raise ValueError(f"{child!r} cannot be its own parent")
        self._detach(child)
        self._parents[child] = parent
        self._children.setdefault(parent, []).append(child)

    def parent(self, entity: Entity) -> Entity | None:
        return self._parents.get(entity)

    def children(self, entity: Entity) -> list[Entity]:
        return list(self._children.get(entity, []))

    def descendants(self, entity: Entity) -> list[Entity]:
        result: list[Entity] = []
        stack = list(reversed(self.children(entity)))
        while stack:
            current = stack.pop()
            result.append(current)
            stack.extend(reversed(self.children(current)))
        return result

    # --- removal ---

    def despawn(self, entity: Entity) -> bool:
        """Remove one entity. Its children are orphaned, not removed."""
        if entity not in self._records:
            logger.warning("Cannot despawn %r: entity does not exist", entity)
            return False
        self._detach(entity)
        for child in self._children.pop(entity, []):
            self._parents.pop(child, None)
        del self._records[entity]
        return True

    def despawn_recursive(self, entity: Entity) -> bool:
        """Remove an entity together with all of its descendants."""
        if entity not in self._records:
            logger.warning("Cannot despawn %r recursively: entity does not exist", entity)
            return False
        for descendant in reversed(self.descendants(entity)):
            self.despawn(descendant)
        return self.despawn(entity)

    # --- internals ---

    def _detach(self, child: Entity) -> None:
        old_parent = self._parents.pop(child, None)
        if old_parent is not None:
            siblings = self._children.get(old_parent, [])
            if child in siblings:
                siblings.remove(child)
            if not siblings:
                self._children.pop(old_parent, None)

    def _insert(self, entity: Entity, records: tuple[Any, ...]) -> None:
        target = self._records[entity]
        for record in records:
            if isinstance(record, type):
                raise TypeError(
                    f"Insert record instances, not types (got {record.__name__})"
                )
            target[type(record)] = record

    def _remove(self, entity: Entity, record_types: tuple[type, ...]) -> None:
        target = self._records[entity]
        for record_type in record_types:
            target.pop(record_type, None)
