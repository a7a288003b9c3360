"""Entity kinds: what an entity *is*, as opposed to what may be wrong with it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .filters import Filter, With
from .world import Entity


@dataclass(frozen=True)
class Kind:
    """A named set of entities, selected by a filter.

    Any record type is a kind: `Kind.of(Apple)` selects every entity with an
    `Apple` record.
    """

    name: str
    filter: Filter

    @classmethod
    def of(cls, value: Any) -> Kind:
        if isinstance(value, Kind):
            return value
        if isinstance(value, type):
            return cls(value.__name__, With(value))
        raise TypeError(f"Expected a record type or Kind, got {value!r}")

    def __repr__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Instance:
    """An entity known to be of a given kind."""

    kind: Kind
    entity: Entity

    def __repr__(self) -> str:
        return f"{self.kind.name}({self.entity!r})"
