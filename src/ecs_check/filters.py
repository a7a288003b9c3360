"""Predicate filters over an entity's current records.

Filters are pure: they read an `EntityRef` and never mutate anything.
They compose with `&`, `|` and `~`.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from .world import EntityRef


class Filter:
    def matches(self, entity: EntityRef) -> bool:
        raise NotImplementedError

    def __and__(self, other: Any) -> Filter:
        return And(self, as_filter(other))

    def __or__(self, other: Any) -> Filter:
        return Or(self, as_filter(other))

    def __invert__(self) -> Filter:
        return Not(self)


class With(Filter):
    """Matches entities that have every given record type."""

    def __init__(self, *record_types: type) -> None:
        if not record_types:
            raise ValueError("With requires at least one record type")
        self.record_types = record_types

    def matches(self, entity: EntityRef) -> bool:
        return all(entity.contains(t) for t in self.record_types)

    def __repr__(self) -> str:
        return f"With<{_names(self.record_types)}>"


class Without(Filter):
    """Matches entities that have none of the given record types."""

    def __init__(self, *record_types: type) -> None:
        if not record_types:
            raise ValueError("Without requires at least one record type")
        self.record_types = record_types

    def matches(self, entity: EntityRef) -> bool:
        return not any(entity.contains(t) for t in self.record_types)

    def __repr__(self) -> str:
        return f"Without<{_names(self.record_types)}>"


class And(Filter):
    def __init__(self, *filters: Filter) -> None:
        self.filters = filters

    def matches(self, entity: EntityRef) -> bool:
        return all(f.matches(entity) for f in self.filters)

    def __repr__(self) -> str:
        return "(" + ", ".join(repr(f) for f in self.filters) + ")"


class Or(Filter):
    def __init__(self, *filters: Filter) -> None:
        self.filters = filters

    def matches(self, entity: EntityRef) -> bool:
        return any(f.matches(entity) for f in self.filters)

    def __repr__(self) -> str:
        return "Or<(" + ", ".join(repr(f) for f in self.filters) + ")>"


class Not(Filter):
    def __init__(self, inner: Filter) -> None:
        self.inner = inner

    def matches(self, entity: EntityRef) -> bool:
        return not self.inner.matches(entity)

    def __repr__(self) -> str:
        return f"Not<{self.inner!r}>"


class Predicate(Filter):
    """Wraps a plain `fn(entity_ref) -> bool`.

    The function must not mutate the world.
    """

    def __init__(self, fn: Callable[[EntityRef], bool], name: str | None = None) -> None:
        self.fn = fn
        self.name = name or getattr(fn, "__name__", "predicate")

    def matches(self, entity: EntityRef) -> bool:
        return bool(self.fn(entity))

    def __repr__(self) -> str:
        return self.name


class All(Filter):
    """Matches every entity."""

    def matches(self, entity: EntityRef) -> bool:
        return True

    def __repr__(self) -> str:
        return "()"


def as_filter(value: Any) -> Filter:
    """Coerce a record type, tuple of filters or callable into a Filter."""
    if isinstance(value, Filter):
        return value
    if isinstance(value, type):
        return With(value)
    if isinstance(value, tuple):
        return And(*(as_filter(v) for v in value))
    if callable(value):
        return Predicate(value)
    raise TypeError(f"Cannot use {value!r} as a filter")


def _names(record_types: tuple[type, ...]) -> str:
    if len(record_types) == 1:
        return record_types[0].__name__
    return "(" + ", ".join(t.__name__ for t in record_types) + ")"
