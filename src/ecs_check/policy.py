"""Resolution policies applied when a check's filter matches.

A `Policy` is a tagged value: its `kind` is one of INVALID, PURGE, PANIC or
REPAIR, and only REPAIR carries a `Fixer`.
"""

from __future__ import annotations

import copy
import enum
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from .commands import Commands
from .world import EntityRef

T = TypeVar("T")
U = TypeVar("U")

FixFn = Callable[[EntityRef, Commands], None]


class PolicyKind(enum.Enum):
    INVALID = "invalid"
    PURGE = "purge"
    PANIC = "panic"
    REPAIR = "repair"


@dataclass(frozen=True)
class Fixer:
    """Repair action for a matched entity.

    Receives a read-only view of the entity and the check's mutation buffer.
    Anything it queues becomes visible at the next sync point.
    """

    fn: FixFn
    name: str = ""

    def __call__(self, entity: EntityRef, commands: Commands) -> None:
        self.fn(entity, commands)

    def __repr__(self) -> str:
        return f"Fixer({self.name or getattr(self.fn, '__name__', 'fn')})"


@dataclass(frozen=True)
class Policy:
    kind: PolicyKind
    fixer: Fixer | None = None

    def __post_init__(self) -> None:
        if (self.kind is PolicyKind.REPAIR) != (self.fixer is not None):
            raise ValueError("Only the repair policy carries a fixer")

    def __repr__(self) -> str:
        if self.fixer is not None:
            return f"Repair({self.fixer!r})"
        return self.kind.name.capitalize()


def invalid() -> Policy:
    """Mark matching instances as Checked + Invalid.

    Pair with the `Valid` filter so downstream code can skip them.
    """
    return Policy(PolicyKind.INVALID)


def purge() -> Policy:
    """Remove matching instances together with all of their descendants."""
    return Policy(PolicyKind.PURGE)


def panic() -> Policy:
    """Abort the process on the first matching instance.

    Meant for development. Prefer `invalid` or `purge` in production.
    """
    return Policy(PolicyKind.PANIC)


def repair(fn: FixFn | Fixer, name: str = "") -> Policy:
    """Try to repair matching instances with `fn(entity_ref, commands)`.

    Useful for backwards compatibility when loading old saved data. The
    engine marks the entity Checked before calling `fn`, so a fixer that
    calls `check_again()` gets its entity re-evaluated next cycle. Guarding
    against endless repair loops is up to the fixer.
    """
    fixer = fn if isinstance(fn, Fixer) else Fixer(fn, name)
    return Policy(PolicyKind.REPAIR, fixer)


def repair_insert(record: Any) -> Policy:
    def fix(entity: EntityRef, commands: Commands) -> None:
        commands.entity(entity.id()).insert(copy.copy(record))

    return repair(fix, f"insert {type(record).__name__}")


def repair_insert_default(record_type: type) -> Policy:
    def fix(entity: EntityRef, commands: Commands) -> None:
        commands.entity(entity.id()).insert(record_type())

    return repair(fix, f"insert default {record_type.__name__}")


def repair_replace(old_type: type, record: Any) -> Policy:
    def fix(entity: EntityRef, commands: Commands) -> None:
        commands.entity(entity.id()).remove(old_type).insert(copy.copy(record))

    return repair(fix, f"replace {old_type.__name__} with {type(record).__name__}")


def repair_replace_default(old_type: type, new_type: type) -> Policy:
    def fix(entity: EntityRef, commands: Commands) -> None:
        commands.entity(entity.id()).remove(old_type).insert(new_type())

    return repair(fix, f"replace {old_type.__name__} with default {new_type.__name__}")


def repair_replace_with(old_type: type[T], fn: Callable[[T], U]) -> Policy:
    """Replace the `old_type` record with `fn(old_record)`.

    The entity must have an `old_type` record; a missing one raises
    `KeyError` out of the cycle.
    """

    def fix(entity: EntityRef, commands: Commands) -> None:
        current = entity[old_type]
        commands.entity(entity.id()).remove(old_type).insert(fn(current))

    return repair(fix, f"replace {old_type.__name__} via {getattr(fn, '__name__', 'fn')}")


def repair_remove(record_type: type) -> Policy:
    def fix(entity: EntityRef, commands: Commands) -> None:
        commands.entity(entity.id()).remove(record_type)

    return repair(fix, f"remove {record_type.__name__}")
