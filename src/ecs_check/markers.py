"""Checked/Invalid markers, the Valid view and the re-check trigger.

There is exactly one Checked marker per entity, shared by every check
registered for the entity's kind. It is not per-check state: the first check
to evaluate an unmarked entity in a cycle sets it, and clearing it makes every
check on that kind reconsider the entity.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .filters import With, Without
from .world import EntityRef, EntityWorldMut

if TYPE_CHECKING:
    from .commands import EntityCommands


class Checked:
    """The entity was evaluated since this marker was last cleared."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "Checked"


class Invalid:
    """The last evaluation matched a check with the Invalid policy."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "Invalid"


EPHEMERAL_MARKERS: frozenset[type] = frozenset({Checked, Invalid})

# Checked and not Invalid.
Valid = With(Checked) & Without(Invalid)


def is_valid(entity: EntityRef) -> bool:
    return Valid.matches(entity)


def check_again(handle: EntityCommands | EntityWorldMut) -> EntityCommands | EntityWorldMut:
    """Force every check bound to this entity's kind to evaluate it again.

    On an `EntityCommands` the removal is buffered until the next sync point,
    where it outlasts any Checked insert applied alongside it. On an
    `EntityWorldMut` it is immediate.
    """
    return handle.check_again()
