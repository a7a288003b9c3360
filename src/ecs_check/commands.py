"""Deferred mutation buffer.

`Commands` is an explicit queue of pending operations keyed by entity. Nothing
queued is visible until `apply()` runs at a sync point; operations then run in
the order they were queued.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .world import Entity, World

logger = logging.getLogger(__name__)

INSERT = "insert"
REMOVE = "remove"
DESPAWN = "despawn"
DESPAWN_RECURSIVE = "despawn_recursive"
RECHECK = "recheck"


@dataclass(frozen=True)
class Command:
    op: str
    entity: Entity
    args: tuple[Any, ...] = ()


class Commands:
    def __init__(self, world: World) -> None:
        self._world = world
        self._queue: list[Command] = []

    def entity(self, entity: Entity) -> EntityCommands:
        if not self._world.contains(entity):
            raise LookupError(f"Entity {entity!r} does not exist")
        return EntityCommands(self, entity)

    def get_entity(self, entity: Entity) -> EntityCommands | None:
        if not self._world.contains(entity):
            return None
        return EntityCommands(self, entity)

    def push(self, command: Command) -> None:
        self._queue.append(command)

    def pending(self) -> list[Command]:
        return list(self._queue)

    def __len__(self) -> int:
        return len(self._queue)

    def apply(self) -> int:
        """Apply queued operations in order and empty the queue.

        Operations whose entity no longer exists (e.g. despawned by an earlier
        command) are skipped. Returns the number of operations applied.
        """
        queue, self._queue = self._queue, []
        applied = 0
        for command in queue:
            if not self._world.contains(command.entity):
                logger.warning(
                    "Skipping %s on %r: entity does not exist",
                    command.op,
                    command.entity,
                )
                continue
            if command.op == INSERT:
                self._world._insert(command.entity, command.args)
            elif command.op == REMOVE:
                self._world._remove(command.entity, command.args)
            elif command.op == DESPAWN:
                self._world.despawn(command.entity)
            elif command.op == DESPAWN_RECURSIVE:
                self._world.despawn_recursive(command.entity)
            elif command.op == RECHECK:
                _clear_markers(self._world, command.entity)
            else:
                raise ValueError(f"Unknown command op: {command.op!r}")
            applied += 1
        return applied


class EntityCommands:
    """Buffered operations on one entity. Every method returns self for chaining."""

    def __init__(self, commands: Commands, entity: Entity) -> None:
        self._commands = commands
        self._entity = entity

    def id(self) -> Entity:
        return self._entity

    def insert(self, *records: Any) -> EntityCommands:
        for record in records:
            if isinstance(record, type):
                raise TypeError(
                    f"Insert record instances, not types (got {record.__name__})"
                )
        self._commands.push(Command(INSERT, self._entity, records))
        return self

    def remove(self, *record_types: type) -> EntityCommands:
        self._commands.push(Command(REMOVE, self._entity, record_types))
        return self

    def check_again(self) -> EntityCommands:
        """Clear Checked and Invalid at the next sync point.

        The clear outlasts any Checked insert applied at the same sync point,
        whichever buffer that insert came from.
        """
        self._commands.push(Command(RECHECK, self._entity))
        return self

    def despawn(self) -> None:
        self._commands.push(Command(DESPAWN, self._entity))

    def despawn_recursive(self) -> None:
        self._commands.push(Command(DESPAWN_RECURSIVE, self._entity))


def rechecked_entities(buffers: list[Commands]) -> list[Entity]:
    """Entities with a pending re-check in any of `buffers`, in queue order."""
    entities: list[Entity] = []
    for commands in buffers:
        for command in commands.pending():
            if command.op == RECHECK and command.entity not in entities:
                entities.append(command.entity)
    return entities


def replay_rechecks(world: World, entities: list[Entity]) -> None:
    """Clear markers again after a sync so no same-sync insert survives a re-check."""
    for entity in entities:
        if world.contains(entity):
            _clear_markers(world, entity)


def _clear_markers(world: World, entity: Entity) -> None:
    from .markers import Checked, Invalid

    world._remove(entity, (Checked, Invalid))
