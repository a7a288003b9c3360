"""Host runtime: a World plus a phased, cycle-by-cycle schedule.

Each `update()` is one cycle:

1. LOAD systems run (e.g. spawning entities from saved data), then sync.
2. CHECK systems run. Every registered check scans the world as it was when
   the phase began; their buffers are applied together only after the last
   check returns.
3. UPDATE systems run, then sync.

A sync point applies queued `Commands` in the order the systems ran, then
clears the markers of every entity re-checked in those buffers again, so a
re-check is never undone by a Checked insert from a sibling buffer.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from .commands import Commands, rechecked_entities, replay_rechecks
from .config import Config
from .logging import setup_logging
from .metrics import CheckMetrics
from .world import World

if TYPE_CHECKING:
    from .check import CheckRegistration
    from .policy import Policy

logger = logging.getLogger(__name__)

# System signature: def system(world: World, commands: Commands) -> None
SystemFn = Callable[[World, Commands], None]


class Phase(enum.Enum):
    LOAD = "load"
    CHECK = "check"
    UPDATE = "update"


class App:
    def __init__(self, config: Config | None = None) -> None:
        self.config = config or Config()
        self.world = World()
        self.metrics = CheckMetrics(enabled=self.config.metrics_enabled)
        self._systems: dict[Phase, list[SystemFn]] = {phase: [] for phase in Phase}
        self._checks: list[CheckRegistration] = []

    @classmethod
    def from_env(cls) -> App:
        """Build an app from ECS_CHECK_* env vars and set up logging."""
        config = Config.from_env()
        setup_logging(config.log_format, config.log_level)
        return cls(config)

    def add_systems(self, phase: Phase, *systems: SystemFn) -> App:
        if phase is Phase.CHECK:
            raise ValueError("Use App.check() to add systems to the check phase")
        self._systems[phase].extend(systems)
        return self

    def check(self, kind: Any, filter: Any, policy: Policy) -> App:
        """Add a recurring check. See `ecs_check.check.register`."""
        from .check import register

        return register(self, kind, filter, policy)

    def add_check(self, registration: CheckRegistration) -> None:
        self._checks.append(registration)

    def registered_checks(self) -> list[CheckRegistration]:
        return list(self._checks)

    def update(self) -> None:
        """Run one full cycle."""
        self._run_phase(Phase.LOAD)
        self._run_checks()
        self._run_phase(Phase.UPDATE)
        self.metrics.record_cycle()

    def _run_phase(self, phase: Phase) -> None:
        buffers: list[Commands] = []
        for system in self._systems[phase]:
            commands = Commands(self.world)
            system(self.world, commands)
            buffers.append(commands)
        self._sync(buffers)

    def _run_checks(self) -> None:
        # No buffer is applied until every check has scanned the same state.
        buffers: list[Commands] = []
        for registration in self._checks:
            commands = Commands(self.world)
            registration.run(self.world, commands, self.metrics)
            buffers.append(commands)
        self._sync(buffers)

    def _sync(self, buffers: list[Commands]) -> None:
        rechecked = rechecked_entities(buffers)
        applied = 0
        for commands in buffers:
            applied += commands.apply()
        replay_rechecks(self.world, rechecked)
        if applied:
            logger.debug("Applied %d buffered operations", applied)
