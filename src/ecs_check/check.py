"""Check registration and per-cycle evaluation.

A check binds a kind, a filter and a policy. Every cycle it looks at each
instance of the kind that is not yet Checked. If the filter does not match,
the instance is marked Checked. If it matches, the policy decides what happens.

All checks of a cycle read the same pre-cycle state: each one writes only to
its own `Commands`, and the app applies those buffers after the last check
has finished scanning.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .commands import Commands
from .filters import Filter, as_filter
from .kind import Instance, Kind
from .markers import Checked, Invalid
from .policy import Policy, PolicyKind
from .world import World

if TYPE_CHECKING:
    from .app import App
    from .metrics import CheckMetrics

logger = logging.getLogger(__name__)


class CheckPanic(SystemExit):
    """Raised by the panic policy. Terminates the process when uncaught.

    Derives from SystemExit, not Exception, so generic error handlers do not
    swallow it.
    """

    def __init__(self, message: str, *, check_name: str, instance: Instance) -> None:
        super().__init__(message)
        self.message = message
        self.check_name = check_name
        self.instance = instance

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class CheckRegistration:
    kind: Kind
    filter: Filter
    policy: Policy

    @property
    def name(self) -> str:
        return f"{self.kind.name}/{self.filter!r}"

    def run(self, world: World, commands: Commands, metrics: CheckMetrics | None = None) -> None:
        """Evaluate every unchecked instance of this check's kind once.

        Mutations go to `commands` and are not applied here.
        """
        for entity in world.query(self.kind.filter, without=(Checked,)):
            instance = Instance(self.kind, entity)
            entity_ref = world.entity(entity)
            extra = {
                "check_name": self.name,
                "check_entity": repr(instance),
                "check_policy": self.policy.kind.value,
            }

            if not self.filter.matches(entity_ref):
                commands.entity(entity).insert(Checked())
                logger.debug("%r is valid.", instance, extra=extra)
                _record(metrics, self.name, "valid")
                continue

            kind = self.policy.kind
            if kind is PolicyKind.INVALID:
                commands.entity(entity).insert(Checked(), Invalid())
                logger.error("%r is invalid: %r", instance, self.filter, extra=extra)
                _record(metrics, self.name, "invalid")
            elif kind is PolicyKind.PURGE:
                commands.entity(entity).despawn_recursive()
                logger.error("%r is purged: %r", instance, self.filter, extra=extra)
                _record(metrics, self.name, "purged")
            elif kind is PolicyKind.PANIC:
                message = f"{instance!r} is strictly invalid: {self.filter!r}"
                logger.critical("%s", message, extra=extra)
                _record(metrics, self.name, "panicked")
                raise CheckPanic(message, check_name=self.name, instance=instance)
            elif kind is PolicyKind.REPAIR:
                # Checked goes in first so a fixer's check_again() wins.
                commands.entity(entity).insert(Checked())
                self.policy.fixer(entity_ref, commands)
                logger.warning("%r was repaired: %r", instance, self.filter, extra=extra)
                _record(metrics, self.name, "repaired")
            else:
                raise ValueError(f"Unknown policy kind: {kind!r}")


def register(app: App, kind: Any, filter: Any, policy: Policy) -> App:
    """Add a recurring check to `app` and return `app` for chaining.

    All new instances of `kind` are tested against `filter`; when the filter
    matches, `policy` is invoked. The same kind may carry any number of
    checks. Evaluation starts at the next `app.update()`.

    Usage:
        app.check(Apple, Without(Fresh), purge()) \\
           .check(Apple, Without(Price), invalid())
    """
    if not isinstance(policy, Policy):
        raise TypeError(f"Expected a Policy, got {policy!r}")

    registration = CheckRegistration(Kind.of(kind), as_filter(filter), policy)
    app.add_check(registration)
    logger.info("Registered check %s (policy=%r)", registration.name, policy)
    return app


def _record(metrics: CheckMetrics | None, check_name: str, outcome: str) -> None:
    if metrics is not None:
        metrics.record_outcome(check_name, outcome)
