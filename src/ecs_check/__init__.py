"""ecs_check: invariant checks and auto-repair for entity/record stores.

Import the public surface from `ecs_check.prelude`.
"""

__version__ = "0.1.0"
