from .app import App, Phase  # noqa: F401
from .check import CheckPanic, CheckRegistration  # noqa: F401
from .check_models import CheckSpec, load_checks  # noqa: F401
from .commands import Commands, EntityCommands  # noqa: F401
from .filters import All, And, Not, Or, Predicate, With, Without  # noqa: F401
from .kind import Kind  # noqa: F401
from .markers import Valid, check_again, is_valid  # noqa: F401
from .policy import Fixer, Policy, PolicyKind  # noqa: F401
from .policy import invalid, panic, purge, repair, repair_remove  # noqa: F401
from .policy import repair_insert, repair_insert_default  # noqa: F401
from .policy import repair_replace, repair_replace_default, repair_replace_with  # noqa: F401
from .world import Entity, EntityRef, EntityWorldMut, World  # noqa: F401
