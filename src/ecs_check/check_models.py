"""Check specs: Pydantic validation for checks declared as data.

A spec names a kind, the records whose absence (`without`) or presence
(`with_`) is the problem condition, and a policy. Record names resolve
through a caller-supplied `{name: type}` mapping.

Repair policies name the record they act on in `component`;
`repair_replace_default` also names the record type that takes its place in
`replacement`. Repairs that need a template value or a conversion function
(`repair_insert`, `repair_replace`, `repair_replace_with`) or a custom fixer
have no data form and are registered in code with `App.check`.

Examples:
    {"kind": "Apple", "without": ["Fresh"], "policy": "purge"}
    {"kind": "Apple", "with": ["Rotten"], "policy": "repair_replace_default",
     "component": "Rotten", "replacement": "Fresh"}
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .filters import Filter, With, Without
from .policy import (
    Policy,
    invalid,
    panic,
    purge,
    repair_insert_default,
    repair_remove,
    repair_replace_default,
)

PolicyName = Literal[
    "invalid",
    "purge",
    "panic",
    "repair_remove",
    "repair_insert_default",
    "repair_replace_default",
]

_REPAIR_POLICIES = {"repair_remove", "repair_insert_default", "repair_replace_default"}


class CheckSpec(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    kind: str
    without: list[str] = Field(default_factory=list)
    with_: list[str] = Field(default_factory=list, alias="with")
    policy: PolicyName
    component: Optional[str] = None
    replacement: Optional[str] = None

    @field_validator("kind")
    @classmethod
    def kind_not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("kind must not be empty")
        return v

    @model_validator(mode="after")
    def condition_declared(self) -> "CheckSpec":
        if not self.without and not self.with_:
            raise ValueError("a check needs at least one 'without' or 'with' record")
        return self

    @model_validator(mode="after")
    def component_matches_policy(self) -> "CheckSpec":
        if self.policy in _REPAIR_POLICIES and not self.component:
            raise ValueError(f"policy '{self.policy}' requires 'component'")
        if self.policy not in _REPAIR_POLICIES and self.component:
            raise ValueError(f"policy '{self.policy}' does not take 'component'")
        if self.policy == "repair_replace_default" and not self.replacement:
            raise ValueError("policy 'repair_replace_default' requires 'replacement'")
        if self.policy != "repair_replace_default" and self.replacement:
            raise ValueError(f"policy '{self.policy}' does not take 'replacement'")
        return self

    def build_filter(self, records: dict[str, type]) -> Filter:
        parts: list[Filter] = []
        if self.with_:
            parts.append(With(*(_resolve(records, name) for name in self.with_)))
        if self.without:
            parts.append(Without(*(_resolve(records, name) for name in self.without)))
        if len(parts) == 1:
            return parts[0]
        return parts[0] & parts[1]

    def build_policy(self, records: dict[str, type]) -> Policy:
        if self.policy == "invalid":
            return invalid()
        if self.policy == "purge":
            return purge()
        if self.policy == "panic":
            return panic()
        component = _resolve(records, self.component or "")
        if self.policy == "repair_remove":
            return repair_remove(component)
        if self.policy == "repair_replace_default":
            return repair_replace_default(component, _resolve(records, self.replacement or ""))
        return repair_insert_default(component)


def validate_spec(data: dict[str, Any]) -> CheckSpec:
    """Validate and parse a check dict.

    Raises pydantic.ValidationError on invalid input.
    """
    return CheckSpec.model_validate(data)


def load_checks(app: Any, specs: list[dict[str, Any]], records: dict[str, type]) -> Any:
    """Validate every spec first, then register them on `app` in order."""
    parsed = [validate_spec(data) for data in specs]
    for spec in parsed:
        app.check(
            _resolve(records, spec.kind),
            spec.build_filter(records),
            spec.build_policy(records),
        )
    return app


def _resolve(records: dict[str, type], name: str) -> type:
    try:
        return records[name]
    except KeyError:
        raise ValueError(
            f"Unknown record name {name!r}. Known: {sorted(records)}"
        ) from None
