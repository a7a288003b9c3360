"""Tests for declarative check specs."""

import pytest
from pydantic import ValidationError

from ecs_check.app import App
from ecs_check.check_models import CheckSpec, load_checks, validate_spec
from ecs_check.markers import Checked, Invalid
from ecs_check.policy import PolicyKind

from records import Bar, Baz, Foo, Price

RECORDS = {"Foo": Foo, "Bar": Bar, "Baz": Baz, "Price": Price}


class TestCheckSpec:
    def test_valid_spec(self):
        spec = validate_spec({"kind": "Foo", "without": ["Bar"], "policy": "purge"})
        assert spec.kind == "Foo"
        assert spec.without == ["Bar"]
        assert spec.with_ == []

    def test_with_alias(self):
        spec = validate_spec({"kind": "Foo", "with": ["Baz"], "policy": "invalid"})
        assert spec.with_ == ["Baz"]
        assert repr(spec.build_filter(RECORDS)) == "With<Baz>"

    def test_combined_filter(self):
        spec = CheckSpec(kind="Foo", with_=["Baz"], without=["Bar"], policy="invalid")
        assert repr(spec.build_filter(RECORDS)) == "(With<Baz>, Without<Bar>)"

    def test_empty_kind_rejected(self):
        with pytest.raises(ValidationError, match="kind must not be empty"):
            validate_spec({"kind": "  ", "without": ["Bar"], "policy": "purge"})

    def test_condition_required(self):
        with pytest.raises(ValidationError, match="at least one"):
            validate_spec({"kind": "Foo", "policy": "purge"})

    def test_unknown_policy_rejected(self):
        with pytest.raises(ValidationError):
            validate_spec({"kind": "Foo", "without": ["Bar"], "policy": "ignore"})

    def test_repair_requires_component(self):
        with pytest.raises(ValidationError, match="requires 'component'"):
            validate_spec({"kind": "Foo", "without": ["Bar"], "policy": "repair_remove"})

    def test_component_only_for_repair(self):
        with pytest.raises(ValidationError, match="does not take 'component'"):
            validate_spec({"kind": "Foo", "without": ["Bar"], "policy": "panic", "component": "Bar"})

    def test_build_policy(self):
        spec = validate_spec({
            "kind": "Foo", "without": ["Price"],
            "policy": "repair_insert_default", "component": "Price",
        })
        assert spec.build_policy(RECORDS).kind is PolicyKind.REPAIR

    def test_replace_default_requires_replacement(self):
        with pytest.raises(ValidationError, match="requires 'replacement'"):
            validate_spec({
                "kind": "Foo", "with": ["Bar"],
                "policy": "repair_replace_default", "component": "Bar",
            })

    def test_replacement_only_for_replace_default(self):
        with pytest.raises(ValidationError, match="does not take 'replacement'"):
            validate_spec({
                "kind": "Foo", "with": ["Bar"], "policy": "repair_remove",
                "component": "Bar", "replacement": "Price",
            })

    def test_build_replace_default_policy(self):
        spec = validate_spec({
            "kind": "Foo", "with": ["Bar"], "policy": "repair_replace_default",
            "component": "Bar", "replacement": "Price",
        })
        assert repr(spec.build_policy(RECORDS)) == "Repair(Fixer(replace Bar with default Price))"

    def test_unknown_record_name(self):
        spec = validate_spec({"kind": "Foo", "without": ["Qux"], "policy": "purge"})
        with pytest.raises(ValueError, match="Unknown record name 'Qux'"):
            spec.build_filter(RECORDS)


class TestLoadChecks:
    def test_registers_and_runs(self):
        app = App()
        load_checks(app, [
            {"kind": "Foo", "without": ["Bar"], "policy": "invalid"},
            {"kind": "Foo", "without": ["Price"], "policy": "repair_insert_default", "component": "Price"},
        ], RECORDS)
        assert len(app.registered_checks()) == 2

        entity = app.world.spawn(Foo()).id()
        app.update()

        ref = app.world.entity(entity)
        assert ref.contains(Checked)
        assert ref.contains(Invalid)
        assert ref.get(Price) == Price(0)

    def test_replace_default_swaps_record(self):
        app = App()
        load_checks(app, [{
            "kind": "Foo", "with": ["Bar"], "policy": "repair_replace_default",
            "component": "Bar", "replacement": "Price",
        }], RECORDS)

        entity = app.world.spawn(Foo(), Bar()).id()
        app.update()

        ref = app.world.entity(entity)
        assert not ref.contains(Bar)
        assert ref.get(Price) == Price(0)
        assert ref.contains(Checked)

    def test_invalid_spec_registers_nothing(self):
        app = App()
        with pytest.raises(ValidationError):
            load_checks(app, [
                {"kind": "Foo", "without": ["Bar"], "policy": "invalid"},
                {"kind": "Foo", "policy": "invalid"},
            ], RECORDS)
        assert app.registered_checks() == []
