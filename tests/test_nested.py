"""nested:<name> composition."""
from __future__ import annotations

import sys
import types

import pytest

from rulekit.errors import ErrorCode
from rulekit.validation import (
    MissingParameterError,
    NestingDepthError,
    NotAValidatorError,
    UnknownRuleError,
    UnknownValidatorError,
    UnresolvableValidatorError,
    Validator,
)
from rulekit.validation.composition import DefaultContainer


@pytest.mark.parametrize("data", [
    {"nested": {"age": 10}},
    {"nested": {"age": 10, "size": 20}},
])
def test_nested_ok(nested_validator, data):
    assert nested_validator.verify(data)


@pytest.mark.parametrize("data", [
    {},
    {"nested": {}},
    {"nested": {"age": 3}},
    {"nested": {"age": 10, "size": 3}},
])
def test_nested_not_ok(nested_validator, data):
    assert not nested_validator.verify(data)


def test_nested_failure_paths(nested_validator):
    result = nested_validator.evaluate({"nested": {"age": 1, "size": 2}})
    assert result.failures.paths() == ["nested.age", "nested.size"]
    assert "nested" not in result.failures
    assert result.messages.keys() == ["nested.age", "nested.size"]
    assert result.messages.get("nested.age") == ["The age must be at least 5."]


def test_nested_parse_keeps_sub_object_unchanged(nested_validator):
    parsed = nested_validator.parse({"nested": {"age": "10", "size": "20", "extra": 1}, "other": 2})
    assert parsed == {"nested": {"age": "10", "size": "20", "extra": 1}}


def test_nested_parse_does_not_project_sub_keys():
    parent = Validator({"n": "array|nested:s"}, validators={"s": Validator({"age": "integer"})})
    assert parent.parse({"n": {"age": "3", "extra": 1}}) == {"n": {"age": "3", "extra": 1}}


@pytest.mark.parametrize("value", ["garbage", 5, None, [{"age": 1}]])
def test_non_mapping_value_fails_nested(value):
    validator = Validator({"nested": "nested:simple"}, validators={"simple": Validator({"age": "required"})})
    result = validator.evaluate({"nested": value})
    assert result.failures.to_dict() == {"nested": {"nested": ["simple"]}}
    assert result.messages.get("nested") == ["The nested must be an object."]


def test_non_mapping_value_is_never_replaced_by_empty_object():
    optional = Validator({"meta": "nested:opt"}, validators={"opt": Validator({"note": "string"})})
    result = optional.evaluate({"meta": "garbage"})
    assert not result.valid
    assert result.data == {"meta": "garbage"}


def test_multi_level_paths():
    leaf = Validator({"code": "required|digits:4"})
    middle = Validator({"zip": "nested:leaf"}, validators={"leaf": leaf})
    root = Validator({"address": "nested:middle"}, validators={"middle": middle})
    result = root.evaluate({"address": {"zip": {"code": "12"}}})
    assert result.failures.to_dict() == {"address.zip.code": {"digits": ["4"]}}


def test_shared_instance_is_used_directly():
    sub = Validator({"age": "required"})
    parent = Validator({"a": "nested:sub", "b": "nested:sub"}, validators={"sub": sub})
    assert parent.parse({"a": {"age": 1}, "b": {"age": 2, "x": 3}}) == {"a": {"age": 1}, "b": {"age": 2, "x": 3}}


def test_factory_reference_is_called_per_resolution():
    built = []

    def factory():
        built.append(1)
        return Validator({"age": "required"})

    parent = Validator({"a": "nested:sub", "b": "nested:sub"}, validators={"sub": factory})
    parent.verify({"a": {}, "b": {}})
    assert len(built) == 2


def test_import_string_reference(monkeypatch):
    module = types.ModuleType("app_schemas")
    module.make_person = lambda: Validator({"name": "required|string"})
    monkeypatch.setitem(sys.modules, "app_schemas", module)

    for reference in ("app_schemas:make_person", "app_schemas.make_person"):
        parent = Validator({"person": "nested:person"}, validators={"person": reference})
        assert parent.evaluate({"person": {}}).failures.paths() == ["person.name"]


def test_unregistered_name_is_rejected_at_construction():
    with pytest.raises(UnknownValidatorError) as exc:
        Validator({"nested": "nested:missing"})
    assert exc.value.error.code is ErrorCode.E7002_UNKNOWN_VALIDATOR


@pytest.mark.parametrize("rules", ["nested", "nested:a,b", "nested_collection"])
def test_missing_parameter(rules):
    with pytest.raises(MissingParameterError):
        Validator({"nested": rules}, validators={"a": Validator({})})


def test_unresolvable_reference():
    parent = Validator({"nested": "nested:x"}, validators={"x": "no_such_module_here:factory"})
    with pytest.raises(UnresolvableValidatorError):
        parent.verify({"nested": {}})


def test_reference_needing_arguments_is_unresolvable():
    with pytest.raises(UnresolvableValidatorError):
        DefaultContainer().make(Validator)


def test_not_a_validator():
    parent = Validator({"nested": "nested:x"}, validators={"x": lambda: {"age": "required"}})
    with pytest.raises(NotAValidatorError):
        parent.verify({"nested": {}})


def test_configuration_errors_are_not_field_failures():
    parent = Validator({"nested": "nested:x"}, validators={"x": lambda: Validator({"age": "mystery"})})
    with pytest.raises(UnknownRuleError):
        parent.evaluate({"nested": {"age": 1}})


def test_self_nesting_is_bounded():
    def tree():
        return Validator({"child": "nested:tree"}, validators={"tree": tree}, max_depth=5)

    data: dict = {}
    for _ in range(10):
        data = {"child": data}

    with pytest.raises(NestingDepthError):
        tree().verify(data)
    assert tree().verify({"child": {"child": {}}})
