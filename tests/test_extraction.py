from __future__ import annotations

import pytest

from rulekit.errors import Err, Ok
from rulekit.validation import FieldExtractor, MessageBag, ValidationError, Validator


@pytest.fixture
def fields() -> FieldExtractor:
    return FieldExtractor(Validator({}))


def test_verify_field(fields):
    assert fields.verify_field({"age": "12"}, "age", "integer|min:10")
    assert not fields.verify_field({"age": "9"}, "age", "integer|min:10")


def test_absent_key_is_not_null(fields):
    assert fields.verify_field({}, "tags", "array")
    assert not fields.verify_field({"tags": None}, "tags", "array")
    assert not fields.verify_field({}, "tags", "required|array")


def test_messages_are_merged_into_supplied_bag(fields):
    bag = MessageBag().add("other", "kept")
    fields.verify_field({"age": "x"}, "age", "integer", messages=bag)
    assert bag.keys() == ["other", "age"]
    assert bag.get("age") == ["The age must be an integer."]


def test_get_field_returns_coerced_value(fields):
    assert fields.get_field({"age": "12", "extra": 1}, "age", "integer") == 12


def test_get_field_default(fields):
    assert fields.get_field({}, "age", "integer", default=18) == 18
    assert fields.get_field({"age": None}, "age", "integer", default=18) == 18


def test_get_field_raises(fields):
    with pytest.raises(ValidationError) as exc:
        fields.get_field({"age": "old"}, "age", "integer")
    assert exc.value.failures.paths() == ["age"]


def test_get_field_result(fields):
    assert fields.get_field_result({"flag": "1"}, "flag", "boolean") == Ok(True)
    assert isinstance(fields.get_field_result({"flag": "yes"}, "flag", "boolean"), Err)


def test_extraction_reuses_sub_validators():
    person = Validator({"name": "required"})
    fields = FieldExtractor(Validator({}, validators={"person": person}))
    assert fields.get_field({"owner": {"name": "Ada", "x": 1}}, "owner", "nested:person") == {"name": "Ada", "x": 1}
