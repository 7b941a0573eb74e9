"""Shared validators mirroring the schemas used across the suite."""
from __future__ import annotations

import pytest

from rulekit.validation import Validator, rule


def make_simple() -> Validator:
    return Validator({"age": "required|numeric|min:5", "size": "numeric|min:10"})


@rule("isOdd")
def is_odd(field, value, params, context) -> bool:
    return int(value) % 2 == 1


class FakePresenceVerifier:
    """Answers every lookup with a fixed count and remembers the calls."""

    def __init__(self, found: bool = True):
        self.found = found
        self.calls: list[tuple] = []

    def count(self, collection, column, value) -> int:
        self.calls.append(("count", collection, column, value))
        return 1 if self.found else 0

    def count_many(self, collection, column, values) -> int:
        self.calls.append(("count_many", collection, column, tuple(values)))
        return len(values) if self.found else 0


@pytest.fixture
def simple() -> Validator:
    return make_simple()


@pytest.fixture
def all_types() -> Validator:
    return Validator({
        "numeric": "numeric",
        "integer": "integer",
        "boolean": "boolean",
        "string": "string",
        "array": "array",
    })


@pytest.fixture
def nested_validator() -> Validator:
    return Validator({"nested": "required|array|nested:simple"}, validators={"simple": make_simple})


@pytest.fixture
def collection_validator() -> Validator:
    return Validator({"nested": "array|nested_collection:simple"}, validators={"simple": make_simple})


@pytest.fixture
def custom_rule_validator() -> Validator:
    return Validator({"age": "required|isOdd"}, messages={"is_odd": "Age out of bound"}, custom_rules=[is_odd])
