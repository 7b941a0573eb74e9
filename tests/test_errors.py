"""Error taxonomy, Result helpers and ValidationError serialization."""
from __future__ import annotations

import pytest

from rulekit.errors import (
    AppError,
    AppErrorException,
    Err,
    ErrorCode,
    Ok,
    collect_results,
    configuration_error,
    raise_error,
    validation_error,
)
from rulekit.validation import (
    ConfigurationError,
    NestingDepthError,
    UnknownRuleError,
    ValidationError,
    Validator,
)


@pytest.mark.parametrize("code,status,category", [
    (ErrorCode.E2000_VALIDATION_GENERIC, 400, "validation"),
    (ErrorCode.E4002_QUERY_FAILED, 503, "database"),
    (ErrorCode.E7002_UNKNOWN_VALIDATOR, 500, "configuration"),
    (ErrorCode.E9001_UNEXPECTED_ERROR, 500, "internal"),
])
def test_error_code_mapping(code, status, category):
    assert code.http_status == status
    assert code.category == category


def test_validation_codes():
    codes = [code.name for code in ErrorCode if code.category == "validation"]
    assert codes == [
        "E2000_VALIDATION_GENERIC",
        "E2002_INVALID_FORMAT",
        "E2004_INVALID_TYPE",
        "E2021_INVALID_JSON",
    ]


def test_result_combinators():
    assert Ok(2).map(lambda v: v * 2).unwrap() == 4
    assert Err("x").map(lambda v: v * 2).unwrap_or(0) == 0
    assert Err("x").map_err(str.upper).unwrap_err() == "X"
    assert Ok(1).and_then(lambda v: Err(v)).is_err()
    with pytest.raises(ValueError):
        Err("boom").unwrap()


def test_collect_results():
    assert collect_results([Ok(1), Ok(2)]) == Ok([1, 2])
    assert collect_results([Ok(1), Err("a"), Err("b")]) == Err(["a", "b"])


def test_builders_drop_empty_metadata():
    error = validation_error("bad", field="age").unwrap_err()
    assert error.metadata == {"field": "age"}
    assert configuration_error("oops", rule=None).unwrap_err().code is ErrorCode.E7000_CONFIGURATION_GENERIC


def test_app_error_context_and_serialization():
    error = AppError(code=ErrorCode.E2000_VALIDATION_GENERIC, message="bad").with_context(origin="ingress")
    payload = error.with_metadata(batch_index=3).to_dict()["error"]
    assert payload["code"] == "E2000_VALIDATION_GENERIC"
    assert payload["metadata"] == {"batch_index": 3}
    assert error.context.origin == "ingress"


def test_raise_error():
    error = AppError(code=ErrorCode.E9000_INTERNAL_GENERIC, message="nope")
    with pytest.raises(AppErrorException) as exc:
        raise_error(error)
    assert exc.value.error is error


def test_validation_error_serialization(simple):
    with pytest.raises(ValidationError) as exc:
        simple.parse({"age": "abc", "size": 1})
    error = exc.value

    assert str(error) == ";".join(error.messages.all())
    payload = error.to_dict()["error"]
    assert payload["error_count"] == 3
    assert payload["failed"] == {"age": {"numeric": [], "min": ["5"]}, "size": {"min": ["10"]}}
    assert [d.constraint for d in error.details] == ["numeric", "min", "min"]
    assert error.details[1].to_dict() == {
        "field": "age", "constraint": "min", "params": ["5"], "message": error.messages.get("age")[1]}
    assert error.get_errors_for_field("size") == ["The size must be at least 10."]

    app_error = error.to_app_error()
    assert app_error.code is ErrorCode.E2000_VALIDATION_GENERIC
    assert app_error.metadata["error_count"] == 2


def test_configuration_errors_are_distinct():
    assert not issubclass(ConfigurationError, ValidationError)
    assert issubclass(NestingDepthError, ConfigurationError)
    error = UnknownRuleError("No evaluator registered for rule 'x'", rule="x", unused=None)
    assert error.error.metadata == {"rule": "x"}
    assert error.error.code.category == "configuration"


def test_depth_limit_from_argument():
    validator = Validator({"a": "required"}, max_depth=0)
    with pytest.raises(NestingDepthError):
        validator.evaluate({}, depth=1)
