"""Validation at the HTTP Boundary

Parse-don't-validate for FastAPI: request payloads go through a Validator
before a route sees them, and routes receive the coerced, safelisted dict.

Usage:
    signup = Validator({"email": "required|email", "age": "required|integer|min:18"})

    @router.post("/signup")
    async def create(body: dict = validated_body(signup)):
        ...

Rejected payloads raise ValidationError; `register_error_handlers(app)`
turns that into a 400 response listing every failing path.
"""
from __future__ import annotations

from typing import Any, Mapping

from fastapi import Depends, Request

from rulekit.errors import AppError, ErrorCode, Err, Ok, Result, raise_error
from rulekit.logging import api_logger
from .engine import Validator

log = api_logger()


def parse_ingress(validator: Validator, data: Any) -> Result[dict[str, Any], AppError]:
    """Parse data entering the system.

    Usage:
        match parse_ingress(signup, payload):
            case Ok(data): ...
            case Err(error): return result_to_response(error)
    """
    return validator.parse_result(data).map_err(lambda e: e.to_app_error().with_context(origin="ingress"))


def parse_batch(
    validator: Validator,
    items: list[Mapping[str, Any]],
    *,
    max_errors: int = 50,
) -> Result[list[dict[str, Any]], list[tuple[int, AppError]]]:
    """Parse every item; Ok with all parsed items or Err with (index, error) pairs."""
    valid: list[dict[str, Any]] = []
    errors: list[tuple[int, AppError]] = []

    for idx, item in enumerate(items):
        if len(errors) >= max_errors:
            break
        result = parse_ingress(validator, item)
        if result.is_ok():
            valid.append(result.unwrap())
        else:
            errors.append((idx, result.unwrap_err().with_metadata(batch_index=idx)))

    if errors:
        return Err(errors)
    return Ok(valid)


class ValidatedBody:
    """FastAPI dependency parsing the JSON request body."""

    __slots__ = ("validator",)

    def __init__(self, validator: Validator):
        self.validator = validator

    async def __call__(self, request: Request) -> dict[str, Any]:
        try:
            body = await request.json()
        except ValueError as e:
            log.warning("invalid_json_body", path=request.url.path, error=str(e))
            raise_error(AppError(code=ErrorCode.E2021_INVALID_JSON, message=f"Invalid JSON in request body: {e}"))
        return self.validator.parse(body)


class ValidatedQuery:
    """FastAPI dependency parsing query parameters; repeated keys become lists."""

    __slots__ = ("validator",)

    def __init__(self, validator: Validator):
        self.validator = validator

    async def __call__(self, request: Request) -> dict[str, Any]:
        params = request.query_params
        data = {key: (values if len(values := params.getlist(key)) > 1 else values[0]) for key in params.keys()}
        return self.validator.parse(data)


def validated_body(validator: Validator) -> Any:
    """Dependency for a body parsed by `validator`. Raises ValidationError when invalid."""
    return Depends(ValidatedBody(validator))


def validated_query(validator: Validator) -> Any:
    """Dependency for query parameters parsed by `validator`."""
    return Depends(ValidatedQuery(validator))


__all__ = [
    "ValidatedBody",
    "ValidatedQuery",
    "parse_batch",
    "parse_ingress",
    "validated_body",
    "validated_query",
]
