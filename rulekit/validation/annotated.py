"""Annotated Types for Pydantic Models

Run a Validator as part of a pydantic v2 model field. The field receives
the Validator's parsed output (coerced, safelisted).

Usage:
    from rulekit.validation.annotated import Checked

    address = Validator({"city": "required|string", "zip": "required|digits:5"})

    class Order(BaseModel):
        shipping: Checked(address)
        billing: Annotated[dict, rule_checked(address)] | None = None
"""
from __future__ import annotations

from typing import Annotated, Any, Callable

from pydantic import BeforeValidator

from .engine import Validator
from .errors import ValidationError


def _parser(validator: Validator) -> Callable[[Any], dict[str, Any]]:
    def parse(value: Any) -> dict[str, Any]:
        try:
            return validator.parse(value)
        except ValidationError as e:
            # pydantic wraps ValueError into its own ValidationError
            raise ValueError(str(e)) from e
    return parse


def rule_checked(validator: Validator) -> BeforeValidator:
    """BeforeValidator running `validator.parse` on the raw field value."""
    return BeforeValidator(_parser(validator))


def Checked(validator: Validator) -> Any:
    """`Annotated[dict, ...]` type validated by `validator`."""
    return Annotated[dict, rule_checked(validator)]
