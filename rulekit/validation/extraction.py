"""Single-Field Extraction

Check or pull one key out of a payload without declaring a full schema:

    fields = FieldExtractor(Validator({}))
    fields.verify_field(payload, "age", "integer|min:18")   # bool
    fields.get_field(payload, "age", "integer", default=0)  # coerced value

An absent key validates as an empty object, never as None, so optional
type rules stay silent and `required` still fails.
"""
from __future__ import annotations

from typing import Any, Mapping

from rulekit.errors import Err, Ok, Result
from .engine import EvaluationResult, Validator
from .errors import ValidationError
from .messages import MessageBag
from .parser import RuleDeclaration


class FieldExtractor:
    """Projects one key of a payload through an ephemeral one-field schema."""

    __slots__ = ("validator",)

    def __init__(self, validator: Validator):
        self.validator = validator

    def _evaluate(self, data: Mapping[str, Any] | None, key: str, rules: RuleDeclaration) -> EvaluationResult:
        data = data or {}
        subset = {key: data[key]} if key in data else {}
        return self.validator.with_rules({key: rules}).evaluate(subset)

    def verify_field(
        self,
        data: Mapping[str, Any] | None,
        key: str,
        rules: RuleDeclaration,
        messages: MessageBag | None = None,
    ) -> bool:
        """True when `data[key]` satisfies `rules`; failure messages are merged into `messages`."""
        result = self._evaluate(data, key, rules)
        if messages is not None:
            messages.merge(result.messages)
        return result.valid

    def get_field(self, data: Mapping[str, Any] | None, key: str, rules: RuleDeclaration, default: Any = None) -> Any:
        """Coerced value of `data[key]`, or `default` when the key ends up absent.

        Raises ValidationError when the value does not satisfy `rules`.
        """
        result = self._evaluate(data, key, rules)
        if not result.valid:
            raise result.error()
        return result.data.get(key, default)

    def get_field_result(
        self,
        data: Mapping[str, Any] | None,
        key: str,
        rules: RuleDeclaration,
        default: Any = None,
    ) -> Result[Any, ValidationError]:
        try:
            return Ok(self.get_field(data, key, rules, default))
        except ValidationError as e:
            return Err(e)
