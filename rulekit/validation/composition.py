"""Composition Rules

`nested:<name>` validates a sub-object with another Validator,
`nested_collection:<name>` validates every element of a sequence with one.
Both always pass at the parent level; the sub-evaluation's failures are
spliced into the parent under `field.sub_path` / `field.index.sub_path`.
A value that is not an object is recorded as a failure of the composition
rule at `field` (or at `field.index` for a collection element). The parent's
working value is never rewritten.

Sub-validators are registered by short name on the parent:

    address = Validator({"city": "required|string"})
    person = Validator(
        {"home": "required|nested:address", "offices": "array|nested_collection:office"},
        validators={"address": address, "office": "myapp.schemas:make_office_validator"},
    )

An entry that is already a Validator is used as-is; anything else is a
reference built by the container on every resolution.
"""
from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any, Mapping, Protocol, Sequence, runtime_checkable

from rulekit.logging import validation_logger
from .errors import (
    MissingParameterError,
    NotAValidatorError,
    UnknownValidatorError,
    UnresolvableValidatorError,
)
from .parser import Rule

if TYPE_CHECKING:
    from .context import EvaluationContext
    from .engine import RuleSet, Validator

log = validation_logger()

COMPOSITION_RULES = frozenset({"nested", "nested_collection"})


@runtime_checkable
class Container(Protocol):
    """Builds a sub-validator from a registered reference."""

    def make(self, reference: Any) -> Any: ...


class DefaultContainer:
    """Calls callables and imports `package.module:attr` / `package.module.attr` strings."""

    def make(self, reference: Any) -> Any:
        from .engine import Validator

        target = self._import(reference) if isinstance(reference, str) else reference
        if isinstance(target, Validator) or not callable(target):
            return target
        try:
            return target()
        except TypeError as e:
            raise UnresolvableValidatorError(f"Cannot construct validator from {reference!r}: {e}",
                reference=repr(reference)) from e

    @staticmethod
    def _import(path: str) -> Any:
        module_name, sep, attr = path.partition(":")
        if not sep:
            module_name, _, attr = path.rpartition(".")
        if not module_name or not attr:
            raise UnresolvableValidatorError(f"Invalid validator reference '{path}'", reference=path)
        try:
            return getattr(import_module(module_name), attr)
        except (ImportError, AttributeError) as e:
            raise UnresolvableValidatorError(f"Cannot import validator '{path}': {e}", reference=path) from e


def validator_name(rule: str, params: Sequence[str]) -> str:
    if len(params) != 1 or not params[0]:
        raise MissingParameterError(f"Rule '{rule}' requires exactly one validator name", rule=rule,
            given=len(params))
    return params[0]


def check_references(ruleset: RuleSet) -> None:
    """Reject composition rules naming unregistered sub-validators."""
    for field_name, spec in ruleset.items():
        for rule in spec:
            if rule.name not in COMPOSITION_RULES:
                continue
            name = validator_name(rule.name, rule.params)
            if name not in ruleset.validators:
                log.warning("unknown_validator", field=field_name, validator=name)
                raise UnknownValidatorError(f"Field '{field_name}' references unregistered validator '{name}'",
                    field=field_name, validator=name)


def resolve(name: str, context: EvaluationContext) -> Validator:
    """Sub-validator registered as `name` on the validator being evaluated."""
    from .engine import Validator

    owner = context.validator
    if name not in owner.ruleset.validators:
        log.warning("unknown_validator", validator=name)
        raise UnknownValidatorError(f"No validator registered as '{name}'", validator=name)

    entry = owner.ruleset.validators[name]
    instance = entry if isinstance(entry, Validator) else owner.container.make(entry)
    if not isinstance(instance, Validator):
        log.warning("not_a_validator", validator=name, resolved=type(instance).__name__)
        raise NotAValidatorError(f"Validator '{name}' resolved to {type(instance).__name__}", validator=name,
            resolved=type(instance).__name__)

    log.debug("nested_validator_resolved", validator=name, shared=instance is entry)
    return instance


def nested(field: str, value: Any, params: Sequence[str], context: EvaluationContext) -> bool:
    sub = resolve(validator_name("nested", params), context)
    if not isinstance(value, Mapping):
        context.fail(field, Rule("nested", tuple(params)))
        return True
    result = sub.evaluate(value, depth=context.depth + 1)
    if not result.valid:
        context.splice(field, result)
    return True


def nested_collection(field: str, value: Any, params: Sequence[str], context: EvaluationContext) -> bool:
    name = validator_name("nested_collection", params)
    rule = Rule("nested_collection", tuple(params))
    if isinstance(value, Mapping):
        elements = list(value.values())
    elif isinstance(value, (list, tuple)):
        elements = list(value)
    else:
        context.fail(field, rule)
        return True

    sub = resolve(name, context)
    for index, element in enumerate(elements):
        if not isinstance(element, Mapping):
            context.fail(field, rule, path=f"{field}.{index}")
            continue
        result = sub.evaluate(element, depth=context.depth + 1)
        if result.valid:
            continue
        context.splice(f"{field}.{index}", result)
        # A failing element never shares its sub-validator with the next one
        sub = resolve(name, context)
    return True
