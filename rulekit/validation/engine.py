"""Evaluation Engine

A Validator is an immutable schema (RuleSet) plus the collaborators it
evaluates with: rule registry, message formatter, sub-validator container
and presence verifier. Every call to `evaluate` gets its own
EvaluationContext, so one Validator can be shared freely.

Usage:
    validator = Validator(
        {"age": "required|numeric|min:5", "size": "numeric|min:10"},
        messages={"age.min": "Too young."},
    )

    validator.verify({"age": "10"})            # True
    validator.parse({"age": "10", "x": 1})     # {"age": 10}
"""
from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Iterator, Mapping

from rulekit.config import settings
from rulekit.errors import Err, Ok, Result
from rulekit.logging import validation_logger
from .composition import Container, DefaultContainer, check_references
from .context import EvaluationContext
from .errors import InvalidFieldError, NestingDepthError, ValidationError
from .messages import DefaultMessageFormatter, FailureSet, MessageBag, MessageFormatter
from .parser import Rule, RuleDeclaration, RuleSpec, parse_rules
from .presence import PresenceVerifier
from .registry import CustomRules, RuleRegistry
from .rules import SIZE_RULES, size_kind

log = validation_logger()

_EMPTY_SPEC = RuleSpec()


@lru_cache
def _builtin_registry() -> RuleRegistry:
    return RuleRegistry.default()


@dataclass(frozen=True)
class RuleSet:
    """Field -> RuleSpec, plus message overrides, display names and sub-validators."""
    rules: Mapping[str, RuleSpec]
    messages: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    attributes: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    validators: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def build(
        cls,
        rules: Mapping[str, RuleDeclaration] | RuleSet,
        *,
        messages: Mapping[str, str] | None = None,
        attributes: Mapping[str, str] | None = None,
        validators: Mapping[str, Any] | None = None,
    ) -> RuleSet:
        if isinstance(rules, RuleSet):
            messages = {**rules.messages, **(messages or {})}
            attributes = {**rules.attributes, **(attributes or {})}
            validators = {**rules.validators, **(validators or {})}
            rules = rules.rules
        compiled: dict[str, RuleSpec] = {}
        for name, declaration in rules.items():
            if not name or "." in name:
                log.warning("invalid_field_name", field=name)
                raise InvalidFieldError(f"Field name '{name}' must be non-empty and undotted", field=name)
            compiled[name] = parse_rules(declaration)
        return cls(
            rules=MappingProxyType(compiled),
            messages=MappingProxyType(dict(messages or {})),
            attributes=MappingProxyType(dict(attributes or {})),
            validators=MappingProxyType(dict(validators or {})),
        )

    def get(self, field_name: str) -> RuleSpec:
        return self.rules.get(field_name, _EMPTY_SPEC)

    def fields(self) -> tuple[str, ...]:
        return tuple(self.rules)

    def items(self):
        return self.rules.items()

    def __contains__(self, field_name: object) -> bool: return field_name in self.rules

    def __iter__(self) -> Iterator[str]: return iter(self.rules)

    def __len__(self) -> int: return len(self.rules)


@dataclass(frozen=True)
class EvaluationResult:
    """Outcome of one evaluation. `data` is the coerced working copy."""
    valid: bool
    data: dict[str, Any]
    failures: FailureSet
    messages: MessageBag
    fields: tuple[str, ...] = ()

    def projected(self) -> dict[str, Any]:
        """Working data restricted to the declared fields."""
        return {key: value for key, value in self.data.items() if key in self.fields}

    def error(self) -> ValidationError:
        return ValidationError(failures=self.failures, messages=self.messages)


class Validator:
    """Rule-set evaluator. Read-only after construction."""

    def __init__(
        self,
        rules: Mapping[str, RuleDeclaration] | RuleSet,
        *,
        messages: Mapping[str, str] | None = None,
        attributes: Mapping[str, str] | None = None,
        validators: Mapping[str, Any] | None = None,
        custom_rules: CustomRules | None = None,
        registry: RuleRegistry | None = None,
        formatter: MessageFormatter | None = None,
        container: Container | None = None,
        presence_verifier: PresenceVerifier | None = None,
        max_depth: int | None = None,
    ):
        self.ruleset = RuleSet.build(rules, messages=messages, attributes=attributes, validators=validators)
        base = registry if registry is not None else _builtin_registry()
        self.registry = base.extend(custom_rules)
        self.formatter = formatter or DefaultMessageFormatter()
        self.container = container or DefaultContainer()
        self.presence_verifier = presence_verifier
        self.max_depth = settings.MAX_NESTING_DEPTH if max_depth is None else max_depth
        check_references(self.ruleset)

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate(self, data: Mapping[str, Any] | None, *, depth: int = 0) -> EvaluationResult:
        if depth > self.max_depth:
            log.warning("nesting_too_deep", depth=depth, max_depth=self.max_depth)
            raise NestingDepthError(f"Nested validation exceeded depth {self.max_depth}", depth=depth,
                max_depth=self.max_depth)

        context = EvaluationContext.start(self, data, depth)
        for field_name, spec in self.ruleset.items():
            for rule in spec:
                definition = self.registry.get(rule.name)
                if not (definition.implicit or context.has(field_name)):
                    continue
                if definition(field_name, context.get(field_name), rule.params, context):
                    continue
                context.fail(field_name, rule)
                if spec.bails:
                    break

        result = EvaluationResult(context.valid, context.data, context.failures, context.messages,
            self.ruleset.fields())
        log.debug("validation_evaluated", fields=len(self.ruleset), valid=result.valid,
            failures=len(result.failures), depth=depth)
        return result

    def verify(self, data: Mapping[str, Any] | None) -> bool:
        return self.evaluate(data).valid

    passes = verify

    def fails(self, data: Mapping[str, Any] | None) -> bool:
        return not self.verify(data)

    def parse(self, data: Mapping[str, Any] | None) -> dict[str, Any]:
        """Coerced data projected onto the declared fields; raises ValidationError when invalid."""
        result = self.evaluate(data)
        if not result.valid:
            raise result.error()
        return result.projected()

    def parse_result(self, data: Mapping[str, Any] | None) -> Result[dict[str, Any], ValidationError]:
        try:
            return Ok(self.parse(data))
        except ValidationError as e:
            return Err(e)

    def with_rules(self, rules: Mapping[str, RuleDeclaration]) -> Validator:
        """Same collaborators, messages and sub-validators over different rules."""
        return Validator(
            rules,
            messages=self.ruleset.messages,
            attributes=self.ruleset.attributes,
            validators=self.ruleset.validators,
            registry=self.registry,
            formatter=self.formatter,
            container=self.container,
            presence_verifier=self.presence_verifier,
            max_depth=self.max_depth,
        )

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def message_key(self, field_name: str, rule: Rule, value: Any) -> str:
        if rule.name in SIZE_RULES:
            return f"{rule.name}.{size_kind(value, self.ruleset.get(field_name))}"
        return rule.name

    def message_for(self, field_name: str, rule: Rule, value: Any) -> str:
        key = self.message_key(field_name, rule, value)
        overrides = self.ruleset.messages
        candidates = (f"{field_name}.{key}", f"{field_name}.{rule.name}", key, rule.name)
        template = next((overrides[c] for c in candidates if c in overrides), None)
        attribute = self.ruleset.attributes.get(field_name, field_name)
        return self.formatter.render(key, attribute, rule.params, template=template, locale=settings.LOCALE)

    def __repr__(self) -> str:
        return f"Validator({', '.join(f'{k}={v}' for k, v in self.ruleset.items())})"
