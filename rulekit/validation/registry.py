"""Rule Registry

Explicit mapping from rule name to evaluator. Evaluators share one
signature:

    evaluator(field, value, params, context) -> bool

and may mutate `context` (coercion writes to `context.data`, composition
rules splice into `context.failures` / `context.messages`).

An implicit rule runs even when its field is absent from the data; every
other rule only runs for present fields.

Usage:
    @rule("odd")
    def is_odd(field, value, params, context) -> bool:
        return int(value) % 2 == 1

    validator = Validator({"age": "required|odd"}, custom_rules=[is_odd])
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Iterable, Mapping, Union

from rulekit.logging import validation_logger
from .errors import UnknownRuleError
from .parser import normalize_rule_name

if TYPE_CHECKING:
    from .context import EvaluationContext

RuleEvaluator = Callable[[str, Any, "tuple[str, ...]", "EvaluationContext"], bool]

log = validation_logger()


@dataclass(frozen=True, slots=True)
class RuleDefinition:
    """A registered rule: evaluator plus dispatch flags."""
    name: str
    evaluator: RuleEvaluator
    implicit: bool = False

    def __call__(self, field: str, value: Any, params: tuple[str, ...], context: EvaluationContext) -> bool:
        return self.evaluator(field, value, params, context)


CustomRules = Union[Mapping[str, Union[RuleEvaluator, RuleDefinition]], Iterable[RuleDefinition]]


def rule(name: str, *, implicit: bool = False) -> Callable[[RuleEvaluator], RuleDefinition]:
    """Decorator to turn an evaluator function into a RuleDefinition."""
    return lambda fn: RuleDefinition(normalize_rule_name(name), fn, implicit=implicit)


class RuleRegistry:
    """Name -> RuleDefinition. Populated up front, read-only during evaluation."""

    __slots__ = ("_rules",)

    def __init__(self, definitions: Iterable[RuleDefinition] = ()):
        self._rules: dict[str, RuleDefinition] = {}
        for definition in definitions:
            self.register(definition)

    @classmethod
    def default(cls) -> RuleRegistry:
        """Registry holding every built-in rule."""
        from .rules import BUILTIN_RULES
        return cls(BUILTIN_RULES)

    def register(self, definition: RuleDefinition | str, evaluator: RuleEvaluator | None = None, *,
                 implicit: bool = False) -> RuleRegistry:
        """Register a RuleDefinition, or a name plus evaluator. Later registrations win."""
        if isinstance(definition, str):
            if evaluator is None: raise TypeError(f"Rule '{definition}' registered without an evaluator")
            definition = RuleDefinition(normalize_rule_name(definition), evaluator, implicit=implicit)
        self._rules[definition.name] = definition
        return self

    def extend(self, custom: CustomRules | None) -> RuleRegistry:
        """Copy of this registry with custom rules layered on top."""
        registry = self.copy()
        if not custom:
            return registry
        items = custom.items() if isinstance(custom, Mapping) else ((d.name, d) for d in custom)
        for name, entry in items:
            if isinstance(entry, RuleDefinition):
                registry.register(RuleDefinition(normalize_rule_name(name), entry.evaluator, implicit=entry.implicit))
            else:
                registry.register(name, entry)
        return registry

    def copy(self) -> RuleRegistry:
        return RuleRegistry(self._rules.values())

    def get(self, name: str) -> RuleDefinition:
        try:
            return self._rules[name]
        except KeyError:
            log.warning("unknown_rule", rule=name)
            raise UnknownRuleError(f"No evaluator registered for rule '{name}'", rule=name) from None

    def is_implicit(self, name: str) -> bool: return self.get(name).implicit

    def names(self) -> list[str]: return sorted(self._rules)

    def __contains__(self, name: object) -> bool: return name in self._rules

    def __len__(self) -> int: return len(self._rules)
