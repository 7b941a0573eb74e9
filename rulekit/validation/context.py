"""Evaluation Context

Mutable state of one evaluation: the working copy of the data, the
failures and messages collected so far, and the nesting depth. Rules read
and write it; the caller's input is never mutated.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Mapping

from .messages import FailureSet, MessageBag
from .parser import Rule, RuleSpec

if TYPE_CHECKING:
    from .engine import EvaluationResult, Validator


@dataclass
class EvaluationContext:
    validator: Validator
    data: dict[str, Any]
    depth: int = 0
    failures: FailureSet = field(default_factory=FailureSet)
    messages: MessageBag = field(default_factory=MessageBag)

    @classmethod
    def start(cls, validator: Validator, data: Any, depth: int = 0) -> EvaluationContext:
        """Context over a shallow copy of `data`. Anything but a mapping reads as empty."""
        return cls(validator, dict(data) if isinstance(data, Mapping) else {}, depth)

    @property
    def valid(self) -> bool:
        return not self.failures

    def has(self, field_name: str) -> bool: return field_name in self.data

    def get(self, field_name: str, default: Any = None) -> Any: return self.data.get(field_name, default)

    def set(self, field_name: str, value: Any) -> None: self.data[field_name] = value

    def remove(self, field_name: str) -> None: self.data.pop(field_name, None)

    def rules_for(self, field_name: str) -> RuleSpec:
        return self.validator.ruleset.get(field_name)

    def fail(self, field_name: str, rule: Rule, path: str | None = None) -> None:
        """Record `rule` as failed for `field_name` together with its message.

        `path` places the entry below the field, e.g. at one element of a collection.
        """
        path = path or field_name
        self.failures.record(path, rule.name, rule.params)
        self.messages.add(path, self.validator.message_for(field_name, rule, self.get(field_name)))

    def splice(self, prefix: str, result: EvaluationResult) -> None:
        """Re-root a sub-evaluation's failures and messages under `prefix`."""
        self.failures.merge(result.failures, prefix)
        self.messages.merge(result.messages, prefix)
