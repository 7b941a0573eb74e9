"""Failure and Message Aggregation

Two parallel, path-qualified structures are built during an evaluation:

- FailureSet: path -> {rule name -> parameters} (what failed)
- MessageBag: path -> [message, ...] (what to tell the caller)

Paths are dot-separated: "nested.0.age". Every path in a FailureSet has at
least one message in the MessageBag built alongside it; merging with a
prefix keeps that property for composed (nested) results.

The MessageFormatter turns a message key ("required", "min.numeric") into
text. The engine decides which key and which override template to use;
the formatter owns templates and placeholder substitution.
"""
from __future__ import annotations

import re
from typing import Any, Iterator, Mapping, Protocol, Sequence, runtime_checkable


def _prefixed(prefix: str | None, path: str) -> str:
    return f"{prefix}.{path}" if prefix else path


class MessageBag:
    """Ordered mapping of path -> ordered list of messages.

    Insertion order within a path is preserved; merging appends, never replaces.
    """

    __slots__ = ("_messages",)

    def __init__(self, messages: Mapping[str, Sequence[str]] | None = None):
        self._messages: dict[str, list[str]] = {}
        for path, items in (messages or {}).items():
            for message in items:
                self.add(path, message)

    def add(self, path: str, message: str) -> MessageBag:
        self._messages.setdefault(path, []).append(message)
        return self

    def merge(self, other: MessageBag | Mapping[str, Sequence[str]], prefix: str | None = None) -> MessageBag:
        """Append every message of `other`, optionally re-rooted under `prefix`."""
        items = other.messages() if isinstance(other, MessageBag) else other
        for path, messages in items.items():
            for message in messages:
                self.add(_prefixed(prefix, path), message)
        return self

    def get(self, path: str) -> list[str]:
        return list(self._messages.get(path, ()))

    def first(self, path: str | None = None) -> str | None:
        messages = self.get(path) if path is not None else self.all()
        return messages[0] if messages else None

    def has(self, path: str) -> bool:
        return bool(self._messages.get(path))

    def keys(self) -> list[str]:
        return list(self._messages)

    def all(self) -> list[str]:
        """Flat list of every message, in path insertion order."""
        return [message for messages in self._messages.values() for message in messages]

    def count(self) -> int:
        return sum(len(messages) for messages in self._messages.values())

    def messages(self) -> dict[str, list[str]]:
        """Copy of the underlying mapping."""
        return {path: list(messages) for path, messages in self._messages.items()}

    def is_empty(self) -> bool:
        return not self._messages

    def __len__(self) -> int: return self.count()

    def __contains__(self, path: object) -> bool: return path in self._messages

    def __iter__(self) -> Iterator[str]: return iter(self._messages)

    def __repr__(self) -> str: return f"MessageBag({self._messages!r})"


class FailureSet:
    """Ordered mapping of path -> {rule name -> parameters}.

    One path may carry several failed rules (e.g. both `numeric` and `min`).
    """

    __slots__ = ("_failures",)

    def __init__(self) -> None:
        self._failures: dict[str, dict[str, tuple[str, ...]]] = {}

    def record(self, path: str, rule: str, params: Sequence[str] = ()) -> FailureSet:
        self._failures.setdefault(path, {})[rule] = tuple(params)
        return self

    def merge(self, other: FailureSet, prefix: str | None = None) -> FailureSet:
        for path, rules in other.items():
            for rule, params in rules.items():
                self.record(_prefixed(prefix, path), rule, params)
        return self

    def rules_for(self, path: str) -> dict[str, tuple[str, ...]]:
        return dict(self._failures.get(path, {}))

    def has_rule(self, path: str, rule: str) -> bool:
        return rule in self._failures.get(path, {})

    def paths(self) -> list[str]:
        return list(self._failures)

    def items(self):
        return self._failures.items()

    def to_dict(self) -> dict[str, dict[str, list[str]]]:
        return {path: {rule: list(params) for rule, params in rules.items()} for path, rules in self._failures.items()}

    def __len__(self) -> int: return len(self._failures)

    def __bool__(self) -> bool: return bool(self._failures)

    def __contains__(self, path: object) -> bool: return path in self._failures

    def __iter__(self) -> Iterator[str]: return iter(self._failures)

    def __repr__(self) -> str: return f"FailureSet({self._failures!r})"


# ============================================================================
# Message Formatting
# ============================================================================

@runtime_checkable
class MessageFormatter(Protocol):
    """Turns a message key plus rule parameters into a human-readable string."""

    def render(
        self,
        key: str,
        attribute: str,
        params: Sequence[str],
        *,
        template: str | None = None,
        locale: str | None = None,
    ) -> str: ...


DEFAULT_TEMPLATES: dict[str, str] = {
    "required": "The :attribute field is required.",
    "present": "The :attribute field must be present.",
    "filled": "The :attribute field must have a value.",
    "accepted": "The :attribute must be accepted.",
    "boolean": "The :attribute field must be true or false.",
    "integer": "The :attribute must be an integer.",
    "numeric": "The :attribute must be a number.",
    "string": "The :attribute must be a string.",
    "array": "The :attribute must be an array.",
    "min.numeric": "The :attribute must be at least :min.",
    "min.string": "The :attribute must be at least :min characters.",
    "min.array": "The :attribute must have at least :min items.",
    "max.numeric": "The :attribute may not be greater than :max.",
    "max.string": "The :attribute may not be greater than :max characters.",
    "max.array": "The :attribute may not have more than :max items.",
    "size.numeric": "The :attribute must be :size.",
    "size.string": "The :attribute must be :size characters.",
    "size.array": "The :attribute must contain :size items.",
    "between.numeric": "The :attribute must be between :min and :max.",
    "between.string": "The :attribute must be between :min and :max characters.",
    "between.array": "The :attribute must have between :min and :max items.",
    "in": "The selected :attribute is invalid.",
    "not_in": "The selected :attribute is invalid.",
    "digits": "The :attribute must be :digits digits.",
    "digits_between": "The :attribute must be between :min and :max digits.",
    "email": "The :attribute must be a valid email address.",
    "url": "The :attribute format is invalid.",
    "uuid": "The :attribute must be a valid UUID.",
    "regex": "The :attribute format is invalid.",
    "not_regex": "The :attribute format is invalid.",
    "alpha": "The :attribute may only contain letters.",
    "alpha_num": "The :attribute may only contain letters and numbers.",
    "alpha_dash": "The :attribute may only contain letters, numbers, dashes and underscores.",
    "same": "The :attribute and :other must match.",
    "different": "The :attribute and :other must be different.",
    "confirmed": "The :attribute confirmation does not match.",
    "exists": "The selected :attribute is invalid.",
    "nested": "The :attribute must be an object.",
    "nested_collection": "The :attribute must be a list of objects.",
}

# Rule -> placeholder names bound positionally to its parameters
PARAMETER_NAMES: dict[str, tuple[str, ...]] = {
    "min": ("min",),
    "max": ("max",),
    "size": ("size",),
    "between": ("min", "max"),
    "digits": ("digits",),
    "digits_between": ("min", "max"),
    "same": ("other",),
    "different": ("other",),
}

_PLACEHOLDER = re.compile(r":([a-z_]+)")


class DefaultMessageFormatter:
    """English templates with `:placeholder` substitution.

    Lookup order: explicit `template` (a caller override), then the template
    for `key`, then the template for the bare rule name, then `fallback`.
    `locale` is accepted for formatter interchangeability and is not used here.
    """

    def __init__(self, templates: Mapping[str, str] | None = None, fallback: str | None = None):
        self.templates = {**DEFAULT_TEMPLATES, **(templates or {})}
        if fallback is None:
            from rulekit.config import settings
            fallback = settings.DEFAULT_MESSAGE
        self.fallback = fallback

    def render(
        self,
        key: str,
        attribute: str,
        params: Sequence[str],
        *,
        template: str | None = None,
        locale: str | None = None,
    ) -> str:
        rule = key.split(".", 1)[0]
        text = template or self.templates.get(key) or self.templates.get(rule) or self.fallback
        replacements = self._replacements(rule, attribute, params)
        return _PLACEHOLDER.sub(lambda m: replacements.get(m.group(1), m.group(0)), text)

    @staticmethod
    def _replacements(rule: str, attribute: str, params: Sequence[str]) -> dict[str, Any]:
        values = {
            "attribute": attribute.replace("_", " "),
            "values": ", ".join(params),
            "params": ", ".join(params),
        }
        for name, param in zip(PARAMETER_NAMES.get(rule, ()), params):
            values[name] = param.replace("_", " ") if name == "other" else param
        return values
