"""Rule Parser

Compiles a field's rule declaration into an immutable RuleSpec:

    "required|numeric|min:5"        -> (required), (numeric), (min, "5")
    ["required", "between:1,10"]    -> (required), (between, "1", "10")
    ["regex:^[a-z,]+$"]             -> (regex, "^[a-z,]+$")

Rule names are normalized to snake_case so `isOdd` and `is_odd` name the
same rule. Names are not checked against a registry here; an unknown rule
is a configuration error raised when it is first evaluated.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Sequence, Union

# Rules whose single parameter may legitimately contain commas
WHOLE_PARAMETER_RULES = frozenset({"regex", "not_regex"})

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def normalize_rule_name(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name.strip()).lower()


@dataclass(frozen=True, slots=True)
class Rule:
    """A named rule with its string parameters."""
    name: str
    params: tuple[str, ...] = ()

    def __str__(self) -> str:
        return f"{self.name}:{','.join(self.params)}" if self.params else self.name


@dataclass(frozen=True, slots=True)
class RuleSpec:
    """Ordered, immutable rules for one field."""
    rules: tuple[Rule, ...] = ()

    def __iter__(self) -> Iterator[Rule]: return iter(self.rules)

    def __len__(self) -> int: return len(self.rules)

    def has(self, *names: str) -> bool:
        return any(rule.name in names for rule in self.rules)

    def find(self, name: str) -> Rule | None:
        return next((rule for rule in self.rules if rule.name == name), None)

    @property
    def bails(self) -> bool:
        """Stop at the first failing rule instead of collecting all of them."""
        return self.has("bail")

    def __str__(self) -> str:
        return "|".join(str(rule) for rule in self.rules)


RuleDeclaration = Union[str, Rule, RuleSpec, Sequence[Union[str, Rule]]]


def parse_rule(text: str) -> Rule:
    """Parse one `name:param,param` segment."""
    name, _, raw = text.strip().partition(":")
    name = normalize_rule_name(name)
    if not raw:
        return Rule(name)
    params = (raw,) if name in WHOLE_PARAMETER_RULES else tuple(p.strip() for p in raw.split(","))
    return Rule(name, params)


def parse_rules(declaration: RuleDeclaration) -> RuleSpec:
    """Compile a pipe-delimited string, or a sequence of strings / Rules."""
    if isinstance(declaration, RuleSpec):
        return declaration
    if isinstance(declaration, Rule):
        return RuleSpec((declaration,))
    segments = declaration.split("|") if isinstance(declaration, str) else declaration

    rules: list[Rule] = []
    for segment in segments:
        if isinstance(segment, Rule):
            rules.append(segment)
        elif segment.strip():
            rules.append(parse_rule(segment))
    return RuleSpec(tuple(rules))
