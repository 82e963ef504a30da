"""
Ordered first-match-wins rules for type inference.

Each handler declares its literal and keyword tables as lists of
``TypeRule`` pairs. Priority is the list order, so the order of a table is
part of a handler's behaviour and is tested as such.

valuelens/src/valuelens/inference.py
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional, Pattern, Sequence, Union

__all__ = [
    "TypeRule",
    "first_match",
    "exact",
    "matches",
    "prefixed",
    "enclosed",
    "value_contains",
    "name_contains",
    "name_is",
    "name_and_value",
    "DIGITS",
    "DECIMAL",
]

# (lowercased name, stripped value) -> bool
Predicate = Callable[[str, str], bool]
Result = Union[str, Callable[[str], Optional[str]]]

DIGITS = re.compile(r"^\d+$")
DECIMAL = re.compile(r"^\d+\.\d+$")


@dataclass(frozen=True)
class TypeRule:
    """A ``(predicate, result)`` pair.

    ``result`` is either a fixed label or a callable that derives one from
    the value; a callable returning None lets the cascade continue.
    """

    predicate: Predicate
    result: Result
    description: str = ""

    def apply(self, name: str, value: str) -> Optional[str]:
        if not self.predicate(name, value):
            return None
        if callable(self.result):
            return self.result(value)
        return self.result


def first_match(rules: Sequence[TypeRule], name: str, value: str) -> Optional[str]:
    """Label of the first rule that matches, or None."""
    for rule in rules:
        label = rule.apply(name, value)
        if label is not None:
            return label
    return None


def exact(*literals: str, result: Result) -> TypeRule:
    """Value equals one of ``literals``."""
    options = frozenset(literals)
    return TypeRule(lambda _n, v: v in options, result, f"value in {sorted(options)}")


def matches(pattern: Union[str, Pattern[str]], result: Result) -> TypeRule:
    """Value matches a regular expression (``re.search``)."""
    compiled = re.compile(pattern) if isinstance(pattern, str) else pattern
    return TypeRule(lambda _n, v: compiled.search(v) is not None, result, f"value ~ {compiled.pattern}")


def prefixed(*prefixes: str, result: Result) -> TypeRule:
    """Value starts with one of ``prefixes``."""
    return TypeRule(lambda _n, v: v.startswith(prefixes), result, f"value starts with {prefixes}")


def enclosed(opener: str, closer: str, result: Result) -> TypeRule:
    """Value starts with ``opener`` and ends with ``closer``."""
    return TypeRule(
        lambda _n, v: len(v) >= 2 and v.startswith(opener) and v.endswith(closer),
        result,
        f"value shaped {opener}...{closer}",
    )


def value_contains(*fragments: str, result: Result) -> TypeRule:
    """Value contains every one of ``fragments``."""
    return TypeRule(lambda _n, v: all(f in v for f in fragments), result, f"value contains {fragments}")


def name_contains(*keywords: str, result: Result) -> TypeRule:
    """Lowercased name contains any of ``keywords``."""
    return TypeRule(lambda n, _v: any(k in n for k in keywords), result, f"name contains {keywords}")


def name_is(*names: str, result: Result) -> TypeRule:
    """Lowercased name equals one of ``names``."""
    options = frozenset(names)
    return TypeRule(lambda n, _v: n in options, result, f"name in {sorted(options)}")


def name_and_value(keyword: str, pattern: Pattern[str], result: Result) -> TypeRule:
    """Name contains ``keyword`` and the value matches ``pattern``."""
    return TypeRule(
        lambda n, v: keyword in n and pattern.search(v) is not None,
        result,
        f"name contains {keyword!r} and value ~ {pattern.pattern}",
    )
