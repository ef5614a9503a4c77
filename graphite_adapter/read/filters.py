# SPDX-License-Identifier: MIT
"""Compile read filters into Graphite target patterns.

Graphite can only select series by name, so the only filters a read accepts
are a single equality or pattern-match constraint on the ``name`` field::

    name="servers.web01.cpu"      -> Equals("servers.web01.cpu")
    name~"servers.*.cpu"          -> Match("servers.*.cpu")

Pattern values are handed to Graphite untouched, so its own wildcard syntax
(``*``, ``{a,b}``, ``[0-9]``, with ``.`` separating path segments) applies.
Anything else, including boolean combinations of valid terms, is rejected
with :class:`~graphite_adapter.errors.InvalidFilterError`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from graphite_adapter.errors import InvalidFilterError, UnknownOptionError
from graphite_adapter.models import TargetPattern

__all__ = [
    "BooleanFilter",
    "Equals",
    "FieldComparison",
    "FilterCompiler",
    "FilterExpression",
    "Match",
    "RECOGNIZED_READ_OPTIONS",
    "parse_filter",
    "to_expression",
    "validate_read_options",
]

NAME_FIELD = "name"

RECOGNIZED_READ_OPTIONS = frozenset({"from", "to", "last", "every", "lag"})

_EQUALS_OPERATORS = frozenset({"=", "=="})
_MATCH_OPERATORS = frozenset({"~", "=~"})

_COMPARISON_RE = re.compile(
    r'^\s*(?P<field>[A-Za-z_][\w.]*)\s*(?P<operator>==|=~|!=|!~|=|~)\s*"(?P<value>(?:[^"\\]|\\.)*)"\s*$'
)


@dataclass(frozen=True)
class FieldComparison:
    """One ``<field> <operator> <value>`` term of a parsed host filter."""

    field: str
    operator: str
    value: Any


@dataclass(frozen=True)
class BooleanFilter:
    """``and``/``or``/``not`` over nested terms, as produced by the host parser."""

    operator: str
    terms: Tuple[Any, ...]


@dataclass(frozen=True)
class Equals:
    value: str


@dataclass(frozen=True)
class Match:
    pattern: str


FilterExpression = Union[Equals, Match]
FilterTree = Union[FieldComparison, BooleanFilter, FilterExpression, str]


def parse_filter(text: str) -> FieldComparison:
    """Parse the textual ``field="value"`` / ``field~"pattern"`` form."""

    matched = _COMPARISON_RE.match(text)
    if matched is None:
        raise InvalidFilterError(f"could not parse {text!r}")
    value = re.sub(r"\\(.)", r"\1", matched.group("value"))
    return FieldComparison(matched.group("field"), matched.group("operator"), value)


def to_expression(tree: Optional[FilterTree]) -> FilterExpression:
    """Reduce a host filter tree to its :data:`FilterExpression` variant."""

    if isinstance(tree, (Equals, Match)):
        node: Any = tree
    elif isinstance(tree, str):
        node = parse_filter(tree)
    else:
        node = tree

    if isinstance(node, Equals):
        if isinstance(node.value, str) and node.value:
            return node
        raise InvalidFilterError("name must be a non-empty string")
    if isinstance(node, Match):
        if isinstance(node.pattern, str) and node.pattern:
            return node
        raise InvalidFilterError("name pattern must be a non-empty string")
    if node is None:
        raise InvalidFilterError("a name filter is required")
    if isinstance(node, BooleanFilter):
        raise InvalidFilterError(f"{node.operator} expressions are not supported")
    if not isinstance(node, FieldComparison):
        raise InvalidFilterError(f"unsupported filter {type(node).__name__}")
    if node.field != NAME_FIELD:
        raise InvalidFilterError(f"cannot filter on field {node.field!r}")
    if not isinstance(node.value, str) or not node.value:
        raise InvalidFilterError("name must be compared against a non-empty string")
    if node.operator in _EQUALS_OPERATORS:
        return Equals(node.value)
    if node.operator in _MATCH_OPERATORS:
        return Match(node.value)
    raise InvalidFilterError(f"operator {node.operator!r} is not supported")


def validate_read_options(options: Mapping[str, Any]) -> Dict[str, Any]:
    """Return *options* keyed by bare option name.

    Hosts may pass names with their command-line dash (``-from``).  The first
    name outside :data:`RECOGNIZED_READ_OPTIONS` is rejected.
    """

    normalized: Dict[str, Any] = {}
    for option, value in options.items():
        name = option.lstrip("-")
        if name not in RECOGNIZED_READ_OPTIONS:
            raise UnknownOptionError(name)
        normalized[name] = value
    return normalized


class FilterCompiler:
    """Validate a read filter and compile it to a store target pattern."""

    def compile(self, tree: Optional[FilterTree]) -> TargetPattern:
        expression = to_expression(tree)
        if isinstance(expression, Equals):
            return TargetPattern(expression.value)
        return TargetPattern(expression.pattern)
