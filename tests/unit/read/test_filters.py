from __future__ import annotations

import pytest

from graphite_adapter.errors import FILTER_SHAPE_MESSAGE, InvalidFilterError, UnknownOptionError
from graphite_adapter.read.filters import (
    BooleanFilter,
    Equals,
    FieldComparison,
    FilterCompiler,
    Match,
    parse_filter,
    to_expression,
    validate_read_options,
)


@pytest.fixture
def compiler() -> FilterCompiler:
    return FilterCompiler()


def test_parse_filter_equality() -> None:
    assert parse_filter('name="servers.web01.cpu"') == FieldComparison("name", "=", "servers.web01.cpu")


def test_parse_filter_pattern_with_spaces() -> None:
    assert parse_filter(' name ~ "servers.*.cpu" ') == FieldComparison("name", "~", "servers.*.cpu")


def test_parse_filter_unescapes_quotes() -> None:
    assert parse_filter(r'name="a\"b"').value == 'a"b'


@pytest.mark.parametrize(
    ("tree", "expected"),
    [
        ('name="metric.does.not.exist"', Equals("metric.does.not.exist")),
        ('name=="metric"', Equals("metric")),
        ('name~"metric.region2.*"', Match("metric.region2.*")),
        ('name=~"metric.{a,b}"', Match("metric.{a,b}")),
        (FieldComparison("name", "=", "cpu"), Equals("cpu")),
        (Match("servers.*"), Match("servers.*")),
    ],
)
def test_to_expression_accepts_name_constraints(tree: object, expected: object) -> None:
    assert to_expression(tree) == expected  # type: ignore[arg-type]


def test_compile_passes_values_through(compiler: FilterCompiler) -> None:
    assert compiler.compile('name="servers.web01.cpu"') == "servers.web01.cpu"
    assert compiler.compile('name~"servers.*.{cpu,mem}"') == "servers.*.{cpu,mem}"


@pytest.mark.parametrize(
    "tree",
    [
        'badfield="metric.does.not.exist"',
        'name!="metric"',
        'name!~"metric.*"',
        'name=""',
        "name=metric",
        'name="a" and name="b"',
        "",
        None,
        FieldComparison("name", "=", 42),
        FieldComparison("name", ">", "x"),
        FieldComparison("host", "=", "web01"),
        BooleanFilter("and", (FieldComparison("name", "=", "a"), FieldComparison("name", "=", "b"))),
        BooleanFilter("not", (FieldComparison("name", "=", "a"),)),
        Equals(""),
        42,
    ],
)
def test_compile_rejects_other_shapes(compiler: FilterCompiler, tree: object) -> None:
    with pytest.raises(InvalidFilterError) as excinfo:
        compiler.compile(tree)  # type: ignore[arg-type]
    assert 'filter expression must match: name="XXX"/name~"X.*"' in str(excinfo.value)
    assert excinfo.value.code == "INVALID-FILTER"


def test_filter_message_names_both_shapes() -> None:
    assert 'name="XXX"' in FILTER_SHAPE_MESSAGE
    assert 'name~"X.*"' in FILTER_SHAPE_MESSAGE


def test_validate_read_options_strips_dashes() -> None:
    options = validate_read_options({"-from": "1 minute ago", "to": "now", "-every": "2s"})
    assert options == {"from": "1 minute ago", "to": "now", "every": "2s"}


def test_validate_read_options_names_unknown_option() -> None:
    with pytest.raises(UnknownOptionError) as excinfo:
        validate_read_options({"from": "1 minute ago", "-unknown": "bananas"})
    assert "unknown read-graphite option unknown" in str(excinfo.value)
    assert excinfo.value.option == "unknown"
    assert excinfo.value.code == "UNKNOWN-OPTION"
