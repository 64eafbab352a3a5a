"""Tests for the format library."""

import io
import json

import yaml

from shipdock_kvstore.tool.format import (
    JsonFormatter,
    PrintFormatter,
    YamlFormatter,
    format_columns,
)


def test_format_columns_empty() -> None:
    """Tests with no rows."""
    assert list(format_columns([], [])) == []


def test_format_columns_empty_rows() -> None:
    """Tests with no rows."""
    assert list(format_columns(["a", "b", "c"], [])) == ["a    b    c    "]


def test_format_columns_rows() -> None:
    """Tests format with normal rows"""
    assert list(
        format_columns(["name", "driver"], [["backend", "overlay"], ["db", "local"]])
    ) == [
        "name       driver     ",
        "backend    overlay    ",
        "db         local      ",
    ]


def test_print_formatter() -> None:
    """Print formatting with empty data."""
    buf = io.StringIO()
    PrintFormatter(["Name"]).print([], file=buf)
    assert buf.getvalue() == "NAME\n"


def test_print_formatter_data() -> None:
    """Print formatting data objects, with missing keys left blank."""
    formatter = PrintFormatter(["Name", "Owner"])
    assert list(
        formatter.format([{"Name": "backend", "Owner": "team-a"}, {"Name": "db"}])
    ) == [
        "NAME       OWNER     ",
        "backend    team-a    ",
        "db                   ",
    ]


def test_yaml_formatter() -> None:
    """Print one yaml document per entity."""
    buf = io.StringIO()
    YamlFormatter().print([{"Name": "a"}, {"Name": "b"}], file=buf)
    assert buf.getvalue().startswith("---\n")
    assert list(yaml.safe_load_all(buf.getvalue())) == [{"Name": "a"}, {"Name": "b"}]


def test_json_formatter() -> None:
    """Print a json list of entities."""
    buf = io.StringIO()
    JsonFormatter().print([{"Name": "a"}], file=buf)
    assert buf.getvalue().endswith("]\n")
    assert json.loads(buf.getvalue()) == [{"Name": "a"}]
