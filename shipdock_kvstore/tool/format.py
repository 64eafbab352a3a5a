"""Library for formatting command output."""

from abc import ABC, abstractmethod
from collections.abc import Generator
import json
import sys
from typing import Any, TextIO

import yaml

__all__ = [
    "format_columns",
    "PrintFormatter",
    "StructFormatter",
    "YamlFormatter",
    "JsonFormatter",
]

PADDING = 4


def format_columns(
    headers: list[str], rows: list[list[str]]
) -> Generator[str, None, None]:
    """Yield the header and rows padded to the widest value of each column."""
    data = [headers] + rows
    if not headers:
        return
    widths = [max(len(str(row[i])) for row in data) for i in range(len(headers))]
    format_string = "".join(f"{{:{width + PADDING}}}" for width in widths)
    for row in data:
        yield format_string.format(*[str(value) for value in row])


class PrintFormatter:
    """A formatter that prints human readable columns."""

    def __init__(self, keys: list[str]) -> None:
        """Initialize the PrintFormatter with the keys to print as columns."""
        self._keys = keys

    def format(self, data: list[dict[str, Any]]) -> Generator[str, None, None]:
        """Format the rows."""
        rows = [[str(row.get(key, "")) for key in self._keys] for row in data]
        yield from format_columns([key.upper() for key in self._keys], rows)

    def print(self, data: list[dict[str, Any]], file: TextIO | None = None) -> None:
        """Print the rows."""
        for line in self.format(data):
            print(line.rstrip(), file=file)


class StructFormatter(ABC):
    """A formatter that prints whole documents."""

    @abstractmethod
    def print(self, data: list[dict[str, Any]], file: TextIO | None = None) -> None:
        """Print the documents."""


class YamlFormatter(StructFormatter):
    """A formatter that prints one yaml document per entity."""

    def print(self, data: list[dict[str, Any]], file: TextIO | None = None) -> None:
        """Print the documents."""
        print(
            yaml.dump_all(data, sort_keys=False, explicit_start=True),
            end="",
            file=file,
        )


class JsonFormatter(StructFormatter):
    """A formatter that prints a json list of entities."""

    def print(self, data: list[dict[str, Any]], file: TextIO | None = None) -> None:
        """Print the documents."""
        json.dump(data, fp=file or sys.stdout, indent=2, sort_keys=False)
        print(file=file)
