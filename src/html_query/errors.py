"""Exceptions raised by html_query.

All of them signal malformed input or a programming error on the caller's
side; none is transient.
"""
from __future__ import annotations

import json
from typing import Any, Sequence


class HtmlQueryError(RuntimeError):
    """Base class for every error raised by html_query."""


class QueryError(HtmlQueryError):
    """A query did not match exactly one node, or was given no HTML at all."""

    def __init__(self, message: str, *, selector: str | None = None, matches: Sequence[Any] = ()):
        super().__init__(message)
        self.selector = selector
        self.matches = list(matches)


class MergeConflict(HtmlQueryError):
    """A form field path is used both as a value and as a nested namespace."""

    def __init__(self, existing_path: Sequence[str], new_path: Sequence[str]):
        self.existing_path = tuple(existing_path)
        self.new_path = tuple(new_path)
        super().__init__(
            f"Form field {_render_path(self.new_path)} conflicts with "
            f"existing field {_render_path(self.existing_path)}"
        )


class UnknownColumn(HtmlQueryError):
    """A named table column is not present in the header row."""

    def __init__(self, column: str, known_columns: Sequence[Any]):
        self.column = column
        self.known_columns = list(known_columns)
        super().__init__(
            f"Column {json.dumps(column, ensure_ascii=False)} not present in:\n"
            f"{json.dumps(self.known_columns, ensure_ascii=False)}"
        )


class InvalidOption(HtmlQueryError, ValueError):
    """An option or selector description has an unsupported value."""

    def __init__(self, option: str, value: Any, expected: str):
        self.option = option
        self.value = value
        super().__init__(f"Invalid value for {option}: {value!r} (expected {expected})")


def _render_path(path: Sequence[str]) -> str:
    if not path:
        return "''"
    head, *rest = path
    return "'" + head + "".join(f"[{segment}]" for segment in rest) + "'"
