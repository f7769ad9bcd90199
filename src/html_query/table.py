"""Extract the contents of HTML tables.

The first row is the header row. Cells spanning several columns are followed
by ``None`` placeholders so that column indices line up across rows. Cells
with no text fall back to the value of the single form control they contain,
which makes tables of inputs (inline editing, admin screens) readable.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, Sequence, Union

from bs4 import Tag

from html_query.errors import InvalidOption, UnknownColumn
from html_query.form import form_fields
from html_query.query import find_all, node_text

logger = logging.getLogger(__name__)

ALL = "all"
OUTPUT_FORMATS = ("lists", "maps")
CELL_TAGS = ("td", "th")
MAX_COLSPAN = 1000

ColumnSpec = Union[str, int, Sequence[Union[str, int]]]


def table(
    html: Any,
    *,
    as_: str = "lists",
    only: ColumnSpec = ALL,
    except_: ColumnSpec | None = None,
    headers: bool = True,
    update: Callable[[Any], Any] | None = None,
    columns: ColumnSpec | None = None,
) -> list:
    """Return the cells of the table in ``html``.

    ``as_="lists"`` (the default) returns rows of cell values, header row
    first unless ``headers=False``. ``as_="maps"`` returns one dict per body
    row keyed by header text. Columns under the placeholder slots of a
    colspan header cell have no text to key by and are left out.

    ``only`` and ``except_`` select columns by zero-based index or by header
    text; ``only`` keeps its order and duplicates. When both are a single
    column rather than a list and one column remains, the rows are flattened
    into a single list of values. ``columns`` is an alias for ``only``.

    ``update`` is applied to every cell value (header included) before the
    result is assembled.
    """
    if columns is not None:
        if only != ALL:
            raise InvalidOption("columns", columns, "either 'columns' or 'only', not both")
        only = columns
    return extract_rows(
        find_all(html, "tr"),
        as_=as_,
        only=only,
        except_=except_,
        headers=headers,
        update=update,
    )


def extract_rows(
    rows: Sequence[Tag],
    *,
    as_: str = "lists",
    only: ColumnSpec = ALL,
    except_: ColumnSpec | None = None,
    headers: bool = True,
    update: Callable[[Any], Any] | None = None,
) -> list:
    if as_ not in OUTPUT_FORMATS:
        raise InvalidOption("as", as_, " or ".join(repr(f) for f in OUTPUT_FORMATS))
    if not isinstance(headers, bool):
        raise InvalidOption("headers", headers, "True or False")
    if update is not None and not callable(update):
        raise InvalidOption("update", update, "a callable")
    if not rows:
        return []

    values = [[None if cell is None else cell_value(cell) for cell in expand_row(row)] for row in rows]
    header_names = values[0]

    indices = resolve_columns(only, header_names, "only")
    if except_ is not None:
        excluded = set(resolve_columns(except_, header_names, "except"))
        indices = [i for i in indices if i not in excluded]
    flatten = _is_single(only) and (except_ is None or _is_single(except_)) and len(indices) == 1

    if update is not None:
        values = [[None if value is None else update(value) for value in row] for row in values]
    header, body = values[0], values[1:]

    logger.debug("table.extracted rows=%d columns=%d as=%s", len(body), len(indices), as_)

    if as_ == "maps":
        # colspan placeholders in the header row name no column
        keyed = [i for i in indices if i < len(header) and header[i] is not None]
        keys = _select(header, keyed)
        return [dict(zip(keys, _select(row, keyed))) for row in body]

    included = [header] + body if headers else body
    selected = [_select(row, indices) for row in included]
    if flatten:
        return [row[0] for row in selected]
    return selected


def expand_row(row: Tag) -> list[Tag | None]:
    """Return the row's cells, each followed by a None per extra column it spans."""
    slots: list[Tag | None] = []
    for cell in row.find_all(CELL_TAGS, recursive=False):
        slots.append(cell)
        slots.extend([None] * (colspan(cell) - 1))
    return slots


def colspan(cell: Tag) -> int:
    try:
        span = int(str(cell.get("colspan", "1")).strip())
    except ValueError:
        return 1
    return min(max(span, 1), MAX_COLSPAN)


def cell_value(cell: Tag) -> str:
    """The cell's text, or the value of the one form field inside it."""
    value = node_text(cell)
    if value:
        return value
    fields = form_fields(cell)
    if len(fields) == 1:
        return display_value(next(iter(fields.values())))
    return ""


def display_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def resolve_columns(spec: ColumnSpec, header_names: Sequence[Any], option: str) -> list[int]:
    """Turn a column spec into a list of column indices."""
    if isinstance(spec, str) and spec == ALL:
        return list(range(len(header_names)))

    items = spec if isinstance(spec, (list, tuple)) else [spec]
    indices = []
    for item in items:
        if isinstance(item, bool) or not isinstance(item, (int, str)):
            raise InvalidOption(option, item, "a column index or header name")
        if isinstance(item, int):
            if item < 0:
                raise InvalidOption(option, item, "a non-negative column index")
            indices.append(item)
        elif item in header_names:
            indices.append(header_names.index(item))
        else:
            raise UnknownColumn(item, header_names)
    return indices


def _is_single(spec: ColumnSpec) -> bool:
    return not isinstance(spec, (list, tuple)) and spec != ALL


def _select(row: Sequence[Any], indices: Sequence[int]) -> list:
    return [row[i] if i < len(row) else None for i in indices]
