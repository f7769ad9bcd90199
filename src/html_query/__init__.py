"""Query HTML and pull structured data out of it.

The main query functions are:

* ``find_all(html, selector)``: every node matching ``selector``
* ``find(html, selector)``: the first matching node, or None
* ``find_one(html, selector)``: the only matching node; raises QueryError
  when none or several match

Selectors are CSS strings or plain data structures, see ``html_query.css``.
``form_fields`` and ``table`` turn forms and tables into dicts and lists.

    >>> import html_query as hq
    >>> html = '<select><option value="a" selected>apples</option><option value="b">bananas</option></select>'
    >>> hq.attr(hq.find(html, "select option[selected]"), "value")
    'a'
    >>> hq.text(hq.find_one(html, {"option": {"value": "b"}}))
    'bananas'
"""
from __future__ import annotations

from html_query.css import selector
from html_query.errors import HtmlQueryError, InvalidOption, MergeConflict, QueryError, UnknownColumn
from html_query.form import form_fields, input_tags
from html_query.query import (
    attr,
    find,
    find_all,
    find_one,
    inspect_html,
    meta_tags,
    normalize,
    parse,
    parse_doc,
    pretty,
    text,
)
from html_query.table import table

__version__ = "0.1.0"

__all__ = [
    "HtmlQueryError",
    "InvalidOption",
    "MergeConflict",
    "QueryError",
    "UnknownColumn",
    "attr",
    "find",
    "find_all",
    "find_one",
    "form_fields",
    "input_tags",
    "inspect_html",
    "meta_tags",
    "normalize",
    "parse",
    "parse_doc",
    "pretty",
    "selector",
    "table",
    "text",
]
