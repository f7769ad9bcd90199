"""Build CSS selector strings from plain Python data.

``selector`` accepts a string (returned as is), a bare element name, an
attribute pair, a dict of attribute pairs, or a list mixing all of these:

    >>> selector("p.profile")
    'p.profile'
    >>> selector({"test_role": "new-members"})
    "[test-role='new-members']"
    >>> selector({"p": {"class": "profile", "test_role": "new-members"}})
    "p[class='profile'][test-role='new-members']"
    >>> selector([{"p": {"id": "blue", "data_favorite": True}}, "div", {"class": "tag", "hidden": False}])
    "p[id='blue'][data-favorite] div [class='tag']"

Attribute names are dasherized (``test_role`` -> ``test-role``). A value of
``True`` renders a presence test, ``False`` or ``None`` renders nothing, and a
list or dict value turns the key into an element name followed by the nested
attribute selectors. Entries of a list are combined as descendants.

The structured syntax only ever produces ``[attr='value']`` selectors, never
``~=`` or other combinators. Write a string when you need those. Quotes in
attribute values are not escaped.
"""
from __future__ import annotations

import enum
import re
from typing import Any, Mapping

from html_query.errors import InvalidOption

_WHITESPACE = re.compile(r"\s+")


def selector(description: Any) -> str:
    """Compile ``description`` into a CSS selector string."""
    if isinstance(description, str):
        return description
    if isinstance(description, (list, tuple, Mapping)):
        return squish(_reduce(description))
    return squish(_atom(description))


def squish(value: str) -> str:
    """Collapse whitespace runs into single spaces and trim."""
    return _WHITESPACE.sub(" ", value).strip()


def dasherize(name: Any) -> str:
    return _atom(name).replace("_", "-")


def _reduce(description: Any) -> str:
    if _is_pair(description):
        return _pair(description[0], description[1])
    if isinstance(description, tuple):
        raise InvalidOption("selector", description, "a (name, value) pair")
    if isinstance(description, Mapping):
        return "".join(_pair(key, value) for key, value in description.items())
    if isinstance(description, list):
        return "".join(_entry(entry) for entry in description)
    return f" {_atom(description)} "


def _entry(entry: Any) -> str:
    if isinstance(entry, (list, Mapping)):
        return f" {_reduce(entry)} "
    return _reduce(entry)


def _pair(key: Any, value: Any) -> str:
    name = dasherize(key)
    if value is True:
        return f"[{name}]"
    if value is False or value is None:
        return ""
    if isinstance(value, (list, tuple, Mapping)):
        return f" {name}{_reduce(value)}"
    return f"[{name}='{_atom(value)}']"


def _is_pair(value: Any) -> bool:
    return isinstance(value, tuple) and len(value) == 2 and not isinstance(value[0], (list, tuple, Mapping))


def _atom(value: Any) -> str:
    if value is None:
        raise InvalidOption("selector", value, "a string, element name, pair, dict or list")
    if isinstance(value, enum.Enum):
        return str(value.value)
    return str(value)
