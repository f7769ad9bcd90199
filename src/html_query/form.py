"""Materialize form fields the way a browser would submit them.

Every ``input``, ``select`` and ``textarea`` carrying a ``name`` is visited
once in document order. Each element is classified into a ``FieldKind``,
turned into at most one ``Contribution`` and folded into a nested dict keyed
by the field name (dashes turned into underscores, brackets expanded).

A few HTML idioms get special treatment:

* checkboxes named ``tags[]`` collect every checked value into a list;
* other checkboxes and radios keep the value of the last checked element,
  or None when nothing is checked;
* a hidden input sharing its name with a checkbox or radio is the value used
  when the checkbox/radio is unchecked, the usual "always submit a boolean"
  trick;
* disabled elements are skipped, except selects, which resolve to None (or
  an empty list when ``multiple``).
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable

from bs4 import Tag

from html_query.errors import MergeConflict
from html_query.query import find_all, node_text

logger = logging.getLogger(__name__)

FIELD_SELECTOR = "input[name], select[name], textarea[name]"
INPUT_TAG_SELECTOR = "input, select, textarea"

# Input types that are never part of the submitted data set.
NON_VALUE_INPUT_TYPES = frozenset({"submit", "button", "reset"})

DEFAULT_CHECKBOX_VALUE = "on"

_MISSING = object()


class FieldKind(enum.Enum):
    TEXT = "text"
    HIDDEN = "hidden"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    SELECT = "select"
    MULTI_SELECT = "multi_select"
    TEXTAREA = "textarea"
    UNSUPPORTED = "unsupported"


class Merge(enum.Enum):
    SET = "set"  # last one wins
    FALLBACK = "fallback"  # hidden companion of a checkbox/radio
    DEFAULT = "default"  # only if nothing is there yet
    APPEND = "append"


@dataclass(frozen=True)
class Contribution:
    path: tuple[str, ...]
    value: Any
    merge: Merge
    is_list: bool = False


def classify(node: Tag) -> FieldKind:
    if node.name == "input":
        input_type = (node.get("type") or "text").strip().lower()
        if input_type == "checkbox":
            return FieldKind.CHECKBOX
        if input_type == "radio":
            return FieldKind.RADIO
        if input_type == "hidden":
            return FieldKind.HIDDEN
        if input_type in NON_VALUE_INPUT_TYPES:
            return FieldKind.UNSUPPORTED
        return FieldKind.TEXT
    if node.name == "select":
        return FieldKind.MULTI_SELECT if node.has_attr("multiple") else FieldKind.SELECT
    if node.name == "textarea":
        return FieldKind.TEXTAREA
    return FieldKind.UNSUPPORTED


def parse_name(name: str) -> tuple[tuple[str, ...], bool]:
    """Split a field name into its path segments.

    ``"person[home-address][city]"`` becomes ``(("person", "home_address",
    "city"), False)``. A trailing ``[]`` marks a list-valued field and is not
    part of the path. Names that are not well-formed bracket expressions are
    kept whole.
    """
    key = name.replace("-", "_")
    head, bracket, _ = key.partition("[")
    if not bracket or not head:
        return (key,), False

    segments = [head]
    is_list = False
    pos = len(head)
    while pos < len(key):
        if key[pos] != "[":
            return (key,), False
        close = key.find("]", pos)
        if close == -1:
            return (key,), False
        segment = key[pos + 1:close]
        if "[" in segment:
            return (key,), False
        pos = close + 1
        if segment:
            segments.append(segment)
        elif pos == len(key):
            is_list = True
        else:
            return (key,), False
    return tuple(segments), is_list


def insert_field(
    fields: dict[str, Any],
    path: tuple[str, ...],
    combine: Callable[[Any], Any],
    _prefix: tuple[str, ...] = (),
) -> tuple[str, ...] | None:
    """Store ``combine(existing)`` at ``path``, creating nested dicts on demand.

    ``existing`` is ``_MISSING`` when nothing is stored yet; ``combine`` may
    return ``_MISSING`` to leave the field untouched. Returns None on success,
    or the path of the existing entry that conflicts with ``path``.
    """
    head, rest = path[0], path[1:]
    here = _prefix + (head,)
    existing = fields.get(head, _MISSING)

    if rest:
        if existing is _MISSING:
            existing = fields[head] = {}
        elif not isinstance(existing, dict):
            return here
        return insert_field(existing, rest, combine, here)

    if isinstance(existing, dict):
        return here
    value = combine(existing)
    if value is not _MISSING:
        fields[head] = value
    return None


def merge_value(contribution: Contribution, existing: Any, provisional: bool) -> Any:
    """Combine a contribution with the value already stored at its path.

    ``provisional`` is true when the stored value is only a hidden fallback
    or an unchecked default, which any real value replaces.
    """
    value, is_list = contribution.value, contribution.is_list

    if contribution.merge is Merge.SET:
        return value
    if contribution.merge is Merge.FALLBACK:
        if existing is _MISSING or provisional:
            return [value] if is_list else value
        return _MISSING
    if contribution.merge is Merge.DEFAULT:
        if existing is _MISSING:
            return [] if is_list else None
        return _MISSING

    if existing is _MISSING or provisional:
        return [value]
    if isinstance(existing, list):
        return existing + [value]
    return [existing, value]


class FieldCollector:
    """Folds contributions into a nested field dict."""

    def __init__(self) -> None:
        self.fields: dict[str, Any] = {}
        self._provisional: set[tuple[str, ...]] = set()

    def add(self, contribution: Contribution) -> None:
        path = contribution.path
        provisional = path in self._provisional
        written = []

        def combine(existing: Any) -> Any:
            value = merge_value(contribution, existing, provisional)
            written.append(value is not _MISSING)
            return value

        conflict = insert_field(self.fields, path, combine)
        if conflict is not None:
            raise MergeConflict(conflict, path)
        if not any(written):
            return
        if contribution.merge in (Merge.FALLBACK, Merge.DEFAULT):
            self._provisional.add(path)
        else:
            self._provisional.discard(path)


def form_fields(html: Any) -> dict[str, Any]:
    """Return the fields of the form(s) in ``html`` as a nested dict.

    >>> form_fields('<input name="person[name]" value="Alice"><input type="checkbox" name="tags[]" value="a" checked>')
    {'person': {'name': 'Alice'}, 'tags': ['a']}
    """
    nodes = find_all(html, FIELD_SELECTOR)
    paired = {
        _unwrapped_name(node["name"])
        for node in nodes
        if classify(node) in (FieldKind.CHECKBOX, FieldKind.RADIO)
    }

    collector = FieldCollector()
    for node in nodes:
        contribution = field_contribution(node, classify(node), paired)
        if contribution is not None:
            collector.add(contribution)

    logger.debug("form.fields elements=%d keys=%d", len(nodes), len(collector.fields))
    return collector.fields


def field_contribution(node: Tag, kind: FieldKind, paired: set[str] | frozenset[str] = frozenset()) -> Contribution | None:
    """Work out what a single element submits, if anything."""
    name = node["name"]
    if not name:
        return None
    path, is_list = parse_name(name)
    disabled = node.has_attr("disabled")

    if kind is FieldKind.HIDDEN and _unwrapped_name(name) in paired:
        value = node.get("value")
        if value is None:
            return None
        return Contribution(path, value, Merge.FALLBACK, is_list)

    if disabled and kind is FieldKind.SELECT:
        return Contribution(path, None, Merge.SET)
    if disabled and kind is FieldKind.MULTI_SELECT:
        return Contribution(path, [], Merge.SET)

    if disabled or kind is FieldKind.UNSUPPORTED:
        return None

    if kind in (FieldKind.TEXT, FieldKind.HIDDEN):
        value = node.get("value")
        if value is None:
            return None
        return Contribution(path, value, Merge.APPEND if is_list else Merge.SET, is_list)

    if kind is FieldKind.CHECKBOX:
        checked = node.has_attr("checked")
        value = node.get("value", DEFAULT_CHECKBOX_VALUE)
        if is_list:
            return Contribution(path, value, Merge.APPEND, True) if checked else Contribution(path, None, Merge.DEFAULT, True)
        return Contribution(path, value, Merge.SET) if checked else Contribution(path, None, Merge.DEFAULT)

    if kind is FieldKind.RADIO:
        if node.has_attr("checked"):
            return Contribution(path, node.get("value", DEFAULT_CHECKBOX_VALUE), Merge.SET)
        return Contribution(path, None, Merge.DEFAULT)

    if kind is FieldKind.SELECT:
        selected = _selected_options(node)
        value = option_value(selected[-1]) if selected else None
        return Contribution(path, value, Merge.SET)

    if kind is FieldKind.MULTI_SELECT:
        return Contribution(path, [option_value(option) for option in _selected_options(node)], Merge.SET)

    if kind is FieldKind.TEXTAREA:
        return Contribution(path, node.get_text().strip(), Merge.SET)

    return None


def option_value(option: Tag) -> str:
    value = option.get("value")
    if value is not None:
        return value
    return node_text(option)


def input_tags(html: Any) -> list[tuple[str, dict[str, Any]]]:
    """List every form control in ``html`` with its attributes.

    Textareas get their content under ``"@content"``; selects get their
    options, each in the same ``(tag, attrs)`` shape, under ``"options"``.
    """
    tags = []
    for node in find_all(html, INPUT_TAG_SELECTOR):
        attrs: dict[str, Any] = dict(node.attrs)
        if node.name == "textarea":
            attrs["@content"] = node.get_text().strip()
        elif node.name == "select":
            attrs["options"] = [
                ("option", {**option.attrs, "@content": node_text(option)})
                for option in find_all(node, "option")
            ]
        tags.append((node.name, attrs))
    return tags


def _selected_options(select: Tag) -> list[Tag]:
    return [option for option in find_all(select, "option[selected]") if not option.has_attr("disabled")]


def _unwrapped_name(name: str) -> str:
    return name[:-2] if name.endswith("[]") else name
