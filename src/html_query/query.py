"""Query parsed HTML with CSS selectors.

BeautifulSoup does the parsing and soupsieve does the matching; this module
normalizes the many shapes HTML can arrive in (string, document, tag, list of
tags) and defines the "exactly one result" contract of ``find_one``.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable

import soupsieve
from bs4 import BeautifulSoup, Tag

from html_query.config import DEFAULT_SETTINGS, Settings
from html_query.css import dasherize, selector as compile_selector
from html_query.errors import QueryError

logger = logging.getLogger(__name__)


def parse(html: Any, settings: Settings = DEFAULT_SETTINGS) -> BeautifulSoup | list[Tag]:
    """Parse an HTML fragment. Already-parsed trees are returned unchanged."""
    if html is None:
        raise QueryError("Expected HTML to query but got None")
    if isinstance(html, str):
        return BeautifulSoup(html, settings.fragment_parser, multi_valued_attributes=None)
    if isinstance(html, BeautifulSoup):
        return html
    if isinstance(html, Tag):
        return [html]
    if isinstance(html, (list, tuple)):
        return _tags(html)
    if hasattr(html, "__html__"):
        return parse(html.__html__(), settings)
    raise QueryError(f"Expected {html!r} to be an HTML string, tag or list of tags")


def parse_doc(html: Any, settings: Settings = DEFAULT_SETTINGS) -> BeautifulSoup | list[Tag]:
    """Parse a complete HTML document, adding html/head/body as a browser would."""
    if isinstance(html, str):
        return BeautifulSoup(html, settings.document_parser, multi_valued_attributes=None)
    if hasattr(html, "__html__") and not isinstance(html, Tag):
        return parse_doc(html.__html__(), settings)
    return parse(html, settings)


def find_all(html: Any, selector: Any) -> list[Tag]:
    """Return every node matching ``selector``, in document order.

    When ``html`` is a tag (or list of tags) the tags themselves may match,
    not only their descendants.
    """
    css = compile_selector(selector)
    tree = parse(html)
    if isinstance(tree, BeautifulSoup):
        matches = tree.select(css)
    else:
        compiled = soupsieve.compile(css)
        matches = []
        for root in tree:
            if compiled.match(root):
                matches.append(root)
            matches.extend(compiled.select(root))
    logger.debug("query.find_all selector=%r matches=%d", css, len(matches))
    return matches


def find(html: Any, selector: Any) -> Tag | None:
    """Return the first node matching ``selector``, or None."""
    matches = find_all(html, selector)
    return matches[0] if matches else None


def find_one(html: Any, selector: Any) -> Tag:
    """Return the only node matching ``selector``.

    Raises QueryError when nothing matches or when more than one node does.
    """
    css = compile_selector(selector)
    matches = find_all(html, css)
    if not matches:
        raise QueryError(
            f"Expected a single HTML node but found none\n\nSelector: {css}\n",
            selector=css,
        )
    if len(matches) > 1:
        raise QueryError(
            f"Expected a single HTML node but got:\n\n{pretty(matches)}\nSelector: {css}\n",
            selector=css,
            matches=matches,
        )
    return matches[0]


def attr(html: Any, name: Any) -> str | None:
    """Return attribute ``name`` of a single node, or None if it is absent.

    Underscores in ``name`` are converted to dashes, so ``test_role`` reads
    the ``test-role`` attribute.
    """
    if html is None:
        return None
    node = _single(html, f"Consider using [attr(node, {dasherize(name)!r}) for node in html]")
    value = node.get(dasherize(name))
    if isinstance(value, list):
        return " ".join(value)
    return value


def text(html: Any, settings: Settings = DEFAULT_SETTINGS) -> str:
    """Return the trimmed text of a single node, text runs joined by spaces."""
    node = _single(html, "Consider using [text(node) for node in html]")
    return node_text(node, settings)


def node_text(node: Tag | BeautifulSoup, settings: Settings = DEFAULT_SETTINGS) -> str:
    return node.get_text(settings.text_separator, strip=True)


def meta_tags(html: Any) -> list[dict[str, str]]:
    """Return the attributes of every ``<meta>`` tag."""
    return [dict(node.attrs) for node in find_all(html, "meta")]


def normalize(html: Any) -> str:
    """Parse and re-serialize ``html`` so that equivalent markup compares equal."""
    tree = parse(html)
    if isinstance(tree, BeautifulSoup):
        return tree.decode()
    return "".join(node.decode() for node in tree)


def pretty(html: Any) -> str:
    """Render ``html`` indented, one tag or text run per line."""
    tree = parse(html)
    if isinstance(tree, BeautifulSoup):
        return tree.prettify()
    return "".join(node.prettify() for node in tree)


def inspect_html(html: Any, label: str = "INSPECTED HTML") -> Any:
    """Log the pretty-printed ``html`` under ``label`` and return ``html`` unchanged."""
    logger.debug("=== %s:\n\n%s", label, pretty(html))
    return html


def _tags(nodes: Iterable[Any]) -> list[Tag]:
    tags = []
    for node in nodes:
        if isinstance(node, BeautifulSoup):
            tags.extend(child for child in node.children if isinstance(child, Tag))
        elif isinstance(node, Tag):
            tags.append(node)
        elif isinstance(node, str) and not node.strip():
            continue
        else:
            raise QueryError(f"Expected {node!r} to be an HTML tag")
    return tags


def _single(html: Any, hint: str) -> Tag:
    tree = parse(html)
    if isinstance(tree, BeautifulSoup):
        nodes = [child for child in tree.children if isinstance(child, Tag)]
    else:
        nodes = tree
    if not nodes:
        raise QueryError("Expected a single HTML node but found none")
    if len(nodes) > 1:
        raise QueryError(f"Expected a single HTML node but got:\n\n{pretty(nodes)}\n{hint}\n", matches=nodes)
    return nodes[0]
