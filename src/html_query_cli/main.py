"""html-query CLI: run html_query against HTML files."""
from __future__ import annotations

import json
import logging
import sys
from dataclasses import replace
from typing import Any

import click

import html_query as hq
from html_query.logging import configure_logging
from html_query.table import ALL
from html_query_cli.config import CLIConfig

logger = logging.getLogger(__name__)


def _load_html(ctx: click.Context, source, document: bool) -> Any:
    cfg: CLIConfig = ctx.obj
    content = source.read()
    logger.debug("cli.read source=%s chars=%d", getattr(source, "name", "-"), len(content))
    if document:
        return hq.parse_doc(content, cfg.settings())
    return hq.parse(content, cfg.settings())


def _echo_json(ctx: click.Context, value: Any) -> None:
    cfg: CLIConfig = ctx.obj
    click.echo(json.dumps(value, indent=cfg.indent or None, ensure_ascii=False))


def _fail(exc: Exception) -> None:
    click.echo(f"Error: {exc}", err=True)
    sys.exit(1)


def _column(value: str) -> int | str:
    return int(value) if value.isdecimal() else value


def _column_spec(values: tuple[str, ...]) -> Any:
    if len(values) == 1:
        return _column(values[0])
    return [_column(v) for v in values]


# ---------------------------------------------------------------------------
# CLI root
# ---------------------------------------------------------------------------

@click.group()
@click.option("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR")
@click.option("--json-logs/--plain-logs", default=None, help="Log records as JSON lines")
@click.pass_context
def cli(ctx, log_level, json_logs):
    """html-query: extract elements, form fields and tables from HTML."""
    try:
        cfg = CLIConfig.load()
        if log_level:
            cfg = replace(cfg, log_level=log_level.upper())
        if json_logs is not None:
            cfg = replace(cfg, json_logs=json_logs)
        configure_logging(cfg.log_level, cfg.json_logs)
    except ValueError as exc:
        _fail(exc)
    ctx.obj = cfg


# ---------------------------------------------------------------------------
# Query commands
# ---------------------------------------------------------------------------

@cli.command("select")
@click.argument("source", type=click.File("r"))
@click.argument("selector")
@click.option("--attr", "attr_name", default=None, help="Print this attribute instead of the text")
@click.option("--document", is_flag=True, help="Parse SOURCE as a full document")
@click.pass_context
def select(ctx, source, selector, attr_name, document):
    """Print the text (or an attribute) of every node matching SELECTOR."""
    try:
        html = _load_html(ctx, source, document)
        for node in hq.find_all(html, selector):
            value = hq.attr(node, attr_name) if attr_name else hq.text(node)
            click.echo("" if value is None else value)
    except hq.HtmlQueryError as exc:
        _fail(exc)


@cli.command("form")
@click.argument("source", type=click.File("r"))
@click.option("--selector", default=None, help="Only read the fields inside this (single) element")
@click.option("--document", is_flag=True, help="Parse SOURCE as a full document")
@click.pass_context
def form(ctx, source, selector, document):
    """Print the form fields in SOURCE as JSON."""
    try:
        html = _load_html(ctx, source, document)
        scope = hq.find_one(html, selector) if selector else html
        _echo_json(ctx, hq.form_fields(scope))
    except hq.HtmlQueryError as exc:
        _fail(exc)


@cli.command("table")
@click.argument("source", type=click.File("r"))
@click.option("--selector", default=None, help="The (single) table to extract")
@click.option("--as", "as_", type=click.Choice(["lists", "maps"]), default="lists", show_default=True)
@click.option("--only", multiple=True, help="Column index or header text to keep (repeatable)")
@click.option("--except", "except_", multiple=True, help="Column index or header text to drop (repeatable)")
@click.option("--headers/--no-headers", default=True, help="Include the header row in list output")
@click.option("--document", is_flag=True, help="Parse SOURCE as a full document")
@click.pass_context
def table(ctx, source, selector, as_, only, except_, headers, document):
    """Print the table in SOURCE as JSON."""
    try:
        html = _load_html(ctx, source, document)
        scope = hq.find_one(html, selector) if selector else html
        result = hq.table(
            scope,
            as_=as_,
            only=_column_spec(only) if only else ALL,
            except_=_column_spec(except_) if except_ else None,
            headers=headers,
        )
        _echo_json(ctx, result)
    except hq.HtmlQueryError as exc:
        _fail(exc)


@cli.command("meta")
@click.argument("source", type=click.File("r"))
@click.pass_context
def meta(ctx, source):
    """Print the attributes of every meta tag as JSON."""
    try:
        _echo_json(ctx, hq.meta_tags(_load_html(ctx, source, True)))
    except hq.HtmlQueryError as exc:
        _fail(exc)


@cli.command("pretty")
@click.argument("source", type=click.File("r"))
@click.option("--document", is_flag=True, help="Parse SOURCE as a full document")
@click.pass_context
def pretty(ctx, source, document):
    """Pretty-print SOURCE."""
    try:
        click.echo(hq.pretty(_load_html(ctx, source, document)), nl=False)
    except hq.HtmlQueryError as exc:
        _fail(exc)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
