"""Tests for the query facade."""
import logging

import pytest
from bs4 import BeautifulSoup

import html_query as hq
from html_query.errors import QueryError


PROFILES_HTML = """
<div class="profile-list" id="profiles">
  <div class="profile admin" id="alice" test-role="admin-profile">
    <div class="name">Alice</div>
  </div>
  <div class="profile" id="billy">
    <div class="name">Billy</div>
  </div>
</div>
"""

SELECT_HTML = '<select> <option value="a" selected>apples</option> <option value="b">bananas</option> </select>'


class Markup:
    def __init__(self, html):
        self.html = html

    def __html__(self):
        return self.html


class TestFindAll:
    def test_finds_all_matching_elements_in_document_order(self):
        html = "<div><p>P1</p><section>P2<p>P2 A</p><p>P2 B</p></section><p>P3</p></div>"
        assert [hq.text(p) for p in hq.find_all(html, "p")] == ["P1", "P2 A", "P2 B", "P3"]

    def test_returns_empty_list_when_nothing_is_found(self):
        assert hq.find_all("<div><p>hi</p></div>", "img") == []
        assert hq.find_all("<div><p>hi</p></div>", "glorp") == []

    def test_accepts_strings_or_structured_selectors(self):
        html = '<div><p id="p1" class="para">P1</p><p id="p2" class="para">P2</p></div>'
        for query in ["#p2.para", "[id=p2][class=para]", {"id": "p2", "class": "para"}]:
            matches = hq.find_all(html, query)
            assert [hq.attr(m, "id") for m in matches] == ["p2"]

    def test_two_sibling_divs(self):
        html = "<div>one</div><div>two</div>"
        assert [hq.text(d) for d in hq.find_all(html, "div")] == ["one", "two"]
        assert hq.text(hq.find(html, "div")) == "one"
        with pytest.raises(QueryError):
            hq.find_one(html, "div")

    def test_a_tag_can_match_itself(self):
        form = hq.find_one('<form id="f"><input name="x"></form>', "form")
        assert hq.find_all(form, "form") == [form]
        assert [n.name for n in hq.find_all(form, "form, input")] == ["form", "input"]

    def test_accepts_lists_of_tags(self):
        paragraphs = hq.find_all("<p>a <b>1</b></p><p>b <b>2</b></p>", "p")
        assert [hq.text(b) for b in hq.find_all(paragraphs, "b")] == ["1", "2"]

    def test_accepts_objects_with_dunder_html(self):
        assert hq.text(hq.find(Markup("<p>hi</p>"), "p")) == "hi"

    def test_none_fails_with_a_descriptive_error(self):
        with pytest.raises(QueryError, match="got None"):
            hq.find_all(None, "p")
        with pytest.raises(QueryError):
            hq.find(None, "p")
        with pytest.raises(QueryError):
            hq.find_one(None, "p")

    def test_rejects_unsupported_objects(self):
        with pytest.raises(QueryError):
            hq.find_all(object(), "p")


class TestFind:
    def test_finds_the_first_matching_element(self):
        html = "<div><p>P1</p><p>P2</p><p>P3</p></div>"
        assert hq.text(hq.find(html, "p")) == "P1"
        assert hq.find(html, "glorp") is None

    def test_selected_option(self):
        assert hq.attr(hq.find(SELECT_HTML, "select option[selected]"), "value") == "a"


class TestFindOne:
    HTML = "<p>P1</p>\n<p>P2</p>\n<div>DIV</div>"

    def test_returns_the_only_match(self):
        assert hq.text(hq.find_one(self.HTML, "div")) == "DIV"

    def test_fails_if_no_element_is_found(self):
        with pytest.raises(QueryError) as exc_info:
            hq.find_one(self.HTML, "glorp")
        assert str(exc_info.value) == "Expected a single HTML node but found none\n\nSelector: glorp\n"
        assert exc_info.value.selector == "glorp"
        assert exc_info.value.matches == []

    def test_fails_if_more_than_one_element_is_found(self):
        with pytest.raises(QueryError) as exc_info:
            hq.find_one(self.HTML, "p")
        message = str(exc_info.value)
        assert message.startswith("Expected a single HTML node but got:\n\n<p>\n")
        assert "P1" in message and "P2" in message
        assert message.endswith("\nSelector: p\n")
        assert len(exc_info.value.matches) == 2

    def test_error_shows_the_compiled_selector(self):
        with pytest.raises(QueryError) as exc_info:
            hq.find_one(self.HTML, {"test_role": "missing"})
        assert exc_info.value.selector == "[test-role='missing']"
        assert "Selector: [test-role='missing']" in str(exc_info.value)

    def test_structured_selector(self):
        html = '<div> <a href="/logout" test-role="logout-link">logout</a> </div>'
        assert hq.attr(hq.find_one(html, {"test_role": "logout-link"}), "href") == "/logout"


class TestAttr:
    def test_returns_the_value_of_an_attr(self):
        assert hq.attr(hq.find(PROFILES_HTML, "#alice"), "class") == "profile admin"

    def test_underscores_are_converted_to_dashes(self):
        assert hq.attr(hq.find(PROFILES_HTML, "#alice"), "test_role") == "admin-profile"

    def test_returns_none_if_the_attr_does_not_exist(self):
        assert hq.attr(hq.find(PROFILES_HTML, "#alice"), "foo") is None

    def test_returns_none_for_none(self):
        assert hq.attr(None, "id") is None

    def test_raises_when_given_several_nodes(self):
        with pytest.raises(QueryError) as exc_info:
            hq.attr(hq.find_all(PROFILES_HTML, ".profile"), "id")
        assert "Expected a single HTML node but got:" in str(exc_info.value)
        assert "Consider using [attr(node, 'id') for node in html]" in str(exc_info.value)

    def test_joins_multi_valued_attributes_of_foreign_soups(self):
        soup = BeautifulSoup('<p class="a b">x</p>', "html.parser")
        assert hq.attr(hq.find(soup, "p"), "class") == "a b"


class TestText:
    HTML = "<div>\n  <p>P1</p>\n  <p>P2 <span>a span</span></p>\n  <p>P3</p>\n</div>"

    def test_returns_the_text_of_a_node(self):
        assert hq.text(hq.find(self.HTML, "div")) == "P1 P2 a span P3"

    def test_one_node_at_a_time(self):
        assert [hq.text(p) for p in hq.find_all(self.HTML, "p")] == ["P1", "P2 a span", "P3"]

    def test_raises_when_given_several_nodes(self):
        with pytest.raises(QueryError, match=r"Consider using \[text\(node\) for node in html\]"):
            hq.text(hq.find_all(self.HTML, "p"))

    def test_text_of_a_string(self):
        assert hq.text(SELECT_HTML.replace(" <option", "<option")) == "apples bananas"


def test_meta_tags():
    html = """
    <html lang="en">
      <head>
        <meta charset="utf-8"/>
        <meta http-equiv="X-UA-Compatible" content="IE=edge"/>
        <meta name="viewport" content="width=device-width, initial-scale=1.0"/>
        <title>Title</title>
      </head>
      <body>body</body>
    </html>
    """
    assert hq.meta_tags(html) == [
        {"charset": "utf-8"},
        {"http-equiv": "X-UA-Compatible", "content": "IE=edge"},
        {"name": "viewport", "content": "width=device-width, initial-scale=1.0"},
    ]


class TestNormalize:
    def test_equivalent_markup_normalizes_equal(self):
        a = '<p id="color">green</p>'
        b = '<p  id = "color" >green</p>'
        assert a != b
        assert hq.normalize(a) == hq.normalize(b) == '<p id="color">green</p>'

    def test_accepts_tags(self):
        div = hq.find('<div><span id="foo"> value</span></div>', "div")
        assert hq.normalize(div) == '<div><span id="foo"> value</span></div>'
        assert hq.normalize([div]) == '<div><span id="foo"> value</span></div>'


class TestParse:
    def test_parse_string(self):
        tree = hq.parse("<div>hi</div>")
        assert isinstance(tree, BeautifulSoup)
        assert hq.normalize(tree) == "<div>hi</div>"

    def test_parse_doc_adds_document_structure(self):
        tree = hq.parse_doc("<p>hi</p>")
        assert hq.find(tree, "html body p") is not None

    def test_parsed_trees_are_returned_unchanged(self):
        soup = hq.parse("<div>hi</div>")
        assert hq.parse(soup) is soup
        div = hq.find(soup, "div")
        assert hq.parse(div) == [div]
        assert hq.parse([div]) == [div]

    def test_attributes_are_plain_strings(self):
        assert hq.find('<p class="a b">x</p>', "p")["class"] == "a b"

    def test_parse_object_with_dunder_html(self):
        assert hq.normalize(hq.parse(Markup("<div>hi</div>"))) == "<div>hi</div>"

    def test_parse_rejects_unknown_objects(self):
        with pytest.raises(QueryError):
            hq.parse(42)


class TestPretty:
    def test_pretty_prints_html(self):
        assert hq.pretty('<div id="foo"><span>span!</span></div>').splitlines() == [
            '<div id="foo">',
            " <span>",
            "  span!",
            " </span>",
            "</div>",
        ]

    def test_accepts_lists_of_tags(self):
        nodes = hq.find_all("<p>a</p><p>b</p>", "p")
        assert hq.pretty(nodes).splitlines() == ["<p>", " a", "</p>", "<p>", " b", "</p>"]


def test_inspect_html_logs_and_returns_its_input(caplog):
    html = "<p>hi</p>"
    with caplog.at_level(logging.DEBUG, logger="html_query.query"):
        assert hq.inspect_html(html, "LABEL") is html
    assert "=== LABEL:" in caplog.text
    assert "hi" in caplog.text
