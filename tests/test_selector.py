from __future__ import annotations

import unittest

from justquery import Document, SelectorError, matches, parse_markup
from justquery.node import ElementNode, TextNode
from justquery.selector import (
    AttributePredicate,
    SelectorMatcher,
    SelectorStep,
    SelectorTokenizer,
    TokenType,
    parse_selector,
    select,
)

HTML = """
<div id="main" class="page wide">
  <ul class="nav">
    <li class="item first"><a href="/" rel="home nofollow" lang="en-US">Home</a></li>
    <li class="item"><a href="/docs" lang="en">Docs</a></li>
    <li class="item last"><a href="/fr" lang="fr" title="">Accueil</a></li>
  </ul>
  <p id="intro" class="lead">Hello <span class="em">there</span></p>
  <div class="inner"><p class="lead">Nested</p></div>
</div>
"""


class TestTokenizer(unittest.TestCase):
    def test_token_stream(self) -> None:
        tokens = SelectorTokenizer("DIV#a.b[c~='d e'] span").tokenize()
        assert [(t.type, t.value) for t in tokens] == [
            (TokenType.TAG, "div"),
            (TokenType.ID, "a"),
            (TokenType.CLASS, "b"),
            (TokenType.ATTR_START, None),
            (TokenType.ATTR_NAME, "c"),
            (TokenType.ATTR_OP, "~="),
            (TokenType.STRING, "d e"),
            (TokenType.ATTR_END, None),
            (TokenType.COMBINATOR, " "),
            (TokenType.TAG, "span"),
            (TokenType.EOF, None),
        ]

    def test_compound_step_does_not_absorb_attribute(self) -> None:
        tokens = SelectorTokenizer("a.x[href=y]").tokenize()
        assert [t.type for t in tokens] == [
            TokenType.TAG,
            TokenType.CLASS,
            TokenType.ATTR_START,
            TokenType.ATTR_NAME,
            TokenType.ATTR_OP,
            TokenType.STRING,
            TokenType.ATTR_END,
            TokenType.EOF,
        ]
        assert tokens[1].value == "x"

    def test_escaped_quote_in_string(self) -> None:
        tokens = SelectorTokenizer(r'[title="a \"b\""]').tokenize()
        assert tokens[3].value == 'a "b"'

    def test_whitespace_inside_brackets_is_not_a_step_boundary(self) -> None:
        tokens = SelectorTokenizer("[ lang |= en ]").tokenize()
        assert TokenType.COMBINATOR not in [t.type for t in tokens]


class TestParseSelector(unittest.TestCase):
    def test_empty_selector_has_no_steps(self) -> None:
        assert parse_selector("") == []
        assert parse_selector("   ") == []

    def test_compound_step(self) -> None:
        steps = parse_selector("a.x.y#i[href|=en][title]")
        assert len(steps) == 1
        step = steps[0]
        assert step.tag == "a"
        assert step.id == "i"
        assert step.classes == ["x", "y"]
        assert step.attributes == [AttributePredicate("href", "|=", "en"), AttributePredicate("title")]

    def test_descendant_steps(self) -> None:
        steps = parse_selector("  div  .a   [b] ")
        assert [(s.tag, s.classes, len(s.attributes)) for s in steps] == [("div", [], 0), ("", ["a"], 0), ("", [], 1)]

    def test_universal_is_wildcard(self) -> None:
        assert parse_selector("*.a")[0].tag == ""

    def test_duplicate_classes_collapse(self) -> None:
        assert parse_selector(".a.b.a")[0].classes == ["a", "b"]

    def test_repeated_identical_id_is_allowed(self) -> None:
        assert parse_selector("#a#a")[0].id == "a"

    def test_invalid_selectors(self) -> None:
        for selector in (
            "div > p",
            "h1 + p",
            "h1 ~ p",
            "a, b",
            "a:hover",
            "[x",
            "[x^=y]",
            "[x='unterminated]",
            "[=y]",
            "#",
            ".",
            "#a#b",
            "p*",
        ):
            with self.assertRaises(SelectorError, msg=selector):
                parse_selector(selector)

    def test_selector_error_is_value_error(self) -> None:
        assert issubclass(SelectorError, ValueError)


class TestMatcher(unittest.TestCase):
    def setUp(self) -> None:
        self.matcher = SelectorMatcher()
        self.node = ElementNode("a", {"class": "x  y x", "lang": "en-US", "rel": "home nofollow", "title": ""})

    def _step(self, selector: str) -> SelectorStep:
        return parse_selector(selector)[0]

    def test_tag_and_wildcard(self) -> None:
        assert self.matcher.matches_step(self.node, self._step("a"))
        assert self.matcher.matches_step(self.node, self._step("*"))
        assert not self.matcher.matches_step(self.node, self._step("p"))

    def test_classes_are_a_superset_test(self) -> None:
        assert self.matcher.matches_step(self.node, self._step(".x"))
        assert self.matcher.matches_step(self.node, self._step(".y.x"))
        assert not self.matcher.matches_step(self.node, self._step(".x.z"))

    def test_presence(self) -> None:
        assert self.matcher.matches_step(self.node, self._step("[title]"))
        assert not self.matcher.matches_step(self.node, self._step("[href]"))

    def test_exact(self) -> None:
        assert self.matcher.matches_step(self.node, self._step("[lang=en-US]"))
        assert not self.matcher.matches_step(self.node, self._step("[lang=en]"))
        assert self.matcher.matches_step(self.node, self._step('[title=""]'))

    def test_word_match(self) -> None:
        assert self.matcher.matches_step(self.node, self._step("[rel~=nofollow]"))
        assert not self.matcher.matches_step(self.node, self._step("[rel~=follow]"))
        assert not self.matcher.matches_step(self.node, self._step("[rel~='home nofollow']"))

    def test_prefix_match(self) -> None:
        assert self.matcher.matches_step(self.node, self._step("[lang|=en]"))
        assert self.matcher.matches_step(self.node, self._step("[lang|=en-US]"))
        assert not self.matcher.matches_step(self.node, self._step("[lang|=e]"))

    def test_attribute_names_are_case_insensitive(self) -> None:
        node = ElementNode("p", {"Data-X": "1"})
        assert self.matcher.matches_step(node, self._step("[data-x=1]"))
        assert self.matcher.matches_step(node, self._step("[DATA-X]"))

    def test_text_nodes_never_match(self) -> None:
        assert not self.matcher.matches_step(TextNode("a"), self._step("*"))

    def test_id(self) -> None:
        node = ElementNode("p", {"id": "intro"})
        assert self.matcher.matches_step(node, self._step("#intro"))
        assert not self.matcher.matches_step(node, self._step("#other"))
        assert not self.matcher.matches_step(self.node, self._step("#intro"))


class TestSelect(unittest.TestCase):
    def setUp(self) -> None:
        self.root = parse_markup(HTML)

    def _select(self, selector: str, match_self: bool = False) -> list:
        return select([self.root], selector, match_self=match_self)

    def test_id_and_class_selection(self) -> None:
        div = parse_markup('<div><p id="x">hi</p><p class="y">bye</p></div>')
        assert [n.text_content for n in select([div], "p#x")] == ["hi"]
        assert [n.text_content for n in select([div], "p.y")] == ["bye"]
        assert select([div], "span") == []

    def test_empty_selector_selects_nothing(self) -> None:
        assert self._select("") == []

    def test_descendants_only(self) -> None:
        assert self._select("#main") == []
        assert [n.name for n in self._select("div")] == ["div"]

    def test_document_order(self) -> None:
        assert [n.text_content for n in self._select("li a")] == ["Home", "Docs", "Accueil"]

    def test_compound_selector(self) -> None:
        assert [n.text_content for n in self._select("li.item a[lang|=en]")] == ["Home", "Docs"]
        assert [n.text_content for n in self._select("a[rel~=nofollow]")] == ["Home"]
        assert [n.text_content for n in self._select("li.item.last a")] == ["Accueil"]
        assert [n.text_content for n in self._select("a[title]")] == ["Accueil"]

    def test_descendant_chain(self) -> None:
        assert [n.text_content for n in self._select(".inner .lead")] == ["Nested"]
        assert [n.text_content for n in self._select("p.lead span")] == ["there"]

    def test_id_with_descendant(self) -> None:
        assert [n.name for n in self._select("#intro .em")] == ["span"]

    def test_no_match_is_empty_not_error(self) -> None:
        assert self._select("table td") == []
        assert self._select("ul nosuch li") == []

    def test_match_self_filters_working_set(self) -> None:
        items = self._select("li")
        assert len(items) == 3
        assert select(items, "li", match_self=True) == items
        assert [n.get_attribute("class") for n in select(items, ".first", match_self=True)] == ["item first"]
        assert select(items, "a", match_self=True) == []

    def test_nested_working_set_concatenates_heaps(self) -> None:
        doc = Document("<div><div><p>x</p></div></div>")
        found = select([doc.root], "div p")
        assert len(found) == 2
        assert found[0] is found[1]

    def test_text_nodes_in_working_set_are_skipped(self) -> None:
        assert select([TextNode("x")], "p") == []
        assert select([TextNode("x")], "p", match_self=True) == []

    def test_invalid_selector_raises(self) -> None:
        with self.assertRaises(SelectorError):
            self._select("ul > li")

    def test_matches_helper(self) -> None:
        p = self._select("#intro")[0]
        assert matches(p, "p.lead")
        assert matches(p, "#intro[id]")
        assert not matches(p, "div")


if __name__ == "__main__":
    unittest.main()
