"""Tests for selector parsing, specificity and matching."""
from __future__ import annotations

import lxml.html
import pytest
from cssselect import SelectorError

from css_inliner.models import INLINE_SPECIFICITY, Specificity
from css_inliner.selectors import calculate_specificity, compile_selector, is_dynamic, parse_selector


# ---------------------------------------------------------------------------
# Specificity
# ---------------------------------------------------------------------------


class TestSpecificity:
    @pytest.mark.parametrize(
        "selector, expected",
        [
            ("*", Specificity(0, 0, 0)),
            ("p", Specificity(0, 0, 1)),
            ("div p", Specificity(0, 0, 2)),
            ("p.foo", Specificity(0, 1, 1)),
            (".a.b", Specificity(0, 2, 0)),
            ("#foo", Specificity(1, 0, 0)),
            ("p#x", Specificity(1, 0, 1)),
            ("a[href]", Specificity(0, 1, 1)),
            ("#nav > ul li.item a", Specificity(1, 1, 3)),
            ("h1 + p ~ span", Specificity(0, 0, 3)),
        ],
    )
    def test_counts(self, selector: str, expected: Specificity) -> None:
        assert calculate_specificity(selector) == expected

    def test_pseudo_classes_are_not_counted(self) -> None:
        assert calculate_specificity("a:hover") == Specificity(0, 0, 1)
        assert calculate_specificity("p::first-line") == Specificity(0, 0, 1)

    def test_clamped_at_nine(self) -> None:
        selector = "".join(f".c{i}" for i in range(12))
        assert calculate_specificity(selector) == Specificity(0, 9, 0)
        assert Specificity.clamped(15, 3, 10) == Specificity(9, 3, 9)

    def test_ordering(self) -> None:
        ids = calculate_specificity("#foo")
        classes = calculate_specificity("p.foo")
        types = calculate_specificity("div p")
        assert ids > classes > types

    def test_inline_outranks_every_selector(self) -> None:
        assert INLINE_SPECIFICITY > calculate_specificity("#a#b#c .x.y.z a b c")

    def test_str(self) -> None:
        assert str(Specificity(1, 2, 3)) == "123"


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


class TestParseSelector:
    @pytest.mark.parametrize("selector", ["p", "div > p.note", "#main .x", "h1 + p", "*"])
    def test_static(self, selector: str) -> None:
        assert not is_dynamic(selector)

    @pytest.mark.parametrize(
        "selector",
        ["a:hover", "li:first-child", "p::before", "p:not(.x)", "input:checked", "a:nth-child(2n)"],
    )
    def test_pseudo_is_dynamic(self, selector: str) -> None:
        parsed = parse_selector(selector)
        assert parsed.has_pseudo
        assert parsed.is_dynamic

    @pytest.mark.parametrize("selector", ["[checked]", "input[type=radio]", "a[href^='http']"])
    def test_attribute_is_dynamic(self, selector: str) -> None:
        parsed = parse_selector(selector)
        assert parsed.has_attribute
        assert not parsed.has_pseudo
        assert parsed.is_dynamic

    @pytest.mark.parametrize("selector", ["p..x", "a >", "###"])
    def test_unparseable_is_invalid(self, selector: str) -> None:
        parsed = parse_selector(selector)
        assert not parsed.valid
        assert parsed.is_dynamic

    def test_strips_whitespace(self) -> None:
        assert parse_selector("  p.x  ").text == "p.x"

    def test_cached(self) -> None:
        assert parse_selector("ul li") is parse_selector("ul li")


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------


def _find(root, element_id: str):
    return root.get_element_by_id(element_id)


class TestCompileSelector:
    @pytest.fixture
    def tree(self):
        return lxml.html.fragment_fromstring(
            """
            <div id="outer" class="box">
              <h1 id="title">Title</h1>
              <p id="first" class="note lead">One</p>
              <p id="second">Two</p>
              <section><p id="nested">Three</p></section>
            </div>
            """.strip()
        )

    def test_type(self, tree) -> None:
        match = compile_selector("p")
        assert match(_find(tree, "first"))
        assert not match(_find(tree, "title"))

    def test_class_and_id(self, tree) -> None:
        assert compile_selector("p.note")(_find(tree, "first"))
        assert compile_selector(".lead.note")(_find(tree, "first"))
        assert not compile_selector("p.note")(_find(tree, "second"))
        assert compile_selector("#second")(_find(tree, "second"))

    def test_descendant(self, tree) -> None:
        match = compile_selector("div.box p")
        assert match(_find(tree, "nested"))
        assert match(_find(tree, "first"))

    def test_child(self, tree) -> None:
        match = compile_selector("div > p")
        assert match(_find(tree, "first"))
        assert not match(_find(tree, "nested"))

    def test_adjacent_sibling(self, tree) -> None:
        match = compile_selector("h1 + p")
        assert match(_find(tree, "first"))
        assert not match(_find(tree, "second"))

    def test_general_sibling(self, tree) -> None:
        match = compile_selector("h1 ~ p")
        assert match(_find(tree, "first"))
        assert match(_find(tree, "second"))
        assert not match(_find(tree, "nested"))

    def test_chained_combinators(self, tree) -> None:
        match = compile_selector("#outer section > p")
        assert match(_find(tree, "nested"))
        assert not match(_find(tree, "first"))

    def test_type_is_case_insensitive(self, tree) -> None:
        assert compile_selector("P")(_find(tree, "first"))

    def test_invalid_raises(self) -> None:
        with pytest.raises(SelectorError):
            compile_selector("p..x")
