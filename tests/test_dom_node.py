# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for domfilter.dom: taxonomy, node tree, density helpers."""

from __future__ import annotations

import pytest

from domfilter.dom import Classification, DomNode, DomTree, NodeKind
from tests._dom_helpers import el

# ---------------------------------------------------------------------------
# TestClassification
# ---------------------------------------------------------------------------


class TestClassification:
    def test_stable_indices(self):
        assert [c.value for c in Classification] == list(range(9))
        assert Classification.CONTENT == 0
        assert Classification.UNKNOWN == 8

    @pytest.mark.parametrize("idx", [0, 3, 8])
    def test_from_index_in_range(self, idx):
        assert Classification.from_index(idx) == Classification(idx)

    @pytest.mark.parametrize("idx", [9, 42, -1])
    def test_from_index_out_of_range_is_unknown(self, idx):
        assert Classification.from_index(idx) is Classification.UNKNOWN


# ---------------------------------------------------------------------------
# TestConstructors
# ---------------------------------------------------------------------------


class TestConstructors:
    def test_element_defaults_unknown(self):
        node = DomNode.element("div")
        assert node.kind == NodeKind.ELEMENT
        assert node.classification is Classification.UNKNOWN
        assert node.attributes == {}
        assert node.children == []

    def test_text_node_is_content(self):
        node = DomNode.text_node("hi")
        assert node.is_text
        assert node.classification is Classification.CONTENT
        assert node.tag == ""

    def test_text_kind_via_constructor_is_content(self):
        node = DomNode(text="hello", kind=NodeKind.TEXT)
        assert node.classification is Classification.CONTENT

    def test_text_kind_overrides_given_classification(self):
        node = DomNode(text="hello", kind=NodeKind.TEXT, classification=Classification.UNKNOWN)
        assert node.classification is Classification.CONTENT

    def test_document(self):
        doc = DomNode.document([DomNode.element("html")])
        assert doc.kind == NodeKind.DOCUMENT
        assert doc.children[0].tag == "html"

    def test_identity_equality(self):
        assert DomNode.element("div") != DomNode.element("div")

    def test_attr_missing_is_none(self):
        node = el("a", href="/x")
        assert node.attr("href") == "/x"
        assert node.attr("title") is None


# ---------------------------------------------------------------------------
# TestTraversal
# ---------------------------------------------------------------------------


class TestTraversal:
    def test_node_count(self):
        root = el("div", el("p", "a"), el("span", el("b", "c")))
        assert root.node_count() == 6

    def test_preorder(self):
        root = el("div", el("p", "a"), el("span", el("b")))
        tags = [n.tag or "#text" for n in root.iter_preorder()]
        assert tags == ["div", "p", "#text", "span", "b"]

    def test_preorder_deep_tree(self):
        root = DomNode.element("div")
        node = root
        for _ in range(5000):
            child = DomNode.element("div")
            node.children.append(child)
            node = child
        assert sum(1 for _ in root.iter_preorder()) == 5001

    def test_node_count_deep_tree(self):
        root = DomNode.element("div")
        node = root
        for _ in range(5000):
            child = DomNode.element("div")
            node.children.append(child)
            node = child
        assert root.node_count() == 5001


# ---------------------------------------------------------------------------
# TestCollectText
# ---------------------------------------------------------------------------


class TestCollectText:
    def test_trim_and_join(self):
        root = el("div", "  Hello ", el("span", "world  "))
        assert root.collect_text() == "Hello world"

    def test_empty(self):
        assert el("div").collect_text() == ""

    def test_leading_blank_run_adds_no_space(self):
        root = el("div", "   ", "a")
        assert root.collect_text() == "a"

    def test_unicode_counts_characters(self):
        root = el("p", "café")
        assert len(root.collect_text()) == 4


# ---------------------------------------------------------------------------
# TestDensities
# ---------------------------------------------------------------------------


class TestDensities:
    def test_text_density(self):
        # "hello" over div + text node
        assert el("div", "hello").text_density() == pytest.approx(2.5)

    def test_text_density_empty(self):
        assert el("div").text_density() == 0.0

    def test_link_density(self):
        root = el("div", el("a", "Home"), el("a", "About"), "xx")
        # "Home About xx" = 13 chars, 9 under direct links
        assert root.link_density() == pytest.approx(9 / 13)

    def test_link_density_ignores_nested_links(self):
        root = el("div", el("p", el("a", "link text")))
        assert root.link_density() == 0.0

    def test_link_density_no_text(self):
        assert el("div", el("a")).link_density() == 0.0


# ---------------------------------------------------------------------------
# TestVisibilityAndStats
# ---------------------------------------------------------------------------


class TestVisibilityAndStats:
    @pytest.mark.parametrize(
        ("cls", "visible"),
        [
            (Classification.ADVERTISEMENT, False),
            (Classification.TRACKER, False),
            (Classification.NAVIGATION, True),
            (Classification.UNKNOWN, True),
        ],
    )
    def test_is_visible(self, cls, visible):
        node = DomNode.element("div")
        node.classification = cls
        assert node.is_visible() is visible

    def test_classification_stats(self):
        root = el("div", "a", el("p", "b"))
        root.classification = Classification.STRUCTURAL
        t = DomTree(root=root, url="u", title="t")
        stats = t.classification_stats()
        assert stats[Classification.CONTENT] == 2
        assert stats[Classification.STRUCTURAL] == 1
        assert stats[Classification.UNKNOWN] == 1
