# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for the shared feature model and pattern tables."""

from __future__ import annotations

import numpy as np
import pytest

from domfilter.dom import DomNode
from domfilter.dom.features import NUM_FEATURES, extract_signals, feature_vector, tag_category
from domfilter.dom.patterns import class_id_string, has_data_ad_attr, is_ad_url
from tests._dom_helpers import el


class TestPatterns:
    def test_class_id_string_order(self):
        attrs = {"class": "Foo", "id": "Bar"}
        assert class_id_string(attrs) == "foo bar"
        assert class_id_string(attrs, id_first=True) == "bar foo"

    @pytest.mark.parametrize("key", ["data-ad-slot", "data-ad", "data-tracking-id"])
    def test_data_ad_prefixes(self, key):
        assert has_data_ad_attr({key: "1"})

    def test_data_other_not_ad(self):
        assert not has_data_ad_attr({"data-id": "1", "aria-label": "x"})

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://securepubads.g.doubleclick.net/gampad", True),
            ("https://www.facebook.com/tr?id=1", True),
            ("HTTPS://TPC.GOOGLESYNDICATION.COM/x", True),
            ("https://www.youtube.com/embed/abc", False),
        ],
    )
    def test_is_ad_url(self, url, expected):
        assert is_ad_url(url) is expected


class TestTagCategory:
    @pytest.mark.parametrize(
        ("tag", "code"),
        [
            ("div", 1),
            ("h3", 2),
            ("a", 3),
            ("noscript", 4),
            ("style", 5),
            ("nav", 6),
            ("form", 7),
            ("canvas", 8),
            ("iframe", 9),
            ("footer", 10),
            ("li", 11),
            ("td", 12),
            ("blink", 0),
        ],
    )
    def test_buckets(self, tag, code):
        assert tag_category(tag) == code


class TestExtractSignals:
    def test_link_with_ad_class(self):
        node = el("a", "Click", href="/buy", class_="promo")
        s = extract_signals(node)
        assert s.tag_category == 3
        assert s.has_href
        assert s.has_ad_class
        assert not s.has_tracker_class
        assert s.attr_count == 2
        assert s.text_length == 5
        assert s.own_text_length == 0

    def test_text_node(self):
        s = extract_signals(DomNode.text_node("hello"))
        assert s.is_text
        assert s.own_text_length == 5
        assert s.tag_category == 0

    def test_tracker_class(self):
        s = extract_signals(el("div", class_="analytics-wrapper"))
        assert s.has_tracker_class
        assert not s.has_ad_class

    def test_substring_match_is_loose(self):
        # "masthead" contains "ad"
        assert extract_signals(el("div", class_="masthead")).has_ad_class


class TestFeatureVector:
    def test_shape_and_dtype(self):
        vec = feature_vector(el("div", "hello"))
        assert vec.shape == (NUM_FEATURES,)
        assert vec.dtype == np.float32

    def test_normalization(self):
        node = el("a", "Click", href="/buy", class_="promo")
        vec = feature_vector(node)
        assert vec[0] == pytest.approx(3 / 12)
        assert vec[1] == pytest.approx(2.5 / 50)  # "Click" over 2 nodes
        assert vec[3] == pytest.approx(1 / 20)
        assert vec[4] == 1.0
        assert vec[14] == 1.0
        assert vec[15] == pytest.approx(0.2)

    def test_caps_at_one(self):
        children = [el("li", "x" * 40) for _ in range(30)]
        node = el("ul", *children, **{f"data_{i}": "v" for i in range(12)})
        vec = feature_vector(node)
        assert vec[3] == 1.0
        assert vec[13] == 1.0
        assert vec[15] == 1.0
        assert np.all((vec >= 0.0) & (vec <= 1.0))

    def test_pure(self):
        node = el("div", el("p", "text"), class_="content")
        before = node.classification
        np.testing.assert_array_equal(feature_vector(node), feature_vector(node))
        assert node.classification is before
