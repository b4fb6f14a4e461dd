# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Per-node feature model.

One pure extraction (``extract_signals``) feeds every engine: the rule
cascade reads the raw signals, the ternary net reads the normalized
16-slot vector, and the batch engines copy signals into their lanes.

Feature vector layout:
   0: tag category (bucket code / 12)
   1: text density (/ 50, capped at 1)
   2: link density
   3: direct child count (/ 20, capped at 1)
   4: has ad class/id pattern
   5: has tracker class/id pattern
   6: has data-ad* / data-tracking* attribute
   7: is script/noscript
   8: is style
   9: is nav
  10: is interactive (button/input/form/textarea/select)
  11: is media (img/video/audio/picture/canvas)
  12: is text node
  13: collected text length (/ 500, capped at 1)
  14: has href
  15: attribute count (/ 10, capped at 1)
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from domfilter.dom import DomNode
from domfilter.dom.patterns import (
    AD_PATTERNS,
    INTERACTIVE_TAGS,
    MEDIA_TAGS,
    SCRIPT_TAGS,
    TAG_CATEGORIES,
    TAG_CATEGORY_MAX,
    TRACKER_PATTERNS,
    class_id_string,
    has_data_ad_attr,
    matches_any,
)

NUM_FEATURES = 16

_TEXT_DENSITY_SCALE = 50.0
_CHILD_COUNT_SCALE = 20.0
_TEXT_LENGTH_SCALE = 500.0
_ATTR_COUNT_SCALE = 10.0


@dataclass(frozen=True, slots=True)
class NodeSignals:
    """Raw per-node signals, computed from the node's own subtree only."""

    tag: str
    tag_category: int
    text_density: float
    link_density: float
    child_count: int
    has_ad_class: bool
    has_tracker_class: bool
    has_data_ad: bool
    is_script: bool
    is_style: bool
    is_nav: bool
    is_interactive: bool
    is_media: bool
    is_text: bool
    text_length: int  # collected (recursive) text
    own_text_length: int
    has_href: bool
    attr_count: int

    def vector(self) -> np.ndarray:
        """Normalized 16-slot feature vector (float32)."""
        return np.array(
            [
                self.tag_category / TAG_CATEGORY_MAX,
                min(self.text_density / _TEXT_DENSITY_SCALE, 1.0),
                self.link_density,
                min(self.child_count / _CHILD_COUNT_SCALE, 1.0),
                float(self.has_ad_class),
                float(self.has_tracker_class),
                float(self.has_data_ad),
                float(self.is_script),
                float(self.is_style),
                float(self.is_nav),
                float(self.is_interactive),
                float(self.is_media),
                float(self.is_text),
                min(self.text_length / _TEXT_LENGTH_SCALE, 1.0),
                float(self.has_href),
                min(self.attr_count / _ATTR_COUNT_SCALE, 1.0),
            ],
            dtype=np.float32,
        )


def tag_category(tag: str) -> int:
    return TAG_CATEGORIES.get(tag, 0)


def extract_signals(node: DomNode) -> NodeSignals:
    combined = class_id_string(node.attributes)
    tag = node.tag
    return NodeSignals(
        tag=tag,
        tag_category=tag_category(tag),
        text_density=node.text_density(),
        link_density=node.link_density(),
        child_count=len(node.children),
        has_ad_class=matches_any(combined, AD_PATTERNS),
        has_tracker_class=matches_any(combined, TRACKER_PATTERNS),
        has_data_ad=has_data_ad_attr(node.attributes),
        is_script=tag in SCRIPT_TAGS,
        is_style=tag == "style",
        is_nav=tag == "nav",
        is_interactive=tag in INTERACTIVE_TAGS,
        is_media=tag in MEDIA_TAGS,
        is_text=node.is_text,
        text_length=len(node.collect_text()),
        own_text_length=len(node.text),
        has_href="href" in node.attributes,
        attr_count=len(node.attributes),
    )


def feature_vector(node: DomNode) -> np.ndarray:
    return extract_signals(node).vector()
