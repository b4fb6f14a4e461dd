# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Rule cascade classifier: first match wins.

Algorithm (per node, pre-order):
  1. Text node → Content
  2. Exact tag match (script/style/nav/header/footer/interactive/media/iframe)
  3. class/id ad pattern → Advertisement, else tracker pattern → Tracker
  4. data-ad* / data-tracking* attribute → Advertisement
  5. link density > 0.6 and > 3 direct children → Navigation
  6. text density > 10 → Content
  7. Unknown
"""

from __future__ import annotations

import logging

from domfilter.dom import Classification, DomNode
from domfilter.dom.patterns import (
    AD_PATTERNS,
    INTERACTIVE_TAGS,
    MEDIA_TAGS,
    SCRIPT_TAGS,
    STRUCTURAL_TAGS,
    TRACKER_PATTERNS,
    class_id_string,
    has_data_ad_attr,
    is_ad_url,
    matches_any,
)
from domfilter.engines import FilterStats

logger = logging.getLogger(__name__)

# ---- Density thresholds ----
_NAV_LINK_DENSITY = 0.6
_NAV_MIN_CHILDREN = 3  # strictly more than
_CONTENT_TEXT_DENSITY = 10.0


def _classify_by_tag(node: DomNode) -> Classification | None:
    tag = node.tag
    if tag in SCRIPT_TAGS:
        return Classification.TRACKER
    if tag == "style":
        return Classification.DECORATION
    if tag == "nav":
        return Classification.NAVIGATION
    if tag in STRUCTURAL_TAGS:
        return Classification.STRUCTURAL
    if tag in INTERACTIVE_TAGS:
        return Classification.INTERACTIVE
    if tag in MEDIA_TAGS:
        return Classification.MEDIA
    if tag == "iframe":
        src = node.attr("src")
        if src and is_ad_url(src):
            return Classification.ADVERTISEMENT
        return Classification.MEDIA
    return None


def classify_node(node: DomNode) -> Classification:
    """Classify a single node (children are not visited)."""
    # Rule 1: text nodes are always content
    if node.is_text:
        return Classification.CONTENT

    # Rule 2: tag-based
    by_tag = _classify_by_tag(node)
    if by_tag is not None:
        return by_tag

    # Rule 3: class/id patterns
    combined = class_id_string(node.attributes)
    if matches_any(combined, AD_PATTERNS):
        return Classification.ADVERTISEMENT
    if matches_any(combined, TRACKER_PATTERNS):
        return Classification.TRACKER

    # Rule 4: data attributes that indicate ads
    if has_data_ad_attr(node.attributes):
        return Classification.ADVERTISEMENT

    # Rule 5-6: content density heuristics
    if node.link_density() > _NAV_LINK_DENSITY and len(node.children) > _NAV_MIN_CHILDREN:
        return Classification.NAVIGATION
    if node.text_density() > _CONTENT_TEXT_DENSITY:
        return Classification.CONTENT

    return Classification.UNKNOWN


class RuleCascadeClassifier:
    """Heuristic per-node decision list (the default engine)."""

    name = "rules"

    def classify_tree(self, root: DomNode) -> FilterStats:
        stats = FilterStats()
        for node in root.iter_preorder():
            node.classification = classify_node(node)
            stats.record(node.classification)
        logger.debug(
            "Rule cascade: %d nodes (content=%d ad=%d tracker=%d nav=%d)",
            stats.total_nodes,
            stats.content_nodes,
            stats.ad_nodes,
            stats.tracker_nodes,
            stats.nav_nodes,
        )
        return stats.finalize()
