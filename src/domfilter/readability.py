# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Readability-style content promotion.

Scores element subtrees by text length, text density, link density, tag
semantics and class/id keyword hints. The single highest-scoring element
(if it clears the threshold) is promoted: it and every descendant still
Unknown become Content. Already-classified nodes keep their class.
"""

from __future__ import annotations

import logging
import math

from domfilter.dom import Classification, DomNode, NodeKind
from domfilter.dom.patterns import class_id_string

logger = logging.getLogger(__name__)

# ---- Scoring constants ----
MIN_SCORE = 5.0  # best node must score strictly above this
_MIN_TEXT_LEN = 25  # below this the node scores -1
_LOG_LEN_CAP = 8.0
_TEXT_DENSITY_CAP = 50.0
_TEXT_DENSITY_WEIGHT = 0.3
_LINK_DENSITY_PENALTY = 25.0
_KEYWORD_WEIGHT = 8.0
_PARAGRAPH_BONUS = 2.0

_TAG_BONUS: dict[str, float] = {
    "article": 10.0,
    "main": 10.0,
    "section": 5.0,
    "p": 3.0,
    "blockquote": 3.0,
    "pre": 3.0,
    "div": 1.0,
    "nav": -10.0,
    "aside": -10.0,
    "footer": -5.0,
    "header": -5.0,
    "form": -5.0,
}

_CLASSIFICATION_BONUS: dict[Classification, float] = {
    Classification.CONTENT: 5.0,
    Classification.NAVIGATION: -8.0,
    Classification.STRUCTURAL: -3.0,
}

POSITIVE_KEYWORDS: tuple[str, ...] = ("content", "article", "post", "entry", "main-text", "body-text")
NEGATIVE_KEYWORDS: tuple[str, ...] = (
    "sidebar",
    "nav",
    "menu",
    "comment",
    "footer",
    "header",
    "ad",
    "social",
    "share",
    "widget",
)


def score_node(node: DomNode) -> float:
    """Content-richness score for one element node."""
    text_len = len(node.collect_text())
    if text_len < _MIN_TEXT_LEN:
        return -1.0

    score = min(math.log(max(text_len, 1)), _LOG_LEN_CAP)
    score += min(node.text_density(), _TEXT_DENSITY_CAP) * _TEXT_DENSITY_WEIGHT
    score -= node.link_density() * _LINK_DENSITY_PENALTY
    score += _TAG_BONUS.get(node.tag, 0.0)
    score += _CLASSIFICATION_BONUS.get(node.classification, 0.0)

    # Each keyword counts once, however often it appears
    id_class = class_id_string(node.attributes, id_first=True)
    score += _KEYWORD_WEIGHT * sum(kw in id_class for kw in POSITIVE_KEYWORDS)
    score -= _KEYWORD_WEIGHT * sum(kw in id_class for kw in NEGATIVE_KEYWORDS)

    score += _PARAGRAPH_BONUS * sum(1 for child in node.children if child.tag == "p")
    return score


def find_best_node(root: DomNode, threshold: float = MIN_SCORE) -> tuple[DomNode | None, float]:
    """Highest-scoring element in pre-order; first one wins a tie.

    Returns ``(None, threshold)`` when no element scores strictly above ``threshold``.
    """
    best: DomNode | None = None
    best_score = threshold
    for node in root.iter_preorder():
        if node.kind != NodeKind.ELEMENT:
            continue
        score = score_node(node)
        if score > best_score:
            best, best_score = node, score
    return best, best_score


def mark_content(node: DomNode) -> int:
    """Promote ``node`` and its still-Unknown descendants to Content; return how many changed."""
    promoted = 0
    for n in node.iter_preorder():
        if n.classification == Classification.UNKNOWN:
            n.classification = Classification.CONTENT
            promoted += 1
    return promoted


def readability_boost(root: DomNode) -> DomNode | None:
    """Promote the most content-rich subtree of ``root``.

    The root itself is a candidate. When it scores best, every still-Unknown
    node of the whole tree becomes Content, rather than the pass being
    skipped as it would be if only proper descendants of the root competed.

    Returns:
        The promoted node, or None when nothing cleared the threshold.
    """
    best, best_score = find_best_node(root)
    if best is None:
        logger.debug("Readability: no node above %.1f", MIN_SCORE)
        return None

    promoted = mark_content(best)
    logger.debug("Readability: promoted <%s> (score=%.2f, %d nodes)", best.tag, best_score, promoted)
    return best
