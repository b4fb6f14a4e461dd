# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""8-lane batch classifier: comparison masks and blends, no per-node branches.

Each group of 8 flattened nodes is classified at once: every rule becomes a
lane mask and ``blend(mask, class, previous)`` overwrites earlier results.
Blend order (later wins):

  Unknown → Content (text density > 10) → Structural (header/footer tag)
  → Navigation (link density > 0.6 and child count > 3/32) → Media
  → Interactive → Navigation (nav tag) → Decoration (style)
  → Tracker (tracker class) → Tracker (script) → Advertisement (ad class or data-ad)

This is not the rule cascade's order: header/footer lose to every tag or
class signal here, and ad/tracker class signals beat tag classes.
"""

from __future__ import annotations

import logging

import numpy as np

from domfilter.dom import Classification, DomNode
from domfilter.engines import FilterStats
from domfilter.engines.soa import (
    LANE_WIDTH,
    TAG_FOOTER,
    TAG_HEADER,
    BatchBuffers,
    apply_classifications,
    flatten_tree,
)

logger = logging.getLogger(__name__)

# Thresholds (broadcast across all lanes)
_LINK_DENSITY = np.float32(0.6)
_CHILD_COUNT = np.float32(3.0 / 32.0)  # lanes store child count / 32
_TEXT_DENSITY = np.float32(10.0)
_HALF = np.float32(0.5)

_CONTENT = np.int32(Classification.CONTENT)
_NAVIGATION = np.int32(Classification.NAVIGATION)
_ADVERTISEMENT = np.int32(Classification.ADVERTISEMENT)
_TRACKER = np.int32(Classification.TRACKER)
_DECORATION = np.int32(Classification.DECORATION)
_INTERACTIVE = np.int32(Classification.INTERACTIVE)
_MEDIA = np.int32(Classification.MEDIA)
_STRUCTURAL = np.int32(Classification.STRUCTURAL)
_UNKNOWN = np.int32(Classification.UNKNOWN)


def blend(mask: np.ndarray, value: np.int32, previous: np.ndarray) -> np.ndarray:
    """Lane select: ``value`` where mask is set, ``previous`` elsewhere."""
    return np.where(mask, value, previous).astype(np.int32)


def classify_group(buffers: BatchBuffers, offset: int) -> np.ndarray:
    """Classify lanes ``offset .. offset+LANE_WIDTH`` and return their class indices."""
    lanes = slice(offset, offset + LANE_WIDTH)

    text_density = buffers.text_densities[lanes]
    link_density = buffers.link_densities[lanes]
    child_count = buffers.child_counts[lanes]
    tag_types = buffers.tag_types[lanes]

    result = np.full(LANE_WIDTH, _UNKNOWN, dtype=np.int32)

    result = blend(text_density > _TEXT_DENSITY, _CONTENT, result)

    mask_structural = (tag_types == TAG_HEADER) | (tag_types == TAG_FOOTER)
    result = blend(mask_structural, _STRUCTURAL, result)

    mask_nav_heuristic = (link_density > _LINK_DENSITY) & (child_count > _CHILD_COUNT)
    result = blend(mask_nav_heuristic, _NAVIGATION, result)

    result = blend(buffers.is_media[lanes] > _HALF, _MEDIA, result)
    result = blend(buffers.is_interactive[lanes] > _HALF, _INTERACTIVE, result)
    result = blend(buffers.is_nav[lanes] > _HALF, _NAVIGATION, result)
    result = blend(buffers.is_style[lanes] > _HALF, _DECORATION, result)
    result = blend(buffers.has_tracker_class[lanes] > _HALF, _TRACKER, result)
    result = blend(buffers.is_script[lanes] > _HALF, _TRACKER, result)

    mask_ad = (buffers.has_ad_class[lanes] > _HALF) | (buffers.has_data_ad[lanes] > _HALF)
    return blend(mask_ad, _ADVERTISEMENT, result)


def classify_batch(buffers: BatchBuffers) -> FilterStats:
    """Classify every group in ``buffers`` in place.

    Padding lanes are computed along with their group but never counted.

    Raises:
        BatchShapeError: buffers disagree in length.
    """
    buffers.validate()
    stats = FilterStats()

    for group in range(buffers.group_count()):
        offset = group * LANE_WIDTH
        result = classify_group(buffers, offset)
        buffers.classifications[offset : offset + LANE_WIDTH] = result

        valid = min(buffers.count - offset, LANE_WIDTH)
        for value in result[:valid]:
            stats.record(Classification(int(value)))

    return stats.finalize()


class SimdBatchClassifier:
    """Flatten → 8-lane classify → pre-order write-back."""

    name = "simd"

    def classify_tree(self, root: DomNode) -> FilterStats:
        buffers = flatten_tree(root)
        batch_stats = classify_batch(buffers)
        stats = apply_classifications(root, buffers)
        logger.debug(
            "8-lane batch: %d nodes in %d groups (lane ad=%d tracker=%d, applied ad=%d tracker=%d)",
            buffers.count,
            buffers.group_count(),
            batch_stats.ad_nodes,
            batch_stats.tracker_nodes,
            stats.ad_nodes,
            stats.tracker_nodes,
        )
        return stats
