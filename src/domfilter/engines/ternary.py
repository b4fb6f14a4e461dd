# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Ternary neural network node classifier.

Architecture: 16 features → 32 hidden (ReLU) → 9 classes (argmax).
All weights are {-1, 0, +1}; inference only adds and subtracts inputs
selected by weight sign, it never multiplies.

Hidden units are organized in groups of 4, one group per class:
  H0-H3 Content, H4-H7 Navigation, H8-H11 Advertisement, H12-H15 Tracker,
  H16-H19 Decoration, H20-H23 Interactive, H24-H27 Media, H28-H31 Structural.
Unknown (output 8) has no incoming weights.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from domfilter.dom import Classification, DomNode
from domfilter.dom.features import NUM_FEATURES, feature_vector
from domfilter.engines import FilterStats
from domfilter.errors import WeightShapeError

logger = logging.getLogger(__name__)

HIDDEN_SIZE = 32
NUM_CLASSES = 9
GROUP_SIZE = 4

# fmt: off
# Columns: tag, txt_dens, link_dens, children, ad_cls, trk_cls, data_ad, script,
#          style, nav, interactive, media, is_text, txt_len, href, attrs
LAYER1_WEIGHTS: tuple[tuple[int, ...], ...] = (
    # Content
    (0,  1,  0,  0, -1, -1,  0, -1,  0,  0,  0,  0,  0,  1,  0,  0),  # H0
    (0,  0,  0,  0,  0,  0,  0,  0,  0,  0,  0,  0,  1,  1,  0,  0),  # H1
    (0,  1, -1,  0,  0,  0,  0,  0,  0,  0,  0,  0,  0,  0,  0,  0),  # H2
    (0,  1,  0,  0, -1, -1,  0, -1,  0,  0,  0,  0,  1,  0,  0,  0),  # H3
    # Navigation
    (0,  0,  1,  0,  0,  0,  0,  0,  0,  1,  0,  0,  0,  0,  0,  0),  # H4
    (0, -1,  1,  1,  0,  0,  0,  0,  0,  0,  0,  0,  0,  0,  0,  0),  # H5
    (0,  0,  0,  0,  0,  0,  0,  0,  0,  1,  0,  0,  0,  0,  0,  0),  # H6
    (0,  0,  1,  0,  0,  0,  0,  0,  0,  0,  0,  0,  0,  0,  1,  0),  # H7
    # Advertisement
    (0,  0,  0,  0,  1,  0,  1,  0,  0,  0,  0,  0,  0,  0,  0,  0),  # H8
    (0,  0,  0,  0,  1,  0,  0,  0,  0,  0,  0,  0,  0,  0,  0,  0),  # H9
    (0, -1,  0,  0,  0,  0,  1,  0,  0,  0,  0,  0,  0,  0,  0,  0),  # H10
    (0,  0,  0,  0,  1,  0,  1,  0,  0,  0,  0,  0, -1,  0,  0,  0),  # H11
    # Tracker
    (0,  0,  0,  0,  0,  1,  0,  1,  0,  0,  0,  0,  0,  0,  0,  0),  # H12
    (0,  0,  0,  0,  0,  0,  0,  1,  0,  0,  0,  0,  0,  0,  0,  0),  # H13
    (0,  0,  0,  0,  0,  1,  0,  0,  0,  0,  0,  0,  0,  0,  0,  0),  # H14
    (0, -1,  0,  0,  0,  1,  0,  1,  0,  0,  0,  0,  0,  0,  0,  0),  # H15
    # Decoration
    (0,  0,  0,  0,  0,  0,  0,  0,  1,  0,  0,  0,  0,  0,  0,  0),  # H16
    (0, -1,  0,  0,  0,  0,  0,  0,  1,  0,  0,  0,  0,  0,  0,  0),  # H17
    (0,  0,  0,  0,  0,  0,  0,  0,  1,  0,  0,  0,  0,  0,  0,  0),  # H18
    (0,  0,  0,  0,  0,  0,  0,  0,  1,  0,  0,  0,  0,  0,  0,  0),  # H19
    # Interactive
    (0,  0,  0,  0,  0,  0,  0,  0,  0,  0,  1,  0,  0,  0,  0,  0),  # H20
    (0,  0,  0,  0,  0,  0,  0,  0,  0,  0,  1,  0,  0,  0,  0,  0),  # H21
    (0,  0,  0,  0,  0,  0,  0,  0,  0,  0,  1, -1,  0,  0,  0,  0),  # H22
    (0,  0,  0,  0,  0,  0,  0,  0,  0,  0,  1,  0,  0,  0,  0,  0),  # H23
    # Media
    (0,  0,  0,  0,  0,  0,  0,  0,  0,  0,  0,  1,  0,  0,  0,  0),  # H24
    (0,  0,  0,  0,  0,  0,  0,  0,  0,  0, -1,  1,  0,  0,  0,  0),  # H25
    (0,  0,  0,  0,  0,  0,  0,  0,  0,  0,  0,  1,  0,  0,  0,  0),  # H26
    (0,  0,  0,  0,  0,  0,  0,  0,  0,  0,  0,  1,  0,  0,  0,  0),  # H27
    # Structural
    (1,  0,  0,  0,  0,  0,  0, -1,  0, -1,  0,  0,  0,  0,  0,  0),  # H28
    (1,  0,  0,  0,  0,  0,  0,  0,  0,  0, -1, -1,  0,  0,  0,  0),  # H29
    (1,  0,  0,  1,  0,  0,  0,  0,  0,  0,  0,  0,  0,  0,  0,  0),  # H30
    (1,  0,  0,  0,  0,  0,  0,  0,  0,  0,  0,  0,  0,  0,  0,  1),  # H31
)

# Each output sums its own 4-unit group
LAYER2_WEIGHTS: tuple[tuple[int, ...], ...] = (
    (1, 1, 1, 1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0),  # Content
    (0, 0, 0, 0, 1, 1, 1, 1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0),  # Navigation
    (0, 0, 0, 0, 0, 0, 0, 0, 1, 1, 1, 1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0),  # Advertisement
    (0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 1, 1, 1, 1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0),  # Tracker
    (0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 1, 1, 1, 1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0),  # Decoration
    (0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 1, 1, 1, 1, 0, 0, 0, 0, 0, 0, 0, 0),  # Interactive
    (0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 1, 1, 1, 1, 0, 0, 0, 0),  # Media
    (0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 1, 1, 1, 1),  # Structural
    (0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0),  # Unknown
)
# fmt: on


class TernaryWeight:
    """Immutable rows×cols matrix restricted to {-1, 0, +1}.

    Stores the sign masks once so matvec can select inputs instead of
    multiplying them.
    """

    __slots__ = ("rows", "cols", "_values", "_plus", "_minus")

    def __init__(self, values: Sequence[Sequence[int]] | np.ndarray) -> None:
        raw = np.asarray(values)
        if raw.ndim != 2:
            raise WeightShapeError(f"Ternary weights must be 2-D, got shape {raw.shape}")
        if not np.isin(raw, (-1, 0, 1)).all():
            raise WeightShapeError("Ternary weights must be in {-1, 0, 1}")
        arr = raw.astype(np.int8)
        arr.setflags(write=False)
        self.rows, self.cols = arr.shape
        self._values = arr
        self._plus = arr == 1
        self._minus = arr == -1

    @property
    def values(self) -> np.ndarray:
        return self._values

    @property
    def plus(self) -> np.ndarray:
        return self._plus

    @property
    def minus(self) -> np.ndarray:
        return self._minus


def ternary_matvec(x: np.ndarray, weights: TernaryWeight) -> np.ndarray:
    """out[r] = Σ x[c] where w[r,c] = +1  −  Σ x[c] where w[r,c] = −1.

    An all-zero row selects nothing on either side and yields exactly 0.
    """
    x = np.asarray(x, dtype=np.float32)
    if x.shape != (weights.cols,):
        raise WeightShapeError(f"Input length {x.shape} does not match weight columns {weights.cols}")
    added = np.where(weights.plus, x, np.float32(0.0)).sum(axis=1, dtype=np.float32)
    subtracted = np.where(weights.minus, x, np.float32(0.0)).sum(axis=1, dtype=np.float32)
    return added - subtracted


def argmax_lowest(values: np.ndarray) -> int:
    """Index of the maximum; ties go to the lowest index."""
    return int(np.argmax(values))


class TernaryNetClassifier:
    """Fixed-weight 16→32→9 network over the shared feature vector."""

    name = "ternary"

    def __init__(self) -> None:
        self.layer1 = TernaryWeight(LAYER1_WEIGHTS)
        self.layer2 = TernaryWeight(LAYER2_WEIGHTS)
        if (self.layer1.rows, self.layer1.cols) != (HIDDEN_SIZE, NUM_FEATURES):
            raise WeightShapeError(f"Layer 1 must be {HIDDEN_SIZE}x{NUM_FEATURES}")
        if (self.layer2.rows, self.layer2.cols) != (NUM_CLASSES, HIDDEN_SIZE):
            raise WeightShapeError(f"Layer 2 must be {NUM_CLASSES}x{HIDDEN_SIZE}")

    def forward(self, features: np.ndarray) -> np.ndarray:
        """Raw 9-way output scores for one feature vector."""
        hidden = np.maximum(ternary_matvec(features, self.layer1), np.float32(0.0))
        return ternary_matvec(hidden, self.layer2)

    def classify(self, node: DomNode) -> Classification:
        # Text nodes skip inference
        if node.is_text:
            return Classification.CONTENT
        output = self.forward(feature_vector(node))
        return Classification.from_index(argmax_lowest(output))

    def classify_tree(self, root: DomNode) -> FilterStats:
        stats = FilterStats()
        for node in root.iter_preorder():
            node.classification = self.classify(node)
            stats.record(node.classification)
        logger.debug(
            "Ternary net: %d nodes (content=%d ad=%d tracker=%d nav=%d)",
            stats.total_nodes,
            stats.content_nodes,
            stats.ad_nodes,
            stats.tracker_nodes,
            stats.nav_nodes,
        )
        return stats.finalize()
