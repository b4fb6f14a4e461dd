# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Structure-of-arrays batch buffers for the batch engines.

Instead of one record per node, each feature lives in its own array so a
whole group of lanes can be compared at once:

  tag_types:      [t0, t1, t2, ...]   int32
  text_densities: [d0, d1, d2, ...]   float32
  ...
  classifications:[c0, c1, c2, ...]   int32 (output)

Flatten and write-back both walk the tree in pre-order with a single
advancing cursor; any disagreement in length raises instead of silently
attributing a result to the wrong node.
"""

from __future__ import annotations

from dataclasses import dataclass, fields

import numpy as np

from domfilter.dom import Classification, DomNode
from domfilter.dom.features import NodeSignals, extract_signals
from domfilter.engines import FilterStats
from domfilter.errors import BatchShapeError

LANE_WIDTH = 8

# Lane normalization (differs from the ternary vector on purpose)
_INV_CHILDREN = 1.0 / 32.0
_INV_TEXT_LEN = 1.0 / 1024.0
_INV_ATTRS = 1.0 / 16.0

# ---- Lane tag encoding ----
TAG_HEADER = 6
TAG_FOOTER = 7
TAG_TEXT = 16
TAG_OTHER = 17

_TAG_CODES: dict[str, int] = {
    "div": 0,
    "p": 1,
    "a": 2,
    "script": 3,
    "noscript": 3,
    "style": 4,
    "nav": 5,
    "header": TAG_HEADER,
    "footer": TAG_FOOTER,
    **dict.fromkeys(("button", "input", "textarea", "select", "form"), 8),
    **dict.fromkeys(("img", "video", "audio", "picture", "canvas"), 9),
    "iframe": 10,
    **dict.fromkeys(("h1", "h2", "h3", "h4", "h5", "h6"), 11),
    "span": 12,
    **dict.fromkeys(("ul", "ol", "li"), 13),
    **dict.fromkeys(("table", "tr", "td", "th"), 14),
    **dict.fromkeys(("section", "article", "main", "aside"), 15),
    "": TAG_TEXT,
}


def encode_tag(tag: str) -> int:
    return _TAG_CODES.get(tag, TAG_OTHER)


def align_up(n: int) -> int:
    """Round ``n`` up to the next multiple of LANE_WIDTH."""
    return (n + LANE_WIDTH - 1) // LANE_WIDTH * LANE_WIDTH


@dataclass(frozen=True, slots=True)
class LaneFeatures:
    """One node's lane values (row form, only used while flattening)."""

    tag_type: int = TAG_OTHER
    text_density: float = 0.0
    link_density: float = 0.0
    child_count: float = 0.0
    has_ad_class: float = 0.0
    has_tracker_class: float = 0.0
    has_data_ad: float = 0.0
    is_script: float = 0.0
    is_style: float = 0.0
    is_nav: float = 0.0
    is_interactive: float = 0.0
    is_media: float = 0.0
    text_length: float = 0.0
    has_href: float = 0.0
    attr_count: float = 0.0

    @classmethod
    def from_signals(cls, s: NodeSignals) -> LaneFeatures:
        return cls(
            tag_type=encode_tag(s.tag),
            text_density=s.text_density,
            link_density=s.link_density,
            child_count=s.child_count * _INV_CHILDREN,
            has_ad_class=float(s.has_ad_class),
            has_tracker_class=float(s.has_tracker_class),
            has_data_ad=float(s.has_data_ad),
            is_script=float(s.is_script),
            is_style=float(s.is_style),
            is_nav=float(s.is_nav),
            is_interactive=float(s.is_interactive),
            is_media=float(s.is_media),
            text_length=s.own_text_length * _INV_TEXT_LEN,
            has_href=float(s.has_href),
            attr_count=s.attr_count * _INV_ATTRS,
        )


# LaneFeatures field → BatchBuffers float array
_FLOAT_COLUMNS: tuple[tuple[str, str], ...] = (
    ("text_density", "text_densities"),
    ("link_density", "link_densities"),
    ("child_count", "child_counts"),
    ("has_ad_class", "has_ad_class"),
    ("has_tracker_class", "has_tracker_class"),
    ("has_data_ad", "has_data_ad"),
    ("is_script", "is_script"),
    ("is_style", "is_style"),
    ("is_nav", "is_nav"),
    ("is_interactive", "is_interactive"),
    ("is_media", "is_media"),
    ("text_length", "text_lengths"),
    ("has_href", "has_href"),
    ("attr_count", "attr_counts"),
)


@dataclass
class BatchBuffers:
    """Parallel per-feature arrays for ``count`` real nodes plus zero padding."""

    tag_types: np.ndarray
    text_densities: np.ndarray
    link_densities: np.ndarray
    child_counts: np.ndarray
    has_ad_class: np.ndarray
    has_tracker_class: np.ndarray
    has_data_ad: np.ndarray
    is_script: np.ndarray
    is_style: np.ndarray
    is_nav: np.ndarray
    is_interactive: np.ndarray
    is_media: np.ndarray
    text_lengths: np.ndarray
    has_href: np.ndarray
    attr_counts: np.ndarray
    classifications: np.ndarray
    count: int

    @classmethod
    def from_features(cls, rows: list[LaneFeatures]) -> BatchBuffers:
        """Build buffers from row features, padded to a multiple of LANE_WIDTH.

        Padding lanes are all-zero features with an Unknown output slot.
        """
        count = len(rows)
        padded = align_up(count)
        pad = padded - count

        columns: dict[str, np.ndarray] = {
            "tag_types": np.array([r.tag_type for r in rows] + [0] * pad, dtype=np.int32),
        }
        for attr, column in _FLOAT_COLUMNS:
            columns[column] = np.array([getattr(r, attr) for r in rows] + [0.0] * pad, dtype=np.float32)
        columns["classifications"] = np.full(padded, int(Classification.UNKNOWN), dtype=np.int32)
        return cls(**columns, count=count)

    def array_lengths(self) -> dict[str, int]:
        return {f.name: len(getattr(self, f.name)) for f in fields(self) if f.name != "count"}

    @property
    def padded_len(self) -> int:
        return len(self.tag_types)

    def group_count(self) -> int:
        return self.padded_len // LANE_WIDTH

    def validate(self) -> None:
        """Reject buffers whose arrays disagree or whose padding is inconsistent.

        Raises:
            BatchShapeError: any length mismatch.
        """
        lengths = self.array_lengths()
        if len(set(lengths.values())) != 1:
            raise BatchShapeError(f"Batch buffers disagree in length: {lengths}", lengths=lengths)
        if self.padded_len % LANE_WIDTH:
            raise BatchShapeError(
                f"Batch buffers hold {self.padded_len} lanes, not a multiple of {LANE_WIDTH}",
                lengths=lengths,
            )
        if self.count < 0 or align_up(self.count) != self.padded_len:
            raise BatchShapeError(
                f"Batch count {self.count} does not match {self.padded_len} padded lanes",
                lengths=lengths,
            )


def flatten_tree(root: DomNode) -> BatchBuffers:
    """Flatten ``root`` in pre-order into padded batch buffers."""
    rows = [LaneFeatures.from_signals(extract_signals(node)) for node in root.iter_preorder()]
    return BatchBuffers.from_features(rows)


def apply_classifications(root: DomNode, buffers: BatchBuffers) -> FilterStats:
    """Write batch results back in the same pre-order used by ``flatten_tree``.

    Text nodes are written as Content whatever their lane produced; the
    cursor still advances past their lane. Stats are counted from what
    actually lands on the tree.

    Raises:
        BatchShapeError: tree and batch disagree in node count.
    """
    stats = FilterStats()
    cursor = 0
    for node in root.iter_preorder():
        if cursor >= buffers.count:
            raise BatchShapeError(f"Tree has more nodes than the batch ({buffers.count})")
        if node.is_text:
            node.classification = Classification.CONTENT
        else:
            node.classification = Classification.from_index(int(buffers.classifications[cursor]))
        stats.record(node.classification)
        cursor += 1
    if cursor != buffers.count:
        raise BatchShapeError(f"Batch holds {buffers.count} nodes but the tree has {cursor}")
    return stats.finalize()
