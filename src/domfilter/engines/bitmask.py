# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Packed-bitmask batch classifier: up to 64 nodes per call.

Every feature test becomes one 64-bit mask (bit i = node i); classes are
then pure boolean algebra over masks:

  tracker = script | tracker_class
  ad      = ad_class | data_ad
  nav     = nav_tag | (link_density > 0.6 & child_count > 3/32)
  content = text_density > 10 & ~ad & ~tracker & ~nav
  prune   = ad | tracker

ad/tracker/nav may overlap, so materializing one class per node needs an
explicit order (later wins): Unknown → Content → Navigation → Tracker → Advertisement.
Independent of the 8-lane engine; the two are not meant to agree.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

import numpy as np

from domfilter.dom import Classification, DomNode
from domfilter.engines import FilterStats
from domfilter.engines.soa import BatchBuffers, apply_classifications, flatten_tree
from domfilter.errors import BatchShapeError

logger = logging.getLogger(__name__)

MAX_BATCH = 64
_WORD = (1 << MAX_BATCH) - 1

_LINK_DENSITY = np.float32(0.6)
_CHILD_COUNT = np.float32(3.0 / 32.0)
_TEXT_DENSITY = np.float32(10.0)


@dataclass(frozen=True, slots=True)
class BitMask64:
    """Immutable 64-bit mask; bit ``i`` answers one yes/no question for node ``i``."""

    bits: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "bits", self.bits & _WORD)

    @classmethod
    def from_bool(cls, value: bool) -> BitMask64:
        return cls(_WORD if value else 0)

    @classmethod
    def from_positions(cls, positions) -> BitMask64:
        bits = 0
        for pos in positions:
            bits |= 1 << int(pos)
        return cls(bits)

    @classmethod
    def first_n(cls, n: int) -> BitMask64:
        return cls((1 << n) - 1)

    def with_bit(self, pos: int) -> BitMask64:
        return BitMask64(self.bits | (1 << pos))

    def without_bit(self, pos: int) -> BitMask64:
        return BitMask64(self.bits & ~(1 << pos))

    def test(self, pos: int) -> bool:
        return (self.bits >> pos) & 1 == 1

    def __and__(self, other: BitMask64) -> BitMask64:
        return BitMask64(self.bits & other.bits)

    def __or__(self, other: BitMask64) -> BitMask64:
        return BitMask64(self.bits | other.bits)

    def __xor__(self, other: BitMask64) -> BitMask64:
        return BitMask64(self.bits ^ other.bits)

    def __invert__(self) -> BitMask64:
        return BitMask64(~self.bits)

    def count_ones(self) -> int:
        return self.bits.bit_count()

    def trailing_zeros(self) -> int:
        if self.bits == 0:
            return MAX_BATCH
        return (self.bits & -self.bits).bit_length() - 1

    def leading_zeros(self) -> int:
        return MAX_BATCH - self.bits.bit_length()

    def any(self) -> bool:
        return self.bits != 0

    def all(self) -> bool:
        return self.bits == _WORD

    def none(self) -> bool:
        return self.bits == 0

    def iter_set_bits(self) -> Iterator[int]:
        """Yield set positions, lowest first (clear-lowest-bit walk)."""
        remaining = self.bits
        while remaining:
            low = remaining & -remaining
            yield low.bit_length() - 1
            remaining ^= low

    def blend(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        """``out[i] = a[i] if bit i else b[i]`` over the first min(len, 64) lanes."""
        n = min(len(a), len(b), MAX_BATCH)
        lanes = np.array([self.test(i) for i in range(n)], dtype=bool)
        return np.where(lanes, a[:n], b[:n])


BitMask64.ALL_TRUE = BitMask64(_WORD)
BitMask64.ALL_FALSE = BitMask64(0)


# ---------------------------------------------------------------------------
# Comparison masks
# ---------------------------------------------------------------------------


def mask_gt(values: np.ndarray, threshold: float) -> BitMask64:
    """Bit i set where ``values[i] > threshold`` (first 64 values)."""
    window = np.asarray(values)[:MAX_BATCH]
    return BitMask64.from_positions(np.flatnonzero(window > threshold))


def mask_eq(values: np.ndarray, value: int) -> BitMask64:
    window = np.asarray(values)[:MAX_BATCH]
    return BitMask64.from_positions(np.flatnonzero(window == value))


def mask_nonzero(values: np.ndarray) -> BitMask64:
    window = np.asarray(values)[:MAX_BATCH]
    return BitMask64.from_positions(np.flatnonzero(window != 0))


# ---------------------------------------------------------------------------
# Batch classification
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BatchFilterResult:
    """Class masks for one batch of ``count`` (≤ 64) nodes."""

    ad_mask: BitMask64
    tracker_mask: BitMask64
    content_mask: BitMask64
    nav_mask: BitMask64
    prune_mask: BitMask64
    count: int

    def pruned_count(self) -> int:
        return self.prune_mask.count_ones()

    def content_count(self) -> int:
        return self.content_mask.count_ones()


@dataclass
class MaskCounts:
    """Raw mask membership; a node may sit in several masks at once."""

    total: int = 0
    content: int = 0
    ads: int = 0
    trackers: int = 0
    nav: int = 0
    prune: int = 0

    def merge(self, other: MaskCounts) -> None:
        self.total += other.total
        self.content += other.content
        self.ads += other.ads
        self.trackers += other.trackers
        self.nav += other.nav
        self.prune += other.prune


def classify_batch_branchless(
    *,
    is_script: np.ndarray,
    is_nav: np.ndarray,
    has_ad_class: np.ndarray,
    has_tracker_class: np.ndarray,
    has_data_ad: np.ndarray,
    text_densities: np.ndarray,
    link_densities: np.ndarray,
    child_counts: np.ndarray,
    count: int,
) -> BatchFilterResult:
    """Classify up to 64 nodes with mask algebra only.

    Raises:
        BatchShapeError: arrays disagree in length, or ``count`` exceeds them or 64.
    """
    arrays = {
        "is_script": is_script,
        "is_nav": is_nav,
        "has_ad_class": has_ad_class,
        "has_tracker_class": has_tracker_class,
        "has_data_ad": has_data_ad,
        "text_densities": text_densities,
        "link_densities": link_densities,
        "child_counts": child_counts,
    }
    lengths = {name: len(arr) for name, arr in arrays.items()}
    if len(set(lengths.values())) != 1:
        raise BatchShapeError(f"Bitmask batch arrays disagree in length: {lengths}", lengths=lengths)
    length = next(iter(lengths.values()))
    if not 0 <= count <= min(length, MAX_BATCH):
        raise BatchShapeError(
            f"Bitmask batch count {count} exceeds {min(length, MAX_BATCH)} available lanes",
            lengths=lengths,
        )

    valid = BitMask64.first_n(count)

    mask_script = mask_nonzero(is_script) & valid
    mask_nav_tag = mask_nonzero(is_nav) & valid
    mask_ad_class = mask_nonzero(has_ad_class) & valid
    mask_tracker_class = mask_nonzero(has_tracker_class) & valid
    mask_data_ad = mask_nonzero(has_data_ad) & valid
    mask_high_text = mask_gt(text_densities, _TEXT_DENSITY) & valid
    mask_high_link = mask_gt(link_densities, _LINK_DENSITY) & valid
    mask_many_children = mask_gt(child_counts, _CHILD_COUNT) & valid

    tracker_mask = mask_script | mask_tracker_class
    ad_mask = mask_ad_class | mask_data_ad
    nav_mask = mask_nav_tag | (mask_high_link & mask_many_children)
    content_mask = mask_high_text & ~ad_mask & ~tracker_mask & ~nav_mask
    prune_mask = ad_mask | tracker_mask

    return BatchFilterResult(
        ad_mask=ad_mask,
        tracker_mask=tracker_mask,
        content_mask=content_mask,
        nav_mask=nav_mask,
        prune_mask=prune_mask,
        count=count,
    )


def classify_window(buffers: BatchBuffers, start: int) -> BatchFilterResult:
    """Run the mask classifier over ``buffers`` lanes ``start .. start+64`` (real nodes only)."""
    count = max(0, min(buffers.count - start, MAX_BATCH))
    window = slice(start, start + count)
    return classify_batch_branchless(
        is_script=buffers.is_script[window],
        is_nav=buffers.is_nav[window],
        has_ad_class=buffers.has_ad_class[window],
        has_tracker_class=buffers.has_tracker_class[window],
        has_data_ad=buffers.has_data_ad[window],
        text_densities=buffers.text_densities[window],
        link_densities=buffers.link_densities[window],
        child_counts=buffers.child_counts[window],
        count=count,
    )


def apply_batch_result(result: BatchFilterResult, classifications: np.ndarray) -> None:
    """Materialize one class index per node into ``classifications[:count]``."""
    if len(classifications) < result.count:
        raise BatchShapeError(
            f"Output holds {len(classifications)} slots, batch has {result.count} nodes",
        )
    count = result.count
    classifications[:count] = int(Classification.UNKNOWN)

    # Lowest priority first; later masks overwrite
    for mask, cls in (
        (result.content_mask, Classification.CONTENT),
        (result.nav_mask, Classification.NAVIGATION),
        (result.tracker_mask, Classification.TRACKER),
        (result.ad_mask, Classification.ADVERTISEMENT),
    ):
        for pos in mask.iter_set_bits():
            if pos < count:
                classifications[pos] = int(cls)


def batch_stats(result: BatchFilterResult) -> MaskCounts:
    return MaskCounts(
        total=result.count,
        content=result.content_mask.count_ones(),
        ads=result.ad_mask.count_ones(),
        trackers=result.tracker_mask.count_ones(),
        nav=result.nav_mask.count_ones(),
        prune=result.prune_mask.count_ones(),
    )


class BitmaskBatchClassifier:
    """Flatten → 64-node mask windows → pre-order write-back."""

    name = "bitmask"

    def classify_tree(self, root: DomNode) -> FilterStats:
        buffers = flatten_tree(root)
        buffers.validate()

        counts = MaskCounts()
        for start in range(0, buffers.count, MAX_BATCH):
            result = classify_window(buffers, start)
            apply_batch_result(result, buffers.classifications[start : start + result.count])
            counts.merge(batch_stats(result))

        stats = apply_classifications(root, buffers)
        logger.debug(
            "Bitmask batch: %d nodes (mask ad=%d tracker=%d nav=%d prune=%d)",
            counts.total,
            counts.ads,
            counts.trackers,
            counts.nav,
            counts.prune,
        )
        return stats
