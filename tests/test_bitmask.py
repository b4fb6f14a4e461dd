# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for the packed 64-bit mask classifier."""

from __future__ import annotations

import numpy as np
import pytest

from domfilter.dom import Classification
from domfilter.engines.bitmask import (
    MAX_BATCH,
    BitMask64,
    BitmaskBatchClassifier,
    apply_batch_result,
    batch_stats,
    classify_batch_branchless,
    mask_eq,
    mask_gt,
    mask_nonzero,
)
from domfilter.errors import BatchShapeError
from tests._dom_helpers import el

C = Classification


def _arrays(n: int, **overrides) -> dict[str, np.ndarray]:
    names = (
        "is_script",
        "is_nav",
        "has_ad_class",
        "has_tracker_class",
        "has_data_ad",
        "text_densities",
        "link_densities",
        "child_counts",
    )
    arrays = {name: np.zeros(n, dtype=np.float32) for name in names}
    for name, values in overrides.items():
        arrays[name] = np.asarray(values, dtype=np.float32)
    return arrays


class TestBitMask64:
    def test_masked_to_64_bits(self):
        assert BitMask64(1 << 64).bits == 0
        assert BitMask64(-1) == BitMask64.ALL_TRUE

    def test_bit_ops(self):
        a = BitMask64(0b1100)
        b = BitMask64(0b1010)
        assert (a & b).bits == 0b1000
        assert (a | b).bits == 0b1110
        assert (a ^ b).bits == 0b0110
        assert (~BitMask64.ALL_FALSE).all()

    def test_counts(self):
        m = BitMask64(0b1010)
        assert m.count_ones() == 2
        assert m.trailing_zeros() == 1
        assert m.leading_zeros() == 60
        assert BitMask64(0).trailing_zeros() == MAX_BATCH
        assert BitMask64(0).leading_zeros() == MAX_BATCH

    def test_predicates(self):
        assert BitMask64(0).none()
        assert not BitMask64(0).any()
        assert BitMask64(4).any()
        assert BitMask64.from_bool(True).all()
        assert BitMask64.from_bool(False).none()

    def test_test_and_set(self):
        m = BitMask64().with_bit(3).with_bit(63)
        assert m.test(3)
        assert m.test(63)
        assert not m.test(4)
        assert not m.without_bit(3).test(3)

    def test_iter_set_bits(self):
        assert list(BitMask64(0b101001).iter_set_bits()) == [0, 3, 5]
        assert list(BitMask64.from_positions([63, 1]).iter_set_bits()) == [1, 63]

    def test_blend(self):
        mask = BitMask64(0b0101)
        out = mask.blend(np.array([1, 1, 1, 1]), np.array([9, 9, 9, 9]))
        assert out.tolist() == [1, 9, 1, 9]


class TestComparisonMasks:
    def test_gt(self):
        assert mask_gt(np.array([0.5, 0.7, 0.61]), 0.6).bits == 0b110

    def test_eq(self):
        assert mask_eq(np.array([3, 1, 3]), 3).bits == 0b101

    def test_nonzero(self):
        assert mask_nonzero(np.array([0.0, 1.0, 0.0, 2.0])).bits == 0b1010

    def test_only_first_64_lanes(self):
        assert mask_nonzero(np.ones(100)).all()


class TestClassifyBranchless:
    def test_class_masks(self):
        result = classify_batch_branchless(
            **_arrays(
                3,
                is_script=[1, 0, 0],
                has_ad_class=[0, 1, 0],
                is_nav=[0, 1, 0],
                text_densities=[0, 0, 20],
            ),
            count=3,
        )
        assert result.tracker_mask.bits == 0b001
        assert result.ad_mask.bits == 0b010
        assert result.nav_mask.bits == 0b010
        assert result.content_mask.bits == 0b100
        assert result.prune_mask.bits == 0b011
        assert result.pruned_count() == 2
        assert result.content_count() == 1

    def test_content_excludes_ad_tracker_nav(self):
        result = classify_batch_branchless(
            **_arrays(3, text_densities=[20, 20, 20], has_data_ad=[1, 0, 0], has_tracker_class=[0, 1, 0]),
            count=3,
        )
        assert result.content_mask.bits == 0b100

    def test_nav_heuristic(self):
        result = classify_batch_branchless(
            **_arrays(2, link_densities=[0.9, 0.9], child_counts=[4 / 32, 3 / 32]),
            count=2,
        )
        assert result.nav_mask.bits == 0b01

    def test_count_limits_lanes(self):
        result = classify_batch_branchless(**_arrays(4, is_script=[1, 1, 1, 1]), count=2)
        assert result.tracker_mask.bits == 0b11

    def test_count_above_64_raises(self):
        with pytest.raises(BatchShapeError):
            classify_batch_branchless(**_arrays(65), count=65)

    def test_count_above_length_raises(self):
        with pytest.raises(BatchShapeError):
            classify_batch_branchless(**_arrays(3), count=4)

    def test_mismatched_lengths_raise(self):
        arrays = _arrays(4)
        arrays["is_nav"] = np.zeros(3, dtype=np.float32)
        with pytest.raises(BatchShapeError) as exc_info:
            classify_batch_branchless(**arrays, count=3)
        assert exc_info.value.lengths["is_nav"] == 3


class TestMaterialize:
    def test_override_order(self):
        # node 0: nav+tracker, node 1: nav+ad+tracker, node 2: content, node 3: nothing
        result = classify_batch_branchless(
            **_arrays(
                4,
                is_nav=[1, 1, 0, 0],
                is_script=[1, 1, 0, 0],
                has_ad_class=[0, 1, 0, 0],
                text_densities=[0, 0, 20, 0],
            ),
            count=4,
        )
        out = np.zeros(8, dtype=np.int32)
        apply_batch_result(result, out)
        assert [C(int(v)) for v in out[:4]] == [C.TRACKER, C.ADVERTISEMENT, C.CONTENT, C.UNKNOWN]
        assert not out[4:].any()

    def test_output_too_short(self):
        result = classify_batch_branchless(**_arrays(4), count=4)
        with pytest.raises(BatchShapeError):
            apply_batch_result(result, np.zeros(2, dtype=np.int32))

    def test_mask_stats_can_overlap(self):
        result = classify_batch_branchless(
            **_arrays(2, is_nav=[1, 0], has_ad_class=[1, 0], is_script=[1, 0]),
            count=2,
        )
        counts = batch_stats(result)
        assert counts.total == 2
        assert counts.ads == 1
        assert counts.trackers == 1
        assert counts.nav == 1
        assert counts.prune == 1


class TestBitmaskBatchClassifier:
    @pytest.mark.parametrize("n_children", [10, 63, 64, 70, 130])
    def test_windows_cover_whole_tree(self, n_children):
        children = [el("div", class_="ad-slot") if i % 2 == 0 else el("script") for i in range(n_children)]
        root = el("body", *children)
        stats = BitmaskBatchClassifier().classify_tree(root)

        assert stats.total_nodes == n_children + 1
        assert stats.ad_nodes == (n_children + 1) // 2
        assert stats.tracker_nodes == n_children // 2
        assert stats.removed_nodes == stats.ad_nodes + stats.tracker_nodes
        assert root.classification is C.UNKNOWN
        for i, child in enumerate(root.children):
            assert child.classification is (C.ADVERTISEMENT if i % 2 == 0 else C.TRACKER)

    def test_bare_header_has_no_structural_mask(self):
        root = el("header")
        BitmaskBatchClassifier().classify_tree(root)
        assert root.classification is C.UNKNOWN

    def test_text_nodes_stay_content(self):
        root = el("div", "x" * 5, class_="sponsor")
        stats = BitmaskBatchClassifier().classify_tree(root)
        assert root.classification is C.ADVERTISEMENT
        assert root.children[0].classification is C.CONTENT
        assert stats.content_nodes == 1

    def test_name(self):
        assert BitmaskBatchClassifier.name == "bitmask"
