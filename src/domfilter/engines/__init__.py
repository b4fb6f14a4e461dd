# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Classification engines.

Four interchangeable engines share the taxonomy in ``domfilter.dom`` and
the feature model in ``domfilter.dom.features``, but each keeps its own
priority order for overlapping classes:

  rules    – short-circuit cascade: tag → class/id → data-ad → link density → text density
  ternary  – 16→32→9 ternary net, argmax over per-class detector groups
  simd     – 8-lane blend cascade, ad/tracker/decoration override tag classes
  bitmask  – 64-node mask algebra, Unknown → Content → Navigation → Tracker → Ad

The orders disagree: an empty ``<nav class="ad-links">`` is Navigation
under rules (tag checks run first) but Advertisement under simd, bitmask
and ternary; a bare ``<header>`` is Structural everywhere except bitmask,
which has no Structural mask. That drift is kept as-is.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from domfilter.dom import Classification
from domfilter.errors import ConfigError

if TYPE_CHECKING:
    from domfilter.dom import DomNode


class Engine(StrEnum):
    RULES = "rules"
    TERNARY = "ternary"
    SIMD = "simd"
    BITMASK = "bitmask"

    @classmethod
    def parse(cls, value: str | Engine) -> Engine:
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(e.value for e in cls)
            raise ConfigError(f"Unknown engine {value!r} (expected one of: {valid})") from None


@dataclass
class FilterStats:
    """Counters accumulated during one classification pass.

    ``removed`` is derived: call ``finalize()`` once the pass is done.
    """

    total_nodes: int = 0
    content_nodes: int = 0
    ad_nodes: int = 0
    tracker_nodes: int = 0
    nav_nodes: int = 0
    removed_nodes: int = 0

    def record(self, classification: Classification) -> None:
        self.total_nodes += 1
        if classification == Classification.CONTENT:
            self.content_nodes += 1
        elif classification == Classification.ADVERTISEMENT:
            self.ad_nodes += 1
        elif classification == Classification.TRACKER:
            self.tracker_nodes += 1
        elif classification == Classification.NAVIGATION:
            self.nav_nodes += 1

    def finalize(self) -> FilterStats:
        self.removed_nodes = self.ad_nodes + self.tracker_nodes
        return self

    def as_dict(self) -> dict[str, int]:
        return {
            "total": self.total_nodes,
            "content": self.content_nodes,
            "ad": self.ad_nodes,
            "tracker": self.tracker_nodes,
            "nav": self.nav_nodes,
            "removed": self.removed_nodes,
        }


class TreeClassifier(Protocol):
    """Contract every engine implements: classify a whole tree in place."""

    name: str

    def classify_tree(self, root: DomNode) -> FilterStats: ...


def get_classifier(engine: str | Engine) -> TreeClassifier:
    """Build the classifier for ``engine`` (construction-time strategy selection)."""
    engine = Engine.parse(engine)
    if engine == Engine.RULES:
        from domfilter.engines.rules import RuleCascadeClassifier

        return RuleCascadeClassifier()
    if engine == Engine.TERNARY:
        from domfilter.engines.ternary import TernaryNetClassifier

        return TernaryNetClassifier()
    if engine == Engine.SIMD:
        from domfilter.engines.simd import SimdBatchClassifier

        return SimdBatchClassifier()
    from domfilter.engines.bitmask import BitmaskBatchClassifier

    return BitmaskBatchClassifier()
