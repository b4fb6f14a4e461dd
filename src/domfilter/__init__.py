# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""domfilter: semantic classification and ad/tracker pruning for HTML node trees.

Classifies every node into one of nine categories with a pluggable engine
(rule cascade, ternary net, 8-lane batch, 64-bit mask batch), removes
Advertisement/Tracker subtrees and promotes the most content-rich block.
"""

from __future__ import annotations

from domfilter.config import FilterConfig
from domfilter.dom import Classification, DomNode, DomTree, NodeKind
from domfilter.dom.parser import parse_html
from domfilter.engines import Engine, FilterStats, get_classifier
from domfilter.errors import (
    BatchShapeError,
    ConfigError,
    DomFilterError,
    ParseError,
    WeightShapeError,
)
from domfilter.pipeline import FilterResult, SemanticFilter, filter_tree

__all__ = [
    "BatchShapeError",
    "Classification",
    "ConfigError",
    "DomFilterError",
    "DomNode",
    "DomTree",
    "Engine",
    "FilterConfig",
    "FilterResult",
    "FilterStats",
    "NodeKind",
    "ParseError",
    "SemanticFilter",
    "WeightShapeError",
    "filter_tree",
    "get_classifier",
    "parse_html",
]
