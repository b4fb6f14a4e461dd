# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Filter pass orchestration.

Flow:
  DomTree (caller-built or parse_html)
    → classify (configured engine, in place)
    → prune (drop Advertisement/Tracker subtrees)
    → readability boost (promote the best content subtree)
    → FilterResult
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from domfilter.config import FilterConfig
from domfilter.dom import DomNode, DomTree
from domfilter.dom.parser import parse_html
from domfilter.engines import Engine, FilterStats, TreeClassifier, get_classifier
from domfilter.logging_config import filter_context
from domfilter.pipeline_timer import PipelineTimer
from domfilter.prune import prune_tree
from domfilter.readability import readability_boost

logger = logging.getLogger(__name__)


@dataclass
class FilterResult:
    """Result of filtering a single tree."""

    stats: FilterStats
    engine: str
    pruned_subtrees: int = 0
    promoted: DomNode | None = None
    elapsed_ms: float = 0.0
    stage_ms: dict[str, float] = field(default_factory=dict)
    tree: DomTree | None = None


class SemanticFilter:
    """Classify, prune and boost a node tree with one configured engine.

    The engine is fixed at construction; a single instance may be reused
    for any number of trees.
    """

    def __init__(self, config: FilterConfig | None = None, *, engine: str | Engine | None = None) -> None:
        if config is None:
            config = FilterConfig() if engine is None else FilterConfig(engine=engine)
        elif engine is not None:
            config = FilterConfig(engine=engine, readability=config.readability)
        self.config = config
        self.classifier: TreeClassifier = get_classifier(config.engine)

    @property
    def engine(self) -> Engine:
        return self.config.engine

    def filter(self, tree: DomTree | DomNode) -> FilterResult:
        """Run one pass over ``tree`` (mutated in place).

        Raises:
            BatchShapeError: batch engine buffers and tree disagree.
        """
        if isinstance(tree, DomTree):
            root, url = tree.root, tree.url
        else:
            root, url = tree, ""

        with filter_context(self.classifier.name, url):
            with PipelineTimer() as timer:
                timer.stage("classify")
                stats = self.classifier.classify_tree(root)

                timer.stage("prune")
                pruned = prune_tree(root)

                promoted = None
                if self.config.readability:
                    timer.stage("readability")
                    promoted = readability_boost(root)

            result = FilterResult(
                stats=stats,
                engine=self.classifier.name,
                pruned_subtrees=pruned,
                promoted=promoted,
                elapsed_ms=timer.total_ms(),
                stage_ms=timer.elapsed_per_stage(),
                tree=tree if isinstance(tree, DomTree) else None,
            )
            logger.debug(
                "Filter pass [%s]: %d nodes, %d removed (%d subtrees), %.2fms (%s)",
                result.engine,
                stats.total_nodes,
                stats.removed_nodes,
                pruned,
                result.elapsed_ms,
                timer.summary(),
            )
        return result

    def process_html(self, html: str, url: str = "") -> FilterResult:
        """Parse ``html`` with lxml and filter the resulting tree.

        Raises:
            ParseError: empty or unparsable input.
        """
        return self.filter(parse_html(html, url=url))


def filter_tree(tree: DomTree | DomNode, engine: str | Engine = Engine.RULES) -> FilterResult:
    """One-shot filter pass with default settings and the given engine."""
    return SemanticFilter(engine=engine).filter(tree)
