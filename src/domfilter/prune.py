# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Prune stage: drop Advertisement/Tracker subtrees after classification.

A removed child takes its whole subtree with it; nothing below a removed
node is inspected. The root itself is never removed, whatever its class.
"""

from __future__ import annotations

import logging

from domfilter.dom import DomNode

logger = logging.getLogger(__name__)


def prune_tree(root: DomNode) -> int:
    """Remove every child classified Advertisement or Tracker (in place).

    Returns:
        Number of subtrees removed (each counted once at its top node).
    """
    removed = 0
    stack = [root]
    while stack:
        node = stack.pop()
        kept = [child for child in node.children if child.is_visible()]
        removed += len(node.children) - len(kept)
        node.children = kept
        stack.extend(kept)

    logger.debug("Prune: %d subtrees removed", removed)
    return removed
