# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Node tree contract shared by every classification engine.

Core data structures: the nine-way classification taxonomy, the node kind,
and the owned node tree the engines mutate in place.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import IntEnum, StrEnum


class Classification(IntEnum):
    """Semantic node category.

    Integer values are stable: the batch engines exchange results as plain
    ints and the ternary net's output neurons are indexed by them.
    """

    CONTENT = 0
    NAVIGATION = 1
    ADVERTISEMENT = 2
    TRACKER = 3
    DECORATION = 4
    INTERACTIVE = 5
    MEDIA = 6
    STRUCTURAL = 7
    UNKNOWN = 8

    @classmethod
    def from_index(cls, idx: int) -> Classification:
        """Map an output index to a classification; out-of-range → UNKNOWN."""
        try:
            return cls(int(idx))
        except ValueError:
            return cls.UNKNOWN


class NodeKind(StrEnum):
    DOCUMENT = "document"
    ELEMENT = "element"
    TEXT = "text"


@dataclass(eq=False, slots=True)
class DomNode:
    """A single node of the document tree.

    Unlike a browser DOM, each node carries a semantic classification.
    Identity comparison (``eq=False``) so nodes can be tracked by reference.
    """

    tag: str = ""
    attributes: dict[str, str] = field(default_factory=dict)
    text: str = ""
    children: list[DomNode] = field(default_factory=list)
    kind: NodeKind = NodeKind.ELEMENT
    classification: Classification = Classification.UNKNOWN

    def __post_init__(self) -> None:
        if self.kind == NodeKind.TEXT:
            self.classification = Classification.CONTENT

    @classmethod
    def document(cls, children: list[DomNode] | None = None) -> DomNode:
        return cls(tag="#document", children=children or [], kind=NodeKind.DOCUMENT)

    @classmethod
    def element(
        cls,
        tag: str,
        attributes: dict[str, str] | None = None,
        children: list[DomNode] | None = None,
    ) -> DomNode:
        return cls(tag=tag, attributes=attributes or {}, children=children or [])

    @classmethod
    def text_node(cls, content: str) -> DomNode:
        """Text leaf. Text-kind nodes are always CONTENT."""
        return cls(text=content, kind=NodeKind.TEXT)

    @property
    def is_text(self) -> bool:
        return self.kind == NodeKind.TEXT

    def attr(self, name: str) -> str | None:
        return self.attributes.get(name)

    def node_count(self) -> int:
        """Count this node and all of its descendants."""
        return sum(1 for _ in self.iter_preorder())

    def iter_preorder(self) -> Iterator[DomNode]:
        """Yield self, then each subtree left to right.

        This is the flattening order the batch engines rely on.
        """
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def collect_text(self) -> str:
        """All descendant text, each run trimmed, joined by single spaces."""
        buf: list[str] = []
        started = False
        for node in self.iter_preorder():
            if not node.text:
                continue
            if started:
                buf.append(" ")
            piece = node.text.strip()
            buf.append(piece)
            started = started or bool(piece)
        return "".join(buf)

    def text_density(self) -> float:
        """Collected text length per node in this subtree."""
        total_nodes = self.node_count()
        if total_nodes == 0:
            return 0.0
        return len(self.collect_text()) / total_nodes

    def link_density(self) -> float:
        """Share of own collected text that sits under direct ``<a>`` children."""
        total_text = len(self.collect_text())
        if total_text == 0:
            return 0.0
        link_text = sum(len(child.collect_text()) for child in self.children if child.tag == "a")
        return link_text / total_text

    def is_visible(self) -> bool:
        """Whether this node survives pruning (not an ad or tracker)."""
        return self.classification not in (Classification.ADVERTISEMENT, Classification.TRACKER)


@dataclass(slots=True)
class DomTree:
    """Parsed document tree with page metadata."""

    root: DomNode
    url: str = ""
    title: str = ""

    def classification_stats(self) -> dict[Classification, int]:
        """Count nodes per classification over the current tree."""
        return dict(Counter(node.classification for node in self.root.iter_preorder()))
