# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""lxml → DomNode adapter.

The engines only need a node tree; this module builds one from raw HTML
with lxml so callers (and tests) do not have to assemble nodes by hand.
"""

from __future__ import annotations

import logging

import lxml.html
from lxml import etree

from domfilter.dom import DomNode, DomTree
from domfilter.errors import ParseError

logger = logging.getLogger(__name__)

# Tags whose children are dropped (invisible / script content)
_SKIP_CHILDREN = frozenset({"script", "style", "noscript", "svg"})


def _text_leaf(raw: str | None) -> DomNode | None:
    if raw is None or not raw.strip():
        return None
    return DomNode.text_node(raw)


def from_lxml(el: lxml.html.HtmlElement) -> DomNode:
    """Convert one lxml element (and its subtree) into a DomNode."""
    tag = el.tag.lower() if isinstance(el.tag, str) else ""
    attributes = {str(k): str(v) for k, v in el.attrib.items()}

    if tag in _SKIP_CHILDREN:
        return DomNode.element(tag, attributes)

    children: list[DomNode] = []
    if (leaf := _text_leaf(el.text)) is not None:
        children.append(leaf)

    for child in el:
        # Comments / processing instructions: skip the node, keep its tail
        if isinstance(child.tag, str):
            children.append(from_lxml(child))
        if (leaf := _text_leaf(child.tail)) is not None:
            children.append(leaf)

    return DomNode.element(tag, attributes, children)


def parse_html(html: str, url: str = "") -> DomTree:
    """Parse a full HTML document into a DomTree rooted at ``<html>``.

    Raises:
        ParseError: input is empty or lxml cannot build a document.
    """
    if not html or not html.strip():
        raise ParseError("Empty HTML input")

    try:
        doc = lxml.html.document_fromstring(html)
    except (etree.ParserError, ValueError) as e:
        raise ParseError(f"HTML parsing failed: {e}") from e

    title_el = doc.find(".//title")
    title = (title_el.text_content() or "").strip() if title_el is not None else ""

    root = from_lxml(doc)
    logger.debug("Parsed %s: %d nodes", url or "<inline>", root.node_count())
    return DomTree(root=root, url=url, title=title)
