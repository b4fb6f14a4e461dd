# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""domfilter exception hierarchy.

All domfilter-specific errors inherit from DomFilterError, allowing callers
to catch the base class for any failure or specific subclasses for targeted
handling.  Classification itself never fails: missing attributes and unknown
tags degrade to Unknown instead of raising.
"""

from __future__ import annotations


class DomFilterError(Exception):
    """Base exception for all domfilter errors."""


class ParseError(DomFilterError):
    """HTML input could not be turned into a node tree."""


class ConfigError(DomFilterError):
    """Invalid filter configuration (unknown engine name, bad env value)."""


class BatchShapeError(DomFilterError):
    """Batch feature buffers disagree in length.

    Buffers are never truncated to a common length; ``lengths`` maps each
    buffer name to the size it was given.
    """

    def __init__(self, message: str, *, lengths: dict[str, int] | None = None) -> None:
        super().__init__(message)
        self.lengths = lengths or {}


class WeightShapeError(DomFilterError):
    """Ternary weight table is not {-1, 0, 1} or does not fit its input."""
