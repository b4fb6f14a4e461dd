# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Shared test configuration and fixtures."""

try:
    import domfilter  # noqa: F401
except ImportError:
    raise ImportError("domfilter is not installed. Run: pip install -e '.[dev]'") from None

import pytest

from domfilter.engines import Engine


@pytest.fixture(params=list(Engine), ids=lambda e: e.value)
def engine(request) -> Engine:
    """Every classification engine, one test run each."""
    return request.param
