# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Log rendering for domfilter hosts: structlog processors over stdlib logging.

Engines and stages log through plain ``logging.getLogger(__name__)``. A host
calls ``configure()`` (or ``configure_from_env()``) once at startup to pick
console or JSON rendering. ``filter_context()`` binds the engine name and
source URL for the duration of one filter pass so every record emitted by
the pass carries them.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import TextIO

import structlog

_JSON_VALUES = ("1", "true", "yes", "json")


def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(json_output: bool):
    if json_output:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def configure(*, json_output: bool = False, level: str = "INFO", stream: TextIO | None = None) -> None:
    """Route stdlib and structlog records through one handler.

    Args:
        json_output: JSON lines when True, aligned console text otherwise.
        level: Root logger level name. Unknown names fall back to INFO.
        stream: Handler target (default ``sys.stderr``).
    """
    shared = _shared_processors()
    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr if stream is None else stream)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, _renderer(json_output)],
            foreign_pre_chain=shared,
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.strip().upper(), logging.INFO))


def configure_from_env(environ: Mapping[str, str] | None = None) -> None:
    """``configure()`` driven by ``DOMFILTER_LOG_LEVEL`` and ``DOMFILTER_LOG_JSON``."""
    env = os.environ if environ is None else environ
    level = env.get("DOMFILTER_LOG_LEVEL", "").strip() or "INFO"
    json_output = env.get("DOMFILTER_LOG_JSON", "").strip().lower() in _JSON_VALUES
    configure(json_output=json_output, level=level)


@contextmanager
def filter_context(engine: str, url: str = "") -> Iterator[None]:
    """Bind ``engine`` (and ``url`` when known) to every record logged inside."""
    bound = {"engine": engine}
    if url:
        bound["url"] = url
    with structlog.contextvars.bound_contextvars(**bound):
        yield
