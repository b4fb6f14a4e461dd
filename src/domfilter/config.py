# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Filter configuration with DOMFILTER_* environment overrides."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from domfilter.engines import Engine
from domfilter.errors import ConfigError

_TRUE_VALUES = ("1", "true", "yes")
_FALSE_VALUES = ("0", "false", "no")


@dataclass(frozen=True)
class FilterConfig:
    """Immutable filter configuration."""

    engine: Engine = Engine.RULES
    readability: bool = True

    def __post_init__(self) -> None:
        # Accept plain strings ("simd") as well as Engine members
        object.__setattr__(self, "engine", Engine.parse(self.engine))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> FilterConfig:
        """Build a config from ``DOMFILTER_ENGINE`` / ``DOMFILTER_READABILITY``.

        Unset or empty variables keep the defaults.

        Raises:
            ConfigError: unknown engine name or unrecognized boolean.
        """
        env = os.environ if environ is None else environ

        engine = Engine.RULES
        env_engine = env.get("DOMFILTER_ENGINE", "").strip().lower()
        if env_engine:
            engine = Engine.parse(env_engine)

        readability = True
        env_read = env.get("DOMFILTER_READABILITY", "").strip().lower()
        if env_read in _FALSE_VALUES:
            readability = False
        elif env_read and env_read not in _TRUE_VALUES:
            raise ConfigError(f"DOMFILTER_READABILITY must be one of 1/true/yes/0/false/no, got {env_read!r}")

        return cls(engine=engine, readability=readability)
