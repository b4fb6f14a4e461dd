# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Stage timer for one filter pass (classify → prune → readability).

Used as a context manager; leaving the block closes the open stage even
when a stage raises, so partial timings stay available for error logs.
"""

from __future__ import annotations

import time
from dataclasses import dataclass


def _ms(start_ns: int, end_ns: int) -> float:
    return round((end_ns - start_ns) / 1e6, 3)


@dataclass(slots=True)
class StageRecord:
    name: str
    start_ns: int
    end_ns: int | None = None

    def elapsed_ms(self, now_ns: int | None = None) -> float:
        end = self.end_ns if self.end_ns is not None else (now_ns or time.perf_counter_ns())
        return _ms(self.start_ns, end)


class PipelineTimer:
    """Ordered stage timings plus a wall total for one pass."""

    __slots__ = ("_records", "_start_ns", "_end_ns")

    def __init__(self) -> None:
        self._records: list[StageRecord] = []
        self._start_ns = time.perf_counter_ns()
        self._end_ns: int | None = None

    def __enter__(self) -> PipelineTimer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.finalize()

    def _close_open(self, now_ns: int) -> None:
        if self._records and self._records[-1].end_ns is None:
            self._records[-1].end_ns = now_ns

    def stage(self, name: str) -> None:
        """Close the running stage (if any) and open ``name``."""
        now = time.perf_counter_ns()
        self._close_open(now)
        self._records.append(StageRecord(name, now))

    def finalize(self) -> None:
        """Close the running stage and freeze the total. Repeated calls are no-ops."""
        if self._end_ns is not None:
            return
        self._end_ns = time.perf_counter_ns()
        self._close_open(self._end_ns)

    @property
    def current_stage(self) -> str | None:
        if self._records and self._records[-1].end_ns is None:
            return self._records[-1].name
        return None

    def elapsed_per_stage(self) -> dict[str, float]:
        """{stage: ms} in start order; a running stage reports time so far."""
        now = time.perf_counter_ns()
        return {r.name: r.elapsed_ms(now) for r in self._records}

    def total_ms(self) -> float:
        return _ms(self._start_ns, self._end_ns if self._end_ns is not None else time.perf_counter_ns())

    def summary(self) -> str:
        """``classify=0.412ms prune=0.031ms ...`` for log lines."""
        return " ".join(f"{name}={ms:.3f}ms" for name, ms in self.elapsed_per_stage().items())
