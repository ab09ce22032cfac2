"""Rebinding trace recording for script runs."""

from __future__ import annotations

import threading
import time
from pathlib import Path
from typing import Any

from pydantic import BaseModel


class RebindTrace(BaseModel):
    """One compound assignment performed by a script."""
    step: int
    timestamp: float           # time.time() wall-clock
    line: int | None
    target: str
    op: str                    # OpType.value
    rhs: Any
    before: Any
    after: Any


class ScriptTrace(BaseModel):
    """Top-level trace document for one script run."""
    version: str = "1.0"
    timestamp: str
    source: str
    elapsed_s: float = 0.0
    events: list[RebindTrace] = []
    error: str | None = None


class TraceCollector:
    """Thread-safe trace event collector. No-op when disabled."""

    def __init__(self, enabled: bool = False):
        self.enabled = enabled
        self._lock = threading.Lock()

    def record_rebind(
        self,
        trace: ScriptTrace,
        *,
        line: int | None,
        target: str,
        op: str,
        rhs: Any,
        before: Any,
        after: Any,
    ) -> None:
        """Record a compound assignment."""
        if not self.enabled:
            return
        with self._lock:
            trace.events.append(RebindTrace(
                step=len(trace.events) + 1,
                timestamp=time.time(),
                line=line,
                target=target,
                op=op,
                rhs=rhs,
                before=before,
                after=after,
            ))

    @staticmethod
    def write_trace(trace: ScriptTrace, path: Path) -> None:
        """Write the trace to a JSON file."""
        path.write_text(trace.model_dump_json(indent=2))
