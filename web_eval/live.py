"""Best-effort live progress snapshots."""

from __future__ import annotations

import logging
import time
from typing import Any, Awaitable, Callable, Optional, Union

from .best_effort import attempt
from .models import ConsoleLevel, LiveSnapshot, RunState

_logger = logging.getLogger(__name__)

MAX_LIVE_LOGS = 20

LiveUpdateCallback = Callable[[LiveSnapshot], Union[None, Awaitable[None]]]

_LIVE_LEVELS = (ConsoleLevel.WARN, ConsoleLevel.ERROR)


def build_snapshot(state: RunState, max_logs: int = MAX_LIVE_LOGS) -> LiveSnapshot:
    """Copy the run's steps and errors plus its latest warn/error console entries."""
    logs = [entry for entry in state.console_logs if entry.level in _LIVE_LEVELS]
    limit = max(0, int(max_logs))
    return LiveSnapshot(
        task_id=state.task.id,
        steps=list(state.steps),
        errors=list(state.errors),
        logs=logs[-limit:] if limit else [],
    )


class LiveSnapshotEmitter:
    """Push snapshots to an observer callback, never letting it affect the run."""

    def __init__(
        self,
        callback: LiveUpdateCallback,
        *,
        max_logs: int = MAX_LIVE_LOGS,
        min_interval_ms: int = 0,
        clock: Optional[Callable[[], float]] = None,
        logger: Any = None,
    ):
        self.callback = callback
        self.max_logs = max_logs
        self.min_interval_ms = max(0, int(min_interval_ms or 0))
        self.clock = clock or time.monotonic
        self.logger = logger or _logger
        self._last_emit: Optional[float] = None

    async def emit(self, state: RunState, *, force: bool = False) -> bool:
        """Send one snapshot; returns False when the throttle skipped it."""
        now = self.clock()
        if not force and self.min_interval_ms and self._last_emit is not None:
            if (now - self._last_emit) * 1000 < self.min_interval_ms:
                return False
        self._last_emit = now
        await attempt(
            f"live_update:{state.task.id}",
            self.callback,
            build_snapshot(state, self.max_logs),
            logger=self.logger,
        )
        return True
