"""Console and network telemetry capture for a single run."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Dict, Optional, Set

from .best_effort import attempt_sync
from .models import ConsoleLevel, ConsoleLogEntry, NetworkRequestRecord, RunState, now_iso
from .targets import is_same_origin

_logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class TelemetryCollector:
    """Accumulate console entries and request timings emitted by a page.

    Handlers append into the run's own ``RunState`` buffers; nothing is shared
    across runs. Request start times are keyed by URL, so two in-flight requests
    to the same URL share one slot and the later start wins.
    """

    EVENTS = ("console", "request", "requestfinished")

    def __init__(
        self,
        state: RunState,
        *,
        clock_ms: Optional[Callable[[], int]] = None,
        logger: Any = None,
    ):
        self.state = state
        self.clock_ms = clock_ms or _now_ms
        self.logger = logger or _logger
        self._page: Any = None
        self._handlers: Dict[str, Callable[[Any], None]] = {}
        self._tasks: Set[asyncio.Task[Any]] = set()
        self._request_started_ms: Dict[str, int] = {}

    @property
    def attached(self) -> bool:
        return self._page is not None

    def attach(self, page: Any) -> None:
        if self._page is not None:
            return
        self._handlers = {
            "console": self._on_console,
            "request": self._on_request,
            "requestfinished": self._on_request_finished,
        }
        for event, handler in self._handlers.items():
            page.on(event, handler)
        self._page = page

    async def detach(self) -> None:
        """Remove listeners and wait for in-flight request bookkeeping."""
        page = self._page
        if page is not None:
            for event, handler in self._handlers.items():
                attempt_sync(f"remove_listener:{event}", page.remove_listener, event, handler, logger=self.logger)
        self._page = None
        self._handlers = {}
        tasks = list(self._tasks)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

    def _on_console(self, msg: Any) -> None:
        level = ConsoleLevel.parse(getattr(msg, "type", ""))
        entry = ConsoleLogEntry(
            level=level,
            message=str(getattr(msg, "text", "") or ""),
            timestamp=now_iso(),
        )
        self.state.console_logs.append(entry)
        if level is not ConsoleLevel.ERROR:
            return
        self.state.errors.append(f"console_error: {entry.message}")
        try:
            location = getattr(msg, "location", None) or {}
            source = location.get("url") if isinstance(location, dict) else None
            if isinstance(source, str) and source and is_same_origin(source, self.state.origin):
                self.state.same_origin_console_error = True
        except Exception as e:
            self.logger.debug("console location unavailable: %s", e)

    def _on_request(self, request: Any) -> None:
        try:
            self._request_started_ms[str(request.url)] = self.clock_ms()
        except Exception as e:
            self.logger.debug("request start not recorded: %s", e)

    def _on_request_finished(self, request: Any) -> None:
        task = asyncio.ensure_future(self._handle_request_finished(request))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _handle_request_finished(self, request: Any) -> None:
        try:
            url = str(request.url)
            response = await request.response()
            status = int(response.status) if response is not None else 0
            now = self.clock_ms()
            started = self._request_started_ms.get(url, now)
            self.state.network_requests.append(
                NetworkRequestRecord(
                    method=str(request.method or "").upper(),
                    url=url,
                    status=status,
                    duration_ms=max(0, now - started),
                )
            )
        except Exception as e:
            self.logger.debug("request finish not recorded: %s", e)
