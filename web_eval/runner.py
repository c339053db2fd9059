"""Task runner: drive one browser evaluation from launch to report."""

from __future__ import annotations

import base64
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from .assertions import AssertionEvaluator
from .best_effort import attempt
from .config import RunnerSettings
from .health import evaluate_page_health
from .live import LiveSnapshotEmitter, LiveUpdateCallback
from .models import RunResult, RunState, RunStatus, Step, TaskRecord, now_iso
from .report import PAGE_HEALTH_CHECK_FAILED, build_report, normalize_error
from .session import BrowserSessionManager
from .targets import url_origin
from .telemetry import TelemetryCollector

_logger = logging.getLogger(__name__)

DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DESKTOP_VIEWPORT = {"width": 1366, "height": 768}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TaskRunner:
    """Run one task against a fresh browser and always return a RunResult."""

    def __init__(
        self,
        *,
        session_manager: BrowserSessionManager,
        settings: Optional[RunnerSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
        logger: Any = None,
    ):
        self.session_manager = session_manager
        self.settings = settings or RunnerSettings()
        self.clock = clock or _utc_now
        self.logger = logger or _logger

    async def run(
        self,
        task: TaskRecord,
        on_live_update: Optional[LiveUpdateCallback] = None,
    ) -> RunResult:
        """Execute ``task`` and return its result.

        Only cancellation escapes this coroutine; every other failure becomes a
        ``failed`` result carrying a complete report.
        """
        started_at = self.clock()
        state = RunState(task=task)
        telemetry = TelemetryCollector(state, logger=self.logger)
        emitter = None
        if on_live_update is not None:
            emitter = LiveSnapshotEmitter(
                on_live_update,
                max_logs=self.settings.live_log_limit,
                min_interval_ms=self.settings.live_min_interval_ms,
                logger=self.logger,
            )

        browser = None
        page = None
        try:
            state.origin = url_origin(task.url)
            browser = await self.session_manager.launch()
            if task.headless is False:
                page = await attempt(
                    "desktop_profile",
                    browser.new_page,
                    user_agent=DESKTOP_USER_AGENT,
                    viewport=dict(DESKTOP_VIEWPORT),
                    logger=self.logger,
                )
            if page is None:
                page = await browser.new_page()

            telemetry.attach(page)

            self._add_step(state, "goto", "nav")
            await self._emit(emitter, state)
            timeout_ms = task.timeout_ms if task.timeout_ms is not None else self.settings.default_timeout_ms
            response = await page.goto(task.url, wait_until="domcontentloaded", timeout=timeout_ms)

            health = await evaluate_page_health(
                page,
                response,
                console_error_flag=lambda: state.same_origin_console_error,
                fatal_same_origin=task.fatal_same_origin,
            )

            if health.success and task.assertions:
                self._add_step(state, "assertions", "assertions")
                await self._emit(emitter, state)
                evaluator = AssertionEvaluator(page, state.errors, logger=self.logger)
                results, verdict = await evaluator.evaluate(task.assertions)
                if results:
                    state.assertion_results = results
                    state.verdict = verdict

            self._add_step(state, "cleanup", "cleanup")
            finished_at = self.clock()
            await self._emit(emitter, state, force=True)
            await self._capture_screenshot(page, state)
            await telemetry.detach()

            report = build_report(
                state,
                success=health.success,
                started_at=started_at,
                finished_at=finished_at,
            )
            if health.success:
                result = RunResult(report=report, status=RunStatus.COMPLETED)
            else:
                result = RunResult(
                    report=report,
                    status=RunStatus.FAILED,
                    last_error=PAGE_HEALTH_CHECK_FAILED,
                )
            self.logger.info(
                "task %s finished status=%s verdict=%s url=%s",
                task.id,
                result.status.value,
                report.verdict.value if report.verdict else None,
                task.url,
            )
            return result
        except Exception as e:
            finished_at = self.clock()
            message = normalize_error(e)
            state.errors.append(message)
            self.logger.warning("task %s failed url=%s: %s", task.id, task.url, message)

            if task.capture_failure_screenshot:
                await self._capture_screenshot(page, state)
            await attempt("telemetry_detach", telemetry.detach, logger=self.logger)

            report = build_report(
                state,
                success=False,
                started_at=started_at,
                finished_at=finished_at,
            )
            return RunResult(report=report, status=RunStatus.FAILED, last_error=message)
        finally:
            if telemetry.attached:
                await attempt("telemetry_detach", telemetry.detach, logger=self.logger)
            if page is not None:
                await attempt("page_close", page.close, logger=self.logger)
            if browser is not None:
                await attempt("browser_close", browser.close, logger=self.logger)

    @staticmethod
    def _add_step(state: RunState, action: str, phase: str) -> None:
        state.steps.append(Step(action=action, timestamp=now_iso(), phase=phase))

    @staticmethod
    async def _emit(emitter: Optional[LiveSnapshotEmitter], state: RunState, force: bool = False) -> None:
        if emitter is not None:
            await emitter.emit(state, force=force)

    async def _capture_screenshot(self, page: Any, state: RunState) -> None:
        if state.screenshot_base64 or page is None:
            return
        image = await attempt("screenshot", page.screenshot, full_page=True, logger=self.logger)
        if isinstance(image, (bytes, bytearray)):
            state.screenshot_base64 = base64.b64encode(bytes(image)).decode("ascii")
        elif isinstance(image, str) and image:
            state.screenshot_base64 = image
