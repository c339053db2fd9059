"""Report assembly and run error normalization."""

from __future__ import annotations

from datetime import datetime

from .models import Report, RunState

BACKEND_UNAVAILABLE = "browser_backend_unavailable"
PAGE_HEALTH_CHECK_FAILED = "page_health_check_failed"

# Substrings that identify a failure to acquire a browser from the backend.
BACKEND_UNAVAILABLE_MARKERS = ("/v1/acquire",)


def error_message(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


def normalize_error(exc: BaseException) -> str:
    """Rewrite backend-acquisition failures to a stable sentinel."""
    message = error_message(exc)
    if any(marker in message for marker in BACKEND_UNAVAILABLE_MARKERS):
        return BACKEND_UNAVAILABLE
    return message


def duration_ms(started_at: datetime, finished_at: datetime) -> int:
    return max(0, int((finished_at - started_at).total_seconds() * 1000))


def build_report(
    state: RunState,
    *,
    success: bool,
    started_at: datetime,
    finished_at: datetime,
) -> Report:
    """Snapshot the run's accumulated state into an immutable Report.

    Verdict and assertion results are only carried on a successful build, and
    only when assertions actually ran.
    """
    assertions = None
    verdict = None
    if success and state.assertion_results is not None:
        assertions = tuple(state.assertion_results)
        verdict = state.verdict
    return Report(
        task_id=state.task.id,
        url=state.task.url,
        task_description=state.task.task,
        success=success,
        steps=tuple(state.steps),
        console_logs=tuple(state.console_logs),
        network_requests=tuple(state.network_requests),
        errors=tuple(state.errors),
        duration_ms=duration_ms(started_at, finished_at),
        started_at=started_at.isoformat(),
        finished_at=finished_at.isoformat(),
        verdict=verdict,
        assertions=assertions,
        screenshot_base64=state.screenshot_base64,
    )
