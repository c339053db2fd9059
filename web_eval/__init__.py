"""Headless-browser evaluation runner."""

from .assertions import AssertionEvaluator
from .config import RunnerSettings, apply_runner_defaults
from .health import HealthCheck, evaluate_page_health
from .live import LiveSnapshotEmitter, build_snapshot
from .models import (
    AssertionDefinition,
    AssertionKind,
    AssertionResult,
    ConsoleLevel,
    ConsoleLogEntry,
    LiveSnapshot,
    NetworkRequestRecord,
    Report,
    RunResult,
    RunState,
    RunStatus,
    Step,
    TaskRecord,
    Verdict,
)
from .report import build_report, normalize_error
from .runner import TaskRunner
from .session import BrowserSessionManager
from .telemetry import TelemetryCollector

__all__ = [
    "AssertionDefinition",
    "AssertionEvaluator",
    "AssertionKind",
    "AssertionResult",
    "BrowserSessionManager",
    "ConsoleLevel",
    "ConsoleLogEntry",
    "HealthCheck",
    "LiveSnapshot",
    "LiveSnapshotEmitter",
    "NetworkRequestRecord",
    "Report",
    "RunResult",
    "RunState",
    "RunStatus",
    "RunnerSettings",
    "Step",
    "TaskRecord",
    "TaskRunner",
    "TelemetryCollector",
    "Verdict",
    "apply_runner_defaults",
    "build_report",
    "build_snapshot",
    "evaluate_page_health",
    "normalize_error",
]
