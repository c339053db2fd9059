"""Shared models for the web evaluation runner."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


DEFAULT_TIMEOUT_MS = 30000


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ConsoleLevel(str, Enum):
    LOG = "log"
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"

    @classmethod
    def parse(cls, raw: Any) -> "ConsoleLevel":
        """Map a driver-reported console type onto the closed level set.

        Playwright reports ``console.warn`` as "warning"; unknown types become LOG.
        """
        value = str(raw or "").strip().lower()
        if value == "warning":
            return cls.WARN
        try:
            return cls(value)
        except ValueError:
            return cls.LOG


class AssertionKind(str, Enum):
    TEXT_INCLUDES = "textIncludes"
    SELECTOR_EXISTS = "selectorExists"


class RunStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"


class Verdict(str, Enum):
    PASS = "pass"
    FAIL = "fail"


@dataclass(frozen=True)
class AssertionDefinition:
    id: str
    kind: Optional[str] = None
    value: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AssertionDefinition":
        d = data if isinstance(data, dict) else {}
        kind = d.get("kind")
        value = d.get("value")
        return cls(
            id=str(d.get("id") or ""),
            kind=str(kind) if kind else None,
            value=str(value) if value is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "kind": self.kind, "value": self.value}


@dataclass(frozen=True)
class TaskRecord:
    """Immutable description of one browser evaluation."""

    id: str
    url: str
    task: str = ""
    timeout_ms: Optional[int] = None
    headless: bool = True
    assertions: Tuple[AssertionDefinition, ...] = ()
    same_origin_console_fatal: Optional[bool] = None
    screenshot_on_failure: Optional[bool] = None

    @property
    def fatal_same_origin(self) -> bool:
        return True if self.same_origin_console_fatal is None else bool(self.same_origin_console_fatal)

    @property
    def capture_failure_screenshot(self) -> bool:
        return True if self.screenshot_on_failure is None else bool(self.screenshot_on_failure)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TaskRecord":
        """Build a task from its camelCase wire shape."""
        d = data if isinstance(data, dict) else {}
        raw_assertions = d.get("assertions")
        assertions: Tuple[AssertionDefinition, ...] = ()
        if isinstance(raw_assertions, list):
            assertions = tuple(
                AssertionDefinition.from_dict(item) for item in raw_assertions if isinstance(item, dict)
            )
        timeout = d.get("timeoutMs")
        return cls(
            id=str(d.get("id") or ""),
            url=str(d.get("url") or ""),
            task=str(d.get("task") or ""),
            timeout_ms=int(timeout) if timeout is not None else None,
            headless=d.get("headless") is not False,
            assertions=assertions,
            same_origin_console_fatal=d.get("sameOriginConsoleFatal"),
            screenshot_on_failure=d.get("screenshotOnFailure"),
        )


@dataclass(frozen=True)
class AssertionResult:
    definition: AssertionDefinition
    passed: bool
    details: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out = self.definition.to_dict()
        out["passed"] = self.passed
        if self.details is not None:
            out["details"] = self.details
        return out


@dataclass(frozen=True)
class ConsoleLogEntry:
    level: ConsoleLevel
    message: str
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        return {"level": self.level.value, "message": self.message, "timestamp": self.timestamp}


@dataclass(frozen=True)
class NetworkRequestRecord:
    method: str
    url: str
    status: int
    duration_ms: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "method": self.method,
            "url": self.url,
            "status": self.status,
            "durationMs": self.duration_ms,
        }


@dataclass(frozen=True)
class Step:
    action: str
    timestamp: str
    phase: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"action": self.action, "timestamp": self.timestamp}
        if self.phase is not None:
            out["phase"] = self.phase
        return out


@dataclass(frozen=True)
class LiveSnapshot:
    """Bounded mid-run view pushed to a live observer."""

    task_id: str
    steps: List[Step]
    errors: List[str]
    logs: List[ConsoleLogEntry]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "taskId": self.task_id,
            "steps": [s.to_dict() for s in self.steps],
            "errors": list(self.errors),
            "logs": [e.to_dict() for e in self.logs],
        }


@dataclass(frozen=True)
class Report:
    task_id: str
    url: str
    task_description: str
    success: bool
    steps: Tuple[Step, ...]
    console_logs: Tuple[ConsoleLogEntry, ...]
    network_requests: Tuple[NetworkRequestRecord, ...]
    errors: Tuple[str, ...]
    duration_ms: int
    started_at: str
    finished_at: str
    verdict: Optional[Verdict] = None
    assertions: Optional[Tuple[AssertionResult, ...]] = None
    screenshot_base64: Optional[str] = None

    def to_dict(self, include_screenshot: bool = True) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "taskId": self.task_id,
            "url": self.url,
            "taskDescription": self.task_description,
            "success": self.success,
            "steps": [s.to_dict() for s in self.steps],
            "consoleLogs": [e.to_dict() for e in self.console_logs],
            "networkRequests": [r.to_dict() for r in self.network_requests],
            "errors": list(self.errors),
            "durationMs": self.duration_ms,
            "startedAt": self.started_at,
            "finishedAt": self.finished_at,
        }
        if self.verdict is not None:
            out["verdict"] = self.verdict.value
        if self.assertions is not None:
            out["assertions"] = [a.to_dict() for a in self.assertions]
        if include_screenshot and self.screenshot_base64 is not None:
            out["screenshotBase64"] = self.screenshot_base64
        return out


@dataclass(frozen=True)
class RunResult:
    report: Report
    status: RunStatus
    last_error: Optional[str] = None

    def to_dict(self, include_screenshot: bool = True) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "report": self.report.to_dict(include_screenshot=include_screenshot),
            "status": self.status.value,
        }
        if self.last_error is not None:
            out["lastError"] = self.last_error
        return out


@dataclass
class RunState:
    """Mutable accumulators owned by a single run."""

    task: TaskRecord
    origin: str = ""
    steps: List[Step] = field(default_factory=list)
    console_logs: List[ConsoleLogEntry] = field(default_factory=list)
    network_requests: List[NetworkRequestRecord] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    same_origin_console_error: bool = False
    verdict: Optional[Verdict] = None
    assertion_results: Optional[List[AssertionResult]] = None
    screenshot_base64: Optional[str] = None
