"""Command-line executor: run one evaluation task and print its result as JSON."""

from __future__ import annotations

import argparse
import asyncio
import base64
import json
import sys
import uuid
from pathlib import Path
from typing import List, Optional, Sequence

from .config import RunnerSettings, apply_runner_defaults
from .logging_config import configure_logging, get_logger
from .models import AssertionDefinition, AssertionKind, LiveSnapshot, RunResult, RunStatus, TaskRecord
from .runner import TaskRunner
from .session import BrowserSessionManager
from .targets import blocked_result, validate_target_url

logger = get_logger(__name__)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="web_eval", description="Evaluate a web page in a headless browser")
    parser.add_argument("--url", required=True, help="Absolute http(s) URL to evaluate")
    parser.add_argument("--task", default="", help="Human-readable task description")
    parser.add_argument("--id", dest="task_id", default=None, help="Task id (random UUID when omitted)")
    parser.add_argument("--timeout-ms", type=int, default=None, help="Navigation timeout in milliseconds")
    parser.add_argument("--headed", action="store_true", help="Use a desktop user agent and viewport")
    parser.add_argument("--assert-text", action="append", default=[], metavar="TEXT")
    parser.add_argument("--assert-selector", action="append", default=[], metavar="SELECTOR")
    parser.add_argument("--screenshot", default=None, metavar="PATH", help="Write the captured screenshot here")
    parser.add_argument("--live", action="store_true", help="Log live progress snapshots")
    parser.add_argument("--log-level", default=None)
    return parser.parse_args(argv)


def build_task(args: argparse.Namespace) -> TaskRecord:
    assertions: List[AssertionDefinition] = []
    for i, value in enumerate(args.assert_text, start=1):
        assertions.append(AssertionDefinition(id=f"text-{i}", kind=AssertionKind.TEXT_INCLUDES.value, value=value))
    for i, value in enumerate(args.assert_selector, start=1):
        assertions.append(
            AssertionDefinition(id=f"selector-{i}", kind=AssertionKind.SELECTOR_EXISTS.value, value=value)
        )
    return TaskRecord(
        id=args.task_id or str(uuid.uuid4()),
        url=str(args.url).strip(),
        task=args.task,
        timeout_ms=args.timeout_ms,
        headless=not args.headed,
        assertions=tuple(assertions),
    )


def _log_snapshot(snapshot: LiveSnapshot) -> None:
    last = snapshot.steps[-1].action if snapshot.steps else None
    logger.info(
        "[live] task=%s step=%s errors=%d warnings=%d",
        snapshot.task_id,
        last,
        len(snapshot.errors),
        len(snapshot.logs),
    )


async def execute(
    task: TaskRecord,
    settings: RunnerSettings,
    *,
    session_manager: Optional[BrowserSessionManager] = None,
    live: bool = False,
) -> RunResult:
    """Guard the target, then run the task with runner defaults applied."""
    task = apply_runner_defaults(task, settings)
    reason = validate_target_url(task.url, settings.allowed_origins)
    if reason is not None:
        logger.warning("task %s blocked: %s (%s)", task.id, reason, task.url)
        return blocked_result(task, reason)

    manager = session_manager or BrowserSessionManager(
        headless=settings.browser_headless,
        cdp_endpoint=settings.cdp_endpoint,
    )
    runner = TaskRunner(session_manager=manager, settings=settings)
    logger.info("running task %s -> %s", task.id, task.url)
    return await runner.run(task, on_live_update=_log_snapshot if live else None)


def _write_screenshot(result: RunResult, path: str) -> None:
    data = result.report.screenshot_base64
    if not data:
        logger.warning("no screenshot captured for task %s", result.report.task_id)
        return
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(base64.b64decode(data))
    logger.info("screenshot written to %s", target)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    settings = RunnerSettings.from_env()
    configure_logging(args.log_level)

    task = build_task(args)
    result = asyncio.run(execute(task, settings, live=args.live))
    if args.screenshot:
        _write_screenshot(result, args.screenshot)

    json.dump(result.to_dict(include_screenshot=False), sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return 0 if result.status is RunStatus.COMPLETED else 1
