"""Environment-driven runner settings."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from dotenv import load_dotenv

from .live import MAX_LIVE_LOGS
from .models import DEFAULT_TIMEOUT_MS, TaskRecord

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def parse_bool_env(name: str) -> Optional[bool]:
    value = os.getenv(name)
    if value is None:
        return None
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    return None


def parse_int_env(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


@dataclass(frozen=True)
class RunnerSettings:
    """Immutable runner-level configuration."""

    default_timeout_ms: int = DEFAULT_TIMEOUT_MS
    fatal_same_origin: Optional[bool] = None
    screenshot_on_failure: Optional[bool] = None
    live_log_limit: int = MAX_LIVE_LOGS
    live_min_interval_ms: int = 0
    allowed_origins: Tuple[str, ...] = ()
    cdp_endpoint: Optional[str] = None
    browser_headless: bool = True

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "RunnerSettings":
        if dotenv:
            load_dotenv()
        defaults = cls()
        allowed_csv = os.getenv("WEB_EVAL_ALLOWED_ORIGINS", "")
        headless = parse_bool_env("WEB_EVAL_BROWSER_HEADLESS")
        timeout = parse_int_env("WEB_EVAL_DEFAULT_TIMEOUT_MS")
        live_limit = parse_int_env("WEB_EVAL_LIVE_LOG_LIMIT")
        live_interval = parse_int_env("WEB_EVAL_LIVE_MIN_INTERVAL_MS")
        return cls(
            default_timeout_ms=timeout if timeout is not None else defaults.default_timeout_ms,
            fatal_same_origin=parse_bool_env("WEB_EVAL_FATAL_SAME_ORIGIN"),
            screenshot_on_failure=parse_bool_env("WEB_EVAL_SCREENSHOT_ON_FAILURE"),
            live_log_limit=live_limit if live_limit is not None else defaults.live_log_limit,
            live_min_interval_ms=live_interval if live_interval is not None else defaults.live_min_interval_ms,
            allowed_origins=tuple(o.strip().lower() for o in allowed_csv.split(",") if o.strip()),
            cdp_endpoint=os.getenv("WEB_EVAL_CDP_ENDPOINT", "").strip() or None,
            browser_headless=defaults.browser_headless if headless is None else headless,
        )


def apply_runner_defaults(task: TaskRecord, settings: RunnerSettings) -> TaskRecord:
    """Fill task flags left unset from runner settings; explicit task values win."""
    updates = {}
    if task.same_origin_console_fatal is None and settings.fatal_same_origin is not None:
        updates["same_origin_console_fatal"] = settings.fatal_same_origin
    if task.screenshot_on_failure is None and settings.screenshot_on_failure is not None:
        updates["screenshot_on_failure"] = settings.screenshot_on_failure
    if not updates:
        return task
    return replace(task, **updates)
