"""Attempt-and-ignore helpers for optional browser operations."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Optional

_logger = logging.getLogger(__name__)


async def attempt(
    label: str,
    func: Callable[..., Any],
    *args: Any,
    logger: Any = None,
    **kwargs: Any,
) -> Optional[Any]:
    """Call ``func`` (sync or async) and return its result, or None if it raised.

    Failures are logged at DEBUG under ``label`` and never propagate.
    """
    log = logger or _logger
    try:
        result = func(*args, **kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result
    except Exception as e:
        log.debug("best-effort %s failed: %s: %s", label, type(e).__name__, e)
        return None


def attempt_sync(
    label: str,
    func: Callable[..., Any],
    *args: Any,
    logger: Any = None,
    **kwargs: Any,
) -> Optional[Any]:
    log = logger or _logger
    try:
        return func(*args, **kwargs)
    except Exception as e:
        log.debug("best-effort %s failed: %s: %s", label, type(e).__name__, e)
        return None
