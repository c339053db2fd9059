"""Post-navigation page health gate."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable


@dataclass(frozen=True)
class HealthCheck:
    status_ok: bool
    title_ok: bool
    same_origin_console_error: bool
    fatal_same_origin: bool = True

    @property
    def success(self) -> bool:
        fatal = self.fatal_same_origin and self.same_origin_console_error
        return self.status_ok and self.title_ok and not fatal


async def evaluate_page_health(
    page: Any,
    response: Any,
    *,
    console_error_flag: Callable[[], bool],
    fatal_same_origin: bool = True,
) -> HealthCheck:
    """Run the three-part health check once navigation has settled.

    A missing response object counts as an OK status. ``console_error_flag`` is
    read after the title, so console errors delivered while the title is being
    fetched still count. Reading the title is a browser call and may raise; that
    propagates to the caller's failure path.
    """
    status_ok = True if response is None else int(response.status) < 400
    title = str(await page.title() or "").strip()
    return HealthCheck(
        status_ok=status_ok,
        title_ok=len(title) > 0,
        same_origin_console_error=bool(console_error_flag()),
        fatal_same_origin=bool(fatal_same_origin),
    )
