"""Declarative post-navigation assertions."""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Tuple

from .models import AssertionDefinition, AssertionKind, AssertionResult, Verdict

_logger = logging.getLogger(__name__)

TEXT_NOT_FOUND = "Text not found in page content"
SELECTOR_NOT_FOUND = "No element found for selector"


def compute_verdict(results: List[AssertionResult]) -> Optional[Verdict]:
    if not results:
        return None
    return Verdict.PASS if all(r.passed for r in results) else Verdict.FAIL


class AssertionEvaluator:
    """Evaluate assertion definitions against a loaded page."""

    def __init__(self, page: Any, errors: List[str], logger: Any = None):
        self.page = page
        self.errors = errors
        self.logger = logger or _logger

    async def evaluate(
        self, definitions: Iterable[AssertionDefinition]
    ) -> Tuple[List[AssertionResult], Optional[Verdict]]:
        """Read the page content once and check every well-formed definition."""
        results: List[AssertionResult] = []
        html = str(await self.page.content() or "")
        for definition in definitions:
            if definition is None or not definition.kind or not definition.value:
                continue
            if definition.kind == AssertionKind.TEXT_INCLUDES.value:
                results.append(self._text_includes(definition, html))
            elif definition.kind == AssertionKind.SELECTOR_EXISTS.value:
                results.append(await self._selector_exists(definition))
            else:
                self.logger.debug("skipping assertion %s with unknown kind %r", definition.id, definition.kind)
        return results, compute_verdict(results)

    def _text_includes(self, definition: AssertionDefinition, html: str) -> AssertionResult:
        passed = str(definition.value) in html
        return AssertionResult(
            definition=definition,
            passed=passed,
            details=None if passed else TEXT_NOT_FOUND,
        )

    async def _selector_exists(self, definition: AssertionDefinition) -> AssertionResult:
        try:
            element = await self.page.query_selector(str(definition.value))
        except Exception as e:
            message = str(e) or type(e).__name__
            self.errors.append(f"assertion_error:{definition.id}:{message}")
            return AssertionResult(
                definition=definition,
                passed=False,
                details=f"Selector evaluation error: {message}",
            )
        passed = element is not None
        return AssertionResult(
            definition=definition,
            passed=passed,
            details=None if passed else SELECTOR_NOT_FOUND,
        )
