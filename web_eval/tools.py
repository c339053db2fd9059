"""Expose the task runner as an agent-callable tool."""

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional

from langchain_core.tools import StructuredTool

from .models import AssertionDefinition, TaskRecord
from .runner import TaskRunner

TOOL_NAME = "web_eval_run_task"


def build_tools(runner: TaskRunner) -> List[Any]:
    """Return the runner's tools for LLM tool calling."""

    async def web_eval_run_task(
        url: str,
        task: str = "",
        timeout_ms: Optional[int] = None,
        headless: bool = True,
        assertions: Optional[List[Dict[str, str]]] = None,
    ) -> Dict[str, Any]:
        """Open a URL in a headless browser, check page health and optional assertions,
        and return the run status with a report of console logs, network requests and
        assertion results.

        Assertions are objects with ``id``, ``kind`` ("textIncludes" or
        "selectorExists") and ``value``.
        """
        record = TaskRecord(
            id=str(uuid.uuid4()),
            url=str(url or "").strip(),
            task=str(task or ""),
            timeout_ms=timeout_ms,
            headless=bool(headless),
            assertions=tuple(AssertionDefinition.from_dict(a) for a in (assertions or []) if isinstance(a, dict)),
        )
        result = await runner.run(record)
        return result.to_dict(include_screenshot=False)

    return [
        StructuredTool.from_function(
            name=TOOL_NAME,
            description=web_eval_run_task.__doc__ or "Run a web evaluation task.",
            coroutine=web_eval_run_task,
        )
    ]
