import base64
import json
from unittest.mock import patch

import pytest

from tests.fakes import FakeSessionManager
from web_eval import cli
from web_eval.config import RunnerSettings
from web_eval.models import RunStatus, TaskRecord


def test_build_task_from_arguments():
    args = cli._parse_args(
        [
            "--url",
            " https://example.com ",
            "--id",
            "cli-1",
            "--headed",
            "--timeout-ms",
            "9000",
            "--assert-text",
            "Welcome",
            "--assert-selector",
            "#login",
            "--assert-selector",
            "footer",
        ]
    )

    task = cli.build_task(args)

    assert task.id == "cli-1"
    assert task.url == "https://example.com"
    assert task.headless is False
    assert task.timeout_ms == 9000
    assert [(a.id, a.kind, a.value) for a in task.assertions] == [
        ("text-1", "textIncludes", "Welcome"),
        ("selector-1", "selectorExists", "#login"),
        ("selector-2", "selectorExists", "footer"),
    ]


@pytest.mark.asyncio
async def test_execute_blocks_private_targets_without_launching():
    manager = FakeSessionManager()
    task = TaskRecord(id="t", url="http://127.0.0.1/admin")

    result = await cli.execute(task, RunnerSettings(), session_manager=manager)

    assert result.status is RunStatus.FAILED
    assert result.last_error == "ssrf_blocked:forbidden_host"
    assert manager.launches == 0


@pytest.mark.asyncio
async def test_execute_applies_runner_defaults():
    manager = FakeSessionManager()
    manager.page._goto_error = RuntimeError("net::ERR_FAILED")
    task = TaskRecord(id="t", url="https://example.com")

    result = await cli.execute(task, RunnerSettings(screenshot_on_failure=False), session_manager=manager)

    assert result.status is RunStatus.FAILED
    assert result.report.screenshot_base64 is None
    assert manager.page.screenshot_calls == 0


def test_main_prints_result_and_writes_screenshot(tmp_path, capsys, monkeypatch):
    manager = FakeSessionManager()
    monkeypatch.delenv("WEB_EVAL_ALLOWED_ORIGINS", raising=False)
    shot = tmp_path / "shots" / "page.png"

    with patch.object(cli, "BrowserSessionManager", return_value=manager):
        code = cli.main(["--url", "https://example.com", "--screenshot", str(shot), "--live"])

    out = json.loads(capsys.readouterr().out)
    assert code == 0
    assert out["status"] == "completed"
    assert "screenshotBase64" not in out["report"]
    assert shot.read_bytes() == b"png-bytes"


def test_main_exit_code_on_failure(capsys, monkeypatch):
    monkeypatch.delenv("WEB_EVAL_ALLOWED_ORIGINS", raising=False)

    code = cli.main(["--url", "ftp://example.com"])

    out = json.loads(capsys.readouterr().out)
    assert code == 1
    assert out["lastError"] == "ssrf_blocked:invalid_scheme"
