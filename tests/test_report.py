from datetime import datetime, timedelta, timezone

from web_eval.models import AssertionDefinition, AssertionResult, RunState, Step, TaskRecord, Verdict
from web_eval.report import build_report, duration_ms, normalize_error

START = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def _state():
    state = RunState(task=TaskRecord(id="r1", url="https://example.com", task="desc"))
    state.steps.append(Step(action="goto", timestamp="t", phase="nav"))
    state.assertion_results = [
        AssertionResult(definition=AssertionDefinition(id="a", kind="textIncludes", value="x"), passed=True)
    ]
    state.verdict = Verdict.PASS
    return state


def test_success_report_carries_assertions():
    report = build_report(_state(), success=True, started_at=START, finished_at=START + timedelta(milliseconds=1500))

    assert report.duration_ms == 1500
    assert report.verdict is Verdict.PASS
    assert len(report.assertions) == 1
    assert report.started_at == "2024-05-01T12:00:00+00:00"
    data = report.to_dict()
    assert data["verdict"] == "pass"
    assert data["assertions"][0] == {"id": "a", "kind": "textIncludes", "value": "x", "passed": True}


def test_failure_report_drops_verdict():
    report = build_report(_state(), success=False, started_at=START, finished_at=START)

    assert report.success is False
    assert report.verdict is None
    assert report.assertions is None
    assert "verdict" not in report.to_dict()


def test_report_is_detached_from_state():
    state = _state()
    report = build_report(state, success=True, started_at=START, finished_at=START)

    state.steps.append(Step(action="cleanup", timestamp="t", phase="cleanup"))

    assert len(report.steps) == 1


def test_duration_never_negative():
    assert duration_ms(START, START - timedelta(seconds=3)) == 0


def test_error_normalization():
    assert normalize_error(RuntimeError("fetch https://x/v1/acquire failed")) == "browser_backend_unavailable"
    assert normalize_error(RuntimeError("net::ERR_CONNECTION_REFUSED")) == "net::ERR_CONNECTION_REFUSED"
    assert normalize_error(TimeoutError()) == "TimeoutError"
