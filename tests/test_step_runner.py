"""Tests for core.step_runner."""

import pytest

from core.errors import AuthenticationError, ConflictError, RemoteApiError
from core.step_runner import (
    BuildReport,
    BuildResult,
    BuildStep,
    ItemOutcome,
    StepItemsFailed,
    StepRunner,
    StepStatus,
    run_idempotent,
)


def _ok(value=None):
    return lambda: value


def _raise(error):
    def action():
        raise error
    return action


# ---------------------------------------------------------------------------
# StepRunner.run
# ---------------------------------------------------------------------------


class TestRunOutcomes:
    def test_mixed_outcomes_do_not_abort_the_run(self):
        steps = [
            BuildStep("A", _ok()),
            BuildStep("B", _raise(ConflictError("handle has already been taken", 422))),
            BuildStep("C", _raise(RemoteApiError("Connection refused", None, "POST", "pages"))),
            BuildStep("D", _ok()),
        ]
        report = StepRunner().run(steps)

        assert len(report) == 4
        assert report.statuses() == [
            StepStatus.SUCCEEDED,
            StepStatus.SKIPPED_EXISTING,
            StepStatus.FAILED,
            StepStatus.SUCCEEDED,
        ]
        assert report.succeeded is False
        assert report.failed_steps == ["C"]

    def test_failed_result_keeps_error_text(self):
        report = StepRunner().run([
            BuildStep("C", _raise(RemoteApiError("Connection refused", None, "POST", "pages"))),
        ])
        result = report.result_for("C")
        assert result.status is StepStatus.FAILED
        assert "Connection refused" in result.error

    def test_non_api_exception_is_recorded_as_failed(self):
        report = StepRunner().run([BuildStep("bad", _raise(KeyError("theme")))])
        assert report.results[0].status is StepStatus.FAILED

    def test_string_return_value_becomes_detail(self):
        report = StepRunner().run([BuildStep("A", _ok("3 created"))])
        assert report.results[0].detail == "3 created"

    def test_authentication_error_propagates(self):
        later = []
        steps = [
            BuildStep("A", _raise(AuthenticationError("401 Unauthorized"))),
            BuildStep("B", lambda: later.append("ran")),
        ]
        with pytest.raises(AuthenticationError):
            StepRunner().run(steps)
        assert later == []

    def test_steps_run_in_declared_order(self):
        order = []
        steps = [BuildStep(name, lambda n=name: order.append(n)) for name in "abcde"]
        StepRunner().run(steps)
        assert order == list("abcde")

    def test_report_records_shop_and_timestamps(self):
        report = StepRunner().run([BuildStep("A", _ok())], shop="x.myshopify.com")
        assert report.shop == "x.myshopify.com"
        assert report.started_at
        assert report.completed_at

    def test_step_banner_printed(self, capsys):
        StepRunner().run([BuildStep("store_settings", _ok())])
        out = capsys.readouterr().out
        assert "STEP 1: STORE SETTINGS" in out


class TestValidation:
    def test_duplicate_names_rejected_before_running(self):
        ran = []
        steps = [BuildStep("A", lambda: ran.append(1)), BuildStep("A", _ok())]
        with pytest.raises(ValueError, match="Duplicate"):
            StepRunner().run(steps)
        assert ran == []

    def test_dependency_must_be_declared_earlier(self):
        steps = [BuildStep("B", _ok(), ("A",)), BuildStep("A", _ok())]
        with pytest.raises(ValueError, match="depends on 'A'"):
            StepRunner().run(steps)

    def test_valid_dependencies_accepted(self):
        steps = [BuildStep("A", _ok()), BuildStep("B", _ok(), ("A",))]
        report = StepRunner().run(steps)
        assert report.succeeded is True


# ---------------------------------------------------------------------------
# BuildResult / BuildReport
# ---------------------------------------------------------------------------


def test_build_result_is_immutable():
    result = BuildResult("A", StepStatus.SUCCEEDED)
    with pytest.raises(Exception):
        result.status = StepStatus.FAILED


def test_report_to_dict():
    report = BuildReport(shop="s", results=[
        BuildResult("A", StepStatus.SUCCEEDED, detail="ok"),
        BuildResult("B", StepStatus.FAILED, error="boom"),
    ])
    data = report.to_dict()
    assert data["success"] is False
    assert data["failed_steps"] == ["B"]
    assert data["results"][0] == {"step": "A", "status": "succeeded", "error": None, "detail": "ok"}
    assert data["results"][1]["status"] == "failed"


# ---------------------------------------------------------------------------
# run_idempotent / ItemOutcome
# ---------------------------------------------------------------------------


class TestRunIdempotent:
    def test_tallies_each_item(self):
        def create(item):
            if item == "dup":
                raise ConflictError("taken", 422)
            if item == "bad":
                raise RemoteApiError("invalid", 422)

        outcome = run_idempotent(["new", "dup", "bad"], create, label=str)
        assert outcome.created == ["new"]
        assert outcome.existing == ["dup"]
        assert outcome.failed == {"bad": "invalid"}

    def test_continues_after_item_failure(self):
        seen = []

        def create(item):
            seen.append(item)
            if item == 1:
                raise RemoteApiError("invalid", 422)

        run_idempotent([1, 2, 3], create, label=str)
        assert seen == [1, 2, 3]

    def test_authentication_error_not_tolerated(self):
        def create(item):
            raise AuthenticationError("401 Unauthorized")

        with pytest.raises(AuthenticationError):
            run_idempotent([1, 2], create, label=str)


class TestRaiseForOutcome:
    def test_summary_when_items_created(self):
        outcome = ItemOutcome(created=["a"], existing=["b"])
        assert outcome.raise_for_outcome("pages") == "1 created, 1 existing, 0 failed"

    def test_all_existing_is_conflict(self):
        outcome = ItemOutcome(existing=["a", "b"])
        with pytest.raises(ConflictError):
            outcome.raise_for_outcome("pages")

    def test_any_failure_fails_the_step(self):
        outcome = ItemOutcome(created=["a"], failed={"b": "invalid"})
        with pytest.raises(StepItemsFailed, match="b \\(invalid\\)"):
            outcome.raise_for_outcome("pages")

    def test_step_with_failed_items_is_failed_not_skipped(self):
        outcome = ItemOutcome(existing=["a"], failed={"b": "invalid"})
        report = StepRunner().run([BuildStep("pages", lambda: outcome.raise_for_outcome("pages"))])
        assert report.results[0].status is StepStatus.FAILED
