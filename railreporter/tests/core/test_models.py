"""Tests for core domain models."""

from dataclasses import FrozenInstanceError

import pytest

from railreporter.core.models import (
    Failure,
    LifecycleEvent,
    LifecycleSignal,
    PendingResult,
    Run,
    SubmissionError,
    SubmissionReport,
)


class TestPendingResult:
    def test_append_comment_joins_with_newline(self) -> None:
        result = PendingResult(case_id=101, assignedto_id=7, status_id=3)

        result.append_comment("first")
        result.append_comment("second")

        assert result.comment == "first\nsecond"

    def test_defaults(self) -> None:
        result = PendingResult(case_id=101, assignedto_id=7, status_id=3)
        assert result.elapsed is None
        assert result.defects is None
        assert result.version is None
        assert result.custom_fields == {}


class TestFailure:
    def test_comment(self) -> None:
        failure = Failure(
            test_name="tests/test_cart.py::test_pay",
            description="assert 3 == 4",
            file_path="tests/test_cart.py",
            line_number=9,
        )
        assert failure.comment == "Failure: tests/test_cart.py::test_pay:tests/test_cart.py:9: assert 3 == 4"

    def test_is_immutable(self) -> None:
        failure = Failure(test_name="t", description="d", file_path=None, line_number=0)
        with pytest.raises(FrozenInstanceError):
            failure.description = "changed"  # type: ignore[misc]


class TestSubmissionReport:
    def test_succeeded_without_errors(self) -> None:
        assert SubmissionReport(run=Run(id=1, name="r", suite_id=1)).succeeded

    def test_not_succeeded_with_errors(self) -> None:
        report = SubmissionReport(run=None, errors=(SubmissionError(case_id=None, message="x"),))
        assert not report.succeeded


class TestLifecycleEvent:
    @pytest.mark.parametrize(
        "signal", [LifecycleSignal.CASE_DID_FAIL, LifecycleSignal.SUITE_DID_FAIL]
    )
    def test_failure_signals_require_failure(self, signal: LifecycleSignal) -> None:
        with pytest.raises(ValueError, match=signal.value):
            LifecycleEvent(signal)

    def test_other_signals_need_no_payload(self) -> None:
        event = LifecycleEvent(LifecycleSignal.BUNDLE_DID_FINISH)
        assert event.name == ""
        assert event.failure is None
