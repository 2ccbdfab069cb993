"""
Unit tests for the response store and answer records.
"""

import pytest
from pydantic import ValidationError

from lit_quiz.grading import AnswerStateError, ResponseStore
from lit_quiz.models import AnswerRecord, GradingResult, GradingStatus


class TestAnswerRecord:
    """Tests for the AnswerRecord model."""

    def test_new_record_is_drafting(self) -> None:
        record = AnswerRecord(id=1, answer_text="hello")

        assert record.status is GradingStatus.DRAFTING
        assert record.has_text

    def test_blank_text(self) -> None:
        assert not AnswerRecord(id=1, answer_text="   \n").has_text

    def test_result_and_error_are_exclusive(self, sample_grading_result: GradingResult) -> None:
        with pytest.raises(ValidationError, match="both a result and an error"):
            AnswerRecord(
                id=1,
                answer_text="x",
                grading_result=sample_grading_result,
                error_message="boom",
            )

    def test_record_is_frozen(self) -> None:
        record = AnswerRecord(id=1, answer_text="x")

        with pytest.raises(ValidationError):
            record.answer_text = "y"  # type: ignore[misc]


class TestResponseStore:
    """Tests for ResponseStore transitions."""

    def test_set_answer_text_creates_then_updates(self) -> None:
        store = ResponseStore()
        store.set_answer_text(1, "first")
        store.set_answer_text(1, "second")

        assert len(store) == 1
        assert store.get(1).answer_text == "second"

    def test_set_answer_text_keeps_grading_state(self, sample_grading_result: GradingResult) -> None:
        store = ResponseStore()
        store.set_answer_text(1, "draft")
        store.begin_grading(1)
        store.complete_grading(1, sample_grading_result)

        store.set_answer_text(1, "edited")

        record = store.get(1)
        assert record.answer_text == "edited"
        assert record.grading_result == sample_grading_result

    def test_records_keep_first_touch_order(self) -> None:
        store = ResponseStore()
        store.set_answer_text(3, "c")
        store.set_answer_text(1, "a")
        store.set_answer_text(3, "c2")

        assert [r.id for r in store.records()] == [3, 1]

    def test_full_lifecycle(self, sample_grading_result: GradingResult) -> None:
        store = ResponseStore()
        store.set_answer_text(1, "answer")

        assert store.begin_grading(1).status is GradingStatus.GRADING
        record = store.complete_grading(1, sample_grading_result)

        assert record.status is GradingStatus.GRADED
        assert not record.is_loading
        assert record.error_message is None

    def test_failure_then_retry_clears_error(self, sample_grading_result: GradingResult) -> None:
        """Test an error does not block another attempt."""
        store = ResponseStore()
        store.set_answer_text(1, "answer")
        store.begin_grading(1)
        failed = store.fail_grading(1, "API error: rate limited")

        assert failed.status is GradingStatus.FAILED
        assert failed.error_message == "API error: rate limited"

        retrying = store.begin_grading(1)
        assert retrying.error_message is None
        assert retrying.is_loading

    def test_begin_grading_rejects_graded_record(self, sample_grading_result: GradingResult) -> None:
        store = ResponseStore()
        store.set_answer_text(1, "answer")
        store.begin_grading(1)
        store.complete_grading(1, sample_grading_result)

        with pytest.raises(AnswerStateError, match="already graded"):
            store.begin_grading(1)

    def test_begin_grading_rejects_in_flight_record(self) -> None:
        store = ResponseStore()
        store.set_answer_text(1, "answer")
        store.begin_grading(1)

        with pytest.raises(AnswerStateError, match="in progress"):
            store.begin_grading(1)

    def test_begin_grading_unknown_id(self) -> None:
        with pytest.raises(AnswerStateError, match="no answer recorded"):
            ResponseStore().begin_grading(7)

    def test_fail_grading_rejects_graded_record(self, sample_grading_result: GradingResult) -> None:
        store = ResponseStore()
        store.set_answer_text(1, "answer")
        store.begin_grading(1)
        store.complete_grading(1, sample_grading_result)

        with pytest.raises(AnswerStateError):
            store.fail_grading(1, "late failure")
        assert store.get(1).grading_result == sample_grading_result

    def test_pending_ids(self, sample_grading_result: GradingResult) -> None:
        store = ResponseStore()
        store.set_answer_text(1, "graded")
        store.set_answer_text(2, "   ")
        store.set_answer_text(3, "in flight")
        store.set_answer_text(4, "failed")
        store.set_answer_text(5, "fresh")
        store.begin_grading(1)
        store.complete_grading(1, sample_grading_result)
        store.begin_grading(3)
        store.begin_grading(4)
        store.fail_grading(4, "boom")

        assert store.pending_ids() == [4, 5]

    def test_every_mutation_replaces_snapshot(self, sample_grading_result: GradingResult) -> None:
        """Test snapshots are new objects and earlier ones are untouched."""
        store = ResponseStore()
        empty = store.snapshot
        store.set_answer_text(1, "answer")
        drafted = store.snapshot
        store.begin_grading(1)
        loading = store.snapshot
        store.complete_grading(1, sample_grading_result)
        graded = store.snapshot

        assert len({id(empty), id(drafted), id(loading), id(graded)}) == 4
        assert 1 not in empty
        assert drafted[1].status is GradingStatus.DRAFTING
        assert loading[1].status is GradingStatus.GRADING
        assert graded[1].status is GradingStatus.GRADED

    def test_snapshot_is_read_only(self) -> None:
        store = ResponseStore()
        store.set_answer_text(1, "answer")

        with pytest.raises(TypeError):
            store.snapshot[2] = AnswerRecord(id=2)  # type: ignore[index]

    def test_reset(self) -> None:
        store = ResponseStore()
        store.set_answer_text(1, "a")
        store.set_answer_text(2, "b")

        store.reset()

        assert len(store) == 0
        assert store.get(1) is None
