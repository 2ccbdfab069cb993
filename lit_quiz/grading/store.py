"""
Response store for free-text answers.

Keeps one AnswerRecord per question id. Every mutation swaps in a new
record and a new read-only mapping, so anything holding an earlier
snapshot can detect a change by identity.
"""

import logging
from types import MappingProxyType
from typing import Any, Mapping

from lit_quiz.models import AnswerRecord, GradingResult

logger = logging.getLogger(__name__)


class AnswerStateError(Exception):
    """Raised when an answer record is asked to make an illegal transition."""

    def __init__(self, message: str, question_id: int):
        self.question_id = question_id
        super().__init__(f"Question {question_id}: {message}")


def _replace(record: AnswerRecord, **changes: Any) -> AnswerRecord:
    """Build a new validated record from ``record`` with ``changes`` applied."""
    fields = {name: getattr(record, name) for name in AnswerRecord.model_fields}
    fields.update(changes)
    return AnswerRecord(**fields)


class ResponseStore:
    """
    Id-keyed answer records for one question type.

    Records keep first-touch order. The store itself performs no I/O and
    holds no locks: each grading task only writes its own id.
    """

    def __init__(self, name: str = "answers"):
        self.name = name
        self._records: Mapping[int, AnswerRecord] = MappingProxyType({})

    @property
    def snapshot(self) -> Mapping[int, AnswerRecord]:
        """The current read-only mapping of question id to record."""
        return self._records

    def get(self, question_id: int) -> AnswerRecord | None:
        return self._records.get(question_id)

    def records(self) -> list[AnswerRecord]:
        return list(self._records.values())

    def pending_ids(self) -> list[int]:
        """Ids with text to grade, no result yet, and no call in flight."""
        return [
            r.id
            for r in self._records.values()
            if r.has_text and r.grading_result is None and not r.is_loading
        ]

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._records

    def _put(self, record: AnswerRecord) -> AnswerRecord:
        updated = dict(self._records)
        updated[record.id] = record
        self._records = MappingProxyType(updated)
        return record

    def _require(self, question_id: int) -> AnswerRecord:
        record = self._records.get(question_id)
        if record is None:
            raise AnswerStateError("no answer recorded", question_id)
        return record

    def set_answer_text(self, question_id: int, text: str) -> AnswerRecord:
        """Create the record if absent, otherwise replace only its text."""
        record = self._records.get(question_id)
        if record is None:
            return self._put(AnswerRecord(id=question_id, answer_text=text))
        return self._put(_replace(record, answer_text=text))

    def begin_grading(self, question_id: int) -> AnswerRecord:
        """
        Mark a record as being graded and clear any previous error.

        Raises:
            AnswerStateError: If the record is missing, already graded, or already loading.
        """
        record = self._require(question_id)
        if record.grading_result is not None:
            raise AnswerStateError("already graded", question_id)
        if record.is_loading:
            raise AnswerStateError("grading already in progress", question_id)
        logger.debug("grading_started store=%s id=%s", self.name, question_id)
        return self._put(_replace(record, is_loading=True, error_message=None))

    def complete_grading(self, question_id: int, result: GradingResult) -> AnswerRecord:
        """Attach a result and clear the loading flag."""
        record = self._require(question_id)
        if record.grading_result is not None:
            raise AnswerStateError("already graded", question_id)
        logger.debug("grading_completed store=%s id=%s score=%s", self.name, question_id, result.score)
        return self._put(_replace(record, grading_result=result, is_loading=False, error_message=None))

    def fail_grading(self, question_id: int, message: str) -> AnswerRecord:
        """Attach an error message and clear the loading flag."""
        record = self._require(question_id)
        if record.grading_result is not None:
            raise AnswerStateError("cannot fail a graded answer", question_id)
        logger.debug("grading_failed store=%s id=%s", self.name, question_id)
        return self._put(_replace(record, error_message=message, is_loading=False))

    def reset(self) -> None:
        """Drop every record."""
        self._records = MappingProxyType({})
