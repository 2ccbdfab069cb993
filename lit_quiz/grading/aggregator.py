"""
Score aggregation.

Pure functions that turn multiple-choice picks and graded answer records
into section scores and the weighted composite. Nothing here is stored:
the breakdown is recomputed from current state whenever it is asked for.
"""

from typing import Iterable, Mapping, Sequence

from pydantic import BaseModel, ConfigDict, Field, computed_field

from lit_quiz.models import AnswerRecord, MultipleChoiceQuestion

MULTIPLE_CHOICE_WEIGHT = 0.30
SHORT_ANSWER_WEIGHT = 0.40
ESSAY_WEIGHT = 0.30


def multiple_choice_score(
    answers: Mapping[int, str], questions: Sequence[MultipleChoiceQuestion]
) -> float:
    """
    Score the multiple-choice section by deduction.

    Every wrong answer among the *answered* questions costs ``100 / total``
    points. Unanswered questions cost nothing, so answering one question
    correctly and leaving the rest blank scores 100.

    Args:
        answers: Question id to chosen option label.
        questions: All multiple-choice questions in the quiz.

    Returns:
        Score between 0 and 100; 0 when nothing was answered.
    """
    answered = 0
    correct = 0
    for question in questions:
        chosen = answers.get(question.id)
        if chosen is None:
            continue
        answered += 1
        if chosen == question.correct_answer:
            correct += 1

    if answered == 0:
        return 0.0

    per_question = 100 / len(questions)
    deduction = (answered - correct) * per_question
    return max(0.0, 100 - deduction)


def composite_score(
    multiple_choice: float, short_answer_scores: Sequence[float], essay: float
) -> float:
    """Weighted composite; an empty short-answer list counts as a mean of 0."""
    sa_mean = sum(short_answer_scores) / len(short_answer_scores) if short_answer_scores else 0.0
    return (
        multiple_choice * MULTIPLE_CHOICE_WEIGHT
        + sa_mean * SHORT_ANSWER_WEIGHT
        + essay * ESSAY_WEIGHT
    )


def graded_scores(records: Iterable[AnswerRecord]) -> list[float]:
    """Scores of every graded record, in first-touch order."""
    return [r.grading_result.score for r in records if r.grading_result is not None]


def first_graded_score(records: Iterable[AnswerRecord]) -> float:
    """
    Score of the first graded record, or 0.

    Only one essay counts towards the composite even if several are graded.
    """
    for record in records:
        if record.grading_result is not None:
            return record.grading_result.score
    return 0.0


class ScoreBreakdown(BaseModel):
    """Section scores at one moment plus the derived composite."""

    model_config = ConfigDict(frozen=True)

    multiple_choice: float = Field(..., ge=0, le=100)
    short_answer_scores: tuple[float, ...] = Field(default=())
    essay: float = Field(default=0.0, ge=0, le=100)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def short_answer_mean(self) -> float:
        if not self.short_answer_scores:
            return 0.0
        return sum(self.short_answer_scores) / len(self.short_answer_scores)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def composite(self) -> float:
        return composite_score(self.multiple_choice, self.short_answer_scores, self.essay)


def build_breakdown(
    choices: Mapping[int, str],
    questions: Sequence[MultipleChoiceQuestion],
    short_answers: Iterable[AnswerRecord],
    essays: Iterable[AnswerRecord],
) -> ScoreBreakdown:
    """Project current answers into a ScoreBreakdown."""
    return ScoreBreakdown(
        multiple_choice=multiple_choice_score(choices, questions),
        short_answer_scores=tuple(graded_scores(short_answers)),
        essay=first_graded_score(essays),
    )
