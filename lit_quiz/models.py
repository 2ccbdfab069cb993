"""
Pydantic models for the Literature Quiz Grader.

These models define the strict schemas for:
- Review material and quiz questions (read-only content)
- Essay rubrics (passed opaquely to the grader)
- Grading results and per-question answer records

Content and result models are frozen; an answer record is "changed"
by building a new record, never by mutating the old one.
"""

from enum import Enum

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)


# ==============================================================================
# Review Material Models
# ==============================================================================


class ReviewBlock(BaseModel):
    """A bulleted block of review notes with an optional heading."""

    model_config = ConfigDict(frozen=True, strict=True)

    heading: str | None = None
    points: tuple[str, ...] = Field(..., min_length=1)


class ReviewSubsection(BaseModel):
    """A titled group of review blocks."""

    model_config = ConfigDict(frozen=True, strict=True)

    subtitle: str = Field(..., min_length=1)
    content: tuple[ReviewBlock, ...] = Field(default=())


class ReviewSection(BaseModel):
    """One tab of the review browser."""

    model_config = ConfigDict(frozen=True, strict=True)

    title: str = Field(..., min_length=1)
    subsections: tuple[ReviewSubsection, ...] = Field(default=())


class ReviewMaterial(BaseModel):
    """The review-material outline shown before the quiz."""

    model_config = ConfigDict(frozen=True, strict=True)

    title: str = Field(..., min_length=1)
    sections: tuple[ReviewSection, ...] = Field(default=())


# ==============================================================================
# Rubric Models
# ==============================================================================


class RubricLevel(BaseModel):
    """A single performance level within a rubric section (e.g. 'A: ...')."""

    model_config = ConfigDict(frozen=True, strict=True)

    level: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)


class RubricSection(BaseModel):
    """
    One rubric dimension, such as 'Content' or 'Organization'.

    Levels are kept in the order they were authored.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    key: str = Field(..., min_length=1, description="Stable identifier of the section")
    title: str = Field(..., min_length=1, description="Human-readable section title")
    criteria: tuple[RubricLevel, ...] = Field(..., min_length=1)


class Rubric(BaseModel):
    """
    An essay rubric: an ordered sequence of sections.

    The grading core never interprets the rubric; it is rendered to text
    and handed to the LLM as grading context.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    sections: tuple[RubricSection, ...] = Field(..., min_length=1)

    @model_validator(mode="after")
    def validate_unique_keys(self) -> "Rubric":
        """Ensure no two sections share a key."""
        keys = [s.key for s in self.sections]
        if len(keys) != len(set(keys)):
            duplicates = {k for k in keys if keys.count(k) > 1}
            raise ValueError(f"Duplicate rubric section keys found: {duplicates}")
        return self


# ==============================================================================
# Question Models
# ==============================================================================


class Option(BaseModel):
    """A labelled multiple-choice option."""

    model_config = ConfigDict(frozen=True, strict=True)

    label: str = Field(..., min_length=1, description="Option label such as 'A'")
    text: str = Field(..., min_length=1)


class MultipleChoiceQuestion(BaseModel):
    """A multiple-choice question with a single correct option."""

    model_config = ConfigDict(frozen=True, strict=True)

    id: int = Field(..., ge=1)
    question: str = Field(..., min_length=1)
    options: tuple[Option, ...] = Field(..., min_length=2)
    correct_answer: str = Field(..., min_length=1, description="Label of the correct option")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def labels(self) -> tuple[str, ...]:
        """Option labels in display order."""
        return tuple(o.label for o in self.options)


class ShortAnswerQuestion(BaseModel):
    """An open question graded against a reference answer."""

    model_config = ConfigDict(frozen=True, strict=True)

    id: int = Field(..., ge=1)
    question: str = Field(..., min_length=1)
    reference_answer: str = Field(..., min_length=1)


class EssayQuestion(BaseModel):
    """An essay prompt graded against a rubric."""

    model_config = ConfigDict(frozen=True, strict=True)

    id: int = Field(..., ge=1)
    title: str = Field(..., min_length=1)
    question: str = Field(..., min_length=1)
    rubric: Rubric


class QuizContent(BaseModel):
    """
    The complete static content bundle: review notes plus all questions.

    Loaded once and never mutated.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    review: ReviewMaterial
    multiple_choice: tuple[MultipleChoiceQuestion, ...] = Field(default=())
    short_answer: tuple[ShortAnswerQuestion, ...] = Field(default=())
    essays: tuple[EssayQuestion, ...] = Field(default=())

    def get_multiple_choice(self, question_id: int) -> MultipleChoiceQuestion | None:
        return next((q for q in self.multiple_choice if q.id == question_id), None)

    def get_short_answer(self, question_id: int) -> ShortAnswerQuestion | None:
        return next((q for q in self.short_answer if q.id == question_id), None)

    def get_essay(self, essay_id: int) -> EssayQuestion | None:
        return next((q for q in self.essays if q.id == essay_id), None)


# ==============================================================================
# Grading Models
# ==============================================================================


class GradingResult(BaseModel):
    """
    Validated output of one grading call.

    Strict mode keeps a JSON string or boolean from passing as a score.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    score: float = Field(..., ge=0, le=100, description="Score between 0 and 100")
    feedback: str = Field(..., description="Specific comments on the answer")
    suggestions: str = Field(..., description="Concrete ways to improve")


class GradingStatus(str, Enum):
    """Lifecycle of a single answer record."""

    DRAFTING = "drafting"
    GRADING = "grading"
    GRADED = "graded"
    FAILED = "failed"


class AnswerRecord(BaseModel):
    """
    A learner's free-text answer and its grading lifecycle.

    Records are immutable snapshots; the response store swaps in a new
    record for every transition.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    id: int
    answer_text: str = ""
    grading_result: GradingResult | None = None
    is_loading: bool = False
    error_message: str | None = None

    @model_validator(mode="after")
    def validate_result_or_error(self) -> "AnswerRecord":
        """A record never holds both a result and an error."""
        if self.grading_result is not None and self.error_message is not None:
            raise ValueError("An answer record cannot hold both a result and an error")
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status(self) -> GradingStatus:
        if self.is_loading:
            return GradingStatus.GRADING
        if self.grading_result is not None:
            return GradingStatus.GRADED
        if self.error_message is not None:
            return GradingStatus.FAILED
        return GradingStatus.DRAFTING

    @property
    def has_text(self) -> bool:
        return bool(self.answer_text.strip())


# ==============================================================================
# Answer Sheet
# ==============================================================================


class AnswerSheet(BaseModel):
    """
    A complete set of answers supplied up front (non-interactive grading).

    Keys are question ids; JSON object keys are coerced to integers.
    """

    model_config = ConfigDict(frozen=True)

    multiple_choice: dict[int, str] = Field(default_factory=dict)
    short_answer: dict[int, str] = Field(default_factory=dict)
    essay: dict[int, str] = Field(default_factory=dict)

    @field_validator("multiple_choice")
    @classmethod
    def normalize_labels(cls, v: dict[int, str]) -> dict[int, str]:
        """Labels are compared case-sensitively, so trim stray whitespace only."""
        return {k: label.strip() for k, label in v.items()}
