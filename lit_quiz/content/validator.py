"""
Content bundle validation.

Checks the things the schema alone cannot: unique question ids within each
section, correct answers that name a real option, and essays whose rubrics
give the grader something to work with.
"""

from typing import Sequence

from lit_quiz.models import EssayQuestion, MultipleChoiceQuestion, QuizContent


class ContentValidationError(Exception):
    """Raised when content validation fails."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        message = "Content validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        super().__init__(message)


class ContentValidator:
    """
    Validates a quiz content bundle for consistency.

    Checks:
    1. Question ids are unique within each section
    2. Every multiple-choice question's correct answer is one of its option labels
    3. Option labels are unique within a question
    4. The quiz has at least one question
    """

    def validate(self, content: QuizContent) -> tuple[bool, list[str]]:
        """
        Validate content and return any issues found.

        Args:
            content: The content bundle to validate.

        Returns:
            Tuple of (is_valid, list of issues).
        """
        issues: list[str] = []

        if not (content.multiple_choice or content.short_answer or content.essays):
            issues.append("Quiz has no questions")

        issues.extend(self._check_unique_ids("Multiple-choice", [q.id for q in content.multiple_choice]))
        issues.extend(self._check_unique_ids("Short-answer", [q.id for q in content.short_answer]))
        issues.extend(self._check_unique_ids("Essay", [q.id for q in content.essays]))

        for question in content.multiple_choice:
            issues.extend(self._validate_multiple_choice(question))

        for essay in content.essays:
            issues.extend(self._validate_essay(essay))

        return len(issues) == 0, issues

    def validate_or_raise(self, content: QuizContent) -> None:
        """
        Validate content and raise if invalid.

        Raises:
            ContentValidationError: If validation fails.
        """
        is_valid, issues = self.validate(content)
        if not is_valid:
            raise ContentValidationError(issues)

    def _check_unique_ids(self, section: str, ids: Sequence[int]) -> list[str]:
        issues: list[str] = []
        seen: set[int] = set()
        for question_id in ids:
            if question_id in seen:
                issues.append(f"{section} question id {question_id} is used more than once")
            seen.add(question_id)
        return issues

    def _validate_multiple_choice(self, question: MultipleChoiceQuestion) -> list[str]:
        issues: list[str] = []
        prefix = f"Multiple-choice question {question.id}"

        labels = question.labels
        if len(labels) != len(set(labels)):
            issues.append(f"{prefix}: Option labels are not unique ({', '.join(labels)})")

        if question.correct_answer not in labels:
            issues.append(
                f"{prefix}: Correct answer '{question.correct_answer}' is not one of "
                f"the option labels ({', '.join(labels)})"
            )

        return issues

    def _validate_essay(self, essay: EssayQuestion) -> list[str]:
        issues: list[str] = []
        for section in essay.rubric.sections:
            levels = [c.level for c in section.criteria]
            if len(levels) != len(set(levels)):
                issues.append(
                    f"Essay {essay.id} rubric section '{section.key}': Duplicate levels"
                )
        return issues
