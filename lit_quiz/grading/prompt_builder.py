"""
Prompt builder for quiz grading.

Constructs the system and user prompts for the three gateway calls:
- Short-answer grading against a reference answer (fixed weighting)
- Essay grading against the essay's rubric
- A holistic narrative over the whole attempt
"""

from typing import Sequence

from lit_quiz.models import Rubric

_JSON_FIELDS = """Respond with a JSON object containing exactly these three fields:
- score: a number from 0 to 100
- feedback: a string"""


class PromptBuilder:
    """
    Builds grading prompts for a middle-school language-arts course.

    The grading prompts force a JSON object with ``score``, ``feedback``
    and ``suggestions``; the overall-feedback prompt asks for free text.
    """

    SHORT_ANSWER_SYSTEM_PROMPT = f"""You are an experienced middle-school language-arts teacher grading a student's short-answer response.
Evaluate the student's answer against the reference answer and give a score (0-100), specific feedback, and suggestions for improvement.

GRADING CRITERIA:
- Completeness (40%): Does the answer cover every key point in the reference answer?
- Accuracy of understanding (30%): Does the student understand the question correctly?
- Clarity of expression (20%): Is the answer clear and logically connected?
- Original thinking (10%): Does the answer show independent insight?

{_JSON_FIELDS}, specific comments on the answer
- suggestions: a string, concrete ways to improve"""

    ESSAY_SYSTEM_PROMPT_TEMPLATE = """You are an experienced middle-school language-arts teacher grading a student's essay.
Evaluate the essay against the rubric below and give a score (0-100), specific feedback, and suggestions for improvement.

RUBRIC:
{rubric}

{json_fields}, with a comment on each section of the rubric
- suggestions: a string, specific and actionable directions for improvement"""

    OVERALL_SYSTEM_PROMPT = """You are an experienced middle-school language-arts teacher writing an overall comment on a student's quiz.
Based on the student's score in each part, write encouraging and constructive feedback that names strengths and areas to improve.
Keep the tone warm and positive, and give concrete study suggestions."""

    @staticmethod
    def format_rubric(rubric: Rubric) -> str:
        """
        Render a rubric as indented plain text.

        Sections keep their authored order and are separated by a blank line.
        """
        blocks: list[str] = []
        for section in rubric.sections:
            lines = [f"  {section.title}:"]
            lines.extend(f"    - {c.level}: {c.description}" for c in section.criteria)
            blocks.append("\n".join(lines))
        return "\n\n".join(blocks)

    @staticmethod
    def build_short_answer_prompt(question: str, student_answer: str, reference_answer: str) -> str:
        return (
            f"Question: {question}\n\n"
            f"Reference answer: {reference_answer}\n\n"
            f"Student answer: {student_answer}"
        )

    @staticmethod
    def build_essay_system_prompt(rubric: Rubric) -> str:
        return PromptBuilder.ESSAY_SYSTEM_PROMPT_TEMPLATE.format(
            rubric=PromptBuilder.format_rubric(rubric),
            json_fields=_JSON_FIELDS,
        )

    @staticmethod
    def build_essay_prompt(title: str, question: str, student_essay: str) -> str:
        return (
            f"Essay title: {title}\n\n"
            f"Essay prompt: {question}\n\n"
            f"Student essay: {student_essay}"
        )

    @staticmethod
    def build_overall_prompt(
        multiple_choice_score: float,
        short_answer_scores: Sequence[float],
        essay_score: float,
        total_score: float,
    ) -> str:
        """
        Build the user prompt for the holistic feedback call.

        Args:
            multiple_choice_score: Multiple-choice section score (0-100).
            short_answer_scores: Individual short-answer scores.
            essay_score: Essay score (0-100).
            total_score: Weighted composite score.

        Returns:
            The formatted user prompt.
        """
        if short_answer_scores:
            sa_text = ", ".join(f"{s:g} points" for s in short_answer_scores)
        else:
            sa_text = "not graded"

        return f"""Student quiz results:
- Multiple choice (30% weight): {multiple_choice_score:g} points
- Short answer (40% weight): {sa_text}
- Essay (30% weight): {essay_score:g} points
- Weighted total: {total_score:.1f} points

Please give an overall comment and study suggestions."""
