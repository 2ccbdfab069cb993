"""
Result report generation.

Renders a finished (or in-progress) quiz session as a Markdown transcript
that can be saved and printed.
"""

from pathlib import Path

from lit_quiz.grading.orchestrator import QuizSession
from lit_quiz.models import AnswerRecord


class ReportGenerator:
    """Generates Markdown result reports for a quiz session."""

    def generate(self, session: QuizSession, show_answers: bool = True) -> str:
        """
        Render the session as Markdown.

        Args:
            session: The quiz session to report on.
            show_answers: Include correct answers and reference answers.

        Returns:
            The report text.
        """
        content = session.content
        breakdown = session.score_breakdown()
        lines: list[str] = [f"# Quiz Results: {content.review.title}", "", "## Summary", ""]

        lines.append(f"- Multiple choice (30%): {breakdown.multiple_choice:.1f}")
        if breakdown.short_answer_scores:
            sa = ", ".join(f"{s:.1f}" for s in breakdown.short_answer_scores)
            lines.append(f"- Short answer (40%): {sa} (mean {breakdown.short_answer_mean:.1f})")
        else:
            lines.append("- Short answer (40%): not graded")
        lines.append(f"- Essay (30%): {breakdown.essay:.1f}")
        lines.append(f"- **Weighted total: {breakdown.composite:.1f}**")

        if session.overall_feedback:
            lines += ["", "## Overall Feedback", "", session.overall_feedback]
        elif session.overall_feedback_error:
            lines += ["", "## Overall Feedback", "", f"_{session.overall_feedback_error}_"]

        lines += ["", "## Multiple Choice", ""]
        for question in content.multiple_choice:
            chosen = session.choices.get(question.id)
            lines.append(f"{question.id}. {question.question}")
            lines.append(f"   - Your answer: {chosen or '(blank)'}")
            if show_answers:
                mark = "correct" if chosen == question.correct_answer else "incorrect"
                lines.append(f"   - Correct answer: {question.correct_answer} ({mark})")

        lines += ["", "## Short Answer", ""]
        for question in content.short_answer:
            lines.append(f"### {question.id}. {question.question}")
            lines += self._record_lines(session.short_answers.get(question.id))
            if show_answers:
                lines += ["", f"Reference answer: {question.reference_answer}"]
            lines.append("")

        lines += ["## Essay", ""]
        for essay in content.essays:
            lines.append(f"### {essay.title}")
            lines += self._record_lines(session.essays.get(essay.id))
            lines.append("")

        return "\n".join(lines).rstrip() + "\n"

    def _record_lines(self, record: AnswerRecord | None) -> list[str]:
        if record is None or not record.has_text:
            return ["", "_(not answered)_"]

        lines = ["", record.answer_text.strip()]
        if record.grading_result is not None:
            result = record.grading_result
            lines += [
                "",
                f"**Score:** {result.score:.1f}",
                "",
                f"**Feedback:** {result.feedback}",
                "",
                f"**Suggestions:** {result.suggestions}",
            ]
        elif record.error_message:
            lines += ["", f"**Grading failed:** {record.error_message}"]
        elif record.is_loading:
            lines += ["", "_Grading in progress..._"]
        return lines

    def save(self, session: QuizSession, output_path: Path, show_answers: bool = True) -> Path:
        """Write the report to ``output_path`` and return the path."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.generate(session, show_answers), encoding="utf-8")
        return output_path
