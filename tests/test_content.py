"""
Unit tests for content loading and validation.
"""

from pathlib import Path

import pytest

from lit_quiz.content import ContentError, ContentValidationError, ContentValidator, load_content
from lit_quiz.models import MultipleChoiceQuestion, Option, QuizContent, ShortAnswerQuestion


class TestLoadContent:
    """Tests for load_content."""

    def test_packaged_bundle_loads_and_validates(self) -> None:
        content = load_content()

        assert content.review.sections
        assert len(content.multiple_choice) == 5
        assert len(content.short_answer) == 3
        assert len(content.essays) == 1
        assert [s.key for s in content.essays[0].rubric.sections] == [
            "content",
            "organization",
            "language",
        ]
        assert ContentValidator().validate(content) == (True, [])

    def test_load_from_file(self, content_file: Path, sample_content: QuizContent) -> None:
        content = load_content(content_file)

        assert content == sample_content

    def test_load_from_string_path(self, content_file: Path) -> None:
        content = load_content(str(content_file))

        assert content.get_essay(2).title == "First Contact"

    def test_file_not_found(self, temp_dir: Path) -> None:
        with pytest.raises(ContentError, match="File not found"):
            load_content(temp_dir / "missing.json")

    def test_unsupported_format(self, temp_dir: Path) -> None:
        path = temp_dir / "quiz.yaml"
        path.write_text("review: {}", encoding="utf-8")

        with pytest.raises(ContentError, match="Unsupported file format"):
            load_content(path)

    def test_empty_file(self, temp_dir: Path) -> None:
        path = temp_dir / "quiz.json"
        path.write_text("  \n", encoding="utf-8")

        with pytest.raises(ContentError, match="empty"):
            load_content(path)

    def test_invalid_json(self, temp_dir: Path) -> None:
        path = temp_dir / "quiz.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ContentError, match="Invalid content bundle") as exc_info:
            load_content(path)

        assert exc_info.value.source == str(path)
        assert exc_info.value.cause is not None

    def test_schema_mismatch(self, temp_dir: Path) -> None:
        path = temp_dir / "quiz.json"
        path.write_text('{"multiple_choice": []}', encoding="utf-8")

        with pytest.raises(ContentError, match="review"):
            load_content(path)

    def test_byte_order_mark_is_accepted(self, temp_dir: Path, sample_content: QuizContent) -> None:
        path = temp_dir / "quiz.json"
        path.write_text("\ufeff" + sample_content.model_dump_json(), encoding="utf-8")

        assert load_content(path) == sample_content


class TestContentValidator:
    """Tests for ContentValidator."""

    def test_valid_content(self, sample_content: QuizContent) -> None:
        is_valid, issues = ContentValidator().validate(sample_content)

        assert is_valid
        assert issues == []

    def test_no_questions(self, sample_content: QuizContent) -> None:
        empty = sample_content.model_copy(
            update={"multiple_choice": (), "short_answer": (), "essays": ()}
        )

        is_valid, issues = ContentValidator().validate(empty)

        assert not is_valid
        assert "Quiz has no questions" in issues

    def test_duplicate_ids(self, sample_content: QuizContent) -> None:
        duplicate = ShortAnswerQuestion(id=1, question="Again?", reference_answer="Yes.")
        content = sample_content.model_copy(
            update={"short_answer": sample_content.short_answer + (duplicate,)}
        )

        is_valid, issues = ContentValidator().validate(content)

        assert not is_valid
        assert any("Short-answer question id 1" in issue for issue in issues)

    def test_correct_answer_not_an_option(self, sample_content: QuizContent) -> None:
        bad = MultipleChoiceQuestion(
            id=6,
            question="Which?",
            options=(Option(label="A", text="One"), Option(label="B", text="Two")),
            correct_answer="C",
        )
        content = sample_content.model_copy(
            update={"multiple_choice": sample_content.multiple_choice + (bad,)}
        )

        is_valid, issues = ContentValidator().validate(content)

        assert not is_valid
        assert any("Correct answer 'C'" in issue for issue in issues)

    def test_duplicate_option_labels(self, sample_content: QuizContent) -> None:
        bad = MultipleChoiceQuestion(
            id=6,
            question="Which?",
            options=(Option(label="A", text="One"), Option(label="A", text="Two")),
            correct_answer="A",
        )
        content = sample_content.model_copy(update={"multiple_choice": (bad,)})

        _, issues = ContentValidator().validate(content)

        assert any("not unique" in issue for issue in issues)

    def test_validate_or_raise(self, sample_content: QuizContent) -> None:
        empty = sample_content.model_copy(
            update={"multiple_choice": (), "short_answer": (), "essays": ()}
        )

        with pytest.raises(ContentValidationError) as exc_info:
            ContentValidator().validate_or_raise(empty)

        assert exc_info.value.errors == ["Quiz has no questions"]
