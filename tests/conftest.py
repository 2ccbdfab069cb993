"""
Pytest configuration and fixtures.

Provides common test fixtures for all test modules.
"""

import json
import tempfile
from pathlib import Path
from typing import Callable, Generator
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from openai import AsyncOpenAI
from openai.types.chat import ChatCompletion, ChatCompletionMessage
from openai.types.chat.chat_completion import Choice

from lit_quiz.config import Settings
from lit_quiz.grading import GradingGateway, LLMClient
from lit_quiz.models import (
    EssayQuestion,
    GradingResult,
    MultipleChoiceQuestion,
    Option,
    QuizContent,
    ReviewBlock,
    ReviewMaterial,
    ReviewSection,
    ReviewSubsection,
    Rubric,
    RubricLevel,
    RubricSection,
    ShortAnswerQuestion,
)


# ==============================================================================
# Directory Fixtures
# ==============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ==============================================================================
# Content Fixtures
# ==============================================================================


def _mc(question_id: int, correct: str) -> MultipleChoiceQuestion:
    return MultipleChoiceQuestion(
        id=question_id,
        question=f"Multiple-choice question {question_id}?",
        options=(
            Option(label="A", text="First option"),
            Option(label="B", text="Second option"),
            Option(label="C", text="Third option"),
            Option(label="D", text="Fourth option"),
        ),
        correct_answer=correct,
    )


@pytest.fixture
def sample_rubric() -> Rubric:
    """Create a sample two-section essay rubric."""
    return Rubric(
        sections=(
            RubricSection(
                key="content",
                title="Content & Ideas",
                criteria=(
                    RubricLevel(level="A", description="Original premise, fully explored"),
                    RubricLevel(level="B", description="Clear premise, mostly developed"),
                ),
            ),
            RubricSection(
                key="language",
                title="Language & Style",
                criteria=(
                    RubricLevel(level="A", description="Precise, vivid word choice"),
                    RubricLevel(level="B", description="Clear language"),
                ),
            ),
        )
    )


@pytest.fixture
def sample_content(sample_rubric: Rubric) -> QuizContent:
    """Five multiple-choice questions, two short answers, two essays."""
    return QuizContent(
        review=ReviewMaterial(
            title="Flash Fiction Review",
            sections=(
                ReviewSection(
                    title="Basics",
                    subsections=(
                        ReviewSubsection(
                            subtitle="Length",
                            content=(ReviewBlock(heading="Size", points=("Under 1,000 words",)),),
                        ),
                    ),
                ),
            ),
        ),
        multiple_choice=(_mc(1, "B"), _mc(2, "A"), _mc(3, "C"), _mc(4, "B"), _mc(5, "D")),
        short_answer=(
            ShortAnswerQuestion(
                id=1,
                question="Why does every sentence matter in flash fiction?",
                reference_answer="There is no room for filler.",
            ),
            ShortAnswerQuestion(
                id=2,
                question="What is an open ending?",
                reference_answer="The outcome is left to the reader.",
            ),
        ),
        essays=(
            EssayQuestion(
                id=1,
                title="The Last Message",
                question="Write a story about a message from the future.",
                rubric=sample_rubric,
            ),
            EssayQuestion(
                id=2,
                title="First Contact",
                question="Write a story about meeting a visitor.",
                rubric=sample_rubric,
            ),
        ),
    )


@pytest.fixture
def content_file(temp_dir: Path, sample_content: QuizContent) -> Path:
    """Write the sample content bundle to disk."""
    file_path = temp_dir / "quiz.json"
    file_path.write_text(sample_content.model_dump_json(), encoding="utf-8")
    return file_path


# ==============================================================================
# Grading Fixtures
# ==============================================================================


@pytest.fixture
def sample_grading_result() -> GradingResult:
    return GradingResult(
        score=85,
        feedback="Covers the main point clearly.",
        suggestions="Add an example from the reading.",
    )


@pytest.fixture
def sample_llm_response() -> str:
    """Sample LLM grading response in JSON format."""
    return json.dumps(
        {
            "score": 85,
            "feedback": "Covers the main point clearly.",
            "suggestions": "Add an example from the reading.",
        }
    )


@pytest.fixture
def make_completion() -> Callable[[str | None], ChatCompletion]:
    """Build SDK chat completions carrying the given message content."""

    def _make(content: str | None) -> ChatCompletion:
        return ChatCompletion(
            id="chatcmpl-test",
            object="chat.completion",
            created=0,
            model="test-model",
            choices=[
                Choice(
                    index=0,
                    finish_reason="stop",
                    message=ChatCompletionMessage(role="assistant", content=content),
                )
            ],
        )

    return _make


# ==============================================================================
# Settings Fixtures
# ==============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings with a configured key."""
    return Settings(
        _env_file=None,
        openai_api_key="test-api-key-for-testing",
        openai_base_url="https://test.api.local/v1/",
        openai_model="test-model",
        llm_temperature=0.0,
    )


@pytest.fixture
def no_key_settings() -> Settings:
    """Create test settings with no API key."""
    return Settings(
        _env_file=None,
        openai_api_key="",
        openai_base_url="https://test.api.local/v1",
        openai_model="test-model",
    )


# ==============================================================================
# Mock Fixtures
# ==============================================================================


@pytest.fixture
def mock_gateway(sample_grading_result: GradingResult) -> MagicMock:
    """A gateway whose calls succeed without touching the network."""
    gateway = MagicMock(spec=GradingGateway)
    gateway.grade_short_answer = AsyncMock(return_value=sample_grading_result)
    gateway.grade_essay = AsyncMock(return_value=sample_grading_result)
    gateway.get_overall_feedback = AsyncMock(return_value="Good work overall.")
    gateway.health_check = AsyncMock(return_value=True)
    return gateway


@pytest.fixture
def transport_llm_client(test_settings: Settings) -> Callable[[int, bytes, str], LLMClient]:
    """Build an LLMClient whose SDK answers every request with a fixed HTTP response."""

    def _make(status_code: int, body: bytes, content_type: str) -> LLMClient:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status_code, content=body, headers={"content-type": content_type})

        client = LLMClient(test_settings)
        client._client = AsyncOpenAI(
            api_key=test_settings.openai_api_key,
            base_url=test_settings.openai_base_url,
            max_retries=0,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )
        return client

    return _make
