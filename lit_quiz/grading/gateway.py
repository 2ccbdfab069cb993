"""
Grading gateway.

The boundary to the external LLM grading service. Each operation builds
its prompts, performs one LLM call, and returns a validated result. The
gateway holds no per-attempt state: calling twice calls the service twice.
"""

import logging
from typing import Sequence

from lit_quiz.config import Settings, get_settings
from lit_quiz.grading.aggregator import composite_score
from lit_quiz.grading.llm_client import LLMClient
from lit_quiz.grading.prompt_builder import PromptBuilder
from lit_quiz.grading.scorer import ResponseParser
from lit_quiz.models import GradingResult, Rubric

logger = logging.getLogger(__name__)


class GradingGateway:
    """
    Issues grading requests to the LLM service.

    All methods raise an LLMError subclass on failure; a missing
    credential raises CredentialMissingError before any request is made.
    """

    def __init__(self, settings: Settings | None = None, llm_client: LLMClient | None = None):
        """
        Initialize the gateway.

        Args:
            settings: Configuration settings. Uses global settings if not provided.
            llm_client: Client to use instead of one built from settings.
        """
        self._settings = settings or get_settings()
        self._llm_client = llm_client or LLMClient(self._settings)
        self._response_parser = ResponseParser()

    async def grade_short_answer(
        self, question: str, student_answer: str, reference_answer: str
    ) -> GradingResult:
        """
        Grade a short answer against its reference answer.

        Raises:
            LLMError: If the call fails or the response is malformed.
        """
        logger.info(
            "llm_usage: grade_short_answer model=%s question_len=%s answer_len=%s",
            self._settings.openai_model,
            len(question),
            len(student_answer),
        )
        raw = await self._llm_client.generate(
            system_prompt=PromptBuilder.SHORT_ANSWER_SYSTEM_PROMPT,
            user_prompt=PromptBuilder.build_short_answer_prompt(
                question, student_answer, reference_answer
            ),
            json_response=True,
        )
        return self._response_parser.parse(raw)

    async def grade_essay(
        self, title: str, question: str, student_essay: str, rubric: Rubric
    ) -> GradingResult:
        """
        Grade an essay against its rubric.

        Raises:
            LLMError: If the call fails or the response is malformed.
        """
        logger.info(
            "llm_usage: grade_essay model=%s title=%r essay_len=%s rubric_sections=%s",
            self._settings.openai_model,
            title,
            len(student_essay),
            len(rubric.sections),
        )
        raw = await self._llm_client.generate(
            system_prompt=PromptBuilder.build_essay_system_prompt(rubric),
            user_prompt=PromptBuilder.build_essay_prompt(title, question, student_essay),
            json_response=True,
        )
        return self._response_parser.parse(raw)

    async def get_overall_feedback(
        self,
        multiple_choice_score: float,
        short_answer_scores: Sequence[float],
        essay_score: float,
    ) -> str:
        """
        Ask for a narrative comment on the whole attempt.

        Returns:
            The narrative text.

        Raises:
            LLMError: If the call fails.
        """
        total = composite_score(multiple_choice_score, short_answer_scores, essay_score)
        logger.info(
            "llm_usage: overall_feedback model=%s short_answers=%s total=%.1f",
            self._settings.openai_model,
            len(short_answer_scores),
            total,
        )
        text = await self._llm_client.generate(
            system_prompt=PromptBuilder.OVERALL_SYSTEM_PROMPT,
            user_prompt=PromptBuilder.build_overall_prompt(
                multiple_choice_score, short_answer_scores, essay_score, total
            ),
        )
        return text.strip()

    async def health_check(self) -> bool:
        return await self._llm_client.health_check()
