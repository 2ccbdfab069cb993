"""
Grading orchestrator - drives one quiz attempt.

Submission fans out one asyncio task per answered free-text question,
captures the score breakdown known at that moment, and requests the
holistic feedback from that captured breakdown. Item grades that land
later do not update the holistic feedback.
"""

import asyncio
import logging
from enum import Enum
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Coroutine, Mapping

from lit_quiz.config import Settings
from lit_quiz.grading.aggregator import ScoreBreakdown, build_breakdown
from lit_quiz.grading.gateway import GradingGateway
from lit_quiz.grading.llm_client import CredentialMissingError, LLMError
from lit_quiz.grading.store import ResponseStore
from lit_quiz.models import GradingResult, QuizContent

logger = logging.getLogger(__name__)

OVERALL_FEEDBACK_UNAVAILABLE = (
    "Overall feedback is unavailable. Please check that the API key is configured correctly."
)


class AttemptPhase(str, Enum):
    """Phase of a quiz attempt."""

    DRAFTING = "drafting"
    SUBMITTED = "submitted"
    FINALIZING = "finalizing"
    FINALIZED = "finalized"


class QuizStateError(Exception):
    """Raised when an attempt receives input it cannot accept."""


class QuizSession:
    """
    State and workflow for one learner's quiz session.

    Holds the multiple-choice picks, one ResponseStore each for short
    answers and essays, the holistic feedback, and the session-wide
    credential-missing flag. ``reset()`` starts a fresh attempt in the
    same session; the credential flag survives it.
    """

    def __init__(
        self,
        content: QuizContent,
        gateway: GradingGateway | None = None,
        settings: Settings | None = None,
    ):
        """
        Initialize a session.

        Args:
            content: The quiz content.
            gateway: Grading gateway. Built from settings if not provided.
            settings: Configuration settings used to build the gateway.
        """
        self.content = content
        self._gateway = gateway or GradingGateway(settings)
        self.short_answers = ResponseStore("short_answer")
        self.essays = ResponseStore("essay")
        self._choices: Mapping[int, str] = MappingProxyType({})
        self._phase = AttemptPhase.DRAFTING
        self._attempt = 0
        self._tasks: set[asyncio.Task[None]] = set()
        self._credential_missing = False
        self.overall_feedback: str | None = None
        self.overall_feedback_error: str | None = None
        self.submitted_breakdown: ScoreBreakdown | None = None

    # ==========================================================================
    # Observable state
    # ==========================================================================

    @property
    def phase(self) -> AttemptPhase:
        return self._phase

    @property
    def choices(self) -> Mapping[int, str]:
        return self._choices

    @property
    def credential_missing(self) -> bool:
        """Set once any call reports a missing API key; never cleared."""
        return self._credential_missing

    @property
    def is_grading(self) -> bool:
        return any(not t.done() for t in self._tasks)

    def score_breakdown(self) -> ScoreBreakdown:
        """Score breakdown from the answers and grades known right now."""
        return build_breakdown(
            self._choices,
            self.content.multiple_choice,
            self.short_answers.records(),
            self.essays.records(),
        )

    # ==========================================================================
    # Drafting
    # ==========================================================================

    def _require_drafting(self) -> None:
        if self._phase is not AttemptPhase.DRAFTING:
            raise QuizStateError("Answers cannot be changed after the quiz is submitted")

    def choose(self, question_id: int, label: str) -> None:
        """Record a multiple-choice pick."""
        self._require_drafting()
        question = self.content.get_multiple_choice(question_id)
        if question is None:
            raise QuizStateError(f"Unknown multiple-choice question: {question_id}")
        if label not in question.labels:
            raise QuizStateError(
                f"Question {question_id} has no option '{label}' "
                f"(expected one of {', '.join(question.labels)})"
            )
        self._choices = MappingProxyType({**self._choices, question_id: label})

    def set_short_answer(self, question_id: int, text: str) -> None:
        self._require_drafting()
        if self.content.get_short_answer(question_id) is None:
            raise QuizStateError(f"Unknown short-answer question: {question_id}")
        self.short_answers.set_answer_text(question_id, text)

    def set_essay(self, essay_id: int, text: str) -> None:
        self._require_drafting()
        if self.content.get_essay(essay_id) is None:
            raise QuizStateError(f"Unknown essay question: {essay_id}")
        self.essays.set_answer_text(essay_id, text)

    # ==========================================================================
    # Per-item grading
    # ==========================================================================

    def grade_short_answer(self, question_id: int) -> "asyncio.Task[None] | None":
        """
        Start grading one short answer.

        Returns:
            The grading task, or None when there is nothing to grade
            (blank text, already graded, or already in flight).
        """
        record = self.short_answers.get(question_id)
        question = self.content.get_short_answer(question_id)
        if record is None or question is None or not self._is_gradable(self.short_answers, question_id):
            return None

        loop = asyncio.get_running_loop()
        text = record.answer_text
        self.short_answers.begin_grading(question_id)
        return self._spawn(
            loop,
            self._grade_item(
                self.short_answers,
                question_id,
                lambda: self._gateway.grade_short_answer(
                    question.question, text, question.reference_answer
                ),
                self._attempt,
            )
        )

    def grade_essay(self, essay_id: int) -> "asyncio.Task[None] | None":
        """Start grading one essay. Same guard as ``grade_short_answer``."""
        record = self.essays.get(essay_id)
        essay = self.content.get_essay(essay_id)
        if record is None or essay is None or not self._is_gradable(self.essays, essay_id):
            return None

        loop = asyncio.get_running_loop()
        text = record.answer_text
        self.essays.begin_grading(essay_id)
        return self._spawn(
            loop,
            self._grade_item(
                self.essays,
                essay_id,
                lambda: self._gateway.grade_essay(essay.title, essay.question, text, essay.rubric),
                self._attempt,
            )
        )

    @staticmethod
    def _is_gradable(store: ResponseStore, question_id: int) -> bool:
        return question_id in store.pending_ids()

    def _spawn(
        self, loop: asyncio.AbstractEventLoop, coro: Coroutine[Any, Any, None]
    ) -> "asyncio.Task[None]":
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _grade_item(
        self,
        store: ResponseStore,
        question_id: int,
        call: Callable[[], Awaitable[GradingResult]],
        attempt: int,
    ) -> None:
        result: GradingResult | None = None
        message: str | None = None
        try:
            result = await call()
        except CredentialMissingError as e:
            self._credential_missing = True
            message = str(e)
        except LLMError as e:
            message = str(e)
        except Exception as e:
            # The record must leave the loading state whatever the gateway raised
            logger.exception("grading_crashed store=%s id=%s", store.name, question_id)
            message = f"Unexpected error: {e}"

        if attempt != self._attempt:
            logger.info("stale_result_dropped store=%s id=%s", store.name, question_id)
            return

        if result is not None:
            store.complete_grading(question_id, result)
        else:
            logger.warning("grading_failed store=%s id=%s error=%s", store.name, question_id, message)
            store.fail_grading(question_id, message or "Grading failed")

    # ==========================================================================
    # Submission
    # ==========================================================================

    def begin_submit(self) -> ScoreBreakdown:
        """
        Submit the attempt and dispatch all grading without waiting.

        Must be called with a running event loop.

        Returns:
            The score breakdown captured at submission, which is also
            what the holistic feedback is based on.

        Raises:
            QuizStateError: If the attempt was already submitted.
        """
        self._require_drafting()
        loop = asyncio.get_running_loop()
        self._phase = AttemptPhase.SUBMITTED

        dispatched = 0
        for question_id in self.short_answers.pending_ids():
            if self.grade_short_answer(question_id) is not None:
                dispatched += 1
        for essay_id in self.essays.pending_ids():
            if self.grade_essay(essay_id) is not None:
                dispatched += 1

        breakdown = self.score_breakdown()
        self.submitted_breakdown = breakdown
        logger.info(
            "quiz_submitted attempt=%s dispatched=%s composite=%.1f",
            self._attempt,
            dispatched,
            breakdown.composite,
        )

        self._phase = AttemptPhase.FINALIZING
        self._spawn(loop, self._finalize(breakdown, self._attempt))
        return breakdown

    async def submit(self) -> ScoreBreakdown:
        """Submit, then wait for every grading call and the holistic feedback."""
        breakdown = self.begin_submit()
        await self.wait_for_grading()
        return breakdown

    async def wait_for_grading(self) -> None:
        """Wait until no grading or feedback task is in flight."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def _finalize(self, breakdown: ScoreBreakdown, attempt: int) -> None:
        feedback: str | None = None
        try:
            feedback = await self._gateway.get_overall_feedback(
                breakdown.multiple_choice,
                list(breakdown.short_answer_scores),
                breakdown.essay,
            )
        except CredentialMissingError:
            self._credential_missing = True
        except LLMError as e:
            logger.warning("overall_feedback_failed error=%s", e)
        except Exception:
            logger.exception("overall_feedback_crashed")

        if attempt != self._attempt:
            return

        if feedback is None:
            self.overall_feedback_error = OVERALL_FEEDBACK_UNAVAILABLE
        else:
            self.overall_feedback = feedback
        self._phase = AttemptPhase.FINALIZED

    # ==========================================================================
    # Reset
    # ==========================================================================

    def reset(self) -> None:
        """
        Start a new attempt.

        Calls still in flight run to completion but their results are dropped.
        """
        self._attempt += 1
        self._phase = AttemptPhase.DRAFTING
        self._choices = MappingProxyType({})
        self.short_answers.reset()
        self.essays.reset()
        self.overall_feedback = None
        self.overall_feedback_error = None
        self.submitted_breakdown = None
        logger.debug("quiz_reset attempt=%s", self._attempt)
