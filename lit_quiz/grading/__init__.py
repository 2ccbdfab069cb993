"""
Grading Module.

LLM gateway, answer state, score aggregation, and the submission workflow.
"""

from lit_quiz.grading.aggregator import (
    ScoreBreakdown,
    build_breakdown,
    composite_score,
    multiple_choice_score,
)
from lit_quiz.grading.gateway import GradingGateway
from lit_quiz.grading.llm_client import (
    CredentialMissingError,
    LLMClient,
    LLMError,
    MalformedResponseError,
    RemoteError,
    TransportError,
)
from lit_quiz.grading.orchestrator import AttemptPhase, QuizSession, QuizStateError
from lit_quiz.grading.prompt_builder import PromptBuilder
from lit_quiz.grading.scorer import ResponseParser
from lit_quiz.grading.store import AnswerStateError, ResponseStore

__all__ = [
    "AnswerStateError",
    "AttemptPhase",
    "CredentialMissingError",
    "GradingGateway",
    "LLMClient",
    "LLMError",
    "MalformedResponseError",
    "PromptBuilder",
    "QuizSession",
    "QuizStateError",
    "RemoteError",
    "ResponseParser",
    "ResponseStore",
    "ScoreBreakdown",
    "TransportError",
    "build_breakdown",
    "composite_score",
    "multiple_choice_score",
]
