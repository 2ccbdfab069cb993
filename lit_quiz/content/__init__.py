"""
Content Module.

Loads and validates the static review material and quiz questions.
"""

from lit_quiz.content.loader import ContentError, load_content
from lit_quiz.content.validator import ContentValidationError, ContentValidator

__all__ = [
    "ContentError",
    "ContentValidationError",
    "ContentValidator",
    "load_content",
]
