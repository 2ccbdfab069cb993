"""
Literature Quiz Grader - review material and LLM-graded quizzes.

This package presents review notes for a middle-school language-arts
unit, runs a three-part quiz (multiple-choice, short-answer, essay),
and delegates free-text grading to an OpenAI-compatible LLM service.
"""

__version__ = "1.0.0"
__author__ = "Literature Quiz Grader Team"
