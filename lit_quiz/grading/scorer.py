"""
Response parser for LLM grading output.

Parses the JSON response from the LLM and validates it against the
GradingResult schema. Anything that isn't a JSON object with a numeric
score in range plus string feedback and suggestions is rejected.
"""

import json
import re
from typing import Any

from pydantic import ValidationError

from lit_quiz.grading.llm_client import MalformedResponseError
from lit_quiz.models import GradingResult


class ResponseParser:
    """
    Parses and validates LLM grading responses.

    Ensures:
    1. Response is a JSON object
    2. ``score``, ``feedback`` and ``suggestions`` are present
    3. Score is a number within 0-100
    """

    def parse(self, response: str) -> GradingResult:
        """
        Parse an LLM response into a GradingResult.

        Args:
            response: Raw LLM response (expected JSON).

        Returns:
            Validated GradingResult.

        Raises:
            MalformedResponseError: If parsing or validation fails.
        """
        json_str = self._extract_json(response)

        try:
            data, _ = json.JSONDecoder().raw_decode(json_str)
        except json.JSONDecodeError as e:
            raise MalformedResponseError(
                f"Invalid JSON in response: {e}",
                raw_response=response,
                cause=e,
            ) from e

        return self._validate_and_convert(data, response)

    def _extract_json(self, response: str) -> str:
        """
        Extract JSON from response, handling markdown code blocks.

        Trailing text after the object is left for the decoder to ignore.

        Args:
            response: Raw response text.

        Returns:
            Text starting at the JSON object.
        """
        json_match = re.search(r"```(?:json)?\s*([\s\S]*?)```", response)
        if json_match:
            return json_match.group(1).strip()

        brace_start = response.find("{")
        if brace_start == -1:
            raise MalformedResponseError("No JSON object found in response", raw_response=response)

        return response[brace_start:]

    def _validate_and_convert(self, data: Any, raw_response: str) -> GradingResult:
        """
        Validate parsed data and convert to GradingResult.

        Raises:
            MalformedResponseError: If validation fails.
        """
        if not isinstance(data, dict):
            raise MalformedResponseError(
                "Response JSON must be an object", raw_response=raw_response
            )

        for field in ("score", "feedback", "suggestions"):
            if field not in data:
                raise MalformedResponseError(
                    f"Missing required field: {field}", raw_response=raw_response
                )

        try:
            return GradingResult.model_validate(
                {
                    "score": data["score"],
                    "feedback": data["feedback"],
                    "suggestions": data["suggestions"],
                }
            )
        except ValidationError as e:
            errors = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise MalformedResponseError(
                f"Response does not match the grading schema: {errors}",
                raw_response=raw_response,
                cause=e,
            ) from e
