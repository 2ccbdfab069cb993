"""
LLM Client for OpenAI-compatible chat-completion endpoints.

Provides an async wrapper around the OpenAI SDK. Each call performs exactly
one request: retries are disabled on the SDK client, and nothing is cached.
Failures are translated into the LLMError hierarchy so callers never have
to know about SDK exception types.
"""

import logging

from openai import APIConnectionError, APIStatusError, AsyncOpenAI, OpenAIError
from openai.types.chat import ChatCompletion

from lit_quiz.config import Settings, get_settings

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Raised when an LLM call fails."""

    def __init__(self, message: str, cause: Exception | None = None):
        self.cause = cause
        super().__init__(message)


class CredentialMissingError(LLMError):
    """Raised before any network call when no API key is configured."""

    def __init__(self) -> None:
        super().__init__(
            "OpenAI API key is not configured. Set OPENAI_API_KEY in the environment or .env file."
        )


class TransportError(LLMError):
    """Raised when the endpoint could not be reached."""


class RemoteError(LLMError):
    """Raised when the endpoint answered with an error envelope."""

    def __init__(self, message: str, status_code: int | None = None, cause: Exception | None = None):
        self.status_code = status_code
        super().__init__(message, cause=cause)


class MalformedResponseError(LLMError):
    """Raised when a response body does not have the expected shape."""

    def __init__(self, message: str, raw_response: str | None = None, cause: Exception | None = None):
        self.raw_response = raw_response
        super().__init__(message, cause=cause)


class LLMClient:
    """
    Async client for the chat-completion endpoint.

    The SDK client is built lazily, after the credential check, so a
    missing key never results in an outbound request.
    """

    def __init__(self, settings: Settings | None = None):
        """
        Initialize the LLM client.

        Args:
            settings: Configuration settings. Uses global settings if not provided.
        """
        self._settings = settings or get_settings()
        self._client: AsyncOpenAI | None = None

    def _require_client(self) -> AsyncOpenAI:
        if not self._settings.has_credential:
            raise CredentialMissingError()
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self._settings.openai_api_key,
                base_url=self._settings.openai_base_url,
                max_retries=0,
            )
        return self._client

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        json_response: bool = False,
    ) -> str:
        """
        Generate a response from the LLM.

        Args:
            system_prompt: System message with the grading instructions.
            user_prompt: User message with the item-specific context.
            json_response: Ask the endpoint for a JSON object response.

        Returns:
            The generated text response.

        Raises:
            CredentialMissingError: If no API key is configured.
            TransportError: If the endpoint is unreachable.
            RemoteError: If the endpoint returns an error.
            MalformedResponseError: If the response has no content.
        """
        client = self._require_client()

        messages: list[dict[str, str]] = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        extra: dict[str, object] = {}
        if json_response:
            extra["response_format"] = {"type": "json_object"}

        try:
            response = await client.chat.completions.create(
                model=self._settings.openai_model,
                messages=messages,  # type: ignore[arg-type]
                temperature=self._settings.llm_temperature,
                **extra,  # type: ignore[arg-type]
            )
        except APIConnectionError as e:
            logger.warning("llm_transport_error model=%s error=%s", self._settings.openai_model, e)
            raise TransportError(f"Connection failed: {e}", cause=e) from e
        except APIStatusError as e:
            message = _error_envelope_message(e)
            logger.warning("llm_remote_error status=%s message=%s", e.status_code, message)
            raise RemoteError(f"API error: {message}", status_code=e.status_code, cause=e) from e
        except OpenAIError as e:
            raise LLMError(f"Unexpected error: {e}", cause=e) from e

        if not isinstance(response, ChatCompletion):
            raise MalformedResponseError(
                "Response is not a chat completion", raw_response=str(response)[:500]
            )

        # Some endpoints answer 200 with an error envelope instead of choices
        envelope = (response.model_extra or {}).get("error")
        if envelope is not None:
            message = _envelope_message({"error": envelope}) or str(envelope)
            logger.warning("llm_remote_error status=200 message=%s", message)
            raise RemoteError(f"API error: {message}")

        choices = getattr(response, "choices", None)
        if not choices or not choices[0].message.content:
            raise MalformedResponseError("Empty response from LLM")

        return choices[0].message.content

    async def health_check(self) -> bool:
        """
        Check if the API is reachable.

        Returns:
            True if API is healthy, False otherwise.
        """
        try:
            client = self._require_client()
            response = await client.chat.completions.create(
                model=self._settings.openai_model,
                messages=[{"role": "user", "content": "ping"}],
                max_tokens=5,
            )
            return isinstance(response, ChatCompletion) and bool(getattr(response, "choices", None))
        except CredentialMissingError:
            return False
        except OpenAIError as e:
            logger.info("llm_health_check_failed error=%s", e)
            return False


def _envelope_message(body: object) -> str | None:
    """Pull ``error.message`` (or a bare ``message``) out of a response envelope."""
    if isinstance(body, dict):
        nested = body.get("error", body)
        if isinstance(nested, dict) and isinstance(nested.get("message"), str):
            return nested["message"]
    return None


def _error_envelope_message(error: APIStatusError) -> str:
    return _envelope_message(error.body) or error.message
