"""OpenAI provider. Also serves any OpenAI-compatible endpoint (e.g. Ollama's /v1)."""

import httpx

from ..base import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    DEFAULT_TIMEOUT_SECONDS,
    LLMAuthError,
    LLMError,
    LLMProvider,
    LLMRateLimitError,
    LLMTimeoutError,
)

# Lazy exception references, set when package available
_openai_exceptions = None


def _get_openai_exceptions():
    global _openai_exceptions
    if _openai_exceptions is None:
        try:
            from openai import APIError, APITimeoutError, AuthenticationError, RateLimitError

            _openai_exceptions = (AuthenticationError, RateLimitError, APITimeoutError, APIError)
        except ImportError:
            _openai_exceptions = ()
    return _openai_exceptions


def _handle_openai_error(e: Exception):
    exc = _get_openai_exceptions()
    if exc and len(exc) == 4:
        AuthErr, RateErr, TimeoutErr, ApiErr = exc
        if isinstance(e, AuthErr):
            raise LLMAuthError(f"OpenAI auth failed: {e}") from e
        if isinstance(e, RateErr):
            raise LLMRateLimitError(f"OpenAI rate limit: {e}") from e
        if isinstance(e, TimeoutErr):
            raise LLMTimeoutError(f"OpenAI request timed out: {e}") from e
        if isinstance(e, ApiErr):
            raise LLMError(f"OpenAI API error: {e}") from e
    if isinstance(e, httpx.TimeoutException):
        raise LLMTimeoutError(f"OpenAI request timed out: {e}") from e
    raise LLMError(f"OpenAI error: {e}") from e


class OpenAIProvider(LLMProvider):
    """OpenAI GPT / OpenAI-compatible chat completions provider."""

    provider_name = "openai"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        client=None,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        temperature: float = DEFAULT_TEMPERATURE,
        extra_headers: dict | None = None,
    ):
        self.model = model or "gpt-4o-mini"
        self.temperature = temperature

        if client:
            self.client = client
            return

        try:
            from openai import OpenAI
        except ImportError:
            raise LLMError("openai package not installed. Run: pip install openai")

        # One bounded attempt: a slow or failing endpoint degrades to "no opinion"
        try:
            self.client = OpenAI(
                api_key=api_key,
                base_url=base_url,
                timeout=httpx.Timeout(timeout),
                max_retries=0,
                default_headers=extra_headers or None,
            )
        except Exception as e:
            # missing key raises OpenAIError at construction
            raise LLMAuthError(f"OpenAI client setup failed: {e}") from e

    def generate(
        self, messages: list[dict], system: str | None = None, max_tokens: int = DEFAULT_MAX_TOKENS
    ) -> str:
        full_messages = []
        if system:
            full_messages.append({"role": "system", "content": system})
        full_messages.extend(messages)

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=self.temperature,
                messages=full_messages,
            )
            return response.choices[0].message.content or ""
        except Exception as e:
            _handle_openai_error(e)
