"""Claude (Anthropic) LLM provider."""

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


class ClaudeProvider(LLMProvider):
    """Anthropic Claude provider."""

    provider_name = "claude"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        client=None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        temperature: float = DEFAULT_TEMPERATURE,
    ):
        self.model = model or "claude-3-5-haiku-latest"
        self.temperature = temperature

        if client:
            self.client = client
            return

        try:
            from anthropic import Anthropic
        except ImportError:
            raise LLMError("anthropic package not installed. Run: pip install anthropic")

        try:
            self.client = Anthropic(api_key=api_key, timeout=httpx.Timeout(timeout), max_retries=0)
        except Exception as e:
            raise LLMAuthError(f"Claude client setup failed: {e}") from e

    def _get_exceptions(self):
        from anthropic import APIError, APITimeoutError, AuthenticationError, RateLimitError

        return AuthenticationError, RateLimitError, APITimeoutError, APIError

    def _handle_error(self, e: Exception):
        try:
            AuthenticationError, RateLimitError, APITimeoutError, APIError = self._get_exceptions()
        except ImportError:
            raise LLMError(f"Claude error: {e}") from e
        if isinstance(e, AuthenticationError):
            raise LLMAuthError(f"Claude auth failed: {e}") from e
        if isinstance(e, RateLimitError):
            raise LLMRateLimitError(f"Claude rate limit: {e}") from e
        if isinstance(e, APITimeoutError):
            raise LLMTimeoutError(f"Claude request timed out: {e}") from e
        if isinstance(e, APIError):
            raise LLMError(f"Claude API error: {e}") from e
        raise LLMError(f"Claude error: {e}") from e

    def generate(
        self, messages: list[dict], system: str | None = None, max_tokens: int = DEFAULT_MAX_TOKENS
    ) -> str:
        try:
            kwargs = {
                "model": self.model,
                "max_tokens": max_tokens,
                "temperature": self.temperature,
                "messages": messages,
            }
            if system:
                kwargs["system"] = system

            response = self.client.messages.create(**kwargs)
            return "\n".join(
                block.text for block in response.content if isinstance(getattr(block, "text", None), str)
            )
        except Exception as e:
            self._handle_error(e)
