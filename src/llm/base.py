"""Base LLM provider abstraction."""

from abc import ABC, abstractmethod

DEFAULT_TIMEOUT_SECONDS = 12.0
DEFAULT_TEMPERATURE = 0.2
DEFAULT_MAX_TOKENS = 512


class LLMError(Exception):
    """Base LLM error."""


class LLMRateLimitError(LLMError):
    """Rate limit hit."""


class LLMAuthError(LLMError):
    """Authentication failure."""


class LLMTimeoutError(LLMError):
    """Request exceeded its timeout."""


class LLMProvider(ABC):
    """Abstract LLM provider interface."""

    provider_name: str = "base"

    @abstractmethod
    def generate(
        self, messages: list[dict], system: str | None = None, max_tokens: int = DEFAULT_MAX_TOKENS
    ) -> str:
        """Generate a response from messages.

        Args:
            messages: List of {"role": ..., "content": ...} dicts (user/assistant)
            system: Optional system prompt
            max_tokens: Max response tokens

        Returns:
            Generated text
        """
        ...
