"""Multi-provider LLM abstraction layer."""

from .base import (
    LLMAuthError,
    LLMError,
    LLMProvider,
    LLMRateLimitError,
    LLMTimeoutError,
)
from .factory import create_llm_provider
from .structured import StructuredLLM, parse_structured_json

__all__ = [
    "LLMProvider",
    "create_llm_provider",
    "StructuredLLM",
    "parse_structured_json",
    "LLMError",
    "LLMRateLimitError",
    "LLMAuthError",
    "LLMTimeoutError",
]
