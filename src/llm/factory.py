"""LLM provider factory with auto-detection."""

import os

from .base import DEFAULT_TEMPERATURE, DEFAULT_TIMEOUT_SECONDS, LLMError, LLMProvider

_PROVIDER_ENV_KEYS = {
    "claude": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
}

_AUTO_DETECT_ORDER = ["claude", "openai"]

_PROVIDER_ALIASES = {
    "openai-compatible": "openai",
    "anthropic": "claude",
}

DEFAULT_OLLAMA_URL = "http://127.0.0.1:11434"


def normalize_base_url(value: str) -> str:
    return value.rstrip("/")


def ollama_base_url(value: str | None) -> str:
    """Ollama serves the OpenAI-compatible API under /v1."""
    base = normalize_base_url(value or DEFAULT_OLLAMA_URL)
    if base.lower().endswith("/v1"):
        return base
    return f"{base}/v1"


def create_llm_provider(
    provider: str | None = None,
    api_key: str | None = None,
    model: str | None = None,
    client=None,
    base_url: str | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    temperature: float = DEFAULT_TEMPERATURE,
    extra_headers: dict | None = None,
) -> LLMProvider:
    """Create an LLM provider instance.

    Args:
        provider: "claude", "openai", "openai-compatible", "ollama", "auto", or None (auto-detect)
        api_key: Explicit API key (overrides env var)
        model: Model name (None = provider default)
        client: Pre-built SDK client for testing/DI
        base_url: Endpoint override for OpenAI-compatible servers
        timeout: Per-request timeout in seconds
        temperature: Sampling temperature

    Returns:
        LLMProvider instance
    """
    resolved = _PROVIDER_ALIASES.get(provider or "auto", provider or "auto")

    if resolved == "auto":
        resolved = _auto_detect_provider(api_key)

    if not api_key and not client:
        env_var = _PROVIDER_ENV_KEYS.get(resolved)
        if env_var:
            api_key = os.getenv(env_var)

    if resolved == "claude":
        from .providers.claude import ClaudeProvider

        return ClaudeProvider(
            api_key=api_key, model=model, client=client, timeout=timeout, temperature=temperature
        )
    elif resolved == "openai":
        from .providers.openai import OpenAIProvider

        return OpenAIProvider(
            api_key=api_key,
            model=model,
            client=client,
            base_url=normalize_base_url(base_url) if base_url else None,
            timeout=timeout,
            temperature=temperature,
            extra_headers=extra_headers,
        )
    elif resolved == "ollama":
        from .providers.openai import OpenAIProvider

        local = OpenAIProvider(
            # the SDK insists on a key; Ollama ignores it
            api_key=api_key or "ollama",
            model=model,
            client=client,
            base_url=ollama_base_url(base_url),
            timeout=timeout,
            temperature=temperature,
            extra_headers=extra_headers,
        )
        local.provider_name = "ollama"
        return local
    else:
        raise LLMError(f"Unknown provider: {resolved}. Use: claude, openai, openai-compatible, ollama")


def _detect_provider_from_key(api_key: str) -> str | None:
    """Infer provider from API key prefix."""
    if api_key.startswith("sk-ant-"):
        return "claude"
    if api_key.startswith("sk-"):
        return "openai"
    return None


def _auto_detect_provider(api_key: str | None = None) -> str:
    """Detect provider from explicit key prefix, then env vars."""
    if api_key:
        inferred = _detect_provider_from_key(api_key)
        if inferred:
            return inferred

    for name in _AUTO_DETECT_ORDER:
        env_var = _PROVIDER_ENV_KEYS[name]
        if os.getenv(env_var):
            return name
    raise LLMError("No LLM API key found. Set one of: ANTHROPIC_API_KEY, OPENAI_API_KEY")
