"""Best-effort JSON completions: role-tagged messages in, dict or None out.

Callers treat None as "the model has no opinion". Timeouts, provider errors
and unparseable output all collapse to None so the rule-based paths keep
working with no LLM at all.
"""

import json

import structlog

from .base import DEFAULT_MAX_TOKENS, LLMProvider

logger = structlog.get_logger()


def parse_structured_json(text: str | None) -> dict | None:
    """Parse a JSON object, tolerating markdown fences and surrounding prose."""
    if not text:
        return None
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.split("\n", 1)[-1]
    if cleaned.endswith("```"):
        cleaned = cleaned.rsplit("```", 1)[0]
    cleaned = cleaned.strip()

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        start = cleaned.find("{")
        end = cleaned.rfind("}")
        if start < 0 or end <= start:
            return None
        try:
            parsed = json.loads(cleaned[start : end + 1])
        except json.JSONDecodeError:
            return None

    return parsed if isinstance(parsed, dict) else None


class StructuredLLM:
    """Wraps an LLMProvider for single-shot JSON classification calls."""

    def __init__(self, provider: LLMProvider, max_tokens: int = DEFAULT_MAX_TOKENS):
        self.provider = provider
        self.max_tokens = max_tokens

    def complete_json(self, messages: list[dict]) -> dict | None:
        system = "\n\n".join(
            m["content"] for m in messages if m.get("role") == "system" and m.get("content")
        ).strip()
        chat = [
            {"role": m["role"], "content": m.get("content", "")}
            for m in messages
            if m.get("role") in ("user", "assistant")
        ]
        if not chat:
            chat = [{"role": "user", "content": "{}"}]

        try:
            raw = self.provider.generate(
                messages=chat,
                system=system or None,
                max_tokens=self.max_tokens,
            )
        except Exception as e:
            logger.warning(
                "structured_llm.call_failed",
                provider=getattr(self.provider, "provider_name", "unknown"),
                error=str(e),
            )
            return None

        parsed = parse_structured_json(raw)
        if parsed is None:
            logger.warning("structured_llm.parse_failed", response=(raw or "")[:200])
        return parsed
