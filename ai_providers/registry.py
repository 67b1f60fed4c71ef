# ai_providers/registry.py
import logging
import os

from .base import AIProvider

logger = logging.getLogger(__name__)

PROVIDERS = ("groq", "gemini", "stub")


def _timeout() -> float:
    return float(os.getenv("AI_REQUEST_TIMEOUT", "120"))


def build_provider(name: str = None) -> AIProvider:
    """Construct the provider named by `name` or the AI_PROVIDER setting."""
    name = (name or os.getenv("AI_PROVIDER", "groq")).strip().lower()

    if name == "groq":
        from .groq_provider import GroqProvider
        provider = GroqProvider(model=os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile"), timeout=_timeout())
    elif name == "gemini":
        from .gemini_provider import GeminiProvider
        provider = GeminiProvider(model=os.getenv("GEMINI_MODEL", "gemini-2.0-flash"), timeout=_timeout())
    elif name == "stub":
        from .local_stub import LocalStub
        provider = LocalStub()
    else:
        raise ValueError(f"Unknown AI_PROVIDER '{name}', expected one of: {', '.join(PROVIDERS)}")

    logger.info("AI provider: %s", provider.__class__.__name__)
    return provider
