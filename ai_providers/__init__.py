"""
AI Providers Package
Remote translation capability for the pipeline.

Supports:
- OpenAI GPT (gpt-4o-mini, gpt-4o, ...)
- Anthropic Claude (claude-sonnet-4, claude-3.5-haiku, ...)

Usage:
    from ai_providers import create_provider, TranslationRequest

    provider = create_provider("openai", api_key="sk-...", model="gpt-4o-mini")
    response = await provider.translate(TranslationRequest(
        model="gpt-4o-mini",
        system_prompt="Translate from English to Russian.",
        user_text="Hello, world!",
    ))
    print(response.text)
"""

from .base import (
    BaseAIProvider,
    AIProviderType,
    AIResponse,
    AIConfig,
    TokenUsage,
    TranslationRequest,
)

from .claude_provider import ClaudeProvider
from .openai_provider import OpenAIProvider

from .manager import (
    ProviderInfo,
    PROVIDER_REGISTRY,
    PROVIDER_INFO,
    create_provider,
    create_provider_from_settings,
)

__all__ = [
    # Base classes
    "BaseAIProvider",
    "AIProviderType",
    "AIResponse",
    "AIConfig",
    "TokenUsage",
    "TranslationRequest",

    # Providers
    "ClaudeProvider",
    "OpenAIProvider",

    # Factory
    "ProviderInfo",
    "PROVIDER_REGISTRY",
    "PROVIDER_INFO",
    "create_provider",
    "create_provider_from_settings",
]

__version__ = "1.0.0"
