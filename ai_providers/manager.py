"""
AI Provider Manager

Registry and factory for the remote translation capability.
"""

from typing import Optional, Dict, Type
from dataclasses import dataclass

from .base import BaseAIProvider, AIProviderType, AIConfig
from .claude_provider import ClaudeProvider
from .openai_provider import OpenAIProvider


@dataclass
class ProviderInfo:
    """Information about an AI provider"""
    type: AIProviderType
    name: str
    models: Dict[str, str]
    default_model: str
    env_key: str  # Environment variable name for API key


# Registry of all available providers
PROVIDER_REGISTRY: Dict[AIProviderType, Type[BaseAIProvider]] = {
    AIProviderType.CLAUDE: ClaudeProvider,
    AIProviderType.OPENAI: OpenAIProvider,
}

# Provider information
PROVIDER_INFO: Dict[AIProviderType, ProviderInfo] = {
    AIProviderType.CLAUDE: ProviderInfo(
        type=AIProviderType.CLAUDE,
        name="Anthropic Claude",
        models=ClaudeProvider.MODELS,
        default_model=ClaudeProvider.DEFAULT_MODEL,
        env_key="ANTHROPIC_API_KEY"
    ),
    AIProviderType.OPENAI: ProviderInfo(
        type=AIProviderType.OPENAI,
        name="OpenAI GPT",
        models=OpenAIProvider.MODELS,
        default_model=OpenAIProvider.DEFAULT_MODEL,
        env_key="OPENAI_API_KEY"
    ),
}


def create_provider(
    provider: str,
    api_key: str,
    model: Optional[str] = None,
    base_url: Optional[str] = None,
) -> BaseAIProvider:
    """
    Build a provider instance.

    Args:
        provider: "openai" or "anthropic".
        api_key: API key for the provider.
        model: Default model; the provider's default when omitted.
        base_url: Optional custom endpoint.

    Raises:
        ValueError: If the provider is not supported.
    """
    try:
        provider_type = AIProviderType(provider.lower())
    except ValueError:
        raise ValueError(f"Unsupported provider: {provider}") from None

    provider_cls = PROVIDER_REGISTRY[provider_type]
    config = AIConfig(
        api_key=api_key,
        model=model or PROVIDER_INFO[provider_type].default_model,
        base_url=base_url,
    )
    return provider_cls(config)


def create_provider_from_settings(settings) -> BaseAIProvider:
    """Build the configured provider from application Settings."""
    base_url = settings.openai_base_url if settings.provider == "openai" else None
    return create_provider(
        settings.provider,
        api_key=settings.get_api_key(),
        model=settings.model,
        base_url=base_url,
    )
