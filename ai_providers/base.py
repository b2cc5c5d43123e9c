"""
Base AI Provider - Abstract Interface
Remote translation capability used by the pipeline executor.
"""

from abc import ABC, abstractmethod
from typing import Optional, List
from dataclasses import dataclass
from enum import Enum

from config.constants import TRANSLATION_MAX_TOKENS


class AIProviderType(Enum):
    """Supported AI Providers"""
    OPENAI = "openai"
    CLAUDE = "anthropic"


@dataclass
class TokenUsage:
    """Tokens reported by the provider for one call"""
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


@dataclass
class TranslationRequest:
    """One outbound translation call"""
    model: str
    system_prompt: str
    user_text: str


@dataclass
class AIResponse:
    """Unified response format"""
    text: str
    model: str
    provider: AIProviderType
    usage: Optional[TokenUsage] = None
    finish_reason: Optional[str] = None


@dataclass
class AIConfig:
    """Provider configuration"""
    api_key: str
    model: str
    max_tokens: int = TRANSLATION_MAX_TOKENS
    base_url: Optional[str] = None  # For custom endpoints


class BaseAIProvider(ABC):
    """
    Abstract base class for AI providers.

    Implementations must translate SDK failures into the pipeline's remote
    error hierarchy (core.errors): RateLimited, ServerError, RemoteTimeout
    or ClientError. They must not retry on their own; the executor owns the
    retry policy.
    """

    def __init__(self, config: AIConfig):
        self.config = config
        self._client = None

    @property
    @abstractmethod
    def provider_type(self) -> AIProviderType:
        """Return the provider type"""
        pass

    @property
    @abstractmethod
    def supported_models(self) -> List[str]:
        """Return list of known models"""
        pass

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the client connection"""
        pass

    @abstractmethod
    async def translate(self, request: TranslationRequest) -> AIResponse:
        """
        Send one translation request.

        Args:
            request: Model, system prompt and the text to translate.

        Returns:
            AIResponse with the translated text and token usage if reported.

        Raises:
            RemoteError subclasses from core.errors.
        """
        pass

    async def close(self) -> None:
        """Release the underlying HTTP client"""
        if self._client is not None:
            await self._client.close()
            self._client = None

    @staticmethod
    def temperature_for(model: str) -> Optional[float]:
        """Deterministic output for full models; provider default for mini models."""
        return None if "mini" in model.lower() else 0.0

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} model={self.config.model}>"
