"""
Claude AI Provider - Anthropic
"""

from typing import List

import anthropic

from core.errors import (
    RateLimited,
    RemoteTimeout,
    ServerError,
    error_for_status,
)
from config.logging_config import get_logger

from .base import (
    BaseAIProvider,
    AIProviderType,
    AIResponse,
    TokenUsage,
    TranslationRequest,
)

logger = get_logger(__name__)


class ClaudeProvider(BaseAIProvider):
    """
    Anthropic Claude AI Provider

    Calls the Messages API with the system prompt as ``system`` and the unit
    text as the only user message.
    """

    MODELS = {
        "claude-sonnet-4-20250514": "Claude Sonnet 4",
        "claude-3-5-sonnet-20241022": "Claude 3.5 Sonnet",
        "claude-3-5-haiku-20241022": "Claude 3.5 Haiku",
    }

    DEFAULT_MODEL = "claude-sonnet-4-20250514"

    @property
    def provider_type(self) -> AIProviderType:
        return AIProviderType.CLAUDE

    @property
    def supported_models(self) -> List[str]:
        return list(self.MODELS.keys())

    async def initialize(self) -> None:
        """Initialize Anthropic client"""
        self._client = anthropic.AsyncAnthropic(
            api_key=self.config.api_key,
            base_url=self.config.base_url,
            max_retries=0,
        )

    async def translate(self, request: TranslationRequest) -> AIResponse:
        """Translate using Claude"""
        if not self._client:
            await self.initialize()

        model = request.model or self.config.model
        params = {
            "model": model,
            "max_tokens": self.config.max_tokens,
            "system": request.system_prompt,
            "messages": [{"role": "user", "content": request.user_text}],
        }
        temperature = self.temperature_for(model)
        if temperature is not None:
            params["temperature"] = temperature

        try:
            response = await self._client.messages.create(**params)
        except anthropic.APITimeoutError as e:
            raise RemoteTimeout(f"Anthropic request timed out: {e}") from e
        except anthropic.RateLimitError as e:
            raise RateLimited(f"Anthropic rate limit: {e.message}", status=429) from e
        except anthropic.APIStatusError as e:
            logger.error(f"Anthropic API error: HTTP {e.status_code}: {e.message}")
            raise error_for_status(e.status_code, f"Anthropic HTTP {e.status_code}: {e.message}") from e
        except anthropic.APIConnectionError as e:
            raise ServerError(f"Anthropic connection error: {e}") from e

        text = "\n".join(
            block.text for block in response.content
            if getattr(block, "type", None) == "text"
        )

        return AIResponse(
            text=text,
            model=response.model,
            provider=self.provider_type,
            usage=TokenUsage(
                prompt_tokens=response.usage.input_tokens,
                completion_tokens=response.usage.output_tokens,
            ),
            finish_reason=response.stop_reason,
        )
