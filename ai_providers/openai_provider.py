"""
OpenAI Provider - GPT-4o, GPT-4o-mini, etc.
"""

from typing import Any, Dict, List

import openai
from openai import AsyncOpenAI

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


class OpenAIProvider(BaseAIProvider):
    """
    OpenAI GPT Provider

    Calls the Chat Completions API with the system prompt as the system
    message and the unit text as the user message.
    """

    MODELS = {
        "gpt-4o": "GPT-4o",
        "gpt-4o-mini": "GPT-4o Mini (Fast)",
        "gpt-4-turbo": "GPT-4 Turbo",
        "gpt-4.1": "GPT-4.1",
        "gpt-4.1-mini": "GPT-4.1 Mini",
    }

    DEFAULT_MODEL = "gpt-4o-mini"

    @property
    def provider_type(self) -> AIProviderType:
        return AIProviderType.OPENAI

    @property
    def supported_models(self) -> List[str]:
        return list(self.MODELS.keys())

    async def initialize(self) -> None:
        """Initialize OpenAI client"""
        # retries are owned by the pipeline executor
        self._client = AsyncOpenAI(
            api_key=self.config.api_key,
            base_url=self.config.base_url,
            max_retries=0,
        )

    async def translate(self, request: TranslationRequest) -> AIResponse:
        """Translate using OpenAI Chat Completions"""
        if not self._client:
            await self.initialize()

        params: Dict[str, Any] = {
            "model": request.model or self.config.model,
            "messages": [
                {"role": "system", "content": request.system_prompt},
                {"role": "user", "content": request.user_text},
            ],
        }
        temperature = self.temperature_for(params["model"])
        if temperature is not None:
            params["temperature"] = temperature

        try:
            response = await self._client.chat.completions.create(**params)
        except openai.APITimeoutError as e:
            raise RemoteTimeout(f"OpenAI request timed out: {e}") from e
        except openai.RateLimitError as e:
            raise RateLimited(f"OpenAI rate limit: {e.message}", status=429) from e
        except openai.APIStatusError as e:
            logger.error(f"OpenAI API error: HTTP {e.status_code}: {e.message}")
            raise error_for_status(e.status_code, f"OpenAI HTTP {e.status_code}: {e.message}") from e
        except openai.APIConnectionError as e:
            raise ServerError(f"OpenAI connection error: {e}") from e

        if not response.choices:
            raise ServerError("OpenAI returned no choices")

        choice = response.choices[0]
        usage = None
        if response.usage:
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
            )

        return AIResponse(
            text=choice.message.content or "",
            model=response.model,
            provider=self.provider_type,
            usage=usage,
            finish_reason=choice.finish_reason,
        )
