"""
Text-generation providers.

A provider turns an ordered list of chat messages (system, then user) into
a single completion text. Two implementations are available:
an OpenAI-compatible chat completions API over httpx, and Claude through
the Anthropic SDK. The provider is built once at startup and shared.
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import anthropic
import httpx

from refine_engine.config import SUPPORTED_PROVIDERS, Settings
from refine_engine.logging_config import logger
from refine_engine.services.errors import (
    MalformedProviderResponse,
    ProviderNotConfiguredError,
)


class TextGenerationProvider(ABC):
    """Given ordered chat messages, return one generated text"""

    name: str = "provider"
    model: str = ""

    @abstractmethod
    async def generate(self, messages: List[Dict[str, str]]) -> str:
        """Return the first completion's text content, unmodified"""

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether a credential is held"""

    async def aclose(self) -> None:
        """Release network resources"""


class ChatCompletionsProvider(TextGenerationProvider):
    """OpenAI-compatible /chat/completions endpoint"""

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 180.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def generate(self, messages: List[Dict[str, str]]) -> str:
        if not self.api_key:
            raise ProviderNotConfiguredError("OPENAI_API_KEY not configured")

        response = await self._client.post(
            f"{self.base_url}/chat/completions",
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            json={
                "model": self.model,
                "messages": messages,
            },
        )
        response.raise_for_status()

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise MalformedProviderResponse(
                f"Unexpected chat completions payload: {e!r}"
            ) from e

        if not isinstance(content, str):
            raise MalformedProviderResponse("Completion has no text content")

        return content

    async def aclose(self) -> None:
        await self._client.aclose()


class AnthropicProvider(TextGenerationProvider):
    """Claude messages API via the Anthropic SDK"""

    name = "anthropic"

    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int = 4096,
        client: Optional[anthropic.AsyncAnthropic] = None,
    ):
        self.model = model
        self.max_tokens = max_tokens
        if client is None and api_key:
            client = anthropic.AsyncAnthropic(api_key=api_key)
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    async def generate(self, messages: List[Dict[str, str]]) -> str:
        if self._client is None:
            raise ProviderNotConfiguredError("ANTHROPIC_API_KEY not configured")

        # The messages API takes the system instruction separately
        system = "\n\n".join(m["content"] for m in messages if m["role"] == "system")
        conversation = [m for m in messages if m["role"] != "system"]

        response = await self._client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            system=system,
            messages=conversation,
        )

        for block in response.content:
            if hasattr(block, "text"):
                return block.text

        raise MalformedProviderResponse("Claude response has no text block")

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()


def build_provider(config: Settings) -> TextGenerationProvider:
    """Create the provider selected by LLM_PROVIDER"""
    if config.LLM_PROVIDER not in SUPPORTED_PROVIDERS:
        raise ValueError(
            f"Unknown LLM_PROVIDER '{config.LLM_PROVIDER}' (expected one of {', '.join(SUPPORTED_PROVIDERS)})"
        )

    if config.LLM_PROVIDER == "anthropic":
        provider: TextGenerationProvider = AnthropicProvider(
            api_key=config.ANTHROPIC_API_KEY,
            model=config.ANTHROPIC_MODEL,
            max_tokens=config.ANTHROPIC_MAX_TOKENS,
        )
    else:
        provider = ChatCompletionsProvider(
            api_key=config.OPENAI_API_KEY,
            model=config.OPENAI_MODEL,
            base_url=config.OPENAI_BASE_URL,
            timeout=config.PROVIDER_TIMEOUT,
        )

    logger.info(
        "Provider initialized",
        provider=provider.name,
        model=provider.model,
        configured=provider.is_configured
    )
    return provider
