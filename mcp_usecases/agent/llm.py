import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx
from anthropic import AsyncAnthropic
from langfuse import observe
from openai import AsyncOpenAI

from ..config import Config

logger = logging.getLogger(__name__)

# Langfuse picks its keys up from the environment; trace only when they are set
LANGFUSE_ENABLED = bool(Config.LANGFUSE_SECRET_KEY and Config.LANGFUSE_PUBLIC_KEY)


def langfuse_observe(name: str = None, as_type: str = None):
    """Decorator that wraps @observe when Langfuse is enabled, no-op otherwise."""
    def decorator(func):
        if LANGFUSE_ENABLED:
            return observe(name=name, as_type=as_type)(func)
        return func
    return decorator


class LLMProvider(ABC):
    """Abstract base class for hosted text-generation models (Async)."""

    @abstractmethod
    async def generate_text(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        """Generate text from the LLM."""
        pass


class OpenAIProvider(LLMProvider):
    def __init__(self, api_key: str, model: str = "gpt-4o-mini", max_tokens: int = 1000):
        self.client = AsyncOpenAI(api_key=api_key)
        self.model = model
        self.max_tokens = max_tokens

    @langfuse_observe(name="openai-generate-text", as_type="generation")
    async def generate_text(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        response = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            max_tokens=self.max_tokens,
        )
        return response.choices[0].message.content or ""


class AnthropicProvider(LLMProvider):
    def __init__(self, api_key: str, model: str = "claude-3-5-haiku-latest", max_tokens: int = 1000):
        self.client = AsyncAnthropic(api_key=api_key)
        self.model = model
        self.max_tokens = max_tokens

    @langfuse_observe(name="anthropic-generate-text", as_type="generation")
    async def generate_text(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        kwargs = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": prompt}]
        }
        if system_prompt:
            kwargs["system"] = system_prompt

        response = await self.client.messages.create(**kwargs)
        return "".join(block.text for block in response.content if block.type == "text")


class CloudflareProvider(LLMProvider):
    """Cloudflare Workers AI through its REST endpoint."""

    BASE_URL = "https://api.cloudflare.com/client/v4/accounts"

    def __init__(
        self,
        api_token: str,
        account_id: Optional[str] = None,
        model: str = "@cf/meta/llama-2-7b-chat-int8",
        max_tokens: int = 1000,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not account_id:
            raise ValueError("Cloudflare account id is required for Workers AI.")
        self.api_token = api_token
        self.account_id = account_id
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._transport = transport

    @langfuse_observe(name="cloudflare-generate-text", as_type="generation")
    async def generate_text(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        url = f"{self.BASE_URL}/{self.account_id}/ai/run/{self.model}"
        headers = {"Authorization": f"Bearer {self.api_token}"}

        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            response = await client.post(url, headers=headers, json={"messages": messages, "max_tokens": self.max_tokens})
            response.raise_for_status()
            data = response.json()

        result = data.get("result") or {}
        text = result.get("response")
        if not isinstance(text, str):
            raise ValueError(f"Unexpected Workers AI response format: {data}")
        return text


def get_llm_provider(provider_name: str, api_key: str, **kwargs) -> LLMProvider:
    if provider_name.lower() == "openai":
        return OpenAIProvider(api_key, **kwargs)
    elif provider_name.lower() == "anthropic":
        return AnthropicProvider(api_key, **kwargs)
    elif provider_name.lower() == "cloudflare":
        return CloudflareProvider(api_key, **kwargs)
    else:
        raise ValueError(f"Unknown provider: {provider_name}")


def provider_from_config() -> Optional[LLMProvider]:
    """Build the provider selected by LLM_PROVIDER, or None when it has no credentials."""
    api_key = Config.llm_api_key()
    if not api_key:
        logger.warning("No hosted model configured, summaries will be extractive")
        return None

    provider_name = Config.LLM_PROVIDER.lower()
    if provider_name == "cloudflare":
        return get_llm_provider(
            provider_name,
            api_key,
            account_id=Config.CLOUDFLARE_ACCOUNT_ID,
            model=Config.CLOUDFLARE_AI_MODEL,
            timeout=Config.HTTP_TIMEOUT_SECONDS,
        )
    return get_llm_provider(provider_name, api_key)
