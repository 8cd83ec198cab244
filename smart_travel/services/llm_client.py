"""
LLM Client - Unified interface for text generation and embeddings.
Supports OpenAI, Mistral, OpenRouter, Ollama and a deterministic mock provider.

When no credential is configured the client is simply unavailable; callers
check ``available`` / ``embeddings_available`` and take their fallback path.
"""
import asyncio
import json
import logging
import re
from typing import Optional

from openai import AsyncOpenAI

from ..config import Settings, get_llm_config, settings as default_settings

logger = logging.getLogger(__name__)


class LLMUnavailableError(RuntimeError):
    """Raised when a capability is used while no provider is configured."""


class LLMClient:
    """Async LLM client with OpenAI-compatible API."""

    def __init__(self, config: Optional[Settings] = None):
        config = config or default_settings
        llm_config = get_llm_config(config)

        self.provider = config.llm_provider
        self.timeout = config.external_call_timeout
        self.temperature = llm_config["temperature"]
        self.max_tokens = llm_config["max_tokens"]
        self.embedding_model = llm_config["embedding_model"]
        self.client: Optional[AsyncOpenAI] = None
        self._mock = None

        # Use mock client if provider is 'mock'
        if self.provider == "mock":
            from .mock_llm import MockLLMClient
            self._mock = MockLLMClient()
            self.model = self._mock.model
        elif llm_config["api_key"]:
            self.client = AsyncOpenAI(
                api_key=llm_config["api_key"],
                base_url=llm_config["base_url"]
            )
            self.model = llm_config["model"]
        else:
            self.model = llm_config["model"]
            logger.warning(
                f"No API key configured for provider '{self.provider}'; "
                "generation and embeddings will use fallbacks"
            )

    @property
    def available(self) -> bool:
        """Whether text generation can be attempted."""
        return self._mock is not None or self.client is not None

    @property
    def embeddings_available(self) -> bool:
        """Whether embeddings can be attempted."""
        return self.available

    async def chat(
        self,
        messages: list[dict],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_mode: bool = False
    ) -> str:
        """
        Send a chat completion request.

        Args:
            messages: List of message dicts with 'role' and 'content'
            temperature: Override default temperature
            max_tokens: Override default max tokens
            json_mode: If True, request JSON response format

        Returns:
            The assistant's response content
        """
        if not self.available:
            raise LLMUnavailableError(f"no credential configured for {self.provider}")

        # Use mock client if available
        if self._mock is not None:
            return await self._mock.chat(messages, temperature, max_tokens, json_mode)

        kwargs = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature if temperature is not None else self.temperature,
            "max_tokens": max_tokens or self.max_tokens,
        }

        # JSON mode support (not all providers support this)
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await self.client.chat.completions.create(**kwargs)
            return response.choices[0].message.content or ""
        except Exception:
            # If JSON mode fails, retry without it
            if json_mode and "response_format" in kwargs:
                del kwargs["response_format"]
                response = await self.client.chat.completions.create(**kwargs)
                return response.choices[0].message.content or ""
            raise

    async def generate_text(
        self,
        prompt: str,
        system: Optional[str] = None,
        json_mode: bool = True
    ) -> str:
        """Generate text from a single prompt, bounded by the configured timeout."""
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        return await asyncio.wait_for(
            self.chat(messages, json_mode=json_mode),
            timeout=self.timeout
        )

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Embed a batch of texts, bounded by the configured timeout."""
        if not self.embeddings_available:
            raise LLMUnavailableError(f"no credential configured for {self.provider}")

        if self._mock is not None:
            return self._mock.embed(texts)

        response = await asyncio.wait_for(
            self.client.embeddings.create(model=self.embedding_model, input=texts),
            timeout=self.timeout
        )
        return [item.embedding for item in response.data]


def parse_json_response(text: str) -> dict:
    """
    Parse a JSON object from LLM output, handling markdown code blocks.

    Raises:
        ValueError: if no JSON object can be recovered from the text
    """
    text = (text or "").strip()

    # Try direct parse first
    try:
        parsed = json.loads(text)
        if isinstance(parsed, dict):
            return parsed
    except json.JSONDecodeError:
        pass

    # Try extracting from markdown code block
    json_match = re.search(r'```(?:json)?\s*([\s\S]*?)```', text)
    if json_match:
        try:
            parsed = json.loads(json_match.group(1).strip())
            if isinstance(parsed, dict):
                return parsed
        except json.JSONDecodeError:
            pass

    # Try finding JSON object in text
    brace_start = text.find('{')
    brace_end = text.rfind('}')
    if brace_start != -1 and brace_end > brace_start:
        try:
            parsed = json.loads(text[brace_start:brace_end + 1])
            if isinstance(parsed, dict):
                return parsed
        except json.JSONDecodeError:
            pass

    raise ValueError("no JSON object found in model output")


# Global LLM client instance
llm_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    """Get or create the global LLM client."""
    global llm_client
    if llm_client is None:
        llm_client = LLMClient()
    return llm_client
