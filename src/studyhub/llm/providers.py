"""LLM provider variants sharing a single ``invoke`` contract."""
from __future__ import annotations

import asyncio
import json
import logging
import os
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Type

from anthropic import AsyncAnthropic
from google import genai
from google.genai import types as genai_types
from openai import AsyncOpenAI

from studyhub.errors import LLMConfigError, LLMGenerationError

from .config import LLMProviderConfig, resolve_provider

LOGGER = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.2


class LLMProvider(ABC):
    """Abstract interface for hosted language model backends."""

    def __init__(self, key: str, config: LLMProviderConfig) -> None:
        self.key = key
        self.config = config

    @property
    def model_name(self) -> str:
        return self.config.model

    def resolve_temperature(self, temperature: Optional[float] = None) -> float:
        """Explicit value, else the provider's configured one, else 0.2."""

        if temperature is not None:
            return temperature
        if self.config.temperature is not None:
            return self.config.temperature
        return DEFAULT_TEMPERATURE

    async def invoke(self, prompt: str, *, system: str, temperature: Optional[float] = None) -> str:
        """Send one prompt and return the raw text response.

        The call is bounded by the provider's ``timeout_seconds``; timeouts and
        SDK failures surface as :class:`LLMGenerationError`.
        """

        LOGGER.info(
            "Invoking %s (%s) with prompt of %s chars", self.key, self.config.model, len(prompt)
        )
        try:
            return await asyncio.wait_for(
                self._invoke(prompt, system=system, temperature=self.resolve_temperature(temperature)),
                timeout=self.config.timeout_seconds,
            )
        except asyncio.TimeoutError as error:
            raise LLMGenerationError(
                f"{self.config.label} did not respond within {self.config.timeout_seconds:.0f}s",
                cause=error,
            ) from error
        except LLMGenerationError:
            raise
        except Exception as error:
            LOGGER.exception("LLM provider %s failed", self.key)
            raise LLMGenerationError(
                f"{self.config.label} request failed: {error}", cause=error
            ) from error

    @abstractmethod
    async def _invoke(self, prompt: str, *, system: str, temperature: float) -> str:
        """Provider-specific request."""


class OpenAIProvider(LLMProvider):
    def __init__(self, key: str, config: LLMProviderConfig, *, client: Any = None, api_key: str | None = None) -> None:
        super().__init__(key, config)
        self._client = client if client is not None else AsyncOpenAI(api_key=api_key)

    async def _invoke(self, prompt: str, *, system: str, temperature: float) -> str:
        completion = await self._client.chat.completions.create(
            model=self.config.model,
            temperature=temperature,
            max_tokens=self.config.max_output_tokens or 4096,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            response_format={"type": "json_object"},
        )
        if not completion.choices:
            return ""
        return completion.choices[0].message.content or ""


class AnthropicProvider(LLMProvider):
    def __init__(self, key: str, config: LLMProviderConfig, *, client: Any = None, api_key: str | None = None) -> None:
        super().__init__(key, config)
        self._client = client if client is not None else AsyncAnthropic(api_key=api_key)

    async def _invoke(self, prompt: str, *, system: str, temperature: float) -> str:
        message = await self._client.messages.create(
            model=self.config.model,
            temperature=temperature,
            max_tokens=self.config.max_output_tokens or 4096,
            system=system,
            messages=[{"role": "user", "content": prompt}],
        )
        parts = [block.text for block in message.content if getattr(block, "type", None) == "text"]
        return "\n".join(parts).strip()


class GoogleProvider(LLMProvider):
    def __init__(self, key: str, config: LLMProviderConfig, *, client: Any = None, api_key: str | None = None) -> None:
        super().__init__(key, config)
        self._client = client if client is not None else genai.Client(api_key=api_key)

    async def _invoke(self, prompt: str, *, system: str, temperature: float) -> str:
        response = await self._client.aio.models.generate_content(
            model=self.config.model,
            contents=prompt,
            config=genai_types.GenerateContentConfig(
                system_instruction=system,
                temperature=temperature,
                max_output_tokens=self.config.max_output_tokens or 2048,
                response_mime_type="application/json",
            ),
        )
        return response.text or ""


_CHUNK_HEADER_RE = re.compile(r"^Chunk (\d+) \(ID: ([^)]+)\)\n(.*?)(?=^Chunk \d+ \(ID: |\Z)", re.DOTALL | re.MULTILINE)
_MAX_CARDS_RE = re.compile(r"Return up to (\d+) flashcards")


class MockLLMProvider(LLMProvider):
    """Deterministic offline provider: one card per chunk excerpt in the prompt."""

    def __init__(self, key: str = "mock", config: Optional[LLMProviderConfig] = None, **_: object) -> None:
        super().__init__(key, config or LLMProviderConfig(label="Offline mock", provider="mock", model="mock"))

    async def _invoke(self, prompt: str, *, system: str, temperature: float) -> str:
        del system, temperature  # Unused in the mock implementation.
        limit_match = _MAX_CARDS_RE.search(prompt)
        limit = int(limit_match.group(1)) if limit_match else 20
        cards = []
        for match in _CHUNK_HEADER_RE.finditer(prompt):
            excerpt = " ".join(match.group(3).split())
            sentence = excerpt.split(". ")[0].rstrip(".")
            cards.append(
                {
                    "front": f"What is the key idea of chunk {match.group(1)}?",
                    "back": sentence or excerpt,
                    "tags": ["mock"],
                    "sourceChunkIds": [match.group(2).strip()],
                }
            )
            if len(cards) >= limit:
                break
        return json.dumps({"flashcards": cards})


PROVIDER_CLASSES: Dict[str, Type[LLMProvider]] = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
    "google": GoogleProvider,
    "mock": MockLLMProvider,
}


def create_provider(
    provider_key: Optional[str] = None,
    *,
    config_path: Path | str | None = None,
    client: Any = None,
) -> LLMProvider:
    """Build the provider variant configured under ``provider_key``."""

    key, config = resolve_provider(provider_key, path=config_path)
    provider_cls = PROVIDER_CLASSES.get(config.provider)
    if provider_cls is None:
        raise LLMConfigError(f'Unsupported provider "{key}" ({config.provider})')
    if provider_cls is MockLLMProvider:
        return MockLLMProvider(key, config)

    api_key = os.getenv(config.env_var) if config.env_var else None
    if client is None and not api_key:
        raise LLMConfigError(
            f'Missing API key for provider "{key}". Expected env var {config.env_var or "<unset>"}.'
        )
    return provider_cls(key, config, client=client, api_key=api_key)
