"""LLM adapters for listing verification.

Provides a base interface and concrete adapters for OpenAI-compatible
APIs and a deterministic mock for testing.
"""

import json
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI


class BaseLLMAdapter(ABC):
    """Abstract base for all LLM adapters."""

    @abstractmethod
    async def generate(
        self,
        *,
        system: Optional[str],
        prompt: str,
        schema_name: str,
        response_schema: Dict[str, Any],
        temperature: float,
        max_tokens: int,
    ) -> str:
        """Send a prompt to the LLM and return the raw response text.

        Args:
            system: Optional system message.
            prompt: The fully formatted user prompt.
            schema_name: Name of the structured output schema.
            response_schema: JSON schema the response must follow.
            temperature: Sampling temperature.
            max_tokens: Maximum tokens in the completion.

        Returns:
            Raw string response from the model (expected to be JSON).
        """


class OpenAILLMAdapter(BaseLLMAdapter):
    """Adapter for OpenAI-compatible chat completion APIs.

    Uses the JSON schema response format so the model is constrained to
    the verdict contract before local validation runs.
    """

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: float = 30.0,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        """Initialise the OpenAI adapter.

        Args:
            model: Model identifier.
            api_key: API key. Falls back to OPENAI_API_KEY env var.
            base_url: Optional base URL for OpenAI-compatible endpoints.
            timeout_seconds: Per-request timeout.
            client: Pre-built client, mainly for tests.
        """
        if client is None:
            client_kwargs: Dict[str, Any] = {
                "api_key": api_key or os.environ.get("OPENAI_API_KEY", ""),
                "timeout": timeout_seconds,
                "max_retries": 0,
            }
            if base_url:
                client_kwargs["base_url"] = base_url
            client = AsyncOpenAI(**client_kwargs)

        self._client = client
        self._model = model

    async def generate(
        self,
        *,
        system: Optional[str],
        prompt: str,
        schema_name: str,
        response_schema: Dict[str, Any],
        temperature: float,
        max_tokens: int,
    ) -> str:
        messages: List[Dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        response = await self._client.chat.completions.create(
            model=self._model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            stream=False,
            response_format={
                "type": "json_schema",
                "json_schema": {
                    "name": schema_name,
                    "schema": response_schema,
                    "strict": True,
                },
            },
        )
        return response.choices[0].message.content or ""


# ---------------------------------------------------------------------------
# Fixed mock responses used for local testing.
# ---------------------------------------------------------------------------
_MOCK_RESPONSES = {
    "listing_verdict": {
        "listing_active": True,
        "correct_product": True,
        "in_stock": True,
        "detected_price": None,
        "detected_product_name": "Mock product",
        "page_title": "Mock product page",
        "action": "KEEP",
        "confidence": 0.9,
        "reasoning": "Mock verdict for testing purposes.",
    },
    "self_review": {
        "notes": ["Mock learning note produced for local testing only."],
        "summary": "Mock review.",
    },
}


class MockLLMAdapter(BaseLLMAdapter):
    """Deterministic adapter that returns a fixed valid JSON response.

    Used for local testing and CI pipelines where no LLM API is
    available. Every call is recorded in ``calls``.
    """

    def __init__(self, responses: Optional[Dict[str, Any]] = None) -> None:
        self._responses = dict(_MOCK_RESPONSES)
        if responses:
            self._responses.update(responses)
        self.calls: List[Dict[str, Any]] = []

    async def generate(
        self,
        *,
        system: Optional[str],
        prompt: str,
        schema_name: str,
        response_schema: Dict[str, Any],
        temperature: float,
        max_tokens: int,
    ) -> str:
        self.calls.append(
            {
                "system": system,
                "prompt": prompt,
                "schema_name": schema_name,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        response = self._responses[schema_name]
        return response if isinstance(response, str) else json.dumps(response)
