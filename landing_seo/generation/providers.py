"""Interchangeable text generation providers.

Each provider turns one ``GenerationRequest`` into one
``GenerationResponse`` and translates its own transport failures into
``ProviderError`` so the client's retry policy can tell transient failures
from permanent ones. The set of providers is closed: add a class here and
register it in ``PROVIDERS``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Optional

import anthropic
import requests

from landing_seo.config import (
    ANTHROPIC_MODEL,
    GEMINI_API_BASE,
    GEMINI_MODEL,
    HTTP_TIMEOUT,
)
from landing_seo.errors import ProviderError
from landing_seo.generation.fixtures import DEFAULT_FIXTURES


@dataclass(frozen=True)
class GenerationRequest:
    prompt: str
    system_prompt: Optional[str]
    temperature: float
    max_tokens: int
    response_format: Optional[str] = None  # "json" asks for a JSON-only answer
    tag: Optional[str] = None  # what the caller is asking for, e.g. "hook_angle"


@dataclass(frozen=True)
class GenerationResponse:
    content: str
    provider_id: str
    model: str
    tokens_used: Optional[int] = None


class AnthropicProvider:
    """Anthropic Messages API."""

    provider_id = "anthropic"

    def __init__(self, api_key: str, model: Optional[str] = None, timeout: float = HTTP_TIMEOUT):
        if not api_key:
            raise ValueError("ANTHROPIC_API_KEY not set. Add it to your .env file.")
        self.model = model or ANTHROPIC_MODEL
        # Retries are handled by the client's RetryPolicy
        self._client = anthropic.Anthropic(api_key=api_key, timeout=timeout, max_retries=0)

    def complete(self, request: GenerationRequest) -> GenerationResponse:
        kwargs = dict(
            model=self.model,
            max_tokens=request.max_tokens,
            temperature=request.temperature,
            messages=[{"role": "user", "content": request.prompt}],
        )
        if request.system_prompt:
            kwargs["system"] = request.system_prompt

        try:
            message = self._client.messages.create(**kwargs)
        except anthropic.APIConnectionError as e:
            raise ProviderError(f"Anthropic connection error: {e}", retryable=True) from e
        except anthropic.APIStatusError as e:
            status = e.status_code
            raise ProviderError(
                f"Anthropic API error {status}: {e.message}",
                status=status,
                retryable=status == 429 or status >= 500,
            ) from e

        blocks = [block for block in message.content if block.type == "text"]
        if not blocks:
            raise ProviderError("Unexpected response type from Anthropic API")
        usage = message.usage
        return GenerationResponse(
            content=blocks[0].text,
            provider_id=self.provider_id,
            model=self.model,
            tokens_used=usage.input_tokens + usage.output_tokens,
        )


class GeminiProvider:
    """Gemini ``generateContent`` REST endpoint."""

    provider_id = "gemini"

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        timeout: float = HTTP_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        if not api_key:
            raise ValueError("GEMINI_API_KEY not set. Add it to your .env file.")
        self.api_key = api_key
        self.model = model or GEMINI_MODEL
        self.timeout = timeout
        self.session = session or requests.Session()

    def complete(self, request: GenerationRequest) -> GenerationResponse:
        generation_config = {
            "temperature": request.temperature,
            "maxOutputTokens": request.max_tokens,
        }
        if request.response_format == "json":
            generation_config["responseMimeType"] = "application/json"

        body = {
            "contents": [{"role": "user", "parts": [{"text": request.prompt}]}],
            "generationConfig": generation_config,
        }
        if request.system_prompt:
            body["systemInstruction"] = {"parts": [{"text": request.system_prompt}]}

        url = f"{GEMINI_API_BASE}/models/{self.model}:generateContent"
        try:
            resp = self.session.post(
                url,
                headers={"x-goog-api-key": self.api_key},
                json=body,
                timeout=self.timeout,
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            raise ProviderError(f"Gemini connection error: {e}", retryable=True) from e

        if not resp.ok:
            raise ProviderError(
                f"Gemini API error {resp.status_code}: {resp.text}",
                status=resp.status_code,
                retryable=resp.status_code == 429 or resp.status_code >= 500,
            )

        data = resp.json()
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError) as e:
            # Blocked or empty candidates: treat as permanent for this prompt
            raise ProviderError(f"Gemini returned no candidates: {json.dumps(data)[:300]}") from e
        text = "".join(part.get("text", "") for part in parts)
        usage = data.get("usageMetadata", {})
        return GenerationResponse(
            content=text,
            provider_id=self.provider_id,
            model=self.model,
            tokens_used=usage.get("totalTokenCount"),
        )


class FixtureProvider:
    """Offline provider answering from a fixture table keyed by request tag.

    Used for mock runs and tests; nothing leaves the process.
    """

    provider_id = "fixture"

    def __init__(self, fixtures: Optional[dict] = None, model: Optional[str] = None):
        self.fixtures = dict(DEFAULT_FIXTURES if fixtures is None else fixtures)
        self.model = model or "fixture"
        self.requests: list[GenerationRequest] = []

    def complete(self, request: GenerationRequest) -> GenerationResponse:
        self.requests.append(request)
        if request.tag not in self.fixtures:
            raise ProviderError(f"No fixture registered for tag {request.tag!r}")
        content = self.fixtures[request.tag]
        if not isinstance(content, str):
            content = json.dumps(content, ensure_ascii=False)
        return GenerationResponse(
            content=content,
            provider_id=self.provider_id,
            model=self.model,
            tokens_used=len(content.split()),
        )


PROVIDERS = {
    AnthropicProvider.provider_id: AnthropicProvider,
    GeminiProvider.provider_id: GeminiProvider,
    FixtureProvider.provider_id: FixtureProvider,
}


def create_provider(name: str, api_key: str = "", model: Optional[str] = None):
    """Instantiate the provider registered under ``name``."""
    if name not in PROVIDERS:
        raise ValueError(f"Unsupported generation provider: {name!r} (choose from {sorted(PROVIDERS)})")
    if name == FixtureProvider.provider_id:
        return FixtureProvider(model=model)
    return PROVIDERS[name](api_key=api_key, model=model)
