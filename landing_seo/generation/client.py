"""Provider-agnostic text generation with retry and structured parsing."""

from __future__ import annotations

import json
import logging
import re
from typing import Optional

from landing_seo.config import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE
from landing_seo.errors import GenerationFailed, MalformedResponse
from landing_seo.generation.providers import (
    GenerationRequest,
    GenerationResponse,
    create_provider,
)
from landing_seo.retry import RetryError, RetryPolicy

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)
_FENCED_ANY = re.compile(r"```[a-zA-Z]*\s*([\s\S]*?)\s*```")


def parse_structured(content: str):
    """Extract a JSON payload from model output.

    Accepts ```json fenced blocks, plain ``` fenced blocks, or bare JSON.
    Raises MalformedResponse when nothing parseable remains.
    """
    if content is None or not content.strip():
        raise MalformedResponse(content or "", "empty response")

    match = _FENCED_JSON.search(content) or _FENCED_ANY.search(content)
    candidate = match.group(1) if match else content
    try:
        return json.loads(candidate.strip())
    except json.JSONDecodeError as e:
        raise MalformedResponse(content, str(e)) from e


class TextGenerationClient:
    """Single entry point for all model calls in the pipeline."""

    def __init__(
        self,
        provider,
        retry_policy: Optional[RetryPolicy] = None,
        default_temperature: float = DEFAULT_TEMPERATURE,
        default_max_tokens: int = DEFAULT_MAX_TOKENS,
    ):
        self.provider = provider
        self.retry_policy = retry_policy or RetryPolicy()
        self.default_temperature = default_temperature
        self.default_max_tokens = default_max_tokens

    @classmethod
    def from_config(
        cls,
        provider: str,
        api_key: str = "",
        model: Optional[str] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ) -> "TextGenerationClient":
        return cls(create_provider(provider, api_key=api_key, model=model), retry_policy=retry_policy)

    @property
    def provider_id(self) -> str:
        return self.provider.provider_id

    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        response_format: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> GenerationResponse:
        """Run one prompt through the provider, retrying transient failures.

        Raises:
            ValueError: empty prompt, temperature outside [0, 2], max_tokens <= 0.
            GenerationFailed: the provider kept failing; carries the last
                upstream error and the number of attempts made.
        """
        if not prompt or not prompt.strip():
            raise ValueError("prompt must be a non-empty string")
        temperature = self.default_temperature if temperature is None else temperature
        max_tokens = self.default_max_tokens if max_tokens is None else max_tokens
        if not 0 <= temperature <= 2:
            raise ValueError(f"temperature must be in [0, 2], got {temperature}")
        if max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive, got {max_tokens}")

        request = GenerationRequest(
            prompt=prompt,
            system_prompt=system_prompt,
            temperature=temperature,
            max_tokens=max_tokens,
            response_format=response_format,
            tag=tag,
        )
        try:
            response = self.retry_policy.call(
                self.provider.complete,
                request,
                description=f"{self.provider_id} generate ({tag or 'untagged'})",
            )
        except RetryError as e:
            raise GenerationFailed(e.last_error, e.attempts) from e.last_error

        logger.debug(
            "%s answered %s: %d chars, %s tokens",
            self.provider_id, tag or "prompt", len(response.content), response.tokens_used,
        )
        return response

    def generate_structured(self, prompt: str, **kwargs):
        """``generate`` with a JSON answer, parsed."""
        kwargs.setdefault("response_format", "json")
        response = self.generate(prompt, **kwargs)
        return parse_structured(response.content)

    def test_connection(self) -> bool:
        try:
            response = self.generate(
                "Test connection. Respond with: OK", max_tokens=10, tag="connection_test"
            )
        except Exception as e:
            logger.warning("Connection test against %s failed: %s", self.provider_id, e)
            return False
        return len(response.content) > 0

    parse_structured = staticmethod(parse_structured)
