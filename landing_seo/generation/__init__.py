"""Text generation: provider-agnostic client, providers, offline fixtures."""

from landing_seo.generation.client import TextGenerationClient, parse_structured
from landing_seo.generation.providers import (
    AnthropicProvider,
    FixtureProvider,
    GeminiProvider,
    GenerationRequest,
    GenerationResponse,
    PROVIDERS,
    create_provider,
)

__all__ = [
    "TextGenerationClient",
    "parse_structured",
    "AnthropicProvider",
    "FixtureProvider",
    "GeminiProvider",
    "GenerationRequest",
    "GenerationResponse",
    "PROVIDERS",
    "create_provider",
]
