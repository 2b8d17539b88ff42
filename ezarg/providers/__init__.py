"""
Provider adapters for the AI-completion APIs a query fans out to.

- Claude (Anthropic messages API)
- ChatGPT, Grok, Perplexity (OpenAI-style chat completions)

Usage:
    from ezarg.providers import build_adapters, query_provider

    adapters = build_adapters(timeout=60.0)
    outcome = await query_provider(ProviderId.GROK, request, adapter=adapters[ProviderId.GROK])
"""

from .base import ProviderAdapter
from .router import ADAPTERS, build_adapters, get_adapter, parse_provider_id, query_provider

__all__ = [
    "ADAPTERS",
    "ProviderAdapter",
    "build_adapters",
    "get_adapter",
    "parse_provider_id",
    "query_provider",
]
