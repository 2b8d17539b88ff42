"""
Provider table and single-provider queries.

Each ProviderId is bound to exactly one adapter class:
- claude -> Claude messages API
- chatgpt -> OpenAI chat completions
- grok -> xAI chat completions
- perplexity -> Perplexity chat completions
"""

from typing import Dict, Mapping, Optional, Type

from ..credentials import resolve
from ..errors import MissingCredential
from ..models import ProviderId, ProviderOutcome, QueryRequest
from .anthropic_provider import ClaudeAdapter
from .base import ProviderAdapter
from .openai_provider import ChatGPTAdapter, GrokAdapter, PerplexityAdapter

ADAPTERS: Dict[ProviderId, Type[ProviderAdapter]] = {
    ProviderId.CLAUDE: ClaudeAdapter,
    ProviderId.CHATGPT: ChatGPTAdapter,
    ProviderId.GROK: GrokAdapter,
    ProviderId.PERPLEXITY: PerplexityAdapter,
}


def parse_provider_id(value: str) -> ProviderId:
    """
    Parse a provider identifier.

    Raises:
        ValueError: If the identifier is not a known provider
    """
    try:
        return ProviderId(value.strip().lower())
    except ValueError:
        known = [p.value for p in ProviderId]
        raise ValueError(f"Unknown provider '{value}'. Available: {known}") from None


def get_adapter(provider: ProviderId, **kwargs) -> ProviderAdapter:
    """Instantiate the adapter bound to a provider."""
    return ADAPTERS[provider](**kwargs)


def build_adapters(**kwargs) -> Dict[ProviderId, ProviderAdapter]:
    """
    Instantiate one adapter per provider.

    Keyword arguments (timeout, transport) are passed to every adapter.
    """
    return {provider: get_adapter(provider, **kwargs) for provider in ADAPTERS}


async def query_provider(
    provider: ProviderId,
    request: QueryRequest,
    supplied_credential: Optional[str] = None,
    adapter: Optional[ProviderAdapter] = None,
    defaults: Optional[Mapping[ProviderId, Optional[str]]] = None
) -> ProviderOutcome:
    """
    Query a single provider.

    Args:
        provider: Provider to query
        request: The user's query
        supplied_credential: Caller-supplied key, preferred over the default
        adapter: Adapter to use; a fresh default one if omitted
        defaults: Process-wide default keys; read from the environment if omitted

    Returns:
        Success or Failure; a missing key fails without any network call
    """
    try:
        credential = resolve(provider, supplied_credential, defaults)
    except MissingCredential as e:
        return e.to_outcome()

    if adapter is None:
        adapter = get_adapter(provider)
    return await adapter.query(request, credential)
