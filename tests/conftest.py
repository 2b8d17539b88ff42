"""Pytest configuration and fixtures."""

import asyncio
import json
import sys
from pathlib import Path

import httpx
import pytest

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from ezarg.config import API_KEY_ENV_VARS  # noqa: E402
from ezarg.models import ProviderId  # noqa: E402
from ezarg.providers import build_adapters  # noqa: E402


KEYS = {provider: f"test-{provider.value}-key" for provider in ProviderId}


class FakeProviderAPI:
    """Routes requests for all four provider hosts to per-provider handlers."""

    HOSTS = {
        "api.anthropic.com": ProviderId.CLAUDE,
        "api.openai.com": ProviderId.CHATGPT,
        "api.x.ai": ProviderId.GROK,
        "api.perplexity.ai": ProviderId.PERPLEXITY,
    }

    def __init__(self):
        self.routes = {}
        self.requests = []

    @staticmethod
    def success_body(provider, text):
        if provider == ProviderId.CLAUDE:
            return {"content": [{"type": "text", "text": text}]}
        return {"choices": [{"message": {"role": "assistant", "content": text}}]}

    def answer(self, provider, text):
        self.respond(provider, 200, self.success_body(provider, text))

    def respond(self, provider, status, body):
        async def route(request):
            if isinstance(body, (bytes, str)):
                return httpx.Response(status, content=body)
            return httpx.Response(status, json=body)
        self.routes[provider] = route

    def fail_connection(self, provider):
        async def route(request):
            raise httpx.ConnectError("connection refused", request=request)
        self.routes[provider] = route

    def time_out(self, provider):
        async def route(request):
            raise httpx.ReadTimeout("timed out", request=request)
        self.routes[provider] = route

    def hang(self, provider):
        async def route(request):
            await asyncio.Event().wait()
        self.routes[provider] = route

    def gate(self, provider, text):
        """Answer only once the returned event is set."""
        release = asyncio.Event()

        async def route(request):
            await release.wait()
            return httpx.Response(200, json=self.success_body(provider, text))
        self.routes[provider] = route
        return release

    async def handle(self, request):
        provider = self.HOSTS[request.url.host]
        self.requests.append((provider, request))
        route = self.routes.get(provider)
        if route is None:
            return httpx.Response(404, json={"error": {"message": "no route configured"}})
        return await route(request)

    def calls(self, provider):
        return [request for p, request in self.requests if p == provider]

    def payload(self, provider, index=0):
        return json.loads(self.calls(provider)[index].content)

    def adapters(self, **kwargs):
        return build_adapters(transport=httpx.MockTransport(self.handle), **kwargs)


@pytest.fixture
def fake_api():
    return FakeProviderAPI()


@pytest.fixture(autouse=True)
def clear_provider_keys(monkeypatch):
    """Keep real keys from the environment or a .env file out of the tests."""
    for var in API_KEY_ENV_VARS.values():
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def keys():
    return dict(KEYS)
