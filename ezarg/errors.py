"""Per-provider failure taxonomy."""

from typing import Optional

from .models import Failure, ProviderId


class ProviderFailure(RuntimeError):
    """Base class for errors scoped to a single provider's call."""

    def __init__(self, provider: ProviderId, reason: str):
        self.provider = provider
        self.reason = reason
        super().__init__(f"{provider.display_name}: {reason}")

    def to_outcome(self) -> Failure:
        return Failure(self.provider, self.reason, kind=type(self).__name__)


class MissingCredential(ProviderFailure):
    def __init__(self, provider: ProviderId, reason: str = "API key is required"):
        super().__init__(provider, reason)


class NetworkFailure(ProviderFailure):
    """The call could not complete (connection error, timeout)."""


class ProviderError(ProviderFailure):
    """Non-2xx status with a provider-supplied message."""

    def __init__(self, provider: ProviderId, reason: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(provider, reason)


class MalformedResponse(ProviderFailure):
    """2xx status but the expected answer field is missing."""
