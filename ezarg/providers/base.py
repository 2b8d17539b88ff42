"""Shared request lifecycle for provider adapters."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from ..config import REQUEST_TIMEOUT
from ..content import ResponseContent
from ..errors import MalformedResponse, NetworkFailure, ProviderError, ProviderFailure
from ..models import ProviderId, ProviderOutcome, QueryRequest, Success

logger = logging.getLogger(__name__)


class ProviderAdapter(ABC):
    """
    Translates between the generic query/answer model and one provider's API.

    Subclasses fill in `provider_id`, `endpoint` and the payload, header and
    response-shape hooks. `query` runs the whole request and never raises a
    provider failure: every error becomes that provider's Failure outcome.
    """

    provider_id: ProviderId
    endpoint: str
    default_model: str

    def __init__(
        self,
        model: Optional[str] = None,
        endpoint: Optional[str] = None,
        timeout: float = REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.model = model or self.default_model
        if endpoint:
            self.endpoint = endpoint
        self.timeout = timeout
        self.transport = transport

    @property
    def name(self) -> str:
        return self.provider_id.display_name

    @abstractmethod
    def build_payload(self, request: QueryRequest) -> Dict[str, Any]:
        """Build the provider-specific request body."""

    @abstractmethod
    def build_headers(self, credential: str) -> Dict[str, str]:
        """Build request headers carrying the credential."""

    @abstractmethod
    def extract_content(self, data: Dict[str, Any]) -> ResponseContent:
        """
        Pull the answer out of a successful response body.

        Raises:
            MalformedResponse: If the expected field is absent
        """

    def extract_error(self, data: Any, status_code: int) -> str:
        """
        Pull a readable error message out of a failed response body.

        Prefers `error.message`, then a bare string `error`, then a generic
        message with the status code.
        """
        if isinstance(data, dict):
            error = data.get('error')
            if isinstance(error, dict) and error.get('message'):
                return str(error['message'])
            if isinstance(error, str) and error:
                return error
        return f"{self.name} API request failed (HTTP {status_code})"

    def malformed(self, reason: str) -> MalformedResponse:
        return MalformedResponse(self.provider_id, reason)

    async def call(self, payload: Dict[str, Any], headers: Dict[str, str]) -> httpx.Response:
        """
        POST the payload to the provider.

        Raises:
            NetworkFailure: If the request could not complete or timed out
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                return await client.post(
                    self.endpoint,
                    headers=headers,
                    json=payload
                )
        except httpx.TimeoutException:
            raise NetworkFailure(
                self.provider_id, f"request timed out after {self.timeout:g}s"
            ) from None
        except httpx.HTTPError as e:
            raise NetworkFailure(self.provider_id, str(e) or type(e).__name__) from e

    async def complete(self, request: QueryRequest, credential: str) -> ResponseContent:
        """
        Run one request and return the normalized answer.

        Raises:
            ProviderFailure: Any of the per-provider failure kinds
        """
        response = await self.call(self.build_payload(request), self.build_headers(credential))

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            raise ProviderError(
                self.provider_id,
                self.extract_error(_json_or_none(e.response), status_code),
                status_code=status_code
            ) from None

        data = _json_or_none(response)
        if not isinstance(data, dict):
            raise self.malformed("response body is not a JSON object")
        return self.extract_content(data)

    async def query(self, request: QueryRequest, credential: str) -> ProviderOutcome:
        """
        Query the provider, folding every provider failure into an outcome.

        Args:
            request: The user's query
            credential: Resolved key for this provider

        Returns:
            Success with the normalized answer, or Failure with the reason
        """
        try:
            content = await self.complete(request, credential)
        except ProviderFailure as e:
            logger.warning("%s query failed (%s): %s", self.name, type(e).__name__, e.reason)
            return e.to_outcome()
        return Success(content)


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None
