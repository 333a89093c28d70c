"""Shared plumbing for the read-only indexer clients"""

from typing import Any, Optional

import httpx
import structlog

from tezos_previews.core.config import Settings, settings as default_settings
from tezos_previews.core.results import ErrorKind, Result
from tezos_previews.services.external_apis.rate_limit import RateLimiter

logger = structlog.get_logger()

RATE_LIMITED_MESSAGE = "Rate limit exceeded. Please try again later."


class UpstreamError(Exception):
    """Raised inside a client when a call fails; converted to a Result at the boundary"""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


class IndexerClient:
    """Lazily-created httpx client with a fixed timeout and identifying headers"""

    SERVICE = "indexer"

    def __init__(
        self,
        rate_limiter: Optional[RateLimiter] = None,
        config: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        base_url: Optional[str] = None,
    ):
        self.config = config or default_settings
        self.base_url = base_url or self._default_base_url()
        self.rate_limiter = rate_limiter or RateLimiter(self.config.api_rate_limit)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _default_base_url(self) -> str:
        raise NotImplementedError

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.config.api_timeout_seconds,
                headers={
                    "Accept": "application/json",
                    "User-Agent": self.config.user_agent,
                },
                transport=self._transport,
            )
        return self._client

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None

    def _rate_limited(self, endpoint: str) -> Optional[Result]:
        """Failure result if the endpoint key is inside its window, else None"""
        if self.rate_limiter.check(endpoint):
            return None
        return Result.failure(ErrorKind.RATE_LIMITED, RATE_LIMITED_MESSAGE)

    async def _request_json(self, method: str, path: str, **kwargs: Any) -> Any:
        """Issue a request and decode the JSON body, raising UpstreamError on any failure"""
        client = await self._get_client()

        try:
            response = await client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise UpstreamError(
                ErrorKind.TRANSPORT_ERROR,
                f"{self.SERVICE} API error: request timed out ({e.__class__.__name__})",
            )
        except httpx.HTTPError as e:
            raise UpstreamError(ErrorKind.TRANSPORT_ERROR, f"{self.SERVICE} API error: {e}")

        if not response.is_success:
            raise UpstreamError(
                ErrorKind.HTTP_ERROR,
                f"{self.SERVICE} API error: HTTP {response.status_code}: {response.reason_phrase}",
            )

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(ErrorKind.TRANSPORT_ERROR, f"{self.SERVICE} API error: invalid JSON ({e})")

    @staticmethod
    def _failure(error: UpstreamError, **context: Any) -> Result:
        logger.error("indexer_request_failed", kind=error.kind.value, error=error.message, **context)
        return Result.failure(error.kind, error.message)
