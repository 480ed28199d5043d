"""
Storefront API Transport

Shared HTTP plumbing for the cart and order accessors: bearer token,
bounded timeout, status-to-exception mapping and the read retry policy.
"""

import logging
from typing import Any, Callable, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..core.errors import ApiError, AuthRequiredError, TransientNetworkError

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]


class ApiClient:
    """
    Base client for the storefront API.

    Subclasses share one httpx.AsyncClient when constructed with the same
    ``http_client``; a client created here is owned and closed here.
    """

    def __init__(
        self,
        base_url: str,
        token_provider: Optional[TokenProvider] = None,
        timeout: float = 30.0,
        read_retry_attempts: int = 1,
        retry_backoff_seconds: float = 1.0,
        retry_backoff_max_seconds: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize API client.

        Args:
            base_url: Storefront API base URL
            token_provider: Returns the current access token, if any
            timeout: Bound on every request, in seconds
            read_retry_attempts: Extra attempts for idempotent reads
            retry_backoff_seconds: First backoff delay for read retries
            retry_backoff_max_seconds: Upper bound on the backoff delay
            http_client: Shared transport; created when omitted
        """
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider
        self.read_retry_attempts = read_retry_attempts
        self.retry_backoff_seconds = retry_backoff_seconds
        self.retry_backoff_max_seconds = retry_backoff_max_seconds

        self._owns_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        """Close HTTP client"""
        if self._owns_client:
            await self._http_client.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self.token_provider() if self.token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason_phrase

        if isinstance(body, dict):
            detail = body.get("detail") or body.get("message")
            if isinstance(detail, str):
                return detail
            if detail is not None:
                return str(detail)
        return response.reason_phrase

    async def _request(
        self,
        method: str,
        path: str,
        body: Optional[dict] = None,
        params: Optional[dict[str, str]] = None,
    ) -> Any:
        """Make a single HTTP request and decode the JSON response"""
        url = f"{self.base_url}{path}"

        try:
            response = await self._http_client.request(
                method=method,
                url=url,
                headers=self._headers(),
                json=body,
                params=params,
            )
        except httpx.TimeoutException as e:
            logger.error(f"Request timed out: {method} {path}")
            raise TransientNetworkError(f"Request timed out: {e}") from e
        except httpx.TransportError as e:
            logger.error(f"Request failed: {method} {path} - {e}")
            raise TransientNetworkError(f"Network error: {e}") from e

        if response.status_code >= 400:
            message = self._error_message(response)
            logger.error(f"Request failed: {response.status_code} - {message}")

            if response.status_code == 401:
                raise AuthRequiredError(message, response.status_code)
            if response.status_code >= 500:
                raise TransientNetworkError(message, response.status_code)
            raise ApiError(message, response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def _read(
        self,
        path: str,
        params: Optional[dict[str, str]] = None,
    ) -> Any:
        """GET with the read retry policy; 401 and 4xx are never retried"""
        retrying = AsyncRetrying(
            stop=stop_after_attempt(1 + self.read_retry_attempts),
            wait=wait_exponential(
                multiplier=self.retry_backoff_seconds,
                max=self.retry_backoff_max_seconds,
            ),
            retry=retry_if_exception_type(TransientNetworkError),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.info(f"Retrying GET {path} (attempt {attempt.retry_state.attempt_number})")
                return await self._request("GET", path, params=params)
