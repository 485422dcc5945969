"""HTTP client with per-attempt timeouts and exponential backoff."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from citenet.utils.exceptions import ClientResponseError, NetworkError, ServerResponseError
from citenet.utils.logging import get_logger
from citenet.utils.retry import retry_async

logger = get_logger(__name__)


def _is_transient(exc: Exception) -> bool:
    return isinstance(exc, (ServerResponseError, httpx.TransportError, asyncio.TimeoutError))


class ResilientClient:
    """Thin wrapper over ``httpx.AsyncClient`` for one upstream service.

    Every attempt is cancelled after ``timeout`` seconds. Timeouts, transport
    failures and 5xx responses are retried up to ``max_retries`` more times,
    waiting ``retry_base_delay * 2**attempt`` in between. 4xx responses raise
    ClientResponseError straight away. Once retries run out a NetworkError
    carrying the endpoint and the last error message is raised.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_base_delay: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_retries = max_retries
        self._retry_base_delay = retry_base_delay
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            transport=transport,
            timeout=httpx.Timeout(self._timeout),
            headers={"Accept": "application/json", **(headers or {})},
            follow_redirects=True,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def get(self, path: str, **options: Any) -> Any:
        return await self.request("GET", path, **options)

    async def post(self, path: str, body: Any, **options: Any) -> Any:
        return await self.request("POST", path, body=body, **options)

    async def request(
        self,
        method: str,
        path: str,
        *,
        body: Any = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        retry_base_delay: float | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON (or text) body."""
        endpoint = path if path.startswith("http") else f"{self._base_url}{path}"
        attempt_timeout = self._timeout if timeout is None else timeout
        attempts = 0

        async def attempt() -> Any:
            nonlocal attempts
            attempts += 1
            try:
                response = await asyncio.wait_for(
                    self._client.request(method, path, json=body, timeout=attempt_timeout),
                    timeout=attempt_timeout,
                )
            except asyncio.TimeoutError:
                logger.warning("http_attempt", method=method, endpoint=endpoint, attempt=attempts, outcome="timeout")
                raise
            except httpx.TransportError as exc:
                logger.warning(
                    "http_attempt",
                    method=method,
                    endpoint=endpoint,
                    attempt=attempts,
                    outcome="transport_error",
                    error=str(exc) or type(exc).__name__,
                )
                raise

            logger.info(
                "http_attempt",
                method=method,
                endpoint=endpoint,
                attempt=attempts,
                outcome=response.status_code,
            )
            self._raise_for_status(response, endpoint)
            return self._decode(response)

        try:
            return await retry_async(
                attempt,
                max_retries=self._max_retries if max_retries is None else max_retries,
                base_delay=self._retry_base_delay if retry_base_delay is None else retry_base_delay,
                is_retryable=_is_transient,
                label="http_request",
                endpoint=endpoint,
            )
        except ClientResponseError:
            raise
        except (ServerResponseError, httpx.TransportError, asyncio.TimeoutError) as exc:
            message = str(exc) or f"timed out after {attempt_timeout}s"
            raise NetworkError(
                f"Request failed after {attempts} attempts: {message}",
                endpoint=endpoint,
                status=getattr(exc, "status", None),
            ) from exc

    async def close(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _raise_for_status(response: httpx.Response, endpoint: str) -> None:
        status = response.status_code
        if 400 <= status < 500:
            raise ClientResponseError(
                f"HTTP {status}: {response.reason_phrase}",
                endpoint=endpoint,
                status=status,
            )
        if status >= 500:
            raise ServerResponseError(
                f"HTTP {status}: {response.reason_phrase}",
                endpoint=endpoint,
                status=status,
            )

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if "json" in response.headers.get("content-type", ""):
            return response.json()
        return response.text
