"""JSON-RPC over HTTP with a circuit breaker and retries.

This module provides:
- CircuitState / CircuitBreaker guarding one RPC endpoint
- BaseRPCClient, the httpx transport shared by chain clients
"""

import itertools
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from cascadewatch.core.exceptions import (
    ChainConnectionError,
    CircuitBreakerOpenError,
    ExternalServiceError,
)

log = structlog.get_logger(__name__)


class CircuitState(Enum):
    """Circuit breaker states."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"  # one probe request allowed


@dataclass
class CircuitBreaker:
    """Opens after ``failure_threshold`` consecutive endpoint failures.

    Once ``cooldown_seconds`` have passed since the last failure a single
    probe is let through; its outcome closes or reopens the circuit.
    """

    failure_threshold: int = 5
    cooldown_seconds: float = 30.0
    clock: Callable[[], float] = time.monotonic
    failure_count: int = field(default=0, init=False)
    last_failure_at: float | None = field(default=None, init=False)
    state: CircuitState = field(default=CircuitState.CLOSED, init=False)

    def record_success(self) -> None:
        if self.state != CircuitState.CLOSED:
            log.info("circuit_breaker_closed", after_failures=self.failure_count)
        self.failure_count = 0
        self.state = CircuitState.CLOSED

    def record_failure(self) -> None:
        self.failure_count += 1
        self.last_failure_at = self.clock()

        tripped = (
            self.state == CircuitState.HALF_OPEN
            or self.failure_count >= self.failure_threshold
        )
        if tripped and self.state != CircuitState.OPEN:
            self.state = CircuitState.OPEN
            log.warning("circuit_breaker_opened", failure_count=self.failure_count)

    def seconds_until_probe(self) -> float:
        """Remaining cooldown, 0 when a probe may be sent."""
        if self.state != CircuitState.OPEN or self.last_failure_at is None:
            return 0.0
        return max(0.0, self.cooldown_seconds - (self.clock() - self.last_failure_at))

    def allow_request(self) -> bool:
        """Whether a request may go out now (moves OPEN to HALF_OPEN after cooldown)."""
        if self.state != CircuitState.OPEN:
            return True
        if self.seconds_until_probe() > 0:
            return False
        self.state = CircuitState.HALF_OPEN
        log.info("circuit_breaker_half_open")
        return True

    def check(self) -> None:
        """Raise CircuitBreakerOpenError if no request may go out."""
        if not self.allow_request():
            raise CircuitBreakerOpenError(
                f"Circuit breaker is open, probe in {self.seconds_until_probe():.1f}s"
            )


def _is_retryable(error: BaseException) -> bool:
    """Transport failures, 429 and 5xx are retried; other 4xx are not."""
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        return status == 429 or status >= 500
    return isinstance(error, httpx.TransportError)


class BaseRPCClient:
    """JSON-RPC 2.0 client over one HTTP endpoint.

    The httpx client is created on first use. Retryable failures are retried
    with exponential backoff and counted by the circuit breaker; JSON-RPC
    error objects are never retried.

    Example:
        client = BaseRPCClient("https://rpc.example.org")
        block = await client.call("eth_blockNumber", [])
        await client.close()
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        max_retries: int = 3,
        circuit_breaker_threshold: int = 5,
        circuit_breaker_cooldown: float = 30.0,
        retry_wait: wait_base | None = None,
    ) -> None:
        """Initialize BaseRPCClient.

        Args:
            base_url: HTTP JSON-RPC endpoint
            timeout: Per-request timeout in seconds
            max_retries: Attempts per call (1 = no retry)
            circuit_breaker_threshold: Consecutive failures that open the circuit
            circuit_breaker_cooldown: Seconds before a probe request
            retry_wait: tenacity wait strategy (exponential 1s..4s by default)
        """
        self.base_url = base_url
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_wait = retry_wait or wait_exponential(multiplier=1, min=1, max=4)
        self._client: httpx.AsyncClient | None = None
        self._request_ids = itertools.count(1)
        self._circuit_breaker = CircuitBreaker(
            failure_threshold=circuit_breaker_threshold,
            cooldown_seconds=circuit_breaker_cooldown,
        )

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"Content-Type": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying httpx client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _send_once(self, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self._http().post("", json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            if _is_retryable(e):
                self._circuit_breaker.record_failure()
            log.warning("rpc_request_failed", rpc_method=payload["method"], error=str(e))
            raise
        self._circuit_breaker.record_success()
        return response.json()

    async def _send(self, payload: dict[str, Any]) -> dict[str, Any]:
        """POST one envelope, retrying transport errors, 429 and 5xx.

        Raises:
            CircuitBreakerOpenError: If the circuit is open.
            ExternalServiceError: If the request fails for good.
        """
        self._circuit_breaker.check()

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=self.retry_wait,
            retry=retry_if_exception(_is_retryable),
            reraise=True,
        )
        try:
            return await retrying(self._send_once, payload)
        except httpx.HTTPStatusError as e:
            raise ExternalServiceError(
                self.base_url, str(e), status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(self.base_url, str(e)) from e

    async def call(self, method: str, params: list[Any]) -> Any:
        """Invoke ``method`` and return its ``result`` (may be None).

        Raises:
            ChainConnectionError: On transport failure, an open circuit or a
                JSON-RPC error object.
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._request_ids),
            "method": method,
            "params": params,
        }

        try:
            data = await self._send(payload)
        except (ExternalServiceError, CircuitBreakerOpenError, ValueError) as e:
            raise ChainConnectionError(f"{method} failed: {e}", method=method) from e

        error = data.get("error")
        if error is not None:
            message = error.get("message", error) if isinstance(error, dict) else error
            raise ChainConnectionError(f"{method} returned error: {message}", method=method)
        return data.get("result")
