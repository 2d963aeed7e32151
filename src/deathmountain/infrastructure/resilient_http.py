"""Retrying, circuit-broken access to the indexer's SQL endpoint.

The endpoint answers ``GET /sql?query=...`` with a JSON array of flat rows, or
with ``{"error": "..."}`` when it rejects the statement. ``fetch_rows`` folds
both into one contract: a list of dict rows, or an ``UpstreamQueryError``.
Transport failures and 408/425/429/5xx answers are retried and counted by the
endpoint's ``CircuitBreaker``; a rejected statement is neither.
"""

import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import httpx

from deathmountain.domain.errors import UpstreamQueryError


SQL_ENDPOINT = "/sql"
RETRYABLE_STATUS_CODES = frozenset({408, 425, 429, 500, 502, 503, 504})

_TRANSPORT_ERRORS = (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError)

_logger = logging.getLogger(__name__)


class CircuitOpenError(RuntimeError):
    pass


@dataclass(frozen=True)
class RetryPolicy:
    retries: int = 2
    backoff_seconds: float = 0.2

    def delay_before(self, attempt: int) -> float:
        """Sleep before retry number ``attempt`` (1-based), doubling each time."""

        return max(0.0, float(self.backoff_seconds)) * (2 ** (attempt - 1))

    @property
    def attempts(self) -> int:
        return max(0, int(self.retries)) + 1


class CircuitBreaker:
    """Consecutive-failure breaker for one SQL endpoint.

    Closed until ``failure_threshold`` failures in a row, then open for
    ``reset_seconds``. After the cool-down one request is let through; a
    success closes the breaker, a failure opens it again straight away.
    """

    def __init__(
        self,
        *,
        enabled: bool = True,
        failure_threshold: int = 3,
        reset_seconds: float = 60.0,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.enabled = enabled
        self.failure_threshold = max(1, int(failure_threshold))
        self.reset_seconds = max(0.0, float(reset_seconds))
        self._clock = clock or time.monotonic
        self.failures = 0
        self._open_until: Optional[float] = None

    @classmethod
    def from_env(cls, clock: Callable[[], float] | None = None) -> "CircuitBreaker":
        return cls(
            enabled=os.getenv("DM_HTTP_CIRCUIT_BREAKER_ENABLED", "1").strip().lower() in {"1", "true", "yes"},
            failure_threshold=int(os.getenv("DM_HTTP_CIRCUIT_FAILURE_THRESHOLD", "3")),
            reset_seconds=float(os.getenv("DM_HTTP_CIRCUIT_RESET_SECONDS", "60")),
            clock=clock,
        )

    @property
    def state(self) -> str:
        if self._open_until is None:
            return "closed"
        return "open" if self._clock() < self._open_until else "half_open"

    def before_request(self, endpoint: str) -> None:
        if self.enabled and self.state == "open":
            remaining = self._open_until - self._clock()
            raise CircuitOpenError(f"Indexer circuit open for {endpoint}, retry in {remaining:.0f}s")

    def record_success(self) -> None:
        self.failures = 0
        self._open_until = None

    def record_failure(self, endpoint: str) -> None:
        if not self.enabled:
            return
        self.failures += 1
        if self.failures >= self.failure_threshold and self.state != "open":
            self._open_until = self._clock() + self.reset_seconds
            _logger.warning(
                "Indexer circuit opened",
                extra={"endpoint": endpoint, "failures": self.failures, "reset_seconds": self.reset_seconds},
            )


def _error_from_body(response: httpx.Response) -> Optional[str]:
    try:
        payload = response.json()
    except ValueError:
        return None
    if isinstance(payload, dict) and "error" in payload:
        return str(payload["error"])
    return None


def rows_from_response(response: httpx.Response) -> List[Dict[str, Any]]:
    """Decode a non-retryable answer into rows, or raise what went wrong."""

    message = _error_from_body(response)
    if message is not None:
        raise UpstreamQueryError(f"Torii query failed: {message}")
    response.raise_for_status()
    try:
        payload = response.json()
    except ValueError as exc:
        raise UpstreamQueryError(f"Torii returned a non-JSON body (HTTP {response.status_code})") from exc
    if not isinstance(payload, list):
        raise UpstreamQueryError(f"Torii returned {type(payload).__name__}, expected a list of rows")
    return [row for row in payload if isinstance(row, dict)]


def fetch_rows(
    client: httpx.Client,
    sql: str,
    *,
    breaker: CircuitBreaker | None = None,
    policy: RetryPolicy = RetryPolicy(),
    endpoint: str = SQL_ENDPOINT,
) -> List[Dict[str, Any]]:
    for attempt in range(policy.attempts):
        if attempt:
            delay = policy.delay_before(attempt)
            _logger.info(
                "Retrying indexer query",
                extra={"endpoint": endpoint, "attempt": attempt, "delay_s": delay, "error": str(failure)},
            )
            if delay > 0:
                time.sleep(delay)

        if breaker is not None:
            breaker.before_request(endpoint)
        try:
            response = client.get(endpoint, params={"query": sql}, headers={"Accept": "application/json"})
        except _TRANSPORT_ERRORS as exc:
            failure: Exception = exc
        else:
            if response.status_code not in RETRYABLE_STATUS_CODES:
                if breaker is not None:
                    breaker.record_success()
                return rows_from_response(response)
            failure = httpx.HTTPStatusError(
                f"Retryable HTTP status: {response.status_code}",
                request=response.request,
                response=response,
            )
        if breaker is not None:
            breaker.record_failure(endpoint)
    raise failure
