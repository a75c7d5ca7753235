"""Rate-limited, retry-aware HTTP dispatcher for SEC endpoints.

Every outbound request goes through a single `Dispatcher` instance created
once per run. Each attempt, retries included, first takes a token from a
`TokenBucket`. HTTP 429 responses are retried after a back-off computed by
the pure `retry_delay` function; every other status is handed back to the
caller untouched.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Callable, Mapping

import requests

from edgar_txt.errors import DispatchError, ThrottleExhausted

log = logging.getLogger(__name__)

TOO_MANY_REQUESTS = 429

DEFAULT_RATE = 8.0
DEFAULT_BURST = 8
DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_BASE_DELAY = 5.0
DEFAULT_TIMEOUT = 45.0


class TokenBucket:
    """Blocking token bucket admission gate.

    The bucket starts full. Tokens refill continuously at `rate` per second
    up to `burst`. `acquire` sleeps until a whole token is available.
    """

    def __init__(
        self,
        rate: float,
        burst: int,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if rate <= 0:
            raise ValueError("rate must be positive")
        if burst < 1:
            raise ValueError("burst must be at least 1")
        self.rate = float(rate)
        self.burst = int(burst)
        self._clock = clock
        self._sleep = sleep
        self._tokens = float(burst)
        self._last = clock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._last)
        self._tokens = min(float(self.burst), self._tokens + elapsed * self.rate)
        self._last = now

    @property
    def tokens(self) -> float:
        self._refill()
        return self._tokens

    def acquire(self) -> None:
        while True:
            self._refill()
            if self._tokens >= 1.0:
                self._tokens -= 1.0
                return
            self._sleep((1.0 - self._tokens) / self.rate)


def retry_delay(
    status: int,
    headers: Mapping[str, str],
    attempt: int,
    base_delay: float = DEFAULT_BASE_DELAY,
    now: datetime | None = None,
) -> float | None:
    """Return the back-off in seconds for a response, or None if it is not throttled.

    Args:
        status: HTTP status code of the response.
        headers: Response headers; only `Retry-After` is consulted.
        attempt: 1-based number of the attempt that was throttled.
        base_delay: Step of the linear fallback back-off.
        now: Reference time for HTTP-date hints (defaults to current UTC time).

    Returns:
        None for any status other than 429. Otherwise the `Retry-After`
        seconds when it is a positive integer, the remaining time when it is
        a future HTTP-date, or `base_delay * attempt`.
    """
    if status != TOO_MANY_REQUESTS:
        return None

    hint = (headers.get("Retry-After") or "").strip()
    if hint:
        if hint.isdigit():
            seconds = int(hint)
            if seconds > 0:
                return float(seconds)
        else:
            try:
                when = parsedate_to_datetime(hint)
            except (TypeError, ValueError):
                when = None
            if when is not None:
                if when.tzinfo is None:
                    when = when.replace(tzinfo=timezone.utc)
                reference = now or datetime.now(timezone.utc)
                remaining = (when - reference).total_seconds()
                if remaining > 0:
                    return remaining

    return base_delay * attempt


class Dispatcher:
    """Owns the HTTP session, the rate limiter and the 429 retry policy.

    Use one instance per run and pass it to every component that talks to
    the network. Closing the dispatcher closes the underlying session.
    """

    def __init__(
        self,
        user_agent: str,
        session: requests.Session | None = None,
        rate: float = DEFAULT_RATE,
        burst: int = DEFAULT_BURST,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay: float = DEFAULT_BASE_DELAY,
        timeout: float = DEFAULT_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.user_agent = user_agent
        self.session = session if session is not None else requests.Session()
        self.session.headers.update(
            {"User-Agent": user_agent, "Accept-Encoding": "gzip, deflate"}
        )
        self.bucket = TokenBucket(rate, burst, clock=clock, sleep=sleep)
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.timeout = timeout
        self._sleep = sleep

    def send(self, url: str) -> requests.Response:
        """GET `url` through the rate limiter, retrying on HTTP 429.

        Returns:
            The first non-429 response, whatever its status.

        Raises:
            DispatchError: on connection errors and timeouts (not retried).
            ThrottleExhausted: when all `max_attempts` attempts were throttled.
        """
        for attempt in range(1, self.max_attempts + 1):
            self.bucket.acquire()
            log.debug("GET %s (attempt %d/%d)", url, attempt, self.max_attempts)
            try:
                resp = self.session.get(url, timeout=self.timeout)
            except requests.RequestException as e:
                raise DispatchError(f"request failed for {url}: {e}") from e

            delay = retry_delay(resp.status_code, resp.headers, attempt, self.base_delay)
            if delay is None:
                return resp

            resp.close()
            if attempt == self.max_attempts:
                break
            log.warning(
                "Throttled by SEC (429) on %s; sleeping %.1fs before attempt %d/%d",
                url,
                delay,
                attempt + 1,
                self.max_attempts,
            )
            self._sleep(delay)

        raise ThrottleExhausted(url, self.max_attempts)

    def get_json(self, url: str) -> tuple[int, object]:
        """Send a request and decode a 200 body as JSON.

        Returns:
            `(status, payload)`; payload is None for non-200 responses.

        Raises:
            ValueError: if a 200 body is not valid JSON.
        """
        resp = self.send(url)
        if resp.status_code != 200:
            return resp.status_code, None
        return resp.status_code, resp.json()

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "Dispatcher":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
