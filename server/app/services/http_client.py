"""
Retrying JSON POST client.

Each attempt is performed by ``post_once`` which never raises: it returns a
``CallResult`` that is either a decoded JSON body or a categorized failure.
``post_with_retry`` loops over attempts with exponential backoff
(1s, 2s, 4s, ... by default) and raises ``RetryExhaustedError`` only once
every attempt has failed.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import httpx

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}

SleepFunc = Callable[[float], Awaitable[None]]


class RetryExhaustedError(Exception):
    """Every attempt of a retried call failed."""

    def __init__(self, attempts: int, last_error: str):
        super().__init__(f"API request failed after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


@dataclass(frozen=True)
class CallResult:
    """Outcome of a single POST attempt."""

    body: Any = None
    failure: Optional[str] = None  # "http_status", "transport" or "decode"
    error: Optional[str] = None
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


async def post_once(
    client: httpx.AsyncClient,
    url: str,
    payload: dict,
    timeout: float = 60.0,
    headers: Optional[dict] = None,
) -> CallResult:
    """Send one JSON POST and classify the outcome."""
    try:
        response = await client.post(
            url, json=payload, headers={**JSON_HEADERS, **(headers or {})}, timeout=timeout
        )
    except httpx.HTTPError as e:
        return CallResult(failure="transport", error=str(e) or type(e).__name__)

    if not response.is_success:
        return CallResult(
            failure="http_status",
            error=f"HTTP error! status: {response.status_code}",
            status_code=response.status_code,
        )

    try:
        body = response.json()
    except ValueError as e:
        return CallResult(
            failure="decode",
            error=f"Invalid JSON in response: {e}",
            status_code=response.status_code,
        )
    return CallResult(body=body, status_code=response.status_code)


def backoff_delay(attempt_index: int, base_delay: float = 1.0) -> float:
    """Seconds to wait after the failed attempt ``attempt_index`` (0-based)."""
    return (2**attempt_index) * base_delay


async def post_with_retry(
    url: str,
    payload: dict,
    max_attempts: int = 3,
    *,
    base_delay: float = 1.0,
    timeout: float = 60.0,
    headers: Optional[dict] = None,
    client: Optional[httpx.AsyncClient] = None,
    sleep: SleepFunc = asyncio.sleep,
) -> Any:
    """
    POST ``payload`` as JSON to ``url``, retrying on any failure.

    Args:
        url: Endpoint to call
        payload: JSON-serializable request body
        max_attempts: Total number of attempts (not retries)
        base_delay: Delay unit in seconds for the exponential backoff
        timeout: Transport timeout for each attempt
        headers: Extra request headers (e.g. credentials)
        client: Optional shared client (a new one is created otherwise)
        sleep: Awaitable used to wait between attempts

    Returns:
        The decoded JSON body of the first successful attempt

    Raises:
        RetryExhaustedError: if all attempts failed
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    if client is None:
        async with httpx.AsyncClient() as owned_client:
            return await _attempt_loop(
                owned_client, url, payload, max_attempts, base_delay, timeout, headers, sleep
            )
    return await _attempt_loop(
        client, url, payload, max_attempts, base_delay, timeout, headers, sleep
    )


async def _attempt_loop(
    client: httpx.AsyncClient,
    url: str,
    payload: dict,
    max_attempts: int,
    base_delay: float,
    timeout: float,
    headers: Optional[dict],
    sleep: SleepFunc,
) -> Any:
    last: Optional[CallResult] = None
    for attempt in range(max_attempts):
        last = await post_once(client, url, payload, timeout=timeout, headers=headers)
        if last.ok:
            return last.body

        logger.warning(
            "POST attempt %d/%d failed (%s): %s",
            attempt + 1,
            max_attempts,
            last.failure,
            last.error,
        )
        if attempt < max_attempts - 1:
            await sleep(backoff_delay(attempt, base_delay))

    raise RetryExhaustedError(max_attempts, last.error)
