# Copyright 2026 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""HTTP utilities for changelogkit.

Provides a managed :class:`httpx.AsyncClient` and a retrying request
helper shared by the GitHub and Slack backends:

- Connection pooling (configurable pool size).
- Automatic retry with exponential backoff for transient errors.
- ``Retry-After`` is honoured on 429 responses (both GitHub secondary
  rate limits and Slack's ``chat.postMessage`` tier limits send it).

Retries live here, in the transport, and nowhere else: the changelog
pipeline itself never retries a failed step.

Usage::

    from changelogkit.net import http_client, request_with_retry

    async with http_client(headers={'Authorization': 'Bearer ...'}) as client:
        response = await request_with_retry(client, 'GET', url)
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Final

import httpx

from changelogkit.logging import get_logger

log = get_logger('changelogkit.net')

DEFAULT_POOL_SIZE: Final[int] = 10
DEFAULT_TIMEOUT: Final[float] = 30.0

MAX_RETRIES: Final[int] = 3
RETRY_BACKOFF_BASE: Final[float] = 1.0

# Upper bound on a server-requested Retry-After delay, in seconds.
MAX_RETRY_AFTER: Final[float] = 60.0

RETRYABLE_STATUS_CODES: Final[frozenset[int]] = frozenset({429, 500, 502, 503, 504})

# A non-idempotent request (posting a chat message) is only retried when
# the server cannot have acted on it: the connection never opened, or the
# request was rate limited.
NON_IDEMPOTENT_RETRYABLE_STATUS_CODES: Final[frozenset[int]] = frozenset({429})

_RETRYABLE_ERRORS: Final = (httpx.ConnectError, httpx.ReadTimeout, httpx.WriteTimeout)
_NON_IDEMPOTENT_RETRYABLE_ERRORS: Final = (httpx.ConnectError,)


@asynccontextmanager
async def http_client(
    *,
    pool_size: int = DEFAULT_POOL_SIZE,
    timeout: float = DEFAULT_TIMEOUT,
    base_url: str = '',
    headers: dict[str, str] | None = None,
) -> AsyncGenerator[httpx.AsyncClient]:
    """Create a managed async HTTP client with connection pooling.

    Args:
        pool_size: Maximum number of connections in the pool.
        timeout: Request timeout in seconds.
        base_url: Optional base URL for all requests.
        headers: Optional default headers.

    Yields:
        An :class:`httpx.AsyncClient` instance.
    """
    limits = httpx.Limits(
        max_connections=pool_size,
        max_keepalive_connections=pool_size,
    )
    async with httpx.AsyncClient(
        limits=limits,
        timeout=httpx.Timeout(timeout),
        base_url=base_url,
        headers=headers or {},
        follow_redirects=True,
    ) as client:
        yield client


def retry_delay(response: httpx.Response | None, attempt: int, backoff_base: float) -> float:
    """Return how long to wait before the next attempt.

    A numeric ``Retry-After`` header on a 429 wins over exponential
    backoff (capped at :data:`MAX_RETRY_AFTER`). HTTP-date values are
    ignored in favour of backoff.
    """
    if response is not None and response.status_code == 429:
        header = response.headers.get('Retry-After', '')
        try:
            return min(float(header), MAX_RETRY_AFTER)
        except ValueError:
            pass
    return backoff_base * (2**attempt)


async def request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    max_retries: int = MAX_RETRIES,
    backoff_base: float = RETRY_BACKOFF_BASE,
    idempotent: bool = True,
    **kwargs: object,
) -> httpx.Response:
    """Make an HTTP request with automatic retry for transient errors.

    Retries on 429 (rate limit), 5xx (server errors), and connection
    errors. Non-retryable responses (including 4xx) are returned as-is
    for the caller to interpret.

    With ``idempotent=False`` only 429 and :class:`httpx.ConnectError`
    are retried. A 5xx or a read/write timeout may arrive after the
    server acted on the request, so those are returned or raised on the
    first attempt instead of being sent again.

    Args:
        client: The httpx async client to use.
        method: HTTP method (GET, POST, etc.).
        url: Request URL.
        max_retries: Maximum number of retry attempts.
        backoff_base: Base delay in seconds for exponential backoff.
        idempotent: Whether repeating the request is harmless.
        **kwargs: Additional keyword arguments passed to ``client.request()``.

    Returns:
        The :class:`httpx.Response`.

    Raises:
        httpx.HTTPStatusError: If all retries are exhausted on a
            retryable status.
        httpx.TransportError: If all retries are exhausted due to
            connection failures or timeouts.
    """
    retry_statuses = RETRYABLE_STATUS_CODES if idempotent else NON_IDEMPOTENT_RETRYABLE_STATUS_CODES
    retry_errors = _RETRYABLE_ERRORS if idempotent else _NON_IDEMPOTENT_RETRYABLE_ERRORS
    last_exception: Exception | None = None
    response: httpx.Response | None = None

    for attempt in range(max_retries + 1):
        try:
            response = await client.request(method, url, **kwargs)  # type: ignore[arg-type]
            last_exception = None

            if response.status_code not in retry_statuses:
                return response

            if attempt == max_retries:
                break
            delay = retry_delay(response, attempt, backoff_base)
            log.warning(
                'http_retry',
                url=url,
                status=response.status_code,
                attempt=attempt + 1,
                delay=delay,
            )
            await asyncio.sleep(delay)

        except retry_errors as exc:
            last_exception = exc
            response = None
            if attempt == max_retries:
                break
            delay = retry_delay(None, attempt, backoff_base)
            log.warning(
                'http_retry_error',
                url=url,
                error=str(exc),
                attempt=attempt + 1,
                delay=delay,
            )
            await asyncio.sleep(delay)

    if last_exception:
        raise last_exception

    if response is not None:
        response.raise_for_status()
        return response

    msg = 'request_with_retry: no attempts were made'
    raise RuntimeError(msg)


__all__ = [
    'DEFAULT_POOL_SIZE',
    'DEFAULT_TIMEOUT',
    'MAX_RETRIES',
    'NON_IDEMPOTENT_RETRYABLE_STATUS_CODES',
    'RETRYABLE_STATUS_CODES',
    'http_client',
    'request_with_retry',
    'retry_delay',
]
