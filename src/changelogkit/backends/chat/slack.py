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

"""Slack Web API chat backend.

Posts the Block Kit payload with ``chat.postMessage`` using a bot token
(``xoxb-...``) that has the ``chat:write`` scope and is a member of each
target channel.

Slack answers most application errors (unknown channel, invalid blocks,
missing scope) with HTTP 200 and ``{"ok": false, "error": "..."}``, so
both the status code and the ``ok`` field decide success.

``chat.postMessage`` is not idempotent. A post is only sent again after a
429 or a connection that never opened; a timeout or 5xx fails the
delivery so a channel never receives the changelog twice.

.. seealso::

    `chat.postMessage <https://api.slack.com/methods/chat.postMessage>`_
"""

from __future__ import annotations

import json
from typing import Any

import httpx

from changelogkit.backends.chat._types import DeliveryResult
from changelogkit.logging import get_logger
from changelogkit.net import DEFAULT_POOL_SIZE, DEFAULT_TIMEOUT, http_client, request_with_retry

log = get_logger('changelogkit.backends.chat.slack')

_POST_MESSAGE_URL = 'https://slack.com/api/chat.postMessage'


def _slack_ok(body: str) -> bool:
    """Return ``False`` only when the body is JSON with ``"ok": false``."""
    try:
        data = json.loads(body)
    except ValueError:
        return True
    return not (isinstance(data, dict) and data.get('ok') is False)


class SlackAPIBackend:
    """Chat backend for the Slack Web API.

    Args:
        token: Slack bot token.
        url: ``chat.postMessage`` endpoint (override for tests or proxies).
        pool_size: HTTP connection pool size.
        timeout: HTTP request timeout in seconds.
    """

    def __init__(
        self,
        token: str,
        *,
        url: str = _POST_MESSAGE_URL,
        pool_size: int = DEFAULT_POOL_SIZE,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize with a bot token."""
        if not token:
            msg = 'Slack bot token required.'
            raise ValueError(msg)
        self._url = url
        self._pool_size = pool_size
        self._timeout = timeout
        self._headers = {
            'Authorization': f'Bearer {token}',
            'Content-Type': 'application/json; charset=utf-8',
        }

    def __repr__(self) -> str:
        """Return a safe repr that never exposes the bot token."""
        return f'SlackAPIBackend(url={self._url!r})'

    async def deliver(self, destination: str, payload: dict[str, Any]) -> DeliveryResult:
        """Post the payload to one channel.

        Never raises for delivery problems: HTTP errors, Slack API errors
        and transport failures all come back as a failed
        :class:`DeliveryResult` carrying the response body.
        """
        body = {'channel': destination, **payload}
        try:
            async with http_client(
                pool_size=self._pool_size,
                timeout=self._timeout,
                headers=self._headers,
            ) as client:
                response = await request_with_retry(client, 'POST', self._url, idempotent=False, json=body)
        except httpx.HTTPStatusError as exc:
            return DeliveryResult(
                destination=destination,
                ok=False,
                status=exc.response.status_code,
                body=exc.response.text,
            )
        except httpx.HTTPError as exc:
            return DeliveryResult(destination=destination, ok=False, body=f'{type(exc).__name__}: {exc}')

        ok = response.status_code == 200 and _slack_ok(response.text)
        log.debug('slack_response', channel=destination, status=response.status_code, ok=ok)
        return DeliveryResult(
            destination=destination,
            ok=ok,
            status=response.status_code,
            body=response.text,
        )


__all__ = [
    'SlackAPIBackend',
]
