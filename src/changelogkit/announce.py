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

"""Changelog delivery fan-out.

Sends the rendered changelog to every configured destination at once
and reports the combined outcome.

Key Concepts (ELI5)::

    ┌─────────────────────────┬─────────────────────────────────────────────┐
    │ Concept                 │ Plain-English                               │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ Destination             │ A chat channel id the changelog is posted   │
    │                         │ to. One payload, many destinations.         │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ Fan-out                 │ All destinations are sent to concurrently   │
    │                         │ with ``asyncio.gather``.                    │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ DeliveryReport          │ Every per-destination result, collected     │
    │                         │ only after all sends have finished.         │
    └─────────────────────────┴─────────────────────────────────────────────┘

Unlike release announcements, a changelog that fails to reach a channel
fails the run: once every destination has completed, any failure raises
``DELIVERY_FAILED`` naming each failed destination with its response
body.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass

from changelogkit.backends.chat import ChatBackend, DeliveryResult
from changelogkit.errors import E, ChangelogKitError
from changelogkit.logging import get_logger
from changelogkit.render import ChangelogPayload, payload_to_dict

logger = get_logger(__name__)


@dataclass(frozen=True)
class DeliveryReport:
    """Combined outcome of a delivery fan-out.

    Attributes:
        results: One result per destination, in destination order.
    """

    results: tuple[DeliveryResult, ...] = ()

    @property
    def sent(self) -> int:
        """Number of destinations that accepted the message."""
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> tuple[DeliveryResult, ...]:
        """Results for destinations that did not."""
        return tuple(r for r in self.results if not r.ok)

    @property
    def ok(self) -> bool:
        """Whether every destination succeeded."""
        return not self.failed

    def summary(self) -> str:
        """Human-readable summary."""
        parts = [f'{self.sent} sent']
        if self.failed:
            parts.append(f'{len(self.failed)} failed')
        return ', '.join(parts)


async def deliver_payload(
    backend: ChatBackend,
    destinations: Sequence[str],
    payload: ChangelogPayload,
    *,
    dry_run: bool = False,
) -> DeliveryReport:
    """Deliver ``payload`` to every destination concurrently.

    Each destination receives its own freshly serialised copy of the
    payload. All sends complete before the outcome is evaluated.

    Args:
        backend: Chat backend to deliver through.
        destinations: Destination ids (e.g. Slack channel ids).
        payload: The rendered changelog.
        dry_run: Log what would be sent without sending.

    Returns:
        A :class:`DeliveryReport` in which every destination succeeded.

    Raises:
        ChangelogKitError: ``DELIVERY_FAILED`` when any destination
            failed, after all of them have completed.
    """
    if not destinations:
        logger.debug('delivery_no_destinations')
        return DeliveryReport()

    if dry_run:
        for destination in destinations:
            logger.info('delivery_dry_run', destination=destination, blocks=len(payload.blocks))
        return DeliveryReport(results=tuple(DeliveryResult(destination=d, ok=True) for d in destinations))

    async def _dispatch(destination: str) -> DeliveryResult:
        """Send to a single destination. Never raises."""
        try:
            result = await backend.deliver(destination, payload_to_dict(payload))
        except Exception as exc:  # noqa: BLE001
            result = DeliveryResult(destination=destination, ok=False, body=f'{type(exc).__name__}: {exc}')
        if result.ok:
            logger.info('delivery_sent', destination=destination, status=result.status)
        else:
            logger.warning('delivery_failed', destination=destination, status=result.status, body=result.body)
        return result

    results = await asyncio.gather(*(_dispatch(d) for d in destinations))
    report = DeliveryReport(results=tuple(results))
    logger.info('delivery_result', summary=report.summary())

    if not report.ok:
        details = '; '.join(f'{r.destination}: {r.body}' for r in report.failed)
        raise ChangelogKitError(
            code=E.DELIVERY_FAILED,
            message=f'Failed to deliver the changelog to {len(report.failed)} destination(s): {details}',
            hint='Check that the bot token has chat:write and the bot is a member of each channel.',
        )
    return report


__all__ = [
    'DeliveryReport',
    'deliver_payload',
]
