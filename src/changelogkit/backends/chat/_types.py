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

"""Pure types shared by chat backends."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of delivering the changelog to one destination.

    Attributes:
        destination: Channel (or other destination) identifier.
        ok: Whether the destination accepted the message.
        status: HTTP status code, ``0`` when no response was received.
        body: Response body (or transport error), kept verbatim so a
            failure can be reported exactly as the service phrased it.
    """

    destination: str
    ok: bool
    status: int = 0
    body: str = ''


@runtime_checkable
class ChatBackend(Protocol):
    """Protocol for chat services that accept a rendered changelog."""

    async def deliver(self, destination: str, payload: dict[str, Any]) -> DeliveryResult:
        """Post ``payload`` to ``destination``.

        Implementations report failures through :class:`DeliveryResult`
        instead of raising, so one destination can't abort the others.
        """
        ...
