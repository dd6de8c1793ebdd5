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

"""End-to-end changelog pipeline.

Wires the stages together in their fixed order::

    resolve_range ──► fetch_commits ──► parse_commits ──► classify_commits
                                                               │
                          ┌──────────── render_blocks ◄────────┘
                          ▼
            delivery enabled?  ── yes ──► deliver_payload (Slack fan-out)
                          │
                          no ──► sink.emit('payload', json | markdown)

:func:`generate_changelog` runs the pure part and returns every
intermediate result; :func:`run` adds delivery or artifact emission.
"""

from __future__ import annotations

from dataclasses import dataclass

from changelogkit.announce import DeliveryReport, deliver_payload
from changelogkit.backends.chat import ChatBackend
from changelogkit.backends.forge import Forge
from changelogkit.classify import Classification, classify_commits
from changelogkit.commit_parsing import ParsedLog, RawCommit, parse_commits
from changelogkit.commit_range import CommitRange, resolve_range
from changelogkit.config import ChangelogConfig
from changelogkit.fetch import fetch_commits
from changelogkit.logging import get_logger
from changelogkit.outputs import ArtifactSink
from changelogkit.render import ChangelogPayload, payload_to_json, render_blocks, render_markdown

logger = get_logger(__name__)

OUTPUT_NAME = 'payload'


@dataclass(frozen=True)
class ChangelogResult:
    """Everything a pipeline run produced.

    Attributes:
        commit_range: The resolved range.
        raw_commits: Commits as fetched, in forge order.
        log: Parsed commits and extracted breaking changes.
        classification: Commits grouped by category.
        payload: The rendered changelog.
    """

    commit_range: CommitRange
    raw_commits: tuple[RawCommit, ...]
    log: ParsedLog
    classification: Classification
    payload: ChangelogPayload


@dataclass(frozen=True)
class RunOutcome:
    """What :func:`run` did with the changelog.

    Attributes:
        result: The generated changelog.
        delivery: Delivery report, or ``None`` when the artifact was
            emitted instead.
        artifact: The emitted artifact text, or ``''`` when delivered.
    """

    result: ChangelogResult
    delivery: DeliveryReport | None = None
    artifact: str = ''


def format_artifact(payload: ChangelogPayload, output_format: str) -> str:
    """Serialise the payload as ``json`` (Block Kit) or ``markdown``."""
    if output_format == 'markdown':
        return render_markdown(payload)
    return payload_to_json(payload)


async def generate_changelog(config: ChangelogConfig, forge: Forge) -> ChangelogResult:
    """Resolve, fetch, parse, classify and render.

    Args:
        config: Run configuration.
        forge: Tag lookup and commit page source.

    Returns:
        A :class:`ChangelogResult`.

    Raises:
        ChangelogKitError: On range, fetch or forge errors.
    """
    commit_range = await resolve_range(
        tag=config.tag,
        from_tag=config.from_tag,
        to_tag=config.to_tag,
        lookup=forge,
    )
    raw_commits = await fetch_commits(forge, commit_range)
    log = parse_commits(raw_commits, include_invalid=config.include_invalid_commits)
    classification = classify_commits(
        log,
        exclude_types=config.exclude_types,
        reverse=config.reverse_order,
    )
    payload = render_blocks(classification, title=config.title)
    logger.info(
        'changelog_generated',
        range=commit_range.basehead,
        commits=len(raw_commits),
        listed=sum(len(g.commits) for g in classification.groups),
        breaking_changes=len(classification.breaking_changes),
        blocks=len(payload.blocks),
    )
    return ChangelogResult(
        commit_range=commit_range,
        raw_commits=tuple(raw_commits),
        log=log,
        classification=classification,
        payload=payload,
    )


async def run(
    config: ChangelogConfig,
    forge: Forge,
    *,
    chat: ChatBackend | None = None,
    sink: ArtifactSink | None = None,
    dry_run: bool = False,
) -> RunOutcome:
    """Generate the changelog, then deliver it or emit it.

    The changelog is delivered when ``chat`` is given and the config has
    delivery enabled; otherwise it is emitted to ``sink`` as the
    ``payload`` artifact in ``config.output_format``.

    Args:
        config: Run configuration.
        forge: Tag lookup and commit page source.
        chat: Chat backend for delivery.
        sink: Artifact sink used when not delivering.
        dry_run: Log deliveries instead of sending them.

    Returns:
        A :class:`RunOutcome`.

    Raises:
        ChangelogKitError: On any pipeline error, or ``DELIVERY_FAILED``
            when a destination rejected the changelog.
    """
    result = await generate_changelog(config, forge)

    if chat is not None and config.delivery_enabled:
        report = await deliver_payload(chat, config.slack_channel_ids, result.payload, dry_run=dry_run)
        return RunOutcome(result=result, delivery=report)

    artifact = format_artifact(result.payload, config.output_format)
    if sink is not None:
        sink.emit(OUTPUT_NAME, artifact)
    return RunOutcome(result=result, artifact=artifact)


__all__ = [
    'OUTPUT_NAME',
    'ChangelogResult',
    'RunOutcome',
    'format_artifact',
    'generate_changelog',
    'run',
]
