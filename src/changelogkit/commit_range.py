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

"""Commit range resolution.

Turns the user's range selection into two concrete refs, ``latest`` and
``previous``. Two input forms are accepted, and exactly one must be used:

- **Single tag**: the tag that was just pushed. The two most recent tags
  (by commit date) are looked up; the first must be the given tag and
  the second becomes ``previous``.
- **Explicit pair**: ``from_tag`` and ``to_tag`` are taken verbatim as
  ``latest`` and ``previous``. Nothing is looked up or validated against
  the forge.

Resolution flow::

    tag ──────────► lookup.list_recent_tags(2) ──► [latest, previous]
                                                   │
                                     latest.name == tag ?  else TAG_MISMATCH
    from_tag, to_tag ─────────────────────────────► [from_tag, to_tag]

Usage::

    from changelogkit.commit_range import resolve_range

    commit_range = await resolve_range(tag='v1.2.0', lookup=forge)
    print(commit_range.previous.name, '...', commit_range.latest.name)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from changelogkit.errors import E, ChangelogKitError
from changelogkit.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RangeEndpoint:
    """A tag or ref bounding a commit range."""

    name: str


@dataclass(frozen=True)
class CommitRange:
    """Two distinct endpoints: commits after ``previous`` up to ``latest``."""

    latest: RangeEndpoint
    previous: RangeEndpoint

    @property
    def basehead(self) -> str:
        """The ``previous...latest`` form used by compare APIs."""
        return f'{self.previous.name}...{self.latest.name}'


@dataclass(frozen=True)
class TagRef:
    """A tag as reported by the forge, with the commit it points to."""

    name: str
    commit_oid: str = ''


@runtime_checkable
class TagLookup(Protocol):
    """Source of the repository's most recent tags."""

    async def list_recent_tags(self, count: int) -> list[TagRef]:
        """Return up to ``count`` tags, newest commit date first."""
        ...


async def resolve_range(
    *,
    tag: str = '',
    from_tag: str = '',
    to_tag: str = '',
    lookup: TagLookup | None = None,
) -> CommitRange:
    """Resolve the range selection into a :class:`CommitRange`.

    Args:
        tag: The just-released tag (single-tag form).
        from_tag: The newer endpoint (explicit form).
        to_tag: The older endpoint (explicit form).
        lookup: Tag source, required for the single-tag form.

    Returns:
        The resolved :class:`CommitRange`.

    Raises:
        ChangelogKitError: ``AMBIGUOUS_RANGE_INPUT`` when not exactly one
            form is given (or the pair names one ref twice),
            ``NO_LATEST_TAG`` / ``NO_PREVIOUS_TAG`` when the repository
            has fewer than two tags, ``TAG_MISMATCH`` when ``tag`` isn't
            the most recent one.
    """
    if tag and (from_tag or to_tag):
        raise ChangelogKitError(
            code=E.AMBIGUOUS_RANGE_INPUT,
            message='Must provide EITHER input tag OR (fromTag and toTag), not both!',
            hint='Drop --tag, or drop --from-tag/--to-tag.',
        )

    if tag:
        if lookup is None:
            msg = 'A tag lookup is required to resolve a single tag.'
            raise ValueError(msg)
        return await _resolve_single_tag(tag, lookup)

    if from_tag and to_tag:
        if from_tag == to_tag:
            raise ChangelogKitError(
                code=E.AMBIGUOUS_RANGE_INPUT,
                message=f'fromTag and toTag are both {from_tag!r}; the range would be empty.',
            )
        logger.info('range_resolved', mode='explicit', latest=from_tag, previous=to_tag)
        return CommitRange(latest=RangeEndpoint(from_tag), previous=RangeEndpoint(to_tag))

    raise ChangelogKitError(
        code=E.AMBIGUOUS_RANGE_INPUT,
        message='Must provide either input tag OR (fromTag and toTag). None were provided!',
        hint='Pass --tag alone, or both --from-tag and --to-tag.',
    )


async def _resolve_single_tag(tag: str, lookup: TagLookup) -> CommitRange:
    logger.info('range_lookup', tag=tag)
    tags = await lookup.list_recent_tags(2)

    if not tags:
        raise ChangelogKitError(
            code=E.NO_LATEST_TAG,
            message="Couldn't find the latest tag.",
            hint='Make sure you have an existing tag already before creating a new one.',
        )
    if len(tags) < 2:
        raise ChangelogKitError(
            code=E.NO_PREVIOUS_TAG,
            message="Couldn't find a previous tag.",
            hint='Make sure you have at least 2 tags already (current tag + previous initial tag).',
        )

    latest, previous = tags[0], tags[1]
    if latest.name != tag:
        raise ChangelogKitError(
            code=E.TAG_MISMATCH,
            message=f"Provided tag {tag} doesn't match latest tag {latest.name}.",
            hint='Use --from-tag/--to-tag to build a changelog for an older release.',
        )

    logger.info('range_resolved', mode='tag', latest=latest.name, previous=previous.name)
    return CommitRange(latest=RangeEndpoint(latest.name), previous=RangeEndpoint(previous.name))


__all__ = [
    'CommitRange',
    'RangeEndpoint',
    'TagLookup',
    'TagRef',
    'resolve_range',
]
