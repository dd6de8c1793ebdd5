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

"""Apply a commit parser to forge commits.

Turns :class:`RawCommit` records into :class:`ParsedCommit` records and
lifts ``BREAKING CHANGE`` notes into :class:`BreakingChange` records.
Messages that don't follow the convention are expected and common, so a
rejection is a value (:class:`Rejected`), never an exception; the
``include_invalid`` policy then decides whether the commit is kept under
the ``other`` type or dropped.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from changelogkit.commit_parsing._conventional import ConventionalCommitParser
from changelogkit.commit_parsing._types import (
    BREAKING_CHANGE,
    FALLBACK_TYPE,
    BreakingChange,
    CommitParser,
    Parsed,
    ParsedCommit,
    ParseResult,
    RawCommit,
    Rejected,
)
from changelogkit.logging import get_logger

logger = get_logger(__name__)

# Module-level singleton for convenience.
_DEFAULT_PARSER = ConventionalCommitParser()


@dataclass(frozen=True)
class ParsedLog:
    """Everything the parse stage hands to the classifier.

    Attributes:
        commits: Parsed (and fallback) commits, in fetch order.
        breaking_changes: Breaking changes, in fetch order.
        rejected: Number of commits dropped by the policy.
    """

    commits: tuple[ParsedCommit, ...] = ()
    breaking_changes: tuple[BreakingChange, ...] = ()
    rejected: int = 0


def parse_commit(raw: RawCommit, parser: CommitParser | None = None) -> ParseResult:
    """Parse one forge commit.

    Args:
        raw: The commit to parse.
        parser: Commit parser; defaults to :class:`ConventionalCommitParser`.

    Returns:
        :class:`Parsed` with the commit and its breaking changes, or
        :class:`Rejected` when the message doesn't follow the convention.
    """
    message = (parser or _DEFAULT_PARSER).parse_message(raw.message)
    if message is None:
        return Rejected(raw=raw, reason='not a conventional commit')

    commit = ParsedCommit(
        type=message.type.lower(),
        scope=message.scope,
        subject=message.subject,
        body=message.body,
        notes=message.notes,
        sha=raw.sha,
        url=raw.url,
        author=raw.author_login,
        author_url=raw.author_url,
    )
    breaking = tuple(
        BreakingChange(
            sha=raw.sha,
            url=raw.url,
            subject=message.subject,
            author=raw.author_login,
            author_url=raw.author_url,
            text=note.text,
        )
        for note in message.notes
        if note.title == BREAKING_CHANGE
    )
    return Parsed(commit=commit, breaking_changes=breaking)


def fallback_commit(raw: RawCommit) -> ParsedCommit:
    """Wrap an unparseable commit under the ``other`` type.

    The whole raw message becomes the subject; there are no notes, so no
    breaking change can come out of it.
    """
    return ParsedCommit(
        type=FALLBACK_TYPE,
        subject=raw.message,
        sha=raw.sha,
        url=raw.url,
        author=raw.author_login,
        author_url=raw.author_url,
    )


def parse_commits(
    raw_commits: Iterable[RawCommit],
    *,
    include_invalid: bool = False,
    parser: CommitParser | None = None,
) -> ParsedLog:
    """Parse every commit of a range, applying the fallback policy.

    Zero parseable commits is not an error: the result is simply empty
    and renders as a changelog with no categories.

    Args:
        raw_commits: Commits in fetch order.
        include_invalid: Keep unparseable commits as ``other`` instead of
            dropping them.
        parser: Commit parser; defaults to :class:`ConventionalCommitParser`.

    Returns:
        A :class:`ParsedLog`.
    """
    commits: list[ParsedCommit] = []
    breaking_changes: list[BreakingChange] = []
    rejected = 0

    for raw in raw_commits:
        result = parse_commit(raw, parser)
        if isinstance(result, Parsed):
            commits.append(result.commit)
            breaking_changes.extend(result.breaking_changes)
            logger.debug(
                'commit_parsed',
                sha=raw.sha,
                type=result.commit.type,
                subject=result.commit.subject,
                breaking=len(result.breaking_changes),
            )
        elif include_invalid:
            commits.append(fallback_commit(raw))
            logger.debug('commit_fallback', sha=raw.sha, type=FALLBACK_TYPE, subject=raw.message)
        else:
            rejected += 1
            logger.info('commit_rejected', sha=raw.sha, reason=result.reason)

    logger.info(
        'commits_parsed',
        parsed=len(commits),
        rejected=rejected,
        breaking_changes=len(breaking_changes),
    )
    return ParsedLog(
        commits=tuple(commits),
        breaking_changes=tuple(breaking_changes),
        rejected=rejected,
    )

