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

"""Pure types for commit message parsing.

This module has **zero** runtime dependencies beyond the standard library.
Everything here is a frozen dataclass or protocol: no I/O, no logging,
no side effects.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

# Footer note title that marks an incompatible change.
BREAKING_CHANGE = 'BREAKING CHANGE'

# Type assigned to commits kept by the fallback policy.
FALLBACK_TYPE = 'other'


@dataclass(frozen=True)
class RawCommit:
    """One commit as returned by the forge, before parsing.

    Attributes:
        sha: The full commit SHA.
        message: The full commit message (subject, body and footers).
        url: Web URL of the commit.
        author_login: Forge login of the author, if linked to an account.
        author_url: Web URL of the author's profile, if known.
    """

    sha: str
    message: str
    url: str = ''
    author_login: str | None = None
    author_url: str | None = None


@dataclass(frozen=True)
class CommitNote:
    """A footer note such as ``BREAKING CHANGE: removes v1 API``."""

    title: str
    text: str


@dataclass(frozen=True)
class ConventionalMessage:
    """The abstract form of a message that follows Conventional Commits.

    Attributes:
        type: The commit type as written (case preserved).
        scope: The optional scope, ``None`` when absent.
        subject: The header text after ``: ``.
        body: Free-form paragraphs between header and footers.
        notes: Footer notes, in message order.
        breaking: Whether the header carried the ``!`` marker.
    """

    type: str
    subject: str
    scope: str | None = None
    body: str = ''
    notes: tuple[CommitNote, ...] = ()
    breaking: bool = False


@dataclass(frozen=True)
class ParsedCommit:
    """A commit ready for classification.

    Attributes:
        type: Lowercased commit type (``"other"`` for fallback commits).
        subject: Header description, or the whole raw message for
            fallback commits.
        scope: Optional scope.
        body: Message body (empty for fallback commits).
        notes: Footer notes (empty for fallback commits).
        sha: Full commit SHA.
        url: Web URL of the commit.
        author: Author login, if known.
        author_url: Author profile URL, if known.
    """

    type: str
    subject: str
    sha: str
    scope: str | None = None
    body: str = ''
    notes: tuple[CommitNote, ...] = ()
    url: str = ''
    author: str | None = None
    author_url: str | None = None

    @property
    def short_sha(self) -> str:
        """First 7 characters of the SHA."""
        return self.sha[:7]


@dataclass(frozen=True)
class BreakingChange:
    """One ``BREAKING CHANGE`` note, lifted out of its commit.

    Lives independently of the commit it came from: excluding the
    commit's category never hides it.
    """

    sha: str
    subject: str
    text: str
    url: str = ''
    author: str | None = None
    author_url: str | None = None


@dataclass(frozen=True)
class Parsed:
    """Successful parse: the commit plus the breaking changes it declares."""

    commit: ParsedCommit
    breaking_changes: tuple[BreakingChange, ...] = ()


@dataclass(frozen=True)
class Rejected:
    """The message does not follow the convention.

    Attributes:
        raw: The commit that was rejected.
        reason: Short, human-readable reason for logs.
    """

    raw: RawCommit
    reason: str


ParseResult = Parsed | Rejected


@runtime_checkable
class CommitParser(Protocol):
    """Protocol for commit message parsers.

    A parser receives a full commit message and returns a
    :class:`ConventionalMessage`, or ``None`` when the message doesn't
    follow the expected format.

    Built-in implementations:

    - :class:`~changelogkit.commit_parsing.ConventionalCommitParser`
    """

    def parse_message(self, message: str) -> ConventionalMessage | None:
        """Parse a commit message into its abstract form."""
        ...
