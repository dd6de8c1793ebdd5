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

"""Conventional Commits parser.

Pure implementation: depends only on ``re`` and :mod:`._types`.
No I/O, no logging, no side effects.

Message layout::

    feat(auth)!: drop the v1 token endpoint      ← header
                                                 ← blank line
    The v1 endpoint leaked tokens in logs.       ← body (any paragraphs)
                                                 ← blank line
    BREAKING CHANGE: removes v1 API              ← footer notes
    Refs #123
"""

from __future__ import annotations

import re

from changelogkit.commit_parsing._types import BREAKING_CHANGE, CommitNote, ConventionalMessage

# Header: type(scope)!: subject
HEADER_PATTERN: re.Pattern[str] = re.compile(
    r'^(?P<type>[^\s():!]+)'  # type (anything but whitespace, parens, "!" and ":")
    r'(?:\((?P<scope>[^()\r\n]+)\))?'  # optional, non-empty scope in parens
    r'(?P<breaking>!)?'  # optional breaking change indicator
    r':[ \t]*'  # separator
    r'(?P<subject>\S.*)$',  # subject
)

# Footer line: "Token: value" or "Token #value". BREAKING CHANGE is the
# only token allowed to contain a space.
FOOTER_PATTERN: re.Pattern[str] = re.compile(
    r'^(?P<token>BREAKING[ -]CHANGE|[A-Za-z][\w-]*)'
    r'(?::(?:[ \t]+|$)|[ \t]+(?=#))'
    r'(?P<value>.*)$',
)


def _split_paragraphs(lines: list[str]) -> list[list[str]]:
    paragraphs: list[list[str]] = []
    current: list[str] = []
    for line in lines:
        if line.strip():
            current.append(line)
        elif current:
            paragraphs.append(current)
            current = []
    if current:
        paragraphs.append(current)
    return paragraphs


def _parse_footer(lines: list[str]) -> tuple[CommitNote, ...]:
    """Turn footer lines into notes; non-token lines continue the last note."""
    titles: list[str] = []
    texts: list[list[str]] = []
    for line in lines:
        match = FOOTER_PATTERN.match(line)
        if match:
            token = match.group('token')
            if token == 'BREAKING-CHANGE':
                token = BREAKING_CHANGE
            titles.append(token)
            texts.append([match.group('value')])
        elif texts:
            texts[-1].append(line)
    return tuple(
        CommitNote(title=title, text='\n'.join(text).strip())
        for title, text in zip(titles, texts, strict=True)
    )


class ConventionalCommitParser:
    """Parser for `Conventional Commits <https://www.conventionalcommits.org/>`_.

    Parses full multi-line messages: the ``type(scope)!: subject`` header,
    an optional body, and trailing footer notes. The ``!`` marker on its
    own produces a ``BREAKING CHANGE`` note carrying the subject, so a
    breaking header is never silently lost when the footer is missing.
    """

    def parse_message(self, message: str) -> ConventionalMessage | None:
        """Parse a commit message.

        Args:
            message: The full commit message.

        Returns:
            A :class:`ConventionalMessage`, or ``None`` if the header
            doesn't follow the convention.
        """
        lines = message.replace('\r\n', '\n').strip().split('\n')
        match = HEADER_PATTERN.match(lines[0].strip())
        if not match:
            return None

        body_paragraphs: list[list[str]] = []
        footer_lines: list[str] = []
        for paragraph in _split_paragraphs(lines[1:]):
            if footer_lines or FOOTER_PATTERN.match(paragraph[0]):
                footer_lines.extend(['', *paragraph] if footer_lines else paragraph)
            else:
                body_paragraphs.append(paragraph)

        subject = match.group('subject').strip()
        breaking = bool(match.group('breaking'))
        notes = _parse_footer(footer_lines)
        if breaking and not any(note.title == BREAKING_CHANGE for note in notes):
            notes = (CommitNote(title=BREAKING_CHANGE, text=subject), *notes)

        return ConventionalMessage(
            type=match.group('type'),
            scope=match.group('scope'),
            subject=subject,
            body='\n\n'.join('\n'.join(p) for p in body_paragraphs),
            notes=notes,
            breaking=breaking,
        )
