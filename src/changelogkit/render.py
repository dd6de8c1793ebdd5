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

"""Changelog rendering.

Produces a flat, ordered sequence of blocks that is independent of any
chat platform, then serialises it on demand:

- :func:`payload_to_dict` → Slack Block Kit (``{text, blocks}``).
- :func:`render_markdown` → a Markdown text artifact.

Block order::

    HeaderBlock(title)                      only when title is non-empty
    SectionBlock("💥 BREAKING CHANGES")      only when there are any
    SectionBlock("<subject> (by @author)")  one per breaking change
    DividerBlock()                          before every category except
                                            the first rendered section
    SectionBlock("<icon> <header>")
    SectionBlock("scope: subject by author abc1234")   one per commit

Usage::

    from changelogkit.render import render_blocks, payload_to_dict

    payload = render_blocks(classification, title='Release v1.2.0')
    body = payload_to_dict(payload)
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from changelogkit.classify import Classification
from changelogkit.commit_parsing import BreakingChange, ParsedCommit

BREAKING_CHANGES_TITLE = '💥 BREAKING CHANGES'


@dataclass(frozen=True)
class HeaderBlock:
    """The changelog title."""

    text: str


@dataclass(frozen=True)
class SectionBlock:
    """A line of text.

    Attributes:
        text: The plain text of the line.
        heading: Marks category and breaking-change titles.
        bold: Sorted, non-overlapping ``(start, end)`` ranges of ``text``
            to emphasise where the target format supports it.
    """

    text: str
    heading: bool = False
    bold: tuple[tuple[int, int], ...] = ()


@dataclass(frozen=True)
class DividerBlock:
    """A visual separator between categories."""


RenderBlock = HeaderBlock | SectionBlock | DividerBlock


@dataclass(frozen=True)
class ChangelogPayload:
    """The final artifact: a title plus the ordered blocks."""

    text: str
    blocks: tuple[RenderBlock, ...] = ()


def format_breaking_change(change: BreakingChange) -> str:
    """``<subject> (by @<author>)``, or just the subject when unattributed."""
    if change.author:
        return f'{change.subject} (by @{change.author})'
    return change.subject


def format_commit(commit: ParsedCommit) -> str:
    """``[<scope>: ]<subject>[ by <author>] <short sha>``."""
    scope = f'{commit.scope}: ' if commit.scope else ''
    author = f' by {commit.author}' if commit.author else ''
    return f'{scope}{commit.subject}{author} {commit.short_sha}'


def breaking_change_section(change: BreakingChange) -> SectionBlock:
    """A breaking-change entry with the attribution emphasised."""
    text = format_breaking_change(change)
    bold = ((len(change.subject) + 1, len(text)),) if change.author else ()
    return SectionBlock(text, bold=bold)


def commit_section(commit: ParsedCommit) -> SectionBlock:
    """A commit entry with the scope emphasised."""
    bold = ((0, len(commit.scope)),) if commit.scope else ()
    return SectionBlock(format_commit(commit), bold=bold)


def render_blocks(classification: Classification, *, title: str = '') -> ChangelogPayload:
    """Render a classification into a :class:`ChangelogPayload`.

    Pure and deterministic: the same input always yields an equal payload.

    Args:
        classification: Output of :func:`~changelogkit.classify.classify_commits`.
        title: Optional header text.

    Returns:
        The payload.
    """
    blocks: list[RenderBlock] = []
    if title:
        blocks.append(HeaderBlock(title))

    rendered_sections = 0

    if classification.breaking_changes:
        blocks.append(SectionBlock(BREAKING_CHANGES_TITLE, heading=True))
        blocks.extend(breaking_change_section(c) for c in classification.breaking_changes)
        rendered_sections += 1

    for group in classification.groups:
        if rendered_sections > 0:
            blocks.append(DividerBlock())
        blocks.append(SectionBlock(group.rule.title, heading=True))
        blocks.extend(commit_section(c) for c in group.commits)
        rendered_sections += 1

    return ChangelogPayload(text=title, blocks=tuple(blocks))


def _escape_mrkdwn(text: str) -> str:
    """Escape the three characters Slack treats as control sequences."""
    return text.replace('&', '&amp;').replace('<', '&lt;').replace('>', '&gt;')


def _section_mrkdwn(block: SectionBlock) -> str:
    if block.heading:
        return f'*{_escape_mrkdwn(block.text)}*'
    parts: list[str] = []
    pos = 0
    for start, end in block.bold:
        parts.append(_escape_mrkdwn(block.text[pos:start]))
        parts.append(f'*{_escape_mrkdwn(block.text[start:end])}*')
        pos = end
    parts.append(_escape_mrkdwn(block.text[pos:]))
    return ''.join(parts)


def block_to_dict(block: RenderBlock) -> dict[str, Any]:
    """Serialise one block to its Slack Block Kit shape."""
    if isinstance(block, HeaderBlock):
        return {
            'type': 'header',
            'text': {'type': 'plain_text', 'text': block.text, 'emoji': True},
        }
    if isinstance(block, SectionBlock):
        return {
            'type': 'section',
            'text': {'type': 'mrkdwn', 'text': _section_mrkdwn(block)},
        }
    return {'type': 'divider'}


def payload_to_dict(payload: ChangelogPayload) -> dict[str, Any]:
    """Serialise the payload as a Slack message body (without ``channel``).

    A fresh dict is built on each call, so concurrent deliveries never
    share mutable state.
    """
    return {
        'text': payload.text,
        'blocks': [block_to_dict(b) for b in payload.blocks],
    }


def payload_to_json(payload: ChangelogPayload) -> str:
    """Serialise the payload as compact JSON (UTF-8, emoji kept as-is)."""
    return json.dumps(payload_to_dict(payload), ensure_ascii=False, separators=(',', ':'))


def render_markdown(payload: ChangelogPayload) -> str:
    """Render the payload as a Markdown document.

    Headings become ``###`` lines, entries become bullets and dividers
    become blank lines between sections.
    """
    lines: list[str] = []
    for block in payload.blocks:
        if isinstance(block, HeaderBlock):
            lines.extend([f'# {block.text}', ''])
        elif isinstance(block, DividerBlock):
            lines.append('')
        elif block.heading:
            lines.extend([f'### {block.text}', ''])
        else:
            # Fallback commits carry whole multi-line messages.
            first, *rest = block.text.split('\n')
            lines.append(f'- {first}')
            lines.extend(f'  {line}' if line else '' for line in rest)
    return '\n'.join(lines).rstrip() + '\n'


__all__ = [
    'BREAKING_CHANGES_TITLE',
    'ChangelogPayload',
    'DividerBlock',
    'HeaderBlock',
    'RenderBlock',
    'SectionBlock',
    'block_to_dict',
    'breaking_change_section',
    'commit_section',
    'format_breaking_change',
    'format_commit',
    'payload_to_dict',
    'payload_to_json',
    'render_blocks',
    'render_markdown',
]
