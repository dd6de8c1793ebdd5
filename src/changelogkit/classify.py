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

"""Commit classification into the fixed category table.

Key Concepts (ELI5)::

    ┌─────────────────────────┬─────────────────────────────────────────────┐
    │ Concept                 │ Plain-English                               │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ CategoryRule            │ One row of the table: the commit types it   │
    │                         │ collects, its heading, and its icon.        │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ CATEGORIES              │ The table itself. Its order is the order    │
    │                         │ sections appear in, always.                 │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ CategoryGroup           │ A rule plus the commits that matched it.    │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ exclude_types           │ Types whose whole category is skipped.      │
    │                         │ Breaking changes are never skipped.         │
    └─────────────────────────┴─────────────────────────────────────────────┘

Classification flow::

    ParsedLog.commits ──(reverse?)──► for rule in CATEGORIES:
                                         skip if rule.types ∩ exclude_types
                                         keep commits with type in rule.types
                                         drop the group if empty
    ParsedLog.breaking_changes ──────► passed through untouched

Commits whose type matches no rule (e.g. ``revert``) are not listed in any
category, but any breaking change they declared is still reported.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from changelogkit.commit_parsing import BreakingChange, ParsedCommit, ParsedLog
from changelogkit.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CategoryRule:
    """One row of the category table.

    Attributes:
        types: Commit types collected by this category.
        header: Section heading.
        icon: Emoji shown before the heading.
        rel_issue_prefix: Keyword used when linking related issues
            (``fixes`` for bug fixes), empty when not applicable.
    """

    types: frozenset[str]
    header: str
    icon: str
    rel_issue_prefix: str = ''

    @property
    def title(self) -> str:
        """Icon and heading, as shown in the changelog."""
        return f'{self.icon} {self.header}'


# Display order matters: sections render in exactly this order.
CATEGORIES: tuple[CategoryRule, ...] = (
    CategoryRule(frozenset({'feat', 'feature'}), 'New Features', '✨'),
    CategoryRule(frozenset({'fix', 'bugfix'}), 'Bug Fixes', '🐛', rel_issue_prefix='fixes'),
    CategoryRule(frozenset({'perf'}), 'Performance Improvements', '⚡'),
    CategoryRule(frozenset({'refactor'}), 'Refactors', '♻️'),
    CategoryRule(frozenset({'test', 'tests'}), 'Tests', '✅'),
    CategoryRule(frozenset({'build', 'ci'}), 'Build System', '👷'),
    CategoryRule(frozenset({'doc', 'docs'}), 'Documentation Changes', '📝'),
    CategoryRule(frozenset({'style'}), 'Code Style Changes', '🎨'),
    CategoryRule(frozenset({'chore'}), 'Chores', '🔧'),
    CategoryRule(frozenset({'other'}), 'Other Changes', '🛸'),
)


@dataclass(frozen=True)
class CategoryGroup:
    """A category and the commits it collected, in listing order."""

    rule: CategoryRule
    commits: tuple[ParsedCommit, ...]


@dataclass(frozen=True)
class Classification:
    """Classifier output.

    Attributes:
        groups: Non-empty, non-excluded categories in table order.
        breaking_changes: Every breaking change, in parse order.
    """

    groups: tuple[CategoryGroup, ...] = ()
    breaking_changes: tuple[BreakingChange, ...] = ()


def rule_for_type(commit_type: str, rules: Iterable[CategoryRule] = CATEGORIES) -> CategoryRule | None:
    """Return the category collecting ``commit_type``, or ``None``."""
    for rule in rules:
        if commit_type in rule.types:
            return rule
    return None


def classify_commits(
    log: ParsedLog,
    *,
    exclude_types: Iterable[str] = (),
    reverse: bool = False,
    rules: tuple[CategoryRule, ...] = CATEGORIES,
) -> Classification:
    """Group parsed commits into categories.

    ``reverse`` flips the order commits are listed in within each
    category. It does not touch ``breaking_changes``, which keep the order
    they were parsed in.

    Args:
        log: Output of :func:`~changelogkit.commit_parsing.parse_commits`.
        exclude_types: Types whose category is skipped entirely. Naming
            any one alias of a category excludes the whole category.
        reverse: List commits oldest-first instead of newest-first.
        rules: Category table.

    Returns:
        A :class:`Classification`.
    """
    excluded = frozenset(exclude_types)
    commits = log.commits[::-1] if reverse else log.commits

    groups: list[CategoryGroup] = []
    for rule in rules:
        if rule.types & excluded:
            logger.debug('category_excluded', header=rule.header)
            continue
        matching = tuple(c for c in commits if c.type in rule.types)
        if not matching:
            continue
        groups.append(CategoryGroup(rule=rule, commits=matching))

    unclassified = sum(1 for c in commits if rule_for_type(c.type, rules) is None)
    if unclassified:
        logger.info('commits_unclassified', count=unclassified)

    logger.info(
        'commits_classified',
        categories=[g.rule.header for g in groups],
        breaking_changes=len(log.breaking_changes),
    )
    return Classification(groups=tuple(groups), breaking_changes=log.breaking_changes)


__all__ = [
    'CATEGORIES',
    'CategoryGroup',
    'CategoryRule',
    'Classification',
    'classify_commits',
    'rule_for_type',
]
