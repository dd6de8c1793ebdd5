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

"""Paginated commit retrieval.

Pages are requested one at a time: whether another page is needed
depends on the total the forge declared and on how many commits the
current page returned, so there is nothing to parallelise.

Pagination rule::

    page = 1, 2, 3, ...
    stop when (page - 1) * page_size + len(page_commits) >= total_count
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Protocol, runtime_checkable

from changelogkit.commit_parsing import RawCommit
from changelogkit.commit_range import CommitRange, RangeEndpoint
from changelogkit.errors import E, ChangelogKitError
from changelogkit.logging import get_logger

logger = get_logger(__name__)

PAGE_SIZE: Final[int] = 100


@dataclass(frozen=True)
class CommitPage:
    """One page of a range comparison.

    Attributes:
        total_count: Total commits in the range, as declared by the forge.
        commits: Commits on this page, in forge order.
    """

    total_count: int
    commits: tuple[RawCommit, ...] = ()


@runtime_checkable
class CommitPageSource(Protocol):
    """Source of paged commits between two refs."""

    async def fetch_commit_page(
        self,
        previous: RangeEndpoint,
        latest: RangeEndpoint,
        page: int,
        per_page: int,
    ) -> CommitPage:
        """Return page ``page`` (1-based) of the ``previous...latest`` range."""
        ...


async def fetch_commits(
    source: CommitPageSource,
    commit_range: CommitRange,
    *,
    page_size: int = PAGE_SIZE,
) -> list[RawCommit]:
    """Fetch every commit in the range, in the order the forge returns them.

    Args:
        source: Page source (usually the GitHub backend).
        commit_range: The resolved range.
        page_size: Commits per request.

    Returns:
        All commits after ``previous`` up to and including ``latest``.

    Raises:
        ChangelogKitError: ``NO_COMMITS_IN_RANGE`` when nothing was found.
    """
    commits: list[RawCommit] = []
    page = 0
    while True:
        page += 1
        result = await source.fetch_commit_page(
            commit_range.previous,
            commit_range.latest,
            page,
            page_size,
        )
        commits.extend(result.commits)
        logger.debug(
            'page_fetched',
            page=page,
            count=len(result.commits),
            total=result.total_count,
        )
        # An empty page means the declared total over-counted; stop anyway.
        if not result.commits or (page - 1) * page_size + len(result.commits) >= result.total_count:
            break

    if not commits:
        raise ChangelogKitError(
            code=E.NO_COMMITS_IN_RANGE,
            message=f"Couldn't find any commits between {commit_range.previous.name} and {commit_range.latest.name}.",
        )

    logger.info('commits_fetched', count=len(commits), pages=page, range=commit_range.basehead)
    return commits


__all__ = [
    'PAGE_SIZE',
    'CommitPage',
    'CommitPageSource',
    'fetch_commits',
]
