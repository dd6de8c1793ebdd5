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

"""GitHub API forge backend for changelogkit.

Implements :class:`~changelogkit.commit_range.TagLookup` and
:class:`~changelogkit.fetch.CommitPageSource` against GitHub:

- Recent tags come from the GraphQL API, which (unlike REST) can order
  refs by the date of the commit they point to.
- Commit pages come from the REST compare endpoint
  ``GET /repos/{owner}/{repo}/compare/{previous}...{latest}``.

Authentication:

    Resolves a token in order of precedence:

    1. ``token`` constructor parameter.
    2. ``GITHUB_TOKEN`` env var (set automatically by GitHub Actions).
    3. ``GH_TOKEN`` env var (used by the ``gh`` CLI).

    If none are set, the backend raises ``ValueError`` at construction
    to fail fast rather than silently on the first API call.

Usage::

    from changelogkit.backends.forge.github_api import GitHubAPIBackend

    forge = GitHubAPIBackend(owner='firebase', repo='genkit')
    tags = await forge.list_recent_tags(2)

.. seealso::

    `GitHub REST API <https://docs.github.com/en/rest>`_,
    `GitHub GraphQL API <https://docs.github.com/en/graphql>`_
"""

from __future__ import annotations

import json
import os
from typing import Any
from urllib.parse import quote

import httpx

from changelogkit.commit_parsing import RawCommit
from changelogkit.commit_range import RangeEndpoint, TagRef
from changelogkit.errors import E, ChangelogKitError
from changelogkit.fetch import CommitPage
from changelogkit.logging import get_logger
from changelogkit.net import DEFAULT_POOL_SIZE, DEFAULT_TIMEOUT, http_client, request_with_retry

log = get_logger('changelogkit.backends.forge.github_api')

# GitHub REST API base URL.
_DEFAULT_BASE_URL = 'https://api.github.com'

# API version header for stable API behavior.
_API_VERSION = '2022-11-28'

_RECENT_TAGS_QUERY = """
query lastTags($owner: String!, $repo: String!, $count: Int!) {
  repository(owner: $owner, name: $repo) {
    refs(first: $count, refPrefix: "refs/tags/", orderBy: {field: TAG_COMMIT_DATE, direction: DESC}) {
      nodes {
        name
        target {
          oid
        }
      }
    }
  }
}
"""


def graphql_url(base_url: str) -> str:
    """Return the GraphQL endpoint for a REST base URL.

    GitHub Enterprise Server serves REST under ``/api/v3`` and GraphQL
    under ``/api/graphql``; github.com serves both from the API host.
    """
    base = base_url.rstrip('/')
    if base.endswith('/api/v3'):
        return base[: -len('/v3')] + '/graphql'
    return base + '/graphql'


def _commit_from_json(data: dict[str, Any]) -> RawCommit:
    """Normalize one compare-API commit to a :class:`RawCommit`."""
    author = data.get('author') or {}
    return RawCommit(
        sha=data.get('sha', ''),
        message=(data.get('commit') or {}).get('message', ''),
        url=data.get('html_url', ''),
        author_login=author.get('login') or None,
        author_url=author.get('html_url') or None,
    )


class GitHubAPIBackend:
    """Forge implementation using the GitHub REST and GraphQL APIs.

    Uses ``httpx`` for async HTTP with connection pooling and automatic
    retry on transient errors (429, 5xx). Any other non-success response
    aborts the run with ``FORGE_REQUEST_FAILED``.

    Args:
        owner: Repository owner (e.g., ``"firebase"``).
        repo: Repository name (e.g., ``"genkit"``).
        token: GitHub API token. Falls back to ``GITHUB_TOKEN`` or
            ``GH_TOKEN`` env vars.
        base_url: API base URL (override for GitHub Enterprise Server).
        pool_size: HTTP connection pool size.
        timeout: HTTP request timeout in seconds.
    """

    def __init__(
        self,
        owner: str,
        repo: str,
        *,
        token: str = '',
        base_url: str = _DEFAULT_BASE_URL,
        pool_size: int = DEFAULT_POOL_SIZE,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize with owner, repo, and API token."""
        self._owner = owner
        self._repo = repo
        self._base_url = base_url.rstrip('/')
        self._repo_url = f'{self._base_url}/repos/{owner}/{repo}'
        self._graphql_url = graphql_url(self._base_url)
        self._pool_size = pool_size
        self._timeout = timeout

        # Resolve auth: explicit token > GITHUB_TOKEN > GH_TOKEN.
        resolved_token = token or os.environ.get('GITHUB_TOKEN', '') or os.environ.get('GH_TOKEN', '')
        if not resolved_token:
            msg = 'GitHub API token required: pass token= or set GITHUB_TOKEN or GH_TOKEN env var.'
            raise ValueError(msg)

        self._headers = {
            'Authorization': f'Bearer {resolved_token}',
            'Accept': 'application/vnd.github+json',
            'X-GitHub-Api-Version': _API_VERSION,
        }

    def __repr__(self) -> str:
        """Return a safe repr that never exposes the API token."""
        return f'GitHubAPIBackend(owner={self._owner!r}, repo={self._repo!r})'

    @property
    def repository(self) -> str:
        """``owner/repo``."""
        return f'{self._owner}/{self._repo}'

    async def _request(self, method: str, url: str, operation: str, **kwargs: Any) -> httpx.Response:  # noqa: ANN401
        """Send one request, mapping exhausted retries and transport errors to ``FORGE_REQUEST_FAILED``."""
        try:
            async with http_client(
                pool_size=self._pool_size,
                timeout=self._timeout,
                headers=self._headers,
            ) as client:
                return await request_with_retry(client, method, url, **kwargs)
        except httpx.HTTPStatusError as exc:
            raise ChangelogKitError(
                code=E.FORGE_REQUEST_FAILED,
                message=(
                    f'GitHub {operation} failed with HTTP {exc.response.status_code} '
                    f'after retries: {exc.response.text}'
                ),
                hint='GitHub may be degraded or rate limiting this token; try again later.',
            ) from exc
        except httpx.HTTPError as exc:
            raise ChangelogKitError(
                code=E.FORGE_REQUEST_FAILED,
                message=f'GitHub {operation} failed: {type(exc).__name__}: {exc}',
                hint='Check network access to the GitHub API (or GITHUB_API_URL).',
            ) from exc

    def _raise_for_response(self, response: httpx.Response, operation: str) -> None:
        if response.is_success:
            return
        raise ChangelogKitError(
            code=E.FORGE_REQUEST_FAILED,
            message=f'GitHub {operation} failed with HTTP {response.status_code}: {response.text}',
            hint='Check that the token can read the repository contents.',
        )

    def _decode(self, response: httpx.Response, operation: str) -> dict[str, Any]:
        try:
            data = response.json()
        except (ValueError, json.JSONDecodeError) as exc:
            raise ChangelogKitError(
                code=E.FORGE_REQUEST_FAILED,
                message=f'GitHub {operation} returned invalid JSON: {exc}',
            ) from exc
        if not isinstance(data, dict):
            raise ChangelogKitError(
                code=E.FORGE_REQUEST_FAILED,
                message=f'GitHub {operation} returned {type(data).__name__}, expected an object.',
            )
        return data

    async def list_recent_tags(self, count: int) -> list[TagRef]:
        """Return up to ``count`` tags, newest commit date first."""
        payload = {
            'query': _RECENT_TAGS_QUERY,
            'variables': {'owner': self._owner, 'repo': self._repo, 'count': count},
        }
        response = await self._request('POST', self._graphql_url, 'tag lookup', json=payload)
        self._raise_for_response(response, 'tag lookup')
        data = self._decode(response, 'tag lookup')
        if data.get('errors'):
            messages = '; '.join(str(err.get('message', err)) for err in data['errors'])
            raise ChangelogKitError(
                code=E.FORGE_REQUEST_FAILED,
                message=f'GitHub tag lookup failed: {messages}',
            )

        repository = (data.get('data') or {}).get('repository') or {}
        nodes = (repository.get('refs') or {}).get('nodes') or []
        tags = [
            TagRef(name=node.get('name', ''), commit_oid=(node.get('target') or {}).get('oid', ''))
            for node in nodes
        ]
        log.info('tags_listed', repository=self.repository, tags=[t.name for t in tags])
        return tags

    async def fetch_commit_page(
        self,
        previous: RangeEndpoint,
        latest: RangeEndpoint,
        page: int,
        per_page: int,
    ) -> CommitPage:
        """Fetch one page of ``previous...latest`` via the compare API."""
        basehead = f'{quote(previous.name, safe="/")}...{quote(latest.name, safe="/")}'
        url = f'{self._repo_url}/compare/{basehead}'
        response = await self._request('GET', url, 'compare', params={'page': page, 'per_page': per_page})
        self._raise_for_response(response, 'compare')
        data = self._decode(response, 'compare')
        commits = tuple(_commit_from_json(c) for c in data.get('commits') or [])
        return CommitPage(total_count=int(data.get('total_commits') or 0), commits=commits)


__all__ = [
    'GitHubAPIBackend',
    'graphql_url',
]
