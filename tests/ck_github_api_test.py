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

"""Tests for the GitHub API forge backend.

Uses httpx mock transport to avoid real network calls.
"""

from __future__ import annotations

import functools
import json
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from typing import Any
from unittest.mock import patch

import httpx
import pytest
from changelogkit.backends.forge import Forge, GitHubAPIBackend
from changelogkit.backends.forge.github_api import graphql_url
from changelogkit.commit_range import RangeEndpoint
from changelogkit.errors import ChangelogKitError, E
from changelogkit.logging import configure_logging
from changelogkit.net import MAX_RETRIES, request_with_retry

configure_logging(quiet=True)

_MODULE = 'changelogkit.backends.forge.github_api.http_client'

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_client_cm(transport: Any) -> Any:  # noqa: ANN401
    """Create a context manager that yields an httpx.AsyncClient with mock transport."""

    @asynccontextmanager
    async def _client_cm(**kw: Any) -> AsyncGenerator[httpx.AsyncClient]:  # noqa: ANN401
        async with httpx.AsyncClient(transport=httpx.MockTransport(transport), headers=kw.get('headers')) as client:
            yield client

    return _client_cm


def _recording(
    respond: Callable[[httpx.Request], httpx.Response],
) -> tuple[list[httpx.Request], Callable[[httpx.Request], httpx.Response]]:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return respond(request)

    return requests, handler


def _compare_body(total: int, shas: list[str]) -> dict[str, Any]:
    return {
        'total_commits': total,
        'commits': [
            {
                'sha': sha,
                'html_url': f'https://github.com/firebase/genkit/commit/{sha}',
                'commit': {'message': f'fix: {sha}'},
                'author': {'login': 'octocat', 'html_url': 'https://github.com/octocat'},
            }
            for sha in shas
        ],
    }


@pytest.fixture()
def gh() -> GitHubAPIBackend:
    """Create a GitHubAPIBackend fixture."""
    return GitHubAPIBackend(owner='firebase', repo='genkit', token='fake-token')


# ---------------------------------------------------------------------------
# Init / Auth
# ---------------------------------------------------------------------------


class TestInit:
    """Tests for construction and token resolution."""

    def test_explicit_token(self) -> None:
        """Explicit token wins."""
        api = GitHubAPIBackend(owner='o', repo='r', token='tok')
        assert api._headers['Authorization'] == 'Bearer tok'

    def test_env_github_token(self) -> None:
        """GITHUB_TOKEN is the first fallback."""
        with patch.dict('os.environ', {'GITHUB_TOKEN': 'env-tok', 'GH_TOKEN': 'gh-tok'}):
            api = GitHubAPIBackend(owner='o', repo='r')
            assert api._headers['Authorization'] == 'Bearer env-tok'

    def test_env_gh_token(self) -> None:
        """GH_TOKEN is the second fallback."""
        with patch.dict('os.environ', {'GITHUB_TOKEN': '', 'GH_TOKEN': 'gh-tok'}):
            api = GitHubAPIBackend(owner='o', repo='r')
            assert api._headers['Authorization'] == 'Bearer gh-tok'

    def test_no_token_raises(self) -> None:
        """Missing token fails fast."""
        with patch.dict('os.environ', {'GITHUB_TOKEN': '', 'GH_TOKEN': ''}):
            with pytest.raises(ValueError, match='GitHub API token required'):
                GitHubAPIBackend(owner='o', repo='r')

    def test_repr_hides_token(self, gh: GitHubAPIBackend) -> None:
        """The token never appears in repr."""
        assert 'fake-token' not in repr(gh)
        assert gh.repository == 'firebase/genkit'

    def test_satisfies_forge_protocol(self, gh: GitHubAPIBackend) -> None:
        """The backend is a Forge."""
        assert isinstance(gh, Forge)

    def test_custom_base_url(self) -> None:
        """Trailing slashes are trimmed from Enterprise URLs."""
        api = GitHubAPIBackend(owner='o', repo='r', token='t', base_url='https://ghe.corp.com/api/v3/')
        assert api._repo_url == 'https://ghe.corp.com/api/v3/repos/o/r'
        assert api._graphql_url == 'https://ghe.corp.com/api/graphql'


class TestGraphqlUrl:
    """Tests for graphql_url()."""

    def test_github_com(self) -> None:
        """github.com serves GraphQL from the API host."""
        assert graphql_url('https://api.github.com') == 'https://api.github.com/graphql'

    def test_enterprise(self) -> None:
        """GHES serves GraphQL next to /api/v3."""
        assert graphql_url('https://ghe.corp.com/api/v3') == 'https://ghe.corp.com/api/graphql'


# ---------------------------------------------------------------------------
# list_recent_tags
# ---------------------------------------------------------------------------


class TestListRecentTags:
    """Tests for list_recent_tags()."""

    @pytest.mark.asyncio
    async def test_parses_nodes(self, gh: GitHubAPIBackend, monkeypatch: pytest.MonkeyPatch) -> None:
        """Tags are returned in the order GraphQL gives them."""
        body = {
            'data': {
                'repository': {
                    'refs': {
                        'nodes': [
                            {'name': 'v1.2.0', 'target': {'oid': 'aaa'}},
                            {'name': 'v1.1.0', 'target': {'oid': 'bbb'}},
                        ],
                    },
                },
            },
        }
        requests, handler = _recording(lambda r: httpx.Response(200, json=body))
        monkeypatch.setattr(_MODULE, _make_client_cm(handler))

        tags = await gh.list_recent_tags(2)

        assert [(t.name, t.commit_oid) for t in tags] == [('v1.2.0', 'aaa'), ('v1.1.0', 'bbb')]
        (request,) = requests
        assert request.method == 'POST'
        assert str(request.url) == 'https://api.github.com/graphql'
        sent = json.loads(request.content)
        assert sent['variables'] == {'owner': 'firebase', 'repo': 'genkit', 'count': 2}
        assert 'TAG_COMMIT_DATE' in sent['query']

    @pytest.mark.asyncio
    async def test_empty_repository(self, gh: GitHubAPIBackend, monkeypatch: pytest.MonkeyPatch) -> None:
        """No refs means no tags."""
        body = {'data': {'repository': {'refs': {'nodes': []}}}}
        monkeypatch.setattr(_MODULE, _make_client_cm(lambda r: httpx.Response(200, json=body)))
        assert await gh.list_recent_tags(2) == []

    @pytest.mark.asyncio
    async def test_graphql_errors(self, gh: GitHubAPIBackend, monkeypatch: pytest.MonkeyPatch) -> None:
        """GraphQL errors raise even with HTTP 200."""
        body = {'errors': [{'message': 'Could not resolve to a Repository'}]}
        monkeypatch.setattr(_MODULE, _make_client_cm(lambda r: httpx.Response(200, json=body)))
        with pytest.raises(ChangelogKitError) as exc_info:
            await gh.list_recent_tags(2)
        assert exc_info.value.code is E.FORGE_REQUEST_FAILED
        assert 'Could not resolve' in exc_info.value.message

    @pytest.mark.asyncio
    async def test_http_error(self, gh: GitHubAPIBackend, monkeypatch: pytest.MonkeyPatch) -> None:
        """Non-success responses raise FORGE_REQUEST_FAILED with the body."""
        monkeypatch.setattr(_MODULE, _make_client_cm(lambda r: httpx.Response(401, text='Bad credentials')))
        with pytest.raises(ChangelogKitError) as exc_info:
            await gh.list_recent_tags(2)
        assert exc_info.value.code is E.FORGE_REQUEST_FAILED
        assert 'Bad credentials' in exc_info.value.message


# ---------------------------------------------------------------------------
# fetch_commit_page
# ---------------------------------------------------------------------------


class TestFetchCommitPage:
    """Tests for fetch_commit_page()."""

    @pytest.mark.asyncio
    async def test_compare_request(self, gh: GitHubAPIBackend, monkeypatch: pytest.MonkeyPatch) -> None:
        """The compare endpoint is called with page and per_page."""
        requests, handler = _recording(lambda r: httpx.Response(200, json=_compare_body(2, ['a' * 40, 'b' * 40])))
        monkeypatch.setattr(_MODULE, _make_client_cm(handler))

        page = await gh.fetch_commit_page(RangeEndpoint('v1.1.0'), RangeEndpoint('v1.2.0'), 1, 100)

        (request,) = requests
        assert request.url.path == '/repos/firebase/genkit/compare/v1.1.0...v1.2.0'
        assert request.url.params['page'] == '1'
        assert request.url.params['per_page'] == '100'
        assert request.headers['Authorization'] == 'Bearer fake-token'
        assert page.total_count == 2
        assert [c.sha for c in page.commits] == ['a' * 40, 'b' * 40]
        assert page.commits[0].message == 'fix: ' + 'a' * 40
        assert page.commits[0].author_login == 'octocat'

    @pytest.mark.asyncio
    async def test_branch_names_with_slashes(self, gh: GitHubAPIBackend, monkeypatch: pytest.MonkeyPatch) -> None:
        """Slashes in refs are kept in the path."""
        requests, handler = _recording(lambda r: httpx.Response(200, json=_compare_body(0, [])))
        monkeypatch.setattr(_MODULE, _make_client_cm(handler))
        await gh.fetch_commit_page(RangeEndpoint('release/1.x'), RangeEndpoint('main'), 1, 100)
        assert requests[0].url.path.endswith('/compare/release/1.x...main')

    @pytest.mark.asyncio
    async def test_missing_author(self, gh: GitHubAPIBackend, monkeypatch: pytest.MonkeyPatch) -> None:
        """Commits by unknown users have author null."""
        body = {'total_commits': 1, 'commits': [{'sha': 'c' * 40, 'commit': {'message': 'x'}, 'author': None}]}
        monkeypatch.setattr(_MODULE, _make_client_cm(lambda r: httpx.Response(200, json=body)))
        page = await gh.fetch_commit_page(RangeEndpoint('a'), RangeEndpoint('b'), 1, 100)
        assert page.commits[0].author_login is None
        assert page.commits[0].author_url is None

    @pytest.mark.asyncio
    async def test_not_found(self, gh: GitHubAPIBackend, monkeypatch: pytest.MonkeyPatch) -> None:
        """An unknown ref is a forge error."""
        monkeypatch.setattr(_MODULE, _make_client_cm(lambda r: httpx.Response(404, text='{"message":"Not Found"}')))
        with pytest.raises(ChangelogKitError) as exc_info:
            await gh.fetch_commit_page(RangeEndpoint('a'), RangeEndpoint('b'), 1, 100)
        assert exc_info.value.code is E.FORGE_REQUEST_FAILED
        assert '404' in exc_info.value.message

    @pytest.mark.asyncio
    async def test_invalid_json(self, gh: GitHubAPIBackend, monkeypatch: pytest.MonkeyPatch) -> None:
        """A non-JSON body is a forge error."""
        monkeypatch.setattr(_MODULE, _make_client_cm(lambda r: httpx.Response(200, text='<html>')))
        with pytest.raises(ChangelogKitError) as exc_info:
            await gh.fetch_commit_page(RangeEndpoint('a'), RangeEndpoint('b'), 1, 100)
        assert 'invalid JSON' in exc_info.value.message


# ---------------------------------------------------------------------------
# Transport failures
# ---------------------------------------------------------------------------


@pytest.fixture()
def no_backoff(monkeypatch: pytest.MonkeyPatch) -> None:
    """Retry immediately instead of sleeping between attempts."""
    monkeypatch.setattr(
        'changelogkit.backends.forge.github_api.request_with_retry',
        functools.partial(request_with_retry, backoff_base=0.0),
    )


class TestTransportFailures:
    """Errors that outlive the retry loop surface as FORGE_REQUEST_FAILED."""

    @pytest.mark.asyncio
    @pytest.mark.usefixtures('no_backoff')
    async def test_persistent_503_on_compare(self, gh: GitHubAPIBackend, monkeypatch: pytest.MonkeyPatch) -> None:
        """A 503 on every attempt becomes a forge error carrying status and body."""
        requests, handler = _recording(lambda r: httpx.Response(503, text='upstream unavailable'))
        monkeypatch.setattr(_MODULE, _make_client_cm(handler))

        with pytest.raises(ChangelogKitError) as exc_info:
            await gh.fetch_commit_page(RangeEndpoint('a'), RangeEndpoint('b'), 1, 100)

        assert exc_info.value.code is E.FORGE_REQUEST_FAILED
        assert '503' in exc_info.value.message
        assert 'upstream unavailable' in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)
        assert len(requests) == MAX_RETRIES + 1

    @pytest.mark.asyncio
    @pytest.mark.usefixtures('no_backoff')
    async def test_persistent_429_on_tag_lookup(self, gh: GitHubAPIBackend, monkeypatch: pytest.MonkeyPatch) -> None:
        """Rate limiting that never clears is a forge error, not an httpx exception."""
        monkeypatch.setattr(
            _MODULE,
            _make_client_cm(lambda r: httpx.Response(429, headers={'Retry-After': '0'}, text='slow down')),
        )
        with pytest.raises(ChangelogKitError) as exc_info:
            await gh.list_recent_tags(2)
        assert exc_info.value.code is E.FORGE_REQUEST_FAILED
        assert '429' in exc_info.value.message

    @pytest.mark.asyncio
    @pytest.mark.usefixtures('no_backoff')
    async def test_connect_error(self, gh: GitHubAPIBackend, monkeypatch: pytest.MonkeyPatch) -> None:
        """A connection that never opens is a forge error."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError('connection refused', request=request)

        monkeypatch.setattr(_MODULE, _make_client_cm(handler))
        with pytest.raises(ChangelogKitError) as exc_info:
            await gh.list_recent_tags(2)
        assert exc_info.value.code is E.FORGE_REQUEST_FAILED
        assert 'ConnectError' in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_read_error_not_retried(self, gh: GitHubAPIBackend, monkeypatch: pytest.MonkeyPatch) -> None:
        """Transport errors outside the retry set are wrapped on the first attempt."""
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            raise httpx.ReadError('connection reset', request=request)

        monkeypatch.setattr(_MODULE, _make_client_cm(handler))
        with pytest.raises(ChangelogKitError) as exc_info:
            await gh.fetch_commit_page(RangeEndpoint('a'), RangeEndpoint('b'), 1, 100)
        assert exc_info.value.code is E.FORGE_REQUEST_FAILED
        assert len(requests) == 1
