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

"""Configuration reader for changelogkit.

Builds a validated :class:`ChangelogConfig` from three layers, lowest
precedence first:

1. ``changelogkit.toml`` in the project root (flat top-level keys).
2. The environment: GitHub Actions inputs (``INPUT_TAG``,
   ``INPUT_FROMTAG``, ...) plus ``GITHUB_REPOSITORY`` and
   ``GITHUB_API_URL``.
3. Explicit overrides (the CLI flags).

Key Concepts (ELI5)::

    ┌─────────────────────────┬────────────────────────────────────────────┐
    │ Concept                 │ ELI5 Explanation                           │
    ├─────────────────────────┼────────────────────────────────────────────┤
    │ ChangelogConfig         │ Every knob for one run: which tags, which │
    │                         │ categories to skip, where to deliver.     │
    ├─────────────────────────┼────────────────────────────────────────────┤
    │ Layering                │ File < environment < CLI. The last one    │
    │                         │ that sets a key wins.                     │
    ├─────────────────────────┼────────────────────────────────────────────┤
    │ Secrets                 │ Tokens never come from the TOML file, so  │
    │                         │ it is always safe to commit.              │
    ├─────────────────────────┼────────────────────────────────────────────┤
    │ Fuzzy key matching      │ If you typo a config key, we suggest the  │
    │                         │ closest valid key.                        │
    └─────────────────────────┴────────────────────────────────────────────┘

Example ``changelogkit.toml``::

    repository = "firebase/genkit"
    title = "Weekly changelog"
    exclude_types = ["chore", "style"]
    reverse_order = true
    slack_channel_ids = ["C0123456"]
"""

from __future__ import annotations

import difflib
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomlkit
import tomlkit.exceptions

from changelogkit.errors import E, ChangelogKitError
from changelogkit.logging import get_logger
from changelogkit.net import DEFAULT_POOL_SIZE

logger = get_logger(__name__)

CONFIG_FILENAME = 'changelogkit.toml'

DEFAULT_API_URL = 'https://api.github.com'

OUTPUT_FORMATS: frozenset[str] = frozenset({'json', 'markdown'})

# Keys accepted in changelogkit.toml.
VALID_KEYS: frozenset[str] = frozenset({
    'api_url',
    'exclude_types',
    'from_tag',
    'http_pool_size',
    'include_invalid_commits',
    'output_format',
    'repository',
    'reverse_order',
    'slack_channel_ids',
    'tag',
    'title',
    'to_tag',
})

# Keys that may only come from the environment or the command line.
SECRET_KEYS: frozenset[str] = frozenset({'github_token', 'slack_bot_token'})

# Environment variable -> config key.
ENV_KEYS: dict[str, str] = {
    'INPUT_TAG': 'tag',
    'INPUT_FROMTAG': 'from_tag',
    'INPUT_TOTAG': 'to_tag',
    'INPUT_TITLE': 'title',
    'INPUT_EXCLUDETYPES': 'exclude_types',
    'INPUT_INCLUDEINVALIDCOMMITS': 'include_invalid_commits',
    'INPUT_REVERSEORDER': 'reverse_order',
    'INPUT_SLACKBOTTOKEN': 'slack_bot_token',
    'INPUT_SLACKCHANNELID': 'slack_channel_ids',
    'INPUT_TOKEN': 'github_token',
    'GITHUB_REPOSITORY': 'repository',
    'GITHUB_API_URL': 'api_url',
}

_TYPE_MAP: dict[str, type | tuple[type, ...]] = {
    'api_url': str,
    'exclude_types': (list, str),
    'from_tag': str,
    'http_pool_size': int,
    'include_invalid_commits': (bool, str),
    'output_format': str,
    'repository': str,
    'reverse_order': (bool, str),
    'slack_channel_ids': (list, str),
    'tag': str,
    'title': str,
    'to_tag': str,
    'github_token': str,
    'slack_bot_token': str,
}

_BOOL_KEYS = frozenset({'include_invalid_commits', 'reverse_order'})
_LIST_KEYS = frozenset({'exclude_types', 'slack_channel_ids'})

# The YAML 1.2 core schema booleans, as GitHub Actions accepts them.
_TRUE_VALUES = frozenset({'true', 'True', 'TRUE'})
_FALSE_VALUES = frozenset({'false', 'False', 'FALSE'})


@dataclass(frozen=True)
class ChangelogConfig:
    """Validated configuration for a changelogkit run.

    Attributes:
        tag: Single tag to compare against its predecessor.
        from_tag: Newer end of an explicit range.
        to_tag: Older end of an explicit range.
        title: Changelog header text; empty for no header.
        exclude_types: Commit types whose categories are skipped.
        include_invalid_commits: Keep non-conventional commits under
            "Other Changes" instead of dropping them.
        reverse_order: List commits oldest-first within each category.
        slack_channel_ids: Channels to deliver to.
        repository: ``owner/name`` of the GitHub repository.
        api_url: GitHub REST API base URL.
        http_pool_size: Max connections for the httpx connection pool.
        output_format: Artifact format, ``"json"`` or ``"markdown"``.
        slack_bot_token: Slack bot token (secret).
        github_token: GitHub API token (secret).
        config_path: Path to the changelogkit.toml that was loaded.
    """

    tag: str = ''
    from_tag: str = ''
    to_tag: str = ''
    title: str = ''
    exclude_types: tuple[str, ...] = ()
    include_invalid_commits: bool = False
    reverse_order: bool = False
    slack_channel_ids: tuple[str, ...] = ()
    repository: str = ''
    api_url: str = DEFAULT_API_URL
    http_pool_size: int = DEFAULT_POOL_SIZE
    output_format: str = 'json'
    slack_bot_token: str = field(default='', repr=False)
    github_token: str = field(default='', repr=False)
    config_path: Path | None = None

    @property
    def delivery_enabled(self) -> bool:
        """Whether the changelog should be posted to Slack."""
        return bool(self.slack_bot_token and self.slack_channel_ids)

    @property
    def owner(self) -> str:
        """Repository owner, or ``''`` when no repository is set."""
        return self.repository.partition('/')[0]

    @property
    def repo(self) -> str:
        """Repository name, or ``''`` when no repository is set."""
        return self.repository.partition('/')[2]


def parse_bool(key: str, value: str) -> bool:
    """Parse an Actions-style boolean input.

    Raises:
        ChangelogKitError: ``CONFIG_INVALID_VALUE`` for anything other
            than ``true``/``True``/``TRUE``/``false``/``False``/``FALSE``.
    """
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ChangelogKitError(
        code=E.CONFIG_INVALID_VALUE,
        message=f"'{key}' must be a boolean, got {value!r}",
        hint='Use one of: true | True | TRUE | false | False | FALSE.',
    )


def parse_list(value: str | list[Any]) -> tuple[str, ...]:
    """Split a comma-separated string (or clean a list), dropping empty items."""
    items = value.split(',') if isinstance(value, str) else value
    return tuple(s for s in (str(item).strip() for item in items) if s)


def _validate_value_type(key: str, value: Any, *, context: str) -> None:  # noqa: ANN401
    """Raise if a config value has the wrong type."""
    expected = _TYPE_MAP.get(key)
    if expected is None:
        return
    # bool is an int subclass; reject it where a count is expected.
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        type_name = expected.__name__ if isinstance(expected, type) else ' or '.join(t.__name__ for t in expected)
        raise ChangelogKitError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"'{key}' must be {type_name}, got {type(value).__name__}",
            hint=f'Check the value of {key} in {context}.',
        )


def _normalize(key: str, value: Any, *, context: str) -> Any:  # noqa: ANN401
    """Type-check one raw value and convert it to its config type."""
    _validate_value_type(key, value, context=context)
    if key in _BOOL_KEYS and isinstance(value, str):
        return parse_bool(key, value.strip())
    if key in _LIST_KEYS:
        return parse_list(value)
    if isinstance(value, str):
        return value.strip()
    return value


def _read_file(root: Path) -> tuple[dict[str, Any], Path | None]:
    """Read and validate ``changelogkit.toml``; missing file is empty."""
    config_path = root / CONFIG_FILENAME
    if not config_path.is_file():
        logger.debug('no_changelogkit_config', path=str(config_path))
        return {}, None

    try:
        text = config_path.read_text(encoding='utf-8')
    except OSError as exc:
        raise ChangelogKitError(
            code=E.CONFIG_NOT_FOUND,
            message=f'Failed to read {config_path}: {exc}',
        ) from exc

    try:
        raw: dict[str, Any] = tomlkit.parse(text).unwrap()
    except tomlkit.exceptions.TOMLKitError as exc:
        raise ChangelogKitError(
            code=E.CONFIG_NOT_FOUND,
            message=f'Failed to parse {config_path}: {exc}',
        ) from exc

    for key in raw:
        if key in SECRET_KEYS:
            raise ChangelogKitError(
                code=E.CONFIG_INVALID_KEY,
                message=f"'{key}' is a secret and cannot be set in {CONFIG_FILENAME}",
                hint='Pass it through the environment instead (INPUT_SLACKBOTTOKEN, INPUT_TOKEN or GITHUB_TOKEN).',
            )
        if key not in VALID_KEYS:
            suggestion = difflib.get_close_matches(key, VALID_KEYS, n=1, cutoff=0.6)
            hint = f"Did you mean '{suggestion[0]}'?" if suggestion else 'Check the changelogkit docs for valid keys.'
            raise ChangelogKitError(
                code=E.CONFIG_INVALID_KEY,
                message=f"Unknown key '{key}' in {CONFIG_FILENAME}",
                hint=hint,
            )

    values = {key: _normalize(key, value, context=CONFIG_FILENAME) for key, value in raw.items()}
    return values, config_path


def _read_env(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect config values from the environment, skipping empty ones."""
    values: dict[str, Any] = {}
    for var, key in ENV_KEYS.items():
        value = env.get(var, '').strip()
        # Actions sets every declared input, so unset ones arrive empty.
        if not value:
            continue
        values[key] = _normalize(key, value, context=f'${var}')
    return values


def load_config(
    root: Path,
    *,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> ChangelogConfig:
    """Load and validate configuration.

    Args:
        root: Directory containing ``changelogkit.toml``.
        env: Environment to read inputs from. Defaults to ``os.environ``.
        overrides: Highest-precedence values (typically CLI flags);
            ``None`` values are ignored.

    Returns:
        A validated :class:`ChangelogConfig`.

    Raises:
        ChangelogKitError: If any layer contains invalid config.
    """
    values, config_path = _read_file(root)
    values.update(_read_env(os.environ if env is None else env))

    for key, value in (overrides or {}).items():
        if value is None:
            continue
        if key not in VALID_KEYS and key not in SECRET_KEYS:
            msg = f'Unknown config override: {key!r}'
            raise ValueError(msg)
        values[key] = _normalize(key, value, context='the command line')

    output_format = values.get('output_format', 'json')
    if output_format not in OUTPUT_FORMATS:
        raise ChangelogKitError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"'output_format' must be one of {sorted(OUTPUT_FORMATS)}, got {output_format!r}",
        )

    repository = values.get('repository', '')
    if repository:
        owner, _, name = repository.partition('/')
        if not owner or not name or '/' in name:
            raise ChangelogKitError(
                code=E.CONFIG_INVALID_VALUE,
                message=f"'repository' must look like 'owner/name', got {repository!r}",
            )

    pool_size = values.get('http_pool_size', DEFAULT_POOL_SIZE)
    if pool_size < 1:
        raise ChangelogKitError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"'http_pool_size' must be at least 1, got {pool_size}",
        )

    config = ChangelogConfig(**values, config_path=config_path)
    logger.debug(
        'config_loaded',
        path=str(config_path) if config_path else None,
        repository=config.repository,
        delivery_enabled=config.delivery_enabled,
    )
    return config


__all__ = [
    'CONFIG_FILENAME',
    'ENV_KEYS',
    'OUTPUT_FORMATS',
    'SECRET_KEYS',
    'VALID_KEYS',
    'ChangelogConfig',
    'load_config',
    'parse_bool',
    'parse_list',
]
