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

"""Tests for changelogkit.config."""

from __future__ import annotations

from pathlib import Path

import pytest
from changelogkit.config import CONFIG_FILENAME, ChangelogConfig, load_config, parse_bool, parse_list
from changelogkit.errors import ChangelogKitError, E
from changelogkit.logging import configure_logging

configure_logging(quiet=True)


def _write(root: Path, text: str) -> None:
    (root / CONFIG_FILENAME).write_text(text, encoding='utf-8')


class TestParseBool:
    """Tests for parse_bool()."""

    @pytest.mark.parametrize('value', ['true', 'True', 'TRUE'])
    def test_true(self, value: str) -> None:
        """Accepted spellings of true."""
        assert parse_bool('k', value) is True

    @pytest.mark.parametrize('value', ['false', 'False', 'FALSE'])
    def test_false(self, value: str) -> None:
        """Accepted spellings of false."""
        assert parse_bool('k', value) is False

    @pytest.mark.parametrize('value', ['yes', '1', 'tRuE', ''])
    def test_invalid(self, value: str) -> None:
        """Anything else is an error."""
        with pytest.raises(ChangelogKitError) as exc_info:
            parse_bool('reverse_order', value)
        assert exc_info.value.code is E.CONFIG_INVALID_VALUE


class TestParseList:
    """Tests for parse_list()."""

    def test_comma_string(self) -> None:
        """Items are trimmed and empties dropped."""
        assert parse_list(' chore , style,,') == ('chore', 'style')

    def test_empty_string(self) -> None:
        """An empty string is an empty list."""
        assert parse_list('') == ()

    def test_list(self) -> None:
        """Lists are cleaned the same way."""
        assert parse_list(['a ', '', 'b']) == ('a', 'b')


class TestDefaults:
    """Tests for the defaults."""

    def test_no_file_no_env(self, tmp_path: Path) -> None:
        """With nothing configured, defaults apply."""
        config = load_config(tmp_path, env={})
        assert config == ChangelogConfig()
        assert config.config_path is None
        assert config.output_format == 'json'
        assert config.delivery_enabled is False


class TestTomlFile:
    """Tests for reading changelogkit.toml."""

    def test_values(self, tmp_path: Path) -> None:
        """Typed values are read and normalised."""
        _write(
            tmp_path,
            'repository = "firebase/genkit"\n'
            'title = "Weekly"\n'
            'exclude_types = ["chore", "style"]\n'
            'reverse_order = true\n'
            'slack_channel_ids = "C1, C2"\n'
            'http_pool_size = 4\n'
            'output_format = "markdown"\n',
        )
        config = load_config(tmp_path, env={})
        assert config.repository == 'firebase/genkit'
        assert config.owner == 'firebase'
        assert config.repo == 'genkit'
        assert config.title == 'Weekly'
        assert config.exclude_types == ('chore', 'style')
        assert config.reverse_order is True
        assert config.slack_channel_ids == ('C1', 'C2')
        assert config.http_pool_size == 4
        assert config.output_format == 'markdown'
        assert config.config_path == tmp_path / CONFIG_FILENAME

    def test_unknown_key_suggests(self, tmp_path: Path) -> None:
        """Typos get a did-you-mean hint."""
        _write(tmp_path, 'exclude_type = ["chore"]\n')
        with pytest.raises(ChangelogKitError) as exc_info:
            load_config(tmp_path, env={})
        assert exc_info.value.code is E.CONFIG_INVALID_KEY
        assert "'exclude_types'" in exc_info.value.hint

    def test_secret_rejected(self, tmp_path: Path) -> None:
        """Tokens can't be committed to the file."""
        _write(tmp_path, 'slack_bot_token = "xoxb-123"\n')
        with pytest.raises(ChangelogKitError) as exc_info:
            load_config(tmp_path, env={})
        assert exc_info.value.code is E.CONFIG_INVALID_KEY
        assert 'secret' in exc_info.value.message

    def test_wrong_type(self, tmp_path: Path) -> None:
        """Wrong value types are rejected."""
        _write(tmp_path, 'http_pool_size = "ten"\n')
        with pytest.raises(ChangelogKitError) as exc_info:
            load_config(tmp_path, env={})
        assert exc_info.value.code is E.CONFIG_INVALID_VALUE

    def test_bool_is_not_an_int(self, tmp_path: Path) -> None:
        """true is not a pool size."""
        _write(tmp_path, 'http_pool_size = true\n')
        with pytest.raises(ChangelogKitError):
            load_config(tmp_path, env={})

    def test_invalid_toml(self, tmp_path: Path) -> None:
        """Unparseable files are reported."""
        _write(tmp_path, 'title = \n')
        with pytest.raises(ChangelogKitError) as exc_info:
            load_config(tmp_path, env={})
        assert exc_info.value.code is E.CONFIG_NOT_FOUND

    def test_bad_output_format(self, tmp_path: Path) -> None:
        """Only json and markdown are supported."""
        _write(tmp_path, 'output_format = "html"\n')
        with pytest.raises(ChangelogKitError) as exc_info:
            load_config(tmp_path, env={})
        assert exc_info.value.code is E.CONFIG_INVALID_VALUE

    @pytest.mark.parametrize('repository', ['genkit', '/genkit', 'firebase/', 'a/b/c'])
    def test_bad_repository(self, tmp_path: Path, repository: str) -> None:
        """Repository must be owner/name."""
        _write(tmp_path, f'repository = "{repository}"\n')
        with pytest.raises(ChangelogKitError) as exc_info:
            load_config(tmp_path, env={})
        assert exc_info.value.code is E.CONFIG_INVALID_VALUE


class TestEnvironment:
    """Tests for the GitHub Actions input layer."""

    def test_action_inputs(self, tmp_path: Path) -> None:
        """INPUT_* variables map onto config keys."""
        env = {
            'INPUT_TAG': 'v1.2.0',
            'INPUT_TITLE': 'Release v1.2.0',
            'INPUT_EXCLUDETYPES': 'chore,style',
            'INPUT_INCLUDEINVALIDCOMMITS': 'TRUE',
            'INPUT_REVERSEORDER': 'false',
            'INPUT_SLACKBOTTOKEN': 'xoxb-1',
            'INPUT_SLACKCHANNELID': 'C1, C2',
            'INPUT_TOKEN': 'ghs-1',
            'GITHUB_REPOSITORY': 'firebase/genkit',
        }
        config = load_config(tmp_path, env=env)
        assert config.tag == 'v1.2.0'
        assert config.title == 'Release v1.2.0'
        assert config.exclude_types == ('chore', 'style')
        assert config.include_invalid_commits is True
        assert config.reverse_order is False
        assert config.slack_bot_token == 'xoxb-1'
        assert config.slack_channel_ids == ('C1', 'C2')
        assert config.github_token == 'ghs-1'
        assert config.repository == 'firebase/genkit'
        assert config.delivery_enabled is True

    def test_empty_inputs_ignored(self, tmp_path: Path) -> None:
        """Unset Actions inputs arrive empty and don't override the file."""
        _write(tmp_path, 'title = "From file"\nexclude_types = ["chore"]\n')
        config = load_config(tmp_path, env={'INPUT_TITLE': '', 'INPUT_EXCLUDETYPES': '', 'INPUT_SLACKCHANNELID': ''})
        assert config.title == 'From file'
        assert config.exclude_types == ('chore',)
        assert config.slack_channel_ids == ()

    def test_env_beats_file(self, tmp_path: Path) -> None:
        """The environment overrides the file."""
        _write(tmp_path, 'title = "From file"\n')
        assert load_config(tmp_path, env={'INPUT_TITLE': 'From env'}).title == 'From env'

    def test_invalid_bool(self, tmp_path: Path) -> None:
        """Non-YAML booleans are rejected."""
        with pytest.raises(ChangelogKitError) as exc_info:
            load_config(tmp_path, env={'INPUT_REVERSEORDER': 'yes'})
        assert exc_info.value.code is E.CONFIG_INVALID_VALUE

    def test_secret_hidden_from_repr(self, tmp_path: Path) -> None:
        """Tokens are excluded from repr."""
        config = load_config(tmp_path, env={'INPUT_SLACKBOTTOKEN': 'xoxb-secret'})
        assert 'xoxb-secret' not in repr(config)

    def test_delivery_needs_channels(self, tmp_path: Path) -> None:
        """A token without channels doesn't enable delivery."""
        config = load_config(tmp_path, env={'INPUT_SLACKBOTTOKEN': 'xoxb-1'})
        assert config.delivery_enabled is False


class TestOverrides:
    """Tests for the command-line layer."""

    def test_overrides_beat_env(self, tmp_path: Path) -> None:
        """Overrides win; None means unset."""
        config = load_config(
            tmp_path,
            env={'INPUT_TAG': 'v1', 'INPUT_TITLE': 'env'},
            overrides={'tag': 'v2', 'title': None, 'reverse_order': True, 'exclude_types': 'docs, ci'},
        )
        assert config.tag == 'v2'
        assert config.title == 'env'
        assert config.reverse_order is True
        assert config.exclude_types == ('docs', 'ci')

    def test_unknown_override(self, tmp_path: Path) -> None:
        """Overrides must name real keys."""
        with pytest.raises(ValueError, match='Unknown config override'):
            load_config(tmp_path, env={}, overrides={'nope': 1})
