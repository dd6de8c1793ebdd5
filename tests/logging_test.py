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

"""Tests for changelogkit.logging module."""

from __future__ import annotations

import io
import logging

import structlog
from changelogkit.logging import (
    _annotate_for_actions,
    bind_run_context,
    clear_run_context,
    configure_logging,
    get_logger,
)


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_default_level_is_info(self) -> None:
        """Default logging level should be INFO."""
        configure_logging(github_actions=False)
        assert logging.root.level == logging.INFO

    def test_verbose_sets_debug(self) -> None:
        """Verbose flag should set DEBUG level."""
        configure_logging(verbose=True, github_actions=False)
        assert logging.root.level == logging.DEBUG

    def test_quiet_sets_warning(self) -> None:
        """Quiet flag should set WARNING level."""
        configure_logging(quiet=True, github_actions=False)
        assert logging.root.level == logging.WARNING

    def test_quiet_wins_over_verbose(self) -> None:
        """Quiet takes precedence when both are set."""
        configure_logging(verbose=True, quiet=True, github_actions=False)
        assert logging.root.level == logging.WARNING

    def test_json_log_does_not_crash(self) -> None:
        """JSON log mode should configure without errors."""
        configure_logging(json_log=True, github_actions=False)
        log = get_logger()
        log.info('test_json', key='value')

    def test_actions_mode_does_not_crash(self) -> None:
        """Actions annotations should configure without errors."""
        configure_logging(github_actions=True)
        get_logger().warning('test_warning', key='value')


class TestAnnotateForActions:
    """Tests for the GitHub Actions annotation processor."""

    def test_warning_prefixed(self) -> None:
        """Warnings become ::warning:: workflow commands."""
        assert _annotate_for_actions(None, 'warning', 'slow') == '::warning::slow'

    def test_error_prefixed(self) -> None:
        """Errors and criticals become ::error:: workflow commands."""
        assert _annotate_for_actions(None, 'error', 'bad') == '::error::bad'
        assert _annotate_for_actions(None, 'critical', 'worse') == '::error::worse'

    def test_info_untouched(self) -> None:
        """Info lines pass through unchanged."""
        assert _annotate_for_actions(None, 'info', 'a\nb') == 'a\nb'

    def test_newlines_escaped(self) -> None:
        """Multi-line messages are escaped onto one line."""
        assert _annotate_for_actions(None, 'warning', '50%\r\nnext') == '::warning::50%25%0D%0Anext'


class TestRunContext:
    """Tests for bind_run_context() and clear_run_context()."""

    def test_bound_values_reach_output(self) -> None:
        """Bound context is merged into every event."""
        configure_logging(json_log=True, github_actions=False)
        stream = io.StringIO()
        for handler in logging.root.handlers:
            handler.setStream(stream)  # type: ignore[attr-defined]
        try:
            bind_run_context(repository='o/r', tag='')
            get_logger('ctx').info('with_context')
            assert '"repository": "o/r"' in stream.getvalue()
            assert '"tag"' not in stream.getvalue()
        finally:
            clear_run_context()

    def test_clear(self) -> None:
        """Clearing removes every bound value."""
        bind_run_context(repository='o/r')
        clear_run_context()
        assert structlog.contextvars.get_contextvars() == {}


class TestGetLogger:
    """Tests for get_logger()."""

    def test_returns_logger(self) -> None:
        """get_logger should return a usable structlog logger."""
        configure_logging(github_actions=False)
        log = get_logger('test')
        assert log is not None

    def test_default_name(self) -> None:
        """Default logger name should be 'changelogkit'."""
        configure_logging(github_actions=False)
        log = get_logger()
        assert log is not None
