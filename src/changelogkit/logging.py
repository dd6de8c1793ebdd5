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

"""Structured logging for changelogkit.

Configures `structlog <https://www.structlog.org/>`_ with two output modes:

- **Console** (default): human-readable output, colored on a TTY.
- **JSON** (``--json-log``): one JSON object per line, for CI log
  collectors.

Both modes write to stderr so stdout stays clean for the rendered
artifact (e.g. ``changelogkit generate --tag v1.2.0 | jq .blocks``).

When running inside GitHub Actions, warning and error lines are prefixed
with ``::warning::`` / ``::error::`` workflow commands so they surface as
annotations on the run summary.

Every line logged during a run carries the repository and tag range once
:func:`bind_run_context` has been called.

Usage::

    from changelogkit.logging import bind_run_context, configure_logging, get_logger

    configure_logging(verbose=True)
    bind_run_context(repository='firebase/genkit')
    log = get_logger(__name__)
    log.info('range_resolved', latest='v1.2.0', previous='v1.1.0')
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog

# Workflow command prefixes understood by the GitHub Actions runner.
_ACTIONS_ANNOTATIONS: dict[str, str] = {
    'warning': '::warning::',
    'error': '::error::',
    'critical': '::error::',
}


def _running_in_actions() -> bool:
    return os.environ.get('GITHUB_ACTIONS', '').lower() == 'true'


def _annotate_for_actions(
    _logger: Any,  # noqa: ANN401 - structlog processor signature
    method_name: str,
    rendered: str,
) -> str:
    """Prefix an already-rendered line with an Actions workflow command."""
    prefix = _ACTIONS_ANNOTATIONS.get(method_name, '')
    if not prefix:
        return rendered
    # Workflow commands are line-oriented; escape embedded newlines.
    return prefix + rendered.replace('%', '%25').replace('\r', '%0D').replace('\n', '%0A')


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    json_log: bool = False,
    github_actions: bool | None = None,
) -> None:
    """Configure structlog for changelogkit.

    Should be called once at startup, before any logging calls.

    Args:
        verbose: Enable debug-level output (per-commit parse decisions).
        quiet: Only warnings and errors.
        json_log: Use JSON output instead of console output.
        github_actions: Emit Actions annotations for warnings and errors.
            Defaults to the ``GITHUB_ACTIONS`` environment variable.
    """
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    if github_actions is None:
        github_actions = _running_in_actions()

    logging.basicConfig(
        format='%(message)s',
        stream=sys.stderr,
        level=level,
        force=True,
    )

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt='iso'),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_log:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty() and not github_actions)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter_processors: list[Any] = [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
        renderer,
    ]
    if github_actions and not json_log:
        formatter_processors.append(_annotate_for_actions)

    formatter = structlog.stdlib.ProcessorFormatter(processors=formatter_processors)
    for handler in logging.root.handlers:
        handler.setFormatter(formatter)


def bind_run_context(**values: str) -> None:
    """Attach key-value context to every log line of the current run.

    Empty values are skipped so partially-known context (e.g. before the
    range is resolved) doesn't clutter the output.
    """
    structlog.contextvars.bind_contextvars(**{k: v for k, v in values.items() if v})


def clear_run_context() -> None:
    """Drop everything bound by :func:`bind_run_context`."""
    structlog.contextvars.clear_contextvars()


def get_logger(name: str = 'changelogkit') -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger.

    Args:
        name: Logger name, used for filtering and identification.
    """
    return structlog.get_logger(name)


__all__ = [
    'bind_run_context',
    'clear_run_context',
    'configure_logging',
    'get_logger',
]
