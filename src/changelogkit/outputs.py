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

"""Artifact sinks for the rendered changelog.

When no chat delivery is configured the changelog is emitted as a named
artifact instead:

- :class:`GitHubOutputSink` appends it to the ``$GITHUB_OUTPUT`` file as
  a step output, so later workflow steps can read
  ``steps.<id>.outputs.payload``.
- :class:`StreamSink` writes it to stdout or to a file.

Multi-line values use the heredoc form GitHub Actions expects::

    payload<<ghadelimiter_5f0c...
    {"text":"Release v1.2.0","blocks":[...]}
    ghadelimiter_5f0c...
"""

from __future__ import annotations

import os
import sys
import uuid
from pathlib import Path
from typing import Protocol, TextIO, runtime_checkable

from changelogkit.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class ArtifactSink(Protocol):
    """Destination for a named text artifact."""

    def emit(self, name: str, value: str) -> None:
        """Write ``value`` under ``name``."""
        ...


def _heredoc(name: str, value: str) -> str:
    delimiter = f'ghadelimiter_{uuid.uuid4()}'
    # A value containing the delimiter would end the heredoc early.
    while delimiter in value:
        delimiter = f'ghadelimiter_{uuid.uuid4()}'
    return f'{name}<<{delimiter}\n{value}\n{delimiter}\n'


class GitHubOutputSink:
    """Appends step outputs to the file named by ``$GITHUB_OUTPUT``.

    Args:
        path: Output file. Defaults to ``$GITHUB_OUTPUT``.
    """

    def __init__(self, path: Path | str | None = None) -> None:
        """Initialize with the output file path."""
        resolved = path or os.environ.get('GITHUB_OUTPUT', '')
        if not resolved:
            msg = 'GITHUB_OUTPUT is not set; not running in GitHub Actions?'
            raise ValueError(msg)
        self._path = Path(resolved)

    def emit(self, name: str, value: str) -> None:
        """Append ``name`` as a multi-line step output."""
        with self._path.open('a', encoding='utf-8') as handle:
            handle.write(_heredoc(name, value))
        logger.info('output_set', name=name, path=str(self._path), size=len(value))


class StreamSink:
    """Writes the artifact to a stream or a file.

    Args:
        path: File to write. When ``None``, writes to ``stream``.
        stream: Stream used when no path is given. Defaults to stdout.
    """

    def __init__(self, path: Path | str | None = None, *, stream: TextIO | None = None) -> None:
        """Initialize with a file path or a stream."""
        self._path = Path(path) if path else None
        self._stream = stream

    def emit(self, name: str, value: str) -> None:
        """Write ``value``; ``name`` is only used for logging."""
        text = value if value.endswith('\n') else value + '\n'
        if self._path is not None:
            self._path.write_text(text, encoding='utf-8')
            logger.info('artifact_written', name=name, path=str(self._path))
            return
        stream = self._stream or sys.stdout
        stream.write(text)
        stream.flush()


def default_sink(output: Path | str | None = None) -> ArtifactSink:
    """Pick a sink: an explicit file, then ``$GITHUB_OUTPUT``, then stdout."""
    if output:
        return StreamSink(output)
    if os.environ.get('GITHUB_OUTPUT'):
        return GitHubOutputSink()
    return StreamSink()


__all__ = [
    'ArtifactSink',
    'GitHubOutputSink',
    'StreamSink',
    'default_sink',
]
