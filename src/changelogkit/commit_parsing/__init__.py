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

"""Commit message parsing.

This subpackage provides a protocol-based commit parsing system.
The :class:`CommitParser` protocol turns a message into its abstract
Conventional Commit form; :func:`parse_commits` applies it to a whole
commit range and decides what happens to messages that don't parse.

Built-in parsers:

- :class:`ConventionalCommitParser`: ``type(scope)!: subject`` plus
  body and footer notes.

Usage::

    from changelogkit.commit_parsing import RawCommit, parse_commits

    log = parse_commits(
        [RawCommit(sha='abc1234...', message='fix(auth): patch token leak')],
        include_invalid=True,
    )
    assert log.commits[0].type == 'fix'
    assert log.commits[0].scope == 'auth'
"""

from changelogkit.commit_parsing._commits import (
    ParsedLog,
    fallback_commit,
    parse_commit,
    parse_commits,
)
from changelogkit.commit_parsing._conventional import ConventionalCommitParser
from changelogkit.commit_parsing._types import (
    BREAKING_CHANGE,
    FALLBACK_TYPE,
    BreakingChange,
    CommitNote,
    CommitParser,
    ConventionalMessage,
    Parsed,
    ParsedCommit,
    ParseResult,
    RawCommit,
    Rejected,
)

__all__ = [
    'BREAKING_CHANGE',
    'FALLBACK_TYPE',
    'BreakingChange',
    'CommitNote',
    'CommitParser',
    'ConventionalCommitParser',
    'ConventionalMessage',
    'Parsed',
    'ParseResult',
    'ParsedCommit',
    'ParsedLog',
    'RawCommit',
    'Rejected',
    'fallback_commit',
    'parse_commit',
    'parse_commits',
]
