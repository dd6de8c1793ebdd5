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

"""Structured error system for changelogkit.

Every error has a unique ``CK-NAMED-KEY`` code, a human-readable message,
and an optional hint with a suggested fix.

Key Concepts (ELI5)::

    ┌─────────────────────┬────────────────────────────────────────────────┐
    │ Concept             │ ELI5 Explanation                               │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ ErrorCode           │ A unique named ID like "CK-TAG-MISMATCH" for  │
    │                     │ each failure. Readable at a glance.           │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ ErrorInfo           │ A bundle of code + message + hint. Like an    │
    │                     │ error card with a fix suggestion stapled on.  │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ ChangelogKitError   │ An exception you can raise. Carries the       │
    │                     │ error card so renderers can display it.       │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ explain()           │ Looks up an error code and prints details.    │
    └─────────────────────┴────────────────────────────────────────────────┘

Code categories::

    CK-CONFIG-*       Configuration errors
    CK-RANGE-*        Commit range resolution errors
    CK-FETCH-*        Commit retrieval errors
    CK-FORGE-*        Forge (GitHub) transport errors
    CK-DELIVERY-*     Chat delivery errors

None of these are retried by the pipeline: each one aborts the run and
is surfaced to the operator as-is. Commit messages that fail to parse are
not errors at all; they are handled by the parser's fallback policy.

Usage::

    from changelogkit.errors import ChangelogKitError, E

    raise ChangelogKitError(
        code=E.TAG_MISMATCH,
        message="Provided tag doesn't match latest tag v1.2.0.",
    )
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import Enum
from typing import TextIO

from rich.console import Console
from rich.markup import escape as rich_escape


class ErrorCode(str, Enum):
    """Enumeration of all changelogkit diagnostic codes."""

    # Configuration
    CONFIG_NOT_FOUND = 'CK-CONFIG-NOT-FOUND'
    CONFIG_INVALID_KEY = 'CK-CONFIG-INVALID-KEY'
    CONFIG_INVALID_VALUE = 'CK-CONFIG-INVALID-VALUE'

    # Range resolution
    AMBIGUOUS_RANGE_INPUT = 'CK-RANGE-AMBIGUOUS-INPUT'
    TAG_MISMATCH = 'CK-RANGE-TAG-MISMATCH'
    NO_LATEST_TAG = 'CK-RANGE-NO-LATEST-TAG'
    NO_PREVIOUS_TAG = 'CK-RANGE-NO-PREVIOUS-TAG'

    # Commit retrieval
    NO_COMMITS_IN_RANGE = 'CK-FETCH-NO-COMMITS'
    FORGE_REQUEST_FAILED = 'CK-FORGE-REQUEST-FAILED'

    # Delivery
    DELIVERY_FAILED = 'CK-DELIVERY-FAILED'


# Convenience alias for shorter imports.
E = ErrorCode


@dataclass(frozen=True)
class ErrorInfo:
    """Metadata for a single error code.

    Attributes:
        code: The ``CK-NAMED-KEY`` error code.
        message: Human-readable description of what went wrong.
        hint: Optional suggestion for how to fix the error.
    """

    code: ErrorCode
    message: str
    hint: str = ''


class ChangelogKitError(Exception):
    """Base exception for all changelogkit errors.

    Args:
        code: The error code from :class:`ErrorCode`.
        message: Human-readable description of what went wrong.
        hint: Optional suggestion for how to fix the error.
    """

    def __init__(self, code: ErrorCode, message: str, hint: str = '') -> None:
        """Initialize with an error code, message, and optional hint."""
        self.info = ErrorInfo(code=code, message=message, hint=hint)
        super().__init__(f'[{code.value}] {message}')

    @property
    def code(self) -> ErrorCode:
        """The error code."""
        return self.info.code

    @property
    def message(self) -> str:
        """The bare message, without the code prefix."""
        return self.info.message

    @property
    def hint(self) -> str:
        """Suggestion for fixing this error, or empty string."""
        return self.info.hint


ERRORS: dict[ErrorCode, ErrorInfo] = {
    E.CONFIG_NOT_FOUND: ErrorInfo(
        code=E.CONFIG_NOT_FOUND,
        message='changelogkit.toml exists but could not be read or parsed.',
        hint='Check the file is valid TOML and readable.',
    ),
    E.CONFIG_INVALID_KEY: ErrorInfo(
        code=E.CONFIG_INVALID_KEY,
        message='changelogkit.toml contains an unknown or forbidden key.',
        hint='Tokens may only be passed through the environment or the command line.',
    ),
    E.CONFIG_INVALID_VALUE: ErrorInfo(
        code=E.CONFIG_INVALID_VALUE,
        message='A configuration value has the wrong type or format.',
        hint='Booleans accept true | True | TRUE | false | False | FALSE; repository is owner/name.',
    ),
    E.FORGE_REQUEST_FAILED: ErrorInfo(
        code=E.FORGE_REQUEST_FAILED,
        message='A GitHub API request failed or returned an unexpected body.',
        hint='Check the token can read the repository and that both refs exist.',
    ),
    E.AMBIGUOUS_RANGE_INPUT: ErrorInfo(
        code=E.AMBIGUOUS_RANGE_INPUT,
        message='The commit range must be given as either a tag or a (from_tag, to_tag) pair.',
        hint='Pass --tag alone, or both --from-tag and --to-tag.',
    ),
    E.TAG_MISMATCH: ErrorInfo(
        code=E.TAG_MISMATCH,
        message='The provided tag is not the most recent tag of the repository.',
        hint='Use --from-tag/--to-tag to build a changelog for an older release.',
    ),
    E.NO_LATEST_TAG: ErrorInfo(
        code=E.NO_LATEST_TAG,
        message='The repository has no tags.',
        hint='Create a tag before generating a changelog.',
    ),
    E.NO_PREVIOUS_TAG: ErrorInfo(
        code=E.NO_PREVIOUS_TAG,
        message='The repository has only one tag.',
        hint='At least 2 tags are needed (current tag + previous initial tag).',
    ),
    E.NO_COMMITS_IN_RANGE: ErrorInfo(
        code=E.NO_COMMITS_IN_RANGE,
        message='No commits were found between the two tags.',
        hint='Check that the tags are in the right order (latest first).',
    ),
    E.DELIVERY_FAILED: ErrorInfo(
        code=E.DELIVERY_FAILED,
        message='At least one Slack channel rejected the changelog.',
        hint='The error message carries the response body of every failed channel.',
    ),
}


def explain(code: str) -> str | None:
    """Return a detailed explanation for an error code.

    Args:
        code: The error code string, e.g. ``"CK-RANGE-TAG-MISMATCH"``.

    Returns:
        A formatted explanation string, or ``None`` if the code is unknown.
    """
    try:
        error_code = ErrorCode(code)
    except ValueError:
        return None

    info = ERRORS.get(error_code)
    if info is None:
        return f'{code}: No detailed explanation available.'

    lines = [f'{code}: {info.message}']
    if info.hint:
        lines.append(f'  Hint: {info.hint}')
    return '\n'.join(lines)


def render_error(exc: ChangelogKitError, *, file: TextIO | None = None) -> None:
    """Render an error in Rust-compiler style with color.

    Output format::

        error[CK-RANGE-TAG-MISMATCH]: Provided tag doesn't match latest tag v2.
          |
          = hint: Use --from-tag/--to-tag to build a changelog for an older release.

    Args:
        exc: The error to render.
        file: Output stream (defaults to ``sys.stderr``).
    """
    out = file or sys.stderr

    if out.isatty():
        console = Console(file=out, highlight=False)
        msg = rich_escape(exc.message)
        console.print(
            f'[bold red]error[/bold red][bold red]\\[{exc.code.value}][/bold red][bold]: {msg}[/bold]',
        )
        if exc.hint:
            console.print('  [dim]|[/dim]')
            console.print(f'  [dim]=[/dim] [cyan]hint[/cyan]: {rich_escape(exc.hint)}')
        console.print()
    else:
        print(f'error[{exc.code.value}]: {exc.message}', file=out)  # noqa: T201 - CLI output
        if exc.hint:
            print('  |', file=out)  # noqa: T201 - CLI output
            print(f'  = hint: {exc.hint}', file=out)  # noqa: T201 - CLI output
        print(file=out)  # noqa: T201 - CLI output


__all__ = [
    'E',
    'ERRORS',
    'ChangelogKitError',
    'ErrorCode',
    'ErrorInfo',
    'explain',
    'render_error',
]
