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

"""CLI entry point for changelogkit.

Constructs backend instances from the loaded configuration and injects
them into the pipeline.

Subcommands::

    changelogkit generate   Build the changelog and deliver or emit it
    changelogkit explain    Explain an error code

Usage::

    # Changelog for the tag that was just pushed, printed as JSON:
    changelogkit generate --repo firebase/genkit --tag v1.2.0

    # Explicit range, as Markdown, into a file:
    changelogkit generate --from-tag v1.2.0 --to-tag v1.1.0 --format markdown --output CHANGES.md

    # Post to Slack (token from the environment):
    INPUT_SLACKBOTTOKEN=xoxb-... changelogkit generate --tag v1.2.0 --slack-channel-ids C012,C034

    # Explain an error:
    changelogkit explain CK-RANGE-TAG-MISMATCH
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence
from pathlib import Path

from rich_argparse import RichHelpFormatter

from changelogkit import __version__
from changelogkit.backends.chat import SlackAPIBackend
from changelogkit.backends.forge import GitHubAPIBackend
from changelogkit.config import OUTPUT_FORMATS, ChangelogConfig, load_config
from changelogkit.errors import E, ChangelogKitError, explain, render_error
from changelogkit.logging import bind_run_context, configure_logging, get_logger
from changelogkit.outputs import default_sink
from changelogkit.pipeline import run

logger = get_logger(__name__)


def _create_forge(config: ChangelogConfig) -> GitHubAPIBackend:
    """Build the GitHub backend, turning setup problems into config errors."""
    if not config.repository:
        raise ChangelogKitError(
            code=E.CONFIG_INVALID_VALUE,
            message='No repository configured.',
            hint="Pass --repo owner/name, set 'repository' in changelogkit.toml, or set GITHUB_REPOSITORY.",
        )
    try:
        return GitHubAPIBackend(
            config.owner,
            config.repo,
            token=config.github_token,
            base_url=config.api_url,
            pool_size=config.http_pool_size,
        )
    except ValueError as exc:
        raise ChangelogKitError(
            code=E.CONFIG_INVALID_VALUE,
            message=str(exc),
            hint='Set INPUT_TOKEN, GITHUB_TOKEN or GH_TOKEN.',
        ) from exc


def _overrides(args: argparse.Namespace) -> dict[str, object]:
    """Map ``generate`` flags onto config keys; unset flags are ``None``."""
    return {
        'tag': args.tag,
        'from_tag': args.from_tag,
        'to_tag': args.to_tag,
        'title': args.title,
        'exclude_types': args.exclude_types,
        'include_invalid_commits': args.include_invalid_commits,
        'reverse_order': args.reverse_order,
        'repository': args.repo,
        'slack_channel_ids': args.slack_channel_ids,
        'output_format': args.format,
    }


async def _cmd_generate(args: argparse.Namespace) -> int:
    """Handle the ``generate`` subcommand."""
    root = Path(args.config) if args.config else Path.cwd()
    config = load_config(root, overrides=_overrides(args))
    forge = _create_forge(config)

    chat = None
    sink = None
    if config.delivery_enabled:
        chat = SlackAPIBackend(config.slack_bot_token, pool_size=config.http_pool_size)
    else:
        sink = default_sink(args.output)

    bind_run_context(repository=config.repository, tag=config.tag or config.from_tag)
    outcome = await run(config, forge, chat=chat, sink=sink, dry_run=args.dry_run)

    if outcome.delivery is not None:
        logger.info('changelog_delivered', summary=outcome.delivery.summary(), dry_run=args.dry_run)
    return 0


def _cmd_explain(args: argparse.Namespace) -> int:
    """Handle the ``explain`` subcommand."""
    result = explain(args.code)
    if result is None:
        print(f'Unknown error code: {args.code}')  # noqa: T201 - CLI output
        return 1
    print(result)  # noqa: T201 - CLI output
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser.

    Returns:
        Configured :class:`argparse.ArgumentParser`.
    """
    RichHelpFormatter.styles['argparse.groups'] = 'bold yellow'
    parser = argparse.ArgumentParser(
        prog='changelogkit',
        description='Categorised changelogs from Conventional Commits.',
        formatter_class=RichHelpFormatter,
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}',
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Show debug logs.')
    parser.add_argument('--quiet', '-q', action='store_true', help='Only show warnings and errors.')
    parser.add_argument('--json-log', action='store_true', help='Emit logs as JSON lines.')
    parser.add_argument(
        '--config',
        metavar='DIR',
        default=None,
        help='Directory containing changelogkit.toml. Defaults to the current directory.',
    )

    subparsers = parser.add_subparsers(dest='command')

    generate_parser = subparsers.add_parser(
        'generate',
        help='Build the changelog, then post it to Slack or emit it as an artifact.',
        formatter_class=RichHelpFormatter,
    )
    range_group = generate_parser.add_argument_group('range')
    range_group.add_argument('--tag', metavar='TAG', help='Tag just released; compared against the tag before it.')
    range_group.add_argument('--from-tag', metavar='REF', help='Newer end of an explicit range.')
    range_group.add_argument('--to-tag', metavar='REF', help='Older end of an explicit range.')

    content_group = generate_parser.add_argument_group('content')
    content_group.add_argument('--title', help='Header text for the changelog.')
    content_group.add_argument(
        '--exclude-types',
        metavar='TYPES',
        help='Comma-separated commit types whose categories are skipped (e.g. chore,style).',
    )
    content_group.add_argument(
        '--include-invalid-commits',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='List non-conventional commits under "Other Changes" instead of dropping them.',
    )
    content_group.add_argument(
        '--reverse-order',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='List commits oldest-first within each category.',
    )

    output_group = generate_parser.add_argument_group('output')
    output_group.add_argument('--repo', metavar='OWNER/NAME', help='GitHub repository. Defaults to $GITHUB_REPOSITORY.')
    output_group.add_argument(
        '--slack-channel-ids',
        metavar='IDS',
        help='Comma-separated Slack channel ids to post to (requires a bot token).',
    )
    output_group.add_argument(
        '--format',
        choices=sorted(OUTPUT_FORMATS),
        default=None,
        help='Artifact format when not posting to Slack (default: json).',
    )
    output_group.add_argument(
        '--output',
        '-o',
        metavar='FILE',
        help='Write the artifact to FILE instead of $GITHUB_OUTPUT or stdout.',
    )
    output_group.add_argument(
        '--dry-run',
        action='store_true',
        help='Log what would be posted to Slack without posting.',
    )

    explain_parser = subparsers.add_parser(
        'explain',
        help='Explain an error code.',
    )
    explain_parser.add_argument(
        'code',
        help='Error code to explain (e.g., CK-RANGE-TAG-MISMATCH).',
    )

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point.

    Args:
        argv: Arguments to parse. Defaults to ``sys.argv[1:]``.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet, json_log=args.json_log)

    try:
        command = args.command
        if command == 'generate':
            return asyncio.run(_cmd_generate(args))
        if command == 'explain':
            return _cmd_explain(args)

        parser.print_help()  # noqa: T201 - CLI output
        print(  # noqa: T201 - CLI output
            f'\n{parser.prog}: error: please provide a command',
            file=sys.stderr,
        )
        return 2

    except ChangelogKitError as exc:
        render_error(exc)
        return 1
    except KeyboardInterrupt:
        logger.info('interrupted')
        return 130


def _main() -> None:
    """Wrapper for pyproject.toml [project.scripts] entry point."""
    sys.exit(main())


__all__ = [
    'build_parser',
    'main',
]
