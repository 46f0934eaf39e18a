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

"""CLI entry point for bundlekit.

Subcommands::

    bundlekit build      Build every eligible package (or the named ones)
    bundlekit discover   List the workspace packages
    bundlekit explain    Explain an error code

Usage::

    # Build everything:
    bundlekit build

    # Build two packages and print their publish manifests:
    bundlekit build core ui --format json

    # Explain an error:
    bundlekit explain BK-DEPS-MISSING
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import sys
from pathlib import Path

from rich_argparse import RichHelpFormatter

from bundlekit import __version__
from bundlekit.config import CONFIG_FILENAME, load_config
from bundlekit.errors import E, BundleKitError, explain, render_error, render_warning
from bundlekit.logging import configure_logging, get_logger
from bundlekit.manifest import MANIFEST_FILENAME
from bundlekit.orchestrator import build_workspace
from bundlekit.ui import LogProgressUI, print_summary
from bundlekit.workspace import load_registry

logger = get_logger(__name__)


def _find_workspace_root(start: Path | None = None) -> Path:
    """Find the workspace root by walking up from ``start`` (default: CWD).

    The nearest directory with ``bundlekit.toml`` wins. Without one, the
    nearest directory holding both ``package.json`` and
    ``tsconfig.json`` is used.

    Raises:
        BundleKitError: If no workspace root is found.
    """
    cwd = (start or Path.cwd()).resolve()
    for parent in [cwd, *cwd.parents]:
        if (parent / CONFIG_FILENAME).is_file():
            return parent
    for parent in [cwd, *cwd.parents]:
        if (parent / MANIFEST_FILENAME).is_file() and (parent / 'tsconfig.json').is_file():
            return parent
    raise BundleKitError(
        E.WORKSPACE_NOT_FOUND,
        f'Could not find {CONFIG_FILENAME}, or a directory with package.json and tsconfig.json.',
        hint='Run bundlekit from inside the workspace, or pass --root.',
    )


def _workspace_root(args: argparse.Namespace) -> Path:
    root = getattr(args, 'root', None)
    return Path(root).resolve() if root else _find_workspace_root()


async def _cmd_build(args: argparse.Namespace) -> int:
    """Handle the ``build`` subcommand."""
    root = _workspace_root(args)
    config = load_config(root)
    if args.fail_fast:
        config = dataclasses.replace(config, fail_fast=True)

    result = await build_workspace(
        root,
        config,
        only=args.directories or None,
        observer=LogProgressUI(),
    )

    for warning in result.warnings:
        render_warning(warning)
    for failure in result.failed:
        print(f'error[{failure.code.value}]: {failure.message}', file=sys.stderr)  # noqa: T201 - CLI output

    if args.format == 'json':
        data = {directory: m.to_dict() for directory, m in result.publish_manifests.items()}
        print(json.dumps(data, indent=2))  # noqa: T201 - CLI output
    else:
        print_summary(result)
    return 0 if result.ok else 1


async def _cmd_discover(args: argparse.Namespace) -> int:
    """Handle the ``discover`` subcommand."""
    root = _workspace_root(args)
    config = load_config(root)
    registry = await load_registry(root, config.packages_dir, config.exclude)

    rows: list[dict[str, object]] = [
        {
            'directory': directory,
            'name': pkg.name,
            'version': pkg.manifest.version,
            'private': not pkg.is_public,
            'excluded': False,
        }
        for directory, pkg in sorted(registry.by_directory.items())
    ]
    rows.extend(
        {'directory': directory, 'name': None, 'version': None, 'private': None, 'excluded': True}
        for directory in sorted(config.exclude)
    )

    if args.format == 'json':
        print(json.dumps(rows, indent=2))  # noqa: T201 - CLI output
        return 0
    for row in rows:
        if row['excluded']:
            print(f'  {row["directory"]}/ [excluded]')  # noqa: T201 - CLI output
            continue
        private = ' [private]' if row['private'] else ''
        print(f'  {row["directory"]}/ {row["name"]} {row["version"]}{private}')  # noqa: T201 - CLI output
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
        prog='bundlekit',
        description='Bundle, audit and prepare the packages of a JavaScript monorepo for publishing.',
        formatter_class=RichHelpFormatter,
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}',
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging.')
    verbosity.add_argument('--quiet', '-q', action='store_true', help='Only log warnings and errors.')
    parser.add_argument('--json-log', action='store_true', help='Log one JSON object per line.')
    parser.add_argument(
        '--root',
        metavar='DIR',
        default=None,
        help=f'Workspace root. Defaults to the nearest directory with {CONFIG_FILENAME}.',
    )

    subparsers = parser.add_subparsers(dest='command')

    build_cmd = subparsers.add_parser(
        'build',
        help='Build every eligible package, or only the named directories.',
        formatter_class=RichHelpFormatter,
    )
    build_cmd.add_argument(
        'directories',
        nargs='*',
        metavar='DIR',
        help='Package directory names to build (default: all).',
    )
    build_cmd.add_argument(
        '--fail-fast',
        action='store_true',
        help='Stop at the first package that fails.',
    )
    build_cmd.add_argument(
        '--format',
        choices=['table', 'json'],
        default='table',
        help='Output format (default: table). json prints the publish manifests.',
    )

    discover_cmd = subparsers.add_parser(
        'discover',
        help='List workspace packages.',
        formatter_class=RichHelpFormatter,
    )
    discover_cmd.add_argument(
        '--format',
        choices=['table', 'json'],
        default='table',
        help='Output format (default: table).',
    )

    explain_cmd = subparsers.add_parser(
        'explain',
        help='Explain an error code.',
        formatter_class=RichHelpFormatter,
    )
    explain_cmd.add_argument('code', help='Error code, e.g. BK-DEPS-MISSING.')

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet, json_log=args.json_log)

    try:
        command = args.command
        if command == 'build':
            return asyncio.run(_cmd_build(args))
        if command == 'discover':
            return asyncio.run(_cmd_discover(args))
        if command == 'explain':
            return _cmd_explain(args)

        parser.print_help()  # noqa: T201 - CLI output
        print(  # noqa: T201 - CLI output
            f'\n{parser.prog}: error: please provide a command',
            file=sys.stderr,
        )
        return 2

    except BundleKitError as exc:
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
