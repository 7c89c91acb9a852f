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


"""Command-line entry point.

Usage::

    cratelicense [--avoid-dev-deps] [--avoid-build-deps] [--avoid-proc-macros]
                 [--direct-deps-only] [--root-only]
                 [--tsv | --json | --gitlab | --do-not-bundle] [--authors]
                 [--manifest-path PATH] [--metadata-file FILE] ...

Also works as a cargo subcommand (``cargo license ...``) when installed
as ``cargo-license``: cargo passes ``license`` as the first argument,
which is dropped.

Every filtering flag and ``--authors`` has a ``--no-`` form that overrides
a ``true`` in ``cratelicense.toml``.

Exit codes: 0 on success, 1 when the report cannot be produced, 2 on
usage errors.
"""

from __future__ import annotations

import argparse
import dataclasses
import sys
from collections.abc import Sequence
from pathlib import Path

from cratelicense.config import (
    COLOR_CHOICES,
    CONFIG_FILENAME,
    CrateLicenseConfig,
    load_config,
    write_config,
)
from cratelicense.details import DependencyDetails, collect_dependencies
from cratelicense.errors import CrateLicenseError
from cratelicense.logging import configure_logging, get_logger, redact
from cratelicense.metadata import MetadataOptions, load_metadata, run_cargo_metadata
from cratelicense.render import (
    format_grouped,
    format_per_line,
    should_use_color,
    to_gitlab,
    to_json,
    to_tsv,
)

__all__ = [
    'build_parser',
    'main',
    'merge_args',
    'run',
]

logger = get_logger(__name__)

# CLI dest → FilterPolicy field.
_POLICY_FLAGS: dict[str, str] = {
    'avoid_dev_deps': 'exclude_dev',
    'avoid_build_deps': 'exclude_build',
    'avoid_proc_macros': 'exclude_proc_macros',
    'direct_deps_only': 'direct_deps_only',
    'root_only': 'root_only',
}


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for ``cratelicense``."""
    parser = argparse.ArgumentParser(
        prog='cratelicense',
        description='See the licenses of the dependencies of a Cargo package or workspace.',
    )

    source = parser.add_argument_group('metadata')
    source.add_argument('--manifest-path', type=Path, metavar='PATH', help='Path to Cargo.toml.')
    source.add_argument(
        '--current-dir',
        type=Path,
        metavar='CURRENT_DIR',
        help='Current directory of the cargo metadata process.',
    )
    source.add_argument(
        '--metadata-file',
        type=Path,
        metavar='FILE',
        help='Read saved `cargo metadata --format-version 1` output instead of running cargo.',
    )
    source.add_argument(
        '--features',
        nargs='+',
        metavar='FEATURE',
        help='Space- or comma-separated list of features to activate.',
    )
    source.add_argument('--all-features', action='store_true', help='Activate all available features.')
    source.add_argument('--no-default-features', action='store_true', help='Deactivate default features.')
    source.add_argument(
        '--filter-platform',
        metavar='TRIPLE',
        help='Only include resolve dependencies matching the given target triple.',
    )

    policy = parser.add_argument_group('filtering')
    policy.add_argument(
        '--avoid-dev-deps',
        action=argparse.BooleanOptionalAction,
        help='Exclude development dependencies.',
    )
    policy.add_argument(
        '--avoid-build-deps',
        action=argparse.BooleanOptionalAction,
        help='Exclude build dependencies.',
    )
    policy.add_argument(
        '--avoid-proc-macros',
        action=argparse.BooleanOptionalAction,
        help='Exclude proc-macro crates and their direct dependencies.',
    )
    policy.add_argument(
        '--direct-deps-only',
        action=argparse.BooleanOptionalAction,
        help='Only list the root package(s) and their direct dependencies.',
    )
    policy.add_argument(
        '--root-only',
        action=argparse.BooleanOptionalAction,
        help='Only list the root package(s).',
    )

    output = parser.add_argument_group('output')
    formats = output.add_mutually_exclusive_group()
    formats.add_argument(
        '-d',
        '--do-not-bundle',
        dest='output_format',
        action='store_const',
        const='per-line',
        help='Output one license per line.',
    )
    formats.add_argument(
        '-t',
        '--tsv',
        dest='output_format',
        action='store_const',
        const='tsv',
        help='Detailed output as tab-separated values.',
    )
    formats.add_argument(
        '-j',
        '--json',
        dest='output_format',
        action='store_const',
        const='json',
        help='Detailed output as JSON.',
    )
    formats.add_argument(
        '--gitlab',
        dest='output_format',
        action='store_const',
        const='gitlab',
        help='Output a GitLab license scanning report.',
    )
    output.add_argument('-a', '--authors', action=argparse.BooleanOptionalAction, help='Display crate authors.')
    output.add_argument('--color', choices=COLOR_CHOICES, help='Coloring (default: auto).')

    config = parser.add_argument_group('configuration')
    config.add_argument(
        '--config',
        type=Path,
        metavar='FILE',
        help=f'Settings file (default: ./{CONFIG_FILENAME}).',
    )
    config.add_argument(
        '--save-config',
        action='store_true',
        help='Write the effective settings back to the settings file.',
    )

    logging_group = parser.add_argument_group('logging')
    verbosity = logging_group.add_mutually_exclusive_group()
    verbosity.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging.')
    verbosity.add_argument('-q', '--quiet', action='store_true', help='Only log warnings and errors.')
    logging_group.add_argument('--json-log', action='store_true', help='Log JSON lines to stderr.')
    return parser


def _split_features(raw: Sequence[str] | None) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(f for item in raw for f in item.replace(',', ' ').split() if f)


def merge_args(config: CrateLicenseConfig, args: argparse.Namespace) -> CrateLicenseConfig:
    """Overlay the flags given on the command line onto *config*."""
    policy_overrides = {
        attr: getattr(args, dest) for dest, attr in _POLICY_FLAGS.items() if getattr(args, dest) is not None
    }
    return dataclasses.replace(
        config,
        policy=dataclasses.replace(config.policy, **policy_overrides),
        output_format=args.output_format or config.output_format,
        authors=config.authors if args.authors is None else args.authors,
        color=args.color or config.color,
    )


def _render(config: CrateLicenseConfig, details: list[DependencyDetails]) -> str:
    fmt = config.output_format
    if fmt == 'tsv':
        return to_tsv(details)
    if fmt == 'json':
        return to_json(details) + '\n'
    if fmt == 'gitlab':
        return to_gitlab(details) + '\n'
    color = should_use_color(config.color)
    if fmt == 'per-line':
        return format_per_line(details, authors=config.authors, color=color)
    return format_grouped(details, authors=config.authors, color=color)


def run(args: argparse.Namespace) -> int:
    """Produce the report described by parsed *args*.

    Raises:
        CrateLicenseError: If metadata, config, or the graph is unusable.
    """
    config_path = args.config if args.config is not None else Path(CONFIG_FILENAME)
    config = merge_args(load_config(config_path), args)
    if args.save_config:
        write_config(config_path, config)

    if args.metadata_file is not None:
        metadata = load_metadata(args.metadata_file)
    else:
        metadata = run_cargo_metadata(
            MetadataOptions(
                manifest_path=args.manifest_path,
                current_dir=args.current_dir,
                features=_split_features(args.features),
                all_features=args.all_features,
                no_default_features=args.no_default_features,
                filter_platform=args.filter_platform,
            )
        )

    details = collect_dependencies(metadata, config.policy)
    sys.stdout.write(_render(config, details))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return the process exit code."""
    arguments = list(sys.argv[1:] if argv is None else argv)
    if arguments[:1] == ['license']:
        arguments = arguments[1:]

    args = build_parser().parse_args(arguments)
    configure_logging(verbose=args.verbose, quiet=args.quiet, json_log=args.json_log)

    try:
        return run(args)
    except CrateLicenseError as exc:
        logger.debug('report_failed', error_type=type(exc).__name__, error=str(exc))
        print(f'error: {redact(str(exc))}', file=sys.stderr)
        if exc.hint:
            print(f'  = hint: {redact(exc.hint)}', file=sys.stderr)
        return 1
