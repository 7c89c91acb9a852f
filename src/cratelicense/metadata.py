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


"""Obtain ``cargo metadata`` output.

Either runs ``cargo metadata --format-version 1`` or reads a document
saved earlier (useful in CI, where the report runs in a different job
than the build).

Usage::

    from cratelicense.metadata import MetadataOptions, run_cargo_metadata

    metadata = run_cargo_metadata(MetadataOptions(manifest_path=Path('Cargo.toml')))
"""

from __future__ import annotations

import json
import shutil
import subprocess  # noqa: S404 - cargo is the data source
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from cratelicense.errors import CargoMetadataError
from cratelicense.logging import get_logger

__all__ = [
    'MetadataOptions',
    'cargo_metadata_command',
    'load_metadata',
    'run_cargo_metadata',
]

logger = get_logger(__name__)

_CARGO_TIMEOUT_SECONDS = 300


@dataclass(frozen=True)
class MetadataOptions:
    """Arguments forwarded to ``cargo metadata``.

    Attributes:
        manifest_path: Path to ``Cargo.toml``.
        current_dir: Working directory for the cargo process.
        features: Features to activate.
        all_features: Activate all features.
        no_default_features: Deactivate the default features.
        filter_platform: Only resolve dependencies for this target triple.
        cargo: Name or path of the cargo executable.
    """

    manifest_path: Path | None = None
    current_dir: Path | None = None
    features: tuple[str, ...] = ()
    all_features: bool = False
    no_default_features: bool = False
    filter_platform: str | None = None
    cargo: str = 'cargo'


def cargo_metadata_command(options: MetadataOptions) -> list[str]:
    """Return the ``cargo metadata`` argument vector for *options*."""
    cmd = [options.cargo, 'metadata', '--format-version', '1']
    if options.manifest_path is not None:
        cmd += ['--manifest-path', str(options.manifest_path)]
    if options.all_features:
        cmd.append('--all-features')
    if options.no_default_features:
        cmd.append('--no-default-features')
    if options.features:
        cmd += ['--features', ','.join(options.features)]
    if options.filter_platform:
        cmd += ['--filter-platform', options.filter_platform]
    return cmd


def _decode(text: str, source: str) -> dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise CargoMetadataError(f'{source} is not valid JSON: {exc}') from exc
    if not isinstance(data, dict):
        raise CargoMetadataError(f'{source} is not a JSON object')
    return data


def run_cargo_metadata(options: MetadataOptions) -> dict[str, Any]:
    """Run ``cargo metadata`` and return its parsed output.

    Raises:
        CargoMetadataError: If cargo is missing, fails, times out, or
            prints something other than a JSON object.
    """
    if shutil.which(options.cargo) is None:
        raise CargoMetadataError(
            f'`{options.cargo}` not found on PATH',
            hint='Install a Rust toolchain, or pass --metadata-file with saved `cargo metadata` output.',
        )

    cmd = cargo_metadata_command(options)
    logger.debug('running_cargo_metadata', cmd=cmd, cwd=str(options.current_dir) if options.current_dir else None)
    try:
        proc = subprocess.run(  # noqa: S603 - argument vector, no shell
            cmd,
            cwd=options.current_dir,
            capture_output=True,
            text=True,
            timeout=_CARGO_TIMEOUT_SECONDS,
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        raise CargoMetadataError(f'`cargo metadata` timed out after {_CARGO_TIMEOUT_SECONDS} seconds') from exc

    if proc.returncode != 0:
        logger.debug('cargo_metadata_failed', returncode=proc.returncode, stderr=proc.stderr)
        raise CargoMetadataError(
            f'`cargo metadata` exited with status {proc.returncode}',
            stderr=proc.stderr,
            hint=proc.stderr.strip().splitlines()[-1].strip() if proc.stderr.strip() else '',
        )
    return _decode(proc.stdout, '`cargo metadata` output')


def load_metadata(path: Path) -> dict[str, Any]:
    """Read a saved ``cargo metadata`` JSON document.

    Raises:
        CargoMetadataError: If the file cannot be read or is not a JSON object.
    """
    try:
        text = path.read_text(encoding='utf-8')
    except OSError as exc:
        raise CargoMetadataError(f'cannot read {path}: {exc.strerror or exc}') from exc
    return _decode(text, str(path))
