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


"""``cratelicense.toml``: persistent defaults for the CLI.

Example::

    # Licenses we ship in release binaries only.
    [policy]
    avoid-dev-deps = true
    avoid-build-deps = true
    avoid-proc-macros = true

    [output]
    format = "tsv"      # grouped | per-line | tsv | json | gitlab
    authors = false
    color = "auto"      # auto | always | never

Command-line flags win over the file. ``--save-config`` writes the
effective settings back with comment-preserving ``tomlkit`` edits, so
hand-written comments survive.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomlkit
import tomlkit.items

from cratelicense.errors import ConfigError
from cratelicense.logging import get_logger
from cratelicense.reachability import FilterPolicy

__all__ = [
    'COLOR_CHOICES',
    'CONFIG_FILENAME',
    'CrateLicenseConfig',
    'OUTPUT_FORMATS',
    'config_from_dict',
    'load_config',
    'write_config',
]

logger = get_logger(__name__)

CONFIG_FILENAME = 'cratelicense.toml'

OUTPUT_FORMATS: tuple[str, ...] = ('grouped', 'per-line', 'tsv', 'json', 'gitlab')
COLOR_CHOICES: tuple[str, ...] = ('auto', 'always', 'never')

# TOML key → FilterPolicy field.
_POLICY_KEYS: dict[str, str] = {
    'avoid-dev-deps': 'exclude_dev',
    'avoid-build-deps': 'exclude_build',
    'avoid-proc-macros': 'exclude_proc_macros',
    'direct-deps-only': 'direct_deps_only',
    'root-only': 'root_only',
}

_OUTPUT_KEYS = frozenset({'format', 'authors', 'color'})


@dataclass(frozen=True)
class CrateLicenseConfig:
    """Effective report settings.

    Attributes:
        policy: Dependency filter flags.
        output_format: One of :data:`OUTPUT_FORMATS`.
        authors: Show crate authors in human-readable output.
        color: One of :data:`COLOR_CHOICES`.
    """

    policy: FilterPolicy = field(default_factory=FilterPolicy)
    output_format: str = 'grouped'
    authors: bool = False
    color: str = 'auto'


def _expect_bool(table: str, key: str, value: object) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f'[{table}].{key} must be true or false, got {value!r}')
    return value


def _expect_choice(table: str, key: str, value: object, choices: tuple[str, ...]) -> str:
    if not isinstance(value, str) or value not in choices:
        raise ConfigError(
            f'[{table}].{key} must be one of {", ".join(choices)}; got {value!r}',
        )
    return value


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ConfigError(f'[{name}] must be a table')
    return section


def config_from_dict(data: dict[str, Any]) -> CrateLicenseConfig:
    """Validate parsed TOML data and build a :class:`CrateLicenseConfig`.

    Raises:
        ConfigError: If a known key has a value of the wrong type.
    """
    for key in data:
        if key not in ('policy', 'output'):
            logger.warning('unknown_config_table', table=key)

    policy_fields: dict[str, bool] = {}
    for key, value in _section(data, 'policy').items():
        attr = _POLICY_KEYS.get(key)
        if attr is None:
            logger.warning('unknown_config_key', table='policy', key=key)
            continue
        policy_fields[attr] = _expect_bool('policy', key, value)

    output = _section(data, 'output')
    for key in output:
        if key not in _OUTPUT_KEYS:
            logger.warning('unknown_config_key', table='output', key=key)

    return CrateLicenseConfig(
        policy=FilterPolicy(**policy_fields),
        output_format=_expect_choice('output', 'format', output.get('format', 'grouped'), OUTPUT_FORMATS),
        authors=_expect_bool('output', 'authors', output.get('authors', False)),
        color=_expect_choice('output', 'color', output.get('color', 'auto'), COLOR_CHOICES),
    )


def load_config(path: Path) -> CrateLicenseConfig:
    """Load *path*, or return defaults when the file does not exist.

    Raises:
        ConfigError: If the file is not valid TOML or has bad values.
    """
    if not path.is_file():
        logger.debug('config_not_found', path=str(path))
        return CrateLicenseConfig()
    try:
        with path.open('rb') as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f'{path}: {exc}') from exc
    config = config_from_dict(data)
    logger.debug('config_loaded', path=str(path))
    return config


def _ensure_table(doc: tomlkit.TOMLDocument, key: str) -> tomlkit.items.Table:
    """Return the ``[key]`` table of *doc*, creating it if absent."""
    if key not in doc:
        if doc:
            doc.add(tomlkit.nl())
        doc.add(key, tomlkit.table())
    return doc[key]  # type: ignore[return-value]  # tomlkit


def write_config(path: Path, config: CrateLicenseConfig) -> None:
    """Write *config* to *path*, keeping existing comments and unrelated keys."""
    doc = tomlkit.parse(path.read_text(encoding='utf-8')) if path.is_file() else tomlkit.document()

    policy = _ensure_table(doc, 'policy')
    for key, attr in _POLICY_KEYS.items():
        policy[key] = getattr(config.policy, attr)

    output = _ensure_table(doc, 'output')
    output['format'] = config.output_format
    output['authors'] = config.authors
    output['color'] = config.color

    path.write_text(tomlkit.dumps(doc), encoding='utf-8')
    logger.info('config_written', path=str(path))
