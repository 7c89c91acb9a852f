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


"""Known SPDX license identifiers, full names, and aliases.

The data lives in ``data/licenses.toml`` next to this module and is read
with :mod:`tomllib`.  It is immutable reference data: the normalizer uses
it to fix the spelling of identifiers, and the GitLab report uses it for
full license names.

Usage::

    from cratelicense.license_data import LicenseDatabase

    db = LicenseDatabase.default()
    db.canonical_id('apache-2.0')  # 'Apache-2.0'
    db.canonical_id('GPL-2.0+')  # 'GPL-2.0-or-later'
    db.name('MIT')  # 'MIT License'
"""

from __future__ import annotations

import functools
import re
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

__all__ = [
    'LicenseDataError',
    'LicenseDatabase',
]

_DATA_DIR = Path(__file__).resolve().parent / 'data'
_LICENSES_TOML = _DATA_DIR / 'licenses.toml'


class LicenseDataError(Exception):
    """Raised when the license TOML data fails validation.

    Attributes:
        errors: List of human-readable error strings.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        bullet_list = '\n'.join(f'  - {e}' for e in errors)
        super().__init__(f'License data has {len(errors)} validation error(s):\n{bullet_list}')


@dataclass(frozen=True)
class LicenseDatabase:
    """Lookup tables built from ``licenses.toml``.

    Attributes:
        names: SPDX id → full license name.
        exceptions: Exception id → full exception name.
        lookup: Lower-cased id, alias, or deprecated id → canonical id.
        exception_lookup: Lower-cased exception id → canonical exception id.
    """

    names: Mapping[str, str] = field(default_factory=dict)
    exceptions: Mapping[str, str] = field(default_factory=dict)
    lookup: Mapping[str, str] = field(default_factory=dict)
    exception_lookup: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LicenseDatabase:
        """Build a database from parsed TOML data.

        Raises:
            LicenseDataError: If an alias or deprecated id points at an
                unknown license, or one spelling maps to two licenses.
        """
        errors: list[str] = []
        names: dict[str, str] = {}
        lookup: dict[str, str] = {}

        def _register(spelling: str, target: str) -> None:
            key = spelling.lower()
            previous = lookup.get(key)
            if previous is not None and previous != target:
                errors.append(f'{spelling!r} maps to both {previous!r} and {target!r}')
                return
            lookup[key] = target

        for spdx_id, info in data.get('licenses', {}).items():
            if not isinstance(info, dict) or not isinstance(info.get('name'), str):
                errors.append(f'license {spdx_id!r} needs a string "name"')
                continue
            names[spdx_id] = info['name']
            _register(spdx_id, spdx_id)
            for alias in info.get('aliases', []):
                _register(alias, spdx_id)

        for old_id, new_id in data.get('deprecated', {}).items():
            if new_id not in names:
                errors.append(f'deprecated id {old_id!r} points at unknown license {new_id!r}')
                continue
            _register(old_id, new_id)

        exceptions = dict(data.get('exceptions', {}))
        exception_lookup = {exc.lower(): exc for exc in exceptions}

        if errors:
            raise LicenseDataError(errors)
        return cls(names=names, exceptions=exceptions, lookup=lookup, exception_lookup=exception_lookup)

    @classmethod
    def load(cls, path: Path = _LICENSES_TOML) -> LicenseDatabase:
        """Load and validate a license TOML file."""
        with path.open('rb') as f:
            return cls.from_dict(tomllib.load(f))

    @staticmethod
    @functools.cache
    def default() -> LicenseDatabase:
        """Return the database bundled with cratelicense."""
        return LicenseDatabase.load()

    def canonical_id(self, spelling: str) -> str | None:
        """Return the canonical SPDX id for *spelling*, or ``None`` if unknown."""
        return self.lookup.get(spelling.lower())

    def canonical_exception(self, spelling: str) -> str | None:
        """Return the canonical exception id for *spelling*, or ``None``."""
        return self.exception_lookup.get(spelling.lower())

    @functools.cached_property
    def phrase_pattern(self) -> re.Pattern[str] | None:
        """Regex matching multi-word aliases such as ``Apache License 2.0``.

        Longest spellings are tried first. ``None`` when there are none.
        """
        phrases = sorted((s for s in self.lookup if ' ' in s or ',' in s), key=len, reverse=True)
        if not phrases:
            return None
        alternatives = '|'.join(re.escape(p) for p in phrases)
        return re.compile(rf'(?<![\w.+-])(?:{alternatives})(?![\w.+-])', re.IGNORECASE)

    def name(self, spdx_id: str) -> str:
        """Return the full name of *spdx_id*, or the id itself when unknown."""
        return self.names.get(spdx_id, spdx_id)
