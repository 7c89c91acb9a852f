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


"""Render report rows for humans and machines.

Human-readable listings go through a Rich :class:`~rich.console.Console`
(bold green license names and crate names when color is enabled).
Machine formats are plain text:

- **TSV**: one header row, one row per crate, absent fields empty.
- **JSON**: an array of objects, absent fields ``null``.
- **GitLab**: a `license scanning report`_ (schema version 2.1).

This is the only place where an absent license becomes ``N/A``.

.. _license scanning report:
   https://docs.gitlab.com/ee/development/integrations/secure.html#license-scanning-report
"""

from __future__ import annotations

import csv
import json
import os
import sys
from collections.abc import Iterable
from io import StringIO
from typing import Any

from rich.console import Console
from rich.text import Text

from cratelicense.details import DependencyDetails
from cratelicense.license_data import LicenseDatabase
from cratelicense.spdx_expr import ParseError, license_ids, parse

__all__ = [
    'GITLAB_REPORT_VERSION',
    'NOT_AVAILABLE',
    'TSV_FIELDS',
    'format_grouped',
    'format_per_line',
    'group_by_license',
    'print_grouped',
    'print_per_line',
    'should_use_color',
    'to_gitlab',
    'to_json',
    'to_tsv',
]

NOT_AVAILABLE = 'N/A'

TSV_FIELDS: tuple[str, ...] = (
    'name',
    'version',
    'authors',
    'repository',
    'license',
    'license_file',
    'description',
)

GITLAB_REPORT_VERSION = '2.1'

_NAME_STYLE = 'bold green'
_BY_STYLE = 'green'


def should_use_color(when: str = 'auto') -> bool:
    """Decide whether to emit ANSI colors.

    Resolution order for ``auto``:
        1. ``NO_COLOR`` env var (https://no-color.org/) → disable.
        2. ``FORCE_COLOR`` env var → enable.
        3. ``sys.stdout.isatty()``.

    Args:
        when: ``"always"``, ``"never"`` or ``"auto"``.
    """
    if when == 'always':
        return True
    if when == 'never':
        return False
    if os.environ.get('NO_COLOR', '') != '':
        return False
    if os.environ.get('FORCE_COLOR', '') != '':
        return True
    try:
        return sys.stdout.isatty()
    except (AttributeError, ValueError):
        return False


def _console(color: bool, file: Any = None) -> Console:  # noqa: ANN401
    return Console(
        file=file,
        force_terminal=color,
        color_system='auto' if color else None,
        highlight=False,
        soft_wrap=True,
    )


def group_by_license(details: Iterable[DependencyDetails]) -> dict[str, list[DependencyDetails]]:
    """Group rows by license; keys are sorted and absent licenses use ``N/A``."""
    table: dict[str, list[DependencyDetails]] = {}
    for dep in details:
        table.setdefault(dep.license or NOT_AVAILABLE, []).append(dep)
    return dict(sorted(table.items()))


def print_grouped(
    details: Iterable[DependencyDetails],
    *,
    authors: bool = False,
    console: Console | None = None,
) -> None:
    """Print one entry per license: ``LICENSE (count): crate, crate``.

    With *authors*, crate names go on their own line followed by
    ``by`` and the sorted distinct authors.
    """
    if console is None:
        console = _console(should_use_color())
    for license_text, crates in group_by_license(details).items():
        names = ', '.join(c.name for c in crates)
        line = Text()
        line.append(license_text, style=_NAME_STYLE)
        if authors:
            crate_authors = sorted({c.authors or NOT_AVAILABLE for c in crates})
            line.append(f' ({len(crates)})\n{names}\n')
            line.append('by', style=_BY_STYLE)
            line.append(f' {", ".join(crate_authors)}')
        else:
            line.append(f' ({len(crates)}): {names}')
        console.print(line)


def print_per_line(
    details: Iterable[DependencyDetails],
    *,
    authors: bool = False,
    console: Console | None = None,
) -> None:
    """Print one line per crate: ``name: version, "license",``."""
    if console is None:
        console = _console(should_use_color())
    for dep in details:
        line = Text()
        line.append(dep.name, style=_NAME_STYLE)
        line.append(f': {dep.version}, "{dep.license or NOT_AVAILABLE}"')
        if authors:
            line.append(', ')
            line.append('by', style=_BY_STYLE)
            line.append(f' "{dep.authors or NOT_AVAILABLE}"')
        else:
            line.append(',')
        console.print(line)


def _capture(printer: Any, details: Iterable[DependencyDetails], *, authors: bool, color: bool) -> str:  # noqa: ANN401
    buf = StringIO()
    printer(details, authors=authors, console=_console(color, file=buf))
    return buf.getvalue()


def format_grouped(details: Iterable[DependencyDetails], *, authors: bool = False, color: bool = False) -> str:
    """Return :func:`print_grouped` output as a string."""
    return _capture(print_grouped, details, authors=authors, color=color)


def format_per_line(details: Iterable[DependencyDetails], *, authors: bool = False, color: bool = False) -> str:
    """Return :func:`print_per_line` output as a string."""
    return _capture(print_per_line, details, authors=authors, color=color)


def to_tsv(details: Iterable[DependencyDetails]) -> str:
    """Serialize rows as tab-separated values with a header row."""
    buf = StringIO()
    writer = csv.writer(buf, delimiter='\t', lineterminator='\n')
    writer.writerow(TSV_FIELDS)
    for dep in details:
        row = dep.to_dict()
        writer.writerow(['' if row[f] is None else row[f] for f in TSV_FIELDS])
    return buf.getvalue()


def to_json(details: Iterable[DependencyDetails], *, indent: int = 2) -> str:
    """Serialize rows as a JSON array."""
    return json.dumps([dep.to_dict() for dep in details], indent=indent)


def _ids_of(license_text: str) -> list[str]:
    """License ids named by a normalized expression, in leaf order."""
    try:
        return license_ids(parse(license_text))
    except ParseError:
        return [license_text]


def to_gitlab(
    details: Iterable[DependencyDetails],
    *,
    db: LicenseDatabase | None = None,
    indent: int = 2,
) -> str:
    """Serialize rows as a GitLab license scanning report.

    Every license id referenced by a dependency appears once in the
    top-level ``licenses`` list, sorted by id.
    """
    if db is None:
        db = LicenseDatabase.default()

    dependencies: list[dict[str, Any]] = []
    all_ids: set[str] = set()
    for dep in details:
        ids = _ids_of(dep.license) if dep.license else []
        all_ids.update(ids)
        dependencies.append({
            'name': dep.name,
            'version': dep.version,
            'package_manager': 'cargo',
            'path': 'Cargo.lock',
            'licenses': ids,
        })

    report = {
        'version': GITLAB_REPORT_VERSION,
        'licenses': [
            {
                'id': spdx_id,
                'name': db.name(spdx_id),
                'url': f'https://spdx.org/licenses/{spdx_id}.html',
            }
            for spdx_id in sorted(all_ids)
        ],
        'dependencies': dependencies,
    }
    return json.dumps(report, indent=indent)
