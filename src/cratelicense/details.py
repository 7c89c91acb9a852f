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


"""Flat, ordered records for the packages a report covers.

:class:`DependencyDetails` is what every renderer consumes. Optional
fields stay ``None``; substituting ``N/A`` is left to the renderer.

Usage::

    from cratelicense.details import collect_dependencies
    from cratelicense.reachability import FilterPolicy

    for dep in collect_dependencies(metadata, FilterPolicy(exclude_dev=True)):
        print(dep.name, dep.version, dep.license)
"""

from __future__ import annotations

import functools
import re
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any

from cratelicense.graph import DependencyGraph, PackageNode
from cratelicense.logging import get_logger
from cratelicense.normalize import normalize_license
from cratelicense.reachability import FilterPolicy, filter_packages

__all__ = [
    'DependencyDetails',
    'collect_dependencies',
]

logger = get_logger(__name__)

_SEMVER_RE = re.compile(r'^(\d+)\.(\d+)\.(\d+)(?:-([0-9A-Za-z.-]+))?(?:\+[0-9A-Za-z.-]+)?$')


def _version_key(version: str) -> tuple[Any, ...]:
    """Sort key implementing semver precedence.

    A release sorts after its pre-releases; numeric pre-release fields
    compare numerically and before alphanumeric ones. Strings that are
    not semver sort after every valid version, by text.
    """
    m = _SEMVER_RE.match(version)
    if m is None:
        return (1, version)
    major, minor, patch, pre = m.groups()
    if pre is None:
        pre_key: tuple[Any, ...] = (1,)
    else:
        pre_key = (0, tuple((0, int(p), '') if p.isdigit() else (1, 0, p) for p in pre.split('.')))
    return (0, int(major), int(minor), int(patch), pre_key)


def _optional_key(value: str | None) -> tuple[bool, str]:
    """Absent values sort before present ones."""
    return (value is not None, value or '')


@functools.total_ordering
@dataclass(frozen=True)
class DependencyDetails:
    """One row of the license report.

    Attributes:
        name: Crate name.
        version: Crate version.
        authors: Authors joined with ``|``, or ``None`` when none are listed.
        repository: Repository URL.
        license: Normalized license expression.
        license_file: Path of the license file declared instead of (or in
            addition to) a license expression.
        description: Crate description.
    """

    name: str
    version: str
    authors: str | None = None
    repository: str | None = None
    license: str | None = None
    license_file: str | None = None
    description: str | None = None

    @classmethod
    def from_package(cls, pkg: PackageNode) -> DependencyDetails:
        """Project a graph node into a report row."""
        return cls(
            name=pkg.name,
            version=pkg.version,
            authors='|'.join(pkg.authors) if pkg.authors else None,
            repository=pkg.repository,
            license=normalize_license(pkg.license) if pkg.license is not None else None,
            license_file=pkg.license_file,
            description=pkg.description,
        )

    def sort_key(self) -> tuple[Any, ...]:
        """Key ordering rows by name, version, then the optional fields."""
        return (
            self.name,
            _version_key(self.version),
            _optional_key(self.authors),
            _optional_key(self.repository),
            _optional_key(self.license),
            _optional_key(self.license_file),
            _optional_key(self.description),
        )

    def __lt__(self, other: object) -> bool:
        """Compare rows by :meth:`sort_key`."""
        if not isinstance(other, DependencyDetails):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def to_dict(self) -> dict[str, str | None]:
        """Return a JSON-ready mapping; absent fields are ``None``."""
        return asdict(self)


def collect_dependencies(metadata: Mapping[str, Any], policy: FilterPolicy) -> list[DependencyDetails]:
    """Build, filter and project the dependency graph of *metadata*.

    Args:
        metadata: Parsed ``cargo metadata --format-version 1`` output.
        policy: Which dependencies to include.

    Returns:
        Report rows in ascending order.

    Raises:
        MissingResolveData: If *metadata* has no ``resolve`` section.
        NoRootPackage: If there is no root package and no workspace member.
    """
    graph = DependencyGraph.from_metadata(metadata)
    selected = filter_packages(graph, policy)
    details = sorted(DependencyDetails.from_package(graph.packages[pid]) for pid in selected if pid in graph.packages)
    logger.info('dependencies_collected', count=len(details))
    return details
