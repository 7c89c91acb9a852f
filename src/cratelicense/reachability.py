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


"""Select the packages a license report covers.

Starting from the graph's roots, walk dependency edges whose kind the
policy allows, then apply the name allow-list (``direct_deps_only``) and
the proc-macro exclusion set.

Usage::

    from cratelicense.reachability import FilterPolicy, filter_packages

    ids = filter_packages(graph, FilterPolicy(exclude_dev=True))
"""

from __future__ import annotations

from dataclasses import dataclass

from cratelicense._types import DependencyKind
from cratelicense.graph import DependencyGraph
from cratelicense.logging import get_logger

__all__ = [
    'FilterPolicy',
    'filter_packages',
    'reachable',
]

logger = get_logger(__name__)


@dataclass(frozen=True)
class FilterPolicy:
    """Which dependencies a report includes.

    Attributes:
        exclude_dev: Do not follow development-only edges.
        exclude_build: Do not follow build-only edges.
        exclude_proc_macros: Drop proc-macro crates and their direct
            dependencies.
        direct_deps_only: Keep only the roots and the crates they
            depend on directly.
        root_only: Keep only the roots.
    """

    exclude_dev: bool = False
    exclude_build: bool = False
    exclude_proc_macros: bool = False
    direct_deps_only: bool = False
    root_only: bool = False

    def allowed_kinds(self) -> frozenset[DependencyKind]:
        """Return the edge kinds traversal may follow."""
        kinds = {DependencyKind.NORMAL}
        if not self.exclude_dev:
            kinds.add(DependencyKind.DEVELOPMENT)
        if not self.exclude_build:
            kinds.add(DependencyKind.BUILD)
        return frozenset(kinds)


def reachable(
    graph: DependencyGraph,
    roots: tuple[str, ...],
    allowed: frozenset[DependencyKind],
) -> set[str]:
    """Return the ids reachable from *roots*, roots included.

    Iterative depth-first walk through edges that carry at least one
    *allowed* kind. Edges without any kind are always followed. Each
    package is visited once, so cycles terminate.
    """
    visited: set[str] = set()
    stack: list[str] = list(roots)

    while stack:
        current = stack.pop()
        if current in visited:
            continue
        visited.add(current)
        for edge in graph.neighbors(current):
            if edge.target in visited:
                continue
            if not edge.kinds or edge.kinds & allowed:
                stack.append(edge.target)

    return visited


def _direct_dependency_names(graph: DependencyGraph, roots: tuple[str, ...]) -> set[str]:
    """Names of the roots and of every package adjacent to a root, any kind."""
    names: set[str] = set()
    for root in roots:
        pkg = graph.packages.get(root)
        if pkg is not None:
            names.add(pkg.name)
        for edge in graph.neighbors(root):
            target = graph.packages.get(edge.target)
            if target is not None:
                names.add(target.name)
    return names


def _warn_unclassified(graph: DependencyGraph, policy: FilterPolicy) -> None:
    """Warn once per exclusion flag that unclassified edges defeat."""
    if not (policy.exclude_dev or policy.exclude_build):
        return
    if not graph.has_unclassified_edges():
        return
    if policy.exclude_dev:
        logger.warning(
            'cannot_avoid_dev_deps',
            reason='cargo metadata has dependency edges without kinds (cargo older than 1.41)',
        )
    if policy.exclude_build:
        logger.warning(
            'cannot_avoid_build_deps',
            reason='cargo metadata has dependency edges without kinds (cargo older than 1.41)',
        )


def filter_packages(graph: DependencyGraph, policy: FilterPolicy) -> set[str]:
    """Return the ids of the packages a report should list.

    Args:
        graph: The resolved dependency graph.
        policy: Which edges to follow and which packages to drop.

    Returns:
        Unordered set of package ids. Callers sort the projected
        records themselves.

    Raises:
        NoRootPackage: If the graph has no root and no workspace members.
    """
    roots = graph.roots()
    if policy.root_only:
        return set(roots)

    _warn_unclassified(graph, policy)
    selected = reachable(graph, roots, policy.allowed_kinds())

    if policy.direct_deps_only:
        allowed_names = _direct_dependency_names(graph, roots)
        selected = {pid for pid in selected if pid in roots or _name_of(graph, pid) in allowed_names}

    if policy.exclude_proc_macros:
        selected -= graph.proc_macro_exclusions()

    logger.debug('packages_selected', count=len(selected), roots=len(roots))
    return selected


def _name_of(graph: DependencyGraph, package_id: str) -> str | None:
    pkg = graph.packages.get(package_id)
    return pkg.name if pkg is not None else None
