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


r"""Dependency graph built from ``cargo metadata`` output.

The graph is an arena: packages and adjacency lists live in dicts keyed
by the opaque cargo package id, so edges never hold object references.
It is built once per report and never mutated afterwards.

Key Concepts (ELI5)::

    ┌─────────────────────┬────────────────────────────────────────────────┐
    │ Concept             │ ELI5 Explanation                               │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Package id          │ Cargo's unique key for one crate version from │
    │                     │ one source (``serde 1.0.197 (registry+...)``). │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Dependency kind     │ Why the edge exists: normal (linked in), dev  │
    │                     │ (tests/examples) or build (build.rs).         │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Unclassified edge   │ An edge cargo reported without kinds (cargo   │
    │                     │ < 1.41). Treated as every kind at once.       │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Proc-macro crate    │ A compiler plugin. It runs at build time and  │
    │                     │ is not linked into the final binary.          │
    └─────────────────────┴────────────────────────────────────────────────┘

Usage::

    from cratelicense.graph import DependencyGraph

    graph = DependencyGraph.from_metadata(json.loads(stdout))
    for root in graph.roots():
        for edge in graph.neighbors(root):
            print(edge.target, sorted(k.value for k in edge.kinds))
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from cratelicense._types import DependencyKind
from cratelicense.errors import CargoMetadataError, MissingResolveData, NoRootPackage
from cratelicense.logging import get_logger

__all__ = [
    'DependencyEdge',
    'DependencyGraph',
    'PackageNode',
]

logger = get_logger(__name__)

_PROC_MACRO = 'proc-macro'


@dataclass(frozen=True)
class PackageNode:
    """One package from ``cargo metadata``'s ``packages`` list.

    Attributes:
        id: Opaque cargo package id, unique within the graph.
        name: Crate name.
        version: Semantic version string.
        authors: Author strings from the manifest.
        license: Raw ``license`` field, or ``None``.
        license_file: ``license-file`` path, or ``None``.
        repository: Repository URL, or ``None``.
        description: Package description, or ``None``.
        target_kinds: Union of ``kind`` over all build targets.
        crate_types: Union of ``crate_types`` over all build targets.
    """

    id: str
    name: str
    version: str
    authors: tuple[str, ...] = ()
    license: str | None = None
    license_file: str | None = None
    repository: str | None = None
    description: str | None = None
    target_kinds: frozenset[str] = frozenset()
    crate_types: frozenset[str] = frozenset()

    @classmethod
    def from_cargo(cls, raw: Mapping[str, Any]) -> PackageNode:
        """Build a node from one entry of ``cargo metadata``'s ``packages``."""
        target_kinds: set[str] = set()
        crate_types: set[str] = set()
        for target in raw.get('targets') or ():
            target_kinds.update(target.get('kind') or ())
            crate_types.update(target.get('crate_types') or ())
        return cls(
            id=raw['id'],
            name=raw['name'],
            version=raw['version'],
            authors=tuple(raw.get('authors') or ()),
            license=raw.get('license'),
            license_file=raw.get('license_file'),
            repository=raw.get('repository'),
            description=raw.get('description'),
            target_kinds=frozenset(target_kinds),
            crate_types=frozenset(crate_types),
        )

    @property
    def is_proc_macro(self) -> bool:
        """``True`` if any build target of this package is a proc-macro."""
        return _PROC_MACRO in self.target_kinds or _PROC_MACRO in self.crate_types


@dataclass(frozen=True)
class DependencyEdge:
    """A resolved dependency from *source* on *target*.

    Attributes:
        source: Package id of the dependent.
        target: Package id of the dependency.
        kinds: Roles of this dependency. Empty when cargo did not
            classify the edge.
    """

    source: str
    target: str
    kinds: frozenset[DependencyKind] = frozenset()

    @property
    def classified(self) -> bool:
        """``False`` for an edge that carries no kind information."""
        return bool(self.kinds)


def _edge_kinds(dep_kinds: list[Mapping[str, Any]]) -> frozenset[DependencyKind]:
    """Collapse ``dep_kinds`` entries (one per target platform) into a kind set."""
    kinds: set[DependencyKind] = set()
    for entry in dep_kinds:
        try:
            kinds.add(DependencyKind.from_cargo(entry.get('kind')))
        except ValueError:
            logger.debug('unknown_dependency_kind', kind=entry.get('kind'))
    return frozenset(kinds)


@dataclass
class DependencyGraph:
    """Packages and kind-tagged edges of one resolved Cargo workspace.

    Attributes:
        packages: Package id → :class:`PackageNode`.
        edges: Package id → outgoing :class:`DependencyEdge` tuple.
        root: Id of the root package, or ``None`` for a virtual workspace.
        workspace_members: Ids of the workspace member packages.
    """

    packages: dict[str, PackageNode] = field(default_factory=dict)
    edges: dict[str, tuple[DependencyEdge, ...]] = field(default_factory=dict)
    root: str | None = None
    workspace_members: tuple[str, ...] = ()

    @classmethod
    def from_metadata(cls, metadata: Mapping[str, Any]) -> DependencyGraph:
        """Build the graph from a parsed ``cargo metadata`` document.

        Each ``resolve.nodes[]`` entry contributes one edge per ``deps``
        item, tagged with its ``dep_kinds``. Very old cargo versions only
        emit a bare ``dependencies`` id list; those edges are unclassified.

        Raises:
            MissingResolveData: If the document has no ``resolve`` section.
            CargoMetadataError: If a package or resolve node lacks a required
                key or has the wrong shape.
        """
        resolve = metadata.get('resolve')
        if not isinstance(resolve, Mapping):
            raise MissingResolveData()

        graph = cls(
            root=resolve.get('root'),
            workspace_members=tuple(metadata.get('workspace_members') or ()),
        )
        try:
            for raw in metadata.get('packages') or ():
                node = PackageNode.from_cargo(raw)
                graph.packages[node.id] = node

            for raw_node in resolve.get('nodes') or ():
                source = raw_node['id']
                if 'deps' in raw_node:
                    graph.edges[source] = tuple(
                        DependencyEdge(source, dep['pkg'], _edge_kinds(dep.get('dep_kinds') or []))
                        for dep in raw_node['deps']
                    )
                else:
                    graph.edges[source] = tuple(
                        DependencyEdge(source, target) for target in raw_node.get('dependencies') or ()
                    )
        except KeyError as exc:
            raise CargoMetadataError(f'malformed cargo metadata: missing key {exc}') from exc
        except (TypeError, AttributeError) as exc:
            raise CargoMetadataError(f'malformed cargo metadata: {exc}') from exc

        logger.debug(
            'dependency_graph_built',
            packages=len(graph.packages),
            edges=sum(len(e) for e in graph.edges.values()),
            root=graph.root,
            workspace_members=len(graph.workspace_members),
        )
        return graph

    def roots(self) -> tuple[str, ...]:
        """Return the ids traversal starts from.

        The root package when there is one, otherwise every workspace
        member present in the graph.

        Raises:
            NoRootPackage: If there is neither.
        """
        if self.root is not None:
            return (self.root,)
        members = tuple(m for m in self.workspace_members if m in self.packages)
        if not members:
            raise NoRootPackage()
        return members

    def neighbors(self, package_id: str) -> tuple[DependencyEdge, ...]:
        """Return the outgoing edges of *package_id*."""
        return self.edges.get(package_id, ())

    def has_unclassified_edges(self) -> bool:
        """``True`` if any edge in the graph carries no kind information."""
        return any(not edge.classified for edges in self.edges.values() for edge in edges)

    def proc_macro_exclusions(self) -> frozenset[str]:
        """Ids of proc-macro packages and of their direct dependencies.

        Dependencies of those dependencies are not included.
        """
        excluded: set[str] = set()
        for pkg in self.packages.values():
            if pkg.is_proc_macro:
                excluded.add(pkg.id)
                excluded.update(edge.target for edge in self.neighbors(pkg.id))
        return frozenset(excluded)
