"""Build the requirement graph of installed packages."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from pkgtree.core.index import DuplicatePackageError, PackageIndex
from pkgtree.core.parser import (
    InstalledPackage,
    MarkerEvaluator,
    MetadataError,
    Requirement,
    evaluate_marker,
)

logger = logging.getLogger(__name__)


class DiagnosticKind(str, Enum):
    DUPLICATE_NAME = "duplicate-name"
    MISSING_METADATA = "missing-metadata"


@dataclass(frozen=True)
class Diagnostic:
    """A recoverable inconsistency found while building the graph."""

    kind: DiagnosticKind
    package: str
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class Edge:
    """
    One edge out of a package in the requires map.

    extra is the owner's extra that gates the requirement (None when it
    always applies). extras are the extras requested on the target, as in
    ``requests[socks]``; they are empty on inverted edges.
    """

    target: str
    extra: str | None = None
    extras: frozenset[str] = frozenset()


@dataclass
class DependencyGraph:
    """Package index plus requirer -> required edges (reversed when invert is set)."""

    index: PackageIndex
    requires_map: dict[str, list[Edge]] = field(default_factory=dict)
    invert: bool = False
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def edges(self, name: str) -> list[Edge]:
        return self.requires_map.get(name, [])

    def roots(self, *, include_extras: bool = False) -> list[str]:
        """
        Names of packages no other package points at, in index order.

        Extra-gated edges only count when include_extras is set. Members of a
        cycle with no way in from outside never qualify.
        """
        targeted: set[str] = set()
        for owner, edges in self.requires_map.items():
            for edge in edges:
                if edge.target == owner:
                    continue
                if edge.extra is None or include_extras:
                    targeted.add(edge.target)
        return [name for name in self.index.names() if name not in targeted]


def _gating_extra(
    package: InstalledPackage,
    requirement: Requirement,
    evaluate: MarkerEvaluator,
) -> tuple[bool, str | None]:
    """Return (applies, extra) for a requirement of package."""
    if requirement.marker is None or evaluate(requirement.marker, frozenset()):
        return True, None
    for extra in package.extras:
        if evaluate(requirement.marker, frozenset({extra})):
            return True, extra
    return False, None


def build_graph(
    packages: Iterable[InstalledPackage],
    evaluate: MarkerEvaluator = evaluate_marker,
    *,
    invert: bool = False,
) -> DependencyGraph:
    """
    Index packages and derive their requirement edges.

    Only requirements on installed packages whose marker holds (with no
    extra, or with one of the owner's declared extras) become edges; the
    latter are tagged with that extra. Duplicate names and unreadable
    requirement lists are recorded as diagnostics, never raised.
    """
    graph = DependencyGraph(index=PackageIndex(), invert=invert)

    for package in packages:
        try:
            graph.index.add(package)
        except DuplicatePackageError as e:
            logger.warning("%s (keeping %s)", e, e.existing.version)
            graph.diagnostics.append(
                Diagnostic(DiagnosticKind.DUPLICATE_NAME, package.key, str(e))
            )

    for package in graph.index:
        try:
            requirements = package.requires()
        except MetadataError as e:
            logger.warning("%s", e)
            graph.diagnostics.append(
                Diagnostic(DiagnosticKind.MISSING_METADATA, package.key, str(e))
            )
            continue

        owner = package.key
        for requirement in requirements:
            target = requirement.key
            if target not in graph.index:
                logger.debug("%s requires %s, which is not installed", owner, target)
                continue
            applies, extra = _gating_extra(package, requirement, evaluate)
            if not applies:
                logger.debug("Skipping %s -> %s (%s)", owner, target, requirement.marker)
                continue
            if invert:
                _add_edge(graph, target, Edge(owner, extra))
            else:
                _add_edge(graph, owner, Edge(target, extra, requirement.extras))

    return graph


def _add_edge(graph: DependencyGraph, source: str, edge: Edge) -> None:
    edges = graph.requires_map.setdefault(source, [])
    if edge not in edges:
        edges.append(edge)
