"""Render the dependency graph of installed packages as a text tree."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

from pkgtree.core.graph import DependencyGraph, Diagnostic, Edge
from pkgtree.core.parser import normalize_name

logger = logging.getLogger(__name__)

BRANCH, BRANCH_REST = "├── ", "│   "
CORNER, CORNER_REST = "└── ", "    "


class NodeMark(str, Enum):
    CYCLE = "(cycle)"
    DEDUPED = "(*)"


@dataclass
class DependencyNode:
    """One rendered position of a package: its line and its surviving children."""

    name: str
    version: str
    extra: str | None = None
    mark: NodeMark | None = None
    children: list[DependencyNode] = field(default_factory=list)

    @property
    def label(self) -> str:
        prefix = f"[{self.extra}] " if self.extra else ""
        suffix = f" {self.mark.value}" if self.mark else ""
        return f"{prefix}{self.name} v{self.version}{suffix}"

    def walk(self) -> Iterator[DependencyNode]:
        """Yield this node and its descendants depth-first."""
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass(frozen=True)
class RenderOptions:
    """Display options for one render."""

    max_depth: int | None = None
    prune: tuple[str, ...] = ()
    no_dedupe: bool = False
    invert: bool = False
    # Treat every declared extra as active
    show_extras: bool = False
    # Also render packages no root reaches (root-less cycles)
    show_unreachable: bool = False


@dataclass
class TreeRender:
    """Result of a render: the lines plus the structure they came from."""

    lines: list[str] = field(default_factory=list)
    nodes: list[DependencyNode] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def _has_mark(self, mark: NodeMark) -> bool:
        return any(n.mark is mark for root in self.nodes for n in root.walk())

    @property
    def has_cycles(self) -> bool:
        return self._has_mark(NodeMark.CYCLE)

    @property
    def has_duplicates(self) -> bool:
        return self._has_mark(NodeMark.DEDUPED)

    def __str__(self) -> str:
        return "\n".join(self.lines)


def format_lines(node: DependencyNode) -> list[str]:
    """
    Lay out a node and its descendants with tree connectors.

    Every child block gets one prefix segment per line: the connector on its
    first line and a continuation on the rest. Non-last children use
    ``├── `` / ``│   ``, the last one ``└── `` / four spaces.
    """
    lines = [node.label]
    last = len(node.children) - 1
    for i, child in enumerate(node.children):
        top, rest = (CORNER, CORNER_REST) if i == last else (BRANCH, BRANCH_REST)
        for j, line in enumerate(format_lines(child)):
            lines.append(f"{top if j == 0 else rest}{line}")
    return lines


def flatten(nodes: list[DependencyNode]) -> list[str]:
    """Lines of a whole forest, one top-level node after another."""
    lines: list[str] = []
    for node in nodes:
        lines.extend(format_lines(node))
    return lines


class TreeRenderer:
    """Depth-first walk of a DependencyGraph from its roots."""

    def __init__(self, graph: DependencyGraph, options: RenderOptions | None = None) -> None:
        self.graph = graph
        self.options = options or RenderOptions(invert=graph.invert)
        if self.options.invert != graph.invert:
            raise ValueError(
                f"RenderOptions.invert={self.options.invert} does not match "
                f"a graph built with invert={graph.invert}"
            )
        self._prune = {normalize_name(p) for p in self.options.prune}

    def build(self) -> list[DependencyNode]:
        """Visit every root and return the node of each that rendered."""
        visited: set[str] = set()
        nodes: list[DependencyNode] = []
        roots = self.graph.roots(include_extras=self.options.show_extras)
        for name in roots:
            node = self._visit(name, depth=0, path=[], visited=visited)
            if node is not None:
                nodes.append(node)
        if self.options.show_unreachable:
            # Pruned packages and everything they reach stay hidden
            covered = self._reachable([*roots, *(p for p in self._prune if p in self.graph.index)])
            for name in self.graph.index.names():
                if name in covered:
                    continue
                logger.debug("Rendering %s, which no root reaches", name)
                node = self._visit(name, depth=0, path=[], visited=visited)
                if node is not None:
                    nodes.append(node)
                covered |= self._reachable([name])
        return nodes

    def render(self) -> list[str]:
        return flatten(self.build())

    def _reachable(self, names: list[str]) -> set[str]:
        """Names reachable from names over active edges, ignoring depth and prune."""
        stack: list[tuple[str, frozenset[str]]] = [(name, frozenset()) for name in names]
        seen: set[tuple[str, frozenset[str]]] = set()
        while stack:
            state = stack.pop()
            if state in seen:
                continue
            seen.add(state)
            name, active_extras = state
            for edge in self.graph.edges(name):
                if self._edge_active(edge, active_extras):
                    extras = frozenset() if self.graph.invert else edge.extras
                    stack.append((edge.target, extras))
        return {name for name, _ in seen}

    def _edge_active(self, edge: Edge, active_extras: frozenset[str]) -> bool:
        if edge.extra is None or self.options.show_extras:
            return True
        return edge.extra in active_extras

    def _visit(
        self,
        name: str,
        *,
        depth: int,
        path: list[str],
        visited: set[str],
        extra: str | None = None,
        active_extras: frozenset[str] = frozenset(),
    ) -> DependencyNode | None:
        max_depth = self.options.max_depth
        if max_depth is not None and depth > max_depth:
            return None
        if name in self._prune:
            return None

        package = self.graph.index[name]
        node = DependencyNode(name=package.name, version=package.version, extra=extra)
        if name in path:
            node.mark = NodeMark.CYCLE
            return node
        if name in visited and not self.options.no_dedupe:
            node.mark = NodeMark.DEDUPED
            return node

        path.append(name)
        visited.add(name)
        consumed: set[str] = set()
        for edge in self.graph.edges(name):
            if edge.target in consumed or not self._edge_active(edge, active_extras):
                continue
            consumed.add(edge.target)
            child = self._visit(
                edge.target,
                depth=depth + 1,
                path=path,
                visited=visited,
                extra=edge.extra,
                active_extras=frozenset() if self.graph.invert else edge.extras,
            )
            if child is not None:
                node.children.append(child)
        path.pop()
        return node


def render_graph(graph: DependencyGraph, options: RenderOptions | None = None) -> TreeRender:
    """Render a built graph into a TreeRender."""
    nodes = TreeRenderer(graph, options).build()
    return TreeRender(lines=flatten(nodes), nodes=nodes, diagnostics=list(graph.diagnostics))
