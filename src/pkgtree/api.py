"""Public API: use pkgtree from Python or from other tools."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from pkgtree.core.finder import find_package, list_installed_packages
from pkgtree.core.graph import DependencyGraph, build_graph
from pkgtree.core.parser import InstalledPackage, MarkerEvaluator, evaluate_marker
from pkgtree.core.tree import RenderOptions, TreeRender, render_graph

LEGEND_DEDUPED = "(*) Package tree already displayed"
LEGEND_CYCLE = "(cycle) Package tree is a cycle and cannot be shown"


def list_installed(*, paths: list[Path] | None = None) -> list[InstalledPackage]:
    """
    List installed packages in discovery order.

    Scans paths, or PKGTREE_PATH, VIRTUAL_ENV, then sys.path (first non-empty).
    """
    return list_installed_packages(paths)


def get_package_info(
    package_name: str,
    *,
    paths: list[Path] | None = None,
) -> InstalledPackage | None:
    """
    Get metadata and requirements of an installed package by name.

    Any spelling of the name works (PEP 503 normalization).
    Returns None if the package is not installed.
    """
    return find_package(package_name, paths)


def build_dependency_graph(
    packages: Iterable[InstalledPackage],
    *,
    evaluate: MarkerEvaluator | None = None,
    invert: bool = False,
) -> DependencyGraph:
    """Build the requirement graph (reversed if invert) for packages."""
    return build_graph(packages, evaluate or evaluate_marker, invert=invert)


def render_tree(
    packages: Iterable[InstalledPackage] | None = None,
    *,
    paths: list[Path] | None = None,
    evaluate: MarkerEvaluator | None = None,
    max_depth: int | None = None,
    prune: Iterable[str] = (),
    no_dedupe: bool = False,
    invert: bool = False,
    show_extras: bool = False,
    show_unreachable: bool = False,
) -> TreeRender:
    """
    Render installed packages as a dependency tree.

    Args:
        packages: Packages to render; discovered from paths when None.
        paths: Site-packages directories to scan when packages is None.
        evaluate: evaluate(marker, active_extras) -> bool; defaults to the
            running interpreter's marker environment.
        max_depth: Maximum nesting level; None = unlimited.
        prune: Package names to leave out, with everything only they reach.
        no_dedupe: Expand a package again every time it is reached.
        invert: Show what depends on each package instead.
        show_extras: Treat every declared extra as active.
        show_unreachable: Also render packages no root reaches (root-less cycles).

    Returns:
        TreeRender with the lines, the node forest and any diagnostics.
    """
    if packages is None:
        packages = list_installed_packages(paths)
    options = RenderOptions(
        max_depth=max_depth,
        prune=tuple(prune),
        no_dedupe=no_dedupe,
        invert=invert,
        show_extras=show_extras,
        show_unreachable=show_unreachable,
    )
    graph = build_dependency_graph(packages, evaluate=evaluate, invert=invert)
    return render_graph(graph, options)


def legend_lines(result: TreeRender) -> list[str]:
    """Legend lines explaining the markers present in result (empty if none)."""
    lines = []
    if result.has_duplicates:
        lines.append(LEGEND_DEDUPED)
    if result.has_cycles:
        lines.append(LEGEND_CYCLE)
    return lines
