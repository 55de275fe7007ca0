"""Core library: package discovery, metadata parsing, graph building and tree rendering."""

from pkgtree.core.finder import find_package, list_installed_packages, site_package_dirs
from pkgtree.core.graph import DependencyGraph, Diagnostic, DiagnosticKind, Edge, build_graph
from pkgtree.core.index import DuplicatePackageError, PackageIndex
from pkgtree.core.parser import (
    InstalledPackage,
    MetadataError,
    Requirement,
    evaluate_marker,
    marker_evaluator,
    parse_requirement,
)
from pkgtree.core.tree import (
    DependencyNode,
    NodeMark,
    RenderOptions,
    TreeRender,
    TreeRenderer,
    flatten,
    format_lines,
    render_graph,
)

__all__ = [
    "find_package",
    "list_installed_packages",
    "site_package_dirs",
    "DependencyGraph",
    "Diagnostic",
    "DiagnosticKind",
    "Edge",
    "build_graph",
    "DuplicatePackageError",
    "PackageIndex",
    "InstalledPackage",
    "MetadataError",
    "Requirement",
    "evaluate_marker",
    "marker_evaluator",
    "parse_requirement",
    "DependencyNode",
    "NodeMark",
    "RenderOptions",
    "TreeRender",
    "TreeRenderer",
    "flatten",
    "format_lines",
    "render_graph",
]
