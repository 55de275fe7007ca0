"""pkgtree: show installed Python packages as a dependency tree (library, TUI, CLI)."""

from importlib.metadata import version, PackageNotFoundError

from pkgtree.api import (
    build_dependency_graph,
    get_package_info,
    legend_lines,
    list_installed,
    render_tree,
)
from pkgtree.core.tree import RenderOptions, TreeRender

__all__ = [
    "build_dependency_graph",
    "get_package_info",
    "legend_lines",
    "list_installed",
    "render_tree",
    "RenderOptions",
    "TreeRender",
    "__version__",
]

try:
    __version__ = version("pkgtree")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed as package
