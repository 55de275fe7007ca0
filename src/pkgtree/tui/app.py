"""Textual TUI for browsing the dependency tree of installed packages."""

from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Footer, Header, Input, Static, Tree
from textual.widgets.tree import TreeNode
from textual.worker import Worker, WorkerState

from pkgtree.api import build_dependency_graph, list_installed
from pkgtree.core.parser import InstalledPackage, normalize_name
from pkgtree.core.tree import DependencyNode, NodeMark, RenderOptions, TreeRenderer

# Limits to avoid huge trees
MAX_TREE_DEPTH = 8
MAX_TREE_NODES = 2000
EXPAND_DEPTH_DEFAULT = 1

COLOR_HEADER = "bold magenta"
COLOR_PKG = "white"
COLOR_EXTRA = "yellow"
COLOR_MARK = "dim italic"
COLOR_STATS = "cyan"
COLOR_PATH = "dim"


def _node_stats(node: Any) -> tuple[int, int, int]:
    """Return (direct_children, total_descendants, max_depth) for a node."""
    children = getattr(node, "children", []) or []
    direct = len(children)
    total = 0
    max_d = 0
    for c in children:
        sub_direct, sub_total, sub_depth = _node_stats(c)
        total += 1 + sub_total
        max_d = max(max_d, 1 + sub_depth)
    return direct, total, max_d


def _empty_tree_message(package_count: int, *, unreachable_shown: bool = False) -> str:
    """Placeholder shown when the render produced no top-level package."""
    if package_count == 0:
        return "[dim]No packages found[/]"
    if unreachable_shown:
        return f"[dim]Nothing left to show among {package_count} installed packages[/]"
    return (
        f"[dim]No top-level packages among {package_count} installed. "
        "Press [bold]a[/bold] to show packages only reachable through dependency cycles.[/]"
    )


def _node_label(node: DependencyNode) -> str:
    """Rich markup label for a DependencyNode."""
    extra = f"[{COLOR_EXTRA}]\\[{node.extra}][/] " if node.extra else ""
    mark = f" [{COLOR_MARK}]{node.mark.value}[/]" if node.mark else ""
    return f"{extra}[{COLOR_PKG}]{node.name}[/] [dim]v{node.version or '?'}[/]{mark}"


def _populate_textual_tree(
    tn: TreeNode,
    node: Any,
    *,
    depth: int = 0,
    max_depth: int = MAX_TREE_DEPTH,
    max_nodes: int = MAX_TREE_NODES,
    node_count: list[int] | None = None,
) -> None:
    """Recursively add DependencyNode children; cap depth and total nodes."""
    if node_count is None:
        node_count = [0]
    for child in getattr(node, "children", []):
        if node_count[0] >= max_nodes:
            tn.add_leaf(f"[dim]… truncated ({max_nodes} nodes max)[/]")
            return
        if depth >= max_depth:
            tn.add_leaf(f"[dim]{child.name} …[/]")
            continue
        node_count[0] += 1
        if child.children:
            child_tn = tn.add(_node_label(child), expand=False)
        else:
            child_tn = tn.add_leaf(_node_label(child))
        child_tn.data = child
        _populate_textual_tree(
            child_tn,
            child,
            depth=depth + 1,
            max_depth=max_depth,
            max_nodes=max_nodes,
            node_count=node_count,
        )


def _expand_to_depth(tn: TreeNode, depth: int, current: int = 0) -> None:
    """Expand tree nodes up to given depth (0 = root only)."""
    if current >= depth:
        return
    tn.expand()
    for child in tn.children:
        _expand_to_depth(child, depth, current + 1)


class SearchScreen(ModalScreen[str | None]):
    """Modal to search for packages in the tree. Keyboard-only."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=True),
    ]

    DEFAULT_CSS = """
    SearchScreen {
        align: center middle;
        padding: 2 4;
    }
    SearchScreen #search_title {
        text-align: center;
        padding-bottom: 1;
    }
    SearchScreen #search_input {
        width: 60;
        margin: 1 0;
    }
    SearchScreen #search_hint {
        text-align: center;
        padding-top: 1;
    }
    """

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._input: Input | None = None

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static(
                "[bold cyan]Search[/]\n\n"
                "Type a package name or partial match to find in the tree.",
                id="search_title",
                markup=True,
            )
            yield Input(
                placeholder="package name...",
                id="search_input",
            )
            yield Static(
                "[dim]Enter[/] = Search  ·  [dim]Escape[/] = Cancel\n"
                "[dim]After search: [bold]n[/bold] = next match, [bold]N[/bold] = previous[/]",
                id="search_hint",
                markup=True,
            )

    def on_mount(self) -> None:
        self._input = self.query_one("#search_input", Input)
        self._input.focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "search_input":
            return
        value = self._input.value.strip() if self._input else ""
        self.dismiss(value if value else None)

    def action_cancel(self) -> None:
        self.dismiss(None)


class DepTreeApp(App[None]):
    """Terminal UI to explore the dependency tree of installed packages."""

    TITLE = "pkgtree"
    BINDINGS = [
        Binding("/", "search", "Search"),
        Binding("f", "search", "Search", show=False),
        Binding("n", "next_match", "Next match", show=False),
        Binding("N", "prev_match", "Prev match", show=False),
        Binding("i", "toggle_invert", "Invert"),
        Binding("u", "toggle_dedupe", "Dedupe"),
        Binding("x", "toggle_extras", "Extras"),
        Binding("a", "toggle_unreachable", "Cycles", show=False),
        Binding("d", "toggle_details", "Details"),
        Binding("r", "refresh", "Refresh"),
        Binding("e", "expand_all", "Expand all"),
        Binding("c", "collapse_all", "Collapse"),
        Binding("q", "quit", "Quit"),
    ]

    DEFAULT_CSS = """
    #details {
        padding: 1 2;
        border: solid $primary;
        height: auto;
        min-height: 8;
    }
    """

    def __init__(
        self,
        paths: list[Path] | None = None,
        options: RenderOptions | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._paths = paths
        self._options = options or RenderOptions()
        self._packages: list[InstalledPackage] | None = None
        self._by_key: dict[str, InstalledPackage] = {}
        self._roots: list[DependencyNode] = []
        self._search_matches: list[TreeNode] = []
        self._search_index: int = 0
        self._details_visible: bool = True
        self._loading: bool = False

    def compose(self) -> ComposeResult:
        yield Header(show_clock=False)
        yield Tree("Dependencies", id="dep_tree")
        yield Static(
            "[dim]↑/↓[/] move  ·  [dim]Enter[/]/[dim]Space[/] select  ·  [dim]/[/] search",
            id="details",
        )
        yield Footer()

    def on_mount(self) -> None:
        self.sub_title = "Installed package dependencies"
        self._start_package_scan()

    def _start_package_scan(self) -> None:
        """Discover installed packages in a background thread."""
        if self._loading:
            return
        self._loading = True
        tree = self.query_one("#dep_tree", Tree)
        self._clear_tree(tree)
        tree.root.label = f"[{COLOR_HEADER}]Loading packages...[/]"
        self._set_details("[dim]Scanning site-packages...[/]")
        self.run_worker(self._scan_packages_worker, thread=True)

    def _scan_packages_worker(self) -> list[InstalledPackage]:
        return list_installed(paths=self._paths)

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        if event.state == WorkerState.SUCCESS:
            self._loading = False
            self._packages = event.worker.result
            self._by_key = {p.key: p for p in reversed(self._packages)}
            self._load_tree()
        elif event.state == WorkerState.ERROR:
            self._loading = False
            self._set_details(f"[red]Error: {event.worker.error!s}[/]")

    def _clear_tree(self, tree: Tree) -> None:
        while tree.root.children:
            tree.root.children[0].remove()

    def _load_tree(self) -> None:
        """Render the current packages with the current options into the Tree widget."""
        if self._packages is None:
            return
        graph = build_dependency_graph(self._packages, invert=self._options.invert)
        self._roots = TreeRenderer(graph, self._options).build()

        tree = self.query_one("#dep_tree", Tree)
        self._clear_tree(tree)
        tree.root.label = f"[{COLOR_HEADER}]{self._title_for_options()}[/]"
        tree.root.data = None
        if not self._roots:
            tree.root.add_leaf(
                _empty_tree_message(
                    len(self._by_key), unreachable_shown=self._options.show_unreachable
                )
            )
        node_count = [0]
        for root in self._roots:
            if root.children:
                root_tn = tree.root.add(_node_label(root), expand=False)
            else:
                root_tn = tree.root.add_leaf(_node_label(root))
            root_tn.data = root
            _populate_textual_tree(root_tn, root, node_count=node_count)
        _expand_to_depth(tree.root, EXPAND_DEPTH_DEFAULT)

        warnings = ""
        if graph.diagnostics:
            warnings = "\n\n[yellow]Warnings[/]\n" + "\n".join(
                f"  {d.message}" for d in graph.diagnostics
            )
        self._set_details(
            f"[{COLOR_HEADER}]Environment[/]\n\n"
            f"Packages: [{COLOR_STATS}]{len(self._by_key)}[/]  ·  "
            f"Top-level: [{COLOR_STATS}]{len(self._roots)}[/]" + warnings
        )
        tree.focus()

    def _title_for_options(self) -> str:
        parts = ["Dependents" if self._options.invert else "Dependencies"]
        if self._options.no_dedupe:
            parts.append("no dedupe")
        if self._options.show_extras:
            parts.append("all extras")
        if self._options.show_unreachable:
            parts.append("cycles")
        return " · ".join(parts)

    def _format_node(self, node: DependencyNode) -> str:
        package = self._by_key.get(normalize_name(node.name))
        location = (package.location if package else "") or "(n/a)"
        summary = (package.summary if package else "") or "(no summary)"
        extras = ", ".join(package.extras) if package and package.extras else "(none)"
        direct, total_desc, max_depth = _node_stats(node)

        lines = [
            f"[{COLOR_HEADER}]Package[/]",
            f"  [{COLOR_PKG}]{node.name}[/]  [dim]v{node.version or '?'}[/]",
            f"  {summary}",
            "",
            f"[{COLOR_HEADER}]Stats[/]",
            f"  Direct children:       [{COLOR_STATS}]{direct}[/]",
            f"  Total descendants:     [{COLOR_STATS}]{total_desc}[/]",
            f"  Max depth from here:   [{COLOR_STATS}]{max_depth}[/] [dim]levels[/]",
            f"  Extras:                {extras}",
        ]
        if node.mark is NodeMark.CYCLE:
            lines.append("  [yellow]Already on this branch (cycle)[/]")
        elif node.mark is NodeMark.DEDUPED:
            lines.append("  [dim]Already expanded above[/]")
        if package is not None and package.error:
            lines.append(f"  [red]Unreadable requirements: {package.error}[/]")
        lines += ["", f"[{COLOR_HEADER}]Location[/]", f"  [{COLOR_PATH}]{location}[/]"]
        return "\n".join(lines)

    def _set_details(self, text: str) -> None:
        details = self.query_one("#details", Static)
        details.update(text)

    def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
        node = event.node.data
        if isinstance(node, DependencyNode):
            self._set_details(self._format_node(node))

    def _rerender(self, **changes: Any) -> None:
        self._options = replace(self._options, **changes)
        self._search_matches = []
        self._load_tree()

    def action_toggle_invert(self) -> None:
        self._rerender(invert=not self._options.invert)

    def action_toggle_dedupe(self) -> None:
        self._rerender(no_dedupe=not self._options.no_dedupe)

    def action_toggle_extras(self) -> None:
        self._rerender(show_extras=not self._options.show_extras)

    def action_toggle_unreachable(self) -> None:
        self._rerender(show_unreachable=not self._options.show_unreachable)

    def action_refresh(self) -> None:
        self._search_matches = []
        self._start_package_scan()

    def action_expand_all(self) -> None:
        self.query_one("#dep_tree", Tree).root.expand_all()

    def action_collapse_all(self) -> None:
        tree = self.query_one("#dep_tree", Tree)
        tree.root.collapse_all()
        tree.root.expand()

    def action_search(self) -> None:
        self.push_screen(SearchScreen(), self._on_search_done)

    def _on_search_done(self, query: str | None) -> None:
        if not query:
            return
        self._search_matches = []
        self._search_index = 0

        tree = self.query_one("#dep_tree", Tree)
        self._collect_matches(tree.root, query.lower())

        if not self._search_matches:
            self.notify(f"No matches for '{query}'", severity="warning", timeout=2)
            return
        self.notify(
            f"Found {len(self._search_matches)} match(es) for '{query}'",
            severity="information",
            timeout=2,
        )
        self._goto_match(0)

    def _collect_matches(self, node: TreeNode, query: str) -> None:
        """Recursively collect nodes whose package name contains query."""
        data = node.data
        if isinstance(data, DependencyNode) and query in data.name.lower():
            self._search_matches.append(node)
        for child in node.children:
            self._collect_matches(child, query)

    def _goto_match(self, index: int) -> None:
        if not self._search_matches:
            return
        self._search_index = index % len(self._search_matches)
        match_node = self._search_matches[self._search_index]

        parent = match_node.parent
        while parent is not None:
            parent.expand()
            parent = parent.parent

        tree = self.query_one("#dep_tree", Tree)
        tree.select_node(match_node)
        tree.scroll_to_node(match_node)
        self.notify(
            f"Match {self._search_index + 1}/{len(self._search_matches)}",
            severity="information",
            timeout=2,
        )

    def action_next_match(self) -> None:
        if not self._search_matches:
            self.notify("No active search. Press / to search.", severity="information", timeout=2)
            return
        self._goto_match(self._search_index + 1)

    def action_prev_match(self) -> None:
        if not self._search_matches:
            self.notify("No active search. Press / to search.", severity="information", timeout=2)
            return
        self._goto_match(self._search_index - 1)

    def action_toggle_details(self) -> None:
        self._details_visible = not self._details_visible
        details = self.query_one("#details", Static)
        details.styles.display = "block" if self._details_visible else "none"

    def action_quit(self) -> None:
        self.exit()


def main() -> None:
    """Entry point for the pkgtree TUI."""
    paths = [Path(p) for p in sys.argv[1:]] or None
    app = DepTreeApp(paths=paths)
    app.run()


if __name__ == "__main__":
    main()
