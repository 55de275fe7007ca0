"""Tests for TUI utility functions (non-interactive parts)."""

from __future__ import annotations


from pkgtree.core.tree import DependencyNode, NodeMark
from pkgtree.tui.app import (
    _empty_tree_message,
    _node_label,
    _node_stats,
)


def node(name: str, *children: DependencyNode) -> DependencyNode:
    return DependencyNode(name=name, version="1.0", children=list(children))


class TestNodeStats:
    """Tests for _node_stats helper."""

    def test_leaf(self) -> None:
        assert _node_stats(node("leaf")) == (0, 0, 0)

    def test_with_children(self) -> None:
        assert _node_stats(node("root", node("a"), node("b"))) == (2, 2, 1)

    def test_nested(self) -> None:
        tree = node("root", node("a", node("b", node("c"))), node("d"))
        assert _node_stats(tree) == (2, 4, 3)

    def test_deep_tree(self) -> None:
        root = node("level0")
        current = root
        for i in range(1, 5):
            child = node(f"level{i}")
            current.children = [child]
            current = child
        assert _node_stats(root) == (1, 4, 4)


class TestEmptyTreeMessage:
    """Tests for _empty_tree_message helper."""

    def test_no_packages(self) -> None:
        assert "No packages found" in _empty_tree_message(0)

    def test_only_cycles(self) -> None:
        message = _empty_tree_message(2)
        assert "No packages found" not in message
        assert "No top-level packages among 2 installed" in message
        assert "[bold]a[/bold]" in message

    def test_unreachable_already_shown(self) -> None:
        message = _empty_tree_message(2, unreachable_shown=True)
        assert "No packages found" not in message
        assert "[bold]a[/bold]" not in message


class TestNodeLabel:
    """Tests for _node_label helper."""

    def test_plain(self) -> None:
        label = _node_label(node("requests"))
        assert "requests" in label
        assert "v1.0" in label

    def test_extra_is_escaped(self) -> None:
        label = _node_label(DependencyNode(name="pysocks", version="1.7.1", extra="socks"))
        assert "\\[socks]" in label

    def test_mark(self) -> None:
        label = _node_label(DependencyNode(name="a", version="1", mark=NodeMark.CYCLE))
        assert "(cycle)" in label

    def test_missing_version(self) -> None:
        assert "v?" in _node_label(DependencyNode(name="a", version=""))
