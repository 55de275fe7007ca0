"""Tests for pkgtree.api module."""

from __future__ import annotations

import re
from pathlib import Path

import pkgtree
from pkgtree.api import (
    LEGEND_CYCLE,
    LEGEND_DEDUPED,
    build_dependency_graph,
    get_package_info,
    legend_lines,
    list_installed,
    render_tree,
)
from pkgtree.core.graph import DiagnosticKind

from conftest import make_package, write_dist_info


class TestModuleExports:
    """Tests for pkgtree module-level exports."""

    def test_version_is_string(self) -> None:
        assert isinstance(pkgtree.__version__, str)

    def test_version_format(self) -> None:
        # X.Y.Z, X.Y.Z+something, or 0.0.0+unknown when not installed
        pattern = r"^\d+\.\d+\.\d+(\+.+)?$"
        assert re.match(pattern, pkgtree.__version__), f"Invalid version: {pkgtree.__version__}"

    def test_all_exports(self) -> None:
        for name in pkgtree.__all__:
            assert hasattr(pkgtree, name), name


class TestListInstalled:
    """Tests for list_installed and get_package_info."""

    def test_list_installed(self, tmp_path: Path) -> None:
        write_dist_info(tmp_path, "requests", "2.31.0", requires=("idna",))
        write_dist_info(tmp_path, "idna", "3.6")
        assert [p.name for p in list_installed(paths=[tmp_path])] == ["idna", "requests"]

    def test_get_package_info(self, tmp_path: Path) -> None:
        write_dist_info(tmp_path, "requests", "2.31.0", requires=("idna",), summary="HTTP")
        info = get_package_info("Requests", paths=[tmp_path])
        assert info is not None
        assert info.version == "2.31.0"
        assert info.summary == "HTTP"

    def test_get_package_info_missing(self, tmp_path: Path) -> None:
        assert get_package_info("nope", paths=[tmp_path]) is None


class TestRenderTree:
    """Tests for render_tree."""

    def test_from_site_packages(self, tmp_path: Path) -> None:
        write_dist_info(
            tmp_path,
            "requests",
            "2.31.0",
            requires=("charset-normalizer<4,>=2", "idna<4,>=2.5", 'PySocks!=1.5.7,>=1.5.6; extra == "socks"'),
            extras=("socks",),
        )
        write_dist_info(tmp_path, "charset-normalizer", "3.3.2")
        write_dist_info(tmp_path, "idna", "3.6")
        write_dist_info(tmp_path, "click", "8.1.7", requires=('colorama; platform_system == "Windows"',))
        result = render_tree(paths=[tmp_path])
        assert result.lines == [
            "click v8.1.7",
            "requests v2.31.0",
            "├── charset-normalizer v3.3.2",
            "└── idna v3.6",
        ]
        assert result.diagnostics == []

    def test_from_packages(self) -> None:
        result = render_tree([make_package("A", "B"), make_package("B")], invert=True)
        assert result.lines == ["B v1.0", "└── A v1.0"]

    def test_options_forwarded(self) -> None:
        packages = [make_package("A", "B"), make_package("B", "C"), make_package("C"), make_package("D")]
        assert render_tree(packages, max_depth=1, prune=["d"]).lines == ["A v1.0", "└── B v1.0"]

    def test_custom_evaluator(self) -> None:
        packages = [make_package("a", 'b; os_name == "weird"'), make_package("b")]
        result = render_tree(packages, evaluate=lambda marker, extras: True)
        assert result.lines == ["a v1.0", "└── b v1.0"]

    def test_show_unreachable(self) -> None:
        packages = [make_package("A", "B"), make_package("B", "A")]
        assert render_tree(packages).lines == []
        assert render_tree(packages, show_unreachable=True).lines[0] == "A v1.0"

    def test_duplicates_reported(self, tmp_path: Path) -> None:
        first = tmp_path / "first"
        second = tmp_path / "second"
        write_dist_info(first, "foo", "1.0")
        write_dist_info(second, "Foo", "2.0")
        result = render_tree(paths=[first, second])
        assert result.lines == ["foo v1.0"]
        assert [d.kind for d in result.diagnostics] == [DiagnosticKind.DUPLICATE_NAME]

    def test_fresh_graph_per_render(self) -> None:
        packages = [make_package("A", "B"), make_package("C", "B"), make_package("B")]
        first = render_tree(packages)
        second = render_tree(packages)
        assert first.lines == second.lines
        assert first.nodes is not second.nodes


class TestBuildDependencyGraph:
    """Tests for build_dependency_graph."""

    def test_default_evaluator(self) -> None:
        graph = build_dependency_graph(
            [make_package("a", 'b; python_version < "2.0"'), make_package("b")]
        )
        assert graph.edges("a") == []


class TestLegendLines:
    """Tests for legend_lines."""

    def test_no_markers(self) -> None:
        assert legend_lines(render_tree([make_package("a")])) == []

    def test_dedup_marker(self) -> None:
        result = render_tree([make_package("A", "B"), make_package("C", "B"), make_package("B")])
        assert legend_lines(result) == [LEGEND_DEDUPED]

    def test_cycle_marker(self) -> None:
        result = render_tree([make_package("R", "A"), make_package("A", "B"), make_package("B", "A")])
        assert legend_lines(result) == [LEGEND_CYCLE]
