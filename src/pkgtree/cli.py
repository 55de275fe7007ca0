"""Command-line interface for pkgtree: list installed packages, show dependency trees."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pkgtree import __version__
from pkgtree.api import legend_lines, render_tree
from pkgtree.core.finder import list_installed_packages
from pkgtree.core.parser import evaluate_marker, marker_evaluator, python_version_environment
from pkgtree.log import configure_logging


def _paths(args: argparse.Namespace) -> list[Path] | None:
    return [Path(p) for p in args.path] if getattr(args, "path", None) else None


def cmd_tree(args: argparse.Namespace) -> int:
    """Show the dependency tree of installed packages."""
    if args.depth is not None and args.depth < 0:
        print("Error: --depth must be zero or more", file=sys.stderr)
        return 2

    evaluate = evaluate_marker
    if args.python_version:
        evaluate = marker_evaluator(python_version_environment(args.python_version))

    result = render_tree(
        paths=_paths(args),
        evaluate=evaluate,
        max_depth=args.depth,
        prune=args.prune or (),
        no_dedupe=args.no_dedupe,
        invert=args.invert,
        show_extras=args.show_extras,
        show_unreachable=args.show_unreachable,
    )
    for line in result.lines:
        print(line)
    for line in legend_lines(result):
        print(line)
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    """List installed packages."""
    packages = list_installed_packages(_paths(args))
    if not packages:
        print("No packages found. Is the environment's site-packages on the path?", file=sys.stderr)
        return 0
    for package in packages:
        if args.long:
            print(f"{package.name}=={package.version}  {package.location}")
        else:
            print(f"{package.name}=={package.version}")
    return 0


def cmd_tui(args: argparse.Namespace) -> int:
    """Launch the interactive TUI."""
    from pkgtree.tui.app import DepTreeApp

    app = DepTreeApp(paths=_paths(args))
    app.run()
    return 0


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-p",
        "--path",
        action="append",
        metavar="PATH",
        help="site-packages directory to scan (can be repeated; default: PKGTREE_PATH, "
        "VIRTUAL_ENV, then the current interpreter)",
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the pkgtree CLI."""
    parser = argparse.ArgumentParser(
        prog="pkgtree",
        description="Show installed Python packages as a dependency tree.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Write log records as JSON lines",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # pkgtree tree
    tree_parser = subparsers.add_parser(
        "tree",
        help="Show the dependency tree of installed packages",
        description=(
            "Display installed packages as a tree. Top-level entries are packages "
            "no other installed package requires."
        ),
    )
    tree_parser.add_argument(
        "-d",
        "--depth",
        type=int,
        default=None,
        help="Maximum tree depth (default: unlimited)",
    )
    tree_parser.add_argument(
        "--prune",
        action="append",
        metavar="PACKAGE",
        help="Leave this package and its dependencies out (can be repeated)",
    )
    tree_parser.add_argument(
        "--no-dedupe",
        action="store_true",
        help="Repeat the dependencies of a package every time it appears",
    )
    tree_parser.add_argument(
        "--invert",
        action="store_true",
        help="Show the packages that depend on each package instead",
    )
    tree_parser.add_argument(
        "--show-extras",
        action="store_true",
        help="Include dependencies of every declared extra",
    )
    tree_parser.add_argument(
        "--show-unreachable",
        action="store_true",
        help="Also show packages only reachable through a dependency cycle",
    )
    tree_parser.add_argument(
        "--python-version",
        metavar="X.Y",
        help="Evaluate markers for this Python version instead of the running one",
    )
    _add_path_argument(tree_parser)
    tree_parser.set_defaults(func=cmd_tree)

    # pkgtree list
    list_parser = subparsers.add_parser(
        "list",
        help="List installed packages",
        description="List installed packages in discovery order.",
    )
    list_parser.add_argument(
        "-l",
        "--long",
        action="store_true",
        help="Show package locations",
    )
    _add_path_argument(list_parser)
    list_parser.set_defaults(func=cmd_list)

    # pkgtree tui (default if no command)
    tui_parser = subparsers.add_parser(
        "tui",
        help="Launch the interactive terminal UI",
        description="Start the interactive TUI for browsing the dependency tree.",
    )
    _add_path_argument(tui_parser)
    tui_parser.set_defaults(func=cmd_tui)

    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, log_json=args.log_json)

    # Default to TUI if no command specified
    if args.command is None:
        return cmd_tui(argparse.Namespace(path=None))

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
